# =============================================================================
# core/database.py - Database Bootstrap
# =============================================================================
# Resolves the SQLite file, publishes DATABASE_URL and opens the single
# engine every other component shares.
#
# Usage:
#   from core.database import establish_connection
#   database = establish_connection(settings)
#   with database.engine.begin() as conn:
#       conn.execute(...)
# =============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from sqlalchemy import MetaData, create_engine, text
from sqlalchemy.engine import Engine

from app.config import Settings
from lib.log import SQL_LOGGER, route_logger

logger = logging.getLogger(__name__)

DATABASE_URL_ENV = "DATABASE_URL"


@dataclass
class Database:
    """Connection descriptor: where the database lives and how to reach it."""

    path: Path
    url: str
    engine: Engine
    metadata: MetaData = field(default_factory=MetaData)


def database_url(path: Path) -> str:
    """Build the SQLite URL for a database file."""
    return f"sqlite:///{path}"


@lru_cache(maxsize=None)
def engine_from_url(url: str) -> Engine:
    """
    Get the shared engine for a database URL.

    Jobs run on worker threads, so SQLite connections must be usable
    outside the thread that opened them.
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


def establish_connection(settings: Settings) -> Database:
    """
    Open the harness database.

    Sets DATABASE_URL for anything else that wants to find the database,
    routes SQL logging according to LOG and connects eagerly so a broken
    database aborts startup right away.

    Args:
        settings: Harness settings

    Returns:
        Database: The connection descriptor
    """
    path = Path(settings.DATABASE_PATH).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    url = database_url(path)
    os.environ[DATABASE_URL_ENV] = url

    route_logger(SQL_LOGGER, settings.LOG, level=logging.INFO)

    engine = engine_from_url(url)
    with engine.connect() as conn:
        conn.execute(text("select 1"))

    logger.info(f"Connected to database: {path}")
    return Database(path=path, url=url, engine=engine)
