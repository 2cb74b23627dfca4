# =============================================================================
# core/migrations/ - Bundled Migrations
# =============================================================================
# The harness ships exactly one migration: the attachment storage tables.
# Scripts live in versions/ and are loaded from disk by file path, the way
# a framework loads its own bundled migrations.
#
# Usage:
#   from core.migrations import ensure_storage_tables
#   ensure_storage_tables(database.engine)   # no-op once the tables exist
# =============================================================================

import importlib.util
import logging
from pathlib import Path
from types import ModuleType

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "versions"

STORAGE_CHECK = text("select 1 from storage_blobs")
STORAGE_MIGRATION = "CreateStorageTables"


class Migration:
    """
    A reversible schema change.

    Subclasses implement up() and down(); migrate() runs one of them inside
    a transaction.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def up(self, connection: Connection) -> None:
        raise NotImplementedError

    def down(self, connection: Connection) -> None:
        raise NotImplementedError

    def migrate(self, direction: str) -> None:
        if direction not in ("up", "down"):
            raise ValueError(f"Unknown migration direction: {direction}")

        logger.info(f"Migrating {type(self).__name__} {direction}")
        with self.engine.begin() as connection:
            getattr(self, direction)(connection)


def load_migrations(directory: Path = MIGRATIONS_DIR) -> list[ModuleType]:
    """
    Load every migration script in a directory.

    Scripts are loaded in filename order. Files starting with an underscore
    are skipped.
    """
    modules = []
    for path in sorted(directory.glob("*.py")):
        if path.name.startswith("_"):
            continue
        spec = importlib.util.spec_from_file_location(f"_migration_{path.stem}", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        modules.append(module)
    return modules


def find_migration(modules: list[ModuleType], name: str) -> type[Migration]:
    for module in modules:
        migration = getattr(module, name, None)
        if migration is not None:
            return migration
    raise LookupError(f"Migration {name} not found in {MIGRATIONS_DIR}")


def storage_tables_exist(engine: Engine) -> bool:
    """Check the blob table with a trivial read."""
    try:
        with engine.connect() as conn:
            conn.execute(STORAGE_CHECK)
    except DBAPIError:
        return False
    return True


def ensure_storage_tables(engine: Engine) -> bool:
    """
    Create the attachment storage tables unless they already exist.

    Args:
        engine: Harness database engine

    Returns:
        True if the migration ran, False if the tables were already there
    """
    if storage_tables_exist(engine):
        return False

    logger.info("Attachment storage tables missing, running bundled migration")
    migration = find_migration(load_migrations(), STORAGE_MIGRATION)
    migration(engine).migrate("up")
    return True
