# =============================================================================
# core/schema.py - Schema Definition
# =============================================================================
# Chapters describe their tables through "schema" extensions; this module
# collects them and creates whatever is missing.
# =============================================================================

import logging

from sqlalchemy import MetaData

from app.extensions import ExtensionRegistry
from core.database import Database

logger = logging.getLogger(__name__)


def define_schema(database: Database, extensions: ExtensionRegistry) -> MetaData:
    """
    Let every schema extension add its tables, then create them.

    Tables that already exist are left as they are.

    Args:
        database: Connection descriptor whose metadata collects the tables
        extensions: Registry holding the chapter's schema callbacks

    Returns:
        MetaData: The populated metadata
    """
    metadata = database.metadata
    extensions.run("schema", metadata)

    metadata.create_all(database.engine)

    logger.debug(f"Schema defined: {sorted(metadata.tables)}")
    return metadata
