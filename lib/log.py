# =============================================================================
# lib/log.py - Log Routing
# =============================================================================
# The harness either writes its logs to stdout (LOG=1) or drops them.
#
# Usage:
#   from lib.log import configure_logging
#   configure_logging(settings.LOG)
# =============================================================================

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers owned by the harness, plus the SQL statement logger
HARNESS_LOGGERS = ("app", "core", "workers", "lib")
SQL_LOGGER = "sqlalchemy.engine"

# Marks handlers installed here so reconfiguring replaces them
_HANDLER_FLAG = "_harness_handler"


def _build_handler(enabled: bool) -> logging.Handler:
    if enabled:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.NullHandler()
    setattr(handler, _HANDLER_FLAG, True)
    return handler


def route_logger(name: str, enabled: bool, level: int = logging.DEBUG) -> logging.Logger:
    """
    Point a logger either at stdout or at nothing.

    Args:
        name: Logger name
        enabled: True for stdout, False to discard
        level: Level used when enabled

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)

    logger.addHandler(_build_handler(enabled))
    logger.setLevel(level if enabled else logging.WARNING)
    logger.propagate = False
    return logger


def configure_logging(enabled: bool) -> logging.Logger:
    """
    Configure every harness logger and the SQL logger.

    SQL statements are logged at INFO by SQLAlchemy, so enabling the
    sqlalchemy.engine logger at INFO is what turns statement logging on.

    Returns:
        The "app" logger, used as the application logger
    """
    for name in HARNESS_LOGGERS:
        route_logger(name, enabled)
    route_logger(SQL_LOGGER, enabled, level=logging.INFO)
    return logging.getLogger("app")
