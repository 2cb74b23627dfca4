# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - log.py: Routes harness logs to stdout or nowhere
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.log import configure_logging, route_logger

__all__ = [
    "configure_logging",
    "route_logger",
]
