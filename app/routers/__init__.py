# =============================================================================
# app/routers/ - Harness Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - welcome.py: Index page and example load/reset endpoints
# - storage.py: Signed blob downloads
# - health.py: Health check endpoints
#
# Each router is mounted in main.py; chapter routes come after them.
# =============================================================================

from . import health
from . import storage
from . import welcome

__all__ = [
    "health",
    "storage",
    "welcome",
]
