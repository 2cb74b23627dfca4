# =============================================================================
# app/extensions.py - Chapter Extension Registry
# =============================================================================
# Chapters hook into the boot sequence by registering callbacks:
#
#   schema  - called with the database MetaData, add sqlalchemy Tables to it
#   config  - called with the HarnessApplication before routes are built
#   routes  - called with an APIRouter mounted after the harness routes
#
# Usage:
#   from app.extensions import chapter_helpers
#
#   @chapter_helpers.register("routes")
#   def add_routes(router):
#       router.add_api_route("/posts", list_posts)
# =============================================================================

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

EXTENSION_KINDS = ("schema", "config", "routes")

Extension = Callable[[Any], None]


class ExtensionRegistry:
    """Callbacks per extension kind, run in registration order."""

    def __init__(self):
        self._callbacks: dict[str, list[Extension]] = {kind: [] for kind in EXTENSION_KINDS}

    def register(self, kind: str, callback: Extension | None = None):
        """
        Register a callback for a kind.

        Works as a plain call or as a decorator:
            registry.register("schema", define_posts)

            @registry.register("schema")
            def define_posts(metadata): ...
        """
        if kind not in self._callbacks:
            raise ValueError(
                f"Unknown extension kind: {kind} (expected one of {', '.join(EXTENSION_KINDS)})"
            )

        if callback is None:
            def decorator(func: Extension) -> Extension:
                self._callbacks[kind].append(func)
                return func
            return decorator

        self._callbacks[kind].append(callback)
        return callback

    def run(self, kind: str, target: Any) -> None:
        """Call every callback registered for kind with target."""
        for callback in list(self._callbacks[kind]):
            logger.debug(f"Running {kind} extension: {getattr(callback, '__name__', callback)}")
            callback(target)

    def callbacks(self, kind: str) -> list[Extension]:
        return list(self._callbacks[kind])

    def clear(self) -> None:
        for callbacks in self._callbacks.values():
            callbacks.clear()


# Default registry used by chapter preludes
chapter_helpers = ExtensionRegistry()
