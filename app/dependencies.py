# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for the harness application object.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends
from starlette.requests import HTTPConnection

from app.application import HarnessApplication


def get_harness(connection: HTTPConnection) -> HarnessApplication:
    """
    Get the harness application serving this request or WebSocket.

    It is stored on app.state when the FastAPI app is built.
    """
    return connection.app.state.harness


# Type alias for dependency injection
HarnessDep = Annotated[HarnessApplication, Depends(get_harness)]
