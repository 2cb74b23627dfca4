# =============================================================================
# app/websocket/__init__.py - Cable Module
# =============================================================================
# Real-time channel broadcasting.
#
# Usage:
#   # Broadcast from anywhere in the harness (request handlers, jobs)
#   harness.cable.broadcast("chat:1", {"body": "hello"})
#
#   # Clients subscribe over ws://host/cable (see routes.py)
# =============================================================================

from app.websocket.broadcast import (
    SUBSCRIPTION_ADAPTERS,
    TestAdapter,
    TestPrintAdapter,
    build_subscription_adapter,
)
from app.websocket.manager import ConnectionManager

__all__ = [
    "SUBSCRIPTION_ADAPTERS",
    "TestAdapter",
    "TestPrintAdapter",
    "build_subscription_adapter",
    "ConnectionManager",
]
