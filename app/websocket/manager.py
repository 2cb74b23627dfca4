# =============================================================================
# app/websocket/manager.py - WebSocket Connection Manager
# =============================================================================
# Bridges WebSocket clients to the subscription adapter.
#
# Broadcasts may come from any thread (jobs run on worker threads), so each
# connection gets an outbox queue and deliveries are handed to the event loop
# with call_soon_threadsafe.
#
# Usage:
#   manager = ConnectionManager(adapter)
#   await manager.connect(websocket)
#   manager.subscribe("chat:1", websocket, outbox)
#   manager.broadcast("chat:1", {"body": "hello"})
#   manager.disconnect(websocket)
# =============================================================================

import asyncio
import logging
from typing import Any, Callable, Dict, Set

from fastapi import WebSocket

from app.websocket.broadcast import TestAdapter

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Tracks WebSocket connections per channel.

    Each (channel, connection) pair owns one subscriber callback on the
    adapter, so unsubscribing removes exactly that delivery.
    """

    def __init__(self, adapter: TestAdapter):
        self.adapter = adapter
        # channel -> set of WebSocket connections
        self.connections: Dict[str, Set[WebSocket]] = {}
        self._callbacks: Dict[tuple[str, int], Callable[[Any], None]] = {}
        self._total_connections = 0

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._total_connections += 1
        logger.info(f"WebSocket connected. Total connections: {self._total_connections}")

    def subscribe(self, channel: str, websocket: WebSocket, outbox: asyncio.Queue) -> None:
        """
        Subscribe a connection to a channel.

        Args:
            channel: Channel name
            websocket: The subscribing connection
            outbox: Queue drained by the connection's sender task
        """
        key = (channel, id(websocket))
        if key in self._callbacks:
            return

        loop = asyncio.get_running_loop()

        def deliver(payload: Any) -> None:
            loop.call_soon_threadsafe(
                outbox.put_nowait, {"channel": channel, "message": payload}
            )

        self._callbacks[key] = deliver
        self.adapter.subscribe(channel, deliver)
        self.connections.setdefault(channel, set()).add(websocket)

        logger.debug(f"WebSocket subscribed to {channel}")

    def unsubscribe(self, channel: str, websocket: WebSocket) -> None:
        deliver = self._callbacks.pop((channel, id(websocket)), None)
        if deliver is not None:
            self.adapter.unsubscribe(channel, deliver)

        if channel in self.connections:
            self.connections[channel].discard(websocket)
            # Clean up empty channel entries
            if not self.connections[channel]:
                del self.connections[channel]

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove a connection from every channel it subscribed to."""
        channels = [channel for channel, sockets in self.connections.items() if websocket in sockets]
        for channel in channels:
            self.unsubscribe(channel, websocket)

        self._total_connections -= 1
        logger.info(f"WebSocket disconnected. Total connections: {self._total_connections}")

    def broadcast(self, channel: str, payload: Any) -> None:
        self.adapter.broadcast(channel, payload)

    def get_connection_count(self, channel: str | None = None) -> int:
        """
        Get the number of active connections.

        Args:
            channel: If provided, count for that channel. Otherwise total.
        """
        if channel:
            return len(self.connections.get(channel, set()))
        return self._total_connections

    def get_active_channels(self) -> list[str]:
        return list(self.connections.keys())
