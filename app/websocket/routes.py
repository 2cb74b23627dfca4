# =============================================================================
# app/websocket/routes.py - Cable Routes
# =============================================================================
# WebSocket endpoint for channel subscriptions.
#
# Connect: ws://host/cable
#
# Client commands:
#   {"command": "subscribe", "channel": "chat:1"}
#   {"command": "unsubscribe", "channel": "chat:1"}
#
# Server messages:
#   {"type": "welcome"}
#   {"type": "confirm_subscription", "channel": "chat:1"}
#   {"channel": "chat:1", "message": <payload>}
# =============================================================================

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.dependencies import HarnessDep

logger = logging.getLogger(__name__)

router = APIRouter()


async def _forward(websocket: WebSocket, outbox: asyncio.Queue) -> None:
    """Send everything put in the outbox, in order."""
    while True:
        message = await outbox.get()
        await websocket.send_json(message)


@router.websocket("/cable")
async def cable(websocket: WebSocket, harness: HarnessDep):
    """
    WebSocket endpoint for channel broadcasts.

    The connection's outbox is the only writer to the socket; command
    replies and broadcasts are both queued there.
    """
    manager = harness.connections
    await manager.connect(websocket)

    outbox: asyncio.Queue = asyncio.Queue()
    sender = asyncio.create_task(_forward(websocket, outbox))
    outbox.put_nowait({"type": "welcome"})

    try:
        while True:
            data = await websocket.receive_text()

            try:
                command = json.loads(data)
            except json.JSONDecodeError:
                outbox.put_nowait({"type": "error", "error": "Invalid JSON"})
                continue

            action = command.get("command") if isinstance(command, dict) else None
            channel = command.get("channel") if isinstance(command, dict) else None

            if action == "subscribe" and channel:
                manager.subscribe(channel, websocket, outbox)
                outbox.put_nowait({"type": "confirm_subscription", "channel": channel})
            elif action == "unsubscribe" and channel:
                manager.unsubscribe(channel, websocket)
                outbox.put_nowait({"type": "confirm_unsubscription", "channel": channel})
            else:
                outbox.put_nowait({"type": "error", "error": f"Unknown command: {data[:100]}"})

    except WebSocketDisconnect:
        logger.info("Cable client disconnected")
    finally:
        sender.cancel()
        manager.disconnect(websocket)


@router.get("/cable/status")
async def cable_status(harness: HarnessDep):
    """
    Get cable connection statistics.

    Returns:
        dict: Connection counts and active channels
    """
    manager = harness.connections
    return {
        "adapter": type(manager.adapter).__name__,
        "total_connections": manager.get_connection_count(),
        "active_channels": manager.get_active_channels(),
    }
