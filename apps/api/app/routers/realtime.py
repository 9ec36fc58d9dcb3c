"""WebSocket endpoint for participant notifications."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket

from ..services.notifications import ConnectionRegistry, RealtimeConnection, get_registry

GREETING = "Connected to WebSocket Server!"

logger = logging.getLogger(__name__)

router = APIRouter()


# Upgrades are accepted on any path of the HTTP port.
@router.websocket("/{path:path}")
async def notifications_endpoint(
    websocket: WebSocket,
    path: str,
    registry: ConnectionRegistry = Depends(get_registry),
) -> None:
    """Register the client for broadcasts and log whatever it sends."""

    await websocket.accept()
    connection = RealtimeConnection.from_websocket(websocket)
    await registry.add(connection)
    logger.info("Real-time client %s connected on /%s", connection.connection_id, path)

    try:
        await websocket.send_text(GREETING)
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            payload = message.get("text")
            if payload is None:
                payload = message.get("bytes")
            logger.info("Received message: %s", payload)
    finally:
        await registry.remove(connection.connection_id)
        logger.info("Real-time client %s disconnected", connection.connection_id)
