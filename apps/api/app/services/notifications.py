"""Registry of connected real-time clients and best-effort broadcast."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict
from uuid import uuid4

from fastapi import WebSocket
from starlette.requests import HTTPConnection
from starlette.websockets import WebSocketState

SendCallable = Callable[[str], Awaitable[None]]
OpenCheck = Callable[[], bool]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RealtimeConnection:
    """Handle for a connected client."""

    connection_id: str
    send: SendCallable
    is_open: OpenCheck

    @classmethod
    def from_websocket(cls, websocket: WebSocket, connection_id: str | None = None) -> "RealtimeConnection":
        def is_open() -> bool:
            return (
                websocket.client_state == WebSocketState.CONNECTED
                and websocket.application_state == WebSocketState.CONNECTED
            )

        return cls(connection_id=connection_id or str(uuid4()), send=websocket.send_text, is_open=is_open)


class ConnectionRegistry:
    """Track live connections and fan out text messages to all of them.

    Delivery is best-effort: sends run concurrently, so no ordering holds
    across recipients, and a failed send is only logged. Handles that are no
    longer open are skipped, not removed; removal is the owner's job when the
    connection closes. A send that does not finish within ``send_timeout``
    seconds is abandoned so a stalled client cannot hold up the broadcast.
    """

    def __init__(self, send_timeout: float = 5.0) -> None:
        self._send_timeout = send_timeout
        self._connections: Dict[str, RealtimeConnection] = {}
        self._lock = asyncio.Lock()

    async def add(self, connection: RealtimeConnection) -> None:
        async with self._lock:
            self._connections[connection.connection_id] = connection

    async def remove(self, connection_id: str) -> None:
        async with self._lock:
            self._connections.pop(connection_id, None)

    async def broadcast(self, message: str) -> int:
        """Send ``message`` to every open connection and return the delivery count."""

        async with self._lock:
            connections = list(self._connections.values())

        targets = [connection for connection in connections if connection.is_open()]
        if not targets:
            return 0

        results = await asyncio.gather(
            *(asyncio.wait_for(connection.send(message), self._send_timeout) for connection in targets),
            return_exceptions=True,
        )
        delivered = 0
        for connection, result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.warning("Broadcast to %s failed: %r", connection.connection_id, result)
                continue
            delivered += 1
        return delivered


def get_registry(connection: HTTPConnection) -> ConnectionRegistry:
    """FastAPI dependency returning the app-owned connection registry."""

    return connection.app.state.registry
