"""
WebSocket live channel.
Tracks open sockets per user and pushes JSON payloads to them.
"""
import uuid
import logging
from typing import Dict, Any, Set

from fastapi import WebSocket

from hirelocal.services.integrations.base import LiveChannel

logger = logging.getLogger(__name__)


class ConnectionManager(LiveChannel):
    """In-process registry of open sockets, keyed by user id."""

    def __init__(self) -> None:
        self.active_connections: Dict[uuid.UUID, Set[WebSocket]] = {}

    async def connect(self, user_id: uuid.UUID, websocket: WebSocket) -> None:
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.setdefault(user_id, set()).add(websocket)
        logger.info(f"User {user_id} connected ({len(self.active_connections[user_id])} open)")

    def disconnect(self, user_id: uuid.UUID, websocket: WebSocket) -> None:
        """Remove a WebSocket from active connections."""
        sockets = self.active_connections.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.active_connections[user_id]
        logger.info(f"User {user_id} disconnected")

    def is_connected(self, user_id: uuid.UUID) -> bool:
        return bool(self.active_connections.get(user_id))

    async def send(self, user_id: uuid.UUID, payload: Dict[str, Any]) -> bool:
        """One attempt per open socket; broken sockets are dropped, never retried."""
        sockets = list(self.active_connections.get(user_id, ()))
        if not sockets:
            return False

        delivered = False
        for ws in sockets:
            try:
                await ws.send_json(payload)
                delivered = True
            except Exception as e:
                logger.warning(f"Dropping socket for user {user_id}: {e}")
                self.disconnect(user_id, ws)
        return delivered

    def stats(self) -> dict:
        return {
            "users_connected": len(self.active_connections),
            "total_connections": sum(len(s) for s in self.active_connections.values()),
        }
