"""
Base interfaces for delivery channels.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Any


class LiveChannel(ABC):
    """Base interface for real-time push to connected users (WebSocket, etc.)"""

    @abstractmethod
    async def send(self, user_id: uuid.UUID, payload: Dict[str, Any]) -> bool:
        """
        Push a payload to the user's open connections.

        Returns:
            True if at least one connection took the message. A user with no
            open connection is a normal case and returns False.
        """
        pass

    @abstractmethod
    def is_connected(self, user_id: uuid.UUID) -> bool:
        """Whether the user currently has an open connection."""
        pass
