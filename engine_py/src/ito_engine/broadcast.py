"""Fan-out of redacted room snapshots to connected players"""

import logging
from typing import Any, Dict, Protocol

from .constants import EVENT_KICKED, EVENT_UPDATE_GAMESTATE
from .models import RoomState
from .serialization import sanitize_state

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Delivers events to connections. Sends must not block the caller."""

    def send_to(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        ...


class Broadcaster:
    def __init__(self, transport: Transport):
        self.transport = transport

    def broadcast(self, state: RoomState):
        """Send every connected player their own snapshot of the room."""
        for player in state.players:
            if player.disconnected:
                continue
            self.transport.send_to(player.id, EVENT_UPDATE_GAMESTATE, sanitize_state(state, player.id))

    def notify_kicked(self, connection_id: str):
        logger.info(f"Notifying {connection_id} that they were kicked")
        self.transport.send_to(connection_id, EVENT_KICKED, {})
