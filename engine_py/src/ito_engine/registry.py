"""Room registry: the only place rooms are created or destroyed"""

import logging
import threading
from collections import defaultdict
from typing import Dict, List, Optional

from .models import RoomState

logger = logging.getLogger(__name__)


class RoomRegistry:
    def __init__(self):
        self.rooms: Dict[str, RoomState] = {}
        # Locks outlive their rooms so a waiter never ends up holding a stale lock
        self.room_locks = defaultdict(threading.Lock)

    def lock(self, room_id: str) -> threading.Lock:
        return self.room_locks[room_id]

    def get(self, room_id: str) -> Optional[RoomState]:
        return self.rooms.get(room_id)

    def get_or_create(self, room_id: str) -> RoomState:
        """Caller must hold lock(room_id)."""
        room = self.rooms.get(room_id)
        if room is None:
            room = RoomState(id=room_id)
            self.rooms[room_id] = room
            logger.info(f"Created room {room_id}")
        return room

    def delete(self, room_id: str):
        """Caller must hold lock(room_id). Only empty rooms may be deleted."""
        room = self.rooms.get(room_id)
        if room is None:
            return
        if room.players:
            raise ValueError(f"Room {room_id} still has {len(room.players)} players")
        del self.rooms[room_id]
        logger.info(f"Deleted empty room {room_id}")

    def room_ids(self) -> List[str]:
        return list(self.rooms.keys())

    def __len__(self) -> int:
        return len(self.rooms)
