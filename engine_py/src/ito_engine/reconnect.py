"""
Grace-period handling for dropped connections.

A dropped player keeps their seat for a grace period. Each held seat has one
timer keyed by (room_id, seat_id), where seat_id is the connection id the
player had when they dropped. Reconnecting cancels the timer; if it fires
first, the engine removes the seat.

Seats are matched on username alone. Anyone who knows a disconnected player's
name can take over their seat.
"""

import logging
import threading
from typing import Callable, Dict, Optional, Tuple

from .models import Player, RoomState

logger = logging.getLogger(__name__)

ExpiryCallback = Callable[[str, str, "GraceTimer"], None]


class GraceTimer:
    """Fire-once, cancellable timer running on a daemon thread."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self._timer = threading.Timer(delay, callback)
        self._timer.daemon = True

    def start(self):
        self._timer.start()

    def cancel(self):
        self._timer.cancel()


TimerFactory = Callable[[float, Callable[[], None]], GraceTimer]


class ReconnectionManager:
    def __init__(self, grace_period_seconds: float, timer_factory: TimerFactory = GraceTimer):
        self.grace_period_seconds = grace_period_seconds
        self.timer_factory = timer_factory
        self.pending: Dict[Tuple[str, str], GraceTimer] = {}
        self._lock = threading.Lock()

    def hold_seat(self, room_id: str, seat_id: str, on_expire: ExpiryCallback) -> GraceTimer:
        """Start the grace timer for a seat, replacing any timer already running for it."""
        key = (room_id, seat_id)

        def fire():
            on_expire(room_id, seat_id, timer)

        timer = self.timer_factory(self.grace_period_seconds, fire)
        with self._lock:
            previous = self.pending.pop(key, None)
            self.pending[key] = timer
        if previous is not None:
            previous.cancel()
        timer.start()
        logger.info(f"Holding seat {seat_id} in room {room_id} for {self.grace_period_seconds}s")
        return timer

    def cancel(self, room_id: str, seat_id: str) -> bool:
        """Cancel the pending timer for a seat. Returns False if none was pending."""
        with self._lock:
            timer = self.pending.pop((room_id, seat_id), None)
        if timer is None:
            return False
        timer.cancel()
        logger.info(f"Cancelled grace timer for seat {seat_id} in room {room_id}")
        return True

    def claim(self, room_id: str, seat_id: str, timer: GraceTimer) -> bool:
        """
        Called by a firing timer. Succeeds only if that exact timer is still
        the one registered for the seat, so a cancelled or replaced timer
        can never remove a seat.
        """
        key = (room_id, seat_id)
        with self._lock:
            if self.pending.get(key) is not timer:
                return False
            del self.pending[key]
            return True

    def is_pending(self, room_id: str, seat_id: str) -> bool:
        with self._lock:
            return (room_id, seat_id) in self.pending

    def cancel_all(self):
        with self._lock:
            timers = list(self.pending.values())
            self.pending.clear()
        for timer in timers:
            timer.cancel()


def find_reconnect_seat(state: RoomState, username: str, connection_id: str) -> Optional[Player]:
    """Find a held seat (or this connection's own seat) for username."""
    for player in state.players:
        if player.username != username:
            continue
        if player.disconnected or player.id == connection_id:
            return player
    return None


def rebind_identity(state: RoomState, old_id: str, new_id: str):
    """Point every reference to old_id in the room's round data at new_id."""
    player = state.get_player(old_id)
    if player is not None:
        player.id = new_id

    for entry in state.comments:
        if entry.player_id == old_id:
            entry.player_id = new_id
    for entry in state.reveal_order:
        if entry.player_id == old_id:
            entry.player_id = new_id
    for entry in state.table:
        if entry.player_id == old_id:
            entry.player_id = new_id

    rankings = {}
    for submitter, ranking in state.rankings.items():
        rankings[new_id if submitter == old_id else submitter] = {
            (new_id if target == old_id else target): rank for target, rank in ranking.items()
        }
    state.rankings = rankings
