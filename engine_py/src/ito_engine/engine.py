"""Room session coordinator: command handling for every ito room"""

import logging
from typing import Callable, Mapping, Optional, Tuple

from . import phases
from .broadcast import Broadcaster, Transport
from .errors import INVALID_TARGET, UNKNOWN_ROOM, GameError
from .models import Player, RoomState
from .phases import Command, authorize
from .reconnect import (
    GraceTimer,
    ReconnectionManager,
    TimerFactory,
    find_reconnect_seat,
    rebind_identity,
)
from .registry import RoomRegistry
from .rules import GameRules, default_rules
from .themes import RandomThemeSource, ThemeSource

logger = logging.getLogger(__name__)

Action = Callable[[RoomState, Player], str]


class ItoEngine:
    """
    Coordinates every room in the process.

    Each command runs under its room's lock: look up the room, check the
    sender's authorization and the phase, mutate, then send each connected
    player a fresh snapshot. Rejected commands change nothing and send nothing.
    Commands return (success, message) for the caller's logs and tests.
    """

    def __init__(
        self,
        transport: Transport,
        theme_source: Optional[ThemeSource] = None,
        rules: Optional[GameRules] = None,
        timer_factory: TimerFactory = GraceTimer,
        registry: Optional[RoomRegistry] = None,
    ):
        self.rules = rules or default_rules
        self.registry = registry or RoomRegistry()
        self.broadcaster = Broadcaster(transport)
        self.themes = theme_source or RandomThemeSource()
        self.reconnection = ReconnectionManager(self.rules.grace_period_seconds, timer_factory)

    def get_room(self, room_id: str) -> Optional[RoomState]:
        return self.registry.get(room_id)

    def _run(self, room_id: str, connection_id: str, command: Command, action: Action) -> Tuple[bool, str]:
        with self.registry.lock(room_id):
            try:
                room = self.registry.get(room_id)
                if room is None:
                    raise GameError(UNKNOWN_ROOM, f"Room {room_id} not found")
                player = authorize(room, connection_id, command)
                message = action(room, player)
            except GameError as e:
                logger.debug(f"Ignored {command.value} from {connection_id} in room {room_id}: {e}")
                return False, e.message
            self.broadcaster.broadcast(room)
            return True, message

    # Membership

    def join_room(
        self,
        room_id: str,
        connection_id: str,
        username: str,
        icon: Optional[str] = None,
        reconnect: bool = False,
    ) -> Tuple[bool, str]:
        with self.registry.lock(room_id):
            room = self.registry.get_or_create(room_id)

            if reconnect:
                seat = find_reconnect_seat(room, username, connection_id)
                if seat is not None:
                    self._reconcile(room, seat, connection_id, icon)
                    self.broadcaster.broadcast(room)
                    return True, "Reconnected"

            if room.get_player(connection_id) is not None:
                self.broadcaster.broadcast(room)
                return True, "Already joined"

            is_host = not room.active_players()
            if is_host:
                # A held seat must not keep host once a live player takes over
                for other in room.players:
                    other.is_host = False
            room.players.append(Player(
                id=connection_id,
                username=username,
                icon=icon or self.rules.default_icon,
                is_host=is_host,
            ))
            logger.info(f"User {username} joined room {room_id}{' as host' if is_host else ''}")
            self.broadcaster.broadcast(room)
            return True, "Joined"

    def _reconcile(self, room: RoomState, seat: Player, connection_id: str, icon: Optional[str]):
        old_id = seat.id
        self.reconnection.cancel(room.id, old_id)
        if old_id != connection_id:
            rebind_identity(room, old_id, connection_id)
        seat.disconnected = False
        if icon:
            seat.icon = icon
        self._ensure_host(room)
        logger.info(f"User {seat.username} reconnected to room {room.id} ({old_id} -> {connection_id})")

    def disconnect(self, connection_id: str) -> int:
        """
        Hold every seat bound to a dropped connection for the grace period.

        Returns:
            Number of seats put on hold
        """
        held = 0
        for room_id in self.registry.room_ids():
            with self.registry.lock(room_id):
                room = self.registry.get(room_id)
                if room is None:
                    continue
                player = room.get_player(connection_id)
                if player is None or player.disconnected:
                    continue
                player.disconnected = True
                logger.info(f"User {player.username} disconnected from room {room_id}")
                self.broadcaster.broadcast(room)
                self.reconnection.hold_seat(room_id, connection_id, self._expire_seat)
                held += 1
        return held

    def _expire_seat(self, room_id: str, seat_id: str, timer: GraceTimer):
        with self.registry.lock(room_id):
            if not self.reconnection.claim(room_id, seat_id, timer):
                return
            room = self.registry.get(room_id)
            if room is None:
                return
            player = room.get_player(seat_id)
            if player is None or not player.disconnected:
                return
            logger.info(f"Grace period expired for {player.username} in room {room_id}")
            if self._remove_seat(room, player):
                self.broadcaster.broadcast(room)

    def _remove_seat(self, room: RoomState, player: Player) -> bool:
        """
        Remove a seat for good. Deletes the room once nobody is left.

        Returns:
            True if the room still exists afterwards
        """
        room.players.remove(player)
        if not room.players:
            self.registry.delete(room.id)
            return False
        if player.is_host:
            self._ensure_host(room)
        phases.check_round_progress(room, self.rules)
        return True

    def _ensure_host(self, room: RoomState):
        """Promote the longest-seated active player if nobody holds host."""
        if room.host() is not None:
            return
        for candidate in room.players:
            if not candidate.disconnected:
                candidate.is_host = True
                logger.info(f"{candidate.username} is now host of room {room.id}")
                return

    def kick_player(self, room_id: str, connection_id: str, target_id: str) -> Tuple[bool, str]:
        def action(room: RoomState, host: Player) -> str:
            target = room.get_player(target_id)
            if target is None or target is host:
                raise GameError(INVALID_TARGET, f"Cannot kick {target_id}")
            self.reconnection.cancel(room.id, target.id)
            self._remove_seat(room, target)
            self.broadcaster.notify_kicked(target.id)
            logger.info(f"{host.username} kicked {target.username} from room {room.id}")
            return f"Kicked {target.username}"

        return self._run(room_id, connection_id, Command.KICK_PLAYER, action)

    # Phase commands

    def start_game(self, room_id: str, connection_id: str, seed: Optional[int] = None) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.start_game(room, self.rules, seed)
            return "Game started"

        return self._run(room_id, connection_id, Command.START_GAME, action)

    def go_to_commenting(self, room_id: str, connection_id: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.apply_host_transition(room, Command.GO_TO_COMMENTING)
            return "Commenting started"

        return self._run(room_id, connection_id, Command.GO_TO_COMMENTING, action)

    def submit_comment(self, room_id: str, connection_id: str, comment: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.submit_comment(room, player, comment, self.rules)
            return "Comment submitted"

        return self._run(room_id, connection_id, Command.SUBMIT_COMMENT, action)

    def reveal_comments(self, room_id: str, connection_id: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.reveal_comments(room, self.rules)
            return "Comments revealed"

        return self._run(room_id, connection_id, Command.REVEAL_COMMENTS, action)

    def go_to_ranking(self, room_id: str, connection_id: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.apply_host_transition(room, Command.GO_TO_RANKING)
            return "Ranking started"

        return self._run(room_id, connection_id, Command.GO_TO_RANKING, action)

    def submit_ranking(self, room_id: str, connection_id: str, ranking: Mapping[str, int]) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.submit_ranking(room, player, ranking)
            return "Ranking submitted"

        return self._run(room_id, connection_id, Command.SUBMIT_RANKING, action)

    def reveal_card(self, room_id: str, connection_id: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.reveal_card(room, player)
            return "Card revealed"

        return self._run(room_id, connection_id, Command.REVEAL_CARD, action)

    def play_card(self, room_id: str, connection_id: str, card: int) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.play_card(room, player, card)
            return f"Played {card}"

        return self._run(room_id, connection_id, Command.PLAY_CARD, action)

    def restart_game(self, room_id: str, connection_id: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            phases.restart_game(room)
            return "Back to lobby"

        return self._run(room_id, connection_id, Command.RESTART_GAME, action)

    # Cosmetic commands

    def update_icon(self, room_id: str, connection_id: str, icon: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            player.icon = icon
            return "Icon updated"

        return self._run(room_id, connection_id, Command.UPDATE_ICON, action)

    def update_theme(self, room_id: str, connection_id: str, theme: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            room.theme = theme
            return "Theme updated"

        return self._run(room_id, connection_id, Command.UPDATE_THEME, action)

    def draw_theme(self, room_id: str, connection_id: str) -> Tuple[bool, str]:
        def action(room: RoomState, player: Player) -> str:
            room.theme = self.themes.pick_random()
            return "Theme drawn"

        return self._run(room_id, connection_id, Command.DRAW_THEME, action)

    def shutdown(self):
        self.reconnection.cancel_all()
