"""
Phase state machine for an ito round.

Every command is checked against COMMAND_RULES (who may issue it and in which
phases) before it touches the room. Phase changes only ever go through
``advance``, which refuses any edge not listed in LEGAL_EDGES.

    lobby -> playing -> commenting -> reveal_comments -> ranking -> revealing -> result
      ^                                                                             |
      +------------------------------- restart ------------------------------------+
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from .errors import (
    DUPLICATE_SUBMISSION,
    INVALID_CARD,
    NOT_IN_ROUND,
    UNAUTHORIZED,
    UNKNOWN_PLAYER,
    WRONG_PHASE,
    GameError,
)
from .models import CommentEntry, Phase, Player, RevealEntry, RoomState, TableEntry
from .rules import GameRules
from .shuffle import create_deck, deal_hands, shuffle_deck

logger = logging.getLogger(__name__)


class Command(str, Enum):
    """Inbound commands a participant can issue."""
    JOIN_ROOM = "join_room"
    START_GAME = "start_game"
    GO_TO_COMMENTING = "go_to_commenting"
    SUBMIT_COMMENT = "submit_comment"
    REVEAL_COMMENTS = "reveal_comments"
    GO_TO_RANKING = "go_to_ranking"
    SUBMIT_RANKING = "submit_ranking"
    REVEAL_CARD = "reveal_card"
    PLAY_CARD = "play_card"
    UPDATE_ICON = "update_icon"
    DRAW_THEME = "draw_theme"
    UPDATE_THEME = "update_theme"
    KICK_PLAYER = "kick_player"
    RESTART_GAME = "restart_game"


@dataclass(frozen=True)
class CommandRule:
    host_only: bool = False
    phases: Optional[FrozenSet[Phase]] = None  # None means any phase
    round_only: bool = False  # sender must have been dealt in


def _only(*phases: Phase) -> FrozenSet[Phase]:
    return frozenset(phases)


COMMAND_RULES: Dict[Command, CommandRule] = {
    Command.START_GAME: CommandRule(host_only=True, phases=_only(Phase.LOBBY)),
    Command.GO_TO_COMMENTING: CommandRule(host_only=True, phases=_only(Phase.PLAYING)),
    Command.SUBMIT_COMMENT: CommandRule(phases=_only(Phase.COMMENTING), round_only=True),
    Command.REVEAL_COMMENTS: CommandRule(host_only=True, phases=_only(Phase.COMMENTING)),
    Command.GO_TO_RANKING: CommandRule(host_only=True, phases=_only(Phase.REVEAL_COMMENTS)),
    Command.SUBMIT_RANKING: CommandRule(phases=_only(Phase.RANKING), round_only=True),
    Command.REVEAL_CARD: CommandRule(phases=_only(Phase.REVEALING), round_only=True),
    Command.PLAY_CARD: CommandRule(phases=_only(Phase.REVEALING), round_only=True),
    Command.UPDATE_ICON: CommandRule(),
    Command.DRAW_THEME: CommandRule(host_only=True),
    Command.UPDATE_THEME: CommandRule(host_only=True),
    Command.KICK_PLAYER: CommandRule(host_only=True),
    Command.RESTART_GAME: CommandRule(host_only=True, phases=_only(Phase.RESULT)),
}

# Host-driven edges: (current phase, command) -> next phase
HOST_TRANSITIONS: Dict[Tuple[Phase, Command], Phase] = {
    (Phase.LOBBY, Command.START_GAME): Phase.PLAYING,
    (Phase.PLAYING, Command.GO_TO_COMMENTING): Phase.COMMENTING,
    (Phase.COMMENTING, Command.REVEAL_COMMENTS): Phase.REVEAL_COMMENTS,
    (Phase.REVEAL_COMMENTS, Command.GO_TO_RANKING): Phase.RANKING,
    (Phase.RESULT, Command.RESTART_GAME): Phase.LOBBY,
}

# Edges taken automatically once every active player has acted
AUTO_TRANSITIONS: Dict[Phase, Phase] = {
    Phase.RANKING: Phase.REVEALING,
    Phase.REVEALING: Phase.RESULT,
}

LEGAL_EDGES: FrozenSet[Tuple[Phase, Phase]] = frozenset(
    [(current, target) for (current, _), target in HOST_TRANSITIONS.items()]
    + list(AUTO_TRANSITIONS.items())
)


def authorize(state: RoomState, player_id: str, command: Command) -> Player:
    """
    Check the (phase, command, authorization) triple for a command.

    Args:
        state: Room the command targets
        player_id: Connection id of the sender
        command: Command being issued

    Returns:
        The sending player

    Raises:
        GameError: If the sender is not seated, not allowed, not dealt in, or the phase is wrong
    """
    player = state.get_player(player_id)
    if player is None:
        raise GameError(UNKNOWN_PLAYER, f"{player_id} is not seated in room {state.id}")

    rule = COMMAND_RULES.get(command, CommandRule())
    if rule.host_only and not player.is_host:
        raise GameError(UNAUTHORIZED, f"Only the host can {command.value}")
    if rule.phases is not None and state.phase not in rule.phases:
        raise GameError(WRONG_PHASE, f"Cannot {command.value} during {state.phase.value}")
    if rule.round_only and not player.in_round:
        raise GameError(NOT_IN_ROUND, f"{player.username} joined after the round was dealt")
    return player


def advance(state: RoomState, target: Phase):
    """Move the room to target, refusing anything that is not a legal edge."""
    if (state.phase, target) not in LEGAL_EDGES:
        raise GameError(WRONG_PHASE, f"No transition from {state.phase.value} to {target.value}")
    logger.info(f"Room {state.id}: {state.phase.value} -> {target.value}")
    state.phase = target


def apply_host_transition(state: RoomState, command: Command):
    target = HOST_TRANSITIONS.get((state.phase, command))
    if target is None:
        raise GameError(WRONG_PHASE, f"Cannot {command.value} during {state.phase.value}")
    advance(state, target)


def reset_round(state: RoomState):
    """Clear all round data on the room and its players. Seats and host are kept."""
    state.deck = []
    state.table = []
    state.comments = []
    state.rankings = {}
    state.reveal_order = []
    for player in state.players:
        player.reset_round()


def deal(state: RoomState, rules: GameRules, seed: Optional[int] = None):
    """Shuffle a fresh deck and deal rules.hand_size cards to every seat."""
    reset_round(state)
    deck = shuffle_deck(create_deck(rules.card_min, rules.card_max), seed)
    hands = deal_hands(deck, state.players, rules.hand_size)
    for player in state.players:
        player.hand = hands[player.id]
        player.in_round = True
    state.deck = deck


def start_game(state: RoomState, rules: GameRules, seed: Optional[int] = None):
    apply_host_transition(state, Command.START_GAME)
    deal(state, rules, seed)


def build_comments(state: RoomState, missing_comment: str):
    """Build the round's comment summary, one entry per round player in seat order."""
    state.comments = [
        CommentEntry(
            player_id=player.id,
            player_name=player.username,
            icon=player.icon,
            comment=player.comment if player.comment_submitted else missing_comment,
        )
        for player in state.round_players()
    ]


def all_comments_submitted(state: RoomState) -> bool:
    active = state.round_players()
    return bool(active) and all(p.comment_submitted for p in active)


def submit_comment(state: RoomState, player: Player, comment: str, rules: GameRules):
    # Resubmitting overwrites; clients use this to edit their comment.
    player.comment = comment
    player.comment_submitted = True
    if all_comments_submitted(state):
        build_comments(state, rules.missing_comment)


def reveal_comments(state: RoomState, rules: GameRules):
    if not state.comments:
        build_comments(state, rules.missing_comment)
    apply_host_transition(state, Command.REVEAL_COMMENTS)


def submit_ranking(state: RoomState, player: Player, ranking: Mapping[str, int]):
    if player.ranking_submitted:
        raise GameError(DUPLICATE_SUBMISSION, f"{player.username} already submitted a ranking")
    state.rankings[player.id] = dict(ranking)
    player.ranking_submitted = True
    check_round_progress(state)


def play_card(state: RoomState, player: Player, card: int):
    """Reveal a specific card from the player's hand onto the reveal order."""
    if player.card_revealed:
        raise GameError(DUPLICATE_SUBMISSION, f"{player.username} already revealed a card")
    if card not in player.hand:
        raise GameError(INVALID_CARD, f"{player.username} does not hold {card}")

    player.hand.remove(card)
    state.reveal_order.append(RevealEntry(
        player_id=player.id,
        player_name=player.username,
        icon=player.icon,
        card=card,
    ))
    state.reveal_order.sort(key=lambda entry: entry.card)
    player.card_revealed = True
    check_round_progress(state)


def reveal_card(state: RoomState, player: Player):
    if player.card_revealed:
        raise GameError(DUPLICATE_SUBMISSION, f"{player.username} already revealed a card")
    if not player.hand:
        raise GameError(INVALID_CARD, f"{player.username} has no card to reveal")
    play_card(state, player, player.hand[0])


def _all_ranked(state: RoomState) -> bool:
    active = state.round_players()
    return bool(active) and all(p.ranking_submitted for p in active)


def _all_revealed(state: RoomState) -> bool:
    # A dealt player whose deck ran dry has nothing to reveal
    active = state.round_players()
    return bool(active) and all(p.card_revealed or not p.hand for p in active)


def check_round_progress(state: RoomState, rules: Optional[GameRules] = None) -> bool:
    """
    Apply the automatic edges once every active player has acted.

    Also called after a seat is removed so the rest of the room is never left
    waiting on a player who is gone.

    Returns:
        True if the phase changed
    """
    if state.phase == Phase.COMMENTING:
        if rules is not None and all_comments_submitted(state):
            build_comments(state, rules.missing_comment)
        return False

    if state.phase == Phase.RANKING and _all_ranked(state):
        advance(state, AUTO_TRANSITIONS[Phase.RANKING])
        return True

    if state.phase == Phase.REVEALING and _all_revealed(state):
        advance(state, AUTO_TRANSITIONS[Phase.REVEALING])
        state.table = [
            TableEntry(card=entry.card, player_id=entry.player_id, player_name=entry.player_name)
            for entry in state.reveal_order
        ]
        return True

    return False


def restart_game(state: RoomState):
    apply_host_transition(state, Command.RESTART_GAME)
    reset_round(state)
