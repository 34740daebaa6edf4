"""Game models and data structures"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class Phase(str, Enum):
    LOBBY = "lobby"
    PLAYING = "playing"  # players look at their cards
    COMMENTING = "commenting"
    REVEAL_COMMENTS = "reveal_comments"
    RANKING = "ranking"
    REVEALING = "revealing"
    RESULT = "result"


@dataclass
class Player:
    id: str  # current connection id, rebound on reconnection
    username: str
    icon: str
    hand: List[int] = field(default_factory=list)
    is_host: bool = False
    comment: str = ""
    comment_submitted: bool = False
    ranking_submitted: bool = False
    card_revealed: bool = False
    disconnected: bool = False
    in_round: bool = False  # dealt in at start_game

    def reset_round(self):
        self.hand = []
        self.in_round = False
        self.comment = ""
        self.comment_submitted = False
        self.ranking_submitted = False
        self.card_revealed = False


@dataclass
class CommentEntry:
    player_id: str
    player_name: str
    icon: str
    comment: str


@dataclass
class RevealEntry:
    player_id: str
    player_name: str
    icon: str
    card: int


@dataclass
class TableEntry:
    card: int
    player_id: str
    player_name: str


@dataclass
class RoomState:
    id: str
    phase: Phase = Phase.LOBBY
    players: List[Player] = field(default_factory=list)  # join order
    deck: List[int] = field(default_factory=list)
    table: List[TableEntry] = field(default_factory=list)
    theme: str = ""
    comments: List[CommentEntry] = field(default_factory=list)
    # submitter id -> {target id: rank}
    rankings: Dict[str, Dict[str, int]] = field(default_factory=dict)
    reveal_order: List[RevealEntry] = field(default_factory=list)

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def active_players(self) -> List[Player]:
        return [p for p in self.players if not p.disconnected]

    def round_players(self) -> List[Player]:
        """Active players who were dealt into the current round."""
        return [p for p in self.players if p.in_round and not p.disconnected]

    def host(self) -> Optional[Player]:
        for player in self.players:
            if player.is_host:
                return player
        return None
