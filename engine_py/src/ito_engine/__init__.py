"""ito party game: room session coordinator"""

from .engine import ItoEngine
from .models import Phase, Player, RoomState
from .rules import GameRules

__all__ = ["ItoEngine", "GameRules", "Phase", "Player", "RoomState"]
