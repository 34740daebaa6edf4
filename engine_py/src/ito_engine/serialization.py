"""
State serialization and sanitization utilities.
"""

from typing import Any, Dict, Optional

from .constants import HIDDEN_CARD
from .models import RoomState


def sanitize_state(state: RoomState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sanitize room state for transmission to one client.

    Everything is shared between viewers except hands: the viewer sees their
    own cards, every other hand becomes the same number of HIDDEN_CARD markers.

    Args:
        state: Room state to sanitize
        viewer_id: Connection id of the player viewing the state

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    sanitized = {
        "id": state.id,
        "phase": state.phase.value,
        "theme": state.theme,
        "players": [],
        "table": [
            {
                "card": entry.card,
                "playerId": entry.player_id,
                "playerName": entry.player_name,
            }
            for entry in state.table
        ],
        "comments": [
            {
                "playerId": entry.player_id,
                "playerName": entry.player_name,
                "icon": entry.icon,
                "comment": entry.comment,
            }
            for entry in state.comments
        ],
        "rankings": {
            submitter: dict(ranking) for submitter, ranking in state.rankings.items()
        },
        "revealOrder": [
            {
                "playerId": entry.player_id,
                "playerName": entry.player_name,
                "icon": entry.icon,
                "card": entry.card,
            }
            for entry in state.reveal_order
        ],
    }

    for player in state.players:
        if player.id == viewer_id:
            hand = player.hand.copy()
        else:
            hand = [HIDDEN_CARD] * len(player.hand)

        sanitized["players"].append({
            "id": player.id,
            "username": player.username,
            "icon": player.icon,
            "hand": hand,
            "isHost": player.is_host,
            "comment": player.comment if player.comment_submitted else "",
            "commentSubmitted": player.comment_submitted,
            "rankingSubmitted": player.ranking_submitted,
            "cardRevealed": player.card_revealed,
            "disconnected": player.disconnected,
        })

    return sanitized

