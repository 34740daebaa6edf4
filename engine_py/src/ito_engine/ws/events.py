"""
WebSocket event models and validation.
"""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..constants import EVENT_UPDATE_GAMESTATE
from ..phases import Command

EventType = Command


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model. Every command is scoped to a room."""
    model_config = ConfigDict(populate_by_name=True)

    type: EventType
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=50)


class JoinEvent(BaseEvent):
    """Join room event."""
    type: EventType = EventType.JOIN_ROOM
    username: str = Field(..., min_length=1, max_length=30)
    icon: Optional[str] = Field(default=None, max_length=16)
    reconnect: bool = False


class StartEvent(BaseEvent):
    """Start game event."""
    type: EventType = EventType.START_GAME


class GoToCommentingEvent(BaseEvent):
    type: EventType = EventType.GO_TO_COMMENTING


class SubmitCommentEvent(BaseEvent):
    """Submit (or overwrite) this round's comment."""
    type: EventType = EventType.SUBMIT_COMMENT
    comment: str = Field(..., max_length=200)


class RevealCommentsEvent(BaseEvent):
    type: EventType = EventType.REVEAL_COMMENTS


class GoToRankingEvent(BaseEvent):
    type: EventType = EventType.GO_TO_RANKING


class SubmitRankingEvent(BaseEvent):
    """Ranking of every comment, keyed by the comment author's player id."""
    type: EventType = EventType.SUBMIT_RANKING
    ranking: Dict[str, int]


class RevealCardEvent(BaseEvent):
    type: EventType = EventType.REVEAL_CARD


class PlayCardEvent(BaseEvent):
    """Reveal a specific card from hand."""
    type: EventType = EventType.PLAY_CARD
    card: int


class UpdateIconEvent(BaseEvent):
    type: EventType = EventType.UPDATE_ICON
    icon: str = Field(..., min_length=1, max_length=16)


class DrawThemeEvent(BaseEvent):
    type: EventType = EventType.DRAW_THEME


class UpdateThemeEvent(BaseEvent):
    type: EventType = EventType.UPDATE_THEME
    theme: str = Field(..., max_length=200)


class KickPlayerEvent(BaseEvent):
    type: EventType = EventType.KICK_PLAYER
    player_id: str = Field(..., alias="playerId", min_length=1)


class RestartEvent(BaseEvent):
    type: EventType = EventType.RESTART_GAME


# Union type for all inbound events
InboundEvent = Union[
    JoinEvent,
    StartEvent,
    GoToCommentingEvent,
    SubmitCommentEvent,
    RevealCommentsEvent,
    GoToRankingEvent,
    SubmitRankingEvent,
    RevealCardEvent,
    PlayCardEvent,
    UpdateIconEvent,
    DrawThemeEvent,
    UpdateThemeEvent,
    KickPlayerEvent,
    RestartEvent,
]

EVENT_MAP = {
    EventType.JOIN_ROOM: JoinEvent,
    EventType.START_GAME: StartEvent,
    EventType.GO_TO_COMMENTING: GoToCommentingEvent,
    EventType.SUBMIT_COMMENT: SubmitCommentEvent,
    EventType.REVEAL_COMMENTS: RevealCommentsEvent,
    EventType.GO_TO_RANKING: GoToRankingEvent,
    EventType.SUBMIT_RANKING: SubmitRankingEvent,
    EventType.REVEAL_CARD: RevealCardEvent,
    EventType.PLAY_CARD: PlayCardEvent,
    EventType.UPDATE_ICON: UpdateIconEvent,
    EventType.DRAW_THEME: DrawThemeEvent,
    EventType.UPDATE_THEME: UpdateThemeEvent,
    EventType.KICK_PLAYER: KickPlayerEvent,
    EventType.RESTART_GAME: RestartEvent,
}


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")

    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_class = EVENT_MAP.get(event_type)
    if not event_class:
        raise ValueError(f"No handler for event type: {event_type}")

    try:
        return event_class(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {str(e)}")


def create_outbound_event(event: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a payload in the outbound envelope."""
    if event == EVENT_UPDATE_GAMESTATE:
        return {"type": event, "state": payload}
    return {"type": event, **payload}
