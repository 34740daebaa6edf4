"""
Game rule configuration and validation.
"""

import os

from pydantic import BaseModel, Field, field_validator

from .constants import (
    CARD_MAX,
    CARD_MIN,
    DEFAULT_ICON,
    GRACE_PERIOD_SECONDS,
    INITIAL_HAND_SIZE,
    MISSING_COMMENT,
)


class GameRules(BaseModel):
    """Configuration for game rules and settings."""

    card_min: int = Field(
        default=CARD_MIN,
        ge=0,
        description="Lowest card value in the deck"
    )
    card_max: int = Field(
        default=CARD_MAX,
        ge=1,
        description="Highest card value in the deck"
    )
    hand_size: int = Field(
        default=INITIAL_HAND_SIZE,
        ge=1,
        le=10,
        description="Cards dealt to each player when a game starts"
    )
    grace_period_seconds: float = Field(
        default=GRACE_PERIOD_SECONDS,
        gt=0,
        description="How long a disconnected seat is held open for reconnection"
    )
    missing_comment: str = Field(
        default=MISSING_COMMENT,
        description="Shown in place of comments not submitted before the host reveals"
    )
    default_icon: str = Field(
        default=DEFAULT_ICON,
        min_length=1,
        description="Icon given to players who join without choosing one"
    )

    @field_validator('card_max')
    @classmethod
    def validate_card_range(cls, v, info):
        """Validate the card range is not empty."""
        card_min = info.data.get('card_min', CARD_MIN)
        if v < card_min:
            raise ValueError(f'card_max ({v}) must be >= card_min ({card_min})')
        return v

    @property
    def deck_size(self) -> int:
        return self.card_max - self.card_min + 1

    @classmethod
    def from_env(cls) -> "GameRules":
        """Build rules from ITO_* environment overrides."""
        overrides = {}
        env_map = {
            "ITO_CARD_MIN": "card_min",
            "ITO_CARD_MAX": "card_max",
            "ITO_HAND_SIZE": "hand_size",
            "ITO_GRACE_PERIOD_SECONDS": "grace_period_seconds",
        }
        for env_name, field_name in env_map.items():
            value = os.getenv(env_name)
            if value:
                overrides[field_name] = value
        return cls(**overrides)


default_rules = GameRules()
