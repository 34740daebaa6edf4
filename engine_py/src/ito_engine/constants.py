"""Game constants"""

CARD_MIN = 1
CARD_MAX = 100
INITIAL_HAND_SIZE = 1

# Seconds a disconnected seat is held open before removal
GRACE_PERIOD_SECONDS = 300

# Stands in for every card the viewer is not allowed to see
HIDDEN_CARD = "?"

MISSING_COMMENT = "(no comment)"

ANIMAL_ICONS = [
    "🐶", "🐱", "🐭", "🐹", "🐰", "🦊", "🐻", "🐼", "🐨", "🐯",
    "🦁", "🐮", "🐷", "🐴", "🐵", "🐔", "🐧", "🐦", "🐤", "🦆",
]
DEFAULT_ICON = ANIMAL_ICONS[0]

# Outbound event names
EVENT_UPDATE_GAMESTATE = "update_gamestate"
EVENT_KICKED = "kicked"
