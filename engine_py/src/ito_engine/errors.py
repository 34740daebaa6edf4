# engine_py/src/ito_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Specific error codes
UNKNOWN_ROOM = "UNKNOWN_ROOM"
UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
UNAUTHORIZED = "UNAUTHORIZED"
WRONG_PHASE = "WRONG_PHASE"
DUPLICATE_SUBMISSION = "DUPLICATE_SUBMISSION"
INVALID_CARD = "INVALID_CARD"
INVALID_TARGET = "INVALID_TARGET"
NOT_IN_ROUND = "NOT_IN_ROUND"
