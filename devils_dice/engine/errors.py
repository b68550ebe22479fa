"""
Devil's Dice - Engine Errors

Rejected intents raise `IllegalIntentError` before any state is written.
`InvariantViolation` signals an engine defect and is never caught internally.
"""

from enum import Enum


class IntentRejection(Enum):
    """Machine-readable reasons an intent was refused."""
    GAME_NOT_STARTED = "game_not_started"
    GAME_OVER = "game_over"
    WRONG_PHASE = "wrong_phase"
    NOT_ACTIVE = "not_active"
    NOT_YOUR_TURN = "not_your_turn"
    UNKNOWN_PLAYER = "unknown_player"
    INVALID_TARGET = "invalid_target"
    INSUFFICIENT_TOKENS = "insufficient_tokens"
    INVALID_FACE = "invalid_face"
    NOT_BLOCKABLE = "not_blockable"
    INVALID_PAYLOAD = "invalid_payload"


class IllegalIntentError(ValueError):
    """An intent that is not legal in the current phase."""

    def __init__(self, reason: IntentRejection, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message

    def __str__(self) -> str:
        return f"{self.message} ({self.reason.value})"


class InvariantViolation(RuntimeError):
    """Table state broke a rule that the engine guarantees by construction."""
