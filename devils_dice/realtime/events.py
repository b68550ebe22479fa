"""
Devil's Dice - Realtime Event Definitions

Event types and payloads emitted by the engine for every committed effect.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class GameEvent(Enum):
    """Events that can occur during a game."""

    GAME_STARTED = auto()
    PHASE_CHANGED = auto()
    ACTION_DECLARED = auto()
    TOKENS_CHANGED = auto()
    DICE_ROLLED = auto()
    DICE_REROLLED = auto()
    DIE_STOLEN = auto()
    DIE_TO_POOL = auto()
    POOL_REROLLED = auto()
    CHALLENGE_SUCCEEDED = auto()
    CHALLENGE_FAILED = auto()
    BLOCK_DECLARED = auto()
    ACTION_BLOCKED = auto()
    ACTION_CANCELLED = auto()
    ACTION_RESOLVED = auto()
    OVERFLOW_PENDING = auto()
    OVERFLOW_RESOLVED = auto()
    TURN_ADVANCED = auto()
    ROLLOFF = auto()
    GAME_WON = auto()


@dataclass
class EventPayload:
    """Wrapper for realtime event data.

    `private_to` is set when `data` exposes hidden dice faces; only that
    player should be shown the payload.
    """

    event: GameEvent
    table_id: str
    player_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    private_to: str | None = None

    @property
    def is_private(self) -> bool:
        return self.private_to is not None

    def visible_to(self, viewer_id: str) -> bool:
        """Whether a given player may see this payload."""
        return self.private_to is None or self.private_to == viewer_id

    def to_message(self) -> dict[str, Any]:
        """Flatten into a JSON-friendly broadcast message."""
        return {
            "event": self.event.name,
            "table_id": self.table_id,
            "player_id": self.player_id,
            "data": self.data,
        }
