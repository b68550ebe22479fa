"""
Devil's Dice - Game Engine Base Classes

This module defines the foundational enums and data structures used throughout
the game engine. Value objects (dice, configuration) are frozen dataclasses;
the mutable per-table aggregate lives in `devils_dice.engine.state`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devils_dice.config.settings import Settings


MAX_HAND = 6
MIN_PLAYERS = 2
MAX_PLAYERS = 6


class Face(Enum):
    """The six symbols printed on every die."""
    FLAME = "flame"
    PENTAGRAM = "pentagram"
    SCYTHE = "scythe"
    TRIDENT = "trident"
    SKULL = "skull"
    IMP = "imp"      # Wildcard for Imp's Set, tie-break symbol for rolloffs


ALL_FACES: tuple[Face, ...] = tuple(Face)


class ActionKind(Enum):
    """The seven actions a player may declare on their turn."""
    RAISE_HELL = "raise_hell"
    HARVEST_SKULLS = "harvest_skulls"
    EXTORT = "extort"
    REAP_SOUL = "reap_soul"
    PENTAGRAM = "pentagram"
    IMPS_SET = "imps_set"
    SATANS_STEAL = "satans_steal"

    @property
    def needs_target(self) -> bool:
        """Whether the action is aimed at another player."""
        return self in _TARGETED_ACTIONS

    @property
    def is_blockable(self) -> bool:
        """Whether the target may answer the action with a block."""
        return self in _BLOCKABLE_ACTIONS

    @property
    def is_challengeable(self) -> bool:
        """Whether opponents may challenge the declaration."""
        return self is not ActionKind.SATANS_STEAL


_TARGETED_ACTIONS = frozenset({
    ActionKind.EXTORT,
    ActionKind.REAP_SOUL,
    ActionKind.SATANS_STEAL,
})

_BLOCKABLE_ACTIONS = frozenset({ActionKind.EXTORT, ActionKind.REAP_SOUL})


class GamePhase(Enum):
    """States of the turn state machine."""
    SETUP = "setup"
    PLAYER_TURN = "player_turn"
    CHALLENGE_WINDOW = "challenge_window"
    RESOLVE_CHALLENGE = "resolve_challenge"
    BLOCK_WINDOW = "block_window"
    RESOLVE_ACTION = "resolve_action"
    CHECK_WIN = "check_win"
    CHOOSE_OVERFLOW_FACE = "choose_overflow_face"
    ROLLOFF = "rolloff"
    GAME_END = "game_end"

    @property
    def awaits_players(self) -> bool:
        """Whether the phase waits for player intents (vs. running itself)."""
        return self in _PLAYER_PHASES


_PLAYER_PHASES = frozenset({
    GamePhase.PLAYER_TURN,
    GamePhase.CHALLENGE_WINDOW,
    GamePhase.BLOCK_WINDOW,
    GamePhase.CHOOSE_OVERFLOW_FACE,
})


@dataclass(frozen=True)
class Die:
    """
    A single die.

    Dice are never mutated: a reroll destroys the old die and creates a new
    one with a fresh id.

    Attributes:
        id: Arena id, unique for the lifetime of a table
        face: Symbol currently showing
    """
    id: int
    face: Face


@dataclass(frozen=True)
class GameConfig:
    """
    Rules configuration for a table.

    Attributes:
        num_players: Number of seated players (2-6)
        starting_tokens: Skull tokens granted to every player at setup
        starting_dice: Dice rolled into every hand at setup
        max_hand: Hand capacity; gains beyond it overflow to the pool
        raise_hell_tokens: Tokens gained by Raise Hell
        harvest_tokens: Tokens gained by Harvest Skulls
        extort_tokens: Tokens taken by Extort (capped at target's balance)
        reap_soul_cost: Tokens paid for Reap Soul
        satans_steal_cost: Tokens paid for Satan's Steal
        tiebreak_face: Face counted during a rolloff
    """
    num_players: int = 2
    starting_tokens: int = 1
    starting_dice: int = 2
    max_hand: int = MAX_HAND
    raise_hell_tokens: int = 1
    harvest_tokens: int = 2
    extort_tokens: int = 3
    reap_soul_cost: int = 2
    satans_steal_cost: int = 6
    tiebreak_face: Face = Face.IMP

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not MIN_PLAYERS <= self.num_players <= MAX_PLAYERS:
            raise ValueError(
                f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}."
            )
        if not 1 <= self.max_hand <= MAX_HAND:
            raise ValueError(f"Hand capacity must be between 1 and {MAX_HAND}.")
        if not 0 <= self.starting_dice <= self.max_hand:
            raise ValueError(
                f"Starting dice must be between 0 and the hand capacity ({self.max_hand})."
            )
        amounts = {
            "starting_tokens": self.starting_tokens,
            "raise_hell_tokens": self.raise_hell_tokens,
            "harvest_tokens": self.harvest_tokens,
            "extort_tokens": self.extort_tokens,
            "reap_soul_cost": self.reap_soul_cost,
            "satans_steal_cost": self.satans_steal_cost,
        }
        for name, value in amounts.items():
            if value < 0:
                raise ValueError(f"{name} cannot be negative, got {value}.")

    def action_cost(self, action: ActionKind) -> int:
        """Tokens a player must hold to declare an action."""
        if action is ActionKind.REAP_SOUL:
            return self.reap_soul_cost
        if action is ActionKind.SATANS_STEAL:
            return self.satans_steal_cost
        return 0

    @classmethod
    def from_settings(cls, settings: "Settings", num_players: int) -> "GameConfig":
        """Build a table configuration from application settings."""
        return cls(
            num_players=num_players,
            starting_tokens=settings.starting_tokens,
            starting_dice=settings.starting_dice,
        )
