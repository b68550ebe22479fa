"""
Devil's Dice Game Engine.

Pure Python game logic with no UI or transport dependencies.
Handles hidden dice, claims and challenges, blocks, token transfers,
hand overflow, and the six-face win condition with rolloff tie-breaks.
"""

from devils_dice.engine.base import (
    ALL_FACES,
    MAX_HAND,
    ActionKind,
    Die,
    Face,
    GameConfig,
    GamePhase,
)
from devils_dice.engine.claims import Claim, satisfies
from devils_dice.engine.dice import DicePoolManager, PendingOverflow, StealOutcome
from devils_dice.engine.errors import IllegalIntentError, IntentRejection, InvariantViolation
from devils_dice.engine.intents import (
    Block,
    Challenge,
    ChooseOverflowFace,
    DeclareAction,
    Intent,
    IntentPayload,
    Pass,
    parse_intent,
)
from devils_dice.engine.snapshot import TableSnapshot
from devils_dice.engine.state import TableState, TurnContext
from devils_dice.engine.tokens import TokenLedger
from devils_dice.engine.turn import TurnStateMachine
from devils_dice.engine.win import WinEvaluator

__all__ = [
    # Constants
    "ALL_FACES",
    "MAX_HAND",
    # Data Classes
    "Claim",
    "Die",
    "GameConfig",
    "PendingOverflow",
    "StealOutcome",
    "TableSnapshot",
    "TableState",
    "TurnContext",
    # Enums
    "ActionKind",
    "Face",
    "GamePhase",
    "IntentRejection",
    # Intents
    "Block",
    "Challenge",
    "ChooseOverflowFace",
    "DeclareAction",
    "Intent",
    "IntentPayload",
    "Pass",
    "parse_intent",
    # Errors
    "IllegalIntentError",
    "InvariantViolation",
    # Components
    "DicePoolManager",
    "TokenLedger",
    "TurnStateMachine",
    "WinEvaluator",
    "satisfies",
]
