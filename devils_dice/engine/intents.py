"""
Devil's Dice - Player Intents

The closed set of things a player can ask the engine to do, plus parsing of
the tagged payload an external caller sends.

Payload kinds:
    declareRaiseHell, declareHarvest, declareExtort, declareReapSoul,
    declarePentagram, declareImpsSet, declareSatansSteal,
    challenge, block, pass, chooseOverflowFace
"""

from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, Field, ValidationError

from devils_dice.engine.base import ActionKind, Face
from devils_dice.engine.errors import IllegalIntentError, IntentRejection


@dataclass(frozen=True)
class DeclareAction:
    """Declare one of the seven actions on your turn."""
    player_id: str
    action: ActionKind
    target_id: str | None = None
    put_in_pool: bool = False           # Satan's Steal only
    pool_face: Face | str | None = None  # Satan's Steal only


@dataclass(frozen=True)
class Challenge:
    """Accuse the current claimant of lying."""
    player_id: str


@dataclass(frozen=True)
class Block:
    """Counter-claim against an action aimed at you."""
    player_id: str


@dataclass(frozen=True)
class Pass:
    """Decline to challenge or block."""
    player_id: str


@dataclass(frozen=True)
class ChooseOverflowFace:
    """Pick the face an overflowing die shows in the pool."""
    player_id: str
    face: Face | str


Intent = Union[DeclareAction, Challenge, Block, Pass, ChooseOverflowFace]

DECLARE_KINDS: dict[str, ActionKind] = {
    "declareRaiseHell": ActionKind.RAISE_HELL,
    "declareHarvest": ActionKind.HARVEST_SKULLS,
    "declareExtort": ActionKind.EXTORT,
    "declareReapSoul": ActionKind.REAP_SOUL,
    "declarePentagram": ActionKind.PENTAGRAM,
    "declareImpsSet": ActionKind.IMPS_SET,
    "declareSatansSteal": ActionKind.SATANS_STEAL,
}

_SIMPLE_KINDS: dict[str, type] = {
    "challenge": Challenge,
    "block": Block,
    "pass": Pass,
}


class IntentPayload(BaseModel):
    """Tagged intent as received from a presentation or session layer."""

    kind: str
    acting_player: str = Field(alias="actingPlayer", min_length=1)
    target: str | None = None
    put_in_pool: bool = Field(default=False, alias="putInPool")
    pool_face: str | None = Field(default=None, alias="poolFace")
    face: str | None = None

    model_config = {"populate_by_name": True, "extra": "forbid"}

    def to_intent(self) -> Intent:
        """Convert to the engine's intent type."""
        if self.kind in DECLARE_KINDS:
            return DeclareAction(
                player_id=self.acting_player,
                action=DECLARE_KINDS[self.kind],
                target_id=self.target,
                put_in_pool=self.put_in_pool,
                pool_face=self.pool_face,
            )
        if self.kind in _SIMPLE_KINDS:
            return _SIMPLE_KINDS[self.kind](player_id=self.acting_player)
        if self.kind == "chooseOverflowFace":
            if self.face is None:
                raise IllegalIntentError(
                    IntentRejection.INVALID_FACE, "chooseOverflowFace requires a face."
                )
            return ChooseOverflowFace(player_id=self.acting_player, face=self.face)
        raise IllegalIntentError(
            IntentRejection.INVALID_PAYLOAD, f"Unknown intent kind {self.kind!r}."
        )


def parse_intent(payload: dict[str, Any]) -> Intent:
    """
    Validate a raw payload and build the matching intent.

    Raises:
        IllegalIntentError: If the payload is malformed or names no intent
    """
    try:
        model = IntentPayload.model_validate(payload)
    except ValidationError as exc:
        raise IllegalIntentError(
            IntentRejection.INVALID_PAYLOAD, f"Malformed intent payload: {exc}"
        ) from exc
    return model.to_intent()
