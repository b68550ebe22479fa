"""
Devil's Dice - Claim Validator

Decides whether a hand backs up a claim. Declaring an action claims its face;
blocking claims the counter-face for the action being blocked.

Claim Rules:
    - Raise Hell: Flame
    - Harvest Skulls: Skull
    - Extort: Trident (blocked with Trident)
    - Reap Soul: Scythe (blocked with Pentagram)
    - Pentagram: Pentagram
    - Imp's Set: every die is an Imp, or all non-Imp dice share one face
    - Satan's Steal: paid for with tokens, claims nothing

Everything here is pure: the answer depends only on the claim and the faces.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from devils_dice.engine.base import ActionKind, Face

ACTION_FACES: dict[ActionKind, Face] = {
    ActionKind.RAISE_HELL: Face.FLAME,
    ActionKind.HARVEST_SKULLS: Face.SKULL,
    ActionKind.EXTORT: Face.TRIDENT,
    ActionKind.REAP_SOUL: Face.SCYTHE,
    ActionKind.PENTAGRAM: Face.PENTAGRAM,
}

BLOCK_FACES: dict[ActionKind, Face] = {
    ActionKind.EXTORT: Face.TRIDENT,
    ActionKind.REAP_SOUL: Face.PENTAGRAM,
}

WILDCARD = Face.IMP


@dataclass(frozen=True)
class Claim:
    """
    What a claimant asserts about their hidden hand.

    Attributes:
        action: The declared action, or the action being blocked
        is_block: True when the claim is a block of `action`
    """
    action: ActionKind
    is_block: bool = False

    def __post_init__(self) -> None:
        if self.is_block and self.action not in BLOCK_FACES:
            raise ValueError(f"{self.action.value} cannot be blocked.")

    @classmethod
    def for_action(cls, action: ActionKind) -> "Claim":
        return cls(action=action)

    @classmethod
    def for_block(cls, action: ActionKind) -> "Claim":
        return cls(action=action, is_block=True)

    @property
    def required_face(self) -> Face | None:
        """Single face the claim needs, or None for set/unclaimed actions."""
        if self.is_block:
            return BLOCK_FACES[self.action]
        return ACTION_FACES.get(self.action)


def is_valid_set(faces: Iterable[Face]) -> bool:
    """
    Check the Imp's Set rule.

    Valid if every die is an Imp, or all non-Imp dice show the same face.
    An empty hand holds no set.
    """
    counts = Counter(faces)
    if not counts:
        return False
    non_wild = [face for face in counts if face is not WILDCARD]
    return len(non_wild) <= 1


def satisfies(claim: Claim, faces: Iterable[Face]) -> bool:
    """
    Check whether a hand backs up a claim.

    Args:
        claim: The action or block being asserted
        faces: Faces in the claimant's current hand

    Returns:
        True if the claim is truthful
    """
    faces = tuple(faces)
    if not claim.is_block:
        if claim.action is ActionKind.IMPS_SET:
            return is_valid_set(faces)
        if claim.action is ActionKind.SATANS_STEAL:
            return True
    return claim.required_face in faces
