"""
Devil's Dice - Dice Pool Manager

Owns every die on the table: one hand per player plus Satan's pool.

Dice live in an arena keyed by integer id. Hands and the pool hold ids only,
so moving a die is an ownership transfer between id lists and a die can never
sit in two places at once. Rerolling destroys the old die and mints a new id.

Failure policy:
    - Removing from an empty hand is a no-op, never an error
    - Gains that would exceed the hand capacity do not touch the hand; they
      return a `PendingOverflow` for the caller to resolve later
"""

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Sequence

from devils_dice.engine.base import ALL_FACES, MAX_HAND, Die, Face
from devils_dice.engine.validators import validate_dice_count, validate_face

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingOverflow:
    """
    Dice a player gained but could not hold.

    Attributes:
        player_id: Player whose hand was full
        count: Number of dice still to be diverted to the pool
    """
    player_id: str
    count: int

    def merged(self, extra: int) -> "PendingOverflow":
        """Return a record covering `extra` more dice for the same player."""
        return PendingOverflow(player_id=self.player_id, count=self.count + extra)


@dataclass(frozen=True)
class StealOutcome:
    """
    Result of moving a die from one hand to another.

    Attributes:
        stolen: Whether the victim actually lost a die
        overflow: Deferred gain for the stealer when their hand was full
    """
    stolen: bool
    overflow: PendingOverflow | None = None


class DicePoolManager:
    """Mutable owner of all hands and the shared pool for one table."""

    def __init__(
        self,
        player_ids: Iterable[str],
        max_hand: int = MAX_HAND,
        rng: random.Random | None = None,
    ) -> None:
        self.max_hand = max_hand
        self._rng = rng or random.Random()
        self._faces: dict[int, Face] = {}
        self._hands: dict[str, list[int]] = {pid: [] for pid in player_ids}
        self._pool: list[int] = []
        self._next_id = 1

    # -- Queries ---------------------------------------------------------

    @property
    def player_ids(self) -> tuple[str, ...]:
        return tuple(self._hands)

    def hand(self, player_id: str) -> tuple[Die, ...]:
        """Dice currently held by a player."""
        return tuple(Die(die_id, self._faces[die_id]) for die_id in self._hand(player_id))

    def faces(self, player_id: str) -> tuple[Face, ...]:
        """Faces currently showing in a player's hand."""
        return tuple(self._faces[die_id] for die_id in self._hand(player_id))

    def hand_size(self, player_id: str) -> int:
        return len(self._hand(player_id))

    def is_full(self, player_id: str) -> bool:
        return self.hand_size(player_id) >= self.max_hand

    def pool(self) -> tuple[Die, ...]:
        """Dice currently in Satan's pool."""
        return tuple(Die(die_id, self._faces[die_id]) for die_id in self._pool)

    def pool_faces(self) -> tuple[Face, ...]:
        return tuple(self._faces[die_id] for die_id in self._pool)

    def owner_of(self, die_id: int) -> str | None:
        """Player holding a die, or None if it sits in the pool."""
        for player_id, hand in self._hands.items():
            if die_id in hand:
                return player_id
        if die_id in self._pool:
            return None
        raise KeyError(f"Unknown die id {die_id}")

    def all_die_ids(self) -> list[int]:
        """Every die id held by a hand or the pool, in no particular order."""
        ids = list(self._pool)
        for hand in self._hands.values():
            ids.extend(hand)
        return ids

    # -- Hand operations -------------------------------------------------

    def roll_face(self) -> Face:
        """Draw a uniformly random face."""
        return self._rng.choice(ALL_FACES)

    def add_dice(
        self,
        player_id: str,
        count: int,
        face: Face | None = None,
    ) -> PendingOverflow | None:
        """
        Roll `count` fresh dice into a player's hand.

        If the hand cannot take all of them, the hand is left untouched and
        the whole gain is returned as a pending overflow.

        Args:
            player_id: Receiving player
            count: Number of dice to add
            face: Fixed face for the new dice (random when None)

        Returns:
            PendingOverflow when the gain would exceed capacity, else None
        """
        count = validate_dice_count(count)
        hand = self._hand(player_id)
        if count == 0:
            return None
        if len(hand) + count > self.max_hand:
            logger.debug(
                "Hand of %s full (%d/%d); deferring %d dice",
                player_id, len(hand), self.max_hand, count,
            )
            return PendingOverflow(player_id=player_id, count=count)

        for _ in range(count):
            hand.append(self._mint(face or self.roll_face()))
        logger.debug("Added %d dice to %s (now %d)", count, player_id, len(hand))
        return None

    def remove_dice(self, player_id: str, count: int) -> int:
        """
        Destroy up to `count` random dice from a hand.

        Returns:
            Number of dice actually removed (floors at an empty hand)
        """
        count = validate_dice_count(count)
        hand = self._hand(player_id)
        removed = 0
        while hand and removed < count:
            self._destroy(hand.pop(self._rng.randrange(len(hand))))
            removed += 1
        return removed

    def reroll_hand(self, player_id: str) -> tuple[Face, ...]:
        """
        Replace every die in a hand with a freshly rolled one.

        Returns:
            The new faces
        """
        hand = self._hand(player_id)
        size = len(hand)
        for die_id in hand:
            self._destroy(die_id)
        hand[:] = [self._mint(self.roll_face()) for _ in range(size)]
        return self.faces(player_id)

    def steal_die(self, from_player: str, to_player: str) -> StealOutcome:
        """
        Move one die from `from_player` to `to_player`.

        Both hands are rerolled afterwards, so which die moved is irrelevant.
        When the stealer's hand is full the victim still loses the die and the
        stealer's gain becomes a pending overflow of one.
        """
        if from_player == to_player:
            raise ValueError("A player cannot steal from themselves.")
        victim_hand = self._hand(from_player)
        self._hand(to_player)
        if not victim_hand:
            logger.debug("%s has no dice for %s to steal", from_player, to_player)
            return StealOutcome(stolen=False)

        if self.is_full(to_player):
            self.remove_dice(from_player, 1)
            return StealOutcome(
                stolen=True,
                overflow=PendingOverflow(player_id=to_player, count=1),
            )

        self.remove_dice(from_player, 1)
        self.add_dice(to_player, 1)
        self.reroll_hand(from_player)
        self.reroll_hand(to_player)
        return StealOutcome(stolen=True)

    def send_to_pool(self, player_id: str, face: Face | str | None = None) -> Face | None:
        """
        Move one die from a hand into the pool.

        Args:
            player_id: Player losing the die
            face: Face the die lands on in the pool (random when None)

        Returns:
            The face placed in the pool, or None if the hand was empty
        """
        chosen = validate_face(face) if face is not None else None
        if self.remove_dice(player_id, 1) == 0:
            return None
        return self.place_in_pool(chosen or self.roll_face())

    # -- Pool operations -------------------------------------------------

    def place_in_pool(self, face: Face | str) -> Face:
        """Insert a brand-new die showing `face` into the pool."""
        face = validate_face(face)
        self._pool.append(self._mint(face))
        return face

    def reroll_pool(self) -> list[int]:
        """
        Re-roll every pool die in place.

        Returns:
            Ids of the pool dice that landed on the Pentagram face
        """
        self._pool = [self._mint(self.roll_face()) for die_id in self._retire_pool()]
        return [die_id for die_id in self._pool if self._faces[die_id] is Face.PENTAGRAM]

    def take_from_pool(self, die_id: int) -> Face:
        """Remove a specific die from the pool and return its face."""
        if die_id not in self._pool:
            raise KeyError(f"Die {die_id} is not in the pool")
        self._pool.remove(die_id)
        face = self._faces[die_id]
        self._destroy(die_id)
        return face

    # -- Scenario setup --------------------------------------------------

    def set_hand(self, player_id: str, faces: Sequence[Face | str]) -> tuple[Die, ...]:
        """Replace a hand with dice showing exactly `faces`."""
        if len(faces) > self.max_hand:
            raise ValueError(f"A hand holds at most {self.max_hand} dice, got {len(faces)}.")
        hand = self._hand(player_id)
        new_faces = [validate_face(f) for f in faces]
        for die_id in hand:
            self._destroy(die_id)
        hand[:] = [self._mint(face) for face in new_faces]
        return self.hand(player_id)

    def set_pool(self, faces: Sequence[Face | str]) -> tuple[Die, ...]:
        """Replace the pool with dice showing exactly `faces`."""
        new_faces = [validate_face(f) for f in faces]
        self._retire_pool()
        self._pool = [self._mint(face) for face in new_faces]
        return self.pool()

    # -- Internals -------------------------------------------------------

    def _hand(self, player_id: str) -> list[int]:
        try:
            return self._hands[player_id]
        except KeyError:
            raise KeyError(f"Unknown player {player_id!r}") from None

    def _mint(self, face: Face) -> int:
        die_id = self._next_id
        self._next_id += 1
        self._faces[die_id] = face
        return die_id

    def _destroy(self, die_id: int) -> None:
        del self._faces[die_id]

    def _retire_pool(self) -> list[int]:
        retired, self._pool = self._pool, []
        for die_id in retired:
            self._destroy(die_id)
        return retired
