"""
Devil's Dice - Win Evaluator

A player wins by seeing all six faces across their own hand and Satan's pool.
Simultaneous winners go to a rolloff decided by the tie-break face count.
"""

import logging
from typing import Sequence

from devils_dice.engine.base import ALL_FACES, Face
from devils_dice.engine.dice import DicePoolManager

logger = logging.getLogger(__name__)


class WinEvaluator:
    """Reads a table's dice to find winners; never mutates anything."""

    def __init__(self, dice: DicePoolManager, tiebreak_face: Face = Face.IMP) -> None:
        self._dice = dice
        self.tiebreak_face = tiebreak_face

    def visible_faces(self, player_id: str) -> set[Face]:
        """Distinct faces across a player's hand and the pool."""
        return set(self._dice.faces(player_id)) | set(self._dice.pool_faces())

    def has_won(self, player_id: str) -> bool:
        """True iff hand + pool show all six faces."""
        return self.visible_faces(player_id) >= set(ALL_FACES)

    def find_winners(self) -> list[str]:
        """Every player holding a complete set, in seating order."""
        return [pid for pid in self._dice.player_ids if self.has_won(pid)]

    def count_tiebreak_symbol(self, player_id: str) -> int:
        """Tie-break faces in a player's hand plus the pool."""
        faces = self._dice.faces(player_id) + self._dice.pool_faces()
        return sum(1 for face in faces if face is self.tiebreak_face)

    def rolloff(self, tied: Sequence[str]) -> tuple[str, dict[str, int]]:
        """
        Break a tie between simultaneous winners.

        The highest tie-break count wins. A further tie goes to the first
        tied player in the given order.

        Returns:
            (winner id, tie-break count per tied player)
        """
        if not tied:
            raise ValueError("Rolloff needs at least one player.")
        counts = {pid: self.count_tiebreak_symbol(pid) for pid in tied}
        best = max(counts.values())
        winner = next(pid for pid in tied if counts[pid] == best)
        logger.info("Rolloff %s -> %s", counts, winner)
        return winner, counts

    def progression(self) -> int:
        """Best distinct-face coverage on the table as a 0-100 percentage."""
        best = max(
            (len(self.visible_faces(pid)) for pid in self._dice.player_ids),
            default=0,
        )
        return round(best * 100 / len(ALL_FACES))
