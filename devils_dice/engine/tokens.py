"""
Devil's Dice - Token Ledger

Per-player skull token balances. Every mutation is applied immediately and
no operation can drive a balance below zero.
"""

import logging
from typing import Iterable

from devils_dice.engine.validators import validate_token_amount

logger = logging.getLogger(__name__)


class TokenLedger:
    """Skull token balances for one table."""

    def __init__(self, player_ids: Iterable[str], starting_tokens: int = 0) -> None:
        starting_tokens = validate_token_amount(starting_tokens)
        self._balances: dict[str, int] = {pid: starting_tokens for pid in player_ids}

    def balance(self, player_id: str) -> int:
        try:
            return self._balances[player_id]
        except KeyError:
            raise KeyError(f"Unknown player {player_id!r}") from None

    def has(self, player_id: str, amount: int) -> bool:
        """Whether the player can afford `amount` tokens."""
        return self.balance(player_id) >= validate_token_amount(amount)

    def balances(self) -> dict[str, int]:
        """Copy of every balance keyed by player id."""
        return dict(self._balances)

    def credit(self, player_id: str, amount: int) -> int:
        """Add tokens to a player. Returns the new balance."""
        amount = validate_token_amount(amount)
        self._balances[player_id] = self.balance(player_id) + amount
        logger.debug("Credited %d tokens to %s", amount, player_id)
        return self._balances[player_id]

    def debit(self, player_id: str, amount: int) -> int:
        """
        Take up to `amount` tokens from a player.

        Returns:
            Tokens actually taken (capped at the balance)
        """
        amount = validate_token_amount(amount)
        taken = min(amount, self.balance(player_id))
        self._balances[player_id] -= taken
        logger.debug("Debited %d of %d tokens from %s", taken, amount, player_id)
        return taken

    def transfer(self, from_player: str, to_player: str, amount: int) -> int:
        """
        Move up to `amount` tokens between players.

        Returns:
            Tokens actually moved (capped at the source balance)
        """
        self.balance(to_player)
        moved = self.debit(from_player, amount)
        self._balances[to_player] += moved
        return moved
