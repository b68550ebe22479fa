"""
Devil's Dice - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise descriptive ValueError exceptions.
"""

from typing import Sequence

from devils_dice.engine.base import MAX_PLAYERS, MIN_PLAYERS, Face


def validate_player_ids(player_ids: Sequence[str]) -> tuple[str, ...]:
    """
    Validate the seating order of a table.

    Args:
        player_ids: Player identifiers in turn order

    Returns:
        Validated ids as a tuple

    Raises:
        ValueError: If the count is not 2-6, an id is empty, or ids repeat
    """
    ids = tuple(player_ids)
    if not (MIN_PLAYERS <= len(ids) <= MAX_PLAYERS):
        raise ValueError(
            f"Player count must be {MIN_PLAYERS}-{MAX_PLAYERS}, got {len(ids)}."
        )

    for i, player_id in enumerate(ids):
        if not isinstance(player_id, str) or not player_id:
            raise ValueError(f"Player id at index {i} must be a non-empty string.")

    if len(set(ids)) != len(ids):
        raise ValueError("Player ids must be unique.")

    return ids


def validate_face(face: Face | str) -> Face:
    """
    Normalize a face given as an enum member or its string value.

    Args:
        face: Face or face name such as "imp" / "IMP"

    Returns:
        The matching Face

    Raises:
        ValueError: If the value names no face
    """
    if isinstance(face, Face):
        return face
    if isinstance(face, str):
        normalized = face.strip().lower()
        for candidate in Face:
            if candidate.value == normalized:
                return candidate
    valid = ", ".join(f.value for f in Face)
    raise ValueError(f"Invalid die face {face!r}. Must be one of: {valid}.")


def validate_token_amount(amount: int) -> int:
    """
    Validate a token amount for a ledger operation.

    Args:
        amount: Number of tokens to move

    Returns:
        Validated amount

    Raises:
        ValueError: If amount is not a non-negative integer
    """
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValueError(f"Token amount must be an integer, got {type(amount).__name__}.")

    if amount < 0:
        raise ValueError(f"Token amount cannot be negative, got {amount}.")

    return amount


def validate_dice_count(count: int) -> int:
    """
    Validate a number of dice to add or remove.

    Raises:
        ValueError: If count is not a non-negative integer
    """
    if not isinstance(count, int) or isinstance(count, bool):
        raise ValueError(f"Dice count must be an integer, got {type(count).__name__}.")

    if count < 0:
        raise ValueError(f"Dice count cannot be negative, got {count}.")

    return count
