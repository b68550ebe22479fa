"""
Devil's Dice - Test Configuration and Fixtures

Common fixtures and helpers for all test modules.
"""

import random

import pytest

from devils_dice.engine.base import Face, GameConfig
from devils_dice.engine.turn import TurnStateMachine
from devils_dice.realtime.bus import EventBus
from devils_dice.realtime.events import GameEvent


class FixedFaceRandom(random.Random):
    """Seeded RNG whose face draws always land on `face`."""

    face = Face.SKULL

    def choice(self, seq):
        if self.face in seq:
            return self.face
        return super().choice(seq)


def fixed_rng(face: Face = Face.SKULL) -> FixedFaceRandom:
    rng = FixedFaceRandom(1234)
    rng.face = face
    return rng


def phases_entered(bus: EventBus) -> list[str]:
    """Phase values in the order the engine entered them."""
    return [p.data["phase"] for p in bus.events_of(GameEvent.PHASE_CHANGED)]


# =============================================================================
# TABLE FIXTURES
# =============================================================================

@pytest.fixture
def players() -> list[str]:
    return ["ana", "ben", "cy"]


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def make_engine(bus):
    """Factory for started tables with a fixed-face RNG."""

    def _make(
        player_ids=("ana", "ben", "cy"),
        face: Face = Face.SKULL,
        **config_overrides,
    ) -> TurnStateMachine:
        config = GameConfig(num_players=len(player_ids), **config_overrides)
        engine = TurnStateMachine(
            list(player_ids), config, table_id="t-1", bus=bus, rng=fixed_rng(face)
        )
        engine.start()
        return engine

    return _make


@pytest.fixture
def engine(make_engine) -> TurnStateMachine:
    """Started three-player table (ana, ben, cy); ana to act."""
    return make_engine()


# =============================================================================
# CLAIM TEST DATA
# =============================================================================

@pytest.fixture
def imps_set_hands() -> dict[str, tuple[tuple[Face, ...], bool]]:
    """
    Imp's Set hands with expected validity.

    Returns:
        Dict mapping name to (faces, is_valid)
    """
    return {
        "empty": ((), False),
        "single_imp": ((Face.IMP,), True),
        "single_skull": ((Face.SKULL,), True),
        "all_imps": ((Face.IMP, Face.IMP, Face.IMP), True),
        "all_flames": ((Face.FLAME, Face.FLAME), True),
        "flames_and_imps": ((Face.FLAME, Face.IMP, Face.FLAME, Face.IMP), True),
        "mixed_pair": ((Face.FLAME, Face.SKULL), False),
        "mixed_with_imp": ((Face.IMP, Face.SCYTHE, Face.TRIDENT), False),
        "six_of_a_kind": ((Face.PENTAGRAM,) * 6, True),
    }


@pytest.fixture
def phase_log(bus):
    """Callable returning the phases entered so far on the shared bus."""
    return lambda: phases_entered(bus)
