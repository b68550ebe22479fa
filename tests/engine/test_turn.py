"""
Devil's Dice - Turn State Machine Tests

Full-table flows: declarations, challenge and block windows, overflow,
win checks and rolloffs, plus rejection of illegal intents.
"""

import pytest

from devils_dice.config.settings import Settings
from devils_dice.engine.base import ActionKind, Face, GameConfig, GamePhase
from devils_dice.engine.errors import IllegalIntentError, IntentRejection, InvariantViolation
from devils_dice.engine.intents import ChooseOverflowFace, Pass
from devils_dice.engine.turn import TurnStateMachine
from devils_dice.realtime.events import GameEvent

F, P, S, T, K, I = (
    Face.FLAME, Face.PENTAGRAM, Face.SCYTHE, Face.TRIDENT, Face.SKULL, Face.IMP,
)


def rejected(call, *args, **kwargs) -> IntentRejection:
    """Run an engine call that must be rejected and return the reason."""
    with pytest.raises(IllegalIntentError) as exc_info:
        call(*args, **kwargs)
    return exc_info.value.reason


# =============================================================================
# SETUP
# =============================================================================

class TestStart:
    """Tests for table setup."""

    def test_starting_tokens_and_dice(self, engine):
        for pid in ("ana", "ben", "cy"):
            assert engine.tokens.balance(pid) == 1
            assert engine.dice.hand_size(pid) == 2
        assert engine.dice.pool() == ()

    def test_first_player_to_act(self, engine):
        assert engine.phase == GamePhase.PLAYER_TURN
        assert engine.current_player == "ana"
        assert engine.active_players == ("ana",)
        assert engine.state.turn_number == 1

    def test_starting_hands_are_private(self, engine, bus):
        rolled = bus.events_of(GameEvent.DICE_ROLLED)
        assert [e.private_to for e in rolled] == ["ana", "ben", "cy"]
        assert bus.events_of(GameEvent.GAME_STARTED)[0].data["players"] == ["ana", "ben", "cy"]

    def test_start_twice_rejected(self, engine):
        assert rejected(engine.start) == IntentRejection.WRONG_PHASE

    def test_intent_before_start(self, bus):
        engine = TurnStateMachine(["ana", "ben"], bus=bus)
        assert engine.phase == GamePhase.SETUP
        reason = rejected(engine.declare, "ana", ActionKind.RAISE_HELL)
        assert reason == IntentRejection.GAME_NOT_STARTED

    def test_config_player_count_must_match(self):
        with pytest.raises(ValueError, match="Config is for 3 players"):
            TurnStateMachine(["ana", "ben"], GameConfig(num_players=3))

    def test_custom_starting_amounts(self, make_engine):
        engine = make_engine(("ana", "ben"), starting_tokens=4, starting_dice=3)
        assert engine.tokens.balances() == {"ana": 4, "ben": 4}
        assert engine.dice.hand_size("ben") == 3


# =============================================================================
# CORE SCENARIOS
# =============================================================================

class TestUnchallengedAction:
    """Raise Hell with everyone passing."""

    def test_raise_hell_resolves(self, engine, bus):
        engine.dice.set_hand("ana", [F, K])

        engine.declare("ana", ActionKind.RAISE_HELL)
        assert engine.phase == GamePhase.CHALLENGE_WINDOW
        assert set(engine.active_players) == {"ben", "cy"}

        engine.pass_opportunity("ben")
        assert engine.phase == GamePhase.CHALLENGE_WINDOW
        assert engine.active_players == ("cy",)
        engine.pass_opportunity("cy")

        assert engine.tokens.balance("ana") == 2
        assert engine.dice.hand_size("ana") == 2
        assert engine.phase == GamePhase.PLAYER_TURN
        assert engine.current_player == "ben"
        assert engine.context is None
        assert len(bus.events_of(GameEvent.ACTION_RESOLVED)) == 1

    def test_harvest_skulls_gains_two(self, engine):
        engine.declare("ana", ActionKind.HARVEST_SKULLS)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")
        assert engine.tokens.balance("ana") == 3

    def test_turn_order_wraps(self, engine):
        for pid in ("ana", "ben", "cy"):
            others = [p for p in ("ana", "ben", "cy") if p != pid]
            engine.declare(pid, ActionKind.HARVEST_SKULLS)
            for other in others:
                engine.pass_opportunity(other)
        assert engine.current_player == "ana"
        assert engine.state.turn_number == 4


class TestChallengedAction:
    """Challenges against the declarer's claim."""

    def test_bluffed_reap_soul_is_caught(self, engine, bus):
        engine.tokens.credit("ana", 1)
        engine.dice.set_hand("ana", [F, K])

        engine.declare("ana", ActionKind.REAP_SOUL, "ben")
        engine.challenge("cy")

        assert engine.dice.hand_size("ana") == 1
        assert engine.dice.hand_size("cy") == 3
        assert engine.dice.hand_size("ben") == 2
        assert engine.tokens.balance("ana") == 2
        assert engine.phase == GamePhase.PLAYER_TURN
        assert engine.current_player == "ben"

        success = bus.events_of(GameEvent.CHALLENGE_SUCCEEDED)[0]
        assert success.player_id == "cy"
        assert success.data["revealed"] == ["flame", "skull"]
        assert bus.events_of(GameEvent.ACTION_CANCELLED)[0].player_id == "ana"

    def test_caught_bluff_skips_win_check(self, engine, phase_log):
        engine.dice.set_hand("ana", [K, K])
        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.challenge("ben")
        assert phase_log()[-3:] == ["challenge_window", "resolve_challenge", "player_turn"]

    def test_failed_challenge_costs_a_die(self, engine, bus):
        engine.dice.set_hand("ana", [F, K])

        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.challenge("ben")

        assert engine.dice.hand_size("ben") == 1
        assert engine.dice.pool_faces() == (K,)
        assert engine.tokens.balance("ana") == 2
        assert engine.current_player == "ben"
        failed = bus.events_of(GameEvent.CHALLENGE_FAILED)[0]
        assert failed.player_id == "ben"
        assert failed.data["claimant_id"] == "ana"

    def test_failed_challenge_opens_block_window(self, engine):
        engine.dice.set_hand("ana", [T, K])
        engine.declare("ana", ActionKind.EXTORT, "ben")
        engine.challenge("cy")
        assert engine.phase == GamePhase.BLOCK_WINDOW
        assert engine.active_players == ("ben",)

    def test_imp_counts_only_for_the_set(self, engine):
        engine.dice.set_hand("ana", [I, K])
        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.challenge("ben")
        assert engine.dice.hand_size("ana") == 1


class TestImpsSet:
    """Imp's Set claims and the overflow it can cause."""

    def test_full_hand_overflows(self, engine, phase_log):
        engine.dice.set_hand("ana", [I, I, I, K, K, K])

        engine.declare("ana", ActionKind.IMPS_SET)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")

        assert engine.phase == GamePhase.CHOOSE_OVERFLOW_FACE
        assert engine.active_players == ("ana",)
        assert engine.context.pending_overflow.count == 1

        engine.choose_overflow_face("ana", "imp")

        assert engine.dice.hand_size("ana") == 6
        assert engine.dice.pool_faces() == (I,)
        log = phase_log()
        assert log.index("check_win", log.index("choose_overflow_face")) > 0
        assert engine.current_player == "ben"

    def test_small_hand_skips_challenge_window(self, engine, phase_log):
        engine.dice.set_hand("ana", [F])
        engine.declare("ana", ActionKind.IMPS_SET)
        assert "challenge_window" not in phase_log()
        assert engine.dice.hand_size("ana") == 2
        assert engine.current_player == "ben"

    def test_invalid_set_is_caught(self, engine):
        engine.dice.set_hand("ana", [F, S])
        engine.declare("ana", ActionKind.IMPS_SET)
        engine.challenge("ben")
        assert engine.dice.hand_size("ana") == 1
        assert engine.dice.hand_size("ben") == 3

    def test_valid_set_adds_a_die(self, engine):
        engine.dice.set_hand("ana", [F, I, F])
        engine.declare("ana", ActionKind.IMPS_SET)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")
        assert engine.dice.hand_size("ana") == 4


class TestRolloff:
    """Simultaneous winners."""

    def test_tiebreak_face_decides(self, engine, bus, phase_log):
        engine.dice.set_pool([F, P, S, T, K])
        engine.dice.set_hand("ana", [I, I, K])
        engine.dice.set_hand("ben", [I, F])

        engine.declare("ana", ActionKind.HARVEST_SKULLS)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")

        assert "rolloff" in phase_log()
        assert engine.phase == GamePhase.GAME_END
        assert engine.winner == "ana"
        assert engine.state.rolloff_counts == {"ana": 2, "ben": 1}
        assert bus.events_of(GameEvent.GAME_WON)[0].player_id == "ana"

    def test_equal_counts_go_to_seat_order(self, engine):
        engine.dice.set_pool([F, P, S, T, K, I])
        engine.dice.set_hand("ben", [F, F])
        engine.dice.set_hand("cy", [F, F])
        engine.dice.set_hand("ana", [F, K])

        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")

        assert engine.winner == "ana"

    def test_single_winner_has_no_rolloff(self, engine, phase_log):
        engine.dice.set_pool([F, P, S, T, I])
        engine.dice.set_hand("ben", [F, F])
        engine.dice.set_hand("cy", [F, F])

        engine.declare("ana", ActionKind.HARVEST_SKULLS)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")

        assert engine.winner == "ana"
        assert "rolloff" not in phase_log()

    def test_no_intents_after_game_end(self, engine):
        engine.dice.set_pool([F, P, S, T, I])
        engine.dice.set_hand("ben", [F, F])
        engine.dice.set_hand("cy", [F, F])
        engine.declare("ana", ActionKind.HARVEST_SKULLS)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")

        assert rejected(engine.declare, "ben", ActionKind.RAISE_HELL) == IntentRejection.GAME_OVER
        assert engine.progression() == 100


class TestSatansSteal:
    """The unchallengeable, unblockable action."""

    def test_no_windows(self, engine, phase_log):
        engine.tokens.credit("ana", 5)
        engine.declare("ana", ActionKind.SATANS_STEAL, "ben")

        assert "challenge_window" not in phase_log()
        assert "block_window" not in phase_log()
        assert engine.tokens.balance("ana") == 0
        assert engine.dice.hand_size("ana") == 3
        assert engine.dice.hand_size("ben") == 1
        assert engine.current_player == "ben"

    def test_put_in_pool_with_chosen_face(self, engine):
        engine.tokens.credit("ana", 5)
        engine.declare("ana", ActionKind.SATANS_STEAL, "ben", put_in_pool=True, pool_face="trident")

        assert engine.dice.hand_size("ana") == 2
        assert engine.dice.hand_size("ben") == 1
        assert engine.dice.pool_faces() == (T,)

    def test_needs_six_tokens(self, engine):
        engine.tokens.credit("ana", 4)
        reason = rejected(engine.declare, "ana", ActionKind.SATANS_STEAL, "ben")
        assert reason == IntentRejection.INSUFFICIENT_TOKENS
        assert engine.tokens.balance("ana") == 5

    def test_steal_from_empty_hand(self, engine):
        engine.tokens.credit("ana", 5)
        engine.dice.set_hand("ben", [])
        engine.declare("ana", ActionKind.SATANS_STEAL, "ben")
        assert engine.dice.hand_size("ana") == 2
        assert engine.tokens.balance("ana") == 0

    def test_bad_pool_face(self, engine):
        engine.tokens.credit("ana", 5)
        reason = rejected(
            engine.declare, "ana", ActionKind.SATANS_STEAL, "ben",
            put_in_pool=True, pool_face="goat",
        )
        assert reason == IntentRejection.INVALID_FACE


# =============================================================================
# BLOCKS
# =============================================================================

@pytest.fixture
def extorting(engine):
    """Ana truthfully extorts ben; both opponents pass; ben may block."""
    engine.dice.set_hand("ana", [T, K])
    engine.declare("ana", ActionKind.EXTORT, "ben")
    engine.pass_opportunity("ben")
    engine.pass_opportunity("cy")
    return engine


class TestBlocks:
    """Block windows and challenges against blocks."""

    def test_only_target_may_block(self, extorting):
        assert extorting.phase == GamePhase.BLOCK_WINDOW
        assert extorting.legal_intents("ben") == ["block", "pass"]
        assert rejected(extorting.block, "cy") == IntentRejection.NOT_ACTIVE

    def test_target_passes(self, extorting):
        extorting.pass_opportunity("ben")
        assert extorting.tokens.balance("ana") == 2
        assert extorting.tokens.balance("ben") == 0
        assert extorting.current_player == "ben"

    def test_extort_capped_at_balance(self, extorting, bus):
        extorting.tokens.credit("ben", 5)
        extorting.pass_opportunity("ben")
        assert extorting.tokens.balance("ana") == 4
        assert extorting.tokens.balance("ben") == 3
        moved = {e.data["moved"] for e in bus.events_of(GameEvent.TOKENS_CHANGED) if "moved" in e.data}
        assert moved == {3}

    def test_unchallenged_block_cancels_action(self, extorting, bus):
        extorting.block("ben")
        assert extorting.phase == GamePhase.CHALLENGE_WINDOW
        assert set(extorting.active_players) == {"ana", "cy"}

        extorting.pass_opportunity("ana")
        extorting.pass_opportunity("cy")

        assert extorting.tokens.balances() == {"ana": 1, "ben": 1, "cy": 1}
        assert bus.events_of(GameEvent.ACTION_BLOCKED)[0].player_id == "ben"
        assert extorting.current_player == "ben"

    def test_bluffed_block_is_voided(self, extorting):
        extorting.block("ben")
        extorting.challenge("ana")

        assert extorting.dice.hand_size("ana") == 3
        assert extorting.dice.hand_size("ben") == 1
        assert extorting.tokens.balance("ana") == 2
        assert extorting.tokens.balance("ben") == 0
        assert extorting.current_player == "ben"

    def test_truthful_block_survives_challenge(self, extorting):
        extorting.dice.set_hand("ben", [T, F])
        extorting.block("ben")
        extorting.challenge("cy")

        assert extorting.dice.hand_size("cy") == 1
        assert len(extorting.dice.pool()) == 1
        assert extorting.tokens.balances() == {"ana": 1, "ben": 1, "cy": 1}
        assert extorting.current_player == "ben"

    def test_reap_soul_blocked_with_pentagram(self, engine):
        engine.tokens.credit("ana", 1)
        engine.dice.set_hand("ana", [S, K])
        engine.dice.set_hand("ben", [P, K])
        engine.declare("ana", ActionKind.REAP_SOUL, "ben")
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")
        engine.block("ben")
        engine.challenge("ana")

        # Block held: ana pays nothing and steals nothing
        assert engine.tokens.balance("ana") == 2
        assert engine.dice.hand_size("ben") == 2
        assert engine.dice.hand_size("ana") == 1

    def test_reap_soul_resolves(self, engine):
        engine.tokens.credit("ana", 1)
        engine.dice.set_hand("ana", [S, K])
        engine.declare("ana", ActionKind.REAP_SOUL, "ben")
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")
        engine.pass_opportunity("ben")

        assert engine.tokens.balance("ana") == 0
        assert engine.dice.hand_size("ana") == 3
        assert engine.dice.hand_size("ben") == 1

    def test_unblockable_action(self, engine):
        engine.declare("ana", ActionKind.RAISE_HELL)
        assert rejected(engine.block, "ben") == IntentRejection.NOT_BLOCKABLE


# =============================================================================
# OVERFLOW AND PENTAGRAM
# =============================================================================

class TestOverflow:
    """Deferred gains resolved by choosing a pool face."""

    def test_full_challenger_overflows(self, engine, bus):
        engine.dice.set_hand("cy", [K] * 6)
        engine.dice.set_hand("ana", [K, K])
        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.challenge("cy")

        assert engine.phase == GamePhase.CHOOSE_OVERFLOW_FACE
        assert engine.active_players == ("cy",)
        assert engine.dice.hand_size("ana") == 1
        assert engine.legal_intents("cy") == ["chooseOverflowFace"]
        assert bus.events_of(GameEvent.OVERFLOW_PENDING)[0].data["count"] == 1

        engine.choose_overflow_face("cy", Face.FLAME)

        assert engine.dice.pool_faces() == (F,)
        assert engine.dice.hand_size("cy") == 6
        assert engine.current_player == "ben"

    def test_invalid_face_leaves_state(self, engine):
        engine.dice.set_hand("ana", [I, I, I, I, I, I])
        engine.declare("ana", ActionKind.IMPS_SET)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")

        assert rejected(engine.choose_overflow_face, "ana", "goat") == IntentRejection.INVALID_FACE
        assert engine.phase == GamePhase.CHOOSE_OVERFLOW_FACE
        assert engine.dice.pool() == ()

    def test_only_owner_chooses(self, engine):
        engine.dice.set_hand("ana", [I] * 6)
        engine.declare("ana", ActionKind.IMPS_SET)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")
        assert rejected(engine.choose_overflow_face, "ben", "imp") == IntentRejection.NOT_ACTIVE


class TestPentagram:
    """Pentagram rerolls the pool and harvests a Pentagram die."""

    def test_harvests_pentagram(self, make_engine):
        engine = make_engine(face=Face.PENTAGRAM)
        engine.dice.set_pool([F, K])
        engine.declare("ana", ActionKind.PENTAGRAM)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")

        assert engine.dice.faces("ana") == (P, P, P)
        assert engine.dice.pool_faces() == (P,)

    def test_no_pentagram_rolled(self, engine, bus):
        engine.dice.set_pool([F])
        engine.dice.set_hand("ana", [P, K])
        engine.declare("ana", ActionKind.PENTAGRAM)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")

        assert engine.dice.hand_size("ana") == 2
        assert engine.dice.pool_faces() == (K,)
        assert bus.events_of(GameEvent.POOL_REROLLED)[0].data["harvested"] is False


# =============================================================================
# REJECTIONS
# =============================================================================

class TestRejections:
    """Illegal intents are refused without touching the table."""

    def test_not_your_turn(self, engine):
        assert rejected(engine.declare, "ben", ActionKind.RAISE_HELL) == IntentRejection.NOT_YOUR_TURN

    def test_unknown_player(self, engine):
        assert rejected(engine.pass_opportunity, "zed") == IntentRejection.UNKNOWN_PLAYER

    def test_wrong_phase(self, engine):
        assert rejected(engine.pass_opportunity, "ana") == IntentRejection.WRONG_PHASE
        assert rejected(engine.challenge, "ben") == IntentRejection.WRONG_PHASE

    def test_insufficient_tokens(self, engine):
        reason = rejected(engine.declare, "ana", ActionKind.REAP_SOUL, "ben")
        assert reason == IntentRejection.INSUFFICIENT_TOKENS
        assert engine.phase == GamePhase.PLAYER_TURN
        assert engine.context is None

    @pytest.mark.parametrize("target", [None, "ana", "zed"])
    def test_bad_target(self, engine, target):
        reason = rejected(engine.declare, "ana", ActionKind.EXTORT, target)
        assert reason == IntentRejection.INVALID_TARGET

    def test_untargeted_action_with_target(self, engine):
        reason = rejected(engine.declare, "ana", ActionKind.RAISE_HELL, "ben")
        assert reason == IntentRejection.INVALID_TARGET

    def test_pool_options_only_for_steal(self, engine):
        reason = rejected(engine.declare, "ana", ActionKind.HARVEST_SKULLS, put_in_pool=True)
        assert reason == IntentRejection.INVALID_PAYLOAD

    def test_declarer_cannot_pass_own_claim(self, engine):
        engine.declare("ana", ActionKind.RAISE_HELL)
        before = engine.active_players
        assert rejected(engine.pass_opportunity, "ana") == IntentRejection.NOT_ACTIVE
        assert engine.active_players == before
        assert engine.phase == GamePhase.CHALLENGE_WINDOW

    def test_double_pass(self, engine):
        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.pass_opportunity("ben")
        assert rejected(engine.pass_opportunity, "ben") == IntentRejection.NOT_ACTIVE
        assert engine.active_players == ("cy",)

    def test_not_an_intent(self, engine):
        assert rejected(engine.submit, "pass") == IntentRejection.INVALID_PAYLOAD


class TestInvariants:
    """Post-intent consistency checks."""

    def test_system_phase_is_a_violation(self, engine):
        engine.state.phase = GamePhase.RESOLVE_ACTION
        with pytest.raises(InvariantViolation, match="resolve_action"):
            engine._check_invariants()

    def test_overflow_phase_needs_overflow(self, engine):
        engine.state.phase = GamePhase.CHOOSE_OVERFLOW_FACE
        with pytest.raises(InvariantViolation, match="pending overflow"):
            engine._check_invariants()


# =============================================================================
# QUERIES AND PAYLOADS
# =============================================================================

class TestQueries:
    """Read-only helpers for presentation layers."""

    def test_legal_intents_on_turn(self, engine):
        assert engine.legal_intents("ana") == [
            "declareRaiseHell",
            "declareHarvest",
            "declareExtort",
            "declarePentagram",
            "declareImpsSet",
        ]
        assert engine.legal_intents("ben") == []

    def test_legal_intents_with_tokens(self, engine):
        engine.tokens.credit("ana", 5)
        assert "declareSatansSteal" in engine.legal_intents("ana")
        assert "declareReapSoul" in engine.legal_intents("ana")

    def test_legal_intents_in_window(self, engine):
        engine.declare("ana", ActionKind.RAISE_HELL)
        assert engine.legal_intents("ben") == ["challenge", "pass"]
        assert engine.legal_intents("ana") == []

    def test_default_intent(self, engine):
        assert engine.default_intent("ana") is None
        engine.declare("ana", ActionKind.RAISE_HELL)
        assert engine.default_intent("ben") == Pass(player_id="ben")
        assert engine.default_intent("ana") is None

    def test_default_overflow_face(self, engine):
        engine.dice.set_hand("ana", [I] * 6)
        engine.declare("ana", ActionKind.IMPS_SET)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")
        intent = engine.default_intent("ana")
        assert intent == ChooseOverflowFace(player_id="ana", face=Face.SKULL)
        engine.submit(intent)
        assert engine.dice.pool_faces() == (K,)

    def test_progression(self, engine):
        assert engine.progression() == 17
        engine.dice.set_pool([F, P, S, T])
        assert engine.progression() == 83

    def test_snapshot_hides_other_hands(self, engine):
        engine.dice.set_hand("ana", [F, S, T])
        snap = engine.snapshot("ben")
        assert [d.face for d in snap.my_hand] == ["skull", "skull"]
        assert snap.dice_counts == {"ana": 3, "ben": 2, "cy": 2}
        assert snap.current_player == "ana"

    def test_snapshot_unknown_viewer(self, engine):
        assert rejected(engine.snapshot, "zed") == IntentRejection.UNKNOWN_PLAYER


class TestPayloads:
    """Tagged payload submission."""

    def test_declare_from_payload(self, engine):
        engine.submit_payload({"kind": "declareRaiseHell", "actingPlayer": "ana"})
        assert engine.phase == GamePhase.CHALLENGE_WINDOW

    def test_full_round_from_payloads(self, engine):
        engine.dice.set_hand("ana", [T, K])
        engine.submit_payload({"kind": "declareExtort", "actingPlayer": "ana", "target": "ben"})
        engine.submit_payload({"kind": "pass", "actingPlayer": "ben"})
        engine.submit_payload({"kind": "pass", "actingPlayer": "cy"})
        engine.submit_payload({"kind": "pass", "actingPlayer": "ben"})
        assert engine.tokens.balance("ana") == 2

    def test_unknown_kind(self, engine):
        reason = rejected(engine.submit_payload, {"kind": "dance", "actingPlayer": "ana"})
        assert reason == IntentRejection.INVALID_PAYLOAD


# =============================================================================
# HAND UPDATES AND SEEDED TABLES
# =============================================================================

def private_hands(bus, player_id):
    """Dice lists sent privately to one player, oldest first."""
    return [
        p.data["dice"] for p in bus.history
        if p.private_to == player_id
        and p.event in (GameEvent.DICE_ROLLED, GameEvent.DICE_REROLLED)
    ]


class TestHandUpdates:
    """Players are told their hand whenever it loses a die."""

    def test_failed_challenger_gets_new_hand(self, engine, bus):
        engine.dice.set_hand("ana", [F, K])
        bus.clear_history()

        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.challenge("ben")

        hands = private_hands(bus, "ben")
        assert len(hands) == 1
        assert hands[-1] == [
            {"id": d.id, "face": d.face.value} for d in engine.dice.hand("ben")
        ]
        assert len(hands[-1]) == 1

    def test_steal_to_pool_updates_victim(self, engine, bus):
        engine.tokens.credit("ana", 5)
        bus.clear_history()

        engine.declare("ana", ActionKind.SATANS_STEAL, "ben", put_in_pool=True)

        hands = private_hands(bus, "ben")
        assert len(hands) == 1
        assert len(hands[-1]) == 1

    def test_overflowing_steal_updates_victim(self, engine, bus):
        engine.dice.set_hand("cy", [K] * 6)
        engine.dice.set_hand("ana", [K, K])
        bus.clear_history()

        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.challenge("cy")

        assert len(private_hands(bus, "ana")[-1]) == 1
        assert private_hands(bus, "cy") == []

    def test_challenger_cleared_after_failed_challenge(self, engine):
        engine.dice.set_hand("ana", [T, K])
        engine.declare("ana", ActionKind.EXTORT, "ben")
        engine.challenge("cy")

        assert engine.phase == GamePhase.BLOCK_WINDOW
        assert engine.context.challenger_id is None
        assert engine.snapshot("ben").challenger_id is None

    def test_pool_face_needs_put_in_pool(self, engine):
        engine.tokens.credit("ana", 5)
        reason = rejected(engine.declare, "ana", ActionKind.SATANS_STEAL, "ben", pool_face="imp")
        assert reason == IntentRejection.INVALID_PAYLOAD
        assert engine.tokens.balance("ana") == 6
        assert engine.context is None


class TestFromSettings:
    """Tables built from application settings."""

    def test_seeded_tables_repeat(self):
        settings = Settings(_env_file=None, rng_seed=99, starting_tokens=3, starting_dice=4)
        tables = [
            TurnStateMachine.from_settings(["ana", "ben"], settings, table_id="t-seed")
            for _ in range(2)
        ]
        for table in tables:
            table.start()

        first, second = tables
        assert first.state.config.starting_tokens == 3
        assert first.tokens.balances() == {"ana": 3, "ben": 3}
        for pid in ("ana", "ben"):
            assert first.dice.hand_size(pid) == 4
            assert first.dice.faces(pid) == second.dice.faces(pid)
        assert first.state.table_id == "t-seed"
