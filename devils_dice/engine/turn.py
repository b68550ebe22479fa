"""
Devil's Dice - Turn State Machine

Orchestrates a table: declarations, the challenge and block windows, claim
resolution, action effects, hand overflow, win checks and rolloffs.

Flow:
    PLAYER_TURN -> CHALLENGE_WINDOW -> (RESOLVE_CHALLENGE) -> BLOCK_WINDOW
    -> RESOLVE_ACTION -> CHECK_WIN -> (CHOOSE_OVERFLOW_FACE | ROLLOFF)
    -> PLAYER_TURN or GAME_END

Intents are processed one at a time to completion. System phases
(RESOLVE_*, CHECK_WIN, ROLLOFF) run inside the intent that reached them, so
after `submit` returns the table always waits on players or has ended.
Every intent is fully validated before the first write; a rejected intent
raises `IllegalIntentError` and leaves the table untouched.
"""

import logging
import random
from typing import Any, Callable, Sequence

from devils_dice.config.settings import Settings, get_settings
from devils_dice.engine.base import ActionKind, Face, GameConfig, GamePhase
from devils_dice.engine.claims import Claim, satisfies
from devils_dice.engine.dice import DicePoolManager, StealOutcome
from devils_dice.engine.errors import IllegalIntentError, IntentRejection, InvariantViolation
from devils_dice.engine.intents import (
    DECLARE_KINDS,
    Block,
    Challenge,
    ChooseOverflowFace,
    DeclareAction,
    Intent,
    Pass,
    parse_intent,
)
from devils_dice.engine.snapshot import TableSnapshot, build_snapshot
from devils_dice.engine.state import StealDecision, TableState, TurnContext
from devils_dice.engine.tokens import TokenLedger
from devils_dice.engine.validators import validate_face, validate_player_ids
from devils_dice.engine.win import WinEvaluator
from devils_dice.realtime.bus import EventBus
from devils_dice.realtime.events import EventPayload, GameEvent

logger = logging.getLogger(__name__)

_WINDOW_PHASES = (GamePhase.CHALLENGE_WINDOW, GamePhase.BLOCK_WINDOW)


class TurnStateMachine:
    """
    Authoritative engine for one Devil's Dice table.

    Usage:
        engine = TurnStateMachine(["ana", "ben", "cy"])
        engine.start()
        engine.declare("ana", ActionKind.RAISE_HELL)
        engine.pass_opportunity("ben")
        engine.pass_opportunity("cy")
    """

    def __init__(
        self,
        player_ids: Sequence[str],
        config: GameConfig | None = None,
        *,
        table_id: str = "table",
        bus: EventBus | None = None,
        rng: random.Random | None = None,
    ) -> None:
        ids = validate_player_ids(player_ids)
        config = config or GameConfig(num_players=len(ids))
        if config.num_players != len(ids):
            raise ValueError(
                f"Config is for {config.num_players} players but {len(ids)} were seated."
            )

        self._rng = rng or random.Random()
        dice = DicePoolManager(ids, max_hand=config.max_hand, rng=self._rng)
        self.state = TableState(
            table_id=table_id,
            player_ids=ids,
            config=config,
            dice=dice,
            tokens=TokenLedger(ids),
        )
        self.bus = bus or EventBus()
        self.win = WinEvaluator(dice, tiebreak_face=config.tiebreak_face)

    @classmethod
    def from_settings(
        cls,
        player_ids: Sequence[str],
        settings: Settings | None = None,
        *,
        table_id: str = "table",
        bus: EventBus | None = None,
    ) -> "TurnStateMachine":
        """Build a table from application settings (seeded if configured)."""
        settings = settings or get_settings()
        ids = validate_player_ids(player_ids)
        return cls(
            ids,
            GameConfig.from_settings(settings, num_players=len(ids)),
            table_id=table_id,
            bus=bus,
            rng=random.Random(settings.rng_seed),
        )

    # -- Read-only views -------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    @property
    def dice(self) -> DicePoolManager:
        return self.state.dice

    @property
    def tokens(self) -> TokenLedger:
        return self.state.tokens

    @property
    def context(self) -> TurnContext | None:
        return self.state.context

    @property
    def current_player(self) -> str:
        return self.state.current_player

    @property
    def active_players(self) -> tuple[str, ...]:
        """Players allowed to submit an intent in the current phase."""
        return tuple(self.state.active_players)

    @property
    def winner(self) -> str | None:
        return self.state.winner_id

    def snapshot(self, viewer_id: str) -> TableSnapshot:
        """What `viewer_id` is allowed to see of the table right now."""
        self._require_player(viewer_id)
        return build_snapshot(self.state, viewer_id)

    def legal_intents(self, player_id: str) -> list[str]:
        """Payload kinds `player_id` may submit in the current phase."""
        self._require_player(player_id)
        state = self.state
        if player_id not in state.active_players:
            return []
        if state.phase is GamePhase.PLAYER_TURN:
            balance = state.tokens.balance(player_id)
            return [
                kind for kind, action in DECLARE_KINDS.items()
                if balance >= state.config.action_cost(action)
            ]
        if state.phase is GamePhase.CHALLENGE_WINDOW:
            return ["challenge", "pass"]
        if state.phase is GamePhase.BLOCK_WINDOW:
            return ["block", "pass"]
        if state.phase is GamePhase.CHOOSE_OVERFLOW_FACE:
            return ["chooseOverflowFace"]
        return []

    def default_intent(self, player_id: str) -> Intent | None:
        """
        Intent to submit on behalf of an unresponsive player.

        Windows are passed; an overflow gets a random face. A player's own
        turn has no default, so None is returned there.
        """
        if player_id not in self.state.active_players:
            return None
        if self.state.phase in _WINDOW_PHASES:
            return Pass(player_id=player_id)
        if self.state.phase is GamePhase.CHOOSE_OVERFLOW_FACE:
            return ChooseOverflowFace(player_id=player_id, face=self.dice.roll_face())
        return None

    def progression(self) -> int:
        """Rough game progress, 0-100."""
        if self.state.is_over:
            return 100
        return min(99, self.win.progression())

    # -- Entry points ----------------------------------------------------

    def start(self) -> None:
        """Grant starting tokens and hands, then open the first turn."""
        if self.state.phase is not GamePhase.SETUP:
            raise IllegalIntentError(IntentRejection.WRONG_PHASE, "Game already started.")

        config = self.state.config
        for player_id in self.state.player_ids:
            balance = self.tokens.credit(player_id, config.starting_tokens)
            self._emit(GameEvent.TOKENS_CHANGED, player_id, tokens=balance)
        for player_id in self.state.player_ids:
            self.dice.add_dice(player_id, config.starting_dice)
            self._emit_hand(GameEvent.DICE_ROLLED, player_id)

        self._emit(GameEvent.GAME_STARTED, players=list(self.state.player_ids))
        logger.info(
            "Table %s started with %d players", self.state.table_id, len(self.state.player_ids)
        )
        self._begin_turn()
        self._check_invariants()

    def submit(self, intent: Intent) -> None:
        """
        Process one player intent to completion.

        Raises:
            IllegalIntentError: If the intent is not legal right now
        """
        handler = self._HANDLERS.get(type(intent))
        if handler is None:
            raise IllegalIntentError(
                IntentRejection.INVALID_PAYLOAD, f"Not an intent: {intent!r}"
            )
        try:
            handler(self, intent)
        except IllegalIntentError as exc:
            logger.info("Rejected %s: %s", type(intent).__name__, exc)
            raise
        self._check_invariants()

    def submit_payload(self, payload: dict[str, Any]) -> None:
        """Parse a tagged external payload and submit it."""
        self.submit(parse_intent(payload))

    def declare(
        self,
        player_id: str,
        action: ActionKind,
        target_id: str | None = None,
        *,
        put_in_pool: bool = False,
        pool_face: Face | str | None = None,
    ) -> None:
        self.submit(DeclareAction(
            player_id=player_id,
            action=action,
            target_id=target_id,
            put_in_pool=put_in_pool,
            pool_face=pool_face,
        ))

    def challenge(self, player_id: str) -> None:
        self.submit(Challenge(player_id=player_id))

    def block(self, player_id: str) -> None:
        self.submit(Block(player_id=player_id))

    def pass_opportunity(self, player_id: str) -> None:
        self.submit(Pass(player_id=player_id))

    def choose_overflow_face(self, player_id: str, face: Face | str) -> None:
        self.submit(ChooseOverflowFace(player_id=player_id, face=face))

    # -- Intent handlers -------------------------------------------------

    def _declare(self, intent: DeclareAction) -> None:
        player_id = intent.player_id
        self._require_player(player_id)
        self._require_phase(GamePhase.PLAYER_TURN)
        if player_id != self.state.current_player:
            raise IllegalIntentError(
                IntentRejection.NOT_YOUR_TURN, f"It is {self.state.current_player}'s turn."
            )

        try:
            action = ActionKind(intent.action)
        except ValueError:
            raise IllegalIntentError(
                IntentRejection.INVALID_PAYLOAD, f"Unknown action {intent.action!r}."
            ) from None

        target_id = intent.target_id
        if action.needs_target:
            if target_id not in self.state.player_ids or target_id == player_id:
                raise IllegalIntentError(
                    IntentRejection.INVALID_TARGET,
                    f"{action.value} needs another player as target, got {target_id!r}.",
                )
        elif target_id is not None:
            raise IllegalIntentError(
                IntentRejection.INVALID_TARGET, f"{action.value} does not take a target."
            )

        cost = self.state.config.action_cost(action)
        if not self.tokens.has(player_id, cost):
            raise IllegalIntentError(
                IntentRejection.INSUFFICIENT_TOKENS,
                f"You need {cost} skull tokens to use {action.value}.",
            )

        decision = None
        if action is ActionKind.SATANS_STEAL:
            if intent.pool_face is not None and not intent.put_in_pool:
                raise IllegalIntentError(
                    IntentRejection.INVALID_PAYLOAD,
                    "A pool face only applies when the die goes to the pool.",
                )
            pool_face = None
            if intent.pool_face is not None:
                pool_face = self._parse_face(intent.pool_face)
            decision = StealDecision(put_in_pool=intent.put_in_pool, pool_face=pool_face)
        elif intent.put_in_pool or intent.pool_face is not None:
            raise IllegalIntentError(
                IntentRejection.INVALID_PAYLOAD,
                "Only Satan's Steal can send a die to the pool.",
            )

        self.state.context = TurnContext(
            declarer_id=player_id,
            action=action,
            target_id=target_id,
            decision=decision,
        )
        self._emit(
            GameEvent.ACTION_DECLARED, player_id, action=action.value, target_id=target_id
        )
        logger.info("%s declares %s (target=%s)", player_id, action.value, target_id)

        if not action.is_challengeable:
            self._run_action()
        elif action is ActionKind.IMPS_SET and self.dice.hand_size(player_id) < 2:
            # A set of zero or one die cannot be disproved
            self._run_action()
        else:
            self._open_challenge_window(Claim.for_action(action), player_id)

    def _challenge(self, intent: Challenge) -> None:
        self._require_player(intent.player_id)
        self._require_phase(GamePhase.CHALLENGE_WINDOW)
        self._require_active(intent.player_id)

        self.state.context.challenger_id = intent.player_id
        self._enter(GamePhase.RESOLVE_CHALLENGE)
        self._resolve_challenge()

    def _block(self, intent: Block) -> None:
        self._require_player(intent.player_id)
        context = self.state.context
        if (
            self.state.phase in _WINDOW_PHASES
            and context is not None
            and not context.action.is_blockable
        ):
            raise IllegalIntentError(
                IntentRejection.NOT_BLOCKABLE, f"{context.action.value} cannot be blocked."
            )
        self._require_phase(GamePhase.BLOCK_WINDOW)
        self._require_active(intent.player_id)

        context.blocker_id = intent.player_id
        self._emit(
            GameEvent.BLOCK_DECLARED, intent.player_id,
            action=context.action.value, declarer_id=context.declarer_id,
        )
        logger.info("%s blocks %s", intent.player_id, context.action.value)
        self._open_challenge_window(Claim.for_block(context.action), intent.player_id)

    def _pass(self, intent: Pass) -> None:
        self._require_player(intent.player_id)
        self._require_phase(*_WINDOW_PHASES)
        self._require_active(intent.player_id)

        if self.state.phase is GamePhase.BLOCK_WINDOW:
            self._run_action()
            return

        self.state.active_players.remove(intent.player_id)
        logger.debug(
            "%s passes; %d still to answer", intent.player_id, len(self.state.active_players)
        )
        if not self.state.active_players:
            self._claim_stands()

    def _choose_overflow_face(self, intent: ChooseOverflowFace) -> None:
        self._require_player(intent.player_id)
        self._require_phase(GamePhase.CHOOSE_OVERFLOW_FACE)
        self._require_active(intent.player_id)
        face = self._parse_face(intent.face)

        self.dice.place_in_pool(face)
        remaining = self.state.context.consume_overflow()
        self._emit(GameEvent.DIE_TO_POOL, intent.player_id, face=face.value, reason="overflow")
        self._emit(GameEvent.OVERFLOW_RESOLVED, intent.player_id, remaining=remaining.count)
        self._check_win()

    _HANDLERS: dict[type, Callable[["TurnStateMachine", Any], None]] = {
        DeclareAction: _declare,
        Challenge: _challenge,
        Block: _block,
        Pass: _pass,
        ChooseOverflowFace: _choose_overflow_face,
    }

    # -- Windows and challenges ------------------------------------------

    def _open_challenge_window(self, claim: Claim, claimant_id: str) -> None:
        context = self.state.context
        context.claim = claim
        context.claimant_id = claimant_id
        context.challenger_id = None
        eligible = [pid for pid in self.state.player_ids if pid != claimant_id]
        self._enter(GamePhase.CHALLENGE_WINDOW, eligible)

    def _claim_stands(self) -> None:
        """Everyone passed on the open claim."""
        if self.state.context.claim.is_block:
            self._cancel_blocked_action()
        else:
            self._after_action_claim()

    def _after_action_claim(self) -> None:
        context = self.state.context
        if context.action.is_blockable:
            self._enter(GamePhase.BLOCK_WINDOW, [context.target_id])
        else:
            self._run_action()

    def _resolve_challenge(self) -> None:
        context = self.state.context
        claim = context.claim
        claimant = context.claimant_id
        challenger = context.challenger_id
        revealed = self.dice.faces(claimant)
        truthful = satisfies(claim, revealed)
        details = {
            "challenger_id": challenger,
            "claimant_id": claimant,
            "action": claim.action.value,
            "is_block": claim.is_block,
            "revealed": [face.value for face in revealed],
        }

        if not truthful:
            outcome = self.dice.steal_die(claimant, challenger)
            context.record_overflow(outcome.overflow)
            context.challenger_id = None
            self._emit(GameEvent.CHALLENGE_SUCCEEDED, challenger, **details)
            self._emit_steal(challenger, claimant, outcome)
            logger.info("%s caught %s bluffing %s", challenger, claimant, claim)
            if claim.is_block:
                context.blocker_id = None
                self._run_action()
            else:
                self._emit(
                    GameEvent.ACTION_CANCELLED, context.declarer_id, action=context.action.value
                )
                if context.pending_overflow:
                    self._check_win()
                else:
                    self._advance_turn()
            return

        face = self.dice.send_to_pool(challenger)
        context.challenger_id = None
        self._emit(GameEvent.CHALLENGE_FAILED, challenger, **details)
        if face is not None:
            self._emit(GameEvent.DIE_TO_POOL, challenger, face=face.value, reason="challenge")
            self._emit_hand(GameEvent.DICE_REROLLED, challenger)
        logger.info("%s's challenge of %s failed", challenger, claimant)
        if claim.is_block:
            self._cancel_blocked_action()
        else:
            self._after_action_claim()

    def _cancel_blocked_action(self) -> None:
        context = self.state.context
        self._emit(
            GameEvent.ACTION_BLOCKED, context.blocker_id,
            action=context.action.value, declarer_id=context.declarer_id,
        )
        logger.info("%s's %s was blocked", context.declarer_id, context.action.value)
        self._check_win()

    # -- Action effects --------------------------------------------------

    def _run_action(self) -> None:
        self._enter(GamePhase.RESOLVE_ACTION)
        context = self.state.context
        self._EFFECTS[context.action](self, context)
        self._emit(
            GameEvent.ACTION_RESOLVED, context.declarer_id,
            action=context.action.value, target_id=context.target_id,
        )
        logger.info("%s resolved %s", context.declarer_id, context.action.value)
        self._check_win()

    def _raise_hell(self, context: TurnContext) -> None:
        self._credit(context.declarer_id, self.state.config.raise_hell_tokens)
        self.dice.reroll_hand(context.declarer_id)
        self._emit_hand(GameEvent.DICE_REROLLED, context.declarer_id)

    def _harvest_skulls(self, context: TurnContext) -> None:
        self._credit(context.declarer_id, self.state.config.harvest_tokens)

    def _extort(self, context: TurnContext) -> None:
        moved = self.tokens.transfer(
            context.target_id, context.declarer_id, self.state.config.extort_tokens
        )
        for player_id in (context.target_id, context.declarer_id):
            self._emit(
                GameEvent.TOKENS_CHANGED, player_id,
                tokens=self.tokens.balance(player_id), moved=moved,
            )

    def _reap_soul(self, context: TurnContext) -> None:
        self._debit(context.declarer_id, self.state.config.reap_soul_cost)
        self._steal(context.declarer_id, context.target_id)

    def _pentagram(self, context: TurnContext) -> None:
        hits = self.dice.reroll_pool()
        harvested = False
        if hits:
            self.dice.take_from_pool(hits[0])
            overflow = self.dice.add_dice(context.declarer_id, 1, face=Face.PENTAGRAM)
            context.record_overflow(overflow)
            harvested = True
            if overflow is None:
                self._emit_hand(GameEvent.DICE_ROLLED, context.declarer_id)
        self._emit(
            GameEvent.POOL_REROLLED, context.declarer_id,
            pool=[face.value for face in self.dice.pool_faces()],
            pentagrams=len(hits),
            harvested=harvested,
        )

    def _imps_set(self, context: TurnContext) -> None:
        context.record_overflow(self.dice.add_dice(context.declarer_id, 1))
        self.dice.reroll_hand(context.declarer_id)
        self._emit_hand(GameEvent.DICE_REROLLED, context.declarer_id)

    def _satans_steal(self, context: TurnContext) -> None:
        self._debit(context.declarer_id, self.state.config.satans_steal_cost)
        decision = context.decision or StealDecision()
        if decision.put_in_pool:
            face = self.dice.send_to_pool(context.target_id, decision.pool_face)
            if face is not None:
                self._emit(
                    GameEvent.DIE_TO_POOL, context.target_id, face=face.value, reason="satans_steal"
                )
                self._emit_hand(GameEvent.DICE_REROLLED, context.target_id)
        else:
            self._steal(context.declarer_id, context.target_id)

    _EFFECTS: dict[ActionKind, Callable[["TurnStateMachine", TurnContext], None]] = {
        ActionKind.RAISE_HELL: _raise_hell,
        ActionKind.HARVEST_SKULLS: _harvest_skulls,
        ActionKind.EXTORT: _extort,
        ActionKind.REAP_SOUL: _reap_soul,
        ActionKind.PENTAGRAM: _pentagram,
        ActionKind.IMPS_SET: _imps_set,
        ActionKind.SATANS_STEAL: _satans_steal,
    }

    # -- Win, rolloff and turn order -------------------------------------

    def _check_win(self) -> None:
        self._enter(GamePhase.CHECK_WIN)
        context = self.state.context
        overflow = context.pending_overflow if context else None
        if overflow is not None:
            self._enter(GamePhase.CHOOSE_OVERFLOW_FACE, [overflow.player_id])
            self._emit(GameEvent.OVERFLOW_PENDING, overflow.player_id, count=overflow.count)
            return

        winners = self.win.find_winners()
        if not winners:
            self._advance_turn()
        elif len(winners) == 1:
            self._end_game(winners[0])
        else:
            self._enter(GamePhase.ROLLOFF)
            winner, counts = self.win.rolloff(winners)
            self.state.rolloff_counts = counts
            self._emit(
                GameEvent.ROLLOFF, winner,
                counts=counts, face=self.win.tiebreak_face.value,
            )
            self._end_game(winner)

    def _advance_turn(self) -> None:
        self.state.context = None
        self.state.current_index = self.state.next_index()
        self._begin_turn()
        self._emit(GameEvent.TURN_ADVANCED, self.state.current_player, turn=self.state.turn_number)

    def _begin_turn(self) -> None:
        self.state.turn_number += 1
        self._enter(GamePhase.PLAYER_TURN, [self.state.current_player])

    def _end_game(self, winner_id: str) -> None:
        self.state.winner_id = winner_id
        self.state.context = None
        self._enter(GamePhase.GAME_END)
        self._emit(GameEvent.GAME_WON, winner_id)
        logger.info("Table %s won by %s", self.state.table_id, winner_id)

    # -- Helpers ---------------------------------------------------------

    def _enter(self, phase: GamePhase, active: Sequence[str] = ()) -> None:
        self.state.phase = phase
        self.state.active_players = list(active)
        self._emit(GameEvent.PHASE_CHANGED, phase=phase.value, active=list(active))
        logger.debug("Phase -> %s (active=%s)", phase.value, list(active))

    def _credit(self, player_id: str, amount: int) -> None:
        balance = self.tokens.credit(player_id, amount)
        self._emit(GameEvent.TOKENS_CHANGED, player_id, tokens=balance)

    def _debit(self, player_id: str, amount: int) -> None:
        self.tokens.debit(player_id, amount)
        self._emit(GameEvent.TOKENS_CHANGED, player_id, tokens=self.tokens.balance(player_id))

    def _steal(self, stealer_id: str, victim_id: str) -> None:
        outcome = self.dice.steal_die(victim_id, stealer_id)
        self.state.context.record_overflow(outcome.overflow)
        self._emit_steal(stealer_id, victim_id, outcome)

    def _emit_steal(self, stealer_id: str, victim_id: str, outcome: StealOutcome) -> None:
        if not outcome.stolen:
            return
        self._emit(
            GameEvent.DIE_STOLEN, stealer_id,
            victim_id=victim_id,
            overflow=outcome.overflow is not None,
            dice_counts={
                stealer_id: self.dice.hand_size(stealer_id),
                victim_id: self.dice.hand_size(victim_id),
            },
        )
        if outcome.overflow is None:
            self._emit_hand(GameEvent.DICE_REROLLED, stealer_id)
        self._emit_hand(GameEvent.DICE_REROLLED, victim_id)

    def _emit_hand(self, event: GameEvent, player_id: str) -> None:
        """Send a player their own new faces; nobody else sees them."""
        self._emit(
            event, player_id,
            private_to=player_id,
            dice=[{"id": die.id, "face": die.face.value} for die in self.dice.hand(player_id)],
        )

    def _emit(
        self,
        event: GameEvent,
        player_id: str | None = None,
        *,
        private_to: str | None = None,
        **data: Any,
    ) -> None:
        self.bus.publish(EventPayload(
            event=event,
            table_id=self.state.table_id,
            player_id=player_id,
            data=data,
            private_to=private_to,
        ))

    def _parse_face(self, value: Face | str) -> Face:
        try:
            return validate_face(value)
        except ValueError as exc:
            raise IllegalIntentError(IntentRejection.INVALID_FACE, str(exc)) from exc

    def _require_player(self, player_id: str) -> None:
        if player_id not in self.state.player_ids:
            raise IllegalIntentError(
                IntentRejection.UNKNOWN_PLAYER, f"{player_id!r} is not seated at this table."
            )

    def _require_phase(self, *phases: GamePhase) -> None:
        phase = self.state.phase
        if phase is GamePhase.SETUP:
            raise IllegalIntentError(IntentRejection.GAME_NOT_STARTED, "Game has not started.")
        if phase is GamePhase.GAME_END:
            raise IllegalIntentError(IntentRejection.GAME_OVER, "Game is over.")
        if phase not in phases:
            raise IllegalIntentError(
                IntentRejection.WRONG_PHASE, f"Cannot do that during {phase.value}."
            )

    def _require_active(self, player_id: str) -> None:
        if player_id not in self.state.active_players:
            raise IllegalIntentError(
                IntentRejection.NOT_ACTIVE, f"{player_id} has nothing to answer right now."
            )

    def _check_invariants(self) -> None:
        state = self.state
        for player_id in state.player_ids:
            size = state.dice.hand_size(player_id)
            if not 0 <= size <= state.config.max_hand:
                raise InvariantViolation(f"{player_id} holds {size} dice")
            if state.tokens.balance(player_id) < 0:
                raise InvariantViolation(f"{player_id} has a negative token balance")

        die_ids = state.dice.all_die_ids()
        if len(die_ids) != len(set(die_ids)):
            raise InvariantViolation("A die is owned by more than one location")

        if state.phase is GamePhase.CHOOSE_OVERFLOW_FACE:
            if state.context is None or state.context.pending_overflow is None:
                raise InvariantViolation("Overflow phase without a pending overflow")
        elif not (state.phase.awaits_players or state.phase is GamePhase.GAME_END):
            raise InvariantViolation(f"Intent left the table in {state.phase.value}")
