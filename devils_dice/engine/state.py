"""
Devil's Dice - Table State

The single mutable aggregate for one table: seats, dice, tokens, the phase,
and the scratch context of the action being resolved. Only the turn state
machine writes to it.
"""

from dataclasses import dataclass, field

from devils_dice.engine.base import ActionKind, Face, GameConfig, GamePhase
from devils_dice.engine.claims import Claim
from devils_dice.engine.dice import DicePoolManager, PendingOverflow
from devils_dice.engine.tokens import TokenLedger


@dataclass(frozen=True)
class StealDecision:
    """
    Satan's Steal options chosen at declaration.

    Attributes:
        put_in_pool: Send the target's die to the pool instead of taking it
        pool_face: Face for the pooled die (random when None)
    """
    put_in_pool: bool = False
    pool_face: Face | None = None


@dataclass
class TurnContext:
    """
    Scratch state for one declared action, cleared once it is fully resolved.

    Attributes:
        declarer_id: Player who declared the action
        action: Declared action
        target_id: Targeted player, for targeted actions
        decision: Satan's Steal options
        claim: Claim currently open to challenge (action or block)
        claimant_id: Player who made `claim`
        challenger_id: Player whose challenge is being resolved
        blocker_id: Target who blocked, while the block stands
        overflows: Deferred gains, at most one record per player
    """
    declarer_id: str
    action: ActionKind
    target_id: str | None = None
    decision: StealDecision | None = None
    claim: Claim | None = None
    claimant_id: str | None = None
    challenger_id: str | None = None
    blocker_id: str | None = None
    overflows: list[PendingOverflow] = field(default_factory=list)

    @property
    def pending_overflow(self) -> PendingOverflow | None:
        """The overflow to resolve next, if any."""
        return self.overflows[0] if self.overflows else None

    def record_overflow(self, overflow: PendingOverflow | None) -> None:
        """Queue a deferred gain; a second cause for the same player merges."""
        if overflow is None:
            return
        for i, existing in enumerate(self.overflows):
            if existing.player_id == overflow.player_id:
                self.overflows[i] = existing.merged(overflow.count)
                return
        self.overflows.append(overflow)

    def consume_overflow(self) -> PendingOverflow:
        """Resolve one die of the head overflow and return what remains of it."""
        head = self.overflows[0]
        remaining = PendingOverflow(player_id=head.player_id, count=head.count - 1)
        if remaining.count:
            self.overflows[0] = remaining
        else:
            self.overflows.pop(0)
        return remaining


@dataclass
class TableState:
    """
    Everything the engine knows about one table.

    Attributes:
        table_id: Identifier used on emitted events
        player_ids: Seating (and turn) order
        config: Rules configuration
        dice: Hands and pool
        tokens: Skull token balances
        phase: Current state machine phase
        current_index: Seat index of the player whose turn it is
        active_players: Players allowed to submit an intent right now
        context: Action being resolved, if any
        winner_id: Set once the game has ended
        rolloff_counts: Tie-break counts from the final rolloff, if one ran
        turn_number: Turns started so far (1-based once the game starts)
    """
    table_id: str
    player_ids: tuple[str, ...]
    config: GameConfig
    dice: DicePoolManager
    tokens: TokenLedger
    phase: GamePhase = GamePhase.SETUP
    current_index: int = 0
    active_players: list[str] = field(default_factory=list)
    context: TurnContext | None = None
    winner_id: str | None = None
    rolloff_counts: dict[str, int] = field(default_factory=dict)
    turn_number: int = 0

    @property
    def current_player(self) -> str:
        return self.player_ids[self.current_index]

    @property
    def is_over(self) -> bool:
        return self.phase is GamePhase.GAME_END

    def next_index(self) -> int:
        return (self.current_index + 1) % len(self.player_ids)
