"""
Devil's Dice - Table Snapshots

Pydantic models for the read-only, per-viewer view of a table. A viewer sees
their own dice faces; everyone else's hand is reduced to a count.
"""

from pydantic import BaseModel, Field

from devils_dice.engine.state import TableState


class DieView(BaseModel):
    """A visible die."""

    id: int
    face: str

    model_config = {"frozen": True}


class OverflowView(BaseModel):
    """A pending overflow awaiting a face choice."""

    player_id: str
    count: int = Field(ge=1)


class TableSnapshot(BaseModel):
    """Everything `viewer_id` may know about the table."""

    table_id: str
    viewer_id: str
    phase: str
    turn_number: int = 0
    current_player: str
    active_players: list[str] = Field(default_factory=list)
    my_hand: list[DieView] = Field(default_factory=list)
    dice_counts: dict[str, int] = Field(default_factory=dict)
    tokens: dict[str, int] = Field(default_factory=dict)
    pool: list[DieView] = Field(default_factory=list)
    declarer_id: str | None = None
    action: str | None = None
    target_id: str | None = None
    challenger_id: str | None = None
    blocker_id: str | None = None
    pending_overflow: OverflowView | None = None
    winner_id: str | None = None


def build_snapshot(state: TableState, viewer_id: str) -> TableSnapshot:
    """Project table state down to what one player can see."""
    dice = state.dice
    context = state.context
    overflow = context.pending_overflow if context else None

    return TableSnapshot(
        table_id=state.table_id,
        viewer_id=viewer_id,
        phase=state.phase.value,
        turn_number=state.turn_number,
        current_player=state.current_player,
        active_players=list(state.active_players),
        my_hand=[DieView(id=d.id, face=d.face.value) for d in dice.hand(viewer_id)],
        dice_counts={pid: dice.hand_size(pid) for pid in state.player_ids},
        tokens=state.tokens.balances(),
        pool=[DieView(id=d.id, face=d.face.value) for d in dice.pool()],
        declarer_id=context.declarer_id if context else None,
        action=context.action.value if context else None,
        target_id=context.target_id if context else None,
        challenger_id=context.challenger_id if context else None,
        blocker_id=context.blocker_id if context else None,
        pending_overflow=(
            OverflowView(player_id=overflow.player_id, count=overflow.count)
            if overflow else None
        ),
        winner_id=state.winner_id,
    )
