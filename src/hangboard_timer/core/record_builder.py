"""
Session record builder.

Reduces the final position of a session (finished or bailed) into the
immutable SessionRecord that goes to history.  Pure apart from generating a
record id when none is given.
"""

from __future__ import annotations

import uuid
from typing import Callable, Sequence

from .config import SET1_REPS, SET2_REPS
from .holds.base import HoldDefinition
from .models import HoldRecord, SessionRecord, SetRecord

WeightResolver = Callable[[str, int], float]


def new_record_id() -> str:
    return uuid.uuid4().hex


def completion_flags(bailed: bool, index: int, hold_index: int, set_number: int) -> tuple[bool, bool]:
    """
    (set1_completed, set2_completed) for the hold at catalog *index*.

    Not bailed: everything completed.  Bailed: holds before the bail point
    are complete, holds after it are not, and on the bail hold set 1 only
    counts once set 2 had been reached.  Set 2 of the bail hold never
    counts.
    """
    if not bailed:
        return True, True
    if index < hold_index:
        return True, True
    if index == hold_index:
        return set_number >= 2, False
    return False, False


def build_session_record(
    *,
    workout_type: str,
    started_at: int,
    completed_at: int,
    bailed: bool,
    hold_index: int,
    set_number: int,
    holds: Sequence[HoldDefinition],
    effective_weight: WeightResolver,
    set1_reps: int = SET1_REPS,
    set2_reps: int = SET2_REPS,
    notes: str | None = None,
    hold_notes: dict[str, str] | None = None,
    record_id: str | None = None,
) -> SessionRecord:
    """
    Build the history record for a session.

    Args:
        workout_type: Workout id the session ran
        started_at: Epoch milliseconds at start
        completed_at: Epoch milliseconds at finish/bail
        bailed: True if the session ended early
        hold_index: Hold index at the end of the session
        set_number: Set number at the end of the session
        holds: Hold catalog of the workout
        effective_weight: Resolver (hold_id, set_number) -> weight, read now
        set1_reps: Global default reps for set 1 (holds without their own)
        set2_reps: Global default reps for set 2
        notes: Optional session notes
        hold_notes: Optional {hold_id: note}
        record_id: Explicit id (a new uuid4 hex is generated otherwise)

    Returns:
        SessionRecord
    """
    hold_notes = hold_notes or {}
    hold_records: list[HoldRecord] = []

    for i, hold in enumerate(holds):
        set1_done, set2_done = completion_flags(bailed, i, hold_index, set_number)

        set1 = SetRecord(
            weight=effective_weight(hold.hold_id, 1),
            reps=hold.reps_for_set(1, set1_reps, set2_reps),
            completed=set1_done,
        )
        set2 = (
            SetRecord(
                weight=effective_weight(hold.hold_id, 2),
                reps=hold.reps_for_set(2, set1_reps, set2_reps),
                completed=set2_done,
            )
            if hold.num_sets >= 2
            else None
        )

        hold_records.append(
            HoldRecord(
                hold_id=hold.hold_id,
                hold_name=hold.name,
                set1=set1,
                set2=set2,
                notes=hold_notes.get(hold.hold_id) or None,
            )
        )

    return SessionRecord(
        id=record_id or new_record_id(),
        workout_type=workout_type,
        started_at=started_at,
        completed_at=completed_at,
        bailed=bailed,
        holds=tuple(hold_records),
        notes=notes or None,
    )
