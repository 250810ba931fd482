"""
Phase state machine for a hangboard session.

Pure functions mapping (state, hold catalog, default rep counts) to the next
SessionState.  Nothing here mutates its input or keeps state of its own;
the SessionEngine owns the position and calls these on timer expiry or on
user skip actions.

Transition summary:

    prep     -> hanging          (rep_index reset; rest-only holds go to break)
    hanging  -> resting          more reps in this set
             -> break            set finished, more sets or holds follow
             -> done             last rep of last set of last hold
    resting  -> hanging          rep_index + 1
    break    -> prep             next set, or first set of next hold
             -> done             break after the last set of the last hold
    done     -> idle

"Last set" always uses the hold's own num_sets, so catalogs can mix 1-, 2-
and 3-set holds.
"""

from dataclasses import replace
from typing import Sequence

from .holds.base import HoldDefinition
from .models import SessionState


def _hold_at(state: SessionState, holds: Sequence[HoldDefinition]) -> HoldDefinition | None:
    if 0 <= state.hold_index < len(holds):
        return holds[state.hold_index]
    return None


def _is_last_set(state: SessionState, hold: HoldDefinition) -> bool:
    return state.set_number >= hold.num_sets


def _is_last_hold(state: SessionState, holds: Sequence[HoldDefinition]) -> bool:
    return state.hold_index >= len(holds) - 1


def reps_for_current_set(
    state: SessionState,
    holds: Sequence[HoldDefinition],
    set1_reps: int,
    set2_reps: int,
) -> int:
    """Nominal reps of the set the state points at (0 if there is no hold)."""
    hold = _hold_at(state, holds)
    if hold is None:
        return 0
    return hold.reps_for_set(state.set_number, set1_reps, set2_reps)


def advance(
    state: SessionState,
    holds: Sequence[HoldDefinition],
    set1_reps: int,
    set2_reps: int,
) -> SessionState:
    """
    Return the state that follows *state* when its phase timer expires.

    Args:
        state: Current session position
        holds: Ordered hold catalog of the active workout
        set1_reps: Global default reps for set 1
        set2_reps: Global default reps for set 2 and later

    Returns:
        New SessionState.  Unknown phases, ``idle``, an empty catalog or an
        out-of-range hold_index return *state* unchanged.
    """
    if state.phase == "done":
        return replace(state, phase="idle")

    hold = _hold_at(state, holds)
    if hold is None:
        return state

    if state.phase == "prep":
        if hold.is_rest_only:
            return replace(state, phase="break")
        return replace(state, phase="hanging", rep_index=0)

    if state.phase == "hanging":
        total_reps = hold.reps_for_set(state.set_number, set1_reps, set2_reps)
        if state.rep_index < total_reps - 1:
            return replace(state, phase="resting")
        if not _is_last_set(state, hold):
            return replace(state, phase="break")
        if _is_last_hold(state, holds):
            return replace(state, phase="done")
        return replace(state, phase="break")

    if state.phase == "resting":
        return replace(state, phase="hanging", rep_index=state.rep_index + 1)

    if state.phase == "break":
        if not _is_last_set(state, hold):
            return replace(state, phase="prep", set_number=state.set_number + 1, rep_index=0)
        if _is_last_hold(state, holds):
            return replace(state, phase="done")
        return replace(
            state, phase="prep", hold_index=state.hold_index + 1, set_number=1, rep_index=0
        )

    return state


def skip_set(state: SessionState, holds: Sequence[HoldDefinition]) -> SessionState:
    """
    Abandon the rest of the current set.

    Goes to ``break`` at the current position (the break's own expiry then
    moves on normally), or to ``done`` when this is the last set of the last
    hold.
    """
    hold = _hold_at(state, holds)
    if hold is None:
        return state
    if _is_last_set(state, hold) and _is_last_hold(state, holds):
        return replace(state, phase="done")
    return replace(state, phase="break")


def skip_next_set(state: SessionState, holds: Sequence[HoldDefinition]) -> SessionState:
    """
    Abandon the remaining sets of the current hold.

    Jumps set_number to the hold's final set and goes to ``break``; on the
    last hold the session is ``done`` instead.
    """
    hold = _hold_at(state, holds)
    if hold is None:
        return state
    if _is_last_hold(state, holds):
        return replace(state, phase="done")
    return replace(state, phase="break", set_number=hold.num_sets)


def skip_next_hold(state: SessionState, holds: Sequence[HoldDefinition]) -> SessionState:
    """
    Skip the hold that follows the current one.

    Moves hold_index to the next hold, parks set_number on that hold's
    final set and goes to ``break``, so the break's expiry lands on the
    hold after that.  When the next hold is the catalog's last one the
    session goes straight to ``done``.
    """
    if _hold_at(state, holds) is None:
        return state
    next_hold_index = state.hold_index + 1
    if next_hold_index >= len(holds) - 1:
        return replace(state, phase="done")
    return replace(
        state,
        phase="break",
        hold_index=next_hold_index,
        set_number=holds[next_hold_index].num_sets,
    )
