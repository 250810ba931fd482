"""
Session engine: the stateful owner of a live hangboard session.

SessionEngine holds the current SessionState, the WeightModel and the
countdown timer.  Timer expiry and user actions are turned into state
machine transitions; every committed transition is announced to
listeners registered with on_state_changed().

Collaborators are duck-typed:

    Notifier       on_hang_start / on_hang_end / on_countdown_tick / on_set_complete
    HistoryWriter  put(record)
    WeightWriter   save(weights_key, weights)

Writes to history and weights are fire-and-forget: a failing writer is
logged and the session carries on unchanged.

Transitions are serialised.  An action requested while another one is
being committed (for example from a listener or a notifier) is queued and
runs right after, in arrival order.
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import replace
from typing import Callable, Protocol

from . import state_machine
from .config import COUNTDOWN_CUE_WINDOW_SECONDS, DONE_DISMISS_SECONDS, TICK_INTERVAL_SECONDS, TimingProfile, get_timing
from .holds.base import HoldDefinition, WorkoutDefinition
from .models import INITIAL_STATE, SessionRecord, SessionState, SetWeights
from .record_builder import build_session_record
from .timer import CountdownTimer
from .weights import WeightModel

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]


class Notifier(Protocol):
    """Audio/haptic cue sink; every call is fire-and-forget."""

    def on_hang_start(self) -> None: ...

    def on_hang_end(self) -> None: ...

    def on_countdown_tick(self) -> None: ...

    def on_set_complete(self) -> None: ...


class HistoryWriter(Protocol):
    def put(self, record: SessionRecord) -> None: ...


class WeightWriter(Protocol):
    def save(self, weights_key: str, weights: dict[str, SetWeights]) -> None: ...


class NullNotifier:
    """Notifier that does nothing."""

    def on_hang_start(self) -> None:
        pass

    def on_hang_end(self) -> None:
        pass

    def on_countdown_tick(self) -> None:
        pass

    def on_set_complete(self) -> None:
        pass


class CountdownCue:
    """
    De-duplicates the near-zero countdown cue.

    check() returns True at most once per integer-second boundary while
    0 < remaining <= window.
    """

    def __init__(self, window: int = COUNTDOWN_CUE_WINDOW_SECONDS):
        self.window = window
        self._last_second: int | None = None

    def reset(self) -> None:
        self._last_second = None

    def check(self, remaining: float) -> bool:
        if not 0 < remaining <= self.window:
            return False
        second = math.ceil(remaining)
        if second == self._last_second:
            return False
        self._last_second = second
        return True


class SessionEngine:
    """
    Orchestrates one workout: phase timing, transitions, weights and history.

    Args:
        workout: The workout program to run
        timing: Global durations/reps (default: the workout's timing variant)
        stored_weights: Persisted baselines for workout.weights_key
        notifier: Cue sink (default: NullNotifier)
        history: Receives the SessionRecord at session end
        weight_writer: Receives baselines after every persisted change
        clock: Monotonic clock for the countdown (seconds)
        wall_clock: Epoch clock for record timestamps (seconds)
    """

    def __init__(
        self,
        workout: WorkoutDefinition,
        timing: TimingProfile | None = None,
        stored_weights: dict[str, SetWeights] | None = None,
        *,
        notifier: Notifier | None = None,
        history: HistoryWriter | None = None,
        weight_writer: WeightWriter | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        poll_interval: float = TICK_INTERVAL_SECONDS,
    ):
        self.workout = workout
        self.timing = timing or get_timing(workout.timing)
        self.weights = WeightModel(workout.holds, stored_weights)
        self.notifier: Notifier = notifier or NullNotifier()
        self.history = history
        self.weight_writer = weight_writer
        self.notes: str | None = None
        self.hold_notes: dict[str, str] = {}
        self.last_record: SessionRecord | None = None

        self._wall_clock = wall_clock
        self._timer = CountdownTimer(
            on_tick=self._on_tick,
            on_expire=self._on_expire,
            clock=clock,
            poll_interval=poll_interval,
        )
        self._cue = CountdownCue()
        self._state = SessionState()
        self._started_at: int | None = None
        self._listeners: list[StateListener] = []
        self._queue: deque[Callable[[], None]] = deque()
        self._dispatching = False

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def holds(self) -> tuple[HoldDefinition, ...]:
        return self.workout.holds

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state.phase != "idle"

    @property
    def started_at(self) -> int | None:
        return self._started_at

    @property
    def remaining(self) -> float:
        """Seconds left in the current phase as of the last poll."""
        return self._timer.remaining

    @property
    def current_hold(self) -> HoldDefinition | None:
        if self._state.phase == "idle":
            return None
        if 0 <= self._state.hold_index < len(self.holds):
            return self.holds[self._state.hold_index]
        return None

    @property
    def next_hold(self) -> HoldDefinition | None:
        i = self._state.hold_index + 1
        return self.holds[i] if self.is_active and i < len(self.holds) else None

    def reps_for_current_set(self) -> int:
        return state_machine.reps_for_current_set(
            self._state, self.holds, self.timing.set1_reps, self.timing.set2_reps
        )

    def phase_duration(self, state: SessionState | None = None) -> int:
        """Full duration in seconds of the phase *state* (default: current) is in."""
        state = state or self._state
        if state.phase == "done":
            return DONE_DISMISS_SECONDS
        if not 0 <= state.hold_index < len(self.holds):
            return 0
        return self.holds[state.hold_index].duration_for(state.phase, self.timing)

    def effective_weight(self, hold_id: str, set_number: int) -> float:
        return self.weights.effective_weight(hold_id, set_number)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on_state_changed(self, callback: StateListener) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        """Reset to prep of the first hold and start the clock."""

        def _start() -> None:
            self._timer.stop()
            self.weights.clear_overrides()
            self.last_record = None
            self._started_at = self._now_ms()
            logger.info("Starting workout %s (%d holds)", self.workout.workout_id, len(self.holds))
            self._commit(INITIAL_STATE, force_enter=True)

        self._dispatch(_start)

    def pause(self) -> None:
        def _pause() -> None:
            if not self.is_active or self._state.paused:
                return
            self._timer.pause()
            self._commit(replace(self._state, paused=True))

        self._dispatch(_pause)

    def resume(self) -> None:
        def _resume() -> None:
            if not self.is_active or not self._state.paused:
                return
            self._timer.resume()
            self._commit(replace(self._state, paused=False))

        self._dispatch(_resume)

    def toggle_pause(self) -> None:
        if self._state.paused:
            self.resume()
        else:
            self.pause()

    def bail(self, notes: str | None = None) -> SessionRecord | None:
        """
        End the session early, whatever the phase.

        Builds and saves a bailed record at the current position and returns
        to idle.  In ``done`` the completed record already exists and is
        returned as is.  Returns None when no session is active.
        """

        def _bail() -> None:
            if not self.is_active:
                return
            self._timer.stop()
            if notes:
                self.notes = notes
            if self._state.phase != "done":
                logger.info(
                    "Bailed workout %s at hold %d set %d",
                    self.workout.workout_id,
                    self._state.hold_index,
                    self._state.set_number,
                )
                self._finish(bailed=True)
            self._commit(SessionState())

        was_active = self.is_active
        self._dispatch(_bail)
        return self.last_record if was_active else None

    def poll(self) -> float:
        """Drive the countdown once; returns seconds left in the phase."""
        return self._timer.poll()

    def run(self, sleep: Callable[[float], None] = time.sleep) -> None:
        """Poll until the session goes idle or is paused."""
        while self.is_active and not self._state.paused:
            self.poll()
            if self.is_active and not self._state.paused:
                sleep(self._timer.poll_interval)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def advance(self) -> None:
        """Move to the next phase now (timer expiry, or "skip break")."""
        self._dispatch(self._advance_now)

    def skip_set(self) -> None:
        self._dispatch(lambda: self._apply(state_machine.skip_set))

    def skip_next_set(self) -> None:
        self._dispatch(lambda: self._apply(state_machine.skip_next_set))

    def skip_next_hold(self) -> None:
        self._dispatch(lambda: self._apply(state_machine.skip_next_hold))

    # ------------------------------------------------------------------
    # Weights
    # ------------------------------------------------------------------

    def set_session_override(self, hold_id: str, set_number: int, delta: float) -> float:
        return self.weights.set_session_override(hold_id, set_number, delta)

    def adjust_next_weight(self, hold_id: str, set_number: int, delta: float) -> float:
        value = self.weights.adjust_next_weight(hold_id, set_number, delta)
        self._save_weights()
        return value

    def adjust_base_weight(self, hold_id: str, delta: float) -> None:
        self.weights.adjust_base_weight(hold_id, delta)
        self._save_weights()

    def adjust_set2_for_session(self, hold_id: str, delta: float) -> float:
        value = self.weights.adjust_set2_for_session(hold_id, delta)
        self._save_weights()
        return value

    def reset_weights(self) -> None:
        self.weights.reset_weights()
        self._save_weights()

    def set_hold_note(self, hold_id: str, text: str) -> None:
        if text:
            self.hold_notes[hold_id] = text
        else:
            self.hold_notes.pop(hold_id, None)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _now_ms(self) -> int:
        return int(self._wall_clock() * 1000)

    def _dispatch(self, action: Callable[[], None]) -> None:
        self._queue.append(action)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._queue:
                self._queue.popleft()()
        finally:
            self._dispatching = False
            self._queue.clear()

    def _apply(self, transition: Callable[[SessionState, tuple[HoldDefinition, ...]], SessionState]) -> None:
        if self._state.phase in ("idle", "done"):
            return
        self._commit(transition(self._state, self.holds))

    def _advance_now(self) -> None:
        if not self.is_active:
            return
        self._commit(
            state_machine.advance(self._state, self.holds, self.timing.set1_reps, self.timing.set2_reps)
        )

    def _commit(self, new_state: SessionState, force_enter: bool = False) -> None:
        old = self._state
        if new_state == old and not force_enter:
            return
        self._state = new_state
        moved = force_enter or (
            (old.phase, old.hold_index, old.set_number, old.rep_index)
            != (new_state.phase, new_state.hold_index, new_state.set_number, new_state.rep_index)
        )
        if moved:
            self._enter_phase()
        for listener in list(self._listeners):
            listener(new_state)

    def _enter_phase(self) -> None:
        """Side effects of arriving in the current phase."""
        self._timer.stop()
        self._cue.reset()
        state = self._state
        logger.debug(
            "Phase %s hold=%d set=%d rep=%d",
            state.phase,
            state.hold_index,
            state.set_number,
            state.rep_index,
        )

        if state.phase == "idle":
            return

        if state.phase == "prep":
            hold = self.current_hold
            if hold is not None and hold.is_rest_only:
                # No hang for this hold: straight on to its break.
                self._queue.append(self._advance_now)
                return

        if state.phase == "hanging":
            self.notifier.on_hang_start()

        if state.phase == "done":
            logger.info("Completed workout %s", self.workout.workout_id)
            self._finish(bailed=False)

        self._timer.start(self.phase_duration(state), running=not state.paused)

    def _on_tick(self, remaining: float) -> None:
        if self._state.phase in ("prep", "hanging") and self._cue.check(remaining):
            self.notifier.on_countdown_tick()

    def _on_expire(self) -> None:
        self._dispatch(self._handle_expiry)

    def _handle_expiry(self) -> None:
        state = self._state
        if state.phase == "hanging":
            self.notifier.on_hang_end()
            hold = self.current_hold
            if (
                hold is not None
                and state.rep_index >= self.reps_for_current_set() - 1
                and state.set_number >= hold.num_sets
            ):
                self.notifier.on_set_complete()
        self._advance_now()

    def _finish(self, bailed: bool) -> None:
        state = self._state
        completed_at = self._now_ms()
        started_at = self._started_at if self._started_at is not None else completed_at
        # wall clock may step backwards mid-session
        completed_at = max(completed_at, started_at)
        record = build_session_record(
            workout_type=self.workout.workout_id,
            started_at=started_at,
            completed_at=completed_at,
            bailed=bailed,
            hold_index=state.hold_index,
            set_number=state.set_number,
            holds=self.holds,
            effective_weight=self.weights.effective_weight,
            set1_reps=self.timing.set1_reps,
            set2_reps=self.timing.set2_reps,
            notes=self.notes,
            hold_notes=self.hold_notes,
        )
        self.last_record = record
        if self.history is None:
            return
        try:
            self.history.put(record)
        except Exception:
            logger.exception("Could not save session %s to history", record.id)
        else:
            logger.info("Saved session %s (bailed=%s)", record.id, bailed)

    def _save_weights(self) -> None:
        if self.weight_writer is None:
            return
        try:
            self.weight_writer.save(self.workout.weights_key, self.weights.stored)
        except Exception:
            logger.exception("Could not save weights for %s", self.workout.weights_key)
