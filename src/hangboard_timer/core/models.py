"""
Data models for hangboard-timer.

Session position (SessionState), the two weight structures (durable
SetWeights and session-only SessionOverride) and the persisted history
record (SessionRecord with its HoldRecord / SetRecord parts).
"""

from dataclasses import dataclass, field
from typing import Literal

Phase = Literal["idle", "prep", "hanging", "resting", "break", "done"]
PHASES: tuple[str, ...] = ("idle", "prep", "hanging", "resting", "break", "done")


@dataclass(frozen=True)
class SessionState:
    """
    Position of a live session.

    Immutable: every transition returns a new instance, so callers can keep
    snapshots and compare them.
    """

    phase: Phase = "idle"
    hold_index: int = 0
    set_number: int = 1  # 1-based
    rep_index: int = 0   # 0-based
    paused: bool = False


INITIAL_STATE = SessionState(phase="prep", hold_index=0, set_number=1, rep_index=0)


@dataclass
class SetWeights:
    """Persisted baseline weight (kg relative to bodyweight) for both set slots."""

    set1: float = 0.0
    set2: float = 0.0

    def get(self, set_number: int) -> float:
        return self.set1 if set_number <= 1 else self.set2

    def add(self, set_number: int, delta: float) -> None:
        if set_number <= 1:
            self.set1 += delta
        else:
            self.set2 += delta


@dataclass
class SessionOverride:
    """Session-only weight override; None means "not overridden"."""

    set1: float | None = None
    set2: float | None = None

    def get(self, set_number: int) -> float | None:
        return self.set1 if set_number <= 1 else self.set2

    def put(self, set_number: int, value: float) -> None:
        if set_number <= 1:
            self.set1 = value
        else:
            self.set2 = value


@dataclass(frozen=True)
class SetRecord:
    """One set as recorded in history."""

    weight: float
    reps: int
    completed: bool

    def __post_init__(self) -> None:
        if self.reps < 0:
            raise ValueError("reps must be non-negative")


@dataclass(frozen=True)
class HoldRecord:
    """One hold of a recorded session; set2 is None for single-set holds."""

    hold_id: str
    hold_name: str
    set1: SetRecord
    set2: SetRecord | None = None
    notes: str | None = None


@dataclass(frozen=True)
class SessionRecord:
    """
    A finished, bailed, manually logged or imported session.

    started_at / completed_at are epoch milliseconds.  Manually entered
    sessions have started_at == completed_at.
    """

    id: str
    workout_type: str
    started_at: int
    completed_at: int
    bailed: bool
    holds: tuple[HoldRecord, ...] = field(default_factory=tuple)
    notes: str | None = None
    imported: bool = False

    def __post_init__(self) -> None:
        """Validate record data."""
        if not self.id:
            raise ValueError("id must be a non-empty string")
        if not self.workout_type:
            raise ValueError("workout_type must be a non-empty string")
        if self.completed_at < self.started_at:
            raise ValueError("completed_at must not precede started_at")

    @property
    def duration_seconds(self) -> int:
        """Wall-clock length of the session (0 for manual entries)."""
        return (self.completed_at - self.started_at) // 1000

    def find_hold(self, hold_id: str) -> HoldRecord | None:
        for hold in self.holds:
            if hold.hold_id == hold_id:
                return hold
        return None
