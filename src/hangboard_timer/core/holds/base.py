"""
Base types for hold and workout definitions.

HoldDefinition describes one exercise of a workout: how many sets, how many
reps per set, baseline weights and optional per-hold phase durations.
WorkoutDefinition is an ordered catalog of holds (one training program).
"""

from dataclasses import dataclass

from ..config import DEFAULT_NUM_SETS, TimingProfile
from ..models import Phase


@dataclass(frozen=True)
class HoldDefinition:
    """
    Full configuration for one hold.

    Weights are signed kg relative to bodyweight: 0 is bodyweight,
    negative values are assistance (pulley/counterweight).
    """

    # Identity
    hold_id: str              # e.g. "large-edge"
    name: str                 # e.g. "Large Edge"

    # Baseline load
    default_set1_weight: float = 0.0
    default_set2_weight: float = 0.0

    # Shape
    num_sets: int = DEFAULT_NUM_SETS
    set1_reps: int | None = None     # falls back to the timing variant's default
    set2_reps: int | None = None
    reps_per_set: int | None = None  # overrides set1_reps/set2_reps when present

    # Behaviour flags
    is_rest_only: bool = False       # no hang phase, only break timing
    skip_progression: bool = False   # no weight-adjustment prompts

    # Per-hold phase duration overrides (seconds)
    prep_secs: int | None = None
    hang_secs: int | None = None
    rest_secs: int | None = None
    break_secs: int | None = None

    def __post_init__(self) -> None:
        """Validate hold shape."""
        if not self.hold_id:
            raise ValueError("hold_id must be a non-empty string")
        if self.num_sets < 1:
            raise ValueError(f"num_sets must be >= 1, got {self.num_sets}")
        for name in ("set1_reps", "set2_reps", "reps_per_set"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ValueError(f"{name} must be positive, got {value}")
        for name in ("prep_secs", "hang_secs", "rest_secs", "break_secs"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    def reps_for_set(self, set_number: int, set1_default: int, set2_default: int) -> int:
        """
        Nominal rep count for a set.

        reps_per_set wins when defined; otherwise set 1 uses set1_reps and
        every later set uses set2_reps, each falling back to the global
        default for its slot.
        """
        if self.reps_per_set is not None:
            return self.reps_per_set
        if set_number <= 1:
            return self.set1_reps if self.set1_reps is not None else set1_default
        return self.set2_reps if self.set2_reps is not None else set2_default

    def default_weight(self, set_number: int) -> float:
        """Catalog default weight for a set (sets >= 2 share the set-2 slot)."""
        return self.default_set1_weight if set_number <= 1 else self.default_set2_weight

    def duration_for(self, phase: Phase, timing: TimingProfile) -> int:
        """Phase duration in seconds, honouring per-hold overrides."""
        if phase == "prep":
            return self.prep_secs if self.prep_secs is not None else timing.prep_secs
        if phase == "hanging":
            return self.hang_secs if self.hang_secs is not None else timing.hang_secs
        if phase == "resting":
            return self.rest_secs if self.rest_secs is not None else timing.rest_secs
        if phase == "break":
            return self.break_secs if self.break_secs is not None else timing.break_secs
        return 0


@dataclass(frozen=True)
class WorkoutDefinition:
    """
    One training program: an ordered catalog of holds.

    weights_key selects the stored-weights mapping; programs that share hold
    ids (e.g. the quick test run of program "a") point at the same key.
    """

    workout_id: str
    display_name: str
    holds: tuple[HoldDefinition, ...]
    weights_key: str = ""
    timing: str = "standard"
    hidden: bool = False

    def __post_init__(self) -> None:
        if not self.holds:
            raise ValueError(f"Workout '{self.workout_id}' has no holds")
        ids = [h.hold_id for h in self.holds]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Workout '{self.workout_id}' has duplicate hold ids")
        if not self.weights_key:
            object.__setattr__(self, "weights_key", self.workout_id)

    def find_hold(self, hold_id: str) -> HoldDefinition | None:
        """Return the hold with the given id, or None."""
        for hold in self.holds:
            if hold.hold_id == hold_id:
                return hold
        return None
