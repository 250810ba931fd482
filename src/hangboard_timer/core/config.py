"""
Configuration constants for the hangboard session engine.

Phase durations and default rep counts are grouped into named timing
variants.  "standard" is the real workout; "quick" shortens every phase so
a whole session can be walked through in a couple of minutes.

Values here are the Python defaults.  The bundled timing.yaml and an
optional ~/.hangboard-timer/timing.yaml are merged over them by
get_timing().
"""

from dataclasses import dataclass, replace
from typing import Final

# =============================================================================
# PHASE DURATIONS (seconds)
# =============================================================================

PREP_SECS: Final[int] = 10  # Get-ready countdown before the first rep of a set
HANG_SECS: Final[int] = 7  # One repetition on the board
REST_SECS: Final[int] = 3  # Recovery between repetitions of the same set
BREAK_SECS: Final[int] = 180  # Recovery between sets and between holds

# =============================================================================
# REPETITIONS
# =============================================================================

SET1_REPS: Final[int] = 7
SET2_REPS: Final[int] = 6
DEFAULT_NUM_SETS: Final[int] = 2

# =============================================================================
# TIMER / CUES
# =============================================================================

TICK_INTERVAL_SECONDS: Final[float] = 0.1  # Poll interval of the countdown timer
COUNTDOWN_CUE_WINDOW_SECONDS: Final[int] = 3  # Tick cue fires in (0, 3] s
DONE_DISMISS_SECONDS: Final[int] = 3  # "Done" screen stays up this long

# =============================================================================
# WEIGHT ADJUSTMENT STEPS (kg)
# =============================================================================

WEIGHT_STEPS: Final[tuple[float, ...]] = (-5.0, -2.5, 2.5, 5.0)

DEFAULT_WORKOUT: Final[str] = "a"
DEFAULT_TIMING: Final[str] = "standard"


@dataclass(frozen=True)
class TimingProfile:
    """Global phase durations and default rep counts for one variant."""

    prep_secs: int
    hang_secs: int
    rest_secs: int
    break_secs: int
    set1_reps: int
    set2_reps: int

    def __post_init__(self) -> None:
        for name in ("prep_secs", "hang_secs", "rest_secs", "break_secs"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.set1_reps < 1 or self.set2_reps < 1:
            raise ValueError("default rep counts must be positive")


TIMING_VARIANTS: Final[dict[str, TimingProfile]] = {
    "standard": TimingProfile(
        prep_secs=PREP_SECS,
        hang_secs=HANG_SECS,
        rest_secs=REST_SECS,
        break_secs=BREAK_SECS,
        set1_reps=SET1_REPS,
        set2_reps=SET2_REPS,
    ),
    "quick": TimingProfile(
        prep_secs=3,
        hang_secs=2,
        rest_secs=1,
        break_secs=5,
        set1_reps=2,
        set2_reps=2,
    ),
}


def get_timing(variant: str = DEFAULT_TIMING) -> TimingProfile:
    """
    Return the timing profile for a named variant.

    YAML overrides (section ``timing.<variant>``) are applied on top of the
    Python defaults.  A variant that only exists in YAML must list every
    field.

    Args:
        variant: Variant name, e.g. "standard" or "quick"

    Returns:
        TimingProfile for the variant

    Raises:
        ValueError: If the variant is unknown or its YAML values are invalid
    """
    from .engine.config_loader import load_model_config

    overrides = load_model_config().get("timing", {}).get(variant, {})
    base = TIMING_VARIANTS.get(variant)

    if base is None:
        if not overrides:
            valid = ", ".join(sorted(TIMING_VARIANTS))
            raise ValueError(f"Unknown timing variant '{variant}'. Valid: {valid}")
        try:
            return TimingProfile(**{k: int(v) for k, v in overrides.items()})
        except TypeError as e:
            raise ValueError(f"Timing variant '{variant}' is incomplete: {e}") from e

    known = {k: int(v) for k, v in overrides.items() if k in TimingProfile.__dataclass_fields__}
    return replace(base, **known) if known else base
