"""
YAML → WorkoutDefinition loader.

Loads workout programs from individual YAML files in the bundled
``src/hangboard_timer/workouts/`` directory.  Each file (e.g. a.yaml)
contains the workout header plus an ordered ``holds`` list.

User overrides: place matching files in ``~/.hangboard-timer/workouts/``.
A user file is deep-merged over the bundled workout header; when it
contains a ``holds`` list that list replaces the bundled one as a whole
(hold order is significant, so lists are never merged item by item).
A user file with no bundled counterpart is loaded as a new workout.

Usage (internal, called by registry.py):
    from .loader import load_workouts_from_yaml
    workouts = load_workouts_from_yaml()   # dict or None on failure
"""

from __future__ import annotations

import warnings
from pathlib import Path

from ..engine.config_loader import deep_merge, get_user_dir, load_yaml_file
from .base import HoldDefinition, WorkoutDefinition

_REQUIRED_HOLD_FIELDS: frozenset[str] = frozenset({"id", "name"})

_REQUIRED_WORKOUT_FIELDS: frozenset[str] = frozenset(
    {
        "workout_id",
        "display_name",
        "holds",
    }
)

_OPTIONAL_INT_FIELDS: tuple[str, ...] = (
    "set1_reps",
    "set2_reps",
    "reps_per_set",
    "prep_secs",
    "hang_secs",
    "rest_secs",
    "break_secs",
)


def _opt_int(d: dict, key: str) -> int | None:
    value = d.get(key)
    return int(value) if value is not None else None


def hold_from_dict(d: dict) -> HoldDefinition:
    """Convert a raw dict to HoldDefinition, raising ValueError on missing fields."""
    missing = _REQUIRED_HOLD_FIELDS - set(d)
    if missing:
        raise ValueError(f"HoldDefinition missing fields: {sorted(missing)}")

    ints = {key: _opt_int(d, key) for key in _OPTIONAL_INT_FIELDS}
    return HoldDefinition(
        hold_id=str(d["id"]),
        name=str(d["name"]),
        default_set1_weight=float(d.get("default_set1_weight", 0.0)),
        default_set2_weight=float(d.get("default_set2_weight", 0.0)),
        num_sets=int(d.get("num_sets", 2)),
        is_rest_only=bool(d.get("is_rest_only", False)),
        skip_progression=bool(d.get("skip_progression", False)),
        **ints,
    )


def workout_from_dict(d: dict) -> WorkoutDefinition:
    """Convert a raw dict (from YAML) to a WorkoutDefinition.

    Raises ValueError if any required field is absent or a hold is invalid.
    """
    missing = _REQUIRED_WORKOUT_FIELDS - set(d)
    if missing:
        raise ValueError(f"WorkoutDefinition missing fields: {sorted(missing)}")

    raw_holds = d["holds"]
    if not isinstance(raw_holds, list):
        raise ValueError("holds must be a list")

    # Optional shared overrides applied to every hold (e.g. the quick test run)
    hold_defaults = d.get("hold_defaults") or {}
    holds = tuple(hold_from_dict({**raw, **hold_defaults}) for raw in raw_holds)

    return WorkoutDefinition(
        workout_id=str(d["workout_id"]),
        display_name=str(d["display_name"]),
        holds=holds,
        weights_key=str(d.get("weights_key") or d["workout_id"]),
        timing=str(d.get("timing", "standard")),
        hidden=bool(d.get("hidden", False)),
    )


def _resolve_holds_from(raw: dict, loaded_raw: dict[str, dict]) -> dict:
    """Copy the holds list of another workout when ``holds_from`` is given."""
    source = raw.get("holds_from")
    if source is None or "holds" in raw:
        return raw
    if source not in loaded_raw:
        raise ValueError(f"holds_from refers to unknown workout '{source}'")
    return {**raw, "holds": list(loaded_raw[source]["holds"])}


def _merge_user_file(raw: dict, user_raw: dict) -> dict:
    if "holds" in user_raw:
        merged = deep_merge({k: v for k, v in raw.items() if k != "holds"}, user_raw)
        return merged
    return deep_merge(raw, user_raw)


def _get_bundled_workouts_dir() -> Path | None:
    """Return path to the bundled workouts/ data directory, or None if not found."""
    # loader.py lives at src/hangboard_timer/core/holds/loader.py
    # three levels up → src/hangboard_timer/
    candidate = Path(__file__).parent.parent.parent / "workouts"
    return candidate if candidate.is_dir() else None


def _get_user_workouts_dir() -> Path | None:
    """Return ~/.hangboard-timer/workouts/ if it exists, else None."""
    p = get_user_dir() / "workouts"
    return p if p.is_dir() else None


def load_workouts_from_yaml() -> dict[str, WorkoutDefinition] | None:
    """Return {workout_id: WorkoutDefinition} loaded from per-workout YAML files.

    Files are read in name order; a file that references another workout via
    ``holds_from`` must sort after it.  Invalid files are skipped with a
    warning.  Returns None (rather than raising) when nothing could be
    loaded, so the registry can report the failure.
    """
    bundled_dir = _get_bundled_workouts_dir()
    user_dir = _get_user_workouts_dir()

    if bundled_dir is None and user_dir is None:
        return None

    paths: dict[str, Path] = {}
    if bundled_dir is not None:
        for p in sorted(bundled_dir.glob("*.yaml")):
            paths[p.stem] = p
    user_only: list[Path] = []
    if user_dir is not None:
        for p in sorted(user_dir.glob("*.yaml")):
            if p.stem not in paths:
                user_only.append(p)

    result: dict[str, WorkoutDefinition] = {}
    loaded_raw: dict[str, dict] = {}

    def _load(stem: str, raw: dict) -> None:
        try:
            raw = _resolve_holds_from(raw, loaded_raw)
            workout = workout_from_dict(raw)
        except (ValueError, TypeError) as exc:
            warnings.warn(
                f"hangboard-timer: skipping workout '{stem}': {exc}",
                stacklevel=3,
            )
            return
        loaded_raw[workout.workout_id] = raw
        result[workout.workout_id] = workout

    for stem, bundled_path in paths.items():
        raw = load_yaml_file(bundled_path)
        if not raw:
            continue
        if user_dir is not None:
            user_path = user_dir / f"{stem}.yaml"
            if user_path.exists():
                user_raw = load_yaml_file(user_path)
                if user_raw:
                    raw = _merge_user_file(raw, user_raw)
        _load(stem, raw)

    for p in user_only:
        raw = load_yaml_file(p)
        if raw:
            _load(p.stem, raw)

    return result if result else None
