"""
Workout programs known to the app, keyed by workout_id.

The table is filled once, when this module is first imported, from the
bundled catalogs in ``workouts/*.yaml`` with any files from
``~/.hangboard-timer/workouts/`` layered on top.  Programs marked
``hidden`` (the quick ``test`` run) stay reachable by id but are left out
of visible_workouts().
"""

from .base import WorkoutDefinition


def _build_registry() -> dict[str, WorkoutDefinition]:
    from .loader import load_workouts_from_yaml

    workouts = load_workouts_from_yaml()
    if not workouts:
        # A session cannot run without holds
        raise RuntimeError(
            "hangboard-timer: found no usable workout catalog. "
            "The bundled workouts/*.yaml files are missing or every one failed validation."
        )
    return workouts


WORKOUT_REGISTRY: dict[str, WorkoutDefinition] = _build_registry()


def get_workout(workout_id: str) -> WorkoutDefinition:
    """
    Look up a program by id ("a", "b", "test" or a user-defined one).

    Raises:
        ValueError: no program with that id was loaded
    """
    try:
        return WORKOUT_REGISTRY[workout_id]
    except KeyError:
        valid = ", ".join(WORKOUT_REGISTRY)
        raise ValueError(f"Unknown workout '{workout_id}'. Valid IDs: {valid}") from None


def visible_workouts() -> list[WorkoutDefinition]:
    """Programs offered to the user, in catalog order."""
    return [w for w in WORKOUT_REGISTRY.values() if not w.hidden]
