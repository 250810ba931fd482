"""Weight commands: weights, adjust-weight, reset-weights."""

from typing import Annotated

import typer

from ...core.config import DEFAULT_WORKOUT
from ...core.holds.base import WorkoutDefinition
from ...core.weights import WeightModel
from ...io.serializers import ValidationError
from ...io.weight_store import WeightStore
from .. import views
from ..app import DataDirOption, WorkoutOption, app, get_weight_store, require_workout


def _load_model(store: WeightStore, workout: WorkoutDefinition) -> WeightModel:
    try:
        stored = store.load(workout.weights_key)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    return WeightModel(workout.holds, stored)


@app.command("weights")
def show_weights(
    workout_id: WorkoutOption = DEFAULT_WORKOUT,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the weights your next session will start with.
    """
    workout = require_workout(workout_id)
    model = _load_model(get_weight_store(data_dir), workout)
    views.console.print(views.format_weights_table(workout, model.stored))


@app.command("adjust-weight")
def adjust_weight(
    hold_id: Annotated[
        str,
        typer.Argument(help="Hold ID (see 'weights')"),
    ],
    delta: Annotated[
        float,
        typer.Option("--delta", "-d", help="Change in kg, e.g. 2.5 or -5"),
    ],
    set_number: Annotated[
        int,
        typer.Option("--set", "-s", help="Set to adjust: 1, 2, or 0 for both", min=0, max=2),
    ] = 0,
    workout_id: WorkoutOption = DEFAULT_WORKOUT,
    data_dir: DataDirOption = None,
) -> None:
    """
    Change the stored weight of a hold for future sessions.

    Example: hangboard-timer adjust-weight large-edge --delta 2.5
    """
    workout = require_workout(workout_id)
    hold = workout.find_hold(hold_id)
    if hold is None:
        views.print_error(f"Unknown hold '{hold_id}' in workout '{workout.workout_id}'")
        raise typer.Exit(1)
    if hold.is_rest_only:
        views.print_error(f"{hold.name} has no weight")
        raise typer.Exit(1)

    store = get_weight_store(data_dir)
    model = _load_model(store, workout)
    if set_number == 0:
        model.adjust_base_weight(hold.hold_id, delta)
    else:
        model.adjust_next_weight(hold.hold_id, set_number, delta)
    store.save(workout.weights_key, model.stored)

    views.print_success(
        f"{hold.name}: set 1 {views.format_weight(model.baseline_weight(hold.hold_id, 1))}"
        f", set 2 {views.format_weight(model.baseline_weight(hold.hold_id, 2))}"
    )


@app.command("reset-weights")
def reset_weights(
    workout_id: WorkoutOption = DEFAULT_WORKOUT,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Restore the catalog default weights of a workout.
    """
    workout = require_workout(workout_id)

    if not force and not views.confirm_action(f"Reset all weights of {workout.display_name}?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    get_weight_store(data_dir).reset(workout.weights_key)
    views.print_success(f"Weights of {workout.display_name} reset to defaults")
