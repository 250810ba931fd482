"""Progress and catalog commands: progress, workouts."""

import json
from typing import Annotated

import typer

from ...core.config import DEFAULT_WORKOUT
from ...core.holds.registry import visible_workouts
from ...core.progress import TREND_LIMIT, build_trend, compute_stats
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, WorkoutOption, app, get_store, require_workout


@app.command("progress")
def progress(
    hold_id: Annotated[
        str,
        typer.Argument(help="Hold ID (see 'weights')"),
    ],
    workout_id: WorkoutOption = DEFAULT_WORKOUT,
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", help="Number of sessions in the trend", min=1),
    ] = TREND_LIMIT,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the set-1 weight trend of one hold, with PRs starred.
    """
    workout = require_workout(workout_id)
    hold = workout.find_hold(hold_id)
    if hold is None:
        views.print_error(f"Unknown hold '{hold_id}' in workout '{workout.workout_id}'")
        raise typer.Exit(1)

    try:
        records = get_store(data_dir).get_all()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    points = build_trend(records, hold.hold_id, workout.workout_id, limit)
    stats = compute_stats(records)

    if json_out:
        print(json.dumps({
            "hold_id": hold.hold_id,
            "workout_type": workout.workout_id,
            "trend": [
                {
                    "date": p.date.strftime("%Y-%m-%d"),
                    "weight": p.weight,
                    "bailed": p.bailed,
                    "is_pr": p.is_pr,
                }
                for p in points
            ],
            **stats,
        }, indent=2))
        return

    views.print_trend(hold, points)
    views.print_stats(stats)


@app.command("workouts")
def workouts() -> None:
    """
    List the available workout programs.
    """
    views.print_workouts(visible_workouts())
