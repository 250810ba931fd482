"""Shared Typer app object, shared option types, and store utilities."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config import DEFAULT_WORKOUT
from ..core.holds.base import WorkoutDefinition
from ..core.holds.registry import get_workout
from ..io.history_store import HistoryStore, get_default_data_dir
from ..io.weight_store import WeightStore
from . import views

HISTORY_FILENAME = "history.jsonl"
WEIGHTS_FILENAME = "weights.json"

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-D", help="Directory for history and weights (default: ~/.hangboard-timer)"),
]

# Shared --workout option type
WorkoutOption = Annotated[
    str,
    typer.Option("--workout", "-w", help="Workout program ID: a (default), b, test"),
]

app = typer.Typer(
    name="hangboard-timer",
    help="Timed hangboard sessions with per-hold weight progression.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Hangboard session timer. Run 'start' to begin a workout.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def resolve_data_dir(data_dir: Path | None) -> Path:
    return data_dir if data_dir is not None else get_default_data_dir()


def get_store(data_dir: Path | None) -> HistoryStore:
    """Get history store from data dir or default location."""
    return HistoryStore(resolve_data_dir(data_dir) / HISTORY_FILENAME)


def get_weight_store(data_dir: Path | None) -> WeightStore:
    return WeightStore(resolve_data_dir(data_dir) / WEIGHTS_FILENAME)


def require_workout(workout_id: str = DEFAULT_WORKOUT) -> WorkoutDefinition:
    """Look up a workout, exiting with an error message if unknown."""
    try:
        return get_workout(workout_id)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
