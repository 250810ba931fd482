"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of sessions, weights and progress.
"""

from datetime import datetime

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.holds.base import HoldDefinition, WorkoutDefinition
from ..core.models import SessionRecord, SetRecord, SetWeights
from ..core.progress import TrendPoint

console = Console()

PHASE_STYLES = {
    "prep": "yellow",
    "hanging": "bold red",
    "resting": "green",
    "break": "cyan",
    "done": "bold green",
    "idle": "dim",
}


def format_weight(weight: float) -> str:
    """
    Format a weight relative to bodyweight.

    0 is shown as "BW"; added load as "+5", assistance as "-2.5".
    """
    if weight == 0:
        return "BW"
    return f"{weight:+g}"


def format_timestamp(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M")


def format_duration(seconds: float) -> str:
    seconds = max(0, int(round(seconds)))
    return f"{seconds // 60}:{seconds % 60:02d}"


def _fmt_set(s: SetRecord | None) -> str:
    if s is None:
        return "-"
    mark = "✓" if s.completed else "✗"
    return f"{format_weight(s.weight)}×{s.reps} {mark}"


def format_history_table(records: list[SessionRecord]) -> Table:
    """
    Create a Rich table of session history (newest first).

    Args:
        records: Records to display

    Returns:
        Rich Table object
    """
    table = Table(title="Session History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Workout", style="magenta")
    table.add_column("Holds", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Status")
    table.add_column("ID", style="dim")

    for i, record in enumerate(records, 1):
        if record.bailed:
            status = "[red]bailed[/red]"
        else:
            status = "[green]done[/green]"
        if record.imported:
            status += " [dim](imported)[/dim]"

        table.add_row(
            str(i),
            format_timestamp(record.started_at),
            record.workout_type,
            str(len(record.holds)),
            format_duration(record.duration_seconds) if record.duration_seconds else "-",
            status,
            record.id[:8],
        )

    return table


def print_history(records: list[SessionRecord]) -> None:
    if not records:
        console.print("[yellow]No sessions recorded yet.[/yellow]")
        return
    console.print(format_history_table(records))


def print_record_detail(record: SessionRecord) -> None:
    """Per-hold breakdown of one session."""
    table = Table(title=f"{record.workout_type} · {format_timestamp(record.started_at)}")
    table.add_column("Hold", style="cyan")
    table.add_column("Set 1", justify="right")
    table.add_column("Set 2", justify="right")
    table.add_column("Notes", style="dim")

    for h in record.holds:
        table.add_row(h.hold_name, _fmt_set(h.set1), _fmt_set(h.set2), h.notes or "")

    console.print(table)
    if record.notes:
        console.print(f"[dim]Notes: {record.notes}[/dim]")


def format_weights_table(workout: WorkoutDefinition, weights: dict[str, SetWeights]) -> Table:
    """Stored set-1 / set-2 weights per hold of one program."""
    table = Table(title=f"Weights · {workout.display_name}")
    table.add_column("Hold", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Set 1", justify="right")
    table.add_column("Set 2", justify="right")

    for hold in workout.holds:
        if hold.is_rest_only:
            continue
        w = weights.get(hold.hold_id, SetWeights(hold.default_set1_weight, hold.default_set2_weight))
        table.add_row(
            hold.name,
            hold.hold_id,
            format_weight(w.set1),
            format_weight(w.set2) if hold.num_sets >= 2 else "-",
        )

    return table


def print_trend(hold: HoldDefinition, points: list[TrendPoint]) -> None:
    """
    Print the set-1 weight trend of one hold, oldest to newest.

    PR points are starred; bailed sessions are dimmed.
    """
    if not points:
        console.print(f"[yellow]No sessions with {hold.name} yet.[/yellow]")
        return

    table = Table(title=f"Progress · {hold.name}")
    table.add_column("Date", style="cyan")
    table.add_column("Set 1", justify="right")
    table.add_column("", width=2)

    for p in points:
        style = "dim" if p.bailed else ""
        table.add_row(
            p.date.strftime("%Y-%m-%d"),
            format_weight(p.weight),
            "[bold yellow]★[/bold yellow]" if p.is_pr else "",
            style=style,
        )

    console.print(table)


def print_stats(stats: dict[str, int]) -> None:
    console.print(
        f"Completed: [bold]{stats['total_completed']}[/bold]  "
        f"Bailed: {stats['total_bailed']}  "
        f"Imported: {stats['total_imported']}"
    )


def print_workouts(workouts: list[WorkoutDefinition]) -> None:
    table = Table(title="Workouts")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Holds", justify="right")
    table.add_column("Timing", style="dim")

    for w in workouts:
        table.add_row(w.workout_id, w.display_name, str(len(w.holds)), w.timing)

    console.print(table)


def phase_line(
    phase: str,
    hold: HoldDefinition | None,
    set_number: int,
    rep_index: int,
    reps: int,
    remaining: float,
    weight: float | None,
    paused: bool = False,
) -> Text:
    """One-line live status: phase, hold, set/rep, weight and countdown."""
    style = PHASE_STYLES.get(phase, "")
    text = Text()
    text.append(f"{phase.upper():<8}", style=style)
    if hold is not None:
        text.append(f" {hold.name}")
        if phase in ("hanging", "resting"):
            text.append(f"  set {set_number}/{hold.num_sets}  rep {rep_index + 1}/{reps}")
        else:
            text.append(f"  set {set_number}/{hold.num_sets}")
        if weight is not None and not hold.is_rest_only:
            text.append(f"  {format_weight(weight)}", style="bold")
    text.append(f"  {remaining:4.1f}s", style="bold")
    if paused:
        text.append("  [paused]", style="dim")
    return text


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
