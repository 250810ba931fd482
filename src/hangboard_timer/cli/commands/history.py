"""History commands: history, show, delete-record, export, import, log."""

import json
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.config import DEFAULT_WORKOUT, get_timing
from ...core.holds.base import WorkoutDefinition
from ...core.holds.registry import WORKOUT_REGISTRY
from ...core.models import HoldRecord, SessionRecord, SetRecord
from ...core.record_builder import new_record_id
from ...core.weights import WeightModel
from ...io.history_store import HistoryStore
from ...io.serializers import ValidationError, record_to_dict
from .. import views
from ..app import DataDirOption, WorkoutOption, app, get_store, get_weight_store, require_workout

# Manually logged sessions are stamped at local noon of the given date
MANUAL_ENTRY_HOUR = 12


def _load_records(store: HistoryStore) -> list[SessionRecord]:
    try:
        return store.get_all()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def resolve_record(records: list[SessionRecord], ref: str) -> SessionRecord | None:
    """
    Find a record by row number (as shown by 'history') or id prefix.

    Returns None if nothing or more than one record matches.
    """
    if ref.isdigit() and 1 <= int(ref) <= len(records):
        return records[int(ref) - 1]
    matches = [r for r in records if r.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _parse_date(date: str) -> int:
    """YYYY-MM-DD → epoch ms at local noon."""
    try:
        day = datetime.strptime(date, "%Y-%m-%d")
    except ValueError:
        views.print_error(f"Invalid date '{date}', expected YYYY-MM-DD")
        raise typer.Exit(1)
    return int(day.replace(hour=MANUAL_ENTRY_HOUR).timestamp() * 1000)


def _prompt_weight(label: str, default: float) -> float:
    while True:
        raw = views.console.input(f"{label} [{views.format_weight(default)}]: ").strip()
        if not raw:
            return default
        if raw.upper() == "BW":
            return 0.0
        try:
            return float(raw)
        except ValueError:
            views.print_error("Enter a number, e.g. -10 or +2.5 (BW for bodyweight)")


def build_manual_holds(
    workout: WorkoutDefinition,
    set1_weights: dict[str, float],
    set2_offset: float | None = None,
    previous: SessionRecord | None = None,
) -> tuple[HoldRecord, ...]:
    """
    Hold records for a manually entered, fully completed session.

    Set 2 is set 1 plus a gap: *set2_offset* when given, else the gap in
    *previous* (the record being edited), else the hold's default
    set-2/set-1 gap.  Rest-only and non-progressing holds are recorded at
    bodyweight.
    """
    timing = get_timing(workout.timing)
    holds: list[HoldRecord] = []
    for hold in workout.holds:
        fixed = hold.is_rest_only or hold.skip_progression
        w = 0.0 if fixed else set1_weights.get(hold.hold_id, hold.default_set1_weight)

        prev = previous.find_hold(hold.hold_id) if previous is not None else None
        if fixed:
            gap = 0.0
        elif set2_offset is not None:
            gap = set2_offset
        elif prev is not None and prev.set2 is not None:
            gap = prev.set2.weight - prev.set1.weight
        else:
            gap = hold.default_set2_weight - hold.default_set1_weight

        set1 = SetRecord(
            weight=w,
            reps=hold.reps_for_set(1, timing.set1_reps, timing.set2_reps),
            completed=True,
        )
        set2 = (
            SetRecord(
                weight=w + gap,
                reps=hold.reps_for_set(2, timing.set1_reps, timing.set2_reps),
                completed=True,
            )
            if hold.num_sets >= 2
            else None
        )
        holds.append(
            HoldRecord(
                hold_id=hold.hold_id,
                hold_name=hold.name,
                set1=set1,
                set2=set2,
                notes=prev.notes if prev is not None else None,
            )
        )
    return tuple(holds)


@app.command("history")
def history(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of sessions to show"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Display session history, newest first.
    """
    store = get_store(data_dir)
    records = _load_records(store)

    if limit is not None:
        records = records[:limit]

    if json_out:
        print(json.dumps([record_to_dict(r) for r in records], indent=2))
        return

    views.print_history(records)


@app.command("show")
def show(
    ref: Annotated[
        str,
        typer.Argument(help="Row number from 'history' or record ID prefix"),
    ],
    data_dir: DataDirOption = None,
) -> None:
    """
    Show the per-hold breakdown of one session.
    """
    records = _load_records(get_store(data_dir))
    record = resolve_record(records, ref)
    if record is None:
        views.print_error(f"No unique session matches '{ref}'")
        raise typer.Exit(1)
    views.print_record_detail(record)


@app.command("delete-record")
def delete_record(
    ref: Annotated[
        str,
        typer.Argument(help="Row number from 'history' or record ID prefix"),
    ],
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Remove a session from history.
    """
    store = get_store(data_dir)
    records = _load_records(store)

    if not records:
        views.print_error("No sessions in history.")
        raise typer.Exit(1)

    target = resolve_record(records, ref)
    if target is None:
        views.print_error(f"No unique session matches '{ref}'")
        raise typer.Exit(1)

    views.console.print(
        f"Session to delete: [bold]{views.format_timestamp(target.started_at)}[/bold] "
        f"({target.workout_type})"
    )

    if not force and not views.confirm_action("Delete this session?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete(target.id)
    except KeyError:
        views.print_error(f"Session {target.id} no longer exists")
        raise typer.Exit(1)

    views.print_success(f"Deleted session {target.id[:8]}")


@app.command("export")
def export(
    output: Annotated[
        Path,
        typer.Argument(help="JSON file to write"),
    ],
    data_dir: DataDirOption = None,
) -> None:
    """
    Export all sessions as a JSON array (readable by 'import').
    """
    store = get_store(data_dir)
    try:
        items = store.export_records()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    with open(output, "w", encoding="utf-8") as f:
        json.dump(items, f, indent=2)

    views.print_success(f"Exported {len(items)} sessions to {output}")


@app.command("import")
def import_history(
    source: Annotated[
        Path,
        typer.Argument(help="JSON file with an array of sessions"),
    ],
    data_dir: DataDirOption = None,
) -> None:
    """
    Import sessions from a JSON array.

    Nothing is written unless every session in the file is valid.
    """
    try:
        with open(source, "r", encoding="utf-8") as f:
            items = json.load(f)
    except OSError as e:
        views.print_error(f"Cannot read {source}: {e}")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        views.print_error(f"Invalid JSON in {source}: {e}")
        raise typer.Exit(1)

    store = get_store(data_dir)
    try:
        imported = store.import_records(items, workout_types=WORKOUT_REGISTRY.keys())
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Imported {len(imported)} sessions")


@app.command("log")
def log_session(
    workout_id: WorkoutOption = DEFAULT_WORKOUT,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Session date (YYYY-MM-DD, default: today)"),
    ] = None,
    set2_offset: Annotated[
        Optional[float],
        typer.Option("--set2-offset", help="Set-2 weight relative to set 1 (default: per hold)"),
    ] = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="Session notes"),
    ] = None,
    edit: Annotated[
        Optional[str],
        typer.Option("--edit", "-e", help="Edit an existing session (row number or ID prefix)"),
    ] = None,
    accept: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Use current weights without prompting"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log a session done without the timer, or edit a logged one.

    Prompts for the set-1 weight of every progressing hold, defaulting to
    your stored weights (or the edited session's weights).
    """
    store = get_store(data_dir)
    existing: SessionRecord | None = None
    if edit is not None:
        existing = resolve_record(_load_records(store), edit)
        if existing is None:
            views.print_error(f"No unique session matches '{edit}'")
            raise typer.Exit(1)
        workout_id = existing.workout_type

    workout = require_workout(workout_id)

    if date is None:
        if existing is not None:
            date = datetime.fromtimestamp(existing.started_at / 1000).strftime("%Y-%m-%d")
        else:
            date = datetime.now().strftime("%Y-%m-%d")
    started_at = _parse_date(date)

    try:
        stored = get_weight_store(data_dir).load(workout.weights_key)
    except ValidationError as e:
        views.print_warning(f"{e}. Using default weights.")
        stored = None
    model = WeightModel(workout.holds, stored)

    set1_weights: dict[str, float] = {}
    for hold in workout.holds:
        if hold.is_rest_only or hold.skip_progression:
            continue
        default = model.baseline_weight(hold.hold_id, 1)
        if existing is not None:
            hr = existing.find_hold(hold.hold_id)
            if hr is not None:
                default = hr.set1.weight
        set1_weights[hold.hold_id] = default if accept else _prompt_weight(hold.name, default)

    holds = build_manual_holds(workout, set1_weights, set2_offset, previous=existing)

    try:
        if existing is not None:
            duration = existing.completed_at - existing.started_at
            record = SessionRecord(
                id=existing.id,
                workout_type=workout.workout_id,
                started_at=started_at,
                completed_at=started_at + max(duration, 0),
                bailed=existing.bailed,
                holds=holds,
                notes=notes if notes is not None else existing.notes,
                imported=existing.imported,
            )
            store.update(record)
        else:
            record = SessionRecord(
                id=new_record_id(),
                workout_type=workout.workout_id,
                started_at=started_at,
                completed_at=started_at,
                bailed=False,
                holds=holds,
                notes=notes,
                imported=True,
            )
            store.put(record)
    except (ValueError, KeyError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    action = "Updated" if existing is not None else "Logged"
    views.print_success(f"{action} {workout.display_name} session for {date} ({record.id[:8]})")
