"""Live session command: start, with the Ctrl+C action menu."""

import time
from typing import Annotated, Optional

import typer
from rich.live import Live

from ...core.config import DEFAULT_WORKOUT, TICK_INTERVAL_SECONDS, WEIGHT_STEPS, get_timing
from ...core.holds.base import HoldDefinition
from ...core.models import SessionState
from ...core.session import SessionEngine
from ...io.serializers import ValidationError
from .. import views
from ..app import DataDirOption, WorkoutOption, app, get_store, get_weight_store, require_workout
from ..notifier import TerminalNotifier


def _upcoming(engine: SessionEngine) -> tuple[HoldDefinition | None, int]:
    """
    Hold and set the user is about to do (or doing).

    During a break this is the set after the break; otherwise the current one.
    """
    state = engine.state
    hold = engine.current_hold
    if hold is None or state.phase != "break":
        return hold, state.set_number
    if state.set_number < hold.num_sets:
        return hold, state.set_number + 1
    return engine.next_hold, 1


def _status_line(engine: SessionEngine):
    state = engine.state
    hold, set_number = _upcoming(engine)
    weight = engine.effective_weight(hold.hold_id, set_number) if hold is not None else None
    return views.phase_line(
        state.phase,
        hold,
        set_number,
        state.rep_index,
        engine.reps_for_current_set(),
        engine.remaining,
        weight,
        paused=state.paused,
    )


def _announcer(engine: SessionEngine):
    """State listener that prints a line whenever the phase or set changes."""
    last_key: tuple | None = None

    def announce(state: SessionState) -> None:
        nonlocal last_key
        key = (state.phase, state.hold_index, state.set_number)
        if key == last_key:
            return
        last_key = key

        if state.phase == "prep":
            hold = engine.current_hold
            if hold is None or hold.is_rest_only:
                return
            weight = engine.effective_weight(hold.hold_id, state.set_number)
            views.console.print(
                f"[yellow]Get ready:[/yellow] [bold]{hold.name}[/bold] "
                f"set {state.set_number}/{hold.num_sets} · "
                f"{engine.reps_for_current_set()} reps · {views.format_weight(weight)}"
            )
        elif state.phase == "break":
            hold, set_number = _upcoming(engine)
            duration = engine.phase_duration()
            if hold is None:
                views.console.print(f"[cyan]Break {duration}s[/cyan] · last set done")
            else:
                weight = engine.effective_weight(hold.hold_id, set_number)
                views.console.print(
                    f"[cyan]Break {duration}s[/cyan] · next: {hold.name} set {set_number}"
                    + ("" if hold.is_rest_only else f" at {views.format_weight(weight)}")
                )
            views.console.print("[dim]Ctrl+C to adjust weights or skip[/dim]")
        elif state.phase == "done":
            views.print_success("Workout complete!")

    return announce


def _choose_delta(prompt: str) -> float | None:
    """Pick one of the weight steps; None when cancelled."""
    steps = "  ".join(f"[{i}] {step:+g}" for i, step in enumerate(WEIGHT_STEPS, 1))
    views.console.print(f"{prompt}: {steps}")
    raw = views.console.input("Step (Enter to cancel): ").strip()
    if not raw:
        return None
    try:
        return WEIGHT_STEPS[int(raw) - 1]
    except (ValueError, IndexError):
        pass
    try:
        return float(raw)
    except ValueError:
        views.print_error(f"Not a weight step: {raw}")
        return None


def _action_menu(engine: SessionEngine) -> None:
    """
    Interactive menu shown while the session is paused.

    Skips resume the session straight away; weight and note changes keep
    it paused so the menu comes back.
    """
    state = engine.state
    hold = engine.current_hold
    next_hold, next_set = _upcoming(engine)

    menu: dict[str, str] = {"r": "Resume"}
    if state.phase == "break":
        menu["b"] = "Skip break"
    if state.phase in ("prep", "hanging", "resting"):
        menu["s"] = "Skip set"
    if state.phase not in ("done",):
        menu["n"] = "Skip next set"
        menu["h"] = "Skip next hold"
    if next_hold is not None and not next_hold.is_rest_only:
        menu["o"] = f"Change weight of {next_hold.name} set {next_set} (this session only)"
        if next_hold.num_sets >= 2:
            menu["w"] = f"Adjust set-2 weight of {next_hold.name}"
    if hold is not None and not hold.is_rest_only and not hold.skip_progression:
        menu["p"] = f"Progress {hold.name} (both sets, next session)"
    if hold is not None:
        menu["t"] = f"Note for {hold.name}"
    menu["q"] = "Bail (save and stop)"

    views.console.print()
    views.console.print(views.phase_line(
        state.phase, hold, state.set_number, state.rep_index,
        engine.reps_for_current_set(), engine.remaining, None, paused=True,
    ))
    for key, desc in menu.items():
        views.console.print(f"  \\[{key}] {desc}")

    try:
        choice = views.console.input("Choose [r]: ").strip().lower() or "r"
    except (EOFError, KeyboardInterrupt):
        choice = "q"

    if choice not in menu:
        views.print_error(f"Unknown choice: {choice}")
        return

    if choice == "q":
        engine.bail()
        return

    if choice == "b":
        engine.advance()
    elif choice == "s":
        engine.skip_set()
    elif choice == "n":
        engine.skip_next_set()
    elif choice == "h":
        engine.skip_next_hold()
    elif choice == "o" and next_hold is not None:
        delta = _choose_delta(f"{next_hold.name} set {next_set}")
        if delta is not None:
            value = engine.set_session_override(next_hold.hold_id, next_set, delta)
            views.print_info(f"{next_hold.name} set {next_set}: {views.format_weight(value)} (this session)")
    elif choice == "w" and next_hold is not None:
        delta = _choose_delta(f"{next_hold.name} set 2")
        if delta is not None:
            value = engine.adjust_set2_for_session(next_hold.hold_id, delta)
            views.print_info(f"{next_hold.name} set 2: {views.format_weight(value)}")
    elif choice == "p" and hold is not None:
        delta = _choose_delta(f"Progress {hold.name}")
        if delta is not None:
            engine.adjust_base_weight(hold.hold_id, delta)
            w1 = engine.weights.baseline_weight(hold.hold_id, 1)
            w2 = engine.weights.baseline_weight(hold.hold_id, 2)
            views.print_success(
                f"{hold.name} next session: {views.format_weight(w1)} / {views.format_weight(w2)}"
            )
    elif choice == "t" and hold is not None:
        engine.set_hold_note(hold.hold_id, views.console.input("Note: ").strip())

    if choice in ("r", "b", "s", "n", "h"):
        engine.resume()


def run_live(engine: SessionEngine) -> None:
    """
    Drive the engine until it goes idle, rendering a live status line.

    Ctrl+C pauses and opens the action menu; Ctrl+C inside the menu bails
    and saves the session.
    """
    while engine.is_active:
        try:
            with Live(
                _status_line(engine),
                console=views.console,
                refresh_per_second=10,
                transient=True,
            ) as live:
                while engine.is_active and not engine.state.paused:
                    engine.poll()
                    live.update(_status_line(engine))
                    time.sleep(TICK_INTERVAL_SECONDS)
        except KeyboardInterrupt:
            engine.pause()

        if engine.is_active and engine.state.paused:
            try:
                _action_menu(engine)
            except (EOFError, KeyboardInterrupt):
                engine.bail()


@app.command("start")
def start(
    workout_id: WorkoutOption = DEFAULT_WORKOUT,
    timing: Annotated[
        Optional[str],
        typer.Option("--timing", "-t", help="Timing variant: standard | quick (default: the workout's)"),
    ] = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="Session notes"),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="No terminal bell"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Run a live hangboard session.

    Press Ctrl+C at any time to pause: skip a break, set or hold, adjust
    weights, add a note, or bail.  The session is saved to history when it
    finishes or when you bail.
    """
    workout = require_workout(workout_id)

    try:
        profile = get_timing(timing or workout.timing)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store = get_store(data_dir)
    weight_store = get_weight_store(data_dir)
    try:
        stored = weight_store.load(workout.weights_key)
    except ValidationError as e:
        views.print_warning(f"{e}. Using default weights.")
        stored = None

    engine = SessionEngine(
        workout,
        profile,
        stored,
        notifier=TerminalNotifier(views.console, quiet=quiet),
        history=store,
        weight_writer=weight_store,
    )
    engine.notes = notes
    engine.on_state_changed(_announcer(engine))

    views.console.print(f"[bold cyan]{workout.display_name}[/bold cyan] · {len(workout.holds)} holds")
    engine.start_session()
    run_live(engine)

    record = engine.last_record
    if record is None:
        return

    views.console.print()
    views.print_record_detail(record)
    if record.bailed:
        views.print_warning(f"Session bailed and saved ({record.id[:8]})")
    else:
        views.print_success(f"Session saved ({record.id[:8]})")
