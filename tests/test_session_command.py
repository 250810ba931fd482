"""
Tests for the interactive pause menu of the 'start' command.

Console input is replaced with scripted answers; the engine runs on a fake
clock so nothing sleeps.
"""

import pytest

from hangboard_timer.cli import views
from hangboard_timer.cli.commands.session import _action_menu, run_live
from hangboard_timer.core.config import TimingProfile
from hangboard_timer.core.holds.base import HoldDefinition, WorkoutDefinition
from hangboard_timer.core.session import SessionEngine

TIMING = TimingProfile(prep_secs=2, hang_secs=1, rest_secs=1, break_secs=3, set1_reps=2, set2_reps=2)


class MemoryHistory:
    def __init__(self):
        self.records = []

    def put(self, record) -> None:
        self.records.append(record)


def _paused_engine(history: MemoryHistory) -> SessionEngine:
    workout = WorkoutDefinition(
        workout_id="a",
        display_name="Test",
        holds=(HoldDefinition(hold_id="edge", name="Edge"), HoldDefinition(hold_id="pinch", name="Pinch")),
    )
    engine = SessionEngine(workout, TIMING, history=history, clock=lambda: 0.0, wall_clock=lambda: 1000.0)
    engine.start_session()
    engine.pause()
    return engine


def _script(monkeypatch, *answers):
    """Feed console.input from *answers*; exception classes are raised."""
    queue = list(answers)

    def fake_input(prompt: str = "") -> str:
        answer = queue.pop(0)
        if isinstance(answer, type) and issubclass(answer, BaseException):
            raise answer()
        return answer

    monkeypatch.setattr(views.console, "input", fake_input)


class TestActionMenu:
    def test_resume(self, monkeypatch):
        history = MemoryHistory()
        engine = _paused_engine(history)
        _script(monkeypatch, "r")
        _action_menu(engine)
        assert not engine.state.paused
        assert history.records == []

    def test_quit_bails_and_saves(self, monkeypatch):
        history = MemoryHistory()
        engine = _paused_engine(history)
        _script(monkeypatch, "q")
        _action_menu(engine)
        assert engine.state.phase == "idle"
        assert len(history.records) == 1 and history.records[0].bailed

    @pytest.mark.parametrize("interrupt", [KeyboardInterrupt, EOFError])
    def test_interrupt_at_prompt_bails_and_saves(self, monkeypatch, interrupt):
        history = MemoryHistory()
        engine = _paused_engine(history)
        _script(monkeypatch, interrupt)
        _action_menu(engine)
        assert engine.state.phase == "idle"
        assert len(history.records) == 1 and history.records[0].bailed


class TestRunLive:
    def test_ctrl_c_in_menu_ends_with_saved_record(self, monkeypatch):
        history = MemoryHistory()
        engine = _paused_engine(history)
        _script(monkeypatch, KeyboardInterrupt)
        run_live(engine)
        assert not engine.is_active
        assert len(history.records) == 1 and history.records[0].bailed

    def test_ctrl_c_in_note_prompt_ends_with_saved_record(self, monkeypatch):
        history = MemoryHistory()
        engine = _paused_engine(history)
        _script(monkeypatch, "t", KeyboardInterrupt)
        run_live(engine)
        assert not engine.is_active
        assert len(history.records) == 1 and history.records[0].bailed
