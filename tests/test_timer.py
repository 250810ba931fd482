"""Tests for the deadline-based countdown timer, driven by a fake clock."""

import pytest

from hangboard_timer.core.timer import CountdownTimer


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def _timer(clock, ticks=None, expiries=None) -> CountdownTimer:
    return CountdownTimer(
        on_tick=(ticks.append if ticks is not None else None),
        on_expire=((lambda: expiries.append(clock.now)) if expiries is not None else None),
        clock=clock,
    )


class TestCountdown:
    def test_remaining_follows_clock(self, clock):
        timer = _timer(clock)
        timer.start(10)
        clock.advance(4)
        assert timer.poll() == pytest.approx(6)

    def test_tick_receives_remaining(self, clock):
        ticks: list[float] = []
        timer = _timer(clock, ticks=ticks)
        timer.start(5)
        clock.advance(1.5)
        timer.poll()
        assert ticks == [pytest.approx(3.5)]

    def test_expires_once(self, clock):
        expiries: list[float] = []
        timer = _timer(clock, expiries=expiries)
        timer.start(3)
        clock.advance(3)
        timer.poll()
        timer.poll()
        clock.advance(1)
        timer.poll()
        assert len(expiries) == 1
        assert timer.expired
        assert not timer.running

    def test_late_poll_does_not_drift(self, clock):
        expiries: list[float] = []
        timer = _timer(clock, expiries=expiries)
        timer.start(7)
        clock.advance(12)
        assert timer.poll() == 0
        assert len(expiries) == 1

    def test_negative_duration_rejected(self, clock):
        with pytest.raises(ValueError):
            _timer(clock).start(-1)

    def test_zero_duration_expires_on_first_poll(self, clock):
        expiries: list[float] = []
        timer = _timer(clock, expiries=expiries)
        timer.start(0)
        timer.poll()
        assert len(expiries) == 1


class TestPauseResume:
    def test_pause_resume_expires_after_captured_remaining(self, clock):
        """10 s timer, paused with 6 s left, 3 s wait, then 6 s more to expiry."""
        expiries: list[float] = []
        timer = _timer(clock, expiries=expiries)
        timer.start(10)

        clock.advance(4)
        assert timer.pause() == pytest.approx(6)

        clock.advance(3)
        assert timer.poll() == pytest.approx(6)
        assert not expiries

        timer.resume()
        resumed_at = clock.now
        clock.advance(5.9)
        timer.poll()
        assert not expiries

        clock.advance(0.2)
        timer.poll()
        assert expiries == [pytest.approx(resumed_at + 6.1)]

    def test_start_paused_keeps_full_duration(self, clock):
        timer = _timer(clock)
        timer.start(8, running=False)
        clock.advance(5)
        assert timer.poll() == 8
        assert not timer.running

    def test_running_setter(self, clock):
        timer = _timer(clock)
        timer.start(10)
        clock.advance(2)
        timer.running = False
        clock.advance(100)
        timer.running = True
        clock.advance(1)
        assert timer.poll() == pytest.approx(7)

    def test_resume_after_expiry_is_noop(self, clock):
        timer = _timer(clock)
        timer.start(1)
        clock.advance(1)
        timer.poll()
        timer.resume()
        assert not timer.running

    def test_restart_discards_paused_remaining(self, clock):
        timer = _timer(clock)
        timer.start(10)
        clock.advance(3)
        timer.pause()
        timer.start(4)
        clock.advance(1)
        assert timer.poll() == pytest.approx(3)


class TestStop:
    def test_no_callbacks_after_stop(self, clock):
        ticks: list[float] = []
        expiries: list[float] = []
        timer = _timer(clock, ticks=ticks, expiries=expiries)
        timer.start(2)
        timer.stop()
        clock.advance(5)
        timer.poll()
        assert ticks == []
        assert expiries == []

    def test_resume_after_stop_is_ignored(self, clock):
        expiries: list[float] = []
        timer = _timer(clock, expiries=expiries)
        timer.start(2)
        timer.stop()
        timer.resume()
        timer.running = True
        assert not timer.running
        clock.advance(5)
        timer.poll()
        assert expiries == []

    def test_start_after_stop_runs_again(self, clock):
        expiries: list[float] = []
        timer = _timer(clock, expiries=expiries)
        timer.start(2)
        timer.stop()
        timer.start(1)
        clock.advance(1)
        timer.poll()
        assert expiries == [clock.now]

    def test_expiry_callback_may_restart(self, clock):
        timer = CountdownTimer(clock=clock)
        timer.on_expire = lambda: timer.start(5)
        timer.start(1)
        clock.advance(1)
        timer.poll()
        assert timer.running
        assert timer.remaining == 5


class TestRun:
    def test_run_polls_until_expiry(self, clock):
        ticks: list[float] = []
        expiries: list[float] = []
        timer = _timer(clock, ticks=ticks, expiries=expiries)
        timer.start(1)
        timer.run(sleep=clock.advance)
        assert len(expiries) == 1
        assert len(ticks) >= 10
        assert ticks[-1] == 0
