"""
Wall-clock countdown timer.

The timer stores an absolute deadline and recomputes the remaining time
from the clock on every poll, so late or irregular polls never accumulate
drift.  It has no thread of its own: the owner calls poll() (or run(),
which polls in a sleep loop) and receives tick/expiry callbacks
synchronously.
"""

from __future__ import annotations

import time
from typing import Callable

from .config import TICK_INTERVAL_SECONDS

TickCallback = Callable[[float], None]
ExpireCallback = Callable[[], None]


class CountdownTimer:
    """
    Single-shot countdown with pause/resume.

    Lifecycle:
        start(d)  -> running, deadline = now + d
        pause()   -> stopped, remaining captured
        resume()  -> running, deadline = now + captured remaining
        poll()    -> on_tick(remaining); on_expire() once at zero
        stop()    -> stopped for good until the next start()
    """

    def __init__(
        self,
        on_tick: TickCallback | None = None,
        on_expire: ExpireCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = TICK_INTERVAL_SECONDS,
    ):
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.poll_interval = poll_interval
        self._clock = clock
        self._duration = 0.0
        self._remaining = 0.0
        self._deadline: float | None = None
        self._running = False
        self._expired = False
        self._stopped = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def remaining(self) -> float:
        """Remaining seconds as of the last poll/pause (not recomputed here)."""
        return self._remaining

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def running(self) -> bool:
        return self._running

    @running.setter
    def running(self, value: bool) -> None:
        if value:
            self.resume()
        else:
            self.pause()

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self, duration: float, running: bool = True) -> None:
        """
        Begin a new countdown of *duration* seconds.

        Any remaining time captured by an earlier pause is discarded.  With
        ``running=False`` the timer is armed but paused at the full duration.
        """
        if duration < 0:
            raise ValueError("duration must be non-negative")
        self._duration = float(duration)
        self._remaining = float(duration)
        self._expired = False
        self._stopped = False
        self._running = False
        self._deadline = None
        if running:
            self.resume()

    def pause(self) -> float:
        """Stop polling and return the exact remaining seconds."""
        if self._running and self._deadline is not None:
            self._remaining = max(0.0, self._deadline - self._clock())
        self._running = False
        self._deadline = None
        return self._remaining

    def resume(self) -> None:
        """Restart the countdown from the remaining time captured at pause."""
        if self._running or self._expired or self._stopped:
            return
        self._deadline = self._clock() + self._remaining
        self._running = True

    def stop(self) -> None:
        """
        Cancel unconditionally; no callback fires after this.

        resume() is ignored until the next start().
        """
        self._stopped = True
        self._running = False
        self._deadline = None

    def poll(self) -> float:
        """
        Recompute remaining time, firing on_tick and, at zero, on_expire.

        Returns:
            Remaining seconds (unchanged when paused, stopped or expired)
        """
        if not self._running or self._deadline is None:
            return self._remaining

        self._remaining = max(0.0, self._deadline - self._clock())
        if self.on_tick is not None:
            self.on_tick(self._remaining)

        # on_tick may have stopped or restarted the timer
        if not self._running:
            return self._remaining

        if self._remaining <= 0:
            self._running = False
            self._deadline = None
            self._expired = True
            if self.on_expire is not None:
                self.on_expire()
        return self._remaining

    def run(self, sleep: Callable[[float], None] = time.sleep) -> None:
        """Poll every poll_interval seconds until the timer stops running."""
        while self._running:
            self.poll()
            if self._running:
                sleep(self.poll_interval)
