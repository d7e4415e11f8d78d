from __future__ import annotations

"""Monotonic time source and cancellable scheduling for the timer engine."""

import time
from dataclasses import dataclass
from typing import Callable, Protocol

from PyQt6.QtCore import QObject, Qt, QTimer


class CancelHandle(Protocol):
    @property
    def active(self) -> bool:
        """True while the scheduled callback can still fire."""

    def cancel(self) -> None:
        """Stop the callback from firing again. Safe to call repeatedly."""


class Clock(Protocol):
    def now(self) -> float:
        """Monotonic seconds; only differences are meaningful."""

    def schedule_tick(self, interval_ms: int, callback: Callable[[], None]) -> CancelHandle:
        """Call `callback` every `interval_ms` until cancelled."""

    def schedule_once(self, delay_ms: int, callback: Callable[[], None]) -> CancelHandle:
        """Call `callback` once after `delay_ms` unless cancelled first."""


class _QtTimerHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtClock:
    """Production clock: `time.monotonic()` plus QTimer scheduling on the Qt event loop."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def now(self) -> float:
        return time.monotonic()

    def schedule_tick(self, interval_ms: int, callback: Callable[[], None]) -> CancelHandle:
        if interval_ms <= 0:
            raise ValueError("Tick interval must be positive")
        timer = self._make_timer(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        return _QtTimerHandle(timer)

    def schedule_once(self, delay_ms: int, callback: Callable[[], None]) -> CancelHandle:
        timer = self._make_timer(max(0, delay_ms))
        timer.setSingleShot(True)
        handle = _QtTimerHandle(timer)

        def fire() -> None:
            handle.cancel()
            callback()

        timer.timeout.connect(fire)
        timer.start()
        return handle

    def _make_timer(self, interval_ms: int) -> QTimer:
        timer = QTimer(self._parent)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.setInterval(interval_ms)
        return timer


@dataclass
class _ManualTask:
    due: float
    interval: float | None
    callback: Callable[[], None]
    seq: int
    cancelled: bool = False


class _ManualHandle:
    def __init__(self, task: _ManualTask) -> None:
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.cancelled

    def cancel(self) -> None:
        self._task.cancelled = True


class ManualClock:
    """Deterministic clock driven by hand.

    Nothing fires on its own. `advance()` walks time forward and runs every
    callback that falls due, in order, with `now()` set to the callback's due
    time. `jump()` moves time without running anything, the way a suspended
    host misses its timers; overdue ticks are then coalesced into a single
    delivery on the next `advance()`. `deliver_ticks()` runs the repeating
    callbacks right now, off their schedule.

    Example:
        clock = ManualClock(start=100.0)
        handle = clock.schedule_tick(1000, on_tick)
        clock.advance(2.5)  # on_tick at 101.0 and 102.0
        handle.cancel()
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._tasks: list[_ManualTask] = []
        self._seq = 0

    def now(self) -> float:
        return self._now

    def schedule_tick(self, interval_ms: int, callback: Callable[[], None]) -> CancelHandle:
        if interval_ms <= 0:
            raise ValueError("Tick interval must be positive")
        interval = interval_ms / 1000.0
        return self._add(self._now + interval, interval, callback)

    def schedule_once(self, delay_ms: int, callback: Callable[[], None]) -> CancelHandle:
        return self._add(self._now + max(0, delay_ms) / 1000.0, None, callback)

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.cancelled)

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("Cannot move a monotonic clock backwards")
        target = self._now + seconds
        while True:
            task = self._next_due(target)
            if task is None:
                break
            self._now = max(self._now, task.due)
            if task.interval is None:
                task.cancelled = True
            else:
                task.due += task.interval
            task.callback()
        self._now = target

    def jump(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("Cannot move a monotonic clock backwards")
        self._now += seconds
        for task in self._tasks:
            if task.interval is not None and not task.cancelled and task.due <= self._now:
                task.due = self._now

    def deliver_ticks(self) -> None:
        for task in list(self._tasks):
            if task.interval is not None and not task.cancelled:
                task.callback()

    def _add(self, due: float, interval: float | None, callback: Callable[[], None]) -> CancelHandle:
        self._seq += 1
        task = _ManualTask(due=due, interval=interval, callback=callback, seq=self._seq)
        self._tasks.append(task)
        return _ManualHandle(task)

    def _next_due(self, target: float) -> _ManualTask | None:
        self._tasks = [task for task in self._tasks if not task.cancelled]
        due = [task for task in self._tasks if task.due <= target]
        if not due:
            return None
        return min(due, key=lambda task: (task.due, task.seq))
