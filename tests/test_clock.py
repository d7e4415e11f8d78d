import time

import pytest
from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

from pomodoro.core.clock import ManualClock, QtClock


@pytest.fixture(scope="module")
def qt_app() -> QCoreApplication:
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


def run_loop(timeout_ms: int, until) -> None:
    loop = QEventLoop()
    guard = QTimer()
    guard.setSingleShot(True)
    guard.timeout.connect(loop.quit)
    guard.start(timeout_ms)
    poll = QTimer()
    poll.timeout.connect(lambda: loop.quit() if until() else None)
    poll.start(5)
    loop.exec()
    poll.stop()
    guard.stop()


def test_manual_clock_fires_ticks_at_due_times() -> None:
    clock = ManualClock(start=10.0)
    seen: list[float] = []
    clock.schedule_tick(1000, lambda: seen.append(clock.now()))

    clock.advance(3.5)

    assert seen == [11.0, 12.0, 13.0]
    assert clock.now() == 13.5


def test_manual_clock_runs_callbacks_in_time_order() -> None:
    clock = ManualClock()
    order: list[str] = []
    clock.schedule_once(1500, lambda: order.append("once"))
    clock.schedule_tick(1000, lambda: order.append("tick"))

    clock.advance(2)

    assert order == ["tick", "once", "tick"]


def test_manual_clock_one_shot_fires_once() -> None:
    clock = ManualClock()
    calls: list[int] = []
    handle = clock.schedule_once(500, lambda: calls.append(1))

    clock.advance(5)

    assert calls == [1]
    assert handle.active is False
    assert clock.pending == 0


def test_cancel_is_idempotent_and_safe_after_completion() -> None:
    clock = ManualClock()
    calls: list[int] = []
    tick = clock.schedule_tick(1000, lambda: calls.append(1))
    once = clock.schedule_once(100, lambda: None)
    clock.advance(1)

    tick.cancel()
    tick.cancel()
    once.cancel()
    clock.advance(5)

    assert calls == [1]
    assert tick.active is False


def test_callback_can_cancel_its_own_tick() -> None:
    clock = ManualClock()
    calls: list[float] = []
    handles = []

    def on_tick() -> None:
        calls.append(clock.now())
        if len(calls) == 2:
            handles[0].cancel()

    handles.append(clock.schedule_tick(1000, on_tick))
    clock.advance(10)

    assert calls == [1.0, 2.0]


def test_jump_coalesces_missed_ticks() -> None:
    clock = ManualClock()
    calls: list[float] = []
    clock.schedule_tick(1000, lambda: calls.append(clock.now()))

    clock.jump(30)
    assert calls == []

    clock.advance(0)
    assert calls == [30.0]

    clock.advance(1)
    assert calls == [30.0, 31.0]


def test_deliver_ticks_runs_repeating_callbacks_now() -> None:
    clock = ManualClock(start=2.0)
    calls: list[float] = []
    clock.schedule_tick(1000, lambda: calls.append(clock.now()))
    clock.schedule_once(10, lambda: calls.append(-1.0))

    clock.deliver_ticks()

    assert calls == [2.0]


def test_manual_clock_rejects_backwards_time_and_zero_interval() -> None:
    clock = ManualClock()
    with pytest.raises(ValueError):
        clock.advance(-1)
    with pytest.raises(ValueError):
        clock.jump(-0.1)
    with pytest.raises(ValueError):
        clock.schedule_tick(0, lambda: None)


def test_qt_clock_now_is_monotonic() -> None:
    clock = QtClock()
    first = clock.now()
    second = clock.now()
    assert second >= first
    assert abs(first - time.monotonic()) < 1.0


def test_qt_clock_schedule_once_fires(qt_app) -> None:
    clock = QtClock()
    calls: list[int] = []
    handle = clock.schedule_once(10, lambda: calls.append(1))

    run_loop(2000, lambda: bool(calls))

    assert calls == [1]
    assert handle.active is False
    handle.cancel()


def test_qt_clock_tick_repeats_until_cancelled(qt_app) -> None:
    clock = QtClock()
    calls: list[int] = []
    handle = clock.schedule_tick(10, lambda: calls.append(1))

    run_loop(2000, lambda: len(calls) >= 3)
    handle.cancel()
    handle.cancel()
    fired = len(calls)
    run_loop(50, lambda: False)

    assert fired >= 3
    assert len(calls) == fired
    assert handle.active is False


def test_qt_clock_cancelled_once_never_fires(qt_app) -> None:
    clock = QtClock()
    calls: list[int] = []
    handle = clock.schedule_once(20, lambda: calls.append(1))
    handle.cancel()

    run_loop(80, lambda: False)

    assert calls == []
