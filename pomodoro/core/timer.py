from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from PyQt6.QtCore import QObject, pyqtSignal

from pomodoro.core import config
from pomodoro.core.clock import CancelHandle, Clock, QtClock


logger = logging.getLogger(__name__)


class Phase(str, Enum):
    FOCUS = "focus"
    SHORT_RECOVERY = "short_recovery"
    LONG_RECOVERY = "long_recovery"

    @property
    def label(self) -> str:
        return _PHASE_LABELS[self]

    @property
    def is_recovery(self) -> bool:
        return self is not Phase.FOCUS


_PHASE_LABELS = {
    Phase.FOCUS: "Pomodoro",
    Phase.SHORT_RECOVERY: "Short Break",
    Phase.LONG_RECOVERY: "Long Break",
}

DEFAULT_DURATIONS: dict[Phase, int] = {
    Phase.FOCUS: config.DEFAULT_FOCUS_SEC,
    Phase.SHORT_RECOVERY: config.DEFAULT_SHORT_RECOVERY_SEC,
    Phase.LONG_RECOVERY: config.DEFAULT_LONG_RECOVERY_SEC,
}


class InvalidDuration(ValueError):
    def __init__(self, phase: Phase, seconds: object) -> None:
        super().__init__(f"Duration for {phase.value} must be a whole number of seconds >= 1, got {seconds!r}")
        self.phase = phase
        self.seconds = seconds


@dataclass(frozen=True)
class EngineSnapshot:
    phase: Phase
    remaining_seconds: int
    running: bool
    cycle_counter: int
    durations: Mapping[Phase, int] = field(hash=False)
    deadline: float | None
    total_seconds: int
    auto_start_pending: bool = False

    @property
    def progress(self) -> float:
        if self.total_seconds <= 0:
            return 0.0
        return max(0.0, min(1.0, 1.0 - self.remaining_seconds / self.total_seconds))


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _validate_duration(phase: Phase, seconds: object) -> int:
    if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 1:
        raise InvalidDuration(phase, seconds)
    return seconds


class PomodoroEngine(QObject):
    """Deadline-based pomodoro state machine.

    Remaining time is always derived from the deadline fixed at `start()`,
    so late or missing ticks never make the countdown drift. When a phase
    runs out the engine emits `phase_completed`, advances to the next phase
    (every fourth focus phase is followed by a long recovery) and starts
    itself again after a short grace delay.

    Commands and tick callbacks must be called from one thread.
    """

    state_changed = pyqtSignal(object)
    phase_completed = pyqtSignal(object)

    def __init__(
        self,
        clock: Clock | None = None,
        durations: Mapping[Phase, int] | None = None,
        tick_interval_ms: int = config.TICK_INTERVAL_MS,
        auto_start_delay_ms: int = config.AUTO_START_DELAY_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._clock: Clock = clock if clock is not None else QtClock(self)
        self._durations = dict(DEFAULT_DURATIONS)
        for phase, seconds in (durations or {}).items():
            phase = Phase(phase)
            self._durations[phase] = _validate_duration(phase, seconds)
        self._tick_interval_ms = tick_interval_ms
        self._auto_start_delay_ms = auto_start_delay_ms

        self._phase = Phase.FOCUS
        self._remaining_sec = self._durations[Phase.FOCUS]
        self._total_sec = self._remaining_sec
        self._running = False
        self._cycle_counter = 0
        self._deadline: float | None = None
        self._tick_handle: CancelHandle | None = None
        self._auto_start_handle: CancelHandle | None = None
        self._epoch = 0
        self._completing = False

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_sec

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cycle_counter(self) -> int:
        return self._cycle_counter

    @property
    def durations(self) -> dict[Phase, int]:
        return dict(self._durations)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def auto_start_pending(self) -> bool:
        return self._auto_start_handle is not None and self._auto_start_handle.active

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            phase=self._phase,
            remaining_seconds=self._remaining_sec,
            running=self._running,
            cycle_counter=self._cycle_counter,
            durations=MappingProxyType(dict(self._durations)),
            deadline=self._deadline,
            total_seconds=self._total_sec,
            auto_start_pending=self.auto_start_pending,
        )

    # ----- Commands -----
    def start(self) -> None:
        # during the completion notification the scheduled auto-start covers it
        if self._running or self._completing:
            return
        self._epoch += 1
        self._cancel_auto_start()
        self._deadline = self._clock.now() + self._remaining_sec
        self._running = True
        self._tick_handle = self._clock.schedule_tick(self._tick_interval_ms, self._on_tick)
        logger.debug("Started %s with %ss left", self._phase.value, self._remaining_sec)
        self._publish()

    def pause(self) -> None:
        self._epoch += 1
        self._cancel_auto_start()
        if not self._running:
            return
        # remaining time stays at the value published by the last tick
        self._stop_ticking()
        self._running = False
        self._deadline = None
        logger.debug("Paused %s at %ss", self._phase.value, self._remaining_sec)
        self._publish()

    def toggle(self) -> None:
        if self._running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        self._halt()
        self._load_phase(self._phase)
        logger.debug("Reset %s to %ss", self._phase.value, self._remaining_sec)
        self._publish()

    def switch_phase(self, new_phase: Phase) -> None:
        new_phase = Phase(new_phase)
        self._halt()
        self._load_phase(new_phase)
        if new_phase is Phase.FOCUS:
            self._cycle_counter = 0
        logger.debug("Switched to %s", new_phase.value)
        self._publish()

    def set_duration(self, phase: Phase, seconds: int) -> None:
        phase = Phase(phase)
        self._durations[phase] = _validate_duration(phase, seconds)
        if phase is self._phase and not self._running:
            self._remaining_sec = seconds
            self._total_sec = seconds
        self._publish()

    def set_durations(self, durations: Mapping[Phase, int]) -> None:
        checked = {}
        for phase, seconds in durations.items():
            phase = Phase(phase)
            checked[phase] = _validate_duration(phase, seconds)
        for phase, seconds in checked.items():
            self.set_duration(phase, seconds)

    # ----- Internals -----
    def _on_tick(self) -> None:
        if not self._running or self._deadline is None:
            return
        self._remaining_sec = max(0, _round_half_up(self._deadline - self._clock.now()))
        epoch = self._epoch
        self._publish()
        if epoch != self._epoch:
            return
        if self._remaining_sec == 0:
            self._expire()

    def _expire(self) -> None:
        completed = self._phase
        self._stop_ticking()
        self._running = False
        self._deadline = None
        logger.info("%s completed", completed.label)

        epoch = self._epoch
        self._completing = True
        try:
            self.phase_completed.emit(completed)
        finally:
            self._completing = False
        if epoch != self._epoch:
            # a listener issued a command of its own; it wins
            return

        next_phase = self._next_phase(completed)
        self._load_phase(next_phase)
        logger.debug("Advancing to %s (cycle %s)", next_phase.value, self._cycle_counter)
        self._auto_start_handle = self._clock.schedule_once(self._auto_start_delay_ms, self._auto_start)
        self._publish()

    def _next_phase(self, completed: Phase) -> Phase:
        if completed.is_recovery:
            return Phase.FOCUS
        self._cycle_counter += 1
        if self._cycle_counter >= config.LONG_RECOVERY_EVERY:
            self._cycle_counter = 0
            return Phase.LONG_RECOVERY
        return Phase.SHORT_RECOVERY

    def _auto_start(self) -> None:
        self._auto_start_handle = None
        self.start()

    def _load_phase(self, phase: Phase) -> None:
        self._phase = phase
        self._remaining_sec = self._durations[phase]
        self._total_sec = self._remaining_sec

    def _halt(self) -> None:
        self._epoch += 1
        self._cancel_auto_start()
        self._stop_ticking()
        self._running = False
        self._deadline = None

    def _stop_ticking(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _cancel_auto_start(self) -> None:
        if self._auto_start_handle is not None:
            self._auto_start_handle.cancel()
            self._auto_start_handle = None

    def _publish(self) -> None:
        self.state_changed.emit(self.snapshot())
