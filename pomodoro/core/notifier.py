from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Protocol

from pomodoro.core import config
from pomodoro.core.assets import cue_sound_path
from pomodoro.core.clock import CancelHandle, Clock
from pomodoro.core.timer import Phase


logger = logging.getLogger(__name__)


class CuePlayer(Protocol):
    def play(self, source: Path) -> None:
        """Start playback of `source` from the beginning."""

    def stop(self) -> None:
        """Stop playback and rewind."""


def _default_sound_for(phase: Phase) -> Path | None:
    return cue_sound_path(phase.value)


class SoundNotifier:
    """Plays a short audible cue whenever a phase completes.

    Connect `on_phase_completed` to `PomodoroEngine.phase_completed`. The cue
    is cut off after `cue_ms` whatever the length of the sound file; if the
    player reports that the sound ended earlier, call `on_cue_finished` and
    the pending cut-off is dropped.
    """

    def __init__(
        self,
        clock: Clock,
        player: CuePlayer,
        cue_ms: int = config.CUE_DURATION_MS,
        sound_for: Callable[[Phase], Path | None] = _default_sound_for,
    ) -> None:
        self._clock = clock
        self._player = player
        self._cue_ms = cue_ms
        self._sound_for = sound_for
        self._stop_handle: CancelHandle | None = None

    @property
    def playing(self) -> bool:
        return self._stop_handle is not None and self._stop_handle.active

    def on_phase_completed(self, phase: Phase) -> None:
        phase = Phase(phase)
        source = self._sound_for(phase)
        if source is None:
            return
        self._cancel_stop()
        logger.debug("Playing cue %s for %s", source.name, phase.value)
        self._player.play(source)
        self._stop_handle = self._clock.schedule_once(self._cue_ms, self._stop_cue)

    def on_cue_finished(self) -> None:
        self._cancel_stop()

    def _stop_cue(self) -> None:
        self._stop_handle = None
        self._player.stop()

    def _cancel_stop(self) -> None:
        if self._stop_handle is not None:
            self._stop_handle.cancel()
            self._stop_handle = None
