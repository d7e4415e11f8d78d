from __future__ import annotations

from pathlib import Path

from PyQt6.QtCore import QObject, QUrl, pyqtSignal
from PyQt6.QtMultimedia import QAudioOutput, QMediaPlayer


class QtCuePlayer(QObject):
    """QMediaPlayer-backed cue player; emits `finished` when a sound ends on its own."""

    finished = pyqtSignal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._output: QAudioOutput | None = None
        self._player: QMediaPlayer | None = None

    def play(self, source: Path) -> None:
        player = self._ensure_player()
        player.stop()
        player.setSource(QUrl.fromLocalFile(str(source)))
        player.setPosition(0)
        player.play()

    def stop(self) -> None:
        if self._player is None:
            return
        self._player.stop()
        self._player.setPosition(0)

    def _ensure_player(self) -> QMediaPlayer:
        if self._player is None:
            self._output = QAudioOutput(self)
            self._player = QMediaPlayer(self)
            self._player.setAudioOutput(self._output)
            self._player.mediaStatusChanged.connect(self._on_media_status)
        return self._player

    def _on_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self.finished.emit()
