from __future__ import annotations

import logging
from pathlib import Path

from PyQt6.QtCore import QObject, pyqtSignal

from pomodoro.core import config
from pomodoro.core.assets import encode_data_uri, forget_pixmap
from pomodoro.data.storage import Storage


logger = logging.getLogger(__name__)


class AppState(QObject):
    """Session-scoped preferences shared by the window: currently the background image."""

    background_changed = pyqtSignal(str)

    def __init__(self) -> None:
        super().__init__()
        self.background: str = config.PRESET_BACKGROUNDS[0]
        self.custom_background = False
        self._storage: Storage | None = None

    def load_from_storage(self, storage: Storage) -> None:
        self._storage = storage
        saved = storage.get(config.BACKGROUND_KEY)
        if saved:
            self.background = saved
            self.custom_background = True
        else:
            self.background = config.PRESET_BACKGROUNDS[0]
            self.custom_background = False
        self.background_changed.emit(self.background)

    def set_background(self, reference: str) -> None:
        if not reference:
            self.clear_background()
            return
        if self.background != reference:
            forget_pixmap(self.background)
        self.background = reference
        self.custom_background = True
        if self._storage:
            self._storage.set(config.BACKGROUND_KEY, reference)
        self.background_changed.emit(reference)

    def load_background_file(self, path: str | Path, embed: bool = True) -> None:
        """Use an image file as background, embedded as a data URI or kept as a path."""
        path = Path(path)
        reference = encode_data_uri(path) if embed else str(path.resolve())
        logger.debug("Background set from %s (embedded=%s)", path, embed)
        self.set_background(reference)

    def clear_background(self) -> None:
        if self.background:
            forget_pixmap(self.background)
        self.background = ""
        self.custom_background = False
        if self._storage:
            self._storage.delete(config.BACKGROUND_KEY)
        self.background_changed.emit("")
