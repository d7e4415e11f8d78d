from __future__ import annotations

"""Загрузка фоновых изображений и звуков с кэшированием в памяти."""

import base64
import binascii
import logging
import mimetypes
from pathlib import Path

from PyQt6.QtGui import QPixmap

from pomodoro.core import config


ASSETS_DIR = Path(__file__).resolve().parents[2] / "assets"
_PIXMAP_CACHE: dict[str, QPixmap | None] = {}

logger = logging.getLogger(__name__)


def get_asset_path(relative: str) -> Path:
    """Преобразует относительный путь внутри `assets/` в абсолютный."""
    return ASSETS_DIR / relative


def asset_exists(relative: str) -> bool:
    """Проверяет, существует ли ассет на диске."""
    return get_asset_path(relative).exists()


def resolve_image_path(reference: str) -> Path:
    """Абсолютный путь к картинке: пресет из `assets/` или путь пользователя."""
    path = Path(reference).expanduser()
    if path.is_absolute():
        return path
    return get_asset_path(reference)


def cue_sound_path(phase_value: str) -> Path | None:
    """Путь к звуку завершения фазы; `None`, если файла нет."""
    relative = config.CUE_SOUNDS.get(phase_value)
    if relative is None or not asset_exists(relative):
        logger.warning("No cue sound for phase %r", phase_value)
        return None
    return get_asset_path(relative)


def decode_data_uri(reference: str) -> bytes | None:
    """Декодирует `data:image/...;base64,...`; `None`, если строка невалидна."""
    if not reference.startswith("data:"):
        return None
    header, sep, payload = reference.partition(",")
    if not sep or ";base64" not in header:
        return None
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def encode_data_uri(path: Path) -> str:
    """Читает файл и упаковывает его в data-URI."""
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return f"data:{mime};base64," + base64.b64encode(path.read_bytes()).decode("ascii")


def load_pixmap(reference: str) -> QPixmap | None:
    """Загружает фон по ссылке (пресет, путь или data-URI) с кэшем; `None`, если невалиден."""
    if reference in _PIXMAP_CACHE:
        return _PIXMAP_CACHE[reference]

    pixmap = QPixmap()
    if reference.startswith("data:"):
        raw = decode_data_uri(reference)
        if raw is None or not pixmap.loadFromData(raw):
            logger.warning("Could not decode background data URI")
            _PIXMAP_CACHE[reference] = None
            return None
    else:
        path = resolve_image_path(reference)
        if not path.exists() or not pixmap.load(str(path)):
            logger.warning("Could not load background image %s", path)
            _PIXMAP_CACHE[reference] = None
            return None

    _PIXMAP_CACHE[reference] = pixmap
    return pixmap


def forget_pixmap(reference: str) -> None:
    """Убирает фон из кэша, когда ссылка больше не используется."""
    _PIXMAP_CACHE.pop(reference, None)
