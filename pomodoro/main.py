from __future__ import annotations

"""Точка входа приложения Pomodoro Timer.

Модуль отвечает за инициализацию Qt-приложения, подключение хранилища
настроек, создание движка таймера и звукового оповещения и запуск окна.
"""

import logging
import sys

from PyQt6.QtWidgets import QApplication


from pomodoro.core import config
from pomodoro.core.app_state import AppState
from pomodoro.core.clock import QtClock
from pomodoro.core.notifier import SoundNotifier
from pomodoro.core.timer import PomodoroEngine
from pomodoro.data.storage import Storage
from pomodoro.ui.cue_player import QtCuePlayer
from pomodoro.ui.main_window import MainWindow
from pomodoro.ui.styles import apply_theme


def main() -> int:
    """Создает зависимости приложения и запускает главный UI-цикл."""
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    apply_theme(app)

    storage = Storage(config.default_db_path())
    storage.init_db()

    app_state = AppState()
    app_state.load_from_storage(storage)

    clock = QtClock(app)
    engine = PomodoroEngine(clock=clock, parent=app)

    player = QtCuePlayer(app)
    notifier = SoundNotifier(clock=clock, player=player)
    engine.phase_completed.connect(notifier.on_phase_completed)
    player.finished.connect(notifier.on_cue_finished)

    window = MainWindow(engine=engine, app_state=app_state)

    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
