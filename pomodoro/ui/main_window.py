from __future__ import annotations

import logging

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QAction, QColor, QKeySequence, QPainter
from PyQt6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from pomodoro.core import config
from pomodoro.core.app_state import AppState
from pomodoro.core.assets import load_pixmap
from pomodoro.core.timer import EngineSnapshot, InvalidDuration, Phase, PomodoroEngine, format_clock
from pomodoro.ui.styles import accent_qss


logger = logging.getLogger(__name__)


class BackgroundWidget(QWidget):
    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setMinimumSize(520, 640)
        self._reference = ""
        self._fallback = QColor("#f4f1ee")

    def set_background(self, reference: str) -> None:
        self._reference = reference
        self.update()

    def paintEvent(self, event) -> None:  # noqa: N802
        painter = QPainter(self)
        painter.fillRect(self.rect(), self._fallback)
        pixmap = load_pixmap(self._reference) if self._reference else None
        if pixmap is None:
            return
        # cover: scale to fill, crop centred
        scaled = pixmap.scaled(
            self.size(),
            Qt.AspectRatioMode.KeepAspectRatioByExpanding,
            Qt.TransformationMode.SmoothTransformation,
        )
        x = (self.width() - scaled.width()) / 2
        y = (self.height() - scaled.height()) / 2
        painter.drawPixmap(QRectF(x, y, scaled.width(), scaled.height()), scaled, QRectF(scaled.rect()))


class MainWindow(QMainWindow):
    def __init__(self, engine: PomodoroEngine, app_state: AppState) -> None:
        super().__init__()
        self.setWindowTitle("Pomodoro Timer")
        self.resize(560, 720)

        self.engine = engine
        self.app_state = app_state
        self.mode_buttons: dict[Phase, QPushButton] = {}
        self.duration_spins: dict[Phase, QSpinBox] = {}
        self._accent_phase: Phase | None = None

        self._build_ui()
        self._connect_signals()
        self.background_widget.set_background(self.app_state.background)
        self._render(self.engine.snapshot())

    def _build_ui(self) -> None:
        self.background_widget = BackgroundWidget(self)
        self.setCentralWidget(self.background_widget)
        outer = QVBoxLayout(self.background_widget)
        outer.setContentsMargins(32, 32, 32, 32)

        card = QFrame()
        card.setObjectName("Card")
        outer.addWidget(card, 0, Qt.AlignmentFlag.AlignCenter)
        layout = QVBoxLayout(card)
        layout.setContentsMargins(24, 24, 24, 24)

        heading = QLabel("Pomodoro Timer")
        heading.setObjectName("Heading")
        heading.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(heading)

        modes = QHBoxLayout()
        self.mode_group = QButtonGroup(self)
        self.mode_group.setExclusive(True)
        for phase in Phase:
            button = QPushButton(phase.label)
            button.setCheckable(True)
            self.mode_group.addButton(button)
            self.mode_buttons[phase] = button
            modes.addWidget(button)
        layout.addLayout(modes)

        self.time_label = QLabel("25:00")
        self.time_label.setObjectName("TimerLabel")
        self.time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.time_label)

        self.progress = QProgressBar()
        self.progress.setRange(0, 1000)
        self.progress.setTextVisible(False)
        layout.addWidget(self.progress)

        self.cycle_label = QLabel("")
        self.cycle_label.setObjectName("MutedText")
        self.cycle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.cycle_label)

        controls = QHBoxLayout()
        self.start_pause_btn = QPushButton("Start")
        self.start_pause_btn.setObjectName("PrimaryButton")
        self.reset_btn = QPushButton("Reset")
        controls.addStretch()
        controls.addWidget(self.start_pause_btn)
        controls.addWidget(self.reset_btn)
        controls.addStretch()
        layout.addLayout(controls)

        settings_title = QLabel("Timer Settings")
        settings_title.setObjectName("SubtleTitle")
        layout.addWidget(settings_title)
        form = QFormLayout()
        durations = self.engine.durations
        for phase in Phase:
            spin = QSpinBox()
            spin.setRange(1, 240)
            spin.setSuffix(" min")
            spin.setValue(max(1, durations[phase] // 60))
            self.duration_spins[phase] = spin
            form.addRow(f"{phase.label}:", spin)
        layout.addLayout(form)

        background_title = QLabel("Customize Background")
        background_title.setObjectName("SubtleTitle")
        layout.addWidget(background_title)
        background_row = QHBoxLayout()
        self.preset_combo = QComboBox()
        self.preset_combo.addItem("Custom…", "")
        for index, preset in enumerate(config.PRESET_BACKGROUNDS, start=1):
            self.preset_combo.addItem(f"Preset {index}", preset)
        self.choose_btn = QPushButton("Choose image…")
        self.clear_btn = QPushButton("Clear Background")
        background_row.addWidget(self.preset_combo, 1)
        background_row.addWidget(self.choose_btn)
        background_row.addWidget(self.clear_btn)
        layout.addLayout(background_row)

        space_action = QAction(self)
        space_action.setShortcut(QKeySequence(Qt.Key.Key_Space))
        space_action.triggered.connect(self.engine.toggle)
        self.addAction(space_action)

    def _connect_signals(self) -> None:
        self.engine.state_changed.connect(self._render)
        self.start_pause_btn.clicked.connect(self.engine.toggle)
        self.reset_btn.clicked.connect(self.engine.reset)
        for phase, button in self.mode_buttons.items():
            button.clicked.connect(lambda _checked=False, p=phase: self.engine.switch_phase(p))
        for phase, spin in self.duration_spins.items():
            spin.valueChanged.connect(lambda minutes, p=phase: self._set_duration(p, minutes))
        self.preset_combo.activated.connect(self._on_preset_chosen)
        self.choose_btn.clicked.connect(self._choose_background)
        self.clear_btn.clicked.connect(self.app_state.clear_background)
        self.app_state.background_changed.connect(self._on_background_changed)

    def _render(self, snapshot: EngineSnapshot) -> None:
        self.time_label.setText(format_clock(snapshot.remaining_seconds))
        self.setWindowTitle(f"{format_clock(snapshot.remaining_seconds)} · {snapshot.phase.label}")
        self.mode_buttons[snapshot.phase].setChecked(True)
        self.start_pause_btn.setText("Pause" if snapshot.running else "Start")
        self.progress.setValue(int(snapshot.progress * 1000))
        if snapshot.phase != self._accent_phase:
            self.progress.setStyleSheet(accent_qss(snapshot.phase))
            self._accent_phase = snapshot.phase
        for phase, spin in self.duration_spins.items():
            minutes = max(1, snapshot.durations[phase] // 60)
            if spin.value() != minutes:
                # set_duration already applied; do not echo it back
                spin.blockSignals(True)
                spin.setValue(minutes)
                spin.blockSignals(False)
        self.cycle_label.setText(f"Pomodoros this cycle: {snapshot.cycle_counter} / {config.LONG_RECOVERY_EVERY}")
        self.clear_btn.setEnabled(bool(self.app_state.background))

    def _set_duration(self, phase: Phase, minutes: int) -> None:
        try:
            self.engine.set_duration(phase, minutes * 60)
        except InvalidDuration as exc:
            QMessageBox.warning(self, "Timer Settings", str(exc))

    def _on_preset_chosen(self, index: int) -> None:
        reference = self.preset_combo.itemData(index)
        if reference:
            self.app_state.set_background(reference)
        else:
            self._choose_background()

    def _choose_background(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Choose background",
            "",
            "Images (*.png *.jpg *.jpeg *.gif *.webp *.bmp)",
        )
        if not path:
            return
        try:
            self.app_state.load_background_file(path)
        except OSError as exc:
            logger.warning("Could not read background %s: %s", path, exc)
            QMessageBox.warning(self, "Background", f"Could not read {path}")

    def _on_background_changed(self, reference: str) -> None:
        self.background_widget.set_background(reference)
        self.clear_btn.setEnabled(bool(reference))
