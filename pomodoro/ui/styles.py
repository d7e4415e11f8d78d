from __future__ import annotations

from PyQt6.QtWidgets import QApplication

from pomodoro.core.timer import Phase


PHASE_ACCENTS = {
    Phase.FOCUS: "#e4572e",
    Phase.SHORT_RECOVERY: "#2e86ab",
    Phase.LONG_RECOVERY: "#4c956c",
}


THEME_QSS = """
QWidget {
    color: #2f2a26;
    font-size: 13px;
}

QLabel, QCheckBox {
    background: transparent;
}

QFrame#Card {
    background: rgba(255, 247, 241, 225);
    border: none;
    border-radius: 18px;
}

QLabel#Heading {
    font-size: 22px;
    font-weight: 700;
    color: #2a2521;
}

QLabel#SubtleTitle {
    font-size: 14px;
    font-weight: 600;
    color: #6f645b;
}

QLabel#TimerLabel {
    font-size: 72px;
    font-weight: 700;
    color: #2d2824;
}

QLabel#MutedText {
    color: #867b71;
}

QPushButton {
    border: none;
    background: #f7eee6;
    border-radius: 16px;
    padding: 8px 14px;
    font-weight: 600;
}

QPushButton:hover {
    background: #f2e6dc;
}

QPushButton:pressed {
    background: #e8d8cc;
}

QPushButton:checked {
    background: #2f2a26;
    color: #ffffff;
}

QPushButton#PrimaryButton {
    background: #eb8f60;
    color: #ffffff;
    border-radius: 22px;
    padding: 10px 28px;
    min-height: 24px;
    font-size: 15px;
}

QPushButton#PrimaryButton:hover {
    background: #de8050;
}

QSpinBox {
    background: #fff7f1;
    border: none;
    border-radius: 14px;
    padding: 6px 10px;
    min-height: 22px;
}

QProgressBar {
    border: 0;
    border-radius: 4px;
    background: #eee4db;
    max-height: 8px;
}

QProgressBar::chunk {
    border-radius: 4px;
    background: #eb8f60;
}
"""


def accent_qss(phase: Phase) -> str:
    """Progress-bar colour for the active phase."""
    return f"QProgressBar::chunk {{ background: {PHASE_ACCENTS[phase]}; }}"


def apply_theme(app: QApplication) -> None:
    app.setStyleSheet(THEME_QSS)
