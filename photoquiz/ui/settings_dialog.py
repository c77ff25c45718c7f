"""Settings form: difficulty, sound, game lock, hints and timer.

Every control writes through to the settings store as soon as it changes, so
closing the dialog by any route keeps what was edited.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QMessageBox,
    QPushButton,
    QWidget,
)

from photoquiz.core.progress import ProgressStore
from photoquiz.core.settings import Difficulty, SettingsStore

logger = logging.getLogger(__name__)


class SettingsDialog(QDialog):
    def __init__(
        self,
        settings_store: SettingsStore,
        progress_store: ProgressStore,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._settings_store = settings_store
        self._progress_store = progress_store
        self.setWindowTitle("Settings")

        current = settings_store.settings
        self._difficulty = QComboBox()
        for difficulty in Difficulty:
            self._difficulty.addItem(difficulty.value, difficulty)
        self._difficulty.setCurrentIndex(list(Difficulty).index(current.difficulty))

        self._sound = QCheckBox("Sound Effects")
        self._sound.setChecked(current.sound_enabled)
        self._lock = QCheckBox("Lock Games")
        self._lock.setChecked(current.game_lock_enabled)
        self._hints = QCheckBox("Enable Hints")
        self._hints.setChecked(current.hints_enabled)
        self._timer = QCheckBox("Enable Timer")
        self._timer.setChecked(current.timer_enabled)

        self._difficulty.currentIndexChanged.connect(self._on_difficulty_changed)
        self._sound.toggled.connect(lambda checked: self._settings_store.update(sound_enabled=checked))
        self._hints.toggled.connect(lambda checked: self._settings_store.update(hints_enabled=checked))
        self._timer.toggled.connect(lambda checked: self._settings_store.update(timer_enabled=checked))
        # Lock mode also goes to the progress store so the game list updates behind the dialog.
        self._lock.toggled.connect(self._on_lock_toggled)

        self._reset_button = QPushButton("Reset Progress")
        self._reset_button.clicked.connect(self._reset_progress)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.rejected.connect(self.reject)

        layout = QFormLayout(self)
        layout.addRow("Difficulty", self._difficulty)
        layout.addRow(self._sound)
        layout.addRow(self._lock)
        layout.addRow(self._hints)
        layout.addRow(self._timer)
        layout.addRow(self._reset_button)
        layout.addRow(buttons)

    def _on_difficulty_changed(self, index: int) -> None:
        self._settings_store.update(difficulty=self._difficulty.itemData(index))

    def _on_lock_toggled(self, checked: bool) -> None:
        self._settings_store.update(game_lock_enabled=checked)
        self._progress_store.set_lock_mode(checked)

    def _reset_progress(self) -> None:
        """Ask for confirmation and, if given, wipe all scores and progress."""
        answer = QMessageBox.question(
            self,
            "Reset Progress",
            "Clear every high score and all progress? This cannot be undone.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        logger.info("Resetting all progress")
        self._progress_store.reset()
