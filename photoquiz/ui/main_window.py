from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import QSize, Qt, QTimer
from PySide6.QtGui import QCloseEvent, QIcon, QPixmap
from PySide6.QtWidgets import (
    QCheckBox,
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from photoquiz.core.catalog import Game, GameCatalog
from photoquiz.core.image_cache import ImageCache, load_through
from photoquiz.core.progress import ProgressStore
from photoquiz.core.round import AudioNotifier, Phase, RoundEngine, RoundState
from photoquiz.core.settings import SettingsStore
from photoquiz.ui.colors import QuizColors, progress_color, timer_color
from photoquiz.ui.images import load_qimage
from photoquiz.ui.models import GameRowState, build_game_rows, tick_timer_should_run
from photoquiz.ui.settings_dialog import SettingsDialog

logger = logging.getLogger(__name__)


class GameRowWidget(QWidget):
    """Thumbnail, name, description, high score (or lock) and progress bar."""

    def __init__(self, row: GameRowState, thumbnail: Optional[QPixmap], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        icon = QLabel()
        icon.setFixedSize(50, 50)
        if thumbnail is not None:
            icon.setPixmap(thumbnail.scaled(50, 50, Qt.KeepAspectRatio, Qt.SmoothTransformation))

        name = QLabel(f"<b>{row.game.name}</b><br><span style='color:{QuizColors.TEXT_SECONDARY}'>"
                      f"{row.game.description}</span>")
        status = QLabel("🔒" if row.locked_badge else f"High: {row.high_score}")
        status.setAlignment(Qt.AlignCenter)

        bar = QProgressBar()
        bar.setRange(0, 100)
        bar.setValue(row.progress)
        bar.setTextVisible(False)
        bar.setFixedSize(50, 8)
        bar.setStyleSheet(f"QProgressBar::chunk {{ background: {progress_color(row.progress)}; }}")

        side = QVBoxLayout()
        side.addWidget(status)
        side.addWidget(bar)

        layout = QHBoxLayout(self)
        layout.addWidget(icon)
        layout.addWidget(name, 1)
        layout.addLayout(side)


class MainWindow(QMainWindow):
    """Game list and quiz screen.

    The window only renders engine and store state; every rule lives in the
    core. A one-second ``QTimer`` feeds ``RoundEngine.tick`` while a question
    is open and is stopped whenever the round is left.
    """

    def __init__(
        self,
        catalog: GameCatalog,
        progress_store: ProgressStore,
        settings_store: SettingsStore,
        image_cache: ImageCache,
        audio: Optional[AudioNotifier] = None,
    ) -> None:
        super().__init__()
        self._catalog = catalog
        self._progress_store = progress_store
        self._settings_store = settings_store
        self._image_cache = image_cache
        self._audio = audio
        self._engine: Optional[RoundEngine] = None
        self._unsubscribe_round: Optional[Callable[[], None]] = None
        self._option_buttons: List[QPushButton] = []

        self._tick_timer = QTimer(self)
        self._tick_timer.setInterval(1000)
        self._tick_timer.timeout.connect(self._on_tick)

        self.setWindowTitle("PhotoQuiz")
        self._stack = QStackedWidget()
        self._home_screen = self._build_home_screen()
        self._quiz_screen = self._build_quiz_screen()
        self._stack.addWidget(self._home_screen)
        self._stack.addWidget(self._quiz_screen)
        self.setCentralWidget(self._stack)

        self._unsubscribe_progress = self._progress_store.subscribe(lambda _store: self._refresh_game_list())
        self._refresh_game_list()

    # -- screens --------------------------------------------------------------

    def _build_home_screen(self) -> QWidget:
        screen = QWidget()
        screen.setStyleSheet(
            f"background: qlineargradient(x1:0, y1:0, x2:0, y2:1, "
            f"stop:0 {QuizColors.BG_TOP}, stop:1 {QuizColors.BG_BOTTOM});"
        )
        title = QLabel("Quiz Games")
        title.setStyleSheet("font-size: 24px; font-weight: 700;")
        settings_button = QPushButton("Settings")
        settings_button.clicked.connect(self._show_settings)

        header = QHBoxLayout()
        header.addWidget(title, 1)
        header.addWidget(settings_button)

        self._game_list = QListWidget()
        self._game_list.setStyleSheet(f"QListWidget::item {{ background: {QuizColors.CARD_BG}; margin: 4px; }}")
        self._game_list.itemClicked.connect(self._on_game_clicked)

        layout = QVBoxLayout(screen)
        layout.addLayout(header)
        layout.addWidget(self._game_list, 1)
        return screen

    def _build_quiz_screen(self) -> QWidget:
        screen = QWidget()
        screen.setStyleSheet(f"background: {QuizColors.BG_QUIZ};")

        self._game_name_label = QLabel()
        self._game_name_label.setStyleSheet("font-size: 32px;")
        self._question_label = QLabel()
        self._question_label.setWordWrap(True)
        self._question_label.setStyleSheet("font-size: 18px; font-weight: 600;")

        self._options_grid = QGridLayout()

        self._hint_toggle = QCheckBox("Hints")
        self._hint_toggle.toggled.connect(self._on_hint_toggled)
        self._hint_button = QPushButton("Show Hint")
        self._hint_button.clicked.connect(self._on_show_hint)
        self._hint_label = QLabel()
        self._hint_label.setStyleSheet(f"color: {QuizColors.HINT};")
        hint_row = QHBoxLayout()
        hint_row.addWidget(self._hint_toggle)
        hint_row.addWidget(self._hint_button)
        hint_row.addWidget(self._hint_label, 1)

        self._feedback_label = QLabel()
        self._next_button = QPushButton("Next Question")
        self._next_button.clicked.connect(self._on_next)

        self._score_label = QLabel()
        self._score_label.setStyleSheet("font-size: 34px;")
        self._time_label = QLabel()

        self._game_over = QFrame()
        self._game_over.setStyleSheet(f"background: {QuizColors.CARD_BG}; border-radius: 18px;")
        self._game_over_label = QLabel()
        self._game_over_label.setAlignment(Qt.AlignCenter)
        play_again = QPushButton("Play Again")
        play_again.clicked.connect(self._on_play_again)
        back_to_games = QPushButton("Back to Games")
        back_to_games.clicked.connect(self._show_home_screen)
        over_layout = QVBoxLayout(self._game_over)
        over_layout.addWidget(self._game_over_label)
        over_layout.addWidget(play_again)
        over_layout.addWidget(back_to_games)

        back = QPushButton("← Games")
        back.clicked.connect(self._show_home_screen)

        layout = QVBoxLayout(screen)
        layout.addWidget(back, 0, Qt.AlignLeft)
        layout.addWidget(self._game_name_label)
        layout.addWidget(self._question_label)
        layout.addLayout(self._options_grid)
        layout.addLayout(hint_row)
        layout.addWidget(self._feedback_label)
        layout.addWidget(self._next_button)
        layout.addWidget(self._game_over)
        layout.addStretch(1)
        layout.addWidget(self._score_label)
        layout.addWidget(self._time_label)
        return screen

    # -- game list ------------------------------------------------------------

    def _refresh_game_list(self) -> None:
        self._game_list.clear()
        for row in build_game_rows(self._catalog, self._progress_store):
            item = QListWidgetItem()
            item.setData(Qt.UserRole, row.game.id)
            widget = GameRowWidget(row, self._pixmap(row.game.thumbnail))
            item.setSizeHint(widget.sizeHint())
            if not self._progress_store.is_playable(row.game.id):
                item.setFlags(item.flags() & ~Qt.ItemIsEnabled)
            self._game_list.addItem(item)
            self._game_list.setItemWidget(item, widget)

    def _on_game_clicked(self, item: QListWidgetItem) -> None:
        game_id = item.data(Qt.UserRole)
        if not self._progress_store.is_playable(game_id):
            return
        self._start_round(self._catalog.get(game_id))

    def _show_settings(self) -> None:
        SettingsDialog(self._settings_store, self._progress_store, self).exec()

    # -- round ----------------------------------------------------------------

    def _start_round(self, game: Game) -> None:
        self._leave_round()
        settings = self._settings_store.load()
        engine = RoundEngine.from_settings(game, self._progress_store, settings, self._audio)
        logger.info("Starting %s on %s", game.id, engine.difficulty.value)
        self._engine = engine
        self._unsubscribe_round = engine.subscribe(self._render_round)
        self._game_name_label.setText(game.name)
        self._hint_toggle.blockSignals(True)
        self._hint_toggle.setChecked(engine.hints_enabled)
        self._hint_toggle.blockSignals(False)
        self._time_label.setVisible(engine.timer_enabled)
        self._stack.setCurrentWidget(self._quiz_screen)
        self._render_round(engine.state)

    def _leave_round(self) -> None:
        self._tick_timer.stop()
        if self._unsubscribe_round is not None:
            self._unsubscribe_round()
            self._unsubscribe_round = None
        if self._engine is not None:
            self._engine.abandon()
            self._engine = None

    def _render_round(self, state: RoundState) -> None:
        engine = self._engine
        if engine is None:
            return
        question = engine.current_question()
        finished = state.phase is Phase.FINISHED
        self._sync_tick_timer(state)

        self._question_label.setVisible(not finished)
        self._question_label.setText(question.text if question else "")
        self._build_option_buttons(state)

        self._hint_toggle.setVisible(not finished)
        self._hint_button.setVisible(not finished)
        self._hint_label.setText(engine.visible_hint or "")

        feedback = state.phase is Phase.FEEDBACK
        self._feedback_label.setVisible(feedback)
        self._feedback_label.setText(state.feedback_message)
        color = QuizColors.CORRECT if state.correct else QuizColors.INCORRECT
        self._feedback_label.setStyleSheet(f"color: {color};")
        self._next_button.setVisible(feedback)

        self._score_label.setText(f"Score: {state.score}")
        self._time_label.setText(f"Time: {state.remaining_seconds}")
        self._time_label.setStyleSheet(f"color: {timer_color(state.remaining_seconds)};")

        self._game_over.setVisible(finished)
        if finished:
            self._game_over_label.setText(self._game_over_text(engine))

    def _sync_tick_timer(self, state: RoundState) -> None:
        # Starting from stopped gives each question a full first second.
        should_run = self._engine is not None and tick_timer_should_run(state.phase, self._engine.timer_enabled)
        if not should_run:
            self._tick_timer.stop()
        elif not self._tick_timer.isActive():
            self._tick_timer.start()

    def _build_option_buttons(self, state: RoundState) -> None:
        for button in self._option_buttons:
            self._options_grid.removeWidget(button)
            button.deleteLater()
        self._option_buttons = []
        engine = self._engine
        question = engine.current_question() if engine else None
        if question is None:
            return
        for index, option in enumerate(question.options):
            button = QPushButton(option.name)
            pixmap = self._pixmap(option.image)
            if pixmap is not None:
                button.setIcon(QIcon(pixmap))
                button.setIconSize(QSize(120, 180))
            button.setEnabled(state.phase is Phase.IN_PROGRESS)
            button.setStyleSheet(f"border: 4px solid {self._border_color(state, index, question.correct_index)};")
            button.clicked.connect(lambda _checked=False, i=index: self._on_answer(i))
            self._options_grid.addWidget(button, index // 2, index % 2)
            self._option_buttons.append(button)

    @staticmethod
    def _border_color(state: RoundState, index: int, correct_index: int) -> str:
        if state.phase is not Phase.FEEDBACK:
            return "transparent"
        if index == correct_index:
            return QuizColors.CORRECT
        if index == state.selected_answer:
            return QuizColors.INCORRECT
        return "transparent"

    @staticmethod
    def _game_over_text(engine: RoundEngine) -> str:
        if engine.empty:
            return f"No {engine.difficulty.value.lower()} questions yet."
        result = engine.result
        if result is None:
            return "Game Over!"
        text = f"Game Over!\nYour score: {result.score}/{result.question_count}"
        if result.new_high_score:
            text += "\nNew High Score!"
        return text

    def _on_answer(self, index: int) -> None:
        if self._engine is not None and self._engine.phase is Phase.IN_PROGRESS:
            self._engine.submit_answer(index)

    def _on_tick(self) -> None:
        if self._engine is not None:
            self._engine.tick()

    def _on_next(self) -> None:
        if self._engine is not None and self._engine.phase is Phase.FEEDBACK:
            self._engine.advance()

    def _on_hint_toggled(self, checked: bool) -> None:
        if self._engine is not None:
            self._engine.set_hints_enabled(checked)

    def _on_show_hint(self) -> None:
        if self._engine is not None and self._engine.phase is not Phase.FINISHED:
            self._engine.show_hint()

    def _on_play_again(self) -> None:
        if self._engine is not None:
            self._start_round(self._engine.game)

    def _show_home_screen(self) -> None:
        self._leave_round()
        self._stack.setCurrentWidget(self._home_screen)

    def _pixmap(self, key: str) -> Optional[QPixmap]:
        if not key:
            return None
        image = load_through(self._image_cache, key, load_qimage)
        return QPixmap.fromImage(image) if image is not None else None

    def closeEvent(self, event: QCloseEvent) -> None:
        """Persist progress when closing the app."""
        self._leave_round()
        self._unsubscribe_progress()
        self._progress_store.save()
        super().closeEvent(event)
