from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Tuple

from photoquiz.core.catalog import Game, Question
from photoquiz.core.errors import InvalidStateError
from photoquiz.core.events import Subscribers
from photoquiz.core.progress import ProgressStore
from photoquiz.core.settings import Difficulty, Settings
from photoquiz.core.timer import DEFAULT_TIME_LIMIT, CountdownTimer

logger = logging.getLogger(__name__)


class AudioNotifier(Protocol):
    def play_incorrect_sound(self) -> None: ...


class Phase(enum.Enum):
    IN_PROGRESS = "in_progress"
    FEEDBACK = "feedback"
    FINISHED = "finished"


@dataclass(frozen=True)
class RoundState:
    """Snapshot of a round, handed to subscribers after each change."""

    phase: Phase
    question_index: int
    score: int
    selected_answer: Optional[int]
    remaining_seconds: int
    correct: Optional[bool] = None
    feedback_message: str = ""
    hint_visible: bool = False
    hints_enabled: bool = True


@dataclass(frozen=True)
class RoundResult:
    game_id: str
    score: int
    question_count: int
    new_high_score: bool


CORRECT_MESSAGE = "Correct!"


def feedback_message(question: Question, correct: bool) -> str:
    if correct:
        return CORRECT_MESSAGE
    return f"Wrong. The correct answer was {question.correct_option.name}."


class RoundEngine:
    """Drives one play-through of a game's question tier.

    Phases run ``IN_PROGRESS -> FEEDBACK -> IN_PROGRESS ... -> FINISHED``:

      * ``submit_answer`` evaluates the current question (``None`` means no
        answer, as on a timeout) and moves to feedback.
      * ``advance`` moves to the next question, or finishes the round and
        reports the score to the progress store exactly once.
      * ``tick`` counts the per-question timer down; running out submits no
        answer.

    A finished round is immutable; build a new engine to play again. An empty
    tier gives a round that is finished from the start and records nothing.
    """

    def __init__(
        self,
        game: Game,
        progress_store: ProgressStore,
        difficulty: Difficulty = Difficulty.MEDIUM,
        *,
        timer_enabled: bool = True,
        sound_enabled: bool = True,
        hints_enabled: bool = True,
        audio: Optional[AudioNotifier] = None,
        time_limit: int = DEFAULT_TIME_LIMIT,
    ) -> None:
        self._game = game
        self._progress_store = progress_store
        self._difficulty = Difficulty.parse(difficulty)
        self._questions: Tuple[Question, ...] = game.questions_for(self._difficulty)
        self._timer_enabled = timer_enabled
        self._sound_enabled = sound_enabled
        self._hints_enabled = hints_enabled
        self._audio = audio
        self._timer = CountdownTimer(time_limit)
        self._lock = threading.RLock()
        self._subscribers: Subscribers[RoundState] = Subscribers()

        self._index = 0
        self._score = 0
        self._selected: Optional[int] = None
        self._correct: Optional[bool] = None
        self._message = ""
        self._hint_visible = False
        self._abandoned = False
        self._result: Optional[RoundResult] = None

        if self._questions:
            self._phase = Phase.IN_PROGRESS
            if self._timer_enabled:
                self._timer.arm()
        else:
            logger.warning(
                "Game %s has no %s questions; round ends immediately",
                game.id,
                self._difficulty.value,
            )
            self._phase = Phase.FINISHED

    @classmethod
    def from_settings(
        cls,
        game: Game,
        progress_store: ProgressStore,
        settings: Settings,
        audio: Optional[AudioNotifier] = None,
    ) -> "RoundEngine":
        return cls(
            game,
            progress_store,
            settings.difficulty,
            timer_enabled=settings.timer_enabled,
            sound_enabled=settings.sound_enabled,
            hints_enabled=settings.hints_enabled,
            audio=audio,
        )

    @property
    def game(self) -> Game:
        return self._game

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def question_count(self) -> int:
        return len(self._questions)

    @property
    def empty(self) -> bool:
        """True when the selected tier has no questions."""
        return not self._questions

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    @property
    def timer_enabled(self) -> bool:
        return self._timer_enabled

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def score(self) -> int:
        return self._score

    @property
    def result(self) -> Optional[RoundResult]:
        return self._result

    @property
    def state(self) -> RoundState:
        with self._lock:
            return self._snapshot()

    def current_question(self) -> Optional[Question]:
        if self._phase is Phase.FINISHED:
            return None
        return self._questions[self._index]

    def subscribe(self, callback: Callable[[RoundState], None]) -> Callable[[], None]:
        return self._subscribers.subscribe(callback)

    # -- transitions ----------------------------------------------------------

    def submit_answer(self, selected_index: Optional[int] = None) -> RoundState:
        with self._lock:
            self._require(Phase.IN_PROGRESS, "submit_answer")
            question = self._questions[self._index]
            if selected_index is not None and not 0 <= selected_index < len(question.options):
                raise ValueError(
                    f"Answer index {selected_index} is outside 0..{len(question.options) - 1}"
                )
            self._evaluate(question, selected_index)
            state = self._snapshot()
        if not state.correct and self._sound_enabled and self._audio is not None:
            self._audio.play_incorrect_sound()
        self._subscribers.notify(state)
        return state

    def advance(self) -> RoundState:
        with self._lock:
            self._require(Phase.FEEDBACK, "advance")
            self._index += 1
            self._selected = None
            self._correct = None
            self._message = ""
            self._hint_visible = False
            if self._index < len(self._questions):
                self._phase = Phase.IN_PROGRESS
                if self._timer_enabled:
                    self._timer.arm()
            else:
                self._finish()
            state = self._snapshot()
        self._subscribers.notify(state)
        return state

    def tick(self) -> bool:
        """Advance the countdown by one second. Returns True if time ran out."""
        with self._lock:
            if self._phase is not Phase.IN_PROGRESS or not self._timer.armed:
                return False
            expired = self._timer.tick()
            if expired:
                logger.debug("Time ran out on question %d of %s", self._index, self._game.id)
                self._evaluate(self._questions[self._index], None)
            state = self._snapshot()
        if expired and self._sound_enabled and self._audio is not None:
            self._audio.play_incorrect_sound()
        self._subscribers.notify(state)
        return expired

    def abandon(self) -> None:
        """Stop the round without recording a result; later ticks are ignored."""
        with self._lock:
            self._timer.cancel()
            if self._phase is Phase.FINISHED:
                return
            self._abandoned = True
            self._phase = Phase.FINISHED
            logger.debug("Round of %s abandoned at question %d", self._game.id, self._index)

    # -- hints ----------------------------------------------------------------

    @property
    def hints_enabled(self) -> bool:
        return self._hints_enabled

    def set_hints_enabled(self, enabled: bool) -> None:
        """Per-round hint switch; independent of the global setting after start."""
        with self._lock:
            self._hints_enabled = bool(enabled)
            state = self._snapshot()
        self._subscribers.notify(state)

    def show_hint(self) -> None:
        with self._lock:
            if self._phase is Phase.FINISHED:
                raise InvalidStateError("No question to show a hint for")
            self._hint_visible = True
            state = self._snapshot()
        self._subscribers.notify(state)

    @property
    def visible_hint(self) -> Optional[str]:
        question = self.current_question()
        if question is None or not (self._hint_visible and self._hints_enabled):
            return None
        return question.hint

    # -- internals ------------------------------------------------------------

    def _require(self, phase: Phase, operation: str) -> None:
        if self._phase is not phase:
            raise InvalidStateError(f"{operation}() is not allowed in phase {self._phase.value}")

    def _evaluate(self, question: Question, selected_index: Optional[int]) -> None:
        self._timer.cancel()
        self._selected = selected_index
        self._correct = selected_index == question.correct_index
        if self._correct:
            self._score += 1
        self._message = feedback_message(question, self._correct)
        self._phase = Phase.FEEDBACK

    def _finish(self) -> None:
        self._timer.cancel()
        self._phase = Phase.FINISHED
        previous = self._progress_store.get_progress(self._game.id).high_score
        self._progress_store.record_session_result(self._game.id, self._score, len(self._questions))
        self._result = RoundResult(
            game_id=self._game.id,
            score=self._score,
            question_count=len(self._questions),
            new_high_score=self._score > previous,
        )
        logger.info("Round of %s finished: %d/%d", self._game.id, self._score, len(self._questions))

    def _snapshot(self) -> RoundState:
        return RoundState(
            phase=self._phase,
            question_index=self._index,
            score=self._score,
            selected_answer=self._selected,
            remaining_seconds=self._timer.remaining if self._timer_enabled else 0,
            correct=self._correct,
            feedback_message=self._message,
            hint_visible=self._hint_visible,
            hints_enabled=self._hints_enabled,
        )
