"""Tests for photoquiz.core.round – the question state machine."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from conftest import make_game, make_question
from photoquiz.core.catalog import GameCatalog
from photoquiz.core.errors import InvalidStateError
from photoquiz.core.round import CORRECT_MESSAGE, Phase, RoundEngine, RoundResult
from photoquiz.core.settings import Difficulty, Settings


@pytest.fixture()
def one_question_game():
    return make_game("game0", medium=[make_question(correct=0, n_options=2)])


@pytest.fixture()
def two_question_game():
    return make_game(
        "game0",
        medium=[make_question("Q1", correct=0), make_question("Q2", correct=1, n_options=3)],
    )


@pytest.fixture()
def store(store_factory, two_question_game):
    catalog = GameCatalog.from_games([two_question_game, make_game("game1", medium=[make_question()])])
    return store_factory(catalog)


def _engine(game, store, **kwargs) -> RoundEngine:
    return RoundEngine(game, store, kwargs.pop("difficulty", Difficulty.MEDIUM), **kwargs)


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------

class TestInitialState:
    def test_starts_in_progress(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        state = engine.state
        assert state.phase is Phase.IN_PROGRESS
        assert state.question_index == 0
        assert state.score == 0
        assert state.selected_answer is None
        assert state.remaining_seconds == 15

    def test_current_question(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        assert engine.current_question().text == "Q1"
        assert engine.question_count == 2

    def test_timer_disabled_reports_zero(self, two_question_game, store):
        engine = _engine(two_question_game, store, timer_enabled=False)
        assert engine.state.remaining_seconds == 0
        assert engine.tick() is False


# ---------------------------------------------------------------------------
# Difficulty selection
# ---------------------------------------------------------------------------

class TestDifficulty:
    def test_hard_selects_hard_tier(self, store):
        hard = (make_question("H1"), make_question("H2"))
        game = make_game("game0", easy=[make_question("E1")], medium=[make_question("M1")], hard=hard)
        engine = _engine(game, store, difficulty=Difficulty.HARD)
        assert engine.questions == hard

    def test_easy_selects_easy_tier(self, store):
        game = make_game("game0", easy=[make_question("E1")], medium=[make_question("M1")])
        engine = _engine(game, store, difficulty=Difficulty.EASY)
        assert [q.text for q in engine.questions] == ["E1"]

    def test_string_difficulty(self, store):
        game = make_game("game0", hard=[make_question("H1")])
        engine = RoundEngine(game, store, "Hard")
        assert engine.difficulty is Difficulty.HARD

    def test_empty_tier_finishes_immediately(self, store):
        game = make_game("game0", medium=[make_question()])
        engine = _engine(game, store, difficulty=Difficulty.HARD)
        assert engine.empty
        assert engine.phase is Phase.FINISHED
        assert engine.current_question() is None
        assert engine.result is None
        assert store.get_progress("game0").progress == 0

    def test_empty_tier_rejects_transitions(self, store):
        engine = _engine(make_game("game0"), store)
        with pytest.raises(InvalidStateError):
            engine.submit_answer(0)
        with pytest.raises(InvalidStateError):
            engine.advance()
        assert engine.tick() is False

    def test_from_settings(self, store):
        game = make_game("game0", easy=[make_question("E1")])
        settings = Settings(difficulty=Difficulty.EASY, timer_enabled=False, hints_enabled=False)
        engine = RoundEngine.from_settings(game, store, settings)
        assert engine.difficulty is Difficulty.EASY
        assert engine.timer_enabled is False
        assert engine.hints_enabled is False


# ---------------------------------------------------------------------------
# submit_answer
# ---------------------------------------------------------------------------

class TestSubmitAnswer:
    def test_correct(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        state = engine.submit_answer(0)
        assert state.phase is Phase.FEEDBACK
        assert state.correct is True
        assert state.score == 1
        assert state.selected_answer == 0
        assert state.feedback_message == CORRECT_MESSAGE

    def test_incorrect_names_correct_option(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        state = engine.submit_answer(1)
        assert state.correct is False
        assert state.score == 0
        assert "Option 0" in state.feedback_message
        assert state.feedback_message != CORRECT_MESSAGE

    def test_no_answer_is_incorrect(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        state = engine.submit_answer(None)
        assert state.correct is False
        assert state.selected_answer is None

    def test_twice_rejected(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        engine.submit_answer(0)
        with pytest.raises(InvalidStateError):
            engine.submit_answer(0)
        assert engine.score == 1

    def test_out_of_range(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        with pytest.raises(ValueError):
            engine.submit_answer(5)
        assert engine.phase is Phase.IN_PROGRESS

    def test_cancels_timer(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        engine.tick()
        engine.submit_answer(0)
        remaining = engine.state.remaining_seconds
        assert engine.tick() is False
        assert engine.state.remaining_seconds == remaining

    def test_wrong_answer_plays_sound(self, two_question_game, store):
        audio = MagicMock()
        engine = _engine(two_question_game, store, audio=audio)
        engine.submit_answer(1)
        audio.play_incorrect_sound.assert_called_once_with()

    def test_correct_answer_silent(self, two_question_game, store):
        audio = MagicMock()
        engine = _engine(two_question_game, store, audio=audio)
        engine.submit_answer(0)
        audio.play_incorrect_sound.assert_not_called()

    def test_sound_disabled(self, two_question_game, store):
        audio = MagicMock()
        engine = _engine(two_question_game, store, audio=audio, sound_enabled=False)
        engine.submit_answer(1)
        audio.play_incorrect_sound.assert_not_called()


# ---------------------------------------------------------------------------
# advance
# ---------------------------------------------------------------------------

class TestAdvance:
    def test_before_submit_rejected(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        with pytest.raises(InvalidStateError):
            engine.advance()

    def test_moves_to_next_question(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        engine.tick()
        engine.submit_answer(0)
        state = engine.advance()
        assert state.phase is Phase.IN_PROGRESS
        assert state.question_index == 1
        assert state.selected_answer is None
        assert state.correct is None
        assert state.remaining_seconds == 15
        assert engine.current_question().text == "Q2"

    def test_last_question_finishes_and_records_once(self, two_question_game, store):
        store.record_session_result = MagicMock(wraps=store.record_session_result)
        engine = _engine(two_question_game, store)
        engine.submit_answer(0)
        engine.advance()
        engine.submit_answer(1)
        state = engine.advance()
        assert state.phase is Phase.FINISHED
        store.record_session_result.assert_called_once_with("game0", 2, 2)
        with pytest.raises(InvalidStateError):
            engine.advance()
        assert store.record_session_result.call_count == 1

    def test_result(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        engine.submit_answer(0)
        engine.advance()
        engine.submit_answer(0)
        engine.advance()
        assert engine.result == RoundResult(game_id="game0", score=1, question_count=2, new_high_score=True)

    def test_result_not_new_high_score(self, two_question_game, store):
        store.record_session_result("game0", 2, 2)
        engine = _engine(two_question_game, store)
        engine.submit_answer(0)
        engine.advance()
        engine.submit_answer(1)
        engine.advance()
        assert engine.result.new_high_score is False


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_single_question_round(self, one_question_game, store_factory):
        store = store_factory(GameCatalog.from_games([one_question_game]))
        engine = RoundEngine(one_question_game, store)
        state = engine.submit_answer(0)
        assert state.correct is True
        assert state.score == 1
        assert engine.advance().phase is Phase.FINISHED
        assert store.get_progress("game0").progress == 5
        assert store.get_progress("game0").high_score == 1

    def test_timeout_after_fifteen_ticks(self, two_question_game, store):
        audio = MagicMock()
        engine = _engine(two_question_game, store, audio=audio)
        results = [engine.tick() for _ in range(15)]
        assert results == [False] * 14 + [True]
        state = engine.state
        assert state.phase is Phase.FEEDBACK
        assert state.correct is False
        assert state.selected_answer is None
        audio.play_incorrect_sound.assert_called_once_with()

    def test_late_tick_after_answer_ignored(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        for _ in range(14):
            engine.tick()
        engine.submit_answer(0)
        assert engine.tick() is False
        assert engine.score == 1
        assert engine.phase is Phase.FEEDBACK

    def test_finishing_unlocks_next_game(self, store_factory):
        questions = [make_question(f"Q{i}") for i in range(10)]
        game = make_game("game0", medium=questions)
        store = store_factory(GameCatalog.from_games([game, make_game("game1")]))
        for _ in range(2):
            engine = RoundEngine(game, store)
            while engine.phase is not Phase.FINISHED:
                engine.submit_answer(0)
                engine.advance()
        assert store.get_progress("game0").progress == 100
        assert store.is_playable("game1")


# ---------------------------------------------------------------------------
# abandon
# ---------------------------------------------------------------------------

class TestAbandon:
    def test_abandon_stops_everything(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        engine.submit_answer(0)
        engine.abandon()
        assert engine.abandoned
        assert engine.phase is Phase.FINISHED
        assert engine.tick() is False
        with pytest.raises(InvalidStateError):
            engine.advance()
        assert store.get_progress("game0").high_score == 0

    def test_late_tick_after_abandon(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        calls = []
        engine.subscribe(calls.append)
        engine.abandon()
        for _ in range(20):
            engine.tick()
        assert calls == []

    def test_abandon_finished_round_keeps_result(self, one_question_game, store):
        engine = _engine(one_question_game, store)
        engine.submit_answer(0)
        engine.advance()
        engine.abandon()
        assert engine.abandoned is False
        assert engine.result is not None


# ---------------------------------------------------------------------------
# Hints and notifications
# ---------------------------------------------------------------------------

class TestHints:
    def test_hint_hidden_until_shown(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        assert engine.visible_hint is None
        engine.show_hint()
        assert engine.visible_hint == "first"

    def test_session_toggle_hides_hint(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        engine.show_hint()
        engine.set_hints_enabled(False)
        assert engine.visible_hint is None
        assert engine.state.hint_visible is True

    def test_starts_from_global_setting(self, two_question_game, store):
        engine = _engine(two_question_game, store, hints_enabled=False)
        engine.show_hint()
        assert engine.visible_hint is None
        engine.set_hints_enabled(True)
        assert engine.visible_hint == "first"

    def test_hint_reset_on_advance(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        engine.show_hint()
        engine.submit_answer(0)
        engine.advance()
        assert engine.state.hint_visible is False

    def test_hint_does_not_touch_score_or_timer(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        engine.tick()
        engine.show_hint()
        state = engine.state
        assert state.score == 0
        assert state.remaining_seconds == 14

    def test_show_hint_when_finished(self, store):
        engine = _engine(make_game("game0"), store)
        with pytest.raises(InvalidStateError):
            engine.show_hint()


class TestNotifications:
    def test_each_transition_notifies(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        phases = []
        engine.subscribe(lambda state: phases.append(state.phase))
        engine.tick()
        engine.submit_answer(0)
        engine.advance()
        assert phases == [Phase.IN_PROGRESS, Phase.FEEDBACK, Phase.IN_PROGRESS]

    def test_unsubscribe(self, two_question_game, store):
        engine = _engine(two_question_game, store)
        calls = []
        unsubscribe = engine.subscribe(calls.append)
        unsubscribe()
        engine.submit_answer(0)
        assert calls == []
