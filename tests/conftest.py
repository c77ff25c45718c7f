"""Shared fixtures: small in-memory catalogs and stores backed by temp files."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import pytest

from photoquiz.core.catalog import AnswerOption, Game, GameCatalog, Question
from photoquiz.core.progress import ProgressStore


def make_question(text: str = "Which is A?", correct: int = 0, n_options: int = 2, hint: str = "first") -> Question:
    options = tuple(AnswerOption(name=f"Option {i}", image=f"img-{i}") for i in range(n_options))
    return Question(text=text, options=options, correct_index=correct, hint=hint)


def make_game(
    game_id: str = "game0",
    easy: Sequence[Question] = (),
    medium: Sequence[Question] = (),
    hard: Sequence[Question] = (),
) -> Game:
    return Game(
        id=game_id,
        name=game_id.title(),
        description=f"About {game_id}",
        thumbnail=f"thumb-{game_id}",
        easy=tuple(easy),
        medium=tuple(medium),
        hard=tuple(hard),
    )


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep every store away from ~/.photoquiz."""
    home = tmp_path / "home"
    monkeypatch.setenv("PHOTOQUIZ_HOME", str(home))
    monkeypatch.delenv("PHOTOQUIZ_UNLOCK_ALL", raising=False)
    return home


@pytest.fixture()
def three_games() -> GameCatalog:
    return GameCatalog.from_games(
        [
            make_game("game0", medium=[make_question()]),
            make_game("game1", medium=[make_question()]),
            make_game("game2", medium=[make_question()]),
        ]
    )


@pytest.fixture()
def progress_file(tmp_path: Path) -> Path:
    return tmp_path / "progress.json"


@pytest.fixture()
def store_factory(progress_file: Path) -> Callable[..., ProgressStore]:
    def _make(catalog: GameCatalog, lock_enabled: bool = True) -> ProgressStore:
        return ProgressStore(catalog, lock_enabled=lock_enabled, file_path=progress_file)

    return _make
