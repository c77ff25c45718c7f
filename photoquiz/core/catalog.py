from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import yaml

from photoquiz.core.errors import ConfigurationError, GameNotFoundError
from photoquiz.core.settings import Difficulty

logger = logging.getLogger(__name__)

TIERS = ("easy", "medium", "hard")


@dataclass(frozen=True)
class AnswerOption:
    name: str
    image: str


@dataclass(frozen=True)
class Question:
    """A multiple-choice question; ``correct_index`` points into ``options``."""

    text: str
    options: Tuple[AnswerOption, ...]
    correct_index: int
    hint: Optional[str] = None

    def __post_init__(self) -> None:
        if len(self.options) < 2:
            raise ConfigurationError(f"Question {self.text!r} needs at least two options")
        if not 0 <= self.correct_index < len(self.options):
            raise ConfigurationError(
                f"Question {self.text!r}: correct index {self.correct_index} "
                f"is outside 0..{len(self.options) - 1}"
            )

    @property
    def correct_option(self) -> AnswerOption:
        return self.options[self.correct_index]


@dataclass(frozen=True)
class Game:
    id: str
    name: str
    description: str
    thumbnail: str
    easy: Tuple[Question, ...] = ()
    medium: Tuple[Question, ...] = ()
    hard: Tuple[Question, ...] = ()

    def questions_for(self, difficulty: Difficulty) -> Tuple[Question, ...]:
        if difficulty is Difficulty.EASY:
            return self.easy
        if difficulty is Difficulty.HARD:
            return self.hard
        return self.medium

    def all_questions(self) -> Tuple[Question, ...]:
        return self.easy + self.medium + self.hard


class GameCatalog:
    """Ordered, read-only collection of games loaded from ``data/games/game*.yaml``."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._games = self._load_games(base_dir or _default_games_dir())

    @classmethod
    def from_games(cls, games: Iterable[Game]) -> "GameCatalog":
        catalog = cls.__new__(cls)
        loaded: Dict[str, Game] = {}
        for game in games:
            if game.id in loaded:
                raise ConfigurationError(f"Duplicate game id: {game.id!r}")
            loaded[game.id] = game
        catalog._games = loaded
        return catalog

    def all(self) -> List[Game]:
        return list(self._games.values())

    def get(self, game_id: str) -> Game:
        try:
            return self._games[game_id]
        except KeyError:
            raise GameNotFoundError(game_id) from None

    def image_keys(self) -> List[str]:
        """Every thumbnail and option image, first occurrence order, no repeats."""
        keys: Dict[str, None] = {}
        for game in self._games.values():
            if game.thumbnail:
                keys.setdefault(game.thumbnail, None)
            for question in game.all_questions():
                for option in question.options:
                    keys.setdefault(option.image, None)
        return list(keys)

    def __len__(self) -> int:
        return len(self._games)

    def __iter__(self) -> Iterator[Game]:
        return iter(list(self._games.values()))

    def _load_games(self, base_dir: Path) -> Dict[str, Game]:
        if not base_dir.exists():
            raise FileNotFoundError(f"Games directory not found: {base_dir}")

        games: Dict[str, Game] = {}

        def _sort_key(p: Path) -> tuple[int, str]:
            m = re.match(r"^game(\d+)$", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        for game_path in sorted(base_dir.glob("game*.yaml"), key=_sort_key):
            raw = yaml.safe_load(game_path.read_text(encoding="utf-8"))
            games[game_path.stem] = _parse_game(game_path.stem, raw, game_path.name)

        if not games:
            raise ConfigurationError(f"No game files (game*.yaml) found in {base_dir}")
        logger.info("Loaded %d games from %s", len(games), base_dir)
        return games


def _default_games_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "games"


def _parse_game(key: str, raw: Any, source: str) -> Game:
    if not raw or not isinstance(raw, dict):
        raise ConfigurationError(f"{source}: expected YAML mapping with 'name' and 'questions'")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ConfigurationError(f"{source}: missing or invalid 'name'")

    questions = raw.get("questions") or {}
    if not isinstance(questions, dict):
        raise ConfigurationError(f"{source}: 'questions' must map tiers to lists")
    unknown = set(questions) - set(TIERS)
    if unknown:
        raise ConfigurationError(f"{source}: unknown tiers {sorted(unknown)}")

    tiers: Dict[str, Tuple[Question, ...]] = {}
    for tier in TIERS:
        items = questions.get(tier) or []
        if not isinstance(items, list):
            raise ConfigurationError(f"{source}: tier '{tier}' must be a list")
        tiers[tier] = tuple(
            _parse_question(item, f"{source} {tier}[{i}]") for i, item in enumerate(items)
        )
        if not tiers[tier]:
            logger.debug("%s: tier '%s' is empty", source, tier)

    return Game(
        id=key,
        name=name.strip(),
        description=str(raw.get("description") or "").strip(),
        thumbnail=str(raw.get("thumbnail") or "").strip(),
        easy=tiers["easy"],
        medium=tiers["medium"],
        hard=tiers["hard"],
    )


def _parse_question(raw: Any, where: str) -> Question:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{where}: expected a mapping")
    text = raw.get("text")
    if not text or not isinstance(text, str):
        raise ConfigurationError(f"{where}: missing or invalid 'text'")
    options = raw.get("options")
    if not isinstance(options, list):
        raise ConfigurationError(f"{where}: 'options' must be a list")

    parsed: List[AnswerOption] = []
    for option in options:
        if not isinstance(option, dict) or not option.get("name"):
            raise ConfigurationError(f"{where}: each option needs a 'name'")
        parsed.append(
            AnswerOption(name=str(option["name"]).strip(), image=str(option.get("image") or "").strip())
        )

    correct = raw.get("correct")
    if isinstance(correct, bool) or not isinstance(correct, int):
        raise ConfigurationError(f"{where}: 'correct' must be an option index")
    hint = raw.get("hint")
    try:
        return Question(
            text=text.strip(),
            options=tuple(parsed),
            correct_index=correct,
            hint=str(hint).strip() if hint else None,
        )
    except ConfigurationError as e:
        raise ConfigurationError(f"{where}: {e}") from None
