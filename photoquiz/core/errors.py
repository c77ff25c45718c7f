"""Exceptions raised by the quiz core."""

from __future__ import annotations


class QuizError(Exception):
    """Base class for quiz engine errors."""


class GameNotFoundError(QuizError, KeyError):
    """Raised when a game id is not part of the catalog."""

    def __init__(self, game_id: str) -> None:
        super().__init__(game_id)
        self.game_id = game_id

    def __str__(self) -> str:
        return f"Unknown game: {self.game_id!r}"


class InvalidStateError(QuizError):
    """Raised when a round transition is attempted from the wrong phase."""


class ConfigurationError(QuizError, ValueError):
    """Raised when catalog data is malformed."""
