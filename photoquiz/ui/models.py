"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from photoquiz.core.catalog import Game, GameCatalog
from photoquiz.core.progress import ProgressStore
from photoquiz.core.round import Phase


@dataclass
class GameRowState:
    """UI state for one row of the game list: scores, progress and lock badge."""

    game: Game
    unlocked: bool
    progress: int
    high_score: int
    locked_badge: bool = False


def build_game_rows(catalog: GameCatalog, progress_store: ProgressStore) -> List[GameRowState]:
    """Join static games with their progress records, in catalog order."""
    lock_enabled = progress_store.lock_enabled
    return [
        GameRowState(
            game=game,
            unlocked=record.unlocked,
            progress=record.progress,
            high_score=record.high_score,
            locked_badge=lock_enabled and not record.unlocked,
        )
        for game, record in zip(catalog, progress_store.records())
    ]


def tick_timer_should_run(phase: Phase, timer_enabled: bool) -> bool:
    """The one-second tick source runs only while a timed question awaits an answer."""
    return timer_enabled and phase is Phase.IN_PROGRESS
