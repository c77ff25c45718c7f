from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from photoquiz.core import unlock
from photoquiz.core.catalog import GameCatalog
from photoquiz.core.errors import GameNotFoundError
from photoquiz.core.events import Subscribers
from photoquiz.core.settings import data_dir

logger = logging.getLogger(__name__)

POINTS_PER_CORRECT_ANSWER = 5
MAX_PROGRESS = 100


@dataclass
class ProgressRecord:
    game_id: str
    high_score: int = 0
    progress: int = 0
    unlocked: bool = False


def _clamp_progress(value: int) -> int:
    return max(0, min(MAX_PROGRESS, value))


class ProgressStore:
    """Per-game high scores, progress and unlock flags.

    High scores and progress persist to ``~/.photoquiz/progress.json``. Unlock
    flags are derived from progress and lock mode when the store is built and
    afterwards only ever grow for the lifetime of the store.
    """

    def __init__(
        self,
        catalog: GameCatalog,
        lock_enabled: bool = True,
        file_path: Optional[Path] = None,
    ) -> None:
        self._catalog = catalog
        self._file_path = file_path or data_dir() / "progress.json"
        self._lock = threading.RLock()
        self._lock_enabled = bool(lock_enabled)
        self._subscribers: Subscribers[ProgressStore] = Subscribers()
        self._records = self._load()
        self._apply_initial_unlocks()

    @property
    def lock_enabled(self) -> bool:
        return self._lock_enabled

    def subscribe(self, callback: Callable[["ProgressStore"], None]) -> Callable[[], None]:
        """Register ``callback(store)`` to run after every change. Returns an unsubscribe function."""
        return self._subscribers.subscribe(callback)

    def get_progress(self, game_id: str) -> ProgressRecord:
        with self._lock:
            record = self._records.get(game_id)
            if record is None:
                raise GameNotFoundError(game_id)
            return replace(record)

    def records(self) -> List[ProgressRecord]:
        """Copies of every record, in catalog order."""
        with self._lock:
            return [replace(record) for record in self._records.values()]

    def is_playable(self, game_id: str) -> bool:
        record = self.get_progress(game_id)
        return not self._lock_enabled or record.unlocked

    def record_session_result(self, game_id: str, score: int, question_count: int) -> None:
        if score < 0 or question_count < 0:
            raise ValueError("score and question_count must not be negative")
        if score > question_count:
            raise ValueError(f"score {score} exceeds question count {question_count}")

        with self._lock:
            record = self._records.get(game_id)
            if record is None:
                raise GameNotFoundError(game_id)
            record.high_score = max(record.high_score, score)
            record.progress = _clamp_progress(record.progress + score * POINTS_PER_CORRECT_ANSWER)
            if self._lock_enabled:
                self._reevaluate()
            logger.info(
                "Recorded %s: score %d/%d, progress %d%%, high score %d",
                game_id,
                score,
                question_count,
                record.progress,
                record.high_score,
            )
            self._save()
        self._subscribers.notify(self)

    def set_lock_mode(self, enabled: bool) -> None:
        with self._lock:
            self._lock_enabled = bool(enabled)
            self._reevaluate()
        self._subscribers.notify(self)

    def reset(self) -> None:
        """Clear all scores and progress. Unlocks are recomputed from scratch."""
        with self._lock:
            self._records = {game.id: ProgressRecord(game_id=game.id) for game in self._catalog}
            self._apply_initial_unlocks()
            self._save()
        self._subscribers.notify(self)

    def save(self) -> None:
        """Persist current state to disk (e.g. on app exit)."""
        with self._lock:
            self._save()

    def _reevaluate(self) -> None:
        records = list(self._records.values())
        for record, flag in zip(records, unlock.reevaluate(records, self._lock_enabled)):
            record.unlocked = flag

    def _apply_initial_unlocks(self) -> None:
        records = list(self._records.values())
        flags = unlock.initial_unlocks([r.progress for r in records], self._lock_enabled)
        for record, flag in zip(records, flags):
            record.unlocked = flag

    def _load(self) -> Dict[str, ProgressRecord]:
        records = {game.id: ProgressRecord(game_id=game.id) for game in self._catalog}
        if not self._file_path.exists():
            return records
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return records

        games = payload.get("games", {}) if isinstance(payload, dict) else {}
        if not isinstance(games, dict):
            logger.warning("Ignoring malformed 'games' section in %s", self._file_path)
            return records
        for key, value in games.items():
            record = records.get(key)
            if record is None:
                logger.debug("Skipping progress for unknown game %s", key)
                continue
            high_score, progress = _parse_saved(value)
            record.high_score = high_score
            record.progress = progress
        return records

    def _save(self) -> None:
        payload = {
            "games": {
                key: {"high_score": record.high_score, "progress": record.progress}
                for key, record in self._records.items()
            }
        }
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)


def _parse_saved(value: object) -> Tuple[int, int]:
    if not isinstance(value, dict):
        return 0, 0
    try:
        high_score = max(0, int(value.get("high_score", 0)))
        progress = _clamp_progress(int(value.get("progress", 0)))
    except (TypeError, ValueError, OverflowError):
        return 0, 0
    return high_score, progress
