from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, QUrl
from PySide6.QtMultimedia import QSoundEffect

logger = logging.getLogger(__name__)

WRONG_ANSWER_SOUND = Path(__file__).resolve().parent.parent / "assets" / "sounds" / "wrong_answer.wav"


class SoundEffectNotifier:
    """Plays the wrong-answer sound. Missing sound files only log a warning."""

    def __init__(self, parent: Optional[QObject] = None, sound_path: Path = WRONG_ANSWER_SOUND) -> None:
        self._effect: Optional[QSoundEffect] = None
        if not sound_path.exists():
            logger.warning("Sound file not found: %s", sound_path)
            return
        self._effect = QSoundEffect(parent)
        self._effect.setSource(QUrl.fromLocalFile(str(sound_path)))

    def play_incorrect_sound(self) -> None:
        if self._effect is not None:
            self._effect.play()
