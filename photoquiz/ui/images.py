"""Qt image loader for the shared image cache."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

from PySide6.QtGui import QImage

logger = logging.getLogger(__name__)

IMAGES_DIR = Path(__file__).resolve().parent.parent / "assets" / "images"
_EXTENSIONS = (".png", ".jpg", ".jpeg")


def find_image(key: str, base_dir: Path = IMAGES_DIR) -> Optional[Path]:
    for ext in _EXTENSIONS:
        candidate = base_dir / f"{key}{ext}"
        if candidate.exists():
            return candidate
    return None


def load_qimage(key: str) -> Optional[Tuple[QImage, int]]:
    """Decode ``key`` from the assets folder. QImage is safe to build off the GUI thread."""
    path = find_image(key)
    if path is None:
        return None
    image = QImage(str(path))
    if image.isNull():
        logger.warning("Failed to decode image: %s", path)
        return None
    return image, int(image.sizeInBytes())
