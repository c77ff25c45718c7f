"""Application entry point and setup for PhotoQuiz."""

import logging
import os
import sys
import threading
from pathlib import Path

from PySide6.QtGui import QGuiApplication, QIcon
from PySide6.QtWidgets import QApplication

from photoquiz.core.catalog import GameCatalog
from photoquiz.core.image_cache import ImageCache, prefetch
from photoquiz.core.progress import ProgressStore
from photoquiz.core.settings import SettingsStore
from photoquiz.ui.audio import SoundEffectNotifier
from photoquiz.ui.images import load_qimage
from photoquiz.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def start_prefetch(cache: ImageCache, catalog: GameCatalog) -> threading.Thread:
    """Warm the image cache in the background so the first questions load instantly."""
    thread = threading.Thread(
        target=prefetch,
        args=(cache, catalog.image_keys(), load_qimage),
        name="image-prefetch",
        daemon=True,
    )
    thread.start()
    return thread


def run() -> None:
    """Initialize the application, load the catalog and progress, and show the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("PhotoQuiz")
    app.setApplicationDisplayName("PhotoQuiz")

    catalog = GameCatalog()
    settings_store = SettingsStore()
    lock_enabled = settings_store.settings.game_lock_enabled
    if os.environ.get("PHOTOQUIZ_UNLOCK_ALL") == "1":
        logging.info("PHOTOQUIZ_UNLOCK_ALL set; starting with every game unlocked")
        lock_enabled = False
    progress_store = ProgressStore(catalog, lock_enabled=lock_enabled)

    image_cache = ImageCache()
    start_prefetch(image_cache, catalog)

    icon_path = Path(__file__).parent / "assets" / "logo.png"
    if icon_path.exists():
        app.setWindowIcon(QIcon(str(icon_path)))

    window = MainWindow(
        catalog=catalog,
        progress_store=progress_store,
        settings_store=settings_store,
        image_cache=image_cache,
        audio=SoundEffectNotifier(app),
    )
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(480, geometry.width()), min(860, geometry.height()))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
