"""Bounded, thread-safe image cache shared by the prefetcher and the views.

Handles are opaque to the cache (``QImage`` in the app, anything in tests).
Each entry carries a byte cost; least recently used entries are evicted once
the total cost passes ``max_cost``.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_MAX_COST = 100 * 1024 * 1024

ImageLoader = Callable[[str], Optional[Tuple[Any, int]]]


class ImageCache:
    def __init__(self, max_cost: int = DEFAULT_MAX_COST) -> None:
        if max_cost <= 0:
            raise ValueError("max_cost must be positive")
        self._max_cost = max_cost
        self._entries: "OrderedDict[str, Tuple[Any, int]]" = OrderedDict()
        self._total_cost = 0
        self._lock = threading.Lock()

    @property
    def max_cost(self) -> int:
        return self._max_cost

    @property
    def total_cost(self) -> int:
        with self._lock:
            return self._total_cost

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            self._entries.move_to_end(key)
            return entry[0]

    def set(self, key: str, image: Any, cost: int = 0) -> None:
        if cost < 0:
            raise ValueError("cost must not be negative")
        with self._lock:
            self._discard(key)
            if cost > self._max_cost:
                logger.debug("Not caching %s: cost %d exceeds limit %d", key, cost, self._max_cost)
                return
            self._entries[key] = (image, cost)
            self._total_cost += cost
            while self._total_cost > self._max_cost:
                evicted, (_, evicted_cost) = self._entries.popitem(last=False)
                self._total_cost -= evicted_cost
                logger.debug("Evicted %s (%d bytes)", evicted, evicted_cost)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _discard(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._total_cost -= entry[1]


def load_through(cache: ImageCache, key: str, loader: ImageLoader) -> Optional[Any]:
    """Return the cached image for ``key``, loading and caching it on a miss.

    Concurrent misses for the same key may both load; the last write wins.
    """
    image = cache.get(key)
    if image is not None:
        return image
    loaded = loader(key)
    if loaded is None:
        return None
    image, cost = loaded
    cache.set(key, image, cost)
    return image


def prefetch(
    cache: ImageCache,
    keys: Iterable[str],
    loader: ImageLoader,
    max_workers: int = 4,
) -> int:
    """Load every key not yet cached on a thread pool. Returns how many were stored."""
    missing = [key for key in dict.fromkeys(keys) if key and key not in cache]
    if not missing:
        return 0

    def _load(key: str) -> bool:
        try:
            loaded = loader(key)
        except Exception as e:
            # One unreadable image must not abort the rest of the batch.
            logger.warning("Could not load image %s: %s", key, e)
            return False
        if loaded is None:
            logger.debug("No image found for %s", key)
            return False
        image, cost = loaded
        cache.set(key, image, cost)
        return True

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="image-prefetch") as pool:
        stored = sum(1 for ok in pool.map(_load, missing) if ok)
    logger.info("Prefetched %d of %d images", stored, len(missing))
    return stored
