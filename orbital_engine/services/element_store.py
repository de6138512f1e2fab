"""Last-known-good store of satellite element sets.

Holds one TLE per NORAD id. Refreshes from CelesTrak at most once per
interval per group; a failed fetch keeps whatever the store already
had, so a body that has ever had elements never loses them.
"""

from __future__ import annotations

import logging
import threading
import time as _time
from typing import Callable, Iterable, Optional

from orbital_engine.core.tle_parser import TLEData, parse_tle_text
from orbital_engine.utils.constants import TLE_REFRESH_SECONDS
from orbital_engine.utils.downloader import Downloader

logger = logging.getLogger(__name__)


class ElementSetStore:
    """Thread-safe map of NORAD id -> newest known ``TLEData``."""

    def __init__(
        self,
        downloader: Downloader,
        refresh_seconds: float = TLE_REFRESH_SECONDS,
        wall_clock: Callable[[], float] = _time.monotonic,
        seed: Iterable[TLEData] = (),
    ):
        self._downloader = downloader
        self._refresh_seconds = refresh_seconds
        self._wall_clock = wall_clock
        self._lock = threading.Lock()
        self._sets: dict[int, TLEData] = {}
        self._last_attempt: dict[str, float] = {}
        self.add_many(seed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sets)

    def get(self, norad_id: int) -> Optional[TLEData]:
        with self._lock:
            return self._sets.get(norad_id)

    def all(self) -> list[TLEData]:
        with self._lock:
            return list(self._sets.values())

    def add(self, tle: TLEData) -> bool:
        """Store ``tle`` unless a newer epoch is already held."""
        with self._lock:
            return self._add_locked(tle)

    def add_many(self, tles: Iterable[TLEData]) -> int:
        with self._lock:
            return sum(1 for tle in tles if self._add_locked(tle))

    def load_cached_group(self, group_key: str) -> int:
        """Seed from the on-disk copy of a group, if one exists."""
        path = self._downloader.group_cache_path(group_key)
        if not path.exists():
            return 0
        count = self.add_many(parse_tle_text(path.read_text(encoding="utf-8")))
        logger.info("Loaded %d cached element sets for %s", count, group_key)
        return count

    def is_due(self, group_key: str) -> bool:
        last = self._last_attempt.get(group_key)
        return last is None or self._wall_clock() - last >= self._refresh_seconds

    def refresh_group(self, group_key: str, force: bool = False) -> int:
        """Fetch a group if due; returns how many sets were updated."""
        if not force and not self.is_due(group_key):
            return 0
        self._last_attempt[group_key] = self._wall_clock()

        result = self._downloader.download_tle_group(group_key)
        if not result.ok:
            logger.warning("Keeping %d stale element sets; refresh of %s failed: %s",
                           len(self), group_key, result.error)
            return 0

        updated = self.add_many(parse_tle_text(result.read_text()))
        logger.info("Refreshed %s: %d element sets updated", group_key, updated)
        return updated

    def refresh_norad_ids(self, norad_ids: Iterable[int], force: bool = False) -> int:
        """Per-object refresh for bodies outside any fetched group."""
        updated = 0
        for norad_id in norad_ids:
            key = f"norad:{norad_id}"
            if not force and not self.is_due(key):
                continue
            self._last_attempt[key] = self._wall_clock()
            result = self._downloader.download_tle_by_norad_id(norad_id)
            if not result.ok:
                logger.warning("Refresh of NORAD %d failed, keeping last known set: %s", norad_id, result.error)
                continue
            updated += self.add_many(parse_tle_text(result.read_text()))
        return updated

    def _add_locked(self, tle: TLEData) -> bool:
        held = self._sets.get(tle.catalog_number)
        if held is not None and held.epoch_datetime >= tle.epoch_datetime:
            return False
        self._sets[tle.catalog_number] = tle
        return True
