from __future__ import annotations

import threading
from typing import Dict, List, Optional

from webscraper.services.web_scraper import WebScraper


class ScraperRegistry:
    """Thread-safe in-memory registry of scraper sessions started in this process.

    Finished sessions stay visible until removed, bounded by
    `max_finished_records` (oldest finished sessions are dropped first).
    """

    def __init__(self, *, max_finished_records: int = 100):
        self._lock = threading.Lock()
        self._scrapers: Dict[int, WebScraper] = {}
        self._max_finished = max(0, int(max_finished_records))

    def register(self, scraper: WebScraper) -> WebScraper:
        with self._lock:
            self._scrapers[scraper.session_id] = scraper
            self._evict_finished_overflow()
        return scraper

    def _evict_finished_overflow(self) -> None:
        finished = [sid for sid, s in self._scrapers.items() if not s.is_running()]
        overflow = len(finished) - self._max_finished
        for sid in finished[:max(0, overflow)]:
            del self._scrapers[sid]

    def get(self, session_id: int) -> Optional[WebScraper]:
        with self._lock:
            return self._scrapers.get(session_id)

    def remove(self, session_id: int) -> bool:
        with self._lock:
            return self._scrapers.pop(session_id, None) is not None

    def list(self) -> List[WebScraper]:
        with self._lock:
            return list(self._scrapers.values())

    def list_active(self) -> List[WebScraper]:
        return [s for s in self.list() if s.is_running()]

    def stop_all(self) -> None:
        for scraper in self.list_active():
            scraper.stop()
