import logging
import threading
import time
from typing import Callable, Dict, Optional, Protocol

from webscraper import config
from webscraper.domain.http_response import FetchedPage, HttpResponse
from webscraper.domain.options import Option, OptionFlags
from webscraper.exceptions import HttpFetchError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def fetch(self, url: str) -> HttpResponse: ...


class PageFetcher:
    """Fetch page bodies, moving on to another frontier candidate when a link fails.

    A failing link is never retried in place: `next_candidate` (normally the
    frontier's `next_unvisited`) supplies a different link until one succeeds
    or the frontier runs dry. A rate-limit answer additionally sleeps
    `backoff_seconds` before moving on, so the whole crawl slows down instead
    of hammering the server.
    """

    def __init__(
        self,
        transport: Transport,
        options: Optional[OptionFlags] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.transport = transport
        self.options = options or OptionFlags()
        self.backoff_seconds = config.RATE_LIMIT_BACKOFF_SECONDS if backoff_seconds is None else float(backoff_seconds)
        self._sleep = sleep
        self._stats_lock = threading.Lock()
        self.stats = {
            'attempts': 0,
            'successes': 0,
            'failures': 0,
            'rate_limited': 0,
        }

    @property
    def debug(self) -> bool:
        return self.options.is_set(Option.DEBUG_MODE)

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self.stats[key] += 1

    def fetch_once(self, link: str) -> str:
        """Single attempt without fallback; raises HttpFetchError."""
        self._count('attempts')
        if self.debug:
            logger.info("visiting %s", link)
        else:
            logger.debug("visiting %s", link)
        response = self.transport.fetch(link)
        self._count('successes')
        return response.text

    def fetch(
        self,
        link: str,
        next_candidate: Callable[[], Optional[str]],
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> Optional[FetchedPage]:
        """Return the first page that can be fetched, starting with `link`.

        Returns None when every remaining candidate failed and the frontier is
        exhausted, or when `should_stop` turns true after a failed attempt. A
        pending stop skips the backoff and leaves the remaining candidates
        queued.
        """
        stopping = should_stop or (lambda: False)
        current: Optional[str] = link
        while current is not None:
            try:
                return FetchedPage(current, self.fetch_once(current))
            except HttpFetchError as e:
                self._count('failures')
                if self.debug:
                    logger.warning("%s", e)
                    logger.warning("Couldn't visit page: %s", current)
                else:
                    logger.debug("Fetch failed for %s: %s", current, e)
                if e.is_rate_limited:
                    self._count('rate_limited')
                if stopping():
                    return None
                if e.is_rate_limited:
                    logger.info("Rate limited on %s; backing off for %.0fs", current, self.backoff_seconds)
                    self._sleep(self.backoff_seconds)
                    if stopping():
                        return None
            current = next_candidate()
        return None

    def get_stats(self) -> Dict[str, int]:
        with self._stats_lock:
            return self.stats.copy()
