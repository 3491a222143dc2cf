"""Factory for creating and restoring WebScraper sessions."""
import itertools
import logging
import threading
from typing import Callable, Optional

from webscraper.domain.content_cache import ContentCache
from webscraper.domain.link_frontier import LinkFrontier
from webscraper.domain.options import OptionFlags
from webscraper.domain.scraper_config import ScraperConfig
from webscraper.domain.snapshot import ScraperSnapshot
from webscraper.services.content_extractor import ContentExtractor
from webscraper.services.fetcher import PageFetcher
from webscraper.services.web_scraper import WebScraper
from webscraper.services.worker_pool import WorkerPool

logger = logging.getLogger(__name__)


class WebScraperFactory:
    """Builds WebScraper instances and hands out their session ids.

    Session ids are numbered per factory, starting at 1.
    """

    def __init__(
        self,
        *,
        transport,
        persister,
        link_cache_limit: Optional[int] = None,
        data_cache_limit: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        extractor_factory: Callable[[Optional[str]], ContentExtractor] = ContentExtractor,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.transport = transport
        self.persister = persister
        self.link_cache_limit = link_cache_limit
        self.data_cache_limit = data_cache_limit
        self.backoff_seconds = backoff_seconds
        self.extractor_factory = extractor_factory
        self.sleep = sleep
        self._counter = itertools.count(1)
        self._counter_lock = threading.Lock()

    def next_session_id(self) -> int:
        with self._counter_lock:
            return next(self._counter)

    def _fetcher(self, options: OptionFlags) -> PageFetcher:
        kwargs = {}
        if self.sleep is not None:
            kwargs["sleep"] = self.sleep
        return PageFetcher(self.transport, options=options, backoff_seconds=self.backoff_seconds, **kwargs)

    def _build(self, session_id, seed_url, frontier, content_cache, threads, options, language, data_limit) -> WebScraper:
        extractor = self.extractor_factory(language)
        extractor.validate_types(content_cache.names())
        return WebScraper(
            session_id,
            seed_url,
            frontier=frontier,
            content_cache=content_cache,
            fetcher=self._fetcher(options),
            extractor=extractor,
            persister=self.persister,
            pool=WorkerPool(threads, name_prefix=f"webscraper-{session_id}"),
            options=options,
            data_limit=data_limit,
        )

    def _persist_fn(self, session_id: int, label: str):
        def persist(content_type, items):
            self.persister.persist_content_buffer(content_type, items, session_label=f"{session_id}:{label}")
        return persist

    def create(self, config: ScraperConfig) -> WebScraper:
        """Build a new, not yet started scraper for `config`."""
        session_id = self.next_session_id()
        content_cache = ContentCache.for_names(
            config.content_types,
            data_limit=config.data_limit,
            data_cache_limit=self.data_cache_limit,
            persist_fn=self._persist_fn(session_id, config.label),
        )
        scraper = self._build(
            session_id,
            config.seed_url,
            LinkFrontier(self.link_cache_limit),
            content_cache,
            config.threads,
            config.options,
            config.language,
            config.data_limit,
        )
        logger.info("Created %s", scraper)
        return scraper

    def restore(self, snapshot: ScraperSnapshot, options: Optional[OptionFlags] = None, start: bool = True) -> WebScraper:
        """Rebuild a scraper from a snapshot with a pool of the recorded size.

        The crawl restarts from the saved frontier; the seed page is not
        fetched again.
        """
        session_id = self.next_session_id()
        content_cache = ContentCache.restore(
            snapshot.content_types,
            data_limit=snapshot.data_limit,
            data_cache_limit=self.data_cache_limit,
            persist_fn=self._persist_fn(session_id, snapshot.seed_url),
        )
        scraper = self._build(
            session_id,
            snapshot.seed_url,
            LinkFrontier.restore(snapshot.frontier, self.link_cache_limit),
            content_cache,
            max(1, snapshot.pool_size),
            options or OptionFlags(),
            snapshot.language,
            snapshot.data_limit,
        )
        logger.info("Restored %s: %d visited, %d unvisited", scraper, scraper.frontier.visited_count, scraper.frontier.unvisited_count)
        if start:
            scraper.resume()
        return scraper
