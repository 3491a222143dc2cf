import logging
import threading
from typing import List, Optional

from webscraper.domain.content_cache import ContentCache
from webscraper.domain.link_frontier import LinkFrontier
from webscraper.domain.options import Option, OptionFlags
from webscraper.domain.snapshot import ScraperSnapshot
from webscraper.exceptions import HttpFetchError, NoLinksFoundError
from webscraper.services.content_extractor import ContentExtractor
from webscraper.services.fetcher import PageFetcher
from webscraper.services.worker_pool import WorkerPool

logger = logging.getLogger(__name__)


class WebScraper:
    """Crawl controller: drives the worker pool over a shared frontier and content cache.

    Every worker runs `_run`. The crawl stops when every content type has
    collected `data_limit` items (unless the UNLIMITED option is set), when
    the frontier is exhausted, or when the pool is asked to stop. The last
    worker to leave runs `close()`, which persists whatever the options ask
    for.
    """

    def __init__(
        self,
        session_id: int,
        seed_url: str,
        *,
        frontier: LinkFrontier,
        content_cache: ContentCache,
        fetcher: PageFetcher,
        extractor: ContentExtractor,
        persister,
        pool: WorkerPool,
        options: Optional[OptionFlags] = None,
        data_limit: Optional[int] = None,
    ):
        self.session_id = session_id
        self.seed_url = seed_url
        self.frontier = frontier
        self.content_cache = content_cache
        self.fetcher = fetcher
        self.extractor = extractor
        self.persister = persister
        self.pool = pool
        self.options = options or OptionFlags()
        self.data_limit = content_cache.data_limit if data_limit is None else int(data_limit)
        self._close_lock = threading.Lock()
        self._closed = False
        self._started = False
        self.finished = threading.Event()

    def __str__(self):
        return f"WebScraper::{self.session_id} (started from {self.seed_url})"

    def _is_set(self, option: Option) -> bool:
        return self.options.is_set(option)

    @property
    def debug(self) -> bool:
        return self._is_set(Option.DEBUG_MODE)

    def start(self) -> "WebScraper":
        """Seed the frontier from the start page and spawn the workers.

        A seed page that cannot be fetched or has no links leaves the scraper
        inert: the failure is logged and no worker is spawned.
        """
        try:
            body = self.fetcher.fetch_once(self.seed_url)
            self.frontier.seed(self.seed_url, self.extractor.extract_links(self.seed_url, body))
        except (HttpFetchError, NoLinksFoundError) as e:
            logger.error("UNABLE TO START %s: %s", self, e)
            return self
        self.resume()
        return self

    def resume(self) -> "WebScraper":
        """Start the workers on the current frontier without reseeding."""
        with self._close_lock:
            self._closed = False
        self.finished.clear()
        self.pool.set_task(self._run, on_last_exit=self.close).start()
        self._started = True
        logger.info("Started %s with %d workers", self, self.pool.size())
        return self

    def _should_continue(self) -> bool:
        return self._is_set(Option.UNLIMITED) or self.content_cache.not_all_collected(self.data_limit)

    def _run(self) -> None:
        name = threading.current_thread().name
        while self._should_continue():
            link = self.frontier.next_unvisited()
            if link is None:
                logger.info("%s: frontier exhausted (%s)", name, self)
                break
            if self.debug:
                logger.info("visited links: %d, unvisited links: %d", self.frontier.visited_count, self.frontier.unvisited_count)
            page = self.fetcher.fetch(link, self.frontier.next_unvisited, should_stop=self.pool.should_stop)
            if page is None:
                if self.pool.should_stop():
                    logger.info("%s: stop requested during fetch (%s)", name, self)
                else:
                    logger.info("%s: no fetchable links left (%s)", name, self)
                break
            try:
                self._process_page(page.url, page.body)
            except Exception:
                logger.exception("Error processing %s", page.url)
            if self.pool.should_stop():
                break
        logger.info("%s stopping", name)

    def _process_page(self, url: str, body: str) -> None:
        if self.frontier.has_capacity():
            links = self.extractor.extract_links(url, body)
            if links:
                self.frontier.offer_discovered(links)
            elif self.debug:
                logger.warning("%s page has no identifiable links --LINK TO PAGE -> %s", self, url)
        restrict = self._is_set(Option.RESTRICT_LANGUAGE)
        for ct in self.content_cache.types():
            if not ct.reached_limit(self.data_limit):
                items = self.extractor.extract_content(url, body, ct.name, restrict_language=restrict)
                ct.add_data(items, self.data_limit)
            if self.debug:
                logger.info("%s accumulated %s: %d", threading.current_thread().name, ct.name, ct.collected)
        self.content_cache.flush_if_over_threshold()

    def stop(self) -> None:
        self.pool.stop()

    def close(self) -> None:
        """Run finalization once: banner, saved links, remaining content."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        try:
            if self.debug:
                logger.info("--------------")
                logger.info("%s FINISHED!", self)
                logger.info("--------------")
            if self._is_set(Option.SAVE_LINKS):
                self._save_links()
            if self._is_set(Option.SAVE_CONTENT):
                self.content_cache.flush_all()
        finally:
            self.finished.set()

    def _save_links(self) -> None:
        try:
            self.persister.persist_links(self.frontier.visited_links(), self.frontier.unvisited_links())
        except Exception as e:
            logger.error("Failed to save links for %s: %s", self, e, exc_info=True)

    def has_started(self) -> bool:
        """False for a scraper whose seed page could not start a crawl."""
        return self._started

    def is_running(self) -> bool:
        return self._started and not self.pool.all_terminated()

    def join(self, timeout: Optional[float] = None) -> bool:
        if not self._started:
            return True
        return self.pool.join(timeout)

    def resize(self, threads: int, timeout: Optional[float] = None) -> bool:
        """Grow or shrink the pool while the crawl runs.

        Growing never blocks. Shrinking waits up to `timeout` seconds for the
        retiring workers to finish their current page and returns False if
        some were still busy; the request is then withdrawn and the pool keeps
        its remaining workers.
        """
        threads = int(threads)
        if threads <= 0:
            raise ValueError("threads must be positive")
        if threads > self.pool.live_count():
            self.pool.add_more_threads(threads)
            return True
        return self.pool.decrease_threads_to(threads, timeout=timeout)

    def snapshot(self, timeout: Optional[float] = None) -> ScraperSnapshot:
        """Stop the workers and capture the state needed for a warm restart."""
        self.stop()
        if not self.join(timeout):
            logger.warning("Workers of %s still running after %.1fs; snapshot may be stale", self, timeout or 0)
        return ScraperSnapshot(
            seed_url=self.seed_url,
            data_limit=self.data_limit,
            pool_size=self.pool.size(),
            frontier=self.frontier.snapshot(),
            content_types=self.content_cache.snapshot(),
            language=self.extractor.language,
        )

    def content_type_names(self) -> List[str]:
        return self.content_cache.names()

    def get_collected_info(self) -> str:
        counts = ", ".join(f"{name}={count}" for name, count in self.content_cache.collected_counts().items())
        return (
            f"{self}: visited={self.frontier.visited_count} "
            f"unvisited={self.frontier.unvisited_count} collected[{counts}] "
            f"running={self.is_running()}"
        )
