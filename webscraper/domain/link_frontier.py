import logging
import threading
from collections import deque
from typing import Deque, Iterable, List, Optional, Set

from webscraper import config
from webscraper.domain.snapshot import FrontierSnapshot
from webscraper.domain.visited_tracker import VisitedTracker
from webscraper.exceptions import NoLinksFoundError

logger = logging.getLogger(__name__)


class LinkFrontier:
    """
    Shared visited/unvisited link bookkeeping for all workers.

    A link lives in at most one of the unvisited queue and the visited set.
    Dequeuing a link marks it visited in the same critical section, so two
    workers can never receive the same link. The queue is capped at
    `link_cache_limit`; discoveries beyond the cap are dropped, not deferred.
    """

    def __init__(self, link_cache_limit: Optional[int] = None):
        limit = config.LINK_CACHE_LIMIT if link_cache_limit is None else int(link_cache_limit)
        if limit <= 0:
            raise ValueError("link_cache_limit must be positive")
        self._limit = limit
        self._lock = threading.Lock()
        self._visited = VisitedTracker()
        self._queue: Deque[str] = deque()
        self._queued: Set[str] = set()

    @property
    def link_cache_limit(self) -> int:
        return self._limit

    def seed(self, start_link: str, discovered: Iterable[str]) -> Set[str]:
        """Initialize the frontier from the links found on the start page.

        Raises NoLinksFoundError when the start page produced nothing to crawl.
        Returns the links that were enqueued.
        """
        links = set(discovered)
        if not links:
            raise NoLinksFoundError(start_link)
        with self._lock:
            self._visited.mark(start_link)
            enqueued = self._offer_locked(links)
        logger.debug("Seeded frontier from %s with %d links", start_link, len(enqueued))
        return enqueued

    def next_unvisited(self) -> Optional[str]:
        """Dequeue the next link and mark it visited; None once the queue is empty."""
        with self._lock:
            if not self._queue:
                return None
            link = self._queue.popleft()
            self._queued.discard(link)
            self._visited.mark(link)
            return link

    def offer_discovered(self, links: Iterable[str]) -> int:
        """Enqueue new links while the queue is below its cap. Returns how many were added."""
        with self._lock:
            return len(self._offer_locked(links))

    def _offer_locked(self, links: Iterable[str]) -> Set[str]:
        added = set()
        for link in links:
            if len(self._queue) >= self._limit:
                break
            if self._visited.is_visited(link) or link in self._queued:
                continue
            self._queue.append(link)
            self._queued.add(link)
            added.add(link)
        return added

    def mark_visited(self, link: str) -> None:
        """Mark a link visited without fetching it; a queued copy is removed."""
        with self._lock:
            if link in self._queued:
                self._queued.discard(link)
                self._queue.remove(link)
            self._visited.mark(link)

    def is_visited(self, link: str) -> bool:
        with self._lock:
            return self._visited.is_visited(link)

    def is_queued(self, link: str) -> bool:
        with self._lock:
            return link in self._queued

    # Size reads are best-effort and only used for diagnostics and the
    # "should we bother extracting links" check.
    @property
    def visited_count(self) -> int:
        return len(self._visited)

    @property
    def unvisited_count(self) -> int:
        return len(self._queue)

    def has_capacity(self) -> bool:
        return len(self._queue) < self._limit

    def visited_links(self) -> List[str]:
        with self._lock:
            return self._visited.to_list()

    def unvisited_links(self) -> List[str]:
        with self._lock:
            return list(self._queue)

    def snapshot(self) -> FrontierSnapshot:
        with self._lock:
            return FrontierSnapshot(visited=self._visited.to_list(), unvisited=list(self._queue))

    @classmethod
    def restore(cls, snapshot: FrontierSnapshot, link_cache_limit: Optional[int] = None) -> "LinkFrontier":
        frontier = cls(link_cache_limit=link_cache_limit)
        frontier._visited = VisitedTracker(snapshot.visited)
        for link in snapshot.unvisited:
            if len(frontier._queue) >= frontier._limit:
                logger.warning("Snapshot holds more unvisited links than the cache limit %d; dropping the rest", frontier._limit)
                break
            if frontier._visited.is_visited(link) or link in frontier._queued:
                logger.warning("Dropping duplicate link from snapshot: %s", link)
                continue
            frontier._queue.append(link)
            frontier._queued.add(link)
        return frontier

    def __repr__(self):
        return f"<LinkFrontier visited={self.visited_count} unvisited={self.unvisited_count}>"
