from __future__ import annotations

import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class CrawlPersister:
    """Persists link sets and content buffers using repositories."""

    def __init__(self, links_repo, content_repo):
        self.links_repo = links_repo
        self.content_repo = content_repo

    def persist_links(self, visited: Iterable[str], unvisited: Iterable[str]) -> None:
        # Visited first so a link present in both loads keeps visited=True.
        saved_visited = self.links_repo.save_links(visited, visited=True)
        saved_unvisited = self.links_repo.save_links(unvisited, visited=False)
        logger.info("Saved links: %d visited, %d unvisited", saved_visited, saved_unvisited)

    def persist_content_buffer(self, content_type: str, items: Iterable[str], session_label: Optional[str] = None) -> None:
        saved = self.content_repo.save_items(content_type, items, session_label=session_label)
        logger.info("Saved %d %s items", saved, content_type)
