import logging
from typing import Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from webscraper.db.models import SavedLink

logger = logging.getLogger(__name__)

BATCH_SIZE = 500


def _chunks(values: List[str], size: int = BATCH_SIZE):
    for i in range(0, len(values), size):
        yield values[i:i + size]


class LinksRepository:
    """Repository for saved link sets.

    Requires an explicit `session_factory` (callable returning a `Session`).
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get_session(self) -> Session:
        return self.session_factory()

    def save_links(self, urls: Iterable[str], visited: bool) -> int:
        """Insert links that are not stored yet. Returns the number of new rows.

        Existing rows are only ever promoted to visited, never demoted.
        """
        url_list = list(dict.fromkeys(urls))
        if not url_list:
            return 0
        inserted = 0
        with self.get_session() as session:
            for chunk in _chunks(url_list):
                q = select(SavedLink).where(SavedLink.url.in_(chunk))
                existing = {row.url: row for row in session.execute(q).scalars().all()}
                for url in chunk:
                    row = existing.get(url)
                    if row is None:
                        session.add(SavedLink(url=url, visited=visited))
                        inserted += 1
                    elif visited and not row.visited:
                        row.visited = True
            session.commit()
        logger.debug("Saved %d new links (visited=%s)", inserted, visited)
        return inserted

    def fetch_links(self, visited: Optional[bool] = None, limit: Optional[int] = None) -> List[str]:
        with self.get_session() as session:
            q = select(SavedLink.url).order_by(SavedLink.link_id)
            if visited is not None:
                q = q.where(SavedLink.visited == visited)
            if limit:
                q = q.limit(limit)
            return list(session.execute(q).scalars().all())

    def count_links(self, visited: Optional[bool] = None) -> int:
        with self.get_session() as session:
            q = select(func.count(SavedLink.link_id))
            if visited is not None:
                q = q.where(SavedLink.visited == visited)
            return int(session.execute(q).scalar_one())
