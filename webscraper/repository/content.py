import logging
from typing import Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from webscraper.db.models import ContentItem
from webscraper.repository.links import _chunks

logger = logging.getLogger(__name__)


class ContentRepository:
    """Repository for flushed content buffers."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get_session(self) -> Session:
        return self.session_factory()

    @staticmethod
    def _sanitize_text(val: str) -> str:
        """Strip NUL characters; some databases reject them in TEXT columns."""
        return val.replace("\x00", "")

    def save_items(self, content_type: str, items: Iterable[str], session_label: Optional[str] = None) -> int:
        """Append items of one content type, skipping values already stored. Returns rows inserted."""
        values = list(dict.fromkeys(self._sanitize_text(v) for v in items))
        if not values:
            return 0
        inserted = 0
        with self.get_session() as session:
            for chunk in _chunks(values):
                q = select(ContentItem.value).where(
                    ContentItem.content_type == content_type,
                    ContentItem.value.in_(chunk),
                )
                existing = set(session.execute(q).scalars().all())
                new_rows = [
                    ContentItem(content_type=content_type, value=v, session_label=session_label)
                    for v in chunk if v not in existing
                ]
                session.add_all(new_rows)
                inserted += len(new_rows)
            session.commit()
        logger.debug("Saved %d %s items", inserted, content_type)
        return inserted

    def fetch_items(self, content_type: Optional[str] = None, limit: Optional[int] = None) -> List[str]:
        with self.get_session() as session:
            q = select(ContentItem.value).order_by(ContentItem.item_id)
            if content_type is not None:
                q = q.where(ContentItem.content_type == content_type)
            if limit:
                q = q.limit(limit)
            return list(session.execute(q).scalars().all())

    def count_items(self, content_type: Optional[str] = None) -> int:
        with self.get_session() as session:
            q = select(func.count(ContentItem.item_id))
            if content_type is not None:
                q = q.where(ContentItem.content_type == content_type)
            return int(session.execute(q).scalar_one())
