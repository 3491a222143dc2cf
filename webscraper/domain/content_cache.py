import logging
from typing import Callable, Dict, Iterable, List, Optional

from webscraper import config
from webscraper.domain.content_type import ContentType
from webscraper.domain.snapshot import ContentTypeSnapshot

logger = logging.getLogger(__name__)

PersistFn = Callable[[str, List[str]], None]


class ContentCache:
    """Per content type buffers with a size-triggered flush and a global collection limit.

    `data_limit` is the number of items to collect per type before the crawl
    may stop; `data_cache_limit` is the buffer size that triggers a flush to
    storage through `persist_fn(type_name, items)`.
    """

    def __init__(
        self,
        content_types: Iterable[ContentType],
        *,
        data_limit: int,
        persist_fn: PersistFn,
        data_cache_limit: Optional[int] = None,
    ):
        self._types: Dict[str, ContentType] = {}
        for ct in content_types:
            if ct.name in self._types:
                raise ValueError(f"duplicate content type: {ct.name}")
            self._types[ct.name] = ct
        if not self._types:
            raise ValueError("at least one content type is required")
        if int(data_limit) <= 0:
            raise ValueError("data_limit must be positive")
        self.data_limit = int(data_limit)
        self.data_cache_limit = config.DATA_CACHE_LIMIT if data_cache_limit is None else int(data_cache_limit)
        self._persist_fn = persist_fn

    @classmethod
    def for_names(cls, names: Iterable[str], **kwargs) -> "ContentCache":
        return cls([ContentType(name) for name in names], **kwargs)

    def types(self) -> List[ContentType]:
        return list(self._types.values())

    def names(self) -> List[str]:
        return list(self._types)

    def get(self, name: str) -> ContentType:
        try:
            return self._types[name]
        except KeyError:
            raise KeyError(f"unknown content type: {name}") from None

    def _limit(self, limit: Optional[int]) -> int:
        return self.data_limit if limit is None else int(limit)

    def add_data(self, name: str, items: Iterable[str], limit: Optional[int] = None) -> int:
        return self.get(name).add_data(items, self._limit(limit))

    def reached_limit(self, name: str, limit: Optional[int] = None) -> bool:
        return self.get(name).reached_limit(self._limit(limit))

    def not_all_collected(self, limit: Optional[int] = None) -> bool:
        """True while at least one content type is still below the limit."""
        lim = self._limit(limit)
        return any(not ct.reached_limit(lim) for ct in self._types.values())

    def collected_counts(self) -> Dict[str, int]:
        return {name: ct.collected for name, ct in self._types.items()}

    def flush_if_over_threshold(self) -> List[str]:
        """Persist and clear every buffer that reached `data_cache_limit`."""
        flushed = []
        for ct in self._types.values():
            if ct.buffer_size >= self.data_cache_limit and self._flush(ct):
                flushed.append(ct.name)
        return flushed

    def flush_all(self) -> List[str]:
        """Persist every non-empty buffer. Failures for one type do not stop the others."""
        flushed = []
        for ct in self._types.values():
            if ct.buffer_size and self._flush(ct):
                flushed.append(ct.name)
        return flushed

    def _flush(self, ct: ContentType) -> bool:
        items = ct.drain()
        if not items:
            return False
        try:
            self._persist_fn(ct.name, items)
        except Exception as e:
            logger.error("Failed to persist %d %s items: %s", len(items), ct.name, e, exc_info=True)
            ct.restore_items(items)
            return False
        logger.debug("Flushed %d %s items", len(items), ct.name)
        return True

    def snapshot(self) -> List[ContentTypeSnapshot]:
        return [
            ContentTypeSnapshot(name=ct.name, items=ct.items(), collected=ct.collected)
            for ct in self._types.values()
        ]

    @classmethod
    def restore(cls, snapshots: Iterable[ContentTypeSnapshot], **kwargs) -> "ContentCache":
        return cls(
            [ContentType(s.name, items=s.items, collected=s.collected) for s in snapshots],
            **kwargs,
        )
