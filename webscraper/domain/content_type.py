import threading
from typing import Dict, Iterable, List


class ContentType:
    """
    A named category of extracted content with its own accumulation buffer.

    `collected` is the running number of items ever accepted for this type.
    Flushing drains the buffer but never touches the count, so the per-type
    limit keeps holding across flushes. Each instance serializes its own
    mutations.
    """

    def __init__(self, name: str, items: Iterable[str] = (), collected: int = 0):
        if not name:
            raise ValueError("content type name is required")
        self.name = name
        self._lock = threading.Lock()
        # dict keeps insertion order and gives O(1) membership
        self._buffer: Dict[str, None] = dict.fromkeys(items)
        self._collected = max(int(collected), len(self._buffer))

    @property
    def collected(self) -> int:
        return self._collected

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    def reached_limit(self, limit: int) -> bool:
        return self._collected >= limit

    def add_data(self, items: Iterable[str], limit: int) -> int:
        """Buffer new items until `limit` is reached. Returns how many were accepted."""
        accepted = 0
        with self._lock:
            for item in items:
                if self._collected >= limit:
                    break
                if item in self._buffer:
                    continue
                self._buffer[item] = None
                self._collected += 1
                accepted += 1
        return accepted

    def items(self) -> List[str]:
        with self._lock:
            return list(self._buffer)

    def drain(self) -> List[str]:
        """Take every buffered item and clear the buffer."""
        with self._lock:
            items = list(self._buffer)
            self._buffer.clear()
            return items

    def restore_items(self, items: Iterable[str]) -> None:
        """Put drained items back, e.g. after a failed persist. The count is unchanged."""
        with self._lock:
            restored = dict.fromkeys(items)
            restored.update(self._buffer)
            self._buffer = restored

    def __repr__(self):
        return f"<ContentType {self.name} collected={self._collected} buffered={len(self._buffer)}>"
