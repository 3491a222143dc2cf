from typing import Iterable, Iterator, List, Set


class VisitedTracker:
    """
    Tracks which links have been handed out for fetching.

    Unlike an LRU cache this never forgets a link: once a link is marked it
    stays visited for the lifetime of the frontier, which is what keeps a
    link from being enqueued a second time. Not thread-safe on its own; the
    owning frontier serializes access.
    """

    def __init__(self, links: Iterable[str] = ()):
        self._visited: Set[str] = set(links)

    def mark(self, url: str) -> bool:
        """Mark a link as visited. Returns False if it was already visited."""
        if url in self._visited:
            return False
        self._visited.add(url)
        return True

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    def to_list(self) -> List[str]:
        return sorted(self._visited)

    def __len__(self) -> int:
        return len(self._visited)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._visited))
