"""Serializable crawl state.

A snapshot captures what is needed for a warm restart: the frontier, the
content buffers with their running counts, and the pool size. Live worker
threads and the pool's stop flag are never part of it.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional

from webscraper.exceptions import SnapshotError

SNAPSHOT_FORMAT_VERSION = 1


@dataclass
class FrontierSnapshot:
    visited: List[str] = field(default_factory=list)
    unvisited: List[str] = field(default_factory=list)


@dataclass
class ContentTypeSnapshot:
    name: str
    items: List[str] = field(default_factory=list)
    collected: int = 0


@dataclass
class ScraperSnapshot:
    seed_url: str
    data_limit: int
    pool_size: int
    frontier: FrontierSnapshot
    content_types: List[ContentTypeSnapshot] = field(default_factory=list)
    language: Optional[str] = None
    format_version: int = SNAPSHOT_FORMAT_VERSION

    def content_type_names(self) -> List[str]:
        return [ct.name for ct in self.content_types]

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ScraperSnapshot":
        if not isinstance(data, dict):
            raise SnapshotError("snapshot payload must be a mapping")
        version = data.get("format_version", SNAPSHOT_FORMAT_VERSION)
        if version != SNAPSHOT_FORMAT_VERSION:
            raise SnapshotError(f"unsupported snapshot format version: {version}")
        try:
            frontier = data["frontier"]
            return cls(
                seed_url=data["seed_url"],
                data_limit=int(data["data_limit"]),
                pool_size=int(data["pool_size"]),
                frontier=FrontierSnapshot(
                    visited=list(frontier.get("visited", [])),
                    unvisited=list(frontier.get("unvisited", [])),
                ),
                content_types=[
                    ContentTypeSnapshot(
                        name=ct["name"],
                        items=list(ct.get("items", [])),
                        collected=int(ct.get("collected", 0)),
                    )
                    for ct in data.get("content_types", [])
                ],
                language=data.get("language"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotError(f"malformed snapshot: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> "ScraperSnapshot":
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"snapshot is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def save(self, path) -> None:
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path) -> "ScraperSnapshot":
        return cls.from_json(Path(path).read_text(encoding="utf-8"))
