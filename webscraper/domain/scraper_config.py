from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from webscraper.domain.options import OptionFlags


@dataclass(frozen=True)
class ScraperConfig:
    """Everything needed to build one scraper session."""

    seed_url: str
    threads: int = 4
    data_limit: int = 1000
    content_types: List[str] = field(default_factory=lambda: ["text"])
    options: OptionFlags = field(default_factory=OptionFlags)
    language: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        if not self.seed_url or not str(self.seed_url).strip():
            raise ValueError("seed_url is required")
        if int(self.threads) <= 0:
            raise ValueError("threads must be positive")
        if int(self.data_limit) <= 0:
            raise ValueError("data_limit must be positive")
        if not self.content_types:
            raise ValueError("at least one content type is required")

    @property
    def label(self) -> str:
        return self.name or self.seed_url
