"""Custom exceptions for webscraper."""
from enum import Enum
from typing import Optional


class FetchErrorKind(Enum):
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    RATE_LIMITED = "rate_limited"
    OTHER = "other"


class HttpFetchError(Exception):
    """Raised when fetching a page fails; `kind` drives the retry policy."""

    def __init__(self, url: str, kind: FetchErrorKind, message: str, original: Optional[Exception] = None):
        self.url = url
        self.kind = kind
        self.message = message
        self.original = original
        super().__init__(f"HTTP fetch failed for {url} ({kind.value}): {message}")

    @property
    def is_rate_limited(self) -> bool:
        return self.kind is FetchErrorKind.RATE_LIMITED


class NoLinksFoundError(Exception):
    """Raised when the seed page yields no links, so the frontier cannot start."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"page has no identifiable links --LINK TO PAGE -> {url}")


class InvalidStateError(Exception):
    """Raised when an object is used before it is configured (e.g. a pool without a task)."""


class SnapshotError(Exception):
    """Raised when a snapshot payload cannot be decoded."""


class ConfigError(Exception):
    """Raised when a scraper config file is missing required fields or is malformed."""

    def __init__(self, config_path: str, reason: str):
        self.config_path = config_path
        self.reason = reason
        super().__init__(f"Config '{config_path}' {reason}")
