import os
import logging
from pathlib import Path
from typing import List, Optional

try:
    from dotenv import load_dotenv
except ImportError:
    logging.warning("python-dotenv not available; using environment variables only")
else:
    loaded = load_dotenv()
    if not loaded and Path(".env").exists():
        raise RuntimeError(".env file present but failed to load")


def get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw


def get_optional_str_env(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw


def get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logging.exception("Invalid %s: %r", name, raw)
        return default


def get_optional_int_env(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logging.exception("Invalid %s: %r", name, raw)
        return None


def get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logging.exception("Invalid %s: %r", name, raw)
        return default


def get_list_env(name: str, default: Optional[List[str]] = None) -> List[str]:
    """Comma separated list; blank entries are dropped."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [part.strip() for part in raw.split(",") if part.strip()]


DATABASE_URL = get_str_env("DATABASE_URL", "sqlite:///webscraper.db")
USER_AGENT = get_str_env("USER_AGENT", "webscraper/0.1")
HTTP_TIMEOUT = get_int_env("HTTP_TIMEOUT", 10)

# Crawl limits. The link cache bounds the unvisited queue; the data cache
# bounds each content buffer before it is flushed to storage.
LINK_CACHE_LIMIT = get_int_env("WEBSCRAPER_LINK_CACHE_LIMIT", 1_000_000)
DATA_CACHE_LIMIT = get_int_env("WEBSCRAPER_DATA_CACHE_LIMIT", 500_000)
RATE_LIMIT_BACKOFF_SECONDS = get_float_env("WEBSCRAPER_RATE_LIMIT_BACKOFF", 30.0)

DEFAULT_THREADS = get_int_env("WEBSCRAPER_THREADS", 4)
DEFAULT_DATA_LIMIT = get_int_env("WEBSCRAPER_DATA_LIMIT", 1000)
DEFAULT_CONTENT_TYPES = get_list_env("WEBSCRAPER_CONTENT_TYPES", ["text"])
LANGUAGE = get_optional_str_env("WEBSCRAPER_LANGUAGE")
OPTIONS = get_list_env("WEBSCRAPER_OPTIONS")
LOG_LEVEL = get_str_env("WEBSCRAPER_LOG_LEVEL", "INFO")
