import threading
from typing import Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from webscraper import config
from webscraper.db.models import Base

# One Engine per database URL; scrapers and the API share its pool.
_ENGINES: Dict[str, Engine] = {}
_ENGINES_LOCK = threading.Lock()


def make_engine(database_url: Optional[str] = None) -> Engine:
    """Return the process-wide Engine for `database_url` (default `DATABASE_URL`)."""
    database_url = database_url or config.DATABASE_URL
    if not database_url:
        raise RuntimeError("DATABASE_URL not set")
    with _ENGINES_LOCK:
        engine = _ENGINES.get(database_url)
        if engine is None:
            kwargs = {"future": True}
            if database_url.startswith("sqlite"):
                # Worker threads flush content through the same engine.
                kwargs["connect_args"] = {"check_same_thread": False}
            engine = create_engine(database_url, **kwargs)
            _ENGINES[database_url] = engine
        return engine


def init_db(engine: Engine) -> Engine:
    """Create the links and content tables if they do not exist yet."""
    Base.metadata.create_all(engine)
    return engine
