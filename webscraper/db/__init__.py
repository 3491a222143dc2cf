from .engine import make_engine, init_db
from .models import Base, SavedLink, ContentItem

__all__ = [
    "make_engine",
    "init_db",
    "Base",
    "SavedLink",
    "ContentItem",
]
