from .links import LinksRepository
from .content import ContentRepository

__all__ = ["LinksRepository", "ContentRepository"]
