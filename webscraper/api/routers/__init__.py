"""API router factory functions."""
from .scrapers import create_scrapers_router
from .systems import create_systems_router

__all__ = [
    "create_scrapers_router",
    "create_systems_router",
]
