import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from webscraper import __version__
from webscraper.api.routers import create_scrapers_router, create_systems_router
from webscraper.container import ENV

logger = logging.getLogger(__name__)


def create_app(container) -> FastAPI:
    """Build the control API around the container's factory and registry."""
    registry = container.scraper_registry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("Stopping %d running scrapers", len(registry.list_active()))
        registry.stop_all()

    app = FastAPI(title="webscraper", version=__version__, lifespan=lifespan)
    app.include_router(create_scrapers_router(container.scraper_factory(), registry))
    app.include_router(create_systems_router(ENV, registry))
    return app
