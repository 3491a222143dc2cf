from typing import Optional

from fastapi import APIRouter

from webscraper import __version__

# Values never echoed back by /systems/config.
HIDDEN_KEYS = {"DATABASE_URL"}


def create_systems_router(container_env: dict, scraper_registry=None):
    """Health and read-only settings for operators."""
    router = APIRouter(prefix="/systems", tags=["System"])

    @router.get("/health")
    def health():
        body = {"status": "ok", "version": __version__}
        if scraper_registry is not None:
            body["active_scrapers"] = len(scraper_registry.list_active())
        return body

    @router.get("/config")
    def get_config(key: Optional[str] = None):
        visible = {
            name: None if value is None else str(value)
            for name, value in container_env.items()
            if name not in HIDDEN_KEYS
        }
        if key is not None:
            visible = {name: value for name, value in visible.items() if name == key}
        return {"environment": visible}

    return router
