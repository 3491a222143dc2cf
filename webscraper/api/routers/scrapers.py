import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from webscraper.domain.options import OptionFlags
from webscraper.domain.scraper_config import ScraperConfig
from webscraper.domain.snapshot import ScraperSnapshot
from webscraper.exceptions import InvalidStateError, SnapshotError

logger = logging.getLogger(__name__)


class StartRequest(BaseModel):
    seed_url: str
    threads: int = 4
    data_limit: int = 1000
    content_types: List[str] = Field(default_factory=lambda: ["text"])
    options: List[str] = Field(default_factory=list)
    language: Optional[str] = None
    name: Optional[str] = None


class ResizeRequest(BaseModel):
    threads: int
    # Seconds to wait for retiring workers when shrinking; None waits for all of them.
    timeout: Optional[float] = 10.0


class RestoreRequest(BaseModel):
    snapshot: dict
    options: List[str] = Field(default_factory=list)


def scraper_to_dict(scraper) -> dict:
    return {
        "session_id": scraper.session_id,
        "seed_url": scraper.seed_url,
        "running": scraper.is_running(),
        "pool_size": scraper.pool.size(),
        "live_workers": scraper.pool.live_count(),
        "visited": scraper.frontier.visited_count,
        "unvisited": scraper.frontier.unvisited_count,
        "collected": scraper.content_cache.collected_counts(),
        "data_limit": scraper.data_limit,
        "options": scraper.options.names(),
        "info": scraper.get_collected_info(),
    }


def create_scrapers_router(scraper_factory, scraper_registry):
    router = APIRouter(prefix="/scrapers", tags=["Scrapers"])

    def _get_or_404(session_id: int):
        scraper = scraper_registry.get(session_id)
        if scraper is None:
            raise HTTPException(status_code=404, detail="scraper not found")
        return scraper

    @router.post("", status_code=201)
    def start(req: StartRequest):
        try:
            cfg = ScraperConfig(
                seed_url=req.seed_url,
                threads=req.threads,
                data_limit=req.data_limit,
                content_types=req.content_types,
                options=OptionFlags.from_names(req.options),
                language=req.language,
                name=req.name,
            )
            scraper = scraper_factory.create(cfg)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        scraper_registry.register(scraper.start())
        return scraper_to_dict(scraper)

    @router.get("")
    def list_scrapers(active: Optional[bool] = None):
        scrapers = scraper_registry.list_active() if active else scraper_registry.list()
        return {"scrapers": [scraper_to_dict(s) for s in scrapers]}

    @router.post("/restore", status_code=201)
    def restore(req: RestoreRequest):
        try:
            snapshot = ScraperSnapshot.from_dict(req.snapshot)
            options = OptionFlags.from_names(req.options)
            scraper = scraper_factory.restore(snapshot, options=options)
        except (SnapshotError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        scraper_registry.register(scraper)
        return scraper_to_dict(scraper)

    @router.get("/{session_id}")
    def get_scraper(session_id: int):
        return scraper_to_dict(_get_or_404(session_id))

    @router.post("/{session_id}/stop", status_code=202)
    def stop(session_id: int):
        scraper = _get_or_404(session_id)
        scraper.stop()
        return {"status": "stopping", "session_id": session_id}

    @router.post("/{session_id}/resize")
    def resize(session_id: int, req: ResizeRequest):
        scraper = _get_or_404(session_id)
        if not scraper.is_running():
            raise HTTPException(status_code=409, detail="scraper is not running")
        try:
            done = scraper.resize(req.threads, timeout=req.timeout)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except InvalidStateError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {
            "status": "resized" if done else "resizing",
            "session_id": session_id,
            "pool_size": scraper.pool.size(),
            "live_workers": scraper.pool.live_count(),
            "done": done,
        }

    @router.post("/{session_id}/snapshot")
    def snapshot(session_id: int):
        scraper = _get_or_404(session_id)
        return scraper.snapshot().to_dict()

    @router.delete("/{session_id}")
    def remove(session_id: int):
        scraper = _get_or_404(session_id)
        if scraper.is_running():
            raise HTTPException(status_code=409, detail="stop the scraper before removing it")
        scraper_registry.remove(session_id)
        return {"status": "removed", "session_id": session_id}

    return router
