"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests
from sqlalchemy.orm import sessionmaker

from webscraper import config as env
from webscraper.db.engine import init_db, make_engine
from webscraper.repository.content import ContentRepository
from webscraper.repository.links import LinksRepository
from webscraper.services.crawl_persister import CrawlPersister
from webscraper.services.http_service import HttpService
from webscraper.services.scraper_config_parser import ScraperConfigParser
from webscraper.services.scraper_factory import WebScraperFactory
from webscraper.services.scraper_registry import ScraperRegistry


# Environment variables used by the container (read via `webscraper.config` helpers).
#
# DATABASE_URL (str, default: "sqlite:///webscraper.db")
#   Where saved links and flushed content go.
#
# USER_AGENT (str, default: "webscraper/0.1")
#   User-Agent header for outbound HTTP requests.
#
# HTTP_TIMEOUT (int seconds, default: 10)
#   Timeout for outbound HTTP requests.
#
# WEBSCRAPER_LINK_CACHE_LIMIT (int, default: 1000000)
#   Cap on the unvisited link queue; discoveries beyond it are dropped.
#
# WEBSCRAPER_DATA_CACHE_LIMIT (int, default: 500000)
#   Buffered items per content type before the buffer is flushed to the database.
#
# WEBSCRAPER_RATE_LIMIT_BACKOFF (float seconds, default: 30)
#   Sleep after an HTTP 429 before moving on to the next link.
ENV = {
    "DATABASE_URL": env.DATABASE_URL,
    "USER_AGENT": env.USER_AGENT,
    "HTTP_TIMEOUT": env.HTTP_TIMEOUT,
    "WEBSCRAPER_LINK_CACHE_LIMIT": env.LINK_CACHE_LIMIT,
    "WEBSCRAPER_DATA_CACHE_LIMIT": env.DATA_CACHE_LIMIT,
    "WEBSCRAPER_RATE_LIMIT_BACKOFF": env.RATE_LIMIT_BACKOFF_SECONDS,
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for webscraper."""

    # Configuration
    config = providers.Configuration(default=ENV)

    # Database engine - Singleton to reuse connection pool; tables created on first use
    db_engine = providers.Singleton(
        init_db,
        providers.Singleton(make_engine, database_url=config.DATABASE_URL),
    )
    session_factory = providers.Singleton(
        sessionmaker,
        bind=db_engine,
        future=True,
    )

    # Repositories
    links_repository = providers.Singleton(
        LinksRepository,
        session_factory=session_factory,
    )

    content_repository = providers.Singleton(
        ContentRepository,
        session_factory=session_factory,
    )

    # Services
    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        timeout=config.HTTP_TIMEOUT.as_(int),
    )

    crawl_persister = providers.Singleton(
        CrawlPersister,
        links_repo=links_repository,
        content_repo=content_repository,
    )

    scraper_factory = providers.Singleton(
        WebScraperFactory,
        transport=http_service,
        persister=crawl_persister,
        link_cache_limit=config.WEBSCRAPER_LINK_CACHE_LIMIT.as_(int),
        data_cache_limit=config.WEBSCRAPER_DATA_CACHE_LIMIT.as_(int),
        backoff_seconds=config.WEBSCRAPER_RATE_LIMIT_BACKOFF.as_(float),
    )

    scraper_registry = providers.Singleton(
        ScraperRegistry,
    )

    config_parser = providers.Singleton(
        ScraperConfigParser,
    )
