"""Domain objects for webscraper - explicit re-exports to satisfy linters."""
from .options import Option as Option, OptionFlags as OptionFlags
from .content_type import ContentType as ContentType
from .content_cache import ContentCache as ContentCache
from .link_frontier import LinkFrontier as LinkFrontier
from .scraper_config import ScraperConfig as ScraperConfig
from .snapshot import ScraperSnapshot as ScraperSnapshot

__all__ = ["Option", "OptionFlags", "ContentType", "ContentCache", "LinkFrontier", "ScraperConfig", "ScraperSnapshot"]
