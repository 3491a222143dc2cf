import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from webscraper import config
from webscraper.container import Container
from webscraper.domain.options import Option, OptionFlags
from webscraper.domain.scraper_config import ScraperConfig
from webscraper.domain.snapshot import ScraperSnapshot
from webscraper.exceptions import ConfigError, SnapshotError

logger = logging.getLogger("webscraper")

FLAG_OPTIONS = {
    "debug": Option.DEBUG_MODE,
    "save_links": Option.SAVE_LINKS,
    "save_content": Option.SAVE_CONTENT,
    "unlimited": Option.UNLIMITED,
    "restrict_language": Option.RESTRICT_LANGUAGE,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="webscraper", description="Concurrent web scraper")
    sub = parser.add_subparsers(dest="command", required=True)

    crawl = sub.add_parser("crawl", help="run a crawl in the foreground")
    source = crawl.add_mutually_exclusive_group(required=True)
    source.add_argument("seed_url", nargs="?", help="page to start from")
    source.add_argument("--config", help="YAML scraper config file")
    source.add_argument("--resume", metavar="PATH", help="restart from a snapshot file")
    crawl.add_argument("--threads", type=int, default=None)
    crawl.add_argument("--limit", type=int, default=None, help="items to collect per content type")
    crawl.add_argument("--content-type", action="append", dest="content_types", default=None)
    crawl.add_argument("--language", default=None)
    crawl.add_argument("--snapshot", metavar="PATH", help="write a snapshot here when interrupted")
    crawl.add_argument("--debug", action="store_true")
    crawl.add_argument("--save-links", action="store_true")
    crawl.add_argument("--save-content", action="store_true")
    crawl.add_argument("--unlimited", action="store_true")
    crawl.add_argument("--restrict-language", action="store_true")

    serve = sub.add_parser("serve", help="run the control API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def configure_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )


def _options_from_args(args, base: OptionFlags) -> OptionFlags:
    options = base
    for attr, option in FLAG_OPTIONS.items():
        if getattr(args, attr, False):
            options = options.with_option(option)
    return options


def _config_from_args(args, container) -> ScraperConfig:
    if args.config:
        cfg = container.config_parser().load_file(args.config)
    else:
        cfg = ScraperConfig(
            seed_url=args.seed_url,
            threads=config.DEFAULT_THREADS,
            data_limit=config.DEFAULT_DATA_LIMIT,
            content_types=list(config.DEFAULT_CONTENT_TYPES),
            options=OptionFlags.from_names(config.OPTIONS),
            language=config.LANGUAGE,
        )
    return ScraperConfig(
        seed_url=cfg.seed_url,
        threads=cfg.threads if args.threads is None else args.threads,
        data_limit=cfg.data_limit if args.limit is None else args.limit,
        content_types=args.content_types or cfg.content_types,
        options=_options_from_args(args, cfg.options),
        language=args.language or cfg.language,
        name=cfg.name,
    )


def run_crawl(args, container) -> int:
    factory = container.scraper_factory()
    try:
        if args.resume:
            snapshot = ScraperSnapshot.load(args.resume)
            options = _options_from_args(args, OptionFlags.from_names(config.OPTIONS))
            scraper = factory.restore(snapshot, options=options)
        else:
            scraper = factory.create(_config_from_args(args, container)).start()
    except (ConfigError, SnapshotError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 2

    if not scraper.has_started():
        logger.error("Crawl did not start: %s", scraper)
        return 1

    try:
        while not scraper.join(timeout=1.0):
            pass
    except KeyboardInterrupt:
        if args.snapshot:
            logger.info("Interrupted; writing snapshot to %s", args.snapshot)
            scraper.snapshot().save(args.snapshot)
        else:
            logger.info("Interrupted; stopping workers")
            scraper.stop()
            scraper.join()
    logger.info("%s", scraper.get_collected_info())
    return 0


def main(argv: Optional[List[str]] = None, container: Optional[Container] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(getattr(args, "debug", False))
    container = container or Container()

    if args.command == "serve":
        from webscraper.api.server import create_app

        uvicorn.run(create_app(container), host=args.host, port=args.port)
        return 0
    return run_crawl(args, container)


if __name__ == '__main__':
    sys.exit(main())
