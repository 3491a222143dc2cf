import os
from typing import Optional

import yaml

from webscraper import config as env
from webscraper.domain.options import OptionFlags
from webscraper.domain.scraper_config import ScraperConfig
from webscraper.exceptions import ConfigError


class ScraperConfigParser:
    """Parse a YAML dict into a ScraperConfig.

    Responsibility: schema/validation for YAML config files. Missing values
    fall back to the environment defaults in `webscraper.config`.

    Example::

        name: docs
        seed_url: https://example.com/
        threads: 8
        data_limit: 500
        content_types: [text, images]
        options: [save_links, save_content]
        language: en
    """

    def parse(self, *, config_path: str, data: Optional[dict]) -> ScraperConfig:
        if not isinstance(data, dict):
            raise ConfigError(config_path, "must be a YAML mapping")
        seed_url = data.get("seed_url")
        if not seed_url:
            raise ConfigError(config_path, "is missing seed_url")

        content_types = data.get("content_types", env.DEFAULT_CONTENT_TYPES)
        if isinstance(content_types, str):
            content_types = [content_types]
        options = data.get("options", env.OPTIONS) or []
        if isinstance(options, str):
            options = [options]

        try:
            return ScraperConfig(
                seed_url=str(seed_url),
                threads=int(data.get("threads", env.DEFAULT_THREADS)),
                data_limit=int(data.get("data_limit", env.DEFAULT_DATA_LIMIT)),
                content_types=[str(ct) for ct in content_types],
                options=OptionFlags.from_names(options),
                language=data.get("language", env.LANGUAGE),
                name=data.get("name") or os.path.splitext(os.path.basename(config_path))[0],
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(config_path, f"is invalid: {e}") from e

    def load_file(self, path: str) -> ScraperConfig:
        if not os.path.isfile(path):
            raise ConfigError(path, "not found")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(path, f"is not valid YAML: {e}") from e
        return self.parse(config_path=path, data=data)
