import pytest

from webscraper.domain.scraper_config import ScraperConfig


def test_defaults():
    cfg = ScraperConfig(seed_url="https://a.com/")
    assert cfg.threads == 4
    assert cfg.data_limit == 1000
    assert cfg.content_types == ["text"]
    assert cfg.options.names() == []
    assert cfg.label == "https://a.com/"


def test_label_prefers_name():
    assert ScraperConfig(seed_url="https://a.com/", name="docs").label == "docs"


@pytest.mark.parametrize("kwargs", [
    {"seed_url": ""},
    {"seed_url": "https://a.com/", "threads": 0},
    {"seed_url": "https://a.com/", "data_limit": 0},
    {"seed_url": "https://a.com/", "content_types": []},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        ScraperConfig(**kwargs)
