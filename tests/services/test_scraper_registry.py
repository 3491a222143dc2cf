from unittest.mock import Mock

from webscraper.services.scraper_registry import ScraperRegistry


def _scraper(session_id, running=True):
    return Mock(session_id=session_id, is_running=Mock(return_value=running))


def test_register_get_remove():
    registry = ScraperRegistry()
    scraper = _scraper(1)

    assert registry.register(scraper) is scraper
    assert registry.get(1) is scraper
    assert registry.get(2) is None
    assert registry.remove(1)
    assert not registry.remove(1)
    assert registry.list() == []


def test_list_active_filters_finished():
    registry = ScraperRegistry()
    running = registry.register(_scraper(1))
    registry.register(_scraper(2, running=False))

    assert len(registry.list()) == 2
    assert registry.list_active() == [running]


def test_bounded_finished_retention():
    registry = ScraperRegistry(max_finished_records=2)
    for sid in range(1, 4):
        registry.register(_scraper(sid, running=False))
    registry.register(_scraper(4))

    assert registry.get(1) is None
    assert registry.get(2) is not None
    assert registry.get(3) is not None
    assert registry.get(4) is not None


def test_stop_all_only_stops_running():
    registry = ScraperRegistry()
    running = registry.register(_scraper(1))
    finished = registry.register(_scraper(2, running=False))

    registry.stop_all()

    running.stop.assert_called_once()
    finished.stop.assert_not_called()
