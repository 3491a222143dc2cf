import threading
from unittest.mock import Mock

import pytest

from webscraper.domain.content_cache import ContentCache
from webscraper.domain.content_type import ContentType
from webscraper.domain.snapshot import ContentTypeSnapshot


def test_add_data_stops_at_limit_and_skips_duplicates():
    ct = ContentType("text")
    accepted = ct.add_data(["a", "b", "a", "c", "d"], limit=3)
    assert accepted == 3
    assert ct.items() == ["a", "b", "c"]
    assert ct.collected == 3
    assert ct.reached_limit(3)


def test_collected_survives_drain():
    ct = ContentType("text")
    ct.add_data(["a", "b"], limit=10)
    assert ct.drain() == ["a", "b"]
    assert ct.buffer_size == 0
    assert ct.collected == 2
    ct.add_data(["c"], limit=3)
    assert ct.collected == 3
    assert ct.add_data(["d"], limit=3) == 0


def test_restore_items_keeps_count_and_order():
    ct = ContentType("text")
    ct.add_data(["a", "b"], limit=10)
    drained = ct.drain()
    ct.add_data(["c"], limit=10)
    ct.restore_items(drained)
    assert ct.items() == ["a", "b", "c"]
    assert ct.collected == 3


def test_content_type_requires_name():
    with pytest.raises(ValueError):
        ContentType("")


def test_concurrent_adds_never_exceed_limit():
    ct = ContentType("text")
    limit = 500

    def worker(offset):
        for i in range(200):
            ct.add_data([f"{offset}-{i}"], limit)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert ct.collected == limit
    assert ct.buffer_size == limit


def _cache(persist_fn=None, data_cache_limit=3, data_limit=5, names=("text", "images")):
    return ContentCache.for_names(
        names,
        data_limit=data_limit,
        data_cache_limit=data_cache_limit,
        persist_fn=persist_fn or Mock(),
    )


def test_cache_rejects_bad_configuration():
    with pytest.raises(ValueError):
        ContentCache.for_names([], data_limit=5, persist_fn=Mock())
    with pytest.raises(ValueError):
        ContentCache.for_names(["text", "text"], data_limit=5, persist_fn=Mock())
    with pytest.raises(ValueError):
        ContentCache.for_names(["text"], data_limit=0, persist_fn=Mock())


def test_unknown_type_lookup_raises_key_error():
    cache = _cache()
    with pytest.raises(KeyError):
        cache.get("videos")


def test_not_all_collected_until_every_type_reaches_limit():
    cache = _cache(data_cache_limit=100)
    cache.add_data("text", [str(i) for i in range(5)])
    assert cache.reached_limit("text")
    assert cache.not_all_collected()
    cache.add_data("images", [str(i) for i in range(7)])
    assert not cache.not_all_collected()
    assert cache.collected_counts() == {"text": 5, "images": 5}


def test_flush_if_over_threshold_only_flushes_full_buffers():
    persist = Mock()
    cache = _cache(persist_fn=persist)
    cache.add_data("text", ["a", "b", "c"])
    cache.add_data("images", ["x"])

    flushed = cache.flush_if_over_threshold()

    assert flushed == ["text"]
    persist.assert_called_once_with("text", ["a", "b", "c"])
    assert cache.get("text").buffer_size == 0
    assert cache.get("text").collected == 3
    assert cache.get("images").buffer_size == 1


def test_flush_all_is_idempotent():
    persist = Mock()
    cache = _cache(persist_fn=persist)
    cache.add_data("text", ["a"])
    cache.add_data("images", ["x", "y"])

    assert cache.flush_all() == ["text", "images"]
    assert cache.flush_all() == []
    assert persist.call_count == 2


def test_failed_persist_keeps_items_buffered():
    persist = Mock(side_effect=RuntimeError("db down"))
    cache = _cache(persist_fn=persist)
    cache.add_data("text", ["a", "b"])

    assert cache.flush_all() == []
    assert cache.get("text").items() == ["a", "b"]
    assert cache.get("text").collected == 2


def test_snapshot_and_restore_round_trip():
    cache = _cache(data_cache_limit=100)
    cache.add_data("text", ["a", "b"])
    cache.get("text").drain()
    cache.add_data("text", ["c"])

    snaps = cache.snapshot()
    assert snaps[0] == ContentTypeSnapshot(name="text", items=["c"], collected=3)

    restored = ContentCache.restore(snaps, data_limit=5, persist_fn=Mock())
    assert restored.names() == ["text", "images"]
    assert restored.get("text").collected == 3
    assert restored.get("text").items() == ["c"]
