import threading

import pytest

from webscraper.domain.link_frontier import LinkFrontier
from webscraper.domain.snapshot import FrontierSnapshot
from webscraper.exceptions import NoLinksFoundError


def test_seed_marks_start_link_visited_and_enqueues_discoveries():
    frontier = LinkFrontier(link_cache_limit=10)
    added = frontier.seed("https://a.com/", ["https://a.com/1", "https://a.com/2", "https://a.com/"])

    assert added == {"https://a.com/1", "https://a.com/2"}
    assert frontier.is_visited("https://a.com/")
    assert frontier.visited_count == 1
    assert frontier.unvisited_count == 2


def test_seed_without_links_raises():
    frontier = LinkFrontier(link_cache_limit=10)
    with pytest.raises(NoLinksFoundError) as exc:
        frontier.seed("https://a.com/", [])
    assert exc.value.url == "https://a.com/"
    assert frontier.visited_count == 0


def test_next_unvisited_moves_link_to_visited():
    frontier = LinkFrontier(link_cache_limit=10)
    frontier.seed("https://a.com/", ["https://a.com/1"])

    link = frontier.next_unvisited()

    assert link == "https://a.com/1"
    assert frontier.is_visited(link)
    assert not frontier.is_queued(link)
    assert frontier.next_unvisited() is None


def test_offer_skips_visited_and_queued_links():
    frontier = LinkFrontier(link_cache_limit=10)
    frontier.seed("https://a.com/", ["https://a.com/1", "https://a.com/2"])
    frontier.next_unvisited()

    added = frontier.offer_discovered(["https://a.com/1", "https://a.com/2", "https://a.com/3", "https://a.com/"])

    assert added == 1
    assert frontier.unvisited_links() == ["https://a.com/2", "https://a.com/3"]


def test_duplicate_discovery_by_two_pages_is_enqueued_once():
    frontier = LinkFrontier(link_cache_limit=10)
    frontier.seed("https://a.com/", ["https://a.com/x"])
    assert frontier.offer_discovered(["https://a.com/y"]) == 1
    assert frontier.offer_discovered(["https://a.com/y"]) == 0
    assert frontier.unvisited_count == 2


def test_queue_cap_drops_excess_discoveries():
    frontier = LinkFrontier(link_cache_limit=3)
    frontier.seed("https://a.com/", [f"https://a.com/{i}" for i in range(2)])

    added = frontier.offer_discovered([f"https://a.com/new{i}" for i in range(5)])

    assert added == 1
    assert frontier.unvisited_count == 3
    assert not frontier.has_capacity()
    # Dropped links are not remembered; they can be offered again later.
    assert not frontier.is_visited("https://a.com/new4")


def test_mark_visited_removes_queued_copy():
    frontier = LinkFrontier(link_cache_limit=10)
    frontier.seed("https://a.com/", ["https://a.com/1", "https://a.com/2"])
    frontier.mark_visited("https://a.com/1")
    assert frontier.unvisited_links() == ["https://a.com/2"]
    assert frontier.is_visited("https://a.com/1")


def test_invalid_cache_limit():
    with pytest.raises(ValueError):
        LinkFrontier(link_cache_limit=0)


def test_concurrent_dequeues_hand_out_each_link_once():
    links = [f"https://a.com/{i}" for i in range(2000)]
    frontier = LinkFrontier(link_cache_limit=5000)
    frontier.seed("https://a.com/", links)
    taken = []
    taken_lock = threading.Lock()

    def worker():
        while True:
            link = frontier.next_unvisited()
            if link is None:
                return
            with taken_lock:
                taken.append(link)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(taken) == len(links)
    assert set(taken) == set(links)
    assert frontier.visited_count == len(links) + 1


def test_snapshot_and_restore_preserve_order():
    frontier = LinkFrontier(link_cache_limit=10)
    frontier.seed("https://a.com/", ["https://a.com/1"])
    frontier.offer_discovered(["https://a.com/2", "https://a.com/3"])
    frontier.next_unvisited()

    restored = LinkFrontier.restore(frontier.snapshot(), link_cache_limit=10)

    assert restored.visited_links() == frontier.visited_links()
    assert restored.unvisited_links() == ["https://a.com/2", "https://a.com/3"]


def test_restore_drops_duplicates_and_overflow():
    snap = FrontierSnapshot(
        visited=["https://a.com/"],
        unvisited=["https://a.com/", "https://a.com/1", "https://a.com/1", "https://a.com/2", "https://a.com/3"],
    )
    restored = LinkFrontier.restore(snap, link_cache_limit=2)
    assert restored.unvisited_links() == ["https://a.com/1", "https://a.com/2"]


def test_same_link_offered_concurrently_is_queued_once():
    frontier = LinkFrontier(link_cache_limit=100)
    frontier.seed("https://a.com/", ["https://a.com/seed"])
    barrier = threading.Barrier(2)
    results = []

    def offer():
        barrier.wait()
        results.append(frontier.offer_discovered(["https://a.com/shared"]))

    threads = [threading.Thread(target=offer) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [0, 1]
    assert frontier.unvisited_links().count("https://a.com/shared") == 1


def test_visited_and_unvisited_stay_disjoint_under_concurrency():
    frontier = LinkFrontier(link_cache_limit=10_000)
    frontier.seed("https://a.com/", [f"https://a.com/{i}" for i in range(100)])

    def worker(offset):
        for i in range(300):
            frontier.offer_discovered([f"https://a.com/{(offset + i) % 500}"])
            frontier.next_unvisited()

    threads = [threading.Thread(target=worker, args=(n * 50,)) for n in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not set(frontier.visited_links()) & set(frontier.unvisited_links())
    assert len(frontier.unvisited_links()) == len(set(frontier.unvisited_links()))
