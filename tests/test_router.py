"""Tests for request routers."""

import threading

import pytest

from api_search.core.exceptions import NoModelAvailableError
from api_search.core.models import Capability
from api_search.routers import FirstModelRouter, RoundRobinRouter


class TestFirstModelRouter:
    def test_picks_first(self):
        assert FirstModelRouter().route(Capability.GENERATE, None, ["a", "b"]) == "a"

    def test_empty_pool(self):
        with pytest.raises(NoModelAvailableError):
            FirstModelRouter().route(Capability.GENERATE, None, [])


class TestRoundRobinRouter:
    def test_rotates(self):
        router = RoundRobinRouter()
        picks = [router.route(Capability.GENERATE, None, ["a", "b", "c"]) for _ in range(5)]
        assert picks == ["a", "b", "c", "a", "b"]

    def test_counters_are_per_capability(self):
        router = RoundRobinRouter()
        router.route(Capability.GENERATE, None, ["a", "b"])

        assert router.route(Capability.CLASSIFY, None, ["a", "b"]) == "a"
        assert router.route(Capability.GENERATE, None, ["a", "b"]) == "b"

    def test_even_spread_across_threads(self):
        router = RoundRobinRouter()
        picks = []
        lock = threading.Lock()

        def worker():
            for _ in range(50):
                pick = router.route(Capability.EMBED, None, ["a", "b"])
                with lock:
                    picks.append(pick)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert picks.count("a") == picks.count("b") == 100

    def test_empty_pool(self):
        with pytest.raises(NoModelAvailableError):
            RoundRobinRouter().route(Capability.SCORE, None, [])
