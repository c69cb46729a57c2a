"""
Unit tests for lazily built state and the evaluation cache.
"""

from concurrent.futures import ThreadPoolExecutor
import threading
import time

import pytest

from marketcurves.curves.cache import EvaluationCache, LazyCell


class TestLazyCell:
    """Tests for LazyCell."""

    def test_builds_once(self):
        calls = []
        cell = LazyCell(lambda: calls.append(1) or "kernel")
        assert not cell.is_built
        assert cell.get() == "kernel"
        assert cell.get() == "kernel"
        assert len(calls) == 1
        assert cell.is_built

    def test_concurrent_first_access(self):
        """Test concurrent first readers share a single build."""
        calls = []
        lock = threading.Lock()

        def factory():
            with lock:
                calls.append(1)
            time.sleep(0.05)
            return object()

        cell = LazyCell(factory)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: cell.get(), range(16)))

        assert len(calls) == 1
        assert all(r is results[0] for r in results)


class TestEvaluationCache:
    """Tests for EvaluationCache."""

    @pytest.fixture
    def cache(self):
        return EvaluationCache(max_size=4)

    def test_memoizes(self, cache):
        calls = []

        def compute(t):
            calls.append(t)
            return 2.0 * t

        assert cache.get_or_compute(1.5, compute) == 3.0
        assert cache.get_or_compute(1.5, compute) == 3.0
        assert calls == [1.5]

    def test_nan_not_cached(self, cache):
        cache.get_or_compute(float("nan"), lambda t: t)
        assert len(cache) == 0

    def test_bounded(self, cache):
        """Test the cache never grows beyond its maximum size."""
        for i in range(10):
            cache.get_or_compute(float(i), lambda t: t)
        assert len(cache) <= 4
