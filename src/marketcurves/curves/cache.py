"""
Lazily built and memoized derived state of a curve.

LazyCell builds a value at most once, under a lock, so concurrent first
readers wait for the single build instead of observing a partially
constructed object. EvaluationCache memoizes value(t) results. A curve's
points never change after construction, so neither is ever invalidated;
a curve with other points gets fresh instances.
"""

import logging
import threading
from typing import Callable, Dict, Generic, Optional, TypeVar

from ..config import EVALUATION_CACHE_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyCell(Generic[T]):
    """Compute-or-wait holder for a value built by ``factory``."""

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory
        self._value: Optional[T] = None
        self._lock = threading.Lock()

    def get(self) -> T:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                # Assigned only once fully built
                self._value = self._factory()
            return self._value

    @property
    def is_built(self) -> bool:
        return self._value is not None


class EvaluationCache:
    """
    Bounded memo of evaluated times.

    The cache is dropped wholesale once it reaches ``max_size`` entries. It
    never changes results, only avoids recomputing them.
    """

    def __init__(self, max_size: int = EVALUATION_CACHE_SIZE):
        self.max_size = max_size
        self._values: Dict[float, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._values)

    def get_or_compute(self, t: float, compute: Callable[[float], float]) -> float:
        with self._lock:
            cached = self._values.get(t)
        if cached is not None:
            return cached

        value = compute(t)
        if t == t:  # NaN never hits
            with self._lock:
                if len(self._values) >= self.max_size:
                    logger.debug("Dropping %d cached evaluations", len(self._values))
                    self._values.clear()
                self._values[t] = value
        return value


__all__ = ["LazyCell", "EvaluationCache"]
