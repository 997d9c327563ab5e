"""Lightweight wall-clock timers for pipeline stages.

Provides:
    - timer(): Context manager for one timing with optional sink
    - TimerAccumulator: Accumulates repeated timings (per stage kind)

Used to measure how long raw shape generation, stitching and aggregate
views take, so that expensive shapes can be flagged for caching.

No heavy dependencies; adds two perf_counter() calls per measurement.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(name: str, sink: Optional[Callable[[str, float], None]] = None):
    """Context manager for wall-clock timing.

    Parameters
    ----------
    name : str
        Timer name (for logging/display)
    sink : Optional[Callable[[str, float], None]]
        Optional callback(name, elapsed_seconds); logs at DEBUG when None

    Examples
    --------
    >>> with timer("raw"):
    ...     vertices = shape.get_vertices(state)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if sink is not None:
            sink(name, elapsed)
        else:
            logger.debug("%s: %.3f ms", name, elapsed * 1000.0)


class TimerAccumulator:
    """Accumulate timing measurements for averaging.

    Examples
    --------
    >>> raw_timer = TimerAccumulator("raw")
    >>> with raw_timer.measure():
    ...     vertices = shape.get_vertices(state)
    >>> raw_timer.mean()
    """

    def __init__(self, name: str):
        self.name = name
        self.total_time = 0.0
        self.count = 0

    @contextmanager
    def measure(self):
        """Context manager to measure and accumulate time."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.total_time += time.perf_counter() - start
            self.count += 1

    def mean(self) -> float:
        """Mean time per measurement in seconds, 0.0 if none."""
        return self.total_time / self.count if self.count > 0 else 0.0

    def reset(self) -> None:
        self.total_time = 0.0
        self.count = 0

    def __repr__(self) -> str:
        return f"TimerAccumulator({self.name}, mean={self.mean():.4f}s, count={self.count})"


class StageTimers:
    """One TimerAccumulator per stage kind, created on first use."""

    def __init__(self):
        self._timers: Dict[str, TimerAccumulator] = {}

    def __getitem__(self, kind: str) -> TimerAccumulator:
        if kind not in self._timers:
            self._timers[kind] = TimerAccumulator(kind)
        return self._timers[kind]

    def summary(self) -> Dict[str, Dict[str, float]]:
        """Per-kind count and mean milliseconds."""
        return {
            kind: {'count': t.count, 'mean_ms': t.mean() * 1000.0}
            for kind, t in sorted(self._timers.items())
        }
