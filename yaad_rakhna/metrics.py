from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager


class Counter:
    def __init__(self) -> None:
        self.value = 0

    def inc(self, n: int = 1) -> None:
        self.value += n

    def reset(self) -> None:
        self.value = 0


class LatencySummary:
    """Count, total and worst of independent latency observations."""

    def __init__(self) -> None:
        self.reset()

    def observe(self, ms: float) -> None:
        self.count += 1
        self.total_ms += ms
        self.max_ms = max(self.max_ms, ms)

    @property
    def mean_ms(self) -> float | None:
        return self.total_ms / self.count if self.count else None

    def reset(self) -> None:
        self.count = 0
        self.total_ms = 0.0
        self.max_ms = 0.0


class Stopwatch:
    def __init__(self) -> None:
        self._start = time.perf_counter()
        self.elapsed_ms: float | None = None

    def stop(self) -> float:
        if self.elapsed_ms is None:
            self.elapsed_ms = (time.perf_counter() - self._start) * 1000
        return self.elapsed_ms


@contextmanager
def timed(summary: LatencySummary | None = None) -> Iterator[Stopwatch]:
    """Time the block with its own stopwatch, so overlapping calls never share state."""

    watch = Stopwatch()
    try:
        yield watch
    finally:
        elapsed = watch.stop()
        if summary is not None:
            summary.observe(elapsed)


turns_total = Counter()
turn_errors_total = Counter()
unhandled_events_total = Counter()
ephemeral_hits_total = Counter()
durable_hits_total = Counter()
lookup_misses_total = Counter()
durable_failures_total = Counter()
turn_latency_ms = LatencySummary()
durable_latency_ms = LatencySummary()
