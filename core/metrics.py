"""Bounded rolling latency histograms with percentile summaries."""

from __future__ import annotations

from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
import math
import threading
import time
from typing import Deque, Iterator

DEFAULT_CAP = 128


@dataclass(frozen=True)
class MetricSummary:
    """Percentile summary for one named buffer.

    ``n == 0`` means no data was recorded, not a zero measurement.
    """

    p95: float
    avg: float
    n: int


@dataclass
class Timing:
    elapsed_ms: float = 0.0


class MetricsRegistry:
    """Named, capped FIFO sample buffers."""

    def __init__(self, default_cap: int = DEFAULT_CAP) -> None:
        self._default_cap = max(int(default_cap), 1)
        self._buffers: dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    @property
    def default_cap(self) -> int:
        return self._default_cap

    def observe(self, name: str, value: float, cap: int | None = None) -> None:
        """Append ``value`` to ``name``, evicting the oldest samples past ``cap``."""

        limit = self._default_cap if cap is None else max(int(cap), 1)
        with self._lock:
            buffer = self._buffers.setdefault(name, deque())
            buffer.append(float(value))
            while len(buffer) > limit:
                buffer.popleft()

    def summary(self, name: str) -> MetricSummary:
        with self._lock:
            samples = list(self._buffers.get(name, ()))
        if not samples:
            return MetricSummary(p95=0.0, avg=0.0, n=0)
        ordered = sorted(samples)
        index = max(0, math.floor(0.95 * (len(ordered) - 1)))
        return MetricSummary(
            p95=ordered[index],
            avg=sum(samples) / len(samples),
            n=len(samples),
        )

    def samples(self, name: str) -> list[float]:
        with self._lock:
            return list(self._buffers.get(name, ()))

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._buffers)

    def snapshot(self) -> dict[str, MetricSummary]:
        """Return summaries for every buffer that has been observed."""

        return {name: self.summary(name) for name in self.names()}

    def reset(self, name: str | None = None) -> None:
        with self._lock:
            if name is None:
                self._buffers.clear()
            else:
                self._buffers.pop(name, None)

    @contextmanager
    def timer(self, name: str, cap: int | None = None) -> Iterator[Timing]:
        """Record elapsed milliseconds for the block, only if it exits cleanly.

        The yielded ``Timing`` holds the recorded value once the block exits.
        """

        timing = Timing()
        start = time.perf_counter()
        yield timing
        timing.elapsed_ms = (time.perf_counter() - start) * 1000.0
        self.observe(name, timing.elapsed_ms, cap=cap)
