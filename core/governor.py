"""Single-slot backpressure guard for inference requests."""

from __future__ import annotations

from contextlib import contextmanager
import threading
from typing import Iterator

from core.logging import logger


class ConcurrencyGovernor:
    """Bounded in-flight counter that rejects excess work instead of queueing it."""

    def __init__(self, limit: int = 1, *, name: str = "infer") -> None:
        if int(limit) < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self._limit = int(limit)
        self._name = name
        self._in_flight = 0
        self._rejected = 0
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def name(self) -> str:
        return self._name

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    @property
    def rejected(self) -> int:
        with self._lock:
            return self._rejected

    def try_acquire(self) -> bool:
        """Take a slot if one is free; never blocks."""

        with self._lock:
            if self._in_flight >= self._limit:
                self._rejected += 1
                logger.debug(
                    "[GOVERNOR] %s rejected (in_flight=%s limit=%s)",
                    self._name,
                    self._in_flight,
                    self._limit,
                )
                return False
            self._in_flight += 1
            return True

    def release(self) -> None:
        with self._lock:
            if self._in_flight <= 0:
                raise RuntimeError(f"{self._name} governor released without a held slot")
            self._in_flight -= 1

    @contextmanager
    def slot(self) -> Iterator[bool]:
        """Yield whether a slot was granted; a granted slot is always released."""

        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self._name!r}, "
            f"in_flight={self.in_flight}, limit={self._limit})"
        )
