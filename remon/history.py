"""Bounded rolling history of CPU samples for the dashboard chart."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator

MAX_HISTORY = 100


class History:
    """FIFO buffer that keeps at most *capacity* samples, oldest first.

    Appending at capacity evicts the oldest sample.
    """

    def __init__(self, samples: Iterable[float] = (), capacity: int = MAX_HISTORY) -> None:
        if capacity < 1:
            raise ValueError(f"history capacity must be positive, got {capacity}")
        self._samples: deque[float] = deque((float(s) for s in samples), maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen or MAX_HISTORY

    def push(self, sample: float) -> None:
        self._samples.append(float(sample))

    def values(self) -> list[float]:
        """Return a copy of the samples, oldest first."""
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[float]:
        return iter(self._samples)

    def __repr__(self) -> str:
        return f"History({list(self._samples)!r}, capacity={self.capacity})"
