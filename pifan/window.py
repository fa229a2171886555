"""Bounded FIFO history of temperature readings."""

from collections import deque

from pifan.errors import EmptyWindowError


class SampleWindow:
    """Keeps the last `capacity` readings, oldest first, and averages them."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Window capacity must be positive, got {capacity}")
        self._samples: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen  # type: ignore[return-value]

    @property
    def samples(self) -> tuple[float, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def push(self, reading: float) -> None:
        """Append a reading, dropping the oldest ones beyond capacity."""
        self._samples.append(reading)

    def average(self) -> float:
        """Arithmetic mean of the retained readings.

        Raises EmptyWindowError if nothing has been pushed yet.
        """
        if not self._samples:
            raise EmptyWindowError("Cannot average an empty sample window")
        return sum(self._samples) / len(self._samples)
