"""Latest-sample tracking for one location source."""

from __future__ import annotations

import time
from collections.abc import Callable

from geostream._constants import RECENCY_WINDOW_S
from geostream.models.position import PositionSample, Provider


class SourceState:
    """Latest sample received from one provider, with its arrival time.

    Arrival times are clock readings taken when the sample reaches the
    stream, not the sensor's native timestamp.  ``last_arrival`` is set
    if and only if ``last_sample`` is.
    """

    __slots__ = ("provider", "last_sample", "last_arrival", "_clock", "_recency_window")

    def __init__(
        self,
        provider: Provider,
        *,
        clock: Callable[[], float] = time.monotonic,
        recency_window: float = RECENCY_WINDOW_S,
    ) -> None:
        self.provider = provider
        self.last_sample: PositionSample | None = None
        self.last_arrival: float | None = None
        self._clock = clock
        self._recency_window = recency_window

    def __repr__(self) -> str:
        return f"SourceState(provider={self.provider!s}, last_arrival={self.last_arrival!r})"

    def update(self, sample: PositionSample) -> None:
        """Record *sample* as the latest one, stamped with the current time."""
        self.last_sample = sample
        self.last_arrival = self._clock()

    def reset(self) -> None:
        self.last_sample = None
        self.last_arrival = None

    def is_valid(self) -> bool:
        return self.last_sample is not None

    def is_recent(self) -> bool:
        if self.last_arrival is None or not self.is_valid():
            return False
        return self._clock() - self.last_arrival < self._recency_window
