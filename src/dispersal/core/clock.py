"""Wall clock and deterministic clock used for audit timestamps."""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can stamp a status change.

    Both :class:`SystemClock` and :class:`SimClock` implement this.
    """

    def now(self) -> float:
        """Current time as epoch seconds."""
        ...


class SystemClock:
    """Real wall-clock time.  This is the default clock."""

    def now(self) -> float:
        return time.time()


class SimClock:
    """Deterministic clock for reproducible sessions and tests.

    Time only moves when :meth:`advance` or :meth:`set_time` is called.

    Args:
        start_epoch: Initial epoch time.  Defaults to ``1_000_000.0``.
    """

    def __init__(self, start_epoch: float = 1_000_000.0):
        self._start_epoch = start_epoch
        self._now = start_epoch

    def now(self) -> float:
        return self._now

    def advance(self, dt: float) -> None:
        """Move simulated time forward by *dt* seconds.

        Raises:
            ValueError: If *dt* is negative.
        """
        if dt < 0:
            raise ValueError(f"SimClock.advance() requires dt >= 0, got {dt}")
        self._now += dt

    def set_time(self, epoch_time: float) -> None:
        """Jump to an absolute epoch time.

        Raises:
            ValueError: If *epoch_time* is before *start_epoch*.
        """
        if epoch_time < self._start_epoch:
            raise ValueError(
                f"epoch_time {epoch_time} is before start_epoch {self._start_epoch}"
            )
        self._now = epoch_time

    @property
    def start_epoch(self) -> float:
        return self._start_epoch


def create_clock(config: dict | None = None) -> SystemClock | SimClock:
    """Create a clock from the ``dispersal.time`` config section."""
    if config is None:
        return SystemClock()
    if config.get("mode", "realtime") == "simulated":
        return SimClock(start_epoch=float(config.get("start_epoch", 1_000_000.0)))
    return SystemClock()
