"""Negative-yield tracking that forces a pool into early maturity."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_HALT_DURATION


@dataclass
class NegativeYieldMonitor:
    """Track how long the rate has stayed below its last healthy value.

    Tracking starts at the first observation where the rate falls below the
    previously observed rate; that previous rate becomes the reference.  Any
    later observation at or above the reference clears the tracking.  The pool
    must halt once the tracked period exceeds ``halt_duration``.

    The monitor lives inside the pool's transactional state, so an observation
    made by a call that reverts is rolled back with it, halt included.  Deposits
    always revert under negative yield and never start the window; keepers
    should call :meth:`YieldPool.update_interest_rate` (or rely on redemptions
    and share-price refreshes) to record drops.
    """

    halt_duration: int = DEFAULT_HALT_DURATION
    since: int | None = None
    reference_rate: int = 0

    @property
    def tracking(self) -> bool:
        return self.since is not None

    def observe(self, previous_rate: int, rate: int, now: int) -> bool:
        """Record one rate observation and return ``True`` when the pool must halt."""

        if self.since is None:
            if rate < previous_rate:
                self.since = now
                self.reference_rate = previous_rate
        elif rate >= self.reference_rate:
            self.since = None
            self.reference_rate = 0
        return self.since is not None and now - self.since > self.halt_duration

    def duration(self, now: int) -> int:
        return 0 if self.since is None else now - self.since


__all__ = ["NegativeYieldMonitor"]
