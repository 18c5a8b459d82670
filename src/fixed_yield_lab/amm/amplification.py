"""Time-ramped amplification coefficient."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DAY
from ..core.errors import AmmError, AmmErrorCode
from ..core.fixed_point import int_div_up
from .stable_math import AMP_PRECISION

MIN_AMP = 1
MAX_AMP = 5000
MIN_UPDATE_TIME = DAY
MAX_AMP_UPDATE_DAILY_RATE = 2


@dataclass(frozen=True)
class AmplificationSchedule:
    """Linear ramp of the precision-scaled amplification between two times."""

    start_value: int
    end_value: int
    start_time: int = 0
    end_time: int = 0

    @classmethod
    def constant(cls, amp: int) -> "AmplificationSchedule":
        if amp < MIN_AMP:
            raise AmmError(AmmErrorCode.MIN_AMP)
        if amp > MAX_AMP:
            raise AmmError(AmmErrorCode.MAX_AMP)
        value = amp * AMP_PRECISION
        return cls(value, value)

    def value_at(self, now: int) -> tuple[int, bool]:
        """Return ``(value, is_updating)`` at ``now``."""

        if now >= self.end_time:
            return self.end_value, False
        if now <= self.start_time:
            return self.start_value, True
        elapsed = now - self.start_time
        span = self.end_time - self.start_time
        if self.end_value > self.start_value:
            return self.start_value + (self.end_value - self.start_value) * elapsed // span, True
        return self.start_value - (self.start_value - self.end_value) * elapsed // span, True

    def start_update(self, now: int, raw_end_value: int, duration: int) -> "AmplificationSchedule":
        """Ramp from the current value to ``raw_end_value`` over ``duration`` seconds."""

        if raw_end_value < MIN_AMP:
            raise AmmError(AmmErrorCode.MIN_AMP)
        if raw_end_value > MAX_AMP:
            raise AmmError(AmmErrorCode.MAX_AMP)
        if duration < MIN_UPDATE_TIME:
            raise AmmError(AmmErrorCode.AMP_END_TIME_TOO_CLOSE)
        current, updating = self.value_at(now)
        if updating:
            raise AmmError(AmmErrorCode.AMP_ONGOING_UPDATE)

        end_value = raw_end_value * AMP_PRECISION
        if end_value > current:
            daily_rate = int_div_up(DAY * end_value, current * duration)
        else:
            daily_rate = int_div_up(DAY * current, end_value * duration)
        if daily_rate > MAX_AMP_UPDATE_DAILY_RATE:
            raise AmmError(AmmErrorCode.AMP_RATE_TOO_HIGH)
        return AmplificationSchedule(current, end_value, now, now + duration)

    def stop_update(self, now: int) -> "AmplificationSchedule":
        current, updating = self.value_at(now)
        if not updating:
            raise AmmError(AmmErrorCode.AMP_NO_ONGOING_UPDATE)
        return AmplificationSchedule(current, current, now, now)


__all__ = [
    "MIN_AMP",
    "MAX_AMP",
    "MIN_UPDATE_TIME",
    "MAX_AMP_UPDATE_DAILY_RATE",
    "AmplificationSchedule",
]
