import pytest

from fixed_yield_lab.amm import AmplificationSchedule
from fixed_yield_lab.core import AmmError
from fixed_yield_lab.core.constants import DAY

T0 = 1_000


def test_constant_schedule() -> None:
    schedule = AmplificationSchedule.constant(5)
    assert schedule.value_at(T0) == (5000, False)
    with pytest.raises(AmmError, match="BAL#300"):
        AmplificationSchedule.constant(0)
    with pytest.raises(AmmError, match="BAL#301"):
        AmplificationSchedule.constant(5001)


def test_ramp_interpolates_linearly() -> None:
    schedule = AmplificationSchedule.constant(5).start_update(T0, 10, DAY)
    assert schedule.value_at(T0) == (5000, True)
    assert schedule.value_at(T0 + DAY // 2) == (7500, True)
    assert schedule.value_at(T0 + DAY) == (10000, False)


def test_downward_ramp() -> None:
    schedule = AmplificationSchedule.constant(10).start_update(T0, 5, DAY)
    assert schedule.value_at(T0 + DAY // 2) == (7500, True)
    assert schedule.value_at(T0 + 2 * DAY) == (5000, False)


@pytest.mark.parametrize(
    ("target", "duration", "code"),
    [
        (0, DAY, "BAL#300"),
        (5001, DAY, "BAL#301"),
        (10, DAY - 1, "BAL#317"),
        (11, DAY, "BAL#319"),
    ],
)
def test_ramp_bounds(target: int, duration: int, code: str) -> None:
    with pytest.raises(AmmError, match=code):
        AmplificationSchedule.constant(5).start_update(T0, target, duration)


def test_daily_rate_limit_scales_with_duration() -> None:
    schedule = AmplificationSchedule.constant(5).start_update(T0, 20, 2 * DAY)
    assert schedule.value_at(T0 + 2 * DAY) == (20000, False)


def test_only_one_ramp_at_a_time() -> None:
    schedule = AmplificationSchedule.constant(5).start_update(T0, 10, DAY)
    with pytest.raises(AmmError, match="BAL#318"):
        schedule.start_update(T0 + 10, 6, DAY)


def test_stop_freezes_the_current_value() -> None:
    schedule = AmplificationSchedule.constant(5).start_update(T0, 10, DAY)
    stopped = schedule.stop_update(T0 + DAY // 2)
    assert stopped.value_at(T0 + DAY) == (7500, False)
    with pytest.raises(AmmError, match="BAL#320"):
        stopped.stop_update(T0 + DAY)
