import pytest

from fixed_yield_lab.core import AccessError, LifecycleError, ValidationError, to_wei

ALICE = "0xalice"
RESCUE = "0xrescue"


def test_recovery_is_owner_only(make_env) -> None:
    env = make_env("compound")
    env.set_rate(0)
    with pytest.raises(AccessError, match="Caller is not the owner"):
        env.pool.governance_recover_ybt(ALICE, RESCUE)


def test_recovery_requires_a_zero_rate(make_env) -> None:
    env = make_env("compound")
    env.give_ybt(ALICE, 100)
    env.deposit(ALICE, 100)
    env.set_rate(0.000001)
    with pytest.raises(LifecycleError, match="rate must be 0"):
        env.pool.governance_recover_ybt(env.owner, RESCUE)


def test_recovery_requires_locked_tokens(make_env) -> None:
    env = make_env("compound")
    env.set_rate(0)
    with pytest.raises(ValidationError, match="total locked YBT is 0"):
        env.pool.governance_recover_ybt(env.owner, RESCUE)


def test_recovery_sweeps_all_locked_tokens(make_env) -> None:
    env = make_env("compound")
    env.give_ybt(ALICE, 100)
    env.deposit(ALICE, 100)
    env.set_rate(0)

    recovered = env.pool.governance_recover_ybt(env.owner, RESCUE)
    assert recovered == to_wei(100)
    assert env.ybt.balance_of(RESCUE) == to_wei(100)
    assert env.pool.locked_yield_bearing() == 0
