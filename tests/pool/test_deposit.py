import pytest

from fixed_yield_lab.core import (
    ZERO_ADDRESS,
    AccessError,
    AdapterError,
    FeesConfig,
    LifecycleError,
    ValidationError,
    to_wei,
)
from fixed_yield_lab.core.models import Deposited

ALICE = "0xalice"
BOB = "0xbob"


def test_pegged_deposits_scale_by_rate(make_env) -> None:
    env = make_env("aave")
    env.give_ybt(ALICE, 100)
    env.deposit(ALICE, 100)
    assert env.principals(ALICE) == 100
    assert env.yields(ALICE) == 100

    env.set_rate(2.0)
    env.give_ybt(ALICE, 100)
    env.deposit(ALICE, 100)
    assert env.principals(ALICE) == 150
    assert env.yields(ALICE) == 150
    assert env.pool.locked_yield_bearing() == to_wei(300)


def test_appreciating_deposit_at_non_unit_initial_rate(make_env) -> None:
    env = make_env("compound", rate=1.2)
    env.give_ybt(ALICE, 100)
    result = env.deposit(ALICE, 100)
    assert result.minted_shares == to_wei(120)
    assert env.principals(ALICE) == 120
    assert env.pool.principal_share.total_supply == env.pool.yield_share.total_supply


def test_deposit_fee_is_retained_in_yield_bearing_tokens(make_env) -> None:
    env = make_env("aave", fees=FeesConfig(deposit_percent=to_wei(0.01)))
    env.give_ybt(ALICE, 100)
    result = env.deposit(ALICE, 100)
    assert result.fee == to_wei(1)
    assert env.principals(ALICE) == 99
    assert env.pool.total_fees == to_wei(1)
    assert env.pool.locked_yield_bearing() == to_wei(100)


def test_deposit_to_another_recipient(make_env) -> None:
    env = make_env("aave")
    env.give_ybt(ALICE, 10)
    env.deposit(ALICE, 10, recipient=BOB)
    assert env.principals(ALICE) == 0
    assert env.principals(BOB) == 10

    event = env.chain.events.of_type(Deposited)[-1]
    assert event.depositor == ALICE
    assert event.recipient == BOB
    assert event.shares_amount == to_wei(10)


def test_deposit_rejects_zero_amount_and_zero_recipient(make_env) -> None:
    env = make_env("aave")
    env.give_ybt(ALICE, 10)
    with pytest.raises(ValidationError, match="yieldTokenAmount is 0"):
        env.deposit(ALICE, 0)
    with pytest.raises(ValidationError, match="recipient can not be 0x0"):
        env.deposit(ALICE, 10, recipient=ZERO_ADDRESS)
    with pytest.raises(ValidationError, match="backingTokenAmount is 0"):
        env.deposit_backing(ALICE, 0)
    assert env.ybt_balance(ALICE) == 10


def test_only_the_controller_can_deposit(make_env) -> None:
    env = make_env("aave")
    with pytest.raises(AccessError, match="Only callable by TempusController"):
        env.pool.on_deposit_yield_bearing("0xintruder", to_wei(1), ALICE)


def test_deposit_rejected_under_negative_yield(make_env) -> None:
    env = make_env("compound")
    env.give_ybt(ALICE, 100)
    env.set_rate(0.9)
    with pytest.raises(LifecycleError, match="Negative yield!"):
        env.deposit(ALICE, 100)
    assert env.ybt_balance(ALICE) == 100
    assert env.principals(ALICE) == 0


def test_deposit_rejected_at_maturity_leaves_pool_open(make_env) -> None:
    env = make_env("aave")
    env.give_ybt(ALICE, 100)
    env.to_maturity()
    with pytest.raises(LifecycleError, match="Maturity reached."):
        env.deposit(ALICE, 100)
    assert not env.pool.matured
    assert env.ybt_balance(ALICE) == 100


def test_backing_deposit_mints_at_current_rate(make_env) -> None:
    env = make_env("compound")
    env.set_rate(2.0)
    env.give_backing(ALICE, 100)
    result = env.deposit_backing(ALICE, 100)
    assert result.minted_shares == to_wei(50)
    assert result.deposited_ybt == to_wei(50)
    assert env.pool.locked_yield_bearing() == to_wei(50)
    assert env.backing.balance_of(ALICE) == 0


def test_backing_deposit_fee(make_env) -> None:
    env = make_env("compound", fees=FeesConfig(deposit_percent=to_wei(0.01)))
    env.give_backing(ALICE, 100)
    result = env.deposit_backing(ALICE, 100)
    assert result.minted_shares == to_wei(99)
    assert env.pool.total_fees == to_wei(1)
    assert env.pool.locked_yield_bearing() == to_wei(100)


def test_ether_pool_requires_matching_value(make_env) -> None:
    env = make_env("lido")
    env.give_backing(ALICE, 100)
    with pytest.raises(ValidationError, match="Pool requires ETH deposits"):
        env.deposit_backing(ALICE, 100)
    with pytest.raises(ValidationError, match="ETH value does not match provided amount"):
        env.deposit_backing(ALICE, 100, eth_value=50)
    assert env.backing.balance_of(ALICE) == to_wei(100)

    env.deposit_backing(ALICE, 100, eth_value=100)
    assert env.principals(ALICE) == 100
    assert env.pool.locked_yield_bearing() == to_wei(100)


def test_token_pool_rejects_ether(make_env) -> None:
    env = make_env("aave")
    env.give_backing(ALICE, 100)
    with pytest.raises(ValidationError, match="given TempusPool's Backing Token is not ETH"):
        env.deposit_backing(ALICE, 100, eth_value=100)
    assert env.backing.balance_of(ALICE) == to_wei(100)


def test_adapter_failure_reverts_the_whole_deposit(make_env) -> None:
    env = make_env("compound")
    env.give_backing(ALICE, 100)
    env.protocol.fail_next_operation()

    with pytest.raises(AdapterError, match="random failure"):
        env.deposit_backing(ALICE, 100)
    assert env.backing.balance_of(ALICE) == to_wei(100)
    assert env.principals(ALICE) == 0
    assert len(env.chain.events) == 0

    env.deposit_backing(ALICE, 100)
    assert env.principals(ALICE) == 100


def test_negative_deposits_are_rejected(make_env) -> None:
    env = make_env("aave")
    env.give_ybt(ALICE, 100)
    env.deposit(ALICE, 40)

    with pytest.raises(ValidationError):
        env.controller.deposit_yield_bearing(ALICE, env.pool, -to_wei(60))
    assert env.ybt_balance(ALICE) == 60
    assert env.pool.locked_yield_bearing() == to_wei(40)
    assert env.principals(ALICE) == 40

    with pytest.raises(ValidationError, match="yieldTokenAmount is 0"):
        env.pool.on_deposit_yield_bearing(env.controller.address, -to_wei(1), ALICE)
    with pytest.raises(ValidationError, match="backingTokenAmount is 0"):
        env.pool.on_deposit_backing(env.controller.address, -to_wei(1), ALICE)
    assert env.principals(ALICE) == 40


def test_negative_backing_deposit_leaves_balances_untouched(make_env) -> None:
    env = make_env("compound")
    env.give_backing(ALICE, 10)
    with pytest.raises(ValidationError):
        env.deposit_backing(ALICE, -10)
    assert env.backing_balance(ALICE) == 10
    assert env.principals(ALICE) == 0
