import pytest

from fixed_yield_lab.core import ONE, RAY, AdapterError, Chain, UnsupportedOperation, ValidationError, to_wei
from fixed_yield_lab.ledger import Token
from fixed_yield_lab.sources import (
    AaveLendingPool,
    AaveSource,
    AccrualConvention,
    CompoundMarket,
    CompoundSource,
    LidoSource,
    LidoStaking,
    RariFundManager,
    RariSource,
    YearnSource,
    YearnVault,
)


@pytest.fixture()
def dai(chain: Chain) -> Token:
    return Token(chain, "Dai Stablecoin", "DAI")


def test_aave_rate_is_reported_in_wad(chain: Chain, dai: Token) -> None:
    lending_pool = AaveLendingPool(chain, dai)
    source = AaveSource(chain, lending_pool)
    lending_pool.set_liquidity_index(2 * RAY)
    assert source.current_rate() == 2 * ONE
    lending_pool.set_rate(1.05)
    assert source.current_rate() == to_wei(1.05)
    assert source.convention is AccrualConvention.PEGGED
    assert source.yield_bearing_token.symbol == "aDAI"


def test_aave_deposit_rebases_and_withdraws(chain: Chain, dai: Token) -> None:
    lending_pool = AaveLendingPool(chain, dai)
    source = AaveSource(chain, lending_pool)
    dai.mint("holder", to_wei(100))

    minted = source.deposit("holder", to_wei(100))
    assert minted == to_wei(100)
    assert dai.balance_of("holder") == 0

    lending_pool.set_rate(1.5)
    assert source.yield_bearing_token.balance_of("holder") == to_wei(150)

    paid = source.redeem_to_backing("holder", to_wei(150), "bob")
    assert paid == to_wei(150)
    assert dai.balance_of("bob") == to_wei(150)
    assert source.yield_bearing_token.balance_of("holder") == 0


def test_pegged_conversions_are_identity(chain: Chain, dai: Token) -> None:
    source = AaveSource(chain, AaveLendingPool(chain, dai))
    assert source.num_assets_per_yield_token(to_wei(7), 2 * ONE) == to_wei(7)
    assert source.num_yield_tokens_per_asset(to_wei(7), 2 * ONE) == to_wei(7)


def test_compound_conversions_use_the_rate(chain: Chain, dai: Token) -> None:
    market = CompoundMarket(chain, dai)
    source = CompoundSource(chain, market)
    market.set_rate(2)
    assert source.current_rate() == 2 * ONE
    assert source.num_assets_per_yield_token(ONE, 2 * ONE) == 2 * ONE
    assert source.num_yield_tokens_per_asset(2 * ONE, 2 * ONE) == ONE

    dai.mint("holder", to_wei(100))
    assert source.deposit("holder", to_wei(100)) == to_wei(50)
    assert market.c_token.balance_of("holder") == to_wei(50)

    market.set_rate(3)
    assert source.redeem_to_backing("holder", to_wei(50), "bob") == to_wei(150)
    assert dai.balance_of("bob") == to_wei(150)


def test_yearn_vault_round_trip(chain: Chain, dai: Token) -> None:
    vault = YearnVault(chain, dai)
    source = YearnSource(chain, vault)
    vault.set_rate(1.25)
    dai.mint("holder", to_wei(125))

    assert source.deposit("holder", to_wei(125)) == to_wei(100)
    assert source.redeem_to_backing("holder", to_wei(100), "holder") == to_wei(125)
    assert dai.balance_of("holder") == to_wei(125)


def test_lido_accepts_ether_but_not_withdrawals(chain: Chain) -> None:
    ether = Token(chain, "Ether", "ETH")
    staking = LidoStaking(chain, ether)
    source = LidoSource(chain, staking)
    ether.mint("holder", to_wei(10))

    assert source.accepts_ether
    assert source.deposit("holder", to_wei(10), to_wei(10)) == to_wei(10)
    assert ether.balance_of("holder") == 0

    staking.set_rate(1.1)
    assert source.current_rate() == to_wei(1.1)
    assert source.yield_bearing_token.balance_of("holder") == to_wei(11)

    with pytest.raises(UnsupportedOperation, match="LidoTempusPool.withdrawFromUnderlyingProtocol not supported"):
        source.redeem_to_backing("holder", to_wei(1), "holder")


def test_failure_injection_fires_once(chain: Chain, dai: Token) -> None:
    market = CompoundMarket(chain, dai)
    source = CompoundSource(chain, market)
    dai.mint("holder", to_wei(10))

    market.fail_next_operation()
    with pytest.raises(AdapterError, match="random failure"):
        source.deposit("holder", to_wei(10))
    assert source.deposit("holder", to_wei(10)) == to_wei(10)


def test_rari_fund_token_over_six_decimal_backing(chain: Chain) -> None:
    usdc = Token(chain, "USD Coin", "USDC", decimals=6)
    fund_manager = RariFundManager(chain, usdc)
    source = RariSource(chain, fund_manager)
    usdc.mint("holder", to_wei(100, 6))

    assert source.convention is AccrualConvention.APPRECIATING
    assert source.decimals_scale == 10**12
    assert source.deposit("holder", to_wei(100, 6)) == to_wei(100)

    fund_manager.set_rate(1.5)
    assert source.current_rate() == to_wei(1.5)
    assert source.num_assets_per_yield_token(to_wei(100), to_wei(1.5)) == to_wei(150, 6)
    assert source.num_yield_tokens_per_asset(to_wei(3, 6), to_wei(1.5)) == to_wei(2)

    assert source.redeem_to_backing("holder", to_wei(100), "bob") == to_wei(150, 6)
    assert usdc.balance_of("bob") == to_wei(150, 6)
    assert fund_manager.fund_token.balance_of("holder") == 0


def test_backing_with_more_decimals_than_the_yield_token_is_rejected(chain: Chain) -> None:
    market = CompoundMarket(chain, Token(chain, "Wide Token", "WIDE", decimals=27))
    with pytest.raises(ValidationError, match="fewer decimals"):
        CompoundSource(chain, market)
