"""Drive a pool and its AMM through a rate path and record share prices."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from ..amm.pool import FixedYieldAMM, JoinKind
from ..core.chain import Chain
from ..core.constants import DAY, MAX_UINT256, ONE
from ..core.errors import LifecycleError
from ..core.fixed_point import from_wei, to_wei
from ..core.models import FeesConfig
from ..ledger.tokens import Token
from ..pool.controller import Controller
from ..pool.engine import YieldPool
from ..sources import (
    AaveLendingPool,
    AaveSource,
    CompoundMarket,
    CompoundSource,
    HistoricalRateFeed,
    LidoSource,
    LidoStaking,
    RariFundManager,
    RariSource,
    YearnSource,
    YearnVault,
)
from ..sources.base import BaseYieldSource

logger = logging.getLogger(__name__)

DEFAULT_START = 1_700_000_000
PROTOCOLS = ("aave", "compound", "lido", "yearn", "rari")


@dataclass
class Scenario:
    """Wired-up pool, AMM and participants used by the simulations."""

    chain: Chain
    backing: Token
    protocol: Any
    source: BaseYieldSource
    controller: Controller
    pool: YieldPool
    amm: FixedYieldAMM
    owner: str
    user: str

    def set_rate(self, rate: float) -> None:
        self.protocol.set_rate(rate)


def make_source(chain: Chain, protocol: str) -> tuple[Token, Any, BaseYieldSource]:
    if protocol == "lido":
        ether = Token(chain, "Ether", "ETH")
        staking = LidoStaking(chain, ether)
        return ether, staking, LidoSource(chain, staking)
    if protocol == "rari":
        usdc = Token(chain, "USD Coin", "USDC", decimals=6)
        fund_manager = RariFundManager(chain, usdc)
        return usdc, fund_manager, RariSource(chain, fund_manager)
    backing = Token(chain, "Dai Stablecoin", "DAI")
    if protocol == "aave":
        lending_pool = AaveLendingPool(chain, backing)
        return backing, lending_pool, AaveSource(chain, lending_pool)
    if protocol == "compound":
        market = CompoundMarket(chain, backing)
        return backing, market, CompoundSource(chain, market)
    if protocol == "yearn":
        vault = YearnVault(chain, backing)
        return backing, vault, YearnSource(chain, vault)
    raise ValueError(f"unknown protocol {protocol!r}; expected one of {PROTOCOLS}")


def build_scenario(
    pool_cfg: Mapping[str, Any],
    amm_cfg: Mapping[str, Any],
    *,
    start: int = DEFAULT_START,
) -> Scenario:
    """Create a pool with one deposit and an initialized AMM.

    ``pool_cfg`` and ``amm_cfg`` use the keys of the ``[pool]`` and ``[amm]``
    sections returned by :func:`fixed_yield_lab.config.load_config`.
    """

    chain = Chain(timestamp=start)
    owner, user = "0xowner", "0xdemo"
    backing, protocol, source = make_source(chain, str(pool_cfg.get("protocol", "compound")))
    protocol.set_rate(pool_cfg.get("initial_rate", 1.0))

    controller = Controller(chain)
    pool = YieldPool(
        chain,
        source,
        controller=controller.address,
        owner=owner,
        maturity_time=start + int(float(pool_cfg.get("maturity_days", 90)) * DAY),
        estimated_final_yield=to_wei(pool_cfg.get("estimated_yield", 0.1)),
        fees_config=FeesConfig(
            to_wei(pool_cfg.get("deposit_fee", 0.0)),
            to_wei(pool_cfg.get("early_redeem_fee", 0.0)),
            to_wei(pool_cfg.get("mature_redeem_fee", 0.0)),
        ),
        halt_duration=int(float(pool_cfg.get("halt_days", 7)) * DAY),
    )
    controller.register(pool)

    deposit = to_wei(pool_cfg.get("deposit", 1000.0), backing.decimals)
    backing.mint(user, deposit)
    if source.accepts_ether:
        result = controller.deposit_backing(user, pool, deposit, eth_value=deposit)
    else:
        backing.approve(user, controller.address, MAX_UINT256)
        result = controller.deposit_backing(user, pool, deposit)

    amm = FixedYieldAMM(
        chain,
        pool,
        owner=owner,
        amplification=int(amm_cfg.get("amplification", 5)),
        swap_fee=to_wei(amm_cfg.get("swap_fee", 0.002)),
    )
    fraction = to_wei(amm_cfg.get("liquidity_fraction", 0.5))
    seeded = result.minted_shares * fraction // ONE
    if seeded:
        amm.provide_liquidity(user, JoinKind.INIT, (seeded, seeded))
    logger.info(
        "scenario %s: deposited %s, seeded AMM with %s shares each side",
        pool.name,
        from_wei(deposit, backing.decimals),
        from_wei(seeded, backing.decimals),
    )
    return Scenario(chain, backing, protocol, source, controller, pool, amm, owner, user)


def synthetic_rate_path(
    days: int,
    *,
    initial_rate: float = 1.0,
    annual_yield: float = 0.05,
    volatility: float = 0.0,
    seed: int | None = None,
    shock_day: int | None = None,
    shock: float = 0.0,
) -> np.ndarray:
    """Daily exchange rates compounding ``annual_yield`` with optional noise.

    A ``shock`` (e.g. ``-0.02``) scales every rate from ``shock_day`` onwards,
    which is how negative-yield episodes are simulated.
    """

    rng = np.random.default_rng(seed)
    daily = (1.0 + annual_yield) ** (1.0 / 365.0)
    noise = rng.normal(0.0, volatility, size=days) if volatility > 0 else np.zeros(days)
    path = initial_rate * np.cumprod(np.full(days, daily) * (1.0 + noise))
    if shock_day is not None and 0 <= shock_day < days:
        path[shock_day:] *= 1.0 + shock
    return np.clip(path, 0.0, None)


def rate_path_from_feed(feed: HistoricalRateFeed, start: int, days: int, step: int = DAY) -> np.ndarray:
    return np.array([feed.rate_at(start + (i + 1) * step) for i in range(days)])


def simulate_share_prices(scenario: Scenario, rates: Sequence[float], step: int = DAY) -> pd.DataFrame:
    """Advance the clock by ``step`` per rate and record pool and AMM state.

    Returns a frame indexed by UTC timestamp with columns ``rate``,
    ``principal_price``, ``yield_price``, ``amm_rate``, ``matured`` and
    ``halted``.
    """

    chain, pool, amm = scenario.chain, scenario.pool, scenario.amm
    rows: list[dict[str, Any]] = []
    for rate in rates:
        chain.advance(step)
        scenario.set_rate(float(rate))
        pool.update_interest_rate()
        try:
            amm_rate = float(from_wei(amm.get_rate()))
        except LifecycleError:
            amm_rate = float("nan")
        rows.append(
            {
                "timestamp": chain.now,
                "rate": float(from_wei(pool.current_interest_rate)),
                "principal_price": float(from_wei(pool.price_per_principal_share_stored())),
                "yield_price": float(from_wei(pool.price_per_yield_share_stored())),
                "amm_rate": amm_rate,
                "matured": pool.matured,
                "halted": pool.halted,
            }
        )
    df = pd.DataFrame(rows)
    if df.empty:
        return df
    df["timestamp"] = pd.to_datetime(df["timestamp"], unit="s", utc=True)
    return df.set_index("timestamp")


__all__ = [
    "Scenario",
    "PROTOCOLS",
    "make_source",
    "build_scenario",
    "synthetic_rate_path",
    "rate_path_from_feed",
    "simulate_share_prices",
]
