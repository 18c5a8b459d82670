"""
fixed_yield_lab: principal/yield tokenization with a StableSwap AMM.

Building blocks:
- Integer fixed-point math and a host :class:`Chain` with all-or-nothing calls
- Yield-source adapters over in-memory Aave, Compound, Lido and Yearn mocks
- :class:`YieldPool` minting Principal and Yield claims against a yield-bearing token
- :class:`FixedYieldAMM` trading the two claims on a ramped StableSwap curve
- Statistics, rate-path simulation and matplotlib charts on top
"""

from __future__ import annotations

import logging

from .amm import ExitKind, FixedYieldAMM, JoinKind
from .analytics import (
    build_scenario,
    pool_summary,
    simulate_share_prices,
    synthetic_rate_path,
)
from .config import load_config
from .core import (
    Chain,
    EventLog,
    FeesConfig,
    ProtocolError,
    from_wei,
    to_wei,
)
from .ledger import PoolShare, RebasingToken, Token
from .pool import Controller, NegativeYieldMonitor, YieldPool
from .sources import (
    AaveLendingPool,
    AaveSource,
    AccrualConvention,
    CompoundMarket,
    CompoundSource,
    HistoricalRateFeed,
    LidoSource,
    LidoStaking,
    YearnSource,
    YearnVault,
    YieldSource,
)
from .visualization import Visualizer

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Chain",
    "EventLog",
    "FeesConfig",
    "ProtocolError",
    "to_wei",
    "from_wei",
    "Token",
    "RebasingToken",
    "PoolShare",
    "YieldPool",
    "Controller",
    "NegativeYieldMonitor",
    "FixedYieldAMM",
    "JoinKind",
    "ExitKind",
    "AccrualConvention",
    "YieldSource",
    "AaveLendingPool",
    "AaveSource",
    "CompoundMarket",
    "CompoundSource",
    "LidoStaking",
    "LidoSource",
    "YearnVault",
    "YearnSource",
    "HistoricalRateFeed",
    "build_scenario",
    "simulate_share_prices",
    "synthetic_rate_path",
    "pool_summary",
    "load_config",
    "Visualizer",
]
