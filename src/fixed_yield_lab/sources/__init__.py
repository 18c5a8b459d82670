"""Yield-source adapters and the protocol mocks behind them."""

from __future__ import annotations

from .aave import AaveLendingPool, AaveSource
from .base import AccrualConvention, BaseYieldSource, FailureInjection, YieldSource
from .compound import CompoundMarket, CompoundSource
from .csv import HistoricalRateFeed
from .lido import LidoStaking, LidoSource
from .rari import RariFundManager, RariSource
from .yearn import YearnSource, YearnVault

__all__ = [
    "AccrualConvention",
    "YieldSource",
    "BaseYieldSource",
    "FailureInjection",
    "AaveLendingPool",
    "AaveSource",
    "CompoundMarket",
    "CompoundSource",
    "LidoStaking",
    "LidoSource",
    "RariFundManager",
    "RariSource",
    "YearnVault",
    "YearnSource",
    "HistoricalRateFeed",
]
