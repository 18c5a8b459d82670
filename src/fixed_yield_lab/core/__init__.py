"""Core primitives for :mod:`fixed_yield_lab`.

Fixed-point helpers, the host :class:`Chain`, error types and the immutable
value objects shared by the pool and AMM engines.
"""

from __future__ import annotations

from .chain import Chain, transactional
from .constants import MAX_UINT256, ONE, RAY, ZERO_ADDRESS
from .errors import (
    AccessError,
    AdapterError,
    AmmError,
    AmmErrorCode,
    ConvergenceError,
    LifecycleError,
    ProtocolError,
    UnsupportedOperation,
    ValidationError,
)
from .fixed_point import div_down, div_up, from_wei, mul_down, mul_up, to_wei
from .models import (
    DepositResult,
    Event,
    FeesConfig,
    PoolSnapshot,
    RedeemResult,
    ShareNames,
)
from .repositories import EventLog

__all__ = [
    "Chain",
    "transactional",
    "EventLog",
    "ONE",
    "RAY",
    "MAX_UINT256",
    "ZERO_ADDRESS",
    "mul_down",
    "mul_up",
    "div_down",
    "div_up",
    "to_wei",
    "from_wei",
    "FeesConfig",
    "ShareNames",
    "DepositResult",
    "RedeemResult",
    "PoolSnapshot",
    "Event",
    "ProtocolError",
    "ValidationError",
    "LifecycleError",
    "AccessError",
    "AdapterError",
    "UnsupportedOperation",
    "AmmError",
    "AmmErrorCode",
    "ConvergenceError",
]
