"""StableSwap AMM for principal and yield claims."""

from __future__ import annotations

from .amplification import MAX_AMP, MIN_AMP, MIN_UPDATE_TIME, AmplificationSchedule
from .pool import (
    MINIMUM_BPT,
    ClaimPricing,
    ExitKind,
    FixedYieldAMM,
    JoinKind,
    LiquidityResult,
)
from .stable_math import AMP_PRECISION, calculate_invariant

__all__ = [
    "FixedYieldAMM",
    "JoinKind",
    "ExitKind",
    "ClaimPricing",
    "LiquidityResult",
    "AmplificationSchedule",
    "MINIMUM_BPT",
    "MIN_AMP",
    "MAX_AMP",
    "MIN_UPDATE_TIME",
    "AMP_PRECISION",
    "calculate_invariant",
]
