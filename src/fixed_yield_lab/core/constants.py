"""Core constants shared across fixed_yield_lab modules."""

from __future__ import annotations

# Fixed-point scale for amounts, rates and percentages (18 decimals).
ONE = 10**18

# Aave reports its liquidity index with 27 decimals.
RAY = 10**27

# Sentinel meaning "everything" for fee transfers.
MAX_UINT256 = 2**256 - 1

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

SECOND = 1
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY

# Negative yield must persist longer than this before the pool halts.
DEFAULT_HALT_DURATION = WEEK

POOL_VERSION = 1

__all__ = [
    "ONE",
    "RAY",
    "MAX_UINT256",
    "ZERO_ADDRESS",
    "SECOND",
    "MINUTE",
    "HOUR",
    "DAY",
    "WEEK",
    "DEFAULT_HALT_DURATION",
    "POOL_VERSION",
]
