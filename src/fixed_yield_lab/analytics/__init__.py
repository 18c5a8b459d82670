"""Pool statistics and rate-path simulations."""

from __future__ import annotations

from .simulation import (
    Scenario,
    build_scenario,
    rate_path_from_feed,
    simulate_share_prices,
    synthetic_rate_path,
)
from .stats import (
    estimated_minted_shares,
    estimated_redeem,
    pool_summary,
    total_value_locked_at_given_rate,
    total_value_locked_in_backing_tokens,
)

__all__ = [
    "Scenario",
    "build_scenario",
    "synthetic_rate_path",
    "rate_path_from_feed",
    "simulate_share_prices",
    "estimated_minted_shares",
    "estimated_redeem",
    "total_value_locked_in_backing_tokens",
    "total_value_locked_at_given_rate",
    "pool_summary",
]
