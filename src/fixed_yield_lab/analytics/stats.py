"""Read-only pool statistics: quotes and total value locked."""

from __future__ import annotations

import pandas as pd

from ..core.fixed_point import from_wei, mul_down
from ..pool.engine import YieldPool


def estimated_minted_shares(pool: YieldPool, amount: int, is_backing: bool) -> int:
    """Principal (and Yield) shares a deposit would mint right now."""

    return pool.estimated_minted_shares(amount, is_backing)


def estimated_redeem(pool: YieldPool, principals: int, yields: int, to_backing: bool) -> int:
    """Amount a redemption would pay now, net of the applicable redemption fee.

    Quotes in backing tokens when ``to_backing`` is set, otherwise in YBT.
    """

    rate = pool.source.current_rate()
    quote = pool.get_redemption_amounts(principals, yields, rate)
    matured = pool.matured or pool.chain.now >= pool.maturity_time
    fee_percent = (
        pool.fees_config.mature_redeem_percent if matured else pool.fees_config.early_redeem_percent
    )
    ybt = quote.yield_bearing - mul_down(quote.yield_bearing, fee_percent)
    if to_backing:
        return pool.num_assets_per_yield_token(ybt, rate)
    return ybt


def total_value_locked_in_backing_tokens(pool: YieldPool) -> int:
    """Value of all outstanding claims at the stored share prices."""

    principal = mul_down(pool.principal_share.total_supply, pool.price_per_principal_share_stored())
    yields = mul_down(pool.yield_share.total_supply, pool.price_per_yield_share_stored())
    return principal + yields


def total_value_locked_at_given_rate(pool: YieldPool, rate: int) -> int:
    """TVL converted with an external backing-token price, e.g. a USD rate."""

    return mul_down(total_value_locked_in_backing_tokens(pool), rate)


def pool_summary(pool: YieldPool) -> pd.DataFrame:
    """One-row frame with the pool snapshot, share prices and TVL as floats."""

    row = pool.snapshot().to_dict()
    row.update(
        {
            "protocol": pool.protocol_name,
            "principal_price": pool.price_per_principal_share_stored(),
            "yield_price": pool.price_per_yield_share_stored(),
            "tvl_backing": total_value_locked_in_backing_tokens(pool),
        }
    )
    wad_cols = [
        "initial_interest_rate",
        "current_interest_rate",
        "maturity_interest_rate",
        "total_fees",
        "principal_supply",
        "yield_supply",
        "locked_ybt",
        "principal_price",
        "yield_price",
        "tvl_backing",
    ]
    for col in wad_cols:
        row[col] = float(from_wei(row[col]))
    return pd.DataFrame([row]).set_index("name")


__all__ = [
    "estimated_minted_shares",
    "estimated_redeem",
    "total_value_locked_in_backing_tokens",
    "total_value_locked_at_given_rate",
    "pool_summary",
]
