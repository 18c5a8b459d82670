"""Immutable value objects and events used throughout fixed_yield_lab."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import UTC, datetime
from typing import Any

from .constants import ONE


@dataclass(frozen=True)
class FeesConfig:
    """Fee percentages as wad fractions, e.g. ``10**16`` for 1%."""

    deposit_percent: int = 0
    early_redeem_percent: int = 0
    mature_redeem_percent: int = 0

    def within(self, limit: "FeesConfig") -> str | None:
        """Return the first violated bound message, ``None`` when all fit."""

        if self.deposit_percent > limit.deposit_percent:
            return "Deposit fee percent > max"
        if self.early_redeem_percent > limit.early_redeem_percent:
            return "Early redeem fee percent > max"
        if self.mature_redeem_percent > limit.mature_redeem_percent:
            return "Mature redeem fee percent > max"
        return None

    def is_valid_fraction(self) -> bool:
        return all(0 <= getattr(self, f.name) < ONE for f in fields(self))


@dataclass(frozen=True)
class ShareNames:
    principal_name: str
    principal_symbol: str
    yield_name: str
    yield_symbol: str


@dataclass(frozen=True)
class DepositResult:
    minted_shares: int
    deposited_ybt: int
    fee: int
    rate: int


@dataclass(frozen=True)
class RedemptionAmounts:
    """Quote produced before fees: what a redemption is worth right now."""

    yield_bearing: int
    backing: int
    interest_rate: int
    surplus_fee: int = 0


@dataclass(frozen=True)
class RedeemResult:
    redeemed_ybt: int
    redeemed_backing: int
    fee: int
    rate: int


@dataclass(frozen=True)
class PoolSnapshot:
    """Point-in-time view of the accounting engine state."""

    name: str
    timestamp: int
    initial_interest_rate: int
    current_interest_rate: int
    maturity_interest_rate: int
    maturity_time: int
    halt_time: int | None
    matured: bool
    total_fees: int
    principal_supply: int
    yield_supply: int
    locked_ybt: int

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp_iso"] = (
            datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat() if self.timestamp else ""
        )
        return data


# -----------------
# Events
# -----------------


@dataclass(frozen=True)
class Event:
    timestamp: int

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["event"] = self.kind
        return data


@dataclass(frozen=True)
class Deposited(Event):
    pool: str
    depositor: str
    recipient: str
    yield_token_amount: int
    backing_token_value: int
    shares_amount: int
    interest_rate: int
    fee: int


@dataclass(frozen=True)
class Redeemed(Event):
    pool: str
    redeemer: str
    recipient: str
    principal_amount: int
    yield_amount: int
    yield_bearing_amount: int
    backing_amount: int
    interest_rate: int
    fee: int
    early_redeem: bool


@dataclass(frozen=True)
class PoolFinalized(Event):
    pool: str
    maturity_interest_rate: int


@dataclass(frozen=True)
class PoolHalted(Event):
    pool: str
    interest_rate: int
    negative_yield_since: int


@dataclass(frozen=True)
class FeesTransferred(Event):
    pool: str
    recipient: str
    amount: int


@dataclass(frozen=True)
class Swapped(Event):
    amm: str
    trader: str
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class LiquidityChanged(Event):
    amm: str
    provider: str
    action: str
    principal_delta: int
    yield_delta: int
    lp_delta: int


__all__ = [
    "FeesConfig",
    "ShareNames",
    "DepositResult",
    "RedemptionAmounts",
    "RedeemResult",
    "PoolSnapshot",
    "Event",
    "Deposited",
    "Redeemed",
    "PoolFinalized",
    "PoolHalted",
    "FeesTransferred",
    "Swapped",
    "LiquidityChanged",
]
