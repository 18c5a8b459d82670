"""Shared pieces of the yield-source adapters.

An adapter wraps one external lending or staking protocol and exposes a
single capability set to the pool: the live exchange rate, deposits of the
backing asset, optional redemption back to it, and the two conversions between
yield-bearing tokens and backing value.  How yield accrues is described by the
adapter's :class:`AccrualConvention` instead of by its identity.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from ..core.chain import Chain
from ..core.errors import AdapterError, UnsupportedOperation, ValidationError
from ..core.fixed_point import div_down, mul_down
from ..ledger.tokens import Token

logger = logging.getLogger(__name__)


class AccrualConvention(str, Enum):
    """How a yield-bearing token reflects accrued interest."""

    # Balance rebases upwards; one token is always worth one backing unit.
    PEGGED = "pegged"
    # Balance is fixed; the exchange rate grows.
    APPRECIATING = "appreciating"


class YieldSource(Protocol):
    """Capability set the pool consumes from an adapter."""

    protocol_name: str
    convention: AccrualConvention
    accepts_ether: bool
    yield_bearing_token: Token
    backing_token: Token

    def current_rate(self) -> int: ...

    def deposit(self, holder: str, amount: int, eth_value: int = 0) -> int: ...

    def redeem_to_backing(self, holder: str, ybt_amount: int, recipient: str) -> int: ...

    def num_assets_per_yield_token(self, ybt_amount: int, rate: int) -> int: ...

    def num_yield_tokens_per_asset(self, backing_amount: int, rate: int) -> int: ...


class FailureInjection:
    """Mixin letting tests make the next protocol call revert."""

    _transient_attrs = ("_pending_failure",)

    _pending_failure: str | None = None

    def fail_next_operation(self, message: str = "random failure") -> None:
        self._pending_failure = message

    def _maybe_fail(self) -> None:
        message = self._pending_failure
        if message is not None:
            self._pending_failure = None
            raise AdapterError(message)


class BaseYieldSource:
    """Conversions and bookkeeping common to every adapter."""

    protocol_name = "Base"
    convention = AccrualConvention.APPRECIATING
    accepts_ether = False

    def __init__(self, chain: Chain, yield_bearing_token: Token, backing_token: Token) -> None:
        self.chain = chain
        self.yield_bearing_token = yield_bearing_token
        self.backing_token = backing_token
        if yield_bearing_token.decimals < backing_token.decimals:
            raise ValidationError("yield-bearing token has fewer decimals than its backing token")
        # backing amounts are upscaled to YBT precision before applying the rate
        self.decimals_scale = 10 ** (yield_bearing_token.decimals - backing_token.decimals)
        chain.register(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.yield_bearing_token.symbol})"

    def current_rate(self) -> int:
        raise NotImplementedError

    def num_assets_per_yield_token(self, ybt_amount: int, rate: int) -> int:
        if self.convention is AccrualConvention.PEGGED:
            return ybt_amount // self.decimals_scale
        return mul_down(ybt_amount, rate) // self.decimals_scale

    def num_yield_tokens_per_asset(self, backing_amount: int, rate: int) -> int:
        if self.convention is AccrualConvention.PEGGED:
            return backing_amount * self.decimals_scale
        return div_down(backing_amount * self.decimals_scale, rate)

    def deposit(self, holder: str, amount: int, eth_value: int = 0) -> int:
        raise NotImplementedError

    def redeem_to_backing(self, holder: str, ybt_amount: int, recipient: str) -> int:
        raise UnsupportedOperation(f"{self.protocol_name}TempusPool.withdrawFromUnderlyingProtocol not supported")


def pay_out(token: Token, reserve: str, recipient: str, amount: int) -> None:
    """Send ``amount`` from ``reserve``, minting any shortfall as borrower interest."""

    available = token.balance_of(reserve)
    if available < amount:
        token.mint(reserve, amount - available)
    token.transfer(reserve, recipient, amount)


__all__ = [
    "AccrualConvention",
    "YieldSource",
    "FailureInjection",
    "BaseYieldSource",
    "pay_out",
]
