"""Exception hierarchy raised by the accounting and AMM engines.

Messages are fixed strings; callers and tests match on ``error.message``.
"""

from __future__ import annotations

from enum import IntEnum


class ProtocolError(Exception):
    """Base class for every rejection raised by the engines."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ProtocolError, ValueError):
    """Bad input: zero amounts, zero addresses, mismatched values."""


class LifecycleError(ProtocolError):
    """Operation not permitted in the current pool or ramp state."""


class AccessError(ProtocolError):
    """Caller is not the owner or the registered controller."""


class AdapterError(ProtocolError):
    """Failure inside an underlying yield protocol."""


class UnsupportedOperation(AdapterError):
    """The yield source does not offer the requested conversion."""


class AmmErrorCode(IntEnum):
    MIN_SWAP_FEE_PERCENTAGE = 202
    MAX_SWAP_FEE_PERCENTAGE = 203
    MINIMUM_BPT = 204
    BPT_IN_MAX_AMOUNT = 207
    BPT_OUT_MIN_AMOUNT = 208
    MIN_AMP = 300
    MAX_AMP = 301
    MAX_IN_RATIO = 304
    MAX_OUT_RATIO = 305
    UNHANDLED_JOIN_KIND = 310
    UNHANDLED_EXIT_KIND = 311
    AMP_END_TIME_TOO_CLOSE = 317
    AMP_ONGOING_UPDATE = 318
    AMP_RATE_TOO_HIGH = 319
    AMP_NO_ONGOING_UPDATE = 320
    STABLE_INVARIANT_DIDNT_CONVERGE = 321
    STABLE_GET_BALANCE_DIDNT_CONVERGE = 322
    EXIT_BELOW_MIN = 505
    JOIN_ABOVE_MAX = 506
    SWAP_LIMIT = 507


class AmmError(ProtocolError):
    """Coded AMM rejection rendered as ``BAL#<code>``."""

    def __init__(self, code: AmmErrorCode) -> None:
        self.code = AmmErrorCode(code)
        super().__init__(f"BAL#{int(self.code):03d}")


class ConvergenceError(AmmError):
    """The invariant or balance solve did not converge within the iteration cap."""


__all__ = [
    "ProtocolError",
    "ValidationError",
    "LifecycleError",
    "AccessError",
    "AdapterError",
    "UnsupportedOperation",
    "AmmErrorCode",
    "AmmError",
    "ConvergenceError",
]
