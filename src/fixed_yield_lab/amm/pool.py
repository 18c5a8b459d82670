"""StableSwap AMM trading Principal shares against Yield shares.

Raw share balances are upscaled by the share prices reported by the
accounting pool before any invariant math, so the curve is centred on the
claims' fair values rather than on a 1:1 quantity ratio.  Results are
downscaled back to raw share amounts with rounding that favours the AMM.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

from ..core.chain import Chain, transactional
from ..core.constants import MAX_UINT256, ONE, ZERO_ADDRESS
from ..core.errors import AccessError, AmmError, AmmErrorCode, LifecycleError, ValidationError
from ..core.fixed_point import complement, div_down, div_up, mul_down, mul_up
from ..core.models import LiquidityChanged, Swapped
from ..ledger.tokens import Token
from . import stable_math
from .amplification import AmplificationSchedule

logger = logging.getLogger(__name__)

MINIMUM_BPT = 10**6
MIN_SWAP_FEE_PERCENTAGE = 10**12
MAX_SWAP_FEE_PERCENTAGE = 10**17
DEFAULT_MAX_RATIO = 3 * ONE // 10

PRINCIPAL = 0
YIELD = 1


class JoinKind(IntEnum):
    INIT = 0
    EXACT_TOKENS_IN_FOR_BPT_OUT = 1
    TOKEN_IN_FOR_EXACT_BPT_OUT = 2


class ExitKind(IntEnum):
    EXACT_BPT_IN_FOR_ONE_TOKEN_OUT = 0
    EXACT_BPT_IN_FOR_TOKENS_OUT = 1
    BPT_IN_FOR_EXACT_TOKENS_OUT = 2


class ClaimPricing(Protocol):
    """What the AMM needs from the accounting pool."""

    principal_share: Token
    yield_share: Token
    matured: bool

    def price_per_principal_share(self) -> int: ...

    def price_per_yield_share(self) -> int: ...

    def price_per_principal_share_stored(self) -> int: ...

    def price_per_yield_share_stored(self) -> int: ...


@dataclass(frozen=True)
class LiquidityResult:
    lp_amount: int
    principal_amount: int
    yield_amount: int


class FixedYieldAMM:
    """Two-token StableSwap pool over the claims of one :class:`YieldPool`.

    Parameters
    ----------
    chain:
        Host ledger.
    pool:
        Accounting pool whose share prices scale the balances.
    owner:
        Address allowed to change the swap fee and the amplification.
    amplification:
        Starting amplification coefficient (unscaled, e.g. ``5``).
    swap_fee:
        Wad fraction charged on swap inputs.
    """

    def __init__(
        self,
        chain: Chain,
        pool: ClaimPricing,
        *,
        owner: str,
        amplification: int,
        swap_fee: int,
        max_in_ratio: int = DEFAULT_MAX_RATIO,
        max_out_ratio: int = DEFAULT_MAX_RATIO,
    ) -> None:
        self._check_swap_fee(swap_fee)
        self.schedule = AmplificationSchedule.constant(amplification)
        self.chain = chain
        self.address = chain.new_address()
        self.pool = pool
        self.owner = owner
        self.swap_fee = swap_fee
        self.max_in_ratio = max_in_ratio
        self.max_out_ratio = max_out_ratio
        self.tokens = (pool.principal_share, pool.yield_share)
        symbol = pool.principal_share.symbol.removeprefix("TPS-")
        self.lp_token = Token(chain, f"Tempus LP token {symbol}", f"TLP-{symbol}")
        self.balances = [0, 0]
        self.last_invariant = 0
        self.last_invariant_amp = 0
        chain.register(self)

    def __repr__(self) -> str:
        return f"FixedYieldAMM({self.lp_token.symbol})"

    @property
    def name(self) -> str:
        return self.lp_token.symbol

    # -----------------
    # Parameters
    # -----------------

    @staticmethod
    def _check_swap_fee(swap_fee: int) -> None:
        if swap_fee < MIN_SWAP_FEE_PERCENTAGE:
            raise AmmError(AmmErrorCode.MIN_SWAP_FEE_PERCENTAGE)
        if swap_fee > MAX_SWAP_FEE_PERCENTAGE:
            raise AmmError(AmmErrorCode.MAX_SWAP_FEE_PERCENTAGE)

    def _only_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise AccessError("Caller is not the owner")

    @transactional
    def set_swap_fee_percentage(self, caller: str, swap_fee: int) -> None:
        self._only_owner(caller)
        self._check_swap_fee(swap_fee)
        self.swap_fee = swap_fee

    def get_amplification_parameter(self) -> tuple[int, bool, int]:
        """Return ``(value, is_updating, precision)``."""

        value, updating = self.schedule.value_at(self.chain.now)
        return value, updating, stable_math.AMP_PRECISION

    @transactional
    def start_amplification_update(self, caller: str, target: int, duration: int) -> None:
        self._only_owner(caller)
        self.schedule = self.schedule.start_update(self.chain.now, target, duration)
        logger.info(
            "amplification ramp %s -> %s until %s",
            self.schedule.start_value,
            self.schedule.end_value,
            self.schedule.end_time,
        )

    @transactional
    def stop_amplification_update(self, caller: str) -> None:
        self._only_owner(caller)
        self.schedule = self.schedule.stop_update(self.chain.now)
        logger.info("amplification ramp stopped at %s", self.schedule.end_value)

    def _amp(self) -> int:
        return self.schedule.value_at(self.chain.now)[0]

    # -----------------
    # Scaling
    # -----------------

    def _share_prices(self, refresh: bool) -> list[int]:
        if refresh:
            factors = [self.pool.price_per_principal_share(), self.pool.price_per_yield_share()]
        else:
            factors = [
                self.pool.price_per_principal_share_stored(),
                self.pool.price_per_yield_share_stored(),
            ]
        return factors

    def _scaling_factors(self, refresh: bool) -> list[int]:
        prices = self._share_prices(refresh)
        if min(prices) == 0:
            raise LifecycleError("share price is zero")
        # claims with fewer than 18 decimals are upscaled to 18-decimal math
        return [price * 10 ** (18 - token.decimals) for price, token in zip(prices, self.tokens)]

    @staticmethod
    def _upscale(amounts: Sequence[int], factors: Sequence[int]) -> list[int]:
        return [mul_down(a, f) for a, f in zip(amounts, factors)]

    def _index_of(self, token: Token) -> int:
        for index, candidate in enumerate(self.tokens):
            if candidate is token:
                return index
        raise ValidationError("token is not traded by this AMM")

    @staticmethod
    def _check_amounts(*amounts: int) -> None:
        if any(amount < 0 for amount in amounts):
            raise ValidationError("amount can not be negative")

    def _require_initialized(self) -> None:
        if self.lp_token.total_supply == 0:
            raise LifecycleError("AMM not initialized")

    def _update_last_invariant(self, factors: Sequence[int]) -> None:
        amp = self._amp()
        self.last_invariant = stable_math.calculate_invariant(amp, self._upscale(self.balances, factors), True)
        self.last_invariant_amp = amp

    # -----------------
    # Swaps
    # -----------------

    def _out_given_in(self, index_in: int, amount_in: int, factors: Sequence[int]) -> int:
        index_out = 1 - index_in
        amount_after_fee = amount_in - mul_up(amount_in, self.swap_fee)
        if amount_after_fee > mul_down(self.balances[index_in], self.max_in_ratio):
            raise AmmError(AmmErrorCode.MAX_IN_RATIO)
        scaled_out = stable_math.out_given_in(
            self._amp(),
            self._upscale(self.balances, factors),
            index_in,
            index_out,
            mul_down(amount_after_fee, factors[index_in]),
        )
        amount_out = div_down(scaled_out, factors[index_out])
        if amount_out > mul_down(self.balances[index_out], self.max_out_ratio):
            raise AmmError(AmmErrorCode.MAX_OUT_RATIO)
        return amount_out

    def _in_given_out(self, index_in: int, amount_out: int, factors: Sequence[int]) -> int:
        index_out = 1 - index_in
        if amount_out > mul_down(self.balances[index_out], self.max_out_ratio):
            raise AmmError(AmmErrorCode.MAX_OUT_RATIO)
        scaled_in = stable_math.in_given_out(
            self._amp(),
            self._upscale(self.balances, factors),
            index_in,
            index_out,
            mul_down(amount_out, factors[index_out]),
        )
        amount_in = div_up(div_up(scaled_in, factors[index_in]), complement(self.swap_fee))
        if amount_in > mul_down(self.balances[index_in], self.max_in_ratio):
            raise AmmError(AmmErrorCode.MAX_IN_RATIO)
        return amount_in

    def _settle_swap(self, trader: str, index_in: int, amount_in: int, amount_out: int) -> None:
        index_out = 1 - index_in
        self.tokens[index_in].transfer(trader, self.address, amount_in)
        self.tokens[index_out].transfer(self.address, trader, amount_out)
        self.balances[index_in] += amount_in
        self.balances[index_out] -= amount_out
        self.chain.emit(
            Swapped(
                self.chain.now,
                self.name,
                trader,
                self.tokens[index_in].symbol,
                self.tokens[index_out].symbol,
                amount_in,
                amount_out,
            )
        )
        logger.debug("swap %s %s for %s", amount_in, self.tokens[index_in].symbol, amount_out)

    @transactional
    def swap_given_in(self, caller: str, token_in: Token, amount_in: int, min_amount_out: int = 0) -> int:
        """Sell exactly ``amount_in`` of ``token_in``; return the amount received."""

        self._check_amounts(amount_in)
        self._require_initialized()
        index_in = self._index_of(token_in)
        factors = self._scaling_factors(refresh=True)
        amount_out = self._out_given_in(index_in, amount_in, factors)
        if amount_out < min_amount_out:
            raise AmmError(AmmErrorCode.SWAP_LIMIT)
        self._settle_swap(caller, index_in, amount_in, amount_out)
        return amount_out

    @transactional
    def swap_given_out(
        self, caller: str, token_in: Token, amount_out: int, max_amount_in: int = MAX_UINT256
    ) -> int:
        """Buy exactly ``amount_out`` of the other token; return the amount paid."""

        self._check_amounts(amount_out)
        self._require_initialized()
        index_in = self._index_of(token_in)
        factors = self._scaling_factors(refresh=True)
        amount_in = self._in_given_out(index_in, amount_out, factors)
        if amount_in > max_amount_in:
            raise AmmError(AmmErrorCode.SWAP_LIMIT)
        self._settle_swap(caller, index_in, amount_in, amount_out)
        return amount_in

    def expected_return_given_in(self, amount: int, principal_in: bool) -> int:
        """Quote a given-in swap at the stored share prices without executing it."""

        self._check_amounts(amount)
        index_in = PRINCIPAL if principal_in else YIELD
        return self._out_given_in(index_in, amount, self._scaling_factors(refresh=False))

    # -----------------
    # Liquidity
    # -----------------

    @transactional
    def provide_liquidity(
        self,
        caller: str,
        kind: JoinKind,
        amounts: Sequence[int] = (0, 0),
        *,
        min_bpt_out: int = 0,
        token: Token | None = None,
        bpt_out: int = 0,
        max_amount_in: int = MAX_UINT256,
    ) -> LiquidityResult:
        """Join the AMM.

        ``INIT`` and ``EXACT_TOKENS_IN_FOR_BPT_OUT`` take ``amounts`` as
        ``(principals, yields)``; ``TOKEN_IN_FOR_EXACT_BPT_OUT`` takes
        ``token``, ``bpt_out`` and ``max_amount_in``.
        """

        kind = JoinKind(kind)
        self._check_amounts(*amounts, bpt_out)
        self._share_prices(refresh=True)
        if self.pool.matured:
            raise LifecycleError("Pool already finalized")
        factors = self._scaling_factors(refresh=False)
        supply = self.lp_token.total_supply
        amp = self._amp()

        if kind is JoinKind.INIT:
            if supply != 0:
                raise AmmError(AmmErrorCode.UNHANDLED_JOIN_KIND)
            amounts_in = list(amounts)
            if min(amounts_in) == 0:
                raise ValidationError("INIT requires both tokens")
            invariant = stable_math.calculate_invariant(amp, self._upscale(amounts_in, factors), True)
            if invariant <= MINIMUM_BPT:
                raise AmmError(AmmErrorCode.MINIMUM_BPT)
            self.lp_token.mint(ZERO_ADDRESS, MINIMUM_BPT)
            lp_out = invariant - MINIMUM_BPT
        elif supply == 0:
            raise LifecycleError("AMM not initialized")
        elif kind is JoinKind.EXACT_TOKENS_IN_FOR_BPT_OUT:
            amounts_in = list(amounts)
            lp_out = stable_math.bpt_out_given_exact_tokens_in(
                amp,
                self._upscale(self.balances, factors),
                self._upscale(amounts_in, factors),
                supply,
                self.swap_fee,
            )
            if lp_out < min_bpt_out:
                raise AmmError(AmmErrorCode.BPT_OUT_MIN_AMOUNT)
        else:
            if token is None:
                raise ValidationError("token is required for single token joins")
            index = self._index_of(token)
            scaled_in = stable_math.token_in_given_exact_bpt_out(
                amp, self._upscale(self.balances, factors), index, bpt_out, supply, self.swap_fee
            )
            amount_in = div_up(scaled_in, factors[index])
            if amount_in > max_amount_in:
                raise AmmError(AmmErrorCode.JOIN_ABOVE_MAX)
            amounts_in = [0, 0]
            amounts_in[index] = amount_in
            lp_out = bpt_out

        for index, amount in enumerate(amounts_in):
            if amount:
                self.tokens[index].transfer(caller, self.address, amount)
                self.balances[index] += amount
        self.lp_token.mint(caller, lp_out)
        self._update_last_invariant(factors)
        self.chain.emit(
            LiquidityChanged(
                self.chain.now, self.name, caller, kind.name, amounts_in[PRINCIPAL], amounts_in[YIELD], lp_out
            )
        )
        logger.debug("join %s minted %s LP", kind.name, lp_out)
        return LiquidityResult(lp_out, amounts_in[PRINCIPAL], amounts_in[YIELD])

    @transactional
    def exit_pool(
        self,
        caller: str,
        kind: ExitKind,
        *,
        bpt_in: int = 0,
        amounts_out: Sequence[int] = (0, 0),
        min_amounts_out: Sequence[int] = (0, 0),
        max_bpt_in: int = MAX_UINT256,
    ) -> LiquidityResult:
        """Leave the AMM receiving both tokens.

        Single-token exits are rejected here; use :meth:`exit_single_token`.
        """

        kind = ExitKind(kind)
        self._check_amounts(bpt_in, *amounts_out)
        if kind is ExitKind.EXACT_BPT_IN_FOR_ONE_TOKEN_OUT:
            raise AmmError(AmmErrorCode.UNHANDLED_EXIT_KIND)
        self._require_initialized()
        supply = self.lp_token.total_supply

        if kind is ExitKind.EXACT_BPT_IN_FOR_TOKENS_OUT:
            out = stable_math.tokens_out_given_exact_bpt_in(self.balances, bpt_in, supply)
            for amount, minimum in zip(out, min_amounts_out):
                if amount < minimum:
                    raise AmmError(AmmErrorCode.EXIT_BELOW_MIN)
            factors = None
        else:
            factors = self._scaling_factors(refresh=True)
            out = list(amounts_out)
            bpt_in = stable_math.bpt_in_given_exact_tokens_out(
                self._amp(),
                self._upscale(self.balances, factors),
                self._upscale(out, factors),
                supply,
                self.swap_fee,
            )
            if bpt_in > max_bpt_in:
                raise AmmError(AmmErrorCode.BPT_IN_MAX_AMOUNT)

        self._burn_and_pay(caller, bpt_in, out)
        if factors is not None:
            self._update_last_invariant(factors)
        self.chain.emit(
            LiquidityChanged(self.chain.now, self.name, caller, kind.name, -out[PRINCIPAL], -out[YIELD], -bpt_in)
        )
        logger.debug("exit %s burned %s LP", kind.name, bpt_in)
        return LiquidityResult(bpt_in, out[PRINCIPAL], out[YIELD])

    @transactional
    def exit_single_token(
        self, caller: str, token: Token, bpt_in: int, min_amount_out: int = 0
    ) -> LiquidityResult:
        """Burn ``bpt_in`` LP tokens for a single token, paying the swap fee on the imbalance."""

        self._check_amounts(bpt_in)
        self._require_initialized()
        index = self._index_of(token)
        factors = self._scaling_factors(refresh=True)
        scaled_out = stable_math.token_out_given_exact_bpt_in(
            self._amp(),
            self._upscale(self.balances, factors),
            index,
            bpt_in,
            self.lp_token.total_supply,
            self.swap_fee,
        )
        amount_out = div_down(scaled_out, factors[index])
        if amount_out < min_amount_out:
            raise AmmError(AmmErrorCode.EXIT_BELOW_MIN)
        out = [0, 0]
        out[index] = amount_out
        self._burn_and_pay(caller, bpt_in, out)
        self._update_last_invariant(factors)
        self.chain.emit(
            LiquidityChanged(
                self.chain.now, self.name, caller, "EXIT_SINGLE_TOKEN", -out[PRINCIPAL], -out[YIELD], -bpt_in
            )
        )
        return LiquidityResult(bpt_in, out[PRINCIPAL], out[YIELD])

    def _burn_and_pay(self, caller: str, bpt_in: int, out: Sequence[int]) -> None:
        self.lp_token.burn(caller, bpt_in)
        for index, amount in enumerate(out):
            if amount:
                self.balances[index] -= amount
                self.tokens[index].transfer(self.address, caller, amount)

    # -----------------
    # Views
    # -----------------

    def get_last_invariant(self) -> tuple[int, int]:
        return self.last_invariant, self.last_invariant_amp

    def get_rate(self) -> int:
        """Invariant per LP token at the stored share prices; reporting only."""

        supply = self.lp_token.total_supply
        if supply == 0:
            return 0
        scaled = self._upscale(self.balances, self._scaling_factors(refresh=False))
        return div_down(stable_math.calculate_invariant(self._amp(), scaled, False), supply)

    def scaled_balances(self) -> list[int]:
        return self._upscale(self.balances, self._scaling_factors(refresh=False))


__all__ = [
    "MINIMUM_BPT",
    "MIN_SWAP_FEE_PERCENTAGE",
    "MAX_SWAP_FEE_PERCENTAGE",
    "DEFAULT_MAX_RATIO",
    "JoinKind",
    "ExitKind",
    "ClaimPricing",
    "LiquidityResult",
    "FixedYieldAMM",
]
