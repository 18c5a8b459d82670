"""Pool accounting engine.

A :class:`YieldPool` locks one yield-bearing token (YBT) until a fixed
maturity and issues two claims against it: Principal shares, redeemable for
the deposited backing value, and Yield shares, redeemable for the interest
accrued on top of it.  Every state-changing call refreshes the interest rate
from the yield source first and evaluates the negative-yield halting rule.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from ..core.chain import Chain, transactional
from ..core.constants import DEFAULT_HALT_DURATION, MAX_UINT256, ONE, POOL_VERSION, ZERO_ADDRESS
from ..core.errors import AccessError, LifecycleError, ValidationError
from ..core.fixed_point import div_down, mul_down
from ..core.models import (
    DepositResult,
    FeesConfig,
    FeesTransferred,
    PoolFinalized,
    PoolHalted,
    PoolSnapshot,
    RedeemResult,
    RedemptionAmounts,
    ShareNames,
)
from ..ledger.tokens import PoolShare, ShareKind, Token
from ..sources.base import YieldSource
from .halting import NegativeYieldMonitor

logger = logging.getLogger(__name__)

# deposit, early redeem, mature redeem
DEFAULT_MAX_FEES = FeesConfig(ONE // 2, ONE, ONE // 2)


def generate_share_names(ybt_name: str, ybt_symbol: str, maturity_time: int) -> ShareNames:
    """Derive ``TPS-``/``TYS-`` claim names from the maturity date.

    The month component is zero-based, matching the names already in use
    by deployed pools.
    """

    date = datetime.fromtimestamp(maturity_time, tz=UTC)
    suffix = f"-{date.day}-{date.month - 1}-{date.year}"
    return ShareNames(
        principal_name=f"TPS-{ybt_name}{suffix}",
        principal_symbol=f"TPS-{ybt_symbol}{suffix}",
        yield_name=f"TYS-{ybt_name}{suffix}",
        yield_symbol=f"TYS-{ybt_symbol}{suffix}",
    )


class YieldPool:
    """Accounting engine for one yield-bearing token and one maturity.

    Parameters
    ----------
    chain:
        Host ledger providing the clock and call atomicity.
    source:
        Adapter reporting the exchange rate of the yield-bearing token.
    controller:
        Address allowed to deposit and redeem on behalf of users.
    owner:
        Address allowed to manage fees and run the recovery sweep.
    maturity_time:
        UNIX timestamp strictly after ``chain.now``.
    estimated_final_yield:
        Wad estimate of the total yield at maturity, e.g. ``to_wei(0.1)``.
    """

    def __init__(
        self,
        chain: Chain,
        source: YieldSource,
        *,
        controller: str,
        owner: str,
        maturity_time: int,
        estimated_final_yield: int,
        fees_config: FeesConfig | None = None,
        max_fees_config: FeesConfig | None = None,
        halt_duration: int = DEFAULT_HALT_DURATION,
        share_names: ShareNames | None = None,
    ) -> None:
        if maturity_time <= chain.now:
            raise ValidationError("maturityTime is after startTime")
        initial_rate = source.current_rate()
        if initial_rate == 0:
            raise ValidationError("initInterestRate can not be zero")
        if estimated_final_yield == 0:
            raise ValidationError("estimatedFinalYield can not be zero")

        self.max_fees_config = max_fees_config or DEFAULT_MAX_FEES
        fees = fees_config or FeesConfig()
        self._check_fees(fees)

        self.chain = chain
        self.address = chain.new_address()
        self.source = source
        self.controller = controller
        self.owner = owner
        self.start_time = chain.now
        self.maturity_time = maturity_time
        self.estimated_final_yield = estimated_final_yield
        self.initial_interest_rate = initial_rate
        self.current_interest_rate = initial_rate
        self.maturity_interest_rate = 0
        self.matured = False
        self.halt_time: int | None = None
        self.fees_config = fees
        self.total_fees = 0
        self.monitor = NegativeYieldMonitor(halt_duration=halt_duration)

        ybt = source.yield_bearing_token
        names = share_names or generate_share_names(ybt.name, ybt.symbol, maturity_time)
        self.share_names = names
        # claims are denominated in the backing asset
        decimals = source.backing_token.decimals
        self.principal_share = PoolShare(
            chain, self, ShareKind.PRINCIPAL, names.principal_name, names.principal_symbol, decimals
        )
        self.yield_share = PoolShare(
            chain, self, ShareKind.YIELD, names.yield_name, names.yield_symbol, decimals
        )
        chain.register(self)
        logger.info(
            "created pool %s maturing at %s with initial rate %s",
            names.principal_symbol,
            maturity_time,
            initial_rate,
        )

    def __repr__(self) -> str:
        return f"YieldPool({self.name})"

    # -----------------
    # Identity
    # -----------------

    @property
    def name(self) -> str:
        return self.share_names.principal_symbol.removeprefix("TPS-")

    @property
    def version(self) -> int:
        return POOL_VERSION

    @property
    def protocol_name(self) -> str:
        return self.source.protocol_name

    @property
    def yield_bearing_token(self) -> Token:
        return self.source.yield_bearing_token

    @property
    def backing_token(self) -> Token:
        return self.source.backing_token

    @property
    def halted(self) -> bool:
        return self.halt_time is not None

    def locked_yield_bearing(self) -> int:
        return self.yield_bearing_token.balance_of(self.address)

    # -----------------
    # Guards
    # -----------------

    def _only_controller(self, caller: str) -> None:
        if caller != self.controller:
            raise AccessError("Only callable by TempusController")

    def _only_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise AccessError("Caller is not the owner")

    def _check_fees(self, fees: FeesConfig) -> None:
        message = fees.within(self.max_fees_config)
        if message:
            raise ValidationError(message)
        if not fees.is_valid_fraction():
            raise ValidationError("fee percent must be below 100%")

    # -----------------
    # Rate & lifecycle
    # -----------------

    def _refresh(self) -> int:
        previous = self.current_interest_rate
        rate = self.source.current_rate()
        self.current_interest_rate = rate
        now = self.chain.now
        if not self.matured:
            if self.monitor.observe(previous, rate, now):
                self._halt(rate, now)
            elif now >= self.maturity_time:
                self._finalize(rate)
        return rate

    def _halt(self, rate: int, now: int) -> None:
        if self.halt_time is not None:
            return
        self.halt_time = now
        self.chain.emit(PoolHalted(now, self.name, rate, self.monitor.since or now))
        logger.info("pool %s halted after negative yield since %s", self.name, self.monitor.since)
        self._finalize(rate)

    def _finalize(self, rate: int) -> None:
        if self.matured:
            return
        self.matured = True
        self.maturity_interest_rate = rate
        self.chain.emit(PoolFinalized(self.chain.now, self.name, rate))
        logger.info("pool %s finalized at rate %s", self.name, rate)

    @transactional
    def update_interest_rate(self) -> int:
        """Refresh the rate and run the halting check without touching balances."""

        return self._refresh()

    @transactional
    def finalize(self) -> None:
        self._refresh()
        if not self.matured:
            raise LifecycleError("Maturity not been reached yet.")

    @staticmethod
    def _require_live_rate(rate: int) -> None:
        if rate == 0:
            raise LifecycleError("rate is 0; recover locked YBT with governance_recover_ybt")

    def _effective_rate(self, rate: int) -> int:
        if self.matured:
            return min(self.maturity_interest_rate, rate)
        return rate

    # -----------------
    # Deposits
    # -----------------

    def _check_deposit_state(self, rate: int) -> None:
        if self.matured or self.chain.now >= self.maturity_time:
            raise LifecycleError("Maturity reached.")
        if rate < self.initial_interest_rate:
            raise LifecycleError("Negative yield!")

    def _mint_shares(self, recipient: str, shares: int) -> None:
        self.principal_share.mint(recipient, shares)
        self.yield_share.mint(recipient, shares)

    @transactional
    def on_deposit_yield_bearing(self, caller: str, ybt_amount: int, recipient: str) -> DepositResult:
        """Mint claims for YBT the controller already moved into the pool."""

        self._only_controller(caller)
        if ybt_amount <= 0:
            raise ValidationError("yieldTokenAmount is 0")
        if recipient == ZERO_ADDRESS:
            raise ValidationError("recipient can not be 0x0")

        rate = self._refresh()
        self._check_deposit_state(rate)

        fee = mul_down(ybt_amount, self.fees_config.deposit_percent)
        backing = self.source.num_assets_per_yield_token(ybt_amount - fee, rate)
        shares = div_down(mul_down(backing, self.initial_interest_rate), rate)
        self.total_fees += fee
        self._mint_shares(recipient, shares)
        logger.debug("deposit %s YBT into %s minted %s shares", ybt_amount, self.name, shares)
        return DepositResult(shares, ybt_amount, fee, rate)

    @transactional
    def on_deposit_backing(
        self, caller: str, backing_amount: int, recipient: str, eth_value: int = 0
    ) -> DepositResult:
        """Mint claims for backing tokens, then deposit them into the protocol."""

        self._only_controller(caller)
        if backing_amount <= 0:
            raise ValidationError("backingTokenAmount is 0")
        if recipient == ZERO_ADDRESS:
            raise ValidationError("recipient can not be 0x0")
        if self.source.accepts_ether:
            if eth_value == 0:
                raise ValidationError("Pool requires ETH deposits")
            if eth_value != backing_amount:
                raise ValidationError("ETH value does not match provided amount")
        elif eth_value != 0:
            raise ValidationError("given TempusPool's Backing Token is not ETH")

        rate = self._refresh()
        self._check_deposit_state(rate)

        backing_fee = mul_down(backing_amount, self.fees_config.deposit_percent)
        fee = self.source.num_yield_tokens_per_asset(backing_fee, rate)
        shares = div_down(mul_down(backing_amount - backing_fee, self.initial_interest_rate), rate)
        self.total_fees += fee
        self._mint_shares(recipient, shares)

        deposited = self.source.deposit(self.address, backing_amount, eth_value)
        logger.debug(
            "deposit %s backing into %s minted %s shares (%s YBT)",
            backing_amount,
            self.name,
            shares,
            deposited,
        )
        return DepositResult(shares, deposited, fee, rate)

    # -----------------
    # Redemptions
    # -----------------

    def get_redemption_amounts(self, principals: int, yields: int, rate: int) -> RedemptionAmounts:
        """Quote a redemption at ``rate`` before any redemption fee.

        After maturity the payout uses the lower of the frozen maturity rate
        and ``rate``; yield accrued past maturity is reported as
        ``surplus_fee`` and stays with the pool.
        """

        self._require_live_rate(rate)
        initial = self.initial_interest_rate
        effective = self._effective_rate(rate)
        backing = self._backing_value(principals, yields, effective)
        ybt = self.source.num_yield_tokens_per_asset(backing, rate)

        surplus = 0
        if self.matured and rate > effective and rate >= initial:
            live_backing = self._backing_value(principals, yields, rate)
            surplus = self.source.num_yield_tokens_per_asset(live_backing - backing, rate)
        return RedemptionAmounts(ybt, backing, effective, surplus)

    def _backing_value(self, principals: int, yields: int, rate: int) -> int:
        initial = self.initial_interest_rate
        if rate < initial:
            # yields are worthless under negative yield
            return div_down(mul_down(principals, rate), initial)
        return principals + div_down(mul_down(yields, rate - initial), initial)

    def _check_redeem(
        self, caller: str, from_: str, principal_amount: int, yield_amount: int, recipient: str
    ) -> None:
        self._only_controller(caller)
        if recipient == ZERO_ADDRESS:
            raise ValidationError("recipient can not be 0x0")
        if principal_amount < 0 or yield_amount < 0:
            raise ValidationError("redeem amounts can not be negative")
        if principal_amount == 0 and yield_amount == 0:
            raise ValidationError("principalAmount and yieldAmount cannot both be 0")
        if self.principal_share.balance_of(from_) < principal_amount:
            raise ValidationError("Insufficient principals.")
        if self.yield_share.balance_of(from_) < yield_amount:
            raise ValidationError("Insufficient yields.")

    def _burn_and_quote(
        self, from_: str, principal_amount: int, yield_amount: int
    ) -> tuple[int, int, int]:
        rate = self._refresh()
        if not self.matured and principal_amount != yield_amount:
            raise LifecycleError("Inequal redemption not allowed before maturity.")

        quote = self.get_redemption_amounts(principal_amount, yield_amount, rate)
        fee_percent = (
            self.fees_config.mature_redeem_percent
            if self.matured
            else self.fees_config.early_redeem_percent
        )
        fee = mul_down(quote.yield_bearing, fee_percent)
        self.total_fees += fee + quote.surplus_fee

        self.principal_share.burn(from_, principal_amount)
        self.yield_share.burn(from_, yield_amount)
        return quote.yield_bearing - fee, fee, rate

    @transactional
    def redeem(
        self, caller: str, from_: str, principal_amount: int, yield_amount: int, recipient: str
    ) -> RedeemResult:
        """Burn claims held by ``from_`` and send the YBT payout to ``recipient``."""

        self._check_redeem(caller, from_, principal_amount, yield_amount, recipient)
        ybt, fee, rate = self._burn_and_quote(from_, principal_amount, yield_amount)
        self.yield_bearing_token.transfer(self.address, recipient, ybt)
        backing = self.source.num_assets_per_yield_token(ybt, rate)
        logger.debug("redeem from %s paid %s YBT (fee %s)", self.name, ybt, fee)
        return RedeemResult(ybt, backing, fee, rate)

    @transactional
    def redeem_to_backing(
        self, caller: str, from_: str, principal_amount: int, yield_amount: int, recipient: str
    ) -> RedeemResult:
        """Burn claims and withdraw the payout from the protocol as backing tokens."""

        self._check_redeem(caller, from_, principal_amount, yield_amount, recipient)
        ybt, fee, rate = self._burn_and_quote(from_, principal_amount, yield_amount)
        backing = self.source.redeem_to_backing(self.address, ybt, recipient)
        logger.debug("redeem from %s paid %s backing (fee %s YBT)", self.name, backing, fee)
        return RedeemResult(ybt, backing, fee, rate)

    # -----------------
    # Fees & recovery
    # -----------------

    @transactional
    def set_fees_config(self, caller: str, fees: FeesConfig) -> None:
        self._only_owner(caller)
        self._check_fees(fees)
        self.fees_config = fees

    @transactional
    def transfer_fees(self, caller: str, recipient: str, amount: int = MAX_UINT256) -> int:
        self._only_owner(caller)
        if recipient == ZERO_ADDRESS:
            raise ValidationError("recipient can not be 0x0")
        if amount < 0:
            raise ValidationError("fee amount can not be negative")
        if amount == MAX_UINT256:
            amount = self.total_fees
        elif amount > self.total_fees:
            raise ValidationError("not enough accumulated fees")
        self.total_fees -= amount
        self.yield_bearing_token.transfer(self.address, recipient, amount)
        self.chain.emit(FeesTransferred(self.chain.now, self.name, recipient, amount))
        logger.info("transferred %s fees from %s to %s", amount, self.name, recipient)
        return amount

    @transactional
    def governance_recover_ybt(self, caller: str, receiver: str) -> int:
        """Sweep every locked YBT to ``receiver`` once the source rate is exactly zero."""

        self._only_owner(caller)
        if self.source.current_rate() != 0:
            raise LifecycleError("rate must be 0")
        locked = self.locked_yield_bearing()
        if locked == 0:
            raise ValidationError("total locked YBT is 0")
        self.yield_bearing_token.transfer(self.address, receiver, locked)
        logger.info("recovered %s YBT from %s to %s", locked, self.name, receiver)
        return locked

    # -----------------
    # Views
    # -----------------

    def num_assets_per_yield_token(self, ybt_amount: int, rate: int) -> int:
        return self.source.num_assets_per_yield_token(ybt_amount, rate)

    def num_yield_tokens_per_asset(self, backing_amount: int, rate: int) -> int:
        return self.source.num_yield_tokens_per_asset(backing_amount, rate)

    def estimated_minted_shares(self, amount: int, is_backing: bool) -> int:
        """Shares a deposit of ``amount`` would mint at the live rate, fee included."""

        rate = self.source.current_rate()
        self._require_live_rate(rate)
        fee_percent = self.fees_config.deposit_percent
        if is_backing:
            backing = amount - mul_down(amount, fee_percent)
        else:
            backing = self.source.num_assets_per_yield_token(amount - mul_down(amount, fee_percent), rate)
        return div_down(mul_down(backing, self.initial_interest_rate), rate)

    def _estimated_yield(self, current_yield: int) -> int:
        if self.matured or self.chain.now >= self.maturity_time:
            return current_yield
        time_left = self.maturity_time - self.chain.now
        duration = self.maturity_time - self.start_time
        return current_yield + self.estimated_final_yield * time_left // duration

    def _share_prices(self, rate: int) -> tuple[int, int]:
        current_yield = div_down(self._effective_rate(rate), self.initial_interest_rate)
        estimated = self._estimated_yield(current_yield)
        principal = current_yield if estimated < ONE else div_down(current_yield, estimated)
        return principal, current_yield - principal

    @transactional
    def price_per_principal_share(self) -> int:
        return self._share_prices(self._refresh())[0]

    @transactional
    def price_per_yield_share(self) -> int:
        return self._share_prices(self._refresh())[1]

    def price_per_principal_share_stored(self) -> int:
        return self._share_prices(self.current_interest_rate)[0]

    def price_per_yield_share_stored(self) -> int:
        return self._share_prices(self.current_interest_rate)[1]

    def snapshot(self) -> PoolSnapshot:
        return PoolSnapshot(
            name=self.name,
            timestamp=self.chain.now,
            initial_interest_rate=self.initial_interest_rate,
            current_interest_rate=self.current_interest_rate,
            maturity_interest_rate=self.maturity_interest_rate,
            maturity_time=self.maturity_time,
            halt_time=self.halt_time,
            matured=self.matured,
            total_fees=self.total_fees,
            principal_supply=self.principal_share.total_supply,
            yield_supply=self.yield_share.total_supply,
            locked_ybt=self.locked_yield_bearing(),
        )


__all__ = ["YieldPool", "generate_share_names", "DEFAULT_MAX_FEES"]
