"""Single-step user entry points in front of registered pools."""

from __future__ import annotations

import logging

from ..core.chain import Chain, transactional
from ..core.errors import ValidationError
from ..core.models import Deposited, DepositResult, Redeemed, RedeemResult
from .engine import YieldPool

logger = logging.getLogger(__name__)


class Controller:
    """Move user tokens into and out of pools and forward the accounting calls.

    Users approve the controller on their YBT or backing token first; pools
    accept deposits and redemptions only from the controller address.
    """

    def __init__(self, chain: Chain) -> None:
        self.chain = chain
        self.address = chain.new_address()
        self._pools: dict[str, YieldPool] = {}
        chain.register(self)

    def register(self, pool: YieldPool) -> None:
        if pool.controller != self.address:
            raise ValidationError("pool is bound to a different controller")
        self._pools[pool.address] = pool

    def is_registered(self, pool: YieldPool) -> bool:
        return self._pools.get(pool.address) is pool

    def _require(self, pool: YieldPool) -> YieldPool:
        if not self.is_registered(pool):
            raise ValidationError("Unknown TempusPool.")
        return pool

    @transactional
    def deposit_yield_bearing(
        self, user: str, pool: YieldPool, ybt_amount: int, recipient: str | None = None
    ) -> DepositResult:
        self._require(pool)
        recipient = recipient or user
        pool.yield_bearing_token.transfer_from(self.address, user, pool.address, ybt_amount)
        result = pool.on_deposit_yield_bearing(self.address, ybt_amount, recipient)
        self._emit_deposit(pool, user, recipient, result, ybt_amount)
        return result

    @transactional
    def deposit_backing(
        self,
        user: str,
        pool: YieldPool,
        backing_amount: int,
        recipient: str | None = None,
        eth_value: int = 0,
    ) -> DepositResult:
        self._require(pool)
        recipient = recipient or user
        if pool.source.accepts_ether:
            # native value travels with the call; no allowance involved
            if eth_value:
                pool.backing_token.transfer(user, pool.address, eth_value)
        else:
            pool.backing_token.transfer_from(self.address, user, pool.address, backing_amount)
        result = pool.on_deposit_backing(self.address, backing_amount, recipient, eth_value)
        self._emit_deposit(pool, user, recipient, result, backing_amount)
        return result

    def _emit_deposit(
        self, pool: YieldPool, user: str, recipient: str, result: DepositResult, amount: int
    ) -> None:
        backing_value = pool.num_assets_per_yield_token(result.deposited_ybt, result.rate)
        self.chain.emit(
            Deposited(
                self.chain.now,
                pool.name,
                user,
                recipient,
                result.deposited_ybt,
                backing_value,
                result.minted_shares,
                result.rate,
                result.fee,
            )
        )
        logger.debug("%s deposited %s into %s", user, amount, pool.name)

    @transactional
    def redeem_to_yield_bearing(
        self,
        user: str,
        pool: YieldPool,
        principal_amount: int,
        yield_amount: int,
        recipient: str | None = None,
    ) -> RedeemResult:
        self._require(pool)
        recipient = recipient or user
        early = not pool.matured
        result = pool.redeem(self.address, user, principal_amount, yield_amount, recipient)
        self._emit_redeem(pool, user, recipient, principal_amount, yield_amount, result, early)
        return result

    @transactional
    def redeem_to_backing(
        self,
        user: str,
        pool: YieldPool,
        principal_amount: int,
        yield_amount: int,
        recipient: str | None = None,
    ) -> RedeemResult:
        self._require(pool)
        recipient = recipient or user
        early = not pool.matured
        result = pool.redeem_to_backing(self.address, user, principal_amount, yield_amount, recipient)
        self._emit_redeem(pool, user, recipient, principal_amount, yield_amount, result, early)
        return result

    def _emit_redeem(
        self,
        pool: YieldPool,
        user: str,
        recipient: str,
        principal_amount: int,
        yield_amount: int,
        result: RedeemResult,
        early: bool,
    ) -> None:
        self.chain.emit(
            Redeemed(
                self.chain.now,
                pool.name,
                user,
                recipient,
                principal_amount,
                yield_amount,
                result.redeemed_ybt,
                result.redeemed_backing,
                result.rate,
                result.fee,
                early and not pool.matured,
            )
        )

    @transactional
    def finalize(self, pool: YieldPool) -> None:
        self._require(pool)
        pool.finalize()


__all__ = ["Controller"]
