"""Aave-style money market: rebasing aTokens over a ray liquidity index."""

from __future__ import annotations

import logging

from ..core.chain import Chain
from ..core.constants import ONE, RAY
from ..core.fixed_point import to_wei
from ..ledger.tokens import RebasingToken, Token
from .base import AccrualConvention, BaseYieldSource, FailureInjection, pay_out

logger = logging.getLogger(__name__)

_RAY_TO_WAD = RAY // ONE


class AaveLendingPool(FailureInjection):
    """In-memory lending pool minting an aToken for one reserve."""

    def __init__(self, chain: Chain, backing_token: Token, liquidity_index: int = RAY) -> None:
        self.chain = chain
        self.address = chain.new_address()
        self.backing_token = backing_token
        self.liquidity_index = liquidity_index
        self.a_token = RebasingToken(
            chain, f"Aave interest bearing {backing_token.symbol}", f"a{backing_token.symbol}", self
        )
        chain.register(self)

    def rebase_index(self) -> int:
        return self.liquidity_index // _RAY_TO_WAD

    def set_liquidity_index(self, index: int) -> None:
        self.liquidity_index = index

    def set_rate(self, rate: float | str) -> None:
        """Set the index from a human-readable rate such as ``1.05``."""

        self.liquidity_index = to_wei(rate) * _RAY_TO_WAD

    def get_reserve_normalized_income(self) -> int:
        return self.liquidity_index

    def deposit(self, sender: str, amount: int, on_behalf_of: str) -> None:
        self._maybe_fail()
        self.backing_token.transfer(sender, self.address, amount)
        self.a_token.mint(on_behalf_of, amount)

    def withdraw(self, holder: str, amount: int, to: str) -> int:
        self._maybe_fail()
        self.a_token.burn(holder, amount)
        pay_out(self.backing_token, self.address, to, amount)
        return amount


class AaveSource(BaseYieldSource):
    """Adapter over :class:`AaveLendingPool`; aTokens stay pegged 1:1."""

    protocol_name = "Aave"
    convention = AccrualConvention.PEGGED

    def __init__(self, chain: Chain, lending_pool: AaveLendingPool) -> None:
        super().__init__(chain, lending_pool.a_token, lending_pool.backing_token)
        self.lending_pool = lending_pool

    def current_rate(self) -> int:
        # ray -> wad
        return self.lending_pool.get_reserve_normalized_income() // _RAY_TO_WAD

    def deposit(self, holder: str, amount: int, eth_value: int = 0) -> int:
        before = self.yield_bearing_token.balance_of(holder)
        self.lending_pool.deposit(holder, amount, holder)
        minted = self.yield_bearing_token.balance_of(holder) - before
        logger.debug("aave deposit %s -> %s aTokens", amount, minted)
        return minted

    def redeem_to_backing(self, holder: str, ybt_amount: int, recipient: str) -> int:
        return self.lending_pool.withdraw(holder, ybt_amount, recipient)


__all__ = ["AaveLendingPool", "AaveSource"]
