"""Rari-style fund manager: an 18-decimal fund token over a lower-decimal stablecoin."""

from __future__ import annotations

import logging

from ..core.chain import Chain
from ..core.constants import ONE
from ..core.fixed_point import div_down, div_up, to_wei
from ..ledger.tokens import Token
from .base import AccrualConvention, BaseYieldSource, FailureInjection, pay_out

logger = logging.getLogger(__name__)


class RariFundManager(FailureInjection):
    """Fund manager quoting its token price as an 18-decimal backing value."""

    def __init__(self, chain: Chain, backing_token: Token, rate: int = ONE) -> None:
        self.chain = chain
        self.address = chain.new_address()
        self.backing_token = backing_token
        self.rate = rate
        self.fund_token = Token(chain, f"Rari {backing_token.symbol} Pool Token", f"R{backing_token.symbol}PT")
        self._scale = 10 ** (self.fund_token.decimals - backing_token.decimals)
        chain.register(self)

    def set_rate(self, rate: float | str) -> None:
        self.rate = to_wei(rate)

    def fund_token_price(self) -> int:
        return self.rate

    def deposit(self, sender: str, amount: int) -> int:
        self._maybe_fail()
        self.backing_token.transfer(sender, self.address, amount)
        minted = div_down(amount * self._scale, self.rate)
        self.fund_token.mint(sender, minted)
        return minted

    def withdraw(self, holder: str, amount: int, to: str) -> int:
        """Pay ``amount`` backing tokens to ``to``, burning the fund tokens they cost."""

        self._maybe_fail()
        burned = div_up(amount * self._scale, self.rate)
        self.fund_token.burn(holder, burned)
        pay_out(self.backing_token, self.address, to, amount)
        return burned


class RariSource(BaseYieldSource):
    protocol_name = "Rari"
    convention = AccrualConvention.APPRECIATING

    def __init__(self, chain: Chain, fund_manager: RariFundManager) -> None:
        super().__init__(chain, fund_manager.fund_token, fund_manager.backing_token)
        self.fund_manager = fund_manager

    def current_rate(self) -> int:
        return self.fund_manager.fund_token_price()

    def deposit(self, holder: str, amount: int, eth_value: int = 0) -> int:
        return self.fund_manager.deposit(holder, amount)

    def redeem_to_backing(self, holder: str, ybt_amount: int, recipient: str) -> int:
        backing = self.num_assets_per_yield_token(ybt_amount, self.current_rate())
        burned = self.fund_manager.withdraw(holder, backing, recipient)
        logger.debug("rari withdrew %s backing for %s of %s fund tokens", backing, burned, ybt_amount)
        return backing


__all__ = ["RariFundManager", "RariSource"]
