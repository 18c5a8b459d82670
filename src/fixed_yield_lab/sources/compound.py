"""Compound-style market: cToken balances fixed, exchange rate grows."""

from __future__ import annotations

from ..core.chain import Chain
from ..core.constants import ONE
from ..core.fixed_point import div_down, mul_down, to_wei
from ..ledger.tokens import Token
from .base import AccrualConvention, BaseYieldSource, FailureInjection, pay_out


class CompoundMarket(FailureInjection):
    def __init__(self, chain: Chain, backing_token: Token, exchange_rate: int = ONE) -> None:
        self.chain = chain
        self.address = chain.new_address()
        self.backing_token = backing_token
        self.exchange_rate = exchange_rate
        self.c_token = Token(chain, f"Compound {backing_token.symbol}", f"c{backing_token.symbol}")
        chain.register(self)

    def set_rate(self, rate: float | str) -> None:
        self.exchange_rate = to_wei(rate)

    def exchange_rate_current(self) -> int:
        return self.exchange_rate

    def mint(self, sender: str, amount: int) -> int:
        self._maybe_fail()
        self.backing_token.transfer(sender, self.address, amount)
        minted = div_down(amount, self.exchange_rate)
        self.c_token.mint(sender, minted)
        return minted

    def redeem(self, holder: str, c_amount: int, to: str) -> int:
        self._maybe_fail()
        self.c_token.burn(holder, c_amount)
        backing = mul_down(c_amount, self.exchange_rate)
        pay_out(self.backing_token, self.address, to, backing)
        return backing


class CompoundSource(BaseYieldSource):
    protocol_name = "Compound"
    convention = AccrualConvention.APPRECIATING

    def __init__(self, chain: Chain, market: CompoundMarket) -> None:
        super().__init__(chain, market.c_token, market.backing_token)
        self.market = market

    def current_rate(self) -> int:
        return self.market.exchange_rate_current()

    def deposit(self, holder: str, amount: int, eth_value: int = 0) -> int:
        return self.market.mint(holder, amount)

    def redeem_to_backing(self, holder: str, ybt_amount: int, recipient: str) -> int:
        return self.market.redeem(holder, ybt_amount, recipient)


__all__ = ["CompoundMarket", "CompoundSource"]
