"""Yearn-style vault priced by ``price_per_share``."""

from __future__ import annotations

from ..core.chain import Chain
from ..core.constants import ONE
from ..core.fixed_point import div_down, mul_down, to_wei
from ..ledger.tokens import Token
from .base import AccrualConvention, BaseYieldSource, FailureInjection, pay_out


class YearnVault(FailureInjection):
    def __init__(self, chain: Chain, backing_token: Token, price_per_share: int = ONE) -> None:
        self.chain = chain
        self.address = chain.new_address()
        self.backing_token = backing_token
        self.price_per_share = price_per_share
        self.vault_token = Token(chain, f"{backing_token.symbol} yVault", f"yv{backing_token.symbol}")
        chain.register(self)

    def set_rate(self, rate: float | str) -> None:
        self.price_per_share = to_wei(rate)

    def deposit(self, sender: str, amount: int, recipient: str) -> int:
        self._maybe_fail()
        self.backing_token.transfer(sender, self.address, amount)
        shares = div_down(amount, self.price_per_share)
        self.vault_token.mint(recipient, shares)
        return shares

    def withdraw(self, holder: str, shares: int, recipient: str) -> int:
        self._maybe_fail()
        self.vault_token.burn(holder, shares)
        backing = mul_down(shares, self.price_per_share)
        pay_out(self.backing_token, self.address, recipient, backing)
        return backing


class YearnSource(BaseYieldSource):
    protocol_name = "Yearn"
    convention = AccrualConvention.APPRECIATING

    def __init__(self, chain: Chain, vault: YearnVault) -> None:
        super().__init__(chain, vault.vault_token, vault.backing_token)
        self.vault = vault

    def current_rate(self) -> int:
        return self.vault.price_per_share

    def deposit(self, holder: str, amount: int, eth_value: int = 0) -> int:
        return self.vault.deposit(holder, amount, holder)

    def redeem_to_backing(self, holder: str, ybt_amount: int, recipient: str) -> int:
        return self.vault.withdraw(holder, ybt_amount, recipient)


__all__ = ["YearnVault", "YearnSource"]
