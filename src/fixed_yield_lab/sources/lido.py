"""Lido-style liquid staking: ether in, rebasing stETH out, no withdrawals."""

from __future__ import annotations

from ..core.chain import Chain
from ..core.constants import ONE
from ..core.errors import UnsupportedOperation
from ..core.fixed_point import to_wei
from ..ledger.tokens import RebasingToken, Token
from .base import AccrualConvention, BaseYieldSource, FailureInjection


class LidoStaking(FailureInjection):
    """Staking contract; ``ether`` is the native balance ledger of the chain."""

    def __init__(self, chain: Chain, ether: Token, pooled_eth_per_share: int = ONE) -> None:
        self.chain = chain
        self.address = chain.new_address()
        self.ether = ether
        self.pooled_eth_per_share = pooled_eth_per_share
        self.st_eth = RebasingToken(chain, "Liquid staked Ether 2.0", "stETH", self)
        chain.register(self)

    def rebase_index(self) -> int:
        return self.pooled_eth_per_share

    def set_rate(self, rate: float | str) -> None:
        self.pooled_eth_per_share = to_wei(rate)

    def get_pooled_eth_by_shares(self, shares: int) -> int:
        return shares * self.pooled_eth_per_share // ONE

    def submit(self, sender: str, value: int) -> int:
        self._maybe_fail()
        self.ether.transfer(sender, self.address, value)
        self.st_eth.mint(sender, value)
        return value


class LidoSource(BaseYieldSource):
    protocol_name = "Lido"
    convention = AccrualConvention.PEGGED
    accepts_ether = True

    def __init__(self, chain: Chain, staking: LidoStaking) -> None:
        super().__init__(chain, staking.st_eth, staking.ether)
        self.staking = staking

    def current_rate(self) -> int:
        return self.staking.get_pooled_eth_by_shares(ONE)

    def deposit(self, holder: str, amount: int, eth_value: int = 0) -> int:
        before = self.yield_bearing_token.balance_of(holder)
        self.staking.submit(holder, amount)
        return self.yield_bearing_token.balance_of(holder) - before

    def redeem_to_backing(self, holder: str, ybt_amount: int, recipient: str) -> int:
        raise UnsupportedOperation("LidoTempusPool.withdrawFromUnderlyingProtocol not supported")


__all__ = ["LidoStaking", "LidoSource"]
