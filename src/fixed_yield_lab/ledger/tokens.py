"""Fungible token bookkeeping: balances, transfers and allowances."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

from ..core.chain import Chain
from ..core.constants import MAX_UINT256, ONE, ZERO_ADDRESS
from ..core.errors import ValidationError
from ..core.fixed_point import div_down, mul_down

if TYPE_CHECKING:
    from ..pool.engine import YieldPool


class Token:
    """Plain fungible balance mapping keyed by address strings."""

    def __init__(self, chain: Chain, name: str, symbol: str, decimals: int = 18) -> None:
        self.chain = chain
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.address = chain.new_address()
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        chain.register(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol})"

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    @staticmethod
    def _check_amount(amount: int) -> None:
        if amount < 0:
            raise ValidationError("ERC20: amount can not be negative")

    def mint(self, to: str, amount: int) -> None:
        self._check_amount(amount)
        self._balances[to] = self._balances.get(to, 0) + amount
        self._total_supply += amount

    def burn(self, account: str, amount: int) -> None:
        self._check_amount(amount)
        balance = self.balance_of(account)
        if amount > balance:
            raise ValidationError("ERC20: burn amount exceeds balance")
        self._balances[account] = balance - amount
        self._total_supply -= amount

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._check_amount(amount)
        if recipient == ZERO_ADDRESS:
            raise ValidationError("ERC20: transfer to the zero address")
        balance = self.balance_of(sender)
        if amount > balance:
            raise ValidationError("ERC20: transfer amount exceeds balance")
        self._balances[sender] = balance - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        self._check_amount(amount)
        self._allowances[(owner, spender)] = amount
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        self._check_amount(amount)
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            raise ValidationError("ERC20: transfer amount exceeds allowance")
        self.transfer(owner, recipient, amount)
        if allowed != MAX_UINT256:
            self._allowances[(owner, spender)] = allowed - amount
        return True


class RebaseIndex(Protocol):
    """Anything exposing the wad multiplier applied to stored balances."""

    def rebase_index(self) -> int: ...


class RebasingToken(Token):
    """Token whose balances grow with an external index.

    Balances are stored as index-independent shares; :meth:`balance_of`
    multiplies them by the current index, so yield shows up as a larger
    balance rather than a higher price.
    """

    def __init__(
        self,
        chain: Chain,
        name: str,
        symbol: str,
        index_source: RebaseIndex,
        decimals: int = 18,
    ) -> None:
        super().__init__(chain, name, symbol, decimals)
        self.index_source = index_source

    def _index(self) -> int:
        index = self.index_source.rebase_index()
        return index if index > 0 else ONE

    def shares_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    @property
    def total_shares(self) -> int:
        return self._total_supply

    @property
    def total_supply(self) -> int:
        return mul_down(self._total_supply, self._index())

    def balance_of(self, account: str) -> int:
        return mul_down(self.shares_of(account), self._index())

    def _to_shares(self, amount: int, account: str | None = None) -> int:
        # Moving a whole balance moves every share, leaving no dust behind.
        if account is not None and amount == self.balance_of(account):
            return self.shares_of(account)
        return div_down(amount, self._index())

    def mint(self, to: str, amount: int) -> None:
        super().mint(to, self._to_shares(amount))

    def burn(self, account: str, amount: int) -> None:
        self._check_amount(amount)
        if amount > self.balance_of(account):
            raise ValidationError("ERC20: burn amount exceeds balance")
        shares = self._to_shares(amount, account)
        # stored balances are shares; the base class would mix in the index
        self._balances[account] = self.shares_of(account) - shares
        self._total_supply -= shares

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._check_amount(amount)
        if recipient == ZERO_ADDRESS:
            raise ValidationError("ERC20: transfer to the zero address")
        if amount > self.balance_of(sender):
            raise ValidationError("ERC20: transfer amount exceeds balance")
        shares = self._to_shares(amount, sender)
        self._balances[sender] = self.shares_of(sender) - shares
        self._balances[recipient] = self.shares_of(recipient) + shares
        return True


class ShareKind(str, Enum):
    PRINCIPAL = "principal"
    YIELD = "yield"


class PoolShare(Token):
    """Principal or Yield claim minted and burned by its :class:`YieldPool`."""

    def __init__(
        self,
        chain: Chain,
        pool: "YieldPool",
        kind: ShareKind,
        name: str,
        symbol: str,
        decimals: int = 18,
    ) -> None:
        super().__init__(chain, name, symbol, decimals)
        self.pool = pool
        self.kind = kind

    def price_per_share(self) -> int:
        if self.kind is ShareKind.PRINCIPAL:
            return self.pool.price_per_principal_share()
        return self.pool.price_per_yield_share()

    def price_per_share_stored(self) -> int:
        if self.kind is ShareKind.PRINCIPAL:
            return self.pool.price_per_principal_share_stored()
        return self.pool.price_per_yield_share_stored()


__all__ = ["Token", "RebaseIndex", "RebasingToken", "ShareKind", "PoolShare"]
