import sys
from pathlib import Path


# Ensure the package is importable without installation when running tests locally
pkg_src = Path(__file__).resolve().parents[1] / "src"
if str(pkg_src) not in sys.path:
    sys.path.insert(0, str(pkg_src))

from collections.abc import Callable  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402

from fixed_yield_lab.analytics.simulation import make_source  # noqa: E402
from fixed_yield_lab.core import MAX_UINT256, Chain, FeesConfig, from_wei, to_wei  # noqa: E402
from fixed_yield_lab.core.constants import DAY  # noqa: E402
from fixed_yield_lab.ledger import Token  # noqa: E402
from fixed_yield_lab.pool import Controller, YieldPool  # noqa: E402

START = 1_700_000_000
OWNER = "0xowner"


class PoolEnv:
    """A pool registered with a controller, plus float-friendly helpers."""

    def __init__(
        self,
        chain: Chain,
        protocol: str = "aave",
        *,
        rate: float = 1.0,
        estimated_yield: float = 0.1,
        duration: int = 60 * DAY,
        fees: FeesConfig | None = None,
    ) -> None:
        self.chain = chain
        self.owner = OWNER
        self.backing, self.protocol, self.source = make_source(chain, protocol)
        self.protocol.set_rate(rate)
        self.controller = Controller(chain)
        self.pool = YieldPool(
            chain,
            self.source,
            controller=self.controller.address,
            owner=self.owner,
            maturity_time=chain.now + duration,
            estimated_final_yield=to_wei(estimated_yield),
            fees_config=fees,
        )
        self.controller.register(self.pool)

    @property
    def ybt(self) -> Token:
        return self.source.yield_bearing_token

    def set_rate(self, rate: float) -> None:
        self.protocol.set_rate(rate)

    def _backing_units(self, amount: float) -> int:
        return to_wei(amount, self.backing.decimals)

    def _share_units(self, amount: float) -> int:
        return to_wei(amount, self.pool.principal_share.decimals)

    def backing_balance(self, user: str) -> Decimal:
        return from_wei(self.backing.balance_of(user), self.backing.decimals)

    def give_ybt(self, user: str, amount: float) -> None:
        self.ybt.mint(user, to_wei(amount))
        self.ybt.approve(user, self.controller.address, MAX_UINT256)

    def give_backing(self, user: str, amount: float) -> None:
        self.backing.mint(user, self._backing_units(amount))
        self.backing.approve(user, self.controller.address, MAX_UINT256)

    def deposit(self, user: str, amount: float, recipient: str | None = None):
        return self.controller.deposit_yield_bearing(user, self.pool, to_wei(amount), recipient)

    def deposit_backing(self, user: str, amount: float, eth_value: float = 0.0):
        return self.controller.deposit_backing(
            user, self.pool, self._backing_units(amount), eth_value=self._backing_units(eth_value)
        )

    def redeem(self, user: str, principals: float, yields: float, *, to_backing: bool = False):
        amounts = self._share_units(principals), self._share_units(yields)
        if to_backing:
            return self.controller.redeem_to_backing(user, self.pool, *amounts)
        return self.controller.redeem_to_yield_bearing(user, self.pool, *amounts)

    def principals(self, user: str) -> Decimal:
        share = self.pool.principal_share
        return from_wei(share.balance_of(user), share.decimals)

    def yields(self, user: str) -> Decimal:
        share = self.pool.yield_share
        return from_wei(share.balance_of(user), share.decimals)

    def ybt_balance(self, user: str) -> Decimal:
        return from_wei(self.ybt.balance_of(user))

    def to_maturity(self) -> None:
        self.chain.set_time(self.pool.maturity_time)


@pytest.fixture()
def chain() -> Chain:
    return Chain(timestamp=START)


@pytest.fixture()
def make_env(chain: Chain) -> Callable[..., PoolEnv]:
    def factory(protocol: str = "aave", **kwargs: Any) -> PoolEnv:
        return PoolEnv(chain, protocol, **kwargs)

    return factory
