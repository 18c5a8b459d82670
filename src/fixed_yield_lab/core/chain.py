"""Host ledger model: a clock, an event log and all-or-nothing calls.

Every stateful component registers itself with a :class:`Chain`.  A call
wrapped in :meth:`Chain.atomic` snapshots the instance state of all
participants and restores it if the call raises, so a rejected operation never
leaves partial ledger, pool or event state behind.

Attributes listed in a participant's ``_transient_attrs`` keep their latest
value across a revert (used by failure injection in the protocol mocks).
"""

from __future__ import annotations

import copy
import functools
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, TypeVar

from .models import Event
from .repositories import EventLog

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class Chain:
    """Single-threaded execution context shared by tokens, pools and AMMs."""

    def __init__(self, timestamp: int | None = None) -> None:
        if timestamp is None:
            timestamp = int(datetime.now(tz=UTC).timestamp())
        self._timestamp = int(timestamp)
        self._participants: list[Any] = []
        self._depth = 0
        self._nonce = 0
        self.events = EventLog()

    # -----------------
    # Clock
    # -----------------

    @property
    def now(self) -> int:
        return self._timestamp

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("time can only move forward")
        self._timestamp += int(seconds)
        return self._timestamp

    def set_time(self, timestamp: int) -> int:
        if timestamp < self._timestamp:
            raise ValueError("time can only move forward")
        self._timestamp = int(timestamp)
        return self._timestamp

    # -----------------
    # Participants
    # -----------------

    def new_address(self) -> str:
        self._nonce += 1
        return f"0x{self._nonce:040x}"

    def register(self, participant: Any) -> None:
        if not any(p is participant for p in self._participants):
            self._participants.append(participant)

    def emit(self, event: Event) -> None:
        self.events.add(event)

    # -----------------
    # Transactions
    # -----------------

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def _snapshot(self) -> list[tuple[Any, dict[str, Any]]]:
        # Participants and the chain itself are shared by reference so that
        # cross-references survive the copy untouched.
        memo: dict[int, Any] = {id(self): self}
        for participant in self._participants:
            memo[id(participant)] = participant
        saved = [(p, copy.deepcopy(vars(p), memo)) for p in self._participants]
        saved.append((self.events, copy.deepcopy(vars(self.events), memo)))
        return saved

    @staticmethod
    def _restore(saved: list[tuple[Any, dict[str, Any]]]) -> None:
        for participant, state in saved:
            keep = {
                name: participant.__dict__[name]
                for name in getattr(participant, "_transient_attrs", ())
                if name in participant.__dict__
            }
            participant.__dict__.clear()
            participant.__dict__.update(state)
            participant.__dict__.update(keep)

    @contextmanager
    def atomic(self) -> Iterator["Chain"]:
        """Run a block as one call; nested blocks join the outermost one."""

        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        saved = self._snapshot()
        self._depth = 1
        try:
            yield self
        except BaseException:
            self._restore(saved)
            logger.debug("call reverted; restored %d participants", len(saved))
            raise
        finally:
            self._depth = 0


def transactional(method: F) -> F:
    """Run a participant method inside ``self.chain.atomic()``."""

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        with self.chain.atomic():
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


__all__ = ["Chain", "transactional"]
