"""In-memory repositories for fixed_yield_lab events."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import pandas as pd

from .models import Event


class EventLog:
    """Append-only event collection with pandas export."""

    def __init__(self, events: Iterable[Event] | None = None) -> None:
        self._events: list[Event] = list(events) if events else []

    def add(self, event: Event) -> None:
        self._events.append(event)

    def extend(self, items: Iterable[Event]) -> None:
        self._events.extend(items)

    def filter(
        self,
        *,
        kinds: list[str] | None = None,
        since: int | None = None,
        until: int | None = None,
    ) -> "EventLog":
        res: list[Event] = []
        for event in self._events:
            if kinds and event.kind not in kinds:
                continue
            if since is not None and event.timestamp < since:
                continue
            if until is not None and event.timestamp > until:
                continue
            res.append(event)
        return EventLog(res)

    def of_type(self, cls: type[Event]) -> list[Event]:
        return [event for event in self._events if isinstance(event, cls)]

    def to_dataframe(self) -> pd.DataFrame:
        if not self._events:
            return pd.DataFrame(columns=["timestamp", "event"])
        df = pd.DataFrame([event.to_dict() for event in self._events])
        df["timestamp"] = pd.to_datetime(df["timestamp"], unit="s", utc=True)
        return df

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)


__all__ = ["EventLog"]
