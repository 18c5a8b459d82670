"""CSV-backed historical exchange rates."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from ..core.fixed_point import to_wei

logger = logging.getLogger(__name__)


class HistoricalRateFeed:
    """Step-wise exchange rate loaded from a CSV with ``timestamp`` and ``rate``.

    ``timestamp`` may be UNIX seconds or any string :func:`pandas.to_datetime`
    understands.  The rate at a time ``t`` is the last row at or before ``t``;
    earlier times get the first row.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._frame: pd.DataFrame | None = None

    def load(self) -> pd.DataFrame:
        if self._frame is not None:
            return self._frame
        df = pd.read_csv(self.path)
        required = {"timestamp", "rate"}
        missing = required.difference(df.columns)
        if missing:
            raise ValueError(f"CSV missing columns: {missing}")
        if pd.api.types.is_numeric_dtype(df["timestamp"]):
            ts = pd.to_datetime(df["timestamp"], unit="s", utc=True)
        else:
            ts = pd.to_datetime(df["timestamp"], utc=True)
        df = pd.DataFrame({"rate": df["rate"].astype(float).to_numpy()}, index=ts)
        df.index.name = "timestamp"
        df = df.sort_index()
        if (df["rate"] < 0).any():
            raise ValueError("rates must be non-negative")
        self._frame = df
        logger.debug("loaded %d rate observations from %s", len(df), self.path)
        return df

    def timestamps(self) -> list[int]:
        return [int(ts.timestamp()) for ts in self.load().index]

    def rate_at(self, timestamp: int) -> float:
        df = self.load()
        epoch = np.array([ts.timestamp() for ts in df.index])
        pos = int(np.searchsorted(epoch, timestamp, side="right")) - 1
        return float(df["rate"].iloc[max(pos, 0)])

    def wad_rate_at(self, timestamp: int) -> int:
        return to_wei(self.rate_at(timestamp))


__all__ = ["HistoricalRateFeed"]
