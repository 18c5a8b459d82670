"""Tests for visualization helpers capturing Matplotlib interactions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pandas as pd
import pytest

from fixed_yield_lab.visualization import Visualizer


class MatplotlibSpy:
    """Spy object replicating the minimal Matplotlib API used by Visualizer."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def _record(self, name: str, args: Iterable[Any] = (), **kwargs: Any) -> None:
        self.calls.append((name, tuple(args), dict(kwargs)))

    # plotting primitives -------------------------------------------------
    def figure(self, *args: Any, **kwargs: Any) -> None:  # pragma: no cover - simple proxy
        self._record("figure", args, **kwargs)

    def plot(self, x: Iterable[Any], y: Iterable[Any], *args: Any, **kwargs: Any) -> None:
        self._record("plot", (list(x), list(y), *args), **kwargs)

    def axvline(self, *args: Any, **kwargs: Any) -> None:
        self._record("axvline", args, **kwargs)

    # labelling helpers ---------------------------------------------------
    def title(self, *args: Any, **kwargs: Any) -> None:
        self._record("title", args, **kwargs)

    def ylabel(self, *args: Any, **kwargs: Any) -> None:
        self._record("ylabel", args, **kwargs)

    def xlabel(self, *args: Any, **kwargs: Any) -> None:
        self._record("xlabel", args, **kwargs)

    def legend(self, *args: Any, **kwargs: Any) -> None:
        self._record("legend", args, **kwargs)

    def tight_layout(self, *args: Any, **kwargs: Any) -> None:
        self._record("tight_layout", args, **kwargs)

    def savefig(self, *args: Any, **kwargs: Any) -> None:
        self._record("savefig", args, **kwargs)

    def show(self, *args: Any, **kwargs: Any) -> None:
        self._record("show", args, **kwargs)

    # utilities -----------------------------------------------------------
    def get_call(self, name: str) -> tuple[str, tuple[Any, ...], dict[str, Any]]:
        for call in self.calls:
            if call[0] == name:
                return call
        msg = f"no call named {name!r} recorded"
        raise AssertionError(msg)

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture()
def spy(monkeypatch: pytest.MonkeyPatch) -> MatplotlibSpy:
    canvas = MatplotlibSpy()
    monkeypatch.setattr(Visualizer, "_plt", staticmethod(lambda: canvas))
    return canvas


def _simulation(matured: list[bool]) -> pd.DataFrame:
    index = pd.date_range("2024-01-01", periods=len(matured), freq="D", tz="UTC")
    return pd.DataFrame(
        {
            "principal_price": [0.95, 0.97, 1.0][: len(matured)],
            "yield_price": [0.05, 0.04, 0.02][: len(matured)],
            "matured": matured,
        },
        index=index,
    )


def test_line_chart_plots_each_series(spy: MatplotlibSpy) -> None:
    data = pd.DataFrame(
        {
            "rate": [1.0, 1.1],
            "amm_rate": [1.0, 0.95],
        },
        index=pd.date_range("2024-01-01", periods=2, freq="D"),
    )

    Visualizer.line_chart(data, title="Rates", ylabel="Rate", show=False, save_path=None)

    plot_calls = [call for call in spy.calls if call[0] == "plot"]
    assert len(plot_calls) == data.shape[1]
    expected_index = list(data.index)
    for column, call in zip(data.columns, plot_calls, strict=True):
        assert call[1][0] == expected_index
        assert call[1][1] == data[column].tolist()
        assert call[2]["label"] == column

    ylabel_call = spy.get_call("ylabel")
    assert ylabel_call[1][0] == "Rate"

    assert any(call[0] == "legend" for call in spy.calls)
    assert "show" not in spy.names()


def test_share_prices_marks_maturity(spy: MatplotlibSpy) -> None:
    sim = _simulation([False, True, True])

    Visualizer.share_prices(sim, title="Claims", save_path="prices.png", show=False)

    labels = [call[2]["label"] for call in spy.calls if call[0] == "plot"]
    assert labels == ["Principal", "Yield"]
    axvline = spy.get_call("axvline")
    assert axvline[1][0] == sim.index[1]
    assert spy.get_call("savefig")[1][0] == "prices.png"
    assert spy.get_call("title")[1][0] == "Claims"


def test_share_prices_without_maturity_has_no_marker(spy: MatplotlibSpy) -> None:
    Visualizer.share_prices(_simulation([False, False]), show=True)
    assert "axvline" not in spy.names()
    assert "show" in spy.names()


def test_empty_inputs_draw_nothing(spy: MatplotlibSpy) -> None:
    Visualizer.line_chart(pd.DataFrame(), title="x", ylabel="y", show=False)
    Visualizer.share_prices(pd.DataFrame(), show=False)
    assert spy.calls == []
