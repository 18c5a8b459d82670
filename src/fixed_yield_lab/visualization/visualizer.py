"""Matplotlib-based chart helpers for fixed_yield_lab."""

from __future__ import annotations

import pandas as pd


class Visualizer:
    """Collection of static helpers that turn simulation outputs into charts."""

    @staticmethod
    def _plt():
        try:
            import matplotlib.pyplot as plt
        except Exception as exc:  # pragma: no cover
            raise RuntimeError(
                "matplotlib is required for visualization. Install via pip."
            ) from exc
        return plt

    @staticmethod
    def line_chart(
        data: pd.DataFrame | pd.Series,
        *,
        title: str,
        ylabel: str,
        save_path: str | None = None,
        show: bool = True,
    ) -> None:
        """Plot time-series data as a line chart."""
        df = data.to_frame() if isinstance(data, pd.Series) else data
        if df.empty:
            return
        plt = Visualizer._plt()
        plt.figure(figsize=(10, 6))
        for col in df.columns:
            plt.plot(df.index, df[col], label=col)
        if len(df.columns) > 1:
            plt.legend()
        plt.xlabel("Date")
        plt.ylabel(ylabel)
        plt.title(title)
        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, bbox_inches="tight")
        if show:
            plt.show()

    @staticmethod
    def share_prices(
        sim: pd.DataFrame,
        title: str = "Principal and Yield share prices",
        *,
        save_path: str | None = None,
        show: bool = True,
    ) -> None:
        """Plot both claim prices and mark the halt or maturity point."""
        if sim.empty:
            return
        plt = Visualizer._plt()
        plt.figure(figsize=(10, 6))
        plt.plot(sim.index, sim["principal_price"], label="Principal")
        plt.plot(sim.index, sim["yield_price"], label="Yield")
        if "matured" in sim.columns and sim["matured"].any():
            plt.axvline(sim.index[sim["matured"].to_numpy().argmax()], linestyle="--", color="grey")
        plt.legend()
        plt.xlabel("Date")
        plt.ylabel("Price (backing tokens)")
        plt.title(title)
        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, bbox_inches="tight")
        if show:
            plt.show()


__all__ = ["Visualizer"]
