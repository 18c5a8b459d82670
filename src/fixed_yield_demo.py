from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from fixed_yield_lab import (
    HistoricalRateFeed,
    Visualizer,
    build_scenario,
    load_config,
    pool_summary,
    simulate_share_prices,
    synthetic_rate_path,
)
from fixed_yield_lab.analytics import rate_path_from_feed
from fixed_yield_lab.core.constants import DAY

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the demo using configuration from file or environment variables."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    cfg_file = os.getenv("FIXED_YIELD_CONFIG") or (sys.argv[1] if len(sys.argv) > 1 else None)
    cfg = load_config(cfg_file)

    if outdir_env := os.getenv("FIXED_YIELD_OUTDIR"):
        cfg.setdefault("output", {})["outdir"] = outdir_env

    sim_cfg = cfg["simulation"]
    scenario = build_scenario(cfg["pool"], cfg["amm"])
    step = int(float(sim_cfg.get("step_days", 1)) * DAY)
    days = int(sim_cfg.get("days", 120))

    if rates_csv := sim_cfg.get("rates_csv"):
        feed = HistoricalRateFeed(str(rates_csv))
        rates = rate_path_from_feed(feed, scenario.chain.now, days, step)
    else:
        shock_day = sim_cfg.get("shock_day")
        rates = synthetic_rate_path(
            days,
            initial_rate=float(cfg["pool"].get("initial_rate", 1.0)),
            annual_yield=float(sim_cfg.get("annual_yield", 0.05)),
            volatility=float(sim_cfg.get("volatility", 0.0)),
            seed=sim_cfg.get("seed"),
            shock_day=int(shock_day) if shock_day is not None else None,
            shock=float(sim_cfg.get("shock", 0.0)),
        )

    sim = simulate_share_prices(scenario, rates, step=step)
    summary = pool_summary(scenario.pool)
    print(summary.T.to_string())
    if sim["halted"].any():
        print(f"Pool halted at {sim.index[sim['halted'].to_numpy().argmax()]}")

    out = cfg.get("output", {})
    outdir = Path(out["outdir"]) if out.get("outdir") else None
    show = bool(out.get("show", True)) if not outdir else False
    charts = out.get("charts", [])

    if outdir:
        outdir.mkdir(parents=True, exist_ok=True)
        sim.to_csv(outdir / "simulation.csv")
        summary.to_csv(outdir / "pool_summary.csv")
        scenario.chain.events.to_dataframe().to_csv(outdir / "events.csv", index=False)

    if "share_prices" in charts:
        Visualizer.share_prices(
            sim,
            save_path=str(outdir / "share_prices.png") if outdir else None,
            show=show,
        )
    if "rates" in charts:
        Visualizer.line_chart(
            sim[["rate", "amm_rate"]],
            title="Interest rate and AMM rate",
            ylabel="Rate",
            save_path=str(outdir / "rates.png") if outdir else None,
            show=show,
        )


if __name__ == "__main__":
    main()
