"""TOML configuration for simulations and the demo script."""

from __future__ import annotations

import copy
import logging
import tomllib
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "pool": {
        "protocol": "compound",
        "initial_rate": 1.0,
        "estimated_yield": 0.1,
        "maturity_days": 90,
        "deposit": 1_000.0,
        "deposit_fee": 0.0,
        "early_redeem_fee": 0.0,
        "mature_redeem_fee": 0.0,
        "halt_days": 7,
    },
    "amm": {
        "amplification": 5,
        "swap_fee": 0.002,
        "liquidity_fraction": 0.5,
    },
    "simulation": {
        "days": 120,
        "step_days": 1,
        "annual_yield": 0.05,
        "volatility": 0.0,
        "seed": 42,
        "shock_day": None,
        "shock": 0.0,
        "rates_csv": None,
    },
    "output": {"outdir": None, "show": True, "charts": ["share_prices", "rates"]},
}


def load_config(path: str | Path | None) -> dict[str, Any]:
    """Load configuration from a TOML file and merge with defaults.

    Parameters
    ----------
    path:
        Optional path to a configuration file. When ``None`` or missing, the
        built-in defaults are used.

    Returns
    -------
    dict[str, Any]
        Configuration dictionary with any file overrides applied.
    """

    cfg = copy.deepcopy(DEFAULTS)
    cfg_path = Path(path) if path else None

    if cfg_path and cfg_path.is_file():
        with open(cfg_path, "rb") as f:
            file_cfg = tomllib.load(f)
        for k, v in file_cfg.items():
            if isinstance(v, dict) and isinstance(cfg.get(k), dict):
                cfg[k].update(v)
            else:
                cfg[k] = v
    elif cfg_path:
        logger.warning("Config file not found at %s. Using defaults.", cfg_path)

    return cfg


__all__ = ["DEFAULTS", "load_config"]
