"""Pool accounting engine, halting monitor and controller."""

from __future__ import annotations

from .controller import Controller
from .engine import DEFAULT_MAX_FEES, YieldPool, generate_share_names
from .halting import NegativeYieldMonitor

__all__ = [
    "YieldPool",
    "Controller",
    "NegativeYieldMonitor",
    "generate_share_names",
    "DEFAULT_MAX_FEES",
]
