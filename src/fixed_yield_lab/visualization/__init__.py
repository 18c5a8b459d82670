"""Visualization helpers for :mod:`fixed_yield_lab`."""

from __future__ import annotations

from .visualizer import Visualizer

__all__ = ["Visualizer"]
