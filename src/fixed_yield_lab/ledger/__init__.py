"""Claim and asset token ledgers."""

from __future__ import annotations

from .tokens import PoolShare, RebaseIndex, RebasingToken, ShareKind, Token

__all__ = ["Token", "RebaseIndex", "RebasingToken", "ShareKind", "PoolShare"]
