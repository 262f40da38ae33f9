"""Collaborator interfaces: oracle, roles, token metadata, pool state."""

from __future__ import annotations

from lobidx.chain.api import (
    LegLiquidity,
    PoolLiquidity,
    PoolStateSource,
    RoleResolver,
    StrategyPosition,
    TickPriceOracle,
    TokenMeta,
    TokenMetadataProvider,
)
from lobidx.chain.static import (
    NATIVE_TOKEN,
    UNKNOWN_TOKEN,
    StaticPoolSource,
    StaticTokenProvider,
    TickMathOracle,
)

__all__ = [
    "LegLiquidity",
    "NATIVE_TOKEN",
    "PoolLiquidity",
    "PoolStateSource",
    "RoleResolver",
    "StaticPoolSource",
    "StaticTokenProvider",
    "StrategyPosition",
    "TickMathOracle",
    "TokenMeta",
    "TokenMetadataProvider",
    "UNKNOWN_TOKEN",
]
