"""Interfaces to on-chain collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from lobidx.core.config import Role
from lobidx.core.types import Address, PriceX96


@dataclass(frozen=True, slots=True)
class TokenMeta:
    symbol: str
    name: str
    decimals: int


@dataclass(frozen=True, slots=True)
class LegLiquidity:
    reserve: int
    cancelable: int
    claimable: int

    @property
    def total(self) -> int:
        return self.reserve + self.cancelable + self.claimable


@dataclass(frozen=True, slots=True)
class PoolLiquidity:
    a: LegLiquidity
    b: LegLiquidity


@dataclass(frozen=True, slots=True)
class StrategyPosition:
    tick_a: int
    tick_b: int


class TickPriceOracle(Protocol):
    def to_price(self, tick: int) -> PriceX96:
        """Return the 2**96-scaled price for a tick."""


class RoleResolver(Protocol):
    def resolve(self, role: Role) -> Address:
        """Return the address bound to a role."""


class TokenMetadataProvider(Protocol):
    def get(self, address: Address) -> TokenMeta:
        """Return metadata for a token address."""


class PoolStateSource(Protocol):
    def get_liquidity(self, pool_key: str) -> PoolLiquidity:
        """Return current liquidity per currency leg."""

    def total_supply(self, pool_key: str) -> int:
        """Return the pool share supply."""

    def get_position(self, pool_key: str) -> StrategyPosition:
        """Return the strategy's current sub-book ticks."""
