"""Core domain types."""

from __future__ import annotations

from enum import IntEnum
from typing import NewType

from lobidx.core.errors import SchemaError

BookId = NewType("BookId", int)
Tick = NewType("Tick", int)
OrderIndex = NewType("OrderIndex", int)
OrderId = NewType("OrderId", int)
Units = NewType("Units", int)
PriceX96 = NewType("PriceX96", int)
TsSec = NewType("TsSec", int)

Address = NewType("Address", str)
PoolKey = NewType("PoolKey", str)

ADDRESS_ZERO = Address("0x0000000000000000000000000000000000000000")


class Side(IntEnum):
    BID = 0
    ASK = 1

    def opposite(self) -> "Side":
        return Side.ASK if self == Side.BID else Side.BID


def side_of_tick(tick: int) -> Side:
    """Non-positive ticks rest on the bid book, positive ticks on the ask book."""
    return Side.BID if tick <= 0 else Side.ASK


def parse_address(value: str) -> Address:
    v = value.strip().lower()
    if len(v) != 42 or not v.startswith("0x"):
        raise SchemaError(f"invalid address: {value!r}")
    try:
        int(v[2:], 16)
    except ValueError as exc:
        raise SchemaError(f"invalid address: {value!r}") from exc
    return Address(v)


def parse_pool_key(value: str) -> PoolKey:
    v = value.strip().lower()
    if not v.startswith("0x") or len(v) < 3:
        raise SchemaError(f"invalid pool key: {value!r}")
    try:
        int(v[2:], 16)
    except ValueError as exc:
        raise SchemaError(f"invalid pool key: {value!r}") from exc
    return PoolKey(v)
