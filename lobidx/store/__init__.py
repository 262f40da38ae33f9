"""Entity records and stores."""

from __future__ import annotations

from lobidx.store.api import EntityStore
from lobidx.store.entities import (
    SINGLETON_ID,
    Book,
    ChartLog,
    Depth,
    LatestBlock,
    LatestPoolSpread,
    OpenOrder,
    OrderIndex,
    PoolSnapshot,
    PoolSpreadProfit,
    PoolVolume,
    Token,
)
from lobidx.store.memory import BufferedStore, MemoryStore

__all__ = [
    "Book",
    "BufferedStore",
    "ChartLog",
    "Depth",
    "EntityStore",
    "LatestBlock",
    "LatestPoolSpread",
    "MemoryStore",
    "OpenOrder",
    "OrderIndex",
    "PoolSnapshot",
    "PoolSpreadProfit",
    "PoolVolume",
    "SINGLETON_ID",
    "Token",
]
