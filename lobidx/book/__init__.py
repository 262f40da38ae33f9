"""Order book ledgers: depth, open orders, FIFO fill allocation."""

from __future__ import annotations

from lobidx.book.allocator import Allocation, OrderFill, allocate_fill
from lobidx.book.depth import DepthLedger
from lobidx.book.orders import OpenOrderLedger

__all__ = [
    "Allocation",
    "DepthLedger",
    "OpenOrderLedger",
    "OrderFill",
    "allocate_fill",
]
