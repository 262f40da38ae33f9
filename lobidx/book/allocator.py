"""FIFO fill allocation across the resting orders of one price level.

A take of ``units`` at (book, tick) is spread over the orders at that level in
order-index order, starting from the level's cursor: the earliest order that
is not fully taken is always filled first, and one take may exhaust several
orders. Indexes whose order no longer exists (fully resolved and deleted)
are skipped without consuming any of the take.

The walk only terminates if ``units`` does not exceed the resting liquidity
at the level; callers must check that against the depth first.
"""

from __future__ import annotations

from dataclasses import dataclass

from lobidx.book.orders import OpenOrderLedger
from lobidx.core.checked import Checked
from lobidx.core.errors import AccountingError, MissingEntityError
from lobidx.core.order_id import encode_order_id
from lobidx.store.api import EntityStore
from lobidx.store.entities import Book, OpenOrder, OrderIndex, depth_id


@dataclass(frozen=True, slots=True)
class OrderFill:
    order_id: str
    units: int
    fully_filled: bool


@dataclass(frozen=True, slots=True)
class Allocation:
    start_index: int
    end_index: int
    fills: tuple[OrderFill, ...]


def allocate_fill(
    store: EntityStore,
    orders: OpenOrderLedger,
    book: Book,
    tick: int,
    units: int,
    *,
    max_vacant_scan: int | None = None,
) -> Checked[Allocation]:
    """Fill resting orders at (book, tick) in FIFO order and advance the cursor.

    ``max_vacant_scan`` bounds consecutive vacant indexes; None scans without
    limit. The walk is planned before any write, so nothing is stored when the
    bound is exceeded.
    """
    cursor = store.load(OrderIndex, depth_id(book.id, tick))
    if cursor is None:
        raise MissingEntityError(f"OrderIndex not found: {depth_id(book.id, tick)}")

    start = cursor.latest_taken_order_index
    index = start
    remaining = units
    vacant = 0
    plan: list[tuple[OpenOrder, int]] = []
    while remaining > 0:
        order = orders.load(encode_order_id(int(book.id), tick, index))
        if order is None:
            vacant += 1
            if max_vacant_scan is not None and vacant > max_vacant_scan:
                raise AccountingError(
                    f"no resting order within {max_vacant_scan} indexes of "
                    f"{index - vacant + 1} at {cursor.id}; {remaining} units unallocated"
                )
            index += 1
            continue
        vacant = 0

        unfilled = order.unit_amount - order.unit_filled_amount
        filled = min(remaining, unfilled)
        remaining -= filled
        plan.append((order, filled))
        if filled == unfilled:
            index += 1

    fills: list[OrderFill] = []
    anomalies: list[str] = []
    for order, filled in plan:
        result = orders.apply_fill(book, order, filled)
        anomalies.extend(result.anomalies)
        orders.save(order)
        done = order.unit_amount == order.unit_filled_amount
        fills.append(OrderFill(order_id=order.id, units=filled, fully_filled=done))

    cursor.latest_taken_order_index = index
    store.save(cursor)
    return Checked(
        Allocation(start_index=start, end_index=index, fills=tuple(fills)),
        tuple(anomalies),
    )
