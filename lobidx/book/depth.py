"""Per-price-level resting liquidity."""

from __future__ import annotations

from lobidx.core.checked import Checked, negative_anomaly
from lobidx.core.fixedpoint import unit_to_base, unit_to_quote
from lobidx.store.api import EntityStore
from lobidx.store.entities import Book, Depth, OrderIndex, depth_id


def _project(book: Book, depth: Depth, unit_amount: int, price: int) -> None:
    depth.unit_amount = unit_amount
    depth.base_amount = unit_to_base(book.unit_size, unit_amount, price)
    depth.quote_amount = unit_to_quote(book.unit_size, unit_amount)


class DepthLedger:
    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def load(self, book_id: str, tick: int) -> Depth | None:
        return self._store.load(Depth, depth_id(book_id, tick))

    def load_cursor(self, book_id: str, tick: int) -> OrderIndex | None:
        return self._store.load(OrderIndex, depth_id(book_id, tick))

    def on_order_added(self, book: Book, tick: int, price: int, units: int) -> Depth:
        """Add resting units at a level, creating the level and its FIFO cursor."""
        key = depth_id(book.id, tick)
        depth = self._store.load(Depth, key)
        if depth is None:
            depth = Depth(id=key, book=book.id, tick=tick, price=price)
        if self._store.load(OrderIndex, key) is None:
            self._store.save(OrderIndex(id=key, book=book.id, tick=tick, price=price))
        _project(book, depth, depth.unit_amount + units, price)
        self._store.save(depth)
        return depth

    def on_order_removed(
        self, book: Book, depth: Depth, price: int, units: int
    ) -> Checked[Depth]:
        """Subtract units; the level is deleted when it reaches exactly zero.

        A negative total is flagged and stored as is.
        """
        new_amount = depth.unit_amount - units
        _project(book, depth, new_amount, price)
        if new_amount == 0:
            self._store.delete(Depth, depth.id)
        else:
            self._store.save(depth)
        return Checked(depth, negative_anomaly(new_amount, f"depth unit amount at {depth.id}"))
