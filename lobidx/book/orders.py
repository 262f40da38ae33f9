"""Per-order fill and claim bookkeeping.

Every mutable amount keeps unit/base/quote projections. Projections are
always recomputed from the unit amount at the order's creation price.

Invariants while no anomaly has been flagged::

    filled + open == committed
    claimable == filled - claimed
"""

from __future__ import annotations

from lobidx.core.checked import Checked, negative_anomaly
from lobidx.core.errors import MissingEntityError
from lobidx.core.fixedpoint import unit_to_base, unit_to_quote
from lobidx.core.order_id import encode_order_id
from lobidx.core.types import Address
from lobidx.store.api import EntityStore
from lobidx.store.entities import Book, OpenOrder


def _set_amount(book: Book, order: OpenOrder, kind: str, unit_amount: int) -> None:
    setattr(order, f"unit_{kind}amount", unit_amount)
    setattr(order, f"base_{kind}amount", unit_to_base(book.unit_size, unit_amount, order.price))
    setattr(order, f"quote_{kind}amount", unit_to_quote(book.unit_size, unit_amount))


class OpenOrderLedger:
    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def load(self, order_id: int) -> OpenOrder | None:
        return self._store.load(OpenOrder, str(order_id))

    def create(
        self,
        book: Book,
        *,
        tick: int,
        order_index: int,
        price: int,
        user: Address,
        tx_hash: str,
        created_at: int,
        units: int,
    ) -> OpenOrder:
        order = OpenOrder(
            id=str(encode_order_id(int(book.id), tick, order_index)),
            book=book.id,
            tick=tick,
            order_index=order_index,
            price=price,
            user=user,
            tx_hash=tx_hash,
            created_at=created_at,
        )
        _set_amount(book, order, "", units)
        _set_amount(book, order, "open_", units)
        self._store.save(order)
        return order

    def apply_fill(self, book: Book, order: OpenOrder, units: int) -> Checked[OpenOrder]:
        _set_amount(book, order, "filled_", order.unit_filled_amount + units)
        _set_amount(book, order, "claimable_", order.unit_claimable_amount + units)
        _set_amount(book, order, "open_", order.unit_open_amount - units)
        return Checked(
            order,
            negative_anomaly(order.unit_open_amount, f"open unit amount of {order.id}"),
        )

    def cancel(self, book: Book, order: OpenOrder, units: int) -> Checked[OpenOrder]:
        _set_amount(book, order, "", order.unit_amount - units)
        _set_amount(book, order, "open_", order.unit_open_amount - units)
        return Checked(
            order,
            negative_anomaly(order.unit_amount, f"unit amount of {order.id}")
            + negative_anomaly(order.unit_open_amount, f"open unit amount of {order.id}"),
        )

    def claim(self, book: Book, order: OpenOrder, units: int) -> Checked[OpenOrder]:
        _set_amount(book, order, "claimed_", order.unit_claimed_amount + units)
        _set_amount(book, order, "claimable_", order.unit_claimable_amount - units)
        return Checked(
            order,
            negative_anomaly(
                order.unit_claimable_amount, f"claimable unit amount of {order.id}"
            ),
        )

    def persist(self, order: OpenOrder) -> bool:
        """Save the order, or delete it once nothing is open or claimable.

        Returns True when the order was deleted.
        """
        if order.unit_pending_amount == 0:
            self._store.delete(OpenOrder, order.id)
            return True
        self._store.save(order)
        return False

    def save(self, order: OpenOrder) -> None:
        self._store.save(order)

    def transfer(self, order_id: int, to: Address) -> OpenOrder:
        order = self.load(order_id)
        if order is None:
            raise MissingEntityError(f"OpenOrder not found: {order_id}")
        order.user = to
        self._store.save(order)
        return order
