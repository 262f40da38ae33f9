"""Order id encoding.

Layout of an order id (unbounded integer)::

    bits 64..   book id
    bits 40..63 tick, 24-bit two's complement
    bits  0..39 order index within the (book, tick) queue
"""

from __future__ import annotations

from lobidx.core.types import BookId, OrderId, OrderIndex, Tick

_INDEX_BITS = 40
_BOOK_SHIFT = 64
_TICK_MASK = (1 << 24) - 1
_INDEX_MASK = (1 << _INDEX_BITS) - 1


def _tick_u24(tick: int) -> int:
    return tick & _TICK_MASK


def encode_order_id(book_id: int, tick: int, order_index: int) -> OrderId:
    """Ticks outside [-2**23, 2**23 - 1] silently truncate."""
    return OrderId(
        int(order_index)
        + (_tick_u24(int(tick)) << _INDEX_BITS)
        + (int(book_id) << _BOOK_SHIFT)
    )


def decode_book_id(order_id: int) -> BookId:
    return BookId(int(order_id) >> _BOOK_SHIFT)


def decode_order_id(order_id: int) -> tuple[BookId, Tick, OrderIndex]:
    value = int(order_id)
    raw_tick = (value >> _INDEX_BITS) & _TICK_MASK
    if raw_tick & 0x800000:
        raw_tick -= 1 << 24
    return (
        BookId(value >> _BOOK_SHIFT),
        Tick(raw_tick),
        OrderIndex(value & _INDEX_MASK),
    )
