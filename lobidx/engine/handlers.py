"""One handler per exchange event.

Handlers raise ``MissingEntityError`` or ``AccountingError`` to abandon the
rest of an event, and report tolerated anomalies through ``ctx.flag``. The
dispatcher decides what either means under the active failure policy.
"""

from __future__ import annotations

import logging

from lobidx.book.allocator import allocate_fill
from lobidx.core.config import Role
from lobidx.core.errors import AccountingError, MissingEntityError
from lobidx.core.fixedpoint import unit_to_base, unit_to_quote
from lobidx.core.order_id import decode_book_id, decode_order_id
from lobidx.core.types import ADDRESS_ZERO, Address
from lobidx.engine.context import HandlerContext
from lobidx.events.types import (
    BlockEvent,
    CancelEvent,
    ClaimEvent,
    MakeEvent,
    OpenEvent,
    RebalancerClaimEvent,
    TakeEvent,
    TransferEvent,
    UpdatePositionEvent,
)
from lobidx.store.entities import (
    SINGLETON_ID,
    Book,
    LatestBlock,
    OpenOrder,
    Token,
    depth_id,
)

logger = logging.getLogger(__name__)


def _ensure_token(ctx: HandlerContext, address: Address) -> Token:
    token = ctx.store.load(Token, address)
    if token is None:
        meta = ctx.tokens.get(address)
        token = Token(id=address, symbol=meta.symbol, name=meta.name, decimals=meta.decimals)
    ctx.store.save(token)
    return token


def _is_rebalancer(ctx: HandlerContext, user: str) -> bool:
    return user == ctx.roles.resolve(Role.REBALANCER)


def handle_block(ctx: HandlerContext, event: BlockEvent) -> None:
    ctx.store.save(
        LatestBlock(
            id=SINGLETON_ID,
            block_number=event.meta.block_number,
            timestamp=event.meta.block_timestamp,
        )
    )


def handle_open(ctx: HandlerContext, event: OpenEvent) -> None:
    base = _ensure_token(ctx, event.base)
    quote = _ensure_token(ctx, event.quote)
    ctx.store.save(
        Book(
            id=str(event.book_id),
            base=base.id,
            quote=quote.id,
            unit_size=event.unit_size,
            maker_policy=event.maker_policy,
            taker_policy=event.taker_policy,
            hooks=event.hooks,
        )
    )
    logger.debug("opened book %s %s/%s", event.book_id, base.symbol, quote.symbol)


def handle_make(ctx: HandlerContext, event: MakeEvent) -> None:
    book = ctx.require(Book, str(event.book_id))
    tick = int(event.tick)
    price = ctx.oracle.to_price(tick)
    ctx.orders.create(
        book,
        tick=tick,
        order_index=int(event.order_index),
        price=price,
        user=event.user,
        tx_hash=event.meta.tx_hash,
        created_at=event.meta.block_timestamp,
        units=int(event.unit),
    )
    ctx.depths.on_order_added(book, tick, price, int(event.unit))

    if _is_rebalancer(ctx, event.user):
        base = ctx.require(Token, book.base)
        quote = ctx.require(Token, book.quote)
        ctx.pool_metrics.record_rebalancer_quote(base, quote, tick, price)


def handle_take(ctx: HandlerContext, event: TakeEvent) -> None:
    units = int(event.unit)
    if units == 0:
        return
    book = ctx.require(Book, str(event.book_id))
    tick = int(event.tick)
    price = ctx.oracle.to_price(tick)
    book.latest_tick = tick
    book.latest_price = price
    book.latest_timestamp = event.meta.block_timestamp
    ctx.store.save(book)

    depth = ctx.depths.load(book.id, tick)
    if depth is None or ctx.depths.load_cursor(book.id, tick) is None:
        raise MissingEntityError(f"Depth or OrderIndex not found: {depth_id(book.id, tick)}")
    if units > depth.unit_amount:
        # The FIFO walk cannot terminate without enough resting orders.
        # The latest-trade cache saved above is kept for the skipped take.
        raise AccountingError(
            f"take of {units} exceeds depth {depth.unit_amount} at {depth.id}"
        )

    # Allocate first: a vacant-scan fault then leaves depth and orders untouched.
    allocation = ctx.flag(
        allocate_fill(
            ctx.store,
            ctx.orders,
            book,
            tick,
            units,
            max_vacant_scan=ctx.max_vacant_scan,
        )
    )
    ctx.flag(ctx.depths.on_order_removed(book, depth, price, units))
    logger.debug(
        "take %s at %s filled %d orders, cursor %d -> %d",
        units,
        depth.id,
        len(allocation.fills),
        allocation.start_index,
        allocation.end_index,
    )

    ctx.charts.on_trade(
        base=ctx.require(Token, book.base),
        quote=ctx.require(Token, book.quote),
        tick=tick,
        price=price,
        base_amount=unit_to_base(book.unit_size, units, price),
        quote_amount=unit_to_quote(book.unit_size, units),
        timestamp=event.meta.block_timestamp,
    )


def _require_order(ctx: HandlerContext, order_id: int) -> tuple[Book, OpenOrder]:
    book_id = str(decode_book_id(order_id))
    book = ctx.store.load(Book, book_id)
    order = ctx.orders.load(order_id)
    if book is None or order is None:
        _, tick, index = decode_order_id(order_id)
        raise MissingEntityError(
            f"Book or OpenOrder not found: {order_id} (book {book_id}, tick {tick}, index {index})"
        )
    return book, order


def handle_cancel(ctx: HandlerContext, event: CancelEvent) -> None:
    units = int(event.unit)
    if units == 0:
        return
    book, order = _require_order(ctx, event.order_id)
    ctx.flag(ctx.orders.cancel(book, order, units))

    depth = ctx.depths.load(book.id, order.tick)
    if depth is None:
        raise MissingEntityError(f"Depth not found: {depth_id(book.id, order.tick)}")
    ctx.flag(ctx.depths.on_order_removed(book, depth, order.price, units))
    ctx.orders.persist(order)


def handle_claim(ctx: HandlerContext, event: ClaimEvent) -> None:
    units = int(event.unit)
    if units == 0:
        return
    book, order = _require_order(ctx, event.order_id)
    ctx.flag(ctx.orders.claim(book, order, units))

    if _is_rebalancer(ctx, order.user):
        ctx.flag(
            ctx.pool_metrics.accrue_spread_profit(
                book,
                ctx.require(Token, book.base),
                ctx.require(Token, book.quote),
                order,
                units,
                event.meta.block_timestamp,
            )
        )
    ctx.orders.persist(order)


def handle_transfer(ctx: HandlerContext, event: TransferEvent) -> None:
    if event.from_address == ADDRESS_ZERO or event.to_address == ADDRESS_ZERO:
        # Mint and burn follow from make, cancel and claim.
        return
    ctx.orders.transfer(event.token_id, event.to_address)


def handle_rebalancer_claim(ctx: HandlerContext, event: RebalancerClaimEvent) -> None:
    ctx.pool_metrics.on_rebalancer_claim(
        event.pool_key,
        event.claimed_amount_a,
        event.claimed_amount_b,
        event.meta.block_timestamp,
    )


def handle_update_position(ctx: HandlerContext, event: UpdatePositionEvent) -> None:
    created = ctx.pool_metrics.on_update_position(
        event.pool_key, event.oracle_price, event.meta.block_timestamp
    )
    logger.debug("pool %s: %d new snapshots", event.pool_key, len(created))
