"""Persisted entity records.

Every entity has a string ``id`` and a class-level ``entity_type`` used as
the store namespace. Amount fields are integer token atoms; chart and spread
fields are Decimals in display units.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from lobidx.core.decimal_ctx import ZERO


@dataclass(slots=True)
class Token:
    entity_type: ClassVar[str] = "Token"

    id: str
    symbol: str
    name: str
    decimals: int


@dataclass(slots=True)
class Book:
    entity_type: ClassVar[str] = "Book"

    id: str
    base: str
    quote: str
    unit_size: int
    maker_policy: int
    taker_policy: int
    hooks: str
    latest_tick: int = 0
    latest_price: int = 0
    latest_timestamp: int = 0


@dataclass(slots=True)
class Depth:
    entity_type: ClassVar[str] = "Depth"

    id: str
    book: str
    tick: int
    price: int
    unit_amount: int = 0
    base_amount: int = 0
    quote_amount: int = 0


@dataclass(slots=True)
class OrderIndex:
    """FIFO cursor: index of the oldest order at (book, tick) not fully taken."""

    entity_type: ClassVar[str] = "OrderIndex"

    id: str
    book: str
    tick: int
    price: int
    latest_taken_order_index: int = 0


@dataclass(slots=True)
class OpenOrder:
    entity_type: ClassVar[str] = "OpenOrder"

    id: str
    book: str
    tick: int
    order_index: int
    price: int
    user: str
    tx_hash: str
    created_at: int
    unit_amount: int = 0
    base_amount: int = 0
    quote_amount: int = 0
    unit_filled_amount: int = 0
    base_filled_amount: int = 0
    quote_filled_amount: int = 0
    unit_claimed_amount: int = 0
    base_claimed_amount: int = 0
    quote_claimed_amount: int = 0
    unit_claimable_amount: int = 0
    base_claimable_amount: int = 0
    quote_claimable_amount: int = 0
    unit_open_amount: int = 0
    base_open_amount: int = 0
    quote_open_amount: int = 0

    @property
    def unit_pending_amount(self) -> int:
        return self.unit_open_amount + self.unit_claimable_amount


@dataclass(slots=True)
class ChartLog:
    entity_type: ClassVar[str] = "ChartLog"

    id: str
    market_code: str
    interval_type: str
    timestamp: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    base_volume: Decimal = ZERO
    bid_book_base_volume: Decimal = ZERO
    ask_book_base_volume: Decimal = ZERO


@dataclass(slots=True)
class PoolVolume:
    entity_type: ClassVar[str] = "PoolVolume"

    id: str
    pool_key: str
    interval_type: str
    timestamp: int
    currency_a_volume: int = 0
    currency_b_volume: int = 0
    book_a_currency_a_volume: int = 0
    book_a_currency_b_volume: int = 0
    book_b_currency_a_volume: int = 0
    book_b_currency_b_volume: int = 0


@dataclass(slots=True)
class PoolSnapshot:
    entity_type: ClassVar[str] = "PoolSnapshot"

    id: str
    pool_key: str
    interval_type: str
    timestamp: int
    price: int
    liquidity_a: int
    liquidity_b: int
    total_supply: int


@dataclass(slots=True)
class LatestPoolSpread:
    entity_type: ClassVar[str] = "LatestPoolSpread"

    id: str
    bid_tick: int = 0
    ask_tick: int = 0
    bid_price: Decimal = ZERO
    ask_price: Decimal = ZERO


@dataclass(slots=True)
class PoolSpreadProfit:
    entity_type: ClassVar[str] = "PoolSpreadProfit"

    id: str
    interval_type: str
    timestamp: int
    accumulated_profit_in_usd: Decimal = ZERO


@dataclass(slots=True)
class LatestBlock:
    entity_type: ClassVar[str] = "LatestBlock"

    id: str
    block_number: int
    timestamp: int


SINGLETON_ID = "latest"

ENTITY_TYPES: dict[str, type] = {
    cls.entity_type: cls
    for cls in (
        Token,
        Book,
        Depth,
        OrderIndex,
        OpenOrder,
        ChartLog,
        PoolVolume,
        PoolSnapshot,
        LatestPoolSpread,
        PoolSpreadProfit,
        LatestBlock,
    )
}


def depth_id(book_id: str, tick: int) -> str:
    return f"{book_id}-{tick}"


def market_code(base: Token, quote: Token) -> str:
    return f"{base.id}/{quote.id}"


def chart_log_id(base: Token, quote: Token, interval_type: str, timestamp: int) -> str:
    return f"{market_code(base, quote)}-{interval_type}-{timestamp}"


def pool_bucket_id(pool_key: str, interval_type: str, timestamp: int) -> str:
    return f"{pool_key}-{interval_type}-{timestamp}"


def pool_spread_profit_id(interval_type: str, timestamp: int) -> str:
    return f"{interval_type}-{timestamp}"
