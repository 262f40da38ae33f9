"""Typed exchange event records."""

from __future__ import annotations

from dataclasses import dataclass

from lobidx.core.time import OrderingKey
from lobidx.core.types import Address, BookId, OrderId, OrderIndex, PoolKey, Tick, TsSec, Units


@dataclass(frozen=True, slots=True)
class EventMeta:
    block_number: int
    block_timestamp: TsSec
    log_index: int
    tx_hash: str = ""

    @property
    def ordering_key(self) -> OrderingKey:
        return OrderingKey(self.block_number, self.log_index)


@dataclass(frozen=True, slots=True)
class OpenEvent:
    meta: EventMeta
    book_id: BookId
    base: Address
    quote: Address
    unit_size: int
    maker_policy: int
    taker_policy: int
    hooks: Address


@dataclass(frozen=True, slots=True)
class MakeEvent:
    meta: EventMeta
    book_id: BookId
    user: Address
    tick: Tick
    order_index: OrderIndex
    unit: Units


@dataclass(frozen=True, slots=True)
class TakeEvent:
    meta: EventMeta
    book_id: BookId
    tick: Tick
    unit: Units


@dataclass(frozen=True, slots=True)
class CancelEvent:
    meta: EventMeta
    order_id: OrderId
    unit: Units


@dataclass(frozen=True, slots=True)
class ClaimEvent:
    meta: EventMeta
    order_id: OrderId
    unit: Units


@dataclass(frozen=True, slots=True)
class TransferEvent:
    meta: EventMeta
    from_address: Address
    to_address: Address
    token_id: OrderId


@dataclass(frozen=True, slots=True)
class RebalancerClaimEvent:
    meta: EventMeta
    pool_key: PoolKey
    claimed_amount_a: int
    claimed_amount_b: int


@dataclass(frozen=True, slots=True)
class UpdatePositionEvent:
    meta: EventMeta
    pool_key: PoolKey
    oracle_price: int


@dataclass(frozen=True, slots=True)
class BlockEvent:
    meta: EventMeta


Event = (
    OpenEvent
    | MakeEvent
    | TakeEvent
    | CancelEvent
    | ClaimEvent
    | TransferEvent
    | RebalancerClaimEvent
    | UpdatePositionEvent
    | BlockEvent
)
