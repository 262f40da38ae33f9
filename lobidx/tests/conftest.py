import pytest

from lobidx.chain import LegLiquidity, PoolLiquidity, StaticPoolSource, StaticTokenProvider
from lobidx.chain import StrategyPosition, TokenMeta
from lobidx.core import PRICE_PRECISION, FailurePolicy, NetworkConfig
from lobidx.core import Address, BookId, OrderId, OrderIndex, PoolKey, Tick, TsSec, Units
from lobidx.engine import Indexer, IndexerConfig
from lobidx.events import (
    BlockEvent,
    CancelEvent,
    ClaimEvent,
    EventMeta,
    MakeEvent,
    OpenEvent,
    RebalancerClaimEvent,
    TakeEvent,
    TransferEvent,
    UpdatePositionEvent,
)
from lobidx.ingest import ListQuarantineSink
from lobidx.store import MemoryStore

BASE = Address("0x" + "aa" * 20)
QUOTE = Address("0x" + "bb" * 20)
USER = Address("0x" + "11" * 20)
OTHER = Address("0x" + "22" * 20)
REBALANCER = Address("0x" + "ab" * 20)
POOL = PoolKey("0x" + "cd" * 32)
NULL = Address("0x" + "00" * 20)

NETWORK = NetworkConfig(
    chain_id=1,
    controller=Address("0x" + "c0" * 20),
    rebalancer=REBALANCER,
    strategy=Address("0x" + "5e" * 20),
)

TOKENS = StaticTokenProvider(
    {
        BASE: TokenMeta(symbol="BASE", name="Base", decimals=6),
        QUOTE: TokenMeta(symbol="USDC", name="USD Coin", decimals=6),
    }
)


class TableOracle:
    """Price 1.0 for every tick unless listed."""

    def __init__(self, prices: dict[int, int] | None = None) -> None:
        self.prices = dict(prices or {})

    def to_price(self, tick: int) -> int:
        return self.prices.get(tick, PRICE_PRECISION)


class EventFactory:
    base = BASE
    quote = QUOTE
    user = USER
    other = OTHER
    rebalancer = REBALANCER
    pool = POOL
    null = NULL

    def __init__(self) -> None:
        self.block = 1
        self.log_index = 0
        self.timestamp = 600

    def meta(self, timestamp: int | None = None) -> EventMeta:
        if timestamp is not None:
            self.timestamp = timestamp
        self.log_index += 1
        return EventMeta(
            block_number=self.block,
            block_timestamp=TsSec(self.timestamp),
            log_index=self.log_index,
            tx_hash="0x" + "ee" * 32,
        )

    def open(self, book_id: int = 1, unit_size: int = 1) -> OpenEvent:
        return OpenEvent(
            meta=self.meta(),
            book_id=BookId(book_id),
            base=BASE,
            quote=QUOTE,
            unit_size=unit_size,
            maker_policy=0,
            taker_policy=0,
            hooks=NULL,
        )

    def make(
        self, tick: int, index: int, unit: int, *, book_id: int = 1, user: Address = USER
    ) -> MakeEvent:
        return MakeEvent(
            meta=self.meta(),
            book_id=BookId(book_id),
            user=user,
            tick=Tick(tick),
            order_index=OrderIndex(index),
            unit=Units(unit),
        )

    def take(self, tick: int, unit: int, *, book_id: int = 1, timestamp: int | None = None) -> TakeEvent:
        return TakeEvent(
            meta=self.meta(timestamp),
            book_id=BookId(book_id),
            tick=Tick(tick),
            unit=Units(unit),
        )

    def cancel(self, order_id: int, unit: int) -> CancelEvent:
        return CancelEvent(meta=self.meta(), order_id=OrderId(order_id), unit=Units(unit))

    def claim(self, order_id: int, unit: int, *, timestamp: int | None = None) -> ClaimEvent:
        return ClaimEvent(meta=self.meta(timestamp), order_id=OrderId(order_id), unit=Units(unit))

    def transfer(self, frm: Address, to: Address, order_id: int) -> TransferEvent:
        return TransferEvent(
            meta=self.meta(), from_address=frm, to_address=to, token_id=OrderId(order_id)
        )

    def rebalancer_claim(self, a: int, b: int, *, timestamp: int | None = None) -> RebalancerClaimEvent:
        return RebalancerClaimEvent(
            meta=self.meta(timestamp), pool_key=POOL, claimed_amount_a=a, claimed_amount_b=b
        )

    def update_position(self, price: int, *, timestamp: int | None = None) -> UpdatePositionEvent:
        return UpdatePositionEvent(meta=self.meta(timestamp), pool_key=POOL, oracle_price=price)

    def block_event(self, number: int, timestamp: int) -> BlockEvent:
        self.block = number
        self.log_index = -1
        return BlockEvent(meta=self.meta(timestamp))


def static_pools(
    *,
    liquidity_a: tuple[int, int, int] = (100, 20, 5),
    liquidity_b: tuple[int, int, int] = (200, 0, 1),
    supply: int = 1000,
    ticks: tuple[int, int] = (0, 0),
) -> StaticPoolSource:
    return StaticPoolSource(
        liquidity={POOL: PoolLiquidity(a=LegLiquidity(*liquidity_a), b=LegLiquidity(*liquidity_b))},
        supply={POOL: supply},
        positions={POOL: StrategyPosition(tick_a=ticks[0], tick_b=ticks[1])},
    )


@pytest.fixture
def events() -> EventFactory:
    return EventFactory()


@pytest.fixture
def oracle() -> TableOracle:
    return TableOracle()


@pytest.fixture
def quarantine() -> ListQuarantineSink:
    return ListQuarantineSink()


@pytest.fixture
def make_indexer(oracle, quarantine):
    def _make(
        *,
        policy: FailurePolicy = FailurePolicy.QUARANTINE,
        pools: StaticPoolSource | None = None,
        max_vacant_scan: int | None = None,
        store: MemoryStore | None = None,
    ) -> Indexer:
        return Indexer(
            store if store is not None else MemoryStore(),
            oracle=oracle,
            roles=NETWORK,
            tokens=TOKENS,
            pools=pools if pools is not None else static_pools(),
            config=IndexerConfig(failure_policy=policy, max_vacant_scan=max_vacant_scan),
            quarantine=quarantine,
        )

    return _make
