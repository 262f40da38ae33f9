from decimal import Decimal

import pytest

from lobidx.chain import StaticPoolSource
from lobidx.core import (
    PRICE_PRECISION,
    AccountingError,
    ConfigError,
    FailurePolicy,
    MissingEntityError,
    OrderingError,
    encode_order_id,
)
from lobidx.engine import Indexer, Outcome
from lobidx.ingest import FaultKind
from lobidx.store import (
    Book,
    ChartLog,
    Depth,
    LatestBlock,
    LatestPoolSpread,
    MemoryStore,
    OpenOrder,
    OrderIndex,
    PoolSnapshot,
    PoolSpreadProfit,
    PoolVolume,
    SINGLETON_ID,
    Token,
)


def _oid(tick: int, index: int, book_id: int = 1) -> int:
    return encode_order_id(book_id, tick, index)


def test_open_creates_book_and_tokens(make_indexer, events) -> None:
    indexer = make_indexer()
    indexer.dispatch(events.open(unit_size=10))
    book = indexer.store.load(Book, "1")
    assert (book.base, book.quote, book.unit_size) == (events.base, events.quote, 10)
    assert indexer.store.load(Token, events.quote).symbol == "USDC"


def test_make_take_claim_lifecycle(make_indexer, events) -> None:
    indexer = make_indexer()
    store = indexer.store
    result = indexer.run([events.open(), events.make(0, 0, 100)])
    assert result.applied == 2

    assert store.load(Depth, "1-0").unit_amount == 100
    assert store.load(OrderIndex, "1-0").latest_taken_order_index == 0

    indexer.dispatch(events.take(0, 60))
    order = store.load(OpenOrder, str(_oid(0, 0)))
    assert (order.unit_filled_amount, order.unit_open_amount, order.unit_claimable_amount) == (60, 40, 60)
    assert store.load(Depth, "1-0").unit_amount == 40
    assert store.load(OrderIndex, "1-0").latest_taken_order_index == 0

    indexer.dispatch(events.take(0, 40))
    order = store.load(OpenOrder, str(_oid(0, 0)))
    assert (order.unit_filled_amount, order.unit_open_amount, order.unit_claimable_amount) == (100, 0, 100)
    assert store.load(Depth, "1-0") is None
    assert store.load(OrderIndex, "1-0").latest_taken_order_index == 1

    assert indexer.dispatch(events.claim(_oid(0, 0), 100)).outcome == Outcome.APPLIED
    assert store.load(OpenOrder, str(_oid(0, 0))) is None


def test_take_updates_latest_trade_and_charts(make_indexer, events) -> None:
    indexer = make_indexer()
    store = indexer.store
    indexer.run(
        [
            events.open(),
            events.make(0, 0, 100),
            events.take(0, 60, timestamp=610),
            events.take(0, 40, timestamp=620),
        ]
    )
    book = store.load(Book, "1")
    assert (book.latest_tick, book.latest_price, book.latest_timestamp) == (0, PRICE_PRECISION, 620)

    bar = store.load(ChartLog, f"{events.base}/{events.quote}-1m-600")
    assert bar.close == 1
    assert bar.base_volume == Decimal("0.0001")
    assert bar.bid_book_base_volume == Decimal("0.0001")
    inverted = store.load(ChartLog, f"{events.quote}/{events.base}-1m-600")
    assert inverted.ask_book_base_volume == Decimal("0.0001")


def test_fifo_across_orders(make_indexer, events) -> None:
    indexer = make_indexer()
    store = indexer.store
    indexer.run(
        [
            events.open(),
            events.make(3, 0, 30),
            events.make(3, 1, 50, user=events.other),
            events.make(3, 2, 20),
            events.take(3, 60),
        ]
    )
    filled = [store.load(OpenOrder, str(_oid(3, i))).unit_filled_amount for i in range(3)]
    assert filled == [30, 30, 0]
    assert store.load(OrderIndex, "1-3").latest_taken_order_index == 1
    assert store.load(Depth, "1-3").unit_amount == 40


def test_cancel_partial_and_full(make_indexer, events) -> None:
    indexer = make_indexer()
    store = indexer.store
    indexer.run([events.open(), events.make(-2, 0, 100), events.cancel(_oid(-2, 0), 30)])
    order = store.load(OpenOrder, str(_oid(-2, 0)))
    assert (order.unit_amount, order.unit_open_amount) == (70, 70)
    assert store.load(Depth, "1--2").unit_amount == 70

    indexer.dispatch(events.cancel(_oid(-2, 0), 70))
    assert store.load(OpenOrder, str(_oid(-2, 0))) is None
    assert store.load(Depth, "1--2") is None


def test_cancelled_head_order_is_skipped_by_takes(make_indexer, events) -> None:
    indexer = make_indexer()
    store = indexer.store
    indexer.run(
        [
            events.open(),
            events.make(0, 0, 10),
            events.make(0, 1, 10),
            events.cancel(_oid(0, 0), 10),
            events.take(0, 5),
        ]
    )
    assert store.load(OpenOrder, str(_oid(0, 1))).unit_filled_amount == 5
    assert store.load(OrderIndex, "1-0").latest_taken_order_index == 1
    assert store.load(Depth, "1-0").unit_amount == 5


def test_depth_matches_open_orders(make_indexer, events) -> None:
    indexer = make_indexer()
    store = indexer.store
    feed = [events.open()]
    for index in range(6):
        feed.append(events.make(4, index, 10 + index))
    feed += [
        events.take(4, 25),
        events.cancel(_oid(4, 3), 5),
        events.take(4, 12),
        events.claim(_oid(4, 0), 10),
        events.cancel(_oid(4, 5), 15),
    ]
    result = indexer.run(feed)
    assert result.skipped == 0
    assert result.anomalies == 0

    open_units = sum(
        order.unit_open_amount
        for order in store.iter_type(OpenOrder)
        if order.tick == 4
    )
    assert store.load(Depth, "1-4").unit_amount == open_units


def test_zero_unit_events_are_noops(make_indexer, events) -> None:
    indexer = make_indexer()
    indexer.run([events.open(), events.make(0, 0, 10)])
    before = indexer.store.digest()
    indexer.run([events.take(0, 0), events.cancel(_oid(0, 0), 0), events.claim(_oid(0, 0), 0)])
    assert indexer.store.digest() == before


def test_missing_book_is_skipped_and_quarantined(make_indexer, events, quarantine) -> None:
    indexer = make_indexer()
    result = indexer.dispatch(events.make(0, 0, 10, book_id=9))
    assert result.outcome == Outcome.SKIPPED
    assert "Book not found: 9" in result.fault
    assert len(indexer.store) == 0
    assert [r.kind for r in quarantine.records] == [FaultKind.MISSING_ENTITY]
    assert quarantine.records[0].handler == "MAKE"


def test_take_beyond_depth_is_skipped(make_indexer, events, quarantine) -> None:
    indexer = make_indexer()
    indexer.run([events.open(), events.make(-5, 0, 10)])
    result = indexer.dispatch(events.take(-5, 20))
    assert result.outcome == Outcome.SKIPPED
    assert quarantine.records[-1].kind == FaultKind.ACCOUNTING_ANOMALY
    assert indexer.store.load(Depth, "1--5").unit_amount == 10
    # Writes made before the fault are kept.
    assert indexer.store.load(Book, "1").latest_tick == -5


def test_anomalies_are_flagged_and_applied(make_indexer, events, quarantine) -> None:
    indexer = make_indexer()
    indexer.run([events.open(), events.make(0, 0, 100)])
    result = indexer.dispatch(events.cancel(_oid(0, 0), 150))
    assert result.outcome == Outcome.APPLIED
    assert len(result.anomalies) == 3
    assert indexer.store.load(OpenOrder, str(_oid(0, 0))).unit_open_amount == -50
    assert indexer.store.load(Depth, "1-0").unit_amount == -50
    assert all(r.kind == FaultKind.ACCOUNTING_ANOMALY for r in quarantine.records)


def test_hard_fail_raises_and_discards(make_indexer, events, quarantine) -> None:
    indexer = make_indexer(policy=FailurePolicy.HARD_FAIL)
    indexer.run([events.open(), events.make(0, 0, 100)])
    before = indexer.store.digest()

    with pytest.raises(AccountingError):
        indexer.dispatch(events.cancel(_oid(0, 0), 150))
    with pytest.raises(MissingEntityError):
        indexer.dispatch(events.take(0, 5, book_id=2))
    assert indexer.store.digest() == before
    assert quarantine.records == []


def test_transfer(make_indexer, events, quarantine) -> None:
    indexer = make_indexer()
    indexer.run([events.open(), events.make(0, 0, 10)])
    indexer.dispatch(events.transfer(events.user, events.other, _oid(0, 0)))
    assert indexer.store.load(OpenOrder, str(_oid(0, 0))).user == events.other

    # Mint and burn transfers never touch the store.
    assert indexer.dispatch(events.transfer(events.null, events.user, 777)).outcome == Outcome.APPLIED
    assert indexer.dispatch(events.transfer(events.user, events.null, 777)).outcome == Outcome.APPLIED
    assert quarantine.records == []

    result = indexer.dispatch(events.transfer(events.user, events.other, 777))
    assert result.outcome == Outcome.SKIPPED


def test_block_event_sets_latest_block(make_indexer, events) -> None:
    indexer = make_indexer()
    indexer.dispatch(events.block_event(42, 1_700_000_000))
    block = indexer.store.load(LatestBlock, SINGLETON_ID)
    assert (block.block_number, block.timestamp) == (42, 1_700_000_000)


def test_out_of_order_events_are_reported(make_indexer, events, quarantine) -> None:
    indexer = make_indexer()
    events.block = 5
    first = events.open()
    events.block = 4
    second = events.make(0, 0, 10)
    result = indexer.run([first, second])
    assert result.out_of_order == 1
    assert result.applied == 2
    assert result.last_key.block_number == 5
    assert quarantine.records[0].kind == FaultKind.ORDERING

    strict = make_indexer(policy=FailurePolicy.HARD_FAIL)
    with pytest.raises(OrderingError):
        strict.run([first, second])


def test_rebalancer_spread_profit(make_indexer, events, oracle) -> None:
    oracle.prices[-10] = PRICE_PRECISION
    oracle.prices[10] = PRICE_PRECISION // 2
    indexer = make_indexer()
    indexer.run(
        [
            events.open(unit_size=10**6),
            events.make(-10, 0, 100, user=events.rebalancer),
            events.make(10, 0, 100, user=events.rebalancer),
            events.make(-10, 1, 100),
            events.take(-10, 200),
            events.claim(_oid(-10, 0), 100, timestamp=610),
        ]
    )
    spread = indexer.store.load(LatestPoolSpread, SINGLETON_ID)
    assert (spread.bid_price, spread.ask_price) == (1, 2)
    profit = indexer.store.load(PoolSpreadProfit, "5m-600")
    assert profit.accumulated_profit_in_usd == Decimal(50)

    # Claims by other users earn nothing.
    indexer.dispatch(events.claim(_oid(-10, 1), 100, timestamp=610))
    assert indexer.store.load(PoolSpreadProfit, "5m-600").accumulated_profit_in_usd == Decimal(50)


def test_pool_events(make_indexer, events) -> None:
    indexer = make_indexer()
    indexer.run(
        [
            events.rebalancer_claim(10, 20, timestamp=600),
            events.rebalancer_claim(1, 2, timestamp=700),
            events.update_position(5, timestamp=600),
            events.update_position(6, timestamp=610),
        ]
    )
    volume = indexer.store.load(PoolVolume, f"{events.pool}-5m-600")
    assert (volume.currency_a_volume, volume.currency_b_volume) == (33, 33)
    snapshot = indexer.store.load(PoolSnapshot, f"{events.pool}-1h-0")
    assert (snapshot.price, snapshot.liquidity_a, snapshot.liquidity_b) == (5, 125, 201)


def test_unknown_order_fault_names_its_parts(make_indexer, events) -> None:
    indexer = make_indexer()
    indexer.dispatch(events.open())
    result = indexer.dispatch(events.claim(_oid(-7, 3), 1))
    assert result.outcome == Outcome.SKIPPED
    assert "book 1, tick -7, index 3" in result.fault


def test_unknown_pool_is_skipped_and_replay_continues(make_indexer, events, quarantine) -> None:
    indexer = make_indexer(pools=StaticPoolSource())
    result = indexer.run(
        [
            events.open(),
            events.update_position(5),
            events.rebalancer_claim(1, 2),
            events.make(0, 0, 10),
        ]
    )
    assert (result.applied, result.skipped) == (2, 2)
    assert [r.kind for r in quarantine.records] == [FaultKind.MISSING_ENTITY] * 2
    assert [r.handler for r in quarantine.records] == ["UPDATE_POSITION", "REBALANCER_CLAIM"]
    assert indexer.store.load(Depth, "1-0").unit_amount == 10
    assert list(indexer.store.iter_type(PoolSnapshot)) == []


def test_pool_source_is_required_up_front(oracle) -> None:
    with pytest.raises(ConfigError):
        Indexer(MemoryStore(), oracle=oracle, roles=None, tokens=None, pools=None)


def test_guarded_take_leaves_level_untouched(make_indexer, events, quarantine) -> None:
    indexer = make_indexer(max_vacant_scan=1)
    store = indexer.store
    indexer.run([events.open(), events.make(0, 0, 10), events.make(0, 3, 10)])

    result = indexer.dispatch(events.take(0, 15))
    assert result.outcome == Outcome.SKIPPED
    assert quarantine.records[-1].kind == FaultKind.ACCOUNTING_ANOMALY

    open_units = sum(order.unit_open_amount for order in store.iter_type(OpenOrder))
    assert store.load(Depth, "1-0").unit_amount == open_units == 20
    assert store.load(OpenOrder, str(_oid(0, 0))).unit_filled_amount == 0
    assert store.load(OrderIndex, "1-0").latest_taken_order_index == 0
