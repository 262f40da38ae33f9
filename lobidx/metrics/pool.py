"""Rebalancer pool metrics: volume, liquidity snapshots, spread profit.

A pool pairs two books, A and B, quoting the same two currencies in opposite
directions. Pool volume and spread profit accumulate on the fixed 5-minute
interval; liquidity snapshots are taken once per bucket on every interval.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext
import logging

from lobidx.chain.api import PoolStateSource, TickPriceOracle
from lobidx.core.checked import Checked
from lobidx.core.decimal_ctx import DECIMAL_CTX, TWO, ZERO
from lobidx.core.fixedpoint import (
    base_to_quote,
    format_inverted_price,
    format_price,
    format_units,
    unit_to_base,
    unit_to_quote,
)
from lobidx.core.time import FIVE_MINUTES, INTERVALS
from lobidx.core.types import Side, side_of_tick
from lobidx.store.api import EntityStore
from lobidx.store.entities import (
    SINGLETON_ID,
    Book,
    LatestPoolSpread,
    OpenOrder,
    PoolSnapshot,
    PoolSpreadProfit,
    PoolVolume,
    Token,
    pool_bucket_id,
    pool_spread_profit_id,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClaimVolumes:
    book_a_currency_a: int
    book_a_currency_b: int
    book_b_currency_a: int
    book_b_currency_b: int

    @property
    def currency_a(self) -> int:
        return self.book_a_currency_a + self.book_b_currency_a

    @property
    def currency_b(self) -> int:
        return self.book_a_currency_b + self.book_b_currency_b


def claim_volumes(
    claimed_a: int, claimed_b: int, price_a: int, price_b: int
) -> ClaimVolumes:
    """Attribute a rebalancer claim to both books in both currencies.

    Book A pays out currency B and is priced in A at ``price_a``; book B pays
    out currency A and is priced in B at ``price_b``.
    """
    return ClaimVolumes(
        book_a_currency_a=base_to_quote(claimed_b, price_a),
        book_a_currency_b=claimed_b,
        book_b_currency_a=claimed_a,
        book_b_currency_b=base_to_quote(claimed_a, price_b),
    )


class PoolMetricsAggregator:
    def __init__(
        self,
        store: EntityStore,
        oracle: TickPriceOracle,
        pools: PoolStateSource,
    ) -> None:
        self._store = store
        self._oracle = oracle
        self._pools = pools

    def on_rebalancer_claim(
        self, pool_key: str, claimed_a: int, claimed_b: int, timestamp: int
    ) -> PoolVolume:
        position = self._pools.get_position(pool_key)
        volumes = claim_volumes(
            claimed_a,
            claimed_b,
            self._oracle.to_price(position.tick_a),
            self._oracle.to_price(position.tick_b),
        )

        bucket = FIVE_MINUTES.bucket_start(timestamp)
        volume_id = pool_bucket_id(pool_key, FIVE_MINUTES.label, bucket)
        volume = self._store.load(PoolVolume, volume_id)
        if volume is None:
            volume = PoolVolume(
                id=volume_id,
                pool_key=pool_key,
                interval_type=FIVE_MINUTES.label,
                timestamp=bucket,
            )
        volume.currency_a_volume += volumes.currency_a
        volume.currency_b_volume += volumes.currency_b
        volume.book_a_currency_a_volume += volumes.book_a_currency_a
        volume.book_a_currency_b_volume += volumes.book_a_currency_b
        volume.book_b_currency_a_volume += volumes.book_b_currency_a
        volume.book_b_currency_b_volume += volumes.book_b_currency_b
        self._store.save(volume)
        return volume

    def on_update_position(
        self, pool_key: str, oracle_price: int, timestamp: int
    ) -> list[PoolSnapshot]:
        """Capture liquidity once per bucket; existing snapshots are kept."""
        liquidity = self._pools.get_liquidity(pool_key)
        total_supply = self._pools.total_supply(pool_key)

        created: list[PoolSnapshot] = []
        for interval in INTERVALS:
            bucket = interval.bucket_start(timestamp)
            snapshot_id = pool_bucket_id(pool_key, interval.label, bucket)
            if self._store.load(PoolSnapshot, snapshot_id) is not None:
                continue
            snapshot = PoolSnapshot(
                id=snapshot_id,
                pool_key=pool_key,
                interval_type=interval.label,
                timestamp=bucket,
                price=oracle_price,
                liquidity_a=liquidity.a.total,
                liquidity_b=liquidity.b.total,
                total_supply=total_supply,
            )
            self._store.save(snapshot)
            created.append(snapshot)
        return created

    def latest_spread(self) -> LatestPoolSpread:
        spread = self._store.load(LatestPoolSpread, SINGLETON_ID)
        if spread is None:
            spread = LatestPoolSpread(id=SINGLETON_ID)
        return spread

    def record_rebalancer_quote(
        self, base: Token, quote: Token, tick: int, price: int
    ) -> LatestPoolSpread:
        """Set the best bid (tick <= 0) or ask (tick > 0); last write wins."""
        spread = self.latest_spread()
        if side_of_tick(tick) == Side.BID:
            spread.bid_tick = tick
            spread.bid_price = format_price(price, base.decimals, quote.decimals)
        else:
            # Ask books quote the pair the other way round.
            spread.ask_tick = tick
            spread.ask_price = format_inverted_price(price, base.decimals, quote.decimals)
        self._store.save(spread)
        return spread

    def accrue_spread_profit(
        self,
        book: Book,
        base: Token,
        quote: Token,
        order: OpenOrder,
        claimed_units: int,
        timestamp: int,
    ) -> Checked[PoolSpreadProfit]:
        """Add half the current spread times the claimed amount.

        The claimed amount is taken in the market's base asset: the book's
        base for a bid-book order, the book's quote for an ask-book order.
        """
        spread_entity = self.latest_spread()
        anomalies: tuple[str, ...] = ()
        with localcontext(DECIMAL_CTX):
            spread = spread_entity.ask_price - spread_entity.bid_price
            if spread < ZERO:
                anomalies = (
                    f"negative spread: askPrice: {spread_entity.ask_price}, "
                    f"bidPrice: {spread_entity.bid_price}",
                )
                spread = ZERO

            if side_of_tick(order.tick) == Side.BID:
                claimed = format_units(
                    unit_to_base(book.unit_size, claimed_units, order.price),
                    base.decimals,
                )
            else:
                claimed = format_units(
                    unit_to_quote(book.unit_size, claimed_units), quote.decimals
                )

            bucket = FIVE_MINUTES.bucket_start(timestamp)
            profit_id = pool_spread_profit_id(FIVE_MINUTES.label, bucket)
            profit = self._store.load(PoolSpreadProfit, profit_id)
            if profit is None:
                profit = PoolSpreadProfit(
                    id=profit_id, interval_type=FIVE_MINUTES.label, timestamp=bucket
                )
            increment: Decimal = spread / TWO * claimed
            profit.accumulated_profit_in_usd += increment
        self._store.save(profit)
        logger.debug("spread profit %s += %s", profit_id, increment)
        return Checked(profit, anomalies)
