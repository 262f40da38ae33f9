"""OHLC candles at fixed intervals, in natural and inverted quotation.

For a trade in market ``base/quote`` the natural bar records the price of base
in quote and the base volume; the inverted bar for ``quote/base`` records the
reciprocal price and the quote volume. Volume is attributed to the book side
that supplied it (tick <= 0 bid book, tick > 0 ask book); the inverted bar
swaps the attribution.
"""

from __future__ import annotations

from decimal import Decimal, localcontext

from lobidx.core.decimal_ctx import DECIMAL_CTX, ZERO
from lobidx.core.fixedpoint import format_inverted_price, format_price, format_units
from lobidx.core.time import INTERVALS, Interval
from lobidx.core.types import Side, side_of_tick
from lobidx.store.api import EntityStore
from lobidx.store.entities import ChartLog, Token, chart_log_id, market_code


class ChartAggregator:
    def __init__(self, store: EntityStore, intervals: tuple[Interval, ...] = INTERVALS) -> None:
        self._store = store
        self._intervals = intervals

    def on_trade(
        self,
        *,
        base: Token,
        quote: Token,
        tick: int,
        price: int,
        base_amount: int,
        quote_amount: int,
        timestamp: int,
    ) -> None:
        natural_price = format_price(price, base.decimals, quote.decimals)
        inverted_price = format_inverted_price(price, base.decimals, quote.decimals)
        base_volume = format_units(base_amount, base.decimals)
        quote_volume = format_units(quote_amount, quote.decimals)
        side = side_of_tick(tick)

        for interval in self._intervals:
            bucket = interval.bucket_start(timestamp)
            self._update_bar(base, quote, interval, bucket, natural_price, base_volume, side)
            self._update_bar(
                quote, base, interval, bucket, inverted_price, quote_volume, side.opposite()
            )

    def _update_bar(
        self,
        base: Token,
        quote: Token,
        interval: Interval,
        bucket: int,
        price: Decimal,
        volume: Decimal,
        side: Side,
    ) -> ChartLog:
        bar_id = chart_log_id(base, quote, interval.label, bucket)
        bar = self._store.load(ChartLog, bar_id)
        with localcontext(DECIMAL_CTX):
            if bar is None:
                bar = ChartLog(
                    id=bar_id,
                    market_code=market_code(base, quote),
                    interval_type=interval.label,
                    timestamp=bucket,
                    open=price,
                    high=price,
                    low=price,
                    close=price,
                    base_volume=volume,
                    bid_book_base_volume=volume if side == Side.BID else ZERO,
                    ask_book_base_volume=volume if side == Side.ASK else ZERO,
                )
            else:
                bar.high = max(bar.high, price)
                bar.low = min(bar.low, price)
                bar.close = price
                bar.base_volume += volume
                if side == Side.BID:
                    bar.bid_book_base_volume += volume
                else:
                    bar.ask_book_base_volume += volume
        self._store.save(bar)
        return bar
