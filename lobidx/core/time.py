"""Ordering keys and aggregation intervals."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class OrderingKey:
    block_number: int
    log_index: int


def compare_ordering_key(a: OrderingKey, b: OrderingKey) -> int:
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


@dataclass(frozen=True, slots=True)
class Interval:
    label: str
    seconds: int

    def bucket_start(self, ts: int) -> int:
        return (int(ts) // self.seconds) * self.seconds


_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR

INTERVALS: tuple[Interval, ...] = (
    Interval("1m", _MINUTE),
    Interval("3m", 3 * _MINUTE),
    Interval("5m", 5 * _MINUTE),
    Interval("10m", 10 * _MINUTE),
    Interval("15m", 15 * _MINUTE),
    Interval("30m", 30 * _MINUTE),
    Interval("1h", _HOUR),
    Interval("2h", 2 * _HOUR),
    Interval("4h", 4 * _HOUR),
    Interval("6h", 6 * _HOUR),
    Interval("1d", _DAY),
    Interval("1w", 7 * _DAY),
)

# Pool volume and spread profit accumulate on this interval only.
FIVE_MINUTES = INTERVALS[2]
