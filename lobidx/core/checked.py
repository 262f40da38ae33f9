"""Values that may carry accounting anomalies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Checked(Generic[T]):
    """A computed value plus the anomalies flagged while computing it.

    The value is always the raw result, never clamped; the consumer decides
    whether a flagged value is logged and kept or rejected.
    """

    value: T
    anomalies: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.anomalies


def negative_anomaly(value: int, what: str) -> tuple[str, ...]:
    if value < 0:
        return (f"negative {what}: {value}",)
    return ()
