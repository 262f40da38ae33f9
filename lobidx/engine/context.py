"""State a handler may touch while applying one event."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeVar

from lobidx.book.depth import DepthLedger
from lobidx.book.orders import OpenOrderLedger
from lobidx.chain.api import PoolStateSource, RoleResolver, TickPriceOracle, TokenMetadataProvider
from lobidx.core.checked import Checked
from lobidx.core.errors import MissingEntityError
from lobidx.metrics.chart import ChartAggregator
from lobidx.metrics.pool import PoolMetricsAggregator
from lobidx.store.api import EntityStore

T = TypeVar("T")
E = TypeVar("E")


@dataclass
class HandlerContext:
    store: EntityStore
    oracle: TickPriceOracle
    roles: RoleResolver
    tokens: TokenMetadataProvider
    pools: PoolStateSource
    max_vacant_scan: int | None = None
    anomalies: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.depths = DepthLedger(self.store)
        self.orders = OpenOrderLedger(self.store)
        self.charts = ChartAggregator(self.store)
        self.pool_metrics = PoolMetricsAggregator(self.store, self.oracle, self.pools)

    def flag(self, checked: Checked[T]) -> T:
        """Collect the anomalies of a checked result and return its value."""
        self.anomalies.extend(checked.anomalies)
        return checked.value

    def require(self, entity_type: type[E], entity_id: str) -> E:
        entity = self.store.load(entity_type, entity_id)
        if entity is None:
            raise MissingEntityError(f"{entity_type.entity_type} not found: {entity_id}")
        return entity
