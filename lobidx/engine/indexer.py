"""Event dispatch and replay.

Each event runs against a write buffer over the store. Under
``FailurePolicy.QUARANTINE`` faults and anomalies are logged and quarantined,
and everything the handler wrote up to that point is committed. Under
``FailurePolicy.HARD_FAIL`` the first fault or anomaly raises and the event's
writes are discarded.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, Iterable

from lobidx.chain.api import PoolStateSource, RoleResolver, TickPriceOracle, TokenMetadataProvider
from lobidx.core.config import FailurePolicy
from lobidx.core.errors import (
    AccountingError,
    ConfigError,
    MissingEntityError,
    OrderingError,
)
from lobidx.core.time import OrderingKey
from lobidx.engine import handlers
from lobidx.engine.context import HandlerContext
from lobidx.events.types import (
    BlockEvent,
    CancelEvent,
    ClaimEvent,
    Event,
    MakeEvent,
    OpenEvent,
    RebalancerClaimEvent,
    TakeEvent,
    TransferEvent,
    UpdatePositionEvent,
)
from lobidx.ingest.quarantine import (
    FaultKind,
    QuarantineRecord,
    QuarantineSink,
    record_quarantine,
)
from lobidx.store.api import EntityStore
from lobidx.store.memory import BufferedStore

logger = logging.getLogger(__name__)

_HANDLERS: dict[type, tuple[str, Callable[[HandlerContext, object], None]]] = {
    BlockEvent: ("BLOCK", handlers.handle_block),
    OpenEvent: ("OPEN", handlers.handle_open),
    MakeEvent: ("MAKE", handlers.handle_make),
    TakeEvent: ("TAKE", handlers.handle_take),
    CancelEvent: ("CANCEL", handlers.handle_cancel),
    ClaimEvent: ("CLAIM", handlers.handle_claim),
    TransferEvent: ("TRANSFER", handlers.handle_transfer),
    RebalancerClaimEvent: ("REBALANCER_CLAIM", handlers.handle_rebalancer_claim),
    UpdatePositionEvent: ("UPDATE_POSITION", handlers.handle_update_position),
}


class Outcome(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class DispatchResult:
    outcome: Outcome
    anomalies: tuple[str, ...] = ()
    fault: str | None = None


@dataclass(frozen=True, slots=True)
class IndexerConfig:
    failure_policy: FailurePolicy = FailurePolicy.QUARANTINE
    max_vacant_scan: int | None = None


@dataclass(frozen=True, slots=True)
class ReplayResult:
    events: int
    applied: int
    skipped: int
    anomalies: int
    out_of_order: int
    last_key: OrderingKey | None


class Indexer:
    def __init__(
        self,
        store: EntityStore,
        *,
        oracle: TickPriceOracle,
        roles: RoleResolver,
        tokens: TokenMetadataProvider,
        pools: PoolStateSource,
        config: IndexerConfig = IndexerConfig(),
        quarantine: QuarantineSink | None = None,
    ) -> None:
        if pools is None:
            raise ConfigError("no pool state source configured")
        self._store = store
        self._oracle = oracle
        self._roles = roles
        self._tokens = tokens
        self._pools = pools
        self._config = config
        self._quarantine = quarantine

    @property
    def store(self) -> EntityStore:
        return self._store

    def _quarantine_record(
        self, kind: FaultKind, reason: str, tag: str, event: Event
    ) -> None:
        record_quarantine(
            self._config.failure_policy,
            self._quarantine,
            QuarantineRecord(
                kind=kind,
                reason=reason,
                handler=tag,
                block_number=event.meta.block_number,
                log_index=event.meta.log_index,
                payload=event,
            ),
        )

    def dispatch(self, event: Event) -> DispatchResult:
        entry = _HANDLERS.get(type(event))
        if entry is None:
            raise TypeError(f"unsupported event: {type(event).__name__}")
        tag, handler = entry
        hard_fail = self._config.failure_policy == FailurePolicy.HARD_FAIL

        buffer = BufferedStore(self._store)
        ctx = HandlerContext(
            store=buffer,
            oracle=self._oracle,
            roles=self._roles,
            tokens=self._tokens,
            pools=self._pools,
            max_vacant_scan=self._config.max_vacant_scan,
        )
        try:
            handler(ctx, event)
        except (MissingEntityError, AccountingError) as exc:
            kind = (
                FaultKind.MISSING_ENTITY
                if isinstance(exc, MissingEntityError)
                else FaultKind.ACCOUNTING_ANOMALY
            )
            logger.error("[%s] %s", tag, exc)
            if hard_fail:
                buffer.discard()
                raise
            self._quarantine_record(kind, str(exc), tag, event)
            self._report_anomalies(ctx.anomalies, tag, event)
            buffer.commit()
            return DispatchResult(Outcome.SKIPPED, tuple(ctx.anomalies), str(exc))
        except Exception:
            buffer.discard()
            raise

        if ctx.anomalies and hard_fail:
            buffer.discard()
            for anomaly in ctx.anomalies:
                logger.error("[%s] %s", tag, anomaly)
            raise AccountingError(f"[{tag}] " + "; ".join(ctx.anomalies))
        self._report_anomalies(ctx.anomalies, tag, event)
        buffer.commit()
        return DispatchResult(Outcome.APPLIED, tuple(ctx.anomalies))

    def _report_anomalies(self, anomalies: list[str], tag: str, event: Event) -> None:
        for anomaly in anomalies:
            logger.error("[%s] %s", tag, anomaly)
            self._quarantine_record(FaultKind.ACCOUNTING_ANOMALY, anomaly, tag, event)

    def run(self, events: Iterable[Event]) -> ReplayResult:
        """Apply events in the order given; out-of-order keys are reported, never reordered."""
        count = applied = skipped = anomalies = out_of_order = 0
        last_key: OrderingKey | None = None
        for event in events:
            key = event.meta.ordering_key
            if last_key is not None and key < last_key:
                reason = f"event {key} precedes {last_key}"
                if self._config.failure_policy == FailurePolicy.HARD_FAIL:
                    raise OrderingError(reason)
                logger.warning("%s", reason)
                self._quarantine_record(FaultKind.ORDERING, reason, "REPLAY", event)
                out_of_order += 1
            last_key = key if last_key is None else max(last_key, key)

            result = self.dispatch(event)
            count += 1
            if result.outcome == Outcome.APPLIED:
                applied += 1
            else:
                skipped += 1
            anomalies += len(result.anomalies)
        return ReplayResult(
            events=count,
            applied=applied,
            skipped=skipped,
            anomalies=anomalies,
            out_of_order=out_of_order,
            last_key=last_key,
        )
