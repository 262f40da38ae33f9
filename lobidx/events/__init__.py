"""Exchange event records and the JSON Lines feed reader."""

from __future__ import annotations

from lobidx.events.reader import iter_events, parse_event
from lobidx.events.types import (
    BlockEvent,
    CancelEvent,
    ClaimEvent,
    Event,
    EventMeta,
    MakeEvent,
    OpenEvent,
    RebalancerClaimEvent,
    TakeEvent,
    TransferEvent,
    UpdatePositionEvent,
)

__all__ = [
    "BlockEvent",
    "CancelEvent",
    "ClaimEvent",
    "Event",
    "EventMeta",
    "MakeEvent",
    "OpenEvent",
    "RebalancerClaimEvent",
    "TakeEvent",
    "TransferEvent",
    "UpdatePositionEvent",
    "iter_events",
    "parse_event",
]
