"""Event handlers, dispatch and replay."""

from __future__ import annotations

from lobidx.engine.context import HandlerContext
from lobidx.engine.indexer import (
    DispatchResult,
    Indexer,
    IndexerConfig,
    Outcome,
    ReplayResult,
)

__all__ = [
    "DispatchResult",
    "HandlerContext",
    "Indexer",
    "IndexerConfig",
    "Outcome",
    "ReplayResult",
]
