"""Fault quarantine for the event pipeline."""

from __future__ import annotations

from lobidx.ingest.quarantine import (
    FaultKind,
    JsonlQuarantineSink,
    ListQuarantineSink,
    QuarantineRecord,
    QuarantineSink,
    record_quarantine,
)

__all__ = [
    "FaultKind",
    "JsonlQuarantineSink",
    "ListQuarantineSink",
    "QuarantineRecord",
    "QuarantineSink",
    "record_quarantine",
]
