"""Quarantine recording for handler faults and anomalies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol, TextIO

from lobidx.core.config import FailurePolicy
from lobidx.core.errors import SchemaError
from lobidx.core.hashing import stable_json_dumps


class FaultKind(str, Enum):
    MISSING_ENTITY = "missing_entity"
    ACCOUNTING_ANOMALY = "accounting_anomaly"
    ORDERING = "ordering"


@dataclass(frozen=True, slots=True)
class QuarantineRecord:
    kind: FaultKind
    reason: str
    handler: str
    block_number: int
    log_index: int
    payload: object


class QuarantineSink(Protocol):
    def record(self, record: QuarantineRecord) -> None:
        """Record a quarantine event."""


@dataclass
class ListQuarantineSink:
    records: list[QuarantineRecord] = field(default_factory=list)

    def record(self, record: QuarantineRecord) -> None:
        self.records.append(record)


def record_quarantine(
    policy: FailurePolicy,
    sink: QuarantineSink | None,
    record: QuarantineRecord,
) -> None:
    """Record a quarantine event without suppressing the caller's exception."""
    if policy == FailurePolicy.QUARANTINE and sink is not None:
        sink.record(record)


@dataclass
class JsonlQuarantineSink:
    path: str | Path
    _file: TextIO | None = None

    def __enter__(self) -> "JsonlQuarantineSink":
        if self._file is not None:
            raise SchemaError("quarantine sink already open")
        self._file = Path(self.path).open("w", encoding="utf-8", newline="")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def record(self, record: QuarantineRecord) -> None:
        if self._file is None:
            raise SchemaError("quarantine sink is not open")
        self._file.write(stable_json_dumps(record) + "\n")
