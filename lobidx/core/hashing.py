"""Stable JSON encoding and content hashing."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from decimal import Decimal
from enum import Enum
import hashlib
import json
from typing import Any


def hash_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums and Decimals into plain JSON values."""
    if isinstance(value, Enum):
        return value.name.lower()
    if isinstance(value, Decimal):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def stable_json_dumps(payload: object) -> str:
    return json.dumps(
        to_jsonable(payload), sort_keys=True, separators=(",", ":"), ensure_ascii=True
    )


def hash_json(payload: object) -> str:
    return hash_text(stable_json_dumps(payload))
