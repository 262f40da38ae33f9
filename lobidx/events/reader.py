"""JSON Lines event feed reader.

One object per line::

    {"type": "make", "block_number": 7, "block_timestamp": 1700000000,
     "log_index": 3, "tx_hash": "0x..", "params": {...}}

Integer params may be JSON integers or decimal strings, since order ids and
pool amounts exceed the range JSON consumers handle safely.
"""

from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import Callable, Iterator, TextIO

from lobidx.core.errors import SchemaError
from lobidx.core.types import (
    Address,
    BookId,
    OrderId,
    OrderIndex,
    PoolKey,
    Tick,
    TsSec,
    Units,
    parse_address,
    parse_pool_key,
)
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

_REQUIRED_KEYS = {"type", "block_number", "block_timestamp", "log_index"}
_ENVELOPE_KEYS = _REQUIRED_KEYS | {"tx_hash", "params"}


def _parse_int(value: object, field: str, *, signed: bool = False) -> int:
    if isinstance(value, bool):
        raise SchemaError(f"{field} must be an integer")
    if isinstance(value, int):
        out = value
    elif isinstance(value, str):
        try:
            out = int(value.strip())
        except ValueError as exc:
            raise SchemaError(f"{field} must be an integer: {value!r}") from exc
    else:
        raise SchemaError(f"{field} must be an integer: {value!r}")
    if out < 0 and not signed:
        raise SchemaError(f"{field} must be non-negative: {out}")
    return out


def _parse_addr(value: object, field: str) -> Address:
    if not isinstance(value, str):
        raise SchemaError(f"{field} must be an address string")
    return parse_address(value)


def _parse_key(value: object, field: str) -> PoolKey:
    if not isinstance(value, str):
        raise SchemaError(f"{field} must be a hex string")
    return parse_pool_key(value)


def _params(raw: object, keys: set[str], kind: str) -> dict:
    if not isinstance(raw, dict):
        raise SchemaError(f"{kind} params must be an object")
    if set(raw.keys()) != keys:
        raise SchemaError(
            f"{kind} params {sorted(raw.keys())} != {sorted(keys)}"
        )
    return raw


def _open(meta: EventMeta, raw: object) -> OpenEvent:
    p = _params(
        raw,
        {"book_id", "base", "quote", "unit_size", "maker_policy", "taker_policy", "hooks"},
        "open",
    )
    return OpenEvent(
        meta=meta,
        book_id=BookId(_parse_int(p["book_id"], "book_id")),
        base=_parse_addr(p["base"], "base"),
        quote=_parse_addr(p["quote"], "quote"),
        unit_size=_parse_int(p["unit_size"], "unit_size"),
        maker_policy=_parse_int(p["maker_policy"], "maker_policy"),
        taker_policy=_parse_int(p["taker_policy"], "taker_policy"),
        hooks=_parse_addr(p["hooks"], "hooks"),
    )


def _make(meta: EventMeta, raw: object) -> MakeEvent:
    p = _params(raw, {"book_id", "user", "tick", "order_index", "unit"}, "make")
    return MakeEvent(
        meta=meta,
        book_id=BookId(_parse_int(p["book_id"], "book_id")),
        user=_parse_addr(p["user"], "user"),
        tick=Tick(_parse_int(p["tick"], "tick", signed=True)),
        order_index=OrderIndex(_parse_int(p["order_index"], "order_index")),
        unit=Units(_parse_int(p["unit"], "unit")),
    )


def _take(meta: EventMeta, raw: object) -> TakeEvent:
    p = _params(raw, {"book_id", "tick", "unit"}, "take")
    return TakeEvent(
        meta=meta,
        book_id=BookId(_parse_int(p["book_id"], "book_id")),
        tick=Tick(_parse_int(p["tick"], "tick", signed=True)),
        unit=Units(_parse_int(p["unit"], "unit")),
    )


def _cancel(meta: EventMeta, raw: object) -> CancelEvent:
    p = _params(raw, {"order_id", "unit"}, "cancel")
    return CancelEvent(
        meta=meta,
        order_id=OrderId(_parse_int(p["order_id"], "order_id")),
        unit=Units(_parse_int(p["unit"], "unit")),
    )


def _claim(meta: EventMeta, raw: object) -> ClaimEvent:
    p = _params(raw, {"order_id", "unit"}, "claim")
    return ClaimEvent(
        meta=meta,
        order_id=OrderId(_parse_int(p["order_id"], "order_id")),
        unit=Units(_parse_int(p["unit"], "unit")),
    )


def _transfer(meta: EventMeta, raw: object) -> TransferEvent:
    p = _params(raw, {"from", "to", "token_id"}, "transfer")
    return TransferEvent(
        meta=meta,
        from_address=_parse_addr(p["from"], "from"),
        to_address=_parse_addr(p["to"], "to"),
        token_id=OrderId(_parse_int(p["token_id"], "token_id")),
    )


def _rebalancer_claim(meta: EventMeta, raw: object) -> RebalancerClaimEvent:
    p = _params(
        raw, {"pool_key", "claimed_amount_a", "claimed_amount_b"}, "rebalancer_claim"
    )
    return RebalancerClaimEvent(
        meta=meta,
        pool_key=_parse_key(p["pool_key"], "pool_key"),
        claimed_amount_a=_parse_int(p["claimed_amount_a"], "claimed_amount_a"),
        claimed_amount_b=_parse_int(p["claimed_amount_b"], "claimed_amount_b"),
    )


def _update_position(meta: EventMeta, raw: object) -> UpdatePositionEvent:
    p = _params(raw, {"pool_key", "oracle_price"}, "update_position")
    return UpdatePositionEvent(
        meta=meta,
        pool_key=_parse_key(p["pool_key"], "pool_key"),
        oracle_price=_parse_int(p["oracle_price"], "oracle_price"),
    )


def _block(meta: EventMeta, raw: object) -> BlockEvent:
    _params(raw if raw is not None else {}, set(), "block")
    return BlockEvent(meta=meta)


_PARSERS: dict[str, Callable[[EventMeta, object], Event]] = {
    "open": _open,
    "make": _make,
    "take": _take,
    "cancel": _cancel,
    "claim": _claim,
    "transfer": _transfer,
    "rebalancer_claim": _rebalancer_claim,
    "update_position": _update_position,
    "block": _block,
}


def parse_event(record: object) -> Event:
    if not isinstance(record, dict):
        raise SchemaError("event must be an object")
    keys = set(record.keys())
    if not keys.issubset(_ENVELOPE_KEYS) or not _REQUIRED_KEYS <= keys:
        raise SchemaError(f"unexpected event envelope keys: {sorted(keys)}")
    kind = record["type"]
    parser = _PARSERS.get(kind) if isinstance(kind, str) else None
    if parser is None:
        raise SchemaError(f"unknown event type: {kind!r}")
    tx_hash = record.get("tx_hash", "")
    if not isinstance(tx_hash, str):
        raise SchemaError("tx_hash must be a string")
    meta = EventMeta(
        block_number=_parse_int(record["block_number"], "block_number"),
        block_timestamp=TsSec(_parse_int(record["block_timestamp"], "block_timestamp")),
        log_index=_parse_int(record["log_index"], "log_index"),
        tx_hash=tx_hash.lower(),
    )
    return parser(meta, record.get("params"))


def _open_feed(path: str | Path) -> TextIO:
    p = Path(path)
    if p.suffix == ".gz":
        return gzip.open(p, mode="rt", encoding="utf-8")
    return p.open("rt", encoding="utf-8")


def iter_events(path: str | Path) -> Iterator[Event]:
    p = Path(path)
    with _open_feed(p) as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise SchemaError(f"invalid JSON at {p}:{line_number}") from exc
            try:
                yield parse_event(record)
            except SchemaError as exc:
                raise SchemaError(f"{exc} at {p}:{line_number}") from exc
