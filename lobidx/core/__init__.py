"""Core primitives for the indexer."""

from __future__ import annotations

from lobidx.core.checked import Checked
from lobidx.core.config import FailurePolicy, NetworkConfig, Role, load_network_config
from lobidx.core.decimal_ctx import DECIMAL_CTX
from lobidx.core.errors import (
    AccountingError,
    ConfigError,
    IndexerError,
    MissingEntityError,
    OrderingError,
    SchemaError,
)
from lobidx.core.fixedpoint import (
    PRICE_PRECISION,
    base_to_quote,
    format_inverted_price,
    format_price,
    format_units,
    unit_to_base,
    unit_to_quote,
)
from lobidx.core.hashing import hash_json, stable_json_dumps
from lobidx.core.order_id import decode_book_id, decode_order_id, encode_order_id
from lobidx.core.time import FIVE_MINUTES, INTERVALS, Interval, OrderingKey, compare_ordering_key
from lobidx.core.types import (
    ADDRESS_ZERO,
    Address,
    BookId,
    OrderId,
    OrderIndex,
    PoolKey,
    PriceX96,
    Side,
    Tick,
    TsSec,
    Units,
    parse_address,
    side_of_tick,
)

__all__ = [
    "ADDRESS_ZERO",
    "AccountingError",
    "Address",
    "BookId",
    "Checked",
    "ConfigError",
    "DECIMAL_CTX",
    "FIVE_MINUTES",
    "FailurePolicy",
    "INTERVALS",
    "IndexerError",
    "Interval",
    "MissingEntityError",
    "NetworkConfig",
    "OrderId",
    "OrderIndex",
    "OrderingError",
    "OrderingKey",
    "PRICE_PRECISION",
    "PoolKey",
    "PriceX96",
    "Role",
    "SchemaError",
    "Side",
    "Tick",
    "TsSec",
    "Units",
    "base_to_quote",
    "compare_ordering_key",
    "decode_book_id",
    "decode_order_id",
    "encode_order_id",
    "format_inverted_price",
    "format_price",
    "format_units",
    "hash_json",
    "load_network_config",
    "parse_address",
    "side_of_tick",
    "stable_json_dumps",
    "unit_to_base",
    "unit_to_quote",
]
