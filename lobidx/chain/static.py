"""Offline collaborator implementations backed by JSON files."""

from __future__ import annotations

from decimal import Decimal, localcontext
import json
from pathlib import Path

from lobidx.chain.api import LegLiquidity, PoolLiquidity, StrategyPosition, TokenMeta
from lobidx.core.decimal_ctx import DECIMAL_CTX
from lobidx.core.errors import ConfigError, MissingEntityError, SchemaError
from lobidx.core.fixedpoint import PRICE_PRECISION
from lobidx.core.types import ADDRESS_ZERO, Address, PriceX96, parse_address, parse_pool_key

NATIVE_TOKEN = TokenMeta(symbol="ETH", name="Ether", decimals=18)
UNKNOWN_TOKEN = TokenMeta(symbol="unknown", name="unknown", decimals=18)

_TICK_BASE = Decimal("1.0001")


class TickMathOracle:
    """price = 1.0001 ** tick scaled by 2**96, truncated."""

    def to_price(self, tick: int) -> PriceX96:
        with localcontext(DECIMAL_CTX):
            return PriceX96(int(_TICK_BASE ** int(tick) * PRICE_PRECISION))


def _load_object(path: str | Path, what: str) -> dict:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid {what} JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{what} must be an object")
    return data


def _require_int(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigError(f"{field} must be an integer") from exc
    raise ConfigError(f"{field} must be an integer")


class StaticTokenProvider:
    """Token metadata from a ``{address: {symbol, name, decimals}}`` map.

    The zero address is the native token; unlisted tokens fall back to
    ``unknown`` with 18 decimals.
    """

    def __init__(self, tokens: dict[Address, TokenMeta] | None = None) -> None:
        self._tokens = dict(tokens or {})

    @classmethod
    def from_json(cls, path: str | Path) -> "StaticTokenProvider":
        data = _load_object(path, "token metadata")
        tokens: dict[Address, TokenMeta] = {}
        for raw_address, entry in data.items():
            try:
                address = parse_address(raw_address)
            except SchemaError as exc:
                raise ConfigError(str(exc)) from exc
            if not isinstance(entry, dict):
                raise ConfigError(f"token entry must be an object: {raw_address}")
            if not set(entry.keys()).issubset({"symbol", "name", "decimals"}):
                raise ConfigError(f"unexpected keys in token entry: {raw_address}")
            decimals = _require_int(entry.get("decimals", 18), "decimals")
            if not 0 <= decimals <= 255:
                raise ConfigError(f"decimals out of range: {raw_address}")
            tokens[address] = TokenMeta(
                symbol=str(entry.get("symbol", UNKNOWN_TOKEN.symbol)),
                name=str(entry.get("name", UNKNOWN_TOKEN.name)),
                decimals=decimals,
            )
        return cls(tokens)

    def get(self, address: Address) -> TokenMeta:
        if address == ADDRESS_ZERO:
            return NATIVE_TOKEN
        return self._tokens.get(address, UNKNOWN_TOKEN)


def _parse_leg(value: object, field: str) -> LegLiquidity:
    if not isinstance(value, dict):
        raise ConfigError(f"{field} must be an object")
    if set(value.keys()) != {"reserve", "cancelable", "claimable"}:
        raise ConfigError(f"{field} needs reserve, cancelable, claimable")
    return LegLiquidity(
        reserve=_require_int(value["reserve"], f"{field}.reserve"),
        cancelable=_require_int(value["cancelable"], f"{field}.cancelable"),
        claimable=_require_int(value["claimable"], f"{field}.claimable"),
    )


class StaticPoolSource:
    """Pool state from a ``{pool_key: {...}}`` map; values do not change."""

    def __init__(
        self,
        *,
        liquidity: dict[str, PoolLiquidity] | None = None,
        supply: dict[str, int] | None = None,
        positions: dict[str, StrategyPosition] | None = None,
    ) -> None:
        self._liquidity = dict(liquidity or {})
        self._supply = dict(supply or {})
        self._positions = dict(positions or {})

    @classmethod
    def from_json(cls, path: str | Path) -> "StaticPoolSource":
        data = _load_object(path, "pool state")
        liquidity: dict[str, PoolLiquidity] = {}
        supply: dict[str, int] = {}
        positions: dict[str, StrategyPosition] = {}
        allowed = {"liquidity_a", "liquidity_b", "total_supply", "tick_a", "tick_b"}
        for raw_key, entry in data.items():
            try:
                key = parse_pool_key(raw_key)
            except SchemaError as exc:
                raise ConfigError(str(exc)) from exc
            if not isinstance(entry, dict) or set(entry.keys()) != allowed:
                raise ConfigError(f"pool entry needs {sorted(allowed)}: {raw_key}")
            liquidity[key] = PoolLiquidity(
                a=_parse_leg(entry["liquidity_a"], "liquidity_a"),
                b=_parse_leg(entry["liquidity_b"], "liquidity_b"),
            )
            supply[key] = _require_int(entry["total_supply"], "total_supply")
            positions[key] = StrategyPosition(
                tick_a=_require_int(entry["tick_a"], "tick_a"),
                tick_b=_require_int(entry["tick_b"], "tick_b"),
            )
        return cls(liquidity=liquidity, supply=supply, positions=positions)

    def _lookup(self, table: dict, pool_key: str, what: str):
        value = table.get(pool_key)
        if value is None:
            raise MissingEntityError(f"no {what} for pool {pool_key}")
        return value

    def get_liquidity(self, pool_key: str) -> PoolLiquidity:
        return self._lookup(self._liquidity, pool_key, "liquidity")

    def total_supply(self, pool_key: str) -> int:
        return self._lookup(self._supply, pool_key, "total supply")

    def get_position(self, pool_key: str) -> StrategyPosition:
        return self._lookup(self._positions, pool_key, "strategy position")
