"""Run configuration primitives and network address roles."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
from pathlib import Path

from lobidx.core.errors import ConfigError, SchemaError
from lobidx.core.types import Address, parse_address


class FailurePolicy(str, Enum):
    HARD_FAIL = "hard_fail"
    QUARANTINE = "quarantine"


class Role(str, Enum):
    CONTROLLER = "controller"
    REBALANCER = "rebalancer"
    STRATEGY = "strategy"


@dataclass(frozen=True, slots=True)
class NetworkConfig:
    chain_id: int
    controller: Address
    rebalancer: Address
    strategy: Address

    def resolve(self, role: Role) -> Address:
        if role == Role.CONTROLLER:
            return self.controller
        if role == Role.REBALANCER:
            return self.rebalancer
        if role == Role.STRATEGY:
            return self.strategy
        raise ConfigError(f"unknown role: {role!r}")


def _preset(chain_id: int, controller: str, rebalancer: str, strategy: str) -> NetworkConfig:
    return NetworkConfig(
        chain_id=chain_id,
        controller=parse_address(controller),
        rebalancer=parse_address(rebalancer),
        strategy=parse_address(strategy),
    )


ARBITRUM_SEPOLIA = 421614
BASE = 8453
BERA_TESTNET = 80084
ZKSYNC_ERA = 324
ZKSYNC_ERA_SEPOLIA = 300
SONIC_TESTNET = 57054
MANTLE_SEPOLIA = 5003

NETWORK_PRESETS: dict[int, NetworkConfig] = {
    ARBITRUM_SEPOLIA: _preset(
        ARBITRUM_SEPOLIA,
        "0x6e7CC9b243fdcD152939Df2E090EDcDcf5df7356",
        "0x30b4e9215322B5d0c290249126bCf96C2Ca8e948",
        "0x540488b54c8DE6e44Db7553c3A2C4ABEb09Fc69C",
    ),
    SONIC_TESTNET: _preset(
        SONIC_TESTNET,
        "0xAEB670cDba6094C30cbA3c88DCBBA6F6d37F6032",
        "0x4e4dDa36B8bBA1b4aF776bA881347c17CDAC2085",
        "0x7a526046c6eAE6879bcB72E6022f72c15A824063",
    ),
    BASE: _preset(
        BASE,
        "0xA694fDd88E7FEE1f5EBF878153B68ADb2ce6EbbF",
        "0x13f2Ff6Cc952f4181D6c316426e9CbdA957c6482",
        "0x284A7A4c8Bc2873EDCa149809C1CAaaf3C4ED6eb",
    ),
    BERA_TESTNET: _preset(
        BERA_TESTNET,
        "0x1A0E22870dE507c140B7C765a04fCCd429B8343F",
        "0x7d06c636bA86BD1fc2C38B11F1e5701145CABc30",
        "0x7d06c636bA86BD1fc2C38B11F1e5701145CABc30",
    ),
    ZKSYNC_ERA: _preset(
        ZKSYNC_ERA,
        "0x9aF80CC61AAd734604f139A53E22c56Cdbf9a158",
        "0x9aF80CC61AAd734604f139A53E22c56Cdbf9a158",
        "0x9aF80CC61AAd734604f139A53E22c56Cdbf9a158",
    ),
    ZKSYNC_ERA_SEPOLIA: _preset(
        ZKSYNC_ERA_SEPOLIA,
        "0xA253A7c6C26E0a6E7eAbaAbCD8b1cD43A2468c48",
        "0xA253A7c6C26E0a6E7eAbaAbCD8b1cD43A2468c48",
        "0xA253A7c6C26E0a6E7eAbaAbCD8b1cD43A2468c48",
    ),
    MANTLE_SEPOLIA: _preset(
        MANTLE_SEPOLIA,
        "0x46fbe4bf4dc4a862cdf13781D421546Ab378C113",
        "0x1A0E22870dE507c140B7C765a04fCCd429B8343F",
        "0x1A0E22870dE507c140B7C765a04fCCd429B8343F",
    ),
}

DEFAULT_CHAIN_ID = MANTLE_SEPOLIA


def network_for_chain(chain_id: int) -> NetworkConfig:
    preset = NETWORK_PRESETS.get(chain_id)
    if preset is None:
        raise ConfigError(f"no address preset for chain id {chain_id}")
    return preset


def _require_address(data: dict, field: str) -> Address:
    value = data.get(field)
    if not isinstance(value, str):
        raise ConfigError(f"{field} must be an address string")
    try:
        return parse_address(value)
    except SchemaError as exc:
        raise ConfigError(str(exc)) from exc


def load_network_config(path: str | Path) -> NetworkConfig:
    """Load roles from JSON.

    Either ``{"chain_id": N}`` to select a preset, or ``chain_id`` plus all
    three role addresses to define a network explicitly. Explicit addresses
    override the preset for that chain.
    """
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid network config JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("network config must be an object")
    allowed = {"chain_id", *(role.value for role in Role)}
    if not set(data.keys()).issubset(allowed):
        raise ConfigError("unexpected keys in network config")
    chain_id = data.get("chain_id")
    if not isinstance(chain_id, int) or isinstance(chain_id, bool):
        raise ConfigError("chain_id must be an integer")

    overrides = {role: data[role.value] for role in Role if role.value in data}
    if not overrides:
        return network_for_chain(chain_id)
    base = NETWORK_PRESETS.get(chain_id)
    if base is None and len(overrides) != len(Role):
        raise ConfigError(
            f"chain id {chain_id} has no preset; all roles are required"
        )
    return NetworkConfig(
        chain_id=chain_id,
        controller=(
            _require_address(data, Role.CONTROLLER.value)
            if Role.CONTROLLER in overrides
            else base.controller
        ),
        rebalancer=(
            _require_address(data, Role.REBALANCER.value)
            if Role.REBALANCER in overrides
            else base.rebalancer
        ),
        strategy=(
            _require_address(data, Role.STRATEGY.value)
            if Role.STRATEGY in overrides
            else base.strategy
        ),
    )
