"""Replay a JSON Lines event feed into an in-memory store."""

from __future__ import annotations

import argparse
from contextlib import nullcontext
import logging
from pathlib import Path

from lobidx.chain.static import StaticPoolSource, StaticTokenProvider, TickMathOracle
from lobidx.core.config import (
    DEFAULT_CHAIN_ID,
    FailurePolicy,
    load_network_config,
    network_for_chain,
)
from lobidx.core.errors import SchemaError
from lobidx.core.hashing import stable_json_dumps
from lobidx.engine.indexer import Indexer, IndexerConfig
from lobidx.events.reader import iter_events
from lobidx.ingest.quarantine import JsonlQuarantineSink
from lobidx.store.memory import MemoryStore


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay order book events")
    parser.add_argument("--events", required=True, help="path to events jsonl(.gz)")
    network = parser.add_mutually_exclusive_group()
    network.add_argument("--network-config", help="path to network roles JSON")
    network.add_argument("--chain-id", help="use the address preset of a chain id")
    parser.add_argument("--tokens", help="path to token metadata JSON")
    parser.add_argument("--pools", help="path to pool state JSON")
    parser.add_argument(
        "--failure-policy",
        default=FailurePolicy.QUARANTINE.value,
        choices=[p.value for p in FailurePolicy],
    )
    parser.add_argument("--quarantine", help="path to output quarantine jsonl")
    parser.add_argument(
        "--max-vacant-scan",
        help="abort a take after this many consecutive vacant order indexes",
    )
    parser.add_argument("--output", help="path to output state JSON")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)
    if args.quarantine and args.failure_policy == FailurePolicy.HARD_FAIL.value:
        parser.error("--quarantine requires --failure-policy quarantine")
    return args


def _parse_int(value: str, field: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise SchemaError(f"{field} must be int") from exc


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.network_config:
        roles = load_network_config(args.network_config)
    elif args.chain_id:
        roles = network_for_chain(_parse_int(args.chain_id, "chain-id"))
    else:
        roles = network_for_chain(DEFAULT_CHAIN_ID)
    tokens = StaticTokenProvider.from_json(args.tokens) if args.tokens else StaticTokenProvider()
    pools = StaticPoolSource.from_json(args.pools) if args.pools else StaticPoolSource()
    max_vacant_scan = (
        _parse_int(args.max_vacant_scan, "max-vacant-scan")
        if args.max_vacant_scan is not None
        else None
    )
    policy = FailurePolicy(args.failure_policy)
    config = IndexerConfig(failure_policy=policy, max_vacant_scan=max_vacant_scan)

    store = MemoryStore()
    sink_context = (
        JsonlQuarantineSink(args.quarantine)
        if args.quarantine
        else nullcontext(None)
    )
    with sink_context as sink:
        indexer = Indexer(
            store,
            oracle=TickMathOracle(),
            roles=roles,
            tokens=tokens,
            pools=pools,
            config=config,
            quarantine=sink,
        )
        result = indexer.run(iter_events(args.events))

    if args.output:
        Path(args.output).write_text(
            stable_json_dumps(store.dump()) + "\n", encoding="utf-8"
        )
    print(
        f"events={result.events} applied={result.applied} "
        f"skipped={result.skipped} anomalies={result.anomalies} "
        f"out_of_order={result.out_of_order} entities={len(store)} "
        f"digest={store.digest()}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
