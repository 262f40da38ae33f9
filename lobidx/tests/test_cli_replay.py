import json
from pathlib import Path

import pytest

from lobidx.cli import replay_main
from lobidx.core import encode_order_id

BASE = "0x" + "aa" * 20
QUOTE = "0x" + "bb" * 20
USER = "0x" + "11" * 20


def _event(kind: str, log_index: int, params: dict) -> str:
    return json.dumps(
        {
            "type": kind,
            "block_number": 10,
            "block_timestamp": 1_700_000_000,
            "log_index": log_index,
            "params": params,
        }
    )


def _write_feed(path: Path) -> None:
    lines = [
        _event(
            "open",
            0,
            {
                "book_id": 1,
                "base": BASE,
                "quote": QUOTE,
                "unit_size": 1000,
                "maker_policy": 0,
                "taker_policy": 0,
                "hooks": "0x" + "00" * 20,
            },
        ),
        _event("make", 1, {"book_id": 1, "user": USER, "tick": 0, "order_index": 0, "unit": 10}),
        _event("take", 2, {"book_id": 1, "tick": 0, "unit": 4}),
        _event("take", 3, {"book_id": 2, "tick": 0, "unit": 1}),
        _event("claim", 4, {"order_id": str(encode_order_id(1, 0, 0)), "unit": 4}),
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_replay_writes_state_and_quarantine(tmp_path: Path, capsys) -> None:
    feed = tmp_path / "events.jsonl"
    _write_feed(feed)
    tokens = tmp_path / "tokens.json"
    tokens.write_text(
        json.dumps({QUOTE: {"symbol": "USDC", "name": "USD Coin", "decimals": 6}}),
        encoding="utf-8",
    )
    output = tmp_path / "state.json"
    quarantine = tmp_path / "q.jsonl"

    code = replay_main(
        [
            "--events", str(feed),
            "--tokens", str(tokens),
            "--quarantine", str(quarantine),
            "--output", str(output),
        ]
    )
    assert code == 0
    summary = capsys.readouterr().out
    assert "events=5 applied=4 skipped=1" in summary
    assert "digest=" in summary

    state = json.loads(output.read_text(encoding="utf-8"))
    order = state["OpenOrder"][str(encode_order_id(1, 0, 0))]
    assert order["unit_open_amount"] == 6
    assert order["unit_claimed_amount"] == 4
    assert state["Depth"]["1-0"]["unit_amount"] == 6
    assert state["Token"][QUOTE]["decimals"] == 6
    assert state["Token"][BASE]["symbol"] == "unknown"

    rows = [json.loads(line) for line in quarantine.read_text(encoding="utf-8").splitlines()]
    assert [row["kind"] for row in rows] == ["missing_entity"]


def test_replay_is_deterministic(tmp_path: Path, capsys) -> None:
    feed = tmp_path / "events.jsonl"
    _write_feed(feed)
    replay_main(["--events", str(feed), "--chain-id", "8453"])
    first = capsys.readouterr().out
    replay_main(["--events", str(feed), "--chain-id", "8453"])
    assert capsys.readouterr().out == first


def test_quarantine_path_rejected_under_hard_fail(tmp_path: Path, capsys) -> None:
    feed = tmp_path / "events.jsonl"
    _write_feed(feed)
    with pytest.raises(SystemExit) as excinfo:
        replay_main(
            [
                "--events", str(feed),
                "--failure-policy", "hard_fail",
                "--quarantine", str(tmp_path / "q.jsonl"),
            ]
        )
    assert excinfo.value.code == 2
    assert "--quarantine" in capsys.readouterr().err
    assert not (tmp_path / "q.jsonl").exists()
