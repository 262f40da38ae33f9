"""Command-line entrypoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lobidx.cli.replay import main as replay_main


def __getattr__(name: str):
    if name == "replay_main":
        from lobidx.cli.replay import main as _main

        return _main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "replay_main",
]
