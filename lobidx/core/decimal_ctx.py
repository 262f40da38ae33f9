"""Central Decimal context."""

from __future__ import annotations

from decimal import Context, Decimal, ROUND_HALF_EVEN

DECIMAL_CTX = Context(prec=50, rounding=ROUND_HALF_EVEN)

ZERO = Decimal(0)
TWO = Decimal(2)
