"""Fixed-point price conversions.

Prices are integers scaled by 2**96. Amounts are integer token atoms; a book
trades in whole units of ``unit_size`` quote atoms.
"""

from __future__ import annotations

from decimal import Decimal, localcontext

from lobidx.core.decimal_ctx import DECIMAL_CTX, ZERO

PRICE_PRECISION = 1 << 96


def _div_trunc(numer: int, denom: int) -> int:
    # Truncates toward zero like big-integer division; anomalous negative
    # amounts must not round away from zero.
    q = abs(numer) // abs(denom)
    return q if (numer >= 0) == (denom > 0) else -q


def unit_to_base(unit_size: int, unit_amount: int, price: int) -> int:
    if price == 0:
        return 0
    return _div_trunc(unit_amount * unit_size * PRICE_PRECISION, price)


def unit_to_quote(unit_size: int, unit_amount: int) -> int:
    return unit_amount * unit_size


def base_to_quote(base_amount: int, price: int) -> int:
    return _div_trunc(base_amount * price, PRICE_PRECISION)


def format_price(price: int, base_decimals: int, quote_decimals: int) -> Decimal:
    with localcontext(DECIMAL_CTX):
        return (
            Decimal(price)
            / Decimal(PRICE_PRECISION)
            * Decimal(10) ** base_decimals
            / Decimal(10) ** quote_decimals
        )


def format_inverted_price(
    price: int, base_decimals: int, quote_decimals: int
) -> Decimal:
    if price == 0:
        return ZERO
    with localcontext(DECIMAL_CTX):
        return Decimal(1) / format_price(price, base_decimals, quote_decimals)


def format_units(amount: int, decimals: int = 18) -> Decimal:
    with localcontext(DECIMAL_CTX):
        return Decimal(amount) / Decimal(10) ** decimals
