"""Decimal helpers shared by every series builder.

All balances, savings and projections are rounded with the same rule:
two fractional digits, halves rounded away from zero
(``decimal.ROUND_HALF_UP``).  Amounts are carried as :class:`~decimal.Decimal`
so that a figure like ``0.1 + 0.2`` never drifts.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from .models import InvalidAmountError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert ``value`` to a finite :class:`Decimal`.

    Floats go through ``str`` so ``-1200.1`` becomes ``Decimal('-1200.1')``
    rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Boolean is not a valid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidAmountError(f"Unable to parse amount {value!r}") from exc
    else:
        raise InvalidAmountError(f"Unsupported amount type {type(value).__name__}")
    if not result.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    return result


def round2(value: Number) -> Decimal:
    """Round to cents, halves away from zero."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
