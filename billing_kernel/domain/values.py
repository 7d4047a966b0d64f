"""
Values -- coercion for host-supplied monetary and yes/no fields.

Responsibility:
    Turns whatever the host application stored in an amount, discount or
    fee field into a ``Decimal``.  Stored records come from forms and cloud
    sync, so numbers may arrive as ints, floats, numeric strings, empty
    strings or nothing at all.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: every amount leaving this module is a
      ``Decimal`` (never float).
    - Totality: anything non-numeric (None, "", "abc", NaN, infinity,
      booleans, containers) coerces to ``Decimal("0")`` instead of raising.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def coerce_amount(value: Any) -> Decimal:
    """
    Coerce a stored numeric field to ``Decimal``.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.

    Postconditions:
        - Returns a finite ``Decimal``; ``Decimal("0")`` for non-numeric input.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not amount.is_finite():
        return ZERO
    return amount


def coerce_fee(value: Any) -> Decimal:
    """Coerce a fee field; negative fees are treated as zero."""
    amount = coerce_amount(value)
    return amount if amount > ZERO else ZERO


def coerce_flag(value: Any, default: bool = False) -> bool:
    """
    Coerce a stored yes/no field.

    Only real booleans and the strings ``"true"``/``"false"`` (any case)
    are understood; anything else, including ``"no"`` or ``1``, is
    ``default``.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
    return default
