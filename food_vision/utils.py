"""Utility functions."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round halves away from zero for non-negative values.

    Matches ``Math.round`` / ``Number.toFixed`` as used by the mobile client
    instead of Python's banker's rounding. The intermediate ``round(.., 9)``
    absorbs binary noise such as ``1.005 * 100 == 100.49999999999999``.
    """
    factor = 10 ** digits
    return math.floor(round(value * factor, 9) + 0.5) / factor


def to_number(value, default: float) -> float:
    """Coerce a JSON value to float; falsy or non-numeric values give ``default``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or number == 0:
        return default
    return number
