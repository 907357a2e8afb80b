"""
Rounding helpers shared by the simulation engine and the data providers.

All integer rounding in the dashboard is half away from zero, so 13.5 -> 14
and -2.5 -> -3. Python's built-in round() uses banker's rounding and would
turn 12.5 into 12, which breaks the documented golden values.
"""

import math


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def round_to(value: float, ndigits: int) -> float:
    """Round to ``ndigits`` decimal places, ties away from zero."""
    scale = 10 ** ndigits
    return round_half_away(value * scale) / scale
