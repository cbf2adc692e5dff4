"""
Number formatting routines used when recipe quantities and metadata values
are converted into strings.

Numbers are formatted the way JavaScript's ``String(number)`` would format
them so that converted recipes match the format's conformance test data
exactly (e.g. ``2.0`` becomes ``"2"`` and ``1e-7`` becomes ``"1e-7"``).

.. autofunction:: format_number

.. autofunction:: format_float
"""

import math

from decimal import Decimal

from typing import Union


__all__ = [
    "format_float",
    "format_number",
]


def format_float(number: float) -> str:
    """
    Format a floating point value using the shortest representation which
    round-trips.

    Integral values have no decimal point. Scientific notation is used only
    for values of 1e21 or more and values smaller than 1e-6.
    """
    if math.isnan(number):
        return "NaN"
    elif math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    elif number == 0:
        return "0"

    sign, digit_tuple, exponent = Decimal(repr(number)).normalize().as_tuple()
    assert isinstance(exponent, int)
    digits = "".join(map(str, digit_tuple))
    sign_str = "-" if sign else ""

    # Position of the decimal point relative to the start of the digits
    point = exponent + len(digits)

    if len(digits) <= point <= 21:
        return f"{sign_str}{digits}{'0' * (point - len(digits))}"
    elif 0 < point <= 21:
        return f"{sign_str}{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        return f"{sign_str}0.{'0' * -point}{digits}"
    else:
        e = point - 1
        e_str = f"e+{e}" if e >= 0 else f"e-{-e}"
        if len(digits) == 1:
            return f"{sign_str}{digits}{e_str}"
        else:
            return f"{sign_str}{digits[0]}.{digits[1:]}{e_str}"


def format_number(number: Union[int, float]) -> str:
    """
    Format an int or float. See :py:func:`format_float`.
    """
    if isinstance(number, float):
        return format_float(number)
    else:
        return str(number)
