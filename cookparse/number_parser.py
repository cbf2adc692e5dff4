"""
Parsing of the numeric part of component amounts.

.. autofunction:: number

.. autofunction:: parse_quantity
"""

from typing import Union

import re

from cookparse.recipe import Quantity


__all__ = [
    "number",
    "parse_quantity",
]


fraction_pattern = re.compile(
    r"((?P<integer>[0-9]+)[ \t]+)?"
    r"(?P<numerator>[0-9]+)[ \t]*/[ \t]*(?P<denominator>[0-9]+)"
)

decimal_pattern = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")

letter_pattern = re.compile(r"[A-Za-z]")


def _has_leading_zero(digits: str) -> bool:
    return len(digits) > 1 and digits.startswith("0")


def number(value: str) -> Union[int, float]:
    """
    Attempt to parse a number formatted as a fraction (e.g. 9 3/4) float (e.g.
    3.14) or integer (e.g. 123). Throws a :py:exc:`ValueError` if this fails.

    Fractions are returned as floats. Fractions whose integer part or
    numerator has a leading zero (e.g. '01/2') are not considered numbers and
    neither are fractions with a zero denominator.
    """
    match = fraction_pattern.fullmatch(value)
    if match is not None:
        if _has_leading_zero(match["numerator"]) or (
            match["integer"] is not None and _has_leading_zero(match["integer"])
        ):
            raise ValueError(f"fraction with leading zero: {value!r}")
        denominator = int(match["denominator"])
        if denominator == 0:
            raise ValueError(f"fraction with zero denominator: {value!r}")
        integer = int(match["integer"]) if match["integer"] is not None else 0
        return integer + int(match["numerator"]) / denominator
    elif decimal_pattern.fullmatch(value) is None:
        raise ValueError(f"not a number: {value!r}")
    else:
        try:
            return int(value)
        except ValueError:
            return float(value)


def parse_quantity(text: str) -> Quantity:
    """
    Parse the quantity part of an amount.

    Numbers and fractions are converted into numeric values. Anything else
    (including quantities such as 'a pinch' or '3 medium') is returned as a
    (whitespace-stripped) string. An empty quantity becomes an empty string.
    """
    text = text.strip()
    if not text or letter_pattern.search(text):
        return text
    try:
        return number(text)
    except ValueError:
        return text
