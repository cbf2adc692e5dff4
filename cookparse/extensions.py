"""
Optional extensions to the recipe markup.

Which extensions are enabled is controlled by an :py:class:`Extensions`
value, usually obtained from a named preset:

.. autoclass:: Extensions
    :members:

.. autofunction:: resolve_extensions

Modes
=====

With the ``modes`` extension enabled, ``>> [mode]: <mode>`` (or
``[define]``) directives change how subsequent steps are interpreted. See
:py:class:`DefineMode`.

.. autoclass:: DefineMode
    :members:

.. autofunction:: is_special_directive

.. autofunction:: apply_directive_mode

Step item transforms
====================

The following transforms each take a list of step items and return a new
list. Items which a transform does not apply to are passed through
unchanged.

.. autofunction:: split_advanced_units

.. autofunction:: fold_aliases

.. autofunction:: split_invalid_markers

.. autofunction:: extract_inline_quantities
"""

from typing import Iterator, List, Mapping, Optional, Tuple, Union

from dataclasses import dataclass, replace

from enum import Enum

import re

import logging

from cookparse.diagnostics import SourcePosition
from cookparse.number_parser import number
from cookparse.recipe import (
    Cookware,
    Ingredient,
    InlineQuantity,
    InlineQuantityRef,
    StepItem,
    Text,
    Timer,
)


__all__ = [
    "Extensions",
    "PRESETS",
    "resolve_extensions",
    "DefineMode",
    "is_special_directive",
    "apply_directive_mode",
    "split_advanced_units",
    "fold_aliases",
    "split_invalid_markers",
    "extract_inline_quantities",
]


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Extensions:
    """
    The set of enabled markup extensions.
    """

    modes: bool = False
    """Enable ``>> [mode]: ...`` directives."""

    inline_quantities: bool = False
    """Extract numbers with units (e.g. '180°C') from step text."""

    advanced_units: bool = False
    """Accept amounts such as ``{2 cups}`` (with no '%' separator)."""

    aliases: bool = False
    """
    Keep ``name|alias`` names split. When disabled, the alias remains part
    of the name.
    """

    strict_timers: bool = False
    """Treat timers with neither a duration nor a unit as an error."""

    @classmethod
    def from_preset(cls, preset: str) -> "Extensions":
        """
        Return the named preset (see :py:data:`PRESETS`). Raises
        :py:exc:`ValueError` for unknown names.
        """
        try:
            return PRESETS[preset]
        except KeyError:
            raise ValueError(
                f"Unknown extension preset {preset!r} "
                f"(expected one of {', '.join(sorted(PRESETS))})"
            )


PRESETS: Mapping[str, Extensions] = {
    "canonical": Extensions(),
    "all": Extensions(
        modes=True,
        inline_quantities=True,
        advanced_units=True,
        aliases=True,
        strict_timers=True,
    ),
}
"""
The extension presets. ``canonical`` enables nothing; ``all`` enables
everything.
"""


def resolve_extensions(extensions: Union[str, Extensions]) -> Extensions:
    """Accept either a preset name or an :py:class:`Extensions`."""
    if isinstance(extensions, Extensions):
        return extensions
    else:
        return Extensions.from_preset(extensions)


class DefineMode(Enum):
    """How steps are interpreted, as set by ``[mode]`` directives."""

    all = "all"
    """Steps are steps (the default)."""

    components = "components"
    """
    Steps only define components; they are not shown as steps.
    """

    steps = "steps"
    """
    Components used in steps must have been defined previously.
    """

    text = "text"
    """Steps are plain text; component markup is ignored."""


SPECIAL_DIRECTIVE_KEYS = frozenset(["[mode]", "[define]", "[duplicate]"])

MODE_DIRECTIVE_KEYS = frozenset(["[mode]", "[define]"])

MODE_NAMES = {
    "all": DefineMode.all,
    "default": DefineMode.all,
    "components": DefineMode.components,
    "ingredients": DefineMode.components,
    "steps": DefineMode.steps,
    "text": DefineMode.text,
}


def is_special_directive(key: str) -> bool:
    """True for (case insensitive) ``[mode]``, ``[define]`` and ``[duplicate]``."""
    return key.lower() in SPECIAL_DIRECTIVE_KEYS


def apply_directive_mode(mode: DefineMode, key: str, value: str) -> DefineMode:
    """
    Return the mode in effect after a special directive. Unrecognised mode
    names (and ``[duplicate]`` directives) leave the mode unchanged.
    """
    if key.lower() not in MODE_DIRECTIVE_KEYS:
        return mode
    new_mode = MODE_NAMES.get(value.strip().lower())
    if new_mode is None:
        logger.debug("Ignoring unknown mode %r", value)
        return mode
    return new_mode


def split_advanced_units(items: List[StepItem]) -> List[StepItem]:
    """
    Split ingredient and timer quantities written like ``{2 cups}`` into a
    number and unit. The number is the first word and the unit is everything
    after it, e.g. ``{2 large cans}``.
    """
    out: List[StepItem] = []
    for item in items:
        if (
            isinstance(item, (Ingredient, Timer))
            and isinstance(item.quantity, str)
            and item.units == ""
        ):
            match = re.fullmatch(r"(.+?)\s+(.+)", item.quantity.strip())
            if match is not None:
                units = match.group(2).strip()
                try:
                    quantity = number(match.group(1).strip())
                except ValueError:
                    pass
                else:
                    if units:
                        item = replace(item, quantity=quantity, units=units)
        out.append(item)
    return out


def fold_aliases(items: List[StepItem]) -> List[StepItem]:
    """
    Put aliases back into the names of ingredients and cookware, i.e.
    'name|alias', for when the alias extension is disabled.
    """
    out: List[StepItem] = []
    for item in items:
        if isinstance(item, (Ingredient, Cookware)) and item.alias is not None:
            item = replace(item, name=f"{item.name}|{item.alias}", alias=None)
        out.append(item)
    return out


invalid_marker_pattern = re.compile(r"(?=[@#~][ \t])")


def _shifted(
    position: Optional[SourcePosition], delta: int
) -> Optional[SourcePosition]:
    # Only valid within a single line
    if position is None:
        return None
    return SourcePosition(
        position.line, position.column + delta, position.offset + delta
    )


def split_invalid_markers(items: List[StepItem]) -> List[StepItem]:
    """
    Split text at sigils which do not start a component (e.g. the '@' in
    'email @ home') so that they begin a text item of their own.
    """
    out: List[StepItem] = []
    for item in items:
        if not isinstance(item, Text):
            out.append(item)
            continue
        delta = 0
        for part in invalid_marker_pattern.split(item.value):
            if part:
                out.append(Text(part, _shifted(item.position, delta)))
            delta += len(part)
    return out


inline_unit_pattern = re.compile(r"[°º]?[A-Za-z°º℃]+")


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _find_inline_quantities(text: str) -> Iterator[Tuple[int, int, InlineQuantity]]:
    """
    Yield (start, end, quantity) for each number-with-unit found in text.
    The unit either directly follows the number (e.g. '180°C') or is the
    next word (e.g. '150 F'). The whole unit must be letters or degree
    signs, so '180°C.' is not a quantity.
    """
    cursor = 0
    i = 0
    while i < len(text):
        if not _is_digit(text[i]):
            i += 1
            continue

        start = i
        negative = i > cursor and text[i - 1] == "-"
        if negative:
            start -= 1

        word_end = i
        while word_end < len(text) and not text[word_end].isspace():
            word_end += 1

        number_end = i
        while number_end < word_end and (
            _is_digit(text[number_end]) or text[number_end] == "."
        ):
            number_end += 1

        if number_end < word_end:
            unit_start, unit_end = number_end, word_end
        else:
            unit_start = word_end
            while unit_start < len(text) and text[unit_start] in " \t":
                unit_start += 1
            unit_end = unit_start
            while unit_end < len(text) and not text[unit_end].isspace():
                unit_end += 1

        unit_match = inline_unit_pattern.fullmatch(text[unit_start:unit_end])
        try:
            value = number(text[i:number_end])
        except ValueError:
            unit_match = None

        if unit_match is None:
            i = unit_end
            continue

        yield start, unit_end, InlineQuantity(
            -value if negative else value,
            unit_match.group(),
            raw=text[start:unit_end],
        )
        cursor = i = unit_end


def extract_inline_quantities(
    items: List[StepItem], first_index: int
) -> Tuple[List[StepItem], List[InlineQuantity]]:
    """
    Replace numbers with units found in text items with
    :py:class:`~cookparse.recipe.InlineQuantityRef` items.

    Returns the new item list and the newly found quantities. The references
    are numbered from ``first_index``, i.e. the number of quantities already
    found earlier in the document.
    """
    out: List[StepItem] = []
    quantities: List[InlineQuantity] = []
    for item in items:
        if not isinstance(item, Text):
            out.append(item)
            continue

        cursor = 0
        for start, end, quantity in _find_inline_quantities(item.value):
            if start > cursor:
                out.append(
                    Text(item.value[cursor:start], _shifted(item.position, cursor))
                )
            out.append(InlineQuantityRef(first_index + len(quantities)))
            quantities.append(quantity)
            cursor = end
        if cursor < len(item.value):
            out.append(Text(item.value[cursor:], _shifted(item.position, cursor)))
    return out, quantities
