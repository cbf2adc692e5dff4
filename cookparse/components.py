"""
Conversion of raw component tokens (as matched by the grammar) into
:py:class:`~cookparse.recipe.Ingredient`, :py:class:`~cookparse.recipe.Cookware`
and :py:class:`~cookparse.recipe.Timer` records.

.. autofunction:: parse_ingredient

.. autofunction:: parse_cookware

.. autofunction:: parse_timer

The following helpers are used to interpret the parts of a token:

.. autofunction:: parse_amount

.. autofunction:: parse_modifiers

.. autofunction:: split_name_alias
"""

from typing import FrozenSet, Optional, Tuple

import re

from cookparse.diagnostics import SourcePosition
from cookparse.number_parser import parse_quantity
from cookparse.recipe import (
    SOME,
    Cookware,
    Definition,
    Ingredient,
    Modifier,
    Quantity,
    Reference,
    ReferenceTarget,
    Relation,
    Timer,
)


__all__ = [
    "parse_amount",
    "parse_modifiers",
    "split_name_alias",
    "parse_ingredient",
    "parse_cookware",
    "parse_timer",
]


ingredient_token_pattern = re.compile(
    r"@(?P<modifiers>[@&?+\-]*)(?P<name>[^{}()]*)"
    r"(\{(?P<amount>[^{}]*)\})?(\((?P<note>[^()]*)\))?"
)

cookware_token_pattern = re.compile(
    r"#(?P<modifiers>[&?+\-]*)(?P<name>[^{}()]*)"
    r"(\{(?P<amount>[^{}]*)\})?(\((?P<note>[^()]*)\))?"
)

timer_token_pattern = re.compile(r"~(?P<name>[^{}]*)(\{(?P<amount>[^{}]*)\})?")


def parse_amount(text: str) -> Tuple[Quantity, str, bool]:
    """
    Parse the contents of an amount's braces into a (quantity, units, fixed)
    tuple.

    A leading '=' marks the quantity as fixed. The *last* '%' separates the
    quantity from the units. Units are an empty string when no '%' is given.
    """
    text = text.strip()
    fixed = text.startswith("=")
    if fixed:
        text = text[1:]

    quantity, separator, units = text.rpartition("%")
    if not separator:
        quantity, units = text, ""

    return parse_quantity(quantity), units.strip(), fixed


def parse_modifiers(characters: str) -> FrozenSet[Modifier]:
    """
    Convert a string of modifier characters (e.g. '&?') into a set of
    :py:class:`~cookparse.recipe.Modifier` values.
    """
    return frozenset(Modifier(c) for c in characters)


def split_name_alias(name: str) -> Tuple[str, Optional[str]]:
    """
    Split a 'name|alias' string on the first '|'. The alias is None when
    absent or empty.
    """
    name, _separator, alias = name.partition("|")
    return name.strip(), (alias.strip() or None)


def _initial_relation(
    modifiers: FrozenSet[Modifier], target: ReferenceTarget
) -> Relation:
    # References are resolved later by cookparse.linker
    if Modifier.reference in modifiers:
        return Reference(-1, target)
    else:
        return Definition()


def parse_ingredient(
    raw: str, position: Optional[SourcePosition] = None
) -> Ingredient:
    """
    Parse an ingredient token such as ``@&ground pepper|pepper{=1%tsp}(fresh)``.

    Raises :py:exc:`ValueError` if ``raw`` is not an ingredient token; the
    grammar only ever produces valid ones.
    """
    match = ingredient_token_pattern.fullmatch(raw)
    if match is None:
        raise ValueError(f"not an ingredient token: {raw!r}")

    modifiers = parse_modifiers(match["modifiers"])
    name, alias = split_name_alias(match["name"])

    quantity: Quantity = SOME
    units = ""
    fixed = False
    if match["amount"] is not None:
        quantity, units, fixed = parse_amount(match["amount"])
        if quantity == "":
            quantity = SOME

    return Ingredient(
        name=name,
        quantity=quantity,
        units=units,
        alias=alias,
        note=match["note"].strip() if match["note"] is not None else None,
        fixed=fixed,
        modifiers=modifiers,
        relation=_initial_relation(modifiers, ReferenceTarget.ingredient),
        raw=raw,
        position=position,
    )


def parse_cookware(raw: str, position: Optional[SourcePosition] = None) -> Cookware:
    """
    Parse a cookware token such as ``#frying pan{2}``.

    Cookware amounts have no units: the whole of the braces' contents is the
    quantity, which defaults to 1.
    """
    match = cookware_token_pattern.fullmatch(raw)
    if match is None:
        raise ValueError(f"not a cookware token: {raw!r}")

    modifiers = parse_modifiers(match["modifiers"])
    name, alias = split_name_alias(match["name"])

    quantity: Quantity = 1
    if match["amount"] is not None:
        quantity = parse_quantity(match["amount"])
        if quantity == "":
            quantity = 1

    return Cookware(
        name=name,
        quantity=quantity,
        alias=alias,
        note=match["note"].strip() if match["note"] is not None else None,
        modifiers=modifiers,
        relation=_initial_relation(modifiers, ReferenceTarget.cookware),
        raw=raw,
        position=position,
    )


def parse_timer(raw: str, position: Optional[SourcePosition] = None) -> Timer:
    """
    Parse a timer token such as ``~{10%minutes}``, ``~proof{1%hour}`` or
    the name-only ``~rest``.
    """
    match = timer_token_pattern.fullmatch(raw)
    if match is None:
        raise ValueError(f"not a timer token: {raw!r}")

    quantity: Quantity = ""
    units = ""
    if match["amount"] is not None:
        quantity, units, _fixed = parse_amount(match["amount"])

    return Timer(
        name=match["name"].strip() or None,
        quantity=quantity,
        units=units,
        raw=raw,
        position=position,
    )
