"""
A parser for the Cooklang recipe markup language.

Typical usage::

    >>> from cookparse import parse
    >>> document = parse("Crack @eggs{3} into a #bowl.")
    >>> document.ingredients[0].name
    'eggs'

:py:func:`parse` returns a :py:class:`~cookparse.recipe.Document` and never
raises for problems with the recipe itself: these are reported in the
document's ``errors`` and ``warnings`` lists. The document may be converted
into the canonical form used by the format's conformance tests
(:py:func:`to_canonical`) or into a flattened, de-duplicated form
(:py:func:`to_simplified`).
"""

from cookparse.canonical import parse_to_canonical, to_canonical
from cookparse.compiler import compile as parse
from cookparse.diagnostics import Diagnostic, Severity, SourcePosition
from cookparse.extensions import PRESETS, Extensions
from cookparse.recipe import (
    Cookware,
    Document,
    Ingredient,
    InlineQuantity,
    Section,
    Step,
    Text,
    TextBlock,
    Timer,
)
from cookparse.serializer import canonical_to_markup
from cookparse.simplified import SimplifiedRecipe, parse_simplified, to_simplified


__all__ = [
    "parse",
    "parse_to_canonical",
    "parse_simplified",
    "to_canonical",
    "to_simplified",
    "canonical_to_markup",
    "Extensions",
    "PRESETS",
    "Diagnostic",
    "Severity",
    "SourcePosition",
    "Document",
    "Section",
    "Step",
    "TextBlock",
    "Text",
    "Ingredient",
    "Cookware",
    "Timer",
    "InlineQuantity",
    "SimplifiedRecipe",
]
