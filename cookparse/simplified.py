"""
A simplified, flattened view of a parsed recipe intended for straightforward
consumption (e.g. rendering a shopping list).

Unlike the :py:class:`~cookparse.recipe.Document`, the simplified form has
no sections or definition/reference relations: ingredients, cookware and
timers are simply de-duplicated across the whole recipe (preserving the
order they first appear in) and quantities are given as strings.

.. autofunction:: to_simplified

.. autofunction:: parse_simplified

.. autoclass:: SimplifiedRecipe
    :members:

.. autoclass:: SimplifiedStep
    :members:

.. autoclass:: SimplifiedIngredient
    :members:

.. autoclass:: SimplifiedTimer
    :members:
"""

from typing import Any, Dict, List, Optional, Union

from dataclasses import dataclass, field

from cookparse.compiler import compile
from cookparse.components import ingredient_token_pattern
from cookparse.diagnostics import Diagnostic
from cookparse.extensions import Extensions
from cookparse.number_formatting import format_number
from cookparse.recipe import (
    SOME,
    Cookware,
    Document,
    Ingredient,
    InlineQuantityRef,
    Quantity,
    Step,
    Text,
    TextBlock,
    Timer,
)


__all__ = [
    "SimplifiedIngredient",
    "SimplifiedTimer",
    "SimplifiedStep",
    "SimplifiedRecipe",
    "to_simplified",
    "parse_simplified",
]


@dataclass(frozen=True)
class SimplifiedIngredient:
    name: str

    quantity: Optional[str]
    """The quantity as written, or None when no amount was given."""

    unit: Optional[str]

    preparation: Optional[str] = None
    """The ingredient's note, e.g. 'finely chopped'."""

    fixed: bool = False


@dataclass(frozen=True)
class SimplifiedTimer:
    name: Optional[str]
    quantity: str
    unit: Optional[str]


@dataclass
class SimplifiedStep:
    text: str
    """The step as plain text (components replaced by their names)."""

    ingredients: List[SimplifiedIngredient] = field(default_factory=list)
    cookware: List[str] = field(default_factory=list)
    timers: List[SimplifiedTimer] = field(default_factory=list)

    inline_comments: List[str] = field(default_factory=list)
    """The text of the ``-- comments`` written on the step's lines."""


@dataclass
class SimplifiedRecipe:
    metadata: Dict[str, Any] = field(default_factory=dict)
    ingredients: List[SimplifiedIngredient] = field(default_factory=list)
    cookware: List[str] = field(default_factory=list)
    timers: List[SimplifiedTimer] = field(default_factory=list)
    steps: List[SimplifiedStep] = field(default_factory=list)

    notes: List[str] = field(default_factory=list)
    """The text blocks (notes and text-mode paragraphs) of every section."""

    sections: List[str] = field(default_factory=list)
    """The names of the named sections."""

    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)


def _quantity_string(quantity: Quantity) -> str:
    if isinstance(quantity, str):
        return quantity
    else:
        return format_number(quantity)


def _amount_omitted(ingredient: Ingredient) -> bool:
    match = ingredient_token_pattern.fullmatch(ingredient.raw)
    if match is None:
        return ingredient.quantity == SOME
    return match["amount"] is None or not match["amount"].strip()


def _simplify_ingredient(ingredient: Ingredient) -> SimplifiedIngredient:
    return SimplifiedIngredient(
        name=ingredient.name,
        quantity=(
            None
            if _amount_omitted(ingredient)
            else _quantity_string(ingredient.quantity)
        ),
        unit=ingredient.units or None,
        preparation=ingredient.note,
        fixed=ingredient.fixed,
    )


def _simplify_timer(timer: Timer) -> SimplifiedTimer:
    return SimplifiedTimer(
        name=timer.name,
        quantity=_quantity_string(timer.quantity),
        unit=timer.units or None,
    )


def _step_text(step: Step, document: Document) -> str:
    parts = []
    for item in step.items:
        if isinstance(item, Text):
            parts.append(item.value)
        elif isinstance(item, (Ingredient, Cookware)):
            parts.append(item.alias or item.name)
        elif isinstance(item, Timer):
            if item.name is not None:
                parts.append(item.name)
            else:
                parts.append(
                    f"{_quantity_string(item.quantity)} {item.units}".strip()
                )
        elif isinstance(item, InlineQuantityRef):
            parts.append(document.inline_quantities[item.index].raw)
    return "".join(parts)


def _simplify_step(step: Step, document: Document) -> SimplifiedStep:
    return SimplifiedStep(
        text=_step_text(step, document),
        ingredients=[
            _simplify_ingredient(item)
            for item in step.items
            if isinstance(item, Ingredient)
        ],
        cookware=[item.name for item in step.items if isinstance(item, Cookware)],
        timers=[
            _simplify_timer(item) for item in step.items if isinstance(item, Timer)
        ],
        inline_comments=list(step.comments),
    )


def to_simplified(document: Document) -> SimplifiedRecipe:
    """
    Produce the simplified form of a document.
    """
    steps = [_simplify_step(step, document) for step in document.steps]

    ingredients: Dict[Any, SimplifiedIngredient] = {}
    cookware: Dict[str, None] = {}
    timers: Dict[Any, SimplifiedTimer] = {}
    for step in steps:
        for ingredient in step.ingredients:
            ingredients.setdefault(
                (ingredient.name, ingredient.quantity, ingredient.unit), ingredient
            )
        for name in step.cookware:
            cookware.setdefault(name, None)
        for timer in step.timers:
            timers.setdefault((timer.name, timer.quantity, timer.unit), timer)

    return SimplifiedRecipe(
        metadata=dict(document.metadata),
        ingredients=list(ingredients.values()),
        cookware=list(cookware),
        timers=list(timers.values()),
        steps=steps,
        notes=[
            content.value
            for section in document.sections
            for content in section.content
            if isinstance(content, TextBlock)
        ],
        sections=[
            section.name for section in document.sections if section.name is not None
        ],
        errors=list(document.errors),
        warnings=list(document.warnings),
    )


def parse_simplified(
    source: str, extensions: Union[str, Extensions] = "canonical"
) -> SimplifiedRecipe:
    """
    Parse a recipe and return its simplified form.
    """
    return to_simplified(compile(source, extensions))
