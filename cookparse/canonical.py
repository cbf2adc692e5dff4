"""
Conversion of a parsed :py:class:`~cookparse.recipe.Document` into the
canonical form used by the recipe format's conformance test suite.

The canonical form is a JSON-compatible dictionary::

    {
        "metadata": {"servings": "2", "title": "Pancakes"},
        "steps": [
            [
                {"type": "text", "value": "Crack "},
                {"type": "ingredient", "name": "eggs", "quantity": 3, "units": ""},
                {"type": "text", "value": " into a "},
                {"type": "cookware", "name": "bowl", "quantity": 1, "units": ""},
                {"type": "text", "value": "."},
            ],
        ],
    }

Metadata keys are sorted and all values are strings. Only steps are
included: notes, sections, comments and definition/reference relations are
not part of the canonical form.

.. autofunction:: to_canonical

.. autofunction:: parse_to_canonical

.. autofunction:: stringify_metadata_value
"""

from typing import Any, Dict, List

from cookparse.compiler import compile
from cookparse.number_formatting import format_number
from cookparse.recipe import (
    Cookware,
    Document,
    Ingredient,
    InlineQuantityRef,
    Step,
    StepItem,
    Text,
    Timer,
)


__all__ = [
    "to_canonical",
    "parse_to_canonical",
    "stringify_metadata_value",
]


def stringify_metadata_value(value: Any) -> str:
    """
    Convert a (YAML-derived) metadata value into a string. Booleans become
    'true' and 'false', missing values 'null', numbers are formatted by
    :py:func:`~cookparse.number_formatting.format_number`, lists are joined
    with commas and mappings become '[object Object]', all matching
    JavaScript's ``String()``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    elif value is None:
        return "null"
    elif isinstance(value, (int, float)):
        return format_number(value)
    elif isinstance(value, str):
        return value
    elif isinstance(value, list):
        return ",".join(
            "" if element is None else stringify_metadata_value(element)
            for element in value
        )
    elif isinstance(value, dict):
        return "[object Object]"
    else:
        return str(value)


def _canonical_quantity(quantity: Any) -> Any:
    # Integral floats (e.g. from '4/2') are written as integers in JSON
    if isinstance(quantity, float) and quantity.is_integer():
        return int(quantity)
    return quantity


def _canonical_item(item: StepItem, document: Document) -> Dict[str, Any]:
    if isinstance(item, Text):
        return {"type": "text", "value": item.value}
    elif isinstance(item, InlineQuantityRef):
        return {"type": "text", "value": document.inline_quantities[item.index].raw}
    elif isinstance(item, (Ingredient, Cookware)):
        out = {
            "type": "ingredient" if isinstance(item, Ingredient) else "cookware",
            "name": item.name,
            "quantity": _canonical_quantity(item.quantity),
            "units": item.units,
        }
        if item.alias is not None:
            out["alias"] = item.alias
        return out
    elif isinstance(item, Timer):
        return {
            "type": "timer",
            "name": item.name or "",
            "quantity": _canonical_quantity(item.quantity),
            "units": item.units,
        }
    else:
        raise NotImplementedError(type(item))


def _canonical_step(step: Step, document: Document) -> List[Dict[str, Any]]:
    # Lines of a step were joined with a space during compilation so text
    # items can simply be concatenated.
    out: List[Dict[str, Any]] = []
    for item in step.items:
        canonical_item = _canonical_item(item, document)
        if canonical_item["type"] == "text" and out and out[-1]["type"] == "text":
            out[-1]["value"] += canonical_item["value"]
        else:
            out.append(canonical_item)
    return out


def to_canonical(document: Document) -> Dict[str, Any]:
    """
    Produce the canonical form of a document.

    Metadata from the frontmatter (or body directives) is merged with the
    leading ``>>`` directives, the latter taking precedence.
    """
    metadata = {
        key: stringify_metadata_value(value)
        for key, value in document.metadata.items()
    }
    metadata.update(document.directive_metadata)

    return {
        "metadata": dict(sorted(metadata.items())),
        "steps": [
            _canonical_step(step, document) for step in document.steps if step.items
        ],
    }


def parse_to_canonical(source: str) -> Dict[str, Any]:
    """
    Parse a recipe (with the 'canonical' extension preset) and return its
    canonical form.
    """
    return to_canonical(compile(source, "canonical"))
