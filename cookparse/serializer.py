"""
Conversion of the canonical form (see :py:mod:`cookparse.canonical`) back
into recipe markup.

Re-parsing the markup produced by :py:func:`canonical_to_markup` gives the
same canonical form again. The markup is not intended to look like the
original recipe: every step is written on a single line and every component
is given explicit braces.

Text which would otherwise be read back as markup (e.g. an '@' followed by
a space, which is joined to a later ingredient, or a '--' comment marker) is
broken up using empty block comments (``[--]``). These are removed again by
the parser. For example the steps::

    [{"type": "text", "value": "Email @ "}, {"type": "ingredient", ...}]

are written as ``Email @[--] @salt{1%g}``.

.. autofunction:: canonical_to_markup
"""

from typing import Any, List, Mapping, Optional

import re

from decimal import Decimal

import yaml

from cookparse.number_formatting import format_number


__all__ = [
    "canonical_to_markup",
]


EMPTY_COMMENT = "[--]"

# Places within text where an empty comment is inserted: between a sigil
# and whitespace, between two dashes and between '[' and '-'.
text_break_pattern = re.compile(r"(?<=[@#~])(?=[ \t])|(?<=-)(?=-)|(?<=\[)(?=-)")


def _format_quantity(quantity: Any) -> str:
    if isinstance(quantity, str):
        return quantity
    quantity_str = format_number(quantity)
    if "e" in quantity_str:
        # Exponents (e.g. '1e-7') are not understood by the number parser
        quantity_str = format(Decimal(repr(quantity)), "f")
    return quantity_str


def _format_amount(quantity: Any, units: str) -> str:
    quantity_str = _format_quantity(quantity)
    if quantity_str.startswith("="):
        # Only the first '=' is taken as a scaling lock
        quantity_str = f"={quantity_str}"
    if units:
        return f"{{{quantity_str}%{units}}}"
    elif "%" in quantity_str:
        # The last '%' separates the units
        return f"{{{quantity_str}%}}"
    else:
        return f"{{{quantity_str}}}"


def _format_name(item: Mapping[str, Any]) -> str:
    if item.get("alias"):
        return f"{item['name']}|{item['alias']}"
    else:
        return str(item["name"])


def _format_text(
    value: str,
    previous: Optional[Mapping[str, Any]],
    following: Optional[Mapping[str, Any]],
) -> str:
    value = text_break_pattern.sub(EMPTY_COMMENT, value)

    # A note
    if (
        previous is not None
        and previous["type"] in ("ingredient", "cookware")
        and value.startswith("(")
    ):
        value = EMPTY_COMMENT + value

    # A modifier (e.g. '@@salt')
    if (
        following is not None
        and following["type"] != "text"
        and value.endswith(("@", "#", "~"))
    ):
        value += EMPTY_COMMENT

    return value


def _format_item(item: Mapping[str, Any]) -> str:
    item_type = item["type"]
    if item_type == "ingredient":
        if item["quantity"] == "some" and not item["units"]:
            return f"@{_format_name(item)}{{}}"
        return f"@{_format_name(item)}{_format_amount(item['quantity'], item['units'])}"
    elif item_type == "cookware":
        return f"#{_format_name(item)}{{{_format_quantity(item['quantity'])}}}"
    elif item_type == "timer":
        if item["quantity"] == "" and not item["units"]:
            return f"~{item['name']}{{}}"
        return f"~{item['name']}{_format_amount(item['quantity'], item['units'])}"
    else:
        raise ValueError(f"Unknown step item type {item_type!r}")


def _format_step(step: List[Mapping[str, Any]]) -> str:
    out = []
    for i, item in enumerate(step):
        if item["type"] == "text":
            out.append(
                _format_text(
                    str(item["value"]),
                    step[i - 1] if i > 0 else None,
                    step[i + 1] if i + 1 < len(step) else None,
                )
            )
        else:
            out.append(_format_item(item))
    return "".join(out)


def canonical_to_markup(canonical: Mapping[str, Any]) -> str:
    """
    Produce recipe markup from a canonical form.

    The metadata is written as a YAML frontmatter. A frontmatter is also
    written (even if empty) when any step starts with ``>>`` so that the
    step is not mistaken for a metadata directive.
    """
    metadata = canonical.get("metadata", {})
    steps: List[str] = [_format_step(step) for step in canonical.get("steps", [])]

    parts = []
    if metadata:
        frontmatter = yaml.safe_dump(
            dict(metadata),
            sort_keys=True,
            allow_unicode=True,
            default_flow_style=False,
        )
        parts.append(f"---\n{frontmatter}---")
    elif any(step.lstrip().startswith(">>") for step in steps):
        parts.append("---\n---")

    parts.extend(steps)
    return "\n\n".join(parts) + "\n"
