r"""
The :py:mod:`cookparse.recipe` module defines the data structure a parsed
recipe is described by.


Overview
========

A parsed recipe is a :py:class:`Document`. It holds the recipe's metadata and
an ordered list of :py:class:`Section`\ s, each containing a mixture of
numbered :py:class:`Step`\ s and free-standing :py:class:`TextBlock`\ s (from
notes and text-mode runs).

Each step is a sequence of step items: runs of :py:class:`Text` interspersed
with components (:py:class:`Ingredient`, :py:class:`Cookware` and
:py:class:`Timer`) and, when the inline quantity extension is enabled,
:py:class:`InlineQuantityRef`\ s pointing into
:py:attr:`Document.inline_quantities`.

For example, the recipe::

    Crack @eggs{3} into a #bowl and whisk for ~{2%minutes}.

Is described by a single unnamed section containing one step::

    Step(
        items=[
            Text("Crack "),
            Ingredient("eggs", quantity=3, ...),
            Text(" into a "),
            Cookware("bowl", quantity=1, ...),
            Text(" and whisk for "),
            Timer(None, quantity=2, units="minutes", ...),
            Text("."),
        ],
        number=1,
    )


Definitions and references
==========================

Every ingredient and cookware occurrence has a :py:attr:`Ingredient.relation`
which is either a :py:class:`Definition` or a :py:class:`Reference`. The
first occurrence of each distinct ingredient (or piece of cookware) is a
definition and appears in :py:attr:`Document.ingredients` (or
:py:attr:`Document.cookware`). Occurrences marked with the ``&`` modifier
are references which give the index of their definition in that list. Other
repeated occurrences remain definitions. Definitions record the (global,
document-order) indices of the steps which refer back to them.


API
===

.. autoclass:: Document
    :members:

.. autoclass:: Section
    :members:

.. autoclass:: Step
    :members:

.. autoclass:: TextBlock
    :members:

.. autoclass:: Text
    :members:

.. autoclass:: Ingredient
    :members:

.. autoclass:: Cookware
    :members:

.. autoclass:: Timer
    :members:

.. autoclass:: InlineQuantity
    :members:

.. autoclass:: InlineQuantityRef
    :members:

.. autoclass:: Modifier
    :members:
    :undoc-members:

.. autoclass:: Definition
    :members:

.. autoclass:: Reference
    :members:

.. autoclass:: ReferenceTarget
    :members:
    :undoc-members:
"""

from typing import Any, Dict, FrozenSet, List, Optional, Union

from dataclasses import dataclass, field

from enum import Enum

from cookparse.diagnostics import Diagnostic, SourcePosition


__all__ = [
    "Quantity",
    "SOME",
    "Modifier",
    "ReferenceTarget",
    "Definition",
    "Reference",
    "Relation",
    "Text",
    "Ingredient",
    "Cookware",
    "Timer",
    "InlineQuantity",
    "InlineQuantityRef",
    "Component",
    "StepItem",
    "Step",
    "TextBlock",
    "SectionContent",
    "Section",
    "Document",
]


Quantity = Union[int, float, str]
"""
A parsed amount: a number when the amount was numeric (or a fraction),
otherwise the literal text given.
"""

SOME = "some"
"""Quantity given to ingredients written without any amount."""


class Modifier(Enum):
    """
    Component modifiers, written as prefix characters after the sigil (e.g.
    ``@?salt``). The enum values are the modifier characters.
    """

    recipe = "@"
    reference = "&"
    hidden = "-"
    optional = "?"
    new = "+"


class ReferenceTarget(Enum):
    """The kind of definition a :py:class:`Reference` points at."""

    ingredient = "ingredient"
    cookware = "cookware"


@dataclass
class Definition:
    """
    Relation of a component occurrence which defines a new ingredient or
    piece of cookware.
    """

    referenced_from: List[int] = field(default_factory=list)
    """
    Global indices (counting steps across all sections in document order) of
    the steps which reference this definition.
    """

    defined_in_step: bool = True


@dataclass
class Reference:
    """
    Relation of a component occurrence which refers back to a definition.
    """

    references_to: int
    """
    Index of the definition (in :py:attr:`Document.ingredients` or
    :py:attr:`Document.cookware`) or -1 if not (yet) resolved.
    """

    target: ReferenceTarget = ReferenceTarget.ingredient


Relation = Union[Definition, Reference]


@dataclass
class Text:
    """A run of plain text within a step."""

    value: str

    position: Optional[SourcePosition] = field(
        default=None, compare=False, repr=False
    )
    """Where this text started in the source, if known."""


@dataclass
class Ingredient:
    name: str

    quantity: Quantity = SOME
    """
    The amount given. :py:data:`SOME` when no braces were given at all.
    """

    units: str = ""
    """The units of :py:attr:`quantity`, or an empty string if none given."""

    alias: Optional[str] = None
    """An alternative display name (``@name|alias``)."""

    note: Optional[str] = None
    """A preparation note (``@name{...}(note)``)."""

    fixed: bool = False
    """True if the quantity must not be scaled (``{=...}``)."""

    modifiers: FrozenSet[Modifier] = frozenset()

    relation: Relation = field(default_factory=Definition)

    raw: str = field(default="", compare=False, repr=False)
    """The original token text, exactly as written."""

    position: Optional[SourcePosition] = field(
        default=None, compare=False, repr=False
    )


@dataclass
class Cookware:
    name: str

    quantity: Quantity = 1
    """The number of items required; 1 when no amount is given."""

    alias: Optional[str] = None

    note: Optional[str] = None

    modifiers: FrozenSet[Modifier] = frozenset()

    relation: Relation = field(default_factory=Definition)

    raw: str = field(default="", compare=False, repr=False)

    position: Optional[SourcePosition] = field(
        default=None, compare=False, repr=False
    )

    @property
    def units(self) -> str:
        """Cookware never has units; always an empty string."""
        return ""


@dataclass
class Timer:
    name: Optional[str] = None

    quantity: Quantity = ""
    """The duration; an empty string if no duration was given."""

    units: str = ""

    raw: str = field(default="", compare=False, repr=False)

    position: Optional[SourcePosition] = field(
        default=None, compare=False, repr=False
    )


@dataclass
class InlineQuantity:
    """A number and unit found in plain step text."""

    quantity: Union[int, float]
    units: str

    raw: str = field(default="", compare=False, repr=False)
    """The text the quantity was extracted from (e.g. ``"180°C"``)."""


@dataclass
class InlineQuantityRef:
    """
    Placeholder within a step for an entry in
    :py:attr:`Document.inline_quantities`.
    """

    index: int


Component = Union[Ingredient, Cookware, Timer]

StepItem = Union[Text, Ingredient, Cookware, Timer, InlineQuantityRef]


@dataclass
class Step:
    items: List[StepItem]

    number: int
    """Step number, counting from 1 within each section."""

    comments: List[str] = field(default_factory=list, compare=False)
    """The text of any ``-- comments`` written on this step's lines."""


@dataclass
class TextBlock:
    """Free-standing text (notes and text-mode paragraphs)."""

    value: str


SectionContent = Union[Step, TextBlock]


@dataclass
class Section:
    name: Optional[str] = None
    content: List[SectionContent] = field(default_factory=list)

    @property
    def steps(self) -> List[Step]:
        """Just the :py:class:`Step` entries of :py:attr:`content`."""
        return [c for c in self.content if isinstance(c, Step)]


@dataclass
class Document:
    """
    A fully parsed recipe.
    """

    metadata: Dict[str, Any] = field(default_factory=dict)
    """
    Recipe metadata, from the YAML frontmatter or (when there is no
    frontmatter) ``>> key: value`` directives, in source order.
    """

    sections: List[Section] = field(default_factory=list)

    ingredients: List[Ingredient] = field(default_factory=list)
    """Ingredient definitions, in order of first appearance."""

    cookware: List[Cookware] = field(default_factory=list)
    """Cookware definitions, in order of first appearance."""

    timers: List[Timer] = field(default_factory=list)
    """Distinct timers, in order of first appearance."""

    inline_quantities: List[InlineQuantity] = field(default_factory=list)

    directive_metadata: Dict[str, str] = field(default_factory=dict)
    """
    The ``>> key: value`` directives found before any other content (and
    before any frontmatter), with their raw string values.
    """

    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)

    @property
    def steps(self) -> List[Step]:
        """All steps in all sections, in document order."""
        return [step for section in self.sections for step in section.steps]
