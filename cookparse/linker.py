"""
Whole-document linking of ingredient and cookware references to their
definitions.

The first occurrence of each distinct ingredient (by name, quantity and
units) and each distinct piece of cookware (by name) is a definition.
Occurrences marked with the '&' modifier refer to the first definition with
the same name; when there is no such definition, the first reference is
used to create one. Repeated occurrences without the '&' modifier are
never references, even when identical to an earlier definition.

.. autofunction:: link_references

.. autofunction:: unique_timers
"""

from typing import Callable, Dict, Generic, Hashable, List, Sequence, Tuple, TypeVar

from dataclasses import replace

import logging

from cookparse.recipe import (
    Cookware,
    Definition,
    Ingredient,
    Modifier,
    Reference,
    ReferenceTarget,
    Section,
    StepItem,
    Timer,
)


__all__ = [
    "link_references",
    "unique_timers",
]


logger = logging.getLogger(__name__)


ComponentT = TypeVar("ComponentT", Ingredient, Cookware)


class SymbolTable(Generic[ComponentT]):
    """
    The definitions of one kind of component, indexed both by their full
    key and by name alone.
    """

    def __init__(
        self, key: Callable[[ComponentT], Hashable], target: ReferenceTarget
    ) -> None:
        self.key = key
        self.target = target
        self.definitions: List[ComponentT] = []
        self._by_key: Dict[Hashable, int] = {}
        self._by_name: Dict[str, int] = {}

    def add(self, definition: ComponentT) -> None:
        index = len(self.definitions)
        self.definitions.append(definition)
        self._by_key.setdefault(self.key(definition), index)
        self._by_name.setdefault(definition.name, index)

    def contains_key(self, component: ComponentT) -> bool:
        return self.key(component) in self._by_key

    def contains_name(self, name: str) -> bool:
        return name in self._by_name

    def resolve(self, component: ComponentT) -> int:
        """
        Find the definition with the same name as a component occurrence, or
        -1.
        """
        return self._by_name.get(component.name, -1)

    def link(self, component: ComponentT, step_index: int) -> None:
        """
        Make an '&' occurrence within the given (global) step a reference to
        its definition. Other occurrences are left as definitions.
        """
        if Modifier.reference not in component.modifiers:
            return
        index = self.resolve(component)
        if index < 0:
            return
        component.relation = Reference(index, self.target)
        definition_relation = self.definitions[index].relation
        assert isinstance(definition_relation, Definition)
        definition_relation.referenced_from.append(step_index)


def _ingredient_key(ingredient: Ingredient) -> Hashable:
    return (ingredient.name, ingredient.quantity, ingredient.units)


def _cookware_key(cookware: Cookware) -> Hashable:
    return cookware.name


def _pseudo_definition(component: ComponentT) -> ComponentT:
    return replace(
        component,
        modifiers=component.modifiers - {Modifier.reference},
        relation=Definition(),
    )


def link_references(
    component_steps: Sequence[Sequence[StepItem]], sections: Sequence[Section]
) -> Tuple[List[Ingredient], List[Cookware]]:
    """
    Build the ingredient and cookware definition lists and link every
    reference within ``sections`` to its definition.

    Parameters
    ==========
    component_steps : [[StepItem, ...], ...]
        The items of every step which may define components, in document
        order. This includes steps which are not displayed (e.g. those
        given in 'components' mode).
    sections : [Section, ...]
        The recipe's sections. The relations of the components within these
        are updated in place and their steps are numbered globally (i.e.
        counting across all sections) in the definitions'
        :py:attr:`~cookparse.recipe.Definition.referenced_from` lists.

    Returns
    =======
    (ingredients, cookware)
    """
    ingredients: SymbolTable[Ingredient] = SymbolTable(
        _ingredient_key, ReferenceTarget.ingredient
    )
    cookware: SymbolTable[Cookware] = SymbolTable(
        _cookware_key, ReferenceTarget.cookware
    )

    # Definitions
    for items in component_steps:
        for item in items:
            if isinstance(item, Ingredient):
                if Modifier.reference not in item.modifiers:
                    if not ingredients.contains_key(item):
                        ingredients.add(item)
            elif isinstance(item, Cookware):
                if Modifier.reference not in item.modifiers:
                    if not cookware.contains_key(item):
                        cookware.add(item)

    # References to things never defined are definitions in their own right
    for items in component_steps:
        for item in items:
            if isinstance(item, Ingredient):
                if Modifier.reference in item.modifiers:
                    if not ingredients.contains_name(item.name):
                        ingredients.add(_pseudo_definition(item))
            elif isinstance(item, Cookware):
                if Modifier.reference in item.modifiers:
                    if not cookware.contains_name(item.name):
                        cookware.add(_pseudo_definition(item))

    # Link references
    step_index = 0
    for section in sections:
        for step in section.steps:
            for item in step.items:
                if isinstance(item, Ingredient):
                    ingredients.link(item, step_index)
                elif isinstance(item, Cookware):
                    cookware.link(item, step_index)
            step_index += 1

    logger.debug(
        "Linked %d ingredient and %d cookware definitions",
        len(ingredients.definitions),
        len(cookware.definitions),
    )

    return ingredients.definitions, cookware.definitions


def unique_timers(component_steps: Sequence[Sequence[StepItem]]) -> List[Timer]:
    """
    Return the distinct timers (by name, quantity and units) in order of
    first appearance.
    """
    timers: Dict[Hashable, Timer] = {}
    for items in component_steps:
        for item in items:
            if isinstance(item, Timer):
                timers.setdefault((item.name, item.quantity, item.units), item)
    return list(timers.values())
