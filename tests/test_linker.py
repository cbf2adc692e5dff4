from typing import List

from cookparse.linker import link_references, unique_timers
from cookparse.recipe import (
    Cookware,
    Definition,
    Ingredient,
    Modifier,
    Reference,
    ReferenceTarget,
    Section,
    Step,
    StepItem,
    Text,
    Timer,
)


REF = frozenset([Modifier.reference])


def sections_of(*steps: List[StepItem]) -> List[Section]:
    return [Section(None, [Step(items, n + 1) for n, items in enumerate(steps)])]


def test_identical_ingredients_are_deduplicated() -> None:
    # Repeats without the "&" modifier are listed once but stay definitions
    flour_1 = Ingredient("flour", 250, "g")
    flour_2 = Ingredient("flour", 250, "g")
    eggs = Ingredient("eggs", 3)
    steps: List[List[StepItem]] = [
        [Text("Mix "), flour_1],
        [Text("Add "), flour_2, Text(" and "), eggs],
    ]

    ingredients, cookware = link_references(steps, sections_of(*steps))

    assert len(ingredients) == 2
    assert ingredients[0] is flour_1
    assert ingredients[1] is eggs
    assert cookware == []

    assert flour_1.relation == Definition()
    assert flour_2.relation == Definition()
    assert eggs.relation == Definition()


def test_different_amounts_are_distinct() -> None:
    steps: List[List[StepItem]] = [
        [Ingredient("flour", 250, "g"), Ingredient("flour", 100, "g")],
    ]
    ingredients, _cookware = link_references(steps, sections_of(*steps))
    assert [i.quantity for i in ingredients] == [250, 100]


def test_explicit_references_match_by_name() -> None:
    definition = Ingredient("flour", 250, "g")
    reference = Ingredient("flour", 100, "g", modifiers=REF)
    steps: List[List[StepItem]] = [[definition], [Text("Step")], [reference]]

    ingredients, _cookware = link_references(steps, sections_of(*steps))

    assert ingredients == [definition]
    assert reference.relation == Reference(0, ReferenceTarget.ingredient)
    assert definition.relation == Definition(referenced_from=[2])


def test_references_without_definition() -> None:
    reference = Ingredient("stock", 1, "l", modifiers=REF)
    steps: List[List[StepItem]] = [[reference]]

    ingredients, _cookware = link_references(steps, sections_of(*steps))

    # A definition is created from the reference
    (stock,) = ingredients
    assert stock is not reference
    assert (stock.name, stock.quantity, stock.units) == ("stock", 1, "l")
    assert stock.modifiers == frozenset()
    assert stock.relation == Definition(referenced_from=[0])
    assert Modifier.reference in reference.modifiers
    assert reference.relation == Reference(0, ReferenceTarget.ingredient)


def test_cookware_matches_by_name() -> None:
    pot_1 = Cookware("pot")
    pot_2 = Cookware("pot", 2)
    pan = Cookware("pan", modifiers=REF)
    steps: List[List[StepItem]] = [[pot_1], [pot_2, pan]]

    ingredients, cookware = link_references(steps, sections_of(*steps))

    assert ingredients == []
    assert [c.name for c in cookware] == ["pot", "pan"]
    assert pot_2.relation == Definition()
    assert pan.relation == Reference(1, ReferenceTarget.cookware)


def test_definitions_from_hidden_steps() -> None:
    # Components listed (e.g. in components mode) but never displayed in a
    # step are still defined
    hidden = Ingredient("salt")
    shown = Ingredient("salt", modifiers=REF)
    steps = sections_of([shown])

    ingredients, _cookware = link_references([[hidden], [shown]], steps)

    assert ingredients == [hidden]
    assert shown.relation == Reference(0, ReferenceTarget.ingredient)
    assert hidden.relation == Definition(referenced_from=[0])


def test_step_indices_span_sections() -> None:
    butter_1 = Ingredient("butter", 1)
    butter_2 = Ingredient("butter", 1, modifiers=REF)
    sections = [
        Section("Base", [Step([butter_1], 1)]),
        Section("Topping", [Step([Text("Wait")], 1), Step([butter_2], 2)]),
    ]
    link_references([[butter_1], [Text("Wait")], [butter_2]], sections)
    assert butter_1.relation == Definition(referenced_from=[2])


def test_unique_timers() -> None:
    steps: List[List[StepItem]] = [
        [Timer(None, 10, "minutes"), Timer("rest", 5, "minutes")],
        [Timer(None, 10, "minutes"), Text("Then"), Timer(None, 2, "hours")],
    ]
    assert unique_timers(steps) == [
        Timer(None, 10, "minutes"),
        Timer("rest", 5, "minutes"),
        Timer(None, 2, "hours"),
    ]
