import pytest

from typing import Optional

from textwrap import dedent

from peggie import ParseError

from cookparse.parser import parse
from cookparse.parser.ast import (
    Recipe,
    Frontmatter,
    Directive,
    SectionMarker,
    Note,
    Step,
    StepLine,
)
from cookparse.recipe import (
    Text,
    Ingredient,
    Cookware,
    Timer,
    Modifier,
    Reference,
    ReferenceTarget,
)


def one_step(*items: object, comment: Optional[str] = None) -> Recipe:
    comments = [comment] if comment is not None else []
    return Recipe(
        [], None, [Step([StepLine(0, list(items), comment)], comments)]  # type: ignore
    )


@pytest.mark.parametrize(
    "source, exp_ast",
    [
        # Empty recipe
        ("", Recipe([], None, [])),
        ("\n\n", Recipe([], None, [])),
        # Plain text
        ("Mix well.", one_step(Text("Mix well."))),
        # Components
        (
            "Crack @eggs{3} into a #bowl.",
            one_step(
                Text("Crack "),
                Ingredient("eggs", 3),
                Text(" into a "),
                Cookware("bowl"),
                Text("."),
            ),
        ),
        # Single word names stop at whitespace and punctuation
        (
            "Add @salt and @pepper, then stir",
            one_step(
                Text("Add "),
                Ingredient("salt"),
                Text(" and "),
                Ingredient("pepper"),
                Text(", then stir"),
            ),
        ),
        # Multi-word names need braces
        (
            "@ground black pepper{}",
            one_step(Ingredient("ground black pepper")),
        ),
        # Units
        ("@flour{250%g}", one_step(Ingredient("flour", 250, "g"))),
        # Fractions
        ("@milk{1/2%cup}", one_step(Ingredient("milk", 0.5, "cup"))),
        # Modifiers, fixed quantities and notes
        (
            "@&?flour{=200%g}(sifted)",
            one_step(
                Ingredient(
                    "flour",
                    200,
                    "g",
                    note="sifted",
                    fixed=True,
                    modifiers=frozenset([Modifier.reference, Modifier.optional]),
                    relation=Reference(-1, ReferenceTarget.ingredient),
                )
            ),
        ),
        # Aliases
        (
            "@white wine|wine{1%cup}",
            one_step(Ingredient("white wine", 1, "cup", alias="wine")),
        ),
        # Cookware quantities
        ("Use #pot{2}", one_step(Text("Use "), Cookware("pot", 2))),
        ("Use #large pot{}", one_step(Text("Use "), Cookware("large pot"))),
        # Timers
        (
            "Simmer ~{10%minutes}",
            one_step(Text("Simmer "), Timer(None, 10, "minutes")),
        ),
        ("~proof{1%hour}", one_step(Timer("proof", 1, "hour"))),
        ("Let it ~rest", one_step(Text("Let it "), Timer("rest"))),
        # Sigils not followed by a name are text
        ("Email me @ home", one_step(Text("Email me @ home"))),
        # Dashes which don't start a comment
        ("text--more", one_step(Text("text--more"))),
        ("a --- b", one_step(Text("a --- b"))),
        # Inline comments
        ("Mix -- well", one_step(Text("Mix"), comment="well")),
        # Comment-only lines
        ("-- Just a comment", Recipe([], None, [])),
        # Comment lines don't break steps
        (
            "Mix -- well\n-- aside\nStir",
            Recipe(
                [],
                None,
                [
                    Step(
                        [
                            StepLine(0, [Text("Mix")], "well"),
                            StepLine(0, [Text("Stir")]),
                        ],
                        ["well", "aside"],
                    )
                ],
            ),
        ),
        # Blank lines do
        (
            "A\nB\n\nC",
            Recipe(
                [],
                None,
                [
                    Step([StepLine(0, [Text("A")]), StepLine(0, [Text("B")])]),
                    Step([StepLine(0, [Text("C")])]),
                ],
            ),
        ),
        # Sections
        (
            "== Dough ==\nMix",
            Recipe(
                [],
                None,
                [SectionMarker(0, "Dough"), Step([StepLine(0, [Text("Mix")])])],
            ),
        ),
        ("= Filling", Recipe([], None, [SectionMarker(0, "Filling")])),
        ("==", Recipe([], None, [SectionMarker(0, None)])),
        # Notes
        ("> A note", Recipe([], None, [Note(0, "A note")])),
        # Directives
        (
            ">> servings: 4\nMix",
            Recipe(
                [Directive(0, "servings", "4", ">> servings: 4")],
                None,
                [
                    Directive(0, "servings", "4", ">> servings: 4"),
                    Step([StepLine(0, [Text("Mix")])]),
                ],
            ),
        ),
        # Frontmatter
        (
            "---\ntitle: Pancakes\n---\nMix",
            Recipe(
                [],
                Frontmatter(0, "title: Pancakes\n"),
                [Step([StepLine(0, [Text("Mix")])])],
            ),
        ),
        # Directives before the frontmatter aren't part of the body
        (
            dedent(
                """
                >> a: b
                ---
                x: y
                ---
                >> c: d
                Mix
                """
            ).strip(),
            Recipe(
                [Directive(0, "a", "b", ">> a: b")],
                Frontmatter(0, "x: y\n"),
                [
                    Directive(0, "c", "d", ">> c: d"),
                    Step([StepLine(0, [Text("Mix")])]),
                ],
            ),
        ),
        # A lone fence is just text
        (
            "---\nMix",
            Recipe(
                [],
                None,
                [Step([StepLine(0, [Text("---")]), StepLine(0, [Text("Mix")])])],
            ),
        ),
    ],
)
def test_valid_cases(source: str, exp_ast: Recipe) -> None:
    ast = parse(source)
    assert ast == exp_ast


def test_offsets() -> None:
    ast = parse("---\ntitle: x\n---\n>> key: value\n\nAdd @salt")
    assert ast.frontmatter is not None
    assert ast.frontmatter.offset == 4

    directive, step = ast.items
    assert isinstance(directive, Directive)
    assert directive.offset == len("---\ntitle: x\n---\n>> ")

    assert isinstance(step, Step)
    assert step.offset == len("---\ntitle: x\n---\n>> key: value\n\n")
    ingredient = step.lines[0].items[1]
    assert isinstance(ingredient, Ingredient)
    assert ingredient.raw == "@salt"
    assert ingredient.position is not None
    assert ingredient.position.line == 6
    assert ingredient.position.column == 5


@pytest.mark.parametrize(
    "source, exp_line, exp_column",
    [
        # Stray braces
        ("invalid}", 1, 8),
        ("Mix {x}", 1, 5),
        # Unclosed amount
        ("@name{unclosed", 1, 15),
        # Errors on later lines
        ("Mix well\n\nBad }", 3, 5),
    ],
)
def test_invalid_cases(source: str, exp_line: int, exp_column: int) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse(source)
    assert exc_info.value.line == exp_line
    assert exc_info.value.column == exp_column


def test_error_message_readable() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse("invalid}")
    message = str(exc_info.value)
    assert "At line 1 column 8" in message
    assert "Expected" in message
