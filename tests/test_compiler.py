import pytest

from textwrap import dedent

from cookparse.compiler import RecipeCompiler, merge_text, compile
from cookparse.diagnostics import Severity, SourcePosition
from cookparse.extensions import Extensions
from cookparse.recipe import (
    SOME,
    Cookware,
    Definition,
    Ingredient,
    InlineQuantity,
    InlineQuantityRef,
    Reference,
    ReferenceTarget,
    Section,
    Step,
    Text,
    TextBlock,
    Timer,
)


def test_merge_text() -> None:
    position = SourcePosition(1, 1, 0)
    merged = merge_text(
        [
            Text("a", position),
            Text("b"),
            Ingredient("salt"),
            Text("c"),
            Text("d"),
        ]
    )
    assert merged == [Text("ab"), Ingredient("salt"), Text("cd")]
    assert merged[0].position == position


class TestSteps:
    def test_components(self) -> None:
        doc = compile("Crack @eggs{3} into a #bowl and whisk for ~{2%minutes}.\n")
        assert doc.sections == [
            Section(
                None,
                [
                    Step(
                        [
                            Text("Crack "),
                            Ingredient("eggs", 3),
                            Text(" into a "),
                            Cookware("bowl"),
                            Text(" and whisk for "),
                            Timer(None, 2, "minutes"),
                            Text("."),
                        ],
                        1,
                    )
                ],
            )
        ]
        assert doc.ingredients == [Ingredient("eggs", 3)]
        assert doc.cookware == [Cookware("bowl", 1)]
        assert doc.timers == [Timer(None, 2, "minutes")]
        assert doc.errors == []
        assert doc.warnings == []

    def test_no_components(self) -> None:
        doc = compile("Preheat the oven.\n\nWait a while.\n")
        assert doc.steps == [
            Step([Text("Preheat the oven.")], 1),
            Step([Text("Wait a while.")], 2),
        ]
        assert doc.ingredients == []
        assert doc.cookware == []
        assert doc.timers == []
        assert doc.errors == []

    def test_default_amounts(self) -> None:
        doc = compile("Add @salt and @pepper{}. Use a #pot and #pan{2}.\n")
        assert [(i.name, i.quantity, i.units) for i in doc.ingredients] == [
            ("salt", SOME, ""),
            ("pepper", SOME, ""),
        ]
        assert [(c.name, c.quantity) for c in doc.cookware] == [("pot", 1), ("pan", 2)]

    def test_lines_joined(self) -> None:
        doc = compile("Mix the flour   \n  and the water\n")
        assert doc.steps == [Step([Text("Mix the flour and the water")], 1)]

    def test_comments(self) -> None:
        doc = compile(
            dedent(
                """
                -- Not part of any step
                Mix well -- gently
                -- another
                then bake
                """
            )
        )
        (step,) = doc.steps
        assert step.items == [Text("Mix well then bake")]
        assert step.comments == ["gently", "another"]

    def test_block_comments(self) -> None:
        doc = compile("Add @salt{} [- to taste -] and mix\n")
        assert doc.steps == [
            Step([Text("Add "), Ingredient("salt"), Text("  and mix")], 1)
        ]

    def test_invalid_markers(self) -> None:
        doc = compile("Email me @ home\n")
        assert doc.steps == [Step([Text("Email me "), Text("@ home")], 1)]
        assert doc.ingredients == []

    def test_positions(self) -> None:
        doc = compile("Mix well\n\nAdd @salt{1%tsp}\n")
        ingredient = doc.steps[1].items[1]
        assert isinstance(ingredient, Ingredient)
        assert ingredient.position == SourcePosition(3, 5, 14)
        assert ingredient.raw == "@salt{1%tsp}"


class TestSectionsAndNotes:
    def test_sections(self) -> None:
        doc = compile(
            dedent(
                """
                = Dough
                Mix

                Knead

                == Topping ==
                Spread
                """
            )
        )
        assert doc.sections == [
            Section(
                "Dough",
                [Step([Text("Mix")], 1), Step([Text("Knead")], 2)],
            ),
            Section("Topping", [Step([Text("Spread")], 1)]),
        ]

    def test_empty_sections(self) -> None:
        doc = compile("Start\n\n=\n= Empty\n= Full\nStep\n")
        assert doc.sections == [
            Section(None, [Step([Text("Start")], 1)]),
            Section("Empty"),
            Section("Full", [Step([Text("Step")], 1)]),
        ]

    def test_notes(self) -> None:
        doc = compile("> A note\n> continues\n\nStep\n\n> Another\n")
        assert doc.sections == [
            Section(
                None,
                [
                    TextBlock("A note continues"),
                    Step([Text("Step")], 1),
                    TextBlock("Another"),
                ],
            )
        ]


class TestLinking:
    def test_deduplication(self) -> None:
        doc = compile("Mix @flour{250%g}. Add @flour{250%g} and @eggs{3}.\n")
        assert [i.name for i in doc.ingredients] == ["flour", "eggs"]

    def test_references(self) -> None:
        doc = compile("Add @flour\n\nThen\n\nAdd @&flour{200%g}\n")
        assert [i.name for i in doc.ingredients] == ["flour"]
        reference = doc.steps[2].items[1]
        assert isinstance(reference, Ingredient)
        assert reference.relation == Reference(0, ReferenceTarget.ingredient)
        assert doc.ingredients[0].relation == Definition(referenced_from=[2])

    def test_repeats_without_reference_modifier(self) -> None:
        doc = compile(
            "Mix @flour{250%g}.\n\nAdd @flour{250%g}.\n\nWash #pan, #pan.\n"
        )
        assert [i.name for i in doc.ingredients] == ["flour"]
        assert [c.name for c in doc.cookware] == ["pan"]
        assert doc.steps[1].items[1].relation == Definition()
        assert doc.steps[2].items[3].relation == Definition()
        assert doc.ingredients[0].relation == Definition()
        assert doc.cookware[0].relation == Definition()

    def test_timers(self) -> None:
        doc = compile("Wait ~{5%minutes}.\n\nWait ~{5%minutes} again, ~rest.\n")
        assert doc.timers == [Timer(None, 5, "minutes"), Timer("rest")]


class TestMetadata:
    def test_frontmatter(self) -> None:
        doc = compile("---\ntitle: Cake\nservings: 4\n---\nMix\n")
        assert doc.metadata == {"title": "Cake", "servings": 4}
        assert doc.steps == [Step([Text("Mix")], 1)]
        assert doc.warnings == []

    def test_invalid_frontmatter(self) -> None:
        doc = compile("---\ntitle: a: b\n---\nMix\n")
        assert doc.metadata == {"title": "a: b"}
        (warning,) = doc.warnings
        assert warning.message.startswith("Invalid YAML frontmatter")
        assert doc.errors == []

    def test_unsupported_values(self) -> None:
        doc = compile("---\nservings: four\n---\nMix\n")
        assert doc.metadata == {"servings": "four"}
        (warning,) = doc.warnings
        assert warning.message == "Unsupported value for key: 'servings'"

    def test_directives(self) -> None:
        doc = compile(">> title: Cake\n>> source: Gran\nMix\n")
        assert doc.metadata == {"title": "Cake", "source": "Gran"}
        assert doc.directive_metadata == {"title": "Cake", "source": "Gran"}
        assert doc.steps == [Step([Text("Mix")], 1)]

        # Deprecated, once
        (warning,) = doc.warnings
        assert warning.severity is Severity.warning
        assert warning.position == SourcePosition(1, 4, 3)
        assert warning.help == "---\ntitle: Cake\nsource: Gran\n---"

    def test_body_directives(self) -> None:
        doc = compile("Mix\n\n>> title: Cake\n")
        assert doc.metadata == {"title": "Cake"}
        assert doc.directive_metadata == {}
        assert len(doc.warnings) == 1

    def test_frontmatter_precedence(self) -> None:
        doc = compile("---\ntitle: Cake\n---\n>> servings: 4\nMix\n")
        assert doc.metadata == {"title": "Cake"}
        assert doc.steps == [
            Step([Text(">> servings: 4")], 1),
            Step([Text("Mix")], 2),
        ]
        assert doc.warnings == []

    def test_directives_before_frontmatter(self) -> None:
        doc = compile(">> source: Gran\n---\ntitle: Cake\n---\nMix\n")
        assert doc.metadata == {"title": "Cake"}
        assert doc.directive_metadata == {"source": "Gran"}
        assert doc.steps == [Step([Text("Mix")], 1)]


class TestModes:
    def test_components_then_steps(self) -> None:
        doc = compile(
            ">> [mode]: components\n@igr\n>> [mode]: steps\n= section\nstep\n",
            "all",
        )
        assert doc.sections == [Section("section", [Step([Text("step")], 1)])]
        assert doc.ingredients == [Ingredient("igr")]
        assert doc.errors == []
        assert doc.warnings == []

    def test_reference_not_found(self) -> None:
        doc = compile(">> [mode]: steps\nAdd @salt\n", "all")
        (error,) = doc.errors
        assert error.message == "Reference not found: salt"
        assert error.position == SourcePosition(2, 5, 21)
        # The step is still included
        assert len(doc.steps) == 1

    def test_reference_found_case_insensitively(self) -> None:
        doc = compile(
            ">> [mode]: components\n@Salt\n>> [mode]: steps\nAdd @salt\n", "all"
        )
        assert doc.errors == []

    def test_text_mode(self) -> None:
        doc = compile(">> [mode]: text\nAdd @salt{1%tsp} to the #pot\n", "all")
        assert doc.sections == [
            Section(None, [TextBlock("Add @salt{1%tsp} to the #pot")])
        ]
        assert [w.message for w in doc.warnings] == [
            "Ignoring ingredient in text mode",
            "Ignoring cookware in text mode",
        ]
        assert doc.ingredients == []

    def test_modes_disabled(self) -> None:
        doc = compile(">> [mode]: components\n@igr\n")
        assert doc.metadata == {"[mode]": "components"}
        assert len(doc.steps) == 1


class TestDiagnostics:
    def test_syntax_error(self) -> None:
        doc = compile("---\ntitle: Cake\n---\nMix {x}\n")
        assert doc.sections == []
        assert doc.metadata == {}
        assert doc.warnings == []
        (error,) = doc.errors
        assert error.severity is Severity.error
        assert (error.position.line, error.position.column) == (4, 5)
        assert error.position.offset == 24

    def test_timer_without_unit(self) -> None:
        doc = compile("Wait ~{30}\n", "all")
        assert doc.errors == []
        (warning,) = doc.warnings
        assert warning.message == "Invalid timer quantity: missing unit"
        assert warning.position == SourcePosition(1, 6, 5)

    def test_strict_timers(self) -> None:
        doc = compile("Let it ~rest\n", "all")
        (error,) = doc.errors
        assert error.message == "Invalid timer: missing quantity"
        assert doc.sections == []

    def test_lax_timers(self) -> None:
        doc = compile("Let it ~rest\n")
        assert doc.errors == []
        assert doc.timers == [Timer("rest")]

    @pytest.mark.parametrize("amount", ["=a pinch", "=1%tsp", "=0.5"])
    def test_scaling_lock(self, amount: str) -> None:
        doc = compile(f"Add @salt{{{amount}}}\n")
        (warning,) = doc.warnings
        assert warning.message == "Unnecessary scaling lock modifier"
        assert warning.position == SourcePosition(1, 5, 4)


class TestExtensions:
    def test_aliases(self) -> None:
        source = "Add @white wine|wine{1%cup}\n"
        assert compile(source).ingredients == [Ingredient("white wine|wine", 1, "cup")]
        assert compile(source, "all").ingredients == [
            Ingredient("white wine", 1, "cup", alias="wine")
        ]

    def test_advanced_units(self) -> None:
        source = "Add @flour{2 cups}\n"
        assert compile(source).ingredients == [Ingredient("flour", "2 cups")]
        assert compile(source, Extensions(advanced_units=True)).ingredients == [
            Ingredient("flour", 2, "cups")
        ]
        assert compile("Add @tomatoes{2 large cans}\n", "all").ingredients == [
            Ingredient("tomatoes", 2, "large cans")
        ]

    def test_inline_quantities(self) -> None:
        doc = compile("Heat to 180°C now.\n\nCool to 20°C\n", "all")
        assert doc.inline_quantities == [
            InlineQuantity(180, "°C"),
            InlineQuantity(20, "°C"),
        ]
        assert doc.steps[1].items == [
            Text("Cool to "),
            InlineQuantityRef(1),
        ]

        # Trailing punctuation is not part of a unit
        doc = compile("Bake at 180°C.\n", "all")
        assert doc.inline_quantities == []
        assert doc.steps[0].items == [Text("Bake at 180°C.")]

    def test_unknown_preset(self) -> None:
        with pytest.raises(ValueError):
            compile("Mix\n", "everything")


def test_compiler_reusable() -> None:
    compiler = RecipeCompiler()
    assert len(compiler.compile("Add @salt\n").ingredients) == 1
    assert compiler.compile("Mix\n").ingredients == []
