"""
The :py:mod:`cookparse.compiler` module contains the logic which turns a
recipe source into a fully resolved :py:class:`~cookparse.recipe.Document`.

Compilation is a single left-to-right pass over the items of the recipe's AST
(see :py:mod:`cookparse.parser.ast`) followed by a whole-document linking
pass (see :py:mod:`cookparse.linker`). During the first pass a small amount of
running state is kept: the current section, the step number within it, the
mode set by any ``>> [mode]: ...`` directives and the names of the components
seen so far.

Compilation never raises an exception for a problem with the recipe itself.
Instead, problems are reported as :py:class:`~cookparse.diagnostics.Diagnostic`
values in the :py:attr:`~cookparse.recipe.Document.errors` and
:py:attr:`~cookparse.recipe.Document.warnings` lists. Syntax errors (which
prevent the recipe being parsed at all) result in an empty document with a
single error.

.. autofunction:: compile

.. autoclass:: RecipeCompiler
    :members:
"""

from typing import Any, Dict, List, Optional, Set, Union

import logging

from peggie import ParseError

from cookparse.diagnostics import (
    Diagnostic,
    DiagnosticCollector,
    Severity,
    SourcePosition,
)
from cookparse.extensions import (
    DefineMode,
    Extensions,
    apply_directive_mode,
    extract_inline_quantities,
    fold_aliases,
    is_special_directive,
    resolve_extensions,
    split_advanced_units,
    split_invalid_markers,
)
from cookparse.linker import link_references, unique_timers
from cookparse.lint import check, check_timer_quantities
from cookparse.metadata import (
    check_standard_metadata,
    directive_deprecation_warning,
    parse_frontmatter,
)
from cookparse.parser import ast, parse
from cookparse.preprocess import PreprocessedSource, preprocess
from cookparse.recipe import (
    Cookware,
    Document,
    Ingredient,
    InlineQuantity,
    Section,
    Step,
    StepItem,
    Text,
    TextBlock,
    Timer,
)


__all__ = [
    "RecipeCompiler",
    "compile",
]


logger = logging.getLogger(__name__)


def merge_text(items: List[StepItem]) -> List[StepItem]:
    """
    Merge adjacent :py:class:`~cookparse.recipe.Text` items, keeping the
    position of the first.
    """
    out: List[StepItem] = []
    for item in items:
        if isinstance(item, Text) and out and isinstance(out[-1], Text):
            out[-1] = Text(out[-1].value + item.value, out[-1].position)
        else:
            out.append(item)
    return out


def _component_kind(item: StepItem) -> str:
    if isinstance(item, Ingredient):
        return "ingredient"
    elif isinstance(item, Cookware):
        return "cookware"
    else:
        return "timer"


class RecipeCompiler:

    _extensions: Extensions

    _source: PreprocessedSource
    """The preprocessed recipe source being compiled."""

    _diagnostics: DiagnosticCollector

    _metadata: Dict[str, Any]
    """
    The recipe metadata. Starts off as the frontmatter (if any) and then has
    any ``>>`` directives added to it.
    """

    _metadata_positions: Dict[str, SourcePosition]
    """The locations of the directives which added entries to _metadata."""

    _used_directives: Dict[str, str]
    """
    The directives used for metadata (in a recipe without frontmatter) which
    will trigger a deprecation warning.
    """

    _first_used_directive: Optional[SourcePosition]

    _sections: List[Section]

    _step_number: int
    """The number to give the next step in the current section."""

    _mode: DefineMode

    _component_steps: List[List[StepItem]]
    """
    The items of every step which may define components (including steps
    which are not displayed because of the current mode).
    """

    _inline_quantities: List[InlineQuantity]

    _known_ingredients: Set[str]
    """Lower-cased names of all ingredients seen so far."""

    _known_cookware: Set[str]
    """Lower-cased names of all cookware seen so far."""

    def __init__(self, extensions: Union[str, Extensions] = "canonical") -> None:
        self._extensions = resolve_extensions(extensions)

    def compile(self, source: str) -> Document:
        """
        Parse and compile a recipe source into a
        :py:class:`~cookparse.recipe.Document`.
        """
        self._source = preprocess(source)
        self._diagnostics = DiagnosticCollector()

        try:
            ast_recipe = parse(self._source.text)
        except ParseError as e:
            logger.debug("Syntax error at line %d column %d", e.line, e.column)
            return Document(
                errors=[
                    Diagnostic(
                        e.explain(),
                        SourcePosition(
                            e.line,
                            e.column,
                            self._offset_of(e.line, e.column),
                        ),
                        Severity.error,
                    )
                ]
            )

        self._metadata = {}
        self._metadata_positions = {}
        self._used_directives = {}
        self._first_used_directive = None
        self._sections = [Section()]
        self._step_number = 1
        self._mode = DefineMode.all
        self._component_steps = []
        self._inline_quantities = []
        self._known_ingredients = set()
        self._known_cookware = set()

        if ast_recipe.frontmatter is not None:
            metadata, warnings = parse_frontmatter(
                ast_recipe.frontmatter.text,
                ast_recipe.frontmatter.offset,
                self._source.text,
            )
            self._metadata.update(metadata)
            for warning in warnings:
                self._diagnostics.add(warning)

        for ast_item in ast_recipe.items:
            if isinstance(ast_item, ast.Directive):
                self._compile_directive(ast_item, ast_recipe.frontmatter is not None)
            elif isinstance(ast_item, ast.SectionMarker):
                self._compile_section_marker(ast_item)
            elif isinstance(ast_item, ast.Note):
                self._compile_note(ast_item)
            elif isinstance(ast_item, ast.Step):
                fatal_error = self._compile_step(ast_item)
                if fatal_error is not None:
                    return Document(
                        errors=[fatal_error],
                        warnings=self._diagnostics.warnings,
                    )
            else:
                raise NotImplementedError(type(ast_item))

        for warning in check_standard_metadata(
            self._metadata, self._metadata_positions
        ):
            self._diagnostics.add(warning)

        if self._first_used_directive is not None:
            self._diagnostics.add(
                directive_deprecation_warning(
                    self._used_directives, self._first_used_directive
                )
            )

        sections = [
            section
            for section in self._sections
            if section.name is not None or section.content
        ]

        ingredients, cookware = link_references(self._component_steps, sections)

        document = Document(
            metadata=self._metadata,
            sections=sections,
            ingredients=ingredients,
            cookware=cookware,
            timers=unique_timers(self._component_steps),
            inline_quantities=self._inline_quantities,
            directive_metadata={
                directive.key: directive.value
                for directive in ast_recipe.leading_directives
            },
            errors=self._diagnostics.errors,
            warnings=self._diagnostics.warnings,
        )
        logger.debug(
            "Compiled recipe with %d section(s), %d step(s), %d error(s) "
            "and %d warning(s)",
            len(document.sections),
            len(document.steps),
            len(document.errors),
            len(document.warnings),
        )
        return document

    def _offset_of(self, line: int, column: int) -> int:
        offset = 0
        for _ in range(line - 1):
            newline = self._source.text.find("\n", offset)
            if newline < 0:
                break
            offset = newline + 1
        return min(offset + column - 1, len(self._source.text))

    def _position(self, offset: int) -> SourcePosition:
        return SourcePosition.from_offset(self._source.text, offset)

    @property
    def _current_section(self) -> Section:
        return self._sections[-1]

    def _add_step(self, items: List[StepItem], comments: List[str]) -> None:
        if self._extensions.inline_quantities:
            items, quantities = extract_inline_quantities(
                items, len(self._inline_quantities)
            )
            self._inline_quantities.extend(quantities)
        self._current_section.content.append(
            Step(items, self._step_number, comments)
        )
        self._step_number += 1
        self._component_steps.append(items)

    def _compile_directive(self, directive: ast.Directive, frontmatter: bool) -> None:
        if self._extensions.modes and is_special_directive(directive.key):
            self._mode = apply_directive_mode(
                self._mode, directive.key, directive.value
            )
            logger.debug("Mode is now %s", self._mode.name)
        elif frontmatter:
            # Frontmatter takes precedence: other directives are just text
            if self._mode is DefineMode.components:
                return
            elif self._mode is DefineMode.text:
                self._current_section.content.append(TextBlock(directive.raw_line))
            else:
                self._add_step(
                    [Text(directive.raw_line, self._position(directive.offset))], []
                )
        else:
            self._metadata[directive.key] = directive.value
            self._metadata_positions[directive.key] = self._position(directive.offset)
            self._used_directives[directive.key] = directive.value
            if self._first_used_directive is None:
                self._first_used_directive = self._position(directive.offset)

    def _compile_section_marker(self, marker: ast.SectionMarker) -> None:
        name = marker.name
        if name is not None:
            name = self._source.without_comments(marker.offset, name).strip() or None
        self._sections.append(Section(name))
        self._step_number = 1

    def _compile_note(self, note: ast.Note) -> None:
        content = self._current_section.content
        if content and isinstance(content[-1], TextBlock):
            content[-1].value = f"{content[-1].value} {note.text}"
        else:
            content.append(TextBlock(note.text))

    def _compile_step_line(self, line: ast.StepLine) -> List[StepItem]:
        """
        Produce the items of a single step line with block comments removed
        from its text and the whitespace at either end of the line dropped.
        """
        items: List[StepItem] = []
        for item in line.items:
            if isinstance(item, Text) and item.position is not None:
                item = Text(
                    self._source.without_comments(item.position.offset, item.value),
                    item.position,
                )
            items.append(item)

        items = merge_text(items)
        if items and isinstance(items[0], Text):
            items[0] = Text(items[0].value.lstrip(), items[0].position)
        if items and isinstance(items[-1], Text):
            items[-1] = Text(items[-1].value.rstrip(), items[-1].position)

        return [
            item for item in items if not (isinstance(item, Text) and not item.value)
        ]

    def _compile_step(self, step: ast.Step) -> Optional[Diagnostic]:
        """
        Compile a step, adding it to the current section (as appropriate for
        the current mode). Returns a Diagnostic if a fatal error occurs.
        """
        items: List[StepItem] = []
        for line in step.lines:
            line_items = self._compile_step_line(line)
            if not line_items:
                continue
            if items:
                items.append(Text(" "))
            items.extend(line_items)
        items = merge_text(items)

        if self._extensions.advanced_units:
            items = split_advanced_units(items)
        if not self._extensions.aliases:
            items = fold_aliases(items)
        items = split_invalid_markers(items)

        if self._extensions.strict_timers:
            for error in check_timer_quantities(items):
                return error

        for warning in check(items):
            self._diagnostics.add(warning)

        self._check_references(items)

        if self._mode is DefineMode.components:
            self._component_steps.append(items)
        elif self._mode is DefineMode.text:
            self._compile_text_mode_step(items)
        else:
            self._add_step(items, step.comments)

        return None

    def _check_references(self, items: List[StepItem]) -> None:
        """
        Record the names of the components used in a step. In 'steps' mode,
        report any which have not been seen before.
        """
        for item in items:
            if isinstance(item, Ingredient):
                known = self._known_ingredients
            elif isinstance(item, Cookware):
                known = self._known_cookware
            else:
                continue

            key = item.name.lower()
            if self._mode is DefineMode.steps and key not in known:
                self._diagnostics.error(
                    f"Reference not found: {item.name}",
                    item.position or SourcePosition(),
                )
            known.add(key)

    def _compile_text_mode_step(self, items: List[StepItem]) -> None:
        parts = []
        for item in items:
            if isinstance(item, Text):
                parts.append(item.value)
            elif isinstance(item, (Ingredient, Cookware, Timer)):
                self._diagnostics.warning(
                    f"Ignoring {_component_kind(item)} in text mode",
                    item.position or SourcePosition(),
                )
                parts.append(item.raw)
        text = "".join(parts)
        if text:
            self._current_section.content.append(TextBlock(text))


def compile(source: str, extensions: Union[str, Extensions] = "canonical") -> Document:
    """
    Compile a recipe source into a :py:class:`~cookparse.recipe.Document`.

    Parameters
    ==========
    source : str
        The recipe markup.
    extensions : str or :py:class:`~cookparse.extensions.Extensions`
        The markup extensions to enable, or the name of a preset (see
        :py:data:`~cookparse.extensions.PRESETS`).
    """
    return RecipeCompiler(extensions).compile(source)
