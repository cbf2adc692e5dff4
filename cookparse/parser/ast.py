"""
Abstract Syntax Tree (AST) for the recipe markup.

The AST is a flat, ordered list of line-level items (:py:class:`Directive`,
:py:class:`SectionMarker`, :py:class:`Note` and :py:class:`Step`) plus the
raw text of any frontmatter block. Component tokens within steps are
converted straight into :py:mod:`cookparse.recipe` records by
:py:mod:`cookparse.components`, however cross references are not resolved
and no extensions are applied at this stage.
"""

from dataclasses import dataclass, field

from typing import Any, List, Optional, Union

import peggie

from cookparse.components import parse_cookware, parse_ingredient, parse_timer
from cookparse.diagnostics import SourcePosition
from cookparse.recipe import Cookware, Ingredient, StepItem, Text, Timer


@dataclass
class AST:
    """
    Base class for all AST nodes.
    """

    offset: int = field(compare=False)
    """Source offset (in chars) of the corresponding part of the recipe."""


@dataclass
class Frontmatter(AST):
    """
    The contents of a ``---`` fenced frontmatter block. The offset is that of
    the first character after the opening fence.
    """

    text: str


@dataclass
class Directive(AST):
    """A ``>> key: value`` line."""

    key: str

    value: str

    raw_line: str
    """The whole line as written (less trailing whitespace)."""


@dataclass
class SectionMarker(AST):
    """A ``== name ==`` line."""

    name: Optional[str]


@dataclass
class Note(AST):
    """A ``> text`` line."""

    text: str


@dataclass
class StepLine(AST):
    items: List[StepItem]

    comment: Optional[str] = None
    """The text of the trailing ``-- comment``, if present."""


@dataclass
class Step(AST):
    """A run of consecutive non-blank lines."""

    offset: int = field(init=False, repr=False, compare=False)

    lines: List[StepLine]

    comments: List[str] = field(default_factory=list)
    """All comments within the step (trailing or on lines of their own)."""

    def __post_init__(self) -> None:
        self.offset = self.lines[0].offset


Item = Union[Directive, SectionMarker, Note, Step]


@dataclass
class Recipe(AST):
    """
    Root for all recipe ASTs.
    """

    offset: int = field(init=False, repr=False, compare=False)

    leading_directives: List[Directive]
    """
    The directives which appear before any other content (and before any
    frontmatter).
    """

    frontmatter: Optional[Frontmatter]

    items: List[Item]
    """
    The body of the recipe. When there is no frontmatter this begins with the
    :py:attr:`leading_directives`.
    """

    def __post_init__(self) -> None:
        self.offset = 0


class RecipeTransformer(peggie.ParseTreeTransformer):
    """
    Transformer which transforms a raw :py:mod:`peggie` parse tree into a more
    friendly :py:class:`AST`.
    """

    def __init__(self, source: str) -> None:
        self._source = source

    def _position(self, offset: int) -> SourcePosition:
        return SourcePosition.from_offset(self._source, offset)

    def _transform_regex(self, regex: peggie.Regex) -> peggie.Regex:
        return regex

    def recipe(self, _pt: peggie.ParseTree, children: Any) -> Recipe:
        leading, frontmatter, body, _eof = children
        leading_directives = [d for d in leading if isinstance(d, Directive)]
        items = [
            item
            for item in body
            if isinstance(item, (Directive, SectionMarker, Note, Step))
        ]
        if frontmatter is None:
            items = leading_directives + items
        return Recipe(leading_directives, frontmatter, items)

    def frontmatter(self, _pt: peggie.ParseTree, children: Any) -> Frontmatter:
        opening_fence, lines, _closing_fence = children
        return Frontmatter(opening_fence.end, "".join(line.string for line in lines))

    def frontmatter_line(self, _pt: peggie.ParseTree, children: Any) -> peggie.Regex:
        _not_fence, line = children
        return line

    def blank_line(self, _pt: peggie.ParseTree, _children: Any) -> None:
        return None

    def comment(self, _pt: peggie.ParseTree, children: Any) -> str:
        return children.string.strip()[2:].strip()

    def comment_line(self, _pt: peggie.ParseTree, children: Any) -> str:
        comment, _eol = children
        return comment

    def directive_line(self, _pt: peggie.ParseTree, children: Any) -> Directive:
        marker, key, colon, value, _eol = children
        key_offset = key.start + len(key.string) - len(key.string.lstrip())
        return Directive(
            offset=key_offset,
            key=key.string.strip(),
            value=value.string.strip(),
            raw_line=(
                marker.string + key.string + colon.string + value.string
            ).rstrip(),
        )

    def section_line(self, _pt: peggie.ParseTree, children: Any) -> SectionMarker:
        marker, name, _eol = children
        return SectionMarker(
            marker.start, name.string.strip().rstrip("=").strip() or None
        )

    def note_line(self, _pt: peggie.ParseTree, children: Any) -> Note:
        marker, text, _eol = children
        return Note(marker.start, text.string.strip())

    def step(self, _pt: peggie.ParseTree, children: Any) -> Step:
        first_line, other_lines = children

        lines = [first_line]
        comments = []
        if first_line.comment is not None:
            comments.append(first_line.comment)
        for comment_lines, line in other_lines:
            comments.extend(comment_lines)
            if line.comment is not None:
                comments.append(line.comment)
            lines.append(line)

        return Step(lines, comments)

    def step_line(self, _pt: peggie.ParseTree, children: Any) -> StepLine:
        _not_other_line, items, comment, _eol = children
        assert items[0].position is not None
        return StepLine(items[0].position.offset, items, comment)

    def ingredient(self, _pt: peggie.ParseTree, children: Any) -> Ingredient:
        sigil, _modifiers, name_end, note_end = children
        end = note_end if note_end is not None else name_end
        return parse_ingredient(
            self._source[sigil.start : end], self._position(sigil.start)
        )

    def cookware(self, _pt: peggie.ParseTree, children: Any) -> Cookware:
        sigil, _modifiers, name_end, note_end = children
        end = note_end if note_end is not None else name_end
        return parse_cookware(
            self._source[sigil.start : end], self._position(sigil.start)
        )

    def timer(self, _pt: peggie.ParseTree, children: Any) -> Timer:
        sigil, end = children
        return parse_timer(self._source[sigil.start : end], self._position(sigil.start))

    # The following rules produce the end offset of the part of the token
    # they match.

    def component_name(self, _pt: peggie.ParseTree, children: Any) -> int:
        name_end, amount_end = children
        return amount_end if amount_end is not None else name_end

    def timer_name(self, pt: peggie.Alt, children: Any) -> int:
        if pt.choice_index == 0:  # [name] {amount}
            _name_end, amount_end = children
            return amount_end
        else:  # Single word
            return children

    def multi_word_name(self, _pt: peggie.ParseTree, children: Any) -> int:
        _first_word_end, rest = children
        return rest.end

    def word(self, _pt: peggie.ParseTree, children: Any) -> int:
        return children.end

    def amount(self, _pt: peggie.ParseTree, children: Any) -> int:
        _open, _amount, close = children
        return close.end

    def component_note(self, _pt: peggie.ParseTree, children: Any) -> int:
        _open, _note, close = children
        return close.end

    def text(self, _pt: peggie.ParseTree, children: Any) -> Text:
        chunks = [
            chunk if isinstance(chunk, peggie.Regex) else chunk[-1]
            for chunk in children
        ]
        return Text(
            "".join(chunk.string for chunk in chunks),
            self._position(chunks[0].start),
        )
