"""
Textual clean-up applied to recipe sources before they are parsed.

.. autofunction:: preprocess

.. autofunction:: normalize_marker_spacing

.. autofunction:: strip_block_comments

.. autoclass:: PreprocessedSource
    :members:
"""

from typing import List, Tuple

from dataclasses import dataclass, field

import re


__all__ = [
    "PreprocessedSource",
    "normalize_marker_spacing",
    "strip_block_comments",
    "preprocess",
]


# A space between a sigil and the rest of a component is tolerated, so long
# as the component's braces follow on the same line.
marker_spacing_patterns = [
    (re.compile(r"~[ \t]+(?=\{)"), "~"),
    (re.compile(r"@[ \t]+(?=[^ \t\r\n][^\n]*\{)"), "@"),
    (re.compile(r"#[ \t]+(?=[^ \t\r\n][^\n]*\{)"), "#"),
]

block_comment_pattern = re.compile(r"\[-.*?-\]", re.DOTALL)


@dataclass
class PreprocessedSource:
    text: str
    """The source text, ready to be parsed."""

    comment_spans: List[Tuple[int, int]] = field(default_factory=list)
    """
    The (start, end) offsets (into :py:attr:`text`) of the blanked-out block
    comments.
    """

    def in_comment(self, offset: int) -> bool:
        """True if the character at ``offset`` was part of a block comment."""
        return any(start <= offset < end for start, end in self.comment_spans)

    def without_comments(self, offset: int, string: str) -> str:
        """
        Given a substring of :py:attr:`text` starting at ``offset``, return
        it with any characters which belonged to block comments removed.
        """
        if not self.comment_spans:
            return string
        return "".join(
            char
            for i, char in enumerate(string)
            if not self.in_comment(offset + i)
        )


def normalize_marker_spacing(source: str) -> str:
    """
    Remove the whitespace in component tokens written like ``@ salt{}``,
    ``# pan{}`` or ``~ {5%minutes}``.
    """
    for pattern, replacement in marker_spacing_patterns:
        source = pattern.sub(replacement, source)
    return source


def strip_block_comments(source: str) -> PreprocessedSource:
    """
    Replace ``[- block comments -]`` with spaces (keeping any newlines within
    them) so that the offsets of everything else are unchanged.
    """
    spans = []

    def blank(match: "re.Match[str]") -> str:
        spans.append(match.span())
        return re.sub(r"[^\n]", " ", match.group(0))

    text = block_comment_pattern.sub(blank, source)
    return PreprocessedSource(text, spans)


def preprocess(source: str) -> PreprocessedSource:
    """Apply all preprocessing steps to a recipe source."""
    return strip_block_comments(normalize_marker_spacing(source))
