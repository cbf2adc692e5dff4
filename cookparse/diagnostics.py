"""
Errors and warnings produced while parsing a recipe are reported as
:py:class:`Diagnostic` values rather than exceptions. A parse always returns a
complete document with its diagnostics attached.

.. autoclass:: Diagnostic
    :members:

.. autoclass:: Severity
    :members:
    :undoc-members:

.. autoclass:: SourcePosition
    :members:

Diagnostics are gathered while a recipe is compiled by a
:py:class:`DiagnosticCollector`:

.. autoclass:: DiagnosticCollector
    :members:
"""

from typing import List, Optional

from dataclasses import dataclass, field

from enum import Enum, auto

from peggie.error_message_generation import format_error_message


__all__ = [
    "Severity",
    "SourcePosition",
    "Diagnostic",
    "DiagnosticCollector",
]


class Severity(Enum):
    """How serious a :py:class:`Diagnostic` is."""

    error = auto()
    warning = auto()


@dataclass(frozen=True)
class SourcePosition:
    """
    A location within a (preprocessed) recipe source.
    """

    line: int = 1
    """Line number, starting from 1."""

    column: int = 1
    """Column number, starting from 1."""

    offset: int = 0
    """Offset in characters from the start of the source, starting from 0."""

    @classmethod
    def from_offset(cls, source: str, offset: int) -> "SourcePosition":
        """
        Compute the line and column of a character offset into ``source``.
        """
        line_start = source.rfind("\n", 0, offset) + 1
        return cls(
            line=source.count("\n", 0, offset) + 1,
            column=offset - line_start + 1,
            offset=offset,
        )


UNKNOWN_POSITION = SourcePosition()
"""Position used for diagnostics which relate to no particular location."""


@dataclass(frozen=True)
class Diagnostic:
    """
    An error or warning relating to a recipe.
    """

    message: str
    """A human readable description of the problem."""

    position: SourcePosition = UNKNOWN_POSITION
    """Where the problem was found."""

    severity: Severity = Severity.error

    help: Optional[str] = None
    """Optional advice on how the problem might be resolved."""

    def format(self, source: str) -> str:
        """
        Render this diagnostic with the offending source line and a caret
        pointing at the problem, for example::

            At line 1 column 6:
                Wait ~{5}
                     ^
            Invalid timer quantity: missing unit
        """
        message = self.message
        if self.help is not None:
            message += "\n" + self.help
        lines = source.splitlines()
        if 0 < self.position.line <= len(lines):
            snippet = lines[self.position.line - 1]
        else:
            snippet = ""
        return format_error_message(
            self.position.line, self.position.column, snippet, message
        )

    def __str__(self) -> str:
        return (
            f"{self.severity.name.capitalize()}: {self.message} "
            f"(line {self.position.line} column {self.position.column})"
        )


@dataclass
class DiagnosticCollector:
    """
    Accumulates the errors and warnings of a single parse.
    """

    errors: List[Diagnostic] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)

    def error(
        self,
        message: str,
        position: SourcePosition = UNKNOWN_POSITION,
        help: Optional[str] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(message, position, Severity.error, help)
        self.errors.append(diagnostic)
        return diagnostic

    def warning(
        self,
        message: str,
        position: SourcePosition = UNKNOWN_POSITION,
        help: Optional[str] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(message, position, Severity.warning, help)
        self.warnings.append(diagnostic)
        return diagnostic

    def add(self, diagnostic: Diagnostic) -> None:
        """Record a previously constructed :py:class:`Diagnostic`."""
        if diagnostic.severity is Severity.error:
            self.errors.append(diagnostic)
        else:
            self.warnings.append(diagnostic)
