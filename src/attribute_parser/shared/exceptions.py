"""Exception hierarchy for markup parsing and session input.

Markup errors are fatal: they abort the whole parse and no partial tree is
returned. A query that finds nothing is not an error and is reported through
``QueryResult`` instead.
"""

from typing import List, Optional, Sequence


class AttributeParserError(Exception):
    """Base exception for all attribute parser errors."""


class MarkupError(AttributeParserError):
    """A structural or lexical defect in the markup lines."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        self.message = message
        self.line_number = line_number
        if line_number is not None:
            super().__init__(f"Line {line_number}: {message}")
        else:
            super().__init__(message)

    def format_diagnostic(self) -> str:
        """Render the error the way it is reported on stderr."""
        if self.line_number is not None and self.line_number >= 1:
            return f"Line {self.line_number}\n\t{self.message}"
        return self.message


class MarkupSyntaxError(MarkupError):
    """A line is neither an opening tag nor a closing tag."""

    def __init__(
        self, line_number: int, line: str, detail: Optional[str] = None
    ) -> None:
        super().__init__("Syntax error", line_number)
        self.line = line
        self.detail = detail


class MismatchedCloseError(MarkupError):
    """A closing tag does not match the tag that is currently open."""

    def __init__(
        self, line_number: int, found: str, expected: Optional[str]
    ) -> None:
        super().__init__(f"Closing a tag that is not open: {found}", line_number)
        self.found = found
        self.expected = expected


class UnclosedTagError(MarkupError):
    """Input ended while one or more tags were still open."""

    def __init__(self, open_tags: Sequence[str]) -> None:
        super().__init__("Missing closing tag")
        self.open_tags: List[str] = list(open_tags)


class InputFormatError(AttributeParserError):
    """The session input does not follow the ``N Q`` header layout."""
