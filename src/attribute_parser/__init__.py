"""Attribute Parser.

Parses line-oriented tag markup (one ``<tag key="value">`` or ``</tag>`` per
line) into a tree and resolves ``root.child~attribute`` path queries against it.

Progressive API Disclosure:
- Level 1: Simple functions - parse_lines(), parse_string(), parse_file(), query()
- Level 2: Configured parser - AttributeParser class
"""

__version__ = "0.1.0"
__author__ = "Attribute Parser Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured parser
from .api import (
    AttributeParser,
    parse_file,
    parse_lines,
    parse_string,
    query,
    read_session,
    run_session,
)

# Configuration and error types
from .shared import (
    AttributeParserError,
    InputFormatError,
    MarkupError,
    MarkupSyntaxError,
    MismatchedCloseError,
    ParserConfig,
    UnclosedTagError,
)

# Core result objects
from .query import NotFoundReason, QueryResult
from .tree import ParseResult, TagNode, TagTree

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse_lines",
    "parse_string",
    "parse_file",
    "query",
    "read_session",
    "run_session",

    # Level 2: Configured parser
    "AttributeParser",
    "ParserConfig",

    # Result objects and data structures
    "ParseResult",
    "QueryResult",
    "NotFoundReason",
    "TagNode",
    "TagTree",

    # Errors
    "AttributeParserError",
    "InputFormatError",
    "MarkupError",
    "MarkupSyntaxError",
    "MismatchedCloseError",
    "UnclosedTagError",
]
