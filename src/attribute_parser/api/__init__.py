"""Public parsing API for the attribute parser."""

from .parser import (
    AttributeParser,
    Session,
    parse_file,
    parse_lines,
    parse_string,
    query,
    read_session,
    run_session,
)

__all__ = [
    "AttributeParser",
    "Session",
    "parse_file",
    "parse_lines",
    "parse_string",
    "query",
    "read_session",
    "run_session",
]
