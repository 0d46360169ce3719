#!/usr/bin/env python3
"""
Quick Start Guide for the Attribute Parser.

This example walks through parsing tag markup, resolving attribute queries,
handling markup errors and running a complete input session.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from attribute_parser import (
    AttributeParser,
    MarkupError,
    ParserConfig,
    parse_lines,
    query,
    run_session,
)

MARKUP = [
    '<library name="City Library" city="Springfield">',
    '<shelf id="A1" topic="fiction">',
    '<book title="Dune" author="Herbert">',
    "</book>",
    "</shelf>",
    '<shelf id="B2" topic="science">',
    "</shelf>",
    "</library>",
]


def quick_start_example():
    """Parse markup and resolve a few queries."""

    print("QUICK START - Attribute Parser")
    print("=" * 45)

    print("\nStep 1: Parsing markup")
    print("-" * 30)

    result = parse_lines(MARKUP)
    summary = result.summary()
    print(f"Root tag: {summary['root']}")
    print(f"Tags parsed: {summary['node_count']}, depth: {summary['max_depth']}")
    print(result.tree.render())

    print("\nStep 2: Resolving queries")
    print("-" * 30)

    for expression in [
        "library~city",
        "library.shelf~topic",
        "library.shelf.book~title",
        "library.shelf.book~isbn",
        "library.desk~id",
    ]:
        answer = query(result, expression)
        reason = f" ({answer.reason.name})" if answer.reason else ""
        print(f"  {expression:<28} -> {answer.render()}{reason}")


def error_handling_example():
    """Show how malformed markup is reported."""

    print("\nStep 3: Handling malformed markup")
    print("-" * 30)

    for lines in (
        ["<tag value=novalue>", "</tag>"],
        ["<a>", "<b>", "</a>"],
        ["<a>", "<b>"],
    ):
        try:
            parse_lines(lines)
        except MarkupError as e:
            print(f"  {type(e).__name__}: {e.format_diagnostic()!r}")


def session_example():
    """Run a complete session: header, markup lines, then queries."""

    print("\nStep 4: Running a session")
    print("-" * 30)

    session = ["2 2", '<tag1 value="value">', "</tag1>", "tag1~value", "tag1~other"]
    for line in run_session(session):
        print(f"  {line}")

    parser = AttributeParser(ParserConfig.strict())
    parser.run(session)
    print(f"  Statistics: {parser.statistics}")


if __name__ == "__main__":
    quick_start_example()
    error_handling_example()
    session_example()
