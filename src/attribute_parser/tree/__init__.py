"""Tree building for tag markup.

Key Components:
    TagTreeBuilder: Consumes line tokens and maintains the open-tag cursor stack
    TagTree: Completed, read-only document tree
    TagNode: Single tag with name, attributes and ordered children
    ParseResult: Tree plus diagnostics and performance metrics
"""

from .builder import (
    ParseResult,
    TagNode,
    TagTree,
    TagTreeBuilder,
)

__all__ = [
    "ParseResult",
    "TagNode",
    "TagTree",
    "TagTreeBuilder",
]
