"""Path query resolution against a completed tag tree.

A query such as ``root.child.grandchild~attr`` is scanned once from left to
right. ``.`` descends into a direct child by name and ``~`` descends the same
way and then looks up the rest of the expression as an attribute name. The
first segment must equal the root's own name.

Every ``~`` triggers a lookup and the last one processed wins, so
``a~b~c`` looks up ``b~c`` on ``a`` and then tries to descend into ``b``.
A failed descent after a lookup stops the scan and keeps that lookup.
Absence is an ordinary result and never raises.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional

from attribute_parser.shared import QueryConfig, get_logger
from attribute_parser.tree import TagNode, TagTree

DESCEND = "."
LOOKUP = "~"


class NotFoundReason(Enum):
    """Why a query produced no value."""

    EMPTY_TREE = auto()            # Document had no tags
    ANCHOR_MISMATCH = auto()       # First segment is not the root's name
    MISSING_TAG = auto()           # A descent segment names no direct child
    MISSING_ATTRIBUTE = auto()     # Resolved tag lacks the attribute
    NO_ATTRIBUTE_SEGMENT = auto()  # Expression contains no ~


@dataclass(frozen=True)
class QueryResult:
    """Outcome of resolving one path expression."""

    expression: str
    value: Optional[str] = None
    reason: Optional[NotFoundReason] = None

    @property
    def found(self) -> bool:
        return self.value is not None

    def render(self, not_found_text: str = "Not Found!") -> str:
        """Format the result as a single output line."""
        return self.value if self.value is not None else not_found_text


class QueryResolver:
    """Resolves path expressions against a read-only :class:`TagTree`."""

    def __init__(
        self,
        tree: TagTree,
        config: Optional[QueryConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.tree = tree
        self.config = config or QueryConfig()
        self.logger = get_logger(__name__, correlation_id, "query_resolver")

    def resolve(self, expression: str) -> QueryResult:
        """Resolve one path expression.

        Args:
            expression: Query such as ``a.b~value``

        Returns:
            QueryResult with the attribute value, or a not-found reason
        """
        root = self.tree.root
        if root is None:
            return self._not_found(expression, NotFoundReason.EMPTY_TREE)

        current: Optional[TagNode] = None
        token = ""
        result: Optional[QueryResult] = None

        for index, char in enumerate(expression):
            if char not in (DESCEND, LOOKUP):
                token += char
                continue

            if current is None:
                if token != root.name:
                    return self._not_found(
                        expression, NotFoundReason.ANCHOR_MISMATCH, segment=token
                    )
                current = root
            else:
                child = current.find_child(token)
                if child is None:
                    if result is not None:
                        return result
                    return self._not_found(
                        expression, NotFoundReason.MISSING_TAG, segment=token
                    )
                current = child
            token = ""

            if char == LOOKUP:
                attribute = expression[index + 1:]
                value = current.get_attribute(attribute)
                if value is None:
                    result = self._not_found(
                        expression, NotFoundReason.MISSING_ATTRIBUTE, segment=attribute
                    )
                else:
                    result = QueryResult(expression, value)

        if result is None:
            return self._not_found(expression, NotFoundReason.NO_ATTRIBUTE_SEGMENT)
        return result

    def resolve_all(self, expressions: Iterable[str]) -> List[QueryResult]:
        """Resolve expressions in order."""
        return [self.resolve(expression) for expression in expressions]

    def render(self, result: QueryResult) -> str:
        """Format a result using the configured not-found text."""
        return result.render(self.config.not_found_text)

    def _not_found(
        self, expression: str, reason: NotFoundReason, segment: Optional[str] = None
    ) -> QueryResult:
        self.logger.debug(
            "Query not found",
            extra={"expression": expression, "reason": reason.name, "segment": segment},
        )
        return QueryResult(expression, None, reason)
