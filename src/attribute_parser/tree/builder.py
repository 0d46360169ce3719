"""Tag tree data structure and the builder that constructs it.

The builder consumes classified markup lines in document order and keeps a
stack of the nodes that are currently open; the top of the stack is the
cursor. Nodes themselves carry no parent reference, so the finished tree is a
plain owned-children structure that is read-only once building completes.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from attribute_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    MarkupError,
    MismatchedCloseError,
    PerformanceMetrics,
    TreeConfig,
    UnclosedTagError,
    current_memory_usage,
    get_logger,
)
from attribute_parser.tokenization import LineToken, TokenKind

MS_PER_SECOND = 1000


@dataclass(frozen=True, eq=False)
class TagNode:
    """A single tag in the document tree.

    The name is fixed at creation. Attributes and children are filled in by
    :class:`TagTreeBuilder` and must be treated as read-only afterwards.
    """

    name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["TagNode"] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate node values."""
        if not self.name:
            raise ValueError("Tag name cannot be empty")

    def _append_child(self, child: "TagNode") -> None:
        if not isinstance(child, TagNode):
            raise TypeError("Child must be a TagNode instance")
        self.children.append(child)

    def find_child(self, name: str) -> Optional["TagNode"]:
        """Find first direct child with matching tag name."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_children(self, name: str) -> List["TagNode"]:
        """Find all direct children with matching tag name."""
        return [child for child in self.children if child.name == name]

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        return self.attributes.get(name, default)

    def has_attribute(self, name: str) -> bool:
        """Check if node has specific attribute."""
        return name in self.attributes

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        result: Dict[str, Any] = {
            "name": self.name,
            "attributes": dict(self.attributes),
        }
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass
class TagTree:
    """Completed document tree.

    ``root`` is ``None`` only for an empty document.
    """

    root: Optional[TagNode] = None
    root_closed: bool = False

    def iter_nodes(self) -> Iterator[TagNode]:
        """Iterate over all nodes depth-first in document order."""
        for node, _ in self.iter_with_depth():
            yield node

    def iter_with_depth(self) -> Iterator[Tuple[TagNode, int]]:
        """Iterate over ``(node, depth)`` pairs depth-first, root at depth 0."""
        if self.root is None:
            return
        pending: List[Tuple[TagNode, int]] = [(self.root, 0)]
        while pending:
            node, depth = pending.pop()
            yield node, depth
            for child in reversed(node.children):
                pending.append((child, depth + 1))

    @property
    def node_count(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    @property
    def attribute_count(self) -> int:
        return sum(len(node.attributes) for node in self.iter_nodes())

    @property
    def max_depth(self) -> int:
        return max((depth for _, depth in self.iter_with_depth()), default=0)

    @property
    def is_empty(self) -> bool:
        return self.root is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert tree to dictionary representation."""
        return {
            "root": self.root.to_dict() if self.root else None,
            "node_count": self.node_count,
            "attribute_count": self.attribute_count,
            "max_depth": self.max_depth,
        }

    def render(self, indent: int = 2) -> str:
        """Render the tree back to indented markup, one tag per line."""
        if self.root is None:
            return ""
        lines: List[str] = []
        self._render_node(self.root, 0, indent, lines)
        return "\n".join(lines)

    def _render_node(
        self, node: TagNode, depth: int, indent: int, lines: List[str]
    ) -> None:
        pad = " " * (depth * indent)
        pairs = "".join(f' {key}="{value}"' for key, value in node.attributes.items())
        lines.append(f"{pad}<{node.name}{pairs}>")
        for child in node.children:
            self._render_node(child, depth + 1, indent, lines)
        lines.append(f"{pad}</{node.name}>")


@dataclass
class ParseResult:
    """Result of building a tag tree, with diagnostics and metrics."""

    tree: TagTree = field(default_factory=TagTree)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def root(self) -> Optional[TagNode]:
        return self.tree.root

    @property
    def node_count(self) -> int:
        return self.tree.node_count

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        line_number: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Add a diagnostic entry to the result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                line_number=line_number,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics filtered by severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def summary(self) -> Dict[str, Any]:
        """Summarize the parse for reporting."""
        return {
            "root": self.root.name if self.root else None,
            "root_closed": self.tree.root_closed,
            "node_count": self.node_count,
            "attribute_count": self.tree.attribute_count,
            "max_depth": self.tree.max_depth,
            "diagnostic_count": len(self.diagnostics),
            "performance": self.performance.to_dict(),
        }


class TagTreeBuilder:
    """Builds a :class:`TagTree` from a sequence of line tokens.

    Any structural defect aborts the build by raising a :class:`MarkupError`;
    no partial tree is returned.
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree configuration (defaults to TreeConfig())
            correlation_id: Optional correlation ID for session tracking
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tag_tree_builder")
        self._reset_state()

    def _reset_state(self) -> None:
        """Reset internal state for a new build."""
        self._open_stack: List[TagNode] = []
        self._root: Optional[TagNode] = None
        self._root_closed = False
        self._lines_processed = 0
        self._nodes_created = 0
        self._attributes_set = 0

    def build(self, tokens: Iterable[LineToken]) -> ParseResult:
        """Build the tag tree from line tokens.

        Args:
            tokens: Tokens in document order; may be a lazy tokenizer stream

        Returns:
            ParseResult containing the completed tree

        Raises:
            MarkupSyntaxError: Propagated from a lazy token stream
            MismatchedCloseError: A closing tag does not match the open tag
            UnclosedTagError: Input ended with tags still open
        """
        start_time = time.time()
        memory_before = current_memory_usage()
        self._reset_state()
        result = ParseResult(correlation_id=self.correlation_id)

        self.logger.info("Starting tree building")

        try:
            for token in tokens:
                self._lines_processed += 1
                self._process_token(token, result)
            self._check_terminal_state()
        except MarkupError as e:
            # Callers report the error itself
            self.logger.debug(
                "Tree building failed",
                extra={
                    "error_type": type(e).__name__,
                    "line_number": e.line_number,
                    "lines_processed": self._lines_processed,
                },
            )
            raise
        finally:
            # The cursor never outlives a single build
            open_stack, self._open_stack = self._open_stack, []

        result.tree = TagTree(root=self._root, root_closed=self._root_closed)
        result.performance = PerformanceMetrics(
            processing_time_ms=(time.time() - start_time) * MS_PER_SECOND,
            memory_used_bytes=max(0, current_memory_usage() - memory_before),
            lines_processed=self._lines_processed,
            nodes_created=self._nodes_created,
            attributes_set=self._attributes_set,
        )

        if self._root is None:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                "No markup lines provided - empty tree created",
                "tag_tree_builder",
            )
        elif not self._root_closed:
            self.logger.warning(
                "Root tag never closed", extra={"tag": self._root.name}
            )
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Root tag <{self._root.name}> was never closed",
                "tag_tree_builder",
            )

        self.logger.info(
            "Tree building completed",
            extra={
                "node_count": self._nodes_created,
                "open_at_end": len(open_stack),
                "processing_time_ms": result.performance.processing_time_ms,
            },
        )
        return result

    def _process_token(self, token: LineToken, result: ParseResult) -> None:
        if token.kind == TokenKind.OPEN:
            self._handle_opening_tag(token, result)
        elif token.kind == TokenKind.CLOSE:
            self._handle_closing_tag(token, result)
        else:
            raise ValueError(f"Unsupported token kind: {token.kind}")

    def _handle_opening_tag(self, token: LineToken, result: ParseResult) -> None:
        node = TagNode(token.name)
        self._nodes_created += 1

        if self._root is None:
            self._root = node
        else:
            parent = self._open_stack[-1]
            if self._root_closed and parent is self._root:
                result.add_diagnostic(
                    DiagnosticSeverity.DEBUG,
                    f"Top-level tag <{token.name}> attached to closed root "
                    f"<{self._root.name}>",
                    "tag_tree_builder",
                    line_number=token.line_number,
                )
            parent._append_child(node)

        self._open_stack.append(node)
        self._install_attributes(node, token, result)

    def _install_attributes(
        self, node: TagNode, token: LineToken, result: ParseResult
    ) -> None:
        for key, value in token.attributes:
            if key in node.attributes:
                self.logger.debug(
                    "Attribute overwritten on the same line",
                    extra={"tag": node.name, "attribute": key,
                           "line_number": token.line_number},
                )
                result.add_diagnostic(
                    DiagnosticSeverity.INFO,
                    f"Attribute '{key}' repeated on <{node.name}>; last value kept",
                    "tag_tree_builder",
                    line_number=token.line_number,
                    details={"previous": node.attributes[key], "value": value},
                )
            node.attributes[key] = value
            self._attributes_set += 1

    def _handle_closing_tag(self, token: LineToken, result: ParseResult) -> None:
        if not self._open_stack:
            raise MismatchedCloseError(token.line_number, token.name, None)

        cursor = self._open_stack[-1]
        if token.name != cursor.name:
            raise MismatchedCloseError(token.line_number, token.name, cursor.name)

        if len(self._open_stack) > 1:
            self._open_stack.pop()
            return

        # Closing the root keeps it as the cursor and the final result
        if self._root_closed:
            result.add_diagnostic(
                DiagnosticSeverity.DEBUG,
                f"Root tag <{cursor.name}> closed more than once",
                "tag_tree_builder",
                line_number=token.line_number,
            )
        self._root_closed = True

    def _check_terminal_state(self) -> None:
        if self._root is None:
            return
        still_open = [node.name for node in self._open_stack[1:]]
        if still_open:
            if not self._root_closed:
                still_open.insert(0, self._root.name)
            raise UnclosedTagError(still_open)
        if self.config.require_root_closed and not self._root_closed:
            raise UnclosedTagError([self._root.name])
