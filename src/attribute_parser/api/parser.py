"""Core parser API with progressive disclosure.

Level 1 is a set of module-level functions (``parse_lines``, ``parse_string``,
``parse_file``, ``query``, ``run_session``). Level 2 is the reusable, configured
:class:`AttributeParser` class. Markup errors always propagate to the caller;
a query that finds nothing is reported as a :class:`QueryResult`.
"""

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from attribute_parser.shared import (
    InputFormatError,
    MarkupError,
    ParserConfig,
    get_logger,
)
from attribute_parser.query import QueryResolver, QueryResult
from attribute_parser.tokenization import LineTokenizer
from attribute_parser.tree import ParseResult, TagTree, TagTreeBuilder

PathLike = Union[str, Path]


@dataclass
class Session:
    """One input session: markup lines followed by query lines."""

    markup_lines: List[str] = field(default_factory=list)
    queries: List[str] = field(default_factory=list)

    @property
    def line_count(self) -> int:
        return len(self.markup_lines)

    @property
    def query_count(self) -> int:
        return len(self.queries)


def parse_lines(
    lines: Iterable[str],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse markup lines into a tag tree.

    Args:
        lines: Markup lines, one tag per line
        config: Parser configuration (defaults to ParserConfig())
        correlation_id: Optional correlation ID for session tracking

    Returns:
        ParseResult containing the completed tree

    Raises:
        MarkupError: On the first syntax or structure violation

    Examples:
        >>> result = parse_lines(['<a>', '<b value="hello">', '</b>', '</a>'])
        >>> result.root.find_child('b').get_attribute('value')
        'hello'
    """
    config = config or ParserConfig()
    tokenizer = LineTokenizer(config.tokenizer, correlation_id)
    builder = TagTreeBuilder(config.tree, correlation_id)
    return builder.build(tokenizer.tokenize(lines))


def parse_string(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse markup held in a single string, one tag per line."""
    return parse_lines(text.splitlines(), config, correlation_id)


def parse_file(
    path: PathLike,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse a UTF-8 markup file, one tag per line."""
    text = Path(path).read_text(encoding="utf-8")
    return parse_string(text, config, correlation_id)


def query(
    tree: Union[TagTree, ParseResult],
    expression: str,
    config: Optional[ParserConfig] = None,
) -> QueryResult:
    """Resolve one path expression such as ``a.b~value``.

    Examples:
        >>> tree = parse_lines(['<tag1 value="value">', '</tag1>']).tree
        >>> query(tree, 'tag1~value').value
        'value'
        >>> query(tree, 'tag1~missing').found
        False
    """
    config = config or ParserConfig()
    if isinstance(tree, ParseResult):
        tree = tree.tree
    return QueryResolver(tree, config.query).resolve(expression)


def read_session(lines: Iterable[str]) -> Session:
    """Split session input into markup lines and queries.

    The first line holds two integers, the markup line count ``N`` and the
    query count ``Q``. It is followed by ``N`` markup lines and ``Q`` queries.

    Raises:
        InputFormatError: If the header is malformed or lines are missing
    """
    logger = get_logger(__name__, None, "session_reader")
    iterator = iter(lines)

    try:
        header = next(iterator)
    except StopIteration:
        raise InputFormatError("Missing header line with line and query counts") from None

    line_count, query_count = _parse_header(header)
    markup_lines = _take(iterator, line_count, "markup")
    queries = [line.rstrip("\r\n") for line in _take(iterator, query_count, "query")]

    leftover = sum(1 for _ in iterator)
    if leftover:
        logger.debug("Ignoring trailing input lines", extra={"count": leftover})

    return Session(markup_lines=markup_lines, queries=queries)


def run_session(
    lines: Iterable[str],
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> List[str]:
    """Parse a session and return one rendered output line per query.

    Raises:
        InputFormatError: If the session layout is malformed
        MarkupError: If the markup is invalid; no output is produced
    """
    return AttributeParser(config, correlation_id).run(lines)


def _parse_header(header: str) -> Sequence[int]:
    parts = header.split()
    if len(parts) != 2:
        raise InputFormatError(
            f"Header must contain two integers, got {header.strip()!r}"
        )
    try:
        counts = [int(part) for part in parts]
    except ValueError:
        raise InputFormatError(
            f"Header must contain two integers, got {header.strip()!r}"
        ) from None
    if any(count < 0 for count in counts):
        raise InputFormatError("Line and query counts must be >= 0")
    return counts


def _take(iterator: Any, count: int, kind: str) -> List[str]:
    taken: List[str] = []
    for _ in range(count):
        try:
            taken.append(next(iterator))
        except StopIteration:
            raise InputFormatError(
                f"Expected {count} {kind} lines, got {len(taken)}"
            ) from None
    return taken


class AttributeParser:
    """Configured parser for repeated parse and query operations.

    Examples:
        >>> parser = AttributeParser(ParserConfig.strict())
        >>> result = parser.parse(['<a x="1">', '</a>'])
        >>> parser.query(result, 'a~x').value
        '1'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize parser.

        Args:
            config: Parser configuration (defaults to ParserConfig())
            correlation_id: Optional correlation ID; generated when correlation
                tracking is enabled and none is given
        """
        self.config = config or ParserConfig()
        if correlation_id is None and self.config.logging.enable_correlation_tracking:
            correlation_id = uuid.uuid4().hex[:12]
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "attribute_parser")
        self.reset_statistics()

    def parse(self, lines: Iterable[str]) -> ParseResult:
        """Parse markup lines, updating statistics."""
        try:
            result = parse_lines(lines, self.config, self.correlation_id)
        except MarkupError:
            self._errors += 1
            raise
        self._documents_parsed += 1
        return result

    def query(
        self, tree: Union[TagTree, ParseResult], expression: str
    ) -> QueryResult:
        """Resolve one path expression, updating statistics."""
        result = query(tree, expression, self.config)
        self._record_query(result)
        return result

    def run(self, lines: Iterable[str]) -> List[str]:
        """Run a full session and return the rendered output lines."""
        session = read_session(lines)
        self.logger.info(
            "Running session",
            extra={"line_count": session.line_count, "query_count": session.query_count},
        )
        parse_result = self.parse(session.markup_lines)
        resolver = QueryResolver(parse_result.tree, self.config.query, self.correlation_id)

        output = []
        for result in resolver.resolve_all(session.queries):
            self._record_query(result)
            output.append(resolver.render(result))
        return output

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the configuration, keeping statistics."""
        self.config = config
        self.logger.debug("Parser reconfigured", extra={"config_name": config.name})

    @property
    def statistics(self) -> Dict[str, Any]:
        """Usage statistics since creation or the last reset."""
        return {
            "documents_parsed": self._documents_parsed,
            "queries_resolved": self._queries_resolved,
            "queries_found": self._queries_found,
            "errors": self._errors,
            "found_rate": (
                self._queries_found / self._queries_resolved
                if self._queries_resolved else 0.0
            ),
        }

    def reset_statistics(self) -> None:
        self._documents_parsed = 0
        self._queries_resolved = 0
        self._queries_found = 0
        self._errors = 0

    def _record_query(self, result: QueryResult) -> None:
        self._queries_resolved += 1
        if result.found:
            self._queries_found += 1
