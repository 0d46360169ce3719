"""Line tokenizer for tag markup.

Each markup line holds exactly one tag. The tokenizer classifies a line as an
opening tag (name plus zero or more ``key="value"`` pairs) or a closing tag
(``</name>``) using an explicit character state machine, and rejects anything
else with a :class:`MarkupSyntaxError` naming the 1-based line number.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from attribute_parser.shared import (
    MarkupSyntaxError,
    TokenizerConfig,
    get_logger,
)

# Whitespace is an explicit set rather than str.isspace()
WHITESPACE = frozenset(" \t")
TAG_OPEN = "<"
TAG_CLOSE = ">"
CLOSING_MARK = "/"
EQUALS = "="
QUOTE = '"'


class TokenKind(Enum):
    """Kinds of markup lines accepted by the tokenizer."""

    OPEN = auto()    # <name key="value" ...>
    CLOSE = auto()   # </name>


class ScannerState(Enum):
    """State machine states for scanning a single line."""

    START = auto()            # Expecting <
    TAG_OPENING = auto()      # Just after <
    TAG_NAME = auto()         # Reading opening tag name
    CLOSING_NAME = auto()     # Reading closing tag name after </
    BEFORE_ATTR = auto()      # Whitespace before next attribute or >
    ATTR_NAME = auto()        # Reading attribute key
    BEFORE_EQUALS = auto()    # Whitespace between key and =
    BEFORE_VALUE = auto()     # After =, expecting opening quote
    ATTR_VALUE = auto()       # Inside quoted value
    AFTER_VALUE = auto()      # Just after closing quote
    DONE = auto()             # Final > consumed


@dataclass(frozen=True)
class LineToken:
    """A classified markup line."""

    kind: TokenKind
    name: str
    attributes: Tuple[Tuple[str, str], ...]
    line_number: int
    raw: str

    def __post_init__(self) -> None:
        """Validate token values."""
        if not self.name:
            raise ValueError("Tag name cannot be empty")
        if self.line_number < 1:
            raise ValueError("Line number must be >= 1")
        if self.kind == TokenKind.CLOSE and self.attributes:
            raise ValueError("Closing tags cannot carry attributes")

    @property
    def is_opening(self) -> bool:
        return self.kind == TokenKind.OPEN

    @property
    def is_closing(self) -> bool:
        return self.kind == TokenKind.CLOSE

    @property
    def attribute_map(self) -> Dict[str, str]:
        """Attribute pairs folded into a mapping, later keys overwriting earlier ones."""
        return dict(self.attributes)

    @property
    def duplicate_keys(self) -> List[str]:
        """Keys that appear more than once on this line, in first-seen order."""
        seen: Dict[str, int] = {}
        for key, _ in self.attributes:
            seen[key] = seen.get(key, 0) + 1
        return [key for key, count in seen.items() if count > 1]


class LineTokenizer:
    """Classifies markup lines into opening and closing tag tokens.

    The scanner keeps its state on the instance and resets it for every line,
    so a single tokenizer can be reused for a whole document.
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the line tokenizer.

        Args:
            config: Tokenizer configuration (defaults to TokenizerConfig())
            correlation_id: Optional correlation ID for session tracking
        """
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "line_tokenizer")
        self._reset_state("", 1)

    def _reset_state(self, line: str, line_number: int) -> None:
        """Reset scanner state for a new line."""
        self.state = ScannerState.START
        self._line = line
        self._line_number = line_number
        self._kind = TokenKind.OPEN
        self._name_buffer = ""
        self._key_buffer = ""
        self._value_buffer = ""
        self._attributes: List[Tuple[str, str]] = []
        self._at_line_end = False

    def tokenize(self, lines: Iterable[str], start_line: int = 1) -> Iterator[LineToken]:
        """Tokenize lines lazily, stopping at the first invalid one.

        Args:
            lines: Markup lines, one tag per line
            start_line: Line number assigned to the first line

        Yields:
            LineToken for every valid line in order
        """
        for offset, line in enumerate(lines):
            yield self.tokenize_line(line, start_line + offset)

    def tokenize_line(self, line: str, line_number: int) -> LineToken:
        """Classify one markup line.

        Args:
            line: Raw markup line
            line_number: 1-based line number used in error reports

        Returns:
            LineToken describing the opening or closing tag

        Raises:
            MarkupSyntaxError: If the line matches neither tag form
        """
        text = self._prepare_line(line)
        self._reset_state(line, line_number)

        if (
            self.config.max_line_length is not None
            and len(text) > self.config.max_line_length
        ):
            self._fail(f"Line exceeds {self.config.max_line_length} characters")

        last_index = len(text) - 1
        for index, char in enumerate(text):
            self._at_line_end = index == last_index
            self._process_character(char)

        if self.state != ScannerState.DONE:
            self._fail(f"Unexpected end of line in state {self.state.name}")

        return LineToken(
            kind=self._kind,
            name=self._name_buffer,
            attributes=tuple(self._attributes),
            line_number=line_number,
            raw=line,
        )

    def _prepare_line(self, line: str) -> str:
        if line.endswith("\n"):
            line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
        if self.config.strip_lines:
            line = line.strip(" \t")
        return line

    def _process_character(self, char: str) -> None:
        """Process a single character through the state machine."""
        if self.state == ScannerState.START:
            self._process_start(char)
        elif self.state == ScannerState.TAG_OPENING:
            self._process_tag_opening(char)
        elif self.state == ScannerState.TAG_NAME:
            self._process_tag_name(char)
        elif self.state == ScannerState.CLOSING_NAME:
            self._process_closing_name(char)
        elif self.state == ScannerState.BEFORE_ATTR:
            self._process_before_attr(char)
        elif self.state == ScannerState.ATTR_NAME:
            self._process_attr_name(char)
        elif self.state == ScannerState.BEFORE_EQUALS:
            self._process_before_equals(char)
        elif self.state == ScannerState.BEFORE_VALUE:
            self._process_before_value(char)
        elif self.state == ScannerState.ATTR_VALUE:
            self._process_attr_value(char)
        elif self.state == ScannerState.AFTER_VALUE:
            self._process_after_value(char)
        else:
            self._fail(f"Trailing character after tag end: {char!r}")

    def _process_start(self, char: str) -> None:
        if char != TAG_OPEN:
            self._fail(f"Line must start with {TAG_OPEN!r}")
        self.state = ScannerState.TAG_OPENING

    def _process_tag_opening(self, char: str) -> None:
        if char == CLOSING_MARK:
            self._kind = TokenKind.CLOSE
            self.state = ScannerState.CLOSING_NAME
        elif char in WHITESPACE:
            self._fail("Tag name cannot start with whitespace")
        elif char == TAG_CLOSE and self._at_line_end:
            self._fail("Tag name cannot be empty")
        else:
            self._name_buffer = char
            self.state = ScannerState.TAG_NAME

    def _process_tag_name(self, char: str) -> None:
        # Only the final > ends the tag, so names may contain >
        if char in WHITESPACE:
            self.state = ScannerState.BEFORE_ATTR
        elif char == TAG_CLOSE and self._at_line_end:
            self.state = ScannerState.DONE
        else:
            self._name_buffer += char

    def _process_closing_name(self, char: str) -> None:
        if char == TAG_CLOSE and self._at_line_end:
            if not self._name_buffer:
                self._fail("Closing tag name cannot be empty")
            self.state = ScannerState.DONE
        elif char in WHITESPACE:
            self._fail("Whitespace is not allowed in a closing tag")
        else:
            self._name_buffer += char

    def _process_before_attr(self, char: str) -> None:
        if char in WHITESPACE:
            return
        if char == TAG_CLOSE:
            self.state = ScannerState.DONE
        elif char in (EQUALS, QUOTE):
            self._fail(f"Attribute name expected before {char!r}")
        else:
            self._key_buffer = char
            self.state = ScannerState.ATTR_NAME

    def _process_attr_name(self, char: str) -> None:
        if char == EQUALS:
            self.state = ScannerState.BEFORE_VALUE
        elif char in WHITESPACE:
            self.state = ScannerState.BEFORE_EQUALS
        elif char in (QUOTE, TAG_CLOSE):
            self._fail(f"Attribute {self._key_buffer!r} has no value")
        else:
            self._key_buffer += char

    def _process_before_equals(self, char: str) -> None:
        if char in WHITESPACE:
            return
        if char != EQUALS:
            self._fail(f"Expected '=' after attribute {self._key_buffer!r}")
        self.state = ScannerState.BEFORE_VALUE

    def _process_before_value(self, char: str) -> None:
        if char in WHITESPACE:
            return
        if char != QUOTE:
            self._fail(f"Value of attribute {self._key_buffer!r} must be quoted")
        self._value_buffer = ""
        self.state = ScannerState.ATTR_VALUE

    def _process_attr_value(self, char: str) -> None:
        if char == QUOTE:
            self._finish_attribute()
            self.state = ScannerState.AFTER_VALUE
        else:
            self._value_buffer += char

    def _process_after_value(self, char: str) -> None:
        if char in WHITESPACE:
            self.state = ScannerState.BEFORE_ATTR
        elif char == TAG_CLOSE:
            self.state = ScannerState.DONE
        else:
            self._fail("Attribute pairs must be separated by whitespace")

    def _finish_attribute(self) -> None:
        key = self._key_buffer.strip(" \t")
        value = self._value_buffer.strip(" \t")
        if not value and not self.config.allow_empty_values:
            self._fail(f"Attribute {key!r} has an empty value")
        self._attributes.append((key, value))
        self._key_buffer = ""
        self._value_buffer = ""

    def _fail(self, detail: str) -> None:
        self.logger.debug(
            "Rejected markup line",
            extra={"line_number": self._line_number, "detail": detail},
        )
        raise MarkupSyntaxError(self._line_number, self._line, detail)
