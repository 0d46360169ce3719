"""Line tokenization for tag markup.

Key Components:
    LineTokenizer: Classifies each markup line as an opening or closing tag
    LineToken: A classified line with tag name, attribute pairs and line number
    TokenKind: Opening or closing tag
    ScannerState: State machine states used while scanning a line
"""

from .tokenizer import (
    LineToken,
    LineTokenizer,
    ScannerState,
    TokenKind,
)

__all__ = [
    "LineToken",
    "LineTokenizer",
    "ScannerState",
    "TokenKind",
]
