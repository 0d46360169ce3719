"""Shared utilities for the attribute parser.

This module provides configuration objects, exceptions, result types and the
correlation-aware logger used across all processing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    LoggingConfig,
    ParserConfig,
    QueryConfig,
    TokenizerConfig,
    TreeConfig,
)
from .exceptions import (
    AttributeParserError,
    InputFormatError,
    MarkupError,
    MarkupSyntaxError,
    MismatchedCloseError,
    UnclosedTagError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    current_memory_usage,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "LoggingConfig",
    "ParserConfig",
    "QueryConfig",
    "TokenizerConfig",
    "TreeConfig",
    "AttributeParserError",
    "InputFormatError",
    "MarkupError",
    "MarkupSyntaxError",
    "MismatchedCloseError",
    "UnclosedTagError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "current_memory_usage",
]
