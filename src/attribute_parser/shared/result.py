"""Result objects and diagnostic types for markup parsing.

Diagnostics record notable but non-fatal events (an attribute overwritten on
the same line, a top-level tag attached to an already closed root). Fatal
conditions are raised as exceptions and never appear here.
"""

import os
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

import psutil


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Compatibility behavior worth knowing about
    INFO = auto()       # Informational messages
    WARNING = auto()    # Input that is accepted but probably unintended


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    line_number: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert diagnostic to dictionary representation."""
        return {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
            "line_number": self.line_number,
            "details": self.details or {},
        }


@dataclass
class PerformanceMetrics:
    """Performance metrics for a single parse operation."""

    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0
    lines_processed: int = 0
    nodes_created: int = 0
    attributes_set: int = 0

    @property
    def lines_per_second(self) -> float:
        """Calculate markup lines processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.lines_processed * 1000.0) / self.processing_time_ms

    @property
    def memory_per_node(self) -> float:
        """Calculate memory growth per created node."""
        if self.nodes_created == 0:
            return 0.0
        return self.memory_used_bytes / self.nodes_created

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary representation."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "memory_used_bytes": self.memory_used_bytes,
            "lines_processed": self.lines_processed,
            "nodes_created": self.nodes_created,
            "attributes_set": self.attributes_set,
            "lines_per_second": self.lines_per_second,
        }


def current_memory_usage() -> int:
    """Resident set size of the current process in bytes."""
    process = psutil.Process(os.getpid())
    return int(process.memory_info().rss)
