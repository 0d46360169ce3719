"""Configuration classes for the attribute parser.

This module provides configuration objects for every processing layer,
enabling control over line scanning, tree building, query rendering and
logging behavior.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
COMPONENT_FIELDS = ["tokenizer", "tree", "query", "logging"]


@dataclass
class TokenizerConfig:
    """Configuration for the line tokenizer."""

    strip_lines: bool = True             # Trim surrounding whitespace and \r
    allow_empty_values: bool = True      # Accept key="" pairs
    max_line_length: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if self.max_line_length is not None and self.max_line_length <= 0:
            raise ValueError("max_line_length must be > 0 or None")


@dataclass
class TreeConfig:
    """Configuration for tree building."""

    require_root_closed: bool = False

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not isinstance(self.require_root_closed, bool):
            raise ValueError("require_root_closed must be a boolean")


@dataclass
class QueryConfig:
    """Configuration for query resolution and rendering."""

    not_found_text: str = "Not Found!"

    def __post_init__(self) -> None:
        """Validate query configuration."""
        if not self.not_found_text:
            raise ValueError("not_found_text cannot be empty")


@dataclass
class LoggingConfig:
    """Logging settings that apply across all components."""

    level: str = "WARNING"
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate logging configuration."""
        if self.level not in VALID_LOG_LEVELS:
            raise ValueError(f"level must be one of {VALID_LOG_LEVELS}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for all attribute parser components.

    Immutable; use :meth:`override` to derive a modified copy.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.tokenizer.__post_init__()
            self.tree.__post_init__()
            self.query.__post_init__()
            self.logging.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override, using ``component__field`` notation
                for component settings

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig().override(
            ...     tree__require_root_closed=True,
            ...     query__not_found_text="-",
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=COMPONENT_FIELDS,
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for field_name in COMPONENT_FIELDS:
            current_config = getattr(self, field_name)
            if field_name in nested_overrides:
                try:
                    new_fields[field_name] = replace(
                        current_config, **nested_overrides[field_name]
                    )
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=field_name) from e
            else:
                new_fields[field_name] = current_config

        for key, value in nested_overrides.items():
            if key not in COMPONENT_FIELDS:
                new_fields[key] = value

        try:
            return replace(self, **new_fields)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (list, tuple)):
                return [_dataclass_to_dict(item) for item in obj]
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in config files surface early.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a mapping")

        component_types = {
            "tokenizer": TokenizerConfig,
            "tree": TreeConfig,
            "query": QueryConfig,
            "logging": LoggingConfig,
        }
        field_values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"Section '{key}' must be a mapping", field_name=key
                    )
                try:
                    field_values[key] = component_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in ("name", "description"):
                field_values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}",
                    field_name=key,
                    suggestions=COMPONENT_FIELDS + ["name", "description"],
                )

        return cls(**field_values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ParserConfig":
        """Load configuration from a JSON file."""
        path = Path(config_path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read config file {path}: {e}") from e
        return cls.from_json(text)

    # Preset factory methods
    @classmethod
    def compatible(cls) -> "ParserConfig":
        """Default behavior: accept everything the reference grammar accepts."""
        return cls(
            name="compatible",
            description="Lenient root closing and empty attribute values allowed",
        )

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Require a closed root tag and non-empty attribute values."""
        return cls(
            tokenizer=TokenizerConfig(allow_empty_values=False),
            tree=TreeConfig(require_root_closed=True),
            name="strict",
            description="Root tag must be closed and attribute values non-empty",
        )
