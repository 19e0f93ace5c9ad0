"""Configuration classes for the XML to xast transform.

This module provides configuration objects for the character, scanning and
tree building layers, enabling fine-tuned control over how input is decoded,
tokenized and positioned.
"""

import codecs
import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

_COMPONENTS = ("character", "scanner", "tree")


@dataclass(frozen=True)
class CharacterConfig:
    """Configuration for decoding byte input."""

    encoding: Optional[str] = None  # Skips detection when set
    fallback_encoding: str = "utf-8"
    errors: str = "strict"
    detect_bom: bool = True
    detect_declaration: bool = True

    def __post_init__(self) -> None:
        """Validate character configuration."""
        for name in ("encoding", "fallback_encoding"):
            value = getattr(self, name)
            if value is None:
                continue
            try:
                codecs.lookup(value)
            except LookupError as e:
                raise ValueError(f"{name} must be a known codec, got {value!r}") from e
        try:
            codecs.lookup_error(self.errors)
        except LookupError as e:
            raise ValueError(
                f"errors must be a registered error handler, got {self.errors!r}"
            ) from e


@dataclass(frozen=True)
class ScannerConfig:
    """Configuration for the streaming XML scanner."""

    max_buffer_length: int = 64 * 1024
    strict_entities: bool = True  # Only the five predefined XML entities

    def __post_init__(self) -> None:
        """Validate scanner configuration."""
        if self.max_buffer_length <= 0:
            raise ValueError("max_buffer_length must be > 0")


@dataclass(frozen=True)
class TreeConfig:
    """Configuration for tree building."""

    correct_positions: bool = True  # Compensate scanner comment/text end positions
    include_root_position: bool = True

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not isinstance(self.correct_positions, bool):
            raise ValueError("correct_positions must be a bool")
        if not isinstance(self.include_root_position, bool):
            raise ValueError("include_root_position must be a bool")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def _check_fields(target_class: type, values: Dict[str, Any]) -> None:
    """Reject keys that are not fields of the ``target_class`` dataclass."""
    known = set(target_class.__dataclass_fields__)  # type: ignore[attr-defined]
    unknown = set(values) - known
    if unknown:
        raise ConfigValidationError(
            f"Unknown {target_class.__name__} fields: {sorted(unknown)}",
            field_name=target_class.__name__,
            suggestions=sorted(known),
        )


@dataclass(frozen=True)
class ParserConfig:
    """Configuration for all transform components.

    The aggregate and its components are frozen, so one instance can be
    shared between threads and calls.
    """

    character: CharacterConfig = field(default_factory=CharacterConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)

    correlation_id: Optional[str] = None
    version: str = "1.0.0"

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        for name in _COMPONENTS:
            expected = self.__dataclass_fields__[name].type
            component = getattr(self, name)
            if not isinstance(component, expected):
                raise ConfigValidationError(
                    f"{name} must be a {expected.__name__}, "
                    f"got {type(component).__name__}",
                    field_name=name,
                )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; ``component__field`` targets a
                field of a component configuration

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> new_config = config.override(
            ...     scanner__max_buffer_length=1024,
            ...     tree__correct_positions=False
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=component,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENTS and isinstance(value, dict):
                component = getattr(self, key)
                _check_fields(type(component), value)
                try:
                    new_fields[key] = replace(component, **value)
                except ValueError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        _check_fields(type(self), new_fields)
        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
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

        Args:
            data: Dictionary as produced by ``to_dict``

        Returns:
            ParserConfig instance created from dictionary
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                if hasattr(field_info.type, "__dataclass_fields__"):
                    value = _dict_to_dataclass(value, field_info.type)
                field_values[field_name] = value

            _check_fields(target_class, data_dict)
            return target_class(**field_values)

        try:
            result = _dict_to_dataclass(data, cls)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e
        if not isinstance(result, cls):
            raise ConfigValidationError(f"Failed to deserialize to {cls.__name__}")
        return result

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration for the bundled scanner."""
        return cls()
