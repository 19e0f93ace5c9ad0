"""Tests for the configuration system."""

import json
from dataclasses import FrozenInstanceError

import pytest

from xast_from_xml.shared.config import (
    CharacterConfig,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    ScannerConfig,
    TreeConfig,
)


class TestCharacterConfig:
    """Test suite for CharacterConfig."""

    def test_default_configuration(self):
        """Test default character configuration values."""
        config = CharacterConfig()

        assert config.encoding is None
        assert config.fallback_encoding == "utf-8"
        assert config.errors == "strict"
        assert config.detect_bom is True
        assert config.detect_declaration is True

    def test_unknown_encoding_rejected(self):
        """Test that an unknown codec name is rejected."""
        with pytest.raises(ValueError, match="encoding must be a known codec"):
            CharacterConfig(encoding="no-such-codec")

        with pytest.raises(ValueError, match="fallback_encoding must be a known codec"):
            CharacterConfig(fallback_encoding="no-such-codec")

    def test_unknown_error_handler_rejected(self):
        """Test that an unregistered error handler is rejected."""
        with pytest.raises(ValueError, match="errors must be a registered error handler"):
            CharacterConfig(errors="shrug")

    def test_known_values_accepted(self):
        """Test that known codecs and handlers are accepted."""
        config = CharacterConfig(encoding="latin-1", errors="replace")

        assert config.encoding == "latin-1"
        assert config.errors == "replace"


class TestScannerConfig:
    """Test suite for ScannerConfig."""

    def test_default_configuration(self):
        """Test default scanner configuration values."""
        config = ScannerConfig()

        assert config.max_buffer_length == 64 * 1024
        assert config.strict_entities is True

    def test_buffer_length_must_be_positive(self):
        """Test max_buffer_length validation."""
        with pytest.raises(ValueError, match="max_buffer_length must be > 0"):
            ScannerConfig(max_buffer_length=0)

        with pytest.raises(ValueError, match="max_buffer_length must be > 0"):
            ScannerConfig(max_buffer_length=-5)


class TestTreeConfig:
    """Test suite for TreeConfig."""

    def test_default_configuration(self):
        """Test default tree configuration values."""
        config = TreeConfig()

        assert config.correct_positions is True
        assert config.include_root_position is True

    def test_flags_must_be_bool(self):
        """Test that flags reject non-bool values."""
        with pytest.raises(ValueError, match="correct_positions must be a bool"):
            TreeConfig(correct_positions=1)

        with pytest.raises(ValueError, match="include_root_position must be a bool"):
            TreeConfig(include_root_position="yes")


class TestParserConfig:
    """Test suite for the aggregate ParserConfig."""

    def test_default_preset(self):
        """Test that the default preset equals a plain instance."""
        assert ParserConfig.default() == ParserConfig()

    def test_is_frozen(self):
        """Test that the configuration cannot be mutated."""
        config = ParserConfig()

        with pytest.raises(FrozenInstanceError):
            config.correlation_id = "changed"

    def test_components_are_frozen(self):
        """Test that a shared configuration cannot be changed through a component."""
        config = ParserConfig()

        with pytest.raises(FrozenInstanceError):
            config.scanner.max_buffer_length = 0

        assert config.scanner.max_buffer_length == 65536

    def test_component_type_checked(self):
        """Test that a component of the wrong type is rejected."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig(scanner={"max_buffer_length": 1})

        assert exc_info.value.field_name == "scanner"
        assert isinstance(exc_info.value, ConfigError)

    def test_override_nested_fields(self):
        """Test component__field overrides."""
        config = ParserConfig().override(
            scanner__max_buffer_length=1024,
            tree__correct_positions=False,
        )

        assert config.scanner.max_buffer_length == 1024
        assert config.tree.correct_positions is False
        assert config.tree.include_root_position is True

    def test_override_top_level_field(self):
        """Test overriding a field of the aggregate itself."""
        config = ParserConfig().override(correlation_id="req-1")

        assert config.correlation_id == "req-1"

    def test_override_leaves_original_untouched(self):
        """Test that override returns a new instance."""
        original = ParserConfig()
        original.override(scanner__strict_entities=False)

        assert original.scanner.strict_entities is True

    def test_override_unknown_component(self):
        """Test that an unknown component is reported with suggestions."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig().override(lexer__strict=True)

        assert exc_info.value.field_name == "lexer"
        assert exc_info.value.suggestions == ["character", "scanner", "tree"]

    def test_override_unknown_component_field(self):
        """Test that an unknown component field is reported with suggestions."""
        with pytest.raises(ConfigValidationError, match="Unknown ScannerConfig fields") as exc_info:
            ParserConfig().override(scanner__bogus=1)

        assert exc_info.value.suggestions == ["max_buffer_length", "strict_entities"]

    def test_override_unknown_top_level_field(self):
        """Test that an unknown aggregate field raises ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="Unknown ParserConfig fields"):
            ParserConfig().override(bogus=1)

    def test_override_invalid_value(self):
        """Test that invalid override values raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="max_buffer_length must be > 0"):
            ParserConfig().override(scanner__max_buffer_length=0)

    def test_to_dict(self):
        """Test conversion to a nested dictionary."""
        data = ParserConfig().to_dict()

        assert data["scanner"] == {"max_buffer_length": 65536, "strict_entities": True}
        assert data["tree"] == {"correct_positions": True, "include_root_position": True}
        assert data["character"]["fallback_encoding"] == "utf-8"
        assert data["correlation_id"] is None
        assert data["version"] == "1.0.0"

    def test_json_round_trip(self):
        """Test that to_json and from_json preserve the configuration."""
        config = ParserConfig().override(
            character__encoding="latin-1",
            tree__include_root_position=False,
            correlation_id="abc",
        )

        text = config.to_json()
        restored = ParserConfig.from_json(text)

        assert json.loads(text)["character"]["encoding"] == "latin-1"
        assert restored == config

    def test_from_dict_partial(self):
        """Test that missing fields fall back to defaults."""
        config = ParserConfig.from_dict({"scanner": {"strict_entities": False}})

        assert config.scanner.strict_entities is False
        assert config.scanner.max_buffer_length == 65536
        assert config.tree == TreeConfig()

    def test_from_dict_unknown_field(self):
        """Test that unknown fields are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown TreeConfig fields"):
            ParserConfig.from_dict({"tree": {"colour": "blue"}})

    def test_from_dict_invalid_value(self):
        """Test that invalid values are reported as ConfigValidationError."""
        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"scanner": {"max_buffer_length": -1}})
