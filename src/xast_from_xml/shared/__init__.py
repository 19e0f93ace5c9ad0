"""Shared utilities for the XML to xast transform.

This module provides the configuration objects, positioned diagnostics and
logging helpers used across all processing layers.
"""

from .config import (
    CharacterConfig,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    ScannerConfig,
    TreeConfig,
)
from .errors import (
    DoctypeGrammarError,
    LexError,
    UnexpectedSgmlError,
    XastMessage,
    first_line,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "CharacterConfig",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "ScannerConfig",
    "TreeConfig",
    "DoctypeGrammarError",
    "LexError",
    "UnexpectedSgmlError",
    "XastMessage",
    "first_line",
    "CorrelationLogger",
    "get_logger",
]
