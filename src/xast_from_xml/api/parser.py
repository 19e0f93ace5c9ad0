"""Core API for transforming XML into xast trees.

This module provides the module-level functions ``from_xml`` (also exported as
``transform``) and ``parse_file``, plus the ``XastParser`` class for reusing
one configuration across many documents.
"""

import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, TextIO, Union

from xast_from_xml.character import decode_input
from xast_from_xml.shared import ParserConfig, XastMessage, get_logger
from xast_from_xml.tokenization import XMLScanner
from xast_from_xml.tree import (
    ExactPositionCorrector,
    PositionCorrector,
    Root,
    SaxPositionCorrector,
    TreeBuilder,
)

# Type definitions for input data
InputType = Union[str, bytes, bytearray, memoryview]
SourceType = Union[InputType, Path, BinaryIO, TextIO]
PathType = Union[str, Path]

MS_PER_SECOND = 1000


def _corrector_for(config: ParserConfig) -> PositionCorrector:
    if config.tree.correct_positions:
        return SaxPositionCorrector()
    return ExactPositionCorrector()


def _transform(
    value: InputType,
    config: ParserConfig,
    correlation_id: Optional[str]
) -> Root:
    """Decode ``value`` and run it through a fresh scanner and builder."""
    text = decode_input(value, config.character)

    scanner: Optional[XMLScanner] = None
    builder = TreeBuilder(
        lambda: scanner.now(),  # type: ignore[union-attr]
        corrector=_corrector_for(config),
        correlation_id=correlation_id,
        include_root_position=config.tree.include_root_position,
    )
    scanner = XMLScanner(builder, config.scanner, correlation_id)
    scanner.write(text).close()
    return builder.finish()


def from_xml(value: InputType, config: Optional[ParserConfig] = None) -> Root:
    """Transform an XML document into an xast tree.

    Args:
        value: Document as text or bytes; bytes are decoded according to
            ``config.character``
        config: Parser configuration (defaults to ``ParserConfig.default()``)

    Returns:
        Root node of the positioned tree

    Raises:
        XastMessage: On the first lexical, SGML or doctype error
        UnicodeDecodeError: If byte input cannot be decoded

    Examples:
        >>> tree = from_xml('<root>hi</root>')
        >>> tree.children[0].name
        'root'
        >>> tree.children[0].children[0].value
        'hi'
    """
    config = config or ParserConfig.default()
    correlation_id = config.correlation_id
    logger = get_logger(__name__, correlation_id, "from_xml")
    start_time = time.time()

    logger.debug(
        "Starting transform",
        extra={"input_type": type(value).__name__}
    )

    try:
        root = _transform(value, config, correlation_id)
    except XastMessage as e:
        logger.warning(
            "Transform failed",
            extra={
                "rule_id": e.rule_id,
                "place": e.name,
                "reason": e.reason,
            }
        )
        raise

    logger.debug(
        "Transform completed",
        extra={
            "top_level_count": len(root.children),
            "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
        }
    )
    return root


transform = from_xml


def parse_file(path: PathType, config: Optional[ParserConfig] = None) -> Root:
    """Read a file as bytes and transform it into an xast tree.

    Args:
        path: Path of the XML document
        config: Parser configuration

    Returns:
        Root node of the positioned tree

    Raises:
        OSError: If the file cannot be read
        XastMessage: On the first lexical, SGML or doctype error
    """
    file_path = Path(path)
    logger = get_logger(
        __name__, config.correlation_id if config else None, "parse_file"
    )
    logger.debug("Reading XML file", extra={"file_path": str(file_path)})
    return from_xml(file_path.read_bytes(), config)


class XastParser:
    """Reusable transform with a fixed configuration.

    Attributes:
        config: Parser configuration applied to every document
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> parser = XastParser(ParserConfig().override(tree__include_root_position=False))
        >>> parser.parse('<a/>').position is None
        True
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults to ``ParserConfig.default()``)
            correlation_id: Correlation ID; overrides ``config.correlation_id``
        """
        config = config or ParserConfig.default()
        if correlation_id is not None:
            config = config.override(correlation_id=correlation_id)
        self.config = config
        self.correlation_id = config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xast_parser")

        self._parse_count = 0
        self._failed_parses = 0

    def parse(self, source: SourceType) -> Root:
        """Transform a document given as text, bytes, a path or a file object.

        Raises:
            XastMessage: On the first lexical, SGML or doctype error
        """
        if isinstance(source, Path):
            return self.parse_file(source)

        value: Any = source.read() if hasattr(source, "read") else source
        self._parse_count += 1
        try:
            return from_xml(value, self.config)
        except XastMessage:
            self._failed_parses += 1
            raise

    def parse_file(self, path: PathType) -> Root:
        """Read a file as bytes and transform it."""
        self._parse_count += 1
        try:
            return parse_file(path, self.config)
        except XastMessage:
            self._failed_parses += 1
            raise

    def reconfigure(self, **overrides: Any) -> None:
        """Apply ``ParserConfig.override`` keyword overrides to this parser."""
        self.config = self.config.override(**overrides)
        self.correlation_id = self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xast_parser")
        self.logger.debug("Parser reconfigured", extra={"overrides": sorted(overrides)})

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "failed_parses": self._failed_parses,
            "correlation_id": self.correlation_id,
        }
