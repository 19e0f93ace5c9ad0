"""Encoding detection and decoding of byte input.

Byte input is decoded with the first encoding found by, in order: an explicit
configured encoding, a byte order mark, the ``encoding`` pseudo-attribute of
the XML declaration, and the configured fallback.
"""

import codecs
import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional, Union

from xast_from_xml.shared.config import CharacterConfig

DECLARATION_SCAN_LIMIT = 1024

XMLInput = Union[str, bytes, bytearray, memoryview]


class DetectionMethod(Enum):
    """How the encoding of a byte input was chosen."""

    EXPLICIT = "explicit"
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Chosen encoding and the number of leading bytes to skip."""

    encoding: str
    method: DetectionMethod
    bom_length: int = 0

    def __post_init__(self) -> None:
        if self.bom_length < 0:
            raise ValueError("BOM length must be >= 0")


class BOMDetector:
    """Byte Order Mark (BOM) detection for all major encodings."""

    # UTF-32 first: the UTF-32 LE mark starts with the UTF-16 LE one
    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
    }

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if BOM detected, None otherwise
        """
        for bom_bytes, encoding in self.BOM_PATTERNS.items():
            if data.startswith(bom_bytes):
                return EncodingResult(encoding, DetectionMethod.BOM, len(bom_bytes))
        return None


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'^<\?xml\s[^>]*?encoding\s*=\s*["\']([A-Za-z][A-Za-z0-9._\-]*)["\']'
    )

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from a leading XML declaration.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if a declaration names a codec Python knows,
            None otherwise
        """
        match = self.XML_DECLARATION_PATTERN.match(data[:DECLARATION_SCAN_LIMIT])
        if not match:
            return None

        declared_encoding = match.group(1).decode("ascii").lower()
        try:
            codecs.lookup(declared_encoding)
        except LookupError:
            return None

        return EncodingResult(declared_encoding, DetectionMethod.XML_DECLARATION)


def detect_encoding(
    data: bytes, config: Optional[CharacterConfig] = None
) -> EncodingResult:
    """Choose the encoding of ``data``.

    Args:
        data: Raw document bytes
        config: Character configuration

    Returns:
        EncodingResult describing the chosen encoding
    """
    config = config or CharacterConfig()

    if config.encoding is not None:
        return EncodingResult(config.encoding, DetectionMethod.EXPLICIT)

    if config.detect_bom:
        result = BOMDetector().detect(data)
        if result is not None:
            return result

    if config.detect_declaration:
        result = XMLDeclarationParser().parse_declaration(data)
        if result is not None:
            return result

    return EncodingResult(config.fallback_encoding, DetectionMethod.FALLBACK)


def decode_input(value: XMLInput, config: Optional[CharacterConfig] = None) -> str:
    """Turn document input into text.

    Args:
        value: Document as text or bytes
        config: Character configuration

    Returns:
        Decoded document text; a detected BOM is not part of it

    Raises:
        TypeError: If ``value`` is neither text nor bytes-like
        UnicodeDecodeError: If the bytes cannot be decoded
    """
    if isinstance(value, str):
        return value
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(
            f"Expected str or bytes-like input, got {type(value).__name__}"
        )

    config = config or CharacterConfig()
    data = bytes(value)
    result = detect_encoding(data, config)
    return data[result.bom_length:].decode(result.encoding, config.errors)
