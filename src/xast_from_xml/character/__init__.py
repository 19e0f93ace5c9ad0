"""Character handling for the XML to xast transform.

This module provides the XML character classes and the decoding of byte input.
"""

from .classes import (
    is_name,
    is_name_char,
    is_name_start_char,
    is_pubid_char,
    is_quote,
    is_space,
)
from .encoding import (
    BOMDetector,
    DetectionMethod,
    EncodingResult,
    XMLDeclarationParser,
    decode_input,
    detect_encoding,
)

__all__ = [
    "is_name",
    "is_name_char",
    "is_name_start_char",
    "is_pubid_char",
    "is_quote",
    "is_space",
    "BOMDetector",
    "DetectionMethod",
    "EncodingResult",
    "XMLDeclarationParser",
    "decode_input",
    "detect_encoding",
]
