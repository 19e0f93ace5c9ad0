"""Public API for the XML to xast transform.

This module provides the module-level transform functions and the configured
``XastParser`` class.
"""

from .parser import XastParser, from_xml, parse_file, transform

__all__ = [
    "XastParser",
    "from_xml",
    "parse_file",
    "transform",
]
