"""Tokenization layer for the XML to xast transform.

This module provides the streaming XML scanner and the handler interface it
reports events to.
"""

from .scanner import ScannerState, TokenHandler, XMLScanner

__all__ = [
    "ScannerState",
    "TokenHandler",
    "XMLScanner",
]
