"""Tree layer for the XML to xast transform.

This module provides the xast node types, doctype parsing, position correction
and the tree builder.
"""

from .builder import TreeBuilder
from .doctype import DoctypeState, DoctypeSyntaxError, parse_doctype
from .nodes import (
    CData,
    Comment,
    Doctype,
    Element,
    Instruction,
    Literal,
    Node,
    Parent,
    Point,
    Position,
    Root,
    Text,
    node_from_dict,
)
from .positions import (
    ExactPositionCorrector,
    PositionCorrector,
    SaxPositionCorrector,
    advance,
)

__all__ = [
    "TreeBuilder",
    "DoctypeState",
    "DoctypeSyntaxError",
    "parse_doctype",
    "CData",
    "Comment",
    "Doctype",
    "Element",
    "Instruction",
    "Literal",
    "Node",
    "Parent",
    "Point",
    "Position",
    "Root",
    "Text",
    "node_from_dict",
    "ExactPositionCorrector",
    "PositionCorrector",
    "SaxPositionCorrector",
    "advance",
]
