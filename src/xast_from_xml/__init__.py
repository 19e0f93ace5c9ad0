"""xast-from-xml.

Transforms serialized XML into an xast syntax tree in which every node carries
its position (line, column and offset) in the source document.

Progressive API disclosure:
- Level 1: Simple functions - from_xml() / transform(), parse_file()
- Level 2: Configured parser - XastParser class with ParserConfig
"""

__version__ = "0.1.0"

# Level 1: Simple functions
# Level 2: Configured parser
from .api import XastParser, from_xml, parse_file, transform

# Configuration classes for advanced usage
from .shared.config import (
    CharacterConfig,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    ScannerConfig,
    TreeConfig,
)

# Diagnostics raised on malformed input
from .shared.errors import (
    DoctypeGrammarError,
    LexError,
    UnexpectedSgmlError,
    XastMessage,
)

# Node types of the produced tree
from .tree.doctype import DoctypeSyntaxError, parse_doctype
from .tree.nodes import (
    CData,
    Comment,
    Doctype,
    Element,
    Instruction,
    Node,
    Point,
    Position,
    Root,
    Text,
    node_from_dict,
)

__all__ = [
    # Version
    "__version__",

    # Level 1: Simple functions
    "from_xml",
    "transform",
    "parse_file",

    # Level 2: Configured parser
    "XastParser",

    # Configuration classes
    "CharacterConfig",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "ScannerConfig",
    "TreeConfig",

    # Diagnostics
    "DoctypeGrammarError",
    "LexError",
    "UnexpectedSgmlError",
    "XastMessage",

    # Doctype parsing
    "DoctypeSyntaxError",
    "parse_doctype",

    # Nodes
    "CData",
    "Comment",
    "Doctype",
    "Element",
    "Instruction",
    "Node",
    "Point",
    "Position",
    "Root",
    "Text",
    "node_from_dict",
]
