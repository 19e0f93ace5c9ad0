"""xast node types produced by the XML to xast transform.

Nodes mirror the xast wire format: every node has a ``type`` and, once the
tree builder has closed it, a ``position`` made of two points.
"""

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Type, Union


@dataclass(frozen=True)
class Point:
    """One place in the input: 1-based line and column, 0-based offset."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate point values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column, "offset": self.offset}

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "Point":
        return cls(data["line"], data["column"], data["offset"])


@dataclass(frozen=True)
class Position:
    """Span of a node, from the first character to just after the last one."""

    start: Point
    end: Point

    def __post_init__(self) -> None:
        """Validate that the span does not run backwards."""
        if self.end.offset < self.start.offset:
            raise ValueError("Position end offset must be >= start offset")
        if (self.end.line, self.end.column) < (self.start.line, self.start.column):
            raise ValueError("Position end must not precede start")

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, int]]) -> "Position":
        return cls(Point.from_dict(data["start"]), Point.from_dict(data["end"]))


@dataclass(eq=False)
class Node:
    """Base class for all xast nodes."""

    type: ClassVar[str] = ""

    def _fields(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to its xast wire representation."""
        result: Dict[str, Any] = {"type": self.type}
        result.update(self._fields())
        position = getattr(self, "position", None)
        if position is not None:
            result["position"] = position.to_dict()
        return result

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Convert node to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.to_dict() == other.to_dict()


@dataclass(eq=False)
class Parent(Node):
    """Node that can contain children."""

    children: List[Node] = field(default_factory=list)
    position: Optional[Position] = None

    def walk(self) -> Iterator[Node]:
        """Yield every descendant in document order."""
        for child in self.children:
            yield child
            if isinstance(child, Parent):
                yield from child.walk()

    def _fields(self) -> Dict[str, Any]:
        return {"children": [child.to_dict() for child in self.children]}


@dataclass(eq=False)
class Root(Parent):
    """Document root; holds the top-level nodes."""

    type: ClassVar[str] = "root"


@dataclass(eq=False)
class Element(Parent):
    """Element with a name, attributes and children."""

    type: ClassVar[str] = "element"

    name: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)

    def _fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "attributes": dict(self.attributes),
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(eq=False)
class Literal(Node):
    """Node carrying a string value."""

    value: str = ""
    position: Optional[Position] = None

    def _fields(self) -> Dict[str, Any]:
        return {"value": self.value}


@dataclass(eq=False)
class Text(Literal):
    type: ClassVar[str] = "text"


@dataclass(eq=False)
class Comment(Literal):
    type: ClassVar[str] = "comment"


@dataclass(eq=False)
class CData(Literal):
    type: ClassVar[str] = "cdata"


@dataclass(eq=False)
class Instruction(Literal):
    """Processing instruction such as ``<?xml-stylesheet href="a.xsl"?>``."""

    type: ClassVar[str] = "instruction"

    name: str = ""

    def _fields(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(eq=False)
class Doctype(Node):
    """Document type declaration; identifiers are ``None`` when absent."""

    type: ClassVar[str] = "doctype"

    name: str = ""
    public: Optional[str] = None
    system: Optional[str] = None
    position: Optional[Position] = None

    def _fields(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name}
        if self.public is not None:
            result["public"] = self.public
        if self.system is not None:
            result["system"] = self.system
        return result


AnyNode = Union[Root, Element, Text, Comment, CData, Instruction, Doctype]

NODE_TYPES: Dict[str, Type[Node]] = {
    node_class.type: node_class
    for node_class in (Root, Element, Text, Comment, CData, Instruction, Doctype)
}


def node_from_dict(data: Dict[str, Any]) -> Node:
    """Rebuild a node (and its children) from its wire representation.

    Args:
        data: Dictionary as produced by ``Node.to_dict``

    Returns:
        The node tree

    Raises:
        ValueError: If ``type`` is missing or unknown
    """
    node_type = data.get("type")
    node_class = NODE_TYPES.get(node_type)  # type: ignore[arg-type]
    if node_class is None:
        raise ValueError(f"Unknown node type: {node_type!r}")

    kwargs: Dict[str, Any] = {
        key: value
        for key, value in data.items()
        if key not in ("type", "position", "children")
    }
    if "children" in data:
        kwargs["children"] = [node_from_dict(child) for child in data["children"]]
    if "attributes" in kwargs:
        kwargs["attributes"] = dict(kwargs["attributes"])
    if data.get("position") is not None:
        kwargs["position"] = Position.from_dict(data["position"])

    return node_class(**kwargs)
