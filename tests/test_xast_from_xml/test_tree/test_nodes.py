"""Tests for xast node types and their wire format."""

import json

import pytest

from xast_from_xml.tree.nodes import (
    CData,
    Comment,
    Doctype,
    Element,
    Instruction,
    Point,
    Position,
    Root,
    Text,
    node_from_dict,
)


def span(start, end):
    return Position(Point(1, start + 1, start), Point(1, end + 1, end))


class TestPoint:
    """Test Point validation."""

    def test_valid_point(self):
        """Test creating a point."""
        point = Point(1, 1, 0)

        assert (point.line, point.column, point.offset) == (1, 1, 0)

    def test_invalid_values(self):
        """Test that out-of-range values raise ValueError."""
        with pytest.raises(ValueError, match="Line number must be >= 1"):
            Point(0, 1, 0)

        with pytest.raises(ValueError, match="Column number must be >= 1"):
            Point(1, 0, 0)

        with pytest.raises(ValueError, match="Offset must be >= 0"):
            Point(1, 1, -1)

    def test_immutable(self):
        """Test that points cannot be changed once built."""
        point = Point(1, 1, 0)

        with pytest.raises(AttributeError):
            point.line = 2

    def test_dict_form(self):
        """Test to_dict and from_dict."""
        point = Point(2, 3, 10)

        assert point.to_dict() == {"line": 2, "column": 3, "offset": 10}
        assert Point.from_dict(point.to_dict()) == point


class TestPosition:
    """Test Position validation."""

    def test_valid_span(self):
        """Test a span over several lines."""
        position = Position(Point(1, 4, 3), Point(2, 2, 6))

        assert position.to_dict() == {
            "start": {"line": 1, "column": 4, "offset": 3},
            "end": {"line": 2, "column": 2, "offset": 6},
        }

    def test_empty_span(self):
        """Test that start may equal end."""
        point = Point(1, 1, 0)

        assert Position(point, point).end == point

    def test_end_offset_before_start(self):
        """Test that an end offset before the start is rejected."""
        with pytest.raises(ValueError, match="end offset must be >= start offset"):
            Position(Point(1, 5, 4), Point(1, 3, 2))

    def test_end_line_before_start(self):
        """Test that an end line before the start line is rejected."""
        with pytest.raises(ValueError, match="end must not precede start"):
            Position(Point(2, 1, 4), Point(1, 9, 8))


class TestWireFormat:
    """Test to_dict / to_json / node_from_dict."""

    def test_element_with_children(self):
        """Test the dictionary form of an element tree."""
        element = Element(
            name="a",
            attributes={"b": "c"},
            children=[Text("x", span(3, 4))],
            position=span(0, 8),
        )

        assert element.to_dict() == {
            "type": "element",
            "name": "a",
            "attributes": {"b": "c"},
            "children": [
                {
                    "type": "text",
                    "value": "x",
                    "position": {
                        "start": {"line": 1, "column": 4, "offset": 3},
                        "end": {"line": 1, "column": 5, "offset": 4},
                    },
                }
            ],
            "position": {
                "start": {"line": 1, "column": 1, "offset": 0},
                "end": {"line": 1, "column": 9, "offset": 8},
            },
        }

    def test_node_without_position(self):
        """Test that a node without position omits the key."""
        assert Comment("note").to_dict() == {"type": "comment", "value": "note"}

    def test_doctype_omits_missing_identifiers(self):
        """Test that absent public/system identifiers are left out."""
        assert Doctype(name="html").to_dict() == {"type": "doctype", "name": "html"}
        assert Doctype(name="x", system="x.dtd").to_dict() == {
            "type": "doctype",
            "name": "x",
            "system": "x.dtd",
        }

    def test_instruction(self):
        """Test the dictionary form of a processing instruction."""
        node = Instruction(value='href="a.xsl"', name="xml-stylesheet")

        assert node.to_dict() == {
            "type": "instruction",
            "name": "xml-stylesheet",
            "value": 'href="a.xsl"',
        }

    def test_to_json(self):
        """Test JSON output keeps non-ASCII text."""
        text = Root(children=[Text("caf\u00e9")]).to_json(indent=None)

        assert json.loads(text) == {
            "type": "root",
            "children": [{"type": "text", "value": "caf\u00e9"}],
        }
        assert "caf\u00e9" in text

    def test_rebuild_tree(self):
        """Test that node_from_dict rebuilds an equal tree."""
        tree = Root(
            children=[
                Doctype(name="a", public="-//A//EN", system="a.dtd", position=span(0, 10)),
                Element(
                    name="a",
                    attributes={"x": "1"},
                    children=[CData("<>", span(13, 25)), Comment("c", span(25, 33))],
                    position=span(10, 37),
                ),
            ],
            position=span(0, 37),
        )

        rebuilt = node_from_dict(tree.to_dict())

        assert isinstance(rebuilt, Root)
        assert isinstance(rebuilt.children[1], Element)
        assert isinstance(rebuilt.children[1].children[0], CData)
        assert rebuilt == tree

    def test_unknown_type(self):
        """Test that an unknown node type is rejected."""
        with pytest.raises(ValueError, match="Unknown node type: 'paragraph'"):
            node_from_dict({"type": "paragraph"})


class TestTraversal:
    """Test Parent.walk."""

    def test_walk_document_order(self):
        """Test that walk yields descendants depth-first in order."""
        inner = Element(name="b", children=[Text("2")])
        tree = Root(children=[Element(name="a", children=[Text("1"), inner]), Comment("3")])

        kinds = [
            getattr(node, "name", None) or getattr(node, "value", None)
            for node in tree.walk()
        ]

        assert kinds == ["a", "1", "b", "2", "3"]

    def test_equality_compares_content(self):
        """Test that nodes compare by their wire form."""
        assert Text("a") == Text("a")
        assert Text("a") != Text("b")
        assert Text("a") != Comment("a")
