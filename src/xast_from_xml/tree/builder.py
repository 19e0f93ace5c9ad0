"""Tree builder turning scanner events into a positioned xast tree.

The builder keeps a stack of open nodes. Every node is entered with the
builder's current position as its start and exited with the token source's
cursor as its end. Atomic nodes (text, comment, doctype, instruction) are
entered and exited in one step; text and comment ends are then corrected
because of when the bundled scanner reports them.
"""

from typing import Callable, Dict, List, Optional, Tuple

from xast_from_xml.shared.errors import (
    DoctypeGrammarError,
    LexError,
    UnexpectedSgmlError,
    first_line,
)
from xast_from_xml.shared.logging import get_logger
from .doctype import DoctypeSyntaxError, parse_doctype
from .nodes import (
    CData,
    Comment,
    Element,
    Instruction,
    Node,
    Parent,
    Point,
    Position,
    Root,
    Text,
)
from .positions import PositionCorrector, SaxPositionCorrector, advance

DOCTYPE_OPENING = "<!DOCTYPE"

Cursor = Callable[[], Point]


class TreeBuilder:
    """Builds an xast tree from the callbacks of a token source.

    Implements the scanner's ``TokenHandler`` interface. Errors are raised
    straight out of the callbacks, so the first one aborts the whole parse.
    """

    def __init__(
        self,
        cursor: Cursor,
        corrector: Optional[PositionCorrector] = None,
        correlation_id: Optional[str] = None,
        include_root_position: bool = True
    ) -> None:
        """Initialize tree builder.

        Args:
            cursor: Zero-argument callable returning the token source's
                current point
            corrector: End-position correction for atomic nodes
            correlation_id: Optional correlation ID for request tracking
            include_root_position: Whether ``finish`` stamps the root span
        """
        self._cursor = cursor
        self.corrector = corrector or SaxPositionCorrector()
        self.correlation_id = correlation_id
        self.include_root_position = include_root_position
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

        self.root = Root()
        self._stack: List[Tuple[Node, Point]] = [(self.root, Point(1, 1, 0))]
        self._position = Point(1, 1, 0)
        self._nodes_created = 0

    @property
    def depth(self) -> int:
        """Number of open nodes, the root included."""
        return len(self._stack)

    @property
    def position(self) -> Point:
        """Start point of the next node."""
        return self._position

    def enter(self, node: Node) -> None:
        """Append ``node`` to the innermost open node and open it."""
        parent = self._stack[-1][0]
        if not isinstance(parent, Parent):
            raise RuntimeError(
                f"Cannot add {node.type} to open {parent.type} node"
            )
        parent.children.append(node)
        self._stack.append((node, self._position))
        self._position = self._cursor()
        self._nodes_created += 1

    def exit(self) -> Node:
        """Close the innermost open node and stamp its position."""
        if len(self._stack) < 2:
            raise RuntimeError("Cannot exit: no open node")
        node, start = self._stack.pop()
        self._position = self._cursor()
        node.position = Position(start, self._position)  # type: ignore[attr-defined]
        return node

    def _correct(self, node: Node, end: Point) -> None:
        start = node.position.start  # type: ignore[attr-defined]
        node.position = Position(start, end)  # type: ignore[attr-defined]
        self._position = end

    def on_text(self, value: str) -> None:
        node = Text(value)
        self.enter(node)
        self.exit()
        start = node.position.start  # type: ignore[union-attr]
        reported = node.position.end  # type: ignore[union-attr]
        self._correct(node, self.corrector.text_end(start, value, reported))
        # A decoded line break (`&#10;`, `&#13;`) can walk past the source line.
        end = self._position
        if (
            end.offset > reported.offset
            or (end.line, end.column) > (reported.line, reported.column)
        ):
            self._position = reported

    def on_comment(self, value: str) -> None:
        node = Comment(value)
        self.enter(node)
        self.exit()
        start = node.position.start  # type: ignore[union-attr]
        reported = node.position.end  # type: ignore[union-attr]
        self._correct(node, self.corrector.comment_end(start, reported))

    def on_cdata_open(self) -> None:
        self.enter(CData())

    def on_cdata_value(self, chunk: str) -> None:
        node = self._stack[-1][0]
        if not isinstance(node, CData):
            raise RuntimeError("Received CDATA content outside of a CDATA section")
        node.value += chunk

    def on_cdata_close(self) -> None:
        self.exit()

    def on_tag_open(self, name: str, attributes: Dict[str, str]) -> None:
        self.enter(Element(name=name, attributes=dict(attributes)))

    def on_tag_close(self, name: str) -> None:
        self.exit()

    def on_processing_instruction(self, name: str, body: str) -> None:
        self.enter(Instruction(value=body, name=name))
        self.exit()

    def on_doctype(self, raw: str) -> None:
        """Parse the doctype interior and add the resulting node.

        Raises:
            DoctypeGrammarError: Placed at the offending character of the
                declaration, or at its closing ``>`` when it ended too early
        """
        start = self._position
        try:
            node = parse_doctype(raw)
        except DoctypeSyntaxError as e:
            place = advance(start, DOCTYPE_OPENING + raw[:e.index])
            raise DoctypeGrammarError(e.reason, place, e.code, cause=e) from e

        self.enter(node)
        self.exit()

    def on_sgml_declaration(self, raw: str) -> None:
        raise UnexpectedSgmlError(self._cursor())

    def on_error(self, message: str) -> None:
        raise LexError(first_line(message), self._cursor())

    def finish(self) -> Root:
        """Return the finished root.

        Raises:
            RuntimeError: If a node other than the root is still open
        """
        if len(self._stack) != 1:
            open_types = [node.type for node, _ in self._stack[1:]]
            raise RuntimeError(f"Unclosed nodes at end of input: {open_types}")

        if self.include_root_position:
            self.root.position = Position(Point(1, 1, 0), self._cursor())

        self.logger.debug(
            "Tree building completed",
            extra={
                "nodes_created": self._nodes_created,
                "top_level_count": len(self.root.children),
            }
        )
        return self.root
