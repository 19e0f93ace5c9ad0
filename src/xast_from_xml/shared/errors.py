"""Positioned diagnostics raised by the XML to xast transform.

Every failure surfaced to callers is a single ``XastMessage``: a reason, the
point in the input where the problem was detected, a short rule identifier and
a fixed source tag.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from xast_from_xml.tree.nodes import Point

SOURCE = "xast-from-xml"

RULE_LEXER = "sax"
RULE_UNEXPECTED_SGML = "unexpected-sgml"


class XastMessage(Exception):
    """Fatal, positioned message describing why a document could not be transformed."""

    fatal = True
    source = SOURCE

    def __init__(
        self,
        reason: str,
        place: "Point",
        rule_id: str,
        cause: Optional[BaseException] = None
    ) -> None:
        """Initialize the message.

        Args:
            reason: Human-readable, single-line reason
            place: Point at which the problem was detected
            rule_id: Short identifying code (``sax``, ``doctype-name``, ...)
            cause: Underlying exception, if any
        """
        super().__init__(f"{place.line}:{place.column}: {reason}")
        self.reason = reason
        self.place = place
        self.rule_id = rule_id
        self.cause = cause

    @property
    def line(self) -> int:
        return self.place.line

    @property
    def column(self) -> int:
        return self.place.column

    @property
    def offset(self) -> int:
        return self.place.offset

    @property
    def name(self) -> str:
        """Short ``line:column`` label."""
        return f"{self.line}:{self.column}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to dictionary representation."""
        return {
            "message": self.reason,
            "name": self.name,
            "reason": self.reason,
            "line": self.line,
            "column": self.column,
            "place": self.place.to_dict(),
            "source": self.source,
            "ruleId": self.rule_id,
            "fatal": self.fatal,
        }


class LexError(XastMessage):
    """Malformed XML reported by the token source."""

    def __init__(self, reason: str, place: "Point") -> None:
        super().__init__(reason, place, RULE_LEXER)


class UnexpectedSgmlError(XastMessage):
    """SGML declaration other than DOCTYPE."""

    def __init__(self, place: "Point") -> None:
        super().__init__("Unexpected SGML declaration", place, RULE_UNEXPECTED_SGML)


class DoctypeGrammarError(XastMessage):
    """Doctype declaration that violates the XML ``doctypedecl`` grammar."""


def first_line(message: str) -> str:
    """Strip any multi-line detail appended to a token source message."""
    index = message.find("\n")
    return message if index == -1 else message[:index]
