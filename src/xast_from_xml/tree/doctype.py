"""Document type declaration parsing.

Parses the raw interior of ``<!DOCTYPE ...>`` (everything after the keyword and
before the final ``>``) into a ``Doctype`` node, following the XML
``doctypedecl`` production without internal subsets:

    doctypedecl ::= '<!DOCTYPE' S Name (S ExternalID)? S? '>'
    ExternalID  ::= 'SYSTEM' S SystemLiteral
                  | 'PUBLIC' S PubidLiteral S SystemLiteral

The parser is a single left-to-right scan over the input plus one end-of-input
step, driven by a table of per-state handlers.
"""

from enum import Enum, auto
from typing import Callable, Dict, NoReturn, Optional

from xast_from_xml.character.classes import (
    is_name_char,
    is_name_start_char,
    is_pubid_char,
    is_quote,
    is_space,
)
from .nodes import Doctype

CODE_NAME = "doctype-name"
CODE_INTERNAL_SUBSET = "doctype-internal-subset"
CODE_EXTERNAL_IDENTIFIER = "doctype-external-identifier"
CODE_PUBLIC_LITERAL = "doctype-public-literal"
CODE_SYSTEM_LITERAL = "doctype-system-literal"
CODE_TRAILING_INTERNAL_SUBSET = "internal-subset"
CODE_TRAILING_SYSTEM_LITERAL = "system-literal"

INTERNAL_SUBSET_OPEN = "["


class DoctypeState(Enum):
    """States of the doctype scanner."""

    BEGIN = auto()
    BEFORE_NAME = auto()
    IN_NAME = auto()
    AFTER_NAME = auto()
    IN_EID = auto()                  # Matching `PUBLIC` or `SYSTEM`
    AFTER_PUBLIC = auto()
    AFTER_SYSTEM = auto()
    BEFORE_PUBLIC_LITERAL = auto()
    IN_PUBLIC_LITERAL = auto()
    AFTER_PUBLIC_LITERAL = auto()
    BEFORE_SYSTEM_LITERAL = auto()
    IN_SYSTEM_LITERAL = auto()
    AFTER_SYSTEM_LITERAL = auto()


class DoctypeSyntaxError(ValueError):
    """Raised when a doctype interior violates the grammar.

    Attributes:
        reason: Human-readable reason
        code: Identifier of the violated rule
        index: Offset in the raw doctype string where the violation was found;
            ``len(raw)`` when the input ended too early
    """

    def __init__(self, reason: str, code: str, index: int) -> None:
        super().__init__(reason)
        self.reason = reason
        self.code = code
        self.index = index


class _DoctypeScan:
    """Mutable state for one doctype scan."""

    def __init__(self, value: str) -> None:
        self.value = value
        self.index = 0
        self.state = DoctypeState.BEGIN
        self.node = Doctype()
        self.start = 0
        self.marker: Optional[str] = None
        self.keyword = ""
        self.keyword_index = 0
        self.return_state = DoctypeState.AFTER_NAME

    def fail(self, reason: str, code: str) -> NoReturn:
        raise DoctypeSyntaxError(reason, code, self.index)

    def begin_literal(self, state: DoctypeState, char: str) -> DoctypeState:
        self.start = self.index + 1
        self.marker = char
        return state

    def begin_keyword(self, keyword: str, return_state: DoctypeState) -> DoctypeState:
        self.keyword = keyword
        self.keyword_index = 0
        self.return_state = return_state
        return DoctypeState.IN_EID

    def take(self) -> str:
        return self.value[self.start:self.index]


Handler = Callable[[_DoctypeScan, Optional[str]], DoctypeState]


def _begin(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if is_space(char):
        return DoctypeState.BEFORE_NAME
    return scan.fail("Expected doctype name", CODE_NAME)


def _before_name(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if is_space(char):
        return DoctypeState.BEFORE_NAME
    if is_name_start_char(char):
        scan.start = scan.index
        return DoctypeState.IN_NAME
    return scan.fail("Expected start of doctype name", CODE_NAME)


def _in_name(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if is_name_char(char):
        return DoctypeState.IN_NAME
    if char is None or is_space(char):
        scan.node.name = scan.take()
        return DoctypeState.AFTER_NAME
    if char == INTERNAL_SUBSET_OPEN:
        return scan.fail("Unexpected internal subset", CODE_INTERNAL_SUBSET)
    return scan.fail(
        "Expected doctype name character, whitespace, or doctype end", CODE_NAME
    )


def _after_name(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if char is None or is_space(char):
        return DoctypeState.AFTER_NAME
    if char == "P":
        return scan.begin_keyword("PUBLIC", DoctypeState.AFTER_PUBLIC)
    if char == "S":
        return scan.begin_keyword("SYSTEM", DoctypeState.AFTER_SYSTEM)
    if char == INTERNAL_SUBSET_OPEN:
        return scan.fail("Unexpected internal subset", CODE_INTERNAL_SUBSET)
    return scan.fail(
        "Expected external identifier (`PUBLIC` or `SYSTEM`), whitespace, "
        "or doctype end",
        CODE_EXTERNAL_IDENTIFIER,
    )


def _in_eid(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    scan.keyword_index += 1
    if char != scan.keyword[scan.keyword_index]:
        return scan.fail(
            "Expected external identifier (`PUBLIC` or `SYSTEM`)",
            CODE_EXTERNAL_IDENTIFIER,
        )
    if scan.keyword_index == len(scan.keyword) - 1:
        return scan.return_state
    return DoctypeState.IN_EID


def _after_public(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if is_space(char):
        return DoctypeState.BEFORE_PUBLIC_LITERAL
    return scan.fail("Expected whitespace after `PUBLIC`", CODE_PUBLIC_LITERAL)


def _after_system(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if is_space(char):
        return DoctypeState.BEFORE_SYSTEM_LITERAL
    return scan.fail("Expected whitespace after `SYSTEM`", CODE_SYSTEM_LITERAL)


def _before_public_literal(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if is_space(char):
        return DoctypeState.BEFORE_PUBLIC_LITERAL
    if is_quote(char):
        return scan.begin_literal(DoctypeState.IN_PUBLIC_LITERAL, char)  # type: ignore[arg-type]
    return scan.fail(
        "Expected quote or apostrophe to start public literal", CODE_PUBLIC_LITERAL
    )


def _in_public_literal(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if char is not None and char == scan.marker:
        scan.node.public = scan.take()
        return DoctypeState.AFTER_PUBLIC_LITERAL
    if is_pubid_char(char):
        return DoctypeState.IN_PUBLIC_LITERAL
    return scan.fail(
        "Expected pubid character in public literal", CODE_PUBLIC_LITERAL
    )


def _after_public_literal(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if is_space(char):
        return DoctypeState.BEFORE_SYSTEM_LITERAL
    return scan.fail("Expected whitespace after public literal", CODE_SYSTEM_LITERAL)


def _before_system_literal(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if is_space(char):
        return DoctypeState.BEFORE_SYSTEM_LITERAL
    if is_quote(char):
        return scan.begin_literal(DoctypeState.IN_SYSTEM_LITERAL, char)  # type: ignore[arg-type]
    return scan.fail(
        "Expected quote or apostrophe to start system literal", CODE_SYSTEM_LITERAL
    )


def _in_system_literal(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if char is None:
        return scan.fail(
            "Expected quote or apostrophe to end system literal", CODE_SYSTEM_LITERAL
        )
    if char == scan.marker:
        scan.node.system = scan.take()
        return DoctypeState.AFTER_SYSTEM_LITERAL
    return DoctypeState.IN_SYSTEM_LITERAL


def _after_system_literal(scan: _DoctypeScan, char: Optional[str]) -> DoctypeState:
    if char is None or is_space(char):
        return DoctypeState.AFTER_SYSTEM_LITERAL
    if char == INTERNAL_SUBSET_OPEN:
        return scan.fail("Unexpected internal subset", CODE_TRAILING_INTERNAL_SUBSET)
    return scan.fail(
        "Expected whitespace or end of doctype", CODE_TRAILING_SYSTEM_LITERAL
    )


_HANDLERS: Dict[DoctypeState, Handler] = {
    DoctypeState.BEGIN: _begin,
    DoctypeState.BEFORE_NAME: _before_name,
    DoctypeState.IN_NAME: _in_name,
    DoctypeState.AFTER_NAME: _after_name,
    DoctypeState.IN_EID: _in_eid,
    DoctypeState.AFTER_PUBLIC: _after_public,
    DoctypeState.AFTER_SYSTEM: _after_system,
    DoctypeState.BEFORE_PUBLIC_LITERAL: _before_public_literal,
    DoctypeState.IN_PUBLIC_LITERAL: _in_public_literal,
    DoctypeState.AFTER_PUBLIC_LITERAL: _after_public_literal,
    DoctypeState.BEFORE_SYSTEM_LITERAL: _before_system_literal,
    DoctypeState.IN_SYSTEM_LITERAL: _in_system_literal,
    DoctypeState.AFTER_SYSTEM_LITERAL: _after_system_literal,
}


def parse_doctype(value: str) -> Doctype:
    """Parse the raw interior of a doctype declaration.

    Args:
        value: Text between ``<!DOCTYPE`` and the final ``>``, for example
            ``' html PUBLIC "-//W3C//DTD XHTML 1.0//EN" "xhtml1.dtd"'``

    Returns:
        Doctype node without position

    Raises:
        DoctypeSyntaxError: On the first grammar violation
    """
    scan = _DoctypeScan(value)
    length = len(value)

    for index in range(length + 1):
        scan.index = index
        char = value[index] if index < length else None
        handler = _HANDLERS.get(scan.state)
        if handler is None:
            raise RuntimeError(f"Unhandled doctype state: {scan.state}")
        scan.state = handler(scan, char)

    return scan.node
