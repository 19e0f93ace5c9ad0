"""Streaming XML scanner that drives a tree builder through callbacks.

This module implements a strict, sax-style XML scanner: characters are fed in
with ``write``, a state machine recognizes markup, and every lexical event is
reported to a handler object as soon as it is complete. The scanner keeps a
live cursor (``now``) that callers may query from inside any callback.

Event timing is part of the contract:

* pending text is flushed lazily, right before the next node event (or at
  ``close``), so the cursor already sits past the following token;
* a comment is reported right after the second ``-`` of ``-->``;
* every other node is reported after its final ``>``.
"""

import html.entities
import logging
from enum import Enum, auto
from typing import Dict, List, Optional, Protocol

from xast_from_xml.character.classes import (
    is_name_char,
    is_name_start_char,
    is_quote,
    is_space,
)
from xast_from_xml.shared.config import ScannerConfig
from xast_from_xml.tree.nodes import Point

logger = logging.getLogger(__name__)

BYTE_ORDER_MARK = "\ufeff"
CDATA_KEYWORD = "[CDATA["
DOCTYPE_KEYWORD = "DOCTYPE"
COMMENT_KEYWORD = "--"

XML_ENTITIES: Dict[str, str] = {
    "amp": "&",
    "gt": ">",
    "lt": "<",
    "quot": '"',
    "apos": "'",
}

MAX_CODE_POINT = 0x10FFFF
SURROGATE_RANGE_START = 0xD800
SURROGATE_RANGE_END = 0xDFFF


class TokenHandler(Protocol):
    """Receiver of scanner events."""

    def on_doctype(self, raw: str) -> None: ...

    def on_sgml_declaration(self, raw: str) -> None: ...

    def on_processing_instruction(self, name: str, body: str) -> None: ...

    def on_text(self, value: str) -> None: ...

    def on_comment(self, value: str) -> None: ...

    def on_cdata_open(self) -> None: ...

    def on_cdata_value(self, chunk: str) -> None: ...

    def on_cdata_close(self) -> None: ...

    def on_tag_open(self, name: str, attributes: Dict[str, str]) -> None: ...

    def on_tag_close(self, name: str) -> None: ...

    def on_error(self, message: str) -> None: ...


class ScannerState(Enum):
    """State machine states for XML scanning."""

    BEGIN = auto()                  # Before anything, a BOM may follow
    TEXT = auto()                   # Character data
    TEXT_ENTITY = auto()            # After `&` in character data
    OPEN_WAKA = auto()              # After `<`
    SGML_DECL = auto()              # After `<!`
    SGML_DECL_QUOTED = auto()       # Quoted run inside `<!...>`
    DOCTYPE = auto()                # After `<!DOCTYPE`
    DOCTYPE_QUOTED = auto()         # Quoted run inside a doctype
    DOCTYPE_DTD = auto()            # Inside `[...]` of a doctype
    DOCTYPE_DTD_QUOTED = auto()     # Quoted run inside `[...]`
    COMMENT = auto()                # After `<!--`
    COMMENT_ENDING = auto()         # After `-` in a comment
    COMMENT_ENDED = auto()          # After `--` in a comment
    CDATA = auto()                  # After `<![CDATA[`
    CDATA_ENDING = auto()           # After `]` in CDATA
    CDATA_ENDING_2 = auto()         # After `]]` in CDATA
    PROC_INST = auto()              # After `<?`, reading the target
    PROC_INST_BODY = auto()         # Reading the instruction body
    PROC_INST_ENDING = auto()       # After `?` in an instruction
    OPEN_TAG = auto()               # Reading an element name
    OPEN_TAG_SLASH = auto()         # After `/` in an open tag
    ATTRIB = auto()                 # Between attributes
    ATTRIB_NAME = auto()            # Reading an attribute name
    ATTRIB_NAME_SAW_WHITE = auto()  # Whitespace after an attribute name
    ATTRIB_VALUE = auto()           # After `=`
    ATTRIB_VALUE_QUOTED = auto()    # Inside a quoted attribute value
    ATTRIB_VALUE_CLOSED = auto()    # After the closing quote
    ATTRIB_VALUE_ENTITY = auto()    # After `&` in an attribute value
    CLOSE_TAG = auto()              # After `</`
    CLOSE_TAG_SAW_WHITE = auto()    # Whitespace after a closing tag name


class XMLScanner:
    """Strict streaming XML scanner.

    Feeds characters through a state machine and reports complete lexical
    events to a ``TokenHandler``. Errors are reported through
    ``handler.on_error``; a handler that returns instead of raising lets the
    scanner continue with a best-effort interpretation.
    """

    def __init__(
        self,
        handler: TokenHandler,
        config: Optional[ScannerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the scanner.

        Args:
            handler: Receiver of scanner events
            config: Scanner configuration
            correlation_id: Optional correlation ID for tracking requests
        """
        self.handler = handler
        self.config = config or ScannerConfig()
        self.correlation_id = correlation_id
        self._entities = dict(XML_ENTITIES)
        if not self.config.strict_entities:
            self._entities.update(
                {name: chr(code) for name, code in html.entities.name2codepoint.items()}
            )
        self._reset_state()

    def _reset_state(self) -> None:
        """Reset scanner state for new processing."""
        self.state = ScannerState.BEGIN
        self.line = 1
        self.column = 0
        self.offset = 0
        self.char = ""
        self._previous = ""
        self.closed = False

        self.tags: List[str] = []
        self.saw_root = False
        self.closed_root = False
        self.saw_doctype = False

        self.text = ""
        self.entity = ""
        self.sgml_decl = ""
        self.doctype = ""
        self.comment = ""
        self.cdata = ""
        self.proc_inst_name = ""
        self.proc_inst_body = ""
        self.tag_name = ""
        self.attributes: Dict[str, str] = {}
        self.attrib_name = ""
        self.attrib_value = ""
        self.quote = ""

    def now(self) -> Point:
        """Return the point just after the last character consumed."""
        return Point(self.line, self.column + 1, self.offset)

    def write(self, data: str) -> "XMLScanner":
        """Feed a chunk of text to the scanner.

        Args:
            data: Next chunk of the document

        Returns:
            The scanner, so ``write(...).close()`` can be chained
        """
        if self.closed:
            self._fail("Cannot write after close")
            return self

        logger.debug(
            "Scanning chunk",
            extra={
                "component": "xml_scanner",
                "correlation_id": self.correlation_id,
                "chunk_length": len(data),
                "scanner_state": self.state.name,
            }
        )

        for char in data:
            if self.state == ScannerState.BEGIN:
                self.state = ScannerState.TEXT
                # A leading byte order mark is not part of the document
                if char == BYTE_ORDER_MARK:
                    continue
            self._update_position(char)
            self._process_character(char)

        return self

    def close(self) -> None:
        """Signal end of input and flush pending text."""
        if self.saw_root and not self.closed_root:
            self._fail("Unclosed root tag")
        if self.state not in (ScannerState.BEGIN, ScannerState.TEXT):
            self._fail("Unexpected end")
        self._flush_text()
        self.closed = True

        logger.debug(
            "Scanning completed",
            extra={
                "component": "xml_scanner",
                "correlation_id": self.correlation_id,
                "characters": self.offset,
                "lines": self.line,
            }
        )

    def _update_position(self, char: str) -> None:
        """Advance the cursor over ``char`` before it is handled."""
        self.char = char
        self.offset += 1
        if char == "\r" or (char == "\n" and self._previous != "\r"):
            self.line += 1
            self.column = 0
        elif char != "\n":
            self.column += 1
        self._previous = char

    def _process_character(self, char: str) -> None:
        """Process a single character through the state machine."""
        state = self.state

        if state == ScannerState.TEXT:
            self._process_text(char)
        elif state == ScannerState.TEXT_ENTITY:
            self._process_entity(char, ScannerState.TEXT)
        elif state == ScannerState.OPEN_WAKA:
            self._process_open_waka(char)
        elif state == ScannerState.SGML_DECL:
            self._process_sgml_decl(char)
        elif state == ScannerState.SGML_DECL_QUOTED:
            if char == self.quote:
                self.state = ScannerState.SGML_DECL
                self.quote = ""
            self.sgml_decl += char
        elif state == ScannerState.DOCTYPE:
            self._process_doctype(char)
        elif state == ScannerState.DOCTYPE_QUOTED:
            self.doctype += char
            if char == self.quote:
                self.quote = ""
                self.state = ScannerState.DOCTYPE
        elif state == ScannerState.DOCTYPE_DTD:
            self.doctype += char
            if char == "]":
                self.state = ScannerState.DOCTYPE
            elif is_quote(char):
                self.state = ScannerState.DOCTYPE_DTD_QUOTED
                self.quote = char
        elif state == ScannerState.DOCTYPE_DTD_QUOTED:
            self.doctype += char
            if char == self.quote:
                self.state = ScannerState.DOCTYPE_DTD
                self.quote = ""
        elif state == ScannerState.COMMENT:
            if char == "-":
                self.state = ScannerState.COMMENT_ENDING
            else:
                self.comment += char
        elif state == ScannerState.COMMENT_ENDING:
            self._process_comment_ending(char)
        elif state == ScannerState.COMMENT_ENDED:
            if char == ">":
                self.state = ScannerState.TEXT
            else:
                self._fail("Malformed comment")
                self.comment += "--" + char
                self.state = ScannerState.COMMENT
        elif state == ScannerState.CDATA:
            self._process_cdata(char)
        elif state == ScannerState.CDATA_ENDING:
            if char == "]":
                self.state = ScannerState.CDATA_ENDING_2
            else:
                self.cdata += "]" + char
                self.state = ScannerState.CDATA
        elif state == ScannerState.CDATA_ENDING_2:
            self._process_cdata_ending(char)
        elif state == ScannerState.PROC_INST:
            self._process_proc_inst(char)
        elif state == ScannerState.PROC_INST_BODY:
            if not self.proc_inst_body and is_space(char):
                pass
            elif char == "?":
                self.state = ScannerState.PROC_INST_ENDING
            else:
                self.proc_inst_body += char
        elif state == ScannerState.PROC_INST_ENDING:
            if char == ">":
                self._emit(
                    "on_processing_instruction",
                    self.proc_inst_name,
                    self.proc_inst_body,
                )
                self.proc_inst_name = ""
                self.proc_inst_body = ""
                self.state = ScannerState.TEXT
            else:
                self.proc_inst_body += "?" + char
                self.state = ScannerState.PROC_INST_BODY
        elif state == ScannerState.OPEN_TAG:
            self._process_open_tag(char)
        elif state == ScannerState.OPEN_TAG_SLASH:
            if char == ">":
                self._open_tag(self_closing=True)
            else:
                self._fail("Forward-slash in opening tag not followed by >")
                self.state = ScannerState.ATTRIB
        elif state == ScannerState.ATTRIB:
            self._process_attrib(char)
        elif state == ScannerState.ATTRIB_NAME:
            self._process_attrib_name(char)
        elif state == ScannerState.ATTRIB_NAME_SAW_WHITE:
            self._process_attrib_name_saw_white(char)
        elif state == ScannerState.ATTRIB_VALUE:
            self._process_attrib_value(char)
        elif state == ScannerState.ATTRIB_VALUE_QUOTED:
            if char == self.quote:
                self._add_attribute()
                self.quote = ""
                self.state = ScannerState.ATTRIB_VALUE_CLOSED
            elif char == "&":
                self.state = ScannerState.ATTRIB_VALUE_ENTITY
            else:
                self.attrib_value += char
        elif state == ScannerState.ATTRIB_VALUE_CLOSED:
            self._process_attrib_value_closed(char)
        elif state == ScannerState.ATTRIB_VALUE_ENTITY:
            self._process_entity(char, ScannerState.ATTRIB_VALUE_QUOTED)
        elif state == ScannerState.CLOSE_TAG:
            self._process_close_tag(char)
        elif state == ScannerState.CLOSE_TAG_SAW_WHITE:
            if is_space(char):
                pass
            elif char == ">":
                self._close_tag()
            else:
                self._fail("Invalid characters in closing tag")
        else:
            raise RuntimeError(f"Unknown scanner state: {state}")

    def _process_text(self, char: str) -> None:
        """Process character in text content state."""
        if char == "<":
            self.state = ScannerState.OPEN_WAKA
        elif char == "&":
            self.state = ScannerState.TEXT_ENTITY
        else:
            if not is_space(char):
                if not self.saw_root:
                    self._fail("Non-whitespace before first tag.")
                elif self.closed_root:
                    self._fail("Text data outside of root node.")
            self.text += char

    def _process_entity(self, char: str, return_state: ScannerState) -> None:
        """Process character after `&` in text or an attribute value."""
        if char == ";":
            value = self._parse_entity()
            if return_state == ScannerState.TEXT:
                self.text += value
            else:
                self.attrib_value += value
            self.entity = ""
            self.state = return_state
        elif (
            is_name_char(char) if self.entity else (char == "#" or is_name_start_char(char))
        ):
            self.entity += char
        else:
            self._fail("Invalid character in entity name")
            literal = "&" + self.entity + char
            if return_state == ScannerState.TEXT:
                self.text += literal
            else:
                self.attrib_value += literal
            self.entity = ""
            self.state = return_state

    def _parse_entity(self) -> str:
        """Resolve the entity collected so far."""
        entity = self.entity
        if entity in self._entities:
            return self._entities[entity]

        code_point: Optional[int] = None
        if entity.startswith("#x") and len(entity) > 2:
            digits = entity[2:]
            if all(c in "0123456789abcdefABCDEF" for c in digits):
                code_point = int(digits, 16)
        elif entity.startswith("#") and len(entity) > 1:
            digits = entity[1:]
            if digits.isdigit() and digits.isascii():
                code_point = int(digits, 10)

        if (
            code_point is None
            or code_point == 0
            or code_point > MAX_CODE_POINT
            or SURROGATE_RANGE_START <= code_point <= SURROGATE_RANGE_END
        ):
            self._fail("Invalid character entity")
            return "&" + entity + ";"

        return chr(code_point)

    def _process_open_waka(self, char: str) -> None:
        """Process character after `<`."""
        if char == "!":
            self.state = ScannerState.SGML_DECL
            self.sgml_decl = ""
        elif is_name_start_char(char):
            self.state = ScannerState.OPEN_TAG
            self.tag_name = char
        elif char == "/":
            self.state = ScannerState.CLOSE_TAG
            self.tag_name = ""
        elif char == "?":
            self.state = ScannerState.PROC_INST
            self.proc_inst_name = ""
            self.proc_inst_body = ""
        else:
            self._fail("Unencoded <")
            self.text += "<" + char
            self.state = ScannerState.TEXT

    def _process_sgml_decl(self, char: str) -> None:
        """Process character inside `<!...`."""
        candidate = self.sgml_decl + char

        if candidate.upper() == CDATA_KEYWORD:
            self._emit("on_cdata_open")
            self.state = ScannerState.CDATA
            self.sgml_decl = ""
            self.cdata = ""
        elif candidate == COMMENT_KEYWORD:
            self.state = ScannerState.COMMENT
            self.comment = ""
            self.sgml_decl = ""
        elif candidate.upper() == DOCTYPE_KEYWORD:
            self.state = ScannerState.DOCTYPE
            if self.saw_doctype or self.saw_root:
                self._fail("Inappropriately located doctype declaration")
            self.doctype = ""
            self.sgml_decl = ""
        elif char == ">":
            self._emit("on_sgml_declaration", self.sgml_decl)
            self.sgml_decl = ""
            self.state = ScannerState.TEXT
        elif is_quote(char):
            self.state = ScannerState.SGML_DECL_QUOTED
            self.quote = char
            self.sgml_decl += char
        else:
            self.sgml_decl += char

    def _process_doctype(self, char: str) -> None:
        """Process character inside a doctype declaration."""
        if char == ">":
            self.state = ScannerState.TEXT
            self.saw_doctype = True
            self._emit("on_doctype", self.doctype)
            self.doctype = ""
        else:
            self.doctype += char
            if char == "[":
                self.state = ScannerState.DOCTYPE_DTD
            elif is_quote(char):
                self.state = ScannerState.DOCTYPE_QUOTED
                self.quote = char

    def _process_comment_ending(self, char: str) -> None:
        """Process character after a `-` inside a comment."""
        if char == "-":
            self.state = ScannerState.COMMENT_ENDED
            self._emit("on_comment", self.comment)
            self.comment = ""
        else:
            self.comment += "-" + char
            self.state = ScannerState.COMMENT

    def _process_cdata(self, char: str) -> None:
        """Process character inside a CDATA section."""
        if char == "]":
            self.state = ScannerState.CDATA_ENDING
            return

        self.cdata += char
        if len(self.cdata) >= self.config.max_buffer_length:
            self._emit("on_cdata_value", self.cdata)
            self.cdata = ""

    def _process_cdata_ending(self, char: str) -> None:
        """Process character after `]]` inside a CDATA section."""
        if char == ">":
            if self.cdata:
                self._emit("on_cdata_value", self.cdata)
            self._emit("on_cdata_close")
            self.cdata = ""
            self.state = ScannerState.TEXT
        elif char == "]":
            self.cdata += "]"
        else:
            self.cdata += "]]" + char
            self.state = ScannerState.CDATA

    def _process_proc_inst(self, char: str) -> None:
        """Process character of a processing instruction target."""
        if char == "?":
            self.state = ScannerState.PROC_INST_ENDING
        elif is_space(char):
            self.state = ScannerState.PROC_INST_BODY
        else:
            self.proc_inst_name += char

    def _process_open_tag(self, char: str) -> None:
        """Process character of an element name."""
        if is_name_char(char):
            self.tag_name += char
            return

        self.attributes = {}
        if char == ">":
            self._open_tag()
        elif char == "/":
            self.state = ScannerState.OPEN_TAG_SLASH
        else:
            if not is_space(char):
                self._fail("Invalid character in tag name")
            self.state = ScannerState.ATTRIB

    def _process_attrib(self, char: str) -> None:
        """Process character between attributes."""
        if is_space(char):
            return
        if char == ">":
            self._open_tag()
        elif char == "/":
            self.state = ScannerState.OPEN_TAG_SLASH
        elif is_name_start_char(char):
            self.attrib_name = char
            self.attrib_value = ""
            self.state = ScannerState.ATTRIB_NAME
        else:
            self._fail("Invalid attribute name")

    def _process_attrib_name(self, char: str) -> None:
        """Process character of an attribute name."""
        if char == "=":
            self.state = ScannerState.ATTRIB_VALUE
        elif char == ">":
            self._fail("Attribute without value")
            self.attrib_value = self.attrib_name
            self._add_attribute()
            self._open_tag()
        elif is_space(char):
            self.state = ScannerState.ATTRIB_NAME_SAW_WHITE
        elif is_name_char(char):
            self.attrib_name += char
        else:
            self._fail("Invalid attribute name")

    def _process_attrib_name_saw_white(self, char: str) -> None:
        """Process character after whitespace that follows an attribute name."""
        if char == "=":
            self.state = ScannerState.ATTRIB_VALUE
        elif is_space(char):
            return
        else:
            self._fail("Attribute without value")
            self.attrib_value = self.attrib_name
            self._add_attribute()
            if char == ">":
                self._open_tag()
            elif is_name_start_char(char):
                self.attrib_name = char
                self.state = ScannerState.ATTRIB_NAME
            else:
                self._fail("Invalid attribute name")
                self.state = ScannerState.ATTRIB

    def _process_attrib_value(self, char: str) -> None:
        """Process character after `=`."""
        if is_space(char):
            return
        if is_quote(char):
            self.quote = char
            self.state = ScannerState.ATTRIB_VALUE_QUOTED
        else:
            self._fail("Unquoted attribute value")
            self.quote = " "
            self.attrib_value = char
            self.state = ScannerState.ATTRIB_VALUE_QUOTED

    def _process_attrib_value_closed(self, char: str) -> None:
        """Process character after the closing quote of an attribute value."""
        if is_space(char):
            self.state = ScannerState.ATTRIB
        elif char == ">":
            self._open_tag()
        elif char == "/":
            self.state = ScannerState.OPEN_TAG_SLASH
        elif is_name_start_char(char):
            self._fail("No whitespace between attributes")
            self.attrib_name = char
            self.attrib_value = ""
            self.state = ScannerState.ATTRIB_NAME
        else:
            self._fail("Invalid attribute name")

    def _process_close_tag(self, char: str) -> None:
        """Process character of a closing tag name."""
        if not self.tag_name:
            if is_space(char):
                return
            if char == ">":
                self._close_tag()
            elif not is_name_start_char(char):
                self._fail("Invalid tagname in closing tag.")
            else:
                self.tag_name = char
        elif char == ">":
            self._close_tag()
        elif is_name_char(char):
            self.tag_name += char
        else:
            if not is_space(char):
                self._fail("Invalid tagname in closing tag")
            self.state = ScannerState.CLOSE_TAG_SAW_WHITE

    def _add_attribute(self) -> None:
        """Store the attribute collected so far on the open tag."""
        if self.attrib_name in self.attributes:
            self._fail(f"Duplicate attribute: {self.attrib_name}")
        else:
            self.attributes[self.attrib_name] = self.attrib_value
        self.attrib_name = ""
        self.attrib_value = ""

    def _open_tag(self, self_closing: bool = False) -> None:
        """Report a complete open tag (and its close when self-closing)."""
        self.saw_root = True
        self.tags.append(self.tag_name)
        self._emit("on_tag_open", self.tag_name, self.attributes)
        self.attributes = {}
        self.state = ScannerState.TEXT
        if self_closing:
            self._close_tag()
        else:
            self.tag_name = ""

    def _close_tag(self) -> None:
        """Report closing of the element named by the collected tag name."""
        name = self.tag_name
        self.tag_name = ""
        self.state = ScannerState.TEXT

        if not name:
            self._fail("Weird empty close tag.")
            self.text += "</>"
            return

        if name not in self.tags:
            self._fail(f"Unmatched closing tag: {name}")
            self.text += "</" + name + ">"
            return

        if self.tags[-1] != name:
            self._fail("Unexpected close tag")

        while self.tags:
            closing = self.tags.pop()
            self._emit("on_tag_close", closing)
            if closing == name:
                break

        if not self.tags:
            self.closed_root = True

    def _flush_text(self) -> None:
        """Report buffered character data, if any."""
        if self.text:
            text = self.text
            self.text = ""
            self.handler.on_text(text)

    def _emit(self, event: str, *args: object) -> None:
        """Report a node event, flushing pending text first."""
        self._flush_text()
        getattr(self.handler, event)(*args)

    def _fail(self, message: str) -> None:
        """Report an error with line, column and character detail."""
        self.handler.on_error(
            f"{message}\nLine: {self.line - 1}\nColumn: {self.column}\nChar: {self.char}"
        )
