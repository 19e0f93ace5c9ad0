"""Character classes of the XML 1.0 grammar.

Pure predicates over a single character. ``None`` stands for end of input and
belongs to no class.
"""

import re
from typing import Optional

# See: <https://www.w3.org/TR/xml/#NT-NameStartChar>
_NAME_START_CHAR = re.compile(
    r"[:A-Z_a-z\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D\u037F-\u1FFF"
    r"\u200C\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF\uF900-\uFDCF"
    r"\uFDF0-\uFFFD\U00010000-\U000EFFFF]"
)

# See: <https://www.w3.org/TR/xml/#NT-NameChar>
_NAME_CHAR_EXTRA = re.compile(r"[\-.0-9\u00B7\u0300-\u036F\u203F-\u2040]")

# See: <https://www.w3.org/TR/xml/#NT-PubidChar>
_PUBID_CHAR = re.compile(r"[\n\r a-zA-Z0-9\-'()+,./:=?;!*#@$_%]")

SPACE_CHARS = frozenset("\t\n\r ")
QUOTE_CHARS = frozenset("\"'")


def is_space(char: Optional[str]) -> bool:
    """Check for XML whitespace (``S``)."""
    return char is not None and char in SPACE_CHARS


def is_quote(char: Optional[str]) -> bool:
    """Check for a literal delimiter."""
    return char is not None and char in QUOTE_CHARS


def is_name_start_char(char: Optional[str]) -> bool:
    """Check if character can start an XML name."""
    return char is not None and _NAME_START_CHAR.fullmatch(char) is not None


def is_name_char(char: Optional[str]) -> bool:
    """Check if character can be part of an XML name."""
    return char is not None and (
        _NAME_START_CHAR.fullmatch(char) is not None
        or _NAME_CHAR_EXTRA.fullmatch(char) is not None
    )


def is_pubid_char(char: Optional[str]) -> bool:
    """Check if character may appear in a public identifier literal."""
    return char is not None and _PUBID_CHAR.fullmatch(char) is not None


def is_name(value: str) -> bool:
    """Check if a whole string matches the XML ``Name`` production."""
    return (
        bool(value)
        and is_name_start_char(value[0])
        and all(is_name_char(char) for char in value[1:])
    )
