"""End-position correction for token sources with known reporting quirks.

The bundled scanner reports two kinds of nodes at a point that is not their
true end:

* a comment is reported right after the second ``-`` of ``-->``, one
  character before the closing ``>``;
* a text run is reported lazily, once the following node has been scanned,
  so the cursor already sits past the next token.

A token source that reports exact ends needs neither fix and can use
``ExactPositionCorrector``.
"""

from .nodes import Point

LINE_FEED = "\n"
CARRIAGE_RETURN = "\r"


def advance(point: Point, text: str) -> Point:
    """Walk ``text`` from ``point`` and return the point just after it.

    ``\\n``, ``\\r`` and ``\\r\\n`` each count as one line break: the line is
    incremented and the column resets to 1. Every other character moves the
    column by one. The offset moves by one for every character.
    """
    line = point.line
    column = point.column
    previous = ""

    for char in text:
        if char == CARRIAGE_RETURN:
            line += 1
            column = 1
        elif char == LINE_FEED:
            if previous != CARRIAGE_RETURN:
                line += 1
            column = 1
        else:
            column += 1
        previous = char

    return Point(line, column, point.offset + len(text))


class PositionCorrector:
    """Computes the true end of atomic nodes from what the token source reported."""

    def comment_end(self, start: Point, reported: Point) -> Point:
        raise NotImplementedError

    def text_end(self, start: Point, value: str, reported: Point) -> Point:
        raise NotImplementedError


class ExactPositionCorrector(PositionCorrector):
    """Trusts the token source: reported ends are true ends."""

    def comment_end(self, start: Point, reported: Point) -> Point:
        return reported

    def text_end(self, start: Point, value: str, reported: Point) -> Point:
        return reported


class SaxPositionCorrector(PositionCorrector):
    """Corrects the comment and text ends reported by the bundled scanner.

    The comment fix assumes the four-character ``<!--`` / three-character
    ``-->`` delimiters of XML 1.0.
    """

    def comment_end(self, start: Point, reported: Point) -> Point:
        # Reported just before the final `>` of `-->`.
        return Point(reported.line, reported.column + 1, reported.offset + 1)

    def text_end(self, start: Point, value: str, reported: Point) -> Point:
        return advance(start, value)
