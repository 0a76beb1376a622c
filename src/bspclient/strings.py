"""Escaping and unescaping of special code points in strings."""

from __future__ import annotations

import re
from collections.abc import Iterable

from bspclient.interpreter import interpret
from bspclient.sequences import ESCAPE, Position, utf16_length


def escape(text: str, specials: Iterable[str]) -> str:
    """Escape every unescaped special code point in text.

    Algorithm (single pass, one code point of lookahead):
    1. A marker is held as pending until the next code point is seen.
    2. A pending marker followed by another marker is an escaped marker; both
       pass through unchanged.
    3. A pending marker followed by anything else escapes that code point,
       unless the marker itself is special: then the marker is dangling and
       is escaped in turn.
    4. A special code point that is not preceded by a pending marker gets one
       marker inserted before it.
    5. A pending marker at the end is escaped if the marker is special.

    Escaping is idempotent unless the marker is special together with other
    code points, in which case an escaped special such as ``\\'`` is read as a
    dangling marker followed by an unescaped special.
    """
    specials = frozenset(specials)
    escape_is_special = ESCAPE in specials
    pending = False
    out: list[str] = []

    for ch in text:
        if pending:
            if escape_is_special and ch != ESCAPE:
                out.append(ESCAPE)
            pending = False
        elif ch == ESCAPE:
            pending = True
        elif ch in specials:
            out.append(ESCAPE)
        out.append(ch)

    if pending and escape_is_special:
        out.append(ESCAPE)

    return "".join(out)


class Unescaper:
    """Replace the escape sequences in a string with the code points they denote."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._col = 1
        self._utf16_col = 1

    def unescape(self) -> str:
        """Unescape the full source and return the result."""
        out: list[str] = []
        while self._pos < len(self._source):
            ch = self._source[self._pos]
            if ch == ESCAPE:
                result = interpret(self._source, self._pos, self._current_pos())
                out.append(result.value)
                for _ in range(result.length):
                    self._advance()
            else:
                out.append(self._advance())
        return "".join(out)

    def _current_pos(self) -> Position:
        return Position(self._line, self._col, self._pos, self._utf16_col)

    def _advance(self) -> str:
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
            self._utf16_col = 1
        else:
            self._col += 1
            self._utf16_col += utf16_length(ch)
        return ch


def unescape(text: str) -> str:
    """Convenience function: replace every escape sequence in text.

    Raises InvalidUnicodeEscape or InvalidHexEscape on a malformed sequence.
    """
    return Unescaper(text).unescape()


_LEADING_WHITESPACE = re.compile(r"^\s+", re.MULTILINE)


def strip_leading(text: str) -> str:
    """Remove leading whitespace from every line of text.

    Blank lines are whitespace too, so they are removed along with the
    indentation of the line that follows them.
    """
    return _LEADING_WHITESPACE.sub("", text)
