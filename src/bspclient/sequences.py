"""Escape sequence kinds, data structures, and code point classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType

ESCAPE = "\\"

# Single-letter control substitutions: \0 \n \r \v \t \b \f
SUBSTITUTIONS = MappingProxyType(
    {
        "0": "\0",
        "n": "\n",
        "r": "\r",
        "v": "\v",
        "t": "\t",
        "b": "\b",
        "f": "\f",
    }
)

MAX_CODE_POINT = 0x10FFFF


class EscapeKind(Enum):
    CONTROL = auto()  # \n, \t, ...
    SHORT_UNICODE = auto()  # \uXXXX
    FULL_UNICODE = auto()  # \u{X..XXXXXX}
    SURROGATE_PAIR = auto()  # two unicode escapes combined into one code point
    LATIN = auto()  # \xXX
    UNRECOGNIZED = auto()  # \c for any other c, value is c
    DANGLING = auto()  # \ at end of input, value is empty


@dataclass(frozen=True, slots=True)
class InterpretedEscape:
    """A decoded escape sequence with its original source text (marker included)."""

    kind: EscapeKind
    value: str
    raw: str

    @property
    def length(self) -> int:
        """Number of code points consumed, including the leading marker."""
        return len(self.raw)


@dataclass(frozen=True, slots=True)
class Position:
    """Source position: 1-based line and columns, 0-based code point offset.

    ``column`` counts code points, ``utf16_column`` counts UTF-16 code units
    (what editors speaking LSP expect).
    """

    line: int
    column: int
    offset: int
    utf16_column: int


def is_high_surrogate(code_point: int) -> bool:
    """Return True if code_point is a UTF-16 high (leading) surrogate."""
    return 0xD800 <= code_point <= 0xDBFF


def is_low_surrogate(code_point: int) -> bool:
    """Return True if code_point is a UTF-16 low (trailing) surrogate."""
    return 0xDC00 <= code_point <= 0xDFFF


def from_surrogate_pair(high: int, low: int) -> str:
    """Combine a surrogate pair into the code point it encodes.

    If ``high``/``low`` are not a valid high/low pair the two values are
    returned unchanged, as two separate code points.
    """
    if is_high_surrogate(high) and is_low_surrogate(low):
        return chr(((high - 0xD800) << 10) + (low - 0xDC00) + 0x10000)
    return chr(high) + chr(low)


def parse_code_point(hex_digits: str) -> int:
    """Parse a code point written as hexadecimal digits."""
    return int(hex_digits, 16)


def utf16_length(ch: str) -> int:
    """Return the number of UTF-16 code units needed to encode ch."""
    return 2 if ord(ch) > 0xFFFF else 1
