"""Escape sequence interpreter: decodes the escape sequence starting at a marker.

Recognized forms, tried in order on the code point after the marker::

    \\0 \\n \\r \\v \\t \\b \\f        control substitution
    \\uXXXX                      short Unicode escape (exactly four hex digits)
    \\u{X..XXXXXX}               full Unicode escape (one to six hex digits)
    \\xXX                        Latin escape (exactly two hex digits)

A Unicode escape decoding to a high surrogate that is immediately followed by
a Unicode escape decoding to a low surrogate is combined into the single code
point the pair encodes. Unpaired surrogates are kept as they are.

Any other escaped code point stands for itself, and a marker at the very end
of the text decodes to nothing. Malformed ``\\u`` and ``\\x`` sequences raise.
"""

from __future__ import annotations

import re

from bspclient.errors import InvalidHexEscape, InvalidUnicodeEscape
from bspclient.sequences import (
    ESCAPE,
    MAX_CODE_POINT,
    SUBSTITUTIONS,
    EscapeKind,
    InterpretedEscape,
    Position,
    from_surrogate_pair,
    is_high_surrogate,
    is_low_surrogate,
    parse_code_point,
    utf16_length,
)

_UNICODE_SHORT = re.compile(r"\\u([0-9A-Fa-f]{4})")
_UNICODE_FULL = re.compile(r"\\u\{([0-9A-Fa-f]{1,6})\}")
_HEX = re.compile(r"\\x([0-9A-Fa-f]{2})")

# Longest source excerpt quoted in an error message
_MAX_RAW = 12


def _match_unicode(text: str, position: int) -> tuple[EscapeKind, int, str] | None:
    """Match a single short or full Unicode escape at position."""
    for kind, pattern in (
        (EscapeKind.SHORT_UNICODE, _UNICODE_SHORT),
        (EscapeKind.FULL_UNICODE, _UNICODE_FULL),
    ):
        match = pattern.match(text, position)
        if match is not None:
            code_point = parse_code_point(match.group(1))
            if code_point > MAX_CODE_POINT:
                return None
            return kind, code_point, match.group(0)
    return None


def interpret_unicode_escape(text: str, position: int = 0) -> InterpretedEscape | None:
    """Interpret the Unicode escape sequence(s) in text at position.

    Returns None if there is no well-formed ``\\uXXXX`` or ``\\u{...}``
    sequence starting at position. A high surrogate followed directly by a
    low surrogate escape consumes both sequences.
    """
    first = _match_unicode(text, position)
    if first is None:
        return None

    kind, code_point, raw = first
    if is_high_surrogate(code_point):
        # Only one level of lookahead: a combined pair never starts another
        second = _match_unicode(text, position + len(raw))
        if second is not None and is_low_surrogate(second[1]):
            return InterpretedEscape(
                EscapeKind.SURROGATE_PAIR,
                from_surrogate_pair(code_point, second[1]),
                raw + second[2],
            )

    return InterpretedEscape(kind, chr(code_point), raw)


def interpret_hex_escape(text: str, position: int = 0) -> InterpretedEscape | None:
    """Interpret the ``\\xXX`` escape sequence in text at position, or return None."""
    match = _HEX.match(text, position)
    if match is None:
        return None
    return InterpretedEscape(
        EscapeKind.LATIN, chr(parse_code_point(match.group(1))), match.group(0)
    )


def interpret(text: str, position: int, start: Position | None = None) -> InterpretedEscape:
    """Interpret the escape sequence whose marker is at text[position].

    ``start`` is the source position of the marker when the caller already
    tracks it; otherwise it is computed on demand for error reporting.

    Raises InvalidUnicodeEscape or InvalidHexEscape on a malformed sequence.
    """
    ch = text[position + 1 : position + 2]

    if ch == "":
        return InterpretedEscape(EscapeKind.DANGLING, "", ESCAPE)

    if ch in SUBSTITUTIONS:
        return InterpretedEscape(EscapeKind.CONTROL, SUBSTITUTIONS[ch], ESCAPE + ch)

    if ch == "u":
        result = interpret_unicode_escape(text, position)
        if result is None:
            raise InvalidUnicodeEscape(
                _malformed_unicode_raw(text, position),
                start or _position_at(text, position),
                text,
            )
        return result

    if ch == "x":
        result = interpret_hex_escape(text, position)
        if result is None:
            raise InvalidHexEscape(
                _excerpt(text, position, position + 4),
                start or _position_at(text, position),
                text,
            )
        return result

    return InterpretedEscape(EscapeKind.UNRECOGNIZED, ch, ESCAPE + ch)


def _malformed_unicode_raw(text: str, position: int) -> str:
    if text.startswith("{", position + 2):
        close = text.find("}", position + 3)
        end = close + 1 if close != -1 else len(text)
    else:
        end = position + 6
    return _excerpt(text, position, end)


def _excerpt(text: str, start: int, end: int) -> str:
    """Return text[start:end], cut at the first whitespace and at _MAX_RAW code points."""
    raw = text[start : min(end, start + _MAX_RAW)]
    for i, ch in enumerate(raw):
        if ch.isspace():
            return raw[:i]
    return raw


def _position_at(text: str, offset: int) -> Position:
    line_start = text.rfind("\n", 0, offset) + 1
    prefix = text[line_start:offset]
    return Position(
        line=text.count("\n", 0, offset) + 1,
        column=len(prefix) + 1,
        offset=offset,
        utf16_column=sum(utf16_length(ch) for ch in prefix) + 1,
    )
