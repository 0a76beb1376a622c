"""Shared test fixtures and helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

MARKER = "\\"

# Deliberately independent of bspclient.sequences.SUBSTITUTIONS
_CONTROL = {"0": "\0", "n": "\n", "r": "\r", "v": "\v", "t": "\t", "b": "\b", "f": "\f"}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


@pytest.fixture
def sample_details() -> dict[str, Any]:
    """A connection file as written by sbt."""
    return {
        "name": "sbt",
        "version": "1.7.1",
        "bspVersion": "2.0.0-M5",
        "languages": ["scala"],
        "argv": [
            "java",
            "-Xms100m",
            "-Xmx100m",
            "-classpath",
            "/share/sbt/bin/sbt-launch.jar",
            "-Dsbt.script=/bin/sbt",
            "xsbt.boot.Boot",
            "-bsp",
        ],
    }


@pytest.fixture
def write_bsp_dir():
    """Return a helper that writes connection files into a directory, creating it."""

    def _write(directory: Path, files: dict[str, Any]) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        for name, contents in files.items():
            text = contents if isinstance(contents, str) else json.dumps(contents)
            (directory / name).write_text(text, encoding="utf-8")
        return directory

    return _write


def preceding_markers(chars: str, index: int) -> int:
    """Count the consecutive markers immediately before chars[index]."""
    count = 0
    j = index - 1
    while j >= 0 and chars[j] == MARKER:
        count += 1
        j -= 1
    return count


def assert_specials_escaped(escaped: str, specials: list[str]) -> None:
    """Assert that every special in escaped is preceded by an odd number of markers."""
    for i, ch in enumerate(escaped):
        if ch in specials:
            count = preceding_markers(escaped, i)
            assert count % 2 == 1, f"{ch!r} at {i} preceded by {count} markers in {escaped!r}"


def assert_original_with_added_escapes(original: str, escaped: str, specials: list[str]) -> None:
    """Assert that escaped is original plus single markers inserted before specials."""
    i = j = 0
    while i < len(original) and j < len(escaped):
        if original[i] == escaped[j]:
            i += 1
            j += 1
        else:
            assert escaped[j] == MARKER, f"unexpected {escaped[j]!r} at {j} in {escaped!r}"
            assert original[i] in specials, f"marker inserted before non-special {original[i]!r}"
            j += 1
    assert i == len(original)
    assert j == len(escaped)


def reference_unescape(text: str) -> str:
    """Re-derive the unescaped form of well-formed text from the escape grammar."""
    out: list[str] = []
    i = 0
    while i < len(text):
        if text[i] != MARKER:
            out.append(text[i])
            i += 1
        elif i + 1 == len(text):
            i += 1
        else:
            value, i = _reference_escape(text, i + 1)
            out.append(value)
    return "".join(out)


def _reference_unicode(text: str, i: int) -> tuple[int, int] | None:
    """Decode a Unicode escape whose 'u' is at text[i], returning (code point, next index)."""
    if text[i : i + 1] != "u":
        return None
    if text[i + 1 : i + 2] == "{":
        close = text.find("}", i + 2)
        if close == -1:
            return None
        digits = text[i + 2 : close]
        if not 1 <= len(digits) <= 6 or not set(digits) <= _HEX_DIGITS:
            return None
        code = int(digits, 16)
        return (code, close + 1) if code <= 0x10FFFF else None
    digits = text[i + 1 : i + 5]
    if len(digits) != 4 or not set(digits) <= _HEX_DIGITS:
        return None
    return int(digits, 16), i + 5


def _reference_escape(text: str, i: int) -> tuple[str, int]:
    ch = text[i]
    if ch in _CONTROL:
        return _CONTROL[ch], i + 1
    if ch == "u":
        first = _reference_unicode(text, i)
        assert first is not None, f"malformed unicode escape at {i} in {text!r}"
        high, nxt = first
        if 0xD800 <= high <= 0xDBFF and text[nxt : nxt + 1] == MARKER:
            second = _reference_unicode(text, nxt + 1)
            if second is not None and 0xDC00 <= second[0] <= 0xDFFF:
                code = (high - 0xD800) * 0x400 + (second[0] - 0xDC00) + 0x10000
                return chr(code), second[1]
        return chr(high), nxt
    if ch == "x":
        digits = text[i + 1 : i + 3]
        assert len(digits) == 2 and set(digits) <= _HEX_DIGITS
        return chr(int(digits, 16)), i + 3
    return ch, i + 1
