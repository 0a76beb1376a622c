"""Build Server Protocol client utilities: escape codec and connection discovery."""

from __future__ import annotations

from collections.abc import Iterable

__version__ = "0.1.0"


def escape(text: str, specials: Iterable[str]) -> str:
    """Escape every unescaped special code point in text."""
    from bspclient.strings import escape as _escape

    return _escape(text, specials)


def unescape(text: str) -> str:
    """Replace the escape sequences in text with the code points they denote."""
    from bspclient.strings import unescape as _unescape

    return _unescape(text)
