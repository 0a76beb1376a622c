"""Error types with formatted source context."""

from __future__ import annotations

from bspclient.sequences import Position


class EscapeError(ValueError):
    """Raised on the first malformed escape sequence, with position and source context."""

    kind = "escape"

    def __init__(self, raw: str, position: Position, source: str) -> None:
        self.raw = raw
        self.position = position
        self.source = source
        self.message = f"invalid {self.kind} escape sequence '{raw}'"
        super().__init__(self.format())

    def format(self, filename: str = "<string>") -> str:
        lines = self.source.split("\n")
        line_idx = self.position.line - 1
        col = self.position.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\r")
        else:
            source_line = ""

        # Underline the raw sequence, at least one char, but stay within line
        underline_len = max(1, min(len(self.raw), len(source_line) - col + 1))

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


class InvalidUnicodeEscape(EscapeError):
    """A ``\\u`` sequence that is neither ``\\uXXXX`` nor ``\\u{X..XXXXXX}``."""

    kind = "Unicode"


class InvalidHexEscape(EscapeError):
    """A ``\\x`` sequence that is not exactly two hex digits."""

    kind = "hexadecimal"
