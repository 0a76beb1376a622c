"""Minimal LSP server reporting malformed escape sequences, diagnostics only."""

from __future__ import annotations

import re

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from bspclient import __version__
from bspclient.errors import EscapeError
from bspclient.sequences import utf16_length
from bspclient.strings import unescape

server = LanguageServer(
    "bspclient-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)

# LSP line terminators
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def check_escapes(source: str) -> list[Diagnostic]:
    """Unescape source line by line and return one diagnostic per failing line."""
    diagnostics: list[Diagnostic] = []
    for line_idx, line in enumerate(_LINE_BREAK.split(source)):
        try:
            unescape(line)
        except EscapeError as exc:
            start = exc.position.utf16_column - 1
            end = start + sum(utf16_length(ch) for ch in exc.raw)
            diagnostics.append(
                Diagnostic(
                    range=Range(
                        start=Position(line=line_idx, character=start),
                        end=Position(line=line_idx, character=max(end, start + 1)),
                    ),
                    message=exc.message,
                    severity=DiagnosticSeverity.Error,
                    source="bspclient",
                )
            )
    return diagnostics


def _validate(ls: LanguageServer, uri: str) -> None:
    """Check the document's escape sequences and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=check_escapes(doc.source))
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
