"""Clipboard document serialization and delivery."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Protocol

from flowbridge.model.result import ConversionResult

__all__ = [
    "ClipboardPayload",
    "ClipboardTransport",
    "FileTransport",
    "StdoutTransport",
    "build_clipboard_payload",
]

# MIME type the design tool reads from the clipboard.
CLIPBOARD_MIME_TYPE = "application/json"


@dataclass(frozen=True)
class ClipboardPayload:
    """Serialized document plus the plain-text fallback.

    The target tool accepts the same JSON under either MIME type, so the
    fallback is the document itself.
    """

    json: str
    plain_text: str
    mime_type: str = CLIPBOARD_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.json.encode("utf-8"))


def build_clipboard_payload(
    source: ConversionResult | dict[str, Any], *, indent: int | None = None
) -> ClipboardPayload:
    document = source.to_document() if isinstance(source, ConversionResult) else source
    text = json.dumps(document, indent=indent, ensure_ascii=False)
    return ClipboardPayload(json=text, plain_text=text)


class ClipboardTransport(Protocol):
    def write(self, payload: ClipboardPayload) -> None: ...


class FileTransport:
    """Writes the payload to a file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def write(self, payload: ClipboardPayload) -> None:
        self.path.write_text(payload.json, encoding="utf-8")


class StdoutTransport:
    """Writes the payload to a stream (standard output by default)."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self.stream = stream

    def write(self, payload: ClipboardPayload) -> None:
        stream = self.stream or sys.stdout
        stream.write(payload.json)
        stream.write("\n")
        stream.flush()
