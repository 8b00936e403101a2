"""Destination-project collaborators: duplicate filtering, class lookup, clipboard."""

from flowbridge.project.clipboard import (
    ClipboardPayload,
    ClipboardTransport,
    FileTransport,
    StdoutTransport,
    build_clipboard_payload,
)
from flowbridge.project.duplicates import DuplicateClassResolver, filter_duplicates
from flowbridge.project.lookup import (
    ClassLookup,
    HttpClassLookup,
    StaticClassLookup,
    fetch_existing_names,
)

__all__ = [
    "ClipboardPayload",
    "ClipboardTransport",
    "FileTransport",
    "StdoutTransport",
    "build_clipboard_payload",
    "DuplicateClassResolver",
    "filter_duplicates",
    "ClassLookup",
    "HttpClassLookup",
    "StaticClassLookup",
    "fetch_existing_names",
]
