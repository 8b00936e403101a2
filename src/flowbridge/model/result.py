"""Result model: per-section results and the final ConversionResult."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from flowbridge.errors import ConversionCancelledError, FlowBridgeError
from flowbridge.model.diagnostic import Diagnostic
from flowbridge.model.node import GraphNode
from flowbridge.model.style import EmbedBlock, StyleClass

DEFAULT_FORMAT_MARKER = "@webflow/XscpData"


class ConversionStatus(Enum):
    """Terminal state of a conversion run."""

    COMPLETE = "complete"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class SizeStats:
    original_bytes: int = 0
    minified_bytes: int = 0
    embed_chunks: int = 0

    @property
    def saved_bytes(self) -> int:
        return self.original_bytes - self.minified_bytes

    @property
    def saved_percent(self) -> float:
        if not self.original_bytes:
            return 0.0
        return round(self.saved_bytes / self.original_bytes * 100, 2)

    def __add__(self, other: SizeStats) -> SizeStats:
        return SizeStats(
            original_bytes=self.original_bytes + other.original_bytes,
            minified_bytes=self.minified_bytes + other.minified_bytes,
            embed_chunks=self.embed_chunks + other.embed_chunks,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "originalBytes": self.original_bytes,
            "minifiedBytes": self.minified_bytes,
            "savedBytes": self.saved_bytes,
            "savedPercent": self.saved_percent,
            "embedChunks": self.embed_chunks,
        }


@dataclass
class SectionResult:
    """Output of one section's parse -> route -> generate pass."""

    section_id: str
    name: str
    nodes: list[GraphNode] = field(default_factory=list)
    styles: list[StyleClass] = field(default_factory=list)
    embeds: list[EmbedBlock] = field(default_factory=list)
    omitted_classes: set[str] = field(default_factory=set)
    size_stats: SizeStats = field(default_factory=SizeStats)


@dataclass
class ConversionResult:
    """Everything a conversion run produced.

    Owned by the orchestrator until it is returned; treat it as read-only
    afterwards.
    """

    status: ConversionStatus
    nodes: list[GraphNode] = field(default_factory=list)
    styles: list[StyleClass] = field(default_factory=list)
    embeds: list[EmbedBlock] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)
    errors: list[Diagnostic] = field(default_factory=list)
    size_stats: SizeStats = field(default_factory=SizeStats)
    sections: list[SectionResult] = field(default_factory=list)
    omitted_classes: set[str] = field(default_factory=set)
    format_marker: str = DEFAULT_FORMAT_MARKER

    @property
    def cancelled(self) -> bool:
        return self.status is ConversionStatus.CANCELLED

    @property
    def succeeded(self) -> bool:
        return self.status is ConversionStatus.COMPLETE

    def raise_for_status(self) -> None:
        """Raise if the run did not complete."""
        if self.status is ConversionStatus.CANCELLED:
            raise ConversionCancelledError(
                f"Conversion cancelled after {len(self.sections)} section(s)"
            )
        if self.status is ConversionStatus.FAILED:
            messages = "; ".join(str(e) for e in self.errors) or "unknown error"
            raise FlowBridgeError(f"Conversion failed: {messages}")

    def to_document(self) -> dict[str, Any]:
        """Build the clipboard document in the target format's shape."""
        return {
            "type": self.format_marker,
            "payload": {
                "nodes": [n.to_dict() for n in self.nodes],
                "styles": [s.to_dict() for s in self.styles],
                "assets": [],
                "ix1": [],
                "ix2": {"interactions": [], "events": [], "actionLists": []},
            },
            "meta": {
                "unlinkedSymbolCount": 0,
                "droppedLinks": 0,
                "dynBindRemovedCount": 0,
                "dynListBindRemovedCount": 0,
                "paginationRemovedCount": 0,
            },
        }

    def summary(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "sections": [s.section_id for s in self.sections],
            "nodes": len(self.nodes),
            "styles": len(self.styles),
            "embeds": len(self.embeds),
            "warnings": [w.to_dict() for w in self.warnings],
            "errors": [e.to_dict() for e in self.errors],
            "sizeStats": self.size_stats.to_dict(),
        }
