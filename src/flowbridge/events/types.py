"""Event types emitted while a conversion runs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from flowbridge.model.result import ConversionResult


class Phase(Enum):
    """Orchestrator states, in the order a section moves through them."""

    IDLE = "idle"
    PARSING = "parsing"
    ROUTING = "css-routing"
    GENERATING = "generating"
    VALIDATING = "validating"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionStarted:
    total_sections: int


@dataclass(frozen=True)
class PhaseChanged:
    phase: Phase
    percentage: int
    current_item: str | None = None

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "percentage": self.percentage,
            "currentItem": self.current_item,
        }


@dataclass(frozen=True)
class SectionCompleted:
    section_id: str
    node_count: int
    style_count: int


@dataclass(frozen=True)
class SectionFailed:
    section_id: str
    error: str


@dataclass(frozen=True)
class ConversionCompleted:
    result: ConversionResult


@dataclass(frozen=True)
class ConversionCancelled:
    result: ConversionResult


@dataclass(frozen=True)
class ConversionFailed:
    error: str
