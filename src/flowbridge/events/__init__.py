"""Event system: bus and event types for conversion progress."""

from flowbridge.events.bus import EventBus
from flowbridge.events.types import (
    ConversionCancelled,
    ConversionCompleted,
    ConversionFailed,
    ConversionStarted,
    Phase,
    PhaseChanged,
    SectionCompleted,
    SectionFailed,
)

__all__ = [
    "EventBus",
    "ConversionCancelled",
    "ConversionCompleted",
    "ConversionFailed",
    "ConversionStarted",
    "Phase",
    "PhaseChanged",
    "SectionCompleted",
    "SectionFailed",
]
