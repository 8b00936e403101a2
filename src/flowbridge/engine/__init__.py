"""Conversion engine: the streaming, cancellable orchestrator."""

from flowbridge.engine.orchestrator import (
    CancelToken,
    ConversionRun,
    Converter,
    PayloadGenerator,
    convert,
)

__all__ = [
    "CancelToken",
    "ConversionRun",
    "Converter",
    "PayloadGenerator",
    "convert",
]
