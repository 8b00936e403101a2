"""flowbridge model layer -- public type re-exports."""

from flowbridge.model.context import ConversionContext, IdGenerator
from flowbridge.model.css import CssRule, Declaration, ParsedStylesheet
from flowbridge.model.diagnostic import Diagnostic, Severity
from flowbridge.model.node import (
    Archetype,
    Attribute,
    ElementPayload,
    EmbedPayload,
    GraphNode,
    ImagePayload,
    LinkPayload,
    TextPayload,
)
from flowbridge.model.result import (
    ConversionResult,
    ConversionStatus,
    SectionResult,
    SizeStats,
)
from flowbridge.model.section import SectionInput
from flowbridge.model.style import VARIANT_KEYS, EmbedBlock, StyleClass

__all__ = [
    # css
    "CssRule",
    "Declaration",
    "ParsedStylesheet",
    # style
    "StyleClass",
    "EmbedBlock",
    "VARIANT_KEYS",
    # node
    "Archetype",
    "Attribute",
    "ElementPayload",
    "LinkPayload",
    "ImagePayload",
    "EmbedPayload",
    "TextPayload",
    "GraphNode",
    # result
    "ConversionStatus",
    "ConversionResult",
    "SectionResult",
    "SizeStats",
    # section
    "SectionInput",
    # context
    "ConversionContext",
    "IdGenerator",
    # diagnostic
    "Severity",
    "Diagnostic",
]
