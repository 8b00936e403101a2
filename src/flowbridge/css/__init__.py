"""CSS processing: variables, gradients, breakpoints, routing and minification."""

from flowbridge.css.breakpoints import BREAKPOINTS, MediaDecision, classify_media, snap_max_width
from flowbridge.css.chunker import chunk_css
from flowbridge.css.gradients import NormalizedValue, color_to_hex, normalize_gradients
from flowbridge.css.minifier import MinificationStats, minify, minify_with_stats
from flowbridge.css.router import (
    EmbedAssembly,
    RouteDecision,
    RoutingResult,
    StyleRouter,
    assemble_embed,
)
from flowbridge.css.variables import Resolution, VariableTable, resolve

__all__ = [
    "BREAKPOINTS",
    "MediaDecision",
    "classify_media",
    "snap_max_width",
    "chunk_css",
    "NormalizedValue",
    "color_to_hex",
    "normalize_gradients",
    "MinificationStats",
    "minify",
    "minify_with_stats",
    "EmbedAssembly",
    "RouteDecision",
    "RoutingResult",
    "StyleRouter",
    "assemble_embed",
    "Resolution",
    "VariableTable",
    "resolve",
]
