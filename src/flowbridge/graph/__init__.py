"""flowbridge graph layer -- element mapping and node-graph building."""

from flowbridge.graph.builder import BuildResult, GraphBuilder, embed_node, script_node
from flowbridge.graph.elements import ElementMapping, map_element

__all__ = [
    "BuildResult",
    "GraphBuilder",
    "embed_node",
    "script_node",
    "ElementMapping",
    "map_element",
]
