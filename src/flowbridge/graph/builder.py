"""Node-graph builder: HTML tree -> flat list of target-format nodes.

Walks the tree depth-first. Every element gets a fresh id from the run's
:class:`IdGenerator` before its children are visited, so ids follow document
order. The node list is in pre-order: a parent always precedes its children.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from flowbridge.graph.elements import map_element
from flowbridge.model.context import ConversionContext
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
from flowbridge.parser.html import RAW_MARKUP_TAGS, HtmlElement, HtmlText, HtmlTree

logger = logging.getLogger(__name__)

__all__ = ["BuildResult", "GraphBuilder", "embed_node", "script_node"]

# Attributes carried over as custom attributes besides data-*/aria-*.
_KEPT_ATTRIBUTES = frozenset({"id", "role", "title"})
_HINT_ATTRIBUTE = "data-node-type"
_LINE_BREAK_TAGS = frozenset({"br", "wbr"})


@dataclass
class BuildResult:
    nodes: list[GraphNode] = field(default_factory=list)
    roots: list[str] = field(default_factory=list)
    class_names: list[str] = field(default_factory=list)

    def node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


def _xattr(element: HtmlElement) -> tuple[Attribute, ...]:
    kept = []
    for name, value in element.attrs.items():
        if name == _HINT_ATTRIBUTE:
            continue
        if name in _KEPT_ATTRIBUTES or name.startswith(("data-", "aria-")):
            kept.append(Attribute(name, value))
    return tuple(kept)


def embed_node(context: ConversionContext, markup: str, *, script: bool = False) -> GraphNode:
    """Create an HtmlEmbed node carrying raw *markup*."""
    return GraphNode(
        id=context.ids.generate("script" if script else "embed"),
        archetype=Archetype.HTML_EMBED,
        tag="div",
        payload=EmbedPayload(markup=markup, script=script),
    )


def script_node(context: ConversionContext, js: str) -> GraphNode:
    return embed_node(context, f"<script>\n{js.strip()}\n</script>", script=True)


class GraphBuilder:
    """Builds the node list for one section of a conversion run."""

    def __init__(self, context: ConversionContext) -> None:
        self.context = context
        self._nodes: list[GraphNode | None] = []
        self._classes: dict[str, None] = {}

    def build(self, tree: HtmlTree) -> BuildResult:
        self._nodes = []
        self._classes = {}
        roots = [self._visit(child, top_level=True) for child in tree.children]
        nodes = [n for n in self._nodes if n is not None]
        return BuildResult(nodes=nodes, roots=roots, class_names=list(self._classes))

    def attach(self, result: BuildResult, extra: Iterable[GraphNode]) -> None:
        """Append *extra* nodes (embeds) to the single root, or at top level.

        With exactly one root element the embeds become its last children so
        the pasted component stays one tree.
        """
        extra = list(extra)
        if not extra:
            return
        ids = tuple(n.id for n in extra)
        root = result.node(result.roots[0]) if len(result.roots) == 1 else None
        if root is not None and not root.is_text and root.archetype is not Archetype.HTML_EMBED:
            index = result.nodes.index(root)
            result.nodes[index] = root.with_children(root.children + ids)
        else:
            result.roots.extend(ids)
        result.nodes.extend(extra)

    # --- tree walk -----------------------------------------------------------

    def _reserve(self) -> int:
        self._nodes.append(None)
        return len(self._nodes) - 1

    def _visit(self, child: HtmlElement | HtmlText, top_level: bool = False) -> str:
        if isinstance(child, HtmlText):
            return self._text(child.text, top_level)
        return self._element(child)

    def _text(self, text: str, top_level: bool) -> str:
        slot = self._reserve()
        if top_level:
            # A bare text run at the root needs a container.
            node = GraphNode(
                id=self.context.ids.generate("text-block"),
                archetype=Archetype.BLOCK,
                payload=ElementPayload(text=text.strip()),
            )
        else:
            node = GraphNode(
                id=self.context.ids.generate("text"),
                archetype=Archetype.TEXT,
                tag="",
                payload=TextPayload(text),
            )
        self._nodes[slot] = node
        return node.id

    def _element(self, element: HtmlElement) -> str:
        if element.tag in _LINE_BREAK_TAGS:
            slot = self._reserve()
            node = GraphNode(
                id=self.context.ids.generate("text"),
                archetype=Archetype.TEXT,
                tag="",
                payload=TextPayload("\n"),
            )
            self._nodes[slot] = node
            return node.id

        mapping = map_element(element.tag, element.attrs.get(_HINT_ATTRIBUTE))
        if self._is_escape_hatch(element, mapping.archetype):
            return self._raw(element)

        slot = self._reserve()
        base = element.classes[0] if element.classes else element.tag
        node_id = self.context.ids.generate(base)
        for name in element.classes:
            self._classes.setdefault(name)

        text: str | None = None
        children: tuple[str, ...] = ()
        if element.is_text_leaf:
            text = element.children[0].text.strip()  # type: ignore[union-attr]
        elif mapping.archetype is not Archetype.IMAGE:
            children = tuple(self._visit(c) for c in element.children)

        xattr = _xattr(element)
        if mapping.archetype is Archetype.LINK:
            payload = LinkPayload(
                url=element.attrs.get("href", "#"),
                target=element.attrs.get("target") or None,
                xattr=xattr,
                text=text,
            )
        elif mapping.archetype is Archetype.IMAGE:
            payload = ImagePayload(
                src=element.attrs.get("src", ""),
                alt=element.attrs.get("alt", ""),
                loading=element.attrs.get("loading") or None,
                xattr=xattr,
            )
        else:
            if mapping.archetype is Archetype.VIDEO and element.attrs.get("src"):
                xattr = (Attribute("src", element.attrs["src"]),) + xattr
            payload = ElementPayload(tag_override=mapping.override, xattr=xattr, text=text)

        if "style" in element.attrs:
            self.context.warn(
                "inline-style-dropped",
                f"Inline style on <{element.tag}> is not carried over; move it to a class",
                node_id=node_id,
            )
        self._nodes[slot] = GraphNode(
            id=node_id,
            archetype=mapping.archetype,
            tag=mapping.tag,
            classes=tuple(element.classes),
            children=children,
            payload=payload,
        )
        return node_id

    def _is_escape_hatch(self, element: HtmlElement, archetype: Archetype) -> bool:
        if archetype is Archetype.HTML_EMBED:
            return True
        if element.tag not in RAW_MARKUP_TAGS:
            return False
        if element.tag == "video":
            # Plain <video src> stays native; <source> lists do not.
            return any(c.tag == "source" for c in element.element_children)
        return True

    def _raw(self, element: HtmlElement) -> str:
        slot = self._reserve()
        node = embed_node(self.context, element.markup or "")
        self._nodes[slot] = node
        logger.debug("<%s> emitted as raw embed %s", element.tag, node.id)
        self.context.info(
            "escape-hatch",
            f"<{element.tag}> has no native equivalent; emitted as an HTML embed",
            node_id=node.id,
        )
        return node.id
