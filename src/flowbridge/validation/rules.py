"""Schema rules for clipboard documents.

Each rule is a function taking a :class:`DocumentView` and returning a list
of Diagnostic objects describing any violations found. Rules never repair
the document.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from flowbridge.model.diagnostic import Diagnostic, Severity
from flowbridge.model.result import DEFAULT_FORMAT_MARKER
from flowbridge.model.style import VARIANT_KEYS


# ---------------------------------------------------------------------------
# Known value sets
# ---------------------------------------------------------------------------

NODE_TYPES = frozenset({
    "Block",
    "Section",
    "Heading",
    "Paragraph",
    "Link",
    "Image",
    "Video",
    "List",
    "ListItem",
    "HtmlEmbed",
})

META_KEYS = (
    "unlinkedSymbolCount",
    "droppedLinks",
    "dynBindRemovedCount",
    "dynListBindRemovedCount",
    "paginationRemovedCount",
)

IX2_KEYS = ("interactions", "events", "actionLists")

# The target refuses embeds longer than this many characters.
EMBED_CHAR_LIMIT = 50_000


@dataclass
class DocumentView:
    """A document under validation plus the context the rules need."""

    document: Any
    omitted_classes: frozenset[str] = field(default_factory=frozenset)
    format_marker: str = DEFAULT_FORMAT_MARKER

    @property
    def payload(self) -> dict[str, Any]:
        payload = self.document.get("payload") if isinstance(self.document, dict) else None
        return payload if isinstance(payload, dict) else {}

    @property
    def nodes(self) -> list[dict[str, Any]]:
        nodes = self.payload.get("nodes")
        if not isinstance(nodes, list):
            return []
        return [n for n in nodes if isinstance(n, dict)]

    @property
    def styles(self) -> list[dict[str, Any]]:
        styles = self.payload.get("styles")
        if not isinstance(styles, list):
            return []
        return [s for s in styles if isinstance(s, dict)]


def _error(rule: str, message: str, **kwargs: Any) -> Diagnostic:
    return Diagnostic(code=rule, severity=Severity.ERROR, message=message, **kwargs)


def _is_text_node(node: dict[str, Any]) -> bool:
    return node.get("text") is True and "type" not in node


# ---------------------------------------------------------------------------
# Document shape
# ---------------------------------------------------------------------------


def check_format_marker(view: DocumentView) -> list[Diagnostic]:
    """Top-level ``type`` must carry the format marker."""
    if not isinstance(view.document, dict):
        return [_error("check_format_marker", "Document is not a JSON object.")]
    marker = view.document.get("type")
    if marker != view.format_marker:
        return [
            _error(
                "check_format_marker",
                f"Document type is {marker!r}, expected {view.format_marker!r}.",
                fix=f'Set "type" to "{view.format_marker}".',
            )
        ]
    return []


def check_payload_shape(view: DocumentView) -> list[Diagnostic]:
    """``payload`` holds nodes/styles/assets/ix1 lists and an ix2 object."""
    if not isinstance(view.document, dict):
        return []
    payload = view.document.get("payload")
    if not isinstance(payload, dict):
        return [_error("check_payload_shape", "Document has no payload object.")]
    diagnostics: list[Diagnostic] = []
    for key in ("nodes", "styles", "assets", "ix1"):
        if not isinstance(payload.get(key), list):
            diagnostics.append(_error("check_payload_shape", f"payload.{key} must be a list."))
    ix2 = payload.get("ix2")
    if not isinstance(ix2, dict):
        diagnostics.append(_error("check_payload_shape", "payload.ix2 must be an object."))
    else:
        for key in IX2_KEYS:
            if not isinstance(ix2.get(key), list):
                diagnostics.append(
                    _error("check_payload_shape", f"payload.ix2.{key} must be a list.")
                )
    return diagnostics


def check_meta(view: DocumentView) -> list[Diagnostic]:
    """``meta`` carries every counter the target expects."""
    if not isinstance(view.document, dict):
        return []
    meta = view.document.get("meta")
    if not isinstance(meta, dict):
        return [_error("check_meta", "Document has no meta object.")]
    return [
        _error("check_meta", f"meta.{key} is missing or not a number.")
        for key in META_KEYS
        if not isinstance(meta.get(key), int)
    ]


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


def check_node_shape(view: DocumentView) -> list[Diagnostic]:
    """Element nodes need type/tag/classes/children/data; text nodes need v."""
    diagnostics: list[Diagnostic] = []
    for index, node in enumerate(view.nodes):
        node_id = node.get("_id")
        if not isinstance(node_id, str) or not node_id:
            diagnostics.append(_error("check_node_shape", f"Node #{index} has no _id."))
            continue
        if _is_text_node(node):
            if not isinstance(node.get("v"), str):
                diagnostics.append(
                    _error("check_node_shape", "Text node has no string v.", node_id=node_id)
                )
            continue
        for key, kind in (("type", str), ("tag", str), ("classes", list),
                          ("children", list), ("data", dict)):
            if not isinstance(node.get(key), kind):
                diagnostics.append(
                    _error(
                        "check_node_shape",
                        f"Node field {key!r} is missing or not a {kind.__name__}.",
                        node_id=node_id,
                    )
                )
    return diagnostics


def check_node_type_known(view: DocumentView) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for node in view.nodes:
        if _is_text_node(node) or not isinstance(node.get("type"), str):
            continue
        if node["type"] not in NODE_TYPES:
            diagnostics.append(
                _error(
                    "check_node_type_known",
                    f"Unknown node type {node['type']!r}.",
                    node_id=node.get("_id"),
                    fix="Use one of: " + ", ".join(sorted(NODE_TYPES)),
                )
            )
    return diagnostics


def check_unique_ids(view: DocumentView) -> list[Diagnostic]:
    """Node ids and style ids are each unique."""
    diagnostics: list[Diagnostic] = []
    node_ids = Counter(n.get("_id") for n in view.nodes if isinstance(n.get("_id"), str))
    for node_id, count in node_ids.items():
        if count > 1:
            diagnostics.append(
                _error("check_unique_ids", f"Node id used {count} times.", node_id=node_id)
            )
    style_ids = Counter(s.get("_id") for s in view.styles if isinstance(s.get("_id"), str))
    for style_id, count in style_ids.items():
        if count > 1:
            diagnostics.append(
                _error("check_unique_ids", f"Style id {style_id!r} used {count} times.")
            )
    return diagnostics


def check_children_resolve(view: DocumentView) -> list[Diagnostic]:
    """Every child reference names a node in the list, and has one parent."""
    known = {n.get("_id") for n in view.nodes if isinstance(n.get("_id"), str)}
    parents: dict[str, str] = {}
    diagnostics: list[Diagnostic] = []
    for node in view.nodes:
        children = node.get("children")
        if not isinstance(children, list):
            continue
        for child in children:
            if not isinstance(child, str):
                diagnostics.append(
                    _error(
                        "check_children_resolve",
                        f"Child reference {child!r} is not a node id string.",
                        node_id=node.get("_id"),
                    )
                )
            elif child not in known:
                diagnostics.append(
                    _error(
                        "check_children_resolve",
                        f"Child reference {child!r} does not match any node.",
                        node_id=node.get("_id"),
                    )
                )
            elif child == node.get("_id"):
                diagnostics.append(
                    _error("check_children_resolve", "Node lists itself as a child.",
                           node_id=child)
                )
            elif child in parents:
                diagnostics.append(
                    _error(
                        "check_children_resolve",
                        f"Node is a child of both {parents[child]!r} and {node.get('_id')!r}.",
                        node_id=child,
                    )
                )
            else:
                parents[child] = node.get("_id")
    return diagnostics


def check_class_references(view: DocumentView) -> list[Diagnostic]:
    """Class names used by nodes exist as styles or were deliberately omitted."""
    defined = set()
    for style in view.styles:
        for key in ("_id", "name"):
            if isinstance(style.get(key), str):
                defined.add(style[key])
    diagnostics: list[Diagnostic] = []
    for node in view.nodes:
        classes = node.get("classes")
        if not isinstance(classes, list):
            continue
        for name in classes:
            if not isinstance(name, str):
                diagnostics.append(
                    _error(
                        "check_class_references",
                        f"Class entry {name!r} is not a string.",
                        node_id=node.get("_id"),
                    )
                )
                continue
            if name in defined or name in view.omitted_classes:
                continue
            diagnostics.append(
                _error(
                    "check_class_references",
                    f"Class {name!r} is not defined in styles.",
                    node_id=node.get("_id"),
                    fix="Add the style or list it as omitted.",
                )
            )
    return diagnostics


def check_embed_size(view: DocumentView) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for node in view.nodes:
        if node.get("type") != "HtmlEmbed":
            continue
        data = node.get("data")
        embed = data.get("embed") if isinstance(data, dict) else None
        meta = embed.get("meta") if isinstance(embed, dict) else None
        html = meta.get("html") if isinstance(meta, dict) else None
        if not isinstance(html, str):
            diagnostics.append(
                _error("check_embed_size", "HtmlEmbed node has no embed.meta.html string.",
                       node_id=node.get("_id"))
            )
        elif len(html) > EMBED_CHAR_LIMIT:
            diagnostics.append(
                _error(
                    "check_embed_size",
                    f"Embed is {len(html)} characters; the limit is {EMBED_CHAR_LIMIT}.",
                    node_id=node.get("_id"),
                    fix="Split the embed into smaller chunks.",
                )
            )
    return diagnostics


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


def check_style_shape(view: DocumentView) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for index, style in enumerate(view.styles):
        label = style.get("name") or f"#{index}"
        for key, kind in (("_id", str), ("name", str), ("styleLess", str),
                          ("variants", dict), ("children", list)):
            if not isinstance(style.get(key), kind):
                diagnostics.append(
                    _error(
                        "check_style_shape",
                        f"Style {label!r}: field {key!r} is missing or not a {kind.__name__}.",
                    )
                )
        if style.get("type") != "class":
            diagnostics.append(
                _error("check_style_shape", f"Style {label!r}: type must be 'class'.")
            )
    return diagnostics


def check_variant_keys(view: DocumentView) -> list[Diagnostic]:
    """Variant keys come from the fixed breakpoint/pseudo-class set."""
    diagnostics: list[Diagnostic] = []
    for style in view.styles:
        variants = style.get("variants")
        if not isinstance(variants, dict):
            continue
        for key, value in variants.items():
            if key not in VARIANT_KEYS:
                diagnostics.append(
                    _error(
                        "check_variant_keys",
                        f"Style {style.get('name')!r} has unknown variant {key!r}.",
                        fix="Use one of: " + ", ".join(sorted(VARIANT_KEYS)),
                    )
                )
            elif not isinstance(value, dict) or not isinstance(value.get("styleLess"), str):
                diagnostics.append(
                    _error(
                        "check_variant_keys",
                        f"Style {style.get('name')!r} variant {key!r} has no styleLess text.",
                    )
                )
    return diagnostics


ALL_RULES = [
    check_format_marker,
    check_payload_shape,
    check_meta,
    check_node_shape,
    check_node_type_known,
    check_unique_ids,
    check_children_resolve,
    check_class_references,
    check_embed_size,
    check_style_shape,
    check_variant_keys,
]
