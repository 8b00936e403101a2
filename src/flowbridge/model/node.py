"""Node model: GraphNode and its archetype-specific payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class Archetype(Enum):
    """Target element presets."""

    BLOCK = "Block"
    SECTION = "Section"
    HEADING = "Heading"
    PARAGRAPH = "Paragraph"
    LINK = "Link"
    IMAGE = "Image"
    VIDEO = "Video"
    LIST = "List"
    LIST_ITEM = "ListItem"
    HTML_EMBED = "HtmlEmbed"
    TEXT = "Text"  # bare text run inside mixed content


@dataclass(frozen=True)
class Attribute:
    name: str
    value: str


@dataclass(frozen=True)
class ElementPayload:
    """Generic container data: optional tag override and extra attributes."""

    tag_override: str | None = None
    xattr: tuple[Attribute, ...] = ()
    text: str | None = None


@dataclass(frozen=True)
class LinkPayload:
    url: str
    target: str | None = None
    xattr: tuple[Attribute, ...] = ()
    text: str | None = None


@dataclass(frozen=True)
class ImagePayload:
    src: str
    alt: str = ""
    loading: str | None = None
    xattr: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class EmbedPayload:
    markup: str
    script: bool = False


@dataclass(frozen=True)
class TextPayload:
    text: str


Payload = Union[ElementPayload, LinkPayload, ImagePayload, EmbedPayload, TextPayload]


def _xattr_list(xattr: tuple[Attribute, ...]) -> list[dict[str, str]]:
    return [{"name": a.name, "value": a.value} for a in xattr]


@dataclass(frozen=True)
class GraphNode:
    """A node of the output tree.

    ``children`` holds child node ids in document order; ``classes`` holds
    class names in the order they appear in the ``class`` attribute.
    """

    id: str
    archetype: Archetype
    tag: str = "div"
    classes: tuple[str, ...] = ()
    children: tuple[str, ...] = ()
    payload: Payload = field(default_factory=ElementPayload)

    @property
    def is_text(self) -> bool:
        return self.archetype is Archetype.TEXT

    @property
    def text(self) -> str | None:
        return getattr(self.payload, "text", None)

    def with_children(self, children: tuple[str, ...]) -> GraphNode:
        return GraphNode(
            id=self.id,
            archetype=self.archetype,
            tag=self.tag,
            classes=self.classes,
            children=children,
            payload=self.payload,
        )

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.payload, TextPayload):
            return {"_id": self.id, "text": True, "v": self.payload.text}
        return {
            "_id": self.id,
            "type": self.archetype.value,
            "tag": self.tag,
            "classes": list(self.classes),
            "children": list(self.children),
            "data": self._data(),
        }

    def _data(self) -> dict[str, Any]:
        payload = self.payload
        if isinstance(payload, LinkPayload):
            link: dict[str, str] = {"mode": "external", "url": payload.url}
            if payload.target:
                link["target"] = payload.target
            data: dict[str, Any] = {"link": link, "xattr": _xattr_list(payload.xattr)}
            if payload.text is not None:
                data["text"] = True
                data["v"] = payload.text
            return data
        if isinstance(payload, ImagePayload):
            attr: dict[str, str] = {"src": payload.src, "alt": payload.alt}
            if payload.loading:
                attr["loading"] = payload.loading
            return {"attr": attr, "xattr": _xattr_list(payload.xattr)}
        if isinstance(payload, EmbedPayload):
            return {
                "embed": {
                    "type": "html",
                    "meta": {
                        "html": payload.markup,
                        "div": False,
                        "iframe": False,
                        "script": payload.script,
                        "compilable": False,
                    },
                },
                "insideRTE": False,
            }
        data = {
            "tag": payload.tag_override or self.tag,
            "text": payload.text is not None,
            "xattr": _xattr_list(payload.xattr),
        }
        if payload.text is not None:
            data["v"] = payload.text
        return data
