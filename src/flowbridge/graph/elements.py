"""Element-type mapper: HTML tag (plus optional node-type hint) -> archetype."""

from __future__ import annotations

from dataclasses import dataclass

from flowbridge.model.node import Archetype

__all__ = ["ElementMapping", "map_element"]


@dataclass(frozen=True)
class ElementMapping:
    """Archetype for an element and the tag it should render with.

    ``override`` is set when the archetype's default tag differs from the
    source tag, so the target has to be told explicitly.
    """

    archetype: Archetype
    tag: str
    override: str | None = None

    @property
    def requires_override(self) -> bool:
        return self.override is not None


# tag -> (archetype, override)
_TAG_TABLE: dict[str, tuple[Archetype, str | None]] = {
    "div": (Archetype.BLOCK, None),
    "p": (Archetype.PARAGRAPH, None),
    "a": (Archetype.LINK, None),
    "img": (Archetype.IMAGE, None),
    "video": (Archetype.VIDEO, None),
    "ul": (Archetype.LIST, None),
    "ol": (Archetype.LIST, "ol"),
    "li": (Archetype.LIST_ITEM, None),
    "iframe": (Archetype.HTML_EMBED, None),
    "embed": (Archetype.HTML_EMBED, None),
    "object": (Archetype.HTML_EMBED, None),
    # Inline formatting collapses onto a few tags the target can render.
    "b": (Archetype.BLOCK, "strong"),
    "i": (Archetype.BLOCK, "em"),
    "u": (Archetype.BLOCK, "span"),
    "s": (Archetype.BLOCK, "span"),
    "mark": (Archetype.BLOCK, "span"),
    "abbr": (Archetype.BLOCK, "span"),
    "code": (Archetype.BLOCK, "span"),
    "time": (Archetype.BLOCK, "span"),
    "data": (Archetype.BLOCK, "span"),
    # Tables have no native counterpart.
    "table": (Archetype.BLOCK, "div"),
    "thead": (Archetype.BLOCK, "div"),
    "tbody": (Archetype.BLOCK, "div"),
    "tfoot": (Archetype.BLOCK, "div"),
    "tr": (Archetype.BLOCK, "div"),
    "th": (Archetype.BLOCK, "div"),
    "td": (Archetype.BLOCK, "div"),
    "pre": (Archetype.BLOCK, "div"),
    "hr": (Archetype.BLOCK, "div"),
    "details": (Archetype.BLOCK, "div"),
    "summary": (Archetype.BLOCK, "div"),
    "dialog": (Archetype.BLOCK, "div"),
}
_TAG_TABLE.update({f"h{level}": (Archetype.HEADING, f"h{level}") for level in range(1, 7)})

# Default tag for each archetype when it is chosen by hint.
_ARCHETYPE_TAGS: dict[Archetype, str] = {
    Archetype.BLOCK: "div",
    Archetype.SECTION: "section",
    Archetype.HEADING: "h2",
    Archetype.PARAGRAPH: "p",
    Archetype.LINK: "a",
    Archetype.IMAGE: "img",
    Archetype.VIDEO: "video",
    Archetype.LIST: "ul",
    Archetype.LIST_ITEM: "li",
    Archetype.HTML_EMBED: "div",
}

_HINTS = {a.value: a for a in _ARCHETYPE_TAGS}


def map_element(tag: str, hint: str | None = None) -> ElementMapping:
    """Map *tag* to an :class:`ElementMapping`; never fails.

    A *hint* naming an archetype (``"Section"``, ``"Heading"`` ...) wins over
    the tag table. Unknown tags become a generic block with the original tag
    as override.
    """
    tag = (tag or "div").lower()
    if hint and hint in _HINTS:
        archetype = _HINTS[hint]
        default = _ARCHETYPE_TAGS[archetype]
        if archetype is Archetype.BLOCK and tag != "div":
            return ElementMapping(archetype, tag, override=tag)
        if archetype is Archetype.HEADING and tag.startswith("h") and tag[1:].isdigit():
            return ElementMapping(archetype, tag, override=tag)
        return ElementMapping(archetype, default, override=None if tag == default else default)
    if tag in _TAG_TABLE:
        archetype, override = _TAG_TABLE[tag]
        return ElementMapping(archetype, override or tag, override=override)
    return ElementMapping(Archetype.BLOCK, tag, override=tag)
