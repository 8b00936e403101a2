"""HTML structural parser.

Builds a small, library-independent tree of :class:`HtmlElement` and
:class:`HtmlText` nodes from an HTML fragment, using BeautifulSoup with the
standard-library ``html.parser`` backend as the tokenizer. Also handles full
documents (``parse_document``) and splitting a page into sections
(``detect_sections``).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, CData, Comment, Doctype, NavigableString, Tag
from bs4 import Declaration as DoctypeDeclaration
from bs4 import ProcessingInstruction

from flowbridge.model.context import slugify
from flowbridge.model.section import SectionInput
from flowbridge.parser.css import parse_stylesheet, serialize_rules
from flowbridge.parser.errors import ParseError

logger = logging.getLogger(__name__)

__all__ = [
    "DROP_TAGS",
    "RAW_MARKUP_TAGS",
    "SECTION_TAGS",
    "HtmlDocument",
    "HtmlElement",
    "HtmlText",
    "HtmlTree",
    "css_for_classes",
    "detect_sections",
    "parse_document",
    "parse_fragment",
]

# Metadata and code containers: never emitted as nodes.
DROP_TAGS = frozenset({
    "head", "meta", "link", "title", "script", "style", "noscript", "base", "template",
})
# Wrappers replaced by their children.
UNWRAP_TAGS = frozenset({"html", "body"})
# Elements whose outer HTML is kept so they can be emitted verbatim.
RAW_MARKUP_TAGS = frozenset({
    "svg", "canvas", "iframe", "input", "select", "textarea", "video", "picture",
    "audio", "object", "embed",
})
SECTION_TAGS = frozenset({"section", "header", "footer", "nav", "main", "article", "aside", "div"})
# Tags that mark a top-level wrapper around several real sections.
_SEMANTIC_SECTION_TAGS = frozenset({"section", "header", "footer", "nav", "article", "aside"})

MAX_DEPTH = 200

_WS_RE = re.compile(r"\s+")
_SKIPPED_STRINGS = (Comment, Doctype, CData, ProcessingInstruction, DoctypeDeclaration)


@dataclass
class HtmlText:
    text: str


@dataclass
class HtmlElement:
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[HtmlElement | HtmlText] = field(default_factory=list)
    markup: str | None = None
    line: int | None = None

    @property
    def classes(self) -> list[str]:
        seen: dict[str, None] = {}
        for name in self.attrs.get("class", "").split():
            seen.setdefault(name)
        return list(seen)

    @property
    def element_children(self) -> list[HtmlElement]:
        return [c for c in self.children if isinstance(c, HtmlElement)]

    @property
    def is_text_leaf(self) -> bool:
        """True when the only child is a single text node."""
        return len(self.children) == 1 and isinstance(self.children[0], HtmlText)

    def text_content(self) -> str:
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, HtmlText):
                parts.append(child.text)
            else:
                parts.append(child.text_content())
        return _WS_RE.sub(" ", "".join(parts)).strip()


HtmlNode = HtmlElement | HtmlText


@dataclass
class HtmlTree:
    """Top-level nodes of a parsed fragment, in document order."""

    children: list[HtmlNode] = field(default_factory=list)

    @property
    def elements(self) -> list[HtmlElement]:
        return [c for c in self.children if isinstance(c, HtmlElement)]

    def iter_elements(self) -> Iterator[HtmlElement]:
        """Depth-first, pre-order walk over every element."""
        stack = list(reversed(self.elements))
        while stack:
            element = stack.pop()
            yield element
            stack.extend(reversed(element.element_children))

    def class_names(self) -> list[str]:
        seen: dict[str, None] = {}
        for element in self.iter_elements():
            for name in element.classes:
                seen.setdefault(name)
        return list(seen)

    def is_empty(self) -> bool:
        return not self.children


@dataclass(frozen=True)
class HtmlDocument:
    """A full page split into its renderable body and embedded code."""

    body: str
    css: str = ""
    js: str = ""
    title: str | None = None


def _attr_value(value: object) -> str:
    # bs4 returns multi-valued attributes such as class as lists.
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return "" if value is None else str(value)


def _convert(tag: Tag, depth: int) -> list[HtmlNode]:
    if depth > MAX_DEPTH:
        raise ParseError(
            f"Element nesting deeper than {MAX_DEPTH} levels",
            line=tag.sourceline,
            column=tag.sourcepos,
            tag=tag.name,
        )
    nodes: list[HtmlNode] = []
    for child in tag.children:
        if isinstance(child, _SKIPPED_STRINGS):
            continue
        if isinstance(child, NavigableString):
            text = _WS_RE.sub(" ", str(child))
            if text.strip():
                nodes.append(HtmlText(text))
            continue
        if not isinstance(child, Tag):
            continue
        name = child.name.lower()
        if name in DROP_TAGS:
            continue
        if name in UNWRAP_TAGS:
            nodes.extend(_convert(child, depth + 1))
            continue
        nodes.append(
            HtmlElement(
                tag=name,
                attrs={k.lower(): _attr_value(v) for k, v in child.attrs.items()},
                children=_convert(child, depth + 1),
                markup=str(child) if name in RAW_MARKUP_TAGS else None,
                line=child.sourceline,
            )
        )
    return nodes


def parse_fragment(html: str) -> HtmlTree:
    """Parse an HTML fragment into an :class:`HtmlTree`.

    Comments, doctype and metadata tags are dropped; ``<html>``/``<body>``
    wrappers are replaced by their content; whitespace-only text disappears
    and other whitespace runs collapse to one space.

    Raises:
        ParseError: If the markup nests deeper than ``MAX_DEPTH`` levels.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    return HtmlTree(children=_convert(soup, 0))


def parse_document(html: str) -> HtmlDocument:
    """Separate a full HTML page into body markup, CSS and JavaScript.

    ``<style>`` contents become the CSS, inline ``<script>`` contents (not
    JSON or templates) the JavaScript. The body is the ``<body>`` content
    when there is one, the remaining markup otherwise.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    css = "\n".join(style.get_text() for style in soup.find_all("style")).strip()
    scripts = []
    for script in soup.find_all("script"):
        kind = (script.get("type") or "").lower()
        if script.get("src") or "json" in kind or "template" in kind:
            continue
        code = script.get_text().strip()
        if code:
            scripts.append(code)
    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else None

    for tag in soup.find_all(list(DROP_TAGS)):
        if not tag.decomposed:
            tag.decompose()
    if soup.body is not None:
        body = soup.body.decode_contents()
    else:
        for node in list(soup.contents):
            if isinstance(node, (Doctype, Comment)):
                node.extract()
        body = str(soup)
    return HtmlDocument(body=body.strip(), css=css, js="\n\n".join(scripts), title=title)


def _format_name(value: str) -> str:
    words = re.split(r"[-_\s]+", value.strip())
    return " ".join(w.capitalize() for w in words if w) or "Section"


def css_for_classes(css: str, class_names: list[str]) -> str:
    """Return the rules of *css* relevant to an element set using *class_names*.

    Kept: at-rules, rules without any class in their selector (globals,
    element selectors) and rules that mention one of the classes.
    """
    if not css:
        return ""
    wanted = set(class_names)
    kept = []
    for rule in parse_stylesheet(css).rules:
        if rule.is_at_rule:
            kept.append(rule)
            continue
        mentioned = set(re.findall(r"\.(-?[_a-zA-Z][\w-]*)", rule.selector))
        if not mentioned or mentioned & wanted:
            kept.append(rule)
    return serialize_rules(kept)


def _top_level_tags(container: Tag) -> list[Tag]:
    return [
        c for c in container.children
        if isinstance(c, Tag) and c.name.lower() not in DROP_TAGS
    ]


def detect_sections(html: str, css: str = "") -> list[SectionInput]:
    """Split a page fragment into sections, one per top-level block.

    A lone wrapper around several semantic sections (``<main>`` holding a
    header, sections and a footer, say) is looked through. Stray top-level
    elements join the preceding section. A ``<!-- Name -->`` comment right
    before a block names its section.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    container: Tag = soup.body or soup
    while True:
        top = _top_level_tags(container)
        if container.name in UNWRAP_TAGS and len(top) == 1:
            container = top[0]
            continue
        if len(top) != 1:
            break
        inner = _top_level_tags(top[0])
        semantic = [t for t in inner if t.name.lower() in _SEMANTIC_SECTION_TAGS]
        if len(semantic) < 2:
            break
        container = top[0]

    groups: list[tuple[str | None, list[Tag]]] = []
    pending: list[Tag] = []
    label: str | None = None
    for child in container.children:
        if isinstance(child, Comment):
            label = str(child).strip() or None
            continue
        if not isinstance(child, Tag) or child.name.lower() in DROP_TAGS:
            continue
        if child.name.lower() in SECTION_TAGS:
            groups.append((label, pending + [child]))
            pending = []
            label = None
        elif groups:
            groups[-1][1].append(child)
        else:
            pending.append(child)
    if pending:
        groups.append((label, pending))

    sections: list[SectionInput] = []
    used: set[str] = set()
    for label, tags in groups:
        anchor = next((t for t in tags if t.name.lower() in SECTION_TAGS), tags[0])
        classes = anchor.get("class") or []
        base = (classes[0] if classes else "") or anchor.get("id") or anchor.name
        section_id = slugify(base)
        counter = 1
        while section_id in used:
            counter += 1
            section_id = f"{slugify(base)}-{counter}"
        used.add(section_id)
        markup = "\n".join(str(t) for t in tags)
        tree = parse_fragment(markup)
        sections.append(
            SectionInput(
                id=section_id,
                name=label or _format_name(base),
                html=markup,
                css=css_for_classes(css, tree.class_names()),
            )
        )
    logger.debug("Detected %d section(s)", len(sections))
    return sections
