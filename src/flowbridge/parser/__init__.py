"""flowbridge parsers -- CSS rules and HTML structure."""

from flowbridge.parser.css import (
    parse_declarations,
    parse_stylesheet,
    serialize_rules,
    split_pseudo,
)
from flowbridge.parser.errors import ParseError
from flowbridge.parser.html import (
    HtmlDocument,
    HtmlElement,
    HtmlText,
    HtmlTree,
    css_for_classes,
    detect_sections,
    parse_document,
    parse_fragment,
)

__all__ = [
    "ParseError",
    "parse_stylesheet",
    "parse_declarations",
    "serialize_rules",
    "split_pseudo",
    "HtmlDocument",
    "HtmlElement",
    "HtmlText",
    "HtmlTree",
    "css_for_classes",
    "detect_sections",
    "parse_document",
    "parse_fragment",
]
