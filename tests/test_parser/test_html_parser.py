"""Tests for the HTML structural parser, document splitting and section detection."""

import pytest

from flowbridge.parser import (
    HtmlElement,
    HtmlText,
    ParseError,
    css_for_classes,
    detect_sections,
    parse_document,
    parse_fragment,
)


# ---------------------------------------------------------------------------
# parse_fragment
# ---------------------------------------------------------------------------


class TestParseFragment:
    def test_nested_elements(self):
        tree = parse_fragment('<div class="hero"><h1>Hi</h1></div>')
        assert len(tree.elements) == 1
        div = tree.elements[0]
        assert div.tag == "div"
        assert div.classes == ["hero"]
        h1 = div.element_children[0]
        assert h1.tag == "h1"
        assert h1.is_text_leaf
        assert h1.text_content() == "Hi"

    def test_attributes_lowercased(self):
        tree = parse_fragment('<a HREF="/x" Data-Id="7">Go</a>')
        assert tree.elements[0].attrs == {"href": "/x", "data-id": "7"}

    def test_class_attribute_joined_and_deduped(self):
        tree = parse_fragment('<div class="a b a"></div>')
        assert tree.elements[0].attrs["class"] == "a b a"
        assert tree.elements[0].classes == ["a", "b"]

    def test_whitespace_only_text_dropped(self):
        tree = parse_fragment("<div>\n   <p>x</p>\n</div>")
        div = tree.elements[0]
        assert len(div.children) == 1
        assert isinstance(div.children[0], HtmlElement)

    def test_whitespace_collapsed(self):
        tree = parse_fragment("<p>  hello \n\n  world </p>")
        p = tree.elements[0]
        assert p.children == [HtmlText(" hello world ")]
        assert p.text_content() == "hello world"

    def test_comments_and_doctype_dropped(self):
        tree = parse_fragment("<!DOCTYPE html><!-- note --><p>x</p>")
        assert [e.tag for e in tree.elements] == ["p"]
        assert len(tree.children) == 1

    def test_html_and_body_unwrapped(self):
        tree = parse_fragment("<html><body><p>x</p></body></html>")
        assert [e.tag for e in tree.elements] == ["p"]

    def test_metadata_tags_dropped(self):
        tree = parse_fragment("<style>.a{}</style><script>x()</script><p>x</p>")
        assert [e.tag for e in tree.elements] == ["p"]

    def test_raw_markup_kept_for_svg(self):
        tree = parse_fragment('<div><svg viewBox="0 0 1 1"><circle r="1"></circle></svg></div>')
        svg = tree.elements[0].element_children[0]
        assert svg.tag == "svg"
        assert svg.markup.startswith("<svg")
        assert "<circle" in svg.markup

    def test_plain_elements_have_no_markup(self):
        tree = parse_fragment("<p>x</p>")
        assert tree.elements[0].markup is None

    def test_iter_elements_pre_order(self):
        tree = parse_fragment(
            '<div class="a"><p class="b">x</p></div><span class="c">y</span>'
        )
        assert [e.tag for e in tree.iter_elements()] == ["div", "p", "span"]
        assert tree.class_names() == ["a", "b", "c"]

    def test_empty_input(self):
        tree = parse_fragment("")
        assert tree.is_empty()

    def test_source_line_recorded(self):
        tree = parse_fragment("<div>\n<p>x</p>\n</div>")
        assert tree.elements[0].element_children[0].line == 2

    def test_depth_limit(self):
        html = "<div>" * 250 + "</div>" * 250
        with pytest.raises(ParseError) as exc_info:
            parse_fragment(html)
        assert "nesting deeper" in str(exc_info.value)
        assert exc_info.value.line == 1
        assert exc_info.value.tag == "div"
        assert exc_info.value.location.startswith("line 1, column ")


# ---------------------------------------------------------------------------
# parse_document
# ---------------------------------------------------------------------------


FULL_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>Landing</title>
  <meta charset="utf-8">
  <style>.hero { color: red; }</style>
  <script src="https://cdn.example.com/lib.js"></script>
</head>
<body>
  <div class="hero"><h1>Hi</h1></div>
  <script>console.log("ready");</script>
  <script type="application/ld+json">{"@type": "Thing"}</script>
</body>
</html>
"""


class TestParseDocument:
    def test_splits_page(self):
        doc = parse_document(FULL_PAGE)
        assert doc.title == "Landing"
        assert doc.css == ".hero { color: red; }"
        assert doc.js == 'console.log("ready");'

    def test_body_excludes_code(self):
        doc = parse_document(FULL_PAGE)
        assert doc.body.startswith('<div class="hero">')
        assert "<script" not in doc.body
        assert "<style" not in doc.body

    def test_fragment_without_body(self):
        doc = parse_document("<style>.a{color:red}</style><p class=\"a\">x</p>")
        assert doc.body == '<p class="a">x</p>'
        assert doc.css == ".a{color:red}"
        assert doc.js == ""
        assert doc.title is None

    def test_multiple_style_blocks_joined(self):
        doc = parse_document("<style>.a{}</style><style>.b{}</style><p>x</p>")
        assert doc.css == ".a{}\n.b{}"


# ---------------------------------------------------------------------------
# css_for_classes
# ---------------------------------------------------------------------------


class TestCssForClasses:
    def test_keeps_matching_rules(self):
        css = ".a{color:red}.b{color:blue}"
        assert css_for_classes(css, ["a"]) == ".a{color:red}"

    def test_keeps_globals_and_at_rules(self):
        css = ":root{--x:1px}body{margin:0}@keyframes k{to{opacity:0}}.b{color:blue}"
        kept = css_for_classes(css, ["a"])
        assert ":root{--x:1px}" in kept
        assert "body{margin:0}" in kept
        assert "@keyframes k" in kept
        assert ".b" not in kept

    def test_keeps_media_wrapper(self):
        css = "@media (max-width: 600px){.a{color:red}.b{color:blue}}"
        assert css_for_classes(css, ["a"]) == "@media (max-width: 600px) {\n.a{color:red}\n}"

    def test_empty_css(self):
        assert css_for_classes("", ["a"]) == ""


# ---------------------------------------------------------------------------
# detect_sections
# ---------------------------------------------------------------------------


PAGE_BODY = """
<header class="site-header">Logo</header>
<!-- Hero Area -->
<section class="hero"><h1>Hi</h1></section>
<p class="note">stray</p>
<section class="hero">Again</section>
"""

PAGE_CSS = ".site-header{color:red}.hero{padding:0}.note{margin:0}"


class TestDetectSections:
    def test_one_section_per_block(self):
        sections = detect_sections(PAGE_BODY, PAGE_CSS)
        assert [s.id for s in sections] == ["site-header", "hero", "hero-2"]

    def test_comment_names_section(self):
        sections = detect_sections(PAGE_BODY, PAGE_CSS)
        assert [s.name for s in sections] == ["Site Header", "Hero Area", "Hero"]

    def test_stray_element_joins_previous_section(self):
        sections = detect_sections(PAGE_BODY, PAGE_CSS)
        assert 'class="note"' in sections[1].html
        assert 'class="note"' not in sections[2].html

    def test_css_filtered_per_section(self):
        sections = detect_sections(PAGE_BODY, PAGE_CSS)
        assert sections[0].css == ".site-header{color:red}"
        assert sections[1].css == ".hero{padding:0}\n.note{margin:0}"

    def test_looks_through_lone_wrapper(self):
        html = (
            "<main><header>H</header>"
            '<section class="features">F</section>'
            "<footer>Bye</footer></main>"
        )
        sections = detect_sections(html)
        assert [s.id for s in sections] == ["header", "features", "footer"]

    def test_lone_wrapper_without_sections_is_one_section(self):
        sections = detect_sections('<div class="card"><p>a</p><p>b</p></div>')
        assert len(sections) == 1
        assert sections[0].id == "card"
        assert sections[0].name == "Card"

    def test_full_document(self):
        sections = detect_sections(
            "<html><body><nav id='top'>N</nav><section>S</section></body></html>"
        )
        assert [s.id for s in sections] == ["top", "section"]

    def test_leading_inline_elements_grouped(self):
        sections = detect_sections("<span>a</span><section class='x'>b</section>")
        assert len(sections) == 1
        assert sections[0].html.startswith("<span>")
