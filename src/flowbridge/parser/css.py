"""CSS rule parser built on tinycss2.

Turns a stylesheet into a flat, ordered list of :class:`CssRule` objects:

    .hero { color: red; }                 -> CssRule(".hero", color:red)
    .btn:hover { opacity: .8 }            -> CssRule(".btn", pseudo="hover")
    .hero::before { content: "" }         -> CssRule(".hero", pseudo="::before")
    @media (max-width: 768px) { .a {} }   -> CssRule(".a", media_condition="(max-width: 768px)")
    @keyframes spin { ... }               -> CssRule("@keyframes spin", raw="@keyframes spin{...}")

tinycss2 does the tokenizing and error recovery; this module maps its rule
nodes onto :class:`CssRule`. Nothing is dropped silently: fragments that
cannot be parsed produce a warning on the returned :class:`ParsedStylesheet`.
"""

from __future__ import annotations

import re

import tinycss2

from flowbridge.model.css import (
    LEGACY_PSEUDO_ELEMENTS,
    CssRule,
    Declaration,
    ParsedStylesheet,
)

__all__ = ["parse_stylesheet", "parse_declarations", "serialize_rules", "split_pseudo"]

_WS_RE = re.compile(r"\s+")
_COMBINATORS = (">", "+", "~")


def _normalize_ws(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _text(nodes) -> str:
    return _normalize_ws(tinycss2.serialize(nodes))


def _is_stray_brace(token) -> bool:
    if token.type == "error":
        return token.kind == "}"
    return token == "}"


def _declarations(nodes, warnings: list[str] | None) -> tuple[Declaration, ...]:
    declarations: list[Declaration] = []
    for node in nodes:
        if node.type == "declaration":
            custom = node.name.startswith("--")
            prop = node.name if custom else node.lower_name
            value = tinycss2.serialize(node.value).strip()
            if node.important:
                value = f"{value} !important"
            if not value and not custom:
                if warnings is not None:
                    warnings.append(f"Declaration without value skipped: {prop!r}")
                continue
            declarations.append(Declaration(property=prop, value=value))
        elif warnings is not None:
            detail = node.message if node.type == "error" else _text([node])
            warnings.append(
                f"Malformed declaration skipped at line {node.source_line}: {detail}"
            )
    return tuple(declarations)


def parse_declarations(body: str, warnings: list[str] | None = None) -> tuple[Declaration, ...]:
    """Parse the body of a rule block into ordered declarations."""
    nodes = tinycss2.parse_blocks_contents(body, skip_comments=True, skip_whitespace=True)
    return _declarations(nodes, warnings)


def split_pseudo(selector: str) -> tuple[str, str | None]:
    """Split a single trailing pseudo-class/pseudo-element off *selector*.

    Returns ``(base, pseudo)``. Pseudo-classes come back bare (``"hover"``),
    pseudo-elements with their double colon (``"::before"``). Selectors with
    more than one pseudo, or a pseudo that is not at the end of the last
    compound, are returned whole with ``pseudo=None``.
    """
    selector = _normalize_ws(selector)
    tokens = tinycss2.parse_component_value_list(selector)
    # Columns are 1-based and the selector is a single line.
    colons = [t.source_column - 1 for t in tokens if t == ":"]
    if not colons:
        return selector, None
    first = colons[0]
    base = selector[:first]
    if not base or base.endswith((" ",) + _COMBINATORS):
        return selector, None
    suffix = selector[first:]
    # "::x" counts as one pseudo even though it has two colons.
    pseudo_count = len(colons) - (1 if suffix.startswith("::") else 0)
    if pseudo_count != 1:
        return selector, None
    tail = [t for t in tokens if t.source_column - 1 > first]
    if any(t.type == "whitespace" or t in _COMBINATORS for t in tail):
        return selector, None
    if suffix.startswith("::"):
        return base, suffix
    name = suffix[1:]
    if name.lower() in LEGACY_PSEUDO_ELEMENTS:
        return base, f"::{name.lower()}"
    return base, name


def _split_selector_list(prelude) -> list[str]:
    parts: list[list] = [[]]
    for token in prelude:
        if token == ",":
            parts.append([])
        else:
            parts[-1].append(token)
    return [text for text in (_text(part) for part in parts) if text]


class _RuleCollector:
    """Maps tinycss2 rule nodes (from a stylesheet or a media block) to rules."""

    def __init__(self) -> None:
        self.rules: list[CssRule] = []
        self.warnings: list[str] = []

    def collect(self, nodes, media: str | None = None) -> None:
        for node in nodes:
            if node.type == "qualified-rule":
                self._qualified(node, media)
            elif node.type == "at-rule":
                self._at_rule(node, media)
            elif node.type == "error":
                self.warnings.append(
                    f"Text ignored at line {node.source_line}: {node.message}"
                )

    def _prelude(self, prelude) -> list:
        """Drop stray ``}`` and ``;`` fragments that tinycss2 folds into a prelude."""
        kept: list = []
        for token in prelude:
            if _is_stray_brace(token):
                fragment = _text(kept)
                self.warnings.append(
                    f"Unexpected '}}' at line {token.source_line}"
                    + (f" after {fragment!r}" if fragment else "")
                )
                kept = []
            elif token == ";":
                fragment = _text(kept)
                if fragment:
                    self.warnings.append(f"Text outside any rule ignored: {fragment!r}")
                kept = []
            else:
                kept.append(token)
        return kept

    def _qualified(self, node, media: str | None) -> None:
        prelude = self._prelude(node.prelude)
        header = _text(prelude)
        if not header:
            self.warnings.append(f"Block without selector at line {node.source_line} ignored")
            return
        line = next((t.source_line for t in prelude if t.type != "whitespace"), node.source_line)
        if any(t.type == "{} block" for t in node.content):
            # Nested rules are not flattened; keep the block whole.
            self.warnings.append(f"Nested rule block kept verbatim: {header!r}")
            self.rules.append(
                CssRule(
                    selector=header,
                    media_condition=media,
                    raw=f"{header}{{{tinycss2.serialize(node.content).strip()}}}",
                    line=line,
                )
            )
            return
        contents = tinycss2.parse_blocks_contents(
            node.content, skip_comments=True, skip_whitespace=True
        )
        declarations = _declarations(contents, self.warnings)
        for part in _split_selector_list(prelude):
            base, pseudo = split_pseudo(part)
            self.rules.append(
                CssRule(
                    selector=base,
                    declarations=declarations,
                    media_condition=media,
                    pseudo=pseudo,
                    line=line,
                )
            )

    def _at_rule(self, node, media: str | None) -> None:
        keyword = f"@{node.at_keyword}"
        if node.content is None:
            statement = _normalize_ws(f"{keyword} {tinycss2.serialize(node.prelude)}")
            self.rules.append(
                CssRule(
                    selector=keyword,
                    media_condition=media,
                    raw=f"{statement};",
                    line=node.source_line,
                )
            )
            return
        condition = _text(node.prelude)
        if node.lower_at_keyword == "media" and media is None:
            nested = tinycss2.parse_rule_list(
                node.content, skip_comments=True, skip_whitespace=True
            )
            self.collect(nested, media=condition)
            return
        header = f"{keyword} {condition}" if condition else keyword
        self.rules.append(
            CssRule(
                selector=header,
                media_condition=media,
                raw=f"{header}{{{tinycss2.serialize(node.content).strip()}}}",
                line=node.source_line,
            )
        )


def _wrap_media(condition: str | None, parts: list[str]) -> str:
    body = "\n".join(parts)
    return f"@media {condition} {{\n{body}\n}}"


def serialize_rules(rules: list[CssRule]) -> str:
    """Render rules back to CSS, re-wrapping consecutive media-scoped rules."""
    out: list[str] = []
    media: str | None = None
    group: list[str] = []
    for rule in rules:
        if rule.media_condition != media and group:
            out.append(_wrap_media(media, group))
            group = []
        media = rule.media_condition
        if media is None:
            out.append(rule.to_css())
        else:
            group.append(rule.to_css())
    if group:
        out.append(_wrap_media(media, group))
    return "\n".join(out)


def parse_stylesheet(source: str) -> ParsedStylesheet:
    """Parse a CSS string into a :class:`ParsedStylesheet`.

    Returns every rule in source order; rules inside ``@media`` blocks carry
    the block's condition. Never raises on malformed input.
    """
    collector = _RuleCollector()
    nodes = tinycss2.parse_stylesheet(source or "", skip_comments=True, skip_whitespace=True)
    collector.collect(nodes)
    return ParsedStylesheet(rules=collector.rules, warnings=collector.warnings)
