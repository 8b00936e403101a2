"""CSS minifier for embed blocks.

Works on tinycss2 component values: comments are removed, whitespace is
collapsed and dropped next to structural delimiters, and the trailing
semicolon before ``}`` goes away. String literals are copied verbatim.
Whitespace inside ``calc()``/``clamp()``/``min()``/``max()`` is only
collapsed, never removed, since some parsers need it there. The space before
``:`` is kept in selectors (``a :hover`` differs from ``a:hover``) and dropped
inside declaration blocks.

Minifying already-minified CSS returns it unchanged.

    >>> minify(".hero::before {\\n  content: \\"\\";\\n  background: rgba(0, 0, 0, 0.5);\\n}")
    '.hero::before{content:"";background:rgba(0,0,0,0.5)}'
"""

from __future__ import annotations

from dataclasses import dataclass

import tinycss2
from tinycss2.serializer import serialize_identifier

__all__ = ["MinificationStats", "minify", "minify_with_stats"]

PRESERVE_FUNCTIONS = frozenset({"calc", "clamp", "min", "max", "-webkit-calc", "-moz-calc"})

# No whitespace is needed after these characters...
_DROP_AFTER = frozenset("{};:,(")
# ...or before these.
_DROP_BEFORE = frozenset("{};,)")

_BRACKETS = {"() block": ("(", ")"), "[] block": ("[", "]"), "{} block": ("{", "}")}


@dataclass(frozen=True)
class MinificationStats:
    original_size: int
    minified_size: int

    @property
    def reduction(self) -> int:
        return self.original_size - self.minified_size

    @property
    def reduction_percent(self) -> int:
        if not self.original_size:
            return 0
        return round((1 - self.minified_size / self.original_size) * 100)


def _holds_declarations(content) -> bool:
    return not any(node.type == "{} block" for node in content)


def _minify_nodes(nodes, *, preserve: bool = False, declarations: bool = False) -> str:
    out: list[str] = []
    pending_space = False
    for node in nodes:
        if node.type in ("whitespace", "comment"):
            pending_space = True
            continue
        text = _minify_node(node, preserve=preserve)
        if pending_space and out:
            prev = out[-1][-1]
            first = text[:1]
            drop = prev in _DROP_AFTER or first in _DROP_BEFORE
            if declarations and first == ":":
                drop = True
            if preserve or not drop:
                out.append(" ")
        pending_space = False
        out.append(text)
    return "".join(out)


def _minify_node(node, *, preserve: bool) -> str:
    if node.type == "function":
        inner_preserve = preserve or node.lower_name in PRESERVE_FUNCTIONS
        args = _minify_nodes(node.arguments, preserve=inner_preserve)
        return f"{serialize_identifier(node.name)}({args})"
    if node.type in _BRACKETS:
        opener, closer = _BRACKETS[node.type]
        if node.type == "{} block":
            body = _minify_nodes(node.content, declarations=_holds_declarations(node.content))
            if body.endswith(";"):
                body = body[:-1]
        else:
            body = _minify_nodes(node.content, preserve=preserve)
        return f"{opener}{body}{closer}"
    return node.serialize()


def minify(css: str) -> str:
    """Return a compact but functionally identical version of *css*."""
    if not css or not css.strip():
        return ""
    nodes = tinycss2.parse_component_value_list(css, skip_comments=False)
    return _minify_nodes(nodes).strip()


def _byte_size(text: str) -> int:
    return len(text.encode("utf-8"))


def minify_with_stats(css: str) -> tuple[str, MinificationStats]:
    """Minify *css* and report the size reduction in UTF-8 bytes."""
    minified = minify(css)
    return minified, MinificationStats(
        original_size=_byte_size(css or ""),
        minified_size=_byte_size(minified),
    )
