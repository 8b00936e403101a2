"""Split minified embed CSS into pieces that fit one embed node."""

from __future__ import annotations

import tinycss2

__all__ = ["DEFAULT_CHUNK_SIZE", "split_top_level_rules", "chunk_css"]

# The target format rejects embeds above 50,000 characters; leave headroom
# for the <style> wrapper.
DEFAULT_CHUNK_SIZE = 40_000


def split_top_level_rules(css: str) -> list[str]:
    """Return the top-level statements and blocks of *css*, in order."""
    nodes = tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True)
    pieces = (tinycss2.serialize([node]).strip() for node in nodes if node.type != "error")
    return [piece for piece in pieces if piece]


def chunk_css(css: str, max_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Group top-level rules greedily into chunks of at most *max_size* characters.

    A single rule longer than *max_size* becomes a chunk of its own; rules are
    never cut in half.
    """
    if not css:
        return []
    if len(css) <= max_size:
        return [css]
    chunks: list[str] = []
    current = ""
    for rule in split_top_level_rules(css):
        if current and len(current) + len(rule) > max_size:
            chunks.append(current)
            current = ""
        current += rule
    if current:
        chunks.append(current)
    return chunks
