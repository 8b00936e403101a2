"""Media-condition classification and breakpoint snapping.

Target breakpoints (fixed):

    desktop  (base, no suffix)
    medium   <= 991px
    small    <= 767px
    tiny     <= 479px

A plain ``max-width`` condition is snapped to the smallest bucket that still
contains it; anything wider than 991px is treated as desktop.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = ["BREAKPOINTS", "MediaDecision", "classify_media", "snap_max_width"]

# (variant key, max-width in px), narrowest first.
BREAKPOINTS: tuple[tuple[str, int], ...] = (
    ("tiny", 479),
    ("small", 767),
    ("medium", 991),
)

_MAX_WIDTH_RE = re.compile(
    r"^\(\s*max-width\s*:\s*(\d+(?:\.\d+)?)(px|em|rem)?\s*\)$",
    re.IGNORECASE,
)
# Media types that do not restrict a plain width query.
_PREFIX_RE = re.compile(r"^(?:only\s+)?(?:screen|all)\s+and\s+", re.IGNORECASE)

_PX_PER_EM = 16


@dataclass(frozen=True)
class MediaDecision:
    """How a rule's media condition maps onto the target format.

    ``kind`` is ``"base"`` (desktop), ``"variant"`` (``key`` names the
    breakpoint) or ``"embed"`` (not expressible natively).
    """

    kind: str
    key: str | None = None
    width: float | None = None
    snapped: bool = False
    reason: str = ""


def snap_max_width(width: float) -> str | None:
    """Return the breakpoint key for a ``max-width`` threshold, or None for desktop."""
    for key, limit in BREAKPOINTS:
        if width <= limit:
            return key
    return None


def classify_media(condition: str | None) -> MediaDecision:
    """Classify a media condition string (the text after ``@media``)."""
    if not condition:
        return MediaDecision(kind="base")
    text = " ".join(condition.split())
    text = _PREFIX_RE.sub("", text)
    match = _MAX_WIDTH_RE.match(text)
    if not match:
        return MediaDecision(
            kind="embed", reason=f"media condition not expressible natively: {condition}"
        )
    width = float(match.group(1))
    unit = (match.group(2) or "px").lower()
    if unit in ("em", "rem"):
        width *= _PX_PER_EM
    key = snap_max_width(width)
    if key is None:
        return MediaDecision(kind="base", width=width, snapped=True)
    exact = dict(BREAKPOINTS)[key]
    return MediaDecision(kind="variant", key=key, width=width, snapped=width != exact)
