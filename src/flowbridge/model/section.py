"""Section model: one independently converted unit of input."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SectionInput:
    """HTML and CSS for one section of a multi-part conversion."""

    id: str
    name: str
    html: str
    css: str = ""
