"""Duplicate-class resolver.

Drops incoming styles whose names already exist in the destination project
or were emitted earlier in the same run. First occurrence wins; drops are
expected when re-importing overlapping components, so they are logged rather
than reported as warnings.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from flowbridge.model.style import StyleClass

logger = logging.getLogger(__name__)

__all__ = ["DuplicateClassResolver", "filter_duplicates"]


class DuplicateClassResolver:
    """Stateful filter for one conversion run."""

    def __init__(self, existing_names: Iterable[str] = ()) -> None:
        self.existing = frozenset(existing_names)
        self._emitted: set[str] = set()
        self.dropped: list[str] = []

    def filter(self, styles: Iterable[StyleClass]) -> list[StyleClass]:
        kept: list[StyleClass] = []
        for style in styles:
            if style.name in self.existing:
                logger.info("Dropping style %r: already exists in the project", style.name)
                self.dropped.append(style.name)
                continue
            if style.name in self._emitted:
                logger.info("Dropping style %r: already emitted in this run", style.name)
                self.dropped.append(style.name)
                continue
            self._emitted.add(style.name)
            kept.append(style)
        return kept

    @property
    def emitted(self) -> frozenset[str]:
        return frozenset(self._emitted)


def filter_duplicates(
    styles: Iterable[StyleClass], existing_names: Iterable[str]
) -> list[StyleClass]:
    """One-shot form of :meth:`DuplicateClassResolver.filter`."""
    return DuplicateClassResolver(existing_names).filter(styles)
