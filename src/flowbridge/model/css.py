"""CSS model: CssRule and Declaration dataclasses produced by the rule parser."""

from __future__ import annotations

from dataclasses import dataclass, field

# Pseudo-elements written with a single colon for legacy reasons.
LEGACY_PSEUDO_ELEMENTS = frozenset({"before", "after", "first-letter", "first-line"})


@dataclass(frozen=True)
class Declaration:
    """A single ``property: value`` pair, value kept exactly as written."""

    property: str
    value: str

    def __str__(self) -> str:
        return f"{self.property}:{self.value}"


@dataclass(frozen=True)
class CssRule:
    """A flat CSS rule.

    ``selector`` excludes the pseudo suffix when one was split off into
    ``pseudo`` (``"hover"`` for pseudo-classes, ``"::before"`` for
    pseudo-elements). At-rules that are carried verbatim (``@keyframes``,
    ``@font-face`` ...) have a selector starting with ``@`` and their whole
    block text in ``raw``.
    """

    selector: str
    declarations: tuple[Declaration, ...] = ()
    media_condition: str | None = None
    pseudo: str | None = None
    raw: str | None = None
    line: int = 0

    @property
    def is_at_rule(self) -> bool:
        return self.selector.startswith("@")

    @property
    def is_pseudo_element(self) -> bool:
        if not self.pseudo:
            return False
        if self.pseudo.startswith("::"):
            return True
        return self.pseudo.lstrip(":") in LEGACY_PSEUDO_ELEMENTS

    @property
    def full_selector(self) -> str:
        """Selector with its pseudo suffix re-attached."""
        if not self.pseudo:
            return self.selector
        if self.pseudo.startswith(":"):
            return f"{self.selector}{self.pseudo}"
        return f"{self.selector}:{self.pseudo}"

    def declaration_text(self) -> str:
        return ";".join(str(d) for d in self.declarations)

    def to_css(self) -> str:
        """Render the rule back to standalone CSS (without its media wrapper)."""
        if self.raw is not None:
            return self.raw
        return f"{self.full_selector}{{{self.declaration_text()}}}"


@dataclass(frozen=True)
class ParsedStylesheet:
    """Result of parsing one CSS string: rules in source order plus parse warnings."""

    rules: list[CssRule] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
