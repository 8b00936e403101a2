"""Style model: native StyleClass objects and raw-CSS EmbedBlocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Variant keys the target format understands. Compound keys are a breakpoint
# followed by a pseudo-class.
BREAKPOINT_KEYS = ("medium", "small", "tiny")
PSEUDO_VARIANT_KEYS = ("hover",)
VARIANT_KEYS = frozenset(
    set(BREAKPOINT_KEYS)
    | set(PSEUDO_VARIANT_KEYS)
    | {f"{bp}_{pseudo}" for bp in BREAKPOINT_KEYS for pseudo in PSEUDO_VARIANT_KEYS}
)


def declarations_to_text(declarations: dict[str, str]) -> str:
    """Flatten an ordered property map into ``prop:value;prop:value`` text."""
    return ";".join(f"{prop}:{value}" for prop, value in declarations.items())


def text_to_declarations(text: str) -> dict[str, str]:
    """Inverse of :func:`declarations_to_text` for already-flattened text."""
    result: dict[str, str] = {}
    for part in text.split(";"):
        prop, sep, value = part.partition(":")
        if sep and prop.strip():
            result[prop.strip()] = value.strip()
    return result


@dataclass
class StyleClass:
    """A target-format class style built from one CSS class selector.

    ``base`` and the per-variant maps keep declarations in first-seen order;
    a later declaration of the same property overwrites the value in place.
    """

    name: str
    namespace: str = ""
    combinator: str = ""
    base: dict[str, str] = field(default_factory=dict)
    variant_declarations: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def id(self) -> str:
        # Nodes reference styles by id; the class name is unique per run.
        return self.name

    @property
    def native_declaration_text(self) -> str:
        return declarations_to_text(self.base)

    @property
    def variants(self) -> dict[str, str]:
        return {
            key: declarations_to_text(decls)
            for key, decls in self.variant_declarations.items()
            if decls
        }

    def merge(self, declarations: dict[str, str], variant: str | None = None) -> None:
        """Merge declarations into the base or into *variant*."""
        if variant is None:
            target = self.base
        else:
            target = self.variant_declarations.setdefault(variant, {})
        target.update(declarations)

    def is_empty(self) -> bool:
        return not self.base and not any(self.variant_declarations.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "fake": False,
            "type": "class",
            "name": self.name,
            "namespace": self.namespace,
            "comb": self.combinator,
            "styleLess": self.native_declaration_text,
            "variants": {
                key: {"styleLess": text} for key, text in self.variants.items()
            },
            "children": [],
        }


@dataclass(frozen=True)
class EmbedBlock:
    """Raw CSS for one selector (or at-rule) that must go to the escape hatch.

    ``css`` is a complete standalone rule; ``media_condition`` is applied as
    an ``@media`` wrapper when the embed text is assembled. ``owner`` is the
    class name the selector targets, when there is one.
    """

    key: str
    css: str
    media_condition: str | None = None
    owner: str | None = None
    reason: str = ""
