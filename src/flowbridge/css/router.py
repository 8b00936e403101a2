"""Style router: decide, rule by rule, between native styles and the embed.

Decision policy, first match wins:

1. at-rules and verbatim blocks                      -> embed
2. global selectors (``:root``, ``html``, ``body``)  -> embed (and variables)
3. pseudo-elements (``::before`` ...)                -> embed
4. anything but a single ``.class`` selector         -> embed
5. pseudo-classes other than ``:hover``              -> embed
6. media conditions that are not a plain max-width   -> embed
7. otherwise                                         -> native base or variant

Native rules are further split per declaration: supported properties are
resolved, normalized and merged into the StyleClass; unsupported ones go to
an embed block for the same selector; ``transition``/``animation`` are
stripped (and kept in the embed only when the class already has embed
output).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from flowbridge.css.breakpoints import classify_media
from flowbridge.css.chunker import chunk_css
from flowbridge.css.gradients import normalize_gradients
from flowbridge.css.minifier import minify
from flowbridge.css.variables import ROOT_SELECTORS, VariableTable
from flowbridge.model.context import ConversionContext
from flowbridge.model.css import CssRule, Declaration
from flowbridge.model.result import SizeStats
from flowbridge.model.style import EmbedBlock, StyleClass
from flowbridge.validation.rules import EMBED_CHAR_LIMIT

logger = logging.getLogger(__name__)

__all__ = [
    "SUPPORTED_PROPERTIES",
    "EmbedAssembly",
    "RouteDecision",
    "RoutingResult",
    "StyleRouter",
    "assemble_embed",
    "is_supported_property",
]

SUPPORTED_PROPERTIES = frozenset({
    # layout
    "display", "flex", "flex-direction", "flex-wrap", "flex-flow", "flex-grow",
    "flex-shrink", "flex-basis", "justify-content", "align-items",
    "align-content", "align-self", "order", "gap", "row-gap", "column-gap",
    "grid-template-columns", "grid-template-rows", "grid-template-areas",
    "grid-template", "grid-column", "grid-row", "grid-area",
    "grid-column-start", "grid-column-end", "grid-row-start", "grid-row-end",
    "grid-auto-flow", "grid-auto-columns", "grid-auto-rows", "place-items",
    "place-content", "place-self", "justify-items", "justify-self",
    # sizing
    "width", "height", "min-width", "min-height", "max-width", "max-height",
    "aspect-ratio", "box-sizing",
    # spacing
    "padding", "padding-top", "padding-right", "padding-bottom", "padding-left",
    "margin", "margin-top", "margin-right", "margin-bottom", "margin-left",
    # position
    "position", "top", "right", "bottom", "left", "inset", "z-index", "float",
    "clear",
    # background
    "background", "background-color", "background-image", "background-size",
    "background-position", "background-repeat", "background-attachment",
    "background-clip", "background-origin", "-webkit-background-clip",
    "-webkit-text-fill-color",
    # typography
    "color", "font", "font-family", "font-size", "font-weight", "font-style",
    "line-height", "letter-spacing", "text-align", "text-decoration",
    "text-transform", "text-indent", "text-shadow", "text-overflow",
    "white-space", "word-break", "word-spacing", "overflow-wrap",
    "vertical-align",
    # borders
    "border", "border-top", "border-right", "border-bottom", "border-left",
    "border-width", "border-style", "border-color", "border-radius",
    "border-top-left-radius", "border-top-right-radius",
    "border-bottom-left-radius", "border-bottom-right-radius",
    "border-top-width", "border-right-width", "border-bottom-width",
    "border-left-width", "border-top-color", "border-right-color",
    "border-bottom-color", "border-left-color", "border-top-style",
    "border-right-style", "border-bottom-style", "border-left-style",
    "outline", "outline-offset", "outline-color", "outline-width",
    "outline-style",
    # effects
    "opacity", "box-shadow", "filter", "backdrop-filter", "mix-blend-mode",
    "transform", "transform-origin", "transform-style", "perspective",
    "overflow", "overflow-x", "overflow-y", "visibility", "cursor",
    "pointer-events", "user-select", "object-fit", "object-position",
    "list-style", "list-style-type", "list-style-position", "list-style-image",
})

# Properties the target format cannot express declaratively.
_MOTION_PREFIXES = ("transition", "animation")

# A lone class selector: ".card", ".btn-primary", ".w--current".
_CLASS_SELECTOR_RE = re.compile(r"^\.(-?[_a-zA-Z][_a-zA-Z0-9-]*)$")
_OWNER_RE = re.compile(r"^\.(-?[_a-zA-Z][_a-zA-Z0-9-]*)")
_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)
# Each chunk is wrapped in a style element inside its embed node.
_STYLE_WRAPPER = "<style></style>"


def is_supported_property(prop: str) -> bool:
    return prop.lower() in SUPPORTED_PROPERTIES


def _is_motion(prop: str) -> bool:
    return prop.lower().startswith(_MOTION_PREFIXES)


def _owner_of(selector: str) -> str | None:
    match = _OWNER_RE.match(selector.strip())
    return match.group(1) if match else None


@dataclass(frozen=True)
class RouteDecision:
    """Where one rule went and why (used by ``flowbridge inspect``)."""

    selector: str
    target: str  # "native" | "embed" | "split"
    reason: str = ""
    variant: str | None = None


@dataclass
class RoutingResult:
    native: list[StyleClass] = field(default_factory=list)
    embed: list[EmbedBlock] = field(default_factory=list)
    decisions: list[RouteDecision] = field(default_factory=list)

    def style(self, name: str) -> StyleClass | None:
        for style in self.native:
            if style.name == name:
                return style
        return None


class StyleRouter:
    """Classifies parsed rules for one section of a conversion run."""

    def __init__(self, table: VariableTable, context: ConversionContext) -> None:
        self.table = table
        self.context = context
        self._styles: dict[str, StyleClass] = {}
        self._embeds: list[EmbedBlock] = []
        self._decisions: list[RouteDecision] = []
        self._motion: list[tuple[str, CssRule, tuple[Declaration, ...]]] = []

    def route(self, rules: Iterable[CssRule]) -> RoutingResult:
        for rule in rules:
            self._route_rule(rule)
        self._preserve_motion()
        return RoutingResult(
            native=list(self._styles.values()),
            embed=list(self._embeds),
            decisions=list(self._decisions),
        )

    # --- per-rule policy -----------------------------------------------------

    def _route_rule(self, rule: CssRule) -> None:
        if rule.raw is not None:
            reason = "at-rule" if rule.is_at_rule else "nested rule block"
            self._to_embed(rule, reason)
            return
        if rule.selector in ROOT_SELECTORS and rule.pseudo is None:
            self._to_embed(rule, "global selector")
            return
        if rule.is_pseudo_element:
            self._to_embed(rule, "pseudo-element", owner=_owner_of(rule.selector))
            return
        match = _CLASS_SELECTOR_RE.match(rule.selector)
        if not match:
            self._to_embed(rule, "complex selector", owner=_owner_of(rule.selector))
            return
        name = match.group(1)
        if rule.pseudo is not None and rule.pseudo != "hover":
            self._to_embed(rule, f"unsupported pseudo-class :{rule.pseudo}", owner=name)
            return
        decision = classify_media(rule.media_condition)
        if decision.kind == "embed":
            self._to_embed(rule, decision.reason, owner=name)
            return
        if decision.snapped:
            target = decision.key or "desktop"
            self.context.warn(
                "breakpoint-snapped",
                f"@media {rule.media_condition} snapped to {target} breakpoint",
                selector=rule.full_selector,
            )
        variant = decision.key
        if rule.pseudo == "hover":
            variant = f"{variant}_hover" if variant else "hover"
        self._to_native(rule, name, variant)

    def _to_embed(self, rule: CssRule, reason: str, owner: str | None = None) -> None:
        logger.debug("Routing %s to embed: %s", rule.full_selector, reason)
        self._embeds.append(
            EmbedBlock(
                key=rule.full_selector,
                css=rule.to_css(),
                media_condition=rule.media_condition,
                owner=owner,
                reason=reason,
            )
        )
        self._decisions.append(RouteDecision(rule.full_selector, "embed", reason))

    def _to_native(self, rule: CssRule, name: str, variant: str | None) -> None:
        native: dict[str, str] = {}
        unsupported: list[Declaration] = []
        motion: list[Declaration] = []
        for decl in rule.declarations:
            if _is_motion(decl.property):
                motion.append(decl)
            elif is_supported_property(decl.property):
                native[decl.property] = self._native_value(decl, rule)
            else:
                unsupported.append(decl)

        style = self._styles.setdefault(name, StyleClass(name=name))
        if native:
            style.merge(native, variant)
        if unsupported:
            body = ";".join(str(d) for d in unsupported)
            self._embeds.append(
                EmbedBlock(
                    key=rule.full_selector,
                    css=f"{rule.full_selector}{{{body}}}",
                    media_condition=rule.media_condition,
                    owner=name,
                    reason="unsupported properties",
                )
            )
        if motion:
            self._motion.append((name, rule, tuple(motion)))
            self.context.warn(
                "motion-stripped",
                "transition/animation declarations are not supported natively: "
                + ", ".join(d.property for d in motion),
                selector=rule.full_selector,
            )
        target = "split" if unsupported else "native"
        logger.debug("Routing %s to %s (variant=%s)", rule.full_selector, target, variant)
        self._decisions.append(
            RouteDecision(rule.full_selector, target, "class selector", variant=variant)
        )

    def _native_value(self, decl: Declaration, rule: CssRule) -> str:
        config = self.context.config
        value = decl.value
        if config.strip_important and _IMPORTANT_RE.search(value):
            value = _IMPORTANT_RE.sub("", value)
            self.context.info(
                "important-stripped",
                f"!important removed from {decl.property}",
                selector=rule.full_selector,
            )
        resolution = self.table.resolve(value, max_passes=config.max_variable_passes)
        if resolution.exceeded:
            self.context.warn(
                "variable-cycle",
                f"Variable resolution for {decl.property} stopped after "
                f"{resolution.passes} passes: {resolution.value}",
                selector=rule.full_selector,
            )
        for name in resolution.unresolved:
            self.context.warn(
                "unresolved-variable",
                f"Unresolved variable {name} in {decl.property}",
                selector=rule.full_selector,
            )
        normalized = normalize_gradients(resolution.value)
        for message in normalized.warnings:
            self.context.warn("gradient-support", message, selector=rule.full_selector)
        return normalized.value

    def _preserve_motion(self) -> None:
        owners = {block.owner for block in self._embeds if block.owner}
        for name, rule, declarations in self._motion:
            if name not in owners:
                continue
            body = ";".join(str(d) for d in declarations)
            self._embeds.append(
                EmbedBlock(
                    key=rule.full_selector,
                    css=f"{rule.full_selector}{{{body}}}",
                    media_condition=rule.media_condition,
                    owner=name,
                    reason="transition/animation",
                )
            )


# --- embed assembly ----------------------------------------------------------


@dataclass(frozen=True)
class EmbedAssembly:
    """Minified embed CSS for one section, split into node-sized chunks."""

    original: str
    minified: str
    chunks: tuple[str, ...] = ()
    size_stats: SizeStats = field(default_factory=SizeStats)


def _render_groups(blocks: Sequence[EmbedBlock]) -> str:
    groups: list[tuple[str | None, list[str]]] = []
    for block in blocks:
        if groups and groups[-1][0] == block.media_condition:
            groups[-1][1].append(block.css)
        else:
            groups.append((block.media_condition, [block.css]))
    rendered = []
    for media, parts in groups:
        body = "\n".join(parts)
        rendered.append(f"@media {media} {{\n{body}\n}}" if media else body)
    return "\n".join(rendered)


def assemble_embed(blocks: Sequence[EmbedBlock], context: ConversionContext) -> EmbedAssembly:
    """Concatenate, minify and chunk a section's embed blocks.

    Rules identical to ones already emitted earlier in the run are skipped.
    Size diagnostics are recorded on *context*.
    """
    config = context.config
    fresh: list[EmbedBlock] = []
    for block in blocks:
        signature = f"{block.media_condition or ''}|{minify(block.css)}"
        if signature in context.emitted_embeds:
            logger.debug("Skipping embed rule already emitted: %s", block.key)
            continue
        context.emitted_embeds.add(signature)
        fresh.append(block)
    if not fresh:
        return EmbedAssembly(original="", minified="")

    original = _render_groups(fresh)
    minified = minify(original)
    chunks = tuple(chunk_css(minified, config.embed_chunk_size))
    for number, chunk in enumerate(chunks, 1):
        length = len(chunk) + len(_STYLE_WRAPPER)
        if length > EMBED_CHAR_LIMIT:
            context.error(
                "embed-size",
                f"Embed chunk {number} is {length} characters, above the "
                f"{EMBED_CHAR_LIMIT}-character embed limit; a single rule is too large to split",
            )
    size = len(minified.encode("utf-8"))
    if size > config.embed_hard_limit:
        context.error(
            "embed-size",
            f"Embedded CSS is {size // 1024}KB, above the {config.embed_hard_limit // 1024}KB "
            "limit; consider moving styles to native classes",
        )
    elif size > config.embed_soft_limit:
        context.warn(
            "embed-size",
            f"Embedded CSS is {size // 1024}KB, above the recommended "
            f"{config.embed_soft_limit // 1024}KB",
        )
    stats = SizeStats(
        original_bytes=len(original.encode("utf-8")),
        minified_bytes=size,
        embed_chunks=len(chunks),
    )
    return EmbedAssembly(original=original, minified=minified, chunks=chunks, size_stats=stats)
