"""CSS custom-property table and ``var()`` resolution."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import tinycss2

from flowbridge.model.css import CssRule

__all__ = ["ROOT_SELECTORS", "Resolution", "VariableTable", "resolve"]

# Selectors whose custom properties apply document-wide.
ROOT_SELECTORS = frozenset({":root", "html", "body", "*", ":host"})

MAX_PASSES = 10


def _var_arguments(arguments) -> tuple[str, str | None]:
    """Split ``var()`` arguments into the property name and the fallback, if any."""
    for index, token in enumerate(arguments):
        if token == ",":
            name = tinycss2.serialize(arguments[:index]).strip()
            return name, tinycss2.serialize(arguments[index + 1 :]).strip()
    return tinycss2.serialize(arguments).strip(), None


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one value.

    ``unresolved`` lists custom-property names that had neither a table entry
    nor a fallback; ``exceeded`` is True when the pass cap was hit, which
    means the definitions are cyclic (or absurdly deep).
    """

    value: str
    unresolved: tuple[str, ...] = ()
    exceeded: bool = False
    passes: int = 0

    @property
    def changed(self) -> bool:
        return self.passes > 0


class VariableTable:
    """Mapping from custom-property name to its last-declared raw value."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    @classmethod
    def from_rules(cls, rules: Iterable[CssRule]) -> VariableTable:
        """Collect custom properties from top-level ``:root``-like blocks.

        Later declarations of the same name shadow earlier ones. Blocks
        scoped by a media condition are ignored.
        """
        values: dict[str, str] = {}
        for rule in rules:
            if rule.media_condition or rule.pseudo or rule.is_at_rule:
                continue
            if rule.selector.strip() not in ROOT_SELECTORS:
                continue
            for decl in rule.declarations:
                if decl.property.startswith("--"):
                    values[decl.property] = decl.value
        return cls(values)

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def items(self) -> list[tuple[str, str]]:
        return list(self._values.items())

    def resolve(self, value: str, max_passes: int = MAX_PASSES) -> Resolution:
        return resolve(value, self, max_passes=max_passes)

    def __repr__(self) -> str:
        return f"VariableTable({len(self._values)} variables)"


def _substitute(nodes, table: VariableTable, unresolved: list[str]) -> tuple[list, int]:
    """Replace ``var()`` calls in *nodes*, descending into other functions and blocks.

    Replacement text is not rescanned; calls it introduces (such as a
    ``var()`` in a fallback) are picked up on the next pass.
    """
    out: list = []
    substitutions = 0
    for node in nodes:
        if node.type == "function" and node.lower_name == "var":
            name, fallback = _var_arguments(node.arguments)
            replacement = table.get(name)
            if replacement is None:
                replacement = fallback
            if replacement is None:
                unresolved.append(name)
                out.append(node)
                continue
            out.extend(tinycss2.parse_component_value_list(replacement.strip()))
            substitutions += 1
            continue
        if node.type == "function":
            node.arguments, count = _substitute(node.arguments, table, unresolved)
            substitutions += count
        elif node.type in ("() block", "[] block", "{} block"):
            node.content, count = _substitute(node.content, table, unresolved)
            substitutions += count
        out.append(node)
    return out, substitutions


def _substitute_once(value: str, table: VariableTable) -> tuple[str, int, list[str]]:
    unresolved: list[str] = []
    nodes = tinycss2.parse_component_value_list(value)
    nodes, substitutions = _substitute(nodes, table, unresolved)
    if not substitutions:
        return value, 0, unresolved
    return tinycss2.serialize(nodes), substitutions, unresolved


def resolve(value: str, table: VariableTable, *, max_passes: int = MAX_PASSES) -> Resolution:
    """Replace every ``var(--name[, fallback])`` in *value*.

    Each pass substitutes the table value, else the fallback; references with
    neither are left untouched. Passes repeat while substitutions happen, up
    to *max_passes*; hitting the cap stops with the partially resolved value.
    """
    if "var(" not in value.lower():
        return Resolution(value=value)
    current = value
    passes = 0
    unresolved: list[str] = []
    while passes < max_passes:
        current, substitutions, unresolved = _substitute_once(current, table)
        if not substitutions:
            break
        passes += 1
    else:
        _, pending, unresolved = _substitute_once(current, table)
        return Resolution(
            value=current,
            unresolved=tuple(dict.fromkeys(unresolved)),
            exceeded=pending > 0,
            passes=passes,
        )
    return Resolution(value=current, unresolved=tuple(dict.fromkeys(unresolved)), passes=passes)
