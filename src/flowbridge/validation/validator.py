"""Document validator: runs all schema rules and reports violations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Callable

from flowbridge.errors import SchemaValidationError
from flowbridge.model.diagnostic import Diagnostic
from flowbridge.model.result import DEFAULT_FORMAT_MARKER
from flowbridge.validation.rules import ALL_RULES, DocumentView

RuleFunc = Callable[[DocumentView], list[Diagnostic]]


@dataclass(frozen=True)
class ValidationReport:
    """``ok`` is False when any ERROR-severity violation was found."""

    ok: bool
    violations: list[Diagnostic] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True}
        return {"ok": False, "violations": [v.to_dict() for v in self.violations]}


def validate(
    document: Any,
    omitted: Iterable[str] = (),
    *,
    format_marker: str = DEFAULT_FORMAT_MARKER,
    extra_rules: list[RuleFunc] | None = None,
) -> ValidationReport:
    """Run all schema rules against *document*.

    *omitted* lists class names that were deliberately left out of the style
    list (duplicates of classes the destination project already has).
    """
    view = DocumentView(
        document=document,
        omitted_classes=frozenset(omitted),
        format_marker=format_marker,
    )
    rules: list[RuleFunc] = list(ALL_RULES)
    if extra_rules:
        rules.extend(extra_rules)
    diagnostics: list[Diagnostic] = []
    for rule in rules:
        diagnostics.extend(rule(view))
    errors = [d for d in diagnostics if d.is_error]
    return ValidationReport(ok=not errors, violations=errors, diagnostics=diagnostics)


def validate_or_raise(
    document: Any,
    omitted: Iterable[str] = (),
    *,
    format_marker: str = DEFAULT_FORMAT_MARKER,
    extra_rules: list[RuleFunc] | None = None,
) -> list[Diagnostic]:
    """Run validation; raises :class:`SchemaValidationError` on any violation.

    Returns the non-error diagnostics when the document is valid.
    """
    report = validate(
        document, omitted, format_marker=format_marker, extra_rules=extra_rules
    )
    if not report.ok:
        raise SchemaValidationError(report.violations)
    return [d for d in report.diagnostics if not d.is_error]


def check_generated_document(document: Any) -> ValidationReport:
    """Hold an externally generated document to the same schema contract."""
    return validate(document)
