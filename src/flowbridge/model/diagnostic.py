"""Diagnostic model: structured warnings, section errors, and schema violations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity level for a diagnostic message."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding produced while converting or validating a document.

    Attributes:
        code: Identifier for the check or pipeline step that produced this diagnostic.
        severity: How serious the issue is.
        message: Human-readable description of the problem.
        selector: The CSS selector involved, if applicable.
        node_id: The output node involved, if applicable.
        section_id: The input section involved, if applicable.
        fix: Suggested remediation, if available.
    """

    code: str
    severity: Severity
    message: str
    selector: str | None = None
    node_id: str | None = None
    section_id: str | None = None
    fix: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def to_dict(self) -> dict[str, str]:
        data = {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
        }
        for key in ("selector", "node_id", "section_id", "fix"):
            value = getattr(self, key)
            if value:
                data[key] = value
        return data

    def __str__(self) -> str:
        location = ""
        if self.node_id:
            location = f" [node={self.node_id}]"
        elif self.selector:
            location = f" [selector={self.selector}]"
        elif self.section_id:
            location = f" [section={self.section_id}]"
        return f"{self.severity.value}{location}: {self.message}"
