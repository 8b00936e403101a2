"""flowbridge validation -- schema rules for clipboard documents."""

from flowbridge.validation.rules import ALL_RULES, DocumentView
from flowbridge.validation.validator import (
    ValidationReport,
    check_generated_document,
    validate,
    validate_or_raise,
)

__all__ = [
    "ALL_RULES",
    "DocumentView",
    "ValidationReport",
    "check_generated_document",
    "validate",
    "validate_or_raise",
]
