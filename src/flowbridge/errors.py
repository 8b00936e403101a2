"""Error hierarchy for the flowbridge conversion pipeline."""

from __future__ import annotations

from typing import Any


class FlowBridgeError(Exception):
    """Base error for all flowbridge errors."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class EmptyInputError(FlowBridgeError):
    """Neither HTML nor CSS was supplied; nothing can be converted."""


class SchemaValidationError(FlowBridgeError):
    """The assembled clipboard document violates the target format contract."""

    def __init__(self, violations: list[Any], *, cause: Exception | None = None) -> None:
        self.violations = violations
        messages = [str(v) for v in violations]
        super().__init__(
            f"Schema validation failed with {len(messages)} violation(s): "
            + "; ".join(messages),
            cause=cause,
        )


class ConversionCancelledError(FlowBridgeError):
    """Raised by :meth:`ConversionResult.raise_for_status` for a cancelled run."""


class ClassLookupError(FlowBridgeError):
    """Fetching existing class names from the destination project failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code
