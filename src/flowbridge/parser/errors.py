"""Parser error types."""

from __future__ import annotations

from flowbridge.errors import FlowBridgeError


class ParseError(FlowBridgeError):
    """Markup that cannot be turned into a usable element tree.

    ``line`` and ``column`` point at the element where parsing gave up, as
    reported by the HTML tokenizer (1-based line, 0-based column).
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        *,
        tag: str | None = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
        self.tag = tag

    @property
    def location(self) -> str:
        if self.line is None:
            return ""
        if self.column is None:
            return f"line {self.line}"
        return f"line {self.line}, column {self.column}"
