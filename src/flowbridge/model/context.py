"""Per-run conversion context: id counter and diagnostics accumulator."""

from __future__ import annotations

import re
import threading

from flowbridge.config import ConverterConfig
from flowbridge.model.diagnostic import Diagnostic, Severity

_SLUG_RE = re.compile(r"[^a-z0-9-]+")


def slugify(value: str) -> str:
    return _SLUG_RE.sub("-", value.lower()).strip("-") or "node"


class IdGenerator:
    """Hands out ids of the form ``<prefix>-<base>-<NNN>``; never reuses one."""

    def __init__(self, prefix: str = "fb") -> None:
        self.prefix = prefix
        self._counters: dict[str, int] = {}
        self._issued: set[str] = set()

    def generate(self, base: str = "node") -> str:
        key = slugify(base)
        while True:
            count = self._counters.get(key, 0) + 1
            self._counters[key] = count
            candidate = f"{self.prefix}-{key}-{count:03d}"
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate

    @property
    def issued(self) -> int:
        return len(self._issued)


class ConversionContext:
    """State owned by exactly one conversion run.

    Holds the id generator, the warnings/errors accumulator and the names and
    embed rules already emitted earlier in the run. All public methods are
    protected by a lock so a caller observing progress from another thread
    sees a consistent snapshot.
    """

    def __init__(self, config: ConverterConfig | None = None) -> None:
        self.config = config or ConverterConfig()
        self.ids = IdGenerator(self.config.id_prefix)
        self._lock = threading.Lock()
        self._diagnostics: list[Diagnostic] = []
        self._section_id: str | None = None
        self.emitted_styles: set[str] = set()
        self.emitted_embeds: set[str] = set()

    # --- section scoping -----------------------------------------------------

    def enter_section(self, section_id: str | None) -> None:
        with self._lock:
            self._section_id = section_id

    @property
    def section_id(self) -> str | None:
        return self._section_id

    # --- diagnostics ---------------------------------------------------------

    def report(
        self,
        severity: Severity,
        code: str,
        message: str,
        **kwargs: str | None,
    ) -> Diagnostic:
        """Record a diagnostic, tagging it with the current section."""
        kwargs.setdefault("section_id", self._section_id)
        diagnostic = Diagnostic(code=code, severity=severity, message=message, **kwargs)
        with self._lock:
            self._diagnostics.append(diagnostic)
        return diagnostic

    def warn(self, code: str, message: str, **kwargs: str | None) -> Diagnostic:
        return self.report(Severity.WARNING, code, message, **kwargs)

    def info(self, code: str, message: str, **kwargs: str | None) -> Diagnostic:
        return self.report(Severity.INFO, code, message, **kwargs)

    def error(self, code: str, message: str, **kwargs: str | None) -> Diagnostic:
        return self.report(Severity.ERROR, code, message, **kwargs)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    @property
    def warnings(self) -> list[Diagnostic]:
        with self._lock:
            return [d for d in self._diagnostics if not d.is_error]

    @property
    def errors(self) -> list[Diagnostic]:
        with self._lock:
            return [d for d in self._diagnostics if d.is_error]

    def __repr__(self) -> str:
        with self._lock:
            return (
                f"ConversionContext(ids={self.ids.issued}, "
                f"diagnostics={len(self._diagnostics)})"
            )
