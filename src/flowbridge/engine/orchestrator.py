"""Streaming orchestrator: drives sections through parse -> route -> generate.

A run is a generator of progress events. Each section runs all of its
phases before the next section starts; validation runs once at the end.
Cancellation is cooperative and checked only between sections, so a
section that has started always finishes.

    run = Converter().start(html, css)
    for event in run.stream():
        print(event)
    result = run.result
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator, Sequence
from typing import Any, Protocol

from flowbridge.config import ConverterConfig
from flowbridge.css.router import StyleRouter, assemble_embed
from flowbridge.css.variables import VariableTable
from flowbridge.errors import EmptyInputError, SchemaValidationError
from flowbridge.events import types as events
from flowbridge.events.bus import EventBus
from flowbridge.events.types import Phase
from flowbridge.graph.builder import GraphBuilder, embed_node, script_node
from flowbridge.model.context import ConversionContext
from flowbridge.model.css import ParsedStylesheet
from flowbridge.model.result import ConversionResult, ConversionStatus, SectionResult, SizeStats
from flowbridge.model.section import SectionInput
from flowbridge.model.style import StyleClass
from flowbridge.parser.css import parse_stylesheet
from flowbridge.parser.html import parse_fragment
from flowbridge.project.duplicates import DuplicateClassResolver
from flowbridge.project.lookup import ClassLookup, fetch_existing_names
from flowbridge.validation.validator import validate

logger = logging.getLogger(__name__)

__all__ = [
    "CancelToken",
    "ConversionRun",
    "Converter",
    "PayloadGenerator",
    "convert",
]


class CancelToken:
    """Thread-safe cancellation flag shared between a run and its caller."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class PayloadGenerator(Protocol):
    """Anything that turns HTML + CSS into a clipboard document.

    Alternative generators (an LLM backend, say) must produce documents that
    pass :func:`flowbridge.validation.check_generated_document`.
    """

    def generate(self, html: str, css: str) -> dict[str, Any]: ...


class ConversionRun:
    """One conversion: owns its context, id counter and diagnostics."""

    def __init__(
        self,
        sections: Sequence[SectionInput],
        *,
        js: str | None = None,
        config: ConverterConfig | None = None,
        class_lookup: ClassLookup | None = None,
        event_bus: EventBus | None = None,
        cancel_token: CancelToken | None = None,
    ) -> None:
        if not any(s.html.strip() or s.css.strip() for s in sections):
            raise EmptyInputError("No HTML or CSS supplied")
        self.sections = list(sections)
        self.js = js or ""
        self.context = ConversionContext(config)
        self.class_lookup = class_lookup
        self.event_bus = event_bus or EventBus()
        self.cancel_token = cancel_token or CancelToken()
        self.phase = Phase.IDLE
        self.result: ConversionResult | None = None
        self._completed: list[SectionResult] = []
        self._started = False

    @property
    def config(self) -> ConverterConfig:
        return self.context.config

    def cancel(self) -> None:
        self.cancel_token.cancel()

    def run(self) -> ConversionResult:
        """Drain :meth:`stream` and return the result."""
        for _ in self.stream():
            pass
        assert self.result is not None
        return self.result

    def stream(self) -> Iterator[Any]:
        """Yield progress events while converting.

        Raises:
            SchemaValidationError: If the assembled document is rejected.
        """
        if self._started:
            raise RuntimeError("A conversion run can only be streamed once")
        self._started = True

        yield self._emit(events.ConversionStarted(total_sections=len(self.sections)))
        resolver = DuplicateClassResolver(fetch_existing_names(self.class_lookup))
        # Custom properties are document-wide: a :root block in one section
        # feeds var() references in every other.
        sheets = [parse_stylesheet(section.css) for section in self.sections]
        table = VariableTable.from_rules(rule for sheet in sheets for rule in sheet.rules)

        for index, section in enumerate(self.sections):
            if self.cancel_token.cancelled:
                logger.info(
                    "Conversion cancelled before section %d of %d",
                    index + 1,
                    len(self.sections),
                )
                self.phase = Phase.CANCELLED
                self.result = self._assemble(ConversionStatus.CANCELLED)
                yield self._emit(events.ConversionCancelled(result=self.result))
                return
            yield from self._run_section(index, section, sheets[index], table, resolver)

        yield from self._validate()

    # --- sections ------------------------------------------------------------

    def _progress(self, phase: Phase, step: int, item: str | None) -> events.PhaseChanged:
        self.phase = phase
        total = len(self.sections) * 3 + 1
        percentage = round(step * 100 / total)
        return self._emit(
            events.PhaseChanged(phase=phase, percentage=percentage, current_item=item)
        )

    def _run_section(
        self,
        index: int,
        section: SectionInput,
        sheet: ParsedStylesheet,
        table: VariableTable,
        resolver: DuplicateClassResolver,
    ) -> Iterator[Any]:
        started = time.perf_counter()
        context = self.context
        context.enter_section(section.id)
        step = index * 3
        try:
            yield self._progress(Phase.PARSING, step, section.name)
            tree = parse_fragment(section.html)
            for message in sheet.warnings:
                context.warn("css-parse", message)

            yield self._progress(Phase.ROUTING, step + 1, section.name)
            routing = StyleRouter(table, context).route(sheet.rules)

            yield self._progress(Phase.GENERATING, step + 2, section.name)
            builder = GraphBuilder(context)
            build = builder.build(tree)
            assembly = assemble_embed(routing.embed, context)
            builder.attach(
                build,
                [embed_node(context, f"<style>{chunk}</style>") for chunk in assembly.chunks],
            )
            styles = list(routing.native)
            known = {s.name for s in styles}
            # Classes used only by markup (or only by embed CSS) still need a style.
            styles.extend(StyleClass(name=n) for n in build.class_names if n not in known)
            kept = resolver.filter(styles)
            omitted = {s.name for s in styles if s.name in resolver.existing}
        except Exception as exc:
            logger.exception("Section %s failed", section.id)
            context.error("section-failed", f"Section {section.name!r} failed: {exc}")
            yield self._emit(events.SectionFailed(section_id=section.id, error=str(exc)))
            return
        finally:
            context.enter_section(None)

        self._completed.append(
            SectionResult(
                section_id=section.id,
                name=section.name,
                nodes=build.nodes,
                styles=kept,
                embeds=routing.embed,
                omitted_classes=omitted,
                size_stats=assembly.size_stats,
            )
        )
        logger.info(
            "Section %s converted: %d node(s), %d style(s) in %.1fms",
            section.id,
            len(build.nodes),
            len(kept),
            (time.perf_counter() - started) * 1000,
        )
        yield self._emit(
            events.SectionCompleted(
                section_id=section.id, node_count=len(build.nodes), style_count=len(kept)
            )
        )

    # --- validation ----------------------------------------------------------

    def _validate(self) -> Iterator[Any]:
        yield self._progress(Phase.VALIDATING, len(self.sections) * 3, None)
        result = self._assemble(ConversionStatus.COMPLETE)
        if self.js.strip():
            result.nodes.append(script_node(self.context, self.js))
        report = validate(
            result.to_document(),
            result.omitted_classes,
            format_marker=self.config.format_marker,
        )
        if not report.ok:
            result.status = ConversionStatus.FAILED
            result.errors.extend(report.violations)
            self.phase = Phase.FAILED
            self.result = result
            error = SchemaValidationError(report.violations)
            yield self._emit(events.ConversionFailed(error=str(error)))
            raise error
        self.result = result
        yield self._progress(Phase.COMPLETE, len(self.sections) * 3 + 1, None)
        yield self._emit(events.ConversionCompleted(result=result))

    def _assemble(self, status: ConversionStatus) -> ConversionResult:
        result = ConversionResult(
            status=status,
            warnings=self.context.warnings,
            errors=self.context.errors,
            sections=list(self._completed),
            format_marker=self.config.format_marker,
        )
        stats = SizeStats()
        for section in self._completed:
            result.nodes.extend(section.nodes)
            result.styles.extend(section.styles)
            result.embeds.extend(section.embeds)
            result.omitted_classes |= section.omitted_classes
            stats = stats + section.size_stats
        result.size_stats = stats
        return result

    def _emit(self, event: Any) -> Any:
        self.event_bus.emit(event)
        return event


class Converter:
    """The deterministic, rule-based conversion pipeline."""

    def __init__(
        self,
        config: ConverterConfig | None = None,
        *,
        class_lookup: ClassLookup | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.config = config or ConverterConfig()
        self.class_lookup = class_lookup
        self.event_bus = event_bus

    def start(
        self,
        html: str = "",
        css: str = "",
        *,
        js: str | None = None,
        sections: Sequence[SectionInput] | None = None,
        cancel_token: CancelToken | None = None,
    ) -> ConversionRun:
        """Prepare a run over *sections*, or over a single section made of *html*/*css*."""
        if sections is None:
            sections = [SectionInput(id="main", name="Main", html=html or "", css=css or "")]
        return ConversionRun(
            sections,
            js=js,
            config=self.config,
            class_lookup=self.class_lookup,
            event_bus=self.event_bus,
            cancel_token=cancel_token,
        )

    def convert(self, html: str = "", css: str = "", **kwargs: Any) -> ConversionResult:
        return self.start(html, css, **kwargs).run()

    def generate(self, html: str, css: str) -> dict[str, Any]:
        result = self.convert(html, css)
        result.raise_for_status()
        return result.to_document()


def convert(
    html: str = "",
    css: str = "",
    js: str | None = None,
    *,
    config: ConverterConfig | None = None,
    class_lookup: ClassLookup | None = None,
    sections: Sequence[SectionInput] | None = None,
    cancel_token: CancelToken | None = None,
) -> ConversionResult:
    """Convert HTML + CSS (+ JS) in one call."""
    converter = Converter(config, class_lookup=class_lookup)
    return converter.convert(
        html, css, js=js, sections=sections, cancel_token=cancel_token
    )
