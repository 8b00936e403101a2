"""Tests for the streaming conversion orchestrator."""

import pytest

from flowbridge.config import ConverterConfig
from flowbridge.engine import CancelToken, Converter, convert
from flowbridge.errors import (
    ConversionCancelledError,
    EmptyInputError,
    SchemaValidationError,
)
from flowbridge.events import (
    ConversionCancelled,
    ConversionCompleted,
    ConversionFailed,
    ConversionStarted,
    EventBus,
    Phase,
    PhaseChanged,
    SectionCompleted,
    SectionFailed,
)
from flowbridge.model import ConversionStatus, SectionInput
from flowbridge.project.lookup import StaticClassLookup
from flowbridge.validation import validate


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sections(count: int = 3) -> list[SectionInput]:
    return [
        SectionInput(
            id=f"s{i}",
            name=f"Section {i}",
            html=f'<div class="block-{i}"><p>Text {i}</p></div>',
            css=f".block-{i} {{ padding: {i}px; }}",
        )
        for i in range(1, count + 1)
    ]


def _deep_html(depth: int = 250) -> str:
    return "<div>" * depth + "x" + "</div>" * depth


# ---------------------------------------------------------------------------
# Basic conversion
# ---------------------------------------------------------------------------


class TestConvert:
    def test_hero_with_heading(self):
        result = convert('<div class="hero"><h1>Hi</h1></div>', ".hero{color:red}")
        assert result.status is ConversionStatus.COMPLETE
        assert len(result.nodes) == 2
        assert [s.name for s in result.styles] == ["hero"]
        assert result.styles[0].native_declaration_text == "color:red"
        assert result.errors == []

    def test_document_validates(self):
        result = convert('<div class="hero"><h1>Hi</h1></div>', ".hero{color:red}")
        assert validate(result.to_document()).ok

    def test_markup_only_class_gets_empty_style(self):
        result = convert('<div class="plain">x</div>', "")
        style = result.styles[0]
        assert style.name == "plain"
        assert style.is_empty()

    def test_js_appended_as_script_node(self):
        result = convert('<p class="a">x</p>', ".a{color:red}", js="console.log(1);")
        last = result.to_document()["payload"]["nodes"][-1]
        assert last["type"] == "HtmlEmbed"
        assert last["data"]["embed"]["meta"]["script"] is True
        assert last["data"]["embed"]["meta"]["html"] == "<script>\nconsole.log(1);\n</script>"

    def test_embed_css_becomes_style_node(self):
        result = convert('<div class="hero">x</div>', ".hero::before{content:'*'}")
        embeds = [n for n in result.nodes if n.archetype.value == "HtmlEmbed"]
        assert len(embeds) == 1
        assert embeds[0].payload.markup.startswith("<style>")
        assert result.size_stats.embed_chunks == 1

    def test_empty_input(self):
        with pytest.raises(EmptyInputError):
            convert("  ", "\n")

    def test_css_only_is_not_empty(self):
        result = convert("", ".a{color:red}")
        assert [s.name for s in result.styles] == ["a"]
        assert result.nodes == []

    def test_id_prefix(self):
        result = convert("<p>x</p>", "", config=ConverterConfig(id_prefix="pg"))
        assert result.nodes[0].id == "pg-p-001"

    def test_gradient_with_unit_channel_does_not_fail_section(self):
        result = convert(
            "<div class='a'>x</div>",
            ".a{background:linear-gradient(rgb(10deg,0,0) 0%, red 100%)}",
        )
        assert result.status is ConversionStatus.COMPLETE
        assert result.errors == []
        assert "rgb(10deg,0,0)" in result.styles[0].native_declaration_text


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class TestSections:
    def test_sections_in_order(self):
        result = convert(sections=_sections())
        assert [s.section_id for s in result.sections] == ["s1", "s2", "s3"]
        assert [s.name for s in result.styles] == ["block-1", "block-2", "block-3"]

    def test_ids_unique_across_sections(self):
        sections = [
            SectionInput(id="a", name="A", html='<div class="card">1</div>'),
            SectionInput(id="b", name="B", html='<div class="card">2</div>'),
        ]
        result = convert(sections=sections)
        ids = [n.id for n in result.nodes]
        assert len(ids) == len(set(ids))

    def test_style_emitted_once_across_sections(self):
        sections = [
            SectionInput(
                id="a", name="A", html='<div class="card">1</div>', css=".card{color:red}"
            ),
            SectionInput(
                id="b", name="B", html='<div class="card">2</div>', css=".card{color:red}"
            ),
        ]
        result = convert(sections=sections)
        assert [s.name for s in result.styles] == ["card"]

    def test_failed_section_does_not_stop_others(self):
        sections = _sections()
        sections[1] = SectionInput(id="s2", name="Deep", html=_deep_html())
        bus = EventBus()
        failed = []
        bus.subscribe(SectionFailed, failed.append)

        result = Converter(event_bus=bus).convert(sections=sections)
        assert result.status is ConversionStatus.COMPLETE
        assert [s.section_id for s in result.sections] == ["s1", "s3"]
        assert [e.section_id for e in failed] == ["s2"]
        assert [e.code for e in result.errors] == ["section-failed"]
        assert result.errors[0].section_id == "s2"

    def test_warnings_tagged_with_section(self):
        sections = [SectionInput(id="hero", name="Hero", html="<p>x</p>", css=".a{color:red} .b")]
        result = convert(sections=sections)
        assert result.warnings
        assert all(w.section_id == "hero" for w in result.warnings)

    def test_variables_shared_across_sections(self):
        sections = [
            SectionInput(id="tokens", name="Tokens", html="", css=":root{--brand:#f00}"),
            SectionInput(
                id="hero",
                name="Hero",
                html='<div class="hero">x</div>',
                css=".hero{color:var(--brand)}",
            ),
        ]
        result = convert(sections=sections)
        hero = next(s for s in result.styles if s.name == "hero")
        assert hero.native_declaration_text == "color:#f00"
        assert not any(w.code == "unresolved-variable" for w in result.warnings)


# ---------------------------------------------------------------------------
# Streaming and progress
# ---------------------------------------------------------------------------


class TestStreaming:
    def test_event_sequence(self):
        run = Converter().start('<div class="a">x</div>', ".a{color:red}")
        events = list(run.stream())
        assert isinstance(events[0], ConversionStarted)
        assert isinstance(events[-1], ConversionCompleted)
        phases = [e.phase for e in events if isinstance(e, PhaseChanged)]
        assert phases == [
            Phase.PARSING,
            Phase.ROUTING,
            Phase.GENERATING,
            Phase.VALIDATING,
            Phase.COMPLETE,
        ]
        assert run.phase is Phase.COMPLETE
        assert events[-1].result is run.result

    def test_percentages(self):
        run = Converter().start(sections=_sections())
        percentages = [e.percentage for e in run.stream() if isinstance(e, PhaseChanged)]
        assert percentages == [0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100]

    def test_current_item_is_section_name(self):
        run = Converter().start(sections=_sections(1))
        items = [e.current_item for e in run.stream() if isinstance(e, PhaseChanged)]
        assert items == ["Section 1", "Section 1", "Section 1", None, None]

    def test_bus_receives_every_event(self):
        bus = EventBus()
        seen = []
        bus.on_all(seen.append)
        run = Converter(event_bus=bus).start("<p>x</p>")
        streamed = list(run.stream())
        assert seen == streamed

    def test_stream_only_once(self):
        run = Converter().start("<p>x</p>")
        run.run()
        with pytest.raises(RuntimeError, match="only be streamed once"):
            list(run.stream())

    def test_run_returns_result(self):
        result = Converter().start("<p>x</p>").run()
        assert result.succeeded


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    def test_cancel_after_first_section(self):
        bus = EventBus()
        token = CancelToken()
        bus.subscribe(SectionCompleted, lambda e: token.cancel())
        cancelled = []
        bus.subscribe(ConversionCancelled, cancelled.append)

        run = Converter(event_bus=bus).start(sections=_sections(), cancel_token=token)
        result = run.run()

        assert result.status is ConversionStatus.CANCELLED
        assert len(result.sections) == 1
        assert [s.name for s in result.styles] == ["block-1"]
        assert run.phase is Phase.CANCELLED
        assert cancelled[0].result is result
        with pytest.raises(ConversionCancelledError):
            result.raise_for_status()

    def test_cancel_before_start(self):
        token = CancelToken()
        token.cancel()
        result = convert(sections=_sections(), cancel_token=token)
        assert result.cancelled
        assert result.sections == []
        assert result.nodes == []

    def test_cancel_through_run(self):
        run = Converter().start(sections=_sections(2))
        for event in run.stream():
            if isinstance(event, SectionCompleted):
                run.cancel()
        assert run.result.cancelled
        assert [s.section_id for s in run.result.sections] == ["s1"]

    def test_partial_result_is_valid(self):
        token = CancelToken()
        bus = EventBus()
        bus.subscribe(SectionCompleted, lambda e: token.cancel())
        result = Converter(event_bus=bus).convert(sections=_sections(), cancel_token=token)
        assert validate(result.to_document()).ok


# ---------------------------------------------------------------------------
# Validation failure
# ---------------------------------------------------------------------------


class TestValidationFailure:
    def test_oversized_embed_fails_schema(self):
        css = '.hero::before{content:"' + "x" * 50_000 + '"}'
        bus = EventBus()
        failed = []
        bus.subscribe(ConversionFailed, failed.append)
        run = Converter(ConverterConfig(embed_chunk_size=60_000), event_bus=bus).start(
            '<div class="hero">x</div>', css
        )
        with pytest.raises(SchemaValidationError) as exc_info:
            run.run()
        assert any(v.code == "check_embed_size" for v in exc_info.value.violations)
        assert run.phase is Phase.FAILED
        assert run.result.status is ConversionStatus.FAILED
        assert any("Embed chunk 1" in e.message for e in run.result.errors)
        assert len(failed) == 1


# ---------------------------------------------------------------------------
# Existing classes
# ---------------------------------------------------------------------------


class TestExistingClasses:
    def test_existing_class_omitted(self):
        result = convert(
            '<div class="hero"><p class="hero-2">x</p></div>',
            ".hero{color:red}.hero-2{color:blue}",
            class_lookup=StaticClassLookup({"hero"}),
        )
        assert [s.name for s in result.styles] == ["hero-2"]
        assert result.omitted_classes == {"hero"}
        assert result.nodes[0].classes == ("hero",)
        assert validate(result.to_document(), result.omitted_classes).ok

    def test_lookup_crash_does_not_fail_run(self):
        class BrokenLookup:
            def existing_class_names(self):
                raise ConnectionError("network down")

        result = convert(
            '<div class="hero">x</div>', ".hero{color:red}", class_lookup=BrokenLookup()
        )
        assert result.status is ConversionStatus.COMPLETE
        assert [s.name for s in result.styles] == ["hero"]
        assert result.omitted_classes == set()


# ---------------------------------------------------------------------------
# PayloadGenerator
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_generate_returns_document(self):
        document = Converter().generate('<div class="hero">x</div>', ".hero{color:red}")
        assert document["type"] == "@webflow/XscpData"
        assert document["payload"]["styles"][0]["name"] == "hero"
