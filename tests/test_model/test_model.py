"""Tests for model types, the per-run context and configuration."""

import threading

import pytest

from flowbridge.config import ConverterConfig
from flowbridge.errors import ConversionCancelledError, FlowBridgeError
from flowbridge.model import (
    Archetype,
    ConversionContext,
    ConversionResult,
    ConversionStatus,
    Diagnostic,
    ElementPayload,
    GraphNode,
    IdGenerator,
    SectionResult,
    Severity,
    SizeStats,
    StyleClass,
)
from flowbridge.model.style import declarations_to_text, text_to_declarations


# ---------------------------------------------------------------------------
# IdGenerator
# ---------------------------------------------------------------------------


class TestIdGenerator:
    def test_sequence_per_base(self):
        ids = IdGenerator()
        assert ids.generate("hero") == "fb-hero-001"
        assert ids.generate("hero") == "fb-hero-002"
        assert ids.generate("card") == "fb-card-001"
        assert ids.issued == 3

    def test_base_slugified(self):
        ids = IdGenerator("x")
        assert ids.generate("Hero Banner!") == "x-hero-banner-001"
        assert ids.generate("___") == "x-node-001"

    def test_reports_under_threads(self):
        context = ConversionContext()

        def work():
            for _ in range(100):
                context.warn("w", "x")

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(context.warnings) == 400


# ---------------------------------------------------------------------------
# ConversionContext
# ---------------------------------------------------------------------------


class TestConversionContext:
    def test_diagnostics_split_by_severity(self):
        context = ConversionContext()
        context.warn("a", "warned")
        context.info("b", "noted")
        context.error("c", "broke")
        assert [d.code for d in context.warnings] == ["a", "b"]
        assert [d.code for d in context.errors] == ["c"]
        assert len(context.diagnostics) == 3

    def test_section_tagging(self):
        context = ConversionContext()
        context.enter_section("hero")
        diag = context.warn("a", "x")
        context.enter_section(None)
        assert diag.section_id == "hero"
        assert context.warn("b", "y").section_id is None

    def test_explicit_section_wins(self):
        context = ConversionContext()
        context.enter_section("hero")
        assert context.warn("a", "x", section_id="other").section_id == "other"

    def test_ids_use_config_prefix(self):
        context = ConversionContext(ConverterConfig(id_prefix="pg"))
        assert context.ids.generate("p") == "pg-p-001"

    def test_runs_do_not_share_state(self):
        first = ConversionContext()
        second = ConversionContext()
        first.warn("a", "x")
        first.ids.generate("p")
        assert second.diagnostics == []
        assert second.ids.generate("p") == "fb-p-001"


# ---------------------------------------------------------------------------
# Diagnostic
# ---------------------------------------------------------------------------


class TestDiagnostic:
    def test_str_with_location(self):
        diag = Diagnostic(code="x", severity=Severity.WARNING, message="m", selector=".a")
        assert str(diag) == "WARNING [selector=.a]: m"

    def test_to_dict_skips_empty(self):
        diag = Diagnostic(code="x", severity=Severity.ERROR, message="m", node_id="n1")
        assert diag.to_dict() == {
            "code": "x",
            "severity": "ERROR",
            "message": "m",
            "node_id": "n1",
        }
        assert diag.is_error
        assert not diag.is_warning


# ---------------------------------------------------------------------------
# StyleClass
# ---------------------------------------------------------------------------


class TestStyleClass:
    def test_merge_and_variants(self):
        style = StyleClass(name="card")
        style.merge({"padding": "16px", "color": "red"})
        style.merge({"padding": "8px"}, "medium")
        style.merge({"color": "blue"})
        assert style.native_declaration_text == "padding:16px;color:blue"
        assert style.variants == {"medium": "padding:8px"}

    def test_to_dict(self):
        style = StyleClass(name="hero", base={"color": "red"})
        style.merge({"opacity": ".8"}, "hover")
        assert style.to_dict() == {
            "_id": "hero",
            "fake": False,
            "type": "class",
            "name": "hero",
            "namespace": "",
            "comb": "",
            "styleLess": "color:red",
            "variants": {"hover": {"styleLess": "opacity:.8"}},
            "children": [],
        }

    def test_empty(self):
        style = StyleClass(name="x")
        style.merge({}, "medium")
        assert style.is_empty()
        assert style.variants == {}

    def test_declaration_text_helpers(self):
        text = declarations_to_text({"color": "red", "background": "url(a;b)"})
        assert text == "color:red;background:url(a;b)"
        assert text_to_declarations("color: red; margin:0;") == {"color": "red", "margin": "0"}


# ---------------------------------------------------------------------------
# GraphNode
# ---------------------------------------------------------------------------


class TestGraphNode:
    def test_block_dict(self):
        node = GraphNode(
            id="n1",
            archetype=Archetype.BLOCK,
            tag="nav",
            classes=("menu",),
            children=("n2",),
            payload=ElementPayload(tag_override="nav"),
        )
        assert node.to_dict() == {
            "_id": "n1",
            "type": "Block",
            "tag": "nav",
            "classes": ["menu"],
            "children": ["n2"],
            "data": {"tag": "nav", "text": False, "xattr": []},
        }

    def test_with_children_copies(self):
        node = GraphNode(id="n1", archetype=Archetype.BLOCK)
        updated = node.with_children(("n2",))
        assert node.children == ()
        assert updated.children == ("n2",)
        assert updated.id == "n1"


# ---------------------------------------------------------------------------
# ConversionResult
# ---------------------------------------------------------------------------


class TestConversionResult:
    def test_document_shape(self):
        result = ConversionResult(status=ConversionStatus.COMPLETE)
        document = result.to_document()
        assert document["type"] == "@webflow/XscpData"
        assert set(document["payload"]) == {"nodes", "styles", "assets", "ix1", "ix2"}
        assert document["meta"]["droppedLinks"] == 0

    def test_raise_for_status_complete(self):
        ConversionResult(status=ConversionStatus.COMPLETE).raise_for_status()

    def test_raise_for_status_cancelled(self):
        result = ConversionResult(
            status=ConversionStatus.CANCELLED,
            sections=[SectionResult(section_id="a", name="A")],
        )
        assert result.cancelled
        with pytest.raises(ConversionCancelledError, match="after 1 section"):
            result.raise_for_status()

    def test_raise_for_status_failed(self):
        error = Diagnostic(code="x", severity=Severity.ERROR, message="bad")
        result = ConversionResult(status=ConversionStatus.FAILED, errors=[error])
        with pytest.raises(FlowBridgeError, match="bad"):
            result.raise_for_status()

    def test_summary(self):
        result = ConversionResult(
            status=ConversionStatus.COMPLETE,
            sections=[SectionResult(section_id="hero", name="Hero")],
        )
        summary = result.summary()
        assert summary["status"] == "complete"
        assert summary["sections"] == ["hero"]
        assert summary["sizeStats"]["embedChunks"] == 0


class TestSizeStats:
    def test_addition(self):
        total = SizeStats(100, 60, 1) + SizeStats(50, 40, 2)
        assert total == SizeStats(150, 100, 3)
        assert total.saved_bytes == 50
        assert total.saved_percent == 33.33

    def test_empty_percent(self):
        assert SizeStats().saved_percent == 0.0


# ---------------------------------------------------------------------------
# ConverterConfig
# ---------------------------------------------------------------------------


class TestConverterConfig:
    def test_defaults(self):
        config = ConverterConfig()
        assert config.id_prefix == "fb"
        assert config.embed_chunk_size == 40_000

    def test_from_env(self):
        config = ConverterConfig.from_env({
            "FLOWBRIDGE_ID_PREFIX": "site",
            "FLOWBRIDGE_PROJECT_API": "https://api.example.com",
            "FLOWBRIDGE_PROJECT_ID": "p1",
            "FLOWBRIDGE_LOOKUP_TIMEOUT": "2.5",
        })
        assert config.id_prefix == "site"
        assert config.project_api == "https://api.example.com"
        assert config.project_id == "p1"
        assert config.lookup_timeout == 2.5

    def test_from_empty_env(self):
        assert ConverterConfig.from_env({}) == ConverterConfig()
