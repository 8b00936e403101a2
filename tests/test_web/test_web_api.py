from __future__ import annotations

from tests.test_web.conftest import make_app, make_convert_body, make_document


class TestConvertAPI:
    def test_post_converts(self, client):
        """POST /api/convert returns the document and diagnostics."""
        response = client.post("/api/convert", json=make_convert_body())
        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "complete"
        assert data["document"]["type"] == "@webflow/XscpData"
        assert len(data["document"]["payload"]["nodes"]) == 2
        assert data["document"]["payload"]["styles"][0]["styleLess"] == "color:red"
        assert data["errors"] == []
        assert set(data["sizeStats"]) == {
            "originalBytes",
            "minifiedBytes",
            "savedBytes",
            "savedPercent",
            "embedChunks",
        }

    def test_post_with_js(self, client):
        response = client.post("/api/convert", json=make_convert_body(js="init();"))
        nodes = response.get_json()["document"]["payload"]["nodes"]
        assert nodes[-1]["data"]["embed"]["meta"]["script"] is True

    def test_id_prefix_override(self, client):
        """idPrefix in the body changes generated node ids for that request only."""
        response = client.post("/api/convert", json=make_convert_body(idPrefix="page"))
        nodes = response.get_json()["document"]["payload"]["nodes"]
        assert nodes[0]["_id"] == "page-hero-001"

        response = client.post("/api/convert", json=make_convert_body())
        nodes = response.get_json()["document"]["payload"]["nodes"]
        assert nodes[0]["_id"] == "fb-hero-001"

    def test_requests_do_not_share_ids(self, client):
        first = client.post("/api/convert", json=make_convert_body()).get_json()
        second = client.post("/api/convert", json=make_convert_body()).get_json()
        assert first["document"] == second["document"]

    def test_sections(self, client):
        body = {
            "sections": [
                {"id": "top", "name": "Top", "html": '<div class="a">1</div>'},
                {"html": '<div class="b">2</div>', "css": ".b{color:blue}"},
            ]
        }
        response = client.post("/api/convert", json=body)
        assert response.status_code == 200
        styles = response.get_json()["document"]["payload"]["styles"]
        assert [s["name"] for s in styles] == ["a", "b"]

    def test_warnings_reported(self, client):
        body = make_convert_body(css=".hero{color:red !important}")
        warnings = client.post("/api/convert", json=body).get_json()["warnings"]
        assert warnings
        assert all("code" in w and "severity" in w for w in warnings)

    def test_no_json_returns_400(self, client):
        response = client.post("/api/convert", data="html", content_type="text/plain")
        assert response.status_code == 400
        assert "error" in response.get_json()

    def test_json_array_returns_400(self, client):
        response = client.post("/api/convert", json=["html"])
        assert response.status_code == 400

    def test_empty_input_returns_400(self, client):
        response = client.post("/api/convert", json={"html": "  ", "css": ""})
        assert response.status_code == 400
        assert "No HTML or CSS" in response.get_json()["error"]

    def test_bad_sections_returns_400(self, client):
        response = client.post("/api/convert", json={"sections": "hero"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "sections must be a list of objects"

    def test_schema_failure_returns_422(self):
        app = make_app(embed_chunk_size=60_000)
        css = '.hero::before{content:"' + "x" * 50_000 + '"}'
        response = app.test_client().post(
            "/api/convert", json=make_convert_body(html='<div class="hero">x</div>', css=css)
        )
        assert response.status_code == 422
        data = response.get_json()
        assert any(v["code"] == "check_embed_size" for v in data["violations"])

    def test_existing_classes_omitted(self):
        app = make_app(existing=["hero"])
        response = app.test_client().post("/api/convert", json=make_convert_body())
        assert response.status_code == 200
        assert response.get_json()["document"]["payload"]["styles"] == []


class TestValidateAPI:
    def test_valid_document(self, client):
        response = client.post("/api/validate", json={"document": make_document()})
        assert response.status_code == 200
        assert response.get_json() == {"ok": True, "violations": []}

    def test_invalid_document(self, client):
        document = make_document()
        document["payload"]["styles"] = []
        data = client.post("/api/validate", json={"document": document}).get_json()
        assert data["ok"] is False
        assert data["violations"][0]["code"] == "check_class_references"

    def test_omitted_classes(self, client):
        document = make_document()
        document["payload"]["styles"] = []
        body = {"document": document, "omittedClasses": ["hero"]}
        assert client.post("/api/validate", json=body).get_json()["ok"] is True

    def test_missing_document_returns_400(self, client):
        response = client.post("/api/validate", json={"doc": {}})
        assert response.status_code == 400
        assert response.get_json() == {"error": "document required"}


class TestCORS:
    def test_cors_headers(self, client):
        response = client.post("/api/convert", json=make_convert_body())
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in response.headers["Access-Control-Allow-Methods"]

    def test_preflight(self, client):
        response = client.options("/api/convert")
        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_validate_preflight(self, client):
        assert client.options("/api/validate").status_code == 204
