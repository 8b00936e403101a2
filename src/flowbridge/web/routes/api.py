from __future__ import annotations

from dataclasses import replace

from flask import Blueprint, current_app, jsonify, request

from flowbridge.engine import Converter
from flowbridge.errors import EmptyInputError, SchemaValidationError
from flowbridge.model.section import SectionInput
from flowbridge.validation import validate

api_bp = Blueprint("api", __name__)


@api_bp.after_request
def add_cors_headers(response):
    """Allow cross-origin requests to the API."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "POST, OPTIONS"
    return response


@api_bp.route("/convert", methods=["OPTIONS"])
@api_bp.route("/validate", methods=["OPTIONS"])
def preflight():
    """Handle CORS preflight requests."""
    return "", 204


def _sections(data: dict) -> list[SectionInput] | None:
    raw = data.get("sections")
    if not raw:
        return None
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise ValueError("sections must be a list of objects")
    sections = []
    for index, item in enumerate(raw, start=1):
        section_id = str(item.get("id") or f"section-{index}")
        sections.append(
            SectionInput(
                id=section_id,
                name=str(item.get("name") or section_id),
                html=str(item.get("html") or ""),
                css=str(item.get("css") or ""),
            )
        )
    return sections


def _converter(data: dict) -> Converter:
    converter = current_app.extensions["converter"]
    prefix = data.get("idPrefix")
    if not prefix:
        return converter
    config = replace(current_app.extensions["converter_config"], id_prefix=str(prefix))
    return Converter(config, class_lookup=current_app.extensions["class_lookup"])


@api_bp.route("/convert", methods=["POST"])
def convert():
    """Convert HTML + CSS (+ JS) into a clipboard document."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object body required"}), 400
    try:
        sections = _sections(data)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    try:
        result = _converter(data).convert(
            str(data.get("html") or ""),
            str(data.get("css") or ""),
            js=data.get("js") or None,
            sections=sections,
        )
    except EmptyInputError as exc:
        return jsonify({"error": str(exc)}), 400
    except SchemaValidationError as exc:
        return jsonify({
            "error": "generated document failed validation",
            "violations": [v.to_dict() for v in exc.violations],
        }), 422

    return jsonify({
        "status": result.status.value,
        "document": result.to_document(),
        "warnings": [w.to_dict() for w in result.warnings],
        "errors": [e.to_dict() for e in result.errors],
        "sizeStats": result.size_stats.to_dict(),
    })


@api_bp.route("/validate", methods=["POST"])
def validate_document():
    """Validate a clipboard document against the schema."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or "document" not in data:
        return jsonify({"error": "document required"}), 400
    report = validate(data["document"], data.get("omittedClasses") or ())
    return jsonify({
        "ok": report.ok,
        "violations": [v.to_dict() for v in report.violations],
    })
