from __future__ import annotations

from flask import Flask

from flowbridge.config import ConverterConfig
from flowbridge.engine import Converter
from flowbridge.project.lookup import ClassLookup


def create_app(
    config: ConverterConfig | None = None,
    class_lookup: ClassLookup | None = None,
    flask_config: dict | None = None,
) -> Flask:
    """Create and configure the Flask app."""
    app = Flask(__name__)
    app.config.update(flask_config or {})

    # Store collaborators on the app for access in routes
    config = config or ConverterConfig.from_env()
    app.extensions["converter_config"] = config
    app.extensions["class_lookup"] = class_lookup
    app.extensions["converter"] = Converter(config, class_lookup=class_lookup)

    from flowbridge.web.routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    return app
