from __future__ import annotations

import pytest

from flowbridge.config import ConverterConfig
from flowbridge.model.result import ConversionResult, ConversionStatus
from flowbridge.model.style import StyleClass
from flowbridge.project.lookup import StaticClassLookup
from flowbridge.web.app import create_app


@pytest.fixture
def app():
    """Create a Flask app for testing."""
    application = create_app(config=ConverterConfig())
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


# ---------------------------------------------------------------------------
# Shared factory helpers
# ---------------------------------------------------------------------------


def make_app(**config_overrides):
    """Create an app with a non-default converter config and existing classes."""
    existing = config_overrides.pop("existing", None)
    lookup = StaticClassLookup(existing) if existing is not None else None
    application = create_app(config=ConverterConfig(**config_overrides), class_lookup=lookup)
    application.config["TESTING"] = True
    return application


def make_convert_body(
    html: str = '<div class="hero"><h1>Hi</h1></div>',
    css: str = ".hero{color:red}",
    **extra,
) -> dict:
    return {"html": html, "css": css, **extra}


def make_document(classes: tuple[str, ...] = ("hero",)) -> dict:
    """Build a valid clipboard document with one block using *classes*."""
    result = ConversionResult(
        status=ConversionStatus.COMPLETE,
        styles=[StyleClass(name=name, base={"color": "red"}) for name in classes],
    )
    document = result.to_document()
    document["payload"]["nodes"] = [
        {
            "_id": "n1",
            "type": "Block",
            "tag": "div",
            "classes": list(classes),
            "children": [],
            "data": {"tag": "div", "text": False, "xattr": []},
        }
    ]
    return document
