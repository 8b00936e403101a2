"""flowbridge - a degrading compiler from HTML + CSS to design-tool clipboard documents."""

__version__ = "0.1.0"

from flowbridge.config import ConverterConfig  # noqa: E402
from flowbridge.engine import CancelToken, ConversionRun, Converter, convert  # noqa: E402
from flowbridge.errors import (  # noqa: E402
    ClassLookupError,
    ConversionCancelledError,
    EmptyInputError,
    FlowBridgeError,
    SchemaValidationError,
)
from flowbridge.model import ConversionResult, ConversionStatus, SectionInput  # noqa: E402
from flowbridge.validation import validate  # noqa: E402

__all__ = [
    "__version__",
    "ConverterConfig",
    "CancelToken",
    "ConversionRun",
    "Converter",
    "convert",
    "ClassLookupError",
    "ConversionCancelledError",
    "EmptyInputError",
    "FlowBridgeError",
    "SchemaValidationError",
    "ConversionResult",
    "ConversionStatus",
    "SectionInput",
    "validate",
]
