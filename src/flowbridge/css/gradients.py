"""Gradient and color normalization for native style values.

The target format rounds fractional stop positions unpredictably and only
reliably understands hex colors inside gradients, so every gradient function
in a value is rewritten:

    linear-gradient(90deg, rgba(255,0,0,1) 12.4%, hsl(240, 100%, 50%) 88.9%)
    -> linear-gradient(90deg, #ff0000 12%, #0000ff 89%)

Alpha channels are dropped by the hex conversion. Values are read as tinycss2
component values, so numbers arrive already parsed with their units.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import tinycss2

__all__ = [
    "GRADIENT_FUNCTIONS",
    "NormalizedValue",
    "color_to_hex",
    "normalize_gradients",
]

GRADIENT_FUNCTIONS = (
    "repeating-linear-gradient",
    "repeating-radial-gradient",
    "repeating-conic-gradient",
    "linear-gradient",
    "radial-gradient",
    "conic-gradient",
)

_COLOR_FUNCTIONS = frozenset({"rgb", "rgba", "hsl", "hsla"})
_HUE_UNITS = {"deg": 1.0, "grad": 0.9, "turn": 360.0}


@dataclass(frozen=True)
class NormalizedValue:
    value: str
    warnings: list[str] = field(default_factory=list)
    gradients: int = 0


def _js_round(number: float) -> int:
    # Half-up rounding; Python's round() would send 12.5 to 12.
    return int(math.floor(number + 0.5))


def _split(tokens, separator: str) -> list[list]:
    parts: list[list] = [[]]
    for token in tokens:
        if token == separator:
            parts.append([])
        else:
            parts[-1].append(token)
    return parts


def _color_args(arguments) -> list:
    """Return one token per rgb()/hsl() argument, in comma or space/slash syntax."""
    if any(token == "," for token in arguments):
        parts = _split(arguments, ",")
    else:
        parts = [[token] for token in arguments if token != "/"]
    args = []
    for part in parts:
        tokens = [t for t in part if t.type not in ("whitespace", "comment")]
        if len(tokens) > 1:
            return []
        if tokens:
            args.append(tokens[0])
    return args


def _channel(token) -> int | None:
    if token.type == "number":
        number = token.value
    elif token.type == "percentage":
        number = token.value * 255 / 100
    else:
        return None
    return max(0, min(255, _js_round(number)))


def _hue(token) -> float | None:
    if token.type == "number":
        number = token.value
    elif token.type == "dimension" and token.lower_unit == "rad":
        number = math.degrees(token.value)
    elif token.type == "dimension" and token.lower_unit in _HUE_UNITS:
        number = token.value * _HUE_UNITS[token.lower_unit]
    else:
        return None
    return number % 360


def _percent(token) -> float | None:
    if token.type not in ("number", "percentage"):
        return None
    return max(0.0, min(100.0, token.value))


def _hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    s /= 100
    l /= 100
    c = (1 - abs(2 * l - 1)) * s
    x = c * (1 - abs((h / 60) % 2 - 1))
    m = l - c / 2
    if h < 60:
        r, g, b = c, x, 0.0
    elif h < 120:
        r, g, b = x, c, 0.0
    elif h < 180:
        r, g, b = 0.0, c, x
    elif h < 240:
        r, g, b = 0.0, x, c
    elif h < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x
    return tuple(_js_round((v + m) * 255) for v in (r, g, b))  # type: ignore[return-value]


def _function_to_hex(node) -> str | None:
    if node.type != "function" or node.lower_name not in _COLOR_FUNCTIONS:
        return None
    args = _color_args(node.arguments)
    if len(args) < 3:
        return None
    if node.lower_name.startswith("rgb"):
        channels = [_channel(a) for a in args[:3]]
        if any(c is None for c in channels):
            return None
        rgb = tuple(channels)
    else:
        h = _hue(args[0])
        s = _percent(args[1])
        l = _percent(args[2])
        if h is None or s is None or l is None:
            return None
        rgb = _hsl_to_rgb(h, s, l)
    return "#" + "".join(f"{c:02x}" for c in rgb)


def color_to_hex(token: str) -> str:
    """Convert an ``rgb()/rgba()/hsl()/hsla()`` token to ``#rrggbb``.

    Anything else (hex, named colors, unparseable functions, channels with
    units the format has no use for) is returned unchanged.
    """
    nodes = [
        n
        for n in tinycss2.parse_component_value_list(token.strip())
        if n.type not in ("whitespace", "comment")
    ]
    if len(nodes) != 1:
        return token
    return _function_to_hex(nodes[0]) or token


def _normalize_word(word: list) -> str:
    if len(word) == 1:
        token = word[0]
        if token.type == "percentage":
            return f"{_js_round(token.value)}%"
        converted = _function_to_hex(token)
        if converted:
            return converted
    return tinycss2.serialize(word)


def _normalize_arguments(arguments) -> str:
    parts = []
    for arg in _split(arguments, ","):
        words: list[list] = [[]]
        for token in arg:
            if token.type in ("whitespace", "comment"):
                words.append([])
            else:
                words[-1].append(token)
        parts.append(" ".join(_normalize_word(w) for w in words if w))
    return ", ".join(parts)


def _rewrite(nodes, found: list[str]) -> None:
    for node in nodes:
        if node.type == "function" and node.lower_name in GRADIENT_FUNCTIONS:
            found.append(node.lower_name)
            text = _normalize_arguments(node.arguments)
            node.arguments = tinycss2.parse_component_value_list(text)
        elif node.type == "function":
            _rewrite(node.arguments, found)
        elif node.type in ("() block", "[] block"):
            _rewrite(node.content, found)


def normalize_gradients(value: str) -> NormalizedValue:
    """Normalize every gradient function found in a (variable-resolved) value."""
    if "gradient" not in value.lower():
        return NormalizedValue(value=value)
    nodes = tinycss2.parse_component_value_list(value)
    found: list[str] = []
    _rewrite(nodes, found)
    if not found:
        return NormalizedValue(value=value)
    warnings = [
        f"{func} may not be fully supported"
        for func in found
        if func.startswith("repeating-") or func == "conic-gradient"
    ]
    return NormalizedValue(
        value=tinycss2.serialize(nodes),
        warnings=list(dict.fromkeys(warnings)),
        gradients=len(found),
    )
