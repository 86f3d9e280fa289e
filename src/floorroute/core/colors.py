"""Color parsing helpers for the semantic classifier."""

from __future__ import annotations

import colorsys
import re

from matplotlib import colors as mcolors

_RGB_PATTERN = re.compile(
    r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*(\d+(?:\.\d+)?)\s*)?\)$",
    re.IGNORECASE,
)


def normalize_color(value: str | None) -> str:
    """Lower-case a color value and strip whitespace and stray quotes."""
    if not value:
        return ""
    return value.strip().strip("'\"").strip().lower()


def parse_color(value: str | None) -> tuple[int, int, int] | None:
    """Parse a CSS color into an 8-bit ``(r, g, b)`` tuple.

    Accepts ``#rgb``, ``#rrggbb``, ``rgb(r,g,b)``, ``rgba(r,g,b,a)`` and
    the named colors matplotlib knows. Returns ``None`` for ``none``,
    gradients and anything unparsable.
    """
    color = normalize_color(value)
    if not color or color in ("none", "transparent") or color.startswith("url("):
        return None

    match = _RGB_PATTERN.match(color)
    if match:
        r, g, b = (min(255, int(match.group(i))) for i in range(1, 4))
        return r, g, b

    if color.startswith("#") and len(color) not in (4, 7):
        return None
    try:
        r, g, b = mcolors.to_rgb(color)
    except ValueError:
        return None
    return round(r * 255), round(g * 255), round(b * 255)


def channel_distance(a: tuple[int, int, int], b: tuple[int, int, int]) -> int:
    """Combined per-channel distance ``|dR| + |dG| + |dB|``."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) + abs(a[2] - b[2])


def is_near(value: str | None, reference: str, tolerance: int) -> bool:
    """True when ``value`` parses and lies strictly within ``tolerance`` of ``reference``."""
    rgb = parse_color(value)
    ref = parse_color(reference)
    if rgb is None or ref is None:
        return False
    return channel_distance(rgb, ref) < tolerance


def saturation(rgb: tuple[int, int, int]) -> float:
    """HSL saturation in ``[0, 1]``."""
    _, _, s = colorsys.rgb_to_hls(rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0)
    return s
