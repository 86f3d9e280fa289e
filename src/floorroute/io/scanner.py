"""Lightweight SVG scanner for floorplan drawings.

This module extracts typed primitives (rect, line, polyline, polygon, path
and text) from raw SVG text without building an element tree. Each element
tag type is matched independently across the whole document; nesting only
matters for the transform and style inherited from enclosing ``<g>`` groups,
which are resolved from a single pre-pass over the group tokens.
"""

from __future__ import annotations

import html
import math
import re
from bisect import bisect_left
from dataclasses import dataclass, field

from ..core.model import IDENTITY, Point, RootFrame, Transform

PRIMITIVE_KINDS = ("rect", "line", "polyline", "polygon", "path")

_NUMBER = r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?"
_NUMBER_PATTERN = re.compile(_NUMBER)
_PATH_TOKEN_PATTERN = re.compile(rf"{_NUMBER}|[A-Za-z]")
_ATTR_PATTERN = re.compile(r"""([A-Za-z_][\w:.-]*)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
_ROOT_PATTERN = re.compile(r"<\s*svg\b([\s\S]*?)>", re.IGNORECASE)
_GROUP_TOKEN_PATTERN = re.compile(r"<\s*g\b[^>]*>|<\s*/\s*g\s*>", re.IGNORECASE)
_TAG_PATTERNS = {
    kind: re.compile(rf"<\s*{kind}\b[^>]*>", re.IGNORECASE) for kind in PRIMITIVE_KINDS
}
_TEXT_PATTERN = re.compile(r"<\s*text\b([^>]*)>([\s\S]*?)<\s*/\s*text\s*>", re.IGNORECASE)
_TSPAN_PATTERN = re.compile(r"<\s*tspan\b([^>]*)>([\s\S]*?)<\s*/\s*tspan\s*>", re.IGNORECASE)
_INNER_TAG_PATTERN = re.compile(r"<[^>]+>")
_TRANSFORM_PATTERN = re.compile(r"([A-Za-z]+)\s*\(([^)]*)\)")

# Numeric arity of the path commands that are consumed without emitting segments.
_SKIPPED_COMMAND_ARITY = {"c": 6, "s": 4, "q": 4, "t": 2, "a": 7}


@dataclass(frozen=True)
class Style:
    """Effective presentation style of an element.

    Attributes:
        fill: Fill color, lower-cased, ``""`` when unset.
        stroke: Stroke color, lower-cased, ``""`` when unset.
        stroke_width: Stroke width in local units, ``None`` when unset.
    """

    fill: str = ""
    stroke: str = ""
    stroke_width: float | None = None

    def merged(self, own: Style) -> Style:
        """Return ``own`` with unset properties inherited from ``self``."""
        return Style(
            fill=own.fill or self.fill,
            stroke=own.stroke or self.stroke,
            stroke_width=own.stroke_width if own.stroke_width is not None else self.stroke_width,
        )


@dataclass(frozen=True)
class TextRun:
    """One positioned run of text, in the text element's local coordinates."""

    text: str
    x: float
    y: float


@dataclass(frozen=True)
class Primitive:
    """A scanned element with its resolved transform and style.

    Attributes:
        kind: One of ``rect``, ``line``, ``polyline``, ``polygon``, ``path``, ``text``.
        attributes: Raw attributes of the opening tag.
        offset: Character offset of the opening tag in the markup.
        transform: Composed group transform times the element's own transform.
        style: Effective style, element values overriding inherited ones.
        text_runs: Positioned runs for ``text`` primitives.
    """

    kind: str
    attributes: dict = field(default_factory=dict)
    offset: int = 0
    transform: Transform = IDENTITY
    style: Style = Style()
    text_runs: tuple[TextRun, ...] = ()


def to_float(value) -> float | None:
    """Parse the leading number of an attribute value.

    A comma decimal separator is accepted and trailing units are ignored.
    Returns ``None`` for missing, unparsable or non-finite values.
    """
    if value is None:
        return None
    text = str(value).strip().replace(",", ".", 1)
    match = _NUMBER_PATTERN.match(text)
    if not match:
        return None
    number = float(match.group(0))
    return number if math.isfinite(number) else None


def first_float(value) -> float | None:
    """First finite number of a whitespace/comma separated list attribute."""
    if not value:
        return None
    for part in re.split(r"[\s,]+", str(value).strip()):
        number = to_float(part)
        if number is not None:
            return number
    return None


def parse_attributes(tag: str) -> dict:
    """Parse ``key="value"`` / ``key='value'`` pairs of a tag."""
    attributes = {}
    for match in _ATTR_PATTERN.finditer(tag):
        value = match.group(2) if match.group(2) is not None else match.group(3)
        attributes[match.group(1)] = value
    return attributes


def parse_style_declarations(style: str | None) -> dict:
    """Parse an inline ``style`` attribute into a property map."""
    declarations = {}
    if not style:
        return declarations
    for item in str(style).split(";"):
        key, sep, value = item.partition(":")
        if sep and key.strip():
            declarations[key.strip().lower()] = value.strip()
    return declarations


def parse_transform(value: str | None) -> Transform:
    """Parse a transform attribute.

    Only ``translate(tx[,ty])`` and ``matrix(a,b,c,d,e,f)`` are understood;
    a list of them is composed left to right and other forms are identity.
    """
    if not value:
        return IDENTITY
    result = IDENTITY
    for match in _TRANSFORM_PATTERN.finditer(value):
        name = match.group(1).lower()
        args = [float(n) for n in _NUMBER_PATTERN.findall(match.group(2))]
        if not all(math.isfinite(n) for n in args):
            continue
        if name == "translate" and len(args) in (1, 2):
            step = Transform.translate(args[0], args[1] if len(args) == 2 else 0.0)
        elif name == "matrix" and len(args) == 6:
            step = Transform(*args)
        else:
            continue
        result = result.compose(step)
    return result


def own_style(attributes: dict) -> Style:
    """Style declared on the element itself; attributes win over inline style."""
    declarations = parse_style_declarations(attributes.get("style"))
    fill = attributes.get("fill") or declarations.get("fill") or ""
    stroke = attributes.get("stroke") or declarations.get("stroke") or ""
    width = attributes.get("stroke-width") or declarations.get("stroke-width")
    return Style(
        fill=fill.strip().lower(),
        stroke=stroke.strip().lower(),
        stroke_width=to_float(width),
    )


def parse_points(value: str | None) -> list[Point]:
    """Parse a ``points`` attribute into finite points."""
    if not value:
        return []
    numbers = [float(n) for n in _NUMBER_PATTERN.findall(value)]
    points = []
    for i in range(0, len(numbers) - 1, 2):
        point = Point(numbers[i], numbers[i + 1])
        if point.is_finite():
            points.append(point)
    return points


def parse_path_segments(d: str | None) -> list[tuple[Point, Point]]:
    """Convert path data into straight segments.

    Absolute and relative ``M``, ``L``, ``H``, ``V`` and ``Z`` produce
    segments. Curve and arc commands are consumed without producing a
    segment; the pen still moves to their end point.
    """
    if not d:
        return []
    tokens = _PATH_TOKEN_PATTERN.findall(d)
    segments = []
    cur = Point(0.0, 0.0)
    start = cur
    cmd = ""
    i = 0

    def take(count):
        nonlocal i
        values = []
        while len(values) < count and i < len(tokens) and not tokens[i].isalpha():
            values.append(float(tokens[i]))
            i += 1
        return values if len(values) == count else None

    def emit(a, b):
        if a.is_finite() and b.is_finite():
            segments.append((a, b))

    while i < len(tokens):
        token = tokens[i]
        if token.isalpha():
            cmd = token
            i += 1
            if cmd in "Zz":
                emit(cur, start)
                cur = start
                cmd = ""
            continue
        if not cmd:
            i += 1
            continue

        lower = cmd.lower()
        relative = cmd != cmd.upper()
        if lower == "m":
            args = take(2)
            if args is None:
                break
            cur = Point(cur.x + args[0], cur.y + args[1]) if relative else Point(*args)
            start = cur
            cmd = "l" if relative else "L"
        elif lower == "l":
            args = take(2)
            if args is None:
                break
            nxt = Point(cur.x + args[0], cur.y + args[1]) if relative else Point(*args)
            emit(cur, nxt)
            cur = nxt
        elif lower == "h":
            args = take(1)
            if args is None:
                break
            nxt = Point(cur.x + args[0] if relative else args[0], cur.y)
            emit(cur, nxt)
            cur = nxt
        elif lower == "v":
            args = take(1)
            if args is None:
                break
            nxt = Point(cur.x, cur.y + args[0] if relative else args[0])
            emit(cur, nxt)
            cur = nxt
        elif lower in _SKIPPED_COMMAND_ARITY:
            args = take(_SKIPPED_COMMAND_ARITY[lower])
            if args is None:
                break
            ex, ey = args[-2], args[-1]
            cur = Point(cur.x + ex, cur.y + ey) if relative else Point(ex, ey)
        else:
            while i < len(tokens) and not tokens[i].isalpha():
                i += 1
    return segments


def path_points(d: str | None) -> list[Point]:
    """Coordinate pairs appearing in path data, used for marker centroids."""
    if not d:
        return []
    points = []
    for match in re.finditer(rf"({_NUMBER})[ ,]({_NUMBER})", d):
        point = Point(float(match.group(1)), float(match.group(2)))
        if point.is_finite():
            points.append(point)
    return points


def parse_root_frame(markup: str | None) -> RootFrame | None:
    """Read the root coordinate box from ``viewBox`` or ``width``/``height``."""
    if not markup:
        return None
    match = _ROOT_PATTERN.search(markup)
    if not match:
        return None
    attributes = parse_attributes(match.group(1) or "")
    view_box = attributes.get("viewBox")
    if view_box:
        parts = [to_float(p) for p in re.split(r"[\s,]+", view_box.strip()) if p]
        if len(parts) == 4 and all(p is not None for p in parts):
            return RootFrame(*parts)
    width = to_float(re.sub(r"[^0-9.\-]", "", attributes.get("width", "")))
    height = to_float(re.sub(r"[^0-9.\-]", "", attributes.get("height", "")))
    if width is not None and height is not None:
        return RootFrame(0.0, 0.0, width, height)
    return None


class GroupStateIndex:
    """Offset-indexed table of the group transform and style stack.

    The markup is walked once; after every ``<g>`` open or close token the
    composed transform and the inherited style are recorded. Queries look up
    the last token strictly before an offset with a binary search.
    """

    def __init__(self, markup: str | None):
        self._offsets: list[int] = []
        self._states: list[tuple[Transform, Style]] = []
        stack: list[tuple[Transform, Style]] = []

        for match in _GROUP_TOKEN_PATTERN.finditer(markup or ""):
            token = match.group(0)
            if token.lstrip("< \t\r\n").startswith("/"):
                if stack:
                    stack.pop()
            elif token.rstrip("> \t\r\n").endswith("/"):
                continue
            else:
                attributes = parse_attributes(token)
                parent_transform, parent_style = stack[-1] if stack else (IDENTITY, Style())
                stack.append(
                    (
                        parent_transform.compose(parse_transform(attributes.get("transform"))),
                        parent_style.merged(own_style(attributes)),
                    )
                )
            self._offsets.append(match.start())
            self._states.append(stack[-1] if stack else (IDENTITY, Style()))

    def state_at(self, offset: int) -> tuple[Transform, Style]:
        index = bisect_left(self._offsets, offset) - 1
        if index < 0:
            return IDENTITY, Style()
        return self._states[index]

    def transform_at(self, offset: int) -> Transform:
        return self.state_at(offset)[0]

    def style_at(self, offset: int) -> Style:
        return self.state_at(offset)[1]


def resolve_transform_at(markup: str, offset: int) -> Transform:
    """Composed transform of the groups enclosing ``offset``."""
    return GroupStateIndex(markup).transform_at(offset)


def resolve_style_at(markup: str, offset: int) -> Style:
    """Inherited group style at ``offset`` (nearest ancestor wins)."""
    return GroupStateIndex(markup).style_at(offset)


def _clean_text(raw: str) -> str:
    text = _INNER_TAG_PATTERN.sub(" ", raw)
    text = re.sub(r"\s+", " ", text).strip()
    return html.unescape(text)


def _text_runs(attributes: dict, inner: str) -> tuple[TextRun, ...]:
    base_x = first_float(attributes.get("x"))
    base_y = first_float(attributes.get("y"))
    runs = []
    had_tspan = False
    for match in _TSPAN_PATTERN.finditer(inner):
        had_tspan = True
        span_attributes = parse_attributes(match.group(1) or "")
        text = _clean_text(match.group(2) or "")
        if not text:
            continue
        x = first_float(span_attributes.get("x"))
        y = first_float(span_attributes.get("y"))
        x = base_x if x is None else x
        y = base_y if y is None else y
        if x is not None and y is not None:
            runs.append(TextRun(text, x, y))
    if not had_tspan:
        text = _clean_text(inner)
        if text and base_x is not None and base_y is not None:
            runs.append(TextRun(text, base_x, base_y))
    return tuple(runs)


def scan_primitives(markup: str | None, index: GroupStateIndex | None = None) -> list[Primitive]:
    """Extract typed primitives with resolved transforms and styles.

    Args:
        markup: Raw SVG text.
        index: Precomputed group state for ``markup``; built when omitted.

    Returns:
        Primitives grouped by kind (rect, line, polyline, polygon, path,
        text), each group in source order. Empty input yields ``[]``.
    """
    if not markup or not markup.strip():
        return []
    if index is None:
        index = GroupStateIndex(markup)

    primitives = []
    for kind in PRIMITIVE_KINDS:
        for match in _TAG_PATTERNS[kind].finditer(markup):
            attributes = parse_attributes(match.group(0))
            parent_transform, inherited = index.state_at(match.start())
            primitives.append(
                Primitive(
                    kind=kind,
                    attributes=attributes,
                    offset=match.start(),
                    transform=parent_transform.compose(parse_transform(attributes.get("transform"))),
                    style=inherited.merged(own_style(attributes)),
                )
            )

    for match in _TEXT_PATTERN.finditer(markup):
        attributes = parse_attributes(match.group(1) or "")
        parent_transform, inherited = index.state_at(match.start())
        primitives.append(
            Primitive(
                kind="text",
                attributes=attributes,
                offset=match.start(),
                transform=parent_transform.compose(parse_transform(attributes.get("transform"))),
                style=inherited.merged(own_style(attributes)),
                text_runs=_text_runs(attributes, match.group(2) or ""),
            )
        )
    return primitives
