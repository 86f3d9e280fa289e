"""Semantic classification of scanned SVG primitives.

Roles are inferred from visual cues only: stroke color and width for walls,
fill color for floor patches and entrances, a category hint on the
``data-type``/``id``/``class`` attributes for doors and corridors, and the
shape of the text for room labels. One primitive may produce several roles
(a floor rectangle with a wall-colored stroke yields a floor patch and walls).
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, List, Optional

from ..core.colors import is_near, normalize_color, parse_color, saturation
from ..core.config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from ..core.model import (
    CorridorMarker,
    DetectionResult,
    DoorMarker,
    EntranceMarker,
    FloorPatch,
    Point,
    RoomLabel,
    RootFrame,
    WallSegment,
)
from ..io.scanner import Primitive, parse_path_segments, parse_points, path_points, to_float

LOGGER = logging.getLogger(__name__)

SVG_DEFAULT_STROKE_WIDTH = 1.0

ROOM_LABEL_PATTERNS = (
    re.compile(r"[A-ZÆØÅ]{1,2}\.?\d+\.\d+"),  # A.1.34, B1.23
    re.compile(r"\b\d{2,}[A-Z]?\b"),  # 123, 123A
    re.compile(r"\b[A-ZÆØÅ]{1,2}\d{1,4}[A-Z]?\b"),  # S15, A101
)


def is_room_label(text: str) -> bool:
    """Check whether a text run looks like a room code."""
    return any(pattern.search(text) for pattern in ROOM_LABEL_PATTERNS)


def has_category(attributes: dict, keyword: str) -> bool:
    """Case-insensitive category hint on ``data-type``, ``id`` or ``class``."""
    keyword = keyword.lower()
    data_type = (attributes.get("data-type") or attributes.get("dataType") or "").lower()
    if data_type == keyword:
        return True
    for name in ("id", "class"):
        if keyword in (attributes.get(name) or "").lower():
            return True
    return False


def is_floor_fill(fill: str, config: DetectionConfig = DEFAULT_DETECTION_CONFIG) -> bool:
    color = normalize_color(fill)
    if not color:
        return False
    if color in config.floor_colors:
        return True
    return is_near(color, config.floor_reference_color, config.floor_color_tolerance)


def is_entrance_fill(fill: str, config: DetectionConfig = DEFAULT_DETECTION_CONFIG) -> bool:
    return is_near(fill, config.entrance_reference_color, config.entrance_color_tolerance)


def wall_stroke_band(stroke: str, config: DetectionConfig = DEFAULT_DETECTION_CONFIG) -> Optional[tuple]:
    """Return the width band a wall stroke color belongs to, or ``None``.

    Reference colors use the structural band; the low-saturation fallback
    uses the hairline band.
    """
    color = normalize_color(stroke)
    if not color:
        return None
    if color in config.wall_colors:
        return config.structural_width_range
    rgb = parse_color(color)
    if rgb is None:
        return None
    if color.startswith("rgb") and is_near(color, config.wall_reference_color, config.wall_color_tolerance):
        return config.structural_width_range
    if saturation(rgb) < config.gray_saturation_max:
        return config.hairline_width_range
    return None


def is_wall_stroke(
    stroke: str,
    stroke_width: Optional[float],
    root_frame: Optional[RootFrame] = None,
    config: DetectionConfig = DEFAULT_DETECTION_CONFIG,
) -> bool:
    """Check stroke color and width against the wall heuristics."""
    band = wall_stroke_band(stroke, config)
    if band is None:
        return False
    width = SVG_DEFAULT_STROKE_WIDTH if stroke_width is None else stroke_width
    if config.stroke_width_in_pixels and root_frame is not None and root_frame.width > 0:
        width = width * config.viewport_width_px / root_frame.width
    low, high = band
    return low <= width <= high


def _centroid(points: List[Point]) -> Point:
    return Point(
        sum(p.x for p in points) / len(points),
        sum(p.y for p in points) / len(points),
    )


def _edges(points: List[Point], closed: bool) -> List[tuple]:
    pairs = list(zip(points, points[1:]))
    if closed and len(points) > 2:
        pairs.append((points[-1], points[0]))
    return pairs


class _Collector:
    """Accumulates classified features in source order."""

    def __init__(self, root_frame: Optional[RootFrame], config: DetectionConfig):
        self.root_frame = root_frame
        self.config = config
        self.walls: List[WallSegment] = []
        self.floors: List[FloorPatch] = []
        self.entrances: List[EntranceMarker] = []
        self.doors: List[DoorMarker] = []
        self.corridors: List[CorridorMarker] = []
        self.labels: List[RoomLabel] = []
        self.stroke_counts: Counter = Counter()
        self.fill_counts: Counter = Counter()

    def add_walls(self, edges: Iterable[tuple], source: str, primitive: Primitive) -> None:
        for a, b in edges:
            if a.is_finite() and b.is_finite():
                self.walls.append(
                    WallSegment(
                        a,
                        b,
                        source_kind=source,
                        stroke_color=primitive.style.stroke,
                        stroke_width=(
                            primitive.style.stroke_width
                            if primitive.style.stroke_width is not None
                            else SVG_DEFAULT_STROKE_WIDTH
                        ),
                    )
                )

    def add_floor(self, points: List[Point], source: str) -> None:
        finite = [p for p in points if p.is_finite()]
        if finite:
            self.floors.append(
                FloorPatch(
                    min(p.x for p in finite),
                    min(p.y for p in finite),
                    max(p.x for p in finite),
                    max(p.y for p in finite),
                    source_kind=source,
                )
            )

    def is_wall(self, primitive: Primitive) -> bool:
        return is_wall_stroke(
            primitive.style.stroke, primitive.style.stroke_width, self.root_frame, self.config
        )

    def classify_rect(self, primitive: Primitive) -> None:
        attrs = primitive.attributes
        x = to_float(attrs.get("x")) or 0.0
        y = to_float(attrs.get("y")) or 0.0
        w = to_float(attrs.get("width")) or 0.0
        h = to_float(attrs.get("height")) or 0.0
        m = primitive.transform
        corners = [m.apply(Point(x, y)), m.apply(Point(x + w, y)),
                   m.apply(Point(x + w, y + h)), m.apply(Point(x, y + h))]
        center = m.apply(Point(x + w / 2, y + h / 2))
        fill = primitive.style.fill

        if has_category(attrs, self.config.door_keyword):
            self.doors.append(DoorMarker(center, attrs.get("id") or None, "rect"))
        elif has_category(attrs, self.config.corridor_keyword):
            outline = tuple(corners) + (corners[0],)
            self.corridors.append(CorridorMarker(outline, attrs.get("id") or None, "rect"))
        elif is_entrance_fill(fill, self.config):
            self.entrances.append(EntranceMarker(center, "rect"))
        elif is_floor_fill(fill, self.config):
            self.add_floor(corners, "rect")
            self.add_walls(_edges(corners, closed=True), "floor-rect", primitive)

        if self.is_wall(primitive):
            self.add_walls(_edges(corners, closed=True), "rect", primitive)

    def classify_line(self, primitive: Primitive) -> None:
        attrs = primitive.attributes
        m = primitive.transform
        p1 = m.apply(Point(to_float(attrs.get("x1")) or 0.0, to_float(attrs.get("y1")) or 0.0))
        p2 = m.apply(Point(to_float(attrs.get("x2")) or 0.0, to_float(attrs.get("y2")) or 0.0))
        mid = Point((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)

        if self.is_wall(primitive):
            self.add_walls([(p1, p2)], "line", primitive)
        if has_category(attrs, self.config.door_keyword):
            self.doors.append(DoorMarker(mid, attrs.get("id") or None, "line"))
        elif has_category(attrs, self.config.corridor_keyword):
            self.corridors.append(CorridorMarker((p1, p2), attrs.get("id") or None, "line"))
        elif is_entrance_fill(primitive.style.fill, self.config):
            self.entrances.append(EntranceMarker(mid, "line"))

    def classify_polyline(self, primitive: Primitive) -> None:
        attrs = primitive.attributes
        points = [primitive.transform.apply(p) for p in parse_points(attrs.get("points"))]

        if self.is_wall(primitive):
            self.add_walls(_edges(points, closed=False), "polyline", primitive)
        if has_category(attrs, self.config.door_keyword):
            if len(points) >= 2:
                mid = Point((points[0].x + points[-1].x) / 2, (points[0].y + points[-1].y) / 2)
                self.doors.append(DoorMarker(mid, attrs.get("id") or None, "polyline"))
        elif has_category(attrs, self.config.corridor_keyword):
            if len(points) >= 2:
                self.corridors.append(CorridorMarker(tuple(points), attrs.get("id") or None, "polyline"))
        elif is_entrance_fill(primitive.style.fill, self.config) and points:
            self.entrances.append(EntranceMarker(_centroid(points), "polyline"))

    def classify_polygon(self, primitive: Primitive) -> None:
        points = [primitive.transform.apply(p) for p in parse_points(primitive.attributes.get("points"))]
        fill = primitive.style.fill

        if is_entrance_fill(fill, self.config) and len(points) > 2:
            self.entrances.append(EntranceMarker(_centroid(points), "polygon"))
        elif is_floor_fill(fill, self.config) and len(points) > 2:
            self.add_floor(points, "polygon")
            self.add_walls(_edges(points, closed=True), "floor-polygon", primitive)

        if self.is_wall(primitive):
            self.add_walls(_edges(points, closed=True), "polygon", primitive)

    def classify_path(self, primitive: Primitive) -> None:
        d = primitive.attributes.get("d") or ""
        m = primitive.transform
        fill = primitive.style.fill
        segments = [(m.apply(a), m.apply(b)) for a, b in parse_path_segments(d)]

        if self.is_wall(primitive):
            self.add_walls(segments, "path", primitive)
        if is_entrance_fill(fill, self.config) and d:
            points = path_points(d)
            if points:
                self.entrances.append(EntranceMarker(m.apply(_centroid(points)), "path"))
        elif is_floor_fill(fill, self.config) and segments:
            self.add_floor([p for segment in segments for p in segment], "path")
            self.add_walls(segments, "floor-path", primitive)

    def classify(self, primitive: Primitive) -> None:
        if primitive.kind != "text":
            self.fill_counts[primitive.style.fill] += 1
            self.stroke_counts[primitive.style.stroke] += 1
        handler = getattr(self, f"classify_{primitive.kind}", None)
        if handler is not None:
            handler(primitive)


def _text_anchors(primitives: Iterable[Primitive]) -> List[RoomLabel]:
    anchors = []
    for primitive in primitives:
        if primitive.kind != "text":
            continue
        for run in primitive.text_runs:
            point = primitive.transform.apply(Point(run.x, run.y))
            if point.is_finite():
                anchors.append(RoomLabel(run.text, point))
    return anchors


def correct_flipped_labels(
    anchors: List[RoomLabel],
    root_frame: Optional[RootFrame],
    config: DetectionConfig = DEFAULT_DETECTION_CONFIG,
) -> List[RoomLabel]:
    """Shift every anchor down by the frame height when most sit at negative y.

    Some PDF to SVG exporters flip the y axis of text only; the correction
    applies to the whole document.
    """
    if len(anchors) < config.min_labels_for_flip or root_frame is None:
        return anchors
    negative = sum(1 for label in anchors if label.point.y < 0)
    if negative / len(anchors) <= config.negative_label_ratio:
        return anchors
    LOGGER.debug("Flipping %d text anchors by %.2f", len(anchors), root_frame.height)
    return [
        RoomLabel(label.id, Point(label.point.x, label.point.y + root_frame.height))
        for label in anchors
    ]


def classify(
    primitives: Iterable[Primitive],
    root_frame: Optional[RootFrame] = None,
    config: DetectionConfig = DEFAULT_DETECTION_CONFIG,
) -> DetectionResult:
    """Assign semantic roles to scanned primitives.

    Args:
        primitives: Output of :func:`floorroute.io.scanner.scan_primitives`.
        root_frame: Root coordinate box, used for the y-flip correction and
            pixel stroke widths.
        config: Detection thresholds.

    Returns:
        DetectionResult with walls, floors, entrances, doors, room labels and
        corridors.
    """
    primitives = list(primitives)
    collector = _Collector(root_frame, config)
    for primitive in primitives:
        collector.classify(primitive)

    anchors = correct_flipped_labels(_text_anchors(primitives), root_frame, config)
    labels = [label for label in anchors if is_room_label(label.id)]

    LOGGER.debug(
        "Detected walls=%d floors=%d entrances=%d doors=%d corridors=%d rooms=%d; top strokes=%s; top fills=%s",
        len(collector.walls),
        len(collector.floors),
        len(collector.entrances),
        len(collector.doors),
        len(collector.corridors),
        len(labels),
        collector.stroke_counts.most_common(8),
        collector.fill_counts.most_common(8),
    )
    return DetectionResult(
        walls=tuple(collector.walls),
        floors=tuple(collector.floors),
        entrances=tuple(collector.entrances),
        doors=tuple(collector.doors),
        room_labels=tuple(labels),
        corridors=tuple(collector.corridors),
    )
