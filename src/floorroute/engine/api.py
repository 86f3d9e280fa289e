"""Pipeline API for floorplan navigation.

This module wires the scanner, classifier, geometry model, door locator and
routers together: analyze a drawing once, then plan routes to rooms found
by their label.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from ..core.config import (
    DEFAULT_DETECTION_CONFIG,
    DEFAULT_DOOR_CONFIG,
    DEFAULT_GEOMETRY_CONFIG,
    DEFAULT_GRID_CONFIG,
    DEFAULT_VISIBILITY_CONFIG,
    DetectionConfig,
    DoorConfig,
    GeometryConfig,
    GridConfig,
    VisibilityConfig,
)
from ..core.model import (
    Bounds,
    DetectionResult,
    EntranceMarker,
    GeometryResult,
    Point,
    RoomLabel,
    RootFrame,
)
from ..detect.classifier import classify
from ..geom.building import build_geometry
from ..geom.doors import locate_door
from ..io.scanner import parse_root_frame, scan_primitives
from ..routing import RouteStrategy, compute_route

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FloorplanAnalysis:
    """Everything derived from one drawing.

    Attributes:
        root_frame: Root coordinate box, ``None`` when undeclared.
        detection: Classified primitives.
        geometry: Bounds, cleaned walls and room boxes.
    """

    root_frame: Optional[RootFrame]
    detection: DetectionResult
    geometry: GeometryResult

    @property
    def routing_walls(self):
        """Cleaned walls, or the raw ones when cleaning removed them all."""
        return self.geometry.filtered_walls or self.detection.walls


@dataclass(frozen=True)
class RoutePlan:
    """Result of :func:`plan_route`.

    Attributes:
        target: Matched room label.
        door: Located doorway, ``None`` when none was found.
        goal: Route goal (the door, else the label anchor).
        start: Route start, ``None`` when no entrance or origin is usable.
        route: Route points, ``None`` when unreachable or without a start.
    """

    target: RoomLabel
    door: Optional[Point]
    goal: Point
    start: Optional[Point]
    route: Optional[List[Point]]


def detect(markup: str, config: DetectionConfig = DEFAULT_DETECTION_CONFIG) -> DetectionResult:
    """Scan and classify an SVG drawing."""
    return classify(scan_primitives(markup), parse_root_frame(markup), config)


def analyze(
    markup: str,
    detection_config: DetectionConfig = DEFAULT_DETECTION_CONFIG,
    geometry_config: GeometryConfig = DEFAULT_GEOMETRY_CONFIG,
) -> FloorplanAnalysis:
    """Run detection and the geometry model on an SVG drawing.

    Args:
        markup: Raw SVG text. Malformed or empty input yields empty results.
        detection_config: Classifier thresholds.
        geometry_config: Geometry model parameters.

    Returns:
        The combined analysis.
    """
    root_frame = parse_root_frame(markup)
    detection = classify(scan_primitives(markup), root_frame, detection_config)
    geometry = build_geometry(detection, geometry_config)
    return FloorplanAnalysis(root_frame, detection, geometry)


def find_rooms(
    room_labels: Sequence[RoomLabel], query: str, bounds: Optional[Bounds] = None
) -> List[RoomLabel]:
    """Labels matching ``query``, case-insensitively.

    Exact matches are returned when there are any, otherwise substring
    matches. When ``bounds`` is given and some matches lie inside it, only
    those are kept.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return []
    exact = [label for label in room_labels if label.id.lower() == needle]
    matches = exact or [label for label in room_labels if needle in label.id.lower()]
    if bounds is not None:
        inside = [label for label in matches if bounds.contains(label.point)]
        if inside:
            return inside
    return matches


def select_match(matches: Sequence[RoomLabel], index: int = 0) -> Optional[RoomLabel]:
    """Pick a match, clamping ``index`` into range."""
    if not matches:
        return None
    return matches[max(0, min(index, len(matches) - 1))]


def choose_start(
    entrances: Sequence[EntranceMarker],
    goal: Point,
    bounds: Optional[Bounds] = None,
    fallback: Optional[Point] = None,
) -> Optional[Point]:
    """Route start: the entrance nearest ``goal``, else ``fallback``.

    With ``bounds``, only entrances inside it are considered and the
    fallback is only used when it lies inside it too.
    """
    candidates = [e.point for e in entrances if e.point.is_finite()]
    if bounds is not None:
        candidates = [p for p in candidates if bounds.contains(p)]
    if candidates:
        return min(candidates, key=lambda p: p.distance_to(goal))
    if fallback is not None and fallback.is_finite():
        if bounds is None or bounds.contains(fallback):
            return fallback
    return None


def plan_route(
    analysis: FloorplanAnalysis,
    query: str,
    *,
    origin: Optional[Point] = None,
    match_index: int = 0,
    strategy: Union[str, RouteStrategy] = RouteStrategy.VISIBILITY,
    door_config: DoorConfig = DEFAULT_DOOR_CONFIG,
    visibility_config: VisibilityConfig = DEFAULT_VISIBILITY_CONFIG,
    grid_config: GridConfig = DEFAULT_GRID_CONFIG,
) -> Optional[RoutePlan]:
    """Plan a route to the room labelled ``query``.

    Args:
        analysis: Output of :func:`analyze`.
        query: Room label, matched as in :func:`find_rooms`.
        origin: Start used when the drawing has no usable entrance.
        match_index: Which of several matches to use.
        strategy: ``"visibility"`` or ``"grid"``.
        door_config: Door locator parameters.
        visibility_config: Visibility router parameters.
        grid_config: Grid router parameters.

    Returns:
        The plan, or ``None`` when no label matches ``query``.

    Raises:
        ValueError: If ``strategy`` is unknown.
    """
    strategy = RouteStrategy.parse(strategy)
    bounds = analysis.geometry.building_bounds
    target = select_match(find_rooms(analysis.detection.room_labels, query, bounds), match_index)
    if target is None:
        LOGGER.debug("No room matches %r", query)
        return None

    door = locate_door(target.point, analysis.detection.walls, door_config)
    goal = door or target.point
    start = choose_start(analysis.detection.entrances, goal, bounds, origin)
    if start is None:
        LOGGER.debug("No start point for %r", query)
        return RoutePlan(target, door, goal, None, None)

    route = compute_route(
        analysis.routing_walls,
        bounds,
        start,
        goal,
        strategy,
        room_boxes=analysis.geometry.room_boxes,
        visibility_config=visibility_config,
        grid_config=grid_config,
    )
    return RoutePlan(target, door, goal, start, route)
