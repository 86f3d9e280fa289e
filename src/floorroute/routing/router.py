"""Strategy dispatch for route computation."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Sequence, Union

from ..core.config import (
    DEFAULT_GRID_CONFIG,
    DEFAULT_VISIBILITY_CONFIG,
    GridConfig,
    VisibilityConfig,
)
from ..core.model import Bounds, Point, RoomBox, WallSegment
from .grid import grid_route
from .visibility import visibility_route

LOGGER = logging.getLogger(__name__)

SAME_POINT_TOLERANCE = 1e-6


class RouteStrategy(str, Enum):
    """Available routing strategies."""

    VISIBILITY = "visibility"
    GRID = "grid"

    @classmethod
    def parse(cls, value: Union[str, RouteStrategy]) -> RouteStrategy:
        """Accept an enum member or its name/value, case-insensitively.

        Raises:
            ValueError: If ``value`` names no strategy.
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        for member in cls:
            if member.value == name:
                return member
        raise ValueError(f"Unknown routing strategy: {value!r}")


def compute_route(
    walls: Sequence[WallSegment],
    bounds: Optional[Bounds],
    start: Point,
    goal: Point,
    strategy: Union[str, RouteStrategy] = RouteStrategy.VISIBILITY,
    *,
    room_boxes: Sequence[RoomBox] = (),
    visibility_config: VisibilityConfig = DEFAULT_VISIBILITY_CONFIG,
    grid_config: GridConfig = DEFAULT_GRID_CONFIG,
) -> Optional[List[Point]]:
    """Compute a wall-avoiding route from ``start`` to ``goal``.

    Args:
        walls: Obstacles.
        bounds: Building envelope; required by the grid strategy.
        start: Route start.
        goal: Route goal.
        strategy: ``"visibility"`` or ``"grid"``.
        room_boxes: Boxes blocked by the grid strategy.
        visibility_config: Parameters of the visibility router.
        grid_config: Parameters of the grid router.

    Returns:
        The route, ``[start]`` when start and goal coincide, or ``None``
        when either point is not finite or no route is found.

    Raises:
        ValueError: If ``strategy`` is unknown.
    """
    strategy = RouteStrategy.parse(strategy)
    if not (start.is_finite() and goal.is_finite()):
        return None
    if start.distance_to(goal) <= SAME_POINT_TOLERANCE:
        return [start]

    if strategy is RouteStrategy.GRID:
        route = grid_route(walls, bounds, start, goal, room_boxes, grid_config)
    else:
        route = visibility_route(walls, bounds, start, goal, visibility_config)

    LOGGER.debug(
        "%s route %s -> %s: %s",
        strategy.value,
        start,
        goal,
        f"{len(route)} points" if route else "unreachable",
    )
    return route
