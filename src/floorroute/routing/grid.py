"""Grid routing.

The building envelope is sampled on a regular lattice, nodes near walls (or
inside known room boxes) are blocked, and A* searches the 8-connected
walkable nodes. A relaxed lattice is tried once when the first search fails.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from ..core.config import DEFAULT_GRID_CONFIG, GridConfig
from ..core.model import Bounds, Point, RoomBox, WallSegment
from ..geom.spatial import WallIndex

LOGGER = logging.getLogger(__name__)

MIN_CELLS = 16

Node = Tuple[int, int]  # (column, row)


@dataclass(frozen=True, eq=False)
class WalkGrid:
    """Lattice of ``(rows + 1) x (cols + 1)`` nodes over a bounding box.

    Attributes:
        origin: Position of node ``(0, 0)``.
        step_x: Horizontal node spacing.
        step_y: Vertical node spacing.
        clearance: Wall clearance used to block nodes.
        walkable: Boolean array indexed ``[row, column]``.
    """

    origin: Point
    step_x: float
    step_y: float
    clearance: float
    walkable: np.ndarray

    @property
    def cols(self) -> int:
        return self.walkable.shape[1] - 1

    @property
    def rows(self) -> int:
        return self.walkable.shape[0] - 1

    def point(self, node: Node) -> Point:
        i, j = node
        return Point(self.origin.x + i * self.step_x, self.origin.y + j * self.step_y)

    def is_walkable(self, node: Node) -> bool:
        i, j = node
        return 0 <= i <= self.cols and 0 <= j <= self.rows and bool(self.walkable[j, i])

    def with_walkable(self, walkable: np.ndarray) -> WalkGrid:
        return WalkGrid(self.origin, self.step_x, self.step_y, self.clearance, walkable)


def grid_clearance(step_x: float, step_y: float, config: GridConfig = DEFAULT_GRID_CONFIG) -> float:
    if config.clearance is not None:
        return config.clearance
    return max(config.min_clearance, min(step_x, step_y) * config.clearance_factor)


def build_walk_grid(
    bounds: Optional[Bounds],
    walls: Sequence[WallSegment],
    room_boxes: Sequence[RoomBox] = (),
    config: GridConfig = DEFAULT_GRID_CONFIG,
) -> Optional[WalkGrid]:
    """Sample ``bounds`` and mark the walkable nodes.

    Args:
        bounds: Area to cover; ``None`` or a degenerate box yields ``None``.
        walls: Obstacles.
        room_boxes: Nodes inside any of these boxes are blocked.
        config: Lattice size and clearance.

    Returns:
        The walk grid, or ``None`` when there is nothing to sample.
    """
    if bounds is None or not (bounds.width > 0 and bounds.height > 0):
        return None
    cols = max(MIN_CELLS, config.cols)
    rows = max(MIN_CELLS, config.rows)
    step_x = bounds.width / cols
    step_y = bounds.height / rows
    clearance = grid_clearance(step_x, step_y, config)

    index = WallIndex(walls)
    walkable = np.ones((rows + 1, cols + 1), dtype=bool)
    for j in range(rows + 1):
        y = bounds.min_y + j * step_y
        for i in range(cols + 1):
            p = Point(bounds.min_x + i * step_x, y)
            if any(box.contains(p) for box in room_boxes) or index.near(p, clearance):
                walkable[j, i] = False

    LOGGER.debug(
        "Walk grid %dx%d, clearance %.2f, %d walkable nodes",
        cols + 1,
        rows + 1,
        clearance,
        int(walkable.sum()),
    )
    return WalkGrid(Point(bounds.min_x, bounds.min_y), step_x, step_y, clearance, walkable)


def relax_grid(walkable: np.ndarray) -> np.ndarray:
    """Open interior blocked nodes that have at least three walkable 4-neighbours.

    The scan updates its own output, so openings propagate in row-major order.
    """
    relaxed = walkable.copy()
    height, width = relaxed.shape
    for j in range(1, height - 1):
        for i in range(1, width - 1):
            if relaxed[j, i]:
                continue
            open_sides = (
                int(relaxed[j, i - 1])
                + int(relaxed[j, i + 1])
                + int(relaxed[j - 1, i])
                + int(relaxed[j + 1, i])
            )
            if open_sides >= 3:
                relaxed[j, i] = True
    return relaxed


def snap_to_grid(
    grid: WalkGrid, point: Point, radii: Sequence[int] = DEFAULT_GRID_CONFIG.snap_radii
) -> Optional[Node]:
    """Nearest walkable node within the first square radius that has one."""
    ci = int(round((point.x - grid.origin.x) / grid.step_x))
    cj = int(round((point.y - grid.origin.y) / grid.step_y))
    for radius in radii:
        best = None
        best_distance = math.inf
        for j in range(cj - radius, cj + radius + 1):
            for i in range(ci - radius, ci + radius + 1):
                if not grid.is_walkable((i, j)):
                    continue
                distance = grid.point((i, j)).distance_to(point)
                if distance < best_distance:
                    best = (i, j)
                    best_distance = distance
        if best is not None:
            return best
    return None


def grid_graph(grid: WalkGrid) -> nx.Graph:
    """8-connected graph of walkable nodes; diagonals may not cut corners."""
    graph = nx.Graph()
    diagonal = math.hypot(grid.step_x, grid.step_y)
    for j in range(grid.rows + 1):
        for i in range(grid.cols + 1):
            if not grid.walkable[j, i]:
                continue
            graph.add_node((i, j))
            if grid.is_walkable((i + 1, j)):
                graph.add_edge((i, j), (i + 1, j), weight=grid.step_x)
            if grid.is_walkable((i, j + 1)):
                graph.add_edge((i, j), (i, j + 1), weight=grid.step_y)
            for di in (-1, 1):
                corner = (i + di, j + 1)
                if (
                    grid.is_walkable(corner)
                    and grid.is_walkable((i + di, j))
                    and grid.is_walkable((i, j + 1))
                ):
                    graph.add_edge((i, j), corner, weight=diagonal)
    return graph


def _octile(grid: WalkGrid):
    diagonal = math.hypot(grid.step_x, grid.step_y)

    def heuristic(a: Node, b: Node) -> float:
        di = abs(a[0] - b[0])
        dj = abs(a[1] - b[1])
        m = min(di, dj)
        return m * diagonal + (di - m) * grid.step_x + (dj - m) * grid.step_y

    return heuristic


def astar_on_grid(grid: WalkGrid, source: Node, target: Node) -> Optional[List[Node]]:
    if not (grid.is_walkable(source) and grid.is_walkable(target)):
        return None
    try:
        return nx.astar_path(grid_graph(grid), source, target, heuristic=_octile(grid), weight="weight")
    except nx.NetworkXNoPath:
        return None


def grid_route(
    walls: Sequence[WallSegment],
    bounds: Optional[Bounds],
    start: Point,
    goal: Point,
    room_boxes: Sequence[RoomBox] = (),
    config: GridConfig = DEFAULT_GRID_CONFIG,
) -> Optional[List[Point]]:
    """Route from ``start`` to ``goal`` over the walk grid.

    The node path runs between the snapped grid nodes; ``start`` and ``goal``
    are joined to its ends when they do not sit exactly on a node. Two
    points that snap to the same node are joined directly.

    Returns:
        ``start``, the node positions along the path and ``goal``, or
        ``None`` when bounds are missing, an endpoint cannot be snapped, or
        no path exists even after relaxing.
    """
    grid = build_walk_grid(bounds, walls, room_boxes, config)
    if grid is None:
        return None
    source = snap_to_grid(grid, start, config.snap_radii)
    target = snap_to_grid(grid, goal, config.snap_radii)
    if source is None or target is None:
        LOGGER.debug("Could not snap %s / %s to a walkable node", start, goal)
        return None

    if source == target:
        return [start, goal]

    nodes = astar_on_grid(grid, source, target)
    if nodes is None:
        LOGGER.debug("No grid path, retrying on relaxed grid")
        nodes = astar_on_grid(grid.with_walkable(relax_grid(grid.walkable)), source, target)
    if nodes is None:
        return None
    route = [grid.point(node) for node in nodes]
    if route[0] != start:
        route.insert(0, start)
    if route[-1] != goal:
        route.append(goal)
    return route
