"""Visibility-graph routing.

A sparse visibility graph is built over the start, the goal and nearby wall
endpoints, then searched with Dijkstra. When the graph does not connect the
two points a bounded greedy wall-slide is tried instead.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import networkx as nx
import numpy as np

from ..core.config import DEFAULT_VISIBILITY_CONFIG, VisibilityConfig
from ..core.model import Bounds, Point, WallSegment
from ..geom.segments import bbox_overlap, point_segment_distance, segment_bbox, segments_cross
from ..geom.spatial import WallIndex

LOGGER = logging.getLogger(__name__)


def _node_key(point: Point, scale: float) -> tuple:
    return round(point.x * scale), round(point.y * scale)


def collect_nodes(
    walls: Sequence[WallSegment],
    bounds: Optional[Bounds],
    start: Point,
    goal: Point,
    config: VisibilityConfig = DEFAULT_VISIBILITY_CONFIG,
) -> List[Point]:
    """Candidate graph nodes; ``start`` and ``goal`` are always the first two.

    Wall endpoints are taken from walls crossing the direct segment and from
    walls with an endpoint near the start or the goal.
    """
    if bounds is not None:
        envelope = bounds.expanded(config.bounds_margin)
        area = (envelope.min_x, envelope.min_y, envelope.max_x, envelope.max_y)
        relevant = [w for w in walls if bbox_overlap(segment_bbox(w.p1, w.p2), area)]
    else:
        relevant = list(walls)

    nodes = [start, goal]
    seen = {_node_key(start, config.node_key_scale), _node_key(goal, config.node_key_scale)}

    def push(point: Point) -> None:
        if not point.is_finite():
            return
        key = _node_key(point, config.node_key_scale)
        if key not in seen:
            seen.add(key)
            nodes.append(point)

    for wall in relevant:
        if segments_cross(start, goal, wall.p1, wall.p2):
            push(wall.p1)
            push(wall.p2)

    span = start.distance_to(goal) or 1.0
    radius = max(config.min_radius, min(config.max_radius, span * config.radius_factor))
    for anchor in (start, goal):
        for wall in relevant:
            if wall.p1.distance_to(anchor) <= radius or wall.p2.distance_to(anchor) <= radius:
                push(wall.p1)
                push(wall.p2)

    if len(nodes) > config.max_nodes:
        rest = sorted(nodes[2:], key=lambda p: point_segment_distance(p, start, goal))
        nodes = nodes[:2] + rest[: max(0, config.max_nodes - 2)]
    return nodes


def build_visibility_graph(
    nodes: Sequence[Point], index: WallIndex, neighbors: int = DEFAULT_VISIBILITY_CONFIG.neighbors
) -> nx.Graph:
    """Connect every node to those of its ``neighbors`` nearest nodes it can see.

    Nodes are the integer positions in ``nodes``; edges carry the Euclidean
    length as ``weight``.
    """
    graph = nx.Graph()
    graph.add_nodes_from(range(len(nodes)))
    if len(nodes) < 2:
        return graph

    coords = np.array([(p.x, p.y) for p in nodes], dtype=float)
    deltas = coords[:, None, :] - coords[None, :, :]
    distances = np.hypot(deltas[..., 0], deltas[..., 1])
    np.fill_diagonal(distances, np.inf)

    k = min(neighbors, len(nodes) - 1)
    for i in range(len(nodes)):
        for j in np.argsort(distances[i], kind="stable")[:k]:
            j = int(j)
            if graph.has_edge(i, j):
                continue
            if index.visible(nodes[i], nodes[j]):
                graph.add_edge(i, j, weight=float(distances[i, j]))
    return graph


def wall_slide(
    index: WallIndex, start: Point, goal: Point, max_steps: int = DEFAULT_VISIBILITY_CONFIG.max_slide_steps
) -> Optional[List[Point]]:
    """Greedy detour around the first blocking wall, repeated up to ``max_steps``.

    At each step the walk moves to the endpoint of the blocking wall closer
    to the goal if it is visible, otherwise to the other one.

    Returns:
        The path, or ``None`` when no blocking wall is found, neither of its
        endpoints is visible or the step cap is reached.
    """
    path = [start]
    current = start
    for _ in range(max_steps):
        if current.distance_to(goal) < 1e-6:
            return path
        if index.visible(current, goal):
            path.append(goal)
            return path
        wall = index.first_blocking(current, goal)
        if wall is None:
            return None
        options = sorted((wall.p1, wall.p2), key=lambda p: p.distance_to(goal))
        picked = next((p for p in options if index.visible(current, p)), None)
        if picked is None:
            return None
        path.append(picked)
        current = picked
    return None


def visibility_route(
    walls: Sequence[WallSegment],
    bounds: Optional[Bounds],
    start: Point,
    goal: Point,
    config: VisibilityConfig = DEFAULT_VISIBILITY_CONFIG,
) -> Optional[List[Point]]:
    """Route from ``start`` to ``goal`` around ``walls``.

    Args:
        walls: Obstacles; an empty set yields the direct segment.
        bounds: Building envelope used to preselect relevant walls.
        start: Finite start point.
        goal: Finite goal point.
        config: Graph parameters.

    Returns:
        Ordered points from ``start`` to ``goal``, or ``None`` if unreachable.
    """
    walls = list(walls)
    if not walls:
        return [start, goal]
    index = WallIndex(walls)
    if index.visible(start, goal):
        return [start, goal]

    nodes = collect_nodes(walls, bounds, start, goal, config)
    nodes = nodes[:2] + [n for n in nodes[2:] if not index.is_straight_joint(n)]
    graph = build_visibility_graph(nodes, index, config.neighbors)
    try:
        order = nx.dijkstra_path(graph, 0, 1, weight="weight")
    except nx.NetworkXNoPath:
        order = None
    if order:
        return [nodes[i] for i in order]

    LOGGER.debug(
        "No graph path over %d nodes / %d edges, trying wall slide",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    route = wall_slide(index, start, goal, config.max_slide_steps)
    if route is None:
        LOGGER.debug("Wall slide failed from %s to %s", start, goal)
    return route


def path_length(route: Sequence[Point]) -> float:
    """Total Euclidean length of a route."""
    return math.fsum(a.distance_to(b) for a, b in zip(route, route[1:]))
