import math
from dataclasses import replace

import pytest

from floorroute.core.config import DEFAULT_VISIBILITY_CONFIG
from floorroute.core.model import Bounds, Point, WallSegment
from floorroute.geom.segments import segments_cross
from floorroute.geom.spatial import WallIndex
from floorroute.routing import RouteStrategy, compute_route, path_length, wall_slide
from floorroute.routing.visibility import build_visibility_graph, collect_nodes, visibility_route


def wall(x1, y1, x2, y2):
    return WallSegment(Point(x1, y1), Point(x2, y2))


def crosses_any(route, walls):
    return any(
        segments_cross(a, b, w.p1, w.p2) for a, b in zip(route, route[1:]) for w in walls
    )


# Every wall overshoots the corners, so no endpoint can see the enclosed point.
ENCLOSURE = [
    wall(35, 40, 65, 40),
    wall(35, 60, 65, 60),
    wall(40, 35, 40, 65),
    wall(60, 35, 60, 65),
]


def square(x0, y0, x1, y1):
    return [
        wall(x0, y0, x1, y0),
        wall(x1, y0, x1, y1),
        wall(x1, y1, x0, y1),
        wall(x0, y1, x0, y0),
    ]


class TestDirect:
    def test_no_walls(self):
        start, goal = Point(0, 0), Point(10, 10)
        assert visibility_route([], None, start, goal) == [start, goal]

    def test_clear_line_of_sight(self):
        start, goal = Point(0, 0), Point(100, 0)
        assert visibility_route([wall(0, 10, 100, 10)], None, start, goal) == [start, goal]

    @pytest.mark.parametrize(
        "obstacle",
        [wall(20, 0, 40, 0), wall(50, 0, 50, 50)],
        ids=["collinear", "touching"],
    )
    def test_degenerate_contacts_are_passable(self, obstacle):
        start, goal = Point(0, 0), Point(100, 0)
        assert visibility_route([obstacle], None, start, goal) == [start, goal]


class TestDetour:
    def test_around_single_wall(self):
        walls = [wall(50, -50, 50, 50)]
        start, goal = Point(0, 0), Point(100, 0)
        route = visibility_route(walls, None, start, goal)
        assert route[0] == start and route[-1] == goal
        assert len(route) == 3
        assert route[1] in (Point(50, 50), Point(50, -50))
        assert not crosses_any(route, walls)

    def test_shortest_detour(self):
        walls = [wall(50, -10, 50, 80)]
        route = visibility_route(walls, None, Point(0, 0), Point(100, 0))
        assert route[1] == Point(50, -10)
        assert path_length(route) == pytest.approx(2 * math.hypot(50, 10))

    def test_enclosed_goal_is_unreachable(self):
        assert visibility_route(ENCLOSURE, None, Point(0, 0), Point(50, 50)) is None

    def test_deterministic(self):
        walls = [wall(50, -50, 50, 50), wall(70, -20, 70, 90)]
        first = visibility_route(walls, None, Point(0, 0), Point(100, 0))
        second = visibility_route(walls, None, Point(0, 0), Point(100, 0))
        assert first == second


class TestGraph:
    def test_node_cap_keeps_start_and_goal(self):
        walls = [wall(x, -5, x, 5) for x in range(10, 100, 2)]
        config = replace(DEFAULT_VISIBILITY_CONFIG, max_nodes=10)
        start, goal = Point(0, 0), Point(100, 0)
        nodes = collect_nodes(walls, Bounds(0, -5, 100, 5), start, goal, config)
        assert len(nodes) == 10
        assert nodes[:2] == [start, goal]

    def test_nodes_are_deduplicated(self):
        walls = [wall(50, -50, 50, 50), wall(50.01, 50.01, 80, 50)]
        nodes = collect_nodes(walls, None, Point(0, 0), Point(100, 0))
        assert Point(50.01, 50.01) not in nodes
        assert Point(50, 50) in nodes

    def test_edges_only_between_visible_nodes(self):
        walls = [wall(50, -50, 50, 50)]
        nodes = [Point(0, 0), Point(100, 0), Point(50, 50), Point(50, -50)]
        graph = build_visibility_graph(nodes, WallIndex(walls))
        assert not graph.has_edge(0, 1)
        assert graph.has_edge(0, 2)
        assert graph[0][2]["weight"] == pytest.approx(math.hypot(50, 50))


class TestWallSlide:
    def test_slides_around_wall(self):
        walls = [wall(50, -10, 50, 80)]
        route = wall_slide(WallIndex(walls), Point(0, 0), Point(100, 0))
        assert route == [Point(0, 0), Point(50, -10), Point(100, 0)]

    def test_gives_up_on_enclosure(self):
        assert wall_slide(WallIndex(ENCLOSURE), Point(0, 0), Point(50, 50), max_steps=10) is None

    def test_fails_when_no_endpoint_is_visible(self):
        walls = [wall(50, -50, 50, 50), wall(30, 20, 30, 60), wall(30, -60, 30, -20)]
        assert wall_slide(WallIndex(walls), Point(0, 0), Point(100, 0)) is None


class TestComputeRoute:
    def test_same_point(self):
        p = Point(10, 10)
        assert compute_route([wall(0, 0, 20, 20)], None, p, p) == [p]
        assert compute_route([], None, p, Point(10, 10 + 1e-9), "grid") == [p]

    def test_non_finite_points(self):
        assert compute_route([], None, Point(math.nan, 0), Point(1, 1)) is None
        assert compute_route([], None, Point(0, 0), Point(math.inf, 1), "grid") is None

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown routing strategy"):
            compute_route([], None, Point(0, 0), Point(1, 1), "teleport")

    def test_strategy_parsing(self):
        assert RouteStrategy.parse("GRID") is RouteStrategy.GRID
        assert RouteStrategy.parse(RouteStrategy.VISIBILITY) is RouteStrategy.VISIBILITY

    def test_default_is_visibility(self):
        start, goal = Point(0, 0), Point(100, 0)
        assert compute_route([], None, start, goal) == [start, goal]


class TestJunctions:
    def test_sealed_square_is_unreachable(self):
        walls = square(40, 40, 60, 60)
        assert compute_route(walls, None, Point(0, 0), Point(50, 45)) is None

    def test_line_through_corner_is_blocked(self):
        index = WallIndex(square(40, 40, 60, 60))
        assert not index.visible(Point(30, 30), Point(50, 50))
        assert not index.visible(Point(40, 40), Point(50, 45))
        assert not index.visible(Point(50, 45), Point(40, 40))

    def test_grazing_corner_is_visible(self):
        index = WallIndex(square(40, 40, 60, 60))
        assert index.visible(Point(30, 50), Point(50, 30))
        assert index.visible(Point(0, 0), Point(40, 40))
        assert index.visible(Point(40, 40), Point(40, 0))

    def test_split_wall_is_not_a_gap(self):
        walls = [wall(50, -50, 50, 0), wall(50, 0, 50, 50)]
        assert not WallIndex(walls).visible(Point(0, 0), Point(100, 0))
        route = visibility_route(walls, None, Point(0, 0), Point(100, 0))
        assert route is not None
        assert Point(50, 0) not in route

    def test_route_around_closed_room(self):
        walls = square(40, 40, 60, 60)
        start, goal = Point(30, 30), Point(70, 70)
        route = compute_route(walls, None, start, goal)
        assert route[0] == start and route[-1] == goal
        assert route[1] in (Point(60, 40), Point(40, 60))
        assert path_length(route) == pytest.approx(2 * math.hypot(30, 10))
