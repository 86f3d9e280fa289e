import pytest

from floorroute import analyze, plan_route
from floorroute.core.model import Bounds, EntranceMarker, Point, RoomLabel
from floorroute.engine.api import choose_start, find_rooms, select_match
from floorroute.geom.segments import segments_cross

LABELS = [
    RoomLabel("A.1.01", Point(10, 10)),
    RoomLabel("A.1.010", Point(20, 10)),
    RoomLabel("B.2.01", Point(500, 10)),
]

# A closed floor patch with one room and no entrance.
FLOOR_ONLY_SVG = """<svg viewBox="0 0 100 100">
  <rect x="0" y="0" width="100" height="100" fill="#d9e2e8"/>
  <text x="50" y="50">1.01</text>
</svg>"""


class TestFindRooms:
    def test_exact_match_wins(self):
        assert find_rooms(LABELS, "a.1.01") == [LABELS[0]]

    def test_substring_fallback(self):
        assert find_rooms(LABELS, "1.01") == LABELS[:2]

    def test_prefers_labels_inside_bounds(self):
        bounds = Bounds(0, 0, 100, 100)
        assert find_rooms(LABELS, ".01", bounds) == LABELS[:2]
        assert find_rooms(LABELS, "B.2", bounds) == [LABELS[2]]

    @pytest.mark.parametrize("query", ["", "   ", None, "C.3"])
    def test_no_match(self, query):
        assert find_rooms(LABELS, query) == []


class TestSelectMatch:
    def test_clamps_index(self):
        assert select_match(LABELS, 1) is LABELS[1]
        assert select_match(LABELS, 99) is LABELS[2]
        assert select_match(LABELS, -3) is LABELS[0]

    def test_empty(self):
        assert select_match([], 0) is None


class TestChooseStart:
    ENTRANCES = [EntranceMarker(Point(0, 0)), EntranceMarker(Point(90, 90))]

    def test_nearest_entrance(self):
        assert choose_start(self.ENTRANCES, Point(80, 80)) == Point(90, 90)

    def test_entrances_outside_bounds_are_skipped(self):
        bounds = Bounds(-10, -10, 50, 50)
        assert choose_start(self.ENTRANCES, Point(80, 80), bounds) == Point(0, 0)

    def test_fallback(self):
        origin = Point(5, 5)
        assert choose_start([], Point(80, 80), fallback=origin) == origin
        assert choose_start([], Point(80, 80), Bounds(10, 10, 20, 20), origin) is None
        assert choose_start([], Point(80, 80)) is None


class TestAnalyze:
    def test_counts(self, floorplan_svg):
        analysis = analyze(floorplan_svg)
        detection = analysis.detection
        assert len(detection.walls) == 6
        assert len(detection.floors) == 1
        assert detection.entrances[0].point == Point(20, 50)
        assert [label.id for label in detection.room_labels] == ["A.1.01", "B.2.02"]
        assert analysis.root_frame.width == 200

    def test_empty_markup(self):
        analysis = analyze("")
        assert analysis.detection.walls == ()
        assert analysis.geometry.building_bounds is None
        assert plan_route(analysis, "101") is None


class TestPlanRoute:
    def test_visibility_route(self, floorplan_svg):
        analysis = analyze(floorplan_svg)
        plan = plan_route(analysis, "A.1.01")
        assert plan.target.id == "A.1.01"
        assert plan.door.x == pytest.approx(120)
        assert plan.door.y == pytest.approx(16.25)
        assert plan.goal == plan.door
        assert plan.start == Point(20, 50)
        assert plan.route[0] == plan.start
        assert plan.route[1] == Point(60, 70)
        assert plan.route[-1] == plan.door
        assert not any(
            segments_cross(a, b, w.p1, w.p2)
            for a, b in zip(plan.route, plan.route[1:])
            for w in analysis.detection.walls
        )

    def test_substring_query(self, floorplan_svg):
        plan = plan_route(analyze(floorplan_svg), "b.2")
        assert plan.target.id == "B.2.02"
        assert plan.route is not None

    def test_grid_cannot_reach_door_on_room_box(self, floorplan_svg):
        plan = plan_route(analyze(floorplan_svg), "A.1.01", strategy="grid")
        assert plan.door is not None
        assert plan.start == Point(20, 50)
        assert plan.route is None

    def test_unknown_room(self, floorplan_svg):
        assert plan_route(analyze(floorplan_svg), "Z.9.99") is None

    def test_unknown_strategy(self, floorplan_svg):
        with pytest.raises(ValueError):
            plan_route(analyze(floorplan_svg), "A.1.01", strategy="teleport")

    def test_origin_fallback(self):
        analysis = analyze(FLOOR_ONLY_SVG)
        assert analysis.detection.entrances == ()

        plan = plan_route(analysis, "1.01")
        assert plan.door is None
        assert plan.goal == Point(50, 50)
        assert plan.start is None and plan.route is None

        plan = plan_route(analysis, "1.01", origin=Point(10, 10))
        assert plan.route == [Point(10, 10), Point(50, 50)]

        plan = plan_route(analysis, "1.01", origin=Point(500, 500))
        assert plan.start is None

    def test_deterministic(self, floorplan_svg):
        first = plan_route(analyze(floorplan_svg), "A.1.01")
        second = plan_route(analyze(floorplan_svg), "A.1.01")
        assert first == second
