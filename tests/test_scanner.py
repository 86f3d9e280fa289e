import pytest

from floorroute.core.model import IDENTITY, Point, RootFrame, Transform
from floorroute.io.scanner import (
    GroupStateIndex,
    own_style,
    parse_attributes,
    parse_path_segments,
    parse_points,
    parse_root_frame,
    parse_transform,
    resolve_style_at,
    resolve_transform_at,
    scan_primitives,
    to_float,
)


class TestNumbers:
    @pytest.mark.parametrize(
        "value, expected",
        [("12", 12.0), ("12,5", 12.5), ("3px", 3.0), ("-1e2", -100.0), (".5", 0.5)],
    )
    def test_to_float(self, value, expected):
        assert to_float(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "abc", "px"])
    def test_to_float_invalid(self, value):
        assert to_float(value) is None

    def test_parse_points_pairs_numbers(self):
        assert parse_points("0,0 10,0 10 10 5") == [Point(0, 0), Point(10, 0), Point(10, 10)]


class TestTransforms:
    def test_translate(self):
        assert parse_transform("translate(10,20)").apply(Point(1, 1)) == Point(11, 21)

    def test_translate_single_argument(self):
        assert parse_transform("translate(7)") == Transform.translate(7, 0)

    def test_matrix(self):
        m = parse_transform("matrix(2 0 0 3 5 6)")
        assert m.apply(Point(1, 1)) == Point(7, 9)

    def test_list_is_composed_left_to_right(self):
        m = parse_transform("translate(10) matrix(2,0,0,2,0,0)")
        assert m.apply(Point(1, 1)) == Point(12, 2)

    @pytest.mark.parametrize("value", [None, "", "rotate(45)", "scale(2)", "matrix(1,2)"])
    def test_unsupported_forms_are_identity(self, value):
        assert parse_transform(value) == IDENTITY


class TestStyle:
    def test_attribute_beats_inline_style(self):
        attrs = parse_attributes('<rect fill="#FF0000" style="fill:#00ff00; stroke: #246B89"/>')
        style = own_style(attrs)
        assert style.fill == "#ff0000"
        assert style.stroke == "#246b89"
        assert style.stroke_width is None

    def test_inline_stroke_width(self):
        style = own_style(parse_attributes('<line style="stroke-width:2.5px"/>'))
        assert style.stroke_width == 2.5


class TestPaths:
    def test_absolute_closed_path(self):
        segments = parse_path_segments("M0 0 L10 0 L10 10 Z")
        assert segments == [
            (Point(0, 0), Point(10, 0)),
            (Point(10, 0), Point(10, 10)),
            (Point(10, 10), Point(0, 0)),
        ]

    def test_relative_commands(self):
        segments = parse_path_segments("m0 0 l10 0 v5 h-10 z")
        assert segments == [
            (Point(0, 0), Point(10, 0)),
            (Point(10, 0), Point(10, 5)),
            (Point(10, 5), Point(0, 5)),
            (Point(0, 5), Point(0, 0)),
        ]

    def test_implicit_lineto_after_moveto(self):
        assert len(parse_path_segments("M0 0 10 0 10 10")) == 2

    def test_curves_move_the_pen_without_segments(self):
        segments = parse_path_segments("M0 0 C 1 1 2 2 10 0 L 10 10")
        assert segments == [(Point(10, 0), Point(10, 10))]

    def test_truncated_arguments_stop_parsing(self):
        assert parse_path_segments("M0 0 L10") == []

    def test_empty(self):
        assert parse_path_segments("") == []


class TestRootFrame:
    def test_view_box(self):
        assert parse_root_frame('<svg viewBox="0 0 200 100">') == RootFrame(0, 0, 200, 100)

    def test_width_height_fallback(self):
        assert parse_root_frame('<svg width="300px" height="150">') == RootFrame(0, 0, 300, 150)

    def test_missing(self):
        assert parse_root_frame("<g></g>") is None
        assert parse_root_frame(None) is None


class TestGroupState:
    MARKUP = (
        '<svg><g transform="translate(10,0)" stroke="#246b89">'
        '<g transform="translate(0,5)" stroke-width="2"><line id="inner"/></g>'
        '<line id="middle"/></g>'
        '<g transform="translate(100,0)"/><line id="outer"/></svg>'
    )

    def offset(self, marker):
        return self.MARKUP.index(marker)

    def test_nested_transforms_compose(self):
        m = resolve_transform_at(self.MARKUP, self.offset('<line id="inner"'))
        assert m.apply(Point(0, 0)) == Point(10, 5)

    def test_closed_group_is_popped(self):
        m = resolve_transform_at(self.MARKUP, self.offset('<line id="middle"'))
        assert m.apply(Point(0, 0)) == Point(10, 0)

    def test_self_closing_group_is_ignored(self):
        assert resolve_transform_at(self.MARKUP, self.offset('<line id="outer"')) == IDENTITY

    def test_style_inherits_nearest_ancestor(self):
        style = resolve_style_at(self.MARKUP, self.offset('<line id="inner"'))
        assert style.stroke == "#246b89"
        assert style.stroke_width == 2.0

    def test_unmatched_close_is_ignored(self):
        index = GroupStateIndex("</g><g transform=\"translate(1,1)\"><rect/></g>")
        assert index.transform_at(40).apply(Point(0, 0)) == Point(1, 1)


class TestScanPrimitives:
    def test_empty_or_malformed(self):
        assert scan_primitives("") == []
        assert scan_primitives("   ") == []
        assert scan_primitives("<svg><rect") == []

    def test_kinds_in_fixed_order(self):
        markup = (
            '<svg><text x="1" y="2">101</text><path d="M0 0 L1 1"/>'
            '<line x1="0" y1="0" x2="1" y2="1"/><rect x="0" y="0" width="1" height="1"/></svg>'
        )
        assert [p.kind for p in scan_primitives(markup)] == ["rect", "line", "path", "text"]

    def test_element_transform_applies_after_group(self):
        markup = '<g transform="translate(10,0)"><rect transform="translate(0,20)" x="0" y="0"/></g>'
        (rect,) = scan_primitives(markup)
        assert rect.transform.apply(Point(0, 0)) == Point(10, 20)

    def test_text_runs_from_tspans(self):
        markup = '<text x="5" y="6"><tspan x="10" y="20">A.1.34</tspan><tspan>B&amp;C</tspan></text>'
        (text,) = scan_primitives(markup)
        assert [(r.text, r.x, r.y) for r in text.text_runs] == [("A.1.34", 10, 20), ("B&C", 5, 6)]

    def test_plain_text_run(self):
        (text,) = scan_primitives('<text x="3" y="4">  S15 </text>')
        assert [(r.text, r.x, r.y) for r in text.text_runs] == [("S15", 3, 4)]

    def test_similar_tag_names_are_not_matched(self):
        markup = '<linearGradient id="g"/><pattern id="p"/><textPath>101</textPath>'
        assert scan_primitives(markup) == []
