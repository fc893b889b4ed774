"""Tests for per-shape operations."""

import math

import pytest

from cutpath.core.shapes import (
    UnsupportedGeometryError,
    arc_sweep,
    is_shape_closed,
    reverse_shape,
    shape_bounding_box,
    shape_end_point,
    shape_start_point,
    shape_tangent,
    tessellate_shape,
)
from cutpath.domain import Arc, Circle, Ellipse, Line, Point2D, Polyline, Shape, Spline


def _assert_point(actual: Point2D | None, x: float, y: float) -> None:
    assert actual is not None
    assert actual.x == pytest.approx(x, abs=1e-9)
    assert actual.y == pytest.approx(y, abs=1e-9)


@pytest.fixture
def quarter_arc() -> Shape:
    """Counter-clockwise quarter arc from (10, 0) to (0, 10)."""
    return Shape(id="arc", geometry=Arc(Point2D(0, 0), 10.0, 0.0, math.pi / 2))


@pytest.fixture
def square_polyline() -> Shape:
    points = (Point2D(0, 0), Point2D(10, 0), Point2D(10, 10), Point2D(0, 10))
    return Shape(id="poly", geometry=Polyline(points=points, closed=True))


class TestEndpoints:
    """Tests for start and end points."""

    def test_line(self) -> None:
        shape = Shape(id="l", geometry=Line(Point2D(1, 2), Point2D(3, 4)))
        assert shape_start_point(shape) == Point2D(1, 2)
        assert shape_end_point(shape) == Point2D(3, 4)

    def test_arc(self, quarter_arc: Shape) -> None:
        _assert_point(shape_start_point(quarter_arc), 10, 0)
        _assert_point(shape_end_point(quarter_arc), 0, 10)

    def test_circle_starts_at_rightmost_point(self) -> None:
        shape = Shape(id="c", geometry=Circle(Point2D(5, 5), 2.0))
        assert shape_start_point(shape) == Point2D(7, 5)
        assert shape_end_point(shape) == Point2D(7, 5)

    def test_closed_polyline_ends_at_start(self, square_polyline: Shape) -> None:
        assert shape_start_point(square_polyline) == Point2D(0, 0)
        assert shape_end_point(square_polyline) == Point2D(0, 0)

    def test_open_polyline(self) -> None:
        shape = Shape(id="p", geometry=Polyline(points=(Point2D(0, 0), Point2D(4, 0), Point2D(4, 3))))
        assert shape_end_point(shape) == Point2D(4, 3)

    def test_elliptical_arc(self) -> None:
        shape = Shape(
            id="e",
            geometry=Ellipse(Point2D(0, 0), Point2D(2, 0), 0.5, start_param=0.0, end_param=math.pi),
        )
        _assert_point(shape_start_point(shape), 2, 0)
        _assert_point(shape_end_point(shape), -2, 0)

    def test_spline(self) -> None:
        shape = Shape(
            id="s",
            geometry=Spline(control_points=(Point2D(0, 0), Point2D(1, 2), Point2D(3, 0)), degree=2),
        )
        _assert_point(shape_start_point(shape), 0, 0)
        _assert_point(shape_end_point(shape), 3, 0)

    def test_malformed_shapes_have_no_endpoints(self) -> None:
        """Test that malformed shapes report None instead of raising."""
        empty = Shape(id="p", geometry=Polyline(points=(Point2D(0, 0),)))
        zero_circle = Shape(id="c", geometry=Circle(Point2D(0, 0), 0.0))
        negative_arc = Shape(id="a", geometry=Arc(Point2D(0, 0), -1.0, 0.0, 1.0))
        for shape in (empty, zero_circle, negative_arc):
            assert shape_start_point(shape) is None
            assert shape_end_point(shape) is None


class TestClosure:
    """Tests for single-shape closure."""

    def test_always_closed_kinds(self) -> None:
        assert is_shape_closed(Shape(id="c", geometry=Circle(Point2D(0, 0), 1.0)))
        assert is_shape_closed(Shape(id="e", geometry=Ellipse(Point2D(0, 0), Point2D(2, 0), 0.5)))

    def test_line_never_closed(self) -> None:
        assert not is_shape_closed(Shape(id="l", geometry=Line(Point2D(0, 0), Point2D(0, 0))))

    def test_flagged_polyline(self, square_polyline: Shape) -> None:
        assert is_shape_closed(square_polyline)

    def test_polyline_returning_to_start(self) -> None:
        points = (Point2D(0, 0), Point2D(1, 0), Point2D(1, 1), Point2D(0, 0))
        assert is_shape_closed(Shape(id="p", geometry=Polyline(points=points)))

    def test_partial_arc_open(self, quarter_arc: Shape) -> None:
        assert not is_shape_closed(quarter_arc)

    def test_full_turn_arc_closed(self) -> None:
        shape = Shape(id="a", geometry=Arc(Point2D(0, 0), 5.0, 0.0, 2 * math.pi))
        assert arc_sweep(shape.geometry) == pytest.approx(2 * math.pi)  # type: ignore[arg-type]
        assert is_shape_closed(shape)


class TestReversal:
    """Tests for direction reversal."""

    def test_line(self) -> None:
        shape = Shape(id="l", geometry=Line(Point2D(0, 0), Point2D(5, 0)), layer="cut")
        reversed_shape = reverse_shape(shape)
        assert reversed_shape.id == "l"
        assert reversed_shape.layer == "cut"
        assert shape_start_point(reversed_shape) == Point2D(5, 0)

    def test_arc_swaps_endpoints_and_direction(self, quarter_arc: Shape) -> None:
        reversed_shape = reverse_shape(quarter_arc)
        assert isinstance(reversed_shape.geometry, Arc)
        assert reversed_shape.geometry.clockwise
        _assert_point(shape_start_point(reversed_shape), 0, 10)
        _assert_point(shape_end_point(reversed_shape), 10, 0)

    def test_closed_polyline_keeps_first_vertex(self, square_polyline: Shape) -> None:
        reversed_shape = reverse_shape(square_polyline)
        assert isinstance(reversed_shape.geometry, Polyline)
        assert reversed_shape.geometry.points == (
            Point2D(0, 0),
            Point2D(0, 10),
            Point2D(10, 10),
            Point2D(10, 0),
        )

    def test_circle_unchanged(self) -> None:
        shape = Shape(id="c", geometry=Circle(Point2D(0, 0), 1.0))
        assert reverse_shape(shape) is shape

    def test_spline_reverses_endpoints(self) -> None:
        shape = Shape(
            id="s",
            geometry=Spline(control_points=(Point2D(0, 0), Point2D(1, 2), Point2D(3, 0)), degree=2),
        )
        reversed_shape = reverse_shape(shape)
        _assert_point(shape_start_point(reversed_shape), 3, 0)
        _assert_point(shape_end_point(reversed_shape), 0, 0)

    def test_unsupported_geometry(self) -> None:
        shape = Shape(id="x", geometry="not a geometry")  # type: ignore[arg-type]
        with pytest.raises(UnsupportedGeometryError):
            reverse_shape(shape)


class TestTangents:
    """Tests for travel direction."""

    def test_line(self) -> None:
        shape = Shape(id="l", geometry=Line(Point2D(0, 0), Point2D(0, 3)))
        assert shape_tangent(shape, at_start=True) == pytest.approx((0.0, 1.0))

    def test_arc_follows_winding(self, quarter_arc: Shape) -> None:
        assert shape_tangent(quarter_arc, at_start=True) == pytest.approx((0.0, 1.0), abs=1e-9)
        assert shape_tangent(quarter_arc, at_start=False) == pytest.approx((-1.0, 0.0), abs=1e-9)
        reversed_arc = reverse_shape(quarter_arc)
        assert shape_tangent(reversed_arc, at_start=True) == pytest.approx((1.0, 0.0), abs=1e-9)

    def test_closed_polyline_end_uses_closing_segment(self, square_polyline: Shape) -> None:
        assert shape_tangent(square_polyline, at_start=False) == pytest.approx((0.0, -1.0))

    def test_spline_start(self) -> None:
        shape = Shape(
            id="s",
            geometry=Spline(control_points=(Point2D(0, 0), Point2D(1, 2), Point2D(3, 0)), degree=2),
        )
        expected = (1 / math.sqrt(5), 2 / math.sqrt(5))
        assert shape_tangent(shape, at_start=True) == pytest.approx(expected, abs=1e-4)

    def test_malformed_defaults_to_x_axis(self) -> None:
        shape = Shape(id="p", geometry=Polyline(points=()))
        assert shape_tangent(shape, at_start=True) == (1.0, 0.0)


class TestTessellation:
    """Tests for tessellation density and ordering."""

    def test_line(self) -> None:
        shape = Shape(id="l", geometry=Line(Point2D(0, 0), Point2D(5, 0)))
        assert tessellate_shape(shape) == [Point2D(0, 0), Point2D(5, 0)]

    def test_small_arc_uses_minimum_segments(self, quarter_arc: Shape) -> None:
        points = tessellate_shape(quarter_arc)
        assert len(points) == 9
        _assert_point(points[0], 10, 0)
        _assert_point(points[-1], 0, 10)

    def test_density_grows_with_radius(self) -> None:
        small = Shape(id="a", geometry=Arc(Point2D(0, 0), 10.0, 0.0, math.pi))
        large = Shape(id="b", geometry=Arc(Point2D(0, 0), 100.0, 0.0, math.pi))
        assert len(tessellate_shape(large)) > len(tessellate_shape(small))

    def test_circle_repeats_start(self) -> None:
        points = tessellate_shape(Shape(id="c", geometry=Circle(Point2D(0, 0), 1.0)))
        assert len(points) == 33
        assert points[0] == points[-1]

    def test_closed_polyline_repeats_start(self, square_polyline: Shape) -> None:
        points = tessellate_shape(square_polyline)
        assert len(points) == 5
        assert points[-1] == Point2D(0, 0)

    def test_points_lie_on_ellipse(self) -> None:
        ellipse = Ellipse(Point2D(1, 1), Point2D(4, 0), 0.5)
        for p in tessellate_shape(Shape(id="e", geometry=ellipse)):
            value = ((p.x - 1) / 4) ** 2 + ((p.y - 1) / 2) ** 2
            assert value == pytest.approx(1.0)

    @pytest.mark.parametrize(
        ("start_param", "end_param", "clockwise", "first", "last"),
        [
            (0.0, math.pi, False, (2, 0), (-2, 0)),
            (math.pi, 0.0, True, (-2, 0), (2, 0)),
        ],
    )
    def test_partial_ellipse(self, start_param, end_param, clockwise, first, last) -> None:
        ellipse = Ellipse(
            Point2D(0, 0),
            Point2D(2, 0),
            0.5,
            start_param=start_param,
            end_param=end_param,
            clockwise=clockwise,
        )
        points = tessellate_shape(Shape(id="e", geometry=ellipse))
        _assert_point(points[0], *first)
        _assert_point(points[-1], *last)
        assert all(p.y >= -1e-9 for p in points)

    def test_ellipse_without_end_param_is_full(self) -> None:
        """Test that a lone start parameter only moves the seam."""
        ellipse = Ellipse(Point2D(0, 0), Point2D(2, 0), 0.5, start_param=math.pi / 2)
        points = tessellate_shape(Shape(id="e", geometry=ellipse))
        _assert_point(points[0], 0, 1)
        _assert_point(points[-1], 0, 1)
        assert min(p.y for p in points) == pytest.approx(-1.0, abs=0.01)

    def test_malformed_is_empty(self) -> None:
        assert tessellate_shape(Shape(id="c", geometry=Circle(Point2D(0, 0), 0.0))) == []


class TestBoundingBox:
    """Tests for shape extents."""

    def test_half_circle_arc_is_exact(self) -> None:
        shape = Shape(id="a", geometry=Arc(Point2D(0, 0), 10.0, 0.0, math.pi))
        bbox = shape_bounding_box(shape)
        assert bbox is not None
        assert bbox.min_x == pytest.approx(-10)
        assert bbox.max_x == pytest.approx(10)
        assert bbox.min_y == pytest.approx(0, abs=1e-9)
        assert bbox.max_y == pytest.approx(10)

    def test_clockwise_arc(self) -> None:
        # Clockwise from 90 degrees down to 0 degrees covers the first quadrant only
        shape = Shape(
            id="a", geometry=Arc(Point2D(0, 0), 10.0, math.pi / 2, 0.0, clockwise=True)
        )
        bbox = shape_bounding_box(shape)
        assert bbox is not None
        assert bbox.min_x == pytest.approx(0, abs=1e-9)
        assert bbox.min_y == pytest.approx(0, abs=1e-9)
        assert bbox.max_x == pytest.approx(10)
        assert bbox.max_y == pytest.approx(10)

    def test_circle(self) -> None:
        bbox = shape_bounding_box(Shape(id="c", geometry=Circle(Point2D(1, 2), 3.0)))
        assert bbox is not None
        assert (bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y) == (-2, -1, 4, 5)

    def test_malformed_is_none(self) -> None:
        assert shape_bounding_box(Shape(id="p", geometry=Polyline(points=()))) is None
