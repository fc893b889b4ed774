"""Per-geometry operations on shapes.

Every operation dispatches on the geometry kind of a shape:
- Start and end points, in the shape's direction of travel
- Travel direction (unit tangent) at the start or end
- Reversal of the direction of travel
- Tessellation into points, with density proportional to angular span
- Bounding boxes

Malformed shapes (empty polylines, non-positive radii, unusable splines)
yield None from point queries and empty tessellations instead of raising.
"""

import math

import structlog

from cutpath.core import _nurbs
from cutpath.domain import (
    Arc,
    BoundingBox,
    Circle,
    Ellipse,
    Line,
    Point2D,
    Polyline,
    Shape,
    Spline,
)
from cutpath.exceptions import GeometryError

logger = structlog.get_logger(__name__)

TWO_PI = 2 * math.pi

# Approximate chord length used to size tessellations
SEGMENT_LENGTH = 2.0
MIN_ARC_SEGMENTS = 8
MIN_CLOSED_CURVE_SEGMENTS = 32
MIN_SPLINE_SEGMENTS = 16

DEFAULT_TANGENT = (1.0, 0.0)


class UnsupportedGeometryError(GeometryError, TypeError):
    """Raised when a shape carries a geometry kind this module cannot handle."""


def _unsupported(shape: Shape) -> UnsupportedGeometryError:
    return UnsupportedGeometryError(
        f"Unsupported geometry for shape {shape.id}: {type(shape.geometry).__name__}"
    )


# --------------------------------------------------------------------------
# Arc and ellipse parametrization
# --------------------------------------------------------------------------


def arc_sweep(arc: Arc) -> float:
    """Angle travelled along the arc, normalized into (0, 2*pi]."""
    if arc.clockwise:
        sweep = (arc.start_angle - arc.end_angle) % TWO_PI
    else:
        sweep = (arc.end_angle - arc.start_angle) % TWO_PI
    return TWO_PI if sweep == 0 else sweep


def arc_point(arc: Arc, angle: float) -> Point2D:
    return Point2D(
        arc.center.x + arc.radius * math.cos(angle),
        arc.center.y + arc.radius * math.sin(angle),
    )


def _ellipse_axes(ellipse: Ellipse) -> tuple[float, float, float]:
    """Return (semi_major, semi_minor, rotation)."""
    mx, my = ellipse.major_axis_endpoint.x, ellipse.major_axis_endpoint.y
    semi_major = math.hypot(mx, my)
    return semi_major, semi_major * ellipse.minor_to_major_ratio, math.atan2(my, mx)


def ellipse_point(ellipse: Ellipse, param: float) -> Point2D:
    a, b, rot = _ellipse_axes(ellipse)
    x = a * math.cos(param)
    y = b * math.sin(param)
    return Point2D(
        ellipse.center.x + x * math.cos(rot) - y * math.sin(rot),
        ellipse.center.y + x * math.sin(rot) + y * math.cos(rot),
    )


def _ellipse_derivative(ellipse: Ellipse, param: float) -> tuple[float, float]:
    a, b, rot = _ellipse_axes(ellipse)
    dx = -a * math.sin(param)
    dy = b * math.cos(param)
    return (dx * math.cos(rot) - dy * math.sin(rot), dx * math.sin(rot) + dy * math.cos(rot))


def _ellipse_range(ellipse: Ellipse) -> tuple[float, float]:
    """Return (start_param, signed_span) in the direction of travel."""
    start = ellipse.start_param if ellipse.start_param is not None else 0.0
    end = ellipse.end_param
    if end is None or ellipse.is_full:
        return start, -TWO_PI if ellipse.clockwise else TWO_PI
    if ellipse.clockwise:
        span = (start - end) % TWO_PI
        return start, -(span or TWO_PI)
    span = (end - start) % TWO_PI
    return start, span or TWO_PI


def _is_valid(shape: Shape) -> bool:
    geometry = shape.geometry
    if isinstance(geometry, (Arc, Circle)):
        return geometry.radius > 0
    if isinstance(geometry, Polyline):
        return len(geometry.points) >= 2
    if isinstance(geometry, Spline):
        return len(geometry.control_points) >= 2 or len(geometry.fit_points) >= 2
    if isinstance(geometry, Ellipse):
        a, b, _ = _ellipse_axes(geometry)
        return a > 0 and b > 0
    return isinstance(geometry, Line)


# --------------------------------------------------------------------------
# Splines
# --------------------------------------------------------------------------


def _spline_points(spline: Spline, count: int) -> list[Point2D]:
    """Sample the NURBS, falling back to fit points then control points."""
    try:
        return _nurbs.sample(spline, count)
    except ValueError as e:
        logger.debug("NURBS evaluation failed, using fallback points", error=str(e))
    if len(spline.fit_points) >= 2:
        return list(spline.fit_points)
    return list(spline.control_points)


def _spline_endpoint(spline: Spline, at_start: bool) -> Point2D:
    try:
        return _nurbs.evaluate(spline, 0.0 if at_start else 1.0)
    except ValueError:
        fallback = spline.fit_points if len(spline.fit_points) >= 2 else spline.control_points
        return fallback[0] if at_start else fallback[-1]


def _spline_tangent(spline: Spline, at_start: bool) -> tuple[float, float] | None:
    try:
        dx, dy = _nurbs.derivative(spline, 0.0 if at_start else 1.0)
        length = math.hypot(dx, dy)
        if length > 1e-12:
            return (dx / length, dy / length)
    except ValueError:
        pass
    points = _spline_points(spline, MIN_SPLINE_SEGMENTS)
    if at_start:
        return _unit(points[0], points[1])
    return _unit(points[-2], points[-1])


# --------------------------------------------------------------------------
# Endpoints
# --------------------------------------------------------------------------


def shape_start_point(shape: Shape) -> Point2D | None:
    """Get the point where travel along a shape begins.

    Args:
        shape: Shape to query

    Returns:
        Start point, or None if the shape is malformed
    """
    return _endpoint(shape, at_start=True)


def shape_end_point(shape: Shape) -> Point2D | None:
    """Get the point where travel along a shape ends.

    Args:
        shape: Shape to query

    Returns:
        End point, or None if the shape is malformed
    """
    return _endpoint(shape, at_start=False)


def _endpoint(shape: Shape, at_start: bool) -> Point2D | None:
    if not _is_valid(shape):
        return None

    geometry = shape.geometry
    if isinstance(geometry, Line):
        return geometry.start if at_start else geometry.end
    if isinstance(geometry, Arc):
        return arc_point(geometry, geometry.start_angle if at_start else geometry.end_angle)
    if isinstance(geometry, Circle):
        return Point2D(geometry.center.x + geometry.radius, geometry.center.y)
    if isinstance(geometry, Polyline):
        if at_start or geometry.closed:
            return geometry.points[0]
        return geometry.points[-1]
    if isinstance(geometry, Spline):
        return _spline_endpoint(geometry, at_start)
    if isinstance(geometry, Ellipse):
        start, span = _ellipse_range(geometry)
        return ellipse_point(geometry, start if at_start else start + span)
    raise _unsupported(shape)


def is_shape_closed(shape: Shape, tolerance: float = 0.05) -> bool:
    """Check if a single shape forms a closed loop on its own.

    Circles and full ellipses are always closed, polylines and splines when
    flagged closed or when their ends meet within tolerance, and arcs when
    they sweep a full turn.

    Args:
        shape: Shape to test
        tolerance: Maximum endpoint gap for open-flagged shapes

    Returns:
        True if the shape is closed by itself
    """
    geometry = shape.geometry
    if isinstance(geometry, Circle):
        return geometry.radius > 0
    if isinstance(geometry, Ellipse):
        return geometry.is_full and _is_valid(shape)
    if isinstance(geometry, Line):
        return False
    if isinstance(geometry, Polyline) and geometry.closed:
        return len(geometry.points) >= 3
    if isinstance(geometry, Spline) and geometry.closed:
        return _is_valid(shape)

    if isinstance(geometry, (Polyline, Spline)):
        tessellation = tessellate_shape(shape)
        if len(tessellation) < 4:
            return False

    start = shape_start_point(shape)
    end = shape_end_point(shape)
    if start is None or end is None:
        return False
    return start.distance_to(end) <= tolerance


# --------------------------------------------------------------------------
# Reversal
# --------------------------------------------------------------------------


def reverse_shape(shape: Shape) -> Shape:
    """Return a copy of the shape traversed in the opposite direction.

    The copy keeps the shape's id and layer. Circles and full ellipses have
    a fixed traversal and are returned unchanged.

    Args:
        shape: Shape to reverse

    Returns:
        Reversed shape
    """
    geometry = shape.geometry
    if isinstance(geometry, Line):
        reversed_geometry = Line(start=geometry.end, end=geometry.start)
    elif isinstance(geometry, Arc):
        reversed_geometry = Arc(
            center=geometry.center,
            radius=geometry.radius,
            start_angle=geometry.end_angle,
            end_angle=geometry.start_angle,
            clockwise=not geometry.clockwise,
        )
    elif isinstance(geometry, Circle):
        return shape
    elif isinstance(geometry, Polyline):
        points = list(reversed(geometry.points))
        if geometry.closed and points:
            # Keep the start vertex first so a closed polyline starts where it did
            points = [points[-1], *points[:-1]]
        reversed_geometry = Polyline(points=tuple(points), closed=geometry.closed)
    elif isinstance(geometry, Spline):
        knots = list(geometry.knots)
        if knots:
            lo, hi = knots[0], knots[-1]
            knots = [lo + hi - k for k in reversed(knots)]
        reversed_geometry = Spline(
            control_points=tuple(reversed(geometry.control_points)),
            degree=geometry.degree,
            knots=tuple(knots),
            weights=tuple(reversed(geometry.weights)),
            fit_points=tuple(reversed(geometry.fit_points)),
            closed=geometry.closed,
        )
    elif isinstance(geometry, Ellipse):
        if geometry.is_full:
            return shape
        reversed_geometry = Ellipse(
            center=geometry.center,
            major_axis_endpoint=geometry.major_axis_endpoint,
            minor_to_major_ratio=geometry.minor_to_major_ratio,
            start_param=geometry.end_param,
            end_param=geometry.start_param,
            clockwise=not geometry.clockwise,
        )
    else:
        raise _unsupported(shape)

    return Shape(id=shape.id, geometry=reversed_geometry, layer=shape.layer)


# --------------------------------------------------------------------------
# Tangents
# --------------------------------------------------------------------------


def _unit(p1: Point2D, p2: Point2D) -> tuple[float, float] | None:
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    length = math.hypot(dx, dy)
    if length < 1e-12:
        return None
    return (dx / length, dy / length)


def shape_tangent(shape: Shape, at_start: bool) -> tuple[float, float]:
    """Unit direction of travel at the start or end of a shape.

    Args:
        shape: Shape to query
        at_start: True for the start point, False for the end point

    Returns:
        Unit tangent vector; (1, 0) when it cannot be determined
    """
    if not _is_valid(shape):
        return DEFAULT_TANGENT

    geometry = shape.geometry
    tangent: tuple[float, float] | None = None

    if isinstance(geometry, Line):
        tangent = _unit(geometry.start, geometry.end)
    elif isinstance(geometry, Arc):
        angle = geometry.start_angle if at_start else geometry.end_angle
        # Perpendicular to the radius, turning with the arc's winding
        angle += -math.pi / 2 if geometry.clockwise else math.pi / 2
        tangent = (math.cos(angle), math.sin(angle))
    elif isinstance(geometry, Circle):
        tangent = (0.0, 1.0)
    elif isinstance(geometry, Polyline):
        points = list(geometry.points)
        if geometry.closed:
            points.append(points[0])
        tangent = _unit(points[0], points[1]) if at_start else _unit(points[-2], points[-1])
    elif isinstance(geometry, Spline):
        tangent = _spline_tangent(geometry, at_start)
    elif isinstance(geometry, Ellipse):
        start, span = _ellipse_range(geometry)
        dx, dy = _ellipse_derivative(geometry, start if at_start else start + span)
        if span < 0:
            dx, dy = -dx, -dy
        length = math.hypot(dx, dy)
        if length > 1e-12:
            tangent = (dx / length, dy / length)
    else:
        raise _unsupported(shape)

    return tangent if tangent is not None else DEFAULT_TANGENT


# --------------------------------------------------------------------------
# Tessellation
# --------------------------------------------------------------------------


def _arc_segments(sweep: float, radius: float, minimum: int) -> int:
    return max(minimum, math.ceil(abs(sweep) * radius / SEGMENT_LENGTH))


def tessellate_shape(shape: Shape) -> list[Point2D]:
    """Convert a shape into points along its direction of travel.

    Curved shapes are sampled with roughly SEGMENT_LENGTH chords, so the
    point count grows with angular span and radius. The first point is the
    shape start and the last point is the shape end (closed shapes repeat
    their start point at the end).

    Args:
        shape: Shape to tessellate

    Returns:
        Points along the shape; empty for malformed shapes
    """
    if not _is_valid(shape):
        return []

    geometry = shape.geometry
    if isinstance(geometry, Line):
        return [geometry.start, geometry.end]

    if isinstance(geometry, Arc):
        sweep = arc_sweep(geometry)
        signed = -sweep if geometry.clockwise else sweep
        segments = _arc_segments(sweep, geometry.radius, MIN_ARC_SEGMENTS)
        points = [
            arc_point(geometry, geometry.start_angle + signed * i / segments)
            for i in range(segments)
        ]
        points.append(arc_point(geometry, geometry.end_angle))
        return points

    if isinstance(geometry, Circle):
        segments = _arc_segments(TWO_PI, geometry.radius, MIN_CLOSED_CURVE_SEGMENTS)
        points = [
            arc_point(geometry_as_arc(geometry), TWO_PI * i / segments) for i in range(segments)
        ]
        points.append(points[0])
        return points

    if isinstance(geometry, Polyline):
        points = list(geometry.points)
        if geometry.closed and points[0] != points[-1]:
            points.append(points[0])
        return points

    if isinstance(geometry, Spline):
        count = max(MIN_SPLINE_SEGMENTS, 4 * len(geometry.control_points))
        return _spline_points(geometry, count)

    if isinstance(geometry, Ellipse):
        start, span = _ellipse_range(geometry)
        semi_major, _, _ = _ellipse_axes(geometry)
        minimum = MIN_CLOSED_CURVE_SEGMENTS if geometry.is_full else MIN_ARC_SEGMENTS
        segments = _arc_segments(span, semi_major, minimum)
        points = [ellipse_point(geometry, start + span * i / segments) for i in range(segments)]
        points.append(points[0] if geometry.is_full else ellipse_point(geometry, start + span))
        return points

    raise _unsupported(shape)


def geometry_as_arc(circle: Circle) -> Arc:
    """View a circle as a full counter-clockwise arc starting at angle 0."""
    return Arc(center=circle.center, radius=circle.radius, start_angle=0.0, end_angle=TWO_PI)


# --------------------------------------------------------------------------
# Bounding boxes
# --------------------------------------------------------------------------


def shape_bounding_box(shape: Shape) -> BoundingBox | None:
    """Calculate the axis-aligned extent of a shape.

    Lines, arcs and circles are exact; other kinds use their tessellation.

    Args:
        shape: Shape to measure

    Returns:
        BoundingBox, or None for malformed shapes
    """
    if not _is_valid(shape):
        return None

    geometry = shape.geometry
    if isinstance(geometry, Circle):
        r = geometry.radius
        return BoundingBox(
            geometry.center.x - r, geometry.center.y - r, geometry.center.x + r, geometry.center.y + r
        )

    if isinstance(geometry, Arc):
        sweep = arc_sweep(geometry)
        start = geometry.end_angle if geometry.clockwise else geometry.start_angle
        points = [arc_point(geometry, geometry.start_angle), arc_point(geometry, geometry.end_angle)]
        # Include every axis extreme the counter-clockwise sweep passes through
        for quadrant in range(4):
            axis_angle = quadrant * math.pi / 2
            if (axis_angle - start) % TWO_PI <= sweep:
                points.append(arc_point(geometry, axis_angle))
        return BoundingBox.from_points(points)

    return BoundingBox.from_points(tessellate_shape(shape))
