"""Geometric operations for chain and lead calculations.

This module provides core mathematical utilities for:
- Signed area calculation (shoelace formula)
- Point-in-polygon testing (ray casting algorithm)
- Line segment intersection
- Polygon centroids
- Point to segment and polyline distances
- Unit vector, normal and rotation helpers

Vectors are plain (dx, dy) tuples; positions are Point2D.
All functions are pure, stateless, and designed for use in parallel processing.
"""

import math

from cutpath.domain import Point2D

Vector = tuple[float, float]


def signed_area(points: list[Point2D]) -> float:
    """Calculate signed area of a polygon using the shoelace formula.

    The sign of the area indicates winding direction:
    - Positive area: counter-clockwise winding
    - Negative area: clockwise winding

    Args:
        points: List of points forming the polygon boundary

    Returns:
        Signed area in square units. Returns 0.0 for degenerate polygons.

    Examples:
        >>> p1 = Point2D(0.0, 0.0)
        >>> p2 = Point2D(1.0, 0.0)
        >>> p3 = Point2D(1.0, 1.0)
        >>> p4 = Point2D(0.0, 1.0)
        >>> signed_area([p1, p2, p3, p4])  # CCW square
        1.0
        >>> signed_area([p1, p4, p3, p2])  # CW square
        -1.0
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return area / 2.0


def point_in_polygon(point: Point2D, polygon: list[Point2D]) -> bool:
    """Determine if a point is inside a polygon using ray casting algorithm.

    Casts a horizontal ray from the point to the right and counts intersections
    with polygon edges. Odd number of intersections = inside, even = outside.

    Args:
        point: The point to test
        polygon: List of points forming the polygon boundary

    Returns:
        True if point is inside polygon, False otherwise

    Examples:
        >>> square = [Point2D(0, 0), Point2D(2, 0), Point2D(2, 2), Point2D(0, 2)]
        >>> point_in_polygon(Point2D(1.0, 1.0), square)  # Center
        True
        >>> point_in_polygon(Point2D(3.0, 3.0), square)  # Outside
        False
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    x, y = point.x, point.y
    j = n - 1

    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        # Check if ray from point intersects edge (j, i)
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside

        j = i

    return inside


def line_intersection(p1: Point2D, p2: Point2D, p3: Point2D, p4: Point2D) -> Point2D | None:
    """Find intersection point of two line segments.

    Uses parametric line equations to find intersection. Returns None if lines
    are parallel or if intersection is outside either segment.

    Args:
        p1: First endpoint of segment 1
        p2: Second endpoint of segment 1
        p3: First endpoint of segment 2
        p4: Second endpoint of segment 2

    Returns:
        Point at intersection if segments intersect, None otherwise
    """
    x1, y1 = p1.x, p1.y
    x2, y2 = p2.x, p2.y
    x3, y3 = p3.x, p3.y
    x4, y4 = p4.x, p4.y

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)

    # Lines are parallel or coincident
    if abs(denom) < 1e-10:
        return None

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / denom

    if 0 <= t <= 1 and 0 <= u <= 1:
        return Point2D(x1 + t * (x2 - x1), y1 + t * (y2 - y1))

    return None


def polygon_centroid(points: list[Point2D]) -> Point2D | None:
    """Area-weighted centroid of a polygon.

    Falls back to the vertex average for degenerate (zero-area) input.

    Args:
        points: Polygon vertices, without a repeated closing vertex

    Returns:
        Centroid, or None for an empty point list
    """
    n = len(points)
    if n == 0:
        return None

    area = signed_area(points)
    if abs(area) < 1e-12:
        return Point2D(sum(p.x for p in points) / n, sum(p.y for p in points) / n)

    cx = 0.0
    cy = 0.0
    for i in range(n):
        j = (i + 1) % n
        f = points[i].x * points[j].y - points[j].x * points[i].y
        cx += (points[i].x + points[j].x) * f
        cy += (points[i].y + points[j].y) * f

    return Point2D(cx / (6.0 * area), cy / (6.0 * area))


def distance_to_segment(point: Point2D, a: Point2D, b: Point2D) -> float:
    """Distance from a point to the closest point of segment ab."""
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq < 1e-24:
        return point.distance_to(a)
    t = ((point.x - a.x) * dx + (point.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(point.x - (a.x + t * dx), point.y - (a.y + t * dy))


def distance_to_polyline(point: Point2D, polyline: list[Point2D]) -> float:
    """Smallest distance from a point to any segment of a polyline.

    Args:
        point: Query point
        polyline: Vertices in order; a closed outline repeats its start

    Returns:
        Distance, or infinity for an empty polyline
    """
    if not polyline:
        return math.inf
    if len(polyline) == 1:
        return point.distance_to(polyline[0])
    return min(
        distance_to_segment(point, polyline[i], polyline[i + 1])
        for i in range(len(polyline) - 1)
    )


def normalize(dx: float, dy: float) -> Vector | None:
    """Scale a vector to unit length.

    Returns:
        Unit vector, or None for a zero-length vector
    """
    length = math.hypot(dx, dy)
    if length < 1e-12:
        return None
    return (dx / length, dy / length)


def direction_between(p1: Point2D, p2: Point2D) -> Vector | None:
    """Unit vector pointing from p1 to p2, or None if they coincide."""
    return normalize(p2.x - p1.x, p2.y - p1.y)


def left_normal(v: Vector) -> Vector:
    """Rotate 90 degrees counter-clockwise: (x, y) -> (-y, x)."""
    return (-v[1], v[0])


def right_normal(v: Vector) -> Vector:
    """Rotate 90 degrees clockwise: (x, y) -> (y, -x)."""
    return (v[1], -v[0])


def rotate_vector(v: Vector, angle: float) -> Vector:
    """Rotate a vector counter-clockwise by angle radians."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (v[0] * cos_a - v[1] * sin_a, v[0] * sin_a + v[1] * cos_a)


def dot(a: Vector, b: Vector) -> float:
    return a[0] * b[0] + a[1] * b[1]


def cross(a: Vector, b: Vector) -> float:
    """Z component of the 2D cross product; positive when b is left of a."""
    return a[0] * b[1] - a[1] * b[0]


def offset_point(point: Point2D, v: Vector, distance: float) -> Point2D:
    """Move a point along a vector by distance."""
    return Point2D(point.x + v[0] * distance, point.y + v[1] * distance)
