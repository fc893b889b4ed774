"""Core geometric types for shape representation.

This module defines the drawing primitives consumed by chain detection:
- Point2D: A 2D point
- Line, Arc, Circle, Polyline, Spline, Ellipse: The six geometry kinds
- Shape: An identified geometry with an optional layer tag
- GeometryType: Enum tag for the geometry kind

All geometry types are frozen dataclasses. Angles are in radians.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class GeometryType(str, Enum):
    """Tag identifying which geometry kind a shape carries."""

    LINE = "line"
    ARC = "arc"
    CIRCLE = "circle"
    POLYLINE = "polyline"
    SPLINE = "spline"
    ELLIPSE = "ellipse"


@dataclass(frozen=True, slots=True)
class Point2D:
    """A point in 2D drawing space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in drawing units
        y: Y coordinate in drawing units
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple.

        Returns:
            Tuple of (x, y) coordinates
        """
        return (self.x, self.y)

    def distance_to(self, other: "Point2D") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point2D":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point2D instance
        """
        return cls(x=float(data["x"]), y=float(data["y"]))


def _points_to_dicts(points: tuple[Point2D, ...]) -> list[dict[str, Any]]:
    return [p.to_dict() for p in points]


def _points_from_dicts(data: list[dict[str, Any]] | None) -> tuple[Point2D, ...]:
    return tuple(Point2D.from_dict(p) for p in data or [])


@dataclass(frozen=True, slots=True)
class Line:
    """A straight segment from start to end."""

    start: Point2D
    end: Point2D

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Line":
        return cls(start=Point2D.from_dict(data["start"]), end=Point2D.from_dict(data["end"]))


@dataclass(frozen=True, slots=True)
class Arc:
    """A circular arc.

    Counter-clockwise arcs travel from start_angle to end_angle with
    increasing angle, clockwise arcs with decreasing angle.

    Attributes:
        center: Arc center
        radius: Arc radius
        start_angle: Angle of the start point in radians
        end_angle: Angle of the end point in radians
        clockwise: Direction of travel
    """

    center: Point2D
    radius: float
    start_angle: float
    end_angle: float
    clockwise: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": self.center.to_dict(),
            "radius": self.radius,
            "start_angle": self.start_angle,
            "end_angle": self.end_angle,
            "clockwise": self.clockwise,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Arc":
        return cls(
            center=Point2D.from_dict(data["center"]),
            radius=float(data["radius"]),
            start_angle=float(data["start_angle"]),
            end_angle=float(data["end_angle"]),
            clockwise=bool(data.get("clockwise", False)),
        )


@dataclass(frozen=True, slots=True)
class Circle:
    """A full circle, traversed counter-clockwise from its rightmost point."""

    center: Point2D
    radius: float

    def to_dict(self) -> dict[str, Any]:
        return {"center": self.center.to_dict(), "radius": self.radius}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Circle":
        return cls(center=Point2D.from_dict(data["center"]), radius=float(data["radius"]))


@dataclass(frozen=True, slots=True)
class Polyline:
    """A sequence of straight segments through its vertices.

    When closed, the segment from the last vertex back to the first is
    implied and the polyline ends where it starts.
    """

    points: tuple[Point2D, ...]
    closed: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))

    def to_dict(self) -> dict[str, Any]:
        return {"points": _points_to_dicts(self.points), "closed": self.closed}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Polyline":
        return cls(
            points=_points_from_dicts(data.get("points")),
            closed=bool(data.get("closed", False)),
        )


@dataclass(frozen=True, slots=True)
class Spline:
    """A NURBS curve.

    Missing knots default to a clamped uniform vector and missing weights
    to 1.0. Fit points are used as a fallback polyline when the NURBS
    definition cannot be evaluated.

    Attributes:
        control_points: Control polygon
        degree: Polynomial degree
        knots: Knot vector (len(control_points) + degree + 1 values)
        weights: Rational weights, one per control point
        fit_points: Points the curve passes through
        closed: Whether the curve is flagged closed
    """

    control_points: tuple[Point2D, ...]
    degree: int = 3
    knots: tuple[float, ...] = field(default_factory=tuple)
    weights: tuple[float, ...] = field(default_factory=tuple)
    fit_points: tuple[Point2D, ...] = field(default_factory=tuple)
    closed: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "control_points", tuple(self.control_points))
        object.__setattr__(self, "knots", tuple(float(k) for k in self.knots))
        object.__setattr__(self, "weights", tuple(float(w) for w in self.weights))
        object.__setattr__(self, "fit_points", tuple(self.fit_points))

    def to_dict(self) -> dict[str, Any]:
        return {
            "control_points": _points_to_dicts(self.control_points),
            "degree": self.degree,
            "knots": list(self.knots),
            "weights": list(self.weights),
            "fit_points": _points_to_dicts(self.fit_points),
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Spline":
        return cls(
            control_points=_points_from_dicts(data.get("control_points")),
            degree=int(data.get("degree", 3)),
            knots=tuple(data.get("knots") or ()),
            weights=tuple(data.get("weights") or ()),
            fit_points=_points_from_dicts(data.get("fit_points")),
            closed=bool(data.get("closed", False)),
        )


@dataclass(frozen=True, slots=True)
class Ellipse:
    """An ellipse or elliptical arc.

    The major axis endpoint is relative to the center. Without both
    parameters (or with parameters spanning a full turn) the ellipse is
    full and inherently closed.

    Attributes:
        center: Ellipse center
        major_axis_endpoint: Major axis vector relative to center
        minor_to_major_ratio: Minor axis length divided by major axis length
        start_param: Start parameter in radians, None for a full ellipse
        end_param: End parameter in radians, None for a full ellipse
        clockwise: Direction of travel for elliptical arcs
    """

    center: Point2D
    major_axis_endpoint: Point2D
    minor_to_major_ratio: float
    start_param: float | None = None
    end_param: float | None = None
    clockwise: bool = False

    @property
    def is_full(self) -> bool:
        """True when the ellipse is a complete closed curve."""
        if self.start_param is None or self.end_param is None:
            return True
        span = abs(self.end_param - self.start_param)
        return math.isclose(span, 2 * math.pi, abs_tol=1e-9) or span > 2 * math.pi

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": self.center.to_dict(),
            "major_axis_endpoint": self.major_axis_endpoint.to_dict(),
            "minor_to_major_ratio": self.minor_to_major_ratio,
            "start_param": self.start_param,
            "end_param": self.end_param,
            "clockwise": self.clockwise,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ellipse":
        start = data.get("start_param")
        end = data.get("end_param")
        return cls(
            center=Point2D.from_dict(data["center"]),
            major_axis_endpoint=Point2D.from_dict(data["major_axis_endpoint"]),
            minor_to_major_ratio=float(data["minor_to_major_ratio"]),
            start_param=float(start) if start is not None else None,
            end_param=float(end) if end is not None else None,
            clockwise=bool(data.get("clockwise", False)),
        )


Geometry = Union[Line, Arc, Circle, Polyline, Spline, Ellipse]

_GEOMETRY_CLASSES: dict[GeometryType, type] = {
    GeometryType.LINE: Line,
    GeometryType.ARC: Arc,
    GeometryType.CIRCLE: Circle,
    GeometryType.POLYLINE: Polyline,
    GeometryType.SPLINE: Spline,
    GeometryType.ELLIPSE: Ellipse,
}


@dataclass(frozen=True, slots=True)
class Shape:
    """An identified drawing primitive.

    Attributes:
        id: Opaque identifier, unique within a drawing
        geometry: One of the six geometry kinds
        layer: Optional layer name from the source drawing
    """

    id: str
    geometry: Geometry
    layer: str | None = None

    @property
    def type(self) -> GeometryType:
        """Geometry kind tag of this shape.

        Raises:
            TypeError: If the geometry is not one of the supported kinds
        """
        for geometry_type, cls in _GEOMETRY_CLASSES.items():
            if isinstance(self.geometry, cls):
                return geometry_type
        raise TypeError(f"Unsupported geometry: {type(self.geometry).__name__}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with id, type, layer and geometry fields
        """
        return {
            "id": self.id,
            "type": self.type.value,
            "layer": self.layer,
            "geometry": self.geometry.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Shape":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with id, type, geometry and optional layer fields

        Returns:
            Shape instance

        Raises:
            ValueError: If the type tag is unknown
        """
        geometry_cls = _GEOMETRY_CLASSES[GeometryType(data["type"])]
        return cls(
            id=str(data["id"]),
            geometry=geometry_cls.from_dict(data["geometry"]),
            layer=data.get("layer"),
        )
