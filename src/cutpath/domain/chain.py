"""Shape chains and bounding boxes.

A chain is an ordered run of connected shapes forming one continuous cut
path. Its bounding box is derived from the shapes and cached.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from cutpath.domain.geometry import Point2D, Shape


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounding box.

    Attributes:
        min_x: Left edge
        min_y: Bottom edge
        max_x: Right edge
        max_y: Top edge
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_points(cls, points: Iterable[Point2D]) -> "BoundingBox":
        """Smallest box enclosing the points (zero box for no points)."""
        xs: list[float] = []
        ys: list[float] = []
        for p in points:
            xs.append(p.x)
            ys.append(p.y)
        if not xs:
            return cls(0.0, 0.0, 0.0, 0.0)
        return cls(min(xs), min(ys), max(xs), max(ys))

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)

    @property
    def center(self) -> Point2D:
        return Point2D((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def contains_point(self, point: Point2D) -> bool:
        """Check if a point lies inside or on the box."""
        return self.min_x <= point.x <= self.max_x and self.min_y <= point.y <= self.max_y

    def contains_box(self, other: "BoundingBox") -> bool:
        """Check if another box lies entirely inside or on this one."""
        return (
            self.min_x <= other.min_x
            and self.min_y <= other.min_y
            and other.max_x <= self.max_x
            and other.max_y <= self.max_y
        )

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box enclosing both boxes."""
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def distance_to(self, other: "BoundingBox") -> float:
        """Gap between two boxes (0.0 when they touch or overlap)."""
        dx = max(0.0, other.min_x - self.max_x, self.min_x - other.max_x)
        dy = max(0.0, other.min_y - self.max_y, self.min_y - other.max_y)
        return math.hypot(dx, dy)

    def distance_to_point(self, point: Point2D) -> float:
        """Distance from a point to the box (0.0 when inside)."""
        dx = max(0.0, self.min_x - point.x, point.x - self.max_x)
        dy = max(0.0, self.min_y - point.y, point.y - self.max_y)
        return math.hypot(dx, dy)

    def to_dict(self) -> dict[str, Any]:
        return {
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoundingBox":
        return cls(
            min_x=float(data["min_x"]),
            min_y=float(data["min_y"]),
            max_x=float(data["max_x"]),
            max_y=float(data["max_y"]),
        )


@dataclass
class ShapeChain:
    """An ordered sequence of connected shapes.

    Consecutive shapes share an endpoint within the join tolerance used to
    build the chain. Shapes may be reversed copies of the input shapes, so
    chain membership is tracked by shape id.

    Attributes:
        id: Chain identifier (chain-1, chain-2, ...)
        shapes: Shapes in traversal order
    """

    id: str
    shapes: list[Shape]
    _cached_bbox: BoundingBox | None = field(
        default=None, repr=False, init=False, compare=False
    )

    def __len__(self) -> int:
        return len(self.shapes)

    def is_empty(self) -> bool:
        """Check if the chain has no shapes."""
        return len(self.shapes) == 0

    @property
    def shape_ids(self) -> list[str]:
        return [shape.id for shape in self.shapes]

    def bounding_box(self) -> BoundingBox:
        """Calculate bounding box of the chain.

        Result is cached for efficiency. Shapes whose extent cannot be
        computed are ignored.

        Returns:
            BoundingBox of all shapes (zero box for an empty chain)
        """
        if self._cached_bbox is not None:
            return self._cached_bbox

        from cutpath.core.shapes import shape_bounding_box

        bbox: BoundingBox | None = None
        for shape in self.shapes:
            shape_bbox = shape_bounding_box(shape)
            if shape_bbox is None:
                continue
            bbox = shape_bbox if bbox is None else bbox.union(shape_bbox)

        self._cached_bbox = bbox if bbox is not None else BoundingBox(0.0, 0.0, 0.0, 0.0)
        return self._cached_bbox

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the chain
        """
        return {"id": self.id, "shapes": [s.to_dict() for s in self.shapes]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShapeChain":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a chain

        Returns:
            ShapeChain instance
        """
        return cls(id=data["id"], shapes=[Shape.from_dict(s) for s in data["shapes"]])
