"""Chain detection and chain-level geometry.

This module groups loose shapes into chains by endpoint proximity and
answers questions about a whole chain:
- Closure (does the chain return to its start?)
- Start/end points and tangents
- Tessellated boundary polygon, centroid and winding (cut direction)
"""

import structlog

from cutpath.core.geometry import Vector, polygon_centroid, signed_area
from cutpath.core.shapes import (
    is_shape_closed,
    reverse_shape,
    shape_end_point,
    shape_start_point,
    shape_tangent,
    tessellate_shape,
)
from cutpath.domain import BoundingBox, CutDirection, Point2D, Shape, ShapeChain

logger = structlog.get_logger(__name__)

DEFAULT_CHAIN_TOLERANCE = 0.05
DEFAULT_CLOSURE_TOLERANCE = 0.1

# Polygons with smaller absolute area have no meaningful winding
_MIN_WINDING_AREA = 1e-9


def _within(a: Point2D | None, b: Point2D | None, tolerance: float) -> bool:
    if a is None or b is None:
        return False
    return a.distance_to(b) <= tolerance


def detect_shape_chains(
    shapes: list[Shape], tolerance: float = DEFAULT_CHAIN_TOLERANCE
) -> list[ShapeChain]:
    """Group shapes into chains of endpoint-connected shapes.

    Shapes are visited in input order. Each unvisited shape seeds a chain
    which grows forward from its end and, if it does not close, backward
    from its start. A candidate is reversed when it attaches by the wrong
    endpoint. Shapes that are closed on their own, or whose endpoints are
    undefined, always form single-shape chains.

    Args:
        shapes: Shapes to group
        tolerance: Maximum distance for two endpoints to coincide

    Returns:
        Chains with ids chain-1, chain-2, ... in discovery order. Every
        shape appears in exactly one chain.
    """
    visited = [False] * len(shapes)
    endpoints = [(shape_start_point(s), shape_end_point(s)) for s in shapes]
    # Shapes that can never take part in a multi-shape chain
    isolated = [
        start is None or end is None or is_shape_closed(shape, tolerance)
        for shape, (start, end) in zip(shapes, endpoints)
    ]

    chains: list[ShapeChain] = []

    for seed_idx, seed in enumerate(shapes):
        if visited[seed_idx]:
            continue
        visited[seed_idx] = True
        chain_shapes = [seed]

        if not isolated[seed_idx]:
            head, tail = endpoints[seed_idx]
            closed = False

            # Forward: attach at the tail
            while not closed:
                found = False
                for idx, candidate in enumerate(shapes):
                    if visited[idx] or isolated[idx]:
                        continue
                    start, end = endpoints[idx]
                    if _within(tail, start, tolerance):
                        chain_shapes.append(candidate)
                        tail = end
                    elif _within(tail, end, tolerance):
                        chain_shapes.append(reverse_shape(candidate))
                        tail = start
                    else:
                        continue
                    visited[idx] = True
                    found = True
                    break
                if not found:
                    break
                closed = _within(tail, head, tolerance)

            # Backward: attach at the head
            while not closed:
                found = False
                for idx, candidate in enumerate(shapes):
                    if visited[idx] or isolated[idx]:
                        continue
                    start, end = endpoints[idx]
                    if _within(head, end, tolerance):
                        chain_shapes.insert(0, candidate)
                        head = start
                    elif _within(head, start, tolerance):
                        chain_shapes.insert(0, reverse_shape(candidate))
                        head = end
                    else:
                        continue
                    visited[idx] = True
                    found = True
                    break
                if not found:
                    break
                closed = _within(tail, head, tolerance)

        chain = ShapeChain(id=f"chain-{len(chains) + 1}", shapes=chain_shapes)
        chains.append(chain)

    logger.debug("Detected chains", shape_count=len(shapes), chain_count=len(chains))
    return chains


def chain_start_point(chain: ShapeChain) -> Point2D | None:
    """Start point of the first shape, or None for empty or malformed chains."""
    if chain.is_empty():
        return None
    return shape_start_point(chain.shapes[0])


def chain_end_point(chain: ShapeChain) -> Point2D | None:
    """End point of the last shape, or None for empty or malformed chains."""
    if chain.is_empty():
        return None
    return shape_end_point(chain.shapes[-1])


def is_chain_closed(chain: ShapeChain, tolerance: float = DEFAULT_CLOSURE_TOLERANCE) -> bool:
    """Check if a chain returns to its own start.

    A single shape is closed when it is closed on its own (circle, full
    ellipse, closed polyline). Longer chains are closed when the gap between
    the first start and the last end is strictly below tolerance.

    Args:
        chain: Chain to test
        tolerance: Closure tolerance

    Returns:
        True if the chain is closed
    """
    if chain.is_empty():
        return False
    if len(chain.shapes) == 1 and is_shape_closed(chain.shapes[0], tolerance):
        return True

    start = chain_start_point(chain)
    end = chain_end_point(chain)
    if start is None or end is None:
        return False
    return start.distance_to(end) < tolerance


def chain_bounding_box(chain: ShapeChain) -> BoundingBox:
    return chain.bounding_box()


def chain_polygon(chain: ShapeChain) -> list[Point2D]:
    """Tessellate a chain into one connected point list.

    The first point of each shape after the first is dropped when it repeats
    the previous shape's last point.

    Args:
        chain: Chain to tessellate

    Returns:
        Ordered points along the chain (malformed shapes contribute nothing)
    """
    points: list[Point2D] = []
    for shape in chain.shapes:
        shape_points = tessellate_shape(shape)
        if not shape_points:
            logger.debug("Skipping malformed shape in chain", chain_id=chain.id, shape_id=shape.id)
            continue
        if points and points[-1] == shape_points[0]:
            shape_points = shape_points[1:]
        points.extend(shape_points)
    return points


def _open_ring(points: list[Point2D]) -> list[Point2D]:
    """Drop a repeated closing vertex."""
    if len(points) > 1 and points[0] == points[-1]:
        return points[:-1]
    return points


def chain_centroid(chain: ShapeChain) -> Point2D | None:
    """Area-weighted centroid of the chain's tessellated boundary."""
    return polygon_centroid(_open_ring(chain_polygon(chain)))


def detect_cut_direction(
    chain: ShapeChain, tolerance: float = DEFAULT_CLOSURE_TOLERANCE
) -> CutDirection:
    """Determine the winding of a closed chain.

    Args:
        chain: Chain to inspect
        tolerance: Closure tolerance

    Returns:
        COUNTERCLOCKWISE for positive signed area, CLOCKWISE for negative,
        NONE for open or degenerate chains
    """
    if not is_chain_closed(chain, tolerance):
        return CutDirection.NONE

    area = signed_area(_open_ring(chain_polygon(chain)))
    if abs(area) < _MIN_WINDING_AREA:
        return CutDirection.NONE
    return CutDirection.COUNTERCLOCKWISE if area > 0 else CutDirection.CLOCKWISE


def chain_tangent(chain: ShapeChain, at_start: bool) -> Vector:
    """Unit direction of travel at the chain start or end."""
    if chain.is_empty():
        return (1.0, 0.0)
    shape = chain.shapes[0] if at_start else chain.shapes[-1]
    return shape_tangent(shape, at_start)
