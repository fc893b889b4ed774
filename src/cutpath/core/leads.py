"""Lead-in/lead-out geometry calculation.

Leads are generated in three stages:
1. Validate the configuration (see core.lead_validation)
2. Pick a base side of the chain for each lead (hole bias, cut direction,
   then local curvature)
3. Search rotations and shorter lengths for a lead that stays clear of
   solid material

Arc leads sweep a quarter turn with the arc length equal to the requested
length. The arc centre sits on the chain normal at the connection point
and the segment touching the chain is laid along the chain tangent, so
the lead meets the cut without a kink.
"""

import math
from dataclasses import dataclass

import structlog

from cutpath.core.chains import (
    chain_centroid,
    chain_end_point,
    chain_polygon,
    chain_start_point,
    chain_tangent,
    is_chain_closed,
)
from cutpath.core.geometry import (
    Vector,
    direction_between,
    distance_to_polyline,
    dot,
    left_normal,
    line_intersection,
    normalize,
    offset_point,
    point_in_polygon,
    right_normal,
    rotate_vector,
)
from cutpath.core.lead_validation import validate_lead_configuration
from cutpath.domain import (
    BoundingBox,
    ChainRole,
    CutDirection,
    DetectedPart,
    LeadConfig,
    LeadGeometry,
    LeadResult,
    LeadType,
    Point2D,
    ShapeChain,
)

logger = structlog.get_logger(__name__)

LEAD_ARC_SWEEP = math.pi / 2
MIN_ARC_LEAD_SEGMENTS = 8
MIN_LINE_LEAD_SEGMENTS = 2
SEGMENT_LENGTH = 2.0

ROTATION_STEP_DEG = 5.0
ROTATION_STEPS = 72
FIT_LENGTH_FACTORS = (1.0, 0.75, 0.5, 0.25)

# Holes whose centroid is closer than this many lead lengths attract shell leads
HOLE_REACH_FACTOR = 3.0

# Lead points this close to the connection point (per axis) are not tested
CONNECTION_EPSILON = 1e-3

# The tangent-laid point of an arc lead is not tested when it lies within this
# fraction of its segment length of the chain being cut
BOUNDARY_SNAP_FACTOR = 0.25


# --------------------------------------------------------------------------
# Solid area
# --------------------------------------------------------------------------


@dataclass
class _Boundary:
    polygon: list[Point2D]
    bbox: BoundingBox

    @classmethod
    def from_chain(cls, chain: ShapeChain) -> "_Boundary":
        return cls(polygon=chain_polygon(chain), bbox=chain.bounding_box())

    def contains(self, point: Point2D) -> bool:
        return self.bbox.contains_point(point) and point_in_polygon(point, self.polygon)


class SolidRegion:
    """Material of a part: inside the shell and outside every direct hole.

    Boundary polygons are tessellated once, so a region can test many
    candidate leads cheaply.
    """

    def __init__(self, shell: _Boundary, holes: list[_Boundary]) -> None:
        self.shell = shell
        self.holes = holes

    @classmethod
    def from_part(cls, part: DetectedPart) -> "SolidRegion":
        return cls(
            shell=_Boundary.from_chain(part.shell.chain),
            holes=[_Boundary.from_chain(hole.chain) for hole in part.holes],
        )

    def contains(self, point: Point2D) -> bool:
        """Check if a point lies in solid material."""
        if not self.shell.contains(point):
            return False
        return not any(hole.contains(point) for hole in self.holes)

    def count_points(self, points: list[Point2D], connection_point: Point2D | None = None) -> int:
        """Count points in solid material, ignoring the connection point.

        Args:
            points: Points to test
            connection_point: Point where the lead joins the chain

        Returns:
            Number of points inside solid material
        """
        count = 0
        for point in points:
            if (
                connection_point is not None
                and abs(point.x - connection_point.x) < CONNECTION_EPSILON
                and abs(point.y - connection_point.y) < CONNECTION_EPSILON
            ):
                continue
            if self.contains(point):
                count += 1
        return count


def is_point_in_solid_area(point: Point2D, part: DetectedPart) -> bool:
    """Check if a point is inside the part's shell and outside all its holes."""
    return SolidRegion.from_part(part).contains(point)


def count_solid_area_points(
    points: list[Point2D], part: DetectedPart, connection_point: Point2D | None = None
) -> int:
    """Count points lying in the part's solid material.

    Args:
        points: Points to test, typically a tessellated lead
        part: Part defining the material
        connection_point: Point to ignore (the lead's join with the chain)

    Returns:
        Number of points in solid material
    """
    return SolidRegion.from_part(part).count_points(points, connection_point)


# --------------------------------------------------------------------------
# Lead side selection
# --------------------------------------------------------------------------


def _side_toward(tangent: Vector, v: Vector) -> Vector:
    """The chain normal (left or right of the tangent) on v's side."""
    left = left_normal(tangent)
    right = right_normal(tangent)
    return left if dot(left, v) > dot(right, v) else right


def calculate_local_outward_normal(chain: ShapeChain, point: Point2D) -> Vector | None:
    """Estimate the direction pointing away from a chain at an endpoint.

    Uses the bisector of the vectors to the boundary points either side of
    the chain start. A probe along the bisector decides which side is inside.

    Args:
        chain: Closed chain to inspect
        point: Chain start (or end, which coincides with it)

    Returns:
        Unit outward vector, or None for open chains and straight or
        degenerate endpoints
    """
    polygon = chain_polygon(chain)
    if len(polygon) < 4 or not is_chain_closed(chain):
        return None

    ring = polygon[:-1]
    prev_point, next_point = ring[-1], ring[1]

    to_prev = direction_between(point, prev_point)
    to_next = direction_between(point, next_point)
    if to_prev is None or to_next is None:
        return None

    bisector = normalize(to_prev[0] + to_next[0], to_prev[1] + to_next[1])
    if bisector is None:
        return None

    # Probe a short way along the bisector to see which side is inside
    probe_distance = 0.01 * min(point.distance_to(prev_point), point.distance_to(next_point))
    probe = offset_point(point, bisector, probe_distance)
    if point_in_polygon(probe, ring):
        return (-bisector[0], -bisector[1])
    return bisector


def _nearest_hole_direction(
    part: DetectedPart, point: Point2D, tangent: Vector, length: float
) -> Vector | None:
    reach = length * HOLE_REACH_FACTOR
    nearest: tuple[float, Vector] | None = None

    for hole in part.holes:
        centroid = chain_centroid(hole.chain)
        if centroid is None:
            continue
        distance = point.distance_to(centroid)
        if distance >= reach:
            continue
        if nearest is None or distance < nearest[0]:
            toward = (centroid.x - point.x, centroid.y - point.y)
            nearest = (distance, _side_toward(tangent, toward))

    return nearest[1] if nearest is not None else None


def lead_curve_direction(
    chain: ShapeChain,
    point: Point2D,
    tangent: Vector,
    length: float,
    role: ChainRole = ChainRole.SHAPE,
    cut_direction: CutDirection = CutDirection.NONE,
    part: DetectedPart | None = None,
    flip_side: bool = False,
) -> Vector:
    """Choose the side of the chain a lead is placed on.

    In order of priority:
    1. A shell lead near a hole leans toward the nearest hole
    2. A cut direction puts shell (and unowned) leads on the right for
       clockwise cuts and on the left for counter-clockwise cuts; holes
       take the opposite side
    3. Otherwise shells lead outward and holes inward, judged from the
       curvature at the endpoint; anything else leads to the left

    Args:
        chain: Chain the lead attaches to
        point: Connection point
        tangent: Chain tangent at the connection point
        length: Requested lead length
        role: Role of the chain in its part
        cut_direction: Direction the chain is cut
        part: Part owning the chain
        flip_side: Negate the chosen direction

    Returns:
        Unit normal to the tangent
    """
    left = left_normal(tangent)
    right = right_normal(tangent)
    direction: Vector | None = None

    if part is not None and role == ChainRole.SHELL:
        direction = _nearest_hole_direction(part, point, tangent, length)

    if direction is None and cut_direction != CutDirection.NONE:
        clockwise = cut_direction == CutDirection.CLOCKWISE
        if role == ChainRole.HOLE:
            direction = left if clockwise else right
        else:
            direction = right if clockwise else left

    if direction is None:
        if role in (ChainRole.SHELL, ChainRole.HOLE):
            outward = calculate_local_outward_normal(chain, point)
            if outward is None:
                direction = left
            elif role == ChainRole.SHELL:
                direction = _side_toward(tangent, outward)
            else:
                direction = _side_toward(tangent, (-outward[0], -outward[1]))
        else:
            direction = left

    if flip_side:
        direction = (-direction[0], -direction[1])
    return direction


# --------------------------------------------------------------------------
# Lead tessellation
# --------------------------------------------------------------------------


def _arc_lead_segments(radius: float) -> int:
    return max(MIN_ARC_LEAD_SEGMENTS, math.ceil(LEAD_ARC_SWEEP * radius / SEGMENT_LENGTH))


def _arc_points(
    center: Point2D, radius: float, angles: list[float]
) -> list[Point2D]:
    return [
        Point2D(center.x + radius * math.cos(a), center.y + radius * math.sin(a)) for a in angles
    ]


def tangent_arc_points(
    point: Point2D, tangent: Vector, direction: Vector, length: float, is_lead_in: bool
) -> list[Point2D]:
    """Tessellate a quarter-turn arc lead tangent to the chain.

    The arc centre is placed on whichever chain normal is closer to
    direction, and the arc turns counter-clockwise when that is the left
    normal.

    Args:
        point: Connection point
        tangent: Chain tangent at the connection point
        direction: Requested side
        length: Arc length
        is_lead_in: True to end at the connection point, False to start there

    Returns:
        Points along the lead in cutting order
    """
    left = left_normal(tangent)
    use_left = dot(left, direction) > dot(right_normal(tangent), direction)
    offset = left if use_left else right_normal(tangent)
    sign = 1.0 if use_left else -1.0

    radius = length / LEAD_ARC_SWEEP
    center = offset_point(point, offset, radius)
    connection_angle = math.atan2(point.y - center.y, point.x - center.x)
    segments = _arc_lead_segments(radius)
    step = sign * LEAD_ARC_SWEEP / segments

    if is_lead_in:
        start_angle = connection_angle - sign * LEAD_ARC_SWEEP
        points = _arc_points(center, radius, [start_angle + step * i for i in range(segments + 1)])
        points[-1] = point
        points[-2] = offset_point(point, tangent, -radius * LEAD_ARC_SWEEP / segments)
    else:
        points = _arc_points(
            center, radius, [connection_angle + step * i for i in range(segments + 1)]
        )
        points[0] = point
        points[1] = offset_point(point, tangent, radius * LEAD_ARC_SWEEP / segments)
    return points


def simple_arc_points(
    point: Point2D, direction: Vector, length: float, is_lead_in: bool
) -> list[Point2D]:
    """Quarter-turn counter-clockwise arc centred along direction from the point."""
    radius = length / LEAD_ARC_SWEEP
    center = offset_point(point, direction, radius)
    connection_angle = math.atan2(point.y - center.y, point.x - center.x)
    segments = _arc_lead_segments(radius)
    step = LEAD_ARC_SWEEP / segments

    if is_lead_in:
        start_angle = connection_angle - LEAD_ARC_SWEEP
        points = _arc_points(center, radius, [start_angle + step * i for i in range(segments + 1)])
        points[-1] = point
    else:
        points = _arc_points(
            center, radius, [connection_angle + step * i for i in range(segments + 1)]
        )
        points[0] = point
    return points


def line_points(
    point: Point2D, direction: Vector, length: float, is_lead_in: bool
) -> list[Point2D]:
    """Straight lead along direction, ending or starting at the point."""
    segments = max(MIN_LINE_LEAD_SEGMENTS, math.ceil(length / SEGMENT_LENGTH))
    points = [offset_point(point, direction, length * i / segments) for i in range(segments + 1)]
    points[0] = point
    if is_lead_in:
        points.reverse()
    return points


def _build_lead(
    lead_type: LeadType,
    point: Point2D,
    tangent: Vector,
    direction: Vector,
    length: float,
    is_lead_in: bool,
    manual: bool = False,
) -> LeadGeometry:
    if lead_type == LeadType.LINE:
        points = line_points(point, direction, length, is_lead_in)
    elif manual:
        points = simple_arc_points(point, direction, length, is_lead_in)
    else:
        points = tangent_arc_points(point, tangent, direction, length, is_lead_in)
    return LeadGeometry(type=lead_type, points=tuple(points))


# --------------------------------------------------------------------------
# Lead calculation
# --------------------------------------------------------------------------


def _tested_points(
    lead: LeadGeometry, is_lead_in: bool, boundary: list[Point2D]
) -> list[Point2D]:
    """Lead points to check against solid material.

    An arc lead's segment touching the chain is laid along the chain
    tangent, so on a curved chain its far end grazes the cut itself and
    would read as solid. That point is left out while it stays on the
    chain's own boundary.
    """
    points = list(lead.points)
    if lead.type != LeadType.ARC or len(points) < 3:
        return points
    index = -2 if is_lead_in else 1
    connection = points[-1] if is_lead_in else points[0]
    laid = points[index]
    tolerance = BOUNDARY_SNAP_FACTOR * laid.distance_to(connection)
    if distance_to_polyline(laid, boundary) <= tolerance:
        del points[index]
    return points


def _calculate_lead(
    chain: ShapeChain,
    point: Point2D,
    config: LeadConfig,
    is_lead_in: bool,
    role: ChainRole,
    cut_direction: CutDirection,
    part: DetectedPart | None,
    region: SolidRegion | None,
    warnings: list[str],
) -> LeadGeometry:
    tangent = chain_tangent(chain, at_start=is_lead_in)

    if config.angle is not None:
        angle = math.radians(config.angle)
        direction = (math.cos(angle), math.sin(angle))
        return _build_lead(
            config.type, point, tangent, direction, config.length, is_lead_in, manual=True
        )

    base = lead_curve_direction(
        chain,
        point,
        tangent,
        config.length,
        role=role,
        cut_direction=cut_direction,
        part=part,
        flip_side=config.flip_side,
    )

    if region is None:
        return _build_lead(config.type, point, tangent, base, config.length, is_lead_in)

    own_boundary = chain_polygon(chain)
    factors = FIT_LENGTH_FACTORS if config.fit else (1.0,)
    for factor in factors:
        length = config.length * factor
        for step in range(ROTATION_STEPS):
            direction = rotate_vector(base, math.radians(step * ROTATION_STEP_DEG))
            lead = _build_lead(config.type, point, tangent, direction, length, is_lead_in)
            if region.count_points(_tested_points(lead, is_lead_in, own_boundary), point) == 0:
                if step or factor != 1.0:
                    logger.debug(
                        "Lead adjusted to avoid solid material",
                        chain_id=chain.id,
                        lead_in=is_lead_in,
                        rotation_deg=step * ROTATION_STEP_DEG,
                        length_factor=factor,
                    )
                return lead

    label = "Lead-in" if is_lead_in else "Lead-out"
    warnings.append(
        f"{label} for {role.value} intersects solid material and cannot be avoided. "
        "Consider reducing lead length or manually adjusting the path."
    )
    logger.debug("No clear lead position found", chain_id=chain.id, lead_in=is_lead_in)
    return _build_lead(config.type, point, tangent, base, config.length, is_lead_in)


def calculate_leads(
    chain: ShapeChain,
    lead_in: LeadConfig,
    lead_out: LeadConfig,
    cut_direction: CutDirection = CutDirection.NONE,
    part: DetectedPart | None = None,
) -> LeadResult:
    """Calculate lead-in and lead-out geometry for a chain.

    The configuration is validated first; an invalid configuration yields
    a result carrying the validation findings and no geometry. Leads are
    only searched for clear positions when a part is given.

    Args:
        chain: Chain the leads attach to
        lead_in: Lead-in configuration (attached at the chain start)
        lead_out: Lead-out configuration (attached at the chain end)
        cut_direction: Direction the chain is cut
        part: Part owning the chain, if known

    Returns:
        LeadResult with validation warnings followed by calculation warnings
    """
    validation = validate_lead_configuration(lead_in, lead_out, chain, part, cut_direction)
    result = LeadResult(warnings=list(validation.warnings), validation=validation)

    if not validation.is_valid:
        logger.debug("Lead configuration rejected", chain_id=chain.id)
        return result

    if lead_in.type == LeadType.NONE and lead_out.type == LeadType.NONE:
        return result

    start = chain_start_point(chain)
    end = chain_end_point(chain)
    if start is None or end is None:
        logger.debug("Chain boundary shape is malformed, no leads generated", chain_id=chain.id)
        return result

    role = part.role_of(chain) if part is not None else ChainRole.SHAPE
    region = SolidRegion.from_part(part) if part is not None else None

    if lead_in.is_requested:
        result.lead_in = _calculate_lead(
            chain, start, lead_in, True, role, cut_direction, part, region, result.warnings
        )
    if lead_out.is_requested:
        result.lead_out = _calculate_lead(
            chain, end, lead_out, False, role, cut_direction, part, region, result.warnings
        )

    return result


def check_lead_collisions(result: LeadResult) -> bool:
    """Check if the lead-in and lead-out of a result cross each other.

    Contact at the connection points (where both leads may touch the
    chain) does not count as a collision.

    Args:
        result: Calculated leads

    Returns:
        True if a lead-in segment crosses a lead-out segment
    """
    if result.lead_in is None or result.lead_out is None:
        return False

    lead_in_points = result.lead_in.points
    lead_out_points = result.lead_out.points
    connections = [lead_in_points[-1], lead_out_points[0]]

    for a1, a2 in zip(lead_in_points, lead_in_points[1:]):
        for b1, b2 in zip(lead_out_points, lead_out_points[1:]):
            hit = line_intersection(a1, a2, b1, b2)
            if hit is None:
                continue
            if any(
                abs(hit.x - c.x) < CONNECTION_EPSILON and abs(hit.y - c.y) < CONNECTION_EPSILON
                for c in connections
            ):
                continue
            return True
    return False
