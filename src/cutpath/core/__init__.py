"""Core path planning algorithms for cutpath.

This module contains the core algorithms for:

- Geometry operations (signed area, point-in-polygon, intersections)
- Per-shape operations (endpoints, tangents, reversal, tessellation)
- Chain detection (joining shapes by endpoint proximity)
- Part detection (shell/hole containment hierarchy)
- Lead validation and calculation (tangent leads with material avoidance)
- Planning orchestration (parallel lead calculation per part)

All services are designed to be:
- Stateless (safe for use in worker processes)
- Deterministic (identical inputs give identical output)

Key functions:
- detect_shape_chains: Group shapes into chains
- detect_parts: Build parts from chains
- validate_lead_configuration: Check a lead configuration for a chain
- calculate_leads: Generate lead-in/lead-out geometry

Key classes:
- PartDetector: Containment hierarchy and part construction
- PathPlanner: Runs the full pipeline for a drawing
"""

from cutpath.core.chains import (
    chain_bounding_box,
    chain_centroid,
    chain_end_point,
    chain_polygon,
    chain_start_point,
    chain_tangent,
    detect_cut_direction,
    detect_shape_chains,
    is_chain_closed,
)
from cutpath.core.geometry import (
    line_intersection,
    point_in_polygon,
    signed_area,
)
from cutpath.core.lead_validation import validate_lead_configuration
from cutpath.core.leads import (
    SolidRegion,
    calculate_leads,
    check_lead_collisions,
    count_solid_area_points,
    is_point_in_solid_area,
)
from cutpath.core.parts import ChainNode, PartDetector, detect_parts
from cutpath.core.processor import PathPlanner, PlanResult, plan_part_leads
from cutpath.core.shapes import (
    UnsupportedGeometryError,
    is_shape_closed,
    reverse_shape,
    shape_bounding_box,
    shape_end_point,
    shape_start_point,
    shape_tangent,
    tessellate_shape,
)

__all__ = [
    # Part classes
    "ChainNode",
    "PartDetector",
    # Processor classes
    "PathPlanner",
    "PlanResult",
    # Lead classes
    "SolidRegion",
    "UnsupportedGeometryError",
    # Lead functions
    "calculate_leads",
    # Chain functions
    "chain_bounding_box",
    "chain_centroid",
    "chain_end_point",
    "chain_polygon",
    "chain_start_point",
    "chain_tangent",
    "check_lead_collisions",
    "count_solid_area_points",
    "detect_cut_direction",
    "detect_parts",
    "detect_shape_chains",
    "is_chain_closed",
    "is_point_in_solid_area",
    # Shape functions
    "is_shape_closed",
    # Geometry functions
    "line_intersection",
    "plan_part_leads",
    "point_in_polygon",
    "reverse_shape",
    "shape_bounding_box",
    "shape_end_point",
    "shape_start_point",
    "shape_tangent",
    "signed_area",
    "tessellate_shape",
    "validate_lead_configuration",
]
