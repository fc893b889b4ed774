"""Domain models for cutpath.

This module contains the core domain models representing drawing shapes,
chains, parts and leads. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Free of algorithmic logic beyond simple derived properties

Key classes:
- Point2D, Shape and the six geometry kinds
- ShapeChain: Ordered connected shapes forming one cut path
- BoundingBox: Axis-aligned extent
- DetectedPart, PartShell, PartHole: Shell/hole part structure
- LeadConfig, LeadGeometry, LeadResult: Lead-in/lead-out configuration and output
"""

from cutpath.domain.chain import BoundingBox, ShapeChain
from cutpath.domain.geometry import (
    Arc,
    Circle,
    Ellipse,
    Geometry,
    GeometryType,
    Line,
    Point2D,
    Polyline,
    Shape,
    Spline,
)
from cutpath.domain.lead import (
    CutDirection,
    LeadConfig,
    LeadGeometry,
    LeadResult,
    LeadType,
    LeadValidationResult,
    Severity,
)
from cutpath.domain.part import (
    ChainRole,
    DetectedPart,
    PartDetectionResult,
    PartDetectionWarning,
    PartHole,
    PartShell,
    PartWarningType,
)

__all__: list[str] = [
    # Enums
    "ChainRole",
    "CutDirection",
    "GeometryType",
    "LeadType",
    "PartWarningType",
    "Severity",
    # Geometry
    "Arc",
    "Circle",
    "Ellipse",
    "Geometry",
    "Line",
    "Point2D",
    "Polyline",
    "Shape",
    "Spline",
    # Chains and parts
    "BoundingBox",
    "DetectedPart",
    "PartDetectionResult",
    "PartDetectionWarning",
    "PartHole",
    "PartShell",
    "ShapeChain",
    # Leads
    "LeadConfig",
    "LeadGeometry",
    "LeadResult",
    "LeadValidationResult",
]
