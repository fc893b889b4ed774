"""Lead-in/lead-out configuration and results.

Leads are short approach (lead-in) and departure (lead-out) paths joined to
the start and end of a chain. LeadConfig is deliberately unchecked on
construction: out-of-range values are reported by lead validation.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cutpath.domain.geometry import Point2D


class LeadType(str, Enum):
    """Lead geometry kind."""

    NONE = "none"
    LINE = "line"
    ARC = "arc"


class CutDirection(str, Enum):
    """Direction in which a closed chain is cut."""

    CLOCKWISE = "clockwise"
    COUNTERCLOCKWISE = "counterclockwise"
    NONE = "none"


class Severity(str, Enum):
    """Validation severity, ordered info < warning < error."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def escalate(self, other: "Severity") -> "Severity":
        """Return the more severe of self and other."""
        return other if other.rank > self.rank else self


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


@dataclass(frozen=True, slots=True)
class LeadConfig:
    """Configuration for one lead.

    Attributes:
        type: Lead geometry kind
        length: Requested length along the lead (arc length for arc leads)
        flip_side: Place the lead on the opposite side of the chain
        angle: Manual absolute direction in degrees (0 = +x, counter-clockwise
            positive); None for automatic placement
        fit: Allow shortening the lead to avoid solid material
    """

    type: LeadType = LeadType.NONE
    length: float = 0.0
    flip_side: bool = False
    angle: float | None = None
    fit: bool = True

    @property
    def is_requested(self) -> bool:
        """True when this config asks for lead geometry."""
        return self.type != LeadType.NONE and self.length > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "length": self.length,
            "flip_side": self.flip_side,
            "angle": self.angle,
            "fit": self.fit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LeadConfig":
        angle = data.get("angle")
        return cls(
            type=LeadType(data.get("type", LeadType.NONE.value)),
            length=float(data.get("length", 0.0)),
            flip_side=bool(data.get("flip_side", False)),
            angle=float(angle) if angle is not None else None,
            fit=bool(data.get("fit", True)),
        )


@dataclass(frozen=True, slots=True)
class LeadGeometry:
    """Tessellated lead path.

    A lead-in ends exactly at the chain start; a lead-out begins exactly at
    the chain end.

    Attributes:
        type: Lead geometry kind
        points: Ordered points along the lead
    """

    type: LeadType
    points: tuple[Point2D, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))

    @property
    def length(self) -> float:
        """Summed segment length."""
        return sum(
            math.hypot(b.x - a.x, b.y - a.y)
            for a, b in zip(self.points, self.points[1:])
        )

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "points": [p.to_dict() for p in self.points]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LeadGeometry":
        return cls(
            type=LeadType(data["type"]),
            points=tuple(Point2D.from_dict(p) for p in data["points"]),
        )


@dataclass
class LeadValidationResult:
    """Outcome of validating a lead configuration.

    Attributes:
        is_valid: False only when an error was found
        warnings: Messages from every check, in check order
        suggestions: Remediation hints
        severity: Highest severity reported
    """

    is_valid: bool = True
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    severity: Severity = Severity.INFO

    def add(self, severity: Severity, message: str, suggestion: str | None = None) -> None:
        """Record a finding and escalate severity."""
        self.warnings.append(message)
        if suggestion:
            self.suggestions.append(suggestion)
        self.severity = self.severity.escalate(severity)
        if severity == Severity.ERROR:
            self.is_valid = False

    def merge(self, other: "LeadValidationResult") -> None:
        """Fold another result into this one."""
        self.warnings.extend(other.warnings)
        self.suggestions.extend(other.suggestions)
        self.severity = self.severity.escalate(other.severity)
        self.is_valid = self.is_valid and other.is_valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "severity": self.severity.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LeadValidationResult":
        return cls(
            is_valid=bool(data["is_valid"]),
            warnings=list(data.get("warnings", [])),
            suggestions=list(data.get("suggestions", [])),
            severity=Severity(data["severity"]),
        )


@dataclass
class LeadResult:
    """Lead geometry computed for a chain.

    A None lead means no lead was produced, either because none was
    requested, validation failed, or the chain boundary shape is malformed.

    Attributes:
        lead_in: Lead-in geometry ending at the chain start
        lead_out: Lead-out geometry starting at the chain end
        warnings: Validation warnings followed by calculation warnings
        validation: Full validation outcome
    """

    lead_in: LeadGeometry | None = None
    lead_out: LeadGeometry | None = None
    warnings: list[str] = field(default_factory=list)
    validation: LeadValidationResult = field(default_factory=LeadValidationResult)

    def effective_start(self, chain_start: Point2D) -> Point2D:
        """Point where cutting begins: first lead-in point or the chain start."""
        if self.lead_in is not None and self.lead_in.points:
            return self.lead_in.points[0]
        return chain_start

    def effective_end(self, chain_end: Point2D) -> Point2D:
        """Point where cutting ends: last lead-out point or the chain end."""
        if self.lead_out is not None and self.lead_out.points:
            return self.lead_out.points[-1]
        return chain_end

    def to_dict(self) -> dict[str, Any]:
        return {
            "lead_in": self.lead_in.to_dict() if self.lead_in else None,
            "lead_out": self.lead_out.to_dict() if self.lead_out else None,
            "warnings": list(self.warnings),
            "validation": self.validation.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LeadResult":
        return cls(
            lead_in=LeadGeometry.from_dict(data["lead_in"]) if data.get("lead_in") else None,
            lead_out=LeadGeometry.from_dict(data["lead_out"]) if data.get("lead_out") else None,
            warnings=list(data.get("warnings", [])),
            validation=LeadValidationResult.from_dict(data["validation"]),
        )
