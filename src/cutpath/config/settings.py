"""Configuration settings for cutpath."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from cutpath.domain import CutDirection, LeadConfig, LeadType


class CutDirectionMode(str, Enum):
    """How the cut direction of closed chains is chosen."""

    AUTO = "auto"
    CLOCKWISE = "clockwise"
    COUNTERCLOCKWISE = "counterclockwise"
    NONE = "none"

    def to_cut_direction(self) -> CutDirection | None:
        """Fixed cut direction, or None when it is detected per chain."""
        if self == CutDirectionMode.AUTO:
            return None
        return CutDirection(self.value)


class ChainConfig(BaseModel):
    """Configuration for chain detection."""

    tolerance: float = Field(
        default=0.05,
        gt=0.0,
        le=10.0,
        description="Maximum distance between shape endpoints that join",
    )


class PartConfig(BaseModel):
    """Configuration for part detection."""

    closure_tolerance: float = Field(
        default=0.1,
        gt=0.0,
        le=10.0,
        description="Maximum gap between chain start and end for a closed chain",
    )


class LeadSettings(BaseModel):
    """Lead-in/lead-out configuration applied to every chain.

    Lengths are not range-checked here so that out-of-range values reach
    lead validation and are reported per chain.
    """

    lead_in_type: LeadType = Field(
        default=LeadType.NONE,
        description="Lead-in geometry (none|line|arc)",
    )
    lead_in_length: float = Field(
        default=0.0,
        description="Lead-in length in drawing units",
    )
    lead_in_angle: float | None = Field(
        default=None,
        description="Manual lead-in direction in degrees (None = automatic)",
    )
    lead_out_type: LeadType = Field(
        default=LeadType.NONE,
        description="Lead-out geometry (none|line|arc)",
    )
    lead_out_length: float = Field(
        default=0.0,
        description="Lead-out length in drawing units",
    )
    lead_out_angle: float | None = Field(
        default=None,
        description="Manual lead-out direction in degrees (None = automatic)",
    )
    flip_side: bool = Field(
        default=False,
        description="Place leads on the opposite side of the chain",
    )
    fit: bool = Field(
        default=True,
        description="Allow shortening leads to avoid solid material",
    )
    cut_direction: CutDirectionMode = Field(
        default=CutDirectionMode.AUTO,
        description="Cut direction for closed chains (auto = detect from winding)",
    )

    def to_lead_configs(self) -> tuple[LeadConfig, LeadConfig]:
        """Build the (lead_in, lead_out) domain configurations."""
        lead_in = LeadConfig(
            type=self.lead_in_type,
            length=self.lead_in_length,
            flip_side=self.flip_side,
            angle=self.lead_in_angle,
            fit=self.fit,
        )
        lead_out = LeadConfig(
            type=self.lead_out_type,
            length=self.lead_out_length,
            flip_side=self.flip_side,
            angle=self.lead_out_angle,
            fit=self.fit,
        )
        return lead_in, lead_out


class ProcessingConfig(BaseModel):
    """Configuration for path planning runs."""

    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Max worker processes (None = auto, 1 = in-process)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class CutpathSettings(BaseModel):
    """Main application settings."""

    chain: ChainConfig = Field(default_factory=ChainConfig)
    part: PartConfig = Field(default_factory=PartConfig)
    lead: LeadSettings = Field(default_factory=LeadSettings)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> CutpathSettings:
    """Get default application settings."""
    return CutpathSettings()
