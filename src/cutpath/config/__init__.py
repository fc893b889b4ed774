"""Configuration management for cutpath.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- ChainConfig: Chain detection tolerance
- PartConfig: Closure tolerance for part detection
- LeadSettings: Lead-in/lead-out settings and cut direction
- ProcessingConfig: Worker process settings
- LoggingConfig: Logging settings
- CutpathSettings: Main application settings
"""

from cutpath.config.settings import (
    ChainConfig,
    CutDirectionMode,
    CutpathSettings,
    LeadSettings,
    LoggingConfig,
    PartConfig,
    ProcessingConfig,
    get_default_settings,
)

__all__ = [
    "ChainConfig",
    "CutDirectionMode",
    "CutpathSettings",
    "LeadSettings",
    "LoggingConfig",
    "PartConfig",
    "ProcessingConfig",
    "get_default_settings",
]
