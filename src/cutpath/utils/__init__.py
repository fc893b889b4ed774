"""Utility functions for cutpath.

This module provides utility functions including:

- Logging setup and configuration
- Processing statistics
"""

from cutpath.utils.logging import (
    ProcessingLogger,
    ProcessingStats,
    configure_logging,
)

__all__ = [
    "ProcessingLogger",
    "ProcessingStats",
    "configure_logging",
]
