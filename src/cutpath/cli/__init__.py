"""Command-line interface for cutpath.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bar for lead calculation
- Verbose/quiet output modes
- Dry-run mode
- Detailed error reporting
"""

from cutpath.cli.app import cli, main

__all__ = ["cli", "main"]
