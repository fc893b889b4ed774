"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from cutpath.domain import DetectedPart, LeadResult, PartDetectionWarning

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_WARN = "!"  # Warning
SYM_DOT = "·"  # Separator/secondary info

# Cap on list output in non-verbose mode
MAX_LISTED = 20


def create_progress() -> Progress:
    """Create a rich progress bar for lead calculation.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]cutpath[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_drawing_info(drawing_path: str, shape_count: int) -> None:
    """Print drawing information.

    Args:
        drawing_path: Path to the shape document
        shape_count: Number of shapes in the document
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(drawing_path)
    console.print(line)
    console.print(f"  {shape_count:,} shapes")


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    """Print processing configuration.

    Args:
        workers: Number of parallel workers
        is_auto: Whether the count was auto-detected
    """
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_parts(
    parts: list[DetectedPart],
    warnings: list[PartDetectionWarning],
    verbose: bool,
) -> None:
    """Print detected parts and structural warnings.

    Args:
        parts: Detected parts
        warnings: Part detection warnings
        verbose: Whether to show the part table
    """
    hole_count = sum(len(part.holes) for part in parts)
    console.print(f"  [green]{len(parts)}[/green] parts {SYM_DOT} {hole_count} holes")

    if verbose and parts:
        table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
        table.add_column("  Part")
        table.add_column("Shell chain")
        table.add_column("Holes", justify="right")
        table.add_column("Size")
        for part in parts[:MAX_LISTED]:
            bbox = part.shell.bounding_box
            table.add_row(
                f"  {part.id}",
                part.shell.chain.id,
                str(len(part.holes)),
                f"{bbox.width:.2f} x {bbox.height:.2f}",
            )
        console.print(table)
        if len(parts) > MAX_LISTED:
            console.print(f"  {SYM_DOT}{SYM_DOT}{SYM_DOT} (+{len(parts) - MAX_LISTED} more)")

    for warning in warnings:
        console.print(f"  [yellow]{SYM_WARN}[/yellow] {warning.chain_id}: {warning.message}")


def print_lead_warnings(leads: dict[str, LeadResult], verbose: bool) -> None:
    """Print lead warnings per chain.

    Validation notes are only shown in verbose mode; calculation warnings
    (leads that could not avoid material) are always shown.

    Args:
        leads: LeadResult per chain id
        verbose: Whether to show every message
    """
    for chain_id, result in leads.items():
        validation_messages = set(result.validation.warnings)
        for message in result.warnings:
            if not verbose and message in validation_messages:
                continue
            console.print(f"  [yellow]{SYM_WARN}[/yellow] {chain_id}: {message}")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_success(
    total_time_s: float,
    chains: int,
    parts: int,
    leads: int,
    warnings: int,
    errors: int,
    output_path: str | None = None,
    avg_time_ms: float | None = None,
    min_time_ms: float | None = None,
    max_time_ms: float | None = None,
) -> None:
    """Print success message with summary.

    Args:
        total_time_s: Total processing time in seconds
        chains: Number of chains detected
        parts: Number of parts detected
        leads: Number of leads generated
        warnings: Number of lead warnings
        errors: Number of errors encountered
        output_path: Path the plan was written to, if any
        avg_time_ms: Average lead calculation time per part in milliseconds
        min_time_ms: Minimum lead calculation time per part in milliseconds
        max_time_ms: Maximum lead calculation time per part in milliseconds
    """
    time_str = _format_time(total_time_s)

    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    if output_path is not None:
        line = Text("  ")
        line.append(output_path, style="bold")
        console.print(line)

    error_style = "red" if errors > 0 else "green"
    warning_style = "yellow" if warnings > 0 else "green"
    console.print(
        f"  {chains} chains {SYM_DOT} {parts} parts {SYM_DOT} {leads} leads {SYM_DOT} "
        f"[{warning_style}]{warnings} warnings[/{warning_style}] {SYM_DOT} "
        f"[{error_style}]{errors} errors[/{error_style}]"
    )

    if avg_time_ms is not None:
        timing_str = f"{avg_time_ms:.1f}ms avg"
        if min_time_ms is not None and max_time_ms is not None:
            timing_str += f" ({min_time_ms:.1f}–{max_time_ms:.1f}ms range)"
        console.print(f"  {timing_str}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelling... waiting for in-progress parts")


def print_cancellation_summary(completed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        completed: Number of parts processed before cancellation
        cancelled: Number of pending tasks that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {completed} parts completed {SYM_DOT} {cancelled} tasks cancelled")
    console.print("  No plan written")
