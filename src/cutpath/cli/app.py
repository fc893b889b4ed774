"""CLI application entry point for cutpath.

This module provides the main CLI interface using Typer.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from cutpath import __version__
from cutpath.cli.output import (
    SYM_OK,
    console,
    create_progress,
    print_cancellation_notice,
    print_cancellation_summary,
    print_drawing_info,
    print_error,
    print_header,
    print_lead_warnings,
    print_parts,
    print_processing_info,
    print_step,
    print_success,
)
from cutpath.config import (
    ChainConfig,
    CutDirectionMode,
    CutpathSettings,
    LeadSettings,
    LoggingConfig,
    PartConfig,
    ProcessingConfig,
)
from cutpath.core import PathPlanner, PlanResult
from cutpath.domain import LeadType, Shape
from cutpath.exceptions import CutpathError, PlanSaveError, ShapeError
from cutpath.io import PlanWriter, ShapeReader
from cutpath.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="cutpath",
    help="Plan cut paths for 2D drawings: chains, parts and lead-in/lead-out moves.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]cutpath[/bold blue] v{__version__}")
        raise typer.Exit()


def _parse_choice(value: str, enum_cls: type[Enum], option: str) -> Enum:
    try:
        return enum_cls(value.lower())
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        print_error(f"Invalid {option}: {value}", details=f"Valid values: {valid}")
        raise typer.Exit(code=1)


@app.command()
def plan(
    input_path: Annotated[
        Path,
        typer.Argument(
            help="Path to input JSON shape document",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {name}-plan.json)",
        ),
    ] = None,
    tolerance: Annotated[
        float,
        typer.Option(
            "--tolerance",
            "-t",
            help="Maximum gap between joined shape endpoints",
            min=0.0,
        ),
    ] = 0.05,
    closure_tolerance: Annotated[
        float,
        typer.Option(
            "--closure-tolerance",
            help="Maximum gap between chain start and end for a closed chain",
            min=0.0,
        ),
    ] = 0.1,
    lead_in: Annotated[
        str,
        typer.Option(
            "--lead-in",
            help="Lead-in type (none|line|arc)",
        ),
    ] = "none",
    lead_in_length: Annotated[
        float,
        typer.Option(
            "--lead-in-length",
            help="Lead-in length in drawing units",
        ),
    ] = 0.0,
    lead_in_angle: Annotated[
        float | None,
        typer.Option(
            "--lead-in-angle",
            help="Manual lead-in direction in degrees (default: automatic)",
        ),
    ] = None,
    lead_out: Annotated[
        str,
        typer.Option(
            "--lead-out",
            help="Lead-out type (none|line|arc)",
        ),
    ] = "none",
    lead_out_length: Annotated[
        float,
        typer.Option(
            "--lead-out-length",
            help="Lead-out length in drawing units",
        ),
    ] = 0.0,
    lead_out_angle: Annotated[
        float | None,
        typer.Option(
            "--lead-out-angle",
            help="Manual lead-out direction in degrees (default: automatic)",
        ),
    ] = None,
    flip_side: Annotated[
        bool,
        typer.Option(
            "--flip-side",
            help="Place leads on the opposite side of each chain",
        ),
    ] = False,
    no_fit: Annotated[
        bool,
        typer.Option(
            "--no-fit",
            help="Never shorten leads to avoid solid material",
        ),
    ] = False,
    cut_direction: Annotated[
        str,
        typer.Option(
            "--cut-direction",
            "-d",
            help="Cut direction for closed chains (auto|clockwise|counterclockwise|none)",
        ),
    ] = "auto",
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Plan and report without writing the plan file",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Plan cut paths for a drawing.

    Joins shapes into chains, detects parts (outer shells with holes) and
    generates lead-in/lead-out moves that meet each chain tangentially
    without crossing solid material.

    Example:
        cutpath drawing.json --lead-in arc --lead-in-length 5

    This will create drawing-plan.json with the chains, parts and leads.
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if not input_path.exists():
        print_error(
            f"Input file not found: {input_path}",
            details=f"The file '{input_path}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not input_path.is_file():
        print_error(
            f"Input path is not a file: {input_path}",
            details="Please provide a path to a JSON shape document.",
        )
        raise typer.Exit(code=1)

    lead_in_type = _parse_choice(lead_in, LeadType, "lead-in type")
    lead_out_type = _parse_choice(lead_out, LeadType, "lead-out type")
    direction_mode = _parse_choice(cut_direction, CutDirectionMode, "cut direction")

    if not quiet:
        print_header(__version__)

    try:
        settings = CutpathSettings(
            chain=ChainConfig(tolerance=tolerance),
            part=PartConfig(closure_tolerance=closure_tolerance),
            lead=LeadSettings(
                lead_in_type=lead_in_type,
                lead_in_length=lead_in_length,
                lead_in_angle=lead_in_angle,
                lead_out_type=lead_out_type,
                lead_out_length=lead_out_length,
                lead_out_angle=lead_out_angle,
                flip_side=flip_side,
                fit=not no_fit,
                cut_direction=direction_mode,
            ),
            processing=ProcessingConfig(max_workers=workers),
            logging=LoggingConfig(
                log_file=log_file,
                log_level=log_level if not quiet else "WARNING",
            ),
        )
    except ValueError as e:
        print_error("Invalid settings", details=str(e))
        raise typer.Exit(code=1)

    try:
        logger = configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
            quiet=quiet,
        )

        if not quiet:
            print_step("Loading shapes")

        reader = ShapeReader(input_path)
        reader.load()
        shapes = reader.shapes()

        if not quiet:
            print_drawing_info(str(input_path), len(shapes))

        if not shapes:
            if not quiet:
                console.print("\nNo shapes found. Nothing to plan.")
            raise typer.Exit(code=0)

        if not quiet:
            actual_workers = workers if workers else os.cpu_count() or 1
            print_step("Planning")
            print_processing_info(actual_workers, is_auto=(workers is None))

        planner = PathPlanner(settings, logger=logger)
        result = _run_planner(planner, shapes, workers, quiet)

        if not quiet:
            print_step("Parts")
            print_parts(result.parts, result.part_warnings, verbose)
            if result.leads:
                print_lead_warnings(result.leads, verbose)

        output_path = None
        if not dry_run:
            output_path = output if output is not None else PlanWriter.get_plan_path(input_path)
            PlanWriter(output_path).save(result, settings.part.closure_tolerance)

        stats = result.stats
        if not quiet:
            print_success(
                total_time_s=stats.duration_seconds,
                chains=stats.chain_count,
                parts=stats.part_count,
                leads=stats.leads_generated,
                warnings=stats.lead_warning_count,
                errors=stats.error_count,
                output_path=str(output_path) if output_path is not None else None,
                avg_time_ms=stats.avg_part_time_ms,
                min_time_ms=stats.min_part_time_ms,
                max_time_ms=stats.max_part_time_ms,
            )
            if dry_run:
                console.print(f"  {SYM_OK} Dry run - no plan written")

    except ShapeError as e:
        print_error(f"Could not load shapes: {e}")
        raise typer.Exit(code=1)
    except PlanSaveError as e:
        print_error(f"Could not save plan: {e.reason}")
        raise typer.Exit(code=1)
    except CutpathError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _run_planner(
    planner: PathPlanner, shapes: list[Shape], workers: int | None, quiet: bool
) -> PlanResult:
    """Run the planner with a progress bar, handling cancellation.

    Args:
        planner: Configured planner
        shapes: Shapes of the drawing
        workers: Worker count from the command line
        quiet: Suppress output

    Returns:
        PlanResult of the run
    """
    completed_units = 0
    try:
        if quiet:
            return planner.plan(shapes, max_workers=workers)

        with create_progress() as progress:
            task_id = progress.add_task("Calculating leads", total=None)

            def update_progress(completed: int, total: int, *_: object) -> None:
                nonlocal completed_units
                completed_units = completed
                progress.update(task_id, completed=completed, total=total)

            return planner.plan(shapes, max_workers=workers, progress_callback=update_progress)

    except KeyboardInterrupt:
        if not quiet:
            print_cancellation_notice()
            stats = planner.stats
            print_cancellation_summary(
                completed=completed_units,
                cancelled=stats.cancelled_count if stats else 0,
            )
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
