"""Path planning orchestration.

This module runs the whole pipeline for a drawing: chain detection, part
detection and lead calculation, with the lead work for independent parts
optionally spread across worker processes.

Key components:
- plan_part_leads: Top-level picklable function for parallel execution
- PathPlanner: Main orchestrator class
- PlanResult: Everything produced by a planning run
"""

import time
import traceback
from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any

import structlog

from cutpath.config import CutpathSettings, LeadSettings
from cutpath.core.chains import detect_cut_direction, detect_shape_chains, is_chain_closed
from cutpath.core.leads import calculate_leads
from cutpath.core.parts import PartDetector
from cutpath.domain import (
    CutDirection,
    DetectedPart,
    LeadResult,
    PartDetectionWarning,
    Shape,
    ShapeChain,
)
from cutpath.exceptions import PlanningError
from cutpath.utils import ProcessingLogger, ProcessingStats

ProgressCallback = Callable[[int, int, str, bool], None]


def _chain_cut_direction(
    chain: ShapeChain, settings: LeadSettings, closure_tolerance: float
) -> CutDirection:
    fixed = settings.cut_direction.to_cut_direction()
    if fixed is not None:
        return fixed
    return detect_cut_direction(chain, closure_tolerance)


def calculate_part_leads(
    part: DetectedPart, settings: LeadSettings, closure_tolerance: float
) -> dict[str, LeadResult]:
    """Calculate leads for the shell and direct holes of a part.

    Args:
        part: Part to process
        settings: Lead settings
        closure_tolerance: Tolerance used to detect chain winding

    Returns:
        Dictionary mapping chain id to its LeadResult
    """
    lead_in, lead_out = settings.to_lead_configs()
    return {
        chain.id: calculate_leads(
            chain,
            lead_in,
            lead_out,
            cut_direction=_chain_cut_direction(chain, settings, closure_tolerance),
            part=part,
        )
        for chain in part.chains()
    }


def plan_part_leads(
    part_dict: dict[str, Any],
    lead_settings_dict: dict[str, Any],
    closure_tolerance: float,
) -> dict[str, Any]:
    """Calculate leads for one part.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Deserializes the part, calculates leads and returns serialized results.

    Args:
        part_dict: Serialized part (from DetectedPart.to_dict())
        lead_settings_dict: Serialized lead settings
        closure_tolerance: Tolerance used to detect chain winding

    Returns:
        Dictionary containing either:
        - Success: {"part_id": str, "leads": {chain_id: lead_dict}, "duration_ms": float}
        - Error: {"error": str, "part_id": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        part = DetectedPart.from_dict(part_dict)
        settings = LeadSettings(**lead_settings_dict)
        leads = calculate_part_leads(part, settings, closure_tolerance)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "part_id": part.id,
            "leads": {chain_id: result.to_dict() for chain_id, result in leads.items()},
            "duration_ms": duration_ms,
        }

    except Exception as e:
        # Capture full traceback for debugging
        duration_ms = (time.time() - start_time) * 1000
        tb = traceback.format_exc()
        return {
            "error": str(e),
            "part_id": part_dict.get("id", "unknown"),
            "traceback": tb,
            "duration_ms": duration_ms,
        }


@dataclass
class PlanResult:
    """Output of a planning run.

    Attributes:
        chains: Detected chains in discovery order
        parts: Detected parts
        part_warnings: Structural warnings from part detection
        leads: LeadResult per chain id (chains whose work unit failed are absent)
        stats: Counts, errors and timings
    """

    chains: list[ShapeChain] = field(default_factory=list)
    parts: list[DetectedPart] = field(default_factory=list)
    part_warnings: list[PartDetectionWarning] = field(default_factory=list)
    leads: dict[str, LeadResult] = field(default_factory=dict)
    stats: ProcessingStats = field(default_factory=ProcessingStats)

    def orphan_chains(self) -> list[ShapeChain]:
        """Chains that belong to no part."""
        owned = {chain.id for part in self.parts for chain in part.chains()}
        return [chain for chain in self.chains if chain.id not in owned]


class PathPlanner:
    """Orchestrates chain detection, part detection and lead calculation.

    Manages the complete workflow:
    1. Group shapes into chains
    2. Detect parts from closed chains
    3. Calculate leads per part (in parallel when worthwhile) and for
       chains outside any part
    4. Collect results and statistics

    Example:
        settings = CutpathSettings()
        planner = PathPlanner(settings)
        result = planner.plan(shapes, max_workers=4)
    """

    def __init__(
        self,
        settings: CutpathSettings,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize planner with configuration.

        Args:
            settings: Cutpath settings
            logger: Logger to report progress to (defaults to the "cutpath" logger)
        """
        self.settings = settings
        self.logger = logger if logger is not None else structlog.get_logger("cutpath")
        self.stats: ProcessingStats | None = None

    def plan(
        self,
        shapes: list[Shape],
        max_workers: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> PlanResult:
        """Plan cut paths for a drawing.

        Args:
            shapes: Shapes of the drawing
            max_workers: Maximum worker processes (None = settings value,
                1 = calculate in-process)
            progress_callback: Optional callback(completed, total, unit_id, success)
                called after each part or orphan chain

        Returns:
            PlanResult with chains, parts, leads and statistics

        Raises:
            PlanningError: If max_workers is less than 1
            KeyboardInterrupt: If processing is cancelled by user
        """
        processing_logger = ProcessingLogger(self.logger)
        stats = processing_logger.stats
        self.stats = stats
        stats.start_time = time.time()

        if max_workers is None:
            max_workers = self.settings.processing.max_workers
        if max_workers is not None and max_workers < 1:
            raise PlanningError(f"max_workers must be at least 1, got {max_workers}")

        self.logger.info("Starting path planning", shapes=len(shapes), max_workers=max_workers)

        chains = detect_shape_chains(shapes, self.settings.chain.tolerance)
        closure_tolerance = self.settings.part.closure_tolerance
        detection = PartDetector(closure_tolerance).detect(chains)

        for warning in detection.warnings:
            self.logger.info(
                "Part detection warning", chain=warning.chain_id, message=warning.message
            )
        processing_logger.log_part_analysis(
            chain_count=len(chains),
            closed_count=sum(1 for c in chains if is_chain_closed(c, closure_tolerance)),
            part_count=len(detection.parts),
            warning_count=len(detection.warnings),
        )

        result = PlanResult(
            chains=chains,
            parts=detection.parts,
            part_warnings=detection.warnings,
            stats=stats,
        )
        orphans = result.orphan_chains()
        total = len(detection.parts) + len(orphans)
        completed = 0

        if max_workers == 1 or len(detection.parts) <= 1:
            for part in detection.parts:
                success = self._plan_part_in_process(part, result, processing_logger)
                completed += 1
                if progress_callback is not None:
                    progress_callback(completed, total, part.id, success)
        else:
            completed = self._plan_parts_parallel(
                detection.parts, max_workers, result, processing_logger, progress_callback, total
            )

        lead_in, lead_out = self.settings.lead.to_lead_configs()
        for chain in orphans:
            start = time.time()
            processing_logger.log_part_start(chain.id, 1)
            lead_result = calculate_leads(
                chain,
                lead_in,
                lead_out,
                cut_direction=_chain_cut_direction(chain, self.settings.lead, closure_tolerance),
            )
            self._record(chain.id, lead_result, result, processing_logger)
            processing_logger.log_part_complete(
                chain.id, _lead_count(lead_result), (time.time() - start) * 1000
            )
            completed += 1
            if progress_callback is not None:
                progress_callback(completed, total, chain.id, True)

        stats.end_time = time.time()
        self.logger.info(
            "Planning complete",
            chains=stats.chain_count,
            parts=stats.part_count,
            leads=stats.leads_generated,
            lead_warnings=stats.lead_warning_count,
            errors=stats.error_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        return result

    def _record(
        self,
        chain_id: str,
        lead_result: LeadResult,
        result: PlanResult,
        processing_logger: ProcessingLogger,
    ) -> None:
        result.leads[chain_id] = lead_result
        if _lead_count(lead_result) == 0:
            processing_logger.log_chain_skipped(chain_id, "no lead geometry")
        for message in lead_result.warnings:
            processing_logger.log_lead_warning(chain_id, message)

    def _plan_part_in_process(
        self, part: DetectedPart, result: PlanResult, processing_logger: ProcessingLogger
    ) -> bool:
        start = time.time()
        processing_logger.log_part_start(part.id, len(part.chains()))
        try:
            leads = calculate_part_leads(
                part, self.settings.lead, self.settings.part.closure_tolerance
            )
        except Exception as e:
            processing_logger.log_part_error(part.id, e, traceback.format_exc())
            return False

        for chain_id, lead_result in leads.items():
            self._record(chain_id, lead_result, result, processing_logger)
        processing_logger.log_part_complete(
            part.id,
            sum(_lead_count(r) for r in leads.values()),
            (time.time() - start) * 1000,
        )
        return True

    def _plan_parts_parallel(
        self,
        parts: list[DetectedPart],
        max_workers: int | None,
        result: PlanResult,
        processing_logger: ProcessingLogger,
        progress_callback: ProgressCallback | None,
        total: int,
    ) -> int:
        """Calculate part leads using ProcessPoolExecutor.

        Returns:
            Number of completed work units
        """
        lead_settings_dict = self.settings.lead.model_dump()
        closure_tolerance = self.settings.part.closure_tolerance
        stats = result.stats

        self.logger.info(
            "Starting parallel lead calculation", parts=len(parts), max_workers=max_workers
        )

        completed = 0
        pending_futures: dict = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for part in parts:
                future = executor.submit(
                    plan_part_leads, part.to_dict(), lead_settings_dict, closure_tolerance
                )
                pending_futures[future] = part.id

            try:
                for future in as_completed(pending_futures):
                    part_id = pending_futures.pop(future)
                    success = False

                    try:
                        outcome = future.result()

                        if "error" in outcome:
                            processing_logger.log_part_error(
                                unit_id=outcome["part_id"],
                                error=Exception(outcome["error"]),
                                traceback=outcome.get("traceback"),
                            )
                        else:
                            success = True
                            leads = {
                                chain_id: LeadResult.from_dict(data)
                                for chain_id, data in outcome["leads"].items()
                            }
                            for chain_id, lead_result in leads.items():
                                self._record(chain_id, lead_result, result, processing_logger)
                            processing_logger.log_part_complete(
                                unit_id=part_id,
                                leads_generated=sum(_lead_count(r) for r in leads.values()),
                                duration_ms=outcome.get("duration_ms", 0.0),
                            )

                    except Exception as e:
                        # Executor-level error
                        processing_logger.log_part_error(
                            unit_id=part_id, error=e, traceback=traceback.format_exc()
                        )

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, part_id, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                stats.was_cancelled = True
                stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise

        return completed


def _lead_count(lead_result: LeadResult) -> int:
    return int(lead_result.lead_in is not None) + int(lead_result.lead_out is not None)
