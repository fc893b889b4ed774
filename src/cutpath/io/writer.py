"""Plan writer for saving planning results.

This module provides the PlanWriter class for writing a planning run to
a JSON document alongside the drawing it was planned from.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from cutpath.core.chains import chain_end_point, chain_start_point, is_chain_closed
from cutpath.core.processor import PlanResult
from cutpath.domain import PartHole
from cutpath.exceptions import PlanSaveError


def _hole_summary(hole: PartHole) -> dict[str, Any]:
    return {
        "id": hole.id,
        "chain_id": hole.chain.id,
        "holes": [_hole_summary(child) for child in hole.holes],
    }


def plan_to_dict(result: PlanResult, closure_tolerance: float) -> dict[str, Any]:
    """Convert a planning result to a JSON-ready document.

    Parts reference chains by id so every chain's shapes appear once.

    Args:
        result: Planning result
        closure_tolerance: Tolerance used to report chain closure

    Returns:
        Plan document
    """
    chains = []
    for chain in result.chains:
        start = chain_start_point(chain)
        end = chain_end_point(chain)
        chains.append(
            {
                "id": chain.id,
                "closed": is_chain_closed(chain, closure_tolerance),
                "start": start.to_dict() if start is not None else None,
                "end": end.to_dict() if end is not None else None,
                "shapes": [shape.to_dict() for shape in chain.shapes],
            }
        )

    stats = result.stats
    return {
        "created": datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
        "chains": chains,
        "parts": [
            {
                "id": part.id,
                "shell": {"id": part.shell.id, "chain_id": part.shell.chain.id},
                "holes": [_hole_summary(hole) for hole in part.holes],
            }
            for part in result.parts
        ],
        "warnings": [warning.to_dict() for warning in result.part_warnings],
        "leads": {chain_id: lead.to_dict() for chain_id, lead in result.leads.items()},
        "stats": {
            "chains": stats.chain_count,
            "parts": stats.part_count,
            "leads": stats.leads_generated,
            "lead_warnings": stats.lead_warning_count,
            "errors": [{"unit": unit, "error": error} for unit, error in stats.errors],
        },
    }


class PlanWriter:
    """Writes planning results as JSON documents.

    Example:
        writer = PlanWriter(Path("drawing-plan.json"))
        writer.save(result, closure_tolerance=0.1)
    """

    def __init__(self, output_path: Path) -> None:
        """Initialize the plan writer.

        Args:
            output_path: Path where the plan will be saved
        """
        self._output_path = output_path

    def save(self, result: PlanResult, closure_tolerance: float) -> None:
        """Save the plan to the output path.

        Args:
            result: Planning result
            closure_tolerance: Tolerance used to report chain closure

        Raises:
            PlanSaveError: If the file cannot be written
        """
        document = plan_to_dict(result, closure_tolerance)
        try:
            with self._output_path.open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
        except OSError as e:
            raise PlanSaveError(str(self._output_path), str(e)) from e

    @staticmethod
    def get_plan_path(input_path: Path) -> Path:
        """Generate output path with the plan naming convention.

        Converts: drawing.json -> drawing-plan.json

        Args:
            input_path: Shape document path

        Returns:
            Path with -plan suffix before the extension
        """
        return input_path.parent / f"{input_path.stem}-plan.json"
