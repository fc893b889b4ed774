"""Shape and plan I/O layer for cutpath.

This module reads drawings stored in the library's own JSON form and
converts them to domain models, and writes planning results back out.
Parsing CAD formats is left to callers.

Key classes:
- ShapeReader: Load shape documents and extract shapes
- PlanWriter: Save planning results as JSON
"""

from cutpath.io.reader import ShapeReader
from cutpath.io.writer import PlanWriter, plan_to_dict

__all__ = [
    "PlanWriter",
    "ShapeReader",
    "plan_to_dict",
]
