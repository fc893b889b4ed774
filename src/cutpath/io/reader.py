"""Shape reader for loading drawings.

This module provides the ShapeReader class for loading shape documents
into domain models. A document is JSON holding either a list of shape
records or an object with a "shapes" list; each record is the dict form
produced by Shape.to_dict().
"""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from cutpath.domain import Shape
from cutpath.exceptions import ShapeFormatError, ShapeLoadError


class ShapeReader:
    """Loads shape documents and converts them to domain shapes.

    Example:
        reader = ShapeReader(Path("drawing.json"))
        reader.load()
        for shape in reader.iter_shapes():
            print(shape.id)
    """

    def __init__(self, path: Path) -> None:
        """Initialize the shape reader.

        Args:
            path: Path to the JSON shape document
        """
        self._path = path
        self._records: list[dict[str, Any]] | None = None

    def load(self) -> None:
        """Load and parse the shape document.

        Raises:
            ShapeLoadError: If the file is missing, unreadable or not a
                shape document
        """
        if not self._path.exists():
            raise ShapeLoadError(str(self._path), "file not found")

        try:
            with self._path.open(encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ShapeLoadError(str(self._path), str(e)) from e

        if isinstance(document, dict):
            document = document.get("shapes")
        if not isinstance(document, list):
            raise ShapeLoadError(
                str(self._path), 'expected a list of shapes or an object with a "shapes" list'
            )
        self._records = document

    @property
    def shape_count(self) -> int:
        """Return number of shape records in the document.

        Raises:
            RuntimeError: If the document has not been loaded yet
        """
        if self._records is None:
            raise RuntimeError("Shapes not loaded. Call load() first.")
        return len(self._records)

    def iter_shapes(self) -> Iterator[Shape]:
        """Iterate over shapes in document order.

        Yields:
            Shape domain models

        Raises:
            RuntimeError: If the document has not been loaded yet
            ShapeFormatError: If a record cannot be converted
        """
        if self._records is None:
            raise RuntimeError("Shapes not loaded. Call load() first.")

        for index, record in enumerate(self._records):
            if not isinstance(record, dict):
                raise ShapeFormatError(index, "record is not an object")
            try:
                yield Shape.from_dict(record)
            except (KeyError, TypeError, ValueError) as e:
                raise ShapeFormatError(index, f"{type(e).__name__}: {e}") from e

    def shapes(self) -> list[Shape]:
        """Load every shape into a list."""
        return list(self.iter_shapes())
