"""Exception hierarchy for cutpath.

Geometric and configuration problems inside the pipeline are reported as
warnings and validation results. These exceptions cover the outer
surfaces: loading shape documents, configuring a run and the CLI.
"""


class CutpathError(Exception):
    """Base exception for all cutpath errors."""

    pass


class ShapeError(CutpathError):
    """Errors related to shape input."""

    pass


class ShapeLoadError(ShapeError):
    """Error loading a shape document."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load shapes '{path}': {reason}")


class ShapeFormatError(ShapeError):
    """A shape record is missing fields or has an unknown geometry type."""

    def __init__(self, index: int, details: str) -> None:
        self.index = index
        self.details = details
        super().__init__(f"Invalid shape at index {index}: {details}")


class PlanSaveError(CutpathError):
    """Error writing a cut plan."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save plan '{path}': {reason}")


class GeometryError(CutpathError):
    """Errors in geometric calculations."""

    pass


class PlanningError(CutpathError):
    """Error planning cut paths for a drawing."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Path planning failed: {reason}")

