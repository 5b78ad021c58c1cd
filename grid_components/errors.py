"""Error taxonomy for the grid layout pipeline.

Every failure stops the whole run. A grid is only meaningful when complete,
so no stage catches one of these and continues with degraded data.
"""


class GridLayoutError(RuntimeError):
    """Base class for all pipeline failures."""
    pass


class ContractViolation(GridLayoutError):
    """Raised when a pipeline stage breaks an invariant it promised.

    This indicates a bug in pipeline logic (e.g. a stage field assigned twice,
    an assignment that is not a bijection), not bad user input.
    """
    pass


class DiscoveryError(GridLayoutError):
    """Source directory missing or unreadable."""
    pass


class InvalidCountError(GridLayoutError, ValueError):
    """Requested item count is not a strictly positive integer."""
    pass


class InsufficientCorpusError(GridLayoutError):
    """Fewer images were discovered than the grid has cells."""

    def __init__(self, required: int, found: int):
        self.required = required
        self.found = found
        super().__init__(
            f"There are fewer images in the directory ({found}) than the grid "
            f"size requested (nx*ny={required})"
        )


class ImageLoadError(GridLayoutError):
    """An image in the corpus could not be decoded."""
    pass


class EncodeError(GridLayoutError):
    """The encoder failed or returned malformed vectors."""
    pass


class ReduceError(GridLayoutError):
    """The dimensionality reducer failed or returned malformed points."""
    pass


class AssignError(GridLayoutError):
    """The assignment solver failed or did not return a bijection."""
    pass


class RenderOverflowError(GridLayoutError):
    """Composite dimensions exceed the pixel-buffer limit."""
    pass


class RenderWriteError(GridLayoutError):
    """The composite image could not be written."""
    pass


class ExportWriteError(GridLayoutError):
    """The metadata file could not be written."""
    pass


def require(condition: bool, message: str, error: type = ContractViolation) -> None:
    """Enforce a stage invariant.

    Called at stage boundaries to verify the preceding stage produced what it
    guaranteed. No recovery, no fallback.

    Args:
        condition: The invariant that must hold
        message: Explanation used in the raised exception
        error: Exception class to raise (defaults to ContractViolation)

    Raises:
        error: If condition is False
    """
    if not condition:
        raise error(message)
