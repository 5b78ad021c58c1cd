"""Data models for the grid layout pipeline."""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple

import numpy as np
from PIL import Image

from .errors import ContractViolation, AssignError, require


# Fields filled in by pipeline stages. Each may be set exactly once.
STAGE_FIELDS = (
    'normalized_pixels',
    'embedding_vector',
    'reduced_position',
    'grid_cell',
    'matched_point',
)


@dataclass
class ImageRecord:
    """One image travelling through the pipeline.

    Stage fields are append-only: assigning a field that a previous stage has
    already populated raises ContractViolation.
    """
    path: str

    # Square bitmap at encode resolution
    normalized_pixels: Optional[Image.Image] = None

    # Encoder output
    embedding_vector: Optional[np.ndarray] = None

    # Reducer output, normalized to [0, 1] per axis
    reduced_position: Optional[Tuple[float, float]] = None

    # Assignment output: integer cell and the solver's normalized target point
    grid_cell: Optional[Tuple[int, int]] = None
    matched_point: Optional[Tuple[float, float]] = None

    def __setattr__(self, key, value):
        if key in STAGE_FIELDS and getattr(self, key, None) is not None:
            raise ContractViolation(
                f"Stage field '{key}' of {self.path} is already populated"
            )
        super().__setattr__(key, value)

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for intermediate results."""
        result = {
            'path': self.path,
            'name': self.name,
        }
        if self.embedding_vector is not None:
            result['embedding_dim'] = int(len(self.embedding_vector))
        if self.reduced_position is not None:
            result['reduced_position'] = list(self.reduced_position)
        if self.grid_cell is not None:
            result['grid_cell'] = list(self.grid_cell)
        if self.matched_point is not None:
            result['matched_point'] = list(self.matched_point)
        return result


@dataclass(frozen=True)
class GridShape:
    """Rectangular grid of `columns` x `rows` cells, with rows <= columns."""
    columns: int
    rows: int

    @property
    def cell_count(self) -> int:
        return self.columns * self.rows

    def cell_for_index(self, index: int) -> Tuple[int, int]:
        """Map a row-major cell index to its (x, y) cell coordinate."""
        require(
            0 <= index < self.cell_count,
            f"Cell index {index} outside grid {self.columns}x{self.rows}",
        )
        return index % self.columns, index // self.columns

    def target_points(self) -> np.ndarray:
        """One normalized point per cell, in row-major cell-index order.

        Cell (i, j) maps to (i / (columns - 1), j / (rows - 1)); a single
        column or row maps to 0 on that axis.

        Returns:
            Array of shape (cell_count, 2)
        """
        xs = np.arange(self.columns, dtype=np.float64)
        ys = np.arange(self.rows, dtype=np.float64)
        if self.columns > 1:
            xs /= self.columns - 1
        else:
            xs[:] = 0.0
        if self.rows > 1:
            ys /= self.rows - 1
        else:
            ys[:] = 0.0

        grid_x, grid_y = np.meshgrid(xs, ys)
        return np.column_stack([grid_x.ravel(), grid_y.ravel()])


@dataclass
class AssignmentResult:
    """Bijection from corpus index to cell index.

    permutation[i] is the row-major cell index assigned to record i.
    matched_points[i] is the normalized target point of that cell.
    """
    permutation: List[int]
    matched_points: np.ndarray
    cost: float = 0.0

    def __post_init__(self):
        n = len(self.permutation)
        require(
            sorted(self.permutation) == list(range(n)),
            "Assignment is not a permutation of the grid cells",
            error=AssignError,
        )
        require(
            len(self.matched_points) == n,
            f"Expected {n} matched points, got {len(self.matched_points)}",
            error=AssignError,
        )

    def __len__(self) -> int:
        return len(self.permutation)


@dataclass
class PipelineStatistics:
    """Statistics from pipeline execution."""
    discovered: int = 0
    used: int = 0
    embedded: int = 0
    embedding_dim: int = 0
    columns: int = 0
    rows: int = 0
    assignment_cost: float = 0.0

    # Timing
    total_time: float = 0.0
    phase_times: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'discovered': self.discovered,
            'used': self.used,
            'embedded': self.embedded,
            'embedding_dim': self.embedding_dim,
            'columns': self.columns,
            'rows': self.rows,
            'assignment_cost': self.assignment_cost,
            'total_time': self.total_time,
            'phase_times': self.phase_times,
        }


@dataclass
class LayoutRun:
    """Context threaded through one pipeline run."""
    shape: GridShape
    records: List[ImageRecord] = field(default_factory=list)
    assignment: Optional[AssignmentResult] = None
    image_path: Optional[str] = None
    metadata_path: Optional[str] = None
    statistics: PipelineStatistics = field(default_factory=PipelineStatistics)

    def __len__(self) -> int:
        return len(self.records)
