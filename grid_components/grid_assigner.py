"""Assignment of reduced positions to grid cells."""

import numpy as np
from scipy.optimize import linear_sum_assignment
from scipy.spatial.distance import cdist

from config import Config
from .data_models import AssignmentResult
from .errors import AssignError


class AssignmentSolver:
    """Computes a minimum-cost bijection between two equal-size point sets."""

    def match(self, source_points: np.ndarray, target_points: np.ndarray) -> AssignmentResult:
        """Assign every source point to exactly one target point.

        Args:
            source_points: Array of shape (n, 2)
            target_points: Array of shape (n, 2)

        Returns:
            AssignmentResult whose permutation[i] indexes target_points
        """
        raise NotImplementedError


class HungarianGridAssigner(AssignmentSolver):
    """Optimal assignment with the Hungarian algorithm (scipy)."""

    def __init__(self, metric: str = 'sqeuclidean'):
        """Initialize the assigner.

        Args:
            metric: Any scipy.spatial.distance.cdist metric used as the cost
        """
        self.metric = metric

    def match(self, source_points, target_points):
        source = np.asarray(source_points, dtype=np.float64)
        target = np.asarray(target_points, dtype=np.float64)

        if len(source) != len(target):
            raise AssignError(
                f"Cannot match {len(source)} points to {len(target)} grid cells"
            )
        if len(source) == 0:
            raise AssignError("Nothing to assign")

        try:
            cost = cdist(source, target, metric=self.metric)
            row_ind, col_ind = linear_sum_assignment(cost)
        except ValueError as e:
            raise AssignError(f"Assignment failed: {e}") from e

        # row_ind is sorted, so col_ind is already in source order
        permutation = [int(c) for c in col_ind]
        return AssignmentResult(
            permutation=permutation,
            matched_points=target[col_ind],
            cost=float(cost[row_ind, col_ind].sum()),
        )


def create_solver(config=Config) -> AssignmentSolver:
    """Build the assignment solver for config."""
    return HungarianGridAssigner(metric=config.ASSIGNMENT_METRIC)
