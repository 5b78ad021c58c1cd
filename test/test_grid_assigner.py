"""Tests for the grid assignment solver."""

import numpy as np
import pytest

from grid_components import HungarianGridAssigner, GridShape, AssignError, create_solver
from config import Config


def test_points_on_the_grid_go_to_their_own_cells():
    """Source points equal to shuffled targets are matched back exactly."""
    targets = GridShape(4, 3).target_points()
    order = np.random.RandomState(0).permutation(len(targets))

    result = HungarianGridAssigner().match(targets[order], targets)

    assert result.permutation == [int(i) for i in order]
    np.testing.assert_allclose(result.matched_points, targets[order])
    assert result.cost == pytest.approx(0.0)


def test_result_is_a_bijection():
    rng = np.random.RandomState(7)
    shape = GridShape(6, 5)
    result = HungarianGridAssigner().match(rng.rand(30, 2), shape.target_points())
    assert sorted(result.permutation) == list(range(shape.cell_count))


def test_assignment_minimizes_cost():
    """Two crossing points are uncrossed."""
    targets = np.array([[0.0, 0.0], [1.0, 0.0]])
    source = np.array([[0.9, 0.0], [0.1, 0.0]])
    result = HungarianGridAssigner().match(source, targets)
    assert result.permutation == [1, 0]


def test_unequal_sizes_rejected():
    with pytest.raises(AssignError):
        HungarianGridAssigner().match(np.zeros((3, 2)), np.zeros((4, 2)))


def test_empty_input_rejected():
    with pytest.raises(AssignError):
        HungarianGridAssigner().match(np.zeros((0, 2)), np.zeros((0, 2)))


def test_solver_is_deterministic():
    rng = np.random.RandomState(3)
    source = rng.rand(12, 2)
    targets = GridShape(4, 3).target_points()
    solver = HungarianGridAssigner()
    assert solver.match(source, targets).permutation == solver.match(source, targets).permutation


def test_create_solver_uses_configured_metric():
    config = type('C', (Config,), {'ASSIGNMENT_METRIC': 'euclidean'})
    assert create_solver(config).metric == 'euclidean'
