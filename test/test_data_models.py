"""Tests for pipeline data models and their invariants."""

import numpy as np
import pytest

from grid_components import (
    ImageRecord, GridShape, AssignmentResult, ContractViolation, AssignError,
)


def test_stage_fields_are_append_only():
    """A populated stage field cannot be overwritten."""
    record = ImageRecord("/photos/cat.jpg")
    record.reduced_position = (0.1, 0.2)
    with pytest.raises(ContractViolation):
        record.reduced_position = (0.3, 0.4)
    assert record.reduced_position == (0.1, 0.2)


def test_unset_fields_can_be_filled_in_any_order():
    record = ImageRecord("/photos/cat.jpg")
    record.grid_cell = (1, 0)
    record.embedding_vector = np.ones(3)
    assert record.grid_cell == (1, 0)
    assert record.name == "cat.jpg"


def test_to_dict_reports_populated_fields():
    record = ImageRecord("/photos/cat.jpg", embedding_vector=np.zeros(8))
    data = record.to_dict()
    assert data == {'path': "/photos/cat.jpg", 'name': "cat.jpg", 'embedding_dim': 8}


def test_target_points_are_row_major_and_normalized():
    """Cell (i, j) maps to (i/(columns-1), j/(rows-1))."""
    points = GridShape(3, 2).target_points()
    expected = np.array([
        [0.0, 0.0], [0.5, 0.0], [1.0, 0.0],
        [0.0, 1.0], [0.5, 1.0], [1.0, 1.0],
    ])
    np.testing.assert_allclose(points, expected)


def test_single_row_maps_to_zero():
    points = GridShape(4, 1).target_points()
    np.testing.assert_allclose(points[:, 1], 0.0)
    np.testing.assert_allclose(points[:, 0], [0.0, 1 / 3, 2 / 3, 1.0])


def test_single_cell_grid():
    np.testing.assert_allclose(GridShape(1, 1).target_points(), [[0.0, 0.0]])


def test_cell_for_index_matches_target_points():
    shape = GridShape(5, 3)
    points = shape.target_points()
    for index in range(shape.cell_count):
        x, y = shape.cell_for_index(index)
        assert points[index][0] == pytest.approx(x / 4)
        assert points[index][1] == pytest.approx(y / 2)


def test_cell_for_index_out_of_range():
    with pytest.raises(ContractViolation):
        GridShape(2, 2).cell_for_index(4)


def test_assignment_must_be_a_permutation():
    """Duplicate or missing cells are rejected."""
    points = np.zeros((3, 2))
    AssignmentResult([2, 0, 1], points)
    with pytest.raises(AssignError):
        AssignmentResult([0, 0, 1], points)
    with pytest.raises(AssignError):
        AssignmentResult([0, 1, 3], points)


def test_assignment_needs_one_point_per_record():
    with pytest.raises(AssignError):
        AssignmentResult([0, 1], np.zeros((3, 2)))
