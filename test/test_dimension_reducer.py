"""Tests for dimensionality reducers."""

import numpy as np
import pytest

from config import Config
from grid_components import (
    Reducer, PCAReducer, TSNEReducer, UMAPReducer, ReduceError, create_reducer,
)
from grid_components.dimension_reducer import normalize_points


def test_normalize_points_maps_to_unit_square():
    points = np.array([[2.0, -1.0], [4.0, 3.0], [3.0, 1.0]])
    np.testing.assert_allclose(normalize_points(points), [[0.0, 0.0], [1.0, 1.0], [0.5, 0.5]])


def test_normalize_points_degenerate_axis_is_zero():
    points = np.array([[5.0, 1.0], [5.0, 2.0]])
    np.testing.assert_allclose(normalize_points(points)[:, 0], [0.0, 0.0])


def test_pca_reducer_shape_and_range():
    vectors = np.random.RandomState(0).rand(10, 16)
    points = PCAReducer().reduce(vectors)
    assert points.shape == (10, 2)
    assert points.min() >= 0.0 and points.max() <= 1.0


def test_pca_reducer_is_deterministic():
    vectors = np.random.RandomState(1).rand(8, 5)
    np.testing.assert_array_equal(PCAReducer().reduce(vectors), PCAReducer().reduce(vectors))


def test_pca_pads_when_features_are_scarce():
    points = PCAReducer().reduce(np.array([[0.0], [1.0], [2.0]]), normalize=False)
    assert points.shape == (3, 2)
    np.testing.assert_allclose(points[:, 1], 0.0)


def test_order_is_preserved():
    """Row i of the output belongs to row i of the input."""
    vectors = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 0.0]])
    points = PCAReducer().reduce(vectors)
    # the first component orders the rows along the line
    xs = points[:, 0] if points[0, 0] < points[1, 0] else 1.0 - points[:, 0]
    np.testing.assert_allclose(xs, [0.0, 1.0, 0.5])


def test_wrong_output_shape_is_reduce_error():
    class DroppingReducer(Reducer):
        def _fit(self, vectors, n_components):
            return np.zeros((len(vectors) - 1, n_components))

    with pytest.raises(ReduceError):
        DroppingReducer().reduce(np.ones((4, 3)))


def test_failures_are_wrapped():
    class BrokenReducer(Reducer):
        def _fit(self, vectors, n_components):
            raise RuntimeError("boom")

    with pytest.raises(ReduceError, match="boom"):
        BrokenReducer().reduce(np.ones((4, 3)))


def test_empty_input_rejected():
    with pytest.raises(ReduceError):
        PCAReducer().reduce(np.zeros((0, 3)))


def test_tsne_perplexity_is_passed_through():
    """A perplexity too large for the corpus fails instead of being adjusted."""
    vectors = np.random.RandomState(0).rand(5, 4)
    with pytest.raises(ReduceError):
        TSNEReducer(perplexity=75, theta=0.2).reduce(vectors)


@pytest.mark.parametrize("name, cls", [("tsne", TSNEReducer), ("umap", UMAPReducer), ("pca", PCAReducer)])
def test_create_reducer(name, cls):
    config = type('C', (Config,), {'REDUCER': name, 'PERPLEXITY': 30.0, 'THETA': 0.4})
    reducer = create_reducer(config)
    assert isinstance(reducer, cls)
    if name == 'tsne':
        assert (reducer.perplexity, reducer.theta) == (30.0, 0.4)
    if name == 'umap':
        assert reducer.n_neighbors == 30


def test_create_reducer_unknown():
    with pytest.raises(ValueError):
        create_reducer(type('C', (Config,), {'REDUCER': 'mds'}))
