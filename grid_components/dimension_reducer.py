"""Dimensionality reduction components.

Reducers project embeddings to 2-D points, one per input row and in the same
order. Output is min-max normalized to [0, 1] on each axis so the assignment
stage can match it against the normalized grid.
"""

import numpy as np

from config import Config
from .errors import ReduceError


def normalize_points(points: np.ndarray) -> np.ndarray:
    """Min-max normalize each column to [0, 1].

    A column with no spread maps to 0.
    """
    points = np.asarray(points, dtype=np.float64)
    mins = points.min(axis=0)
    spans = points.max(axis=0) - mins
    safe = np.where(spans > 0, spans, 1.0)
    return np.where(spans > 0, (points - mins) / safe, 0.0)


class Reducer:
    """Projects a batch of vectors to low-dimensional points."""

    def _fit(self, vectors: np.ndarray, n_components: int) -> np.ndarray:
        raise NotImplementedError

    def reduce(self, vectors: np.ndarray, n_components: int = 2,
               normalize: bool = True) -> np.ndarray:
        """Reduce vectors to n_components dimensions.

        Args:
            vectors: Array of shape (n_samples, n_features)
            n_components: Target dimensions
            normalize: Min-max normalize the output to [0, 1]

        Returns:
            Array of shape (n_samples, n_components), same row order

        Raises:
            ReduceError: If the reduction fails or returns a malformed result
        """
        vectors = np.asarray(vectors, dtype=np.float64)
        if vectors.ndim != 2 or len(vectors) == 0:
            raise ReduceError(f"Expected a non-empty 2-D array of vectors, got shape {vectors.shape}")

        try:
            points = np.asarray(self._fit(vectors, n_components), dtype=np.float64)
        except ReduceError:
            raise
        except Exception as e:
            raise ReduceError(f"{type(self).__name__} failed: {e}") from e

        if points.shape != (len(vectors), n_components):
            raise ReduceError(
                f"Reducer returned shape {points.shape}, expected {(len(vectors), n_components)}"
            )
        if not np.all(np.isfinite(points)):
            raise ReduceError("Reducer returned non-finite coordinates")

        return normalize_points(points) if normalize else points


class TSNEReducer(Reducer):
    """Barnes-Hut t-SNE.

    perplexity sets the effective neighbourhood size; theta trades accuracy for
    speed (0 = exact gradients, higher = coarser approximation).
    """

    def __init__(self, perplexity: float = 30.0, theta: float = 0.5,
                 random_state: int = 42):
        self.perplexity = perplexity
        self.theta = theta
        self.random_state = random_state

    def _fit(self, vectors, n_components):
        from sklearn.manifold import TSNE

        # Parameters are passed through unchanged; sklearn rejects a
        # perplexity that is not below the number of images.
        tsne = TSNE(
            n_components=n_components,
            perplexity=self.perplexity,
            angle=self.theta,
            init='pca',
            random_state=self.random_state,
        )
        return tsne.fit_transform(vectors)


class UMAPReducer(Reducer):
    """UMAP projection; n_neighbors plays the role of perplexity."""

    def __init__(self, n_neighbors: int = 15, min_dist: float = 0.1,
                 metric: str = 'cosine', random_state: int = 42):
        self.n_neighbors = n_neighbors
        self.min_dist = min_dist
        self.metric = metric
        self.random_state = random_state

    def _fit(self, vectors, n_components):
        import umap

        reducer = umap.UMAP(
            n_components=n_components,
            n_neighbors=int(self.n_neighbors),
            min_dist=self.min_dist,
            metric=self.metric,
            random_state=self.random_state
        )
        return reducer.fit_transform(vectors)


class PCAReducer(Reducer):
    """Deterministic linear projection onto the top principal components."""

    def _fit(self, vectors, n_components):
        from sklearn.decomposition import PCA

        n, d = vectors.shape
        k = min(n_components, n, d)
        projected = PCA(n_components=k, svd_solver='full').fit_transform(vectors)
        if k < n_components:
            projected = np.hstack([projected, np.zeros((n, n_components - k))])
        return projected


def create_reducer(config=Config) -> Reducer:
    """Build the reducer named by config.REDUCER."""
    if config.REDUCER == 'tsne':
        return TSNEReducer(perplexity=config.PERPLEXITY, theta=config.THETA,
                           random_state=config.RANDOM_SEED)
    if config.REDUCER == 'umap':
        return UMAPReducer(n_neighbors=int(config.PERPLEXITY), min_dist=config.UMAP_MIN_DIST,
                           random_state=config.RANDOM_SEED)
    if config.REDUCER == 'pca':
        return PCAReducer()
    raise ValueError(f"Unknown reducer: {config.REDUCER}. Use 'tsne', 'umap', or 'pca'.")
