"""Grid shape selection."""

import math
import numbers

from .data_models import GridShape
from .errors import InvalidCountError


def best_grid_shape(n_tiles: int) -> GridShape:
    """Return the grid closest to a square that holds exactly n_tiles items.

    Divisors are scanned from 1 while below ceil(sqrt(n) + 1); the last one
    that divides n_tiles fixes the factor pair. The pair is oriented so that
    columns >= rows. A prime count degenerates to a single row.

    Args:
        n_tiles: Number of items, strictly positive

    Returns:
        GridShape with columns * rows == n_tiles

    Raises:
        InvalidCountError: If n_tiles is not a positive integer
    """
    if isinstance(n_tiles, bool) or not isinstance(n_tiles, numbers.Integral):
        raise InvalidCountError(f"Item count must be an integer, got {n_tiles!r}")
    if n_tiles <= 0:
        raise InvalidCountError(f"Item count must be positive, got {n_tiles}")

    n_tiles = int(n_tiles)
    divisor = 1
    for n in range(1, math.ceil(math.sqrt(n_tiles) + 1)):
        if n_tiles % n == 0:
            divisor = n

    other = n_tiles // divisor
    return GridShape(columns=max(divisor, other), rows=min(divisor, other))
