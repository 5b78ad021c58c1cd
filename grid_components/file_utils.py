"""File helpers for all-or-nothing output writes."""

import os
import tempfile
from contextlib import contextmanager


@contextmanager
def atomic_output(path: str):
    """Yield a temporary path next to `path`, renamed over it on success.

    The temporary file keeps the destination's extension so writers that
    infer the format from the name still work. If the block raises, the
    temporary file is removed and `path` is left untouched.

    Args:
        path: Final destination

    Yields:
        Temporary file path to write to
    """
    directory = os.path.dirname(os.path.abspath(path))
    base = os.path.basename(path)
    _, ext = os.path.splitext(base)

    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=f".tmp{ext}", dir=directory)
    os.close(fd)

    try:
        yield tmp_path
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
