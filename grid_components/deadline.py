"""Per-stage deadlines for blocking external calls."""

import threading
from typing import Callable, Optional, Type

from .errors import GridLayoutError


def call_with_deadline(func: Callable, *args, timeout: Optional[float] = None,
                       error: Type[GridLayoutError] = GridLayoutError,
                       stage: str = "stage", **kwargs):
    """Run func(*args, **kwargs), failing with `error` after `timeout` seconds.

    Without a timeout the call runs inline. With one, it runs on a daemon
    thread; a call that overruns is abandoned (Python threads cannot be
    killed) and its result discarded. The abandoned thread never keeps the
    process alive.

    Args:
        func: Callable to run
        timeout: Seconds to wait, or None for no deadline
        error: Exception class raised on timeout
        stage: Stage name used in the error message

    Returns:
        Whatever func returns

    Raises:
        error: If the deadline passes first
    """
    if timeout is None:
        return func(*args, **kwargs)

    outcome = {}

    def target():
        try:
            outcome['result'] = func(*args, **kwargs)
        except BaseException as e:
            outcome['exception'] = e

    worker = threading.Thread(target=target, name=f"grid-{stage}", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        raise error(f"{stage} did not finish within {timeout:g}s")
    if 'exception' in outcome:
        raise outcome['exception']
    return outcome['result']
