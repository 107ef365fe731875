"""
Utility decorators and context managers.
"""

import time
from contextlib import contextmanager


@contextmanager
def timer():
    """
    Measure wall-clock time of a block.

    The yielded dict gets an ``ms`` entry when the block exits, also when
    it raises.

    Example:
        >>> with timer() as t:
        ...     result = rotate(buffer, 90)
        >>> t["ms"]  # doctest: +SKIP
        0.4
    """
    elapsed = {"ms": 0.0}
    start = time.perf_counter()
    try:
        yield elapsed
    finally:
        elapsed["ms"] = round((time.perf_counter() - start) * 1000, 2)
