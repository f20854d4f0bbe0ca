import time
from collections.abc import Callable

Clock = Callable[[], int]
"""Zero-argument callable returning the current time in epoch milliseconds."""


def system_clock() -> int:
    """Return current wall-clock time as epoch milliseconds."""
    return time.time_ns() // 1_000_000
