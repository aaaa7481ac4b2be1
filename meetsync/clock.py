import time
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Wall-clock epoch milliseconds."""
    return int(time.time() * 1000)
