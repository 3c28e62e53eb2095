from __future__ import annotations

import threading
from typing import Callable, Optional

# (current, total) after each completed unit of work.
ProgressCallback = Callable[[int, int], None]


class CancelToken:
    """
    Cooperative cancellation flag.

    Long-running loops check it between steps; setting it never interrupts
    a call already in flight.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def report(callback: Optional[ProgressCallback], current: int, total: int) -> None:
    if callback is not None:
        callback(current, total)
