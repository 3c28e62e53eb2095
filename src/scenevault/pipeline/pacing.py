from __future__ import annotations

import time
from typing import Callable, Protocol


class Pacer(Protocol):
    """Called between two consecutive batches of provider calls."""

    def wait(self) -> None: ...


class NoPacer:
    def wait(self) -> None:
        return None


class FixedDelayPacer:
    """Sleep a fixed delay between batches (100 ms by default)."""

    def __init__(
        self, delay_sec: float = 0.1, sleep: Callable[[float], None] = time.sleep
    ) -> None:
        self.delay_sec = max(0.0, delay_sec)
        self._sleep = sleep

    def wait(self) -> None:
        if self.delay_sec > 0:
            self._sleep(self.delay_sec)
