"""Sweeps-per-second readout averaged over a trailing time window."""
from __future__ import annotations

import time
from collections import deque
from typing import Optional

from xyexplorer.config import THROUGHPUT_WINDOW_S


class ThroughputMeter:
    def __init__(self, window_s: float = THROUGHPUT_WINDOW_S) -> None:
        self.window_s = window_s
        self._total = 0
        # (timestamp, cumulative sweeps)
        self._samples: deque[tuple[float, int]] = deque()

    @property
    def total(self) -> int:
        return self._total

    def reset(self) -> None:
        self._total = 0
        self._samples.clear()

    def record(self, sweeps: int, now: Optional[float] = None) -> Optional[float]:
        """
        Add the sweeps of one frame.

        Returns:
            Average sweeps per second over the window, or None until two
            frames spanning a nonzero time are available.
        """
        now = time.perf_counter() if now is None else now
        self._total += sweeps
        self._samples.append((now, self._total))
        while self._samples and now - self._samples[0][0] > self.window_s:
            self._samples.popleft()
        return self.rate()

    def rate(self) -> Optional[float]:
        if len(self._samples) < 2:
            return None
        (t0, s0), (t1, s1) = self._samples[0], self._samples[-1]
        if t1 <= t0:
            return None
        return (s1 - s0) / (t1 - t0)
