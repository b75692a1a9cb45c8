"""
Live Observable History
Rolling window of the scalar shown in the live plot, plus the rules for
which scalar is read from the engine and what vertical range it is drawn in.
"""
from __future__ import annotations

from collections import deque
from enum import StrEnum
from typing import TYPE_CHECKING, Iterator

import numpy as np

from xyexplorer.config import HISTORY_CAPACITY

if TYPE_CHECKING:
    import numpy.typing as npt
    from xyexplorer.model.engine import SimulationHandle


class PlotObservable(StrEnum):
    ENERGY = "energy"
    MAGNETIZATION = "magnetization"
    ACCEPTANCE_RATIO = "acceptance_ratio"
    NO_PLOT = "no_plot"

    @property
    def label(self) -> str:
        return {
            PlotObservable.ENERGY: "Energy",
            PlotObservable.MAGNETIZATION: "Magnetization",
            PlotObservable.ACCEPTANCE_RATIO: "Acceptance Ratio",
            PlotObservable.NO_PLOT: "No plot",
        }[self]


def acceptance_ratio(handle: SimulationHandle) -> float:
    attempted = handle.attempted
    return handle.accepted / attempted if attempted else 0.0


def read_observable(handle: SimulationHandle, observable: PlotObservable) -> float:
    if observable is PlotObservable.ENERGY:
        return float(handle.energy)
    if observable is PlotObservable.MAGNETIZATION:
        return float(handle.magnetization)
    if observable is PlotObservable.ACCEPTANCE_RATIO:
        return acceptance_ratio(handle)
    return 0.0


def y_range(observable: PlotObservable, coupling: float, field: float) -> tuple[float, float]:
    """Fixed vertical range: per-site energy is bounded by 2|J| + |h|, the rest by 1."""
    if observable is PlotObservable.ENERGY:
        bound = 2.0 * abs(coupling) + abs(field)
        return -bound, bound
    return -1.0, 1.0


class HistoryBuffer:
    """Fixed-capacity rolling sequence; the oldest value is evicted first."""

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}.")
        self._values: deque[float] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._values.maxlen

    def push(self, value: float) -> None:
        self._values.append(float(value))

    def clear(self) -> None:
        self._values.clear()

    def as_array(self) -> npt.NDArray[np.float64]:
        return np.fromiter(self._values, dtype=np.float64, count=len(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)
