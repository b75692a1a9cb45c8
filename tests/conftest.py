from __future__ import annotations

import math
import os

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from xyexplorer.model.algorithms import STEP_OPERATIONS  # noqa: E402
from xyexplorer.model.session import SimulationSession  # noqa: E402


class FakeEngine:
    """
    Deterministic stand-in for the compiled engine.

    Every step accepts half of the N^2 attempted moves and walks the energy
    and magnetization through a short repeating pattern, so binned averages
    are predictable.
    """

    ENERGY_PATTERN = (-1.0, -1.2, -1.4, -1.6)
    MAGNETIZATION_PATTERN = (0.5, 0.6, 0.7, 0.8)

    def __init__(self, size: int, temp: float, j: float, h: float) -> None:
        self.size = size
        self.temp = temp
        self.j = j
        self.h = h
        self.steps: list[str] = []
        self.accepted = 0
        self.attempted = 0
        self.energy = 0.0
        self.magnetization = 0.0
        rng = np.random.default_rng(size)
        self._spins = rng.uniform(0.0, 2.0 * math.pi, size * size)

    @property
    def spins(self) -> np.ndarray:
        return self._spins

    def reallocate(self) -> None:
        """Move the angle storage to a new allocation with the same content."""
        self._spins = self._spins.copy()

    def set_temp(self, temp: float) -> None:
        self.temp = temp

    def set_j(self, j: float) -> None:
        self.j = j

    def set_h(self, h: float) -> None:
        self.h = h

    def reset_data(self) -> None:
        self.accepted = 0
        self.attempted = 0

    def _step(self, name: str) -> None:
        k = len(self.steps)
        self.steps.append(name)
        sites = self.size * self.size
        self.attempted += sites
        self.accepted += sites // 2
        self.energy = self.ENERGY_PATTERN[k % len(self.ENERGY_PATTERN)]
        self.magnetization = self.MAGNETIZATION_PATTERN[k % len(self.MAGNETIZATION_PATTERN)]


def _make_step(name: str):
    def step(self: FakeEngine) -> None:
        self._step(name)
    step.__name__ = name
    return step


for _operation in STEP_OPERATIONS.values():
    setattr(FakeEngine, _operation, _make_step(_operation))


class RecordingFactory:
    """Engine factory that keeps every handle it created."""

    def __init__(self) -> None:
        self.created: list[FakeEngine] = []

    def __call__(self, size: int, temp: float, j: float, h: float) -> FakeEngine:
        engine = FakeEngine(size, temp, j, h)
        self.created.append(engine)
        return engine

    @property
    def last(self) -> FakeEngine:
        return self.created[-1]


@pytest.fixture
def factory() -> RecordingFactory:
    return RecordingFactory()


@pytest.fixture
def session(factory: RecordingFactory) -> SimulationSession:
    s = SimulationSession(factory)
    s.size = 16
    s.construct()
    return s


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
