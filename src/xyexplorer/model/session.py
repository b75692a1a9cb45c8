"""
Simulation Session (Data Model)
===============================
This module defines the central container for the running simulation.

Why is this file needed?
------------------------
1. State Management: It holds the engine handle, the physical parameters,
   the chosen algorithm, the visualization mode and the live plot history in
   one place instead of free-standing globals.
2. Lifecycle: The handle is created, replaced (reset / resize) and cleared
   only through this object, which also invalidates the spin buffer alias.
3. Decoupling: Views read from this object; the runner and the sweep
   controller drive it.

Classes:
    VizMode: Lattice drawing mode.
    SimulationSession: The main container class.
"""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

from xyexplorer import config
from xyexplorer.model.algorithms import AlgorithmId, check_cluster_constraints, perform_step
from xyexplorer.model.errors import AlgorithmConstraintError
from xyexplorer.model.history import HistoryBuffer, PlotObservable, read_observable
from xyexplorer.model.shared_buffer import SharedStateView

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt
    from xyexplorer.model.engine import EngineFactory, SimulationHandle

logger = logging.getLogger(__name__)


class VizMode(StrEnum):
    COLOR = "color"
    QUIVER = "quiver"


class SimulationSession:
    """
    Owns the engine handle and every piece of mutable simulation state.
    Pass this instance to the runner, the sweep controller and the panels.
    """

    def __init__(self, engine_factory: EngineFactory) -> None:
        self._engine_factory = engine_factory
        self._handle: Optional[SimulationHandle] = None
        self.state_view = SharedStateView()

        self.size: int = config.DEFAULT_LATTICE_SIZE
        self.temperature: float = config.DEFAULT_TEMPERATURE
        self.coupling: float = config.DEFAULT_COUPLING
        self.field: float = config.DEFAULT_FIELD
        self.algorithm: AlgorithmId = AlgorithmId.METROPOLIS
        self.sweeps_per_frame: int = config.DEFAULT_SWEEPS_PER_FRAME

        self.viz_mode: VizMode = VizMode.COLOR
        self.plot_observable: PlotObservable = PlotObservable.ENERGY
        self.history = HistoryBuffer(config.HISTORY_CAPACITY)

    # --- LIFECYCLE ---

    @property
    def handle(self) -> SimulationHandle:
        if self._handle is None:
            raise RuntimeError("Session has no engine handle; call construct() first.")
        return self._handle

    @property
    def is_constructed(self) -> bool:
        return self._handle is not None

    def construct(self) -> None:
        """Create a fresh engine handle from the current parameters."""
        self.state_view.invalidate()
        self._handle = self._engine_factory(self.size, self.temperature, self.coupling, self.field)
        # Some engine builds ignore the constructor field; apply it explicitly
        self._handle.set_h(self.field)
        self.history.clear()
        logger.info(
            f"Engine constructed: N={self.size}, T={self.temperature:.3f}, "
            f"J={self.coupling:.3f}, h={self.field:.3f}, algorithm={self.algorithm}"
        )

    def reset(self) -> None:
        """Replace the handle with a freshly randomized lattice of the same size."""
        self.construct()

    def resize(self, size: int) -> None:
        """Replace the handle wholesale with a lattice of side `size`."""
        if size < 1:
            raise ValueError(f"Lattice size must be positive, got {size}.")
        self.size = size
        self.construct()

    def reset_data(self) -> None:
        """Clear engine counters and the plot history, keep the spin configuration."""
        self.handle.reset_data()
        self.history.clear()
        logger.info("Measurement data reset.")

    # --- PARAMETERS ---

    def set_temperature(self, temperature: float) -> None:
        self.temperature = temperature
        if self._handle is not None:
            self._handle.set_temp(temperature)

    def set_coupling(self, coupling: float) -> Optional[AlgorithmConstraintError]:
        """Returns the constraint error when the value had to be coerced."""
        self.coupling = coupling
        if self._handle is not None:
            self._handle.set_j(coupling)
        return self._enforce_cluster_constraints()

    def set_field(self, field: float) -> Optional[AlgorithmConstraintError]:
        """Returns the constraint error when the value had to be coerced."""
        self.field = field
        if self._handle is not None:
            self._handle.set_h(field)
        return self._enforce_cluster_constraints()

    def select_algorithm(self, algorithm: str | AlgorithmId) -> Optional[AlgorithmConstraintError]:
        """Returns the constraint error when J/h had to be coerced."""
        self.algorithm = AlgorithmId.parse(algorithm)
        logger.info(f"Algorithm selected: {self.algorithm}")
        return self._enforce_cluster_constraints()

    def set_sweeps_per_frame(self, sweeps: int) -> None:
        self.sweeps_per_frame = max(1, int(sweeps))

    def set_plot_observable(self, observable: str | PlotObservable) -> None:
        self.plot_observable = PlotObservable(observable)
        self.history.clear()

    def set_viz_mode(self, mode: str | VizMode) -> None:
        self.viz_mode = VizMode(mode)

    def _enforce_cluster_constraints(self) -> Optional[AlgorithmConstraintError]:
        try:
            check_cluster_constraints(self.algorithm, self.coupling, self.field)
        except AlgorithmConstraintError as e:
            logger.warning(f"{e} Resetting to J = {config.SAFE_CLUSTER_COUPLING}, h = 0.")
            self.coupling = config.SAFE_CLUSTER_COUPLING
            self.field = 0.0
            if self._handle is not None:
                self._handle.set_j(self.coupling)
                self._handle.set_h(self.field)
            return e
        return None

    # --- ENGINE ACCESS ---

    def step(self) -> None:
        """One sweep of the selected algorithm."""
        perform_step(self.handle, self.algorithm)

    def run_free(self) -> int:
        """Free-running frame: `sweeps_per_frame` sweeps outside of any sweep schedule."""
        for _ in range(self.sweeps_per_frame):
            self.step()
        return self.sweeps_per_frame

    def spins(self) -> npt.NDArray[np.float64]:
        """Current angles, revalidated against the live handle on every call."""
        return self.state_view.refresh(self.handle, self.size)

    def record_history(self) -> Optional[float]:
        if self.plot_observable is PlotObservable.NO_PLOT:
            return None
        value = read_observable(self.handle, self.plot_observable)
        self.history.push(value)
        return value
