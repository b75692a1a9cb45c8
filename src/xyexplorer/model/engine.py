"""
Simulation Engine Contract
==========================
The Monte Carlo update rules live in an external engine (a compiled
extension). This module describes what the rest of the application expects
from it and how the engine constructor is located at runtime.
"""
from __future__ import annotations

import importlib
import logging
from typing import Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class SimulationHandle(Protocol):
    """
    One lattice simulation owned by the session.

    Step operations (``metropolis_step`` and friends) are looked up by name
    through :data:`xyexplorer.model.algorithms.STEP_OPERATIONS`, so they are
    not part of the structural protocol.
    """

    @property
    def accepted(self) -> float: ...

    @property
    def attempted(self) -> float: ...

    @property
    def energy(self) -> float: ...

    @property
    def magnetization(self) -> float: ...

    @property
    def spins(self) -> object:
        """Raw angle buffer (buffer protocol, float64, length size*size)."""
        ...

    def set_temp(self, temp: float) -> None: ...

    def set_j(self, j: float) -> None: ...

    def set_h(self, h: float) -> None: ...

    def reset_data(self) -> None: ...


# (size, temperature, coupling, field) -> handle
EngineFactory = Callable[[int, float, float, float], SimulationHandle]


def load_engine_factory(path: str) -> EngineFactory:
    """
    Resolve a 'module:attribute' import path to the engine constructor.

    Raises:
        EngineLoadError: If the module cannot be imported or lacks the attribute.
    """
    from xyexplorer.model.errors import EngineLoadError

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise EngineLoadError(f"Engine path '{path}' must look like 'module:attribute'.")

    logger.info(f"Loading simulation engine from: {path}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise EngineLoadError(f"Cannot import engine module '{module_name}': {e}") from e

    try:
        factory = getattr(module, attr)
    except AttributeError as e:
        raise EngineLoadError(f"Engine module '{module_name}' has no attribute '{attr}'.") from e

    if not callable(factory):
        raise EngineLoadError(f"Engine attribute '{path}' is not callable.")
    return factory
