"""
Update Algorithm Selection
==========================
Closed set of Monte Carlo update rules offered by the engine, and the lookup
table that routes each one to the engine's step operation.
"""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from xyexplorer.model.errors import AlgorithmConstraintError, UnknownAlgorithmError

if TYPE_CHECKING:
    from xyexplorer.model.engine import SimulationHandle

logger = logging.getLogger(__name__)


class AlgorithmId(StrEnum):
    METROPOLIS = "metropolis"
    METROPOLIS_REFLECTION = "metropolis-reflection"
    OVERRELAXATION = "overrelaxation"
    WOLFF = "wolff"
    SWENDSEN_WANG = "swendsen-wang"
    HEAT_BATH = "heat-bath"
    GLAUBER = "glauber"
    KAWASAKI = "kawasaki"

    @classmethod
    def parse(cls, value: str | AlgorithmId) -> AlgorithmId:
        """Convert a user-facing identifier, failing fast on anything unknown."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownAlgorithmError(f"Unknown algorithm '{value}'.") from None

    @property
    def label(self) -> str:
        return ALGORITHM_LABELS[self]

    @property
    def is_cluster(self) -> bool:
        return self in CLUSTER_ALGORITHMS


# Engine method executed for one sweep of each algorithm
STEP_OPERATIONS: dict[AlgorithmId, str] = {
    AlgorithmId.METROPOLIS: "metropolis_step",
    AlgorithmId.METROPOLIS_REFLECTION: "metropolis_reflection_step",
    AlgorithmId.OVERRELAXATION: "overrelaxation_step",
    AlgorithmId.WOLFF: "wolff_step",
    AlgorithmId.SWENDSEN_WANG: "swendsen_wang_step",
    AlgorithmId.HEAT_BATH: "heat_bath_step",
    AlgorithmId.GLAUBER: "glauber_step",
    AlgorithmId.KAWASAKI: "kawasaki_step",
}

ALGORITHM_LABELS: dict[AlgorithmId, str] = {
    AlgorithmId.METROPOLIS: "Metropolis",
    AlgorithmId.METROPOLIS_REFLECTION: "Metropolis (reflection)",
    AlgorithmId.OVERRELAXATION: "Over-relaxation",
    AlgorithmId.WOLFF: "Wolff cluster",
    AlgorithmId.SWENDSEN_WANG: "Swendsen-Wang",
    AlgorithmId.HEAT_BATH: "Heat bath",
    AlgorithmId.GLAUBER: "Glauber",
    AlgorithmId.KAWASAKI: "Kawasaki",
}

CLUSTER_ALGORITHMS: frozenset[AlgorithmId] = frozenset({AlgorithmId.WOLFF, AlgorithmId.SWENDSEN_WANG})


def perform_step(handle: SimulationHandle, algorithm: AlgorithmId) -> None:
    """Execute one sweep of `algorithm` on the engine."""
    try:
        operation = STEP_OPERATIONS[algorithm]
    except KeyError:
        raise UnknownAlgorithmError(f"No step operation registered for '{algorithm}'.") from None
    getattr(handle, operation)()


def check_cluster_constraints(algorithm: AlgorithmId, coupling: float, field: float) -> None:
    """
    Cluster updates only support the ferromagnetic, zero-field case.

    Raises:
        AlgorithmConstraintError: If `algorithm` is a cluster rule and h != 0 or J < 0.
    """
    if algorithm.is_cluster and (field != 0.0 or coupling < 0.0):
        raise AlgorithmConstraintError(str(algorithm), coupling, field)


def csv_file_name(algorithm: AlgorithmId) -> str:
    """Default export name, e.g. 'xy_metropolis_results.csv'."""
    name = "heatbath" if algorithm is AlgorithmId.HEAT_BATH else str(algorithm)
    return f"xy_{name}_results.csv"
