"""
Application Exceptions
Error types raised by the model layer. The GUI decides how each one is
surfaced (message box, silent revert, notification).
"""
from __future__ import annotations


class XYExplorerError(Exception):
    """Base class for all errors raised by xyexplorer."""


class InvalidRangeError(XYExplorerError, ValueError):
    """Sweep start/stop/step (or sweep counts) are inconsistent."""


class InvalidInputError(XYExplorerError, ValueError):
    """A numeric field was edited to a value outside its allowed bound."""

    def __init__(self, name: str, raw: object, bounds: tuple[float, float]) -> None:
        self.name = name
        self.raw = raw
        self.bounds = bounds
        super().__init__(f"{name}: '{raw}' is outside [{bounds[0]}, {bounds[1]}].")


class AlgorithmConstraintError(XYExplorerError):
    """A cluster algorithm was combined with a nonzero field or negative coupling."""

    def __init__(self, algorithm: str, coupling: float, field: float) -> None:
        self.algorithm = algorithm
        self.coupling = coupling
        self.field = field
        super().__init__(
            f"The '{algorithm}' algorithm requires J >= 0 and h = 0 "
            f"(got J = {coupling:.2f}, h = {field:.2f})."
        )


class UnknownAlgorithmError(XYExplorerError, ValueError):
    """An algorithm identifier outside the supported set was requested."""


class EngineLoadError(XYExplorerError, ImportError):
    """The simulation engine factory could not be imported."""
