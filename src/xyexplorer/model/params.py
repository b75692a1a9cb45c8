"""
Bounded Numeric Inputs
Parsing for the numeric fields paired with the parameter sliders.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from xyexplorer.config import (
    TEMPERATURE_BOUNDS, COUPLING_BOUNDS, FIELD_BOUNDS, SWEEPS_PER_FRAME_BOUNDS
)
from xyexplorer.model.errors import InvalidInputError


@dataclass(frozen=True)
class ParameterBounds:
    name: str
    minimum: float
    maximum: float
    decimals: int = 2

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum

    def parse(self, raw: str | float) -> float:
        """
        Convert a field edit into a value inside the bounds.

        Raises:
            InvalidInputError: If `raw` is not a finite number inside [minimum, maximum].
        """
        try:
            value = float(str(raw).strip().replace(",", "."))
        except ValueError:
            raise InvalidInputError(self.name, raw, (self.minimum, self.maximum)) from None
        if not math.isfinite(value) or not self.contains(value):
            raise InvalidInputError(self.name, raw, (self.minimum, self.maximum))
        if self.decimals == 0:
            if value != int(value):
                raise InvalidInputError(self.name, raw, (self.minimum, self.maximum))
            return float(int(value))
        return value

    def format(self, value: float) -> str:
        return f"{value:.{self.decimals}f}"


TEMPERATURE = ParameterBounds("Temperature", *TEMPERATURE_BOUNDS)
COUPLING = ParameterBounds("Coupling J", *COUPLING_BOUNDS)
FIELD = ParameterBounds("Field h", *FIELD_BOUNDS)
SWEEPS_PER_FRAME = ParameterBounds("Sweeps per frame", *SWEEPS_PER_FRAME_BOUNDS, decimals=0)


def parse_bounded(raw: str | float, bounds: ParameterBounds) -> float:
    return bounds.parse(raw)
