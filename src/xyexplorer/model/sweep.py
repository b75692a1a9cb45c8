"""
Temperature Sweep Orchestration
===============================
State machine that walks a list of temperatures and, at each one, runs
warmup, decorrelation and measurement sweeps before binning the measured
samples into a MeasurementResult.

Why is this file needed?
------------------------
1. Pacing: The GUI runs one tick per frame; the controller decides how many
   engine sweeps fit in the current phase for that tick.
2. Statistics: Measurement samples are collected per temperature, binned and
   discarded as soon as the temperature is complete.

Classes:
    SweepSpec: User-entered sweep parameters.
    Phase: Stage of the per-temperature schedule.
    SampleBuffers: Raw samples of the temperature being measured.
    MeasurementResult: Binned observables of one completed temperature.
    SweepState: Mutable progress of a running sweep.
    SweepController: The state machine.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

from xyexplorer.model.binning import BinningEstimator, BinStats
from xyexplorer.model.errors import InvalidRangeError
from xyexplorer.model.history import acceptance_ratio

if TYPE_CHECKING:
    from xyexplorer.model.session import SimulationSession

logger = logging.getLogger(__name__)

# Temperatures are compared and stored with this many decimals
TEMPERATURE_DECIMALS = 6


@dataclass(frozen=True)
class SweepSpec:
    t_init: float
    t_final: float
    t_step: float
    n_warmup: int
    n_decor: int
    n_measure: int
    batch_size: int = 1

    def validate(self) -> None:
        """
        Raises:
            InvalidRangeError: On a zero or sub-resolution step, a step pointing away
                from t_final, temperatures that are not positive and finite,
                or unusable sweep counts.
        """
        if not all(math.isfinite(v) for v in (self.t_init, self.t_final, self.t_step)):
            raise InvalidRangeError("Sweep temperatures must be finite numbers.")
        if min(self.t_init, self.t_final) <= 0:
            raise InvalidRangeError("Sweep temperatures must be positive.")
        if self.t_step == 0:
            raise InvalidRangeError("Temperature step must not be zero.")
        if abs(self.t_step) < 10 ** -TEMPERATURE_DECIMALS:
            # Smaller steps would round to repeated temperatures
            raise InvalidRangeError(f"Temperature step must be at least {10 ** -TEMPERATURE_DECIMALS:g}.")
        if (self.t_step > 0 and self.t_init > self.t_final) or (self.t_step < 0 and self.t_init < self.t_final):
            raise InvalidRangeError("Step direction does not match range.")
        if self.n_measure < 1:
            raise InvalidRangeError("At least one measurement sweep is required.")
        if self.n_warmup < 0 or self.n_decor < 0:
            raise InvalidRangeError("Warmup and decorrelation counts must not be negative.")
        if self.batch_size < 1:
            raise InvalidRangeError("Batch size must be at least 1.")

    def temperatures(self) -> list[float]:
        """Inclusive temperature list; the final value is appended if stepping overshoots it."""
        self.validate()
        values: list[float] = []
        k = 0
        while True:
            t = round(self.t_init + k * self.t_step, TEMPERATURE_DECIMALS)
            if (self.t_step > 0 and t > self.t_final) or (self.t_step < 0 and t < self.t_final):
                break
            values.append(t)
            k += 1

        final = round(self.t_final, TEMPERATURE_DECIMALS)
        if not values or values[-1] != final:
            values.append(final)
        return values


class Phase(StrEnum):
    WARMUP = "warmup"
    DECORRELATION = "decorrelation"
    MEASUREMENT = "measurement"


# Phase that follows each phase within one temperature
_NEXT_PHASE: dict[Phase, Phase] = {
    Phase.WARMUP: Phase.DECORRELATION,
    Phase.DECORRELATION: Phase.MEASUREMENT,
}


@dataclass
class SampleBuffers:
    energy: list[float] = field(default_factory=list)
    magnetization: list[float] = field(default_factory=list)
    acceptance: list[float] = field(default_factory=list)
    energy2: list[float] = field(default_factory=list)
    magnetization2: list[float] = field(default_factory=list)

    def record(self, energy: float, magnetization: float, acceptance: float) -> None:
        self.energy.append(energy)
        self.magnetization.append(magnetization)
        self.acceptance.append(acceptance)
        self.energy2.append(energy * energy)
        self.magnetization2.append(magnetization * magnetization)

    def __len__(self) -> int:
        return len(self.energy)


@dataclass(frozen=True)
class MeasurementResult:
    temperature: float
    energy: BinStats
    magnetization: BinStats
    acceptance: BinStats
    energy2: BinStats
    magnetization2: BinStats
    specific_heat: float
    susceptibility: float

    @property
    def degraded(self) -> bool:
        return any(s.degraded for s in (
            self.energy, self.magnetization, self.acceptance, self.energy2, self.magnetization2
        ))

    @classmethod
    def from_samples(
        cls, temperature: float, samples: SampleBuffers, estimator: BinningEstimator
    ) -> MeasurementResult:
        energy = estimator.finalize(samples.energy)
        magnetization = estimator.finalize(samples.magnetization)
        acceptance = estimator.finalize(samples.acceptance)
        energy2 = estimator.finalize(samples.energy2)
        magnetization2 = estimator.finalize(samples.magnetization2)
        specific_heat, susceptibility = estimator.derive(
            energy, energy2, magnetization, magnetization2, temperature
        )
        return cls(
            temperature=temperature,
            energy=energy,
            magnetization=magnetization,
            acceptance=acceptance,
            energy2=energy2,
            magnetization2=magnetization2,
            specific_heat=specific_heat,
            susceptibility=susceptibility,
        )


@dataclass
class SweepState:
    spec: SweepSpec
    temperatures: list[float]
    batch_size: int
    active: bool = True
    phase: Phase = Phase.WARMUP
    temp_index: int = 0
    progress: int = 0
    samples: SampleBuffers = field(default_factory=SampleBuffers)

    @property
    def current_temperature(self) -> Optional[float]:
        if self.temp_index < len(self.temperatures):
            return self.temperatures[self.temp_index]
        return None

    def target(self, phase: Phase) -> int:
        return {
            Phase.WARMUP: self.spec.n_warmup,
            Phase.DECORRELATION: self.spec.n_decor,
            Phase.MEASUREMENT: self.spec.n_measure,
        }[phase]


class SweepController:
    """
    Drives a temperature sweep one scheduler tick at a time.

    The controller never runs more than the current phase needs, so a tick
    either stays inside one phase or finishes it exactly; the transition to
    the next phase (or temperature) happens at the end of that tick.
    """

    def __init__(self, session: SimulationSession, estimator: Optional[BinningEstimator] = None) -> None:
        self.session = session
        self.estimator = estimator or BinningEstimator()
        self.state: Optional[SweepState] = None
        self._results: list[MeasurementResult] = []

    # --- PROPERTIES ---

    @property
    def active(self) -> bool:
        return self.state is not None and self.state.active

    @property
    def results(self) -> tuple[MeasurementResult, ...]:
        return tuple(self._results)

    # --- COMMANDS ---

    def start(self, spec: SweepSpec) -> list[float]:
        """
        Begin a new sweep. Nothing changes if `spec` is rejected.

        Raises:
            InvalidRangeError: See :meth:`SweepSpec.validate`.
        """
        temperatures = spec.temperatures()

        self.state = SweepState(spec=spec, temperatures=temperatures, batch_size=spec.batch_size)
        self._results = []
        logger.info(
            f"Sweep started: {len(temperatures)} temperatures from {temperatures[0]} to {temperatures[-1]} "
            f"(warmup={spec.n_warmup}, decor={spec.n_decor}, measure={spec.n_measure})"
        )
        return temperatures

    def set_batch_size(self, batch_size: int) -> None:
        if self.state is not None:
            self.state.batch_size = max(1, int(batch_size))

    def cancel(self) -> None:
        if not self.active:
            return
        self.state.active = False
        discarded = len(self.state.samples)
        self.state.samples = SampleBuffers()
        logger.info(
            f"Sweep cancelled after {len(self._results)} temperatures "
            f"({discarded} unfinalized samples discarded)."
        )

    def tick(self, max_steps: Optional[int] = None) -> int:
        """
        Run the sweeps the current phase needs for this frame.

        Returns:
            Number of engine steps executed (0 when no sweep is active).
        """
        if not self.active:
            return 0
        state = self.state

        temperature = state.current_temperature
        if self.session.temperature != temperature:
            self.session.set_temperature(temperature)

        limit = state.batch_size if max_steps is None else max_steps
        remaining = state.target(state.phase) - state.progress
        batch = max(0, min(limit, remaining))

        self._run_batch(state.phase, batch)
        state.progress += batch

        if state.progress >= state.target(state.phase):
            self._advance()
        return batch

    # --- INTERNALS ---

    def _run_batch(self, phase: Phase, batch: int) -> None:
        measuring = phase is Phase.MEASUREMENT
        handle = self.session.handle
        samples = self.state.samples
        for _ in range(batch):
            self.session.step()
            if measuring:
                samples.record(float(handle.energy), float(handle.magnetization), acceptance_ratio(handle))

    def _advance(self) -> None:
        state = self.state
        if state.phase in _NEXT_PHASE:
            logger.debug(f"T={state.current_temperature}: {state.phase} -> {_NEXT_PHASE[state.phase]}")
            state.phase = _NEXT_PHASE[state.phase]
            state.progress = 0
            return

        self._finalize_temperature()
        state.temp_index += 1
        state.progress = 0
        state.phase = Phase.WARMUP

        if state.temp_index >= len(state.temperatures):
            state.active = False
            logger.info(f"Sweep complete: {len(self._results)} temperatures measured.")

    def _finalize_temperature(self) -> None:
        state = self.state
        temperature = state.current_temperature
        result = MeasurementResult.from_samples(temperature, state.samples, self.estimator)
        self._results.append(result)
        state.samples = SampleBuffers()
        if result.degraded:
            logger.warning(
                f"T={temperature}: only {result.energy.n_bins} single-sample bins, "
                f"error bars underestimate autocorrelation."
            )
        logger.info(
            f"T={temperature}: E={result.energy.mean:.5f}±{result.energy.sem:.5f}, "
            f"M={result.magnetization.mean:.5f}±{result.magnetization.sem:.5f}, "
            f"C={result.specific_heat:.5f}, chi={result.susceptibility:.5f}"
        )
