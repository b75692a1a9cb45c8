"""
Frame Scheduler
===============
Drives the simulation from a QTimer on the GUI thread.

Why is this file needed?
------------------------
1. Cooperative scheduling: Exactly one tick runs per timer timeout and it
   runs to completion before Qt processes the next event, so the engine,
   the spin buffer and the sweep state are only touched from one thread.
2. Signals: Views never call the engine; they receive rendered frames,
   readouts and sweep progress through Qt signals.

Classes:
    SimulationRunner: Owns the session, the sweep controller and the render pipeline.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from xyexplorer.config import FRAME_INTERVAL_MS
from xyexplorer.controller.throughput import ThroughputMeter
from xyexplorer.model.session import SimulationSession
from xyexplorer.model.sweep import MeasurementResult, SweepController, SweepSpec
from xyexplorer.view.rendering import Frame, RenderPipeline

logger = logging.getLogger(__name__)


class SimulationRunner(QObject):
    # Signals to update the UI
    frame_ready = Signal(object)                 # Frame
    history_updated = Signal()
    throughput_updated = Signal(float)           # sweeps per second
    temperature_changed = Signal(float)          # set by a running sweep
    sweep_progress = Signal(int, int, str)       # (temperature index, count, phase)
    sweep_result_added = Signal(object)          # MeasurementResult
    sweep_finished = Signal(bool)                # True when completed, False when cancelled
    running_changed = Signal(bool)

    def __init__(self, session: SimulationSession, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.session = session
        self.sweeps = SweepController(session)
        self.pipeline = RenderPipeline()
        self.throughput = ThroughputMeter()

        self.timer = QTimer(self)
        self.timer.setInterval(FRAME_INTERVAL_MS)
        self.timer.timeout.connect(self.tick)

    # --- PLAYBACK ---

    def start(self) -> None:
        if not self.session.is_constructed:
            self.session.construct()
        self.throughput.reset()
        self.timer.start()
        self.running_changed.emit(True)
        logger.info("Simulation loop started.")

    def stop(self) -> None:
        if not self.timer.isActive():
            return
        self.timer.stop()
        self.running_changed.emit(False)
        logger.info("Simulation loop stopped.")

    @property
    def is_running(self) -> bool:
        return self.timer.isActive()

    # --- SWEEPS ---

    def start_sweep(self, spec: SweepSpec) -> list[float]:
        """Raises InvalidRangeError (nothing started) if `spec` is inconsistent."""
        temperatures = self.sweeps.start(spec)
        self._emit_progress()
        return temperatures

    def cancel_sweep(self) -> None:
        if self.sweeps.active:
            self.sweeps.cancel()
            self.sweep_finished.emit(False)

    def set_batch_size(self, sweeps: int) -> None:
        self.session.set_sweeps_per_frame(sweeps)
        self.sweeps.set_batch_size(sweeps)

    # --- LIFECYCLE FORWARDING ---

    def reset(self) -> None:
        self.cancel_sweep()
        self.session.reset()
        self.throughput.reset()
        self.render_now()

    def resize(self, size: int) -> None:
        # A running sweep would mix statistics from two lattices
        self.cancel_sweep()
        self.session.resize(size)
        self.throughput.reset()
        self.render_now()

    def reset_data(self) -> None:
        self.session.reset_data()
        self.throughput.reset()
        self.render_now()

    # --- FRAME ---

    def tick(self) -> None:
        """One scheduler frame: run sweeps, render, update history and readouts."""
        if self.sweeps.active:
            n_results = len(self.sweeps.results)
            temperature = self.session.temperature
            executed = self.sweeps.tick()

            if self.session.temperature != temperature:
                self.temperature_changed.emit(self.session.temperature)
            results = self.sweeps.results
            for result in results[n_results:]:
                self.sweep_result_added.emit(result)
            self._emit_progress()
            if not self.sweeps.active:
                self.sweep_finished.emit(True)
        else:
            executed = self.session.run_free()

        rate = self.throughput.record(executed)
        if rate is not None:
            self.throughput_updated.emit(rate)

        self.render_now()

    def render_now(self) -> Frame:
        frame = self.pipeline.render(self.session)
        self.frame_ready.emit(frame)
        if self.session.record_history() is not None:
            self.history_updated.emit()
        return frame

    @property
    def results(self) -> tuple[MeasurementResult, ...]:
        return self.sweeps.results

    def _emit_progress(self) -> None:
        state = self.sweeps.state
        if state is None:
            return
        self.sweep_progress.emit(state.temp_index, len(state.temperatures), str(state.phase))
