"""
Simulation Control Panel
========================
Live controls for the free-running simulation.

Why is this file needed?
------------------------
1. Input: Lattice size, algorithm, T / J / h, sweeps per frame, drawing mode
   and plotted observable are edited here and forwarded to the session.
2. Feedback: Shows the live readouts (energy, magnetization, acceptance
   ratio, throughput) and tells the user when a cluster algorithm forced
   J and h back to safe values.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGroupBox, QFormLayout, QComboBox, QPushButton, QLabel, QStyle
)

from xyexplorer import config
from xyexplorer.controller.runner import SimulationRunner
from xyexplorer.model import params
from xyexplorer.model.algorithms import AlgorithmId
from xyexplorer.model.errors import AlgorithmConstraintError
from xyexplorer.model.history import PlotObservable
from xyexplorer.model.session import VizMode
from xyexplorer.view.rendering import Frame
from xyexplorer.view.widgets.bounded_field import BoundedField

logger = logging.getLogger(__name__)


class SimulationControlPanel(QWidget):
    # Human-readable message for the status bar
    notice = Signal(str)

    def __init__(self, runner: SimulationRunner, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.runner = runner
        self.session = runner.session

        layout = QVBoxLayout(self)

        # --- Playback ---
        grp_run = QGroupBox("Simulation")
        l_run = QVBoxLayout(grp_run)

        hbox_play = QHBoxLayout()
        self.btn_play = QPushButton("Run")
        self.btn_play.setIcon(self.style().standardIcon(QStyle.SP_MediaPlay))
        self.btn_play.setMinimumHeight(36)
        self.btn_play.clicked.connect(self.toggle_play)
        hbox_play.addWidget(self.btn_play)

        self.btn_reset = QPushButton("Reset")
        self.btn_reset.setToolTip("New random lattice with the current parameters")
        self.btn_reset.clicked.connect(self.runner.reset)
        hbox_play.addWidget(self.btn_reset)

        self.btn_reset_data = QPushButton("Reset Data")
        self.btn_reset_data.setToolTip("Clear acceptance counters and the live plot, keep the spins")
        self.btn_reset_data.clicked.connect(self.runner.reset_data)
        hbox_play.addWidget(self.btn_reset_data)
        l_run.addLayout(hbox_play)

        form_run = QFormLayout()
        self.combo_size = QComboBox()
        for size in config.LATTICE_SIZES:
            self.combo_size.addItem(f"{size} x {size}", size)
        self.combo_size.setCurrentIndex(config.LATTICE_SIZES.index(self.session.size))
        self.combo_size.currentIndexChanged.connect(self.on_size_changed)
        form_run.addRow("Lattice:", self.combo_size)

        self.combo_algorithm = QComboBox()
        for algorithm in AlgorithmId:
            self.combo_algorithm.addItem(algorithm.label, algorithm.value)
        self.combo_algorithm.setCurrentIndex(self.combo_algorithm.findData(self.session.algorithm.value))
        self.combo_algorithm.currentIndexChanged.connect(self.on_algorithm_changed)
        form_run.addRow("Algorithm:", self.combo_algorithm)
        l_run.addLayout(form_run)

        layout.addWidget(grp_run)

        # --- Parameters ---
        grp_params = QGroupBox("Parameters")
        l_params = QVBoxLayout(grp_params)

        self.field_temperature = BoundedField(params.TEMPERATURE, self.session.temperature)
        self.field_temperature.value_changed.connect(self.session.set_temperature)
        l_params.addWidget(self.field_temperature)

        self.field_coupling = BoundedField(params.COUPLING, self.session.coupling)
        self.field_coupling.value_changed.connect(self.on_coupling_changed)
        l_params.addWidget(self.field_coupling)

        self.field_field = BoundedField(params.FIELD, self.session.field)
        self.field_field.value_changed.connect(self.on_field_changed)
        l_params.addWidget(self.field_field)

        self.field_sweeps = BoundedField(params.SWEEPS_PER_FRAME, self.session.sweeps_per_frame)
        self.field_sweeps.value_changed.connect(lambda v: self.runner.set_batch_size(int(v)))
        l_params.addWidget(self.field_sweeps)

        layout.addWidget(grp_params)

        # --- Display ---
        grp_display = QGroupBox("Display")
        form_display = QFormLayout(grp_display)

        self.combo_viz = QComboBox()
        self.combo_viz.addItem("Color map", VizMode.COLOR.value)
        self.combo_viz.addItem("Arrows", VizMode.QUIVER.value)
        self.combo_viz.currentIndexChanged.connect(self.on_viz_changed)
        form_display.addRow("Lattice view:", self.combo_viz)

        self.combo_observable = QComboBox()
        for observable in PlotObservable:
            self.combo_observable.addItem(observable.label, observable.value)
        self.combo_observable.setCurrentIndex(self.combo_observable.findData(self.session.plot_observable.value))
        self.combo_observable.currentIndexChanged.connect(self.on_observable_changed)
        form_display.addRow("Live plot:", self.combo_observable)

        layout.addWidget(grp_display)

        # --- Readouts ---
        grp_readout = QGroupBox("Observables")
        form_readout = QFormLayout(grp_readout)
        self.lbl_energy = QLabel("-")
        self.lbl_magnetization = QLabel("-")
        self.lbl_acceptance = QLabel("-")
        self.lbl_throughput = QLabel("-")
        for lbl in (self.lbl_energy, self.lbl_magnetization, self.lbl_acceptance, self.lbl_throughput):
            lbl.setAlignment(Qt.AlignRight)
        form_readout.addRow("Energy / site:", self.lbl_energy)
        form_readout.addRow("Magnetization:", self.lbl_magnetization)
        form_readout.addRow("Acceptance:", self.lbl_acceptance)
        form_readout.addRow("Sweeps / s:", self.lbl_throughput)
        layout.addWidget(grp_readout)

        layout.addStretch()

        # --- CONNECTIONS ---
        self.runner.frame_ready.connect(self.on_frame)
        self.runner.throughput_updated.connect(self.on_throughput)
        self.runner.temperature_changed.connect(self.field_temperature.set_value)
        self.runner.running_changed.connect(self.on_running_changed)

    # --- SLOTS ---

    def toggle_play(self) -> None:
        if self.runner.is_running:
            self.runner.stop()
        else:
            self.runner.start()

    def on_running_changed(self, running: bool) -> None:
        if running:
            self.btn_play.setText("Pause")
            self.btn_play.setIcon(self.style().standardIcon(QStyle.SP_MediaPause))
        else:
            self.btn_play.setText("Run")
            self.btn_play.setIcon(self.style().standardIcon(QStyle.SP_MediaPlay))

    def on_size_changed(self, index: int) -> None:
        size = self.combo_size.itemData(index)
        if self.runner.sweeps.active:
            self.notice.emit("Lattice resized: running sweep cancelled.")
        self.runner.resize(size)

    def on_algorithm_changed(self, index: int) -> None:
        self._report(self.session.select_algorithm(self.combo_algorithm.itemData(index)))

    def on_coupling_changed(self, value: float) -> None:
        self._report(self.session.set_coupling(value))

    def on_field_changed(self, value: float) -> None:
        self._report(self.session.set_field(value))

    def on_viz_changed(self, index: int) -> None:
        self.session.set_viz_mode(self.combo_viz.itemData(index))
        if self.session.is_constructed and not self.runner.is_running:
            self.runner.render_now()

    def on_observable_changed(self, index: int) -> None:
        self.session.set_plot_observable(self.combo_observable.itemData(index))
        self.runner.history_updated.emit()

    def on_frame(self, frame: Frame) -> None:
        self.lbl_energy.setText(f"{frame.energy:.5f}")
        self.lbl_magnetization.setText(f"{frame.magnetization:.5f}")
        self.lbl_acceptance.setText(f"{frame.acceptance:.3f}")

    def on_throughput(self, rate: float) -> None:
        self.lbl_throughput.setText(f"{rate:,.0f}")

    def _report(self, error: Optional[AlgorithmConstraintError]) -> None:
        if error is None:
            return
        # The session has already coerced J and h; mirror them in the fields
        self.field_coupling.set_value(self.session.coupling)
        self.field_field.set_value(self.session.field)
        self.notice.emit(f"{error} Reset to J = {self.session.coupling:.2f}, h = {self.session.field:.2f}.")
