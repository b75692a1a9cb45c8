"""
Temperature Sweep Panel
=======================
Configures and monitors automated temperature sweeps.

Why is this file needed?
------------------------
1. Input: Collects the temperature range and the warmup / decorrelation /
   measurement counts into a SweepSpec and hands it to the runner.
2. Progress: Shows the current temperature index and phase.
3. Results: Lists one row per finished temperature and exports the table to
   CSV or to an HDF5 archive (which can be reopened later).
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGroupBox, QFormLayout, QDoubleSpinBox, QSpinBox, QPushButton,
    QProgressBar, QLabel, QTableWidget, QTableWidgetItem, QHeaderView, QFileDialog, QMessageBox
)

from xyexplorer import config
from xyexplorer.controller.runner import SimulationRunner
from xyexplorer.model.algorithms import csv_file_name
from xyexplorer.model.errors import InvalidRangeError
from xyexplorer.model.io import IOManager, SweepArchive
from xyexplorer.model.sweep import MeasurementResult, SweepSpec

logger = logging.getLogger(__name__)

TABLE_COLUMNS = ("T", "Energy", "Magnetization", "Acceptance", "C", "χ", "")


class SweepControlPanel(QWidget):
    notice = Signal(str)

    def __init__(self, runner: SimulationRunner, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.runner = runner
        self.session = runner.session
        # Rows currently shown; either the live sweep or a loaded archive
        self.results: list[MeasurementResult] = []

        layout = QVBoxLayout(self)

        # --- Range ---
        grp_range = QGroupBox("Temperature Range")
        form_range = QFormLayout(grp_range)

        t_min, t_max = config.TEMPERATURE_BOUNDS
        self.spin_t_init = self._temperature_spin(t_min, t_max, config.DEFAULT_SWEEP_T_INIT)
        form_range.addRow("Start T:", self.spin_t_init)
        self.spin_t_final = self._temperature_spin(t_min, t_max, config.DEFAULT_SWEEP_T_FINAL)
        form_range.addRow("End T:", self.spin_t_final)
        self.spin_t_step = self._temperature_spin(-t_max, t_max, config.DEFAULT_SWEEP_T_STEP)
        form_range.addRow("Step:", self.spin_t_step)

        self.spin_warmup = self._count_spin(config.DEFAULT_SWEEP_WARMUP)
        form_range.addRow("Warmup sweeps:", self.spin_warmup)
        self.spin_decor = self._count_spin(config.DEFAULT_SWEEP_DECOR)
        form_range.addRow("Decorrelation sweeps:", self.spin_decor)
        self.spin_measure = self._count_spin(config.DEFAULT_SWEEP_MEASURE)
        self.spin_measure.setMinimum(1)
        form_range.addRow("Measurement sweeps:", self.spin_measure)

        layout.addWidget(grp_range)

        # --- Run ---
        grp_run = QGroupBox("Sweep")
        l_run = QVBoxLayout(grp_run)

        hbox = QHBoxLayout()
        self.btn_run = QPushButton("Run Sweep")
        self.btn_run.setMinimumHeight(36)
        self.btn_run.clicked.connect(self.on_run_clicked)
        hbox.addWidget(self.btn_run)
        self.btn_stop = QPushButton("Stop")
        self.btn_stop.setEnabled(False)
        self.btn_stop.clicked.connect(self.runner.cancel_sweep)
        hbox.addWidget(self.btn_stop)
        l_run.addLayout(hbox)

        self.progress = QProgressBar()
        self.progress.setTextVisible(True)
        self.progress.setVisible(False)
        l_run.addWidget(self.progress)

        self.lbl_phase = QLabel("Idle")
        l_run.addWidget(self.lbl_phase)

        layout.addWidget(grp_run)

        # --- Results ---
        grp_results = QGroupBox("Results")
        l_results = QVBoxLayout(grp_results)

        self.table = QTableWidget(0, len(TABLE_COLUMNS))
        self.table.setHorizontalHeaderLabels(TABLE_COLUMNS)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.table.verticalHeader().setVisible(False)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        l_results.addWidget(self.table)

        hbox_export = QHBoxLayout()
        self.btn_export_csv = QPushButton("Export CSV...")
        self.btn_export_csv.clicked.connect(self.on_export_csv)
        hbox_export.addWidget(self.btn_export_csv)
        self.btn_save_h5 = QPushButton("Save Archive...")
        self.btn_save_h5.clicked.connect(self.on_save_archive)
        hbox_export.addWidget(self.btn_save_h5)
        self.btn_open_h5 = QPushButton("Open Archive...")
        self.btn_open_h5.clicked.connect(self.on_open_archive)
        hbox_export.addWidget(self.btn_open_h5)
        l_results.addLayout(hbox_export)

        layout.addWidget(grp_results, stretch=1)
        self._update_export_buttons()

        # --- CONNECTIONS ---
        self.runner.sweep_progress.connect(self.on_progress)
        self.runner.sweep_result_added.connect(self.on_result_added)
        self.runner.sweep_finished.connect(self.on_finished)

    # --- WIDGET FACTORIES ---

    @staticmethod
    def _temperature_spin(minimum: float, maximum: float, value: float) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setDecimals(3)
        spin.setSingleStep(0.05)
        spin.setRange(minimum, maximum)
        spin.setValue(value)
        return spin

    @staticmethod
    def _count_spin(value: int) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(0, 1_000_000)
        spin.setSingleStep(100)
        spin.setValue(value)
        return spin

    # --- SWEEP ---

    def build_spec(self) -> SweepSpec:
        return SweepSpec(
            t_init=self.spin_t_init.value(),
            t_final=self.spin_t_final.value(),
            t_step=self.spin_t_step.value(),
            n_warmup=self.spin_warmup.value(),
            n_decor=self.spin_decor.value(),
            n_measure=self.spin_measure.value(),
            batch_size=self.session.sweeps_per_frame,
        )

    def on_run_clicked(self) -> None:
        try:
            if not self.session.is_constructed:
                self.session.construct()
            temperatures = self.runner.start_sweep(self.build_spec())
        except InvalidRangeError as e:
            QMessageBox.warning(self, "Invalid Sweep Range", str(e))
            return

        self.results = []
        self.table.setRowCount(0)
        self.progress.setRange(0, len(temperatures))
        self.progress.setValue(0)
        self.progress.setVisible(True)
        self._set_running(True)
        if not self.runner.is_running:
            self.runner.start()
        self.notice.emit(f"Sweep started over {len(temperatures)} temperatures.")

    def on_progress(self, index: int, count: int, phase: str) -> None:
        self.progress.setMaximum(count)
        self.progress.setValue(index)
        state = self.runner.sweeps.state
        if state is not None and state.active:
            self.lbl_phase.setText(f"T = {state.current_temperature:g}: {phase}")

    def on_result_added(self, result: MeasurementResult) -> None:
        self.results.append(result)
        self._append_row(result)
        self._update_export_buttons()

    def on_finished(self, completed: bool) -> None:
        self._set_running(False)
        self.progress.setVisible(False)
        if completed:
            self.lbl_phase.setText(f"Finished: {len(self.results)} temperatures")
            self.notice.emit("Sweep finished.")
        else:
            self.lbl_phase.setText("Cancelled")
            self.notice.emit("Sweep cancelled.")

    # --- EXPORT ---

    def on_export_csv(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Results", csv_file_name(self.session.algorithm), "CSV Files (*.csv)"
        )
        if not path:
            return
        try:
            IOManager.export_results_csv(self.results, path)
        except (OSError, ValueError) as e:
            logger.error(f"CSV export failed: {e}")
            QMessageBox.critical(self, "Export Failed", str(e))
            return
        self.notice.emit(f"Results exported to {path}")

    def on_save_archive(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Save Sweep Archive", "", "HDF5 Files (*.h5)")
        if not path:
            return
        archive = SweepArchive(
            results=list(self.results),
            algorithm=str(self.session.algorithm),
            lattice_size=self.session.size,
            coupling=self.session.coupling,
            field=self.session.field,
        )
        try:
            IOManager.save_results_h5(archive, path)
        except (OSError, ValueError) as e:
            logger.error(f"Archive save failed: {e}")
            QMessageBox.critical(self, "Save Failed", str(e))
            return
        self.notice.emit(f"Sweep archive saved to {path}")

    def on_open_archive(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open Sweep Archive", "", "HDF5 Files (*.h5)")
        if not path:
            return
        try:
            archive = IOManager.load_results_h5(path)
        except (OSError, ValueError) as e:
            logger.error(f"Archive load failed: {e}")
            QMessageBox.critical(self, "Open Failed", str(e))
            return
        self.show_results(archive.results)
        self.lbl_phase.setText(
            f"Archive: {archive.algorithm}, N = {archive.lattice_size}, "
            f"J = {archive.coupling:g}, h = {archive.field:g}"
        )

    def show_results(self, results: list[MeasurementResult]) -> None:
        self.results = list(results)
        self.table.setRowCount(0)
        for result in self.results:
            self._append_row(result)
        self._update_export_buttons()

    # --- HELPERS ---

    def _append_row(self, result: MeasurementResult) -> None:
        row = self.table.rowCount()
        self.table.insertRow(row)
        cells = (
            f"{result.temperature:g}",
            f"{result.energy.mean:.5f} ± {result.energy.sem:.5f}",
            f"{result.magnetization.mean:.5f} ± {result.magnetization.sem:.5f}",
            f"{result.acceptance.mean:.3f}",
            f"{result.specific_heat:.4f}",
            f"{result.susceptibility:.4f}",
            "few samples" if result.degraded else "",
        )
        for col, text in enumerate(cells):
            item = QTableWidgetItem(text)
            if result.degraded:
                item.setToolTip("Fewer samples than bins: error bars are unreliable.")
            self.table.setItem(row, col, item)
        self.table.scrollToBottom()

    def _set_running(self, running: bool) -> None:
        self.btn_run.setEnabled(not running)
        self.btn_stop.setEnabled(running)
        self.btn_open_h5.setEnabled(not running)
        for spin in (self.spin_t_init, self.spin_t_final, self.spin_t_step,
                     self.spin_warmup, self.spin_decor, self.spin_measure):
            spin.setEnabled(not running)

    def _update_export_buttons(self) -> None:
        has_results = bool(self.results)
        self.btn_export_csv.setEnabled(has_results)
        self.btn_save_h5.setEnabled(has_results)
