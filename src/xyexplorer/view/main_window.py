"""
Main Application Window
=======================
The primary GUI container that holds the menu bar, the control panels and
the two live views.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application
   (controls on the left, lattice and live plot on the right).
2. Routing: It connects runner signals to the views and global actions
   (export, zoom, exit) to the panels that implement them.
"""
from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QSplitter, QTabBar, QStackedWidget
)

from xyexplorer.controller.runner import SimulationRunner
from xyexplorer.view.dialogs.zoom_dialog import ZoomDialog
from xyexplorer.view.panels.simulation_panel import SimulationControlPanel
from xyexplorer.view.panels.sweep_panel import SweepControlPanel
from xyexplorer.view.rendering import Frame
from xyexplorer.view.widgets.lattice_view import LatticeView
from xyexplorer.view.widgets.live_plot import LiveHistoryPlot

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "XY Explorer"
STATUS_TIMEOUT_MS = 8000


class MainWindow(QMainWindow):
    def __init__(self, runner: SimulationRunner) -> None:
        super().__init__()
        self.runner = runner
        self.session = runner.session

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1300, 850)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter)

        # --- LEFT SIDE: Control Panels (Tabbed) ---
        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(0, 0, 0, 0)

        self.tab_bar = QTabBar()
        self.tab_bar.setExpanding(True)
        self.tab_bar.addTab("1. Simulation")
        self.tab_bar.addTab("2. Sweep")
        self.tab_bar.setStyleSheet("""
                    QTabBar::tab { height: 30px; min-width: 100px; }
                    QTabBar::tab:selected { font-weight: bold; }
                """)
        left_layout.addWidget(self.tab_bar)

        self.controls_stack = QStackedWidget()
        self.sim_panel = SimulationControlPanel(runner)
        self.sweep_panel = SweepControlPanel(runner)
        # Order must match Tab Bar order
        self.controls_stack.addWidget(self.sim_panel)
        self.controls_stack.addWidget(self.sweep_panel)
        left_layout.addWidget(self.controls_stack)
        splitter.addWidget(left)

        # --- RIGHT SIDE: Lattice over Live Plot ---
        views = QSplitter(Qt.Vertical)
        self.lattice_view = LatticeView()
        self.live_plot = LiveHistoryPlot()
        views.addWidget(self.lattice_view)
        views.addWidget(self.live_plot)
        views.setSizes([600, 250])
        splitter.addWidget(views)

        splitter.setSizes([400, 900])

        # --- SIGNAL CONNECTIONS ---
        self.tab_bar.currentChanged.connect(self.controls_stack.setCurrentIndex)
        self.runner.frame_ready.connect(self.on_frame)
        self.runner.history_updated.connect(self.on_history_updated)
        self.sim_panel.notice.connect(self.show_notice)
        self.sweep_panel.notice.connect(self.show_notice)
        self.lattice_view.clicked.connect(lambda: self.open_zoom(ZoomDialog.LATTICE))
        self.live_plot.clicked.connect(lambda: self.open_zoom(ZoomDialog.PLOT))

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        # Initial Render
        if self.session.is_constructed:
            self.runner.render_now()
        self.show_notice("Ready. Press Run to start the simulation.")

    def _create_actions(self) -> None:
        self.act_export_csv = QAction("Export Results (CSV)...", self)
        self.act_export_csv.setShortcut("Ctrl+E")
        self.act_export_csv.triggered.connect(self.sweep_panel.on_export_csv)

        self.act_save_archive = QAction("Save Sweep Archive...", self)
        self.act_save_archive.setShortcut("Ctrl+S")
        self.act_save_archive.triggered.connect(self.sweep_panel.on_save_archive)

        self.act_open_archive = QAction("Open Sweep Archive...", self)
        self.act_open_archive.setShortcut("Ctrl+O")
        self.act_open_archive.triggered.connect(self.sweep_panel.on_open_archive)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        self.act_run = QAction("Run / Pause", self)
        self.act_run.setShortcut("Space")
        self.act_run.triggered.connect(self.sim_panel.toggle_play)

        self.act_zoom_lattice = QAction("Zoom Lattice", self)
        self.act_zoom_lattice.triggered.connect(lambda: self.open_zoom(ZoomDialog.LATTICE))

        self.act_zoom_plot = QAction("Zoom Live Plot", self)
        self.act_zoom_plot.triggered.connect(lambda: self.open_zoom(ZoomDialog.PLOT))

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_export_csv)
        file_menu.addSeparator()
        file_menu.addAction(self.act_open_archive)
        file_menu.addAction(self.act_save_archive)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        sim_menu = menu_bar.addMenu("&Simulation")
        sim_menu.addAction(self.act_run)

        view_menu = menu_bar.addMenu("&View")
        view_menu.addAction(self.act_zoom_lattice)
        view_menu.addAction(self.act_zoom_plot)

    # --- SLOTS ---

    def on_frame(self, frame: Frame) -> None:
        self.lattice_view.show_frame(frame)

    def on_history_updated(self) -> None:
        self.live_plot.render(
            self.session.history, self.session.plot_observable, self.session.coupling, self.session.field
        )

    def show_notice(self, message: str) -> None:
        self.statusBar().showMessage(message, STATUS_TIMEOUT_MS)

    def open_zoom(self, target: str) -> None:
        dialog = ZoomDialog(self.runner, target, self)
        dialog.exec()

    def closeEvent(self, event) -> None:
        self.runner.stop()
        super().closeEvent(event)
