"""Enlarged, live-updating view of the lattice or the live plot."""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtWidgets import QDialog, QVBoxLayout, QDialogButtonBox, QWidget

from xyexplorer.config import ZOOM_PLOT_RESOLUTION
from xyexplorer.controller.runner import SimulationRunner
from xyexplorer.view.rendering import Frame
from xyexplorer.view.widgets.lattice_view import LatticeView
from xyexplorer.view.widgets.live_plot import LiveHistoryPlot

logger = logging.getLogger(__name__)


class ZoomDialog(QDialog):
    LATTICE = "lattice"
    PLOT = "plot"

    def __init__(self, runner: SimulationRunner, target: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.runner = runner
        self.target = target
        self.setWindowTitle("Lattice" if target == self.LATTICE else "Live Plot")
        self.resize(ZOOM_PLOT_RESOLUTION, ZOOM_PLOT_RESOLUTION)

        layout = QVBoxLayout(self)
        if target == self.LATTICE:
            self.view = LatticeView()
            runner.frame_ready.connect(self._on_frame)
        else:
            self.view = LiveHistoryPlot()
            runner.history_updated.connect(self._on_history)
        self.view.clicked.connect(self.accept)
        layout.addWidget(self.view)

        buttons = QDialogButtonBox(QDialogButtonBox.Close)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.finished.connect(self._disconnect)
        self._refresh_now()

    def _refresh_now(self) -> None:
        if self.target == self.LATTICE:
            if self.runner.session.is_constructed:
                self._on_frame(self.runner.pipeline.render(self.runner.session))
        else:
            self._on_history()

    def _on_frame(self, frame: Frame) -> None:
        self.view.show_frame(frame)

    def _on_history(self) -> None:
        session = self.runner.session
        self.view.render(session.history, session.plot_observable, session.coupling, session.field)

    def _disconnect(self) -> None:
        if self.target == self.LATTICE:
            self.runner.frame_ready.disconnect(self._on_frame)
        else:
            self.runner.history_updated.disconnect(self._on_history)
        logger.debug(f"Zoom view for {self.target} closed.")
