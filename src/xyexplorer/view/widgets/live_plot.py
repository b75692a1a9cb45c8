"""Rolling time-series plot of the selected observable."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pyqtgraph as pg
from PySide6.QtCore import Signal
from PySide6.QtWidgets import QWidget, QVBoxLayout

from xyexplorer.model.history import HistoryBuffer, PlotObservable, y_range

logger = logging.getLogger(__name__)


class LiveHistoryPlot(QWidget):
    """
    Polyline over a fixed window of `capacity` frames.

    The x axis spans the whole window even while the buffer fills up, and the
    y axis is fixed (energy bounds follow the current J and h).
    """

    clicked = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.plot_widget = pg.PlotWidget()
        self.plot_widget.setBackground('#111')
        self.plot_widget.showGrid(x=False, y=True, alpha=0.2)
        self.plot_widget.setLabel('bottom', 'Frame')
        self.plot_widget.setMenuEnabled(False)
        self.plot_widget.setMouseEnabled(x=False, y=False)
        self.plot_widget.hideButtons()
        self.plot_widget.scene().sigMouseClicked.connect(lambda _event: self.clicked.emit())

        self.curve = self.plot_widget.plot([], [], pen=pg.mkPen(color='#00ff00', width=2))
        layout.addWidget(self.plot_widget)

    def render(self, history: HistoryBuffer, observable: PlotObservable, coupling: float, field: float) -> None:
        if observable is PlotObservable.NO_PLOT:
            self.curve.setData([], [])
            self.plot_widget.setLabel('left', '')
            return

        values = history.as_array()
        self.curve.setData(np.arange(values.size, dtype=np.float64), values)

        y_min, y_max = y_range(observable, coupling, field)
        if y_max <= y_min:
            # J = h = 0: every state has zero energy
            y_min, y_max = -1.0, 1.0
        self.plot_widget.setXRange(0, history.capacity, padding=0)
        self.plot_widget.setYRange(y_min, y_max, padding=0)
        self.plot_widget.setLabel('left', observable.label)
