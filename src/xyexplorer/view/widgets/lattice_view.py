"""Lattice raster display (pixelated color map or quiver image)."""
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import pyqtgraph as pg
from PySide6.QtCore import Signal
from PySide6.QtWidgets import QWidget, QVBoxLayout

if TYPE_CHECKING:
    from xyexplorer.view.rendering import Frame


class LatticeView(QWidget):
    clicked = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.graphics = pg.GraphicsLayoutWidget()
        self.graphics.setBackground('#111')
        self.view_box = self.graphics.addViewBox(lockAspect=True, invertY=True, enableMouse=False)
        self.view_box.setMenuEnabled(False)

        # ImageItem draws without smoothing, so N x N rasters stay pixelated when scaled up
        self.image_item = pg.ImageItem(axisOrder='row-major')
        self.view_box.addItem(self.image_item)
        self.graphics.scene().sigMouseClicked.connect(lambda _event: self.clicked.emit())

        layout.addWidget(self.graphics)
        self._shape: Optional[tuple[int, ...]] = None

    def show_frame(self, frame: Frame) -> None:
        self.image_item.setImage(frame.raster, autoLevels=False, levels=(0, 255))
        if frame.raster.shape != self._shape:
            # New raster resolution: refit once instead of every frame
            self._shape = frame.raster.shape
            self.view_box.autoRange(padding=0)
