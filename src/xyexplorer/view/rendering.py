"""
Lattice Rendering Pipeline
==========================
Turns the engine's spin angles into an RGB raster each frame.

Two modes are supported:
1. COLOR: one pixel per site, hue = angle, displayed with nearest-neighbour
   scaling (raster is exactly N x N).
2. QUIVER: a subsampled arrow field drawn with QPainter on a fixed-size
   image, independent of N.

The raster is reallocated whenever the mode (or, in color mode, the lattice
size) changes; the previous raster is never rescaled.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np
from matplotlib.colors import hsv_to_rgb
from PySide6.QtCore import QLineF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPen

from xyexplorer.config import QUIVER_RESOLUTION
from xyexplorer.model.history import acceptance_ratio
from xyexplorer.model.session import VizMode

if TYPE_CHECKING:
    import numpy.typing as npt
    from xyexplorer.model.session import SimulationSession

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi
QUIVER_BACKGROUND = "#111111"
ARROW_LENGTH_FRACTION = 0.6   # of the cell size
HEAD_LENGTH_FRACTION = 0.3    # of the arrow length
HEAD_ANGLE = math.pi / 6      # 30 degrees


def angles_to_rgb(angles: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Map angles (radians) to fully saturated HSV colors; output shape is angles.shape + (3,)."""
    theta = np.asarray(angles, dtype=np.float64)
    hsv = np.empty(theta.shape + (3,), dtype=np.float64)
    hsv[..., 0] = np.mod(theta, TWO_PI) / TWO_PI
    hsv[..., 1] = 1.0
    hsv[..., 2] = 1.0
    return np.rint(hsv_to_rgb(hsv) * 255.0).astype(np.uint8)


def quiver_stride(size: int) -> int:
    """Sites skipped between arrows so that at most 64 arrows are drawn per row."""
    if size <= 64:
        return 1
    if size <= 128:
        return 2
    return 4


@dataclass(frozen=True)
class QuiverGeometry:
    shafts: npt.NDArray[np.float64]   # (k, 4): x1, y1, x2, y2
    heads: npt.NDArray[np.float64]    # (k, 2, 4): two strokes from the tip
    colors: npt.NDArray[np.uint8]     # (k, 3)
    cell_size: float
    line_width: float


def quiver_geometry(angles: npt.NDArray[np.float64], resolution: int) -> QuiverGeometry:
    """Arrow segments for an (N, N) angle grid drawn on a resolution x resolution canvas."""
    size = angles.shape[0]
    stride = quiver_stride(size)
    grid = math.ceil(size / stride)
    cell = resolution / grid
    length = cell * ARROW_LENGTH_FRACTION
    head = length * HEAD_LENGTH_FRACTION

    sub = angles[::stride, ::stride]
    rows, cols = np.indices(sub.shape, dtype=np.float64)
    cx = (cols + 0.5) * cell
    cy = (rows + 0.5) * cell
    dx = np.cos(sub)
    dy = np.sin(sub)

    x2 = cx + dx * length / 2.0
    y2 = cy + dy * length / 2.0
    shafts = np.stack([cx - dx * length / 2.0, cy - dy * length / 2.0, x2, y2], axis=-1)

    strokes = []
    for offset in (-HEAD_ANGLE, HEAD_ANGLE):
        hx = x2 - head * np.cos(sub + offset)
        hy = y2 - head * np.sin(sub + offset)
        strokes.append(np.stack([x2, y2, hx, hy], axis=-1))
    heads = np.stack(strokes, axis=-2)

    return QuiverGeometry(
        shafts=shafts.reshape(-1, 4),
        heads=heads.reshape(-1, 2, 4),
        colors=angles_to_rgb(sub).reshape(-1, 3),
        cell_size=cell,
        line_width=max(1.0, cell / 20.0),
    )


def paint_quiver(image: QImage, geometry: QuiverGeometry) -> None:
    painter = QPainter(image)
    try:
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.fillRect(image.rect(), QColor(QUIVER_BACKGROUND))
        pen = QPen()
        pen.setWidthF(geometry.line_width)
        pen.setCapStyle(Qt.RoundCap)
        pen.setJoinStyle(Qt.RoundJoin)
        for shaft, heads, (r, g, b) in zip(geometry.shafts, geometry.heads, geometry.colors):
            pen.setColor(QColor(int(r), int(g), int(b)))
            painter.setPen(pen)
            painter.drawLine(QLineF(*shaft))
            painter.drawLine(QLineF(*heads[0]))
            painter.drawLine(QLineF(*heads[1]))
    finally:
        painter.end()


def qimage_to_rgb(image: QImage) -> npt.NDArray[np.uint8]:
    """Copy an RGBA8888 QImage into an (H, W, 3) array."""
    h, w = image.height(), image.width()
    data = np.frombuffer(image.constBits(), dtype=np.uint8, count=image.sizeInBytes())
    rows = data.reshape(h, image.bytesPerLine())[:, : w * 4]
    return rows.reshape(h, w, 4)[..., :3].copy()


@dataclass(frozen=True)
class Frame:
    raster: npt.NDArray[np.uint8]
    mode: VizMode
    energy: float
    magnetization: float
    acceptance: float


class RenderPipeline:
    """
    Produces one frame per tick from the session's current spin state.

    The spin angles are obtained through ``session.spins()``, which
    revalidates the buffer alias against the live engine handle before every
    read.
    """

    def __init__(self, quiver_resolution: int = QUIVER_RESOLUTION) -> None:
        self.quiver_resolution = quiver_resolution
        self.raster: Optional[npt.NDArray[np.uint8]] = None
        self._image: Optional[QImage] = None
        self._raster_key: Optional[tuple[VizMode, int]] = None

    @property
    def mode(self) -> Optional[VizMode]:
        return self._raster_key[0] if self._raster_key else None

    def render(self, session: SimulationSession) -> Frame:
        angles = session.spins().reshape(session.size, session.size)
        self._ensure_raster(session.viz_mode, session.size)

        if session.viz_mode is VizMode.COLOR:
            self.raster[...] = angles_to_rgb(angles)
        else:
            paint_quiver(self._image, quiver_geometry(angles, self.quiver_resolution))
            self.raster[...] = qimage_to_rgb(self._image)

        handle = session.handle
        return Frame(
            raster=self.raster,
            mode=session.viz_mode,
            energy=float(handle.energy),
            magnetization=float(handle.magnetization),
            acceptance=acceptance_ratio(handle),
        )

    def _ensure_raster(self, mode: VizMode, size: int) -> None:
        # Quiver output does not depend on N
        key = (mode, size if mode is VizMode.COLOR else self.quiver_resolution)
        if key == self._raster_key:
            return

        if mode is VizMode.COLOR:
            self._image = None
            self.raster = np.zeros((size, size, 3), dtype=np.uint8)
        else:
            res = self.quiver_resolution
            self._image = QImage(res, res, QImage.Format_RGBA8888)
            self.raster = np.zeros((res, res, 3), dtype=np.uint8)
        logger.debug(f"Raster reallocated for {mode} mode: {self.raster.shape[1]}x{self.raster.shape[0]}")
        self._raster_key = key
