"""
Slider + numeric field pair for one bounded parameter.

Edits in the text field are parsed against the parameter bounds; anything
that does not parse (or lies outside the bounds) reverts the field to the
last valid value and leaves the parameter untouched.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QWidget, QHBoxLayout, QSlider, QLineEdit, QLabel

from xyexplorer.model.errors import InvalidInputError
from xyexplorer.model.params import ParameterBounds, parse_bounded

logger = logging.getLogger(__name__)


class BoundedField(QWidget):
    value_changed = Signal(float)

    def __init__(self, bounds: ParameterBounds, value: float, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.bounds = bounds
        self._scale = 10 ** bounds.decimals
        self._value = value

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.label = QLabel(f"{bounds.name}:")
        layout.addWidget(self.label)

        self.slider = QSlider(Qt.Horizontal)
        self.slider.setRange(self._to_ticks(bounds.minimum), self._to_ticks(bounds.maximum))
        self.slider.setValue(self._to_ticks(value))
        self.slider.valueChanged.connect(self._on_slider_moved)
        layout.addWidget(self.slider, stretch=1)

        self.edit = QLineEdit(bounds.format(value))
        self.edit.setFixedWidth(64)
        self.edit.setAlignment(Qt.AlignRight)
        self.edit.editingFinished.connect(self._on_text_committed)
        layout.addWidget(self.edit)

    @property
    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        """Programmatic update (e.g. a sweep changing T); does not emit value_changed."""
        self._value = value
        self._sync_widgets()

    def _to_ticks(self, value: float) -> int:
        return int(round(value * self._scale))

    def _sync_widgets(self) -> None:
        self.slider.blockSignals(True)
        self.slider.setValue(self._to_ticks(self._value))
        self.slider.blockSignals(False)
        self.edit.setText(self.bounds.format(self._value))

    def _on_slider_moved(self, ticks: int) -> None:
        self._value = ticks / self._scale
        self.edit.setText(self.bounds.format(self._value))
        self.value_changed.emit(self._value)

    def _on_text_committed(self) -> None:
        try:
            value = parse_bounded(self.edit.text(), self.bounds)
        except InvalidInputError as e:
            logger.debug(f"{e} Reverting to {self._value}.")
            self._sync_widgets()
            return
        if value == self._value:
            self._sync_widgets()
            return
        self._value = value
        self._sync_widgets()
        self.value_changed.emit(value)
