from xyexplorer.model import params
from xyexplorer.view.widgets.bounded_field import BoundedField


def _commit(field: BoundedField, text: str) -> None:
    field.edit.setText(text)
    field.edit.editingFinished.emit()


def test_out_of_bounds_edit_reverts(qapp):
    field = BoundedField(params.TEMPERATURE, 2.27)
    emitted = []
    field.value_changed.connect(emitted.append)

    _commit(field, "9")

    assert field.value == 2.27
    assert field.edit.text() == "2.27"
    assert emitted == []


def test_garbage_edit_reverts_to_last_valid_value(qapp):
    field = BoundedField(params.COUPLING, 1.0)
    _commit(field, "-0.5")
    _commit(field, "abc")
    assert field.value == -0.5
    assert field.edit.text() == "-0.50"


def test_valid_edit_moves_slider(qapp):
    field = BoundedField(params.TEMPERATURE, 2.27)
    emitted = []
    field.value_changed.connect(emitted.append)

    _commit(field, "1.5")

    assert emitted == [1.5]
    assert field.slider.value() == 150


def test_programmatic_update_is_silent(qapp):
    field = BoundedField(params.FIELD, 0.0)
    emitted = []
    field.value_changed.connect(emitted.append)

    field.set_value(0.75)

    assert emitted == []
    assert field.edit.text() == "0.75"
    assert field.slider.value() == 75
