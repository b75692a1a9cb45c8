import numpy as np
import pytest

from xyexplorer.model.shared_buffer import SharedStateView


def test_view_aliases_engine_storage(factory):
    engine = factory(8, 1.0, 1.0, 0.0)
    view = SharedStateView()

    angles = view.refresh(engine, 8)

    assert angles.shape == (64,)
    assert np.shares_memory(angles, engine.spins)
    assert not angles.flags.writeable


def test_unchanged_buffer_reuses_view(factory):
    engine = factory(8, 1.0, 1.0, 0.0)
    view = SharedStateView()
    first = view.refresh(engine, 8)
    descriptor = view.descriptor

    assert view.refresh(engine, 8) is first
    assert view.descriptor == descriptor


def test_relocated_buffer_rebuilds_view(factory):
    engine = factory(8, 1.0, 1.0, 0.0)
    view = SharedStateView()
    first = view.refresh(engine, 8)

    engine.reallocate()
    second = view.refresh(engine, 8)

    assert second is not first
    assert np.shares_memory(second, engine.spins)
    assert not np.shares_memory(second, first)


def test_new_handle_rebuilds_view(factory):
    view = SharedStateView()
    view.refresh(factory(8, 1.0, 1.0, 0.0), 8)
    old = view.descriptor

    view.refresh(factory(8, 1.0, 1.0, 0.0), 8)

    assert view.descriptor.handle_id != old.handle_id


def test_resize_changes_view_length(session):
    session.resize(64)
    assert session.spins().size == 64 * 64

    session.resize(32)
    angles = session.spins()
    assert angles.size == 1024
    assert np.shares_memory(angles, session.handle.spins)


def test_invalidate_drops_alias(factory):
    view = SharedStateView()
    view.refresh(factory(4, 1.0, 1.0, 0.0), 4)
    view.invalidate()
    assert view.descriptor is None


def test_undersized_buffer_is_rejected(factory):
    engine = factory(4, 1.0, 1.0, 0.0)
    with pytest.raises(ValueError):
        SharedStateView().refresh(engine, 8)
