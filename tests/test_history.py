import pytest

from xyexplorer.model.history import HistoryBuffer, PlotObservable, acceptance_ratio, read_observable, y_range


def test_oldest_value_evicted_at_capacity():
    history = HistoryBuffer(capacity=400)
    for i in range(401):
        history.push(i)
    assert len(history) == 400
    assert list(history)[0] == 1.0
    assert history.as_array()[-1] == 400.0


def test_clear():
    history = HistoryBuffer(capacity=3)
    history.push(1.0)
    history.clear()
    assert len(history) == 0
    assert history.as_array().size == 0


def test_invalid_capacity():
    with pytest.raises(ValueError):
        HistoryBuffer(capacity=0)


def test_energy_range_tracks_coupling_and_field():
    assert y_range(PlotObservable.ENERGY, 1.0, 0.5) == (-2.5, 2.5)
    assert y_range(PlotObservable.ENERGY, -2.0, 0.0) == (-4.0, 4.0)


@pytest.mark.parametrize("observable", [PlotObservable.MAGNETIZATION, PlotObservable.ACCEPTANCE_RATIO])
def test_normalized_range(observable):
    assert y_range(observable, 2.0, 2.0) == (-1.0, 1.0)


def test_acceptance_ratio_without_attempts(factory):
    engine = factory(4, 1.0, 1.0, 0.0)
    assert acceptance_ratio(engine) == 0.0


def test_read_observable(factory):
    engine = factory(4, 1.0, 1.0, 0.0)
    engine.metropolis_step()
    assert read_observable(engine, PlotObservable.ENERGY) == -1.0
    assert read_observable(engine, PlotObservable.MAGNETIZATION) == 0.5
    assert read_observable(engine, PlotObservable.ACCEPTANCE_RATIO) == 0.5


def test_session_skips_history_when_plot_disabled(session):
    session.set_plot_observable(PlotObservable.NO_PLOT)
    assert session.record_history() is None
    assert len(session.history) == 0


def test_changing_observable_clears_history(session):
    session.record_history()
    session.set_plot_observable("magnetization")
    assert len(session.history) == 0
