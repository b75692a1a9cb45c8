"""Frame scheduler driven by explicit tick() calls (no running event loop)."""
import pytest

from xyexplorer.controller.runner import SimulationRunner
from xyexplorer.model.errors import InvalidRangeError
from xyexplorer.model.sweep import SweepSpec
from xyexplorer.view.rendering import Frame


@pytest.fixture
def runner(qapp, session):
    r = SimulationRunner(session)
    yield r
    r.stop()


def _collect(signal) -> list:
    received = []
    signal.connect(lambda *args: received.append(args[0] if len(args) == 1 else args))
    return received


def test_free_running_tick(runner):
    frames = _collect(runner.frame_ready)
    runner.session.set_sweeps_per_frame(4)

    runner.tick()

    assert len(runner.session.handle.steps) == 4
    assert len(frames) == 1 and isinstance(frames[0], Frame)
    assert len(runner.session.history) == 1


def test_sweep_signals(runner):
    finished = _collect(runner.sweep_finished)
    added = _collect(runner.sweep_result_added)
    temperatures = _collect(runner.temperature_changed)

    runner.start_sweep(SweepSpec(0.5, 1.0, 0.5, 0, 0, 2, batch_size=2))
    for _ in range(100):
        if not runner.sweeps.active:
            break
        runner.tick()

    assert finished == [True]
    assert [r.temperature for r in added] == [0.5, 1.0]
    assert temperatures == [0.5, 1.0]
    assert runner.results == tuple(added)


def test_invalid_sweep_is_not_started(runner):
    with pytest.raises(InvalidRangeError):
        runner.start_sweep(SweepSpec(0.5, 1.0, 0.0, 0, 0, 2))
    assert not runner.sweeps.active


def test_resize_cancels_running_sweep(runner):
    finished = _collect(runner.sweep_finished)
    runner.start_sweep(SweepSpec(0.5, 1.0, 0.5, 10, 10, 10))
    runner.tick()

    runner.resize(32)

    assert finished == [False]
    assert not runner.sweeps.active
    assert runner.session.spins().size == 32 * 32


def test_start_and_stop(runner):
    runner.start()
    assert runner.is_running
    runner.stop()
    assert not runner.is_running
