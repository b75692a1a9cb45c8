"""Temperature sweep orchestration: temperature lists, phase order, cancellation."""
from __future__ import annotations

import pytest

from xyexplorer.model.errors import InvalidRangeError
from xyexplorer.model.sweep import Phase, SweepController, SweepSpec


def _spec(t_init=1.0, t_final=1.0, t_step=0.5, n_warmup=3, n_decor=2, n_measure=4, batch_size=2) -> SweepSpec:
    return SweepSpec(t_init, t_final, t_step, n_warmup, n_decor, n_measure, batch_size)


def _run_to_end(controller: SweepController, limit: int = 10_000) -> list[int]:
    executed = []
    for _ in range(limit):
        if not controller.active:
            break
        executed.append(controller.tick())
    return executed


def test_ascending_temperatures_inclusive():
    assert _spec(0.5, 2.5, 0.5).temperatures() == [0.5, 1.0, 1.5, 2.0, 2.5]


def test_overshooting_step_appends_final_temperature():
    assert _spec(0.2, 1.0, 0.3).temperatures() == [0.2, 0.5, 0.8, 1.0]


def test_descending_temperatures():
    assert _spec(2.0, 1.0, -0.5).temperatures() == [2.0, 1.5, 1.0]


def test_tenth_steps_do_not_accumulate_round_off():
    temps = _spec(0.5, 2.5, 0.1).temperatures()
    assert len(temps) == 21
    assert temps[3] == 0.8
    assert temps[-1] == 2.5


@pytest.mark.parametrize("t_init, t_final, t_step", [
    (0.5, 2.5, 0.0),
    (0.5, 2.5, -0.1),
    (2.5, 0.5, 0.1),
    (float("nan"), 2.5, 0.1),
    (0.0, 1.0, 0.3),
    (1.0, -0.5, -0.5),
    (0.5, 0.5000005, 1e-7),
])
def test_inconsistent_range_is_rejected_without_mutation(session, t_init, t_final, t_step):
    controller = SweepController(session)
    controller.start(_spec(1.0, 1.0, 0.5, 0, 0, 1))
    _run_to_end(controller)
    previous = controller.results
    state = controller.state
    temperature = session.temperature

    with pytest.raises(InvalidRangeError):
        controller.start(_spec(t_init, t_final, t_step))

    assert controller.results == previous
    assert controller.state is state
    assert not controller.active
    assert session.temperature == temperature


def test_zero_measurement_count_is_rejected(session):
    controller = SweepController(session)
    with pytest.raises(InvalidRangeError):
        controller.start(_spec(n_measure=0))
    assert controller.state is None


def test_phase_sequence_and_batch_sizes(session, factory):
    controller = SweepController(session)
    controller.start(_spec())

    phases = []
    executed = []
    while controller.active:
        phases.append(controller.state.phase)
        executed.append(controller.tick())

    assert phases == [Phase.WARMUP, Phase.WARMUP, Phase.DECORRELATION, Phase.MEASUREMENT, Phase.MEASUREMENT]
    assert executed == [2, 1, 2, 2, 2]
    assert len(factory.last.steps) == 3 + 2 + 4


def test_progress_resets_at_each_transition(session):
    controller = SweepController(session)
    controller.start(_spec(batch_size=10))

    controller.tick()
    assert (controller.state.phase, controller.state.progress) == (Phase.DECORRELATION, 0)
    controller.tick()
    assert (controller.state.phase, controller.state.progress) == (Phase.MEASUREMENT, 0)


def test_only_measurement_steps_are_sampled(session):
    controller = SweepController(session)
    controller.start(_spec())
    _run_to_end(controller)

    (result,) = controller.results
    # Steps 5..8 of the fake engine: energies -1.2, -1.4, -1.6, -1.0
    assert result.energy.n_bins == 4
    assert result.energy.mean == pytest.approx(-1.3)
    assert result.energy2.mean == pytest.approx(1.74)
    assert result.acceptance.mean == pytest.approx(0.5)
    assert result.specific_heat == pytest.approx(0.05)
    assert result.degraded


def test_one_result_per_completed_temperature(session, factory):
    controller = SweepController(session)
    temps = controller.start(_spec(0.5, 1.5, 0.5, 1, 1, 2, batch_size=1))
    assert session.temperature != 0.5

    controller.tick()
    assert session.temperature == 0.5
    assert factory.last.temp == 0.5

    completed = 0
    while controller.active:
        controller.tick()
        completed = len(controller.results)
        assert completed <= len(temps)

    assert [r.temperature for r in controller.results] == temps
    assert controller.tick() == 0


def test_samples_discarded_after_finalize(session):
    controller = SweepController(session)
    controller.start(_spec(0.5, 1.0, 0.5, 0, 0, 3, batch_size=3))
    # warmup and decorrelation have no sweeps and advance on empty ticks
    assert controller.tick() == 0
    assert controller.tick() == 0
    assert controller.tick() == 3
    assert len(controller.results) == 1
    assert len(controller.state.samples) == 0
    assert controller.state.phase is Phase.WARMUP
    assert controller.state.temp_index == 1


def test_cancel_discards_unfinished_temperature(session):
    controller = SweepController(session)
    controller.start(_spec(0.5, 1.0, 0.5, 0, 0, 10, batch_size=4))
    # Two empty phase ticks and three measurement ticks per temperature
    for _ in range(8):
        controller.tick()
    assert len(controller.results) == 1
    assert len(controller.state.samples) > 0
    kept = controller.results

    controller.cancel()

    assert not controller.active
    assert controller.results == kept
    assert len(controller.state.samples) == 0
    assert controller.tick() == 0


def test_max_steps_overrides_batch_size(session):
    controller = SweepController(session)
    controller.start(_spec(n_warmup=10, batch_size=2))
    assert controller.tick(max_steps=7) == 7
    assert controller.tick(max_steps=7) == 3
    assert controller.state.phase is Phase.DECORRELATION


def test_batch_size_change_applies_to_running_sweep(session):
    controller = SweepController(session)
    controller.start(_spec(n_warmup=10, batch_size=1))
    controller.set_batch_size(5)
    assert controller.tick() == 5


def test_new_sweep_clears_previous_results(session):
    controller = SweepController(session)
    controller.start(_spec(n_warmup=0, n_decor=0, n_measure=1))
    _run_to_end(controller)
    assert len(controller.results) == 1

    controller.start(_spec(n_warmup=0, n_decor=0, n_measure=1))
    assert controller.results == ()


def test_sweep_through_zero_temperature_is_rejected_before_running(session, factory):
    controller = SweepController(session)
    with pytest.raises(InvalidRangeError):
        controller.start(SweepSpec(0.0, 1.0, 0.3, 0, 0, 2, batch_size=2))
    assert controller.state is None
    assert controller.tick() == 0
    assert factory.last.steps == []


def test_step_below_temperature_resolution_is_rejected():
    with pytest.raises(InvalidRangeError):
        _spec(0.5, 0.5000005, 1e-7).temperatures()


def test_smallest_step_gives_distinct_temperatures():
    temps = _spec(0.5, 0.500003, 1e-6).temperatures()
    assert temps == [0.5, 0.500001, 0.500002, 0.500003]
