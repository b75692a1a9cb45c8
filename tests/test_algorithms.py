import pytest

from xyexplorer.model.algorithms import (
    AlgorithmId, STEP_OPERATIONS, check_cluster_constraints, csv_file_name, perform_step
)
from xyexplorer.model.errors import AlgorithmConstraintError, UnknownAlgorithmError


def test_every_algorithm_has_a_step_operation():
    assert set(STEP_OPERATIONS) == set(AlgorithmId)


@pytest.mark.parametrize("algorithm", list(AlgorithmId))
def test_step_routes_to_engine_operation(factory, algorithm):
    engine = factory(4, 1.0, 1.0, 0.0)
    perform_step(engine, algorithm)
    assert engine.steps == [STEP_OPERATIONS[algorithm]]


def test_unknown_algorithm_fails_fast():
    with pytest.raises(UnknownAlgorithmError):
        AlgorithmId.parse("simulated-annealing")


def test_parse_known_identifier():
    assert AlgorithmId.parse("swendsen-wang") is AlgorithmId.SWENDSEN_WANG


def test_cluster_algorithms():
    assert {a for a in AlgorithmId if a.is_cluster} == {AlgorithmId.WOLFF, AlgorithmId.SWENDSEN_WANG}


@pytest.mark.parametrize("coupling, field", [(1.0, 0.1), (-1.0, 0.0)])
def test_cluster_constraints_rejected(coupling, field):
    with pytest.raises(AlgorithmConstraintError):
        check_cluster_constraints(AlgorithmId.WOLFF, coupling, field)


def test_local_algorithms_accept_any_parameters():
    check_cluster_constraints(AlgorithmId.METROPOLIS, -1.0, 0.5)


def test_csv_file_names():
    assert csv_file_name(AlgorithmId.METROPOLIS) == "xy_metropolis_results.csv"
    assert csv_file_name(AlgorithmId.HEAT_BATH) == "xy_heatbath_results.csv"
    assert csv_file_name(AlgorithmId.SWENDSEN_WANG) == "xy_swendsen-wang_results.csv"
