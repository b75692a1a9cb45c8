import pytest

from xyexplorer.model.binning import BinStats
from xyexplorer.model.io import CSV_HEADER, IOManager, SweepArchive
from xyexplorer.model.sweep import MeasurementResult


def _result(temperature: float, degraded: bool = False) -> MeasurementResult:
    def stats(mean: float) -> BinStats:
        return BinStats(mean=mean, sem=mean / 100, n_bins=10, bin_size=100, degraded=degraded)

    return MeasurementResult(
        temperature=temperature,
        energy=stats(-1.5),
        magnetization=stats(0.5),
        acceptance=stats(0.4),
        energy2=stats(2.3),
        magnetization2=stats(0.3),
        specific_heat=0.0125,
        susceptibility=0.025,
    )


def test_csv_has_header_and_one_row_per_temperature():
    text = IOManager.results_to_csv([_result(0.5), _result(1.0)])
    lines = text.splitlines()

    assert len(lines) == 3
    assert lines[0] == (
        "T,Energy,Energy_SEM,Magnetization,Magnetization_SEM,Acceptance,Acceptance_SEM,"
        "Energy2,Energy2_SEM,Magnetization2,Magnetization2_SEM,SpecificHeat,MagneticSusceptibility"
    )
    assert all(len(line.split(",")) == len(CSV_HEADER) == 13 for line in lines)
    assert lines[1].split(",")[:3] == ["0.5", "-1.5", "-0.015"]
    assert '"' not in text


def test_csv_keeps_full_float_precision():
    result = _result(0.1 + 0.2)
    row = IOManager.results_to_csv([result]).splitlines()[1]
    assert row.startswith("0.30000000000000004,")


def test_export_refuses_empty_results(tmp_path):
    with pytest.raises(ValueError):
        IOManager.export_results_csv([], str(tmp_path / "empty.csv"))


def test_export_writes_file(tmp_path):
    path = tmp_path / "xy_metropolis_results.csv"
    IOManager.export_results_csv([_result(0.5)], str(path))
    assert path.read_text(encoding="utf-8").count("\n") == 2


def test_archive_round_trip(tmp_path):
    path = str(tmp_path / "sweep.h5")
    archive = SweepArchive(
        results=[_result(0.5), _result(1.0, degraded=True)],
        algorithm="wolff",
        lattice_size=64,
        coupling=1.0,
        field=0.0,
    )

    IOManager.save_results_h5(archive, path)
    loaded = IOManager.load_results_h5(path)

    assert loaded.algorithm == "wolff"
    assert loaded.lattice_size == 64
    assert loaded.results == archive.results
    assert loaded.results[1].degraded


def test_loading_non_hdf5_file_fails(tmp_path):
    path = tmp_path / "not_an_archive.h5"
    path.write_text("T,Energy\n", encoding="utf-8")
    with pytest.raises(ValueError):
        IOManager.load_results_h5(str(path))
