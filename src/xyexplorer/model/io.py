"""
Input/Output Manager
Exports sweep results to CSV and saves/loads them as HDF5 archives.
"""
import csv
import io
import logging
from dataclasses import dataclass
from importlib.metadata import version, PackageNotFoundError
from typing import Optional, Sequence

import h5py
import numpy as np

from xyexplorer.model.binning import BinStats
from xyexplorer.model.sweep import MeasurementResult

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("xyexplorer")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

CSV_HEADER: tuple[str, ...] = (
    "T",
    "Energy", "Energy_SEM",
    "Magnetization", "Magnetization_SEM",
    "Acceptance", "Acceptance_SEM",
    "Energy2", "Energy2_SEM",
    "Magnetization2", "Magnetization2_SEM",
    "SpecificHeat", "MagneticSusceptibility",
)

# Attribute names of the binned observables on MeasurementResult, in CSV order
OBSERVABLES: tuple[str, ...] = ("energy", "magnetization", "acceptance", "energy2", "magnetization2")


@dataclass
class SweepArchive:
    """Results plus the run configuration they were measured with."""
    results: list[MeasurementResult]
    algorithm: str = ""
    lattice_size: int = 0
    coupling: float = 0.0
    field: float = 0.0


def result_row(result: MeasurementResult) -> list[float]:
    row = [result.temperature]
    for name in OBSERVABLES:
        stats: BinStats = getattr(result, name)
        row.extend((stats.mean, stats.sem))
    row.extend((result.specific_heat, result.susceptibility))
    return row


class IOManager:

    # ---- CSV ----

    @staticmethod
    def results_to_csv(results: Sequence[MeasurementResult]) -> str:
        """Header plus one row per completed temperature, full float precision, no quoting."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_NONE)
        writer.writerow(CSV_HEADER)
        for result in results:
            writer.writerow([repr(float(v)) for v in result_row(result)])
        return buffer.getvalue()

    @staticmethod
    def export_results_csv(results: Sequence[MeasurementResult], filepath: str) -> None:
        if not results:
            raise ValueError("No sweep results to export.")
        logger.info(f"Exporting {len(results)} sweep rows to: {filepath}")
        try:
            with open(filepath, "w", encoding="utf-8", newline="") as f:
                f.write(IOManager.results_to_csv(results))
        except OSError as e:
            logger.exception(f"Failed to export CSV: {e}")
            raise

    # ---- HDF5 ----

    @staticmethod
    def save_results_h5(archive: SweepArchive, filepath: str) -> None:
        logger.info(f"Saving sweep archive to: {filepath}")
        results = archive.results
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["algorithm"] = archive.algorithm
                f.attrs["lattice_size"] = archive.lattice_size
                f.attrs["coupling"] = archive.coupling
                f.attrs["field"] = archive.field

                f.create_dataset("temperatures", data=np.array([r.temperature for r in results], dtype=np.float64))

                # One group per binned observable
                for name in OBSERVABLES:
                    grp = f.create_group(name)
                    stats = [getattr(r, name) for r in results]
                    grp.create_dataset("mean", data=np.array([s.mean for s in stats], dtype=np.float64))
                    grp.create_dataset("sem", data=np.array([s.sem for s in stats], dtype=np.float64))
                    grp.create_dataset("n_bins", data=np.array([s.n_bins for s in stats], dtype=np.int64))
                    grp.create_dataset("bin_size", data=np.array([s.bin_size for s in stats], dtype=np.int64))
                    grp.create_dataset("degraded", data=np.array([s.degraded for s in stats], dtype=np.bool_))

                f.create_dataset("specific_heat", data=np.array([r.specific_heat for r in results], dtype=np.float64))
                f.create_dataset("susceptibility", data=np.array([r.susceptibility for r in results], dtype=np.float64))

            logger.info(f"Sweep archive saved ({len(results)} temperatures).")

        except Exception as e:
            logger.exception(f"Failed to save sweep archive: {e}")
            raise e

    @staticmethod
    def load_results_h5(filepath: str) -> SweepArchive:
        logger.info(f"Loading sweep archive from: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                temperatures = f["temperatures"][:]
                stats_by_name: dict[str, list[BinStats]] = {}
                for name in OBSERVABLES:
                    grp = f[name]
                    stats_by_name[name] = [
                        BinStats(mean=float(m), sem=float(s), n_bins=int(nb), bin_size=int(bs), degraded=bool(d))
                        for m, s, nb, bs, d in zip(
                            grp["mean"][:], grp["sem"][:], grp["n_bins"][:], grp["bin_size"][:], grp["degraded"][:]
                        )
                    ]
                specific_heat = f["specific_heat"][:]
                susceptibility = f["susceptibility"][:]

                results = [
                    MeasurementResult(
                        temperature=float(t),
                        specific_heat=float(specific_heat[i]),
                        susceptibility=float(susceptibility[i]),
                        **{name: stats_by_name[name][i] for name in OBSERVABLES},
                    )
                    for i, t in enumerate(temperatures)
                ]
                archive = SweepArchive(
                    results=results,
                    algorithm=IOManager._as_str(f.attrs.get("algorithm")),
                    lattice_size=int(f.attrs.get("lattice_size", 0)),
                    coupling=float(f.attrs.get("coupling", 0.0)),
                    field=float(f.attrs.get("field", 0.0)),
                )

            logger.info(f"Sweep archive loaded ({len(results)} temperatures).")
            return archive

        except Exception as e:
            logger.exception(f"Failed to load sweep archive: {e}")
            raise e

    @staticmethod
    def _as_str(value: Optional[object]) -> str:
        # HDF5 often returns bytes for string attributes
        if value is None:
            return ""
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)
