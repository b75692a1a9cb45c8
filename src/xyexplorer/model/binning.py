"""
Binned Statistics
=================
Turns a raw, autocorrelated sample sequence into a mean and standard error
by block averaging, and derives response functions from second moments.

Classes:
    BinStats: Result of binning one observable.
    BinningEstimator: Block-averaging estimator with a fixed bin target.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from xyexplorer.config import DEFAULT_TARGET_BINS


@dataclass(frozen=True)
class BinStats:
    mean: float
    sem: float
    n_bins: int = 0
    bin_size: int = 0
    # Fewer samples than the bin target: bins hold single samples and the
    # SEM ignores autocorrelation.
    degraded: bool = False


@dataclass(frozen=True)
class BinningEstimator:
    """
    Block-averaging estimator.

    The sequence is cut into contiguous chunks of ``len // target_bins``
    samples (at least one); the trailing chunk may be shorter. The estimate is
    the average of the chunk means and the SEM is
    ``sqrt(var(chunk means) / n_chunks)`` with the population variance.
    """
    target_bins: int = DEFAULT_TARGET_BINS

    def __post_init__(self) -> None:
        if self.target_bins < 1:
            raise ValueError(f"target_bins must be >= 1, got {self.target_bins}.")

    def finalize(self, samples: Sequence[float] | np.ndarray) -> BinStats:
        data = np.asarray(samples, dtype=np.float64).ravel()
        n = data.size
        if n == 0:
            raise ValueError("Cannot bin an empty sample sequence.")

        bin_size = max(1, n // self.target_bins)
        starts = np.arange(0, n, bin_size)
        counts = np.diff(np.append(starts, n))
        bin_means = np.add.reduceat(data, starts) / counts

        if np.all(bin_means == bin_means[0]):
            # Exact zero instead of round-off noise from the mean
            mean, sem = float(bin_means[0]), 0.0
        else:
            mean = float(bin_means.mean())
            variance = float(np.mean((bin_means - mean) ** 2))
            sem = math.sqrt(variance / bin_means.size)

        return BinStats(
            mean=mean,
            sem=sem,
            n_bins=int(bin_means.size),
            bin_size=int(bin_size),
            degraded=n < self.target_bins,
        )

    @staticmethod
    def derive(
        energy: BinStats,
        energy2: BinStats,
        magnetization: BinStats,
        magnetization2: BinStats,
        temperature: float,
    ) -> tuple[float, float]:
        """
        Specific heat and susceptibility per site from fluctuations.

        Returns:
            (C, chi) with C = (<E^2> - <E>^2) / T^2 and chi = (<M^2> - <M>^2) / T.
        """
        if temperature <= 0.0:
            raise ValueError(f"Temperature must be positive, got {temperature}.")
        specific_heat = (energy2.mean - energy.mean ** 2) / temperature ** 2
        susceptibility = (magnetization2.mean - magnetization.mean ** 2) / temperature
        return specific_heat, susceptibility
