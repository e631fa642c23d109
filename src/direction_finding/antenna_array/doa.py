"""
Subspace direction of arrival estimation.

Provides the MUSIC estimator, its pseudospectrum and the peak finder
that turns a sampled pseudospectrum into discrete angle estimates.
"""

import heapq
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from ..core.exceptions import InsufficientArrayAperture
from ..utils.conversions import linear_to_db
from .geometry import ArrayManifold
from .simulation import Simulation, snapshot_times

logger = logging.getLogger(__name__)

# Default MUSIC scan grid step in radians
DEFAULT_GRID_STEP = 0.01

# Threshold-gated peak selection keeps peaks above min(f) * threshold
DEFAULT_PEAK_THRESHOLD = 10.0


def default_music_grid() -> np.ndarray:
    """Angles on [0, 2*pi) spaced DEFAULT_GRID_STEP apart."""
    return np.arange(0.0, 2 * np.pi, DEFAULT_GRID_STEP)


class PeakSelection(Enum):
    """Peak selection policies."""

    TOP_N = "top_n"  # The n highest strict local maxima
    THRESHOLD = "threshold"  # Every local maximum above min * threshold


class Pseudospectrum:
    """
    MUSIC pseudospectrum over a fixed noise subspace.

        p(theta) = 1 / ||a(theta)^H Un||^2

    Stateless once built and can be evaluated any number of times.
    """

    def __init__(
        self,
        manifold: ArrayManifold,
        noise_subspace: np.ndarray,
        singular_values: Optional[np.ndarray] = None,
    ) -> None:
        """
        Args:
            manifold: Array manifold used to steer
            noise_subspace: Orthonormal noise subspace basis, shape (M, M-P)
            singular_values: Covariance singular values, descending
        """
        self._manifold = manifold
        self._noise_subspace = np.array(noise_subspace, dtype=np.complex128)
        self._noise_subspace.setflags(write=False)
        self._singular_values = singular_values

    @property
    def noise_subspace(self) -> np.ndarray:
        """Noise subspace basis (read-only)."""
        return self._noise_subspace

    @property
    def singular_values(self) -> Optional[np.ndarray]:
        """Covariance singular values in descending order."""
        return self._singular_values

    @staticmethod
    def _invert(denominator: np.ndarray) -> np.ndarray:
        # Exact zeros would divide by zero; floor them to keep output finite
        return 1.0 / np.maximum(denominator, np.finfo(np.float64).tiny)

    def __call__(self, theta: float) -> float:
        """Pseudospectrum value at angle theta (radians)."""
        projection = self._manifold(theta).conj() @ self._noise_subspace
        return float(self._invert(np.sum(np.abs(projection) ** 2)))

    def evaluate(self, angles: Sequence[float]) -> np.ndarray:
        """Pseudospectrum values at several angles."""
        steering = self._manifold.matrix(angles)  # (M, N)
        projection = steering.conj().T @ self._noise_subspace  # (N, M-P)
        return self._invert(np.sum(np.abs(projection) ** 2, axis=1))


@dataclass
class MUSICResult:
    """Result of a MUSIC run over an angle grid."""

    angles: List[float]  # Estimated source angles, ascending
    grid: np.ndarray  # Angles at which the spectrum was sampled
    spectrum: np.ndarray  # Pseudospectrum values on the grid
    singular_values: np.ndarray  # Covariance singular values, descending

    @property
    def angles_deg(self) -> List[float]:
        """Estimated angles in degrees."""
        return [float(np.degrees(a)) for a in self.angles]

    @property
    def spectrum_db(self) -> np.ndarray:
        """Pseudospectrum in dB."""
        return linear_to_db(self.spectrum)

    @property
    def num_sources(self) -> int:
        """Number of detected sources."""
        return len(self.angles)


class MUSICEstimator:
    """
    MUSIC (MUltiple SIgnal Classification) direction of arrival estimator.

    Algorithm:
        1. Accumulate R = sum_k y(t_k) y(t_k)^H over K snapshots
        2. Decompose R (SVD, descending singular values)
        3. Keep the last M-P left singular vectors as noise subspace Un
        4. Return p(theta) = 1 / ||a(theta)^H Un||^2

    At a true source angle the steering vector is (ideally) orthogonal to
    the noise subspace, so the pseudospectrum peaks sharply there.

    Example:
        estimator = MUSICEstimator(sim)
        spectrum = estimator.pseudospectrum(sample_rate=2e6, num_snapshots=1000)
        peaks = find_peaks(spectrum, np.arange(0, 2 * np.pi, 0.01), n=2)
    """

    def __init__(self, simulation: Simulation, num_sources: Optional[int] = None) -> None:
        """
        Initialize MUSIC estimator.

        Args:
            simulation: Simulation to observe
            num_sources: Signal subspace dimension, defaults to the
                simulation's source count

        Raises:
            InsufficientArrayAperture: If num_sources >= array size
        """
        n_sources = simulation.num_sources if num_sources is None else num_sources
        n_elements = simulation.num_elements
        if n_sources < 1:
            raise ValueError(f"num_sources must be >= 1, got {n_sources}")
        if n_sources >= n_elements:
            raise InsufficientArrayAperture(
                "MUSIC needs fewer sources than array elements",
                operation="music",
                array_size=n_elements,
                num_sources=n_sources,
            )
        self._simulation = simulation
        self._num_sources = n_sources

    @property
    def simulation(self) -> Simulation:
        """Get the observed simulation."""
        return self._simulation

    @property
    def num_sources(self) -> int:
        """Signal subspace dimension."""
        return self._num_sources

    def covariance(self, sample_rate: float, num_snapshots: int) -> np.ndarray:
        """
        Unnormalized sample covariance sum_k y_k y_k^H.

        Args:
            sample_rate: Snapshot sampling frequency in Hz
            num_snapshots: Number of snapshots K

        Returns:
            Hermitian (M, M) matrix
        """
        times = snapshot_times(sample_rate, num_snapshots)
        data = self._simulation.snapshots(times)  # (K, M)
        return data.T @ data.conj()

    def decompose(self, covariance: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Split the covariance eigenbasis into signal and noise parts.

        Returns:
            Tuple of (noise_subspace, singular_values)
        """
        u, s, _ = np.linalg.svd(covariance)
        return u[:, self._num_sources:], s

    def pseudospectrum(self, sample_rate: float, num_snapshots: int) -> Pseudospectrum:
        """
        Run MUSIC and return the pseudospectrum.

        Args:
            sample_rate: Snapshot sampling frequency in Hz
            num_snapshots: Number of snapshots K

        Returns:
            Pseudospectrum callable over angle
        """
        r = self.covariance(sample_rate, num_snapshots)
        noise_subspace, singular_values = self.decompose(r)
        logger.debug(
            f"MUSIC: {num_snapshots} snapshots, noise subspace dimension "
            f"{noise_subspace.shape[1]}, singular values {np.round(singular_values, 3)}"
        )
        return Pseudospectrum(self._simulation.manifold, noise_subspace, singular_values)

    def estimate(
        self,
        sample_rate: float,
        num_snapshots: int,
        grid: Optional[Sequence[float]] = None,
    ) -> MUSICResult:
        """
        Run MUSIC and pick one peak per source on an angle grid.

        Args:
            sample_rate: Snapshot sampling frequency in Hz
            num_snapshots: Number of snapshots K
            grid: Angles to sample, default [0, 2*pi) in 0.01 rad steps

        Returns:
            MUSICResult with the estimated angles and sampled spectrum
        """
        grid = default_music_grid() if grid is None else np.asarray(grid, dtype=np.float64)
        spectrum_fn = self.pseudospectrum(sample_rate, num_snapshots)
        spectrum = spectrum_fn.evaluate(grid)
        angles = _select_peaks(grid, spectrum, self._num_sources, None)
        return MUSICResult(
            angles=angles,
            grid=grid,
            spectrum=spectrum,
            singular_values=spectrum_fn.singular_values,
        )


def music(simulation: Simulation, sample_rate: float, num_snapshots: int) -> Pseudospectrum:
    """
    MUSIC pseudospectrum of a simulation.

    Args:
        simulation: Simulation with fewer sources than array elements
        sample_rate: Snapshot sampling frequency in Hz
        num_snapshots: Number of snapshots K

    Returns:
        Pseudospectrum callable over angle

    Raises:
        InsufficientArrayAperture: If sources >= array elements
    """
    return MUSICEstimator(simulation).pseudospectrum(sample_rate, num_snapshots)


def _evaluate(func: Callable[[float], float], grid: np.ndarray) -> np.ndarray:
    if isinstance(func, Pseudospectrum):
        return func.evaluate(grid)
    return np.array([float(func(x)) for x in grid], dtype=np.float64)


def _select_peaks(
    grid: np.ndarray,
    values: np.ndarray,
    n: int,
    threshold: Optional[float],
) -> List[float]:
    # Strict interior local maxima; plateaus are not peaks
    candidates = [
        i
        for i in range(1, len(grid) - 1)
        if values[i] > values[i - 1] and values[i] > values[i + 1]
    ]

    if threshold is not None:
        floor = values.min() * threshold
        selected = [i for i in candidates if values[i] > floor]
    else:
        # Min-heap of the n largest peaks seen so far
        heap: List[Tuple[float, int]] = []
        for i in candidates:
            if len(heap) < n:
                heapq.heappush(heap, (values[i], i))
            elif values[i] > heap[0][0]:
                heapq.heapreplace(heap, (values[i], i))
        selected = [i for _, i in heap]

    return sorted(float(grid[i]) for i in selected)


def find_peaks(
    func: Callable[[float], float],
    grid: Sequence[float],
    n: int = 1,
    threshold: Optional[float] = None,
    selection: Optional[PeakSelection] = None,
) -> List[float]:
    """
    Find peaks of a function sampled on an ordered angle grid.

    Only strict local maxima at interior grid points count. With the
    TOP_N policy the n highest peaks are kept; with THRESHOLD every peak
    higher than min(f over grid) * threshold is kept.

    Args:
        func: Function of angle, e.g. a Pseudospectrum
        grid: Ordered angles at which to sample func
        n: Number of peaks for TOP_N
        threshold: Multiple of the spectrum minimum for THRESHOLD
        selection: Policy; defaults to THRESHOLD when a threshold is
            given and TOP_N otherwise

    Returns:
        Angles of the selected peaks, ascending. May hold fewer than n
        entries when fewer peaks exist.
    """
    if selection is None:
        selection = PeakSelection.THRESHOLD if threshold is not None else PeakSelection.TOP_N

    if selection == PeakSelection.THRESHOLD:
        if threshold is None:
            threshold = DEFAULT_PEAK_THRESHOLD
    else:
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        threshold = None

    grid = np.asarray(grid, dtype=np.float64)
    if grid.size == 0:
        return []
    values = _evaluate(func, grid)
    return _select_peaks(grid, values, n, threshold)
