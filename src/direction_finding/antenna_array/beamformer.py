"""
Classical beamforming for direction of arrival estimation.

Provides the conventional (Bartlett) beamformer scan over an angle
grid and the closed-form array beamwidth.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from ..core.exceptions import UnsupportedConfiguration
from ..utils.conversions import linear_to_db
from .geometry import SPEED_OF_LIGHT, AntennaArray, ArrayManifold
from .simulation import Simulation, snapshot_times

logger = logging.getLogger(__name__)

# Default CBF scan grid
DEFAULT_SCAN_POINTS = 100

# Half-power beamwidth of a uniform aperture, in units of lambda / aperture
BEAMWIDTH_FACTOR = 0.89


def default_scan_angles() -> np.ndarray:
    """100 angles uniformly spaced on [-pi/2, pi/2]."""
    return np.linspace(-np.pi / 2, np.pi / 2, DEFAULT_SCAN_POINTS)


@dataclass
class BeamscanResult:
    """Output of a beamformer scan."""

    angles: np.ndarray  # Scanned angles in radians
    powers: np.ndarray  # Accumulated beam energy per angle
    peak_angle: float  # Angle with the largest energy
    peak_power: float  # Energy at peak_angle
    num_snapshots: int  # Snapshots accumulated

    @property
    def peak_angle_deg(self) -> float:
        """Peak angle in degrees."""
        return float(np.degrees(self.peak_angle))

    @property
    def powers_db(self) -> np.ndarray:
        """Scan energies in dB."""
        return linear_to_db(self.powers)


class ClassicalBeamformer:
    """
    Classical beamformer (CBF) direction finder.

    Steers the array over a grid of candidate angles and picks the one
    that collects the most energy over K snapshots:

        power(theta) = sum_k |a(theta)^H y(t_k)|^2

    The scan is a plain grid search, so resolution is limited by the grid
    spacing. Only single-source simulations are supported.

    Example:
        cbf = ClassicalBeamformer(sim)
        angle = cbf.estimate(sample_rate=2e9, num_snapshots=100)
    """

    def __init__(self, simulation: Simulation) -> None:
        """
        Initialize beamformer.

        Args:
            simulation: Single-source simulation to observe

        Raises:
            UnsupportedConfiguration: If the simulation does not have
                exactly one source
        """
        if simulation.num_sources != 1:
            raise UnsupportedConfiguration(
                "Classical beamforming supports exactly one source",
                operation="cbf",
                array_size=simulation.num_elements,
                num_sources=simulation.num_sources,
            )
        self._simulation = simulation

    @property
    def simulation(self) -> Simulation:
        """Get the observed simulation."""
        return self._simulation

    @property
    def manifold(self) -> ArrayManifold:
        """Get the array manifold."""
        return self._simulation.manifold

    def scan(
        self,
        sample_rate: float,
        num_snapshots: int,
        angles: Optional[Sequence[float]] = None,
    ) -> BeamscanResult:
        """
        Scan the beam across candidate angles.

        The K snapshots at t_k = k / fs are drawn once and shared by every
        candidate angle.

        Args:
            sample_rate: Snapshot sampling frequency in Hz
            num_snapshots: Number of snapshots K
            angles: Candidate angles in radians, default 100 points on
                [-pi/2, pi/2]

        Returns:
            BeamscanResult with the energy at every angle
        """
        angles = default_scan_angles() if angles is None else np.asarray(angles, dtype=np.float64)
        if angles.size == 0:
            raise ValueError("angles must not be empty")

        times = snapshot_times(sample_rate, num_snapshots)
        data = self._simulation.snapshots(times)  # (K, M)

        # a^H y for every snapshot and candidate angle, shape (K, N)
        steering = self.manifold.matrix(angles)
        outputs = data @ steering.conj()
        powers = np.sum(np.abs(outputs) ** 2, axis=0)

        # argmax keeps the first maximum in grid order
        peak_idx = int(np.argmax(powers))

        logger.debug(
            f"CBF scanned {angles.size} angles over {num_snapshots} snapshots, "
            f"peak at {angles[peak_idx]:.4f} rad"
        )

        return BeamscanResult(
            angles=angles,
            powers=powers,
            peak_angle=float(angles[peak_idx]),
            peak_power=float(powers[peak_idx]),
            num_snapshots=num_snapshots,
        )

    def estimate(
        self,
        sample_rate: float,
        num_snapshots: int,
        angles: Optional[Sequence[float]] = None,
    ) -> float:
        """Estimated arrival angle in radians."""
        return self.scan(sample_rate, num_snapshots, angles).peak_angle


def cbf(
    simulation: Simulation,
    sample_rate: float,
    num_snapshots: int,
    angles: Optional[Sequence[float]] = None,
) -> float:
    """
    Estimate the arrival angle of a single source by classical beamforming.

    Args:
        simulation: Simulation with exactly one source
        sample_rate: Snapshot sampling frequency in Hz
        num_snapshots: Number of snapshots K
        angles: Candidate angles, default 100 points on [-pi/2, pi/2]

    Returns:
        Estimated angle in radians

    Raises:
        UnsupportedConfiguration: If the simulation has more than one source
    """
    return ClassicalBeamformer(simulation).estimate(sample_rate, num_snapshots, angles)


def beamwidth(
    target: Union[Simulation, AntennaArray],
    frequency: Optional[float] = None,
    speed: float = SPEED_OF_LIGHT,
) -> float:
    """
    Beamwidth of an array in radians.

    Computed as 0.89 * (c / f) / aperture, where the aperture is the
    extent of the elements along the array's principal axis. The formula
    is exact for linear arrays and an approximation for other layouts.

    Args:
        target: Simulation or antenna array
        frequency: Frequency in Hz, defaults to the simulation's carrier
        speed: Propagation speed in m/s

    Returns:
        Beamwidth in radians
    """
    if isinstance(target, Simulation):
        array = target.array
        if frequency is None:
            frequency = target.carrier_frequency
    else:
        array = target

    if frequency is None:
        raise ValueError("frequency is required when passing an AntennaArray")
    if frequency <= 0:
        raise ValueError(f"frequency must be positive, got {frequency}")

    aperture = array.aperture()
    if aperture <= 0:
        raise ValueError("Beamwidth is undefined for an array with zero aperture")

    return BEAMWIDTH_FACTOR * (speed / frequency) / aperture
