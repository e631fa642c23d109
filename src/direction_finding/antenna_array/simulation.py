"""
Simulated array reception.

Composes an antenna array, a carrier frequency, a noise specification
and a set of sources into a generator of noisy array snapshots.
"""

import copy
import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..core.config import ConfigValidationError, ScenarioConfig
from .geometry import SPEED_OF_LIGHT, AntennaArray, ArrayManifold
from .layouts import array_from_config
from .sources import SignalSource

logger = logging.getLogger(__name__)


class NoiseModel(Enum):
    """How receiver noise is specified."""

    DENSITY = "density"  # Simulation-wide noise spectral density N0
    SNR = "snr"  # Per-source SNR relative to a unit-power waveform


class Simulation:
    """
    Noisy snapshot generator for an antenna array.

    The array manifold (one phase-shift function per antenna) is built
    once at construction and depends only on the geometry and the
    carrier wavelength. Every random draw, for noise and for waveform
    symbols, comes from the generator owned by the simulation.

    Noise conventions:
        - noise_density given: each source contributes independent
          circular Gaussian noise of variance N0 / P per antenna, so the
          total noise power per antenna is N0. Sources must not carry
          an SNR.
        - noise_density None: every source must carry snr_db and
          contributes noise of variance 1 / snr per antenna.

    Example:
        array = circular_array(11, 2 * wavelength)
        sim = Simulation(array, 1e9, 0.1, s1, s2, seed=7)
        y = sim.snapshot(0.0)  # complex vector, one entry per antenna
    """

    def __init__(
        self,
        array: AntennaArray,
        carrier_frequency: float,
        noise_density: Optional[float],
        *sources: SignalSource,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Initialize simulation.

        Args:
            array: Receiving antenna array
            carrier_frequency: Carrier frequency in Hz
            noise_density: Noise spectral density N0 per receiver, or None
                to use the per-source SNR convention
            *sources: Signal sources, in order
            seed: Seed for the simulation's random generator
            rng: Random generator to own instead of seeding a new one
        """
        if carrier_frequency <= 0:
            raise ConfigValidationError(
                f"carrier_frequency must be positive, got {carrier_frequency}"
            )
        if not sources:
            raise ConfigValidationError("A simulation needs at least one source")

        if noise_density is None:
            missing = [i for i, s in enumerate(sources) if s.snr_db is None]
            if missing:
                raise ConfigValidationError(
                    f"Sources {missing} have no snr_db and no noise_density was given"
                )
            self._noise_model = NoiseModel.SNR
            noise_powers = [1.0 / s.snr for s in sources]
        else:
            if noise_density < 0:
                raise ConfigValidationError(
                    f"noise_density must be non-negative, got {noise_density}"
                )
            if any(s.snr_db is not None for s in sources):
                raise ConfigValidationError(
                    "Cannot mix a noise_density with per-source snr_db"
                )
            self._noise_model = NoiseModel.DENSITY
            noise_powers = [noise_density / len(sources)] * len(sources)

        self._array = array
        self._carrier_frequency = carrier_frequency
        self._noise_density = noise_density
        self._sources: Tuple[SignalSource, ...] = tuple(sources)
        self._noise_powers = np.array(noise_powers, dtype=np.float64)
        self._rng = rng if rng is not None else np.random.default_rng(seed)

        self._wavelength = SPEED_OF_LIGHT / carrier_frequency
        self._manifold = ArrayManifold(array, self._wavelength)

        # Per-source steering vectors scaled by element gain toward the source
        self._source_responses = [
            self._manifold(s.theta)
            * np.array([a.gain_toward(s.theta) for a in array], dtype=np.float64)
            for s in self._sources
        ]

        logger.debug(
            f"Simulation: {len(array)} elements, {len(sources)} sources, "
            f"fc={carrier_frequency:.4g}Hz, noise model {self._noise_model.value}"
        )

    @classmethod
    def from_config(cls, config: ScenarioConfig) -> "Simulation":
        """
        Build a simulation from a scenario configuration.

        The same seeded generator draws the array jitter and then drives
        the snapshots.
        """
        rng = np.random.default_rng(config.seed)
        wavelength = SPEED_OF_LIGHT / config.carrier_frequency
        array = array_from_config(config.array, wavelength, rng=rng)
        sources = [SignalSource.from_config(s) for s in config.sources]
        noise_density = config.noise_density if config.noise_model == "density" else None
        return cls(array, config.carrier_frequency, noise_density, *sources, rng=rng)

    @property
    def array(self) -> AntennaArray:
        """Get the antenna array."""
        return self._array

    @property
    def carrier_frequency(self) -> float:
        """Get the carrier frequency in Hz."""
        return self._carrier_frequency

    @property
    def wavelength(self) -> float:
        """Get the carrier wavelength in meters."""
        return self._wavelength

    @property
    def noise_model(self) -> NoiseModel:
        """Get the noise convention in use."""
        return self._noise_model

    @property
    def noise_density(self) -> Optional[float]:
        """Get the noise spectral density, None under the SNR convention."""
        return self._noise_density

    @property
    def noise_power(self) -> float:
        """Total noise power per antenna."""
        return float(self._noise_powers.sum())

    @property
    def sources(self) -> Tuple[SignalSource, ...]:
        """Get the sources."""
        return self._sources

    @property
    def num_sources(self) -> int:
        """Number of sources."""
        return len(self._sources)

    @property
    def num_elements(self) -> int:
        """Number of array elements."""
        return len(self._array)

    @property
    def manifold(self) -> ArrayManifold:
        """Get the array manifold."""
        return self._manifold

    def steering_vector(self, theta: float) -> np.ndarray:
        """Manifold vector for arrival angle theta, shape (M,)."""
        return self._manifold(theta)

    def snapshot(self, t: float) -> np.ndarray:
        """
        Signal received by the array at time t.

        Every call draws fresh noise and waveform symbols.

        Args:
            t: Snapshot instant in seconds

        Returns:
            Complex vector with one entry per antenna
        """
        m = len(self._array)
        y = np.zeros(m, dtype=np.complex128)
        for source, response, noise_power in zip(
            self._sources, self._source_responses, self._noise_powers
        ):
            amplitude = source.evaluate(t, self._rng)
            noise = np.sqrt(noise_power / 2) * (
                self._rng.standard_normal(m) + 1j * self._rng.standard_normal(m)
            )
            y += amplitude * response + noise
        return y

    def snapshots(self, times: Sequence[float]) -> np.ndarray:
        """Snapshots at several instants as a (K, M) matrix."""
        return np.array([self.snapshot(t) for t in times], dtype=np.complex128)

    def spawn(self, n: int) -> List["Simulation"]:
        """
        Independent copies of this simulation for concurrent use.

        Each child shares the immutable geometry and manifold and owns a
        random stream spawned from this simulation's generator.
        """
        children = []
        for child_rng in self._rng.spawn(n):
            child = copy.copy(self)
            child._rng = child_rng
            children.append(child)
        return children


def snapshot_times(sample_rate: float, num_snapshots: int) -> np.ndarray:
    """
    Snapshot instants k / fs for k = 0 .. K-1.

    Args:
        sample_rate: Sampling frequency in Hz
        num_snapshots: Number of snapshots K
    """
    if sample_rate <= 0:
        raise ConfigValidationError(f"sample_rate must be positive, got {sample_rate}")
    if num_snapshots < 1:
        raise ConfigValidationError(
            f"num_snapshots must be at least 1, got {num_snapshots}"
        )
    return np.arange(num_snapshots) / sample_rate
