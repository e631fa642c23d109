"""
Signal sources for array simulations.

A source is an arrival angle plus a baseband waveform. Waveforms are
evaluated with an explicit random generator so that any randomness in
the transmitted symbols comes from the stream owned by the simulation.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..core.config import ConfigValidationError, SourceConfig
from ..utils.conversions import db_to_linear

logger = logging.getLogger(__name__)


class Waveform(ABC):
    """Complex baseband waveform, a function of time."""

    @abstractmethod
    def evaluate(self, t: float, rng: np.random.Generator) -> complex:
        """
        Evaluate the waveform.

        Args:
            t: Time in seconds
            rng: Random generator for any random symbol draws

        Returns:
            Complex baseband amplitude at time t
        """
        pass


class FunctionWaveform(Waveform):
    """Deterministic waveform wrapping a plain function of time."""

    def __init__(self, func: Callable[[float], complex]) -> None:
        self._func = func

    def evaluate(self, t: float, rng: np.random.Generator) -> complex:
        return complex(self._func(t))


class HalfSineTrain(Waveform):
    """
    Half-sine pulse train with random amplitude.

    Each pulse lasts 1/rate seconds. On every evaluation the in-phase and
    quadrature rails get an independent random sign, so
    s(t) = (a + jb) * sin(pi * rate * (t mod T)) with a, b in {-1, +1}.
    """

    def __init__(self, rate: float) -> None:
        """
        Args:
            rate: Pulse rate in Hz
        """
        if rate <= 0:
            raise ConfigValidationError(f"pulse rate must be positive, got {rate}")
        self._rate = rate
        self._period = 1.0 / rate

    @property
    def rate(self) -> float:
        """Get the pulse rate in Hz."""
        return self._rate

    def pulse(self, t: float) -> float:
        """Pulse shape at time t, without the random amplitude."""
        return math.sin(math.pi * self._rate * math.fmod(t, self._period))

    def evaluate(self, t: float, rng: np.random.Generator) -> complex:
        p = self.pulse(t)
        a, b = 2 * rng.integers(0, 2, size=2) - 1
        return complex(a * p, b * p)


@dataclass(frozen=True)
class SignalSource:
    """
    A directional emitter.

    theta is the arrival angle in radians (0 along +X from the array
    reference point, counter-clockwise positive). snr_db is only used by
    simulations with the per-source SNR noise model.
    """

    theta: float
    waveform: Waveform
    snr_db: Optional[float] = None

    def __post_init__(self) -> None:
        """Accept plain callables as waveforms."""
        if not isinstance(self.waveform, Waveform):
            if not callable(self.waveform):
                raise ConfigValidationError(
                    f"waveform must be a Waveform or callable, got {type(self.waveform)}"
                )
            object.__setattr__(self, "waveform", FunctionWaveform(self.waveform))
        if not math.isfinite(self.theta):
            raise ConfigValidationError(f"theta must be finite, got {self.theta}")

    @property
    def snr(self) -> Optional[float]:
        """Linear SNR, or None when no SNR was given."""
        if self.snr_db is None:
            return None
        return float(db_to_linear(self.snr_db))

    def evaluate(self, t: float, rng: np.random.Generator) -> complex:
        """Baseband amplitude transmitted at time t."""
        return self.waveform.evaluate(t, rng)

    @classmethod
    def from_config(cls, config: SourceConfig) -> "SignalSource":
        """Create a half-sine train source from its configuration."""
        return cls(
            theta=config.angle,
            waveform=HalfSineTrain(config.pulse_rate),
            snr_db=config.snr_db,
        )

