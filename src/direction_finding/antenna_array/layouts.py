"""
Array layout factories.

Every layout reduces to a list of element positions plus a reference
point, with optional Gaussian jitter on each element's planar
coordinates to model placement errors.
"""

import logging
import math
from typing import Optional

import numpy as np

from ..core.config import ArrayLayoutConfig, ConfigValidationError
from .geometry import Antenna, AntennaArray, GainPattern, Position, isotropic, origin

logger = logging.getLogger(__name__)


def _jitter(
    rng: Optional[np.random.Generator], variance: float, size: int
) -> np.ndarray:
    """Gaussian position errors with the given variance, shape (size, 2)."""
    if variance < 0:
        raise ConfigValidationError(f"jitter variance must be non-negative, got {variance}")
    if variance == 0:
        return np.zeros((size, 2))
    rng = rng if rng is not None else np.random.default_rng()
    return math.sqrt(variance) * rng.standard_normal((size, 2))


def _build(
    xy: np.ndarray,
    reference: Position,
    gain: GainPattern,
) -> AntennaArray:
    antennas = [Antenna.at(float(x), float(y), gain=gain) for x, y in xy]
    return AntennaArray(antennas=tuple(antennas), reference=reference)


def linear_array(
    num_elements: int,
    spacing: float,
    reference: Optional[Position] = None,
    gain: GainPattern = isotropic,
    sigma2: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> AntennaArray:
    """
    Create a planar linear array along the Y axis, centered on the origin.

    Args:
        num_elements: Number of antennas
        spacing: Element spacing in meters
        reference: Reference point (defaults to the origin)
        gain: Gain pattern shared by all elements
        sigma2: Variance of the Gaussian position jitter (m^2)
        rng: Random generator used for the jitter
    """
    if num_elements < 1:
        raise ConfigValidationError(f"num_elements must be at least 1, got {num_elements}")
    half = spacing * (num_elements - 1) / 2
    ys = np.linspace(-half, half, num_elements)
    xy = np.column_stack([np.zeros(num_elements), ys])
    xy += _jitter(rng, sigma2, num_elements)
    return _build(xy, reference or origin(), gain)


def circular_array(
    num_elements: int,
    radius: float,
    reference: Optional[Position] = None,
    gain: GainPattern = isotropic,
    sigma2: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> AntennaArray:
    """
    Create a planar circular array of `num_elements` antennas.

    The first element sits on +X; the rest follow counter-clockwise at
    equal angular steps.

    Args:
        num_elements: Number of antennas
        radius: Circle radius in meters
        reference: Reference point (defaults to the origin)
        gain: Gain pattern shared by all elements
        sigma2: Variance of the Gaussian position jitter (m^2)
        rng: Random generator used for the jitter
    """
    if num_elements < 1:
        raise ConfigValidationError(f"num_elements must be at least 1, got {num_elements}")
    angles = np.arange(num_elements) * 2 * math.pi / num_elements
    xy = np.column_stack([radius * np.cos(angles), radius * np.sin(angles)])
    xy += _jitter(rng, sigma2, num_elements)
    return _build(xy, reference or origin(), gain)


def corner_array(
    side: float,
    reference: Optional[Position] = None,
    gain: GainPattern = isotropic,
    sigma2: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> AntennaArray:
    """Four antennas on the corners of a square of side `side`."""
    return circular_array(
        4, side / math.sqrt(2), reference, gain=gain, sigma2=sigma2, rng=rng
    )


def random_array(
    num_elements: int,
    sigma2: float = 1.0,
    reference: Optional[Position] = None,
    gain: GainPattern = isotropic,
    rng: Optional[np.random.Generator] = None,
) -> AntennaArray:
    """
    Antennas at Gaussian random positions around the reference point.

    Args:
        num_elements: Number of antennas
        sigma2: Variance of the positions around the reference (m^2)
        reference: Reference point (defaults to the origin)
        gain: Gain pattern shared by all elements
        rng: Random generator for the positions
    """
    if num_elements < 1:
        raise ConfigValidationError(f"num_elements must be at least 1, got {num_elements}")
    reference = reference or origin()
    xy = np.tile([reference.x, reference.y], (num_elements, 1)).astype(np.float64)
    xy += _jitter(rng, sigma2, num_elements)
    return _build(xy, reference, gain)


def array_from_config(
    config: ArrayLayoutConfig,
    wavelength: float,
    rng: Optional[np.random.Generator] = None,
) -> AntennaArray:
    """
    Build the array described by a layout configuration.

    Args:
        config: Layout configuration, dimensions in wavelengths
        wavelength: Carrier wavelength in meters
        rng: Random generator for jitter and random layouts
    """
    reference = Position.from_array(config.reference)
    size = config.dimension * wavelength

    if config.layout == "linear":
        if config.dimension > 0.5:
            logger.warning(
                f"Element spacing ({size:.3f}m) > lambda/2 ({wavelength / 2:.3f}m). "
                "Grating lobe ambiguity may occur."
            )
        return linear_array(
            config.num_elements, size, reference, sigma2=config.jitter_variance, rng=rng
        )
    elif config.layout == "circular":
        return circular_array(
            config.num_elements, size, reference, sigma2=config.jitter_variance, rng=rng
        )
    elif config.layout == "corner":
        return corner_array(size, reference, sigma2=config.jitter_variance, rng=rng)
    elif config.layout == "random":
        return random_array(config.num_elements, size ** 2, reference, rng=rng)
    raise ConfigValidationError(f"Unknown layout: {config.layout}")
