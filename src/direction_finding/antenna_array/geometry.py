"""
Array geometry and phase model.

Defines element positions, antennas, arrays with a reference point, and
the per-element phase shift seen by a plane wave arriving from a given
angle.

Angles follow the planar convention used throughout the package: an
arrival angle of 0 points along +X from the array reference point and
angles increase counter-clockwise.
"""

import logging
import math
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..core.config import ConfigValidationError
from ..utils.conversions import wrap_angle

logger = logging.getLogger(__name__)

# Speed of light in m/s
SPEED_OF_LIGHT = 299792458.0

# Angles closer than this to an axis use the axis-aligned closed forms
ANGLE_TOLERANCE = 1e-9

GainPattern = Callable[[float, float], float]


@dataclass(frozen=True)
class SphericalPosition:
    """
    Position in spherical coordinates.

    r is the radius in meters, theta the polar angle from +Z and phi
    the azimuth from +X in the X-Y plane, both in radians.
    """

    r: float = 0.0
    theta: float = 0.0
    phi: float = 0.0

    def to_cartesian(self) -> "Position":
        """Convert to a cartesian Position."""
        sin_theta = math.sin(self.theta)
        return Position(
            x=self.r * sin_theta * math.cos(self.phi),
            y=self.r * sin_theta * math.sin(self.phi),
            z=self.r * math.cos(self.theta),
        )


@dataclass(frozen=True)
class Position:
    """
    Position of a point in 3D space, in meters.

    Uses a right-handed coordinate system. Planar arrays leave z at 0.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_array(self) -> np.ndarray:
        """Convert to numpy array [x, y, z]."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: Sequence[float]) -> "Position":
        """Create from a sequence of 2 or 3 coordinates."""
        z = float(arr[2]) if len(arr) > 2 else 0.0
        return cls(x=float(arr[0]), y=float(arr[1]), z=z)

    def distance_to(self, other: "Position") -> float:
        """Calculate Euclidean distance to another position."""
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def to_spherical(self) -> SphericalPosition:
        """
        Convert to spherical coordinates.

        Raises:
            ValueError: If the position is the origin, where the polar
                angle is undefined.
        """
        r = math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)
        if r == 0.0:
            raise ValueError("Spherical angles are undefined at the origin")
        return SphericalPosition(
            r=r,
            theta=math.acos(max(-1.0, min(1.0, self.z / r))),
            phi=math.atan2(self.y, self.x),
        )


def origin() -> Position:
    """The origin of the coordinate system."""
    return Position()


def isotropic(theta: float, phi: float) -> float:
    """Isotropic gain pattern, unity in every direction."""
    return 1.0


@dataclass(frozen=True)
class Antenna:
    """A single array element: a position and a gain pattern."""

    position: Position = field(default_factory=Position)
    gain: GainPattern = isotropic

    @classmethod
    def at(
        cls, x: float, y: float, z: float = 0.0, gain: GainPattern = isotropic
    ) -> "Antenna":
        """Create an antenna at the given coordinates."""
        return cls(position=Position(x, y, z), gain=gain)

    @property
    def x(self) -> float:
        return self.position.x

    @property
    def y(self) -> float:
        return self.position.y

    @property
    def z(self) -> float:
        return self.position.z

    def gain_toward(self, azimuth: float, polar: float = math.pi / 2) -> float:
        """Gain toward a direction given by azimuth and polar angle."""
        return float(self.gain(polar, azimuth))


@dataclass(frozen=True)
class AntennaArray:
    """
    Ordered collection of antennas plus a reference point.

    The order of the antennas fixes the indexing of snapshot vectors.
    All phase computations are relative to `reference`, not the origin.
    """

    antennas: Tuple[Antenna, ...]
    reference: Position = field(default_factory=Position)

    def __post_init__(self) -> None:
        """Freeze the element list and validate it."""
        antennas = tuple(
            a if isinstance(a, Antenna) else Antenna(position=a)
            for a in self.antennas
        )
        object.__setattr__(self, "antennas", antennas)
        if len(antennas) < 1:
            raise ConfigValidationError("An antenna array needs at least one element")

    @classmethod
    def from_positions(
        cls,
        positions: Sequence[Union[Position, Sequence[float]]],
        reference: Optional[Position] = None,
        gain: GainPattern = isotropic,
    ) -> "AntennaArray":
        """Build an array from element positions sharing one gain pattern."""
        antennas = [
            Antenna(
                position=p if isinstance(p, Position) else Position.from_array(p),
                gain=gain,
            )
            for p in positions
        ]
        return cls(antennas=tuple(antennas), reference=reference or origin())

    def __len__(self) -> int:
        return len(self.antennas)

    def __getitem__(self, index: int) -> Antenna:
        return self.antennas[index]

    def __iter__(self) -> Iterator[Antenna]:
        return iter(self.antennas)

    @property
    def num_elements(self) -> int:
        """Number of array elements."""
        return len(self.antennas)

    def get_position_matrix(self) -> np.ndarray:
        """Get element positions as Mx3 matrix."""
        return np.array([a.position.to_array() for a in self.antennas], dtype=np.float64)

    def principal_axis(self) -> np.ndarray:
        """
        Unit vector along which the element positions spread the most.

        Falls back to +X when all elements coincide.
        """
        positions = self.get_position_matrix()
        centered = positions - positions.mean(axis=0)
        if len(positions) < 2 or not np.any(centered):
            return np.array([1.0, 0.0, 0.0])
        _, _, vt = np.linalg.svd(centered)
        return vt[0]

    def aperture(self) -> float:
        """Extent of the element positions along the principal axis."""
        projections = self.get_position_matrix() @ self.principal_axis()
        return float(projections.max() - projections.min())

    def describe(self) -> str:
        """Plain-text listing of the elements and reference point."""
        lines: List[str] = [f"An antenna array with {len(self)} elements."]
        for i, antenna in enumerate(self.antennas, start=1):
            lines.append(f"   {i}: x = {antenna.x}, y = {antenna.y}, z = {antenna.z}")
        ref = self.reference
        lines.append(f"Reference point: x = {ref.x}, y = {ref.y}, z = {ref.z}")
        return "\n".join(lines)


def _near(angle: float, target: float) -> bool:
    return abs(angle - target) < ANGLE_TOLERANCE


def _wavefront_is_vertical(theta: float) -> bool:
    """Wavefront is vertical when the wave travels along the X axis."""
    return _near(theta, 0.0) or _near(theta, math.pi) or _near(theta, 2 * math.pi)


def _wavefront_is_horizontal(theta: float) -> bool:
    """Wavefront is horizontal when the wave travels along the Y axis."""
    return _near(theta, math.pi / 2) or _near(theta, 3 * math.pi / 2)


def projection(antenna: Antenna, reference: Position, theta: float) -> Position:
    """
    Project an antenna onto the wavefront of a source at angle `theta`.

    The wavefront is the line through `reference` perpendicular to the
    arrival direction, i.e. with direction angle theta + pi/2.
    """
    theta = wrap_angle(theta)

    if _wavefront_is_vertical(theta):
        return Position(reference.x, antenna.y, reference.z)
    if _wavefront_is_horizontal(theta):
        return Position(antenna.x, reference.y, reference.z)

    # m: wavefront slope, n: slope of the perpendicular through the antenna
    m = math.tan(theta + math.pi / 2)
    n = -1.0 / m
    x = (m * reference.x - reference.y - n * antenna.x + antenna.y) / (m - n)
    y = m * (x - reference.x) + reference.y
    return Position(x, y, reference.z)


def phase_shift(
    antenna: Antenna, reference: Position, theta: float, wavelength: float
) -> float:
    """
    Phase shift of `antenna` relative to `reference` for a plane wave.

    Args:
        antenna: Array element
        reference: Array reference point
        theta: Arrival angle in radians
        wavelength: Carrier wavelength in meters

    Returns:
        Carrier phase in radians. Positive when the antenna lies on the
        source side of the wavefront through the reference point, so the
        wave reaches it first.
    """
    if wavelength <= 0:
        raise ValueError(f"wavelength must be positive, got {wavelength}")

    theta = wrap_angle(theta)
    proj = projection(antenna, reference, theta)
    distance = math.hypot(antenna.x - proj.x, antenna.y - proj.y)
    shift = distance * 2 * math.pi / wavelength

    if _near(theta, 0.0) or _near(theta, 2 * math.pi):
        return shift if antenna.x > reference.x else -shift
    if _near(theta, math.pi):
        return shift if antenna.x < reference.x else -shift
    if _near(theta, math.pi / 2):
        return shift if antenna.y > reference.y else -shift
    if _near(theta, 3 * math.pi / 2):
        return shift if antenna.y < reference.y else -shift

    # Compare against the wavefront line evaluated at the antenna's x
    m = math.tan(theta + math.pi / 2)
    threshold = m * (antenna.x - reference.x) + reference.y
    if theta < math.pi:
        return shift if antenna.y > threshold else -shift
    return shift if antenna.y < threshold else -shift


def manifold_coefficient(
    antenna: Antenna, reference: Position, theta: float, wavelength: float
) -> complex:
    """Unit-modulus steering coefficient exp(j * phase_shift)."""
    return complex(np.exp(1j * phase_shift(antenna, reference, theta, wavelength)))


class ArrayManifold:
    """
    Array manifold of an antenna array at a fixed wavelength.

    Holds one phase-shift function per antenna, built once and reused
    for every steering vector evaluation.

    Example:
        manifold = ArrayManifold(array, wavelength=0.3)
        a = manifold(np.pi / 8)  # complex steering vector, shape (M,)
    """

    def __init__(self, array: AntennaArray, wavelength: float) -> None:
        """
        Initialize the manifold.

        Args:
            array: Antenna array
            wavelength: Carrier wavelength in meters
        """
        if wavelength <= 0:
            raise ConfigValidationError(
                f"wavelength must be positive, got {wavelength}"
            )
        self._array = array
        self._wavelength = wavelength
        self._phase_shifts: Tuple[Callable[[float], complex], ...] = tuple(
            partial(
                manifold_coefficient,
                antenna,
                array.reference,
                wavelength=wavelength,
            )
            for antenna in array
        )
        logger.debug(
            f"Built manifold for {len(array)} elements at lambda={wavelength:.4f}m"
        )

    @property
    def array(self) -> AntennaArray:
        """Get the antenna array."""
        return self._array

    @property
    def wavelength(self) -> float:
        """Get the wavelength in meters."""
        return self._wavelength

    @property
    def phase_shifts(self) -> Tuple[Callable[[float], complex], ...]:
        """Per-antenna functions mapping angle to steering coefficient."""
        return self._phase_shifts

    def __len__(self) -> int:
        return len(self._phase_shifts)

    def __call__(self, theta: float) -> np.ndarray:
        """Steering vector for arrival angle `theta`, shape (M,)."""
        return np.array([f(theta) for f in self._phase_shifts], dtype=np.complex128)

    def matrix(self, angles: Sequence[float]) -> np.ndarray:
        """Steering vectors for several angles as an (M, N) matrix."""
        return np.column_stack([self(theta) for theta in angles])
