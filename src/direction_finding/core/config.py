"""
Configuration management for direction finding scenarios.

Handles array layout, source and estimator settings, and persistence
of scenario descriptions.
"""

import json
import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)

VALID_LAYOUTS = ("linear", "circular", "corner", "random")


class ConfigValidationError(ValueError):
    """Raised when configuration values are invalid."""

    pass


@dataclass
class SourceConfig:
    """Configuration for a single emitting source."""

    angle: float = 0.0  # Arrival angle in radians
    pulse_rate: float = 1e6  # Half-sine pulse rate in Hz
    snr_db: Optional[float] = None  # Only used with the "snr" noise model

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        if not math.isfinite(self.angle):
            raise ConfigValidationError(f"angle must be finite, got {self.angle}")
        if self.pulse_rate <= 0:
            raise ConfigValidationError(
                f"pulse_rate must be positive, got {self.pulse_rate}"
            )


@dataclass
class ArrayLayoutConfig:
    """
    Configuration for the array layout.

    `dimension` is expressed in wavelengths at the carrier frequency and
    means element spacing for linear arrays, radius for circular arrays,
    side length for corner arrays and position standard deviation for
    random arrays.
    """

    layout: str = "linear"  # "linear", "circular", "corner", "random"
    num_elements: int = 11
    dimension: float = 2.0  # In wavelengths, see class docstring
    jitter_variance: float = 0.0  # Positional jitter variance in m^2
    reference: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        if self.layout not in VALID_LAYOUTS:
            raise ConfigValidationError(
                f"layout must be one of {VALID_LAYOUTS}, got {self.layout}"
            )
        if self.num_elements < 1:
            raise ConfigValidationError(
                f"num_elements must be at least 1, got {self.num_elements}"
            )
        if self.layout == "corner" and self.num_elements != 4:
            raise ConfigValidationError(
                f"corner layout has exactly 4 elements, got {self.num_elements}"
            )
        if self.dimension <= 0:
            raise ConfigValidationError(
                f"dimension must be positive, got {self.dimension}"
            )
        if self.jitter_variance < 0:
            raise ConfigValidationError(
                f"jitter_variance must be non-negative, got {self.jitter_variance}"
            )
        if len(self.reference) not in (2, 3):
            raise ConfigValidationError(
                f"reference must have 2 or 3 coordinates, got {len(self.reference)}"
            )


@dataclass
class ScenarioConfig:
    """Complete description of a simulated direction finding run."""

    name: str = "default"
    carrier_frequency: float = 1e9  # Hz
    noise_model: str = "density"  # "density" or "snr"
    noise_density: float = 0.01  # N0 per receiver, "density" model only
    sample_rate: float = 2.00013e9  # Snapshot rate in Hz
    num_snapshots: int = 100
    array: ArrayLayoutConfig = field(default_factory=ArrayLayoutConfig)
    sources: List[SourceConfig] = field(default_factory=lambda: [SourceConfig()])

    # Angle grid scanned by the estimators
    scan_start: float = -math.pi / 2
    scan_stop: float = math.pi / 2
    scan_points: int = 100

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        self._validate()

    def _validate(self) -> None:
        if self.carrier_frequency <= 0:
            raise ConfigValidationError(
                f"carrier_frequency must be positive, got {self.carrier_frequency}"
            )
        if self.noise_model not in ("density", "snr"):
            raise ConfigValidationError(
                f"noise_model must be 'density' or 'snr', got {self.noise_model}"
            )
        if self.noise_density < 0:
            raise ConfigValidationError(
                f"noise_density must be non-negative, got {self.noise_density}"
            )
        if self.sample_rate <= 0:
            raise ConfigValidationError(
                f"sample_rate must be positive, got {self.sample_rate}"
            )
        if self.num_snapshots < 1:
            raise ConfigValidationError(
                f"num_snapshots must be at least 1, got {self.num_snapshots}"
            )
        if self.scan_points < 3:
            raise ConfigValidationError(
                f"scan_points must be at least 3, got {self.scan_points}"
            )
        if self.scan_stop <= self.scan_start:
            raise ConfigValidationError(
                f"scan_stop ({self.scan_stop}) must exceed scan_start ({self.scan_start})"
            )
        if not self.sources:
            raise ConfigValidationError("at least one source is required")
        if self.noise_model == "snr" and any(s.snr_db is None for s in self.sources):
            raise ConfigValidationError(
                "noise_model 'snr' requires snr_db on every source"
            )
        if self.noise_model == "density" and any(
            s.snr_db is not None for s in self.sources
        ):
            raise ConfigValidationError(
                "noise_model 'density' cannot be combined with per-source snr_db"
            )

    def scan_grid(self) -> np.ndarray:
        """Angle grid (radians) scanned by the estimators."""
        return np.linspace(self.scan_start, self.scan_stop, self.scan_points)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioConfig":
        """Create configuration from dictionary."""
        data = dict(data)
        if "array" in data:
            data["array"] = ArrayLayoutConfig(**data["array"])
        if "sources" in data:
            data["sources"] = [SourceConfig(**s) for s in data["sources"]]
        return cls(**data)

    def save(self, path: str) -> bool:
        """Save configuration to JSON file.

        Args:
            path: File path to save configuration to

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            with open(path, "w") as f:
                json.dump(self.to_dict(), f, indent=2)
            logger.info(f"Scenario saved to {path}")
            return True
        except (OSError, IOError) as e:
            logger.error(f"Failed to save scenario to {path}: {e}")
            return False
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize scenario: {e}")
            return False

    @classmethod
    def load(cls, path: str) -> Optional["ScenarioConfig"]:
        """Load configuration from JSON file.

        Args:
            path: File path to load configuration from

        Returns:
            ScenarioConfig instance or None if loading failed
        """
        try:
            with open(path, "r") as f:
                data = json.load(f)
            config = cls.from_dict(data)
            logger.info(f"Scenario loaded from {path}")
            return config
        except FileNotFoundError:
            logger.warning(f"Scenario file not found: {path}")
            return None
        except (OSError, IOError) as e:
            logger.error(f"Failed to read scenario from {path}: {e}")
            return None
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in scenario file {path}: {e}")
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Invalid scenario format in {path}: {e}")
            return None


# Preset scenarios
PRESETS: Dict[str, ScenarioConfig] = {}


def create_preset_cbf_linear() -> ScenarioConfig:
    """Single source at pi/8 seen by an 11-element linear array."""
    return ScenarioConfig(
        name="cbf_linear",
        noise_density=0.01,
        sample_rate=2.00013e9,
        num_snapshots=100,
        array=ArrayLayoutConfig(layout="linear", num_elements=11, dimension=2.0),
        sources=[SourceConfig(angle=math.pi / 8)],
    )


def create_preset_cbf_circular() -> ScenarioConfig:
    """Single source at pi/8 seen by an 11-element circular array."""
    return ScenarioConfig(
        name="cbf_circular",
        noise_density=0.01,
        sample_rate=2.00013e9,
        num_snapshots=100,
        array=ArrayLayoutConfig(
            layout="circular", num_elements=11, dimension=2.0, jitter_variance=1e-4
        ),
        sources=[SourceConfig(angle=math.pi / 8)],
    )


def create_preset_music_circular() -> ScenarioConfig:
    """Two sources resolved by MUSIC on an 11-element circular array."""
    return ScenarioConfig(
        name="music_circular",
        noise_density=0.1,
        sample_rate=2.00001e6,
        num_snapshots=1000,
        array=ArrayLayoutConfig(layout="circular", num_elements=11, dimension=2.0),
        sources=[SourceConfig(angle=0.95), SourceConfig(angle=6.0)],
        scan_start=0.0,
        scan_stop=2 * math.pi - 0.01,
        scan_points=629,
    )


def create_preset_music_linear() -> ScenarioConfig:
    """Two sources resolved by MUSIC on an 11-element linear array."""
    return ScenarioConfig(
        name="music_linear",
        noise_density=0.01,
        sample_rate=2.00001e6,
        num_snapshots=1000,
        array=ArrayLayoutConfig(
            layout="linear", num_elements=11, dimension=2.0, jitter_variance=1e-3
        ),
        sources=[SourceConfig(angle=5.0), SourceConfig(angle=1.5)],
        scan_start=-math.pi / 2,
        scan_stop=math.pi / 2,
        scan_points=315,
    )


def create_preset_music_corner() -> ScenarioConfig:
    """Two sources resolved by MUSIC on a 4-element corner array."""
    return ScenarioConfig(
        name="music_corner",
        noise_density=0.1,
        sample_rate=2.000013e6,
        num_snapshots=100,
        array=ArrayLayoutConfig(
            layout="corner", num_elements=4, dimension=2.0, jitter_variance=1e-3
        ),
        sources=[SourceConfig(angle=6.0), SourceConfig(angle=math.pi / 2.1)],
        scan_start=0.0,
        scan_stop=2 * math.pi - 0.01,
        scan_points=629,
    )


def create_preset_music_random() -> ScenarioConfig:
    """Two sources resolved by MUSIC on a 5-element random array."""
    return ScenarioConfig(
        name="music_random",
        noise_density=0.01,
        sample_rate=2.00001e6,
        num_snapshots=1000,
        array=ArrayLayoutConfig(layout="random", num_elements=5, dimension=3.3),
        sources=[SourceConfig(angle=0.95), SourceConfig(angle=6.0)],
        scan_start=0.0,
        scan_stop=2 * math.pi - 0.01,
        scan_points=629,
    )


# Register presets
PRESETS["cbf_linear"] = create_preset_cbf_linear()
PRESETS["cbf_circular"] = create_preset_cbf_circular()
PRESETS["music_circular"] = create_preset_music_circular()
PRESETS["music_linear"] = create_preset_music_linear()
PRESETS["music_corner"] = create_preset_music_corner()
PRESETS["music_random"] = create_preset_music_random()


def get_preset(name: str) -> Optional[ScenarioConfig]:
    """Get a preset scenario by name."""
    return PRESETS.get(name)


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())
