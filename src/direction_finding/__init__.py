"""
Direction Finding - Simulated array direction of arrival estimation

Simulates plane waves from one or more sources impinging on a sensor
array and estimates their directions of arrival.

Estimators:
    - Classical beamformer (CBF): grid scan, single source
    - MUSIC: noise-subspace pseudospectrum, multiple sources

Array layouts:
    - Linear, circular, corner and random, with optional position jitter
    - Any custom set of 2-D/3-D positions plus a reference point
"""

__version__ = "0.1.0"
__author__ = "Direction Finding Team"

from .antenna_array import (
    SPEED_OF_LIGHT,
    Antenna,
    AntennaArray,
    ArrayManifold,
    BeamscanResult,
    ClassicalBeamformer,
    FunctionWaveform,
    HalfSineTrain,
    MUSICEstimator,
    MUSICResult,
    NoiseModel,
    PeakSelection,
    Position,
    Pseudospectrum,
    SignalSource,
    Simulation,
    SphericalPosition,
    Waveform,
    beamwidth,
    cbf,
    circular_array,
    corner_array,
    find_peaks,
    isotropic,
    linear_array,
    manifold_coefficient,
    music,
    origin,
    phase_shift,
    projection,
    random_array,
)
from .core import (
    ConfigValidationError,
    DirectionFindingError,
    InsufficientArrayAperture,
    ScenarioConfig,
    UnsupportedConfiguration,
)

__all__ = [
    # Geometry
    "SPEED_OF_LIGHT",
    "Position",
    "SphericalPosition",
    "Antenna",
    "AntennaArray",
    "ArrayManifold",
    "isotropic",
    "origin",
    "projection",
    "phase_shift",
    "manifold_coefficient",
    # Layouts
    "linear_array",
    "circular_array",
    "corner_array",
    "random_array",
    # Sources and simulation
    "Waveform",
    "FunctionWaveform",
    "HalfSineTrain",
    "SignalSource",
    "NoiseModel",
    "Simulation",
    # Estimators
    "ClassicalBeamformer",
    "BeamscanResult",
    "cbf",
    "beamwidth",
    "MUSICEstimator",
    "MUSICResult",
    "Pseudospectrum",
    "PeakSelection",
    "music",
    "find_peaks",
    # Configuration and errors
    "ScenarioConfig",
    "ConfigValidationError",
    "DirectionFindingError",
    "UnsupportedConfiguration",
    "InsufficientArrayAperture",
    # Version
    "__version__",
]
