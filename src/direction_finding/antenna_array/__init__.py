"""
Antenna Array Module for direction finding.

Provides the simulation-and-estimation engine:
- Array geometry with a reference point and per-element phase model
- Layout factories (linear, circular, corner, random)
- Directional sources with baseband waveforms
- Noisy snapshot simulation
- Classical beamformer (single source) and beamwidth
- MUSIC pseudospectrum and peak finding

Example:
    import numpy as np
    from direction_finding.antenna_array import (
        HalfSineTrain,
        SignalSource,
        Simulation,
        circular_array,
        find_peaks,
        music,
    )

    wavelength = 299792458.0 / 1e9
    array = circular_array(11, 2 * wavelength)
    s1 = SignalSource(0.95, HalfSineTrain(1e6))
    s2 = SignalSource(6.0, HalfSineTrain(1e6))
    sim = Simulation(array, 1e9, 0.1, s1, s2, seed=1)

    spectrum = music(sim, 2.00001e6, 1000)
    peaks = find_peaks(spectrum, np.arange(0, 2 * np.pi, 0.01), n=2)
"""

from .beamformer import (
    BEAMWIDTH_FACTOR,
    BeamscanResult,
    ClassicalBeamformer,
    beamwidth,
    cbf,
    default_scan_angles,
)
from .doa import (
    DEFAULT_PEAK_THRESHOLD,
    MUSICEstimator,
    MUSICResult,
    PeakSelection,
    Pseudospectrum,
    default_music_grid,
    find_peaks,
    music,
)
from .geometry import (
    ANGLE_TOLERANCE,
    SPEED_OF_LIGHT,
    Antenna,
    AntennaArray,
    ArrayManifold,
    Position,
    SphericalPosition,
    isotropic,
    manifold_coefficient,
    origin,
    phase_shift,
    projection,
)
from .layouts import (
    array_from_config,
    circular_array,
    corner_array,
    linear_array,
    random_array,
)
from .simulation import NoiseModel, Simulation, snapshot_times
from .sources import FunctionWaveform, HalfSineTrain, SignalSource, Waveform

__all__ = [
    # Constants
    "SPEED_OF_LIGHT",
    "ANGLE_TOLERANCE",
    "BEAMWIDTH_FACTOR",
    "DEFAULT_PEAK_THRESHOLD",
    # Geometry
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
    "array_from_config",
    # Sources
    "Waveform",
    "FunctionWaveform",
    "HalfSineTrain",
    "SignalSource",
    # Simulation
    "NoiseModel",
    "Simulation",
    "snapshot_times",
    # Classical beamformer
    "ClassicalBeamformer",
    "BeamscanResult",
    "cbf",
    "beamwidth",
    "default_scan_angles",
    # MUSIC
    "MUSICEstimator",
    "MUSICResult",
    "Pseudospectrum",
    "PeakSelection",
    "music",
    "find_peaks",
    "default_music_grid",
]
