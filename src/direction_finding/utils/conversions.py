"""
Unit and angle conversion utilities.
"""

import math
from typing import Union

import numpy as np

# Type alias for numeric types
Numeric = Union[float, int, np.ndarray]

TWO_PI = 2 * math.pi


def db_to_linear(db: Numeric) -> Numeric:
    """
    Convert decibels to linear (power ratio).

    Args:
        db: Value in dB

    Returns:
        Linear value
    """
    return 10 ** (db / 10)


def linear_to_db(linear: Numeric) -> Numeric:
    """
    Convert linear (power ratio) to decibels.

    Args:
        linear: Linear value

    Returns:
        Value in dB
    """
    return 10 * np.log10(linear + 1e-20)


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [0, 2*pi)."""
    wrapped = math.fmod(angle, TWO_PI)
    if wrapped < 0:
        wrapped += TWO_PI
    # fmod of a tiny negative value can round up to exactly 2*pi
    if wrapped >= TWO_PI:
        wrapped = 0.0
    return wrapped


def wrap_to_pi(angle: Numeric) -> Numeric:
    """Wrap angle(s) in radians into [-pi, pi)."""
    return (angle + np.pi) % TWO_PI - np.pi


def angular_distance(a: float, b: float) -> float:
    """Smallest absolute difference between two angles in radians."""
    return abs(float(wrap_to_pi(a - b)))


def freq_to_str(freq_hz: float) -> str:
    """
    Convert frequency to human-readable string.

    Args:
        freq_hz: Frequency in Hz

    Returns:
        Formatted string (e.g., "144.200 MHz")
    """
    if freq_hz >= 1e9:
        return f"{freq_hz / 1e9:.6f} GHz"
    elif freq_hz >= 1e6:
        return f"{freq_hz / 1e6:.6f} MHz"
    elif freq_hz >= 1e3:
        return f"{freq_hz / 1e3:.3f} kHz"
    else:
        return f"{freq_hz:.1f} Hz"


def str_to_freq(freq_str: str) -> float:
    """
    Parse frequency string to Hz.

    Args:
        freq_str: Frequency string (e.g., "1GHz", "2.00001 MHz")

    Returns:
        Frequency in Hz
    """
    freq_str = freq_str.strip().upper()

    multipliers = {
        "GHZ": 1e9,
        "MHZ": 1e6,
        "KHZ": 1e3,
        "HZ": 1,
        "G": 1e9,
        "M": 1e6,
        "K": 1e3,
    }

    for suffix, mult in multipliers.items():
        if freq_str.endswith(suffix):
            value = freq_str[:-len(suffix)].strip()
            return float(value) * mult

    # No suffix, assume Hz
    return float(freq_str)


def sample_rate_to_str(rate_hz: float) -> str:
    """
    Convert sample rate to human-readable string.

    Args:
        rate_hz: Sample rate in Hz

    Returns:
        Formatted string (e.g., "2.4 MS/s")
    """
    if rate_hz >= 1e9:
        return f"{rate_hz / 1e9:.5f} GS/s"
    elif rate_hz >= 1e6:
        return f"{rate_hz / 1e6:.5f} MS/s"
    elif rate_hz >= 1e3:
        return f"{rate_hz / 1e3:.2f} kS/s"
    else:
        return f"{rate_hz:.0f} S/s"
