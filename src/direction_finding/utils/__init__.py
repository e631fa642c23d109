"""
Utility functions and helpers.
"""

from .conversions import (
    angular_distance,
    db_to_linear,
    freq_to_str,
    linear_to_db,
    sample_rate_to_str,
    str_to_freq,
    wrap_angle,
    wrap_to_pi,
)

__all__ = [
    "db_to_linear",
    "linear_to_db",
    "wrap_angle",
    "wrap_to_pi",
    "angular_distance",
    "freq_to_str",
    "str_to_freq",
    "sample_rate_to_str",
]
