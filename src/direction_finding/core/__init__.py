"""
Core module - Scenario configuration and error types.
"""

from .config import (
    PRESETS,
    ArrayLayoutConfig,
    ConfigValidationError,
    ScenarioConfig,
    SourceConfig,
    get_preset,
    list_presets,
)
from .exceptions import (
    DirectionFindingError,
    InsufficientArrayAperture,
    UnsupportedConfiguration,
)

__all__ = [
    # Configuration
    "ScenarioConfig",
    "ArrayLayoutConfig",
    "SourceConfig",
    "ConfigValidationError",
    # Presets
    "PRESETS",
    "get_preset",
    "list_presets",
    # Errors
    "DirectionFindingError",
    "UnsupportedConfiguration",
    "InsufficientArrayAperture",
]
