"""
Exceptions raised by the direction finding estimators.
"""

from typing import Optional


class DirectionFindingError(Exception):
    """Base exception for estimator failures."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        array_size: Optional[int] = None,
        num_sources: Optional[int] = None,
    ) -> None:
        self.operation = operation
        self.array_size = array_size
        self.num_sources = num_sources
        super().__init__(message)

    def __str__(self) -> str:
        msg = super().__str__()
        details = []
        if self.operation:
            details.append(f"operation={self.operation}")
        if self.array_size is not None:
            details.append(f"array_size={self.array_size}")
        if self.num_sources is not None:
            details.append(f"num_sources={self.num_sources}")
        if details:
            msg += f" ({', '.join(details)})"
        return msg


class UnsupportedConfiguration(DirectionFindingError):
    """Raised when an estimator is run on a scenario it cannot handle.

    The classical beamformer only supports a single source.
    """

    pass


class InsufficientArrayAperture(DirectionFindingError):
    """Raised when the array has too few elements for the source count.

    MUSIC needs a non-empty noise subspace, i.e. fewer sources than
    array elements.
    """

    pass
