"""Series-aware mutation of stored events."""

from .controller import (
    MutationScope,
    SeriesCreateResult,
    SeriesMutationController,
    SeriesUpdateResult,
)

__all__ = [
    "MutationScope",
    "SeriesCreateResult",
    "SeriesMutationController",
    "SeriesUpdateResult",
]
