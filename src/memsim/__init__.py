"""Memory-management teaching simulators.

Re-exports the two engines so callers can write::

    from memsim import ClockReplacer, SegmentAllocator
"""

from memsim.clock import (
    ClockReplacer,
    FaultEmptyLoad,
    FaultEvict,
    Frame,
    Hit,
    InvalidConfigurationError,
    Outcome,
)
from memsim.segmentation import (
    MEMORY_SIZE,
    FitPolicy,
    FreeBlock,
    NoFitError,
    PlacementError,
    Segment,
    SegmentAllocator,
    SegmentationError,
)

__all__ = [
    "MEMORY_SIZE",
    "ClockReplacer",
    "FaultEmptyLoad",
    "FaultEvict",
    "FitPolicy",
    "Frame",
    "FreeBlock",
    "Hit",
    "InvalidConfigurationError",
    "NoFitError",
    "Outcome",
    "PlacementError",
    "Segment",
    "SegmentAllocator",
    "SegmentationError",
]
