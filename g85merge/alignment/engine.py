"""
Alignment Engine.
Tries the alignment strategies in priority order and returns the first offset found.
"""
from dataclasses import dataclass
import logging
from typing import Sequence
from g85merge.core.errors import AlignmentError
from g85merge.core.models import Offset, WaferMap
from g85merge.alignment.strategies import (
    AlignmentStrategy, REFERENCE_DEVICE_CENTROID, TEST_DIE_AREA, BOTTOM_ROW_CENTER
)
from g85merge.utils.telemetry import track_performance

logger = logging.getLogger(__name__)

# Reference dies first, then the lowest test-die area, then the bottom row.
DEFAULT_STRATEGIES = (REFERENCE_DEVICE_CENTROID, TEST_DIE_AREA, BOTTOM_ROW_CENTER)

# Used when realigning each map of a sequence against the accumulated result
SEQUENCE_STRATEGIES = (TEST_DIE_AREA, BOTTOM_ROW_CENTER)


@dataclass(frozen=True)
class AlignmentResult:
    offset: Offset
    strategy: str


@track_performance("Align Maps")
def align(
    map_a: WaferMap,
    map_b: WaferMap,
    strategies: Sequence[AlignmentStrategy] = DEFAULT_STRATEGIES
) -> AlignmentResult:
    """
    Computes the offset that carries coordinates of map_b onto map_a.

    Raises:
        AlignmentError: if none of the strategies finds its fiducial in both maps.
    """
    for strategy in strategies:
        offset = strategy.locate(map_a, map_b)
        if offset is not None:
            logger.info(f"Aligned using {strategy.name}: offset={tuple(offset)}")
            return AlignmentResult(offset=offset, strategy=strategy.name)
        logger.debug(f"Strategy {strategy.name} found no fiducial")

    tried = ", ".join(s.name for s in strategies)
    raise AlignmentError(f"Could not align maps: no fiducial found by any strategy ({tried}).")


def compute_offset(
    map_a: WaferMap,
    map_b: WaferMap,
    strategies: Sequence[AlignmentStrategy] = DEFAULT_STRATEGIES
) -> Offset:
    return align(map_a, map_b, strategies).offset
