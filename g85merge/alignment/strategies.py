"""
Alignment strategies.

Each strategy locates the same physical fiducial in two maps and returns the
offset that carries map B onto map A, or None when the fiducial is missing
from either map.
"""
import logging
import math
from collections import defaultdict
from typing import Callable, Dict, List, NamedTuple, Optional
from g85merge.core.config import REFERENCE_STATUS, PLACEHOLDER_STATUSES
from g85merge.core.models import Coord, Offset, WaferMap
from g85merge.alignment.regions import find_test_die_areas, lowest_test_die_area

logger = logging.getLogger(__name__)

StrategyFunc = Callable[[WaferMap, WaferMap], Optional[Offset]]


class AlignmentStrategy(NamedTuple):
    name: str
    locate: StrategyFunc


def round_half_up(value: float) -> int:
    """Rounds halves upwards (2.5 -> 3, -2.5 -> -2) instead of to the nearest even."""
    return math.floor(value + 0.5)


# --- Fiducial Locators (per map) ---

def reference_centroid(wafer_map: WaferMap) -> Optional[Coord]:
    """Rounded mean position of the embedded reference (FA) dies."""
    refs = wafer_map.coords_with_status(REFERENCE_STATUS)
    if not refs:
        return None
    avg_x = sum(c.x for c in refs) / len(refs)
    avg_y = sum(c.y for c in refs) / len(refs)
    return Coord(round_half_up(avg_x), round_half_up(avg_y))


def lowest_test_die_center(wafer_map: WaferMap) -> Optional[Coord]:
    area = lowest_test_die_area(find_test_die_areas(wafer_map))
    return area.center if area is not None else None


def bottom_row_center(wafer_map: WaferMap) -> Optional[Coord]:
    """
    Center of the viable dies in the bottom-most row that has any.
    Viable means neither null nor fail-code; only declared grid positions count.
    """
    rows, cols = wafer_map.rows, wafer_map.columns
    viable: Dict[int, List[int]] = defaultdict(list)
    for coord, status in wafer_map.dies.items():
        if status in PLACEHOLDER_STATUSES:
            continue
        if 0 <= coord.x < cols and 0 <= coord.y < rows:
            viable[coord.y].append(coord.x)

    if not viable:
        return None
    bottom = max(viable)
    xs = viable[bottom]
    return Coord(round_half_up(sum(xs) / len(xs)), bottom)


def _difference(locator: Callable[[WaferMap], Optional[Coord]]) -> StrategyFunc:
    def locate(a: WaferMap, b: WaferMap) -> Optional[Offset]:
        center_a = locator(a)
        if center_a is None:
            return None
        center_b = locator(b)
        if center_b is None:
            return None
        logger.debug(f"{locator.__name__}: A={center_a} B={center_b}")
        return Offset(center_a.x - center_b.x, center_a.y - center_b.y)
    locate.__name__ = locator.__name__
    return locate


REFERENCE_DEVICE_CENTROID = AlignmentStrategy("reference_device_centroid", _difference(reference_centroid))
TEST_DIE_AREA = AlignmentStrategy("test_die_area", _difference(lowest_test_die_center))
BOTTOM_ROW_CENTER = AlignmentStrategy("bottom_row_center", _difference(bottom_row_center))
