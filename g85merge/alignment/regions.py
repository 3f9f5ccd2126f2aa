"""
Test-die area search.

A test-die area is a rectangle of null/fail-code dies whose borders, where they
are not the grid edge, consist entirely of pass dies. The lowest such area on
the wafer serves as an alignment fiducial when no reference dies exist.
"""
from dataclasses import dataclass
import logging
import numpy as np
from typing import List, Optional
from g85merge.core.config import PASS_STATUS, PLACEHOLDER_STATUSES
from g85merge.core.models import Coord, WaferMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestDieArea:
    x: int
    y: int
    width: int
    height: int

    # Not a pytest test class
    __test__ = False

    @property
    def center_x(self) -> int:
        return self.x + self.width // 2

    @property
    def center_y(self) -> int:
        return self.y + self.height // 2

    @property
    def center(self) -> Coord:
        return Coord(self.center_x, self.center_y)


def status_grid(wafer_map: WaferMap) -> np.ndarray:
    """
    Returns a (rows, cols) array of status codes over the declared extents.
    Absent positions hold an empty string so they match neither pass nor placeholder.
    """
    rows, cols = wafer_map.rows, wafer_map.columns
    grid = np.full((rows, cols), "", dtype="<U2")
    for coord, status in wafer_map.dies.items():
        if 0 <= coord.x < cols and 0 <= coord.y < rows:
            grid[coord.y, coord.x] = status
    return grid


def _run_length(mask_row: np.ndarray) -> int:
    """Number of leading True values."""
    if mask_row.all():
        return len(mask_row)
    return int(np.argmin(mask_row))


def find_test_die_areas(wafer_map: WaferMap) -> List[TestDieArea]:
    """
    Scans the grid row-major and grows a rectangle from every placeholder cell:
    width is the placeholder run along the row, height the number of rows in
    which that whole span stays placeholder. Rectangles whose borders are not
    all pass dies are discarded.
    """
    grid = status_grid(wafer_map)
    rows, cols = grid.shape
    placeholder = np.isin(grid, list(PLACEHOLDER_STATUSES))
    passing = grid == PASS_STATUS

    areas: List[TestDieArea] = []
    for y in range(rows):
        for x in range(cols):
            if not placeholder[y, x]:
                continue
            # The top-left cell must itself touch pass dies above and to the left.
            if (y > 0 and not passing[y - 1, x]) or (x > 0 and not passing[y, x - 1]):
                continue

            width = _run_length(placeholder[y, x:])
            height = _run_length(placeholder[y:, x:x + width].all(axis=1))

            if y > 0 and not passing[y - 1, x:x + width].all():
                continue
            if y + height < rows and not passing[y + height, x:x + width].all():
                continue
            if x > 0 and not passing[y:y + height, x - 1].all():
                continue
            if x + width < cols and not passing[y:y + height, x + width].all():
                continue

            area = TestDieArea(x=x, y=y, width=width, height=height)
            logger.debug(f"Found test die area: {area} center={area.center}")
            areas.append(area)

    return areas


def lowest_test_die_area(areas: List[TestDieArea]) -> Optional[TestDieArea]:
    """Returns the area with the greatest vertical center; the first found wins ties."""
    lowest = None
    for area in areas:
        if lowest is None or area.center_y > lowest.center_y:
            lowest = area
    return lowest
