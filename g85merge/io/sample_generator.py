import numpy as np
from datetime import datetime
from typing import List, Tuple
from g85merge.core.config import (
    PASS_STATUS, DEFECT_STATUS, REFERENCE_STATUS, NULL_STATUS, FAIL_CODE_STATUS,
    DEFAULT_SAMPLE_ROWS, DEFAULT_SAMPLE_COLS, DEFAULT_SAMPLE_DEFECTS
)
from g85merge.core.errors import InputError
from g85merge.core.models import BinDefinition, Coord, ReferenceDevice, WaferMap

MIN_SAMPLE_EXTENT = 10

# Size of the fail-code test block placed below the wafer center
TEST_BLOCK_WIDTH = 4
TEST_BLOCK_HEIGHT = 2

BIN_DEFINITIONS = [
    (PASS_STATUS, "Pass", "Good Die"),
    (DEFECT_STATUS, "Fail", "Fail Die"),
    (REFERENCE_STATUS, "Pass", "Reference Die"),
    (FAIL_CODE_STATUS, "Fail", "Fail Code"),
    (NULL_STATUS, "Null", "Null Die"),
]

def generate_sample_wafer(
    rows: int = DEFAULT_SAMPLE_ROWS,
    cols: int = DEFAULT_SAMPLE_COLS,
    seed: int = 55,
    defect_count: int = DEFAULT_SAMPLE_DEFECTS,
    shift: Tuple[int, int] = (0, 0),
    with_reference: bool = True,
    lot_id: str = "SAMPLE.1",
    substrate_number: str = "1"
) -> WaferMap:
    """
    Generates a synthetic round wafer for demonstration.

    The wafer is a disc of pass dies on a null background with a fail-code
    test block (bordered by pass dies) below the center, two reference dies
    on the center row, and randomly placed defect dies. `shift` moves the
    whole pattern inside the grid so two samples can be aligned and merged.

    Args:
        rows: Grid rows (at least 10)
        cols: Grid columns (at least 10)
        seed: Seed for the defect placement
        defect_count: Number of EF dies to scatter over the pass area
        shift: (dx, dy) applied to every pattern coordinate
        with_reference: Place FA dies and a <ReferenceDevice> entry
    """
    if rows < MIN_SAMPLE_EXTENT or cols < MIN_SAMPLE_EXTENT:
        raise InputError(f"Sample wafers need at least {MIN_SAMPLE_EXTENT} rows and columns, got {rows}x{cols}.")

    rng = np.random.RandomState(seed)
    dx, dy = shift

    # Disc of pass dies in pattern coordinates
    center_x, center_y = (cols - 1) / 2, (rows - 1) / 2
    radius = (min(rows, cols) - 1) / 2
    ys, xs = np.indices((rows, cols))
    px, py = xs - dx, ys - dy
    inside = (px - center_x) ** 2 + (py - center_y) ** 2 <= radius ** 2

    grid = np.full((rows, cols), NULL_STATUS, dtype='<U2')
    grid[inside] = PASS_STATUS

    # Fail-code test block, with a one-die pass border kept free of defects
    block_x = cols // 2 - TEST_BLOCK_WIDTH // 2
    block_y = int(center_y + radius * 0.5)
    block = (px >= block_x) & (px < block_x + TEST_BLOCK_WIDTH) & (py >= block_y) & (py < block_y + TEST_BLOCK_HEIGHT)
    border = (
        (px >= block_x - 1) & (px <= block_x + TEST_BLOCK_WIDTH)
        & (py >= block_y - 1) & (py <= block_y + TEST_BLOCK_HEIGHT)
    ) & ~block
    grid[border] = PASS_STATUS
    grid[block] = FAIL_CODE_STATUS

    reserved = block | border
    reference_coords: List[Coord] = []
    if with_reference:
        spread = max(1, int(radius / 3))
        for pattern_x in (cols // 2 - spread, cols // 2 + spread):
            coord = Coord(pattern_x + dx, rows // 2 - 1 + dy)
            if 0 <= coord.x < cols and 0 <= coord.y < rows:
                grid[coord.y, coord.x] = REFERENCE_STATUS
                reserved[coord.y, coord.x] = True
                reference_coords.append(coord)

    # Scatter defects over the remaining pass dies
    candidates = np.argwhere((grid == PASS_STATUS) & ~reserved)
    n_defects = min(max(defect_count, 0), len(candidates))
    if n_defects:
        picks = candidates[rng.choice(len(candidates), size=n_defects, replace=False)]
        grid[picks[:, 0], picks[:, 1]] = DEFECT_STATUS

    wafer_map = WaferMap(
        header={
            "BinType": "HexaDecimal",
            "SupplierName": "Sample Fab",
            "LotId": lot_id,
            "DeviceSizeX": "5000",
            "DeviceSizeY": "5000",
            "NullBin": NULL_STATUS,
            "ProductId": "SAMPLE-DEVICE",
            "Rows": str(rows),
            "Columns": str(cols),
            "MapType": "Array",
            "OriginLocation": "0",
            "Orientation": "0",
            "WaferSize": "300",
            "CreateDate": datetime.now().strftime("%Y%m%d%H%M%S"),
        },
        map_attributes={
            "SubstrateNumber": substrate_number,
            "SubstrateType": "Wafer",
            "SubstrateId": f"{lot_id}-{substrate_number}",
            "FormatRevision": "SEMI G85-0703",
        },
    )
    for (y, x), status in np.ndenumerate(grid):
        wafer_map.set_die(Coord(int(x), int(y)), str(status))

    codes, counts = np.unique(grid, return_counts=True)
    live = dict(zip(codes.tolist(), counts.tolist()))
    wafer_map.bins = [
        BinDefinition(code=code, quality=quality, description=description, count=str(live[code]))
        for code, quality, description in BIN_DEFINITIONS if code in live
    ]
    if reference_coords:
        first = reference_coords[0]
        wafer_map.reference_device = ReferenceDevice(x=str(first.x), y=str(first.y))

    return wafer_map

def generate_sample_maps(count: int = 2, seed: int = 55) -> List[WaferMap]:
    """
    A set of samples from the same lot, each shifted one die further
    right and down than the previous one, with independent defects.
    """
    return [
        generate_sample_wafer(
            seed=seed + i,
            shift=(i, i),
            substrate_number=str(i + 1)
        )
        for i in range(count)
    ]
