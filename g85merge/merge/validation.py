"""
Bounds validation for merged maps.

Translation by an alignment offset can legitimately push source dies past the
declared grid edge. Such coordinates are dropped (never clamped) before a map
leaves the merge engine.
"""
import logging
from typing import Tuple
from g85merge.core.models import ValidationReport, WaferMap

logger = logging.getLogger(__name__)


def validate_bounds(wafer_map: WaferMap) -> Tuple[WaferMap, ValidationReport]:
    """
    Returns a copy keeping only dies inside [0, Columns) x [0, Rows) of the
    map's own header, and only defect entries that agree with those dies.
    """
    rows, cols = wafer_map.rows, wafer_map.columns

    result = wafer_map.copy()
    result.dies = {
        coord: status for coord, status in wafer_map.dies.items()
        if 0 <= coord.x < cols and 0 <= coord.y < rows
    }
    result.defects = {
        coord: info for coord, info in wafer_map.defects.items()
        if result.dies.get(coord) == info.type
    }

    report = ValidationReport(
        dropped_dies=len(wafer_map.dies) - len(result.dies),
        dropped_defects=len(wafer_map.defects) - len(result.defects),
    )
    if report.dropped:
        logger.info(
            f"Validation: dropped {report.dropped_dies} dies and {report.dropped_defects} "
            f"defects outside the {rows}x{cols} grid"
        )
    return result, report
