"""
Merge Engine.

Combines aligned wafer maps into a new map. Three shapes are supported:

* pairwise defect-preserving merge (first map is the base),
* control-map overlay (grid from a control map, defects from a scan map),
* sequential merge of two or more maps, each realigned against the running result.

Every result is bounds-validated before it is returned. Inputs are never mutated.
"""
import logging
from typing import Sequence
from g85merge.core.config import (
    DEFECT_STATUS, PLACEHOLDER_STATUSES, LEGACY_REFERENCE_FIELDS
)
from g85merge.core.errors import AlignmentError, InputError
from g85merge.core.models import DefectInfo, Offset, WaferMap
from g85merge.alignment.engine import DEFAULT_STRATEGIES, SEQUENCE_STRATEGIES, align
from g85merge.alignment.strategies import AlignmentStrategy
from g85merge.merge.export import apply_export_mutation
from g85merge.merge.validation import validate_bounds
from g85merge.utils.telemetry import track_performance

logger = logging.getLogger(__name__)

SCAN_DEFECT_INFO = DefectInfo(type=DEFECT_STATUS, additional_info="Defect from scan map")


def _sequence_defect(map_number: int) -> DefectInfo:
    return DefectInfo(
        type=DEFECT_STATUS,
        additional_info=f"Defect from map {map_number}",
        source=map_number,
    )


def _finalize(merged: WaferMap, label: str) -> WaferMap:
    validated, report = validate_bounds(merged)
    logger.info(
        f"{label} merge complete: {len(validated.dies)} dies, {len(validated.defects)} indexed defects "
        f"({report.dropped_dies} dies dropped by validation)"
    )
    validated.validation = report
    return validated


def _overlay_defects(target: WaferMap, source: WaferMap, offset: Offset, info: DefectInfo) -> int:
    """
    Copies the source map's EF dies onto the target, translated by the offset.
    A defect lands only inside the target grid and only on a die that exists
    there and is neither null nor fail-code. Returns the number of dies marked.
    """
    rows, cols = target.rows, target.columns
    marked = 0
    for coord in source.coords_with_status(DEFECT_STATUS):
        aligned = coord.shifted(offset)
        if not (0 <= aligned.x < cols and 0 <= aligned.y < rows):
            continue
        base_status = target.dies.get(aligned)
        if base_status is None or base_status in PLACEHOLDER_STATUSES:
            continue
        target.set_die(aligned, DEFECT_STATUS, info)
        marked += 1
    return marked


@track_performance("Merge: Pairwise")
def merge_two(
    map_a: WaferMap,
    map_b: WaferMap,
    strategies: Sequence[AlignmentStrategy] = DEFAULT_STRATEGIES
) -> WaferMap:
    """
    Merges map_b into map_a.

    Where map_a has no die, map_b's translated status is taken. A null or
    fail-code die in map_a is replaced only by a status that is neither;
    any other status in map_a wins. The result carries map_a's
    header, bins, reference device and substrate attributes.

    Raises:
        AlignmentError: if the maps cannot be aligned.
    """
    alignment = align(map_a, map_b, strategies)
    shifted = map_b.translated(alignment.offset)

    merged = map_a.copy()
    for coord, status in shifted.dies.items():
        base_status = map_a.dies.get(coord)
        if base_status is None:
            merged.set_die(coord, status, shifted.defects.get(coord))
        elif base_status in PLACEHOLDER_STATUSES and status not in PLACEHOLDER_STATUSES:
            merged.set_die(coord, status, shifted.defects.get(coord))

    # Index EF dies that ended up in the grid without a defect entry.
    for coord in shifted.coords_with_status(DEFECT_STATUS):
        if merged.dies.get(coord) == DEFECT_STATUS and coord not in merged.defects:
            merged.defects[coord] = shifted.defects.get(coord) or DefectInfo.for_status(DEFECT_STATUS)

    return _finalize(merged, "Pairwise")


@track_performance("Merge: Control + Scan")
def merge_control_and_scan(
    control: WaferMap,
    scan: WaferMap,
    export_mutation: bool = False,
    strategies: Sequence[AlignmentStrategy] = DEFAULT_STRATEGIES
) -> WaferMap:
    """
    Overlays the scan map's defects onto the control map's grid.

    The grid, bin list and reference device come from the control map. The
    header and substrate attributes come from the scan map, with Rows/Columns
    forced to the control extents and the legacy ReferenceDeviceX/Y header
    fields removed.

    Raises:
        AlignmentError: if the maps cannot be aligned.
    """
    logger.info(
        f"Control map {control.header.get('Rows')}x{control.header.get('Columns')}, "
        f"scan map {scan.header.get('Rows')}x{scan.header.get('Columns')}"
    )
    alignment = align(control, scan, strategies)

    header = dict(scan.header)
    for extent in ("Rows", "Columns"):
        if extent in control.header:
            header[extent] = control.header[extent]
        else:
            header.pop(extent, None)
    for legacy in LEGACY_REFERENCE_FIELDS:
        header.pop(legacy, None)

    merged = WaferMap(
        header=header,
        map_attributes=dict(scan.map_attributes),
        reference_device=control.reference_device,
        bins=list(control.bins),
        dies=dict(control.dies),
        defects=dict(control.defects),
    )
    marked = _overlay_defects(merged, scan, alignment.offset, SCAN_DEFECT_INFO)
    logger.info(f"Overlaid {marked} scan defects using offset {tuple(alignment.offset)}")

    if export_mutation:
        merged = apply_export_mutation(merged)
    return _finalize(merged, "Control + Scan")


@track_performance("Merge: Sequence")
def merge_sequence(
    maps: Sequence[WaferMap],
    export_mutation: bool = False,
    first_is_control: bool = False
) -> WaferMap:
    """
    Merges maps in order, seeding the result from the first map.

    Each later map is aligned against the result accumulated so far and only
    its EF dies are overlaid; every overlaid defect records the 1-based index
    of the map it came from. With first_is_control, ProductId, LotId and the
    substrate attributes are taken from the second map instead of the first.

    Raises:
        InputError: if fewer than two maps are given.
        AlignmentError: if a map cannot be aligned against the running result.
    """
    maps = list(maps)
    if len(maps) < 2:
        raise InputError(f"At least 2 maps are required for merging, got {len(maps)}.")

    logger.info(f"Merging {len(maps)} maps in sequence")
    merged = maps[0].copy()
    for coord in merged.coords_with_status(DEFECT_STATUS):
        merged.defects[coord] = _sequence_defect(1)

    if first_is_control:
        second = maps[1]
        for key in ("ProductId", "LotId"):
            if key in second.header:
                merged.header[key] = second.header[key]
            else:
                merged.header.pop(key, None)
        merged.map_attributes = dict(second.map_attributes)

    for index, current in enumerate(maps[1:], start=1):
        map_number = index + 1
        try:
            alignment = align(merged, current, SEQUENCE_STRATEGIES)
        except AlignmentError as e:
            raise AlignmentError(f"Could not align map {map_number}: {e}") from e

        marked = _overlay_defects(merged, current, alignment.offset, _sequence_defect(map_number))
        logger.info(
            f"Map {map_number}/{len(maps)}: offset {tuple(alignment.offset)} "
            f"via {alignment.strategy}, {marked} defects overlaid"
        )

    if export_mutation:
        merged = apply_export_mutation(merged)
    return _finalize(merged, "Sequence")
