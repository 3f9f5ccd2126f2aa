"""
Export-time ID mutation.

Merged lots uploaded to the server carry a 'Z' marker in their LotId and
SubstrateNumber so they can be told apart from the source lots.
"""
from typing import Optional
from g85merge.core.config import EXPORT_MARKER
from g85merge.core.models import WaferMap


def mark_lot_id(lot_id: Optional[str]) -> Optional[str]:
    """'A1.2' -> 'A1Z.2', 'A1' -> 'A1Z'; empty values are returned unchanged."""
    if not lot_id:
        return lot_id
    head, dot, tail = lot_id.partition(".")
    return f"{head}{EXPORT_MARKER}{dot}{tail}"


def mark_substrate_number(number: Optional[str]) -> Optional[str]:
    if not number:
        return number
    return f"{number}{EXPORT_MARKER}"


def apply_export_mutation(wafer_map: WaferMap) -> WaferMap:
    """Returns a new map with marked IDs; the given map is left untouched."""
    header = dict(wafer_map.header)
    if header.get("LotId"):
        header["LotId"] = mark_lot_id(header["LotId"])

    attributes = dict(wafer_map.map_attributes)
    if attributes.get("SubstrateNumber"):
        attributes["SubstrateNumber"] = mark_substrate_number(attributes["SubstrateNumber"])

    return wafer_map.with_metadata(header=header, map_attributes=attributes)
