"""
G85 Serializer.
Writes a WaferMap back out in the same layout the parser accepts.
"""
import logging
from collections import Counter
from typing import Dict, List
from xml.sax.saxutils import escape
from g85merge.core.config import (
    XML_DECLARATION, SEMI_NAMESPACE, SUBSTRATE_DEFAULTS, SYNTHETIC_BINS,
    DATA_MAP_NAME, DATA_MAP_VERSION, NULL_STATUS
)
from g85merge.core.models import BinDefinition, Coord, WaferMap
from g85merge.utils.telemetry import track_performance

logger = logging.getLogger(__name__)

_ATTR_ENTITIES = {'"': "&quot;"}


def _attr(name: str, value) -> str:
    return f' {name}="{escape(str(value), _ATTR_ENTITIES)}"'


def _bin_line(code, quality, description, count=None) -> str:
    line = f"    <Bin{_attr('BinCode', code)}{_attr('BinQuality', quality)}{_attr('BinDescription', description)}"
    if count:
        line += _attr("BinCount", count)
    return line + " />"


def _bin_lines(bins: List[BinDefinition], live_counts: Dict[str, int]) -> List[str]:
    """
    Emits the bin list with EF/FC counts taken from the grid, never from the
    counts carried over from the source file.
    """
    lines = []
    seen = set()
    for bin_def in bins:
        count = bin_def.count
        if bin_def.code in SYNTHETIC_BINS:
            count = str(live_counts.get(bin_def.code, 0))
            seen.add(bin_def.code)
        lines.append(_bin_line(
            bin_def.code or "", bin_def.quality or "", bin_def.description or "", count
        ))

    for code, (quality, description) in SYNTHETIC_BINS.items():
        if code not in seen and live_counts.get(code, 0) > 0:
            lines.append(_bin_line(code, quality, description, live_counts[code]))
    return lines


@track_performance("Serialize G85")
def serialize(wafer_map: WaferMap) -> str:
    """Returns the G85 XML text for a WaferMap."""
    rows = wafer_map.rows
    cols = wafer_map.columns

    substrate = {
        name: wafer_map.map_attributes.get(name) or fallback
        for name, fallback in SUBSTRATE_DEFAULTS.items()
    }
    map_attrs = "".join(_attr(name, value) for name, value in substrate.items())
    device_attrs = "".join(_attr(name, value) for name, value in wafer_map.header.items())

    lines = [
        XML_DECLARATION,
        f'<Map xmlns="{SEMI_NAMESPACE}"{map_attrs}>',
        f"  <Device{device_attrs}>",
    ]

    ref = wafer_map.reference_device
    if ref is not None:
        lines.append(
            f"    <ReferenceDevice{_attr('ReferenceDeviceX', ref.x or '')}{_attr('ReferenceDeviceY', ref.y or '')} />"
        )

    in_grid = Counter(
        status for coord, status in wafer_map.dies.items()
        if 0 <= coord.x < cols and 0 <= coord.y < rows
    )
    lines.extend(_bin_lines(wafer_map.bins, in_grid))

    lines.append(f'    <Data MapName="{DATA_MAP_NAME}" MapVersion="{DATA_MAP_VERSION}">')
    for y in range(rows):
        row = "".join(wafer_map.dies.get(Coord(x, y), NULL_STATUS) for x in range(cols))
        lines.append(f"      <Row><![CDATA[{row}]]></Row>")
    lines.append("    </Data>")
    lines.append("  </Device>")
    lines.append("</Map>")

    logger.debug(f"Serialized {rows}x{cols} map with bin counts {dict(in_grid)}")
    return "\n".join(lines)
