"""
G85 Parser.
Turns the text of a SEMI G85 XML wafer map into a WaferMap.
"""
import logging
import xml.etree.ElementTree as ET
from typing import Iterator, Optional, Union
from g85merge.core.config import SUBSTRATE_DEFAULTS
from g85merge.core.errors import FormatError
from g85merge.core.models import BinDefinition, Coord, ReferenceDevice, WaferMap
from g85merge.utils.telemetry import track_performance

logger = logging.getLogger(__name__)

ROOT_TAG = "Map"


def _local_name(tag) -> str:
    """Strips the '{namespace}' prefix ElementTree puts on qualified tags."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _iter_named(root: ET.Element, name: str) -> Iterator[ET.Element]:
    return (el for el in root.iter() if _local_name(el.tag) == name)


def _first_named(root: ET.Element, name: str) -> Optional[ET.Element]:
    return next(_iter_named(root, name), None)


def _read_row(wafer_map: WaferMap, y: int, text: str) -> None:
    payload = text.strip()
    if len(payload) % 2:
        logger.warning(f"Row {y} has an odd length ({len(payload)}); ignoring trailing '{payload[-1]}'.")
    for x in range(len(payload) // 2):
        wafer_map.set_die(Coord(x, y), payload[2 * x:2 * x + 2])


@track_performance("Parse G85")
def parse(text: Union[str, bytes]) -> WaferMap:
    """
    Parses G85 XML text into a WaferMap.

    Raises:
        FormatError: if the text is not well-formed XML or the root element
            is not <Map>.
    """
    if isinstance(text, str):
        text = text.lstrip("\ufeff")
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise FormatError(f"Not a well-formed XML document: {e}") from e

    if _local_name(root.tag) != ROOT_TAG:
        raise FormatError(f"Expected a <{ROOT_TAG}> root element, found <{_local_name(root.tag)}>.")

    wafer_map = WaferMap()
    wafer_map.map_attributes = {
        name: root.attrib[name] for name in SUBSTRATE_DEFAULTS if name in root.attrib
    }

    device = _first_named(root, "Device")
    if device is not None:
        wafer_map.header = dict(device.attrib)

    ref = _first_named(root, "ReferenceDevice")
    if ref is not None:
        wafer_map.reference_device = ReferenceDevice(
            x=ref.get("ReferenceDeviceX"), y=ref.get("ReferenceDeviceY")
        )

    for bin_el in _iter_named(root, "Bin"):
        wafer_map.bins.append(BinDefinition(
            code=bin_el.get("BinCode"),
            quality=bin_el.get("BinQuality"),
            description=bin_el.get("BinDescription"),
            count=bin_el.get("BinCount"),
        ))

    for y, row in enumerate(_iter_named(root, "Row")):
        _read_row(wafer_map, y, "".join(row.itertext()))

    logger.debug(
        f"Parsed map LotId={wafer_map.header.get('LotId')}: "
        f"{len(wafer_map.dies)} dies, {len(wafer_map.defects)} indexed defects"
    )
    return wafer_map
