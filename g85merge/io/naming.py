import re
from g85merge.core.models import WaferMap

def sanitize_filename_part(value: str) -> str:
    """Allow alphanumeric, underscores, hyphens, periods; everything else becomes '_'."""
    value = value.strip().replace(" ", "_")
    safe = "".join([c if c.isalnum() or c in "._-" else "_" for c in value])
    return re.sub(r"_+", "_", safe)

def generate_merged_filename(
    wafer_map: WaferMap,
    prefix: str = "MERGED",
    extension: str = "g85"
) -> str:
    """
    Generates the download name for a merged map: [Prefix]_[LotId]_[SubstrateNumber].ext
    Example: MERGED_A1Z.2_7Z.g85

    Missing identifiers are left out rather than written as placeholders.
    """
    parts = [prefix]

    lot_id = wafer_map.header.get('LotId', '').strip()
    if lot_id:
        parts.append(lot_id)

    substrate = wafer_map.map_attributes.get('SubstrateNumber', '').strip()
    if substrate and substrate != '?':
        parts.append(substrate)

    safe_name = sanitize_filename_part("_".join(parts))
    return f"{safe_name}.{extension}"

def report_filename(merged_filename: str) -> str:
    """Excel report name that accompanies a merged map download."""
    stem = merged_filename.rsplit('.', 1)[0] if '.' in merged_filename else merged_filename
    return f"{stem}_report.xlsx"
