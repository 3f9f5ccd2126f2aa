import streamlit as st
import logging
from typing import Any, List
from dataclasses import dataclass, field
from g85merge.core.config import ACCEPTED_EXTENSIONS
from g85merge.core.errors import FormatError
from g85merge.core.models import WaferMap
from g85merge.io.parser import parse
from g85merge.io.sample_generator import generate_sample_maps
from g85merge.utils.telemetry import track_performance, PerformanceMonitor

logger = logging.getLogger(__name__)

SAMPLE_NAMES = ["Sample Wafer 1.g85", "Sample Wafer 2.g85"]

@dataclass
class IngestionResult:
    """
    Result of the map ingestion process.
    Maps and names are parallel lists in upload order; files that could not
    be read are reported in errors, skipped files in warnings.
    """
    maps: List[WaferMap] = field(default_factory=list)
    names: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    is_sample: bool = False

@st.cache_data(show_spinner=False)
def _parse_cached(file_name: str, payload: bytes) -> WaferMap:
    return parse(payload)

def _read_bytes(uploaded_file: Any) -> bytes:
    if hasattr(uploaded_file, 'getvalue'):
        return uploaded_file.getvalue()
    if hasattr(uploaded_file, 'seek'):
        uploaded_file.seek(0)
    return uploaded_file.read()

@track_performance("Map Ingestion (Total)")
def load_wafer_maps(uploaded_files: List[Any]) -> IngestionResult:
    """
    Parses uploaded G85 files (objects exposing `.name` and the file bytes).
    Falls back to generated sample wafers when nothing is uploaded.
    """
    result = IngestionResult()

    if not uploaded_files:
        result.maps = generate_sample_maps(len(SAMPLE_NAMES))
        result.names = list(SAMPLE_NAMES)
        result.is_sample = True
        return result

    for uploaded_file in uploaded_files:
        file_name = uploaded_file.name

        if not file_name.lower().endswith(ACCEPTED_EXTENSIONS):
            msg = f"Skipping file: '{file_name}'. Expected one of {', '.join(ACCEPTED_EXTENSIONS)}."
            result.warnings.append(msg)
            logger.warning(msg)
            continue

        try:
            payload = _read_bytes(uploaded_file)
            wafer_map = _parse_cached(file_name, payload)
            # Extents are read lazily; reading them here rejects a bad Rows/Columns.
            logger.debug(f"'{file_name}': {wafer_map.rows}x{wafer_map.columns} grid")
        except FormatError as e:
            msg = f"Format Error in '{file_name}': {e}"
            result.errors.append(msg)
            logger.error(msg)
            continue
        except OSError as e:
            msg = f"Error reading '{file_name}': {e}"
            result.errors.append(msg)
            logger.error(msg)
            continue

        if not wafer_map.dies:
            msg = f"'{file_name}' contains no die rows."
            result.warnings.append(msg)
            logger.warning(msg)

        result.maps.append(wafer_map)
        result.names.append(file_name)
        PerformanceMonitor.log_event(
            f"Loaded ({file_name})", 0.0,
            details=f"{len(wafer_map.dies)} dies, {len(wafer_map.defects)} indexed"
        )

    return result
