"""
Configuration and Styling Module.

This module contains the fixed G85 vocabulary, the fallback attribute values
used when writing maps, and the colour themes used by the wafer map views.
"""
from dataclasses import dataclass

# --- Status Vocabulary ---
PASS_STATUS = "01"
DEFECT_STATUS = "EF"
REFERENCE_STATUS = "FA"
NULL_STATUS = "FF"
FAIL_CODE_STATUS = "FC"

# Codes that carry no die of interest: null dies and test dies.
PLACEHOLDER_STATUSES = frozenset({NULL_STATUS, FAIL_CODE_STATUS})

# Codes indexed in WaferMap.defects
INDEXED_STATUSES = frozenset({DEFECT_STATUS, REFERENCE_STATUS})

DEFECT_DESCRIPTIONS = {
    DEFECT_STATUS: "Defect",
    REFERENCE_STATUS: "Reference Device",
}

STATUS_LABELS = {
    PASS_STATUS: "Pass",
    DEFECT_STATUS: "Defect",
    REFERENCE_STATUS: "Reference",
    NULL_STATUS: "Null",
    FAIL_CODE_STATUS: "Fail Code",
}

# --- G85 Document Layout ---
SEMI_NAMESPACE = "http://www.semi.org"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Fallbacks for the substrate attributes of the root <Map> element
SUBSTRATE_DEFAULTS = {
    "SubstrateNumber": "?",
    "SubstrateType": "Wafer",
    "SubstrateId": "25",
    "FormatRevision": "SEMI G85-0703",
}

DATA_MAP_NAME = "%%mapname%%"
DATA_MAP_VERSION = "%%mapversion%%"

# Bins appended on export when the live grid holds these codes
SYNTHETIC_BINS = {
    DEFECT_STATUS: ("Fail", "Fail Die"),
    FAIL_CODE_STATUS: ("Fail", "Fail Code"),
}

# Legacy header fields superseded by the <ReferenceDevice> element
LEGACY_REFERENCE_FIELDS = ("ReferenceDeviceX", "ReferenceDeviceY")

# --- Export Mutation ---
# Marker used to tell server-uploaded merged lots apart from their sources.
EXPORT_MARKER = "Z"

# --- Input Validation Constants ---
ACCEPTED_EXTENSIONS = (".g85", ".xml")

# --- Sample Wafer Defaults ---
DEFAULT_SAMPLE_ROWS = 40
DEFAULT_SAMPLE_COLS = 40
DEFAULT_SAMPLE_DEFECTS = 25

# --- Theme Configuration ---
@dataclass
class PlotTheme:
    background_color: str
    plot_area_color: str
    axis_color: str
    text_color: str

    # Colour for codes outside the fixed vocabulary
    unknown_bin_color: str = '#9E9E9E'

# Default Theme (Dark Mode)
DEFAULT_THEME = PlotTheme(
    background_color='#2C3E50',       # Dark Blue-Grey
    plot_area_color='#333333',        # Dark Grey
    axis_color='#8B4513',             # Saddle Brown
    text_color='#FFFFFF',             # White
)

# Light Theme (For Reporting/Printing)
LIGHT_THEME = PlotTheme(
    background_color='#FFFFFF',       # White
    plot_area_color='#F0F2F6',        # Streamlit Light Grey
    axis_color='#333333',             # Dark Grey for grid
    text_color='#000000',             # Black
)

BACKGROUND_COLOR = DEFAULT_THEME.background_color
PLOT_AREA_COLOR = DEFAULT_THEME.plot_area_color
GRID_COLOR = DEFAULT_THEME.axis_color
TEXT_COLOR = DEFAULT_THEME.text_color

# --- Bin Styling (Loaded from JSON) ---
import json
import logging
from pathlib import Path
from typing import Dict

DEFAULT_BIN_COLORS = {
    PASS_STATUS: '#4CAF50',       # Green
    DEFECT_STATUS: '#F44336',     # Red
    REFERENCE_STATUS: '#2196F3',  # Blue
    NULL_STATUS: '#E0E0E0',       # Gray
    FAIL_CODE_STATUS: '#FF9800',  # Orange
}

def load_bin_styles() -> Dict[str, str]:
    """
    Loads the bin colour mapping from an external JSON file.

    This function looks for 'assets/bin_styles.json' relative to the project root.
    If the file is not found or is corrupted, it logs a warning and returns the
    built-in colour map so the views can still render.

    Returns:
        Dict[str, str]: A dictionary mapping bin codes to their colours.
    """
    style_path = Path(__file__).parent.parent.parent / "assets/bin_styles.json"
    try:
        with open(style_path, 'r') as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logging.warning(f"Could not load 'bin_styles.json' ({e}). Using default colors.")
        return dict(DEFAULT_BIN_COLORS)

bin_style_map: Dict[str, str] = load_bin_styles()
