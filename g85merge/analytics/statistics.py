import pandas as pd
import numpy as np
from g85merge.core.config import (
    PASS_STATUS, DEFECT_STATUS, REFERENCE_STATUS, NULL_STATUS, FAIL_CODE_STATUS,
    STATUS_LABELS
)
from g85merge.core.models import WaferMap
from g85merge.analytics.models import MapSummary

DIE_COLUMNS = ['DIE_X', 'DIE_Y', 'STATUS']
DEFECT_COLUMNS = ['DIE_X', 'DIE_Y', 'TYPE', 'ADDITIONAL_INFO', 'SOURCE_MAP']
BIN_STAT_COLUMNS = ['BIN_CODE', 'LABEL', 'COUNT', 'PERCENT']

def dies_to_dataframe(wafer_map: WaferMap) -> pd.DataFrame:
    """Flat table of every die entry, sorted row by row."""
    if not wafer_map.dies:
        return pd.DataFrame(columns=DIE_COLUMNS)

    df = pd.DataFrame(
        [(coord.x, coord.y, status) for coord, status in wafer_map.dies.items()],
        columns=DIE_COLUMNS
    )
    return df.sort_values(['DIE_Y', 'DIE_X'], ignore_index=True)

def defects_to_dataframe(wafer_map: WaferMap) -> pd.DataFrame:
    """Table of the defect index, including the contributing map for sequence merges."""
    if not wafer_map.defects:
        return pd.DataFrame(columns=DEFECT_COLUMNS)

    df = pd.DataFrame(
        [
            (coord.x, coord.y, info.type, info.additional_info, info.source)
            for coord, info in wafer_map.defects.items()
        ],
        columns=DEFECT_COLUMNS
    )
    df['SOURCE_MAP'] = df['SOURCE_MAP'].astype('Int64')
    return df.sort_values(['DIE_Y', 'DIE_X'], ignore_index=True)

def calculate_bin_statistics(wafer_map: WaferMap) -> pd.DataFrame:
    """
    Counts dies per bin code. PERCENT is relative to the declared grid size
    (Rows * Columns), so absent positions are part of the denominator.
    """
    df = dies_to_dataframe(wafer_map)
    if df.empty:
        return pd.DataFrame(columns=BIN_STAT_COLUMNS)

    counts = df['STATUS'].value_counts()
    stats = counts.rename_axis('BIN_CODE').reset_index(name='COUNT')
    stats['LABEL'] = stats['BIN_CODE'].map(STATUS_LABELS).fillna('Other')

    grid_size = wafer_map.rows * wafer_map.columns
    if grid_size > 0:
        stats['PERCENT'] = (stats['COUNT'] / grid_size * 100).round(1)
    else:
        stats['PERCENT'] = 0.0

    return stats[BIN_STAT_COLUMNS]

def status_matrix(wafer_map: WaferMap) -> np.ndarray:
    """(rows, cols) array of status codes; absent positions read as the null bin."""
    rows, cols = wafer_map.rows, wafer_map.columns
    matrix = np.full((rows, cols), NULL_STATUS, dtype='<U2')
    for coord, status in wafer_map.dies.items():
        if 0 <= coord.x < cols and 0 <= coord.y < rows:
            matrix[coord.y, coord.x] = status
    return matrix

def summarize_map(wafer_map: WaferMap) -> MapSummary:
    """Calculates the headline counts and the pass yield of a wafer map."""
    counts = pd.Series(list(wafer_map.dies.values()), dtype='object').value_counts()

    def count(code: str) -> int:
        return int(counts.get(code, 0))

    known = (PASS_STATUS, DEFECT_STATUS, REFERENCE_STATUS, NULL_STATUS, FAIL_CODE_STATUS)
    pass_count = count(PASS_STATUS)
    defect_count = count(DEFECT_STATUS)
    tested = pass_count + defect_count

    return MapSummary(
        rows=wafer_map.rows,
        columns=wafer_map.columns,
        total_dies=len(wafer_map.dies),
        pass_count=pass_count,
        defect_count=defect_count,
        reference_count=count(REFERENCE_STATUS),
        null_count=count(NULL_STATUS),
        fail_code_count=count(FAIL_CODE_STATUS),
        other_count=int(counts[~counts.index.isin(known)].sum()),
        yield_percent=round(pass_count / tested * 100, 2) if tested else 0.0
    )
