import pandas as pd
from typing import List
from g85merge.state import SessionStore
from g85merge.enums import MergeMode
from g85merge.analytics.statistics import summarize_map

def build_input_labels(store: SessionStore) -> List[str]:
    """
    Labels for the input previews. The role of each map depends on the merge
    mode: base/overlay, control/scan, or its position in the sequence.
    """
    names = store.input_names
    mode = store.merge_mode
    labels = []
    for i, name in enumerate(names):
        if mode == MergeMode.PAIRWISE:
            role = "Base" if i == 0 else "Merged In"
        elif mode == MergeMode.CONTROL_SCAN:
            role = "Control" if i == 0 else "Scan"
        else:
            role = f"Map {i + 1}"
        labels.append(f"{role}: {name}")
    return labels

def build_input_summary(store: SessionStore) -> pd.DataFrame:
    """One row per input map with its grid size and headline counts."""
    records = []
    for name, wafer_map in zip(store.input_names, store.input_maps):
        summary = summarize_map(wafer_map)
        records.append({
            'File': name,
            'Lot': wafer_map.header.get('LotId', ''),
            'Grid': f"{summary.rows} x {summary.columns}",
            'Dies': summary.total_dies,
            'Pass': summary.pass_count,
            'Defects': summary.defect_count,
            'Reference': summary.reference_count,
            'Yield %': summary.yield_percent,
        })
    return pd.DataFrame(records)
