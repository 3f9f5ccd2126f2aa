import logging
from typing import Sequence
from g85merge.core.errors import InputError
from g85merge.core.models import WaferMap
from g85merge.enums import MergeMode
from g85merge.merge.engine import merge_control_and_scan, merge_sequence, merge_two

logger = logging.getLogger(__name__)

def run_merge(
    mode: MergeMode,
    maps: Sequence[WaferMap],
    export_mutation: bool = False,
    first_is_control: bool = False
) -> WaferMap:
    """
    Dispatches the maps to the merge shape selected in the UI.

    Pairwise and control/scan merges take exactly two maps (first is the base
    or the control). Export mutation applies to the control/scan and
    sequential shapes only; first_is_control to the sequential shape only.
    """
    maps = list(maps)
    if mode in (MergeMode.PAIRWISE, MergeMode.CONTROL_SCAN) and len(maps) != 2:
        raise InputError(f"{mode.value} needs exactly 2 maps, got {len(maps)}.")

    logger.info(f"Running '{mode.value}' on {len(maps)} maps")
    if mode == MergeMode.PAIRWISE:
        return merge_two(maps[0], maps[1])
    if mode == MergeMode.CONTROL_SCAN:
        return merge_control_and_scan(maps[0], maps[1], export_mutation=export_mutation)
    return merge_sequence(maps, export_mutation=export_mutation, first_is_control=first_is_control)
