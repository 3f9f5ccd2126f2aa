import pytest
from g85merge.core.errors import InputError
from g85merge.core.models import Coord
from g85merge.enums import MergeMode, DieStatus
from g85merge.merge.modes import run_merge
from tests.create_test_data import build_map, grid_rows

@pytest.fixture
def pair():
    a = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "FF", (4, 5): "FF"}), lot_id="A1.2")
    b = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "EF", (4, 5): "FF"}), lot_id="B1.2")
    return [a, b]

def test_pairwise_mode(pair):
    merged = run_merge(MergeMode.PAIRWISE, pair, export_mutation=True)
    assert merged.dies[Coord(3, 3)] == "EF"
    # export mutation does not apply to pairwise merges
    assert merged.header["LotId"] == "A1.2"

def test_control_scan_mode(pair):
    merged = run_merge(MergeMode.CONTROL_SCAN, pair, export_mutation=True)
    # control die (3,3) is a null die, so the scan defect is not overlaid
    assert merged.dies[Coord(3, 3)] == "FF"
    assert merged.header["LotId"] == "B1Z.2"

def test_sequence_mode(pair):
    merged = run_merge(MergeMode.SEQUENCE, pair + [pair[1]])
    assert merged.header["LotId"] == "A1.2"

@pytest.mark.parametrize("mode", [MergeMode.PAIRWISE, MergeMode.CONTROL_SCAN])
def test_two_map_modes_reject_other_counts(mode, pair):
    with pytest.raises(InputError):
        run_merge(mode, pair + [pair[0]])

def test_enum_values():
    assert DieStatus.values() == ["01", "EF", "FA", "FF", "FC"]
    assert MergeMode("Sequential Merge") == MergeMode.SEQUENCE
