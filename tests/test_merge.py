import pytest
from g85merge.core.errors import AlignmentError, InputError
from g85merge.core.models import Coord, DefectInfo
from g85merge.merge.engine import merge_two, merge_control_and_scan, merge_sequence
from g85merge.merge.validation import validate_bounds
from tests.create_test_data import build_map, grid_rows, block_map, empty_map

# --- Pairwise ---

def test_base_status_wins_over_incoming_defect():
    a = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "FF"}))
    b = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (2, 2): "EF", (3, 3): "EF"}))

    merged = merge_two(a, b)

    assert merged.dies[Coord(2, 2)] == "01"
    assert Coord(2, 2) not in merged.defects
    assert merged.dies[Coord(3, 3)] == "EF"
    assert merged.defects[Coord(3, 3)].type == "EF"

def test_result_inherits_base_metadata():
    a = build_map(grid_rows(4, 4, marks={(1, 1): "FA"}), lot_id="BASE.1", reference=("1", "1"),
                  bins=[("01", "Pass", "Good Die", "15")])
    b = build_map(grid_rows(4, 4, marks={(1, 1): "FA"}), lot_id="OTHER.9")

    merged = merge_two(a, b)
    assert merged.header == a.header
    assert merged.bins == a.bins
    assert merged.reference_device == a.reference_device
    assert merged.map_attributes == a.map_attributes

def test_merge_with_all_null_map_is_identity():
    a = build_map(grid_rows(10, 10, marks={(4, 4): "FF", (5, 4): "FF", (1, 1): "EF"}))
    null_map = build_map(grid_rows(10, 10, fill="FF"))

    merged = merge_two(a, null_map)

    assert merged.dies == a.dies
    assert merged.defects == a.defects
    assert merged.header == a.header
    assert merged.map_attributes == a.map_attributes

def test_merge_with_all_null_map_keeps_fail_code_block():
    a = build_map(grid_rows(10, 10, marks={(4, 6): "FC", (5, 6): "FC"}))
    null_map = build_map(grid_rows(10, 10, fill="FF"))

    merged = merge_two(a, null_map)

    assert merged.dies == a.dies
    assert merged.dies[Coord(4, 6)] == "FC"
    assert merged.dies[Coord(5, 6)] == "FC"

def test_incoming_fail_code_does_not_replace_base_null():
    a = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "FF", (4, 4): "FC"}))
    b = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "FC", (4, 4): "EF"}))

    merged = merge_two(a, b)

    assert merged.dies[Coord(3, 3)] == "FF"
    assert merged.dies[Coord(4, 4)] == "EF"
    assert merged.defects[Coord(4, 4)].type == "EF"

def test_inputs_are_not_mutated():
    a = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "FF"}))
    b = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "EF"}))
    a_dies, b_dies = dict(a.dies), dict(b.dies)

    merge_two(a, b)
    assert a.dies == a_dies
    assert b.dies == b_dies
    assert Coord(3, 3) not in a.defects

def test_translated_dies_outside_grid_are_dropped():
    a = build_map(grid_rows(6, 6, marks={(0, 0): "FA"}))
    b = build_map(grid_rows(6, 6, marks={(2, 2): "FA", (0, 0): "EF"}))

    merged = merge_two(a, b)

    assert len(merged.dies) <= merged.rows * merged.columns
    assert all(merged.in_bounds(c) for c in merged.dies)
    assert all(merged.in_bounds(c) for c in merged.defects)

def test_positive_overflow_is_dropped():
    a = build_map(grid_rows(10, 10, marks={(9, 5): "FA"}))
    b = build_map(grid_rows(10, 10, marks={(6, 5): "FA", (9, 2): "EF"}))

    merged = merge_two(a, b)

    assert Coord(12, 2) not in merged.dies
    assert Coord(12, 2) not in merged.defects
    assert len(merged.dies) == 100

def test_merge_result_carries_validation_report():
    a = build_map(grid_rows(10, 10, marks={(9, 5): "FA"}))
    b = build_map(grid_rows(10, 10, marks={(6, 5): "FA", (9, 2): "EF"}))

    merged = merge_two(a, b)

    # offset (3, 0) pushes b's last three columns past the edge
    assert merged.validation.dropped_dies == 30
    assert merged.validation.dropped_defects == 1
    assert merged.validation.dropped
    assert a.validation is None

def test_pairwise_raises_when_unalignable():
    with pytest.raises(AlignmentError):
        merge_two(empty_map(3, 3), empty_map(3, 3))

# --- Control + Scan ---

@pytest.fixture
def control():
    return build_map(
        grid_rows(8, 8, marks={(3, 6): "FF", (4, 6): "FF", (1, 1): "FF"}),
        product_id="CTRL", lot_id="CTRL.1",
        extra_header={"ReferenceDeviceX": "3", "ReferenceDeviceY": "6"},
        bins=[("01", "Pass", "Good Die", "61")]
    )

@pytest.fixture
def scan():
    return build_map(
        grid_rows(9, 9, marks={(4, 8): "FF", (5, 8): "FF", (3, 4): "EF", (2, 3): "EF", (0, 0): "EF"}),
        product_id="SCAN", lot_id="A1.2",
        substrate={"SubstrateNumber": "7", "SubstrateType": "Wafer", "SubstrateId": "S-7", "FormatRevision": "SEMI G85-0703"}
    )

def test_scan_defects_overlay_control_grid(control, scan):
    merged = merge_control_and_scan(control, scan)

    # offset (-1, -2): scan (3,4) lands on control (2,2)
    assert merged.dies[Coord(2, 2)] == "EF"
    assert merged.defects[Coord(2, 2)] == DefectInfo(type="EF", additional_info="Defect from scan map")
    # scan (2,3) lands on a null die of the control map
    assert merged.dies[Coord(1, 1)] == "FF"
    assert Coord(1, 1) not in merged.defects
    assert merged.coords_with_status("EF") == [Coord(2, 2)]
    assert len(merged.dies) == 64

def test_control_metadata_rules(control, scan):
    merged = merge_control_and_scan(control, scan)

    assert merged.header["ProductId"] == "SCAN"
    assert merged.header["Rows"] == "8"
    assert merged.header["Columns"] == "8"
    assert "ReferenceDeviceX" not in merged.header
    assert "ReferenceDeviceY" not in merged.header
    assert merged.bins == control.bins
    assert merged.map_attributes["SubstrateId"] == "S-7"

def test_control_merge_export_mutation(control, scan):
    merged = merge_control_and_scan(control, scan, export_mutation=True)
    assert merged.header["LotId"] == "A1Z.2"
    assert merged.map_attributes["SubstrateNumber"] == "7Z"
    # inputs untouched
    assert scan.header["LotId"] == "A1.2"
    assert scan.map_attributes["SubstrateNumber"] == "7"

# --- Sequence ---

@pytest.fixture
def sequence_maps():
    first = build_map(grid_rows(8, 8, marks={(3, 5): "FF", (4, 5): "FF", (1, 1): "EF"}), lot_id="L1.1")
    second = build_map(grid_rows(8, 8, marks={(3, 5): "FF", (4, 5): "FF", (2, 2): "EF"}), lot_id="L2.1",
                       product_id="PROD-2",
                       substrate={"SubstrateNumber": "12", "SubstrateType": "Wafer", "SubstrateId": "X", "FormatRevision": "R"})
    # shifted one die right and down
    third = build_map(grid_rows(8, 8, marks={(4, 6): "FF", (5, 6): "FF", (4, 4): "EF"}), lot_id="L3.1")
    return [first, second, third]

def test_sequence_provenance(sequence_maps):
    merged = merge_sequence(sequence_maps)

    assert merged.defects[Coord(1, 1)].source == 1
    assert merged.defects[Coord(2, 2)].source == 2
    assert merged.defects[Coord(3, 3)].source == 3
    assert merged.defects[Coord(3, 3)].additional_info == "Defect from map 3"
    assert merged.header["LotId"] == "L1.1"
    assert merged.validation is not None
    assert not merged.validation.dropped

def test_sequence_first_is_control(sequence_maps):
    merged = merge_sequence(sequence_maps, first_is_control=True)
    assert merged.header["LotId"] == "L2.1"
    assert merged.header["ProductId"] == "PROD-2"
    assert merged.map_attributes["SubstrateNumber"] == "12"

def test_sequence_export_mutation(sequence_maps):
    merged = merge_sequence(sequence_maps, export_mutation=True)
    assert merged.header["LotId"] == "L1Z.1"
    assert merged.map_attributes["SubstrateNumber"] == "7Z"

def test_sequence_needs_two_maps(sequence_maps):
    with pytest.raises(InputError):
        merge_sequence(sequence_maps[:1])
    with pytest.raises(InputError):
        merge_sequence([])

def test_sequence_reports_unalignable_map(sequence_maps):
    with pytest.raises(AlignmentError, match="map 3"):
        merge_sequence(sequence_maps[:2] + [empty_map(8, 8)])

# --- Validation ---

def test_validate_bounds_drops_and_resyncs():
    m = block_map(4, 4, {(1, 1): "EF", (2, 2): "01"})
    m.dies[Coord(5, 1)] = "EF"
    m.defects[Coord(5, 1)] = DefectInfo.for_status("EF")
    # stale index entry for a die that is no longer a defect
    m.defects[Coord(2, 2)] = DefectInfo.for_status("EF")

    validated, report = validate_bounds(m)

    assert set(validated.dies) == {Coord(1, 1), Coord(2, 2)}
    assert set(validated.defects) == {Coord(1, 1)}
    assert report.dropped_dies == 1
    assert report.dropped_defects == 2
    assert report.dropped
    # the input is left alone
    assert Coord(5, 1) in m.dies
