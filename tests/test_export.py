import pytest
from g85merge.merge.export import mark_lot_id, mark_substrate_number, apply_export_mutation
from tests.create_test_data import build_map, grid_rows

@pytest.mark.parametrize("lot_id, expected", [
    ("A1.2", "A1Z.2"),
    ("A1", "A1Z"),
    ("LOT.1.3", "LOTZ.1.3"),
    ("", ""),
    (None, None),
])
def test_mark_lot_id(lot_id, expected):
    assert mark_lot_id(lot_id) == expected

def test_mark_substrate_number():
    assert mark_substrate_number("7") == "7Z"
    assert mark_substrate_number("") == ""

def test_apply_export_mutation_returns_new_map():
    m = build_map(grid_rows(2, 2), lot_id="A1.2")
    mutated = apply_export_mutation(m)

    assert mutated.header["LotId"] == "A1Z.2"
    assert mutated.map_attributes["SubstrateNumber"] == "7Z"
    assert mutated.dies == m.dies
    assert m.header["LotId"] == "A1.2"
    assert m.map_attributes["SubstrateNumber"] == "7"

def test_missing_ids_are_not_invented():
    m = build_map(grid_rows(1, 1), lot_id="", substrate={})
    mutated = apply_export_mutation(m)
    assert mutated.header["LotId"] == ""
    assert "SubstrateNumber" not in mutated.map_attributes
