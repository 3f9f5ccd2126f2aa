import pytest
from g85merge.core.errors import FormatError
from g85merge.core.models import Coord, DefectInfo, ReferenceDevice
from g85merge.io.parser import parse
from tests.create_test_data import build_g85, build_map, grid_rows

@pytest.fixture
def basic_text() -> str:
    rows = grid_rows(3, 4, marks={(1, 0): "EF", (2, 1): "FA", (3, 2): "FF"})
    return build_g85(
        rows,
        reference=("2", "1"),
        bins=[("01", "Pass", "Good Die", "9"), ("EF", "Fail", "Fail Die", "1")]
    )

def test_parse_grid_and_metadata(basic_text):
    m = parse(basic_text)

    assert m.rows == 3
    assert m.columns == 4
    assert len(m.dies) == 12
    assert m.dies[Coord(1, 0)] == "EF"
    assert m.dies[Coord(0, 0)] == "01"
    assert m.header["LotId"] == "A1.2"
    assert m.header["ProductId"] == "PROD-1"
    assert m.map_attributes["SubstrateNumber"] == "7"
    assert m.map_attributes["FormatRevision"] == "SEMI G85-0703"
    assert m.reference_device == ReferenceDevice(x="2", y="1")
    assert [b.code for b in m.bins] == ["01", "EF"]
    assert m.bins[1].count == "1"

def test_defect_index_tracks_ef_and_fa(basic_text):
    m = parse(basic_text)

    assert set(m.defects) == {Coord(1, 0), Coord(2, 1)}
    assert m.defects[Coord(1, 0)] == DefectInfo(type="EF", additional_info="Defect")
    assert m.defects[Coord(2, 1)] == DefectInfo(type="FA", additional_info="Reference Device")

def test_parse_accepts_bytes_and_bom(basic_text):
    from_bytes = parse(basic_text.encode("utf-8"))
    from_bom = parse("\ufeff" + basic_text)
    assert from_bytes.dies == parse(basic_text).dies
    assert from_bom.dies == from_bytes.dies

def test_parse_without_namespace():
    text = (
        '<Map SubstrateNumber="3"><Device Rows="1" Columns="2">'
        '<Data><Row>01EF</Row></Data></Device></Map>'
    )
    m = parse(text)
    assert m.dies == {Coord(0, 0): "01", Coord(1, 0): "EF"}
    assert m.map_attributes == {"SubstrateNumber": "3"}

def test_odd_row_length_ignores_trailing_character(caplog):
    m = build_map(["01EF0", "0101"])
    assert m.dies[Coord(1, 0)] == "EF"
    assert Coord(2, 0) not in m.dies
    assert "odd length" in caplog.text

def test_missing_reference_device_and_bins():
    m = build_map(grid_rows(2, 2))
    assert m.reference_device is None
    assert m.bins == []

def test_malformed_xml_raises_format_error():
    with pytest.raises(FormatError):
        parse("<Map><Device></Map>")

def test_wrong_root_raises_format_error():
    with pytest.raises(FormatError, match="Map"):
        parse("<Wafer><Device Rows='1' Columns='1'/></Wafer>")

def test_missing_extents_raise_on_use():
    m = parse("<Map><Device LotId='X'><Data><Row>01</Row></Data></Device></Map>")
    assert m.dies == {Coord(0, 0): "01"}
    with pytest.raises(FormatError, match="Rows"):
        _ = m.rows

def test_non_integer_extent_raises():
    m = build_map(grid_rows(1, 1), extra_header={"Columns": "wide"})
    with pytest.raises(FormatError, match="Columns"):
        _ = m.columns
