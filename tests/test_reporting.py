import pytest
import pandas as pd
from io import BytesIO
from g85merge.io.exporters.excel import generate_die_report
from g85merge.merge.engine import merge_control_and_scan, merge_sequence, merge_two
from tests.create_test_data import build_map, grid_rows

@pytest.fixture
def report_map():
    first = build_map(grid_rows(6, 6, marks={(2, 4): "FF", (1, 1): "EF"}), lot_id="R1.1")
    second = build_map(grid_rows(6, 6, marks={(2, 4): "FF", (3, 1): "EF", (4, 2): "EF"}))
    return merge_sequence([first, second])

@pytest.fixture
def report_bytes(report_map) -> bytes:
    return generate_die_report(report_map, source_filename="MERGED_R1.1_7.g85")

def test_report_structure(report_bytes):
    assert isinstance(report_bytes, bytes)
    assert len(report_bytes) > 0

    with pd.ExcelFile(BytesIO(report_bytes), engine='openpyxl') as xls:
        assert xls.sheet_names == ['Summary', 'Bin Statistics', 'Defects', 'Header']

def test_summary_sheet_content(report_bytes):
    raw = pd.read_excel(BytesIO(report_bytes), sheet_name='Summary', header=None, engine='openpyxl')
    labelled = raw.dropna(subset=[0])
    summary = dict(zip(labelled[0], labelled[1]))

    assert summary['Lot'] == 'R1.1'
    assert int(summary['Rows']) == 6
    assert int(summary['Columns']) == 6
    assert int(summary['Defect (EF)']) == 3
    assert int(summary['Null (FF)']) == 1
    assert float(summary['Yield %']) == pytest.approx(32 / 35 * 100, abs=0.01)

def test_bin_statistics_sheet(report_bytes):
    df = pd.read_excel(BytesIO(report_bytes), sheet_name='Bin Statistics', engine='openpyxl')
    assert list(df.columns) == ['BIN_CODE', 'LABEL', 'COUNT', 'PERCENT']
    assert df['COUNT'].sum() == 36

def test_defects_sheet(report_bytes):
    df = pd.read_excel(BytesIO(report_bytes), sheet_name='Defects', engine='openpyxl')
    assert len(df) == 3
    assert sorted(df['SOURCE_MAP'].tolist()) == [1, 2, 2]

def test_header_sheet(report_bytes, report_map):
    df = pd.read_excel(BytesIO(report_bytes), sheet_name='Header', engine='openpyxl', dtype=str)
    assert dict(zip(df['ATTRIBUTE'], df['VALUE'])) == report_map.header

def test_report_for_pairwise_merge_without_sources():
    a = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "FF"}))
    b = build_map(grid_rows(6, 6, marks={(0, 0): "FA", (3, 3): "EF"}))
    merged = merge_two(a, b)

    df = pd.read_excel(BytesIO(generate_die_report(merged)), sheet_name='Defects', engine='openpyxl')
    assert sorted(df['TYPE'].tolist()) == ['EF', 'FA']
    assert df['SOURCE_MAP'].isna().all()

def test_report_for_control_scan_merge():
    control = build_map(grid_rows(8, 8, marks={(3, 6): "FF", (4, 6): "FF"}))
    scan = build_map(grid_rows(8, 8, marks={(3, 6): "FF", (4, 6): "FF", (2, 2): "EF", (5, 1): "EF"}))
    merged = merge_control_and_scan(control, scan)

    df = pd.read_excel(BytesIO(generate_die_report(merged)), sheet_name='Defects', engine='openpyxl')
    assert len(df) == 2
    assert set(df['ADDITIONAL_INFO']) == {"Defect from scan map"}
