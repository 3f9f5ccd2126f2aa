"""
Excel Export Logic.
Builds the multi-sheet die report for a wafer map using xlsxwriter.
"""
import pandas as pd
import io
import logging
from datetime import datetime
from typing import Dict, Any
from g85merge.core.models import WaferMap
from g85merge.analytics.statistics import (
    calculate_bin_statistics, defects_to_dataframe, summarize_map
)
from g85merge.utils.telemetry import track_performance

# --- REPORT THEME ---
THEME_COLOR_PRIMARY = '#1F497D'       # Dark Blue (Headers)
THEME_COLOR_SECONDARY = '#D9E1F2'     # Light Blue (Alternating Rows)
FONT_MAIN = 'Calibri'

SUMMARY_SHEET = 'Summary'
BIN_SHEET = 'Bin Statistics'
DEFECT_SHEET = 'Defects'
HEADER_SHEET = 'Header'

logger = logging.getLogger(__name__)

def _define_formats(workbook) -> Dict[str, Any]:
    """Styling formats shared by all sheets."""
    base_fmt = {'font_name': FONT_MAIN, 'font_size': 11, 'border': 0}

    return {
        'title': workbook.add_format({**base_fmt, 'bold': True, 'font_size': 18, 'font_color': THEME_COLOR_PRIMARY, 'valign': 'vcenter'}),
        'subtitle': workbook.add_format({**base_fmt, 'bold': True, 'font_size': 12, 'font_color': '#595959'}),
        'header': workbook.add_format({
            **base_fmt, 'bold': True, 'text_wrap': True, 'valign': 'top',
            'fg_color': THEME_COLOR_PRIMARY, 'font_color': 'white',
            'border': 1, 'align': 'center'
        }),
        'label': workbook.add_format({**base_fmt, 'bold': True, 'border': 1, 'bg_color': THEME_COLOR_SECONDARY}),
        'cell': workbook.add_format({**base_fmt, 'border': 1}),
        'int': workbook.add_format({**base_fmt, 'num_format': '#,##0', 'border': 1, 'align': 'center'}),
        'percent': workbook.add_format({**base_fmt, 'num_format': '0.00', 'border': 1, 'align': 'center'}),
        'meta_label': workbook.add_format({**base_fmt, 'bold': True, 'font_color': '#7F7F7F', 'font_size': 8}),
        'meta_value': workbook.add_format({**base_fmt, 'font_size': 8}),
    }

def _auto_fit_columns(worksheet, df: pd.DataFrame, start_col: int = 0, padding: int = 2):
    """Adjusts column widths based on content."""
    for i, col in enumerate(df.columns):
        widths = df[col].map(lambda v: '' if pd.isna(v) else str(v)).map(len)
        max_len = max(
            int(widths.max()) if not widths.empty else 0,
            len(str(col))
        )
        worksheet.set_column(start_col + i, start_col + i, max_len + padding)

def _write_table(writer, formats, df: pd.DataFrame, sheet_name: str):
    """Writes a DataFrame with styled headers starting at the top-left cell."""
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    sheet = writer.sheets[sheet_name]
    for col_num, value in enumerate(df.columns):
        sheet.write(0, col_num, value, formats['header'])
    _auto_fit_columns(sheet, df)
    if not df.empty:
        sheet.autofilter(0, 0, len(df), len(df.columns) - 1)
    sheet.freeze_panes(1, 0)

# --- SHEET 1: SUMMARY ---
def _create_summary(writer, formats, wafer_map: WaferMap, source_filename: str):
    summary = summarize_map(wafer_map)
    sheet = writer.book.add_worksheet(SUMMARY_SHEET)
    writer.sheets[SUMMARY_SHEET] = sheet
    sheet.hide_gridlines(2)

    sheet.write('A1', 'GENERATED:', formats['meta_label'])
    sheet.write('B1', datetime.now().strftime("%Y-%m-%d %H:%M:%S"), formats['meta_value'])
    sheet.write('A3', 'Wafer Map Die Report', formats['title'])
    sheet.write('A4', f'Source: {source_filename}', formats['subtitle'])

    rows = [
        ('Lot', wafer_map.header.get('LotId', ''), 'cell'),
        ('Substrate', wafer_map.map_attributes.get('SubstrateNumber', ''), 'cell'),
        ('Rows', summary.rows, 'int'),
        ('Columns', summary.columns, 'int'),
        ('Grid Positions', summary.grid_size, 'int'),
        ('Dies Present', summary.total_dies, 'int'),
        ('Pass (01)', summary.pass_count, 'int'),
        ('Defect (EF)', summary.defect_count, 'int'),
        ('Reference (FA)', summary.reference_count, 'int'),
        ('Null (FF)', summary.null_count, 'int'),
        ('Fail Code (FC)', summary.fail_code_count, 'int'),
        ('Other Codes', summary.other_count, 'int'),
        ('Yield %', summary.yield_percent, 'percent'),
    ]
    start_row = 5
    for offset, (label, value, fmt) in enumerate(rows):
        sheet.write(start_row + offset, 0, label, formats['label'])
        sheet.write(start_row + offset, 1, value, formats[fmt])

    sheet.set_column(0, 0, 18)
    sheet.set_column(1, 1, 24)

@track_performance("Export: Excel Report")
def generate_die_report(wafer_map: WaferMap, source_filename: str = "merged.g85") -> bytes:
    """
    Generates the Excel die report for one wafer map.
    Sheets: Summary, Bin Statistics, Defects, Header.
    """
    output_buffer = io.BytesIO()

    bin_stats = calculate_bin_statistics(wafer_map)
    defects = defects_to_dataframe(wafer_map)
    header = pd.DataFrame(
        [(key, value) for key, value in wafer_map.header.items()],
        columns=['ATTRIBUTE', 'VALUE']
    )

    with pd.ExcelWriter(output_buffer, engine='xlsxwriter') as writer:
        formats = _define_formats(writer.book)
        _create_summary(writer, formats, wafer_map, source_filename)
        _write_table(writer, formats, bin_stats, BIN_SHEET)
        _write_table(writer, formats, defects, DEFECT_SHEET)
        _write_table(writer, formats, header, HEADER_SHEET)

    excel_bytes = output_buffer.getvalue()
    logger.info(f"Excel report for '{source_filename}' generated ({len(excel_bytes)} bytes)")
    return excel_bytes
