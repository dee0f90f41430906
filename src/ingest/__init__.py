"""
Ingest layer: spreadsheet 파일 디코딩.

역할:
- .xlsx (openpyxl), .xls (xlrd) → sheet 별 행 목록
- 두 파일 동시 디코딩 (fan-out / fan-in)
"""

from .workbook import decode_workbook, detect_format, load_workbook_pair, rows_to_records

__all__ = [
    "decode_workbook",
    "detect_format",
    "load_workbook_pair",
    "rows_to_records",
]
