"""
Core layer: 비교 엔진 핵심 모듈.

역할:
- Cell Normalizer (normalize), Sheet Aligner (align),
  Value Comparator (compare), Diff Engine (engine)
- run log, 해시, 원자적 쓰기, 설정
"""

from .align import align_workbooks, collect_headers, merge_sheet_names
from .compare import is_different
from .hashing import compute_differences_hash, compute_report_hash
from .ids import generate_run_id
from .logging import complete_run_log, create_run_log, emit_warning, save_run_log
from .normalize import CellNormalizer, escape_text, normalize_workbook, unescape_text
from .storage import atomic_write_json, atomic_write_text

__all__ = [
    # normalize
    "CellNormalizer",
    "escape_text",
    "unescape_text",
    "normalize_workbook",
    # align
    "align_workbooks",
    "collect_headers",
    "merge_sheet_names",
    # compare
    "is_different",
    # ids
    "generate_run_id",
    # hashing
    "compute_report_hash",
    "compute_differences_hash",
    # logging
    "create_run_log",
    "emit_warning",
    "complete_run_log",
    "save_run_log",
    # storage
    "atomic_write_json",
    "atomic_write_text",
]
