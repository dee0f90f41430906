"""
Render layer: 텍스트 리포트 출력 생성.

역할:
- 차이 레코드 → 한 줄 한 레코드 리포트 (UTF-8)
"""

from .report import ReportFormatter, column_letter, render_report, write_report

__all__ = [
    "ReportFormatter",
    "column_letter",
    "render_report",
    "write_report",
]
