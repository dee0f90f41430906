"""
Application Services.

역할:
- comparison: 업로드 → 비교 실행 → 리포트 + run log
"""

from .comparison import ComparisonRun, ComparisonService, UploadedWorkbook, validate_threshold_input

__all__ = [
    "ComparisonRun",
    "ComparisonService",
    "UploadedWorkbook",
    "validate_threshold_input",
]
