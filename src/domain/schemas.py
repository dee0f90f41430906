"""
Data schemas for the comparison engine.

규칙:
- Workbook: sheet 이름 → Row 목록 (삽입 순서 = 원본 순서)
- Row: column header → CellValue (숫자 또는 escape된 텍스트)
- DifferenceRecord: 생성 후 불변 (frozen)
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from src.domain.constants import COMPOSITE_KEY_SEPARATOR

# =============================================================================
# Type Aliases
# =============================================================================

# 정규화 후 셀 값: 숫자는 그대로, 텍스트는 percent-escape 된 str
CellValue = Union[int, float, str]

Row = Mapping[str, CellValue]
Workbook = Mapping[str, Sequence[Row]]

# 디코더 출력 (정규화 전): 임의의 scalar
RawRow = Mapping[str, Any]
RawWorkbook = Mapping[str, Sequence[RawRow]]


# =============================================================================
# Comparison Schemas
# =============================================================================

@dataclass(frozen=True)
class DifferenceRecord:
    """
    차이 레코드 하나.

    row_number는 표시용 (ordinal index + 2).
    baseline_value / comparison_value 는 저장 형태 그대로
    (텍스트는 escape 상태, 누락은 None).
    """
    sheet_name: str
    row_number: int
    column_header: str
    baseline_value: CellValue | None
    comparison_value: CellValue | None

    @property
    def key(self) -> str:
        """sheet-column 복합 키 (예: "Sheet1-Score")."""
        return f"{self.sheet_name}{COMPOSITE_KEY_SEPARATOR}{self.column_header}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheet_name": self.sheet_name,
            "row_number": self.row_number,
            "column_header": self.column_header,
            "key": self.key,
            "baseline_value": self.baseline_value,
            "comparison_value": self.comparison_value,
        }


@dataclass
class SheetAlignment:
    """
    sheet 하나의 정렬 결과.

    rows_a / rows_b: 각 워크북의 행 (없는 sheet 는 빈 리스트)
    headers: 양쪽 모든 행의 header 합집합 (first-seen 순서)
    in_baseline / in_comparison: sheet 존재 여부 (빈 sheet 도 존재로 취급)
    """
    sheet_name: str
    rows_a: Sequence[Row] = field(default_factory=list)
    rows_b: Sequence[Row] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)
    in_baseline: bool = True
    in_comparison: bool = True


@dataclass
class ComparisonResult:
    """엔진 실행 결과: 차이 레코드 + 리포트 텍스트."""
    differences: list[DifferenceRecord] = field(default_factory=list)
    report: str = ""
    warnings: list["WarningLog"] = field(default_factory=list)

    @property
    def difference_count(self) -> int:
        return len(self.differences)


# =============================================================================
# Run Log Schemas
# =============================================================================

@dataclass
class WarningLog:
    """
    경고 로그.

    경고 필수 컨텍스트: level, code, sheet_name, message
    """
    level: str = "warning"
    code: str = ""
    sheet_name: str = ""
    source: str = ""  # baseline or comparison
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "sheet_name": self.sheet_name,
            "source": self.source,
            "message": self.message,
        }


@dataclass
class RunLog:
    """
    실행 로그.

    비교 1회 단위 실행 결과 및 메타데이터.
    """
    run_id: str
    started_at: str  # ISO 8601
    baseline_name: str = ""
    comparison_name: str = ""
    threshold: float | None = None
    finished_at: str | None = None
    input_hashes: dict[str, str] = field(default_factory=dict)  # role → SHA-256
    result: str = "pending"  # pending, success, failed

    # Outcome
    difference_count: int = 0
    report_hash: str | None = None
    report_path: str | None = None

    # Events
    warnings: list[WarningLog] = field(default_factory=list)

    # Error (if failed)
    error_code: str | None = None
    error_context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "baseline_name": self.baseline_name,
            "comparison_name": self.comparison_name,
            "threshold": self.threshold,
            "input_hashes": dict(self.input_hashes),
            "difference_count": self.difference_count,
            "report_hash": self.report_hash,
            "report_path": self.report_path,
            "warnings": [w.to_dict() for w in self.warnings],
            "error_code": self.error_code,
            "error_context": self.error_context,
        }
