"""
Report Formatter: 차이 레코드 → 텍스트 리포트.

한 레코드 = 한 줄:
    Sheet: <name>, Row: <n>, Column: <letter>, Baseline: <value>, Comparison: <value>

- 열 문자: baseline sheet 첫 행 key 순서의 index → A, B, ..., Z, AA, ...
  baseline 에 없는 열은 "A" (알려진 quirk, 에러 아님)
- 텍스트: unescape + trim 후 표시, 숫자: 그대로
- 줄 구분 "\\n", 마지막 줄 뒤 구분자 없음, UTF-8
"""

from collections.abc import Sequence
from pathlib import Path

from src.core.align import baseline_header_order
from src.core.normalize import display_value
from src.core.storage import atomic_write_text
from src.domain.constants import REPORT_ENCODING, REPORT_LINE_SEPARATOR
from src.domain.errors import ErrorCodes, PolicyRejectError
from src.domain.schemas import DifferenceRecord, Workbook


def column_letter(index: int) -> str:
    """
    0-based 열 index → 스프레드시트 열 문자 (base-26).

    0 → A, 25 → Z, 26 → AA, 701 → ZZ, 702 → AAA.
    음수 (header 를 찾지 못함) → "A".
    """
    letters = ""
    while index >= 0:
        letters = chr(ord("A") + index % 26) + letters
        index = index // 26 - 1
    return letters or "A"


class ReportFormatter:
    """
    차이 레코드 목록을 리포트 텍스트로 렌더링.

    Usage:
        formatter = ReportFormatter(baseline_workbook)
        text = formatter.render(differences)
    """

    def __init__(self, baseline: Workbook):
        """
        Args:
            baseline: 정규화된 baseline 워크북 (열 문자 계산용)
        """
        self.baseline = baseline
        self._header_orders: dict[str, list[str]] = {}

    def header_order(self, sheet_name: str) -> list[str]:
        """sheet 별 baseline header 순서 (캐시)."""
        if sheet_name not in self._header_orders:
            self._header_orders[sheet_name] = baseline_header_order(self.baseline, sheet_name)
        return self._header_orders[sheet_name]

    def column_letter_for(self, record: DifferenceRecord) -> str:
        headers = self.header_order(record.sheet_name)
        try:
            index = headers.index(record.column_header)
        except ValueError:
            index = -1
        return column_letter(index)

    def format_line(self, record: DifferenceRecord) -> str:
        """레코드 한 줄."""
        return (
            f"Sheet: {record.sheet_name}, "
            f"Row: {record.row_number}, "
            f"Column: {self.column_letter_for(record)}, "
            f"Baseline: {display_value(record.baseline_value)}, "
            f"Comparison: {display_value(record.comparison_value)}"
        )

    def render(self, differences: Sequence[DifferenceRecord]) -> str:
        """전체 리포트 텍스트 (차이가 없으면 빈 문자열)."""
        return REPORT_LINE_SEPARATOR.join(self.format_line(d) for d in differences)


def render_report(
    differences: Sequence[DifferenceRecord],
    baseline: Workbook,
) -> str:
    """
    리포트 텍스트 생성 (간편 함수).

    Args:
        differences: 전체 차이 레코드 (sheet 순서대로 이어 붙인 것)
        baseline: 정규화된 baseline 워크북

    Returns:
        리포트 텍스트
    """
    return ReportFormatter(baseline).render(differences)


def write_report(report: str, output_path: Path) -> Path:
    """
    리포트를 UTF-8 파일로 원자적 저장.

    Raises:
        PolicyRejectError: REPORT_WRITE_FAILED
    """
    try:
        atomic_write_text(output_path, report, encoding=REPORT_ENCODING)
    except OSError as e:
        raise PolicyRejectError(
            ErrorCodes.REPORT_WRITE_FAILED,
            path=str(output_path),
            error=str(e),
        ) from e
    return output_path
