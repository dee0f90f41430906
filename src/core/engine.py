"""
Diff Engine: sheet × row × column 순회, 차이 레코드 수집.

흐름:
    decoded A, decoded B
      → CellNormalizer (양쪽)
      → align_workbooks (sheet / header 합집합)
      → diff_sheet (sheet 별) → 이어 붙이기
      → ReportFormatter
      → ComparisonResult

행 매칭은 순수하게 위치 기반:
- baseline 행을 ordinal index 로 순회, comparison 은 같은 index 의 행 (없으면 빈 행)
- 중간에 행이 추가/삭제되면 이후 행은 모두 어긋난다 (key 기반 매칭 없음)
- comparison 에만 있는 sheet 는 comparison 행을 순회 (모든 셀이 N/A 와 비교됨)

진행률: progress 콜백에 시작 0, 완료 100. 실패 시 0 으로 되돌린 뒤 예외 전파.
"""

import logging
import math
from collections.abc import Callable, Sequence
from decimal import Decimal

from src.core.align import align_workbooks
from src.core.compare import is_different
from src.core.normalize import CellNormalizer, is_number
from src.domain.constants import ROW_NUMBER_OFFSET
from src.domain.errors import ErrorCodes, PolicyRejectError
from src.domain.schemas import (
    ComparisonResult,
    DifferenceRecord,
    RawWorkbook,
    SheetAlignment,
    Workbook,
)
from src.ingest.workbook import WorkbookSource, load_workbook_pair
from src.render.report import render_report

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

PROGRESS_START = 0
PROGRESS_DONE = 100


def check_threshold(threshold: float) -> float:
    """
    엔진 레벨 threshold 검증.

    [0, 1] 범위 검증은 호출자 (API / CLI) 책임. 엔진은 0 이상의 유한한 수면 받는다.

    Raises:
        PolicyRejectError: INVALID_THRESHOLD (음수, NaN, Inf, 숫자 아님)
    """
    if not is_number(threshold):
        raise PolicyRejectError(ErrorCodes.INVALID_THRESHOLD, threshold=threshold)

    value = float(threshold) if isinstance(threshold, Decimal) else threshold
    if not math.isfinite(value) or value < 0:
        raise PolicyRejectError(ErrorCodes.INVALID_THRESHOLD, threshold=threshold)
    return value


def diff_sheet(alignment: SheetAlignment, threshold: float) -> list[DifferenceRecord]:
    """
    sheet 하나의 차이 레코드.

    Args:
        alignment: align_workbooks 결과
        threshold: 숫자 허용 오차

    Returns:
        행 순서 → header 순서의 차이 레코드
    """
    rows_a = alignment.rows_a
    rows_b = alignment.rows_b
    # baseline 에 sheet 가 있으면 baseline 행 수 기준
    driving_count = len(rows_a) if alignment.in_baseline else len(rows_b)

    differences: list[DifferenceRecord] = []
    for index in range(driving_count):
        row_a = rows_a[index] if index < len(rows_a) else {}
        row_b = rows_b[index] if index < len(rows_b) else {}

        for header in alignment.headers:
            value_a = row_a.get(header)
            value_b = row_b.get(header)
            if is_different(value_a, value_b, threshold):
                differences.append(DifferenceRecord(
                    sheet_name=alignment.sheet_name,
                    row_number=index + ROW_NUMBER_OFFSET,
                    column_header=header,
                    baseline_value=value_a,
                    comparison_value=value_b,
                ))

    return differences


def diff_workbooks(
    workbook_a: Workbook,
    workbook_b: Workbook,
    threshold: float,
) -> list[DifferenceRecord]:
    """
    정규화된 워크북 두 개의 전체 차이 (sheet 순서대로 이어 붙임).

    Raises:
        PolicyRejectError: INVALID_THRESHOLD
    """
    threshold = check_threshold(threshold)

    differences: list[DifferenceRecord] = []
    for alignment in align_workbooks(workbook_a, workbook_b):
        sheet_diffs = diff_sheet(alignment, threshold)
        logger.debug(
            f"Sheet '{alignment.sheet_name}': {len(alignment.rows_a)} vs "
            f"{len(alignment.rows_b)} rows, {len(alignment.headers)} columns, "
            f"{len(sheet_diffs)} differences"
        )
        differences.extend(sheet_diffs)
    return differences


def compare_workbooks(
    baseline: RawWorkbook,
    comparison: RawWorkbook,
    threshold: float,
    progress: ProgressCallback | None = None,
) -> ComparisonResult:
    """
    디코딩된 워크북 두 개 비교 → 차이 레코드 + 리포트.

    Args:
        baseline: baseline 디코더 출력
        comparison: comparison 디코더 출력
        threshold: 숫자 허용 오차 (절대값)
        progress: 진행률 콜백 (0 → 100)

    Returns:
        ComparisonResult

    Raises:
        PolicyRejectError: INVALID_THRESHOLD
    """
    _report_progress(progress, PROGRESS_START)
    try:
        normalizer_a = CellNormalizer(source="baseline")
        normalizer_b = CellNormalizer(source="comparison")
        workbook_a = normalizer_a.normalize_workbook(baseline)
        workbook_b = normalizer_b.normalize_workbook(comparison)

        differences = diff_workbooks(workbook_a, workbook_b, threshold)
        report = render_report(differences, workbook_a)
    except Exception:
        _report_progress(progress, PROGRESS_START)
        raise

    _report_progress(progress, PROGRESS_DONE)
    logger.info(f"Comparison finished: {len(differences)} differences")

    return ComparisonResult(
        differences=differences,
        report=report,
        warnings=[*normalizer_a.warnings, *normalizer_b.warnings],
    )


async def compare_files(
    baseline: WorkbookSource | None,
    comparison: WorkbookSource | None,
    threshold: float,
    progress: ProgressCallback | None = None,
    baseline_name: str | None = None,
    comparison_name: str | None = None,
) -> ComparisonResult:
    """
    파일 두 개를 동시에 디코딩한 뒤 비교.

    어느 한쪽 디코딩이라도 실패하면 전체 실행 중단 (부분 결과 없음).

    Raises:
        PolicyRejectError: MISSING_INPUT, DECODE_FAILED, ENCODING_INVALID,
            UNSUPPORTED_FORMAT, INVALID_THRESHOLD
    """
    _report_progress(progress, PROGRESS_START)
    try:
        check_threshold(threshold)
        workbook_a, workbook_b = await load_workbook_pair(
            baseline,
            comparison,
            baseline_name=baseline_name,
            comparison_name=comparison_name,
        )
    except Exception:
        _report_progress(progress, PROGRESS_START)
        raise

    return compare_workbooks(workbook_a, workbook_b, threshold, progress=progress)


def _report_progress(progress: ProgressCallback | None, value: int) -> None:
    if progress is not None:
        progress(value)


def count_by_sheet(differences: Sequence[DifferenceRecord]) -> dict[str, int]:
    """sheet 별 차이 수 (first-seen 순서)."""
    counts: dict[str, int] = {}
    for d in differences:
        counts[d.sheet_name] = counts.get(d.sheet_name, 0) + 1
    return counts
