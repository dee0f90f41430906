"""
Sheet Aligner: 두 워크북의 sheet / column 정렬.

- sheet 이름: 양쪽 합집합, baseline → comparison first-seen 순서
- sheet 별 header: 양쪽 모든 행 key 의 합집합 (artifact 제외), first-seen 순서
- 한쪽에만 있는 sheet 는 반대쪽 rows 를 빈 리스트로 채운다
"""

from collections.abc import Iterable, Sequence

from src.core.normalize import is_decoder_artifact
from src.domain.schemas import Row, SheetAlignment, Workbook


def merge_sheet_names(workbook_a: Workbook, workbook_b: Workbook) -> list[str]:
    """
    sheet 이름 합집합 (중복 제거, first-seen 순서).

    순서는 차이 레코드가 이어 붙는 순서에만 영향을 준다.
    """
    return list(dict.fromkeys([*workbook_a.keys(), *workbook_b.keys()]))


def collect_headers(*row_sets: Iterable[Row]) -> list[str]:
    """
    여러 행 집합의 header 합집합.

    빈 header 와 decoder artifact 는 제외. 순서는 결정론적
    (행 순서 → 행 내부 key 순서 기준 first-seen).
    """
    seen: dict[str, None] = {}
    for rows in row_sets:
        for row in rows:
            for header in row:
                if header and not is_decoder_artifact(header):
                    seen.setdefault(header, None)
    return list(seen)


def align_sheet(
    sheet_name: str,
    workbook_a: Workbook,
    workbook_b: Workbook,
) -> SheetAlignment:
    """sheet 하나의 rows / headers 해석."""
    rows_a: Sequence[Row] = workbook_a.get(sheet_name, [])
    rows_b: Sequence[Row] = workbook_b.get(sheet_name, [])

    return SheetAlignment(
        sheet_name=sheet_name,
        rows_a=rows_a,
        rows_b=rows_b,
        headers=collect_headers(rows_a, rows_b),
        in_baseline=sheet_name in workbook_a,
        in_comparison=sheet_name in workbook_b,
    )


def align_workbooks(workbook_a: Workbook, workbook_b: Workbook) -> list[SheetAlignment]:
    """
    두 워크북 정렬.

    Args:
        workbook_a: baseline (정규화됨)
        workbook_b: comparison (정규화됨)

    Returns:
        sheet 순서대로의 SheetAlignment 목록
    """
    return [
        align_sheet(sheet_name, workbook_a, workbook_b)
        for sheet_name in merge_sheet_names(workbook_a, workbook_b)
    ]


def baseline_header_order(workbook_a: Workbook, sheet_name: str) -> list[str]:
    """
    리포트 열 문자 계산용 baseline header 순서.

    baseline sheet 첫 행의 key 순서 그대로 (첫 행에서 빠진 열은 포함되지 않음).
    sheet 가 없거나 비어 있으면 빈 리스트.
    """
    rows = workbook_a.get(sheet_name) or []
    if not rows:
        return []
    return list(rows[0].keys())
