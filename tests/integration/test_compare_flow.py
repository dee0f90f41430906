"""
test_compare_flow.py - 전체 비교 흐름 통합 테스트

검증 포인트:
- Decode (openpyxl) → Normalize → Align → Diff → Report → 파일 저장
- 실제 .xlsx 파일로 sheet / 행 / 열 불일치 시나리오
- 결정론: 같은 입력 → 같은 리포트 해시
"""

from pathlib import Path

import pytest

from src.core.engine import compare_files
from src.core.hashing import compute_differences_hash, compute_file_hash, compute_report_hash
from src.core.logging import complete_run_log, create_run_log, load_run_log, save_run_log
from src.render.report import write_report

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def inventory_pair(make_xlsx) -> tuple[Path, Path]:
    """
    두 sheet 짜리 재고 워크북 쌍.

    차이:
    - Stock 3행 수량 12 → 15
    - Stock 4행 비고 텍스트 변경 (예약 문자 포함)
    - Stock 5행 comparison 에서 삭제
    - Prices 에 comparison 전용 열 Currency 추가
    - comparison 전용 sheet Audit
    """
    baseline = make_xlsx("baseline.xlsx", {
        "Stock": [
            ["Sku", "Qty", "Memo"],
            ["A-1", 10, "ok"],
            ["A-2", 12, "ok"],
            ["A-3", 7, "50% off"],
            ["A-4", 1, "last one"],
        ],
        "Prices": [
            ["Sku", "Price"],
            ["A-1", 9.99],
            ["A-2", 19.5],
        ],
    })
    comparison = make_xlsx("comparison.xlsx", {
        "Stock": [
            ["Sku", "Qty", "Memo"],
            ["A-1", 10, "ok "],
            ["A-2", 15, "ok"],
            ["A-3", 7, "60% off & more"],
        ],
        "Prices": [
            ["Sku", "Price", "Currency"],
            ["A-1", 9.995, "USD"],
            ["A-2", 19.5, "USD"],
        ],
        "Audit": [
            ["Checked"],
            ["yes"],
        ],
    })
    return baseline, comparison


# =============================================================================
# Tests
# =============================================================================


class TestCompareFlow:
    """실제 파일 비교 흐름."""

    @pytest.mark.asyncio
    async def test_full_report(self, inventory_pair, tmp_path: Path):
        baseline, comparison = inventory_pair

        result = await compare_files(baseline, comparison, 0.01)
        report_path = write_report(result.report, tmp_path / "deliverables" / "差异报告.txt")

        assert report_path.read_text(encoding="utf-8").split("\n") == [
            "Sheet: Stock, Row: 3, Column: B, Baseline: 12, Comparison: 15",
            "Sheet: Stock, Row: 4, Column: C, Baseline: 50% off, Comparison: 60% off & more",
            "Sheet: Stock, Row: 5, Column: A, Baseline: A-4, Comparison: N/A",
            "Sheet: Stock, Row: 5, Column: B, Baseline: 1, Comparison: N/A",
            "Sheet: Stock, Row: 5, Column: C, Baseline: last one, Comparison: N/A",
            "Sheet: Prices, Row: 2, Column: A, Baseline: N/A, Comparison: USD",
            "Sheet: Prices, Row: 3, Column: A, Baseline: N/A, Comparison: USD",
            "Sheet: Audit, Row: 2, Column: A, Baseline: N/A, Comparison: yes",
        ]

    @pytest.mark.asyncio
    async def test_tight_threshold_catches_price(self, inventory_pair):
        baseline, comparison = inventory_pair

        result = await compare_files(baseline, comparison, 0.001)

        keys = [(d.key, d.row_number) for d in result.differences]
        assert ("Prices-Price", 2) in keys

    @pytest.mark.asyncio
    async def test_deterministic(self, inventory_pair, tmp_path: Path):
        """같은 입력 두 번 → 같은 리포트 / 같은 파일 해시."""
        baseline, comparison = inventory_pair

        first = await compare_files(baseline, comparison, 0.01)
        second = await compare_files(baseline, comparison, 0.01)

        assert compute_report_hash(first.report) == compute_report_hash(second.report)
        assert compute_differences_hash(first.differences) == compute_differences_hash(
            second.differences
        )
        path_1 = write_report(first.report, tmp_path / "1.txt")
        path_2 = write_report(second.report, tmp_path / "2.txt")
        assert compute_file_hash(path_1) == compute_file_hash(path_2)

    @pytest.mark.asyncio
    async def test_same_file_no_differences(self, inventory_pair):
        baseline, _ = inventory_pair

        result = await compare_files(baseline, baseline, 0)

        assert result.report == ""

    @pytest.mark.asyncio
    async def test_run_log_round_trip(self, inventory_pair, tmp_path: Path):
        """run log 에 결과 요약 기록."""
        baseline, comparison = inventory_pair
        run_log = create_run_log(baseline.name, comparison.name, 0.01)

        result = await compare_files(baseline, comparison, 0.01)
        complete_run_log(
            run_log,
            success=True,
            difference_count=result.difference_count,
            report_hash=compute_report_hash(result.report),
        )
        loaded = load_run_log(save_run_log(run_log, tmp_path / "logs"))

        assert loaded["difference_count"] == 8
        assert loaded["baseline_name"] == "baseline.xlsx"
