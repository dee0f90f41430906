#!/usr/bin/env python3
"""
compare_workbooks.py - Excel 워크북 두 개 비교 후 차이 리포트 저장

두 파일을 동시에 디코딩하고, sheet × 행 × 열 단위로 비교해
한 줄 한 차이의 UTF-8 텍스트 리포트를 만든다.

사용법:
    # 기본 threshold (default.yaml, 0.01)
    uv run python scripts/compare_workbooks.py baseline.xlsx comparison.xlsx

    # threshold / 출력 경로 지정
    uv run python scripts/compare_workbooks.py a.xlsx b.xls --threshold 0.001 --output diff.txt

종료 코드:
    0: 성공 (차이 유무와 무관)
    1: 입력 누락, 디코딩 실패, threshold 오류, 리포트 쓰기 실패
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 path에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.app.services.comparison import validate_threshold_input  # noqa: E402
from src.core.config import load_comparison_config  # noqa: E402
from src.core.engine import compare_files, count_by_sheet  # noqa: E402
from src.domain.errors import PolicyRejectError  # noqa: E402
from src.render.report import write_report  # noqa: E402

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Excel 워크북 비교 → 차이 리포트",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("baseline", type=Path, help="기준 파일 (.xlsx / .xls)")
    parser.add_argument("comparison", type=Path, help="비교 파일 (.xlsx / .xls)")
    parser.add_argument(
        "--threshold",
        type=str,
        default=None,
        help="숫자 허용 오차, 절대값 0~1 (기본: default.yaml)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="리포트 경로 (기본: 현재 디렉터리의 report_filename)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="설정 파일 경로 (기본: default.yaml)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_comparison_config(args.config)

    # 로깅 설정
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    output_path = args.output or Path.cwd() / config.report_filename

    try:
        threshold = validate_threshold_input(args.threshold, config)
        result = asyncio.run(compare_files(args.baseline, args.comparison, threshold))
        write_report(result.report, output_path)
    except PolicyRejectError as e:
        logger.error(f"비교 실패: {e.user_message} {e}")
        return 1

    logger.info(f"차이 {result.difference_count}건 → {output_path}")
    for sheet_name, count in count_by_sheet(result.differences).items():
        logger.info(f"  {sheet_name}: {count}")
    for warning in result.warnings:
        logger.warning(f"  [{warning.code}] {warning.source}: {warning.message}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
