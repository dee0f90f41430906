"""
Comparison Service: 업로드 두 개 → 비교 실행 → 리포트 + run log.

흐름:
1. RunLog 생성 (시작 시점)
2. 입력 검증: 파일 누락, 크기, threshold 범위 [min, max]
3. inputs/ 에 원본 보관
4. 두 파일 동시 디코딩 → 엔진 비교
5. deliverables/<report_filename> 원자적 저장
6. RunLog 저장 (성공/실패 모두, finally 블록에서 보장)

실패 시 리포트 파일은 만들어지지 않는다.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.core.config import ComparisonConfig
from src.core.engine import ProgressCallback, compare_files, count_by_sheet
from src.core.hashing import compute_file_hash, compute_report_hash
from src.core.logging import complete_run_log, create_run_log, emit_warning, save_run_log
from src.domain.constants import RUN_DELIVERABLES_DIR, RUN_INPUTS_DIR, RUN_LOGS_DIR
from src.domain.errors import ErrorCodes, PolicyRejectError
from src.domain.schemas import ComparisonResult, RunLog
from src.render.report import write_report

logger = logging.getLogger(__name__)


@dataclass
class UploadedWorkbook:
    """업로드된 워크북 (파일명 + 내용)."""
    filename: str
    content: bytes

    @property
    def safe_filename(self) -> str:
        """디렉토리 구분자 제거 (inputs/ 저장용)."""
        name = Path(self.filename.replace("\\", "/")).name
        return name or "workbook"


@dataclass
class ComparisonRun:
    """비교 실행 1회 결과."""
    run_id: str
    run_dir: Path
    result: ComparisonResult
    report_path: Path
    run_log: RunLog
    differences_by_sheet: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """API 응답용."""
        return {
            "run_id": self.run_id,
            "status": self.run_log.result,
            "difference_count": self.result.difference_count,
            "differences_by_sheet": self.differences_by_sheet,
            "report_hash": self.run_log.report_hash,
            "warnings": [w.to_dict() for w in self.run_log.warnings],
        }


def validate_threshold_input(value: Any, config: ComparisonConfig) -> float:
    """
    입력 threshold 검증 (폼 레벨).

    Args:
        value: 입력값 (None 이면 기본값)
        config: threshold_min / threshold_max / default_threshold

    Returns:
        float threshold

    Raises:
        PolicyRejectError: INVALID_THRESHOLD
    """
    if value is None or value == "":
        return config.default_threshold

    try:
        threshold = float(value)
    except (TypeError, ValueError):
        raise PolicyRejectError(ErrorCodes.INVALID_THRESHOLD, threshold=value) from None

    if not math.isfinite(threshold) or not (config.threshold_min <= threshold <= config.threshold_max):
        raise PolicyRejectError(
            ErrorCodes.INVALID_THRESHOLD,
            threshold=value,
            message=f"threshold must be between {config.threshold_min:g} and {config.threshold_max:g}",
        )
    return threshold


class ComparisonService:
    """
    비교 실행 서비스.

    Usage:
        service = ComparisonService(runs_root, config)
        run = await service.run(baseline_upload, comparison_upload, threshold=0.01)
        run.report_path  # runs/<run_id>/deliverables/差异报告.txt
    """

    def __init__(self, runs_root: Path, config: ComparisonConfig | None = None):
        """
        Args:
            runs_root: runs/ 디렉터리
            config: 비교 설정 (None 이면 기본값)
        """
        self.runs_root = runs_root
        self.config = config or ComparisonConfig()

    def _check_upload(self, upload: UploadedWorkbook | None, role: str) -> UploadedWorkbook:
        if upload is None or not upload.filename or not upload.content:
            raise PolicyRejectError(
                ErrorCodes.MISSING_INPUT,
                file=role,
                message=f"{role} file is required",
            )
        if len(upload.content) > self.config.max_upload_bytes:
            raise PolicyRejectError(
                ErrorCodes.UPLOAD_TOO_LARGE,
                file=upload.filename,
                size=len(upload.content),
                limit_mb=self.config.max_upload_mb,
            )
        return upload

    async def run(
        self,
        baseline: UploadedWorkbook | None,
        comparison: UploadedWorkbook | None,
        threshold: Any = None,
        progress: ProgressCallback | None = None,
    ) -> ComparisonRun:
        """
        비교 실행.

        Args:
            baseline: baseline 업로드
            comparison: comparison 업로드
            threshold: 입력 threshold (None 이면 설정 기본값)
            progress: 진행률 콜백

        Returns:
            ComparisonRun

        Raises:
            PolicyRejectError: 입력 누락 / threshold / 디코딩 / 리포트 쓰기 실패
        """
        run_log = create_run_log(
            baseline_name=baseline.filename if baseline else "",
            comparison_name=comparison.filename if comparison else "",
        )
        run_dir = self.runs_root / run_log.run_id

        success = False
        error_code: str | None = None
        error_context: dict[str, Any] | None = None

        try:
            baseline = self._check_upload(baseline, "baseline")
            comparison = self._check_upload(comparison, "comparison")
            value = validate_threshold_input(threshold, self.config)
            run_log.threshold = value

            # 원본 보관 + 해시 기록 (재현성)
            inputs_dir = run_dir / RUN_INPUTS_DIR
            inputs_dir.mkdir(parents=True, exist_ok=True)
            for role, upload in (("baseline", baseline), ("comparison", comparison)):
                input_path = inputs_dir / f"{role}_{upload.safe_filename}"
                input_path.write_bytes(upload.content)
                run_log.input_hashes[role] = compute_file_hash(input_path)

            result = await compare_files(
                baseline.content,
                comparison.content,
                value,
                progress=progress,
                baseline_name=baseline.filename,
                comparison_name=comparison.filename,
            )
            for warning in result.warnings:
                emit_warning(
                    run_log,
                    code=warning.code,
                    sheet_name=warning.sheet_name,
                    message=warning.message,
                    source=warning.source,
                )

            report_path = write_report(
                result.report,
                run_dir / RUN_DELIVERABLES_DIR / self.config.report_filename,
            )

            complete_run_log(
                run_log,
                success=True,
                difference_count=result.difference_count,
                report_hash=compute_report_hash(result.report),
                report_path=str(report_path.relative_to(run_dir)),
            )
            success = True

            logger.info(
                f"Run {run_log.run_id}: {result.difference_count} differences "
                f"({baseline.filename} vs {comparison.filename}, threshold={value})"
            )

            return ComparisonRun(
                run_id=run_log.run_id,
                run_dir=run_dir,
                result=result,
                report_path=report_path,
                run_log=run_log,
                differences_by_sheet=count_by_sheet(result.differences),
            )

        except PolicyRejectError as e:
            error_code = e.code
            error_context = e.to_dict()
            logger.warning(f"Run {run_log.run_id} rejected: {e}")
            raise

        except Exception as e:
            error_code = "UNEXPECTED_ERROR"
            error_context = {"error": str(e), "type": type(e).__name__}
            logger.error(f"Run {run_log.run_id} failed: {e}", exc_info=True)
            raise

        finally:
            if not success:
                complete_run_log(
                    run_log,
                    success=False,
                    error_code=error_code,
                    error_context=error_context,
                )
            try:
                save_run_log(run_log, run_dir / RUN_LOGS_DIR)
            except OSError as e:
                logger.warning(f"Failed to save run log for {run_log.run_id}: {e}")
