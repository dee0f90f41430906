"""
Run logging: run log schema, events, warnings

규칙:
- 비교 실행마다 RunLog 1개 (성공/실패 모두 저장)
- 경고 필수 컨텍스트: level, code, sheet_name, source, message
- 실패 시 error_code + error_context 기록
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.core.ids import generate_run_id
from src.core.storage import atomic_write_json
from src.domain.schemas import RunLog, WarningLog

# =============================================================================
# Run Log Management
# =============================================================================


def create_run_log(
    baseline_name: str = "",
    comparison_name: str = "",
    threshold: float | None = None,
    run_id: str | None = None,
) -> RunLog:
    """
    새 RunLog 생성.

    Args:
        baseline_name: baseline 파일 이름
        comparison_name: comparison 파일 이름
        threshold: 숫자 허용 오차
        run_id: 지정 시 그대로 사용 (없으면 새로 발급)

    Returns:
        초기화된 RunLog
    """
    now = datetime.now(UTC).isoformat()

    return RunLog(
        run_id=run_id or generate_run_id(),
        started_at=now,
        baseline_name=baseline_name,
        comparison_name=comparison_name,
        threshold=threshold,
        result="pending",
    )


def emit_warning(
    run_log: RunLog,
    code: str,
    sheet_name: str,
    message: str,
    source: str = "",
) -> None:
    """
    경고 이벤트 기록.

    Args:
        run_log: RunLog 인스턴스
        code: 경고 코드 (예: EMPTY_SHEET)
        sheet_name: 관련 sheet 이름
        message: 경고 메시지
        source: "baseline" 또는 "comparison"
    """
    warning = WarningLog(
        level="warning",
        code=code,
        sheet_name=sheet_name,
        source=source,
        message=message,
    )
    run_log.warnings.append(warning)


def complete_run_log(
    run_log: RunLog,
    success: bool,
    difference_count: int = 0,
    report_hash: str | None = None,
    report_path: str | None = None,
    error_code: str | None = None,
    error_context: dict[str, Any] | None = None,
) -> None:
    """
    RunLog 완료 처리.

    Args:
        run_log: RunLog 인스턴스
        success: 성공 여부
        difference_count: 차이 레코드 수
        report_hash: 리포트 SHA-256
        report_path: 저장된 리포트 경로
        error_code: 에러 코드 (실패 시)
        error_context: 에러 컨텍스트 (실패 시)
    """
    now = datetime.now(UTC).isoformat()
    run_log.finished_at = now
    run_log.result = "success" if success else "failed"

    if success:
        run_log.difference_count = difference_count
        run_log.report_hash = report_hash
        run_log.report_path = report_path
    else:
        # 실패 시 부분 결과 없음
        run_log.difference_count = 0
        run_log.report_hash = None
        run_log.report_path = None
        run_log.error_code = error_code
        run_log.error_context = error_context


def save_run_log(run_log: RunLog, logs_dir: Path) -> Path:
    """
    RunLog를 파일로 저장.

    Args:
        run_log: RunLog 인스턴스
        logs_dir: logs/ 디렉터리 경로

    Returns:
        저장된 파일 경로
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"run_{run_log.run_id}.json"
    atomic_write_json(log_path, run_log.to_dict())
    return log_path


def load_run_log(log_path: Path) -> dict[str, Any]:
    """
    RunLog 파일 로드.

    Args:
        log_path: 로그 파일 경로

    Returns:
        RunLog 데이터 (dict)
    """
    data: dict[str, Any] = json.loads(log_path.read_text(encoding="utf-8"))
    return data


def list_run_logs(runs_root: Path) -> list[Path]:
    """
    runs/ 아래 모든 run log 파일 목록.

    Args:
        runs_root: runs/ 디렉터리 경로

    Returns:
        로그 파일 경로 목록 (최신순)
    """
    if not runs_root.exists():
        return []

    logs = list(runs_root.glob("*/logs/run_*.json"))
    logs.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return logs
