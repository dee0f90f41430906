"""
Runs Routes: 비교 실행 이력 조회 및 리포트 다운로드.

- GET /api/runs → 실행 목록 (최신순)
- GET /api/runs/<run_id> → run log
- GET /api/runs/<run_id>/report → 리포트 다운로드 (text/plain; charset=utf-8)
"""

import json
from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from src.core.config import ComparisonConfig
from src.core.ids import is_valid_run_id
from src.core.logging import list_run_logs, load_run_log
from src.domain.constants import RUN_DELIVERABLES_DIR, RUN_LOGS_DIR, get_mime_type
from src.domain.errors import ErrorCodes

api_router = APIRouter()  # API endpoints


def get_runs_root(request: Request) -> Path:
    """Request에서 runs_root 경로 가져오기."""
    return request.app.state.runs_root


def _run_dir(request: Request, run_id: str) -> Path:
    # 경로 순회 방지: 형식이 맞는 run_id 만 허용
    if not is_valid_run_id(run_id):
        raise HTTPException(status_code=400, detail={"code": "INVALID_RUN_ID", "message": "Invalid run id"})

    run_dir = get_runs_root(request) / run_id
    if not run_dir.exists():
        raise HTTPException(
            status_code=404,
            detail={"code": ErrorCodes.RUN_NOT_FOUND, "message": f"Run '{run_id}' not found"},
        )
    return run_dir


@api_router.get("")
async def list_runs(
    request: Request,
    limit: int = 50,
    offset: int = 0,
) -> dict[str, Any]:
    """실행 목록."""
    runs: list[dict[str, Any]] = []
    for log_path in list_run_logs(get_runs_root(request)):
        try:
            data = load_run_log(log_path)
        except (json.JSONDecodeError, OSError):
            continue
        runs.append({
            "run_id": data.get("run_id"),
            "started_at": data.get("started_at"),
            "result": data.get("result"),
            "baseline_name": data.get("baseline_name"),
            "comparison_name": data.get("comparison_name"),
            "difference_count": data.get("difference_count", 0),
        })

    return {
        "total": len(runs),
        "runs": runs[offset:offset + limit],
    }


@api_router.get("/{run_id}")
async def get_run(request: Request, run_id: str) -> dict[str, Any]:
    """run log 조회."""
    run_dir = _run_dir(request, run_id)
    log_path = run_dir / RUN_LOGS_DIR / f"run_{run_id}.json"

    if not log_path.exists():
        raise HTTPException(
            status_code=404,
            detail={"code": ErrorCodes.RUN_NOT_FOUND, "message": f"Run log for '{run_id}' not found"},
        )

    return load_run_log(log_path)


@api_router.get("/{run_id}/report")
async def download_report(request: Request, run_id: str) -> FileResponse:
    """리포트 다운로드."""
    run_dir = _run_dir(request, run_id)
    config: ComparisonConfig = request.app.state.comparison_config
    report_path = run_dir / RUN_DELIVERABLES_DIR / config.report_filename

    if not report_path.is_file() or report_path.is_symlink():
        raise HTTPException(
            status_code=404,
            detail={"code": "REPORT_NOT_FOUND", "message": f"No report for run '{run_id}'"},
        )

    return FileResponse(
        path=report_path,
        filename=config.report_filename,
        media_type=get_mime_type(config.report_filename),
    )
