"""
Compare Routes: 워크북 두 개 업로드 → 비교 실행.

- GET /compare → 업로드 화면 (baseline, comparison, threshold)
- POST /api/compare → 비교 실행, 결과 요약 + 리포트 다운로드 URL
"""

from typing import Any

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse

from src.app.services.comparison import ComparisonService, UploadedWorkbook
from src.core.config import ComparisonConfig
from src.domain.errors import ErrorCodes, PolicyRejectError

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints

# PolicyRejectError 코드 → HTTP status
ERROR_STATUS = {
    ErrorCodes.MISSING_INPUT: 400,
    ErrorCodes.INVALID_THRESHOLD: 400,
    ErrorCodes.UNSUPPORTED_FORMAT: 400,
    ErrorCodes.DECODE_FAILED: 400,
    ErrorCodes.ENCODING_INVALID: 400,
    ErrorCodes.UPLOAD_TOO_LARGE: 413,
    ErrorCodes.REPORT_WRITE_FAILED: 500,
}


def get_comparison_service(request: Request) -> ComparisonService:
    """Request에서 runs_root / 설정 가져오기."""
    config: ComparisonConfig = request.app.state.comparison_config
    return ComparisonService(request.app.state.runs_root, config)


async def _read_upload(upload: UploadFile | None) -> UploadedWorkbook | None:
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return UploadedWorkbook(filename=upload.filename, content=content)


# =============================================================================
# Page Routes (HTML)
# =============================================================================

@router.get("", response_class=HTMLResponse)
async def compare_page(request: Request) -> HTMLResponse:
    """비교 화면."""
    config: ComparisonConfig = request.app.state.comparison_config
    return HTMLResponse(content=f"""
<!DOCTYPE html>
<html lang="ko">
<head>
    <meta charset="UTF-8">
    <title>Excel 비교</title>
    <script src="https://unpkg.com/htmx.org@1.9.10"></script>
</head>
<body>
    <div class="container">
        <header>
            <h1>📊 Excel 비교</h1>
            <a href="/api/runs" class="button">실행 이력</a>
        </header>

        <form hx-post="/api/compare"
              hx-encoding="multipart/form-data"
              hx-target="#result">
            <label>Baseline <input type="file" name="baseline" accept=".xlsx,.xls" required></label>
            <label>Comparison <input type="file" name="comparison" accept=".xlsx,.xls" required></label>
            <label>Threshold (absolute)
                <input type="number" name="threshold"
                       min="{config.threshold_min:g}" max="{config.threshold_max:g}"
                       step="0.01" value="{config.default_threshold:g}">
            </label>
            <button type="submit" class="button primary">비교 시작</button>
        </form>

        <div id="result"></div>
    </div>
</body>
</html>
    """)


# =============================================================================
# API Routes
# =============================================================================

@api_router.post("")
async def run_comparison(
    request: Request,
    baseline: UploadFile | None = File(None),
    comparison: UploadFile | None = File(None),
    threshold: str | None = Form(None),
) -> dict[str, Any]:
    """
    비교 실행.

    Args:
        baseline: 기준 파일 (.xlsx / .xls)
        comparison: 비교 파일 (.xlsx / .xls)
        threshold: 숫자 허용 오차 [0, 1] (없으면 설정 기본값)

    Returns:
        run_id, status, difference_count, differences_by_sheet, warnings, report_url
    """
    service = get_comparison_service(request)

    try:
        run = await service.run(
            baseline=await _read_upload(baseline),
            comparison=await _read_upload(comparison),
            threshold=threshold,
        )
    except PolicyRejectError as e:
        raise HTTPException(
            status_code=ERROR_STATUS.get(e.code, 400),
            detail={"code": e.code, "message": e.user_message},
        ) from None
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail={"code": "PROCESSING_FAILED", "message": f"processing failed: {e}"},
        ) from None

    return {
        **run.to_dict(),
        "progress": 100,
        "report_url": f"/api/runs/{run.run_id}/report",
    }
