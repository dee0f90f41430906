"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from src.app.routes import compare, runs
from src.core.config import PROJECT_ROOT, load_comparison_config, load_config

# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 로드, runs 디렉터리 결정
    """
    # Startup
    app.state.config = load_config()
    app.state.comparison_config = load_comparison_config(app.state.config)
    app.state.runs_root = app.state.comparison_config.runs_root(PROJECT_ROOT)

    yield


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="Workbook Diff",
    description="Excel 워크북 두 개 비교 → 셀 단위 차이 리포트",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Routes
# =============================================================================

# 페이지 라우트 (HTML)
app.include_router(compare.router, prefix="/compare", tags=["Compare"])

# API 라우트
app.include_router(compare.api_router, prefix="/api/compare", tags=["Compare API"])
app.include_router(runs.api_router, prefix="/api/runs", tags=["Runs API"])


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/")
async def root() -> dict[str, Any]:
    """서비스 인덱스."""
    return {
        "message": "Workbook Diff",
        "endpoints": {
            "compare": "/compare",
            "runs": "/api/runs",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
