"""
Error definitions for the comparison engine.

규칙:
- 조용한 실패 금지 → PolicyRejectError로 명시적 실패
- decode / 입력 누락 → 즉시 중단 (fatal)
- 셀 비교 중 이상 (unescape 실패 등) → fallback 비교, 절대 raise 하지 않음
"""

from typing import Any


class PolicyRejectError(Exception):
    """
    비교 실행을 중단해야 할 때 발생하는 에러.

    즉시 중단이 필요한 경우에만 사용:
    - baseline / comparison 파일 누락
    - 워크북 디코딩 실패, 인코딩 이상
    - threshold 값 이상 (음수, NaN, Inf)
    - 리포트 쓰기 실패

    Usage:
        raise PolicyRejectError("DECODE_FAILED", file="a.xlsx", cause=e)
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    @property
    def user_message(self) -> str:
        """사용자 알림용 메시지 (context의 message 우선)."""
        message = self.context.get("message")
        if message:
            return str(message)
        return USER_MESSAGES.get(self.code, "processing failed")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        # cause=Exception 등은 JSON 직렬화 불가 → str
        context = {
            k: v if isinstance(v, (str, int, float, bool, type(None))) else str(v)
            for k, v in self.context.items()
        }
        return {
            "code": self.code,
            **context,
        }


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Input ===
    MISSING_INPUT = "MISSING_INPUT"
    INVALID_THRESHOLD = "INVALID_THRESHOLD"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    UPLOAD_TOO_LARGE = "UPLOAD_TOO_LARGE"

    # === Decode ===
    DECODE_FAILED = "DECODE_FAILED"
    ENCODING_INVALID = "ENCODING_INVALID"

    # === Report ===
    REPORT_WRITE_FAILED = "REPORT_WRITE_FAILED"

    # === Runs ===
    RUN_NOT_FOUND = "RUN_NOT_FOUND"

    # === Warnings (run log only, never raised) ===
    EMPTY_SHEET = "EMPTY_SHEET"


USER_MESSAGES = {
    ErrorCodes.MISSING_INPUT: "baseline and comparison files are both required",
    ErrorCodes.INVALID_THRESHOLD: "threshold must be between 0 and 1",
    ErrorCodes.UNSUPPORTED_FORMAT: "only .xlsx and .xls workbooks are supported",
    ErrorCodes.UPLOAD_TOO_LARGE: "uploaded file is too large",
    ErrorCodes.DECODE_FAILED: "workbook could not be read",
    ErrorCodes.ENCODING_INVALID: "file encoding anomaly; re-save the workbook as UTF-8",
    ErrorCodes.REPORT_WRITE_FAILED: "processing failed",
    ErrorCodes.RUN_NOT_FOUND: "run not found",
}
