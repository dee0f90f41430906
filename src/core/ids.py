"""
ID 생성: run_id

규칙:
- 비교 실행 1회 = run_id 1개
- run_id 는 runs/<run_id>/ 디렉토리 이름으로도 사용 → 파일명 안전 문자만
"""

import re
import uuid
from datetime import UTC, datetime

from src.domain.constants import RUN_ID_PREFIX

_RUN_ID_PATTERN = re.compile(r"^RUN-\d{14}-[0-9a-f]{8}$")


def generate_run_id() -> str:
    """
    Run ID 생성.

    고유성 보장: UUID v4
    포맷: RUN-{timestamp}-{uuid[:8]}

    Returns:
        run_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S")
    unique = uuid.uuid4().hex[:8]

    return f"{RUN_ID_PREFIX}{timestamp}-{unique}"


def is_valid_run_id(value: str) -> bool:
    """
    run_id 형식 검증.

    다운로드 API 에서 경로 순회 (../) 방지용.
    """
    return bool(_RUN_ID_PATTERN.fullmatch(value))
