"""
Domain Constants: 비교 엔진 전역 상수.

리포트 파일명, 누락값 표기, 실행 디렉토리 구조 등
시스템 전반에서 사용되는 값들.
"""

import re

# =============================================================================
# Report (리포트 출력 정책)
# =============================================================================
# 리포트는 UTF-8 plain text, 한 줄 = 한 차이 레코드.
# 기본 파일명은 원 도구와 동일하게 "差异报告.txt" ("difference report").

DEFAULT_REPORT_FILENAME = "差异报告.txt"
REPORT_ENCODING = "utf-8"
REPORT_LINE_SEPARATOR = "\n"

# 한쪽에만 존재하는 셀의 표기 (비교/표시 모두 동일 문자열)
MISSING_PLACEHOLDER = "N/A"

# 행 번호 = ordinal index + 2 (1-based 표시 + 헤더 행 1줄)
ROW_NUMBER_OFFSET = 2

# sheet / column 복합 키 구분자
COMPOSITE_KEY_SEPARATOR = "-"

# =============================================================================
# Threshold (숫자 허용 오차)
# =============================================================================
# 절대값 차이. UI 라벨은 "percentage"지만 나눗셈 없음.

DEFAULT_THRESHOLD = 0.01
THRESHOLD_MIN = 0.0
THRESHOLD_MAX = 1.0

# =============================================================================
# Decoder Artifacts (헤더 없는 열)
# =============================================================================
# 헤더 텍스트가 없는 열은 디코더가 _EMPTY, _EMPTY1, ... 로 이름을 붙인다.
# 데이터가 아니므로 비교 전에 제거.

DECODER_ARTIFACT_PREFIX = "_EMPTY"
DECODER_ARTIFACT_PATTERN = re.compile(r"^_EMPTY\d*$")

# =============================================================================
# Run Directory Structure (실행 디렉토리 구조)
# =============================================================================
# runs/<run_id>/
# ├── inputs/          # 업로드 원본 (baseline / comparison)
# ├── logs/            # run_<run_id>.json
# └── deliverables/    # 差异报告.txt

RUN_INPUTS_DIR = "inputs"
RUN_LOGS_DIR = "logs"
RUN_DELIVERABLES_DIR = "deliverables"

RUN_ID_PREFIX = "RUN-"

# =============================================================================
# Input Files
# =============================================================================

WORKBOOK_ALLOWED_EXTENSIONS = (".xlsx", ".xlsm", ".xls")
DEFAULT_MAX_UPLOAD_MB = 50

# 파일 시그니처 (확장자보다 우선)
ZIP_SIGNATURE = b"PK\x03\x04"
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

# =============================================================================
# MIME Types
# =============================================================================

MIME_TYPES = {
    ".txt": "text/plain; charset=utf-8",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xlsm": "application/vnd.ms-excel.sheet.macroEnabled.12",
    ".xls": "application/vnd.ms-excel",
    ".json": "application/json",
    ".yaml": "application/x-yaml",
}


def get_mime_type(filename: str) -> str:
    """
    파일명에서 MIME 타입 추출.

    Args:
        filename: 파일명 (확장자 포함)

    Returns:
        MIME 타입 문자열 (알 수 없으면 octet-stream)
    """
    import os

    ext = os.path.splitext(filename)[1].lower()
    return MIME_TYPES.get(ext, "application/octet-stream")
