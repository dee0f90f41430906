"""
해시 계산: report_hash, differences_hash, 입력 파일 해시

규칙:
- 동일 입력 → 동일 차이 목록 → 동일 리포트 (결정론)
- 정렬된 키로 직렬화
- SHA-256
"""

import hashlib
import json
from collections.abc import Sequence
from pathlib import Path

from src.domain.schemas import DifferenceRecord


def compute_report_hash(report: str) -> str:
    """
    리포트 텍스트 해시 (UTF-8 바이트 기준).

    Args:
        report: 리포트 텍스트

    Returns:
        SHA-256 해시 문자열
    """
    return hashlib.sha256(report.encode("utf-8")).hexdigest()


def compute_differences_hash(differences: Sequence[DifferenceRecord]) -> str:
    """
    차이 레코드 목록 해시.

    - 레코드 순서 유지 (순서도 결정론의 일부)
    - 레코드 내부 키 정렬

    Args:
        differences: 차이 레코드 목록

    Returns:
        SHA-256 해시 문자열
    """
    serialized = json.dumps(
        [d.to_dict() for d in differences],
        sort_keys=True,
        ensure_ascii=False,
        default=str,  # Decimal 등
    )
    return hashlib.sha256(serialized.encode()).hexdigest()


def compute_file_hash(file_path: Path, algorithm: str = "sha256") -> str:
    """
    파일 해시 계산.

    Args:
        file_path: 파일 경로
        algorithm: 해시 알고리즘 (기본: sha256)

    Returns:
        해시 문자열
    """
    h = hashlib.new(algorithm)
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()
