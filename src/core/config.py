"""
설정 로드: default.yaml

comparison 섹션:
    comparison:
      default_threshold: 0.01
      threshold_min: 0.0
      threshold_max: 1.0
      report_filename: 差异报告.txt
      runs_dir: runs
      max_upload_mb: 50
      log_level: INFO

파일이 없거나 키가 없으면 기본값 사용.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from src.domain.constants import (
    DEFAULT_MAX_UPLOAD_MB,
    DEFAULT_REPORT_FILENAME,
    DEFAULT_THRESHOLD,
    THRESHOLD_MAX,
    THRESHOLD_MIN,
)

PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "default.yaml"


@dataclass
class ComparisonConfig:
    """비교 실행 설정."""
    default_threshold: float = DEFAULT_THRESHOLD
    threshold_min: float = THRESHOLD_MIN
    threshold_max: float = THRESHOLD_MAX
    report_filename: str = DEFAULT_REPORT_FILENAME
    runs_dir: str = "runs"
    max_upload_mb: int = DEFAULT_MAX_UPLOAD_MB
    log_level: str = "INFO"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def runs_root(self, base: Path = PROJECT_ROOT) -> Path:
        """runs 디렉터리 (상대 경로면 base 기준)."""
        path = Path(self.runs_dir)
        return path if path.is_absolute() else base / path


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def load_comparison_config(config: dict | Path | None = None) -> ComparisonConfig:
    """
    comparison 섹션 → ComparisonConfig.

    Args:
        config: 이미 로드된 설정 dict, 설정 파일 경로, 또는 None (default.yaml)

    Returns:
        ComparisonConfig
    """
    if not isinstance(config, dict):
        config = load_config(config)

    section = config.get("comparison", {}) or {}
    defaults = ComparisonConfig()

    return ComparisonConfig(
        default_threshold=float(section.get("default_threshold", defaults.default_threshold)),
        threshold_min=float(section.get("threshold_min", defaults.threshold_min)),
        threshold_max=float(section.get("threshold_max", defaults.threshold_max)),
        report_filename=str(section.get("report_filename", defaults.report_filename)),
        runs_dir=str(section.get("runs_dir", defaults.runs_dir)),
        max_upload_mb=int(section.get("max_upload_mb", defaults.max_upload_mb)),
        log_level=str(section.get("log_level", defaults.log_level)),
    )
