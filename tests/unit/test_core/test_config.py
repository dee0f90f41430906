"""
test_config.py - 설정 로드 테스트
"""

from pathlib import Path

from src.core.config import ComparisonConfig, load_comparison_config, load_config
from src.domain.constants import DEFAULT_REPORT_FILENAME, DEFAULT_THRESHOLD


class TestLoadConfig:
    """load_config / load_comparison_config 테스트."""

    def test_default_yaml_has_comparison_section(self, default_config: dict):
        assert "comparison" in default_config

    def test_default_yaml_values(self, default_config_path: Path):
        config = load_comparison_config(default_config_path)

        assert config.default_threshold == DEFAULT_THRESHOLD
        assert config.threshold_min == 0.0
        assert config.threshold_max == 1.0
        assert config.report_filename == DEFAULT_REPORT_FILENAME

    def test_missing_file_returns_empty(self, tmp_path: Path):
        assert load_config(tmp_path / "missing.yaml") == {}

    def test_missing_keys_use_defaults(self):
        config = load_comparison_config({"comparison": {"default_threshold": 0.5}})

        assert config.default_threshold == 0.5
        assert config.report_filename == DEFAULT_REPORT_FILENAME
        assert config.max_upload_mb == ComparisonConfig().max_upload_mb

    def test_empty_section(self):
        config = load_comparison_config({"comparison": None})

        assert config == ComparisonConfig()

    def test_yaml_file(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        path.write_text(
            "comparison:\n  report_filename: diff.txt\n  max_upload_mb: 2\n",
            encoding="utf-8",
        )

        config = load_comparison_config(path)

        assert config.report_filename == "diff.txt"
        assert config.max_upload_bytes == 2 * 1024 * 1024


class TestComparisonConfig:
    def test_runs_root_relative(self, tmp_path: Path):
        assert ComparisonConfig(runs_dir="runs").runs_root(tmp_path) == tmp_path / "runs"

    def test_runs_root_absolute(self, tmp_path: Path):
        target = tmp_path / "elsewhere"

        assert ComparisonConfig(runs_dir=str(target)).runs_root(Path("/ignored")) == target
