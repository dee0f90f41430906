"""
Pytest fixtures for the comparison engine tests.

테스트 구성:
- raw 워크북 (디코더 출력 형태) fixture
- openpyxl 로 실제 .xlsx 파일을 만드는 factory
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml
from openpyxl import Workbook

# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


@pytest.fixture
def default_config(default_config_path: Path) -> dict:
    """기본 설정 로드."""
    with open(default_config_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# =============================================================================
# Raw Workbook Fixtures (디코더 출력)
# =============================================================================

@pytest.fixture
def baseline_raw() -> dict[str, list[dict[str, Any]]]:
    """정상 케이스 baseline."""
    return {
        "Sheet1": [
            {"Name": "Alice", "Score": 90},
            {"Name": "Bob", "Score": 85.5},
        ],
    }


@pytest.fixture
def comparison_raw() -> dict[str, list[dict[str, Any]]]:
    """baseline 과 공백/미세 숫자 차이만 있는 comparison."""
    return {
        "Sheet1": [
            {"Name": "Alice ", "Score": 90.005},
            {"Name": "Bob", "Score": 85.5},
        ],
    }


# =============================================================================
# XLSX Factory
# =============================================================================

XlsxFactory = Callable[[str, dict[str, list[list[Any]]]], Path]


@pytest.fixture
def make_xlsx(tmp_path: Path) -> XlsxFactory:
    """
    실제 .xlsx 파일 생성 factory.

    Usage:
        path = make_xlsx("a.xlsx", {"Sheet1": [["Name", "Score"], ["Alice", 90]]})
    """

    def _make(filename: str, sheets: dict[str, list[list[Any]]]) -> Path:
        wb = Workbook()
        wb.remove(wb.active)
        for sheet_name, rows in sheets.items():
            ws = wb.create_sheet(sheet_name)
            for row in rows:
                ws.append(row)
        path = tmp_path / filename
        wb.save(path)
        return path

    return _make
