"""
test_normalize.py - Cell Normalizer 테스트

DoD:
- 숫자 그대로 통과, 텍스트 escape (가역)
- 그 외 scalar → 문자열 후 escape
- _EMPTY artifact 열 제거 (행 단위)
- 빈 sheet → warning 로그 (예외 없음)
"""

import logging
from datetime import datetime

import pytest

from src.core.normalize import (
    CellNormalizer,
    EscapeError,
    display_value,
    escape_text,
    format_number,
    is_decoder_artifact,
    normalize_workbook,
    stringify,
    trim_text,
    try_unescape,
    unescape_text,
)
from src.domain.constants import MISSING_PLACEHOLDER
from src.domain.errors import ErrorCodes

# =============================================================================
# escape / unescape 테스트
# =============================================================================

class TestEscapeText:
    """escape_text / unescape_text 테스트."""

    @pytest.mark.parametrize("text", [
        "plain",
        "100%",
        "a&b#c",
        "Sheet1-Score",
        "差异报告",
        "검사 성적서",
        "  padded  ",
        "",
    ])
    def test_reversible(self, text: str):
        """escape → unescape 원문 복원."""
        assert unescape_text(escape_text(text)) == text

    def test_reserved_characters_encoded(self):
        """구분자 충돌 문자는 인코딩됨."""
        escaped = escape_text("a-b%c&d#e f")

        assert "%" in escaped
        assert "&" not in escaped
        assert "#" not in escaped
        assert " " not in escaped

    def test_unreserved_characters_kept(self):
        """encodeURIComponent 와 같은 unreserved 문자 유지."""
        assert escape_text("A-z_0.9!~*'()") == "A-z_0.9!~*'()"

    def test_multibyte_utf8(self):
        """멀티바이트 문자는 UTF-8 percent-encoding."""
        assert escape_text("差") == "%E5%B7%AE"

    def test_malformed_sequence_raises(self):
        """hex 2자리가 아닌 % → EscapeError."""
        with pytest.raises(EscapeError):
            unescape_text("100%")

    def test_invalid_utf8_raises(self):
        """UTF-8 이 아닌 바이트열 → EscapeError."""
        with pytest.raises(EscapeError):
            unescape_text("%FF%FE")

    def test_try_unescape_returns_none_on_failure(self):
        """try_unescape 는 예외 대신 None."""
        assert try_unescape("%zz") is None
        assert try_unescape("%41") == "A"

    def test_lone_surrogate_escapes_but_does_not_unescape(self):
        """lone surrogate 는 escape 는 되고 unescape 에서 실패."""
        escaped = escape_text("a\ud800b")

        assert try_unescape(escaped) is None


# =============================================================================
# Scalar helper 테스트
# =============================================================================

class TestScalarHelpers:
    """is_decoder_artifact / format_number / stringify / display_value 테스트."""

    @pytest.mark.parametrize("header", ["_EMPTY", "_EMPTY1", "_EMPTY23"])
    def test_artifact_headers(self, header: str):
        assert is_decoder_artifact(header)

    @pytest.mark.parametrize("header", ["EMPTY", "_EMPTY_1", "__EMPTY", "_EMPTYx", "Name", "_EMPTY "])
    def test_non_artifact_headers(self, header: str):
        assert not is_decoder_artifact(header)

    def test_format_number_integral_float(self):
        """정수값 float 는 소수점 없이."""
        assert format_number(90.0) == "90"
        assert format_number(90) == "90"

    def test_format_number_fraction(self):
        assert format_number(90.005) == "90.005"

    def test_format_number_non_finite(self):
        assert format_number(float("inf")) == "Infinity"
        assert format_number(float("-inf")) == "-Infinity"
        assert format_number(float("nan")) == "NaN"

    @pytest.mark.parametrize("value, expected", [
        (1e16, "10000000000000000"),
        (1.5e20, "150000000000000000000"),
        (1e21, "1e+21"),
        (1.5e-7, "1.5e-7"),
        (1e-6, "0.000001"),
        (1e-5, "0.00001"),
        (-2.5e-8, "-2.5e-8"),
        (-0.0, "0"),
        (0.1 + 0.2, "0.30000000000000004"),
    ])
    def test_format_number_notation(self, value: float, expected: str):
        """고정 소수점은 지수 -7 < e < 21, 그 밖은 지수 표기."""
        assert format_number(value) == expected

    def test_trim_text_character_set(self):
        """BOM 은 제거, 정보 구분자 \\x1c-\\x1f 는 유지."""
        assert trim_text("\ufeffAlice\u3000") == "Alice"
        assert trim_text("Alice\x1f") == "Alice\x1f"
        assert trim_text("\x85Alice") == "\x85Alice"

    def test_stringify_missing(self):
        """누락값은 placeholder."""
        assert stringify(None) == MISSING_PLACEHOLDER

    def test_stringify_bool_lowercase(self):
        assert stringify(True) == "true"
        assert stringify(False) == "false"

    def test_stringify_text_stays_escaped(self):
        """실제 "N/A" 텍스트는 escape 상태라 누락값과 구분됨."""
        assert stringify(escape_text("N/A")) != stringify(None)

    def test_display_value_unescapes_and_trims(self):
        assert display_value(escape_text("  Alice  ")) == "Alice"
        assert display_value(escape_text("\ufeffAlice")) == "Alice"

    def test_display_value_number(self):
        assert display_value(85.5) == "85.5"

    def test_display_value_missing(self):
        assert display_value(None) == MISSING_PLACEHOLDER

    def test_display_value_malformed_falls_back_to_raw(self):
        """unescape 실패 시 raw 표시 (예외 없음)."""
        assert display_value("bad%zz ") == "bad%zz"


# =============================================================================
# CellNormalizer 테스트
# =============================================================================

class TestCellNormalizer:
    """CellNormalizer 테스트."""

    def test_number_passthrough(self):
        """숫자는 그대로 (정밀도 보존)."""
        normalizer = CellNormalizer()

        assert normalizer.normalize_cell(0.1 + 0.2) == 0.1 + 0.2
        assert normalizer.normalize_cell(42) == 42

    def test_text_escaped(self):
        normalizer = CellNormalizer()

        assert normalizer.normalize_cell("a b") == "a%20b"
        assert normalizer.stats.escaped_text_count == 1

    def test_other_scalar_coerced_then_escaped(self):
        """datetime / bool → 문자열 → escape."""
        normalizer = CellNormalizer()

        assert unescape_text(normalizer.normalize_cell(datetime(2024, 1, 15))) == "2024-01-15 00:00:00"
        assert normalizer.normalize_cell(True) == "true"
        assert normalizer.normalize_cell(False) == "false"
        assert normalizer.stats.coerced_count == 3

    def test_row_drops_artifacts(self):
        """_EMPTY 열은 키 자체가 사라짐."""
        normalizer = CellNormalizer()

        row = normalizer.normalize_row({"Name": "Alice", "_EMPTY": "x", "_EMPTY2": 3, "Score": 90})

        assert row == {"Name": "Alice", "Score": 90}
        assert normalizer.stats.dropped_artifact_count == 2

    def test_row_drops_none_values(self):
        """None 은 null 이 아니라 부재."""
        row = CellNormalizer().normalize_row({"Name": None, "Score": 1})

        assert "Name" not in row

    def test_empty_sheet_warns(self, caplog):
        """0행 sheet → warning 로그 + run log 경고, 예외 없음."""
        normalizer = CellNormalizer(source="baseline")

        with caplog.at_level(logging.WARNING):
            rows = normalizer.normalize_sheet("Empty", [])

        assert rows == []
        assert "Empty" in caplog.text
        assert normalizer.stats.empty_sheets == ["Empty"]
        assert len(normalizer.warnings) == 1
        assert normalizer.warnings[0].code == ErrorCodes.EMPTY_SHEET
        assert normalizer.warnings[0].source == "baseline"

    def test_workbook_preserves_sheet_order(self):
        workbook = normalize_workbook({
            "Z": [{"a": 1}],
            "A": [{"a": 2}],
        })

        assert list(workbook) == ["Z", "A"]
