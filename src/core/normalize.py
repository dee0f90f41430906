"""
Cell Normalizer: 디코딩된 셀 값 → 비교 가능한 정규형.

규칙:
- 숫자: 그대로 통과 (float 정밀도 보존)
- 텍스트: percent-encoding 으로 escape (가역)
- 그 외 scalar (datetime, bool 등): 문자열로 변환 후 텍스트와 동일하게 escape
- _EMPTY + 숫자 헤더 (디코더 artifact): 행 단위로 제거
- 빈 sheet: warning 로그만 남기고 계속 진행

Escape 형식은 "sheet-column" 같은 구분자 기반 복합 키가 텍스트 내용 때문에
깨지지 않도록 하는 텍스트 안전 변환이다. unescape 실패는 예외가 아니라
None 으로 보고되고, 호출자는 raw 값 비교로 fallback 한다.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any
from urllib.parse import quote, unquote

from src.domain.constants import DECODER_ARTIFACT_PATTERN, MISSING_PLACEHOLDER
from src.domain.errors import ErrorCodes
from src.domain.schemas import (
    CellValue,
    RawRow,
    RawWorkbook,
    Row,
    WarningLog,
    Workbook,
)

logger = logging.getLogger(__name__)

# encodeURIComponent 와 같은 unreserved 집합 (quote 는 영숫자와 "_.-~" 를 항상 유지)
_ESCAPE_SAFE_CHARS = "!*'()"

# "%" 뒤에 hex 2자리가 없으면 malformed
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

# trim 대상: ECMAScript String.prototype.trim 과 같은 집합
# (str.strip 과 달리 U+FEFF 포함, \x1c-\x1f / U+0085 제외)
TRIM_CHARS = (
    "\t\n\x0b\x0c\r \xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


class EscapeError(ValueError):
    """escape 된 텍스트를 복원할 수 없음."""


# =============================================================================
# Text Escaping
# =============================================================================


def escape_text(text: str) -> str:
    """
    텍스트를 percent-encoding 으로 escape.

    surrogate 문자는 그대로 인코딩해 두고, unescape 시점에
    실패로 처리되어 raw 비교로 떨어진다.
    """
    return quote(text, safe=_ESCAPE_SAFE_CHARS, errors="surrogatepass")


def unescape_text(value: str) -> str:
    """
    escape_text 의 역변환.

    Raises:
        EscapeError: malformed escape sequence 또는 UTF-8 이 아닌 바이트열
    """
    if _MALFORMED_ESCAPE.search(value):
        raise EscapeError(f"malformed escape sequence in {value!r}")
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as e:
        raise EscapeError(f"invalid UTF-8 in {value!r}: {e}") from e


def try_unescape(value: str) -> str | None:
    """unescape 결과, 실패 시 None."""
    try:
        return unescape_text(value)
    except EscapeError as e:
        logger.debug(f"Unescape failed, falling back to raw value: {e}")
        return None


# =============================================================================
# Scalar Helpers
# =============================================================================


def is_number(value: Any) -> bool:
    """bool 을 제외한 실수형 여부."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_decoder_artifact(header: str) -> bool:
    """헤더 없는 열에 디코더가 붙인 placeholder 인지."""
    return bool(DECODER_ARTIFACT_PATTERN.match(header))


def format_number(value: int | float | Decimal) -> str:
    """
    숫자의 문자열 표현 (ECMAScript Number → String 규칙).

    - 정수값 float 는 소수점 없이 (.xls 디코더는 모든 숫자를 float 로 돌려준다)
    - 지수 -7 < e < 21 은 고정 소수점: 1e16 → "10000000000000000"
    - 그 밖은 지수 표기: 1e21 → "1e+21", 1.5e-7 → "1.5e-7"
    - NaN / Infinity / -Infinity
    """
    if not isinstance(value, float):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    # repr 은 round-trip 최단 자릿수
    shortest = repr(value)
    exact = Decimal(shortest).normalize()
    if -7 < exact.adjusted() < 21:
        return format(exact, "f")

    mantissa, _, exponent = shortest.partition("e")
    power = int(exponent)
    return f"{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"


def coerce_to_text(value: Any) -> str:
    """숫자/텍스트가 아닌 scalar 의 문자열 표현 (bool → "true" / "false")."""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def trim_text(text: str) -> str:
    """앞뒤 공백 제거 (TRIM_CHARS 기준)."""
    return text.strip(TRIM_CHARS)


def stringify(value: CellValue | None) -> str:
    """
    비교 fallback 용 문자열 표현.

    누락값(None)은 항상 MISSING_PLACEHOLDER. 텍스트는 escape 상태 그대로이므로
    "N/A" 라는 실제 텍스트("N%2FA")와 누락값은 구분된다.
    """
    if value is None:
        return MISSING_PLACEHOLDER
    if is_number(value):
        return format_number(value)
    return coerce_to_text(value)


def display_value(value: CellValue | None) -> str:
    """
    리포트 표시용 문자열.

    텍스트는 unescape + trim, 실패 시 escape 된 원본을 그대로 표시.
    """
    if value is None:
        return MISSING_PLACEHOLDER
    if is_number(value):
        return format_number(value)
    text = str(value)
    decoded = try_unescape(text)
    return trim_text(decoded if decoded is not None else text)


# =============================================================================
# Normalizer
# =============================================================================


@dataclass
class NormalizationStats:
    """정규화 통계."""
    escaped_text_count: int = 0
    coerced_count: int = 0
    dropped_artifact_count: int = 0
    empty_sheets: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "escaped_text": self.escaped_text_count,
            "coerced": self.coerced_count,
            "dropped_artifacts": self.dropped_artifact_count,
            "empty_sheets": list(self.empty_sheets),
        }


class CellNormalizer:
    """
    디코딩된 워크북을 비교용 Workbook 으로 정규화.

    Usage:
        normalizer = CellNormalizer(source="baseline")
        workbook = normalizer.normalize_workbook(raw_workbook)
        normalizer.warnings  # 빈 sheet 경고 (run log 용)
    """

    def __init__(self, source: str = ""):
        """
        Args:
            source: "baseline" 또는 "comparison" (경고 메시지용)
        """
        self.source = source
        self._stats = NormalizationStats()
        self.warnings: list[WarningLog] = []

    @property
    def stats(self) -> NormalizationStats:
        """현재 정규화 통계."""
        return self._stats

    def normalize_cell(self, value: Any) -> CellValue:
        """raw scalar → CellValue."""
        if is_number(value):
            return value
        if isinstance(value, str):
            self._stats.escaped_text_count += 1
            return escape_text(value)
        self._stats.coerced_count += 1
        return escape_text(coerce_to_text(value))

    def normalize_row(self, row: RawRow) -> dict[str, CellValue]:
        """
        행 하나 정규화.

        artifact 열과 None 값은 키 자체를 제거한다 (null 이 아니라 부재).
        """
        normalized: dict[str, CellValue] = {}
        for header, value in row.items():
            if is_decoder_artifact(header):
                self._stats.dropped_artifact_count += 1
                continue
            if value is None:
                continue
            normalized[header] = self.normalize_cell(value)
        return normalized

    def normalize_sheet(self, sheet_name: str, rows: list[RawRow]) -> list[Row]:
        """sheet 하나 정규화. 0행이면 경고만 남긴다."""
        if not rows:
            message = f"Sheet '{sheet_name}' decoded to zero rows"
            logger.warning(f"{message} ({self.source or 'workbook'})")
            self._stats.empty_sheets.append(sheet_name)
            self.warnings.append(WarningLog(
                code=ErrorCodes.EMPTY_SHEET,
                sheet_name=sheet_name,
                source=self.source,
                message=message,
            ))
            return []
        return [self.normalize_row(row) for row in rows]

    def normalize_workbook(self, workbook: RawWorkbook) -> Workbook:
        """워크북 전체 정규화 (sheet 순서 유지)."""
        return {
            sheet_name: self.normalize_sheet(sheet_name, list(rows))
            for sheet_name, rows in workbook.items()
        }


def normalize_workbook(workbook: RawWorkbook, source: str = "") -> Workbook:
    """
    Convenience function to normalize a decoded workbook.

    Args:
        workbook: 디코더 출력
        source: "baseline" / "comparison"

    Returns:
        정규화된 Workbook
    """
    return CellNormalizer(source=source).normalize_workbook(workbook)
