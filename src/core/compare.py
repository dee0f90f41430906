"""
Value Comparator: 정렬된 셀 값 한 쌍의 차이 판정.

판정 규칙 (런타임 타입 기준 dispatch):
1. 둘 다 숫자: abs(a - b) > threshold 이면 다름
   - 절대값 차이. UI 라벨은 "percentage" 지만 크기로 나누지 않는다.
   - 경계값: 차이 == threshold 는 같음 (strict >)
2. 둘 다 텍스트 (escape 됨): unescape + trim 후 비교
   - 어느 한쪽이라도 unescape 실패 → escape 된 raw 값끼리 비교
3. 그 외 (타입 혼합, 한쪽 누락 포함): stringify 결과 비교
   - 누락값 = MISSING_PLACEHOLDER, 양쪽 누락이면 항상 같음

어떤 입력에도 예외를 던지지 않는다.
"""

from decimal import Decimal

from src.core.normalize import is_number, stringify, trim_text, try_unescape
from src.domain.schemas import CellValue


def numeric_delta(a: int | float | Decimal, b: int | float | Decimal) -> float | Decimal:
    """
    abs(a - b). Decimal 과 float 혼합은 float 로 계산.

    Raises:
        ArithmeticError: float 범위를 넘는 int, Decimal NaN 연산
    """
    try:
        return abs(a - b)  # type: ignore[operator]
    except TypeError:
        return abs(float(a) - float(b))


def text_differs(a: str, b: str) -> bool:
    """escape 된 텍스트 두 개 비교."""
    decoded_a = try_unescape(a)
    decoded_b = try_unescape(b)
    if decoded_a is None or decoded_b is None:
        return a != b
    return trim_text(decoded_a) != trim_text(decoded_b)


def is_different(
    a: CellValue | None,
    b: CellValue | None,
    threshold: float,
) -> bool:
    """
    셀 값 두 개가 "다른지" 판정.

    Args:
        a: baseline 값 (None = 누락)
        b: comparison 값 (None = 누락)
        threshold: 숫자 허용 오차 (절대값)

    Returns:
        다르면 True
    """
    if is_number(a) and is_number(b):
        try:
            return bool(numeric_delta(a, b) > threshold)  # type: ignore[arg-type]
        except (ArithmeticError, TypeError):
            # 계산 불가 (Decimal NaN, float 범위 초과) → 문자열 표현 비교
            return stringify(a) != stringify(b)

    if isinstance(a, str) and isinstance(b, str):
        return text_differs(a, b)

    return stringify(a) != stringify(b)
