"""
첫 자리 숫자 추출기 (Digit Extractor)
======================================
숫자 값의 선행 유효 숫자(leading significant digit)를 추출합니다.

규칙:
  - 0 → 0 (유효 숫자 없음)
  - 부호 무시: -123 → 1
  - 크기 무시: 0.00456 → 4, 456000 → 4
  - 정규화 후 숫자 문자가 남지 않으면 (NaN, inf 등) → 0
"""

import re

# 선행 "0", 소수점, 소수점 뒤 "0" 제거 (e.g. "0.00456" → "456")
_LEADING_ZEROS = re.compile(r"^0+\.?0*")
_NON_DIGITS = re.compile(r"\D")


def extract_first_digit(value) -> int:
    """
    선행 유효 숫자를 반환합니다.

    Args:
        value: 숫자 값 (int / float / Decimal)

    Returns:
        0 ~ 9 정수. 0은 "유효 숫자 없음"을 의미
    """
    if value == 0:
        return 0

    text = _LEADING_ZEROS.sub("", str(abs(value)))
    digits = _NON_DIGITS.sub("", text)
    if not digits:
        return 0
    return int(digits[0])
