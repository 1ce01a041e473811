"""
공통 유틸리티
=============
숫자 강제 변환, 범위 제한 등 분석/리포트 계층에서 공용으로 쓰는 헬퍼입니다.
"""

import html
import math

from .exceptions import ConfigurationError


def safe_number(value, fallback=0):
    """
    값을 유한한 숫자로 변환합니다. 변환할 수 없으면 fallback을 반환합니다.

    - int / float: 유한하면 그대로 반환 (bool 제외)
    - str: 앞뒤 공백 제거 후 숫자로 파싱
    - 그 외 (None, NaN, inf, "12abc" 등): fallback
    """
    if isinstance(value, bool):
        return fallback

    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else fallback

    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return fallback
        try:
            parsed = float(trimmed)
        except ValueError:
            return fallback
        if not math.isfinite(parsed):
            return fallback
        return parsed

    # Decimal 등 숫자형 객체 (MySQL DECIMAL 컬럼)
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if math.isfinite(parsed) else fallback


def clamp(value, minimum, maximum):
    """
    value를 [minimum, maximum] 범위로 제한합니다.

    Raises:
        ConfigurationError: minimum > maximum 인 경우
    """
    if minimum > maximum:
        raise ConfigurationError(f"min ({minimum}) must be <= max ({maximum})")
    return min(max(value, minimum), maximum)


def escape_html(value) -> str:
    """HTML 특수문자(& < > " ')를 이스케이프합니다. None은 빈 문자열."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True).replace("&#x27;", "&#39;")
