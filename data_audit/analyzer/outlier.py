"""
이상치 탐지기 (Outlier Detector)
=================================
IQR 펜스와 Z-score 두 가지 독립적인 방법으로 이상치를 탐지합니다.

공통 규칙:
  - 입력은 변경하지 않으며, 탐지된 값의 부분 시퀀스를 반환
  - 원래 순서와 중복값 유지
  - 데이터 부족 / 분산 0 → 빈 리스트
"""

import math
from typing import Optional

DEFAULT_IQR_MULTIPLIER = 1.5
DEFAULT_ZSCORE_THRESHOLD = 3


def compute_iqr_fences(values, multiplier: float = DEFAULT_IQR_MULTIPLIER) -> Optional[tuple]:
    """
    IQR 펜스를 계산합니다.

    사분위수는 보간 없이 정렬된 사본의 floor(n * 0.25), floor(n * 0.75)
    위치 값을 사용합니다 (nearest-rank).

    Returns:
        (q1, q3, lower, upper) 튜플. 값이 3개 미만이거나 IQR이 0이면 None
    """
    n = len(values)
    if n < 3:
        return None

    ordered = sorted(values)
    q1 = ordered[math.floor(n * 0.25)]
    q3 = ordered[math.floor(n * 0.75)]
    iqr = q3 - q1
    if iqr == 0:
        return None

    return q1, q3, q1 - multiplier * iqr, q3 + multiplier * iqr


def detect_outliers_iqr(values, multiplier: float = DEFAULT_IQR_MULTIPLIER) -> list:
    """[lower, upper] 펜스 밖에 있는 값을 반환합니다."""
    fences = compute_iqr_fences(values, multiplier)
    if fences is None:
        return []

    _, _, lower, upper = fences
    return [v for v in values if v < lower or v > upper]


def compute_zscore_stats(values) -> Optional[tuple]:
    """
    모평균과 모표준편차(n으로 나눔)를 계산합니다.

    Returns:
        (mean, std) 튜플. 값이 2개 미만이거나 표준편차가 0이면 None
    """
    n = len(values)
    if n < 2:
        return None

    mean = sum(values) / n
    variance = sum((v - mean) ** 2 for v in values) / n
    std = math.sqrt(variance)
    if std == 0:
        return None

    return mean, std


def detect_outliers_zscore(values, threshold: float = DEFAULT_ZSCORE_THRESHOLD) -> list:
    """|z| > threshold 인 값을 반환합니다."""
    stats = compute_zscore_stats(values)
    if stats is None:
        return []

    mean, std = stats
    return [v for v in values if abs((v - mean) / std) > threshold]
