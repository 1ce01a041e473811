"""
벤포드 법칙 분석기 (Benford Analyzer)
======================================
숫자 컬럼의 첫 자리 분포가 벤포드 법칙을 따르는지 카이제곱 적합도로 검정합니다.
조작/가공된 데이터 탐지 신호로 사용합니다.

판정:
  - chi_square < chi_square_threshold (기본 15.5, df=8 근사 임계값) → 적합
  - 0은 첫 자리가 없으므로 표본에서 제외
  - 표본이 비어있으면 sample_size=0, chi_square=0, 부적합
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .digit import extract_first_digit

logger = logging.getLogger(__name__)

# 벤포드 법칙 기대 분포 (첫 자리 1~9)
BENFORD_DISTRIBUTION = {
    1: 0.301,
    2: 0.176,
    3: 0.125,
    4: 0.097,
    5: 0.079,
    6: 0.067,
    7: 0.058,
    8: 0.051,
    9: 0.046,
}

DEFAULT_CHI_SQUARE_THRESHOLD = 15.5


@dataclass(frozen=True)
class BenfordResult:
    """
    벤포드 분석 결과

    Attributes:
        sample_size: 분석에 사용된 0이 아닌 값의 수
        distribution: 첫 자리별 관측 건수 (표본이 없으면 None)
        chi_square: 카이제곱 통계량
        conforms_to_benford: 벤포드 법칙 적합 여부
        chi_square_threshold: 판정에 사용한 임계값
    """
    sample_size: int
    distribution: Optional[dict]
    chi_square: float
    conforms_to_benford: bool
    chi_square_threshold: float = DEFAULT_CHI_SQUARE_THRESHOLD

    @property
    def deviation_percent(self) -> float:
        """관측/기대 분포 간 총 편차 (0 ~ 100%)"""
        if not self.distribution or self.sample_size == 0:
            return 0.0
        total_deviation = sum(
            abs(self.distribution[d] / self.sample_size - expected)
            for d, expected in BENFORD_DISTRIBUTION.items()
        )
        return total_deviation / 2 * 100

    def to_dict(self) -> dict:
        """딕셔너리로 변환 (리포트 출력용)"""
        return {
            "sample_size": self.sample_size,
            "distribution": dict(self.distribution) if self.distribution else None,
            "chi_square": round(self.chi_square, 4),
            "chi_square_threshold": self.chi_square_threshold,
            "conforms_to_benford": self.conforms_to_benford,
            "deviation_percent": round(self.deviation_percent, 2),
        }


def build_digit_distribution(values) -> dict:
    """첫 자리(1~9)별 건수를 집계합니다. 1~9 밖의 결과는 제외합니다."""
    distribution = {digit: 0 for digit in range(1, 10)}
    for value in values:
        digit = extract_first_digit(value)
        if 1 <= digit <= 9:
            distribution[digit] += 1
    return distribution


def analyze_benford(values, chi_square_threshold: float = DEFAULT_CHI_SQUARE_THRESHOLD) -> BenfordResult:
    """
    벤포드 법칙 적합도를 분석합니다.

    Args:
        values: 숫자 값 시퀀스
        chi_square_threshold: 적합 판정 임계값

    Returns:
        BenfordResult
    """
    non_zero = [v for v in values if v != 0]
    if not non_zero:
        logger.debug("벤포드 분석: 0이 아닌 값이 없습니다.")
        return BenfordResult(
            sample_size=0,
            distribution=None,
            chi_square=0.0,
            conforms_to_benford=False,
            chi_square_threshold=chi_square_threshold,
        )

    distribution = build_digit_distribution(non_zero)
    sample_size = len(non_zero)

    chi_square = 0.0
    for digit, expected in BENFORD_DISTRIBUTION.items():
        observed = distribution[digit] / sample_size
        chi_square += (observed - expected) ** 2 / expected
    chi_square *= sample_size

    return BenfordResult(
        sample_size=sample_size,
        distribution=distribution,
        chi_square=chi_square,
        conforms_to_benford=chi_square < chi_square_threshold,
        chi_square_threshold=chi_square_threshold,
    )
