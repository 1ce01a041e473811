"""
분석기 모듈 패키지
==================
상태가 없는 순수 함수 기반 분석 프리미티브 (벤포드 / 이상치 / PII)
"""

from .digit import extract_first_digit
from .benford import (
    BENFORD_DISTRIBUTION,
    BenfordResult,
    analyze_benford,
    build_digit_distribution,
)
from .outlier import (
    compute_iqr_fences,
    compute_zscore_stats,
    detect_outliers_iqr,
    detect_outliers_zscore,
)
from .pii import PiiCategory, PiiFinding, scan_record_for_pii

__all__ = [
    "extract_first_digit",
    "BENFORD_DISTRIBUTION",
    "BenfordResult",
    "analyze_benford",
    "build_digit_distribution",
    "compute_iqr_fences",
    "compute_zscore_stats",
    "detect_outliers_iqr",
    "detect_outliers_zscore",
    "PiiCategory",
    "PiiFinding",
    "scan_record_for_pii",
]
