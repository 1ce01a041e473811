"""
체커 모듈 패키지
"""

from .base_checker import BaseChecker, CheckResult, CheckStatus, summarize_results
from .benford_checker import BenfordChecker
from .outlier_checker import OutlierChecker
from .pii_checker import PiiChecker

__all__ = [
    "BaseChecker",
    "CheckResult",
    "CheckStatus",
    "summarize_results",
    "BenfordChecker",
    "OutlierChecker",
    "PiiChecker",
]
