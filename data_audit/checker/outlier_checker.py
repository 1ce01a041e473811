"""
이상치 검증 모듈 (Outlier Checker)
===================================
숫자 컬럼에서 통계적 이상치를 검출합니다.

기능:
  - method: iqr → IQR 펜스 (multiplier, 기본 1.5)
  - method: zscore → Z-score 임계값 (threshold, 기본 3)
  - 이상치 비율이 max_outlier_ratio 이하면 WARNING, 초과하면 FAIL
  - 유효 값이 min_sample_size 미만이면 WARNING (판정 보류)
"""

import logging
from .base_checker import BaseChecker, CheckResult, CheckStatus
from ..analyzer.outlier import (
    DEFAULT_IQR_MULTIPLIER,
    DEFAULT_ZSCORE_THRESHOLD,
    compute_iqr_fences,
    compute_zscore_stats,
    detect_outliers_iqr,
    detect_outliers_zscore,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_SAMPLE_SIZE = 10
DEFAULT_MAX_OUTLIER_RATIO = 0.05
# 리포트에 포함할 이상치 샘플 수 (기본값)
DEFAULT_MAX_SAMPLES = 100


class OutlierChecker(BaseChecker):
    """숫자 컬럼 통계적 이상치 검증 (IQR / Z-score)"""

    check_type = "outlier"

    def run_checks(self) -> list[CheckResult]:
        """모든 이상치 검증 규칙을 실행합니다."""
        return self._run_all("📈 이상치 검증 시작")

    def _run_single_check(self, rule: dict) -> CheckResult:
        """단일 이상치 검증 규칙을 실행합니다."""
        rule_id = rule["rule_id"]
        table = rule["table"]
        column = rule["column"]
        method = rule.get("method", "iqr")
        min_sample_size = self._setting(rule, "min_sample_size", DEFAULT_MIN_SAMPLE_SIZE)
        max_outlier_ratio = self._setting(rule, "max_outlier_ratio", DEFAULT_MAX_OUTLIER_RATIO)
        max_samples = self._setting(rule, "max_samples", DEFAULT_MAX_SAMPLES)

        logger.info("[%s] %s", rule_id, rule["description"])

        pairs = self._get_numeric_values(table, column)
        values = [value for _, value in pairs]

        if len(values) < min_sample_size:
            result = self._make_result(
                rule=rule,
                check_type="outlier",
                status=CheckStatus.WARNING,
                total_rows=len(values),
                details={
                    "method": method,
                    "message": f"유효 값 {len(values)}건 < 최소 {min_sample_size}건: 판정 보류",
                },
            )
            logger.info("  ⚠️ %s.%s: 데이터 부족 (%d건)", table, column, len(values))
            return result

        if method == "iqr":
            multiplier = self._setting(rule, "iqr_multiplier", DEFAULT_IQR_MULTIPLIER)
            outliers = detect_outliers_iqr(values, multiplier)
            fences = compute_iqr_fences(values, multiplier)
            details = {"method": "iqr", "multiplier": multiplier}
            if fences is not None:
                q1, q3, lower, upper = fences
                details.update({"q1": q1, "q3": q3, "lower_bound": lower, "upper_bound": upper})
        elif method == "zscore":
            threshold = self._setting(rule, "zscore_threshold", DEFAULT_ZSCORE_THRESHOLD)
            outliers = detect_outliers_zscore(values, threshold)
            stats = compute_zscore_stats(values)
            details = {"method": "zscore", "threshold": threshold}
            if stats is not None:
                details.update({"mean": stats[0], "std": stats[1]})
        else:
            raise ValueError(f"알 수 없는 이상치 탐지 방법: {method}")

        # 이상치 판정은 값 기준이므로 같은 값의 모든 행이 이상치
        flagged = set(outliers)
        outlier_rows = [
            {"row_number": row_number, "value": value}
            for row_number, value in pairs
            if value in flagged
        ]

        outlier_count = len(outliers)
        outlier_ratio = outlier_count / len(values)

        if outlier_count == 0:
            status = CheckStatus.PASS
        elif outlier_ratio <= max_outlier_ratio:
            status = CheckStatus.WARNING
        else:
            status = CheckStatus.FAIL

        details["max_outlier_ratio"] = max_outlier_ratio
        details["outlier_samples"] = outlier_rows[:max_samples]

        result = self._make_result(
            rule=rule,
            check_type="outlier",
            status=status,
            total_rows=len(values),
            violation_count=outlier_count,
            details=details,
        )

        logger.info(
            "  %s %s.%s: 이상치 %d건 (%.2f%%) / 허용 %.2f%% [%s]",
            self._status_icon(status), table, column, outlier_count,
            outlier_ratio * 100, max_outlier_ratio * 100, method.upper(),
        )
        return result
