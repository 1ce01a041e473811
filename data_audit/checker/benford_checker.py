"""
벤포드 법칙 검증 모듈 (Benford Checker)
========================================
금액/수량 등 자연 발생 숫자 컬럼의 첫 자리 분포를 벤포드 법칙과 비교하여
조작/가공 데이터 의심 신호를 검출합니다.

판정:
  - 표본(0 제외) < min_sample_size → WARNING (통계적 의미 부족)
  - 카이제곱 < chi_square_threshold → PASS
  - 부적합 + 편차 > medium_deviation_percent → FAIL
      severity: 편차 > high_deviation_percent 이면 high, 아니면 medium
  - 부적합이지만 편차가 작음 → WARNING (대표본에서 흔한 미세 이탈)

violation_count는 벤포드 기대 건수를 초과한 첫 자리 버킷의 초과 건수 합계입니다.
(= 편차율 × 표본 수, 기대 분포로 설명되지 않는 레코드 수)
"""

import logging
from .base_checker import BaseChecker, CheckResult, CheckStatus
from ..analyzer.benford import (
    BENFORD_DISTRIBUTION,
    DEFAULT_CHI_SQUARE_THRESHOLD,
    analyze_benford,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_SAMPLE_SIZE = 100
DEFAULT_MEDIUM_DEVIATION_PERCENT = 15
DEFAULT_HIGH_DEVIATION_PERCENT = 30


class BenfordChecker(BaseChecker):
    """숫자 컬럼 벤포드 법칙 적합도 검증"""

    check_type = "benford"

    def run_checks(self) -> list[CheckResult]:
        """모든 벤포드 검증 규칙을 실행합니다."""
        return self._run_all("📐 벤포드 법칙 검증 시작")

    def _grade(self, rule: dict, deviation: float):
        """편차율로 (status, severity)를 판정합니다. 부적합으로 확정된 경우에만 호출."""
        medium = self._setting(rule, "medium_deviation_percent", DEFAULT_MEDIUM_DEVIATION_PERCENT)
        high = self._setting(rule, "high_deviation_percent", DEFAULT_HIGH_DEVIATION_PERCENT)
        if deviation > high:
            return CheckStatus.FAIL, "high"
        if deviation > medium:
            return CheckStatus.FAIL, "medium"
        return CheckStatus.WARNING, None

    def _run_single_check(self, rule: dict) -> CheckResult:
        """단일 벤포드 검증 규칙을 실행합니다."""
        rule_id = rule["rule_id"]
        table = rule["table"]
        column = rule["column"]
        threshold = self._setting(rule, "chi_square_threshold", DEFAULT_CHI_SQUARE_THRESHOLD)
        min_sample_size = self._setting(rule, "min_sample_size", DEFAULT_MIN_SAMPLE_SIZE)

        logger.info("[%s] %s", rule_id, rule["description"])

        values = [value for _, value in self._get_numeric_values(table, column)]
        analysis = analyze_benford(values, chi_square_threshold=threshold)
        deviation = analysis.deviation_percent

        details = analysis.to_dict()
        details["expected_distribution"] = BENFORD_DISTRIBUTION
        details["min_sample_size"] = min_sample_size
        details["severity"] = None

        if analysis.sample_size < min_sample_size:
            status = CheckStatus.WARNING
            details["message"] = (
                f"표본 {analysis.sample_size}건 < 최소 {min_sample_size}건: 판정 보류"
            )
        elif analysis.conforms_to_benford:
            status = CheckStatus.PASS
        else:
            status, severity = self._grade(rule, deviation)
            details["severity"] = severity
            if severity is None:
                details["message"] = (
                    f"'{column}' 컬럼이 벤포드 분포와 통계적으로 다르나 편차 {deviation:.1f}%로 경미합니다."
                )
            else:
                details["message"] = (
                    f"'{column}' 컬럼이 벤포드 분포에서 {deviation:.1f}% 이탈했습니다. "
                    f"데이터 조작/가공 또는 인위적 금액 패턴(한도 직전 금액, 반올림) 여부를 확인하세요."
                )

        result = self._make_result(
            rule=rule,
            check_type="benford",
            status=status,
            total_rows=analysis.sample_size,
            violation_count=round(deviation / 100 * analysis.sample_size),
            details=details,
        )

        logger.info(
            "  %s %s.%s: χ²=%.2f / 임계 %.2f (표본 %d건, 편차 %.1f%%)",
            self._status_icon(status), table, column, analysis.chi_square,
            threshold, analysis.sample_size, deviation,
        )

        if details["severity"] == "high":
            logger.warning("  🚨 벤포드 분포 이탈 심각! 데이터 조작/가공 여부 확인 필요")

        return result
