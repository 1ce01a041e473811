"""
감사 오케스트레이터 (Audit Orchestrator)
=========================================
데이터셋에 대해 요청된 체커(벤포드 / 이상치 / PII)를 실행하고
결과와 요약을 하나의 리포트용 구조로 모읍니다.

분석 로직은 갖지 않으며 체커 선택과 결과 집계만 담당합니다.
"""

import logging
import time
from dataclasses import dataclass, field

from .checker import (
    BenfordChecker,
    CheckResult,
    OutlierChecker,
    PiiChecker,
    summarize_results,
)

logger = logging.getLogger(__name__)

# 검증 유형 → 체커 클래스 (실행 순서)
CHECKERS = {
    "benford": BenfordChecker,
    "outlier": OutlierChecker,
    "pii": PiiChecker,
}


@dataclass
class AuditReport:
    """감사 실행 결과 (CheckResult 리스트 + 요약)"""
    results: list[CheckResult] = field(default_factory=list)
    summary: dict = field(default_factory=dict)
    elapsed: float = 0.0

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary,
            "elapsed": self.elapsed,
        }


def parse_checks(checks: str) -> list[str]:
    """
    "all" 또는 콤마 구분 문자열을 검증 유형 리스트로 변환합니다.

    Raises:
        ValueError: 알 수 없는 검증 유형이 포함된 경우
    """
    if checks == "all":
        return list(CHECKERS)

    check_list = [c.strip() for c in checks.split(",") if c.strip()]
    unknown = [c for c in check_list if c not in CHECKERS]
    if unknown:
        raise ValueError(
            f"알 수 없는 검증 유형: {', '.join(unknown)} (가능: {', '.join(CHECKERS)})"
        )
    return check_list


class AuditOrchestrator:
    """검증 유형별 체커 실행 및 결과 집계"""

    def __init__(self, dataset: dict, rules: dict, settings: dict = None):
        """
        Args:
            dataset: {테이블명: 레코드 리스트}
            rules: {"benford": [...], "outlier": [...], "pii": [...]}
            settings: audit_settings.yml 내용 (유형별 섹션)
        """
        self.dataset = dataset
        self.rules = rules
        self.settings = settings or {}

    def run(self, checks: str = "all") -> AuditReport:
        """
        요청된 검증 유형을 실행합니다.

        Args:
            checks: "all" 또는 콤마 구분 검증 유형 (e.g. "benford,pii")

        Returns:
            AuditReport
        """
        start_time = time.time()
        check_list = parse_checks(checks)

        all_results: list[CheckResult] = []
        for check_type in CHECKERS:
            if check_type not in check_list:
                continue
            logger.info("")
            checker = CHECKERS[check_type](
                self.dataset,
                self.rules.get(check_type, []),
                self.settings.get(check_type, {}),
            )
            all_results.extend(checker.run_checks())

        report = AuditReport(
            results=all_results,
            summary=summarize_results(all_results),
            elapsed=round(time.time() - start_time, 2),
        )
        self._log_summary(report)
        return report

    @staticmethod
    def _log_summary(report: AuditReport):
        summary = report.summary
        logger.info("")
        logger.info("=" * 60)
        logger.info("📊 감사 결과 요약")
        logger.info("=" * 60)
        logger.info("   전체: %d건", summary["total_checks"])
        logger.info("   ✅ PASS: %d건", summary["passed"])
        logger.info("   ❌ FAIL: %d건", summary["failed"])
        logger.info("   ⚠️  WARNING: %d건", summary["warnings"])
        logger.info("   🔴 ERROR: %d건", summary["errors"])
        logger.info("   📈 통과율: %.1f%%", summary["pass_rate"])
        logger.info("   ⏱️  소요 시간: %s초", report.elapsed)
