"""
개인정보 노출 검증 모듈 (PII Checker)
======================================
테이블 레코드에 마스킹되지 않은 개인정보가 남아 있는지 검출합니다.

기능:
  - 카테고리: email / phone / ssn / creditCard / ipAddress
  - columns 지정 시 해당 컬럼만 검사 (미지정 시 전체 컬럼)
  - 검출 레코드가 있으면 FAIL, 카테고리별 건수와 미리보기 샘플 기록
  - 미리보기는 원본 앞 20자로 제한 (리포트 노출 최소화)
"""

import logging
from .base_checker import BaseChecker, CheckResult, CheckStatus
from ..analyzer.pii import PiiCategory, scan_record_for_pii

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = ["email", "phone", "ssn", "creditCard"]
DEFAULT_MAX_FINDINGS = 100


class PiiChecker(BaseChecker):
    """개인정보(PII) 노출 검증"""

    check_type = "pii"

    def run_checks(self) -> list[CheckResult]:
        """모든 PII 검증 규칙을 실행합니다."""
        return self._run_all("🔒 개인정보 노출 검증 시작")

    def _run_single_check(self, rule: dict) -> CheckResult:
        """단일 PII 검증 규칙을 실행합니다."""
        rule_id = rule["rule_id"]
        table = rule["table"]
        columns = self._as_list(rule.get("columns"))
        categories = self._as_list(rule.get("categories", DEFAULT_CATEGORIES))
        max_findings = self._setting(rule, "max_findings", DEFAULT_MAX_FINDINGS)

        logger.info("[%s] %s", rule_id, rule["description"])

        unknown = set(categories) - {c.value for c in PiiCategory}
        if unknown:
            logger.warning("[%s] 알 수 없는 PII 카테고리 무시: %s", rule_id, sorted(unknown))

        records = self._get_records(table)
        category_counts = {c.value: 0 for c in PiiCategory.resolve(categories)}
        findings = []
        flagged_rows = 0

        for row_number, record in enumerate(records, start=1):
            if columns:
                record = {name: record.get(name) for name in columns}
            row_findings = scan_record_for_pii(record, categories)
            if not row_findings:
                continue

            flagged_rows += 1
            for finding in row_findings:
                category_counts[finding.category.value] += 1
                if len(findings) < max_findings:
                    findings.append({"row_number": row_number, **finding.to_dict()})

        status = CheckStatus.PASS if flagged_rows == 0 else CheckStatus.FAIL
        high_risk = any(f["risk"] in ("critical", "high") for f in findings)

        result = self._make_result(
            rule=rule,
            check_type="pii",
            status=status,
            total_rows=len(records),
            violation_count=flagged_rows,
            details={
                "categories": list(category_counts),
                "summary": category_counts,
                "total_findings": sum(category_counts.values()),
                "has_high_risk_pii": high_risk,
                "findings": findings,
            },
        )

        logger.info(
            "  %s %s: PII 검출 레코드 %d건 / 전체 %d건 %s",
            self._status_icon(status), table, flagged_rows, len(records), category_counts,
        )

        if high_risk:
            logger.warning("  🚨 개인정보 노출 위험! 고위험 PII가 검출되었습니다.")

        return result
