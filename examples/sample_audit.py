"""
Data Audit Toolkit - 메모리 데이터셋 감사 예제
==============================================

DB 없이 메모리에 만든 레코드로 벤포드 / 이상치 / 개인정보 감사를 실행하는 예제입니다.

사용법:
  # 프로젝트 루트에서 실행
  python -m examples.sample_audit

  # 또는 직접 실행
  cd examples && python sample_audit.py
"""

import sys
import os
import random

# 프로젝트 루트를 sys.path에 추가 (직접 실행 시)
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from data_audit.audit import AuditOrchestrator
from data_audit.checker.base_checker import CheckStatus
from data_audit.reporter.html_reporter import HTMLReporter
from data_audit.reporter.csv_reporter import CSVReporter


# ---------------------------------------------------------------------------
# 1) 샘플 데이터셋 (의도적 이슈 포함)
# ---------------------------------------------------------------------------
def build_dataset(seed: int = 42) -> dict:
    rng = random.Random(seed)

    # 카드 거래 2,000건: 로그 균등 분포 금액 (벤포드 적합) + 고액 이상치 5건
    transactions = []
    for i in range(1, 2001):
        amount = round(10 ** rng.uniform(3, 6), 0)
        if i % 400 == 0:
            amount = 950_000_000
        transactions.append({"txn_id": i, "txn_amount": amount})

    # 경비 청구 600건: 결재 한도 직전 금액 반복 (벤포드 이탈)
    claims = [
        {"claim_id": i, "claim_amount": rng.choice([490_000, 495_000, 499_000, 99_000])}
        for i in range(1, 601)
    ]

    # 고객 500명: 일부 이메일/전화번호가 마스킹 없이 남아 있음
    customers = []
    for i in range(1, 501):
        unmasked = i % 100 == 0
        customers.append({
            "customer_id": i,
            "email": f"user{i}@test.com" if unmasked else f"u***{i}@***",
            "phone": f"010-{i:04d}-{(i * 7) % 10000:04d}" if unmasked else "010-****-****",
            "memo": "정상 고객",
        })

    return {
        "card_transactions": transactions,
        "expense_claims": claims,
        "customers": customers,
    }


RULES = {
    "benford": [
        {
            "rule_id": "BEN-001",
            "description": "카드 거래 금액 벤포드 분포",
            "table": "card_transactions",
            "column": "txn_amount",
        },
        {
            "rule_id": "BEN-002",
            "description": "경비 청구 금액 벤포드 분포",
            "table": "expense_claims",
            "column": "claim_amount",
        },
    ],
    "outlier": [
        {
            "rule_id": "OUT-001",
            "description": "카드 거래 금액 이상치 (Z-score)",
            "table": "card_transactions",
            "column": "txn_amount",
            "method": "zscore",
        },
    ],
    "pii": [
        {
            "rule_id": "PII-001",
            "description": "고객 테이블 개인정보 노출",
            "table": "customers",
            "categories": ["email", "phone", "ssn"],
        },
    ],
}


# ---------------------------------------------------------------------------
# 2) 메인 실행
# ---------------------------------------------------------------------------
def main():
    print("=" * 65)
    print("  Data Audit Toolkit - 메모리 데이터셋 감사 예제")
    print("=" * 65)
    print()

    dataset = build_dataset()
    print("   카드 거래 2,000 / 경비 청구 600 / 고객 500")
    print()

    report = AuditOrchestrator(dataset, RULES).run()

    for r in report.results:
        print(f"   [{r.status.value}] {r.rule_id} | {r.description} | "
              f"위반 {r.violation_count}/{r.total_rows}")
    print()

    summary = report.summary
    print("=" * 65)
    print("  감사 결과 요약")
    print("=" * 65)
    print(f"   전체 검증 : {summary['total_checks']}건")
    print(f"   PASS     : {summary['passed']}건")
    print(f"   FAIL     : {summary['failed']}건")
    print(f"   WARNING  : {summary['warnings']}건")
    print(f"   ERROR    : {summary['errors']}건")
    print(f"   통과율   : {summary['pass_rate']}%")
    print()

    reports_dir = os.path.join(os.path.dirname(__file__), '..', 'reports')
    html_path = HTMLReporter(reports_dir).generate(report.results, summary)
    csv_path = CSVReporter(reports_dir).generate(report.results, summary)
    print(f"   HTML 리포트: {html_path}")
    print(f"   CSV  리포트: {csv_path}")

    print()
    print("감사 완료! 상세 결과는 reports/ 디렉토리를 확인하세요.")

    has_error = any(r.status == CheckStatus.ERROR for r in report.results)
    return 0 if summary["failed"] == 0 and not has_error else 1


if __name__ == "__main__":
    sys.exit(main())
