"""
CSV 감사 리포트 생성기
=======================
감사 결과를 CSV 파일로 출력합니다. (스프레드시트 후속 분석용)

검증 유형별 핵심 지표는 metric_name / metric_value 컬럼으로 펼치고,
나머지 상세 정보는 details 컬럼에 JSON 문자열로 남깁니다.
  - benford: chi_square
  - outlier: outlier_ratio
  - pii: total_findings
"""

import csv
import os
import json
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

# 검증 유형 → 대표 지표
METRIC_KEYS = {
    "benford": "chi_square",
    "outlier": "outlier_ratio",
    "pii": "total_findings",
}


class CSVReporter:
    """CSV 감사 리포트 생성기"""

    COLUMNS = [
        "rule_id",
        "check_type",
        "table_name",
        "column_name",
        "status",
        "total_rows",
        "violation_count",
        "violation_ratio",
        "metric_name",
        "metric_value",
        "description",
        "details",
        "executed_at",
    ]

    def __init__(self, report_dir: str = None):
        if report_dir is None:
            report_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "..", "reports")
        self.report_dir = os.path.abspath(report_dir)
        os.makedirs(self.report_dir, exist_ok=True)

    def generate(self, results: list, summary: dict = None) -> str:
        """
        감사 결과를 CSV 파일로 생성합니다.

        Args:
            results: CheckResult 객체 리스트 (또는 dict 리스트)
            summary: 요약 정보 (있으면 마지막 행으로 추가)

        Returns:
            생성된 CSV 파일 경로
        """
        filepath = os.path.join(
            self.report_dir,
            f"audit_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv",
        )

        rows = [self._to_row(r.to_dict() if hasattr(r, "to_dict") else r) for r in results]
        if summary:
            rows.append({})
            rows.append(self._summary_row(summary))

        with open(filepath, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.DictWriter(f, fieldnames=self.COLUMNS, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)

        logger.info("📄 CSV 리포트 생성: %s (%d건)", filepath, len(results))
        return filepath

    @staticmethod
    def _to_row(result: dict) -> dict:
        row = dict(result)
        details = row.get("details") or {}

        metric = METRIC_KEYS.get(row.get("check_type"))
        if metric == "outlier_ratio":
            row["metric_name"] = metric
            row["metric_value"] = row.get("violation_ratio", 0)
        elif metric in details:
            row["metric_name"] = metric
            row["metric_value"] = details[metric]

        if isinstance(details, dict):
            row["details"] = json.dumps(details, ensure_ascii=False, default=str)
        return row

    @staticmethod
    def _summary_row(summary: dict) -> dict:
        counts = " | ".join(
            f"{label} {summary.get(key, 0)}"
            for label, key in (("PASS", "passed"), ("FAIL", "failed"),
                               ("WARNING", "warnings"), ("ERROR", "errors"))
        )
        return {
            "rule_id": "SUMMARY",
            "check_type": "-",
            "status": f"통과율 {summary.get('pass_rate', 0)}%",
            "total_rows": summary.get("total_checks", 0),
            "description": f"전체 {summary.get('total_checks', 0)}건 | {counts}",
            "executed_at": datetime.now().isoformat(),
        }
