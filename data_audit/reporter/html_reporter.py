"""
HTML 감사 리포트 생성기
========================
감사 결과를 HTML 리포트로 생성합니다.
요약 카드 + 검증 유형별 결과 테이블 포함

모든 셀 값은 escape_html을 거쳐 출력됩니다 (레코드 값이 그대로 리포트에 실리므로).

색상 코드:
  - PASS: 초록 (#27ae60)
  - FAIL: 빨강 (#e74c3c)
  - WARNING: 주황 (#f39c12)
  - ERROR: 회색 (#95a5a6)
"""

import os
import json
import logging
from datetime import datetime

from ..checker.base_checker import CheckStatus
from ..utils import escape_html, safe_number

logger = logging.getLogger(__name__)

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="ko">
<head>
    <meta charset="UTF-8">
    <title>데이터 감사 리포트 - {{ generated_at }}</title>
    <style>
        body { font-family: 'Malgun Gothic', 'Apple SD Gothic Neo', sans-serif; background: #f5f6fa; color: #2c3e50; padding: 20px; }
        .container { max-width: 1200px; margin: 0 auto; }
        .header { background: linear-gradient(135deg, #4A235A, #7D3C98); color: white; padding: 24px; border-radius: 10px; margin-bottom: 20px; }
        .cards { display: grid; grid-template-columns: repeat(6, 1fr); gap: 12px; margin-bottom: 20px; }
        .card { background: white; border-radius: 8px; padding: 16px; text-align: center; }
        .card .number { font-size: 30px; font-weight: bold; }
        .card.pass .number { color: #27ae60; }
        .card.fail .number { color: #e74c3c; }
        .card.warning .number { color: #f39c12; }
        .card.error .number { color: #95a5a6; }
        .section { background: white; border-radius: 8px; padding: 20px; margin-bottom: 20px; }
        table { width: 100%; border-collapse: collapse; font-size: 13px; }
        th { background: #4A235A; color: white; padding: 8px 10px; text-align: left; }
        td { padding: 6px 10px; border-bottom: 1px solid #ecf0f1; }
        .badge { padding: 2px 8px; border-radius: 10px; color: white; font-size: 12px; }
        .badge-pass { background: #27ae60; }
        .badge-fail { background: #e74c3c; }
        .badge-warning { background: #f39c12; }
        .badge-error { background: #95a5a6; }
        .digits td { border: none; padding: 2px 8px; font-size: 12px; color: #7f8c8d; }
    </style>
</head>
<body>
<div class="container">
    <div class="header">
        <h1>🕵️ 데이터 감사 리포트</h1>
        <div>생성 시각: {{ generated_at }} | 벤포드 · 이상치 · 개인정보</div>
    </div>
    <div class="cards">
        <div class="card"><div class="number">{{ total_checks }}</div>전체</div>
        <div class="card pass"><div class="number">{{ passed }}</div>PASS</div>
        <div class="card fail"><div class="number">{{ failed }}</div>FAIL</div>
        <div class="card warning"><div class="number">{{ warnings }}</div>WARNING</div>
        <div class="card error"><div class="number">{{ errors }}</div>ERROR</div>
        <div class="card"><div class="number">{{ pass_rate }}%</div>통과율</div>
    </div>
    {{ sections_html }}
</div>
</body>
</html>"""

TYPE_LABELS = {
    "benford": "📐 벤포드 법칙 검증",
    "outlier": "📈 이상치 검증",
    "pii": "🔒 개인정보 노출 검증",
}

# 상세 칸 최대 길이
MAX_DETAILS_LENGTH = 200


class HTMLReporter:
    """HTML 감사 리포트 생성기"""

    def __init__(self, report_dir: str = None):
        """
        Args:
            report_dir: 리포트 저장 디렉토리 (기본: reports/)
        """
        if report_dir is None:
            base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
            report_dir = os.path.join(base_dir, "..", "reports")
        self.report_dir = os.path.abspath(report_dir)
        os.makedirs(self.report_dir, exist_ok=True)

    def generate(self, results: list, summary: dict = None) -> str:
        """
        감사 결과를 HTML 리포트로 생성합니다.

        Args:
            results: CheckResult 객체 리스트 (또는 dict 리스트)
            summary: 요약 정보 (없으면 results에서 자동 계산)

        Returns:
            생성된 HTML 파일 경로
        """
        result_dicts = [r.to_dict() if hasattr(r, "to_dict") else r for r in results]

        if summary is None:
            summary = self._calculate_summary(result_dicts)

        generated_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        html = HTML_TEMPLATE.replace("{{ generated_at }}", generated_at)
        for key in ("total_checks", "passed", "failed", "warnings", "errors", "pass_rate"):
            html = html.replace("{{ %s }}" % key, escape_html(safe_number(summary.get(key))))
        html = html.replace("{{ sections_html }}", self._make_sections(result_dicts))

        filename = f"audit_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.html"
        filepath = os.path.join(self.report_dir, filename)

        with open(filepath, "w", encoding="utf-8") as f:
            f.write(html)

        logger.info("📄 HTML 리포트 생성: %s", filepath)
        return filepath

    @staticmethod
    def _calculate_summary(results: list[dict]) -> dict:
        """dict 결과에서 요약을 계산합니다."""
        statuses = [r.get("status") for r in results]
        counts = {s.value: statuses.count(s.value) for s in CheckStatus}
        total = len(results)
        return {
            "total_checks": total,
            "passed": counts["PASS"],
            "failed": counts["FAIL"],
            "warnings": counts["WARNING"],
            "errors": counts["ERROR"],
            "pass_rate": round(counts["PASS"] / total * 100, 2) if total > 0 else 0,
        }

    def _make_sections(self, results: list[dict]) -> str:
        """검증 유형별 섹션 HTML 생성"""
        groups = {}
        for r in results:
            groups.setdefault(r.get("check_type", "unknown"), []).append(r)

        sections = []
        for ctype, items in groups.items():
            label = TYPE_LABELS.get(ctype, f"기타 ({ctype})")
            rows_html = "".join(
                self._make_row(item) + self._make_digit_row(item) for item in items
            )
            sections.append(f"""
    <div class="section">
        <h2>{escape_html(label)} ({len(items)}건)</h2>
        <table>
            <thead>
                <tr>
                    <th>규칙ID</th><th>설명</th><th>테이블</th><th>컬럼</th><th>결과</th>
                    <th>분석 건수</th><th>위반 건수</th><th>위반율</th><th>상세</th>
                </tr>
            </thead>
            <tbody>{rows_html}
            </tbody>
        </table>
    </div>""")

        return "\n".join(sections)

    @staticmethod
    def _make_row(item: dict) -> str:
        status = str(item.get("status", "UNKNOWN"))
        details_str = json.dumps(item.get("details", {}), ensure_ascii=False, default=str)
        if len(details_str) > MAX_DETAILS_LENGTH:
            details_str = details_str[:MAX_DETAILS_LENGTH] + "..."

        total_rows = int(safe_number(item.get("total_rows")))
        violation_count = int(safe_number(item.get("violation_count")))
        violation_pct = round(safe_number(item.get("violation_ratio")) * 100, 2)

        return f"""
                <tr>
                    <td>{escape_html(item.get('rule_id', '-'))}</td>
                    <td>{escape_html(item.get('description', '-'))}</td>
                    <td>{escape_html(item.get('table_name', '-'))}</td>
                    <td>{escape_html(item.get('column_name') or '-')}</td>
                    <td><span class="badge badge-{escape_html(status.lower())}">{escape_html(status)}</span></td>
                    <td>{total_rows:,}</td>
                    <td>{violation_count:,}</td>
                    <td>{violation_pct}%</td>
                    <td title="{escape_html(details_str)}">{escape_html(details_str)}</td>
                </tr>"""

    @staticmethod
    def _make_digit_row(item: dict) -> str:
        """벤포드 결과 아래에 첫 자리별 관측 / 기대 비율 표를 추가합니다."""
        details = item.get("details") or {}
        distribution = details.get("distribution")
        expected = details.get("expected_distribution")
        sample_size = safe_number(details.get("sample_size"))
        if item.get("check_type") != "benford" or not distribution or not expected or sample_size <= 0:
            return ""

        # JSON 왕복 시 키가 문자열이 될 수 있음
        def lookup(mapping, digit):
            return safe_number(mapping.get(digit, mapping.get(str(digit))))

        cells = []
        for digit in range(1, 10):
            observed = lookup(distribution, digit) / sample_size * 100
            cells.append(
                f"<td>{digit}: {observed:.1f}% / {lookup(expected, digit) * 100:.1f}%</td>"
            )
        return f"""
                <tr class="digits">
                    <td colspan="9"><table><tr><td>첫 자리 분포 (관측 / 기대)</td>{''.join(cells)}</tr></table></td>
                </tr>"""
