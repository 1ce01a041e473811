"""
공통 체커 인터페이스 (Base Checker)
====================================
모든 감사 체커의 기본 클래스를 정의합니다.

체커는 메모리에 적재된 데이터셋 ({테이블명: [레코드, ...]})과
규칙 리스트를 받아 분석기를 실행하고 CheckResult를 생성합니다.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..utils import safe_number

logger = logging.getLogger(__name__)


class CheckStatus(Enum):
    """검증 결과 상태"""
    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class CheckResult:
    """
    단일 검증 결과를 담는 데이터 클래스

    Attributes:
        rule_id: 검증 규칙 ID (e.g. BEN-001)
        check_type: 검증 유형 (benford / outlier / pii)
        description: 검증 설명
        table_name: 대상 테이블
        column_name: 대상 컬럼 (없으면 None)
        status: 검증 결과 상태 (PASS / FAIL / WARNING / ERROR)
        total_rows: 분석 대상 건수
        violation_count: 위반 건수
        violation_ratio: 위반 비율 (0.0 ~ 1.0)
        details: 추가 상세 정보
        executed_at: 실행 시각
    """
    rule_id: str
    check_type: str
    description: str
    table_name: str
    column_name: Optional[str] = None
    status: CheckStatus = CheckStatus.PASS
    total_rows: int = 0
    violation_count: int = 0
    violation_ratio: float = 0.0
    details: dict = field(default_factory=dict)
    executed_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """리포트 출력용 dict (status는 문자열, executed_at은 ISO 형식)"""
        data = asdict(self)
        data["status"] = self.status.value
        data["violation_ratio"] = round(self.violation_ratio, 6)
        data["executed_at"] = self.executed_at.isoformat()
        return data


class BaseChecker(ABC):
    """
    모든 감사 체커의 기본 클래스

    서브클래스는 run_checks() 메서드를 구현해야 합니다.
    """

    check_type = "base"

    def __init__(self, dataset: dict, rules: list[dict], settings: dict = None):
        """
        Args:
            dataset: {테이블명: 레코드 리스트} 형태의 데이터셋
            rules: 해당 유형의 검증 규칙 리스트
            settings: 해당 유형의 분석 설정 (audit_settings.yml 섹션)
        """
        self.dataset = dataset
        self.rules = rules
        self.settings = settings or {}
        self.results: list[CheckResult] = []

    @abstractmethod
    def run_checks(self) -> list[CheckResult]:
        """
        모든 규칙에 대해 검증을 수행하고 결과를 반환합니다.

        Returns:
            CheckResult 리스트
        """
        pass

    def _run_all(self, title: str) -> list[CheckResult]:
        """규칙별로 _run_single_check를 실행하고, 실패한 규칙은 ERROR로 기록합니다."""
        logger.info("=" * 50)
        logger.info("%s (%d개 규칙)", title, len(self.rules))
        logger.info("=" * 50)

        for rule in self.rules:
            try:
                self._run_single_check(rule)
            except Exception as e:
                self._make_error_result(rule, self.check_type, e)

        return self.results

    @abstractmethod
    def _run_single_check(self, rule: dict) -> CheckResult:
        """단일 규칙을 실행하고 CheckResult를 기록합니다."""
        pass

    @staticmethod
    def _as_list(value) -> list:
        """규칙의 리스트 항목을 리스트로 맞춥니다. 단일 문자열은 1개짜리 리스트."""
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return list(value)

    def _setting(self, rule: dict, key: str, default=None):
        """규칙 단위 설정 → 유형 공통 설정 → 기본값 순으로 조회합니다."""
        if key in rule:
            return rule[key]
        return self.settings.get(key, default)

    def _get_records(self, table: str) -> list[dict]:
        """데이터셋에서 테이블 레코드를 조회합니다."""
        if table not in self.dataset:
            raise KeyError(f"테이블 '{table}'이 데이터셋에 없습니다.")
        return self.dataset[table]

    def _get_numeric_values(self, table: str, column: str) -> list[tuple[int, float]]:
        """
        숫자로 변환 가능한 컬럼 값을 (행 번호, 값) 리스트로 반환합니다.
        NULL / 비숫자 / 무한대 값은 제외합니다.
        """
        pairs = []
        for index, record in enumerate(self._get_records(table), start=1):
            value = safe_number(record.get(column), fallback=None)
            if value is not None:
                pairs.append((index, value))
        return pairs

    def _make_result(
        self,
        rule: dict,
        check_type: str,
        status: CheckStatus,
        total_rows: int = 0,
        violation_count: int = 0,
        details: dict = None,
    ) -> CheckResult:
        """CheckResult 객체를 생성하는 헬퍼 메서드"""
        violation_ratio = (
            violation_count / total_rows if total_rows > 0 else 0.0
        )
        column = rule.get("column")
        if column is None and rule.get("columns"):
            column = ", ".join(self._as_list(rule["columns"]))

        result = CheckResult(
            rule_id=rule.get("rule_id", "UNKNOWN"),
            check_type=check_type,
            description=rule.get("description", ""),
            table_name=rule.get("table", ""),
            column_name=column,
            status=status,
            total_rows=total_rows,
            violation_count=violation_count,
            violation_ratio=violation_ratio,
            details=details or {},
        )
        self.results.append(result)
        return result

    def _make_error_result(self, rule: dict, check_type: str, error: Exception) -> CheckResult:
        """에러 발생 시 CheckResult를 생성하는 헬퍼 메서드"""
        logger.error("[%s] %s 실행 오류: %s", rule.get("rule_id"), check_type, error)
        return self._make_result(
            rule=rule,
            check_type=check_type,
            status=CheckStatus.ERROR,
            details={"error": str(error)},
        )

    @staticmethod
    def _status_icon(status: CheckStatus) -> str:
        return {
            CheckStatus.PASS: "✅",
            CheckStatus.WARNING: "⚠️",
            CheckStatus.FAIL: "❌",
        }.get(status, "🔴")

    def get_summary(self) -> dict:
        """검증 결과 요약을 반환합니다."""
        return summarize_results(self.results)


def summarize_results(results: list[CheckResult]) -> dict:
    """CheckResult 리스트의 상태별 건수와 통과율을 계산합니다."""
    total = len(results)
    passed = sum(1 for r in results if r.status == CheckStatus.PASS)
    failed = sum(1 for r in results if r.status == CheckStatus.FAIL)
    warnings = sum(1 for r in results if r.status == CheckStatus.WARNING)
    errors = sum(1 for r in results if r.status == CheckStatus.ERROR)

    return {
        "total_checks": total,
        "passed": passed,
        "failed": failed,
        "warnings": warnings,
        "errors": errors,
        "pass_rate": round(passed / total * 100, 2) if total > 0 else 0,
    }
