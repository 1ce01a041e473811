"""
개인정보 스캐너 (PII Scanner)
==============================
레코드의 각 필드 값을 PII 패턴과 대조하여 개인정보 후보를 검출합니다.

카테고리:
  - email: local@domain.tld 형태
  - phone: + 접두사 선택, 숫자/구분자 7자 이상 연속
  - ssn: ###-##-#### 형태
  - creditCard: 4-4-4-4 그룹 (공백/하이픈 선택) 또는 15~16자리 연속 숫자
  - ipAddress: 점으로 구분된 1~3자리 숫자 4개 (범위 검증 없음)

패턴은 형식 검증이 아닌 "검토 대상 후보" 검출용이므로 의도적으로 느슨합니다.
하나의 필드가 여러 카테고리에 동시에 매칭될 수 있습니다.
"""

import re
from dataclasses import dataclass
from enum import Enum

# 리포트/로그에 원본 전체가 노출되지 않도록 미리보기는 앞 20자로 제한
PREVIEW_LENGTH = 20


class PiiCategory(Enum):
    """PII 카테고리 (고정 패턴 테이블)"""
    EMAIL = ("email", r"[^\s@]+@[^\s@]+\.[^\s@]+", "Email Address", "high")
    PHONE = ("phone", r"\+?[\d\s\-()]{7,}", "Phone Number", "medium")
    SSN = ("ssn", r"\d{3}-\d{2}-\d{4}", "Social Security Number", "critical")
    CREDIT_CARD = (
        "creditCard",
        r"\d{4}[\s\-]?\d{4}[\s\-]?\d{4}[\s\-]?\d{4}|\d{15,16}",
        "Credit Card Number",
        "critical",
    )
    IP_ADDRESS = ("ipAddress", r"\b(?:\d{1,3}\.){3}\d{1,3}\b", "IP Address", "low")

    def __new__(cls, key, pattern, label, risk):
        member = object.__new__(cls)
        member._value_ = key
        member.pattern = re.compile(pattern)
        member.label = label
        member.risk = risk
        return member

    @classmethod
    def resolve(cls, categories) -> list:
        """
        요청된 카테고리 이름을 PiiCategory 목록으로 변환합니다.
        알 수 없는 이름은 무시하며, 결과는 열거 순서를 따릅니다.
        """
        requested = {c.value if isinstance(c, cls) else c for c in categories}
        return [member for member in cls if member.value in requested]

    def matches(self, value: str) -> bool:
        return self.pattern.search(value) is not None


@dataclass(frozen=True)
class PiiFinding:
    """
    PII 검출 결과

    Attributes:
        category: 매칭된 카테고리
        field_name: 필드명
        matched_value_preview: 필드 값 앞 20자
    """
    category: PiiCategory
    field_name: str
    matched_value_preview: str

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "label": self.category.label,
            "risk": self.category.risk,
            "field_name": self.field_name,
            "preview": self.matched_value_preview,
        }


def scan_record_for_pii(record: dict, categories) -> list[PiiFinding]:
    """
    단일 레코드에서 PII 후보를 검출합니다.

    Args:
        record: 필드명 → 값 매핑
        categories: 검사할 카테고리 이름 (또는 PiiCategory) 집합

    Returns:
        PiiFinding 리스트 (필드 순서 → 카테고리 순서)
    """
    targets = PiiCategory.resolve(categories)
    findings = []

    for field_name, value in record.items():
        # 문자열이 아니거나 비어있는 값은 건너뜀
        if not value or not isinstance(value, str):
            continue
        for category in targets:
            if category.matches(value):
                findings.append(
                    PiiFinding(
                        category=category,
                        field_name=field_name,
                        matched_value_preview=value[:PREVIEW_LENGTH],
                    )
                )

    return findings
