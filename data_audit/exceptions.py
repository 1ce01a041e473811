"""
감사 프레임워크 예외 정의
"""


class AuditError(Exception):
    """모든 감사 관련 예외의 기본 클래스"""


class ConfigurationError(AuditError, ValueError):
    """설정 값이 잘못된 경우 (데이터 오류와 구분)"""
