"""
감사 리포트 모듈 패키지
=======================
AuditReport 결과를 HTML / CSV 파일로 출력합니다.
"""

from .html_reporter import HTMLReporter
from .csv_reporter import CSVReporter

__all__ = ["HTMLReporter", "CSVReporter"]
