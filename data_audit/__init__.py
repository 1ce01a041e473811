"""
Data Audit Toolkit
==================
데이터 품질 / 부정 신호 감사 프레임워크

분석 유형:
  - 벤포드 법칙 적합도 (Benford)
  - 통계적 이상치 (IQR / Z-score)
  - 개인정보 노출 (PII)
"""

__version__ = "1.0.0"
__author__ = "jiminnote"
