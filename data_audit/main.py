"""
통합 실행 엔트리포인트 (main.py)
=================================
DB에서 감사 대상 테이블을 적재한 뒤 전체 감사 파이프라인을 실행합니다.

실행 방법:
  python -m data_audit.main                          # 기본 (development 환경)
  python -m data_audit.main --env docker             # Docker 환경
  python -m data_audit.main --checks benford,pii     # 특정 검증만 실행
  python -m data_audit.main --report html            # HTML 리포트만 생성
  python -m data_audit.main --limit 50000            # 테이블당 최대 적재 건수
"""

import argparse
import logging
import sys

from .audit import AuditOrchestrator, AuditReport, parse_checks
from .config_loader import ConfigLoader
from .db_connector import DBConnector
from .exceptions import ConfigurationError
from .reporter import HTMLReporter, CSVReporter

logger = logging.getLogger(__name__)


def setup_logging(log_file: str = "audit.log"):
    """콘솔 + 파일 로깅을 설정합니다."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def parse_args(argv=None):
    """커맨드라인 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="Data Audit Toolkit - 벤포드 / 이상치 / 개인정보 감사 실행"
    )
    parser.add_argument(
        "--env",
        type=str,
        default="development",
        choices=["development", "docker", "production"],
        help="DB 접속 환경 (기본: development)",
    )
    parser.add_argument(
        "--checks",
        type=str,
        default="all",
        help="실행할 검증 유형 (콤마 구분). 예: benford,outlier,pii",
    )
    parser.add_argument(
        "--report",
        type=str,
        default="all",
        choices=["all", "html", "csv", "none"],
        help="생성할 리포트 유형 (기본: all)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="테이블당 최대 적재 건수 (기본: 전체)",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default=None,
        help="설정 디렉토리 경로 (기본: 프로젝트 루트)",
    )
    return parser.parse_args(argv)


def collect_tables(all_rules: dict, check_list: list[str]) -> list[str]:
    """실행할 검증 유형의 규칙에서 대상 테이블을 중복 없이 수집합니다."""
    tables = []
    for check_type in check_list:
        for rule in all_rules.get(check_type, []):
            table = rule.get("table")
            if table and table not in tables:
                tables.append(table)
    return tables


def write_reports(report: AuditReport, report_type: str, report_dir: str) -> list[str]:
    """리포트 파일을 생성하고 경로 리스트를 반환합니다."""
    paths = []
    if report_type == "none":
        return paths

    logger.info("\n📄 리포트 생성 중...")
    if report_type in ("all", "html"):
        paths.append(HTMLReporter(report_dir).generate(report.results, report.summary))
    if report_type in ("all", "csv"):
        paths.append(CSVReporter(report_dir).generate(report.results, report.summary))
    return paths


def run_audit(env: str = "development", checks: str = "all", report_type: str = "all",
              config_dir: str = None, limit: int = None, db_factory=DBConnector) -> AuditReport:
    """
    전체 감사 파이프라인을 실행합니다.

    Args:
        env: DB 접속 환경
        checks: 실행할 검증 유형 (콤마 구분 또는 "all")
        report_type: 리포트 유형 ("all", "html", "csv", "none")
        config_dir: 설정 디렉토리 경로
        limit: 테이블당 최대 적재 건수
        db_factory: DB 커넥터 생성 함수 (db_config → 커넥터)

    Returns:
        AuditReport
    """
    logger.info("=" * 60)
    logger.info("🚀 Data Audit Toolkit - 감사 시작")
    logger.info("   환경: %s | 검증: %s | 리포트: %s", env, checks, report_type)
    logger.info("=" * 60)

    # 1. 설정 로딩
    logger.info("\n📂 설정 로딩 중...")
    config = ConfigLoader(config_dir)
    db_config = config.load_db_config(env)
    all_rules = config.load_all_rules()
    settings = config.load_audit_settings()
    report_dir = config.get_report_dir()

    try:
        check_list = parse_checks(checks)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    logger.info("   DB: %s:%s/%s", db_config["host"], db_config.get("port", 3306), db_config["database"])
    for rule_type, rules in all_rules.items():
        logger.info("   %s 규칙: %d개", rule_type, len(rules))

    # 2. 대상 테이블 적재
    logger.info("\n🔌 데이터베이스 연결 및 레코드 적재 중...")
    tables = collect_tables(all_rules, check_list)
    with db_factory(db_config) as db:
        dataset = db.fetch_dataset(tables, limit)

    # 3. 감사 실행
    report = AuditOrchestrator(dataset, all_rules, settings).run(",".join(check_list))

    # 4. 리포트 생성
    for path in write_reports(report, report_type, report_dir):
        logger.info("   %s", path)

    logger.info("")
    logger.info("✨ 감사 완료! (소요 시간: %s초)", report.elapsed)
    return report


def main(argv=None):
    """메인 함수"""
    args = parse_args(argv)
    setup_logging()

    try:
        report = run_audit(
            env=args.env,
            checks=args.checks,
            report_type=args.report,
            config_dir=args.config_dir,
            limit=args.limit,
        )
    except ConnectionError as e:
        logger.error("🔴 DB 연결 실패: %s", e)
        sys.exit(2)
    except (ConfigurationError, FileNotFoundError, KeyError, EnvironmentError) as e:
        logger.error("🔴 설정 오류: %s", e)
        sys.exit(3)
    except Exception as e:
        logger.error("🔴 예기치 않은 오류: %s", e, exc_info=True)
        sys.exit(4)

    # FAIL이 있으면 exit code 1
    if report.summary["failed"] > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
