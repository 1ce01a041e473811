"""
감사 체커 / 오케스트레이터 단위 테스트
======================================
메모리 데이터셋으로 체커 로직을 테스트하고,
SQLite 인메모리 DB로 MySQL 없이 CLI 파이프라인을 테스트합니다.

실행:
  pytest tests/test_checkers.py -v
"""

import csv
import sqlite3
import pytest
import yaml
from unittest.mock import patch

# 프로젝트 모듈
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data_audit.audit import AuditOrchestrator, AuditReport, parse_checks
from data_audit.checker.base_checker import CheckResult, CheckStatus
from data_audit.config_loader import ConfigLoader
from data_audit.exceptions import ConfigurationError

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def log_uniform_amounts(count: int) -> list[float]:
    """벤포드 분포를 따르는 금액 (1 ~ 100,000)"""
    return [round(10 ** ((i + 0.5) / count * 5), 2) for i in range(count)]


# ============================================
# Fixture: 메모리 데이터셋
# ============================================

@pytest.fixture
def dataset():
    natural = [{"amount": amount} for amount in log_uniform_amounts(1000)]
    # NULL / 비숫자 / 0은 분석에서 제외
    natural += [{"amount": None}, {"amount": "N/A"}, {"amount": 0}]

    return {
        "natural_amounts": natural,
        "fabricated_amounts": [{"amount": str(((i % 9) + 1) * 100)} for i in range(900)],
        "small_amounts": [{"amount": v} for v in (120, 340, 56)],
        "transactions": [{"amount": v} for v in (10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 1000)],
        "constant_amounts": [{"amount": 50} for _ in range(12)],
        "customers": [
            {"name": "김민준", "email": "kim@test.com", "phone": "010-1234-5678", "note": None},
            {"name": "이서윤", "email": None, "phone": "", "note": "VIP"},
            {"name": "박도윤", "email": "park(at)test", "phone": "010-****-5678",
             "note": "카드 4111-1111-1111-1111"},
        ],
        "clean_logs": [{"memo": "hello"}, {"memo": None}],
    }


# ============================================
# 테스트: CheckResult
# ============================================

class TestCheckResult:
    """CheckResult 데이터 클래스 테스트"""

    def test_to_dict(self):
        result = CheckResult(
            rule_id="TEST-001",
            check_type="benford",
            description="테스트",
            table_name="test_table",
            status=CheckStatus.PASS,
            total_rows=100,
            violation_count=0,
        )
        d = result.to_dict()
        assert d["rule_id"] == "TEST-001"
        assert d["status"] == "PASS"
        assert d["violation_ratio"] == 0.0

    def test_fail_result(self):
        result = CheckResult(
            rule_id="TEST-002",
            check_type="outlier",
            description="실패 테스트",
            table_name="test_table",
            status=CheckStatus.FAIL,
            total_rows=100,
            violation_count=10,
            violation_ratio=0.1,
        )
        d = result.to_dict()
        assert d["status"] == "FAIL"
        assert d["violation_count"] == 10


class TestBaseChecker:
    """BaseChecker 인터페이스 테스트"""

    def test_single_check_must_be_implemented(self):
        from data_audit.checker.base_checker import BaseChecker

        class IncompleteChecker(BaseChecker):
            def run_checks(self):
                return self._run_all("incomplete")

        with pytest.raises(TypeError):
            IncompleteChecker({}, [])

    def test_as_list(self):
        from data_audit.checker.base_checker import BaseChecker

        assert BaseChecker._as_list(None) == []
        assert BaseChecker._as_list("email") == ["email"]
        assert BaseChecker._as_list(("a", "b")) == ["a", "b"]


# ============================================
# 테스트: BenfordChecker
# ============================================

class TestBenfordChecker:
    """벤포드 법칙 검증 테스트"""

    def _run(self, dataset, table, **overrides):
        from data_audit.checker.benford_checker import BenfordChecker

        rule = {
            "rule_id": "BEN-TEST",
            "description": "금액 벤포드 검증",
            "table": table,
            "column": "amount",
        }
        rule.update(overrides)
        return BenfordChecker(dataset, [rule]).run_checks()

    def test_natural_data_passes(self, dataset):
        results = self._run(dataset, "natural_amounts")
        assert len(results) == 1
        assert results[0].status == CheckStatus.PASS
        assert results[0].total_rows == 1000  # NULL, "N/A", 0 제외
        assert results[0].details["conforms_to_benford"] is True

    def test_fabricated_data_fails(self, dataset):
        results = self._run(dataset, "fabricated_amounts")
        assert results[0].status == CheckStatus.FAIL
        assert results[0].details["chi_square"] > 15.5

    def test_fabricated_data_medium_severity(self, dataset):
        details = self._run(dataset, "fabricated_amounts")[0].details
        assert 15 < details["deviation_percent"] <= 30
        assert details["severity"] == "medium"
        assert "amount" in details["message"]

    def test_extreme_deviation_high_severity(self):
        from data_audit.checker.benford_checker import BenfordChecker

        dataset = {"round_amounts": [{"amount": 555} for _ in range(200)]}
        rule = {"rule_id": "BEN-H", "description": "동일 금액 반복", "table": "round_amounts", "column": "amount"}
        result = BenfordChecker(dataset, [rule]).run_checks()[0]
        assert result.status == CheckStatus.FAIL
        assert result.details["severity"] == "high"

    def test_slight_deviation_warning(self, dataset):
        """카이제곱은 임계값을 넘지만 편차가 작으면 FAIL이 아닌 WARNING"""
        from data_audit.checker.benford_checker import BenfordChecker

        skewed = dataset["natural_amounts"] + [{"amount": 900 + i} for i in range(60)]
        rule = {"rule_id": "BEN-S", "description": "미세 이탈", "table": "skewed", "column": "amount"}
        result = BenfordChecker({"skewed": skewed}, [rule]).run_checks()[0]

        assert result.details["chi_square"] > 15.5
        assert result.details["deviation_percent"] <= 15
        assert result.status == CheckStatus.WARNING
        assert result.details["severity"] is None

    def test_deviation_bands_configurable(self, dataset):
        high = self._run(dataset, "fabricated_amounts", high_deviation_percent=20)[0]
        assert high.details["severity"] == "high"

        relaxed = self._run(dataset, "fabricated_amounts",
                            medium_deviation_percent=50, high_deviation_percent=60)[0]
        assert relaxed.status == CheckStatus.WARNING
        assert relaxed.details["severity"] is None

    def test_deviation_bands_from_settings(self, dataset):
        from data_audit.checker.benford_checker import BenfordChecker

        rule = {"rule_id": "BEN-T", "description": "설정 적용", "table": "fabricated_amounts", "column": "amount"}
        checker = BenfordChecker(dataset, [rule], {"medium_deviation_percent": 10, "high_deviation_percent": 25})
        assert checker.run_checks()[0].details["severity"] == "high"

    def test_violation_count_is_excess_records(self, dataset):
        """위반 건수 = 기대 건수를 초과한 첫 자리 버킷의 초과분 합계"""
        result = self._run(dataset, "fabricated_amounts")[0]
        assert result.violation_count == 242  # 900건 × 편차 26.87%
        assert result.violation_ratio == pytest.approx(0.2689, abs=1e-3)

        natural = self._run(dataset, "natural_amounts")[0]
        assert natural.violation_ratio < 0.02

    def test_small_sample_warning(self, dataset):
        results = self._run(dataset, "small_amounts")
        assert results[0].status == CheckStatus.WARNING
        assert results[0].total_rows == 3

    def test_rule_threshold_override(self, dataset):
        results = self._run(dataset, "fabricated_amounts", chi_square_threshold=1e9)
        assert results[0].status == CheckStatus.PASS

    def test_settings_min_sample_size(self, dataset):
        from data_audit.checker.benford_checker import BenfordChecker

        rule = {"rule_id": "BEN-TEST", "description": "설정 적용", "table": "small_amounts", "column": "amount"}
        checker = BenfordChecker(dataset, [rule], {"min_sample_size": 2, "chi_square_threshold": 1e9})
        results = checker.run_checks()
        assert results[0].status == CheckStatus.PASS

    def test_missing_table_error(self, dataset):
        results = self._run(dataset, "no_such_table")
        assert results[0].status == CheckStatus.ERROR
        assert "no_such_table" in results[0].details["error"]


# ============================================
# 테스트: OutlierChecker
# ============================================

class TestOutlierChecker:
    """이상치 검증 테스트"""

    def _rule(self, table="transactions", **overrides):
        rule = {
            "rule_id": "OUT-TEST",
            "description": "금액 이상치 검증",
            "table": table,
            "column": "amount",
            "method": "iqr",
        }
        rule.update(overrides)
        return rule

    def test_iqr_outlier_fails(self, dataset):
        from data_audit.checker.outlier_checker import OutlierChecker

        results = OutlierChecker(dataset, [self._rule()]).run_checks()
        assert results[0].status == CheckStatus.FAIL  # 1/11 > 5%
        assert results[0].violation_count == 1
        assert results[0].details["outlier_samples"] == [{"row_number": 11, "value": 1000}]
        assert results[0].details["q1"] == 12
        assert results[0].details["q3"] == 18

    def test_outlier_ratio_warning(self, dataset):
        from data_audit.checker.outlier_checker import OutlierChecker

        results = OutlierChecker(dataset, [self._rule(max_outlier_ratio=0.1)]).run_checks()
        assert results[0].status == CheckStatus.WARNING

    def test_zscore_method(self, dataset):
        from data_audit.checker.outlier_checker import OutlierChecker

        results = OutlierChecker(dataset, [self._rule(method="zscore")]).run_checks()
        assert results[0].violation_count == 1
        assert results[0].details["method"] == "zscore"
        assert results[0].details["threshold"] == 3

    def test_constant_column_passes(self, dataset):
        from data_audit.checker.outlier_checker import OutlierChecker

        results = OutlierChecker(dataset, [self._rule(table="constant_amounts")]).run_checks()
        assert results[0].status == CheckStatus.PASS
        assert results[0].violation_count == 0

    def test_max_samples_caps_outlier_rows(self):
        from data_audit.checker.outlier_checker import OutlierChecker

        amounts = [10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 1000, 1000, 2000]
        dataset = {"spikes": [{"amount": v} for v in amounts]}

        capped = OutlierChecker(dataset, [self._rule(table="spikes", max_samples=2)]).run_checks()[0]
        assert capped.violation_count == 3
        assert capped.details["outlier_samples"] == [
            {"row_number": 11, "value": 1000},
            {"row_number": 12, "value": 1000},
        ]

        from_settings = OutlierChecker(dataset, [self._rule(table="spikes")], {"max_samples": 1}).run_checks()[0]
        assert len(from_settings.details["outlier_samples"]) == 1

    def test_insufficient_data_warning(self, dataset):
        from data_audit.checker.outlier_checker import OutlierChecker

        results = OutlierChecker(dataset, [self._rule(table="small_amounts")]).run_checks()
        assert results[0].status == CheckStatus.WARNING

    def test_unknown_method_error(self, dataset):
        from data_audit.checker.outlier_checker import OutlierChecker

        results = OutlierChecker(dataset, [self._rule(method="lof")]).run_checks()
        assert results[0].status == CheckStatus.ERROR

    def test_error_does_not_stop_other_rules(self, dataset):
        from data_audit.checker.outlier_checker import OutlierChecker

        rules = [self._rule(table="missing"), self._rule()]
        results = OutlierChecker(dataset, rules).run_checks()
        assert [r.status for r in results] == [CheckStatus.ERROR, CheckStatus.FAIL]


# ============================================
# 테스트: PiiChecker
# ============================================

class TestPiiChecker:
    """개인정보 노출 검증 테스트"""

    def _rule(self, table="customers", **overrides):
        rule = {
            "rule_id": "PII-TEST",
            "description": "고객 개인정보 노출 검사",
            "table": table,
            "categories": ["email", "phone", "ssn", "creditCard"],
        }
        rule.update(overrides)
        return rule

    def test_pii_detected(self, dataset):
        from data_audit.checker.pii_checker import PiiChecker

        results = PiiChecker(dataset, [self._rule()]).run_checks()
        result = results[0]
        assert result.status == CheckStatus.FAIL
        assert result.total_rows == 3
        assert result.violation_count == 2  # 1행, 3행
        assert result.details["summary"] == {"email": 1, "phone": 2, "ssn": 0, "creditCard": 1}
        assert result.details["total_findings"] == 4
        assert result.details["has_high_risk_pii"] is True

    def test_findings_carry_row_and_preview(self, dataset):
        from data_audit.checker.pii_checker import PiiChecker

        findings = PiiChecker(dataset, [self._rule()]).run_checks()[0].details["findings"]
        card = [f for f in findings if f["category"] == "creditCard"][0]
        assert card["row_number"] == 3
        assert card["field_name"] == "note"
        assert card["preview"] == "카드 4111-1111-1111-1111"[:20]

    def test_column_restriction(self, dataset):
        from data_audit.checker.pii_checker import PiiChecker

        results = PiiChecker(dataset, [self._rule(columns=["email"])]).run_checks()
        assert results[0].violation_count == 1
        assert results[0].column_name == "email"

    def test_max_findings(self, dataset):
        from data_audit.checker.pii_checker import PiiChecker

        results = PiiChecker(dataset, [self._rule(max_findings=1)]).run_checks()
        assert len(results[0].details["findings"]) == 1
        assert results[0].details["total_findings"] == 4

    def test_clean_table_passes(self, dataset):
        from data_audit.checker.pii_checker import PiiChecker

        results = PiiChecker(dataset, [self._rule(table="clean_logs")]).run_checks()
        assert results[0].status == CheckStatus.PASS
        assert results[0].violation_count == 0

    def test_single_category_string(self):
        """categories: email 처럼 문자열 하나로 지정해도 해당 카테고리로 검사"""
        from data_audit.checker.pii_checker import PiiChecker

        dataset = {"customers": [{"email": "user@example.com"}]}
        result = PiiChecker(dataset, [self._rule(categories="email")]).run_checks()[0]
        assert result.status == CheckStatus.FAIL
        assert result.details["summary"] == {"email": 1}

    def test_single_column_string(self):
        from data_audit.checker.pii_checker import PiiChecker

        dataset = {"customers": [{"email": "user@example.com", "memo": "010-1234-5678"}]}
        result = PiiChecker(dataset, [self._rule(columns="email")]).run_checks()[0]
        assert result.status == CheckStatus.FAIL
        assert result.column_name == "email"
        assert result.details["summary"]["phone"] == 0


# ============================================
# 테스트: AuditOrchestrator
# ============================================

class TestAuditOrchestrator:
    """감사 오케스트레이터 테스트"""

    @pytest.fixture
    def rules(self):
        return {
            "benford": [{"rule_id": "BEN-1", "description": "벤포드", "table": "natural_amounts", "column": "amount"}],
            "outlier": [{"rule_id": "OUT-1", "description": "이상치", "table": "transactions",
                         "column": "amount", "method": "iqr"}],
            "pii": [{"rule_id": "PII-1", "description": "PII", "table": "customers",
                     "categories": ["email"]}],
        }

    def test_run_all(self, dataset, rules):
        report = AuditOrchestrator(dataset, rules).run()
        assert [r.check_type for r in report.results] == ["benford", "outlier", "pii"]
        assert report.summary == {
            "total_checks": 3,
            "passed": 1,
            "failed": 2,
            "warnings": 0,
            "errors": 0,
            "pass_rate": 33.33,
        }

    def test_run_subset(self, dataset, rules):
        report = AuditOrchestrator(dataset, rules).run("pii,benford")
        assert [r.check_type for r in report.results] == ["benford", "pii"]

    def test_settings_forwarded(self, dataset, rules):
        settings = {"outlier": {"max_outlier_ratio": 0.5}}
        report = AuditOrchestrator(dataset, rules, settings).run("outlier")
        assert report.results[0].status == CheckStatus.WARNING

    def test_missing_rule_type(self, dataset):
        report = AuditOrchestrator(dataset, {}).run()
        assert report.results == []
        assert report.summary["pass_rate"] == 0

    def test_parse_checks(self):
        assert parse_checks("all") == ["benford", "outlier", "pii"]
        assert parse_checks(" pii , outlier ") == ["pii", "outlier"]
        with pytest.raises(ValueError):
            parse_checks("benford,count")

    def test_report_to_dict(self, dataset, rules):
        d = AuditOrchestrator(dataset, rules).run("benford").to_dict()
        assert d["results"][0]["status"] == "PASS"
        assert d["summary"]["total_checks"] == 1


# ============================================
# 테스트: ConfigLoader
# ============================================

class TestConfigLoader:
    """설정 로더 테스트"""

    def test_load_db_config(self):
        loader = ConfigLoader(BASE_DIR)
        config = loader.load_db_config("development")
        assert config["host"] == "localhost"
        assert config["port"] == 3306
        assert config["database"] == "data_audit"

    def test_unknown_env(self):
        with pytest.raises(KeyError):
            ConfigLoader(BASE_DIR).load_db_config("staging")

    def test_production_env_substitution(self, monkeypatch):
        monkeypatch.setenv("AUDIT_DB_HOST", "db.internal")
        monkeypatch.setenv("AUDIT_DB_PORT", "3307")
        monkeypatch.setenv("AUDIT_DB_USER", "auditor")
        monkeypatch.setenv("AUDIT_DB_PASSWORD", "secret")
        monkeypatch.setenv("AUDIT_DB_NAME", "audit_prod")
        config = ConfigLoader(BASE_DIR).load_db_config("production")
        assert config["host"] == "db.internal"
        assert config["port"] == 3307

    def test_production_env_missing(self, monkeypatch):
        monkeypatch.delenv("AUDIT_DB_HOST", raising=False)
        with pytest.raises(EnvironmentError):
            ConfigLoader(BASE_DIR).load_db_config("production")

    def test_production_port_default(self, monkeypatch):
        for name in ("AUDIT_DB_HOST", "AUDIT_DB_USER", "AUDIT_DB_PASSWORD", "AUDIT_DB_NAME"):
            monkeypatch.setenv(name, "x")
        monkeypatch.delenv("AUDIT_DB_PORT", raising=False)
        assert ConfigLoader(BASE_DIR).load_db_config("production")["port"] == 3306

    def test_expand_env(self, monkeypatch):
        from data_audit.config_loader import expand_env

        monkeypatch.setenv("AUDIT_SCHEMA", "audit")
        monkeypatch.delenv("AUDIT_MISSING", raising=False)
        assert expand_env("${AUDIT_SCHEMA}_db") == "audit_db"
        assert expand_env("${AUDIT_MISSING:-fallback}") == "fallback"
        assert expand_env("plain") == "plain"
        with pytest.raises(EnvironmentError):
            expand_env("${AUDIT_MISSING}")

    def _write_rules(self, tmp_path, rule_type, rules):
        rules_dir = tmp_path / "config" / "rules"
        rules_dir.mkdir(parents=True)
        (rules_dir / f"{rule_type}_rules.yml").write_text(
            yaml.safe_dump({f"{rule_type}_rules": rules}), encoding="utf-8"
        )
        return ConfigLoader(str(tmp_path))

    def test_rule_missing_required_key(self, tmp_path):
        loader = self._write_rules(tmp_path, "benford", [{"rule_id": "BEN-X", "table": "t"}])
        with pytest.raises(ConfigurationError, match="column"):
            loader.load_rules("benford")

    def test_duplicate_rule_id(self, tmp_path):
        rule = {"rule_id": "PII-X", "table": "t"}
        loader = self._write_rules(tmp_path, "pii", [rule, dict(rule)])
        with pytest.raises(ConfigurationError, match="PII-X"):
            loader.load_rules("pii")

    def test_load_rules(self):
        loader = ConfigLoader(BASE_DIR)
        rules = loader.load_rules("benford")
        assert len(rules) > 0
        assert all("rule_id" in r for r in rules)

    def test_disabled_rules_filtered(self):
        rules = ConfigLoader(BASE_DIR).load_rules("outlier")
        assert "OUT-003" not in [r["rule_id"] for r in rules]

    def test_load_all_rules(self):
        all_rules = ConfigLoader(BASE_DIR).load_all_rules()
        assert set(all_rules) == {"benford", "outlier", "pii"}

    def test_load_audit_settings(self):
        settings = ConfigLoader(BASE_DIR).load_audit_settings()
        assert settings["benford"]["chi_square_threshold"] == 15.5
        assert settings["outlier"]["iqr_multiplier"] == 1.5
        assert settings["outlier"]["zscore_threshold"] == 3

    def test_settings_defaults_without_file(self, tmp_path):
        settings = ConfigLoader(str(tmp_path)).load_audit_settings()
        assert settings["benford"]["min_sample_size"] == 100
        assert settings["pii"]["max_findings"] == 100

    def _write_settings(self, tmp_path, data):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "audit_settings.yml").write_text(yaml.safe_dump(data), encoding="utf-8")
        return ConfigLoader(str(tmp_path))

    def test_settings_clamped_to_limits(self, tmp_path):
        loader = self._write_settings(tmp_path, {"outlier": {"zscore_threshold": 50}})
        settings = loader.load_audit_settings()
        assert settings["outlier"]["zscore_threshold"] == 10
        assert settings["outlier"]["iqr_multiplier"] == 1.5

    def test_inverted_limits_rejected(self, tmp_path):
        loader = self._write_settings(tmp_path, {"limits": {"iqr_multiplier": [10, 0.5]}})
        with pytest.raises(ConfigurationError):
            loader.load_audit_settings()

    def test_non_numeric_setting_rejected(self, tmp_path):
        loader = self._write_settings(tmp_path, {"benford": {"chi_square_threshold": "high"}})
        with pytest.raises(ConfigurationError):
            loader.load_audit_settings()

    def test_deviation_band_defaults(self):
        settings = ConfigLoader(BASE_DIR).load_audit_settings()
        assert settings["benford"]["medium_deviation_percent"] == 15
        assert settings["benford"]["high_deviation_percent"] == 30
        assert settings["outlier"]["max_samples"] == 100

    def test_inverted_deviation_bands_rejected(self, tmp_path):
        loader = self._write_settings(
            tmp_path, {"benford": {"medium_deviation_percent": 40, "high_deviation_percent": 30}}
        )
        with pytest.raises(ConfigurationError):
            loader.load_audit_settings()

    def test_categories_string_rejected(self, tmp_path):
        rule = {"rule_id": "PII-S", "table": "customers", "categories": "email"}
        loader = self._write_rules(tmp_path, "pii", [rule])
        with pytest.raises(ConfigurationError, match="categories"):
            loader.load_rules("pii")

    def test_columns_must_be_strings(self, tmp_path):
        rule = {"rule_id": "PII-C", "table": "customers", "columns": ["memo", 3]}
        loader = self._write_rules(tmp_path, "pii", [rule])
        with pytest.raises(ConfigurationError, match="columns"):
            loader.load_rules("pii")

    def test_list_rule_keys_accepted(self, tmp_path):
        rule = {"rule_id": "PII-L", "table": "customers", "columns": ["memo"], "categories": ["email"]}
        loader = self._write_rules(tmp_path, "pii", [rule])
        assert loader.load_rules("pii") == [rule]


# ============================================
# 테스트: Reporter
# ============================================

class TestReporter:
    """리포트 생성 테스트"""

    def _results(self):
        return [
            CheckResult(
                rule_id="RPT-001", check_type="benford",
                description="벤포드 테스트", table_name="test",
                status=CheckStatus.PASS, total_rows=100,
            ),
            CheckResult(
                rule_id="RPT-002", check_type="pii",
                description="<script>alert(1)</script>", table_name="test",
                status=CheckStatus.FAIL, total_rows=100,
                violation_count=5, violation_ratio=0.05,
                details={"findings": [{"preview": "<b>user@example.com"}]},
            ),
        ]

    def test_html_report(self, tmp_path):
        from data_audit.reporter.html_reporter import HTMLReporter

        filepath = HTMLReporter(str(tmp_path)).generate(self._results())

        assert os.path.exists(filepath)
        assert filepath.endswith(".html")

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()
        assert "PASS" in content
        assert "FAIL" in content
        assert "벤포드 법칙 검증" in content
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in content
        assert "<script>alert(1)</script>" not in content
        assert "<b>user@example.com" not in content

    def test_html_benford_digit_table(self, tmp_path, dataset):
        from data_audit.checker.benford_checker import BenfordChecker
        from data_audit.reporter.html_reporter import HTMLReporter

        rule = {"rule_id": "BEN-H", "description": "분포 표", "table": "fabricated_amounts", "column": "amount"}
        results = BenfordChecker(dataset, [rule]).run_checks()
        filepath = HTMLReporter(str(tmp_path)).generate(results)

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()
        assert "첫 자리 분포" in content
        assert "1: 11.1% / 30.1%" in content

    def test_html_summary_calculated(self, tmp_path):
        from data_audit.reporter.html_reporter import HTMLReporter

        summary = HTMLReporter._calculate_summary([r.to_dict() for r in self._results()])
        assert summary["passed"] == 1
        assert summary["failed"] == 1
        assert summary["pass_rate"] == 50.0

    def test_csv_report(self, tmp_path):
        from data_audit.reporter.csv_reporter import CSVReporter

        summary = {"total_checks": 2, "passed": 1, "failed": 1, "warnings": 0, "errors": 0, "pass_rate": 50.0}
        filepath = CSVReporter(str(tmp_path)).generate(self._results(), summary)

        assert os.path.exists(filepath)
        assert filepath.endswith(".csv")

        with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["rule_id"] == "RPT-001"
        assert rows[1]["status"] == "FAIL"
        assert rows[-1]["rule_id"] == "SUMMARY"
        assert rows[-1]["total_rows"] == "2"

    def test_csv_metric_columns(self, tmp_path):
        from data_audit.reporter.csv_reporter import CSVReporter

        results = [
            CheckResult(
                rule_id="BEN-1", check_type="benford", description="벤포드",
                table_name="t", status=CheckStatus.FAIL, total_rows=100,
                details={"chi_square": 42.5},
            ),
            CheckResult(
                rule_id="OUT-1", check_type="outlier", description="이상치",
                table_name="t", status=CheckStatus.WARNING, total_rows=100,
                violation_count=3, violation_ratio=0.03,
            ),
        ]
        filepath = CSVReporter(str(tmp_path)).generate(results)

        with open(filepath, "r", encoding="utf-8-sig", newline="") as f:
            rows = list(csv.DictReader(f))
        assert (rows[0]["metric_name"], rows[0]["metric_value"]) == ("chi_square", "42.5")
        assert (rows[1]["metric_name"], rows[1]["metric_value"]) == ("outlier_ratio", "0.03")


# ============================================
# 테스트: DBConnector (mysql-connector 풀 Mock)
# ============================================

class TestDBConnector:
    """MySQL 레코드 소스 테스트"""

    DB_CONFIG = {"host": "localhost", "port": 3306, "user": "u", "password": "p", "database": "d"}

    def _connector(self, pool):
        from data_audit.db_connector import DBConnector

        with patch("data_audit.db_connector.pooling.MySQLConnectionPool", return_value=pool):
            return DBConnector(self.DB_CONFIG)

    def _pool_with_rows(self, batches):
        from unittest.mock import MagicMock

        cursor = MagicMock()
        cursor.fetchmany.side_effect = batches
        conn = MagicMock()
        conn.cursor.return_value = cursor
        conn.in_transaction = True
        conn.is_connected.return_value = True
        pool = MagicMock()
        pool.get_connection.return_value = conn
        return pool, conn, cursor

    def test_fetch_table_batches(self):
        pool, conn, cursor = self._pool_with_rows([[{"id": 1}, {"id": 2}], [{"id": 3}], []])
        db = self._connector(pool)

        rows = db.fetch_table("card_transactions", limit=10)

        assert rows == [{"id": 1}, {"id": 2}, {"id": 3}]
        cursor.execute.assert_called_once_with("SELECT * FROM card_transactions LIMIT %s", (10,))
        conn.start_transaction.assert_called_once_with(consistent_snapshot=True, readonly=True)
        conn.rollback.assert_called_once()
        conn.close.assert_called_once()

    def test_fetch_dataset_single_snapshot(self):
        pool, conn, cursor = self._pool_with_rows([[{"a": 1}], [], [{"b": 2}], []])
        db = self._connector(pool)

        dataset = db.fetch_dataset(["t1", "t2"])

        assert dataset == {"t1": [{"a": 1}], "t2": [{"b": 2}]}
        assert pool.get_connection.call_count == 1

    def test_invalid_table_name(self):
        pool, _, _ = self._pool_with_rows([])
        db = self._connector(pool)
        with pytest.raises(ValueError):
            db.fetch_table("users; DROP TABLE users")

    def test_connection_retry_exhausted(self):
        from mysql.connector import Error as MySQLError
        from data_audit.db_connector import DBConnector

        with patch("data_audit.db_connector.pooling.MySQLConnectionPool",
                   side_effect=MySQLError("refused")) as pool_cls, \
                patch("data_audit.db_connector.time.sleep") as sleep:
            with pytest.raises(ConnectionError):
                DBConnector(self.DB_CONFIG, max_retries=3, retry_interval=0)
        assert pool_cls.call_count == 3
        assert sleep.call_count == 2

    def test_context_manager_releases_pool(self):
        pool, _, _ = self._pool_with_rows([])
        with self._connector(pool) as db:
            assert db.pool is pool
        assert db.pool is None


# ============================================
# 테스트: CLI 파이프라인 (SQLite Mock DB)
# ============================================

class MockDBConnector:
    """
    테스트용 Mock DB Connector
    SQLite 인메모리 DB로 MySQL 레코드 소스를 시뮬레이션합니다.
    """

    def __init__(self, db_config: dict = None):
        self.conn = sqlite3.connect(":memory:")
        self.conn.row_factory = sqlite3.Row
        self._init_tables()

    def _init_tables(self):
        cursor = self.conn.cursor()
        cursor.executescript("""
            CREATE TABLE card_transactions (
                transaction_id INTEGER PRIMARY KEY,
                transaction_amount REAL
            );

            CREATE TABLE customers (
                customer_id INTEGER PRIMARY KEY,
                email TEXT,
                phone_number TEXT
            );
        """)
        amounts = log_uniform_amounts(500) + [9999999]
        cursor.executemany(
            "INSERT INTO card_transactions (transaction_amount) VALUES (?)",
            [(a,) for a in amounts],
        )
        cursor.executemany(
            "INSERT INTO customers (email, phone_number) VALUES (?, ?)",
            [("kim@test.com", "010-1234-5678"), (None, "010-****-5678")],
        )
        self.conn.commit()

    def fetch_table(self, table: str, limit: int = None) -> list[dict]:
        query = f"SELECT * FROM {table}"
        if limit:
            query += f" LIMIT {int(limit)}"
        return [dict(row) for row in self.conn.execute(query).fetchall()]

    def fetch_dataset(self, tables, limit: int = None) -> dict:
        return {table: self.fetch_table(table, limit) for table in tables}

    def close(self):
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


@pytest.fixture
def project_dir(tmp_path):
    """CLI 테스트용 설정 디렉토리"""
    rules_dir = tmp_path / "config" / "rules"
    rules_dir.mkdir(parents=True)

    def dump(path, data):
        path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")

    dump(tmp_path / "config" / "db_config.yml", {
        "development": {"host": "localhost", "port": 3306, "user": "u", "password": "p", "database": "d"},
    })
    dump(rules_dir / "benford_rules.yml", {"benford_rules": [
        {"rule_id": "BEN-001", "description": "거래 금액 벤포드", "table": "card_transactions",
         "column": "transaction_amount"},
    ]})
    dump(rules_dir / "outlier_rules.yml", {"outlier_rules": [
        {"rule_id": "OUT-001", "description": "거래 금액 이상치", "table": "card_transactions",
         "column": "transaction_amount", "method": "zscore"},
    ]})
    dump(rules_dir / "pii_rules.yml", {"pii_rules": [
        {"rule_id": "PII-001", "description": "고객 PII", "table": "customers",
         "categories": ["email", "phone"]},
    ]})
    return tmp_path


class TestMainPipeline:
    """CLI 파이프라인 테스트"""

    def test_run_audit(self, project_dir):
        from data_audit.main import run_audit

        report = run_audit(config_dir=str(project_dir), report_type="all", db_factory=MockDBConnector)

        statuses = {r.rule_id: r.status for r in report.results}
        assert statuses["BEN-001"] == CheckStatus.PASS
        assert statuses["OUT-001"] == CheckStatus.WARNING  # 1/501 ≤ 5%
        assert statuses["PII-001"] == CheckStatus.FAIL
        assert len(os.listdir(project_dir / "reports")) == 2

    def test_run_audit_subset_without_reports(self, project_dir):
        from data_audit.main import run_audit

        report = run_audit(config_dir=str(project_dir), checks="pii", report_type="none",
                           db_factory=MockDBConnector)
        assert [r.check_type for r in report.results] == ["pii"]
        assert os.listdir(project_dir / "reports") == []

    def test_run_audit_unknown_check(self, project_dir):
        from data_audit.main import run_audit

        with pytest.raises(ConfigurationError):
            run_audit(config_dir=str(project_dir), checks="count", db_factory=MockDBConnector)

    def test_collect_tables(self):
        from data_audit.main import collect_tables

        all_rules = {
            "benford": [{"table": "a"}, {"table": "b"}],
            "pii": [{"table": "a"}, {"table": "c"}],
        }
        assert collect_tables(all_rules, ["benford", "pii"]) == ["a", "b", "c"]
        assert collect_tables(all_rules, ["pii"]) == ["a", "c"]

    def test_main_exit_code_on_fail(self, tmp_path, monkeypatch):
        from data_audit import main as main_module

        monkeypatch.chdir(tmp_path)
        report = AuditReport(summary={"failed": 1})
        with patch.object(main_module, "run_audit", return_value=report):
            with pytest.raises(SystemExit) as exc_info:
                main_module.main(["--report", "none"])
        assert exc_info.value.code == 1

    def test_main_exit_code_on_connection_error(self, tmp_path, monkeypatch):
        from data_audit import main as main_module

        monkeypatch.chdir(tmp_path)
        with patch.object(main_module, "run_audit", side_effect=ConnectionError("refused")):
            with pytest.raises(SystemExit) as exc_info:
                main_module.main([])
        assert exc_info.value.code == 2

    def test_main_exit_code_on_config_error(self, tmp_path, monkeypatch):
        from data_audit import main as main_module

        monkeypatch.chdir(tmp_path)
        with patch.object(main_module, "run_audit", side_effect=ConfigurationError("bad")):
            with pytest.raises(SystemExit) as exc_info:
                main_module.main([])
        assert exc_info.value.code == 3

    def test_main_success(self, tmp_path, monkeypatch):
        from data_audit import main as main_module

        monkeypatch.chdir(tmp_path)
        report = AuditReport(summary={"failed": 0})
        with patch.object(main_module, "run_audit", return_value=report):
            main_module.main([])


# ============================================
# 실행
# ============================================

if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
