"""
YAML 설정 로더
==============
  - config/db_config.yml: 환경별 DB 접속 정보 (${VAR}, ${VAR:-기본값} 환경변수 치환)
  - config/rules/{benford,outlier,pii}_rules.yml: 감사 규칙 (enabled 규칙만, 필수 항목 검사)
  - config/audit_settings.yml: 분석 임계값 (기본값 위에 덮어쓰기, limits 범위 제한)
"""

import copy
import logging
import os
import re
import yaml

from .exceptions import ConfigurationError
from .utils import clamp

logger = logging.getLogger(__name__)

RULE_TYPES = ["benford", "outlier", "pii"]

# 유형별 규칙 필수 항목
REQUIRED_RULE_KEYS = {
    "benford": ("rule_id", "table", "column"),
    "outlier": ("rule_id", "table", "column"),
    "pii": ("rule_id", "table"),
}

# 문자열 리스트여야 하는 규칙 항목 (e.g. categories: [email, phone])
LIST_RULE_KEYS = ("categories", "columns")

# audit_settings.yml 기본값
DEFAULT_SETTINGS = {
    "benford": {
        "chi_square_threshold": 15.5,
        "min_sample_size": 100,
        "medium_deviation_percent": 15,
        "high_deviation_percent": 30,
    },
    "outlier": {
        "iqr_multiplier": 1.5,
        "zscore_threshold": 3,
        "min_sample_size": 10,
        "max_outlier_ratio": 0.05,
        "max_samples": 100,
    },
    "pii": {
        "max_findings": 100,
    },
    "limits": {
        "zscore_threshold": [1, 10],
        "iqr_multiplier": [0.5, 10],
    },
}

_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def expand_env(value: str) -> str:
    """
    문자열의 ${VAR} / ${VAR:-기본값} 참조를 환경변수 값으로 치환합니다.

    Raises:
        EnvironmentError: 기본값 없이 참조한 환경변수가 설정되지 않은 경우
    """
    def _replace(match):
        name, default = match.group(1), match.group(2)
        env_value = os.environ.get(name, default)
        if env_value is None:
            raise EnvironmentError(f"환경변수 '{name}'가 설정되지 않았습니다.")
        return env_value

    return _ENV_REF.sub(_replace, value)


class ConfigLoader:
    """YAML 기반 설정 및 감사 규칙 로더"""

    def __init__(self, base_dir: str = None):
        """
        Args:
            base_dir: config/ 와 reports/ 가 위치한 디렉토리 (기본: 프로젝트 루트)
        """
        self.base_dir = base_dir or os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.config_dir = os.path.join(self.base_dir, "config")
        self.rules_dir = os.path.join(self.config_dir, "rules")

    def _load_yaml(self, filepath: str) -> dict:
        if not os.path.isfile(filepath):
            raise FileNotFoundError(f"설정 파일을 찾을 수 없습니다: {filepath}")

        with open(filepath, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def load_db_config(self, env: str = "development") -> dict:
        """
        환경별 DB 접속 정보를 로딩합니다.

        Raises:
            KeyError: db_config.yml에 env가 없는 경우
            EnvironmentError: 참조한 환경변수가 설정되지 않은 경우
        """
        environments = self._load_yaml(os.path.join(self.config_dir, "db_config.yml"))
        if env not in environments:
            raise KeyError(
                f"환경 '{env}'이 db_config.yml에 없습니다. (가능: {', '.join(environments)})"
            )

        db_config = {
            key: expand_env(value) if isinstance(value, str) else value
            for key, value in environments[env].items()
        }
        if "port" in db_config:
            db_config["port"] = int(db_config["port"])
        return db_config

    def load_rules(self, rule_type: str) -> list[dict]:
        """
        특정 유형의 감사 규칙을 로딩하고 enabled 규칙만 반환합니다.

        Raises:
            FileNotFoundError: 규칙 파일이 없는 경우
            KeyError: '<유형>_rules' 키가 없는 경우
            ConfigurationError: 필수 항목 누락, rule_id 중복
        """
        filename = f"{rule_type}_rules.yml"
        data = self._load_yaml(os.path.join(self.rules_dir, filename))

        rules_key = f"{rule_type}_rules"
        if rules_key not in data:
            raise KeyError(f"'{rules_key}' 키를 {filename}에서 찾을 수 없습니다.")

        rules = data[rules_key] or []
        self._validate_rules(filename, rules, REQUIRED_RULE_KEYS.get(rule_type, ("rule_id",)))
        return [r for r in rules if r.get("enabled", True)]

    @staticmethod
    def _validate_rules(filename: str, rules: list, required: tuple):
        seen = set()
        for index, rule in enumerate(rules, start=1):
            if not isinstance(rule, dict):
                raise ConfigurationError(f"{filename}: {index}번째 규칙이 매핑이 아닙니다.")
            missing = [key for key in required if not rule.get(key)]
            if missing:
                raise ConfigurationError(
                    f"{filename}: {rule.get('rule_id', f'{index}번째 규칙')} 필수 항목 누락 {missing}"
                )
            for key in LIST_RULE_KEYS:
                value = rule.get(key)
                if value is not None and (
                    not isinstance(value, list) or not all(isinstance(v, str) for v in value)
                ):
                    raise ConfigurationError(
                        f"{filename}: {rule['rule_id']} {key}는 문자열 리스트여야 합니다: {value!r}"
                    )
            if rule["rule_id"] in seen:
                raise ConfigurationError(f"{filename}: rule_id 중복 {rule['rule_id']}")
            seen.add(rule["rule_id"])

    def load_all_rules(self) -> dict[str, list[dict]]:
        """
        모든 유형의 감사 규칙을 로딩합니다. 파일이 없는 유형은 빈 리스트.

        Returns:
            {"benford": [...], "outlier": [...], "pii": [...]}
        """
        all_rules = {}
        for rule_type in RULE_TYPES:
            try:
                all_rules[rule_type] = self.load_rules(rule_type)
            except FileNotFoundError:
                logger.warning("⚠️  %s_rules.yml 파일이 없습니다. 건너뜁니다.", rule_type)
                all_rules[rule_type] = []
        return all_rules

    def load_audit_settings(self) -> dict:
        """
        분석 임계값 설정을 로딩합니다.

        audit_settings.yml이 없으면 기본값을 사용하며, 파일의 값은 기본값 위에
        유형별로 덮어씁니다. Z-score 임계값과 IQR 배수는 limits 범위로 제한됩니다.

        Raises:
            ConfigurationError: 설정 값이 숫자가 아니거나 limits 범위가 잘못된 경우
        """
        settings = copy.deepcopy(DEFAULT_SETTINGS)

        filepath = os.path.join(self.config_dir, "audit_settings.yml")
        if os.path.exists(filepath):
            for section, values in self._load_yaml(filepath).items():
                if not isinstance(values, dict):
                    raise ConfigurationError(f"'{section}' 설정은 매핑이어야 합니다.")
                settings.setdefault(section, {}).update(values)
        else:
            logger.info("audit_settings.yml 파일이 없습니다. 기본 설정을 사용합니다.")

        return self._validate_settings(settings)

    def _validate_settings(self, settings: dict) -> dict:
        """임계값 타입 검사 및 limits 범위 제한"""
        for section in ("benford", "outlier", "pii"):
            for key, value in settings[section].items():
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ConfigurationError(
                        f"{section}.{key} 값은 숫자여야 합니다: {value!r}"
                    )

        benford = settings["benford"]
        if benford["medium_deviation_percent"] > benford["high_deviation_percent"]:
            raise ConfigurationError(
                "benford.medium_deviation_percent는 high_deviation_percent 이하여야 합니다."
            )

        outlier = settings["outlier"]
        for key, bounds in settings["limits"].items():
            if key not in outlier:
                continue
            if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
                raise ConfigurationError(f"limits.{key}는 [min, max] 형식이어야 합니다.")
            clamped = clamp(outlier[key], bounds[0], bounds[1])
            if clamped != outlier[key]:
                logger.warning(
                    "⚠️  outlier.%s=%s 값이 허용 범위 %s를 벗어나 %s로 조정됩니다.",
                    key, outlier[key], bounds, clamped,
                )
                outlier[key] = clamped

        return settings

    def get_report_dir(self) -> str:
        """리포트 저장 디렉토리 경로를 반환합니다."""
        report_dir = os.path.join(self.base_dir, "reports")
        os.makedirs(report_dir, exist_ok=True)
        return report_dir
