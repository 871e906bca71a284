import yaml
import pytest

from pathlib import Path

from queuealarms.config import ReconcilerConfig, load_config
from queuealarms.exceptions import ConfigurationError
from queuealarms.naming import NamingConvention


def make_minimal_config_dict() -> dict:
    return {
        "aws_region": "us-west-2",
        "alarm": {"threshold": 12, "period_seconds": 300},
        "notification_target": "arn:aws:sns:us-west-2:123:alerts",
        "naming_convention": "suffix",
    }


def test_defaults():
    cfg = ReconcilerConfig()

    assert cfg.aws_region == "us-east-1"
    assert cfg.alarm.threshold == 5
    assert cfg.alarm.period_seconds == 60
    assert cfg.notification_target is None
    assert cfg.naming_convention is None
    assert cfg.plan_path == Path("plan.txt")


def test_convention_for_falls_back_to_mode_default():
    assert ReconcilerConfig().convention_for(NamingConvention.PREFIX) is NamingConvention.PREFIX
    cfg = ReconcilerConfig(naming_convention="suffix")
    assert cfg.convention_for(NamingConvention.PREFIX) is NamingConvention.SUFFIX


def test_load_config_from_yaml(tmp_path: Path):
    cfg_dict = make_minimal_config_dict()
    p = tmp_path / "staging.yml"
    p.write_text(yaml.safe_dump(cfg_dict))

    cfg = load_config("staging", config_path=p)

    assert cfg.environment == "staging"
    assert cfg.aws_region == "us-west-2"
    assert cfg.alarm.threshold == 12
    assert cfg.naming_convention is NamingConvention.SUFFIX


def test_load_config_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config("dev", config_path=tmp_path / "missing.yml")


def test_bundled_environment_configs_load():
    for env in ("dev", "staging", "prod"):
        cfg = load_config(env)
        assert cfg.environment == env
        assert cfg.alarm.threshold > 0


def test_from_yaml_infers_environment(tmp_path: Path):
    p = tmp_path / "prod.yml"
    p.write_text(yaml.safe_dump(make_minimal_config_dict()))

    cfg = ReconcilerConfig.from_yaml(p)

    assert cfg.environment == "prod"


def test_from_env_respects_env_vars(monkeypatch):
    monkeypatch.setenv("AWS_REGION", "eu-west-1")
    monkeypatch.setenv("ALARM_THRESHOLD", "8")
    monkeypatch.setenv("ALARM_PERIOD", "120")
    monkeypatch.setenv("SNS_TOPIC_ARN", "arn:aws:sns:eu-west-1:123:alerts")
    monkeypatch.setenv("ALARM_NAMING_CONVENTION", "prefix")
    monkeypatch.setenv("PLAN_PATH", "/tmp/out-plan.txt")

    cfg = ReconcilerConfig.from_env()

    assert cfg.aws_region == "eu-west-1"
    assert cfg.alarm.threshold == 8
    assert cfg.alarm.period_seconds == 120
    assert cfg.notification_target == "arn:aws:sns:eu-west-1:123:alerts"
    assert cfg.naming_convention is NamingConvention.PREFIX
    assert cfg.plan_path == Path("/tmp/out-plan.txt")


def test_empty_topic_env_means_no_target(monkeypatch):
    monkeypatch.setenv("SNS_TOPIC_ARN", "")
    assert ReconcilerConfig.from_env().notification_target is None


@pytest.mark.parametrize(
    "var,value",
    [
        ("ALARM_THRESHOLD", "0"),
        ("ALARM_THRESHOLD", "lots"),
        ("ALARM_PERIOD", "-60"),
        ("ALARM_NAMING_CONVENTION", "infix"),
        ("ENVIRONMENT", "qa"),
        ("LOG_LEVEL", "chatty"),
    ],
)
def test_invalid_env_values_raise_configuration_error(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(ConfigurationError) as exc_info:
        ReconcilerConfig.from_env()
    assert exc_info.value.config_key


def test_log_level_normalized():
    assert ReconcilerConfig(log_level="debug").log_level == "DEBUG"
