"""Configuration loader unit tests."""

from pathlib import Path

import pytest

from payment_limits import ConfigurationError, RolloverPolicy, TransactionLimitErrorCodes
from payment_limits.loader import deep_merge, env_overrides, load


def test_load_minimal_config(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("app:\n  name: square-payment-backend\n")
    config = load(config_file, environ={})
    assert config.app.name == "square-payment-backend"
    assert config.limits.max_daily_transactions == 100


def test_load_empty_file_uses_defaults(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("")
    config = load(config_file, environ={})
    assert config.tracker.environment == "development"


def test_load_with_env_file(tmp_path: Path) -> None:
    base_file = tmp_path / "base.yaml"
    base_file.write_text(
        "limits:\n  max_daily_transactions: 50\n  max_hourly_transactions: 10\n"
    )
    env_file = tmp_path / "production.yaml"
    env_file.write_text(
        "tracker:\n  environment: production\nlimits:\n  max_hourly_transactions: 5\n"
    )
    config = load(base_file, env_file, environ={})
    assert config.limits.max_daily_transactions == 50
    assert config.limits.max_hourly_transactions == 5
    assert config.tracker.is_production is True


def test_load_env_file_missing(tmp_path: Path) -> None:
    base_file = tmp_path / "base.yaml"
    base_file.write_text("limits:\n  max_daily_transactions: 7\n")
    config = load(base_file, tmp_path / "nonexistent.yaml", environ={})
    assert config.limits.max_daily_transactions == 7


def test_environment_variables_override_file(tmp_path: Path) -> None:
    base_file = tmp_path / "base.yaml"
    base_file.write_text("limits:\n  max_hourly_transactions: 10\n")
    environ = {
        "PAYMENT_LIMITS_MAX_HOURLY_TRANSACTIONS": "3",
        "PAYMENT_LIMITS_ENFORCE_LIMITS": "false",
        "PAYMENT_LIMITS_ROLLOVER_POLICY": "clear_all",
        "PAYMENT_LIMITS_LOG_LEVEL": "",
    }
    config = load(base_file, environ=environ)
    assert config.limits.max_hourly_transactions == 3
    assert config.tracker.enforce_limits is False
    assert config.tracker.rollover_policy == RolloverPolicy.CLEAR_ALL
    assert config.log.level == "INFO"


def test_load_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        load(tmp_path / "missing.yaml", environ={})
    assert exc_info.value.code == TransactionLimitErrorCodes.READ_FILE


def test_load_invalid_yaml(tmp_path: Path) -> None:
    bad_file = tmp_path / "bad.yaml"
    bad_file.write_text("app: {invalid: yaml: content:\n")
    with pytest.raises(ConfigurationError) as exc_info:
        load(bad_file, environ={})
    assert exc_info.value.code == TransactionLimitErrorCodes.PARSE_YAML


def test_load_non_mapping_root(tmp_path: Path) -> None:
    bad_file = tmp_path / "list.yaml"
    bad_file.write_text("- a\n- b\n")
    with pytest.raises(ConfigurationError) as exc_info:
        load(bad_file, environ={})
    assert exc_info.value.code == TransactionLimitErrorCodes.PARSE_YAML


def test_load_invalid_limits(tmp_path: Path) -> None:
    bad_config = tmp_path / "bad_limits.yaml"
    bad_config.write_text(
        "limits:\n"
        "  min_per_transaction_minor_units: 500\n"
        "  max_per_transaction_minor_units: 100\n"
    )
    with pytest.raises(ConfigurationError) as exc_info:
        load(bad_config, environ={})
    assert exc_info.value.code == TransactionLimitErrorCodes.VALIDATION
    assert str(exc_info.value).startswith("VALIDATION_ERROR: ")


def test_env_overrides_nesting() -> None:
    data = env_overrides(
        {"PAYMENT_LIMITS_MAX_DAILY_VOLUME": "5000", "PAYMENT_LIMITS_TIMEZONE": "UTC"}
    )
    assert data == {
        "limits": {"max_daily_volume_minor_units": "5000"},
        "tracker": {"timezone": "UTC"},
    }


def test_env_overrides_ignores_unrelated() -> None:
    assert env_overrides({"MAX_DAILY_TRANSACTIONS": "1", "HOME": "/root"}) == {}


def test_merge_nested_dict() -> None:
    base = {"limits": {"max_daily_transactions": 10, "max_hourly_transactions": 2}}
    override = {"limits": {"max_hourly_transactions": 4}}
    result = deep_merge(base, override)
    assert result == {"limits": {"max_daily_transactions": 10, "max_hourly_transactions": 4}}


def test_merge_does_not_mutate_base() -> None:
    base = {"a": {"b": 1}}
    deep_merge(base, {"a": {"c": 2}})
    assert "c" not in base["a"]
