"""Configuration file loading."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config import AppConfig
from .exceptions import ConfigurationError, TransactionLimitErrorCodes

ENV_PREFIX = "PAYMENT_LIMITS_"

# Environment variable suffix -> dotted config path.
ENV_OVERRIDES: dict[str, str] = {
    "ENVIRONMENT": "tracker.environment",
    "ENFORCE_LIMITS": "tracker.enforce_limits",
    "TIMEZONE": "tracker.timezone",
    "ROLLOVER_POLICY": "tracker.rollover_policy",
    "MAX_DAILY_TRANSACTIONS": "limits.max_daily_transactions",
    "MAX_HOURLY_TRANSACTIONS": "limits.max_hourly_transactions",
    "MAX_DAILY_VOLUME": "limits.max_daily_volume_minor_units",
    "MAX_MONTHLY_VOLUME": "limits.max_monthly_volume_minor_units",
    "MAX_TRANSACTION_AMOUNT": "limits.max_per_transaction_minor_units",
    "MIN_TRANSACTION_AMOUNT": "limits.min_per_transaction_minor_units",
    "LOG_LEVEL": "log.level",
    "LOG_FORMAT": "log.format",
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with override deep-merged into base.

    Values from override win. Lists are replaced, not merged.
    """
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect PAYMENT_LIMITS_* variables into a nested override dict.

    Values stay strings; pydantic coerces them during validation.
    """
    if environ is None:
        environ = os.environ
    data: dict[str, Any] = {}
    for suffix, key_path in ENV_OVERRIDES.items():
        value = environ.get(ENV_PREFIX + suffix)
        if value is None or value == "":
            continue
        parts = key_path.split(".")
        node = data
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return data


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            code=TransactionLimitErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            code=TransactionLimitErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            code=TransactionLimitErrorCodes.PARSE_YAML,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def build_config(data: Mapping[str, Any]) -> AppConfig:
    """Validate raw configuration data into an AppConfig."""
    try:
        return AppConfig.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigurationError(
            code=TransactionLimitErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e


def load(
    base_path: Path,
    env_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load the configuration file and return an AppConfig.

    base_path: base configuration file (required)
    env_path: per-environment file, merged over the base when it exists
    environ: variables to read PAYMENT_LIMITS_* overrides from (default os.environ)
    """
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = deep_merge(data, _read_yaml(env_path))
    data = deep_merge(data, env_overrides(environ))
    return build_config(data)
