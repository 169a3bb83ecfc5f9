"""Service startup wiring."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from .clock import Clock
from .loader import load
from .logger import logger_from_config
from .tracker import TransactionLimitTracker


def create_tracker(
    config_path: Path,
    env_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    clock: Clock | None = None,
) -> TransactionLimitTracker:
    """Load the config, set up logging and build the process's tracker.

    Raises:
        ConfigurationError: the configuration is unreadable or invalid
    """
    config = load(config_path, env_path, environ)
    log = logger_from_config(config.log, service=config.app.name)
    tracker = TransactionLimitTracker.from_config(config, clock)
    log.info(
        "Transaction limit tracker initialized",
        environment=config.tracker.environment,
        enforce_limits=config.tracker.enforce_limits,
        timezone=config.tracker.timezone,
        rollover_policy=config.tracker.rollover_policy.value,
        version=config.app.version,
    )
    return tracker
