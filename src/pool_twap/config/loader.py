"""Config loader — reads YAML, applies TWAP_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from pool_twap.config.schema import AppConfig

# Environment variable -> (section, field); values are validated by AppConfig
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "TWAP_RPC_URL": ("rpc", "url"),
    "TWAP_RPC_TIMEOUT_S": ("rpc", "timeout_s"),
    "TWAP_BLOCK_TIME_S": ("chain", "block_time_s"),
    "TWAP_CONCURRENCY": ("sampling", "concurrency"),
    "TWAP_RUN_TIMEOUT_S": ("run", "timeout_s"),
    "TWAP_LOG_LEVEL": ("logging", "level"),
    "TWAP_LOG_FORMAT": ("logging", "format"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply ``ENV_OVERRIDES``.

    If *path* is None or the file doesn't exist, returns defaults.
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    for env_var, (section, field) in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data.setdefault(section, {})[field] = value

    return AppConfig.model_validate(data)
