"""YAML configuration loader and environment overrides."""
import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from .schemas import AppConfig

ENV_CONFIG_PATH = "COLLECT_SIM_CONFIG"
ENV_DB_PATH = "COLLECT_SIM_DB_PATH"
ENV_INTERVAL = "COLLECT_SIM_INTERVAL_SECONDS"
ENV_LOG_LEVEL = "COLLECT_SIM_LOG_LEVEL"


def load_config(config_path: str | Path) -> AppConfig:
    """
    Load and validate application configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is empty or invalid
        yaml.YAMLError: If YAML parsing fails
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        config_dict = yaml.safe_load(f)

    if config_dict is None:
        raise ValueError(f"Empty configuration file: {config_path}")

    try:
        return AppConfig.from_dict(config_dict)
    except Exception as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def load_config_from_env(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Resolve configuration for the running process.

    Starts from the YAML file named by ``COLLECT_SIM_CONFIG`` (defaults when
    unset), then applies the single-value environment overrides.
    """
    env = os.environ if environ is None else environ

    config_path = env.get(ENV_CONFIG_PATH)
    config = load_config(config_path) if config_path else AppConfig()

    data = config.model_dump()
    if env.get(ENV_DB_PATH):
        data["database"]["path"] = env[ENV_DB_PATH]
    if env.get(ENV_INTERVAL):
        data["scheduler"]["interval_seconds"] = float(env[ENV_INTERVAL])
    if env.get(ENV_LOG_LEVEL):
        data["server"]["log_level"] = env[ENV_LOG_LEVEL]

    return AppConfig.from_dict(data)
