"""Configuration module for the collection point simulator."""
from pydantic import ValidationError

from .loader import load_config, load_config_from_env
from .schemas import (
    DEFAULT_OUTCOME_WEIGHTS,
    AppConfig,
    DatabaseSettings,
    SchedulerSettings,
    ServerSettings,
)

__all__ = [
    "AppConfig",
    "DEFAULT_OUTCOME_WEIGHTS",
    "DatabaseSettings",
    "SchedulerSettings",
    "ServerSettings",
    "ValidationError",
    "load_config",
    "load_config_from_env",
]
