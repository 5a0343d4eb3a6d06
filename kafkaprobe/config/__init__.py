"""Configuration package utilities."""

from kafkaprobe.config.broker_config import (
    AuthCredentials,
    BrokerConfig,
    ConfigError,
    mask_secret,
)
from kafkaprobe.config.loader import load_settings

__all__ = [
    "AuthCredentials",
    "BrokerConfig",
    "ConfigError",
    "load_settings",
    "mask_secret",
]
