"""Collect raw probe settings from YAML, dotenv files and the environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

from dotenv import dotenv_values
import yaml

from kafkaprobe.config.broker_config import SETTING_KEYS, ConfigError
from kafkaprobe.core.logging import logger

DEFAULT_ENV_FILE = Path(".env")


def load_settings(
    config_file: Path | None = None,
    env_file: Path | None = DEFAULT_ENV_FILE,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge setting sources, later sources overriding earlier ones.

    Precedence from lowest to highest: YAML config file, dotenv file, process
    environment. Only recognised setting keys are returned.

    Args:
        config_file: Optional YAML file mapping setting keys to values.
        env_file: Optional dotenv file; silently skipped when absent.
        environ: Environment mapping, defaults to ``os.environ``.

    Returns:
        Flat mapping of setting key to string value.

    Raises:
        ConfigError: If the YAML file cannot be read or parsed.
    """

    settings: dict[str, str] = {}
    if config_file is not None:
        settings.update(_load_yaml(config_file))
    if env_file is not None and env_file.exists():
        logger.debug("Loading settings from %s", env_file)
        settings.update(_known_only(dotenv_values(env_file)))
    settings.update(_known_only(os.environ if environ is None else environ))
    return settings


def _load_yaml(config_file: Path) -> dict[str, str]:
    try:
        with config_file.open("r", encoding="utf-8") as file:
            data = yaml.safe_load(file) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_file}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed config file {config_file}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping")
    logger.debug("Loaded settings from %s", config_file)
    return _known_only({key: _stringify(value) for key, value in data.items()})


def _stringify(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def _known_only(source: Mapping[str, str | None]) -> dict[str, str]:
    return {
        key: value
        for key, value in source.items()
        if key in SETTING_KEYS and value is not None
    }
