"""Tests for settings loading from YAML, dotenv and the environment."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from kafkaprobe.config.broker_config import BrokerConfig, ConfigError
from kafkaprobe.config.loader import load_settings


def test_environment_overrides_dotenv_and_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "probe.yaml"
    config_file.write_text(
        "KAFKA_DEFAULT_BROKER_URL: [yaml-1:9092, yaml-2:9092]\n"
        "KAFKA_DEFAULT_CLIENT_ID: from-yaml\n"
        "KAFKA_DEFAULT_GROUP_ID: from-yaml\n"
        "KAFKA_DEFAULT_SSL: true\n",
        encoding="utf-8",
    )
    env_file = tmp_path / ".env"
    env_file.write_text(
        "KAFKA_DEFAULT_CLIENT_ID=from-dotenv\nKAFKA_DEFAULT_GROUP_ID=from-dotenv\n",
        encoding="utf-8",
    )

    settings = load_settings(
        config_file=config_file,
        env_file=env_file,
        environ={"KAFKA_DEFAULT_GROUP_ID": "from-env", "UNRELATED": "x"},
    )

    assert settings["KAFKA_DEFAULT_BROKER_URL"] == "yaml-1:9092,yaml-2:9092"
    assert settings["KAFKA_DEFAULT_CLIENT_ID"] == "from-dotenv"
    assert settings["KAFKA_DEFAULT_GROUP_ID"] == "from-env"
    assert settings["KAFKA_DEFAULT_SSL"] == "true"
    assert "UNRELATED" not in settings

    config = BrokerConfig.from_settings(settings)
    assert config.brokers == ("yaml-1:9092", "yaml-2:9092")
    assert config.ssl is True


def test_missing_env_file_is_skipped(tmp_path: Path) -> None:
    settings = load_settings(env_file=tmp_path / "absent.env", environ={})

    assert settings == {}


def test_dotenv_does_not_touch_process_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("KAFKA_DEFAULT_CLIENT_ID", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("KAFKA_DEFAULT_CLIENT_ID=dotenv-client\n", encoding="utf-8")

    settings = load_settings(env_file=env_file)

    assert settings["KAFKA_DEFAULT_CLIENT_ID"] == "dotenv-client"
    assert "KAFKA_DEFAULT_CLIENT_ID" not in os.environ


def test_malformed_yaml_raises_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("KAFKA_DEFAULT_BROKER_URL: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Malformed"):
        load_settings(config_file=config_file, env_file=None, environ={})


def test_non_mapping_yaml_raises_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / "list.yaml"
    config_file.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_settings(config_file=config_file, env_file=None, environ={})


def test_missing_yaml_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read"):
        load_settings(config_file=tmp_path / "nope.yaml", env_file=None, environ={})
