"""Tests for broker configuration resolution."""

from __future__ import annotations

import pytest

from kafkaprobe.config.broker_config import (
    AuthCredentials,
    BrokerConfig,
    ConfigError,
    mask_secret,
)


def test_defaults_from_empty_settings() -> None:
    config = BrokerConfig.from_settings({})

    assert config.brokers == ("localhost:9092",)
    assert config.client_id == "kafka-test-client"
    assert config.group_id == "test-group"
    assert config.probe_group_id == "test-group-test"
    assert config.allow_auto_topic_creation is False
    assert config.ssl is False
    assert config.auth is None
    assert config.connection_timeout_s == 10.0
    assert config.request_timeout_s == 30.0
    assert config.security_protocol == "PLAINTEXT"


def test_broker_list_is_split_and_trimmed() -> None:
    config = BrokerConfig.from_settings(
        {"KAFKA_DEFAULT_BROKER_URL": "kafka-1:9092, kafka-2:9093,,"}
    )

    assert config.brokers == ("kafka-1:9092", "kafka-2:9093")


def test_flags_only_enable_on_exact_true() -> None:
    enabled = BrokerConfig.from_settings(
        {"KAFKA_DEFAULT_SSL": "true", "KAFKA_DEFAULT_AUTO_CREATE_TOPIC": "true"}
    )
    disabled = BrokerConfig.from_settings(
        {"KAFKA_DEFAULT_SSL": "yes", "KAFKA_DEFAULT_AUTO_CREATE_TOPIC": "TRUE"}
    )

    assert enabled.ssl is True
    assert enabled.allow_auto_topic_creation is True
    assert enabled.security_protocol == "SSL"
    assert disabled.ssl is False
    assert disabled.allow_auto_topic_creation is False


@pytest.mark.parametrize("mechanism", [None, "", "NONE", "none"])
def test_no_mechanism_means_no_credentials(mechanism) -> None:
    settings = {"KAFKA_DEFAULT_USERNAME": "alice", "KAFKA_DEFAULT_PASSWORD": "secret"}
    if mechanism is not None:
        settings["KAFKA_DEFAULT_MECHANISM"] = mechanism

    config = BrokerConfig.from_settings(settings)

    assert config.auth is None
    assert config.sasl_enabled is False


def test_sasl_credentials_are_normalized() -> None:
    config = BrokerConfig.from_settings(
        {
            "KAFKA_DEFAULT_MECHANISM": "scram-sha-512",
            "KAFKA_DEFAULT_USERNAME": "alice",
            "KAFKA_DEFAULT_PASSWORD": "secret",
            "KAFKA_DEFAULT_SSL": "true",
        }
    )

    assert config.auth == AuthCredentials("SCRAM-SHA-512", "alice", "secret")
    assert config.security_protocol == "SASL_SSL"


def test_plain_with_empty_password_is_rejected() -> None:
    with pytest.raises(ConfigError, match="password"):
        BrokerConfig.from_settings(
            {
                "KAFKA_DEFAULT_MECHANISM": "PLAIN",
                "KAFKA_DEFAULT_USERNAME": "alice",
                "KAFKA_DEFAULT_PASSWORD": "",
            }
        )


def test_mechanism_without_username_is_rejected() -> None:
    with pytest.raises(ConfigError, match="username"):
        BrokerConfig.from_settings(
            {"KAFKA_DEFAULT_MECHANISM": "PLAIN", "KAFKA_DEFAULT_PASSWORD": "secret"}
        )


def test_unsupported_mechanism_is_rejected() -> None:
    with pytest.raises(ConfigError, match="Unsupported SASL mechanism"):
        AuthCredentials("KERBEROS-ISH", "alice", "secret")


def test_password_is_hidden_from_repr() -> None:
    credentials = AuthCredentials("PLAIN", "alice", "hunter2")

    assert "hunter2" not in repr(credentials)
    assert mask_secret("hunter2") == "********"
    assert mask_secret("") == "not set"


def test_timeouts_are_read_in_milliseconds() -> None:
    config = BrokerConfig.from_settings(
        {
            "KAFKA_DEFAULT_CONNECTION_TIMEOUT": "2500",
            "KAFKA_DEFAULT_REQUEST_TIMEOUT": "15000",
        }
    )

    assert config.connection_timeout_s == 2.5
    assert config.request_timeout_s == 15.0


@pytest.mark.parametrize("raw", ["soon", "0", "-5"])
def test_invalid_timeouts_are_rejected(raw: str) -> None:
    with pytest.raises(ConfigError):
        BrokerConfig.from_settings({"KAFKA_DEFAULT_REQUEST_TIMEOUT": raw})


@pytest.mark.parametrize("broker", ["kafka:notaport", ":9092", "kafka:70000"])
def test_malformed_broker_addresses_are_rejected(broker: str) -> None:
    with pytest.raises(ConfigError):
        BrokerConfig(brokers=(broker,))


def test_empty_broker_list_is_rejected() -> None:
    with pytest.raises(ConfigError, match="broker"):
        BrokerConfig(brokers=("", "  "))


def test_config_is_immutable() -> None:
    config = BrokerConfig()

    with pytest.raises(AttributeError):
        config.client_id = "other"  # type: ignore[misc]
