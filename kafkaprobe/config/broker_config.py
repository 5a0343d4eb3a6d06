"""Immutable broker connection settings for the probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

BROKER_URL_KEY = "KAFKA_DEFAULT_BROKER_URL"
CLIENT_ID_KEY = "KAFKA_DEFAULT_CLIENT_ID"
GROUP_ID_KEY = "KAFKA_DEFAULT_GROUP_ID"
AUTO_CREATE_TOPIC_KEY = "KAFKA_DEFAULT_AUTO_CREATE_TOPIC"
CONNECTION_TIMEOUT_KEY = "KAFKA_DEFAULT_CONNECTION_TIMEOUT"
REQUEST_TIMEOUT_KEY = "KAFKA_DEFAULT_REQUEST_TIMEOUT"
CONCURRENTLY_KEY = "KAFKA_DEFAULT_CONCURRENTLY"
SSL_KEY = "KAFKA_DEFAULT_SSL"
MECHANISM_KEY = "KAFKA_DEFAULT_MECHANISM"
USERNAME_KEY = "KAFKA_DEFAULT_USERNAME"
PASSWORD_KEY = "KAFKA_DEFAULT_PASSWORD"
ENV_KEY = "KAFKA_ENV"

SETTING_KEYS = (
    BROKER_URL_KEY,
    CLIENT_ID_KEY,
    GROUP_ID_KEY,
    AUTO_CREATE_TOPIC_KEY,
    CONNECTION_TIMEOUT_KEY,
    REQUEST_TIMEOUT_KEY,
    CONCURRENTLY_KEY,
    SSL_KEY,
    MECHANISM_KEY,
    USERNAME_KEY,
    PASSWORD_KEY,
    ENV_KEY,
)
SECRET_KEYS = frozenset({PASSWORD_KEY})

DEFAULT_BROKER = "localhost:9092"
DEFAULT_CLIENT_ID = "kafka-test-client"
DEFAULT_GROUP_ID = "test-group"
PROBE_GROUP_SUFFIX = "-test"
DEFAULT_CONNECTION_TIMEOUT_MS = 10_000
DEFAULT_REQUEST_TIMEOUT_MS = 30_000

NO_MECHANISM = "NONE"
SUPPORTED_MECHANISMS = ("PLAIN", "SCRAM-SHA-256", "SCRAM-SHA-512")

MASKED_SECRET = "********"


class ConfigError(ValueError):
    """Raised when probe configuration is missing or inconsistent."""


def mask_secret(value: str | None) -> str:
    """Return a display-safe stand-in for a secret value."""

    return MASKED_SECRET if value else "not set"


@dataclass(frozen=True)
class AuthCredentials:
    """SASL mechanism plus the credentials it needs."""

    mechanism: str
    username: str
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        mechanism = (self.mechanism or "").strip().upper()
        if mechanism not in SUPPORTED_MECHANISMS:
            supported = ", ".join(SUPPORTED_MECHANISMS)
            raise ConfigError(
                f"Unsupported SASL mechanism {self.mechanism!r} (expected one of {supported})"
            )
        object.__setattr__(self, "mechanism", mechanism)
        if not self.username:
            raise ConfigError(f"SASL mechanism {mechanism} requires a username")
        if not self.password:
            raise ConfigError(f"SASL mechanism {mechanism} requires a password")


@dataclass(frozen=True)
class BrokerConfig:
    """Validated connection settings shared by every probe stage."""

    brokers: tuple[str, ...] = (DEFAULT_BROKER,)
    client_id: str = DEFAULT_CLIENT_ID
    group_id: str = DEFAULT_GROUP_ID
    allow_auto_topic_creation: bool = False
    ssl: bool = False
    auth: AuthCredentials | None = None
    connection_timeout_s: float = DEFAULT_CONNECTION_TIMEOUT_MS / 1000
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_MS / 1000
    environment: str | None = None

    def __post_init__(self) -> None:
        brokers = tuple(broker.strip() for broker in self.brokers if broker and broker.strip())
        if not brokers:
            raise ConfigError("At least one broker address is required")
        for broker in brokers:
            _validate_broker_address(broker)
        object.__setattr__(self, "brokers", brokers)

        if not self.client_id:
            raise ConfigError("Client id must not be empty")
        if not self.group_id:
            raise ConfigError("Consumer group id must not be empty")
        if self.connection_timeout_s <= 0:
            raise ConfigError("Connection timeout must be positive")
        if self.request_timeout_s <= 0:
            raise ConfigError("Request timeout must be positive")

    @property
    def sasl_enabled(self) -> bool:
        return self.auth is not None

    @property
    def probe_group_id(self) -> str:
        """Consumer group used by the probe, kept apart from real consumers."""

        return f"{self.group_id}{PROBE_GROUP_SUFFIX}"

    @property
    def security_protocol(self) -> str:
        if self.auth is not None:
            return "SASL_SSL" if self.ssl else "SASL_PLAINTEXT"
        return "SSL" if self.ssl else "PLAINTEXT"

    @classmethod
    def from_settings(cls, settings: Mapping[str, str]) -> "BrokerConfig":
        """Build a config from raw string settings keyed by setting name.

        Args:
            settings: Flat mapping such as the process environment.

        Returns:
            Validated broker configuration.

        Raises:
            ConfigError: If any value is missing, malformed or inconsistent.
        """

        brokers = _split_brokers(settings.get(BROKER_URL_KEY) or DEFAULT_BROKER)
        return cls(
            brokers=brokers,
            client_id=settings.get(CLIENT_ID_KEY) or DEFAULT_CLIENT_ID,
            group_id=settings.get(GROUP_ID_KEY) or DEFAULT_GROUP_ID,
            allow_auto_topic_creation=settings.get(AUTO_CREATE_TOPIC_KEY) == "true",
            ssl=settings.get(SSL_KEY) == "true",
            auth=_resolve_auth(settings),
            connection_timeout_s=_parse_timeout_ms(
                settings, CONNECTION_TIMEOUT_KEY, DEFAULT_CONNECTION_TIMEOUT_MS
            ),
            request_timeout_s=_parse_timeout_ms(
                settings, REQUEST_TIMEOUT_KEY, DEFAULT_REQUEST_TIMEOUT_MS
            ),
            environment=settings.get(ENV_KEY) or None,
        )


def _split_brokers(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _validate_broker_address(broker: str) -> None:
    host, sep, port = broker.rpartition(":")
    if not sep:
        return
    if not host:
        raise ConfigError(f"Broker address {broker!r} is missing a host")
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ConfigError(f"Broker address {broker!r} has an invalid port")


def _resolve_auth(settings: Mapping[str, str]) -> AuthCredentials | None:
    mechanism = (settings.get(MECHANISM_KEY) or "").strip()
    if not mechanism or mechanism.upper() == NO_MECHANISM:
        return None
    return AuthCredentials(
        mechanism=mechanism,
        username=settings.get(USERNAME_KEY) or "",
        password=settings.get(PASSWORD_KEY) or "",
    )


def _parse_timeout_ms(settings: Mapping[str, str], key: str, default_ms: int) -> float:
    raw = settings.get(key)
    if raw is None or not str(raw).strip():
        return default_ms / 1000
    try:
        value_ms = int(str(raw).strip())
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer number of milliseconds, got {raw!r}") from exc
    if value_ms <= 0:
        raise ConfigError(f"{key} must be positive, got {value_ms}")
    return value_ms / 1000
