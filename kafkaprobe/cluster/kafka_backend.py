"""kafka-python implementation of the cluster backend."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable

from kafka import KafkaAdminClient, KafkaConsumer, KafkaProducer

from kafkaprobe.config.broker_config import BrokerConfig
from kafkaprobe.core.logging import logger

BOOTSTRAP_MARGIN_S = 1.0


def bootstrap_timeout_s(connection_timeout_s: float) -> float:
    """Return kafka-python's bootstrap budget for a connection deadline.

    The client must give up and raise its own error strictly before the
    supervisor deadline, otherwise a refused broker reports as a timeout.
    """

    return connection_timeout_s - min(BOOTSTRAP_MARGIN_S, connection_timeout_s * 0.2)


class KafkaSession:
    """Session wrapping one blocking kafka-python client.

    kafka-python clients bootstrap while they are constructed, so connecting
    means building the client in a worker thread. A connect that finishes
    after ``abandon()`` closes its client straight away.
    """

    def __init__(self, name: str, factory: Callable[[], Any], close_timeout_s: float) -> None:
        self.name = name
        self._factory = factory
        self._close_timeout_s = close_timeout_s
        self._client: Any | None = None
        self._abandoned = False
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        await asyncio.to_thread(self._open)

    async def disconnect(self) -> None:
        with self._lock:
            client, self._client = self._client, None
        if client is None:
            return
        await asyncio.to_thread(self._close, client)

    def abandon(self) -> None:
        with self._lock:
            self._abandoned = True
            client, self._client = self._client, None
        if client is not None:
            self._close_quietly(client)

    def _open(self) -> None:
        client = self._factory()
        with self._lock:
            if not self._abandoned:
                self._client = client
                return
        logger.debug("Closing %s client that connected after its deadline", self.name)
        self._close_quietly(client)

    def _close(self, client: Any) -> None:
        client.close()

    def _close_quietly(self, client: Any) -> None:
        try:
            self._close(client)
        except Exception as exc:  # noqa: BLE001 - abandoned client cleanup is best effort
            logger.debug("Ignoring close failure for abandoned %s client: %s", self.name, exc)

    def _require_client(self) -> Any:
        client = self._client
        if client is None:
            raise RuntimeError(f"{self.name} session is not connected")
        return client


class KafkaAdminSession(KafkaSession):
    """Admin session backed by ``KafkaAdminClient``."""

    async def list_topics(self) -> list[str]:
        client = self._require_client()
        topics = await asyncio.to_thread(client.list_topics)
        return sorted(topics)


class KafkaProducerSession(KafkaSession):
    """Producer session backed by ``KafkaProducer``."""

    def _close(self, client: Any) -> None:
        client.close(timeout=self._close_timeout_s)


class KafkaClusterBackend:
    """Cluster backend creating kafka-python clients from a ``BrokerConfig``."""

    def __init__(self, config: BrokerConfig) -> None:
        self.config = config

    def client_options(self) -> dict[str, Any]:
        """Return keyword arguments shared by every kafka-python client."""

        config = self.config
        options: dict[str, Any] = {
            "bootstrap_servers": list(config.brokers),
            "client_id": config.client_id,
            "security_protocol": config.security_protocol,
            "request_timeout_ms": int(config.request_timeout_s * 1000),
            "api_version_auto_timeout_ms": int(bootstrap_timeout_s(config.connection_timeout_s) * 1000),
        }
        if config.auth is not None:
            options.update(
                {
                    "sasl_mechanism": config.auth.mechanism,
                    "sasl_plain_username": config.auth.username,
                    "sasl_plain_password": config.auth.password,
                }
            )
        return options

    def producer_options(self) -> dict[str, Any]:
        options = self.client_options()
        # Older kafka-python releases reject unknown producer settings.
        if "allow_auto_create_topics" in KafkaProducer.DEFAULT_CONFIG:
            options["allow_auto_create_topics"] = self.config.allow_auto_topic_creation
        return options

    def consumer_options(self, group_id: str) -> dict[str, Any]:
        options = self.client_options()
        options.update({"group_id": group_id, "enable_auto_commit": False})
        return options

    def admin(self) -> KafkaAdminSession:
        options = self.client_options()
        return KafkaAdminSession(
            "admin",
            lambda: KafkaAdminClient(**options),
            self.config.request_timeout_s,
        )

    def producer(self) -> KafkaProducerSession:
        options = self.producer_options()
        return KafkaProducerSession(
            "producer",
            lambda: KafkaProducer(**options),
            self.config.request_timeout_s,
        )

    def consumer(self, group_id: str) -> KafkaSession:
        options = self.consumer_options(group_id)
        return KafkaSession(
            "consumer",
            lambda: KafkaConsumer(**options),
            self.config.request_timeout_s,
        )
