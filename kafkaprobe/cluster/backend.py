"""Thin cluster client HAL used by the probe sequence."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol


class ClusterSession(Protocol):
    """A client session that can be opened and closed once."""

    async def connect(self) -> None:
        """Open the session, raising on failure."""

    async def disconnect(self) -> None:
        """Close the session, raising on failure."""

    def abandon(self) -> None:
        """Release the session after a timed-out connect, even if it lands later."""


class AdminSession(ClusterSession, Protocol):
    """Control-plane session used for cluster metadata."""

    async def list_topics(self) -> list[str]:
        """Return the topic names known to the cluster."""


class ClusterBackend(Protocol):
    """Factory for the sessions exercised by the probe."""

    def admin(self) -> AdminSession:
        """Return a new, unconnected admin session."""

    def producer(self) -> ClusterSession:
        """Return a new, unconnected producer session."""

    def consumer(self, group_id: str) -> ClusterSession:
        """Return a new, unconnected consumer session for ``group_id``."""


@dataclass
class FakeSession:
    """Fake session for offline diagnostics and tests."""

    connect_error: BaseException | None = None
    disconnect_error: BaseException | None = None
    connect_delay_s: float = 0.0
    connected: bool = False
    abandoned: bool = False
    connect_calls: int = 0
    disconnect_calls: int = 0

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_delay_s:
            await asyncio.sleep(self.connect_delay_s)
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        if self.disconnect_error is not None:
            raise self.disconnect_error
        self.connected = False

    def abandon(self) -> None:
        self.abandoned = True
        self.connected = False


@dataclass
class FakeAdminSession(FakeSession):
    """Fake admin session serving a fixed topic list."""

    topics: list[str] = field(default_factory=lambda: ["offline-topic"])
    list_error: BaseException | None = None

    async def list_topics(self) -> list[str]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.topics)


@dataclass
class FakeClusterBackend:
    """Fake cluster backend handing out pre-built fake sessions."""

    admin_session: FakeAdminSession = field(default_factory=FakeAdminSession)
    producer_session: FakeSession = field(default_factory=FakeSession)
    consumer_session: FakeSession = field(default_factory=FakeSession)
    consumer_group_ids: list[str] = field(default_factory=list)

    def admin(self) -> FakeAdminSession:
        return self.admin_session

    def producer(self) -> FakeSession:
        return self.producer_session

    def consumer(self, group_id: str) -> FakeSession:
        self.consumer_group_ids.append(group_id)
        return self.consumer_session
