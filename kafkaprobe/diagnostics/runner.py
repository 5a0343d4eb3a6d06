"""Probe sequencer driving the ordered connection checks."""

from __future__ import annotations

import asyncio
from typing import Any

from kafkaprobe.cluster.backend import AdminSession, ClusterBackend, ClusterSession
from kafkaprobe.config.broker_config import BrokerConfig
from kafkaprobe.core.logging import log_error, log_info, log_success, log_warning, logger
from kafkaprobe.diagnostics.classifier import classify, describe_error, hint_for
from kafkaprobe.diagnostics.models import ProbeReport, ProbeResult, ProbeStage, StageStatus
from kafkaprobe.diagnostics.supervisor import attempt_with_timeout

TOPIC_PREVIEW_LIMIT = 5


def summarize_topics(topics: list[str]) -> tuple[str, dict[str, Any]]:
    """Return the details line and data payload for a topic listing."""

    preview = topics[:TOPIC_PREVIEW_LIMIT]
    truncated = len(topics) > TOPIC_PREVIEW_LIMIT
    details = f"Found {len(topics)} topics"
    if preview:
        details += f": {', '.join(preview)}{'...' if truncated else ''}"
    data = {"topic_count": len(topics), "topics": preview, "truncated": truncated}
    return details, data


class ProbeSequencer:
    """Run the probe stages in order, halting on the first fatal failure."""

    def __init__(
        self,
        config: BrokerConfig,
        backend: ClusterBackend,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        self._config = config
        self._backend = backend
        self._cancel_event = cancel_event
        self._report = ProbeReport()

    async def run(self) -> ProbeReport:
        """Run every stage once and return the report."""

        self._report = ProbeReport()
        admin = self._backend.admin()
        admin_open = False
        try:
            log_info("🔌 Connecting to Kafka...")
            if not await self._connect(ProbeStage.ADMIN_CONNECT, admin, self._config.connection_timeout_s):
                return self._halt()
            admin_open = True

            log_info("📋 Fetching topics...")
            if not await self._list_topics(admin):
                return self._halt()

            log_info("📤 Testing producer connection...")
            producer = self._backend.producer()
            if not await self._connect(ProbeStage.PRODUCER_CONNECT, producer, self._config.request_timeout_s):
                return self._halt()
            await self._disconnect(ProbeStage.PRODUCER_DISCONNECT, producer)

            log_info("📥 Testing consumer connection...")
            consumer = self._backend.consumer(self._config.probe_group_id)
            if not await self._connect(ProbeStage.CONSUMER_CONNECT, consumer, self._config.request_timeout_s):
                return self._halt()
            await self._disconnect(ProbeStage.CONSUMER_DISCONNECT, consumer)
            return self._report
        finally:
            if admin_open:
                await self._release_admin(admin)

    async def _connect(self, stage: ProbeStage, session: ClusterSession, timeout_s: float) -> bool:
        if self._cancel_requested():
            return False
        try:
            await attempt_with_timeout(session.connect, timeout_s)
        except Exception as exc:  # noqa: BLE001 - stage failures become results
            if isinstance(exc, TimeoutError):
                session.abandon()
            self._record_failure(stage, exc)
            return False
        self._record(ProbeResult(stage=stage, status=StageStatus.PASS, details="Connected"))
        log_success(f"✅ {stage.label} succeeded")
        return True

    async def _list_topics(self, admin: AdminSession) -> bool:
        stage = ProbeStage.LIST_TOPICS
        if self._cancel_requested():
            return False
        try:
            topics = await attempt_with_timeout(admin.list_topics, self._config.request_timeout_s)
        except Exception as exc:  # noqa: BLE001 - stage failures become results
            self._record_failure(stage, exc)
            return False
        details, data = summarize_topics(list(topics))
        self._record(ProbeResult(stage=stage, status=StageStatus.PASS, details=details, data=data))
        log_success(f"✅ Connection verified! {details}")
        return True

    async def _disconnect(self, stage: ProbeStage, session: ClusterSession) -> None:
        try:
            await attempt_with_timeout(session.disconnect, self._config.request_timeout_s)
        except Exception as exc:  # noqa: BLE001 - disconnect failures are notices
            self._record_failure(stage, exc)
            return
        self._record(ProbeResult(stage=stage, status=StageStatus.PASS, details="Disconnected"))
        log_success(f"✅ {stage.label} succeeded")

    async def _release_admin(self, admin: AdminSession) -> None:
        try:
            await attempt_with_timeout(admin.disconnect, self._config.request_timeout_s)
        except Exception as exc:  # noqa: BLE001 - cleanup must not mask the verdict
            notice = f"Admin disconnect failed: {describe_error(exc)}"
            logger.debug("Admin cleanup failed", exc_info=exc)
            log_warning(f"⚠️ {notice}")
            self._report.notices.append(notice)
            return
        log_info("👋 Admin disconnected")

    def _record_failure(self, stage: ProbeStage, exc: BaseException) -> None:
        kind = classify(exc)
        hint = hint_for(kind)
        message = describe_error(exc)
        status = StageStatus.FAIL if stage.fatal else StageStatus.WARN
        self._record(
            ProbeResult(stage=stage, status=status, details=message, kind=kind, hint=hint)
        )
        if stage.fatal:
            log_error(f"❌ {stage.label} failed ({kind.value}): {message}")
        else:
            notice = f"{stage.label} failed ({kind.value}): {message}"
            self._report.notices.append(notice)
            log_warning(f"⚠️ {notice}")
        logger.debug("%s raised", stage.value, exc_info=exc)

    def _record(self, result: ProbeResult) -> None:
        self._report.results.append(result)

    def _cancel_requested(self) -> bool:
        if self._cancel_event is None or not self._cancel_event.is_set():
            return False
        if not self._report.cancelled:
            log_warning("⛔ Probe run cancelled")
        self._report.cancelled = True
        return True

    def _halt(self) -> ProbeReport:
        attempted = {result.stage for result in self._report.results}
        for stage in ProbeStage:
            if stage not in attempted:
                self._record(
                    ProbeResult(stage=stage, status=StageStatus.NOT_ATTEMPTED, details="Not attempted")
                )
        return self._report


async def run_probes(
    config: BrokerConfig,
    backend: ClusterBackend | None = None,
    *,
    cancel_event: asyncio.Event | None = None,
) -> ProbeReport:
    """Run the full probe sequence against the configured cluster."""

    if backend is None:
        from kafkaprobe.cluster.kafka_backend import KafkaClusterBackend

        backend = KafkaClusterBackend(config)
    return await ProbeSequencer(config, backend, cancel_event=cancel_event).run()

