"""Human and JSON renderings of probe configuration and results."""

from __future__ import annotations

import json
from typing import Mapping

from kafkaprobe.config.broker_config import (
    BROKER_URL_KEY,
    CLIENT_ID_KEY,
    GROUP_ID_KEY,
    MECHANISM_KEY,
    SECRET_KEYS,
    SETTING_KEYS,
    SSL_KEY,
    BrokerConfig,
    mask_secret,
)
from kafkaprobe.diagnostics.models import FailureKind, ProbeReport, StageStatus

RULE = "─" * 50
PASSED_BANNER = "🎉 Kafka connection test PASSED"
FAILED_BANNER = "💥 Kafka connection test FAILED"

_FAILURE_ECHO_KEYS = (BROKER_URL_KEY, CLIENT_ID_KEY, SSL_KEY, MECHANISM_KEY, GROUP_ID_KEY)


def describe_environment(settings: Mapping[str, str]) -> str:
    """Echo every recognised setting, masking secrets."""

    lines = ["Environment Variables:"]
    for key in SETTING_KEYS:
        value = settings.get(key)
        shown = mask_secret(value) if key in SECRET_KEYS else (value or "not set")
        lines.append(f"  {key}={shown}")
    return "\n".join(lines)


def describe_config(config: BrokerConfig) -> str:
    """Return the resolved connection settings as display lines."""

    lines = [
        "🔍 Testing Kafka Connection...",
        f"📡 Brokers: {', '.join(config.brokers)}",
        f"🆔 Client ID: {config.client_id}",
        f"🔐 SSL Enabled: {str(config.ssl).lower()}",
        f"🔑 SASL Enabled: {'Yes' if config.sasl_enabled else 'No'}",
    ]
    if config.auth is not None:
        lines.append(f"   Mechanism: {config.auth.mechanism}")
        lines.append(f"   Username: {config.auth.username}")
    lines.append(f"🏷️  Auto Create Topics: {str(config.allow_auto_topic_creation).lower()}")
    if config.environment:
        lines.append(f"🌍 Environment: {config.environment}")
    lines.append(RULE)
    return "\n".join(lines)


def format_report(
    report: ProbeReport,
    config: BrokerConfig | None = None,
    settings: Mapping[str, str] | None = None,
) -> str:
    """Return a human-friendly probe report ending in the verdict banner."""

    lines = ["Probe report", RULE]
    for result in report.results:
        lines.append(f"[{result.status.value}] {result.stage.label}: {result.details}")
        if result.hint and result.status in (StageStatus.FAIL, StageStatus.WARN):
            lines.append(f"    💡 Hint: {result.hint}")
    for notice in report.notices:
        lines.append(f"[NOTICE] {notice}")
    if report.cancelled:
        lines.append("[NOTICE] Run cancelled before all stages completed")

    failure = report.failure
    if failure is not None and failure.kind is FailureKind.UNREACHABLE and config is not None:
        lines.append(f"    💡 Check if broker {config.brokers[0]} is correct")
    if not report.passed and settings is not None:
        lines.append("")
        lines.append("🔧 Current configuration:")
        for key in _FAILURE_ECHO_KEYS:
            lines.append(f"   {key}: {settings.get(key) or 'not set'}")

    lines.append(RULE)
    lines.append(PASSED_BANNER if report.passed else FAILED_BANNER)
    return "\n".join(lines)


def report_to_json(report: ProbeReport, config: BrokerConfig | None = None) -> str:
    """Return the report as a JSON document."""

    payload = report.to_dict()
    if config is not None:
        payload["config"] = {
            "brokers": list(config.brokers),
            "client_id": config.client_id,
            "group_id": config.probe_group_id,
            "ssl": config.ssl,
            "sasl_mechanism": config.auth.mechanism if config.auth is not None else None,
            "security_protocol": config.security_protocol,
        }
    return json.dumps(payload, indent=2, ensure_ascii=False)
