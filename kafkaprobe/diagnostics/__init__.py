"""Connection diagnostics for Kafka clusters."""

from kafkaprobe.diagnostics.classifier import classify, hint_for
from kafkaprobe.diagnostics.models import (
    FailureKind,
    ProbeReport,
    ProbeResult,
    ProbeStage,
    StageStatus,
)
from kafkaprobe.diagnostics.report import format_report, report_to_json
from kafkaprobe.diagnostics.runner import ProbeSequencer, run_probes
from kafkaprobe.diagnostics.supervisor import ConnectionTimeoutError, attempt_with_timeout

__all__ = [
    "ConnectionTimeoutError",
    "FailureKind",
    "ProbeReport",
    "ProbeResult",
    "ProbeSequencer",
    "ProbeStage",
    "StageStatus",
    "attempt_with_timeout",
    "classify",
    "format_report",
    "hint_for",
    "report_to_json",
    "run_probes",
]
