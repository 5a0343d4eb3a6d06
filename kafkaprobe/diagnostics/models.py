"""Models for probe stages, outcomes and reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class ProbeStage(str, Enum):
    """Probe stages in the fixed order they run."""

    ADMIN_CONNECT = "admin_connect"
    LIST_TOPICS = "list_topics"
    PRODUCER_CONNECT = "producer_connect"
    PRODUCER_DISCONNECT = "producer_disconnect"
    CONSUMER_CONNECT = "consumer_connect"
    CONSUMER_DISCONNECT = "consumer_disconnect"

    @property
    def fatal(self) -> bool:
        """Whether a failure at this stage halts the run."""

        return self not in (ProbeStage.PRODUCER_DISCONNECT, ProbeStage.CONSUMER_DISCONNECT)

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


class StageStatus(str, Enum):
    """Status for a single probe stage."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"
    NOT_ATTEMPTED = "NOT ATTEMPTED"


class FailureKind(str, Enum):
    """Closed taxonomy of probe failures."""

    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    DNS_FAILURE = "dns_failure"
    AUTH_FAILURE = "auth_failure"
    TLS_FAILURE = "tls_failure"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe stage."""

    stage: ProbeStage
    status: StageStatus
    details: str
    kind: FailureKind | None = None
    hint: str | None = None
    data: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "status": self.status.value,
            "details": self.details,
            "kind": self.kind.value if self.kind is not None else None,
            "hint": self.hint,
            "data": dict(self.data),
        }


@dataclass
class ProbeReport:
    """Ordered stage results for one probe run."""

    results: list[ProbeResult] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def passed(self) -> bool:
        if self.cancelled:
            return False
        return not any(result.status is StageStatus.FAIL for result in self.results)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    @property
    def failure(self) -> ProbeResult | None:
        """The fatal failure that halted the run, if any."""

        for result in self.results:
            if result.status is StageStatus.FAIL:
                return result
        return None

    def result_for(self, stage: ProbeStage) -> ProbeResult | None:
        for result in self.results:
            if result.stage is stage:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "cancelled": self.cancelled,
            "results": [result.to_dict() for result in self.results],
            "notices": list(self.notices),
        }
