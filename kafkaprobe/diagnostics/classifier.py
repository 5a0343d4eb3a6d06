"""Map raw probe failures onto the failure taxonomy."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import errno
import socket
import ssl
from typing import Callable, Iterator

from kafka import errors as kafka_errors

from kafkaprobe.diagnostics.models import FailureKind

HINTS: dict[FailureKind, str] = {
    FailureKind.UNREACHABLE: "Verify the broker is running and the address is correct",
    FailureKind.TIMEOUT: (
        "Check network connectivity and firewall settings; "
        "increase the connection timeout if the network is slow"
    ),
    FailureKind.DNS_FAILURE: "Check that the broker hostname or IP address is correct",
    FailureKind.AUTH_FAILURE: "Check the SASL mechanism and credentials",
    FailureKind.TLS_FAILURE: "Check the SSL configuration and broker certificates",
    FailureKind.UNKNOWN: "Check the broker logs and client configuration for details",
}

_AUTH_ERRORS: tuple[type[BaseException], ...] = (
    kafka_errors.AuthenticationFailedError,
    kafka_errors.AuthenticationMethodNotSupported,
    kafka_errors.SaslAuthenticationFailedError,
    kafka_errors.UnsupportedSaslMechanismError,
    kafka_errors.IllegalSaslStateError,
)
_TIMEOUT_ERRORS: tuple[type[BaseException], ...] = (
    TimeoutError,
    asyncio.TimeoutError,
    kafka_errors.KafkaTimeoutError,
    kafka_errors.RequestTimedOutError,
)
_UNREACHABLE_ERRORS: tuple[type[BaseException], ...] = (
    ConnectionRefusedError,
    kafka_errors.NoBrokersAvailable,
    kafka_errors.KafkaConnectionError,
    kafka_errors.NodeNotReadyError,
)


@dataclass(frozen=True)
class ClassificationRule:
    """Predicate that assigns a failure kind when it matches."""

    kind: FailureKind
    matches: Callable[[BaseException], bool]


def _is_instance(*types: type[BaseException]) -> Callable[[BaseException], bool]:
    return lambda error: isinstance(error, types)


def _has_errno(code: int) -> Callable[[BaseException], bool]:
    return lambda error: isinstance(error, OSError) and error.errno == code


def _mentions(*needles: str) -> Callable[[BaseException], bool]:
    lowered = tuple(needle.lower() for needle in needles)
    return lambda error: any(needle in _message(error).lower() for needle in lowered)


STRUCTURED_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(FailureKind.AUTH_FAILURE, _is_instance(*_AUTH_ERRORS)),
    ClassificationRule(FailureKind.TLS_FAILURE, _is_instance(ssl.SSLError)),
    ClassificationRule(FailureKind.DNS_FAILURE, _is_instance(socket.gaierror)),
    ClassificationRule(FailureKind.TIMEOUT, _is_instance(*_TIMEOUT_ERRORS)),
    ClassificationRule(FailureKind.TIMEOUT, _has_errno(errno.ETIMEDOUT)),
    ClassificationRule(FailureKind.UNREACHABLE, _is_instance(*_UNREACHABLE_ERRORS)),
    ClassificationRule(FailureKind.UNREACHABLE, _has_errno(errno.ECONNREFUSED)),
)

MESSAGE_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(FailureKind.UNREACHABLE, _mentions("ECONNREFUSED", "connection refused")),
    ClassificationRule(FailureKind.TIMEOUT, _mentions("timeout", "timed out")),
    ClassificationRule(
        FailureKind.DNS_FAILURE,
        _mentions("ENOTFOUND", "name or service not known", "nodename nor servname", "getaddrinfo"),
    ),
    ClassificationRule(FailureKind.AUTH_FAILURE, _mentions("SASL", "authentication")),
    ClassificationRule(FailureKind.TLS_FAILURE, _mentions("SSL", "certificate")),
)


def _message(error: BaseException) -> str:
    try:
        return f"{type(error).__name__}: {error}"
    except Exception:  # noqa: BLE001 - a broken __str__ must not break classification
        return type(error).__name__


def _error_chain(error: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _first_match(rules: tuple[ClassificationRule, ...], chain: list[BaseException]) -> FailureKind | None:
    for rule in rules:
        for error in chain:
            try:
                if rule.matches(error):
                    return rule.kind
            except Exception:  # noqa: BLE001 - classification is total
                continue
    return None


def classify(error: BaseException) -> FailureKind:
    """Return the failure kind for a raw probe error.

    Structured exception types and errno codes anywhere in the cause chain win
    over message text. Unmatched errors are ``FailureKind.UNKNOWN``.
    """

    chain = list(_error_chain(error))
    kind = _first_match(STRUCTURED_RULES, chain)
    if kind is None:
        kind = _first_match(MESSAGE_RULES, chain)
    return kind if kind is not None else FailureKind.UNKNOWN


def hint_for(kind: FailureKind) -> str:
    """Return the remediation hint for a failure kind."""

    return HINTS.get(kind, HINTS[FailureKind.UNKNOWN])


def describe_error(error: BaseException) -> str:
    """Return a one-line, display-safe description of an error."""

    try:
        text = str(error)
    except Exception:  # noqa: BLE001 - a broken __str__ must not break reporting
        text = ""
    return text or type(error).__name__
