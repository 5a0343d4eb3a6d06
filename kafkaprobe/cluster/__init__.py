"""Cluster client sessions used by the probes."""

from kafkaprobe.cluster.backend import (
    AdminSession,
    ClusterBackend,
    ClusterSession,
    FakeAdminSession,
    FakeClusterBackend,
    FakeSession,
)

__all__ = [
    "AdminSession",
    "ClusterBackend",
    "ClusterSession",
    "FakeAdminSession",
    "FakeClusterBackend",
    "FakeSession",
]
