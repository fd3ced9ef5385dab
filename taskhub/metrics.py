"""Prometheus counters for identity and access events."""

from __future__ import annotations

from prometheus_client import Counter

REGISTRATIONS = Counter(
    "taskhub_registrations_total",
    "Accounts registered, by role.",
    ["role"],
)
AUTH_FAILURES = Counter(
    "taskhub_auth_failures_total",
    "Rejected authentication attempts, by internal reason.",
    ["reason"],
)
ACCOUNTS_DELETED = Counter(
    "taskhub_accounts_deleted_total",
    "Accounts deleted together with their tasks, by deletion path.",
    ["path"],
)
