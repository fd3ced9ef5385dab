"""Per-account task counts computed as a group-by-reduce over owner ids."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from .account import Account, Role


@dataclass(frozen=True, slots=True)
class AccountStats:
    account_id: str
    name: str
    email: str
    role: Role
    task_count: int


@dataclass(frozen=True, slots=True)
class Statistics:
    total_users: int
    total_admins: int
    user_stats: list[AccountStats]


def aggregate_statistics(accounts: Iterable[Account], owner_ids: Iterable[str]) -> Statistics:
    """Group task owner ids by account.

    Accounts without tasks report ``0``. Owner ids that match no account are
    ignored, so a stale row never inflates the totals.
    """
    counts = Counter(owner_ids)
    stats = [
        AccountStats(
            account_id=account.account_id,
            name=account.name,
            email=account.email,
            role=account.role,
            task_count=counts.get(account.account_id, 0),
        )
        for account in accounts
    ]
    return Statistics(
        total_users=len(stats),
        total_admins=sum(1 for entry in stats if entry.role is Role.admin),
        user_stats=stats,
    )
