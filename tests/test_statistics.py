from __future__ import annotations

from datetime import datetime, timezone

import pytest

from taskhub.domain.account import Account, Role
from taskhub.domain.errors import AuthorizationError
from taskhub.domain.guards import require_role, role_satisfies
from taskhub.domain.statistics import aggregate_statistics


def _account(account_id: str, role: Role = Role.user) -> Account:
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    return Account(
        account_id=account_id,
        name=account_id.upper(),
        email=f"{account_id}@example.com",
        role=role,
        created_at=now,
        updated_at=now,
    )


@pytest.mark.parametrize(
    ("role", "required", "expected"),
    [
        (Role.user, Role.user, True),
        (Role.admin, Role.user, True),
        (Role.user, Role.admin, False),
        (Role.admin, Role.admin, True),
    ],
)
def test_role_satisfies(role, required, expected):
    assert role_satisfies(role, required) is expected


def test_require_role_rejects_plain_users():
    with pytest.raises(AuthorizationError):
        require_role(_account("u1"), Role.admin)

    admin = _account("a1", Role.admin)
    assert require_role(admin, Role.admin) is admin


def test_statistics_include_accounts_without_tasks():
    u1 = _account("u1")
    a1 = _account("a1", Role.admin)

    stats = aggregate_statistics([u1, a1], ["u1", "u1", "u1"])

    assert stats.total_users == 2
    assert stats.total_admins == 1
    counts = {entry.account_id: entry.task_count for entry in stats.user_stats}
    assert counts == {"u1": 3, "a1": 0}


def test_statistics_counts_sum_to_total_tasks():
    accounts = [_account(f"u{i}") for i in range(4)] + [_account("a0", Role.admin), _account("a1", Role.admin)]
    owner_ids = ["u0"] * 5 + ["u2"] * 2 + ["a1"]

    stats = aggregate_statistics(accounts, iter(owner_ids))

    assert stats.total_users == 6
    assert stats.total_admins == 2
    assert sum(entry.task_count for entry in stats.user_stats) == len(owner_ids)
    assert [entry.account_id for entry in stats.user_stats] == [a.account_id for a in accounts]


def test_statistics_ignore_unknown_owner_ids():
    stats = aggregate_statistics([_account("u1")], ["ghost", "u1"])

    assert [(e.account_id, e.task_count) for e in stats.user_stats] == [("u1", 1)]


def test_statistics_of_empty_store():
    stats = aggregate_statistics([], [])

    assert (stats.total_users, stats.total_admins, stats.user_stats) == (0, 0, [])
