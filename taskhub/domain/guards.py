"""Role predicates used in front of administrative operations."""

from __future__ import annotations

from .account import Account, Role
from .errors import AuthorizationError

# Roles that satisfy a requirement for the key role.
_SATISFIES: dict[Role, frozenset[Role]] = {
    Role.user: frozenset({Role.user, Role.admin}),
    Role.admin: frozenset({Role.admin}),
}


def role_satisfies(role: Role, required: Role) -> bool:
    return role in _SATISFIES[required]


def require_role(identity: Account, required: Role) -> Account:
    """Return ``identity`` unchanged or raise ``AuthorizationError``."""
    if not role_satisfies(identity.role, required):
        raise AuthorizationError("Admin access required" if required is Role.admin else None)
    return identity
