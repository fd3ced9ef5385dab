"""Account service orchestrating credentials, token issuance and account lifecycle."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from .account import Account, Role, normalize_email
from .contracts import NewAccount, ProfileUpdate, RegisterInput
from .errors import (
    InvalidAdminCodeError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    SelfTargetError,
    UnknownAccountError,
)
from .guards import require_role
from .statistics import Statistics, aggregate_statistics
from ..metrics import ACCOUNTS_DELETED, AUTH_FAILURES, REGISTRATIONS
from ..repository import AccountRepository, TaskRepository
from ..security.passwords import PasswordHasher
from ..security.tokens import IssuedToken, TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthResult:
    """Account plus the bearer token handed back after register/login."""

    account: Account
    token: IssuedToken


class AccountService:
    """Account workflows backed by the credential store.

    ``admin_code`` is the elevation secret; when it is empty no account can be
    registered with the admin role.
    """

    def __init__(
        self,
        accounts: AccountRepository,
        tasks: TaskRepository,
        *,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        admin_code: str = "",
    ) -> None:
        self._accounts = accounts
        self._tasks = tasks
        self._hasher = hasher
        self._tokens = tokens
        self._admin_code = admin_code

    def _admin_code_matches(self, supplied: str | None) -> bool:
        if not self._admin_code or not supplied:
            return False
        return secrets.compare_digest(supplied.encode("utf-8"), self._admin_code.encode("utf-8"))

    def register(self, payload: RegisterInput) -> AuthResult:
        """Create an account and issue its first token.

        The admin code is checked before anything is hashed or written, so a
        refused elevation never leaves an account behind.
        """
        if payload.role is Role.admin and not self._admin_code_matches(payload.admin_code):
            logger.warning("admin registration refused: invalid admin code")
            raise InvalidAdminCodeError()

        account = self._accounts.create_account(
            NewAccount(
                name=payload.name.strip(),
                email=normalize_email(payload.email),
                password_hash=self._hasher.hash(payload.password),
                role=payload.role,
            )
        )
        REGISTRATIONS.labels(role=account.role.value).inc()
        logger.info("registered account %s with role %s", account.account_id, account.role.value)
        return AuthResult(account=account, token=self._tokens.issue(account))

    def login(self, email: str, password: str) -> AuthResult:
        stored = self._accounts.find_by_email(normalize_email(email))
        if stored is None:
            self._hasher.burn(password)
            AUTH_FAILURES.labels(reason="credentials").inc()
            raise InvalidCredentialsError("unknown email")
        if not self._hasher.verify(password, stored.password_hash):
            AUTH_FAILURES.labels(reason="credentials").inc()
            raise InvalidCredentialsError("password mismatch")
        return AuthResult(account=stored.account, token=self._tokens.issue(stored.account))

    def resolve(self, token: str | None) -> Account:
        """Turn a bearer token into the identity of the account it names.

        Raises ``InvalidTokenError`` for bad tokens and ``UnknownAccountError``
        when the account is gone; both are authentication failures to callers.
        """
        if not token:
            AUTH_FAILURES.labels(reason="missing").inc()
            raise InvalidTokenError("missing bearer token")
        try:
            claims = self._tokens.validate(token)
        except InvalidTokenError:
            AUTH_FAILURES.labels(reason="invalid").inc()
            raise

        account = self._accounts.find_by_id(claims.account_id)
        if account is None:
            AUTH_FAILURES.labels(reason="unknown_account").inc()
            raise UnknownAccountError(f"account {claims.account_id} no longer exists")
        if account.role is not claims.role:
            AUTH_FAILURES.labels(reason="invalid").inc()
            raise InvalidTokenError("token role does not match account")
        return account

    def update_profile(self, identity: Account, changes: ProfileUpdate) -> Account:
        normalized = ProfileUpdate(
            name=changes.name.strip() if changes.name is not None else None,
            email=normalize_email(changes.email) if changes.email is not None else None,
        )
        account = self._accounts.update_account(identity.account_id, normalized)
        if account is None:
            raise UnknownAccountError(f"account {identity.account_id} no longer exists")
        return account

    def delete_self(self, identity: Account) -> None:
        removed = self._accounts.delete_account(identity.account_id)
        if removed is None:
            raise UnknownAccountError(f"account {identity.account_id} no longer exists")
        ACCOUNTS_DELETED.labels(path="self").inc()
        logger.info("account %s deleted itself with %d tasks", identity.account_id, removed)

    def delete_account_as_admin(self, identity: Account, account_id: str) -> None:
        """Delete another account and its tasks; admins cannot target themselves."""
        require_role(identity, Role.admin)
        if account_id == identity.account_id:
            raise SelfTargetError()
        removed = self._accounts.delete_account(account_id)
        if removed is None:
            raise NotFoundError("User not found")
        ACCOUNTS_DELETED.labels(path="admin").inc()
        logger.info(
            "admin %s deleted account %s with %d tasks", identity.account_id, account_id, removed
        )

    def statistics(self, identity: Account) -> Statistics:
        require_role(identity, Role.admin)
        return aggregate_statistics(self._accounts.list_accounts(), self._tasks.iter_owner_ids())
