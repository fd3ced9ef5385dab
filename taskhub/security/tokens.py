"""Issuing and validating signed, time-bounded identity tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from ..clock import Clock, utcnow
from ..domain.account import Account, Role
from ..domain.errors import InvalidTokenError

_JWT_ALG = "HS256"
_REQUIRED_CLAIMS = ["sub", "role", "iat", "exp", "iss"]


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    expires_in: int
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenClaims:
    account_id: str
    role: Role
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """Sign and verify account tokens with a process-wide HS256 secret.

    Expiry is checked against the injected clock rather than PyJWT's own, so
    issuing and validating always agree on "now".
    """

    def __init__(
        self,
        *,
        secret: str,
        issuer: str,
        ttl_seconds: int,
        clock: Clock = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("jwt secret must not be empty")
        if ttl_seconds <= 0:
            raise ValueError("token ttl must be positive")
        self._secret = secret
        self._issuer = issuer
        self._ttl = ttl_seconds
        self._clock = clock

    def issue(self, account: Account) -> IssuedToken:
        """Create a token binding the account id and role.

        Parameters
        ----------
        account:
            Account the token proves; its ``account_id`` becomes the ``sub`` claim.

        Returns
        -------
        IssuedToken
            The encoded JWT together with its lifetime.
        """
        now = self._clock()
        expires_at = now + timedelta(seconds=self._ttl)
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": account.account_id,
            "role": account.role.value,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=_JWT_ALG)
        return IssuedToken(token=token, expires_in=self._ttl, expires_at=expires_at)

    def validate(self, token: str) -> TokenClaims:
        """Verify signature, issuer and expiry and return the bound claims.

        Raises
        ------
        InvalidTokenError
            For malformed, unsigned, foreign, or expired tokens.
        """
        if not token:
            raise InvalidTokenError("token blank")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_JWT_ALG],
                issuer=self._issuer,
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(f"token rejected: {exc.__class__.__name__}") from exc

        try:
            account_id = str(payload["sub"])
            role = Role(payload["role"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("token claims malformed") from exc

        if not account_id:
            raise InvalidTokenError("token subject blank")
        if self._clock() >= expires_at:
            raise InvalidTokenError("token expired")
        return TokenClaims(
            account_id=account_id,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )
