"""Salted one-way password hashing backed by passlib."""

from __future__ import annotations

from passlib.context import CryptContext


class PasswordHasher:
    """Hash and verify passwords with a per-call random salt.

    The salt and round count are embedded in the returned string, so ``verify``
    needs nothing but the stored hash.
    """

    def __init__(self, schemes: list[str] | None = None, **context_options: object) -> None:
        self._context = CryptContext(schemes=schemes or ["pbkdf2_sha256"], deprecated="auto", **context_options)
        self._dummy_hash = self._context.hash("taskhub-missing-account")

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("password must not be empty")
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            return False

    def burn(self, password: str) -> None:
        """Spend the same work as ``verify`` when there is no stored hash to check."""
        self._context.verify(password or "-", self._dummy_hash)
