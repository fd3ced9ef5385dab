from __future__ import annotations

from unittest import mock

import pytest

from taskhub.security.passwords import PasswordHasher


@pytest.fixture(scope="module")
def hasher() -> PasswordHasher:
    return PasswordHasher()


def test_hash_is_salted_per_call(hasher: PasswordHasher):
    first = hasher.hash("correct horse")
    second = hasher.hash("correct horse")

    assert first != second
    assert "correct horse" not in first
    assert first.startswith("$pbkdf2-sha256$")


def test_verify_accepts_only_the_original_password(hasher: PasswordHasher):
    stored = hasher.hash("correct horse")

    assert hasher.verify("correct horse", stored)
    assert not hasher.verify("correct horsE", stored)
    assert not hasher.verify("", stored)


def test_verify_rejects_unrecognised_hashes(hasher: PasswordHasher):
    assert not hasher.verify("anything", "")
    assert not hasher.verify("anything", "plain-text-not-a-hash")


def test_empty_password_cannot_be_hashed(hasher: PasswordHasher):
    with pytest.raises(ValueError):
        hasher.hash("")


def test_burn_runs_without_a_stored_hash(hasher: PasswordHasher):
    hasher.burn("whatever")
    hasher.burn("")


def test_burn_never_hashes_on_the_login_path():
    hasher = PasswordHasher()

    with mock.patch.object(hasher._context, "hash") as hash_call:
        hasher.burn("first-unknown-email")

    hash_call.assert_not_called()
