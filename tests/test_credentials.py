"""Mini README: Tests for the bcrypt credential store and secret validation.

Low bcrypt rounds keep the suite fast; behaviour is identical to production.
"""

from __future__ import annotations

import json
import os

import pytest

from fundwise.auth import CredentialStore, ValidationFailure, validate_new_secret
from fundwise.ledger import PersistenceError


@pytest.fixture()
def store() -> CredentialStore:
    return CredentialStore(hash_rounds=4)


def test_default_login_is_case_insensitive_on_username(store: CredentialStore) -> None:
    """The seeded admin logs in regardless of username casing."""

    result = store.login("ADMIN", "admin123")

    assert result.success is True
    assert result.username == "admin"


def test_failed_login_reports_error_and_allows_retry(store: CredentialStore) -> None:
    """Bad credentials return a message; later correct attempts still succeed."""

    for _ in range(5):
        failed = store.login("admin", "wrong")
        assert failed.success is False
        assert failed.error == "Invalid credentials"
    assert store.login("admin", "admin123").success is True


def test_update_admin_password_requires_current(store: CredentialStore) -> None:
    """The password only changes when the current one is supplied."""

    assert store.update_admin_password("nope", "s3cret").success is False
    assert store.update_admin_password("admin123", "s3cret").success is True
    assert store.login("admin", "admin123").success is False
    assert store.login("admin", "s3cret").success is True


def test_collection_key_verification_and_rotation(store: CredentialStore) -> None:
    """The passkey verifies, and rotating it needs the admin password."""

    assert store.verify_collection_key("fund1234").success is True
    assert store.verify_collection_key("guess").success is False

    rejected = store.update_collection_key("wrong", "newkey")
    assert rejected.success is False
    assert rejected.error == "Admin verification failed"

    assert store.update_collection_key("admin123", "newkey").success is True
    assert store.verify_collection_key("fund1234").success is False
    assert store.verify_collection_key("newkey").success is True


def test_validate_new_secret_rules() -> None:
    """Short secrets and mismatched confirmations are rejected before any lookup."""

    validate_new_secret("abcd", "abcd")
    with pytest.raises(ValidationFailure, match="at least 4"):
        validate_new_secret("abc")
    with pytest.raises(ValidationFailure, match="do not match"):
        validate_new_secret("abcd", "abce")
    with pytest.raises(ValidationFailure):
        validate_new_secret("x" * 73)


def test_store_persists_hashes_only(tmp_path) -> None:
    """Credentials written to disk contain bcrypt hashes and reload intact."""

    path = tmp_path / "credentials.json"
    CredentialStore(path, hash_rounds=4).update_collection_key("admin123", "rotated")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert "admin123" not in path.read_text(encoding="utf-8")
    assert payload["passwordHash"].startswith("$2")

    reloaded = CredentialStore(path, default_collection_key="ignored", hash_rounds=4)
    assert reloaded.verify_collection_key("rotated").success is True
    assert reloaded.login("admin", "admin123").success is True


def test_failed_credential_write_keeps_previous_file(tmp_path, monkeypatch) -> None:
    """An interrupted rotation leaves the old credential file whole and loadable."""

    path = tmp_path / "credentials.json"
    store = CredentialStore(path, hash_rounds=4)
    before = path.read_text(encoding="utf-8")

    def refuse(*args: object, **kwargs: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", refuse)
    with pytest.raises(PersistenceError):
        store.update_admin_password("admin123", "better-pass")
    monkeypatch.undo()

    assert path.read_text(encoding="utf-8") == before
    assert list(tmp_path.glob(".credentials-*")) == []
    assert store.login("admin", "admin123").success is True
    assert CredentialStore(path, hash_rounds=4).login("admin", "admin123").success is True
