"""Mini README: Admin password and collection passkey storage.

Structure:
    * ValidationFailure - a new secret broke the length/confirmation rules.
    * validate_new_secret - checks a new password or passkey before any lookup.
    * CredentialStore - bcrypt-hashed admin login and collection passkey with
      optional JSON persistence.

Both secrets are checked in a single comparison each; there is no lockout,
back-off or expiry, and callers may retry as often as they like. The store
seeds a default admin and a default passkey on first run and warns that they
must be rotated.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Optional

import bcrypt

from ..ledger.errors import PersistenceError
from ..ledger.repository import write_json_atomically
from ..logging_utils import get_logger
from .gate import AuthResult

LOGGER = get_logger(__name__)

MIN_SECRET_LENGTH = 4
# bcrypt only considers the first 72 bytes of a secret.
MAX_SECRET_BYTES = 72


class ValidationFailure(ValueError):
    """A new secret was rejected before contacting the credential store."""


def validate_new_secret(new: str, confirm: Optional[str] = None, *, label: str = "Password") -> None:
    """Enforce the minimum length and, when given, the matching confirmation."""

    if len(new) < MIN_SECRET_LENGTH:
        raise ValidationFailure(f"{label} must be at least {MIN_SECRET_LENGTH} characters.")
    if len(new.encode("utf-8")) > MAX_SECRET_BYTES:
        raise ValidationFailure(f"{label} must be at most {MAX_SECRET_BYTES} bytes.")
    if confirm is not None and new != confirm:
        raise ValidationFailure(f"{label}s do not match.")


class CredentialStore:
    """Hold the admin login and the collection passkey as salted hashes."""

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        default_username: str = "admin",
        default_password: str = "admin123",
        default_collection_key: str = "fund1234",
        hash_rounds: int = 12,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self._rounds = hash_rounds
        self._lock = threading.Lock()
        if self.path is not None and self.path.exists():
            self._load()
        else:
            self._username = default_username
            self._password_hash = self._hash(default_password)
            self._collection_key_hash = self._hash(default_collection_key)
            self._save()
            LOGGER.warning(
                "Seeded default admin '%s' and default collection passkey; rotate both before going live",
                default_username,
            )

    # ------------------------------------------------------------------
    # Hashing and persistence
    # ------------------------------------------------------------------

    def _hash(self, secret: str) -> str:
        return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    @staticmethod
    def _matches(secret: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Over-long or malformed input never matches.
            return False

    def _load(self) -> None:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            self._username = payload["username"]
            self._password_hash = payload["passwordHash"]
            self._collection_key_hash = payload["collectionKeyHash"]
        except (OSError, json.JSONDecodeError, KeyError) as error:
            raise PersistenceError(f"Could not read credential file {self.path}") from error
        LOGGER.debug("Loaded credentials for admin '%s'", self._username)

    def _save(self) -> None:
        if self.path is None:
            return
        payload = {
            "username": self._username,
            "passwordHash": self._password_hash,
            "collectionKeyHash": self._collection_key_hash,
        }
        write_json_atomically(self.path, payload, label="credential")

    # ------------------------------------------------------------------
    # Credential checks
    # ------------------------------------------------------------------

    @property
    def username(self) -> str:
        return self._username

    def login(self, username: str, password: str) -> AuthResult:
        """Check the admin login; the username comparison ignores case."""

        if username.strip().lower() == self._username.lower() and self._matches(password, self._password_hash):
            LOGGER.info("Admin '%s' logged in", self._username)
            return AuthResult.ok(self._username)
        LOGGER.warning("Rejected login attempt for '%s'", username)
        return AuthResult.failed("Invalid credentials")

    def update_admin_password(self, current_password: str, new_password: str) -> AuthResult:
        validate_new_secret(new_password)
        with self._lock:
            if not self._matches(current_password, self._password_hash):
                LOGGER.warning("Admin password change rejected: current password incorrect")
                return AuthResult.failed("Current password incorrect")
            previous = self._password_hash
            self._password_hash = self._hash(new_password)
            try:
                self._save()
            except PersistenceError:
                self._password_hash = previous
                raise
        LOGGER.info("Admin password updated")
        return AuthResult.ok()

    def verify_collection_key(self, key: str) -> AuthResult:
        if self._matches(key, self._collection_key_hash):
            LOGGER.debug("Collection passkey accepted")
            return AuthResult.ok()
        LOGGER.warning("Collection passkey rejected")
        return AuthResult.failed("Invalid passkey")

    def update_collection_key(self, admin_password: str, new_key: str) -> AuthResult:
        validate_new_secret(new_key, label="Passkey")
        with self._lock:
            if not self._matches(admin_password, self._password_hash):
                LOGGER.warning("Collection passkey change rejected: admin verification failed")
                return AuthResult.failed("Admin verification failed")
            previous = self._collection_key_hash
            self._collection_key_hash = self._hash(new_key)
            try:
                self._save()
            except PersistenceError:
                self._collection_key_hash = previous
                raise
        LOGGER.info("Collection passkey updated")
        return AuthResult.ok()
