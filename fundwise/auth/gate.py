"""Mini README: Access gate deciding who may see the collection ledger.

Structure:
    * AuthResult - outcome of a credential check (success flag plus message).
    * AccessContext - immutable authentication state with explicit
      transitions (login, logout, unlock, reload).
    * SessionRegistry - server-side admin sessions keyed by opaque tokens.

The admin session survives reloads (its token lives in a persistent cookie).
A passkey unlock never does: it is granted for the request that presented
the key and ``reload`` drops it.
"""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass, replace
from typing import Dict, Optional

from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AuthResult:
    success: bool
    username: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, username: Optional[str] = None) -> "AuthResult":
        return cls(success=True, username=username)

    @classmethod
    def failed(cls, error: str) -> "AuthResult":
        return cls(success=False, error=error)

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"success": self.success}
        if self.username is not None:
            payload["username"] = self.username
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True, slots=True)
class AccessContext:
    """Two-tier authorization state for one viewer."""

    is_admin_session: bool = False
    is_collection_unlocked: bool = False
    username: Optional[str] = None

    @property
    def can_view_collections(self) -> bool:
        return self.is_admin_session or self.is_collection_unlocked

    def login(self, username: str) -> "AccessContext":
        return replace(self, is_admin_session=True, username=username)

    def logout(self) -> "AccessContext":
        return replace(self, is_admin_session=False, username=None)

    def unlock_collections(self) -> "AccessContext":
        return replace(self, is_collection_unlocked=True)

    def reload(self) -> "AccessContext":
        """State after a page reload: only the admin session is persisted."""

        return replace(self, is_collection_unlocked=False)


class SessionRegistry:
    """Map opaque session tokens to admin usernames."""

    def __init__(self) -> None:
        self._sessions: Dict[str, str] = {}
        self._lock = threading.Lock()

    def issue(self, username: str) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._sessions[token] = username
        LOGGER.info("Admin session opened for %s", username)
        return token

    def resolve(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        with self._lock:
            return self._sessions.get(token)

    def revoke(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            username = self._sessions.pop(token, None)
        if username is not None:
            LOGGER.info("Admin session closed for %s", username)

    def context_for(self, token: Optional[str]) -> AccessContext:
        """Build the access context carried by a session cookie."""

        username = self.resolve(token)
        if username is None:
            return AccessContext()
        return AccessContext().login(username)
