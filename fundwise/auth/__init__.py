"""Mini README: Authentication and access gating for Fundwise.

Exports the access context and session registry used by the web layer and
the bcrypt-backed credential store for the admin login and the collection
passkey.
"""

from .credentials import CredentialStore, ValidationFailure, validate_new_secret
from .gate import AccessContext, AuthResult, SessionRegistry

__all__ = [
    "AccessContext",
    "AuthResult",
    "CredentialStore",
    "SessionRegistry",
    "ValidationFailure",
    "validate_new_secret",
]
