"""Authentication wiring: identity rules, sessions and password sign-in."""

from .config import AuthConfig, with_auth
from .passwords import hash_password, verify_password
from .service import PasswordAuthenticator
from .session import SessionConfig, SessionData, build_session


__all__ = [
    "AuthConfig",
    "PasswordAuthenticator",
    "SessionConfig",
    "SessionData",
    "build_session",
    "hash_password",
    "verify_password",
    "with_auth",
]
