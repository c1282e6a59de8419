from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Protocol


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, password_hash: str) -> bool:
        ...


class TokenIssuer(Protocol):
    def sign(self, claims: Dict[str, Any], expires_in: timedelta) -> str:
        ...

    def decode(self, token: str) -> Dict[str, Any]:
        """Return the claims of a valid token or raise ``InvalidTokenError``."""
        ...


class InvalidTokenError(Exception):
    """Raised when a bearer token is malformed, tampered with or expired."""
