"""Service for signing and decoding bearer tokens."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from app.domain.ports.security import InvalidTokenError


class JwtTokenIssuer:
    """Issues HS256 JWTs carrying the account claims."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise RuntimeError("JWT_SECRET is not configured.")
        self.secret = secret
        self.algorithm = algorithm

    def sign(self, claims: Dict[str, Any], expires_in: timedelta) -> str:
        """
        Create a signed token.

        Args:
            claims: Claims to embed (for example ``{"id": 1}``)
            expires_in: Validity window starting now

        Returns:
            JWT token string
        """
        now = datetime.now(tz=timezone.utc)
        payload = {**claims, "iat": now, "exp": now + expires_in}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("Invalid token") from exc
