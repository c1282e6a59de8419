from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, status

from ...domain.errors import StoreError, UniquenessViolation
from ...domain.models import User, UserRole, UserStatus
from ...domain.ports.persistence import UserRepository
from ...domain.ports.security import InvalidTokenError, PasswordHasher, TokenIssuer
from ...domain.validation import normalize_email

logger = logging.getLogger(__name__)


class AccessService:
    """Resolves bearer tokens to accounts and enforces the SUPERADMIN role."""

    def __init__(self, users: UserRepository, tokens: TokenIssuer, hasher: PasswordHasher) -> None:
        self._users = users
        self._tokens = tokens
        self._hasher = hasher

    # ------------------------------------------------------------------
    def ensure_default_superadmin(self, email: Optional[str], password: Optional[str]) -> Optional[User]:
        if not email or not password:
            return None
        email_clean = normalize_email(email)
        existing = self._users.find_by_email(email_clean)
        if existing:
            return existing
        logger.info("Creating default superadmin account for %s", email_clean)
        try:
            return self._users.create_user(
                fullname="Superadmin",
                email=email_clean,
                password_hash=self._hasher.hash(password),
                status=UserStatus.ACTIVE,
                role=UserRole.SUPERADMIN,
            )
        except UniquenessViolation:
            return self._users.find_by_email(email_clean)

    def authenticate(self, token: str) -> User:
        try:
            payload = self._tokens.decode(token)
        except InvalidTokenError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token"
            ) from exc
        user_id = payload.get("id")
        if not isinstance(user_id, int):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
        try:
            user = self._users.find_by_id(user_id)
        except StoreError as exc:
            logger.exception("Unable to load account %s", user_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error"
            ) from exc
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    def require_superadmin(self, token: str) -> User:
        user = self.authenticate(token)
        if not user.is_superadmin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access restricted: only SUPERADMIN users can access this route",
            )
        return user
