from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional

from ...domain.codes import CodePolicy, generate_code, is_expired, utcnow
from ...domain.errors import AuthError, AuthErrorKind, StoreError, UniquenessViolation
from ...domain.models import User, UserStatus
from ...domain.ports.notifications import TwoFactorSender, VerificationEmailSender
from ...domain.ports.persistence import UserRepository
from ...domain.ports.security import PasswordHasher, TokenIssuer
from ...domain.validation import (
    all_present,
    has_code_length,
    is_strong_password,
    is_valid_email,
    normalize_email,
)

logger = logging.getLogger(__name__)

# Whether a failed notification after a store mutation undoes that mutation.
# Only sign-up rolls back: the account did not exist before the request.
COMPENSATION_POLICY: Dict[str, bool] = {
    "sign_up": True,
    "resend_verification_code": False,
    "sign_in": False,
}


@dataclass(slots=True)
class SignUpResult:
    user_id: int
    email: str


class AccountService:
    """Registration, email verification and two-step sign-in for user accounts."""

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        email_sender: VerificationEmailSender,
        two_factor_sender: TwoFactorSender,
        policy: Optional[CodePolicy] = None,
        code_generator: Callable[[], str] = generate_code,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._tokens = tokens
        self._email = email_sender
        self._sms = two_factor_sender
        self._policy = policy or CodePolicy()
        self._generate_code = code_generator
        self._now = clock

    # ------------------------------------------------------------------
    def sign_up(self, fullname: Optional[str], email: Optional[str], password: Optional[str]) -> SignUpResult:
        email_clean = normalize_email(email)
        if not all_present(fullname, email_clean, password):
            raise AuthError(
                AuthErrorKind.MISSING_FIELDS,
                "All required fields: fullname, email and password.",
            )
        if not is_valid_email(email_clean):
            raise AuthError(AuthErrorKind.INVALID_EMAIL)
        if not is_strong_password(password):
            raise AuthError(AuthErrorKind.WEAK_PASSWORD)

        try:
            if self._users.find_by_email(email_clean):
                raise AuthError(AuthErrorKind.DUPLICATE_EMAIL)
            code = self._generate_code()
            user = self._users.create_user(
                fullname=fullname,
                email=email_clean,
                password_hash=self._hasher.hash(password),
                status=UserStatus.PENDING,
                verification_code=code,
                verification_code_expires=self._policy.verification_expiry(self._now()),
            )
        except UniquenessViolation as exc:
            # Lost a race against a concurrent sign-up for the same email.
            raise AuthError(AuthErrorKind.DUPLICATE_EMAIL, detail=str(exc)) from exc
        except StoreError as exc:
            logger.exception("Unable to create account for %s", email_clean)
            raise AuthError(
                AuthErrorKind.PERSISTENCE_FAILURE, "User was not created.", detail=str(exc)
            ) from exc

        if not self._email.send_verification_email(user.email, code, user.fullname):
            self._compensate("sign_up", user)
            raise AuthError(
                AuthErrorKind.NOTIFICATION_FAILED,
                "Failed to send verification email. Please try again later.",
            )

        logger.info("Created pending account %s", user.id)
        return SignUpResult(user_id=user.id, email=user.email)

    def verify_email(self, email: Optional[str], code: Optional[str]) -> str:
        email_clean = normalize_email(email)
        if not all_present(email_clean, code):
            raise AuthError(
                AuthErrorKind.MISSING_FIELDS, "Email and verification code are required."
            )
        try:
            user = self._users.find_by_email(email_clean)
            if not user:
                raise AuthError(AuthErrorKind.NOT_FOUND)
            if user.is_active:
                raise AuthError(AuthErrorKind.ALREADY_VERIFIED)
            if is_expired(self._now(), user.verification_code_expires):
                raise AuthError(AuthErrorKind.CODE_EXPIRED)
            if user.verification_code != code:
                raise AuthError(AuthErrorKind.INVALID_CODE)

            self._users.update_user(
                user.id,
                status=UserStatus.ACTIVE,
                verification_code=None,
                verification_code_expires=None,
            )
        except StoreError as exc:
            logger.exception("Error during verification")
            raise AuthError(
                AuthErrorKind.PERSISTENCE_FAILURE, "Verification failed.", detail=str(exc)
            ) from exc

        logger.info("Account %s verified", user.id)
        return self._tokens.sign({"id": user.id}, self._policy.token_ttl)

    def resend_verification_code(self, email: Optional[str]) -> None:
        email_clean = normalize_email(email)
        if not email_clean:
            raise AuthError(AuthErrorKind.MISSING_EMAIL)
        try:
            user = self._users.find_by_email(email_clean)
            if not user:
                raise AuthError(AuthErrorKind.NOT_FOUND)
            if user.is_active:
                raise AuthError(AuthErrorKind.ALREADY_VERIFIED)

            code = self._generate_code()
            user = self._users.update_user(
                user.id,
                verification_code=code,
                verification_code_expires=self._policy.verification_expiry(self._now()),
            )
        except StoreError as exc:
            logger.exception("Error resending code")
            raise AuthError(
                AuthErrorKind.PERSISTENCE_FAILURE,
                "Failed to resend verification code.",
                detail=str(exc),
            ) from exc

        if not self._email.send_verification_email(user.email, code, user.fullname):
            self._compensate("resend_verification_code", user)
            raise AuthError(
                AuthErrorKind.NOTIFICATION_FAILED,
                "Failed to send verification email. Please try again later.",
            )

    def sign_in(self, email: Optional[str], password: Optional[str]) -> None:
        """Check the password and issue a two-factor challenge.

        No token is returned here; the login completes in
        :meth:`confirm_second_factor`.
        """
        email_clean = normalize_email(email)
        if not all_present(email_clean, password):
            raise AuthError(AuthErrorKind.MISSING_FIELDS, "Both fields are required.")
        if not is_valid_email(email_clean):
            raise AuthError(AuthErrorKind.INVALID_EMAIL)

        try:
            user = self._users.find_by_email(email_clean)
            if not user:
                raise AuthError(AuthErrorKind.NOT_FOUND)
            if not self._hasher.verify(password, user.password_hash):
                raise AuthError(AuthErrorKind.PASSWORD_MISMATCH)

            code = self._generate_code()
            user = self._users.update_user(
                user.id,
                two_factor_code=code,
                two_factor_code_expires=self._policy.two_factor_expiry(self._now()),
            )
            sent = self._sms.send_two_factor_code(code, user)
        except StoreError as exc:
            logger.exception("Login failed for %s", email_clean)
            raise AuthError(AuthErrorKind.LOGIN_FAILED, detail=str(exc)) from exc

        if not sent:
            self._compensate("sign_in", user)
            raise AuthError(AuthErrorKind.LOGIN_FAILED, detail="two-factor code delivery failed")
        logger.info("Two-factor challenge issued for account %s", user.id)

    def confirm_second_factor(self, email: Optional[str], code: Optional[str]) -> str:
        # The length rule runs before the presence rule: a missing code is
        # reported as a length error.
        if not has_code_length(code):
            raise AuthError(AuthErrorKind.INVALID_CODE_LENGTH)
        email_clean = normalize_email(email)
        if not all_present(email_clean, code):
            raise AuthError(AuthErrorKind.MISSING_FIELDS, "Email and code are required.")

        try:
            user = self._users.find_by_email(email_clean)
            if not user:
                raise AuthError(AuthErrorKind.NOT_FOUND)

            now = self._now()
            expires = user.two_factor_code_expires
            if user.two_factor_code != code or expires is None or not now < expires:
                raise AuthError(AuthErrorKind.INVALID_OR_EXPIRED_CODE)

            # Consume the challenge so the same code cannot be replayed.
            self._users.update_user(user.id, two_factor_code=None, two_factor_code_expires=None)
        except StoreError as exc:
            logger.exception("2FA verification error")
            raise AuthError(AuthErrorKind.INTERNAL_ERROR, detail=str(exc)) from exc

        logger.info("Account %s signed in", user.id)
        return self._tokens.sign({"id": user.id, "email": user.email}, self._policy.token_ttl)

    # ------------------------------------------------------------------
    def _compensate(self, operation: str, user: User) -> None:
        if not COMPENSATION_POLICY[operation]:
            logger.warning("Notification failed during %s for account %s", operation, user.id)
            return
        logger.warning("Notification failed during %s; removing account %s", operation, user.id)
        try:
            self._users.delete_user(user.id)
        except StoreError:
            logger.warning("Compensating delete failed for account %s", user.id, exc_info=True)
