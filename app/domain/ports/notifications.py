from __future__ import annotations

from typing import Protocol

from ..models import User


class VerificationEmailSender(Protocol):
    """Delivers email verification codes. Failures are reported, never raised."""

    def send_verification_email(self, email: str, code: str, fullname: str) -> bool:
        ...


class TwoFactorSender(Protocol):
    """Delivers sign-in codes. Failures are reported, never raised."""

    def send_two_factor_code(self, code: str, user: User) -> bool:
        ...
