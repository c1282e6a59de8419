"""One-time code issuance and expiry policy."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

CODE_LENGTH = 6
_CODE_MIN = 100_000
_CODE_MAX = 999_999


def generate_code() -> str:
    """Return a 6-digit numeric code drawn uniformly from [100000, 999999]."""
    return str(_CODE_MIN + secrets.randbelow(_CODE_MAX - _CODE_MIN + 1))


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class CodePolicy:
    """Lifetimes of the challenges and tokens issued by the account workflows."""

    verification_ttl: timedelta = timedelta(minutes=15)
    two_factor_ttl: timedelta = timedelta(minutes=5)
    token_ttl: timedelta = timedelta(hours=2)

    def verification_expiry(self, now: datetime) -> datetime:
        return now + self.verification_ttl

    def two_factor_expiry(self, now: datetime) -> datetime:
        return now + self.two_factor_ttl


def is_expired(now: datetime, expires_at: Optional[datetime]) -> bool:
    # A challenge without an expiry instant is never valid.
    if expires_at is None:
        return True
    return now > expires_at
