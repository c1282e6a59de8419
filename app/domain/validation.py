"""Input rules applied before any store access."""

from __future__ import annotations

import re
from typing import Optional

from .codes import CODE_LENGTH

MIN_PASSWORD_LENGTH = 6

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: Optional[str]) -> str:
    """Lower-case and trim an email. ``None`` normalizes to an empty string."""
    if not email:
        return ""
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email))


def is_strong_password(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH


def has_code_length(code: Optional[str]) -> bool:
    return len(code or "") == CODE_LENGTH


def all_present(*values: Optional[str]) -> bool:
    return all(values)
