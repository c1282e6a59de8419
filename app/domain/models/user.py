"""User domain model for account registration and authentication."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class UserStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"


class UserRole(str, Enum):
    USER = "USER"
    SUPERADMIN = "SUPERADMIN"


class User:
    """
    User entity holding the account lifecycle and its outstanding challenges.

    Attributes:
        id: Unique identifier
        fullname: Display name given at sign-up
        email: Normalized email address (unique)
        password_hash: One-way hash of the password
        status: PENDING until the email verification completes, then ACTIVE
        role: USER or SUPERADMIN
        verification_code: Outstanding email verification code, if any
        verification_code_expires: Expiration instant of the verification code
        two_factor_code: Outstanding sign-in code, if any
        two_factor_code_expires: Expiration instant of the sign-in code
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        id: int,
        fullname: str,
        email: str,
        password_hash: str,
        status: UserStatus = UserStatus.PENDING,
        role: UserRole = UserRole.USER,
        verification_code: Optional[str] = None,
        verification_code_expires: Optional[datetime] = None,
        two_factor_code: Optional[str] = None,
        two_factor_code_expires: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.fullname = fullname
        self.email = email
        self.password_hash = password_hash
        self.status = UserStatus(status)
        self.role = UserRole(role)
        self.verification_code = verification_code
        self.verification_code_expires = verification_code_expires
        self.two_factor_code = two_factor_code
        self.two_factor_code_expires = two_factor_code_expires
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or datetime.now(timezone.utc)

    @property
    def is_active(self) -> bool:
        return self.status is UserStatus.ACTIVE

    @property
    def is_superadmin(self) -> bool:
        return self.role is UserRole.SUPERADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} status={self.status.value} role={self.role.value}>"
