"""Domain models for the accounts backend."""

from .geography import Department, Municipality
from .user import User, UserRole, UserStatus

__all__ = [
    "Department",
    "Municipality",
    "User",
    "UserRole",
    "UserStatus",
]
