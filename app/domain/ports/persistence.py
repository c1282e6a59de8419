from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Protocol

from ..models import Department, Municipality, User, UserRole, UserStatus


class UserRepository(Protocol):
    """Abstract credential store for user accounts.

    Implementations raise ``UniquenessViolation`` when ``create`` would
    duplicate an email and ``StoreError`` for any other failure.
    """

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    def list_users(self) -> List[User]:
        ...

    def create_user(
        self,
        *,
        fullname: str,
        email: str,
        password_hash: str,
        status: UserStatus,
        role: UserRole = UserRole.USER,
        verification_code: Optional[str] = None,
        verification_code_expires: Optional[datetime] = None,
    ) -> User:
        ...

    def update_user(self, user_id: int, **fields: Any) -> User:
        ...

    def delete_user(self, user_id: int) -> None:
        ...


class GeographyRepository(Protocol):
    """Persistence functions for departments and municipalities."""

    def get_department_by_code(self, dane_code: str) -> Optional[Department]:
        ...

    def create_department(self, region: str, dane_code: str, name: str) -> Department:
        ...

    def list_departments(self) -> List[Department]:
        ...

    def get_municipality_by_code(self, dane_code: str) -> Optional[Municipality]:
        ...

    def create_municipality(self, dane_code: str, name: str, department_id: int) -> Municipality:
        ...

    def list_municipalities(self) -> List[Municipality]:
        ...


class PersistenceGateway(UserRepository, GeographyRepository, Protocol):
    """Composite gateway combining every persistence concern used by the app."""

    pass
