from __future__ import annotations

from typing import Any, Dict, List, Optional

from ...domain.models import User
from ...domain.ports.persistence import UserRepository


class UserDirectoryService:
    """Read-only listing of accounts."""

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def list_users(self) -> List[Dict[str, Any]]:
        return [serialize_user(user) for user in self._users.list_users()]

    def get_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        user = self._users.find_by_id(user_id)
        return serialize_user(user) if user else None


def serialize_user(user: User) -> Dict[str, Any]:
    # Hash and outstanding codes stay inside the store.
    return {
        "id": user.id,
        "fullname": user.fullname,
        "email": user.email,
        "status": user.status.value,
        "role": user.role.value,
        "created_at": user.created_at.replace(microsecond=0).isoformat(),
        "updated_at": user.updated_at.replace(microsecond=0).isoformat(),
    }
