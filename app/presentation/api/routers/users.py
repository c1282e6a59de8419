from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ....application.services.user_directory_service import UserDirectoryService
from ....core.dependencies import get_user_directory_service
from ....domain.errors import StoreError
from ....domain.models import User
from ..dependencies import require_superadmin
from ..schemas.user_schemas import UserResponse

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
def list_users(
    directory: UserDirectoryService = Depends(get_user_directory_service),
    _: User = Depends(require_superadmin),
) -> List[dict]:
    try:
        return directory.list_users()
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error getting users"
        ) from exc


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    directory: UserDirectoryService = Depends(get_user_directory_service),
    _: User = Depends(require_superadmin),
) -> dict:
    try:
        user = directory.get_user(user_id)
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error getting user"
        ) from exc
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
