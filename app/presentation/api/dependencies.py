from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.services.access_service import AccessService
from ...core.dependencies import get_access_service

_bearer_scheme = HTTPBearer(auto_error=False)


def require_superadmin(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    access_service: AccessService = Depends(get_access_service),
):
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization header missing")
    if credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing")
    return access_service.require_superadmin(credentials.credentials)
