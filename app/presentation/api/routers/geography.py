import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from ....application.services.geography_service import GeographyService
from ....core.dependencies import get_geography_service
from ....domain.errors import StoreError
from ....domain.models import Department, Municipality, User
from ..dependencies import require_superadmin
from ..schemas.geography_schemas import DepartmentResponse, ImportResponse, MunicipalityResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/csv", tags=["Geography"])


@router.post("/upload", response_model=ImportResponse)
def upload_csv(
    file: Optional[UploadFile] = File(None),
    geography: GeographyService = Depends(get_geography_service),
    _: User = Depends(require_superadmin),
) -> dict:
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Falta archivo")
    try:
        content = file.file.read()
    finally:
        file.file.close()
    try:
        report = geography.import_csv(content)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return report.as_dict()


@router.get("/departamentos", response_model=List[DepartmentResponse])
def list_departments(
    geography: GeographyService = Depends(get_geography_service),
    _: User = Depends(require_superadmin),
) -> List[dict]:
    try:
        return [_serialize_department(item) for item in geography.list_departments()]
    except StoreError as exc:
        logger.exception("Unable to read departments")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error al leer datos"
        ) from exc


@router.get("/municipios", response_model=List[MunicipalityResponse])
def list_municipalities(
    geography: GeographyService = Depends(get_geography_service),
    _: User = Depends(require_superadmin),
) -> List[dict]:
    try:
        return [_serialize_municipality(item) for item in geography.list_municipalities()]
    except StoreError as exc:
        logger.exception("Unable to read municipalities")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error al leer datos"
        ) from exc


def _serialize_department(department: Department) -> dict:
    return {
        "id": department.id,
        "region": department.region,
        "dane_code": department.dane_code,
        "name": department.name,
    }


def _serialize_municipality(municipality: Municipality) -> dict:
    return {
        "id": municipality.id,
        "dane_code": municipality.dane_code,
        "name": municipality.name,
        "department_id": municipality.department_id,
        "department": _serialize_department(municipality.department) if municipality.department else None,
    }
