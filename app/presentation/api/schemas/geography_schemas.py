from typing import List, Optional

from pydantic import BaseModel


class DepartmentResponse(BaseModel):
    id: int
    region: str
    dane_code: str
    name: str


class MunicipalityResponse(BaseModel):
    id: int
    dane_code: str
    name: str
    department_id: int
    department: Optional[DepartmentResponse] = None


class ImportResponse(BaseModel):
    totalFilas: int
    logs: List[str]
