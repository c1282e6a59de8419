from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from ...domain.models import Department, Municipality
from ...domain.ports.persistence import GeographyRepository

logger = logging.getLogger(__name__)

DEPARTMENT_CODE = "CÓDIGO DANE DEL DEPARTAMENTO"
MUNICIPALITY_CODE = "CÓDIGO DANE DEL MUNICIPIO"
DEPARTMENT_NAME = "DEPARTAMENTO"
MUNICIPALITY_NAME = "MUNICIPIO"
REGION = "REGION"

REQUIRED_COLUMNS = (DEPARTMENT_CODE, MUNICIPALITY_CODE, DEPARTMENT_NAME, MUNICIPALITY_NAME, REGION)


@dataclass(slots=True)
class ImportReport:
    total_rows: int = 0
    logs: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {"totalFilas": self.total_rows, "logs": list(self.logs)}


class GeographyService:
    """Imports DANE departments and municipalities and lists them back."""

    def __init__(self, repository: GeographyRepository) -> None:
        self._repository = repository

    # ------------------------------------------------------------------
    def import_csv(self, content: bytes) -> ImportReport:
        """Decode an uploaded CSV file and import its rows.

        Raises ``ValueError`` when the payload is not UTF-8 text.
        """
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValueError("El archivo debe estar codificado en UTF-8.") from exc
        reader = csv.DictReader(io.StringIO(text, newline=""))
        return self.import_rows(reader)

    def import_rows(self, rows: Iterable[Mapping[str, Any]]) -> ImportReport:
        report = ImportReport()
        for index, raw in enumerate(rows, start=1):
            report.total_rows += 1
            row = {
                (key or "").strip(): value.strip()
                for key, value in raw.items()
                if isinstance(value, str)
            }
            if not all(row.get(column) for column in REQUIRED_COLUMNS):
                report.logs.append(f"Fila {index}: Datos incompletos. Se omite esta fila.")
                continue
            try:
                self._import_row(index, row, report)
            except Exception as exc:
                # One bad row must not abort the whole upload.
                logger.warning("Row %s failed during geography import: %s", index, exc)
                report.logs.append(f"Fila {index}: Error procesando datos - {exc}")
        logger.info("Geography import processed %s rows", report.total_rows)
        return report

    def list_departments(self) -> List[Department]:
        return self._repository.list_departments()

    def list_municipalities(self) -> List[Municipality]:
        return self._repository.list_municipalities()

    # ------------------------------------------------------------------
    def _import_row(self, index: int, row: Dict[str, str], report: ImportReport) -> None:
        department = self._repository.get_department_by_code(row[DEPARTMENT_CODE])
        if department is None:
            department = self._repository.create_department(
                region=row[REGION],
                dane_code=row[DEPARTMENT_CODE],
                name=row[DEPARTMENT_NAME],
            )
            report.logs.append(f"Fila {index}: Departamento '{row[DEPARTMENT_NAME]}' subido exitosamente.")
        else:
            report.logs.append(
                f"Fila {index}: Departamento '{row[DEPARTMENT_NAME]}' ya existe, se omite su subida."
            )

        municipality = self._repository.get_municipality_by_code(row[MUNICIPALITY_CODE])
        if municipality is None:
            self._repository.create_municipality(
                dane_code=row[MUNICIPALITY_CODE],
                name=row[MUNICIPALITY_NAME],
                department_id=department.id,
            )
            report.logs.append(f"Fila {index}: Municipio '{row[MUNICIPALITY_NAME]}' subido exitosamente.")
        else:
            report.logs.append(
                f"Fila {index}: Municipio '{row[MUNICIPALITY_NAME]}' ya existe, se omite su subida."
            )
