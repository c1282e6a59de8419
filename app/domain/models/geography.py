from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class Department:
    id: int
    region: str
    dane_code: str
    name: str


@dataclass(slots=True)
class Municipality:
    id: int
    dane_code: str
    name: str
    department_id: int
    department: Optional[Department] = None
