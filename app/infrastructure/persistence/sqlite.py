import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...domain.errors import StoreError, UniquenessViolation
from ...domain.models import Department, Municipality, User, UserRole, UserStatus
from ...domain.ports.persistence import PersistenceGateway

_USER_COLUMNS = frozenset(
    {
        "fullname",
        "email",
        "password_hash",
        "status",
        "role",
        "verification_code",
        "verification_code_expires",
        "two_factor_code",
        "two_factor_code_expires",
    }
)


class SQLitePersistence(PersistenceGateway):
    """SQLite-backed implementation of the persistence gateway."""

    def __init__(self, path: Union[Path, str]) -> None:
        if str(path) != ":memory:":
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    fullname TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'PENDING',
                    role TEXT NOT NULL DEFAULT 'USER',
                    verification_code TEXT,
                    verification_code_expires TEXT,
                    two_factor_code TEXT,
                    two_factor_code_expires TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS departments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    region TEXT NOT NULL,
                    dane_code TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS municipalities (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    dane_code TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    department_id INTEGER NOT NULL,
                    FOREIGN KEY(department_id) REFERENCES departments(id) ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS idx_municipalities_department
                    ON municipalities(department_id);
                """
            )

    def close(self) -> None:
        self._conn.close()

    # UserRepository API -----------------------------------------------------
    def find_by_email(self, email: str) -> Optional[User]:
        row = self._fetchone("SELECT * FROM users WHERE email = ?", (email,))
        return self._row_to_user(row) if row else None

    def find_by_id(self, user_id: int) -> Optional[User]:
        row = self._fetchone("SELECT * FROM users WHERE id = ?", (user_id,))
        return self._row_to_user(row) if row else None

    def list_users(self) -> List[User]:
        try:
            with self._lock:
                rows = self._conn.execute("SELECT * FROM users ORDER BY id").fetchall()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return [self._row_to_user(row) for row in rows]

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
        now = self._now()
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    """
                    INSERT INTO users (
                        fullname, email, password_hash, status, role,
                        verification_code, verification_code_expires,
                        created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        fullname,
                        email,
                        password_hash,
                        UserStatus(status).value,
                        UserRole(role).value,
                        verification_code,
                        _to_iso(verification_code_expires),
                        now,
                        now,
                    ),
                )
                user_id = cur.lastrowid
                row = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        except sqlite3.IntegrityError as exc:
            raise UniquenessViolation(f"Email already registered: {email}") from exc
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        if not row:
            raise StoreError("Failed to persist user.")
        return self._row_to_user(row)

    def update_user(self, user_id: int, **fields: Any) -> User:
        unknown = set(fields) - _USER_COLUMNS
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")
        values: Dict[str, Any] = {}
        for key, value in fields.items():
            if isinstance(value, datetime):
                value = _to_iso(value)
            elif isinstance(value, (UserStatus, UserRole)):
                value = value.value
            values[key] = value
        values["updated_at"] = self._now()
        assignments = ", ".join(f"{key} = ?" for key in values)
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    f"UPDATE users SET {assignments} WHERE id = ?",
                    (*values.values(), user_id),
                )
                row = self._conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        except sqlite3.IntegrityError as exc:
            raise UniquenessViolation(str(exc)) from exc
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        if cur.rowcount == 0 or not row:
            raise StoreError(f"User {user_id} does not exist.")
        return self._row_to_user(row)

    def delete_user(self, user_id: int) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

    # GeographyRepository API ------------------------------------------------
    def get_department_by_code(self, dane_code: str) -> Optional[Department]:
        row = self._fetchone("SELECT * FROM departments WHERE dane_code = ?", (dane_code,))
        return self._row_to_department(row) if row else None

    def create_department(self, region: str, dane_code: str, name: str) -> Department:
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    "INSERT INTO departments (region, dane_code, name) VALUES (?, ?, ?)",
                    (region, dane_code, name),
                )
        except sqlite3.IntegrityError as exc:
            raise UniquenessViolation(f"Department {dane_code} already exists.") from exc
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return Department(id=cur.lastrowid, region=region, dane_code=dane_code, name=name)

    def list_departments(self) -> List[Department]:
        try:
            with self._lock:
                rows = self._conn.execute("SELECT * FROM departments ORDER BY dane_code").fetchall()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return [self._row_to_department(row) for row in rows]

    def get_municipality_by_code(self, dane_code: str) -> Optional[Municipality]:
        row = self._fetchone("SELECT * FROM municipalities WHERE dane_code = ?", (dane_code,))
        if not row:
            return None
        return Municipality(
            id=row["id"],
            dane_code=row["dane_code"],
            name=row["name"],
            department_id=row["department_id"],
        )

    def create_municipality(self, dane_code: str, name: str, department_id: int) -> Municipality:
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    "INSERT INTO municipalities (dane_code, name, department_id) VALUES (?, ?, ?)",
                    (dane_code, name, department_id),
                )
        except sqlite3.IntegrityError as exc:
            raise UniquenessViolation(f"Municipality {dane_code} could not be stored: {exc}") from exc
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return Municipality(
            id=cur.lastrowid, dane_code=dane_code, name=name, department_id=department_id
        )

    def list_municipalities(self) -> List[Municipality]:
        try:
            with self._lock:
                rows = self._conn.execute(
                    """
                    SELECT m.id, m.dane_code, m.name, m.department_id,
                           d.region AS department_region,
                           d.dane_code AS department_dane_code,
                           d.name AS department_name
                    FROM municipalities m
                    JOIN departments d ON d.id = m.department_id
                    ORDER BY m.dane_code
                    """
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        return [
            Municipality(
                id=row["id"],
                dane_code=row["dane_code"],
                name=row["name"],
                department_id=row["department_id"],
                department=Department(
                    id=row["department_id"],
                    region=row["department_region"],
                    dane_code=row["department_dane_code"],
                    name=row["department_name"],
                ),
            )
            for row in rows
        ]

    # Helpers ----------------------------------------------------------------
    def _fetchone(self, query: str, params: tuple) -> Optional[sqlite3.Row]:
        try:
            with self._lock:
                return self._conn.execute(query, params).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            fullname=row["fullname"],
            email=row["email"],
            password_hash=row["password_hash"],
            status=UserStatus(row["status"]),
            role=UserRole(row["role"]),
            verification_code=row["verification_code"],
            verification_code_expires=_from_iso(row["verification_code_expires"]),
            two_factor_code=row["two_factor_code"],
            two_factor_code_expires=_from_iso(row["two_factor_code_expires"]),
            created_at=_from_iso(row["created_at"]),
            updated_at=_from_iso(row["updated_at"]),
        )

    @staticmethod
    def _row_to_department(row: sqlite3.Row) -> Department:
        return Department(
            id=row["id"],
            region=row["region"],
            dane_code=row["dane_code"],
            name=row["name"],
        )

    @staticmethod
    def _now() -> str:
        return datetime.now(tz=timezone.utc).isoformat()


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
