from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any, Dict, List, Optional, Tuple

import pytest

from app.application.services.access_service import AccessService
from app.application.services.account_service import AccountService
from app.application.services.geography_service import GeographyService
from app.application.services.user_directory_service import UserDirectoryService
from app.core.container import ApplicationContainer
from app.domain.errors import StoreError, UniquenessViolation
from app.domain.models import User, UserRole, UserStatus
from app.domain.ports.security import InvalidTokenError
from app.infrastructure.persistence.sqlite import SQLitePersistence
from app.services.token_service import JwtTokenIssuer

START = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryUsers:
    """Credential store double with the same failure contract as the sqlite adapter."""

    def __init__(self) -> None:
        self.users: Dict[int, User] = {}
        self._ids = count(1)
        self.fail_on: set = set()
        self.deleted: List[int] = []
        self.updates: List[Tuple[int, Dict[str, Any]]] = []

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise StoreError(f"{operation} failed")

    def find_by_email(self, email: str) -> Optional[User]:
        self._check("find")
        return next((u for u in self.users.values() if u.email == email), None)

    def find_by_id(self, user_id: int) -> Optional[User]:
        self._check("find")
        return self.users.get(user_id)

    def list_users(self) -> List[User]:
        return list(self.users.values())

    def create_user(self, *, fullname, email, password_hash, status, role=UserRole.USER,
                    verification_code=None, verification_code_expires=None) -> User:
        self._check("create")
        if any(u.email == email for u in self.users.values()):
            raise UniquenessViolation(email)
        user = User(
            id=next(self._ids),
            fullname=fullname,
            email=email,
            password_hash=password_hash,
            status=status,
            role=role,
            verification_code=verification_code,
            verification_code_expires=verification_code_expires,
        )
        self.users[user.id] = user
        return user

    def update_user(self, user_id: int, **fields: Any) -> User:
        self._check("update")
        user = self.users[user_id]
        for key, value in fields.items():
            setattr(user, key, value)
        self.updates.append((user_id, fields))
        return user

    def delete_user(self, user_id: int) -> None:
        self._check("delete")
        self.users.pop(user_id, None)
        self.deleted.append(user_id)


class FakeHasher:
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, password_hash: str) -> bool:
        return password_hash == f"hashed:{password}"


class FakeTokens:
    def __init__(self) -> None:
        self.issued: List[Tuple[Dict[str, Any], timedelta]] = []

    def sign(self, claims: Dict[str, Any], expires_in: timedelta) -> str:
        self.issued.append((dict(claims), expires_in))
        return f"token-{len(self.issued)}"

    def decode(self, token: str) -> Dict[str, Any]:
        raise InvalidTokenError(token)


class RecordingEmail:
    def __init__(self) -> None:
        self.ok = True
        self.sent: List[Tuple[str, str, str]] = []

    def send_verification_email(self, email: str, code: str, fullname: str) -> bool:
        self.sent.append((email, code, fullname))
        return self.ok


class RecordingSms:
    def __init__(self) -> None:
        self.ok = True
        self.sent: List[Tuple[str, int]] = []

    def send_two_factor_code(self, code: str, user: User) -> bool:
        self.sent.append((code, user.id))
        return self.ok


class SequenceCodes:
    def __init__(self) -> None:
        self._next = count(123456)

    def __call__(self) -> str:
        return str(next(self._next))


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def tokens() -> FakeTokens:
    return FakeTokens()


@pytest.fixture
def email_sender() -> RecordingEmail:
    return RecordingEmail()


@pytest.fixture
def sms_sender() -> RecordingSms:
    return RecordingSms()


@pytest.fixture
def service(users, tokens, email_sender, sms_sender, clock) -> AccountService:
    return AccountService(
        users=users,
        hasher=FakeHasher(),
        tokens=tokens,
        email_sender=email_sender,
        two_factor_sender=sms_sender,
        code_generator=SequenceCodes(),
        clock=clock,
    )


@pytest.fixture
def persistence(tmp_path):
    store = SQLitePersistence(tmp_path / "app.db")
    yield store
    store.close()


@pytest.fixture
def settings(monkeypatch, tmp_path):
    from app.core.config import Settings

    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.delenv("SUPERADMIN_EMAIL", raising=False)
    monkeypatch.delenv("SUPERADMIN_PASSWORD", raising=False)
    return Settings()


@pytest.fixture
def api(settings, persistence, email_sender, sms_sender):
    """FastAPI app wired with a real sqlite store and JWT issuer, fake notifiers."""
    from fastapi.testclient import TestClient

    from app.core.app_factory import create_application

    hasher = FakeHasher()
    token_issuer = JwtTokenIssuer(settings.jwt_secret)
    container = ApplicationContainer(
        settings=settings,
        persistence=persistence,
        account_service=AccountService(
            users=persistence,
            hasher=hasher,
            tokens=token_issuer,
            email_sender=email_sender,
            two_factor_sender=sms_sender,
            code_generator=SequenceCodes(),
        ),
        access_service=AccessService(persistence, token_issuer, hasher),
        user_directory_service=UserDirectoryService(persistence),
        geography_service=GeographyService(persistence),
    )
    app = create_application(container=container)
    with TestClient(app) as client:
        client.container = container
        client.tokens = token_issuer
        yield client


@pytest.fixture
def superadmin_token(api, persistence):
    admin = persistence.create_user(
        fullname="Admin",
        email="admin@test.com",
        password_hash="hashed:admin123",
        status=UserStatus.ACTIVE,
        role=UserRole.SUPERADMIN,
    )
    return api.tokens.sign({"id": admin.id}, timedelta(hours=2))
