from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.access_service import AccessService
from ..application.services.account_service import AccountService
from ..application.services.geography_service import GeographyService
from ..application.services.user_directory_service import UserDirectoryService
from ..domain.codes import CodePolicy
from ..domain.errors import AuthError, AuthErrorKind
from ..infrastructure.persistence.sqlite import SQLitePersistence
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import geography as geography_router
from ..presentation.api.routers import users as users_router
from ..services.email_service import EmailService
from ..services.password_hasher import BcryptPasswordHasher
from ..services.sms_service import SmsService
from ..services.token_service import JwtTokenIssuer

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    AuthErrorKind.NOT_FOUND: 404,
    AuthErrorKind.INVALID_OR_EXPIRED_CODE: 401,
    AuthErrorKind.NOTIFICATION_FAILED: 500,
    AuthErrorKind.PERSISTENCE_FAILURE: 500,
    AuthErrorKind.LOGIN_FAILED: 500,
    AuthErrorKind.INTERNAL_ERROR: 500,
}


def create_application(
    settings: Optional[Settings] = None,
    container: Optional[ApplicationContainer] = None,
) -> FastAPI:
    if settings is None:
        settings = container.settings if container else Settings()

    app = FastAPI(title="Accounts Backend", lifespan=_create_lifespan(settings, container))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(geography_router.router)
    app.add_exception_handler(AuthError, auth_error_handler)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True}

    return app


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    status_code = _STATUS_BY_KIND.get(exc.kind, 400)
    if exc.is_infrastructure and exc.detail:
        logger.error("%s %s failed with %s: %s", request.method, request.url.path, exc.kind.value, exc.detail)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": exc.kind.value},
    )


def build_container(settings: Settings) -> ApplicationContainer:
    persistence = SQLitePersistence(settings.database_path)
    hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
    tokens = JwtTokenIssuer(settings.jwt_secret, settings.jwt_algorithm)
    policy = CodePolicy()
    email_service = EmailService(
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        smtp_username=settings.email_user,
        smtp_password=settings.email_password,
        code_ttl_minutes=int(policy.verification_ttl.total_seconds() // 60),
        dev_mode=settings.notifier_dev_mode,
    )
    sms_service = SmsService(
        account_sid=settings.twilio_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_from,
        to_number=settings.twilio_to,
        dev_mode=settings.notifier_dev_mode,
    )
    account_service = AccountService(
        users=persistence,
        hasher=hasher,
        tokens=tokens,
        email_sender=email_service,
        two_factor_sender=sms_service,
        policy=policy,
    )
    access_service = AccessService(persistence, tokens, hasher)
    return ApplicationContainer(
        settings=settings,
        persistence=persistence,
        account_service=account_service,
        access_service=access_service,
        user_directory_service=UserDirectoryService(persistence),
        geography_service=GeographyService(persistence),
    )


def _create_lifespan(settings: Settings, prebuilt: Optional[ApplicationContainer]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        container = prebuilt or build_container(settings)
        container.access_service.ensure_default_superadmin(
            settings.superadmin_email, settings.superadmin_password
        )
        app.state.container = container  # type: ignore[attr-defined]
        logger.info("Accounts backend started")
        try:
            yield
        finally:
            if prebuilt is None:
                close = getattr(container.persistence, "close", None)
                if close:
                    close()

    return lifespan
