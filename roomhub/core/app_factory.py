from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.admin_service import AdminService
from ..application.services.profile_service import ProfileService
from ..domain.errors import AccountError
from ..domain.ports.delivery import CodeDelivery, ImageStorage
from ..infrastructure.persistence.sqlite import SQLiteAccountRepository
from ..presentation.api.routers import admin as admin_router
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import users as users_router
from ..services.account_service import AccountService
from ..services.email_service import EmailService
from ..services.image_storage import CloudinaryImageStorage
from ..services.one_time_codes import OneTimeCodeEngine
from ..services.password_hasher import CredentialHasher
from ..services.phone_normalizer import PhoneNormalizer
from ..services.token_service import TokenService

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    settings = Settings()

    app = FastAPI(title="RoomHub Accounts", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, settings)

    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(admin_router.router)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        container: Optional[ApplicationContainer] = getattr(app.state, "container", None)
        return {
            "ok": container is not None,
            "email_enabled": bool(container and getattr(container.email_service, "enabled", True)),
            "image_storage_enabled": bool(container and getattr(container.image_storage, "enabled", True)),
        }

    return app


def build_container(
    settings: Settings,
    *,
    email_service: Optional[CodeDelivery] = None,
    image_storage: Optional[ImageStorage] = None,
) -> ApplicationContainer:
    """Wire every service from ``settings``. Delivery and storage adapters may be swapped in."""
    repository = SQLiteAccountRepository(settings.database_path)
    hasher = CredentialHasher(rounds=settings.bcrypt_rounds)
    code_engine = OneTimeCodeEngine(repository, hasher, ttl=settings.code_ttl)
    phone_normalizer = PhoneNormalizer()
    token_service = TokenService(settings.token_settings, repository)
    account_service = AccountService(repository, hasher, code_engine, phone_normalizer)

    if email_service is None:
        email_service = EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            from_name=settings.smtp_from_name,
            code_ttl_minutes=settings.code_ttl_minutes,
            timeout=settings.smtp_timeout_seconds,
            app_url=settings.frontend_base_url,
        )
    if image_storage is None:
        image_storage = CloudinaryImageStorage(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
        )

    profile_service = ProfileService(
        account_service,
        image_storage,
        max_photo_bytes=settings.max_photo_mb * 1024 * 1024,
    )
    admin_service = AdminService(account_service, repository, image_storage)

    return ApplicationContainer(
        settings=settings,
        repository=repository,
        hasher=hasher,
        code_engine=code_engine,
        phone_normalizer=phone_normalizer,
        token_service=token_service,
        account_service=account_service,
        profile_service=profile_service,
        admin_service=admin_service,
        email_service=email_service,
        image_storage=image_storage,
    )


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(AccountError)
    async def account_error_handler(_request: Request, exc: AccountError) -> JSONResponse:
        content: Dict[str, Any] = {"success": False, "code": exc.code, "message": exc.message}
        if exc.details:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": [
                    {
                        "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                        "message": error["msg"],
                        "type": error["type"],
                    }
                    for error in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content: Dict[str, Any] = {
            "success": False,
            "code": "INTERNAL_ERROR",
            "message": "Internal server error",
        }
        if settings.debug:
            content["details"] = [{"error": str(exc)}]
        return JSONResponse(status_code=500, content=content)


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        container = build_container(settings)
        container.admin_service.ensure_default_admin(
            settings.admin_default_email,
            settings.admin_default_password,
            settings.admin_default_phone,
        )
        if isinstance(container.email_service, EmailService):
            reachable = container.email_service.verify_connection()
            if reachable is False:
                logger.warning("SMTP server %s is not reachable", settings.smtp_host)

        app.state.container = container  # type: ignore[attr-defined]

        try:
            yield
        finally:
            container.repository.close()

    return lifespan
