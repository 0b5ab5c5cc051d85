import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth_api.core.config import Settings, settings
from auth_api.core.errors import AppError
from auth_api.core.responses import api_response
from auth_api.core.security import TokenIssuer, get_password_hash
from auth_api.models import Base  # noqa: F401 - register models
from auth_api.routers import auth, health, user, webhook
from auth_api.services.notifications import Notifier

logger = logging.getLogger(__name__)


def _seed_admin(app_settings: Settings) -> None:
    """Create the initial admin from ADMIN_SEED_EMAIL/ADMIN_SEED_PASSWORD if no admin exists."""
    if not app_settings.ADMIN_SEED_EMAIL or not app_settings.ADMIN_SEED_PASSWORD:
        return
    from auth_api.core.database import SessionLocal
    from auth_api.models.auth import Auth, Role
    from auth_api.services.identity_store import IdentityStore

    db = SessionLocal()
    try:
        store = IdentityStore(db)
        if db.query(Auth).filter(Auth.role == Role.ADMIN).first() is not None:
            return
        if store.get_auth_by_email(app_settings.ADMIN_SEED_EMAIL):
            logger.warning("ADMIN_SEED_EMAIL %s belongs to an existing account; not seeding", app_settings.ADMIN_SEED_EMAIL)
            return
        admin = Auth(
            id=str(uuid.uuid4()),
            email=app_settings.ADMIN_SEED_EMAIL,
            hashed_password=get_password_hash(app_settings.ADMIN_SEED_PASSWORD, rounds=app_settings.PASSWORD_HASH_ROUNDS),
            role=Role.ADMIN,
            is_verified=True,
            is_blocked=False,
        )
        store.create_account(admin, name="Admin")
        logger.info("Seeded initial admin %s", admin.id)
    finally:
        db.close()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return api_response(exc.message, exc.data, exc.status_code, success=False, headers=exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return api_response(
            str(exc.detail),
            status_code=exc.status_code,
            success=False,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return api_response(
            "Invalid request",
            {"errors": errors},
            status.HTTP_400_BAD_REQUEST,
            success=False,
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return api_response(
            "Unexpected Server Error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            success=False,
        )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings
    logging.basicConfig(
        level=app_settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Accounts API",
        description="Registration, verification, login and recovery of user accounts",
        version="0.1.0",
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)

    app.include_router(health.router, prefix="/health")
    app.include_router(auth.router, prefix="/auth")
    app.include_router(user.router, prefix="/user")
    app.include_router(webhook.router, prefix="/payment")

    @app.on_event("startup")
    def startup():
        # Missing signing secrets abort startup (ConfigurationError)
        app.state.token_issuer = TokenIssuer.from_settings(app_settings)
        app.state.notifier = Notifier(app_settings)
        _seed_admin(app_settings)

    return app


app = create_app()
