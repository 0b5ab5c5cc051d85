from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from auth_api.core.config import Settings
from auth_api.core.database import SessionLocal
from auth_api.core.security import TokenIssuer
from auth_api.services.auth_service import AuthService
from auth_api.services.notifications import Notifier
from auth_api.services.user_service import UserService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_auth_service(
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
    tokens: TokenIssuer = Depends(get_token_issuer),
    notifier: Notifier = Depends(get_notifier),
) -> AuthService:
    return AuthService(db, app_settings, tokens, notifier)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)
