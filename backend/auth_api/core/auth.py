import hmac
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from auth_api.core.config import Settings
from auth_api.core.deps import get_db, get_settings, get_token_issuer
from auth_api.core.errors import ForbiddenError, UnauthorizedError
from auth_api.core.security import ACCESS, RECOVERY, TokenIssuer
from auth_api.models.auth import Auth, Role

security = HTTPBearer(auto_error=False)

BEARER = {"WWW-Authenticate": "Bearer"}


def _recovery_nonce_matches(auth: Auth, payload: dict) -> bool:
    # A recovery token stops working once reset-password clears the nonce
    nonce = payload.get("nonce")
    if not nonce or not auth.recovery_nonce:
        return False
    return hmac.compare_digest(str(nonce), auth.recovery_nonce)


def _authenticate(
    credentials: Optional[HTTPAuthorizationCredentials],
    tokens: TokenIssuer,
    db: Session,
    kind: str,
) -> Auth:
    if not credentials or not credentials.credentials:
        raise UnauthorizedError("Not authenticated", headers=BEARER)
    payload = tokens.decode(credentials.credentials, kind)
    if not payload:
        raise UnauthorizedError("Invalid or expired token", headers=BEARER)
    auth = db.query(Auth).filter(Auth.id == payload["sub"]).first()
    if not auth:
        raise UnauthorizedError("Account not found", headers=BEARER)
    if kind == RECOVERY and not _recovery_nonce_matches(auth, payload):
        raise UnauthorizedError("Invalid or expired token", headers=BEARER)
    if auth.is_blocked:
        raise ForbiddenError("Your account had been blocked. Contact Administrator")
    return auth


def get_current_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenIssuer = Depends(get_token_issuer),
    db: Session = Depends(get_db),
) -> Auth:
    return _authenticate(credentials, tokens, db, ACCESS)


def get_recovery_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenIssuer = Depends(get_token_issuer),
    db: Session = Depends(get_db),
) -> Auth:
    """Identity of a request carrying the recovery token minted after /auth/recovery-verify."""
    return _authenticate(credentials, tokens, db, RECOVERY)


def require_role(*roles: Role):
    def dependency(auth: Auth = Depends(get_current_auth)) -> Auth:
        if auth.role not in roles:
            raise ForbiddenError("You don't have permission to access this resource")
        return auth

    return dependency


def get_block_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenIssuer = Depends(get_token_issuer),
    app_settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> Optional[Auth]:
    """Admin gate for block/unblock, unless BLOCK_ENDPOINTS_REQUIRE_ADMIN is off."""
    if not app_settings.BLOCK_ENDPOINTS_REQUIRE_ADMIN:
        return None
    auth = _authenticate(credentials, tokens, db, ACCESS)
    if auth.role != Role.ADMIN:
        raise ForbiddenError("You don't have permission to access this resource")
    return auth
