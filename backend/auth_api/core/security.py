from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from auth_api.core.config import Settings, settings
from auth_api.core.errors import ConfigurationError

# Bcrypt limit is 72 bytes; truncate to avoid errors
BCRYPT_MAX_PASSWORD_BYTES = 72

ACCESS = "access"
REFRESH = "refresh"
RECOVERY = "recovery"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    # Federated-only identities have no password hash
    if not hashed_password or plain_password is None:
        return False
    pwd_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]
    return bcrypt.checkpw(pwd_bytes, hashed_password.encode("utf-8"))


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    pwd_bytes = password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]
    salt = bcrypt.gensalt(rounds=rounds or settings.PASSWORD_HASH_ROUNDS)
    return bcrypt.hashpw(pwd_bytes, salt).decode("utf-8")


class TokenIssuer:
    """Mints and decodes the signed tokens bound to an Auth id.

    Access and recovery tokens are signed with the access secret, refresh
    tokens with the refresh secret. Every token carries a ``type`` claim so a
    refresh or recovery token is never accepted where an access token is
    expected.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=96),
        refresh_ttl: timedelta = timedelta(hours=96),
        recovery_ttl: timedelta = timedelta(minutes=10),
    ):
        if not access_secret or not refresh_secret:
            raise ConfigurationError(
                "JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must both be set"
            )
        self._secrets = {
            ACCESS: access_secret,
            REFRESH: refresh_secret,
            RECOVERY: access_secret,
        }
        self._ttls = {ACCESS: access_ttl, REFRESH: refresh_ttl, RECOVERY: recovery_ttl}
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, app_settings: Settings) -> "TokenIssuer":
        return cls(
            access_secret=app_settings.JWT_ACCESS_SECRET,
            refresh_secret=app_settings.JWT_REFRESH_SECRET,
            algorithm=app_settings.JWT_ALGORITHM,
            access_ttl=timedelta(hours=app_settings.ACCESS_TOKEN_EXPIRE_HOURS),
            refresh_ttl=timedelta(hours=app_settings.REFRESH_TOKEN_EXPIRE_HOURS),
            recovery_ttl=timedelta(minutes=app_settings.RECOVERY_TOKEN_EXPIRE_MINUTES),
        )

    def _encode(self, kind: str, subject: str, extra_claims: Optional[dict] = None) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": subject,
            "type": kind,
            "iat": now,
            "exp": now + self._ttls[kind],
        }
        if extra_claims:
            to_encode.update(extra_claims)
        return jwt.encode(to_encode, self._secrets[kind], algorithm=self.algorithm)

    def issue_access(self, subject: str, role: Optional[str] = None) -> str:
        return self._encode(ACCESS, subject, {"role": role} if role else None)

    def issue_refresh(self, subject: str, role: Optional[str] = None) -> str:
        return self._encode(REFRESH, subject, {"role": role} if role else None)

    def issue_recovery(self, subject: str, nonce: str) -> str:
        return self._encode(RECOVERY, subject, {"nonce": nonce})

    def decode(self, token: str, kind: str = ACCESS) -> Optional[dict]:
        """Return the claims, or None if the token is invalid, expired or of another kind."""
        try:
            payload = jwt.decode(token, self._secrets[kind], algorithms=[self.algorithm])
        except JWTError:
            return None
        if payload.get("type") != kind or "sub" not in payload:
            return None
        return payload
