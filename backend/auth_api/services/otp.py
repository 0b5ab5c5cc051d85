"""One-time codes for account activation and password recovery."""

import hmac
import secrets
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_otp(length: int = 6) -> str:
    """Numeric code, zero padded to ``length`` digits."""
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def otp_is_live(otp: Optional[str], expires_at: Optional[datetime], now: datetime) -> bool:
    if not otp or expires_at is None:
        return False
    return now <= as_utc(expires_at)


def otp_matches(expected: Optional[str], supplied: Optional[str]) -> bool:
    if not expected or not supplied:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.strip().encode("utf-8"))
