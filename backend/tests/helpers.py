"""Test doubles and builders shared across the suite."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from auth_api.core.errors import NotificationError
from auth_api.core.security import get_password_hash
from auth_api.models.auth import Auth, Role
from auth_api.services.identity_store import IdentityStore


@dataclass
class SentOtp:
    channel: str
    destination: str
    otp: str
    purpose: str
    expires_in: timedelta


class RecordingNotifier:
    """Stands in for the email/SMS sink and remembers every code sent."""

    def __init__(self):
        self.sent: List[SentOtp] = []
        self.fail = False

    def _record(self, channel, destination, otp, purpose, expires_in) -> bool:
        if self.fail:
            raise NotificationError()
        self.sent.append(SentOtp(channel, destination, otp, purpose.value, expires_in))
        return True

    def send_email_otp(self, to_email, otp, purpose, expires_in) -> bool:
        return self._record("email", to_email, otp, purpose, expires_in)

    def send_sms_otp(self, phone_number, otp, purpose, expires_in) -> bool:
        return self._record("sms", phone_number, otp, purpose, expires_in)

    def last(self, destination: Optional[str] = None) -> SentOtp:
        matches = [s for s in self.sent if destination is None or s.destination == destination]
        assert matches, f"no code sent to {destination}"
        return matches[-1]


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_account(
    db,
    email: str,
    password: str = "secret-pw",
    role: Role = Role.USER,
    verified: bool = True,
    blocked: bool = False,
    name: str = "Test User",
    phone_number: Optional[str] = None,
):
    auth = Auth(
        id=str(uuid.uuid4()),
        email=email,
        hashed_password=get_password_hash(password, rounds=4),
        role=role,
        is_verified=verified,
        is_blocked=blocked,
    )
    user = IdentityStore(db).create_account(auth, name=name, phone_number=phone_number)
    return auth, user


def bearer(tokens, auth: Auth) -> dict:
    return {"Authorization": f"Bearer {tokens.issue_access(auth.id, auth.role.value)}"}
