"""Account lifecycle: register -> activate -> login, recovery -> reset, change, delete.

An Auth record is PendingVerification until its verification OTP is used,
then Verified. Blocked is an independent flag, and RecoveryPending holds
while a live recovery OTP exists. Each OTP is single use: it is cleared on
the first successful match.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from auth_api.core.config import Settings
from auth_api.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from auth_api.core.security import TokenIssuer, get_password_hash, verify_password
from auth_api.models.auth import Auth, Role
from auth_api.models.user import User
from auth_api.schemas.auth import OtpMethod
from auth_api.services.identity_store import IdentityStore
from auth_api.services.notifications import Notifier, OtpPurpose
from auth_api.services.otp import generate_otp, otp_is_live, otp_matches, utcnow

logger = logging.getLogger(__name__)


@dataclass
class Registration:
    auth: Auth
    otp: str
    created: bool


@dataclass
class SignIn:
    auth: Auth
    user: Optional[User]
    access_token: str
    refresh_token: Optional[str] = None


@dataclass
class OtpIssue:
    auth: Auth
    otp: Optional[str] = None
    already_verified: bool = False


class AuthService:
    def __init__(
        self,
        db: Session,
        app_settings: Settings,
        tokens: TokenIssuer,
        notifier: Notifier,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = IdentityStore(db)
        self.settings = app_settings
        self.tokens = tokens
        self.notifier = notifier
        self.clock = clock

    # -- helpers -------------------------------------------------------

    def _hash(self, password: str) -> str:
        return get_password_hash(password, rounds=self.settings.PASSWORD_HASH_ROUNDS)

    def _new_otp(self) -> str:
        return generate_otp(self.settings.OTP_LENGTH)

    def _require_auth_by_email(self, email: str, message: str) -> Auth:
        auth = self.store.get_auth_by_email(email)
        if not auth:
            raise NotFoundError(message)
        return auth

    def _sign_in(self, auth: Auth) -> SignIn:
        role = auth.role.value if auth.role else Role.USER.value
        return SignIn(
            auth=auth,
            user=self.store.get_user_for_auth(auth.id),
            access_token=self.tokens.issue_access(auth.id, role),
            refresh_token=self.tokens.issue_refresh(auth.id, role),
        )

    # -- registration and activation -----------------------------------

    def register(
        self,
        email: str,
        password: str,
        confirm_password: str,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Registration:
        if password != confirm_password:
            raise BadRequestError("Passwords don't match")

        auth = self.store.get_auth_by_email(email)
        if auth and auth.is_verified:
            raise ConflictError(
                "Your account already exists. Please login now.",
                data={"is_verified": True},
            )

        ttl = timedelta(minutes=self.settings.VERIFICATION_OTP_EXPIRE_MINUTES)
        otp = self._new_otp()

        if auth:
            # Unverified retry: same record, fresh code
            auth.verification_otp = otp
            auth.verification_otp_expires_at = self.clock() + ttl
            self.store.save(auth)
            logger.info("Verification code reissued for unverified account %s", auth.id)
            self.notifier.send_email_otp(email, otp, OtpPurpose.activation, ttl)
            return Registration(auth=auth, otp=otp, created=False)

        auth = Auth(
            id=str(uuid.uuid4()),
            email=email,
            hashed_password=self._hash(password),
            role=Role.USER,
            verification_otp=otp,
            verification_otp_expires_at=self.clock() + ttl,
            is_verified=False,
            is_blocked=False,
        )
        self.store.create_account(auth, name=name, phone_number=phone_number)
        logger.info("Registered account %s (%s)", auth.id, email)
        self.notifier.send_email_otp(email, otp, OtpPurpose.activation, ttl)
        return Registration(auth=auth, otp=otp, created=True)

    def activate(self, email: Optional[str], otp: Optional[str]) -> SignIn:
        if not email or not otp:
            raise BadRequestError("Email and Verification OTP are required.")
        auth = self._require_auth_by_email(email, "User not found")

        if not otp_is_live(auth.verification_otp, auth.verification_otp_expires_at, self.clock()):
            raise UnauthorizedError("Verification OTP has expired.")
        if not otp_matches(auth.verification_otp, otp):
            logger.info("Wrong verification code for account %s", auth.id)
            raise UnauthorizedError("Wrong OTP. Please enter the correct one")

        auth.verification_otp = None
        auth.verification_otp_expires_at = None
        auth.is_verified = True
        self.store.save(auth)
        logger.info("Account %s verified", auth.id)

        role = auth.role.value if auth.role else Role.USER.value
        access_token = self.tokens.issue_access(auth.id, role)
        user = self.store.get_user_for_auth(auth.id)
        if not user:
            raise NotFoundError("Associated user not found.")
        return SignIn(auth=auth, user=user, access_token=access_token)

    # -- sign in -------------------------------------------------------

    def login(self, email: str, password: str) -> SignIn:
        auth = self._require_auth_by_email(email, "No account found with the given email")
        if not verify_password(password, auth.hashed_password):
            logger.info("Wrong password for account %s", auth.id)
            raise UnauthorizedError("Wrong password")
        if not auth.is_verified:
            raise UnauthorizedError("Verify your email first")
        if auth.is_blocked:
            logger.warning("Blocked account %s attempted login", auth.id)
            raise ForbiddenError("Your account had been blocked. Contact Administrator")
        logger.info("Account %s logged in", auth.id)
        return self._sign_in(auth)

    def sign_in_with_google(
        self,
        google_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> SignIn:
        """Sign in with an identity already asserted by Google; creates the account on first use."""
        if not google_id or not google_id.strip():
            raise BadRequestError("Google id is required.")
        auth = self.store.get_auth_by_google_id(google_id)
        if not auth:
            if email and self.store.get_auth_by_email(email):
                raise ConflictError("An account with this email already exists. Please login with your password.")
            auth = Auth(
                id=str(uuid.uuid4()),
                email=email,
                google_id=google_id,
                role=Role.USER,
                is_verified=True,
                is_blocked=False,
            )
            self.store.create_account(auth, name=name, avatar=avatar)
            logger.info("Created Google account %s", auth.id)
        if auth.is_blocked and self.settings.GOOGLE_SIGNIN_ENFORCE_BLOCK:
            logger.warning("Blocked account %s attempted Google sign-in", auth.id)
            raise ForbiddenError("Your account had been blocked. Contact Administrator")
        return self._sign_in(auth)

    # -- recovery ------------------------------------------------------

    def _issue_recovery_otp(self, auth: Auth, ttl: timedelta) -> str:
        otp = self._new_otp()
        auth.recovery_otp = otp
        auth.recovery_otp_expires_at = self.clock() + ttl
        self.store.save(auth)
        self.notifier.send_email_otp(auth.email, otp, OtpPurpose.recovery, ttl)
        logger.info("Recovery code issued for account %s", auth.id)
        return otp

    def request_recovery(self, email: str) -> OtpIssue:
        auth = self._require_auth_by_email(email, "User Not Found")
        ttl = timedelta(seconds=self.settings.RECOVERY_OTP_EXPIRE_SECONDS)
        return OtpIssue(auth=auth, otp=self._issue_recovery_otp(auth, ttl))

    def verify_recovery(self, email: Optional[str], otp: Optional[str]) -> Auth:
        if not email or not otp:
            raise BadRequestError("Email and Recovery OTP are required.")
        auth = self._require_auth_by_email(email, "User not found")

        if not otp_is_live(auth.recovery_otp, auth.recovery_otp_expires_at, self.clock()):
            raise UnauthorizedError("Recovery OTP has expired.")
        if not otp_matches(auth.recovery_otp, otp):
            logger.info("Wrong recovery code for account %s", auth.id)
            raise UnauthorizedError("Wrong OTP. Please enter the correct one.")

        auth.recovery_otp = None
        auth.recovery_otp_expires_at = None
        # bound into the recovery token; cleared again by reset_password
        auth.recovery_nonce = secrets.token_urlsafe(16)
        self.store.save(auth)
        logger.info("Recovery code verified for account %s", auth.id)
        return auth

    def reset_password(self, auth: Auth, password: str, confirm_password: str) -> None:
        """``auth`` must come from a recovery-authorized request."""
        if password != confirm_password:
            raise BadRequestError("Passwords don't match")
        auth.hashed_password = self._hash(password)
        auth.recovery_nonce = None
        self.store.save(auth)
        logger.info("Password reset for account %s", auth.id)

    def resend_otp(self, method: OtpMethod, email: str) -> OtpIssue:
        auth = self._require_auth_by_email(email, "Account not found")

        if method == OtpMethod.email_recovery:
            ttl = timedelta(seconds=self.settings.RECOVERY_OTP_EXPIRE_SECONDS)
            return OtpIssue(auth=auth, otp=self._issue_recovery_otp(auth, ttl))

        if auth.is_verified:
            return OtpIssue(auth=auth, already_verified=True)

        ttl = timedelta(seconds=self.settings.RESEND_OTP_EXPIRE_SECONDS)
        phone_number = None
        if method == OtpMethod.phone_activation:
            user = self.store.get_user_for_auth(auth.id)
            phone_number = user.phone_number if user else None
            if not phone_number:
                raise BadRequestError("No phone number on file for this account")

        otp = self._new_otp()
        auth.verification_otp = otp
        auth.verification_otp_expires_at = self.clock() + ttl
        self.store.save(auth)

        if phone_number:
            self.notifier.send_sms_otp(phone_number, otp, OtpPurpose.activation, ttl)
        else:
            self.notifier.send_email_otp(email, otp, OtpPurpose.activation, ttl)
        logger.info("Verification code resent for account %s via %s", auth.id, method.value)
        return OtpIssue(auth=auth, otp=otp)

    # -- authenticated account changes ---------------------------------

    def change_password(self, auth_id: str, old_password: str, new_password: str) -> None:
        auth = self.store.get_auth(auth_id)
        if not auth:
            raise NotFoundError("User Not Found")
        if not verify_password(old_password, auth.hashed_password):
            raise UnauthorizedError("Wrong Password")
        auth.hashed_password = self._hash(new_password)
        self.store.save(auth)
        logger.info("Password changed for account %s", auth.id)

    def remove_account(self, auth: Auth) -> None:
        auth_id = auth.id
        self.store.delete_account(auth)
        logger.info("Account %s removed", auth_id)
