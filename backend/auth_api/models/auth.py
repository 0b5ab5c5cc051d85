import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from auth_api.core.database import Base


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class Auth(Base):
    """Credentials and verification/recovery lifecycle of one identity."""

    __tablename__ = "auths"

    id = Column(String(36), primary_key=True, index=True)
    # email is absent for Google-only identities that did not share one
    email = Column(String(255), unique=True, index=True, nullable=True)
    hashed_password = Column(String(255), nullable=True)
    google_id = Column(String(255), unique=True, index=True, nullable=True)
    role = Column(Enum(Role), default=Role.USER, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False)
    verification_otp = Column(String(10), nullable=True)
    verification_otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    recovery_otp = Column(String(10), nullable=True)
    recovery_otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    # set by recovery-verify, cleared by reset-password
    recovery_nonce = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    user = relationship("User", back_populates="auth", uselist=False)
